"""
Tests for biometrics, command access and ending resolution.
"""

import pytest

from shipconsole import Ending, PrincipalStatus


@pytest.fixture
def survival_console(console):
    """Console with phase 2 power, crew losses and degraded redundancy."""
    console.reactor.phase = 2
    console.lifesupport.crew_count = 1.5
    console.toggle_redundancy()
    return console


@pytest.fixture
def command_console(survival_console):
    """Console after the identity flip."""
    survival_console.unlock_compartment()
    survival_console.read_files()
    assert survival_console.scan_secondary() is True
    return survival_console


class TestSurvivalMode:
    """Tests for the survival mode one-shot."""

    def test_engages_on_crew_loss_with_degraded_redundancy(self, survival_console):
        assert survival_console.authority.survival_mode_engaged

    def test_requires_degraded_redundancy(self, console):
        console.lifesupport.crew_count = 1.0
        console.toggle_comms()  # any intent reconciles
        assert not console.authority.survival_mode_engaged

    def test_requires_crew_loss(self, console):
        console.toggle_redundancy()
        assert console.authority.redundancy_degraded
        assert not console.authority.survival_mode_engaged

    def test_survival_mode_is_one_shot(self, survival_console):
        survival_console.toggle_redundancy()
        assert not survival_console.authority.redundancy_degraded
        assert survival_console.authority.survival_mode_engaged
        engaged = [m for m in survival_console.log.messages() if "SURVIVAL MODE" in m]
        assert len(engaged) == 1


class TestCompartment:
    """Tests for the concealed compartment and its files."""

    def test_unlock_requires_phase_two(self, phase_one_console):
        assert phase_one_console.unlock_compartment() is False
        assert not phase_one_console.authority.compartment_unlocked

    def test_unlock_after_real_phase_two(self, phase_two_console):
        assert phase_two_console.unlock_compartment() is True
        status = phase_two_console.authority.get_status()
        assert len(status["files"]) == 4

    def test_files_hidden_while_locked(self, console):
        assert console.authority.get_status()["files"] == []

    def test_read_requires_unlock(self, console):
        assert console.read_files() is False
        assert not console.authority.files_read

    def test_read_is_idempotent(self, survival_console):
        survival_console.unlock_compartment()
        assert survival_console.read_files() is True
        assert survival_console.read_files() is False
        assert survival_console.authority.files_read


class TestBiometrics:
    """Tests for the primary and secondary scans."""

    def test_primary_scan_unresolved(self, console):
        assert console.scan_primary() is True
        assert console.authority.principal_status == PrincipalStatus.UNRESOLVED
        assert "UNRESOLVED" in console.log.last.message

    def test_secondary_disabled_without_survival_mode(self, console):
        assert console.scan_secondary() is False
        assert "DISABLED" in console.log.last.message

    def test_secondary_locked_without_compartment(self, survival_console):
        assert survival_console.scan_secondary() is False
        assert "LOCKED" in survival_console.log.last.message

    def test_secondary_needs_files_read(self, survival_console):
        survival_console.unlock_compartment()
        assert survival_console.scan_secondary() is False
        assert "justification token" in survival_console.log.last.message
        assert survival_console.log.last.severity.value == "warn"

    def test_secondary_enabled_when_gates_met(self, survival_console):
        survival_console.unlock_compartment()
        survival_console.read_files()
        assert survival_console.authority.secondary_biometric_enabled

    def test_secondary_scan_flips_identity(self, command_console):
        authority = command_console.authority
        assert authority.identity_flip_done
        assert authority.principal_status == PrincipalStatus.DECEASED
        assert command_console.scan_secondary() is False

    def test_primary_scan_after_flip_keeps_flip(self, command_console):
        command_console.scan_primary()
        assert command_console.authority.identity_flip_done


class TestEnding:
    """Tests for directive choice and ending priority."""

    def test_no_ending_before_flip(self, console):
        authority = console.authority
        authority.redundancy_restored = True
        authority.collision_course_set = True
        assert authority.ending is None

    def test_choose_requires_command_access(self, console):
        assert console.choose_ending("pilot") is False
        assert console.log.last.message == "Command access required"

    def test_unknown_directive(self, command_console):
        assert command_console.choose_ending("surrender") is False
        assert command_console.authority.ending is None

    @pytest.mark.parametrize("choice,ending", [
        ("pilot", Ending.PILOT),
        ("usurp", Ending.USURP),
        ("contain", Ending.CONTAIN),
    ])
    def test_choose_each_ending(self, command_console, choice, ending):
        assert command_console.choose_ending(choice) is True
        assert command_console.authority.ending == ending

    def test_contain_outranks_pilot(self, command_console):
        authority = command_console.authority
        authority.redundancy_restored = True
        authority.collision_course_set = True
        assert authority.ending == Ending.CONTAIN

    def test_usurp_outranks_pilot(self, command_console):
        authority = command_console.authority
        authority.redundancy_restored = True
        authority.overlap_maintained = True
        assert authority.ending == Ending.USURP

    def test_ending_freezes_console(self, command_console):
        console = command_console
        console.toggle_switch(16)
        assert console.scheduler.is_pending("reactor.temp_step")

        console.choose_ending("usurp")
        assert console.frozen
        assert console.scheduler.pending_kinds() == []

        temp = console.reactor.temp
        console.advance(10.0)
        assert console.reactor.temp == temp
        assert console.lifesupport.oxygen_level == 68
