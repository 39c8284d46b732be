"""
Tests for hull, shields and the health label.
"""

import pytest

from shipconsole import HealthStatus
from shipconsole.vitals import HULL_STEP, SHIELD_STEP


@pytest.fixture
def vitals(console):
    return console.vitals


class TestHull:
    """Tests for hull wear."""

    @pytest.mark.parametrize("temp,rate", [
        (40, 0.8),   # danger at phase 0
        (33, 0.3),   # over-powered
        (31, 0.0),   # stable
        (10, 0.0),   # under-powered
    ])
    def test_wear_rate_by_status(self, console, vitals, temp, rate):
        console.reactor.temp = temp
        assert vitals.hull_wear_rate() == pytest.approx(rate)
        vitals._step_hull()
        assert vitals.hull_integrity == pytest.approx(100 - rate)

    def test_hull_floor(self, console, vitals):
        console.reactor.temp = 40
        vitals.hull_integrity = 0.5
        vitals._step_hull()
        assert vitals.hull_integrity == 0

    def test_no_wear_before_phase_one(self, console, vitals):
        console.toggle_switch(32)
        console.toggle_switch(8)
        console.advance(5.0)
        assert console.reactor.status.value == "danger"
        assert vitals.hull_integrity == 100
        assert not console.scheduler.is_pending(HULL_STEP)

    def test_danger_wears_hull_each_second(self, phase_one_console):
        console = phase_one_console
        # 31 -> 159, danger from 149 at ~8.86 s
        console.toggle_switch(128)
        console.advance(5.0)
        assert console.reactor.status.value == "danger"
        assert console.vitals.hull_integrity == pytest.approx(97.6)
        assert console.reactor.exploded is False

    def test_wear_stops_when_status_recovers(self, phase_one_console):
        console = phase_one_console
        console.toggle_switch(128)
        console.advance(3.0)
        console.toggle_switch(128)
        console.advance(5.0)
        hull = console.vitals.hull_integrity
        assert hull < 100
        assert not console.scheduler.is_pending(HULL_STEP)
        console.advance(10.0)
        assert console.vitals.hull_integrity == hull


class TestShields:
    """Tests for shield fluctuation."""

    def test_shields_offline_before_phase_two(self, phase_one_console):
        assert not phase_one_console.vitals.shields_active
        assert not phase_one_console.scheduler.is_pending(SHIELD_STEP)

    def test_shields_online_at_phase_two(self, phase_two_console):
        console = phase_two_console
        assert console.vitals.shields_active
        assert console.scheduler.is_pending(SHIELD_STEP)
        assert "Deflector shields online" in console.log.messages()

    def test_shield_steps_bounded(self, console, vitals):
        console.reactor.temp = 511
        previous = vitals.shield_status
        for _ in range(500):
            vitals._step_shields()
            assert 0 <= vitals.shield_status <= 100
            assert abs(vitals.shield_status - previous) <= 2.0
            previous = vitals.shield_status

    def test_shields_step_every_two_seconds(self, phase_two_console, monkeypatch):
        console = phase_two_console
        monkeypatch.setattr(console.vitals.rng, "uniform", lambda low, high: low)
        assert console.vitals.shield_status == 100
        # Phase 2 at ~13.6 s, steps at ~15.6, 17.6, ... 33.6
        console.advance(20.0)
        assert console.vitals.shield_status == pytest.approx(100 - 10 * (1 + 124 / 511))


class TestHealthStatus:
    """Tests for the aggregate health label."""

    @pytest.mark.parametrize("oxygen,hull,shields,expected", [
        (90, 90, 90, HealthStatus.NOMINAL),
        (90, 90, 20, HealthStatus.SHIELDS_LOW),
        (45, 90, 90, HealthStatus.WARNING),
        (90, 45, 20, HealthStatus.WARNING),
        (15, 90, 90, HealthStatus.CRITICAL),
        (90, 10, 90, HealthStatus.CRITICAL),
    ])
    def test_health_label(self, console, vitals, oxygen, hull, shields, expected):
        console.lifesupport.oxygen_level = oxygen
        vitals.hull_integrity = hull
        vitals.shield_status = shields
        assert vitals.health_status == expected
