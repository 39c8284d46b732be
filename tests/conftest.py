"""
Pytest fixtures for ship console tests.

Consoles are seeded and the breached compartment is fixed so every test is
deterministic.
"""

import pytest

from shipconsole import ShipConsole

PHASE_ZERO_SWITCHES = (1, 2, 4, 8, 16)       # 31
CHECKPOINT_SWITCHES = (4, 8, 16, 32, 64)     # 124


def close_switches(console, *values):
    """Toggle each switch (closing open ones)."""
    for value in values:
        console.toggle_switch(value)


def reach_phase_one(console):
    """Hold the phase 0 threshold until the reactor advances."""
    close_switches(console, *PHASE_ZERO_SWITCHES)
    console.advance(7.0)
    assert console.reactor.phase == 1


def tune_atmosphere(console):
    """Seal and patch the breach and set both scrubber knobs to optimum."""
    console.toggle_isolate(console.lifesupport.fracture_site)
    console.patch_fracture()
    console.set_knob("intake_ratio", 67)
    console.set_knob("purge_interval", 62)


def reach_phase_two(console):
    reach_phase_one(console)
    tune_atmosphere(console)
    # 31 -> 124: open 1 and 2, close 32 and 64
    close_switches(console, 1, 2, 32, 64)
    console.advance(8.0)
    assert console.reactor.phase == 2


@pytest.fixture
def console():
    """Fresh console, breach in the cockpit."""
    return ShipConsole(seed=7, fracture_site="cockpit")


@pytest.fixture
def phase_one_console(console):
    reach_phase_one(console)
    return console


@pytest.fixture
def phase_two_console(console):
    reach_phase_two(console)
    return console
