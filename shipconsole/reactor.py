"""
Reactor engine for the ship console simulation.

This module implements the switch-driven reactor:
- Power is the sum of the switches the operator has closed
- Temperature converges one unit at a time toward power, with an
  accelerating step rate (spin-up) that restarts whenever its target changes
- A momentary override drives temperature toward the maximum
- Status compares temperature against a per-phase threshold
- Holding the threshold advances the phase, sustained over-power at the
  first active phase resets the reactor, sustained danger explodes it

Reactor Timeline:
1. Operator closes switches, power jumps to the switch sum
2. Temperature spins up toward power (100 ms first step, 0.9x per step,
   10 ms floor)
3. temp == power == threshold for 5 s: phase advances
4. Over-powered at phase 1 for 10 s: reactor resets to phase 0
5. Danger (>= 120% of threshold) for 10 s: containment lost, permanently
"""

from __future__ import annotations

import math
from enum import Enum
from typing import FrozenSet, Optional, Set

from .config import ConsoleConfig
from .events import ConsoleLog
from .scheduler import Scheduler


# =============================================================================
# EVENT KINDS
# =============================================================================

TEMP_STEP = "reactor.temp_step"
PHASE_ADVANCE = "reactor.phase_advance"
OVERLOAD_RESET = "reactor.overload_reset"
EXPLOSION = "reactor.explosion"


# =============================================================================
# STATUS
# =============================================================================

class ReactorStatus(Enum):
    """Reactor status relative to the current phase threshold."""
    IDLE = "idle"                    # Phase 0, cold
    UNKNOWN = "unknown"              # Grace period after a phase change
    UNDER_POWERED = "under-powered"  # Below 80% of threshold
    WEAK = "weak"                    # 80% up to threshold
    STABLE = "stable"                # Exactly at threshold
    OVER_POWERED = "over-powered"    # Above threshold, below 120%
    DANGER = "danger"                # 120% of threshold or more
    COMPLETE = "complete"            # No threshold left


class TempIndicator(Enum):
    """Colour of the temperature gauge."""
    BLUE = "blue"
    GREEN = "green"
    ORANGE = "orange"
    RED = "red"


# =============================================================================
# REACTOR ENGINE
# =============================================================================

class ReactorEngine:
    """
    Switch-based reactor with accelerating temperature convergence.

    Attributes:
        switches: Catalog values currently closed.
        power: Sum of closed switches.
        temp: Current temperature (integer units).
        phase: Current phase (0 to max_phase).
        override_active: True while the override is held.
        exploded: True once containment is lost. Never cleared.
        last_switch_press_time: Time of the last operator reactor action.
        last_phase_change_time: Time of the last phase change or reset.
        gated_phases: Phases whose advance is owned by another engine.
    """

    def __init__(self, config: ConsoleConfig, scheduler: Scheduler, log: ConsoleLog) -> None:
        self.config = config
        self.scheduler = scheduler
        self.log = log

        self.switches: FrozenSet[int] = frozenset()
        self.power: int = 0
        self.temp: int = 0
        self.phase: int = 0
        self.override_active: bool = False
        self.exploded: bool = False
        self.last_switch_press_time: float = 0.0
        self.last_phase_change_time: float = 0.0
        self.gated_phases: Set[int] = set()

        self._step_interval = config.temp_step_interval_s

    @property
    def now(self) -> float:
        return self.scheduler.clock.now

    # -------------------------------------------------------------------------
    # Derived State
    # -------------------------------------------------------------------------

    @property
    def max_temp(self) -> int:
        return self.config.max_temp

    @property
    def threshold(self) -> Optional[int]:
        """Threshold of the current phase, or None past the last one."""
        return self.config.phase_thresholds.get(self.phase)

    @property
    def weak_temp(self) -> Optional[int]:
        if self.threshold is None:
            return None
        return math.floor(self.threshold * self.config.weak_fraction)

    @property
    def danger_temp(self) -> Optional[int]:
        if self.threshold is None:
            return None
        return math.ceil(self.threshold * self.config.danger_fraction)

    @property
    def target_temp(self) -> int:
        """Temperature the convergence stepper is heading for."""
        return self.max_temp if self.override_active else self.power

    @property
    def in_phase_grace(self) -> bool:
        """True between a phase change and the next operator action."""
        return self.last_phase_change_time > self.last_switch_press_time

    @property
    def status(self) -> ReactorStatus:
        threshold = self.threshold
        if threshold is None:
            return ReactorStatus.COMPLETE
        if self.in_phase_grace:
            return ReactorStatus.UNKNOWN

        temp = self.temp
        if temp >= self.danger_temp:
            return ReactorStatus.DANGER
        if temp > threshold:
            return ReactorStatus.OVER_POWERED
        if temp == threshold:
            return ReactorStatus.STABLE
        if temp >= self.weak_temp:
            return ReactorStatus.WEAK
        if self.phase == 0 and temp == 0:
            return ReactorStatus.IDLE
        return ReactorStatus.UNDER_POWERED

    @property
    def temp_indicator(self) -> TempIndicator:
        """Gauge colour, independent of the post-phase-change grace."""
        threshold = self.threshold
        if threshold is None:
            return TempIndicator.GREEN
        if self.temp >= self.danger_temp:
            return TempIndicator.RED
        if self.temp > threshold:
            return TempIndicator.ORANGE
        if self.temp >= self.weak_temp:
            return TempIndicator.GREEN
        return TempIndicator.BLUE

    @property
    def is_stable_at_threshold(self) -> bool:
        return self.temp == self.power == self.threshold

    # -------------------------------------------------------------------------
    # Operator Intents
    # -------------------------------------------------------------------------

    def toggle_switch(self, value: int) -> bool:
        """
        Flip a switch and recompute power.

        Args:
            value: Catalog value of the switch.

        Returns:
            True if the switch changed.
        """
        if self.exploded:
            self.log.warn("REACTOR CONTAINMENT LOST: switch bank inert")
            return False
        # bool is an int subclass, and 16.0 == 16 would leak a float into power
        if (
            not isinstance(value, int)
            or isinstance(value, bool)
            or value not in self.config.switch_values
        ):
            self.log.error(f"No reactor switch rated {value!r}")
            return False

        if value in self.switches:
            self.switches = self.switches - {value}
        else:
            self.switches = self.switches | {value}
        self.power = sum(self.switches)
        self.last_switch_press_time = self.now

        state = "CLOSED" if value in self.switches else "OPEN"
        self.log.info(f"Switch {value} {state}, reactor output {self.power}")
        return True

    def press_override(self) -> bool:
        """Hold the override. Temperature heads for the maximum."""
        if self.exploded:
            self.log.warn("REACTOR CONTAINMENT LOST: override inert")
            return False
        if self.override_active:
            return False

        self.override_active = True
        self.last_switch_press_time = self.now
        self.log.warn("REACTOR OVERRIDE ENGAGED")
        return True

    def release_override(self) -> bool:
        """Release the override. Temperature decays back toward power."""
        if self.exploded:
            self.log.warn("REACTOR CONTAINMENT LOST: override inert")
            return False
        if not self.override_active:
            return False

        self.override_active = False
        self.last_switch_press_time = self.now
        self.log.info("Reactor override released")
        return True

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def advance_phase(self) -> bool:
        """
        Move to the next phase and start the post-change grace period.

        Returns:
            True if the phase advanced.
        """
        if self.exploded or self.phase >= self.config.max_phase:
            return False

        self.phase += 1
        self.last_phase_change_time = self.now
        self.log.ok(f"Reactor phase {self.phase} reached")
        return True

    def reset(self) -> None:
        """Open every switch and drop back to phase 0."""
        self.switches = frozenset()
        self.power = 0
        self.phase = 0
        self.last_phase_change_time = self.now
        self.log.error("REACTOR OVERLOAD: emergency reset to phase 0")

    def _step_temp(self) -> None:
        if self.exploded:
            return

        target = self.target_temp
        if self.temp < target:
            self.temp += 1
        elif self.temp > target:
            self.temp -= 1

        if self.temp != target:
            self._step_interval = max(
                self.config.temp_step_min_interval_s,
                self._step_interval * self.config.temp_step_decay,
            )
            self.scheduler.schedule(TEMP_STEP, self._step_interval, self._step_temp)

    def _fire_phase_advance(self) -> None:
        if self._can_progress():
            self.advance_phase()

    def _fire_overload_reset(self) -> None:
        if self._is_overloaded():
            self.reset()

    def _fire_explosion(self) -> None:
        if self.status == ReactorStatus.DANGER and not self.exploded:
            self.exploded = True
            self.log.error("REACTOR CONTAINMENT BREACH: core lost")

    def _can_progress(self) -> bool:
        return (
            not self.exploded
            and self.is_stable_at_threshold
            and self.phase < self.config.max_phase
            and self.phase not in self.gated_phases
        )

    def _is_overloaded(self) -> bool:
        return (
            not self.exploded
            and self.status == ReactorStatus.OVER_POWERED
            and self.phase == self.config.overload_phase
        )

    # -------------------------------------------------------------------------
    # Reconciliation
    # -------------------------------------------------------------------------

    def reconcile(self) -> None:
        """Re-arm or cancel every reactor timer whose inputs changed."""
        if self.exploded:
            for kind in (TEMP_STEP, PHASE_ADVANCE, OVERLOAD_RESET, EXPLOSION):
                self.scheduler.cancel(kind)
            return

        status = self.status

        if self.scheduler.watch(
            TEMP_STEP,
            (self.power, self.override_active),
            self.temp != self.target_temp,
            self.config.temp_step_interval_s,
            self._step_temp,
        ):
            self._step_interval = self.config.temp_step_interval_s

        signature = (self.temp, self.power, self.phase, status)
        self.scheduler.watch(
            PHASE_ADVANCE,
            signature,
            self._can_progress(),
            self.config.stability_delay_s,
            self._fire_phase_advance,
        )
        self.scheduler.watch(
            OVERLOAD_RESET,
            signature,
            self._is_overloaded(),
            self.config.overload_delay_s,
            self._fire_overload_reset,
        )

        if self.scheduler.watch(
            EXPLOSION,
            status,
            status == ReactorStatus.DANGER,
            self.config.explosion_delay_s,
            self._fire_explosion,
        ) and status == ReactorStatus.DANGER:
            self.log.warn("REACTOR TEMPERATURE CRITICAL: containment failing")

    def get_status(self) -> dict:
        """
        Get current reactor state.

        Returns:
            Dictionary with reactor cells and derived values.
        """
        return {
            "switches": sorted(self.switches),
            "power": self.power,
            "temp": self.temp,
            "phase": self.phase,
            "threshold": self.threshold,
            "status": self.status.value,
            "temp_indicator": self.temp_indicator.value,
            "override_active": self.override_active,
            "exploded": self.exploded,
            "last_switch_press_time": self.last_switch_press_time,
            "last_phase_change_time": self.last_phase_change_time,
        }
