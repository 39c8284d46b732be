"""
Ship vitals engine: hull integrity, shields and the aggregate health label.

Hull integrity wears down while the reactor runs hot (phase 1 onward).
Shields come online at phase 2 and wander randomly, more so the hotter the
reactor runs.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Optional

from .config import ConsoleConfig
from .events import ConsoleLog
from .lifesupport import LifeSupportEngine, clamp
from .reactor import ReactorEngine, ReactorStatus
from .scheduler import Scheduler

HULL_STEP = "vitals.hull_step"
SHIELD_STEP = "vitals.shield_step"

CRITICAL_LEVEL = 20.0
WARNING_LEVEL = 50.0
SHIELDS_LOW_LEVEL = 30.0


class HealthStatus(Enum):
    NOMINAL = "nominal"
    SHIELDS_LOW = "shields-low"
    WARNING = "warning"
    CRITICAL = "critical"


class ShipVitalsEngine:
    """
    Hull and shield simulation.

    Oxygen is owned by life support; it is read here only for the health
    label.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        scheduler: Scheduler,
        log: ConsoleLog,
        reactor: ReactorEngine,
        lifesupport: LifeSupportEngine,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config
        self.scheduler = scheduler
        self.log = log
        self.reactor = reactor
        self.lifesupport = lifesupport
        self.rng = rng or random.Random(config.seed)

        self.hull_integrity: float = 100.0
        self.shield_status: float = 100.0

    @property
    def vitals_active(self) -> bool:
        return self.reactor.phase >= 1

    @property
    def shields_active(self) -> bool:
        return self.reactor.phase >= self.config.shield_phase

    @property
    def health_status(self) -> HealthStatus:
        oxygen = self.lifesupport.oxygen_level
        hull = self.hull_integrity

        if oxygen < CRITICAL_LEVEL or hull < CRITICAL_LEVEL:
            return HealthStatus.CRITICAL
        if oxygen < WARNING_LEVEL or hull < WARNING_LEVEL:
            return HealthStatus.WARNING
        if self.shield_status < SHIELDS_LOW_LEVEL:
            return HealthStatus.SHIELDS_LOW
        return HealthStatus.NOMINAL

    def hull_wear_rate(self) -> float:
        """Hull loss per second for the current reactor status."""
        status = self.reactor.status
        if status == ReactorStatus.DANGER:
            return self.config.hull_danger_rate
        if status == ReactorStatus.OVER_POWERED:
            return self.config.hull_overpowered_rate
        return 0.0

    def _step_hull(self) -> None:
        self.hull_integrity = max(0.0, self.hull_integrity - self.hull_wear_rate())

    def _step_shields(self) -> None:
        fluctuation = self.rng.uniform(-self.config.shield_step, self.config.shield_step)
        temp_factor = self.reactor.temp / self.reactor.max_temp
        self.shield_status = clamp(self.shield_status + fluctuation * (1 + temp_factor), 0.0, 100.0)

    def reconcile(self) -> None:
        status = self.reactor.status
        active = self.vitals_active

        self.scheduler.watch(
            HULL_STEP,
            (active, status),
            active and self.hull_wear_rate() > 0,
            self.config.hull_interval_s,
            self._step_hull,
            interval=self.config.hull_interval_s,
        )
        if self.scheduler.watch(
            SHIELD_STEP,
            self.shields_active,
            self.shields_active,
            self.config.shield_interval_s,
            self._step_shields,
            interval=self.config.shield_interval_s,
        ) and self.shields_active:
            self.log.ok("Deflector shields online")

    def get_status(self) -> dict:
        return {
            "vitals_active": self.vitals_active,
            "hull_integrity": self.hull_integrity,
            "shield_status": self.shield_status,
            "shields_active": self.shields_active,
            "health_status": self.health_status.value,
        }
