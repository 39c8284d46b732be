"""
Ship console simulation context.

ShipConsole owns every state cell, the virtual clock and the single event
table. The presentation layer drives it two ways:

- Intents: direct methods (toggle_switch, patch_fracture, ...) or
  dispatch("toggle-switch", value=16)
- Time: tick(now) or advance(seconds)

After every intent and every fired event the console reconciles all engines,
so timers whose inputs changed are re-armed or cancelled before anything
else can observe the state.

Usage:
    console = ShipConsole(seed=7)
    for value in (1, 2, 4, 8, 16):
        console.toggle_switch(value)
    console.advance(7.0)
    assert console.reactor.phase == 1
"""

from __future__ import annotations

import inspect
import logging
import random
from typing import Any, Callable, Dict, Optional

from .authority import AuthorityEngine
from .config import ConsoleConfig
from .events import ConsoleLog
from .lifesupport import LifeSupportEngine
from .navigation import NavigationEngine
from .reactor import ReactorEngine
from .scheduler import Scheduler, VirtualClock
from .vitals import ShipVitalsEngine

logger = logging.getLogger(__name__)


class ShipConsole:
    """
    The whole console simulation.

    Attributes:
        config: Console constants.
        clock: Virtual clock (seconds).
        scheduler: Event table shared by all engines.
        log: Operator log.
        reactor: Reactor engine.
        lifesupport: Life support engine.
        vitals: Hull and shield engine.
        navigation: Navigation engine.
        authority: Biometric and directive engine.
    """

    def __init__(
        self,
        config: Optional[ConsoleConfig] = None,
        seed: Optional[int] = None,
        fracture_site: Optional[str] = None,
        start_time: float = 0.0,
    ) -> None:
        """
        Create a console at session start.

        Args:
            config: Console constants (defaults if None).
            seed: RNG seed, overrides config.seed.
            fracture_site: Force the breached compartment instead of
                choosing it at random.
            start_time: Initial clock reading.
        """
        self.config = config or ConsoleConfig()
        self.seed = seed if seed is not None else self.config.seed
        self.rng = random.Random(self.seed)

        self.clock = VirtualClock(start_time)
        self.scheduler = Scheduler(self.clock)
        self.log = ConsoleLog(self.clock, capacity=self.config.log_capacity)

        self.reactor = ReactorEngine(self.config, self.scheduler, self.log)
        self.lifesupport = LifeSupportEngine(
            self.config, self.scheduler, self.log, self.reactor,
            rng=self.rng, fracture_site=fracture_site,
        )
        self.vitals = ShipVitalsEngine(
            self.config, self.scheduler, self.log, self.reactor, self.lifesupport,
            rng=self.rng,
        )
        self.navigation = NavigationEngine(self.config, self.log, self.reactor)
        self.authority = AuthorityEngine(self.config, self.log, self.reactor, self.lifesupport)

        self._intents: Dict[str, Callable[..., bool]] = {
            "toggle-switch": self.toggle_switch,
            "press-override": self.press_override,
            "release-override": self.release_override,
            "select-waypoint": self.select_waypoint,
            "lock-course": self.lock_course,
            "toggle-comms": self.toggle_comms,
            "toggle-nav-repair": self.toggle_nav_repair,
            "toggle-isolate": self.toggle_isolate,
            "patch-fracture": self.patch_fracture,
            "set-knob": self.set_knob,
            "set-orientation": self.set_orientation,
            "scan-primary": self.scan_primary,
            "scan-secondary": self.scan_secondary,
            "unlock-compartment": self.unlock_compartment,
            "read-files": self.read_files,
            "choose-ending": self.choose_ending,
            "toggle-redundancy": self.toggle_redundancy,
        }

        self._reconcile()

    @property
    def now(self) -> float:
        return self.clock.now

    @property
    def frozen(self) -> bool:
        """True once the reactor is lost or an ending is resolved."""
        return self.reactor.exploded or self.authority.ending is not None

    # -------------------------------------------------------------------------
    # Time
    # -------------------------------------------------------------------------

    def tick(self, now: float) -> int:
        """
        Advance the simulation to a time, firing every timer due on the way.

        Args:
            now: Target simulation time (seconds).

        Returns:
            Number of timer events fired.
        """
        if now < self.clock.now:
            logger.warning("Ignoring tick to T+%.3fs, clock already at T+%.3fs", now, self.clock.now)
            return 0

        return self.scheduler.run_until(
            now,
            after_each=self._reconcile,
            should_stop=lambda: self.frozen,
        )

    def advance(self, seconds: float) -> int:
        """Advance the simulation by a number of seconds."""
        return self.tick(self.clock.now + seconds)

    def _reconcile(self) -> None:
        if self.frozen:
            self.scheduler.clear()
            return

        self.reactor.reconcile()
        self.lifesupport.reconcile()
        self.vitals.reconcile()
        self.authority.reconcile()

        # An automatic transition may have resolved the session
        if self.frozen:
            self.scheduler.clear()

    def _run_intent(self, handler: Callable[..., bool], *args: Any) -> bool:
        accepted = handler(*args)
        self._reconcile()
        return accepted

    # -------------------------------------------------------------------------
    # Intents
    # -------------------------------------------------------------------------

    def dispatch(self, intent: str, **params: Any) -> bool:
        """
        Run an intent by name.

        Args:
            intent: Intent name, e.g. "toggle-switch".
            **params: Intent parameters, e.g. value=16.

        Returns:
            True if the intent was accepted and changed state.
        """
        handler = self._intents.get(intent)
        if handler is None:
            self.log.error(f"Unknown intent '{intent}'")
            return False
        try:
            inspect.signature(handler).bind(**params)
        except TypeError:
            self.log.error(f"Bad parameters for {intent}: {sorted(params)}")
            return False
        return handler(**params)

    @property
    def intents(self) -> list[str]:
        return sorted(self._intents)

    def toggle_switch(self, value: int) -> bool:
        return self._run_intent(self.reactor.toggle_switch, value)

    def press_override(self) -> bool:
        return self._run_intent(self.reactor.press_override)

    def release_override(self) -> bool:
        return self._run_intent(self.reactor.release_override)

    def select_waypoint(self, index: int) -> bool:
        return self._run_intent(self.navigation.select_waypoint, index)

    def lock_course(self) -> bool:
        return self._run_intent(self.navigation.lock_course)

    def toggle_comms(self) -> bool:
        return self._run_intent(self.navigation.toggle_comms)

    def toggle_nav_repair(self) -> bool:
        return self._run_intent(self.navigation.toggle_nav_repair)

    def toggle_isolate(self, compartment: str) -> bool:
        return self._run_intent(self.lifesupport.toggle_isolate, compartment)

    def patch_fracture(self) -> bool:
        return self._run_intent(self.lifesupport.patch_fracture)

    def set_knob(self, name: str, value: float) -> bool:
        return self._run_intent(self.lifesupport.set_knob, name, value)

    def set_orientation(self, axis: str, value: float) -> bool:
        return self._run_intent(self.navigation.set_orientation, axis, value)

    def scan_primary(self) -> bool:
        return self._run_intent(self.authority.scan_primary)

    def scan_secondary(self) -> bool:
        return self._run_intent(self.authority.scan_secondary)

    def unlock_compartment(self) -> bool:
        return self._run_intent(self.authority.unlock_compartment)

    def read_files(self) -> bool:
        return self._run_intent(self.authority.read_files)

    def choose_ending(self, choice: str) -> bool:
        return self._run_intent(self.authority.choose_ending, choice)

    def toggle_redundancy(self) -> bool:
        return self._run_intent(self.authority.toggle_redundancy)

    # -------------------------------------------------------------------------
    # State Snapshot
    # -------------------------------------------------------------------------

    def get_status(self) -> dict:
        """
        Get a snapshot of every cell and derived value.

        Returns:
            Nested dictionary keyed by subsystem.
        """
        return {
            "timestamp": self.clock.now,
            "frozen": self.frozen,
            "reactor": self.reactor.get_status(),
            "lifesupport": self.lifesupport.get_status(),
            "vitals": self.vitals.get_status(),
            "navigation": self.navigation.get_status(),
            "authority": self.authority.get_status(),
            "pending_timers": self.scheduler.pending_kinds(),
            "log": [
                {"message": e.message, "severity": e.severity.value, "timestamp": e.timestamp}
                for e in self.log.entries
            ],
        }
