"""
Life support engine for the ship console simulation.

The atmosphere is a pipeline of derived values recomputed on every read:

    reactor temp -> band -> scrubber cap ----------\
    intake/purge knobs -> raw efficiency -> efficiency -> CO2, loss rate
    fracture site + seals + patch -> leak rate -> pressure, loss rate
    loss rate + efficiency + pressure + band -> environmental gate

Two timers own state changes:
- A 1 s oxygen stepper, active from reactor phase 1, that applies the loss
  rate to the oxygen level and suffocates crew below 15% oxygen
- The environmental gate: holding the reactor at the phase 1 checkpoint
  with a healthy atmosphere for 5 s advances the reactor to phase 2
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Dict, Optional

from .config import COMPARTMENTS, ConsoleConfig
from .events import ConsoleLog
from .reactor import ReactorEngine
from .scheduler import Scheduler


# =============================================================================
# CONSTANTS
# =============================================================================

OXYGEN_STEP = "lifesupport.oxygen_step"
ENV_GATE = "lifesupport.env_gate"

KNOBS = ("intake_ratio", "purge_interval")

BASE_OXYGEN_DRAIN = 0.1
OVERPOWER_DESYNC_DRAIN = 0.8
SCRUBBER_RECOVERY = 0.5
LEAK_PRESSURE_FACTOR = 0.015
OVERPOWER_PRESSURE_DROP = 0.04
CO2_FACTOR = 0.6

MIN_RAW_EFFICIENCY = 40.0
EFFICIENCY_SPAN = 55.0

GATE_MIN_EFFICIENCY = 85.0
GATE_MIN_PRESSURE = 0.98


class ReactorBand(Enum):
    """Coarse thermal band of the reactor."""
    UNDERPOWERED = "underpowered"
    NOMINAL = "nominal"
    HIGH = "high"
    OVERPOWER = "overpower"


class AirflowBalance(Enum):
    BALANCED = "BALANCED"
    UNBALANCED = "UNBALANCED"
    REROUTED = "REROUTED"


class OxygenAlert(Enum):
    """Cabin degradation level driven by oxygen."""
    NORMAL = "normal"
    LOW = "low"
    MODERATE = "moderate"
    SEVERE = "severe"
    CRITICAL = "critical"


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# =============================================================================
# LIFE SUPPORT ENGINE
# =============================================================================

class LifeSupportEngine:
    """
    Atmosphere, hull breach and crew simulation.

    Attributes:
        oxygen_level: Cabin oxygen (0-100%).
        sealed: Isolation flag per compartment.
        fracture_site: Compartment holding the hull breach.
        fracture_patched: True once the breach is patched.
        intake_ratio: Scrubber intake knob (0-100).
        purge_interval: Scrubber purge knob (0-100).
        crew_count: Surviving crew, fractional while suffocating.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        scheduler: Scheduler,
        log: ConsoleLog,
        reactor: ReactorEngine,
        rng: Optional[random.Random] = None,
        fracture_site: Optional[str] = None,
    ) -> None:
        self.config = config
        self.scheduler = scheduler
        self.log = log
        self.reactor = reactor
        self.rng = rng or random.Random(config.seed)

        self.oxygen_level: float = 100.0
        self.sealed: Dict[str, bool] = {name: False for name in COMPARTMENTS}
        if fracture_site is None:
            fracture_site = self.rng.choice(COMPARTMENTS)
        elif fracture_site not in COMPARTMENTS:
            raise ValueError(f"Unknown compartment '{fracture_site}'")
        self.fracture_site: str = fracture_site
        self.fracture_patched: bool = False
        self.intake_ratio: float = config.initial_intake_ratio
        self.purge_interval: float = config.initial_purge_interval
        self.crew_count: float = config.initial_crew

        # Phase 1 -> 2 is held by the environmental gate
        reactor.gated_phases.add(config.gate_phase)

    # -------------------------------------------------------------------------
    # Derived Atmosphere
    # -------------------------------------------------------------------------

    @property
    def reactor_band(self) -> ReactorBand:
        low, nominal, high = self.config.band_cutoffs
        pct = self.reactor.temp / self.config.band_reference_temp
        if pct < low:
            return ReactorBand.UNDERPOWERED
        if pct <= nominal:
            return ReactorBand.NOMINAL
        if pct <= high:
            return ReactorBand.HIGH
        return ReactorBand.OVERPOWER

    @property
    def fracture_leak_rate(self) -> float:
        if self.fracture_patched or self.sealed[self.fracture_site]:
            return 0.0
        if self.reactor_band in (ReactorBand.HIGH, ReactorBand.OVERPOWER):
            return self.config.hot_leak_rate
        return self.config.leak_rate

    @property
    def raw_scrubber_efficiency(self) -> float:
        """Efficiency from knob alignment alone (40-95%)."""
        intake_dist = abs(self.intake_ratio - self.config.intake_optimum) / self.config.intake_optimum
        purge_dist = abs(self.purge_interval - self.config.purge_optimum) / self.config.purge_optimum
        misalign = min(1.0, (intake_dist + purge_dist) / 2)
        return MIN_RAW_EFFICIENCY + (1 - misalign) * EFFICIENCY_SPAN

    @property
    def scrubber_cap(self) -> float:
        return self.config.band_caps.get(self.reactor_band.value, 95.0)

    @property
    def scrubber_efficiency(self) -> float:
        return min(self.raw_scrubber_efficiency, self.scrubber_cap)

    @property
    def co2_saturation(self) -> float:
        return max(0.0, 100 - self.scrubber_efficiency) * CO2_FACTOR

    @property
    def cabin_pressure(self) -> float:
        """Cabin pressure in atmospheres (nominal 1.0)."""
        band_drop = OVERPOWER_PRESSURE_DROP if self.reactor_band == ReactorBand.OVERPOWER else 0.0
        return max(0.0, 1.0 - self.fracture_leak_rate * LEAK_PRESSURE_FACTOR - band_drop)

    @property
    def oxygen_loss_rate(self) -> float:
        """Net oxygen loss per second. Negative means recovering."""
        desync = OVERPOWER_DESYNC_DRAIN if self.reactor_band == ReactorBand.OVERPOWER else 0.0
        recovery = (self.scrubber_efficiency / 100) * SCRUBBER_RECOVERY
        return BASE_OXYGEN_DRAIN + self.fracture_leak_rate + desync - recovery

    @property
    def airflow_balance(self) -> AirflowBalance:
        any_sealed = any(self.sealed.values())
        if any_sealed and self.fracture_patched:
            return AirflowBalance.REROUTED
        if any_sealed:
            return AirflowBalance.UNBALANCED
        return AirflowBalance.BALANCED

    @property
    def env_gate_met(self) -> bool:
        """All atmosphere conditions required to leave phase 1."""
        return (
            self.oxygen_loss_rate <= 0
            and self.scrubber_efficiency >= GATE_MIN_EFFICIENCY
            and self.cabin_pressure >= GATE_MIN_PRESSURE
            and self.reactor_band == ReactorBand.NOMINAL
        )

    @property
    def oxygen_alert_level(self) -> OxygenAlert:
        o2 = self.oxygen_level
        if o2 < 10:
            return OxygenAlert.CRITICAL
        if o2 < 20:
            return OxygenAlert.SEVERE
        if o2 < 30:
            return OxygenAlert.MODERATE
        if o2 < 40:
            return OxygenAlert.LOW
        return OxygenAlert.NORMAL

    @property
    def active(self) -> bool:
        return self.reactor.phase >= 1

    # -------------------------------------------------------------------------
    # Operator Intents
    # -------------------------------------------------------------------------

    def toggle_isolate(self, compartment: str) -> bool:
        """
        Seal or open a compartment.

        Args:
            compartment: cockpit, crew-quarters or service-bay.

        Returns:
            True if the compartment changed.
        """
        if not isinstance(compartment, str) or compartment not in self.sealed:
            self.log.error(f"Unknown compartment {compartment!r}")
            return False

        self.sealed[compartment] = not self.sealed[compartment]
        label = compartment.upper()
        if self.sealed[compartment]:
            self.log.ok(f"{label} ISOLATED, monitoring O2 shift")
        else:
            self.log.warn(f"{label} doors OPENED")
        return True

    def patch_fracture(self) -> bool:
        """
        Patch the hull breach. The breached compartment must be sealed.

        Returns:
            True if the fracture was patched.
        """
        if self.fracture_patched:
            self.log.warn("Fracture already patched")
            return False
        if not self.sealed[self.fracture_site]:
            self.log.error("Breach location unconfirmed: isolate the affected compartment first")
            return False

        self.fracture_patched = True
        self.log.ok(f"Microfracture in {self.fracture_site.upper()} PATCHED")
        return True

    def set_knob(self, name: str, value: float) -> bool:
        """
        Set a scrubber knob.

        Args:
            name: intake_ratio or purge_interval.
            value: New setting, clamped to 0-100.

        Returns:
            True if the knob was set.
        """
        if name not in KNOBS:
            self.log.error(f"Unknown scrubber control '{name}'")
            return False
        try:
            value = clamp(float(value), 0.0, 100.0)
        except (TypeError, ValueError):
            self.log.error(f"Invalid setting for {name}: {value!r}")
            return False

        setattr(self, name, value)
        self.log.info(f"Scrubber {name.replace('_', ' ')} set to {value:.0f}")
        return True

    # -------------------------------------------------------------------------
    # Timers
    # -------------------------------------------------------------------------

    def _step_oxygen(self) -> None:
        self.oxygen_level = clamp(self.oxygen_level - self.oxygen_loss_rate, 0.0, 100.0)

        if self.oxygen_level < self.config.crew_attrition_threshold and self.crew_count > 0:
            self.crew_count = max(0.0, self.crew_count - self.config.crew_attrition_rate)

    def _gate_armed(self) -> bool:
        checkpoint = self.config.gate_checkpoint
        return (
            not self.reactor.exploded
            and self.reactor.phase == self.config.gate_phase
            and self.reactor.temp == checkpoint
            and self.reactor.power == checkpoint
            and self.env_gate_met
        )

    def _fire_env_gate(self) -> None:
        if self._gate_armed():
            self.log.ok("Environmental baseline held: main bus cleared for phase 2")
            self.reactor.advance_phase()

    def reconcile(self) -> None:
        """Re-arm or cancel the oxygen stepper and environmental gate."""
        phase = self.reactor.phase
        active = self.active

        if self.scheduler.watch(
            OXYGEN_STEP,
            phase,
            active,
            self.config.oxygen_interval_s,
            self._step_oxygen,
            interval=self.config.oxygen_interval_s,
        ) and active and self.oxygen_level == 100.0:
            self.oxygen_level = self.config.oxygen_activation_level
            self.log.warn(f"O2 reading {self.oxygen_level:.0f}%: below safe margin")

        gate = self.env_gate_met
        self.scheduler.watch(
            ENV_GATE,
            (phase, self.reactor.temp, self.reactor.power, gate),
            self._gate_armed(),
            self.config.gate_delay_s,
            self._fire_env_gate,
        )

    def get_status(self) -> dict:
        return {
            "oxygen_level": self.oxygen_level,
            "oxygen_alert_level": self.oxygen_alert_level.value,
            "oxygen_loss_rate": self.oxygen_loss_rate,
            "reactor_band": self.reactor_band.value,
            "fracture_site": self.fracture_site,
            "fracture_patched": self.fracture_patched,
            "fracture_leak_rate": self.fracture_leak_rate,
            "sealed": dict(self.sealed),
            "intake_ratio": self.intake_ratio,
            "purge_interval": self.purge_interval,
            "scrubber_efficiency": self.scrubber_efficiency,
            "co2_saturation": self.co2_saturation,
            "cabin_pressure": self.cabin_pressure,
            "airflow_balance": self.airflow_balance.value,
            "env_gate_met": self.env_gate_met,
            "crew_count": self.crew_count,
        }
