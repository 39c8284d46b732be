"""
Configuration for the ship console simulation.

Every tunable constant of the console lives in ConsoleConfig. Defaults
describe the canonical console; a JSON file and environment variables can
override them:

- SHIPCONSOLE_CONFIG: path to a JSON file of field overrides
- SHIPCONSOLE_SEED: integer seed for the console RNG

Environment variables may be placed in a .env file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

CONFIG_PATH_ENV = "SHIPCONSOLE_CONFIG"
SEED_ENV = "SHIPCONSOLE_SEED"

COMPARTMENTS = ("cockpit", "crew-quarters", "service-bay")


@dataclass(frozen=True)
class ConsoleConfig:
    """
    Tunable constants for all console subsystems.

    Times are in seconds of simulation time.
    """
    # Reactor
    switch_values: Tuple[int, ...] = (1, 2, 4, 8, 16, 32, 64, 128, 256)
    phase_thresholds: Dict[int, int] = field(
        default_factory=lambda: {0: 31, 1: 124, 2: 452}
    )
    max_phase: int = 3
    weak_fraction: float = 0.8
    danger_fraction: float = 1.2
    temp_step_interval_s: float = 0.100
    temp_step_min_interval_s: float = 0.010
    temp_step_decay: float = 0.9
    stability_delay_s: float = 5.0
    overload_delay_s: float = 10.0
    explosion_delay_s: float = 10.0
    overload_phase: int = 1

    # Life support
    # Not max_temp (511): at 511 the phase 1 checkpoint (124) reads as
    # underpowered and the environmental gate could never open
    band_reference_temp: float = 255.0
    band_cutoffs: Tuple[float, float, float] = (0.4, 0.7, 0.85)
    band_caps: Dict[str, float] = field(
        default_factory=lambda: {
            "underpowered": 65.0,
            "nominal": 95.0,
            "high": 85.0,
            "overpower": 70.0,
        }
    )
    intake_optimum: float = 67.0
    purge_optimum: float = 62.0
    initial_intake_ratio: float = 10.0
    initial_purge_interval: float = 90.0
    leak_rate: float = 0.6
    hot_leak_rate: float = 1.2
    oxygen_interval_s: float = 1.0
    oxygen_activation_level: float = 68.0
    crew_attrition_threshold: float = 15.0
    crew_attrition_rate: float = 0.005
    initial_crew: float = 3.0
    gate_phase: int = 1
    gate_checkpoint: int = 124
    gate_delay_s: float = 5.0

    # Ship vitals
    hull_interval_s: float = 1.0
    hull_danger_rate: float = 0.8
    hull_overpowered_rate: float = 0.3
    shield_interval_s: float = 2.0
    shield_phase: int = 2
    shield_step: float = 1.0

    # Authority
    survival_crew_threshold: float = 2.0

    # Operator log
    log_capacity: int = 80

    # Session
    seed: Optional[int] = None

    @property
    def max_temp(self) -> int:
        """Sum of the whole switch catalog."""
        return sum(self.switch_values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ConsoleConfig:
        """
        Create a config from a dictionary of overrides.

        Args:
            data: Field name to value mapping.

        Returns:
            Config with defaults replaced by the given values.

        Raises:
            KeyError: If a key does not name a config field.
        """
        return cls().with_overrides(data)

    def with_overrides(self, data: Dict[str, Any]) -> ConsoleConfig:
        known = {f.name for f in fields(self)}
        overrides: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise KeyError(f"Unknown console config key '{key}'")
            overrides[key] = _coerce(key, value)
        return replace(self, **overrides)


def _coerce(key: str, value: Any) -> Any:
    # JSON has no tuples and only string object keys
    if key in ("switch_values", "band_cutoffs"):
        return tuple(value)
    if key == "phase_thresholds":
        return {int(phase): int(temp) for phase, temp in value.items()}
    if key == "band_caps":
        return {str(band): float(cap) for band, cap in value.items()}
    return value


def load_config(path: Optional[str | Path] = None) -> ConsoleConfig:
    """
    Load the console configuration.

    Args:
        path: JSON override file. Defaults to $SHIPCONSOLE_CONFIG if set.

    Returns:
        Configured ConsoleConfig.

    Raises:
        FileNotFoundError: If the override file does not exist.
        KeyError: If the file names an unknown config field.
    """
    config = ConsoleConfig()

    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV) or None

    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Console config not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            config = config.with_overrides(json.load(f))

    seed = os.environ.get(SEED_ENV)
    if seed:
        config = replace(config, seed=int(seed))

    return config
