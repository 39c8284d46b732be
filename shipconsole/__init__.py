"""Ship console simulation core: reactor, life support, vitals, navigation and authority."""

from .config import (
    COMPARTMENTS,
    ConsoleConfig,
    load_config,
)

from .scheduler import (
    ScheduledEvent,
    Scheduler,
    VirtualClock,
)

from .events import (
    ConsoleLog,
    LogEntry,
    Severity,
)

from .reactor import (
    ReactorEngine,
    ReactorStatus,
    TempIndicator,
)

from .lifesupport import (
    AirflowBalance,
    LifeSupportEngine,
    OxygenAlert,
    ReactorBand,
)

from .vitals import (
    HealthStatus,
    ShipVitalsEngine,
)

from .navigation import (
    WAYPOINTS,
    DriftStatus,
    NavigationEngine,
    RouteStatus,
    SensorStatus,
)

from .authority import (
    AuthorityEngine,
    Ending,
    PrincipalStatus,
)

from .console import ShipConsole

__all__ = [
    # Config
    "COMPARTMENTS",
    "ConsoleConfig",
    "load_config",
    # Scheduler
    "ScheduledEvent",
    "Scheduler",
    "VirtualClock",
    # Operator log
    "ConsoleLog",
    "LogEntry",
    "Severity",
    # Reactor
    "ReactorEngine",
    "ReactorStatus",
    "TempIndicator",
    # Life support
    "AirflowBalance",
    "LifeSupportEngine",
    "OxygenAlert",
    "ReactorBand",
    # Vitals
    "HealthStatus",
    "ShipVitalsEngine",
    # Navigation
    "WAYPOINTS",
    "DriftStatus",
    "NavigationEngine",
    "RouteStatus",
    "SensorStatus",
    # Authority
    "AuthorityEngine",
    "Ending",
    "PrincipalStatus",
    # Console
    "ShipConsole",
]
