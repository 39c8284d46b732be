"""
Navigation engine: power buses, nav core, course plotting, comms and
attitude.

Every intent is validated against its prerequisites; a failed prerequisite
leaves the state untouched and writes an error to the operator log. There
are no timers here.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict

from .config import ConsoleConfig
from .events import ConsoleLog
from .reactor import ReactorEngine

WAYPOINTS = ("DEPARTURE", "LAGRANGE L4", "EUROPA APPROACH", "EUROPA ORBIT")
AXES = ("yaw", "pitch", "roll")

BUS_C_PHASE = 1
BUS_B_PHASE = 2

STABLE_ATTITUDE_DEG = 5.0
DRIFT_ATTITUDE_DEG = 45.0


class DriftStatus(Enum):
    STABLE = "STABLE"
    DRIFTING = "DRIFTING"
    TUMBLING = "TUMBLING"


class SensorStatus(Enum):
    OFFLINE = "OFFLINE"
    CALIBRATING = "CALIBRATING"
    NOMINAL = "NOMINAL"


class RouteStatus(Enum):
    NAV_OFFLINE = "NAV OFFLINE"
    PLOTTED = "PLOTTED"
    LOCKED = "LOCKED"
    OFF_COURSE = "OFF COURSE"


class NavigationEngine:
    """
    Course and attitude control.

    Attributes:
        nav_core_repaired: True once the nav core is brought back.
        selected_waypoint: Index into WAYPOINTS.
        course_locked: True once the course is locked.
        comms_online: Partial comms uplink state.
        orientation: Attitude per axis in degrees (-180 to 180).
    """

    def __init__(self, config: ConsoleConfig, log: ConsoleLog, reactor: ReactorEngine) -> None:
        self.config = config
        self.log = log
        self.reactor = reactor

        self.nav_core_repaired: bool = False
        self.selected_waypoint: int = 0
        self.course_locked: bool = False
        self.comms_online: bool = False
        self.orientation: Dict[str, float] = {axis: 0.0 for axis in AXES}

    # -------------------------------------------------------------------------
    # Derived State
    # -------------------------------------------------------------------------

    @property
    def bus_c_stable(self) -> bool:
        """Environmental bus, powered from phase 1."""
        return self.reactor.phase >= BUS_C_PHASE

    @property
    def bus_b_online(self) -> bool:
        """Navigation bus, powered from phase 2."""
        return self.reactor.phase >= BUS_B_PHASE

    @property
    def waypoint(self) -> str:
        return WAYPOINTS[self.selected_waypoint]

    @property
    def drift_status(self) -> DriftStatus:
        worst = max(abs(v) for v in self.orientation.values())
        if worst <= STABLE_ATTITUDE_DEG:
            return DriftStatus.STABLE
        if worst <= DRIFT_ATTITUDE_DEG:
            return DriftStatus.DRIFTING
        return DriftStatus.TUMBLING

    @property
    def sensor_status(self) -> SensorStatus:
        if not self.bus_b_online:
            return SensorStatus.OFFLINE
        if self.drift_status != DriftStatus.STABLE:
            return SensorStatus.CALIBRATING
        return SensorStatus.NOMINAL

    @property
    def route_status(self) -> RouteStatus:
        if not self.nav_core_repaired:
            return RouteStatus.NAV_OFFLINE
        if not self.course_locked:
            return RouteStatus.PLOTTED
        if self.drift_status != DriftStatus.STABLE:
            return RouteStatus.OFF_COURSE
        return RouteStatus.LOCKED

    # -------------------------------------------------------------------------
    # Operator Intents
    # -------------------------------------------------------------------------

    def toggle_nav_repair(self) -> bool:
        if not self.bus_b_online:
            self.log.error("BUS B offline: NAV core unavailable")
            return False

        self.nav_core_repaired = not self.nav_core_repaired
        if self.nav_core_repaired:
            self.log.ok("NAV core repaired")
        else:
            self.log.warn("NAV core offline")
        return True

    def select_waypoint(self, index: int) -> bool:
        """
        Select a waypoint for the course.

        Args:
            index: Index into WAYPOINTS.

        Returns:
            True if the selection changed.
        """
        if not self.nav_core_repaired:
            self.log.error("NAV core offline")
            return False
        if self.course_locked:
            self.log.error(f"Course locked to {self.waypoint}")
            return False
        if (
            not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < len(WAYPOINTS)
        ):
            self.log.error(f"No waypoint at index {index!r}")
            return False

        self.selected_waypoint = index
        self.log.info(f"Waypoint selected: {self.waypoint}")
        return True

    def lock_course(self) -> bool:
        if not self.nav_core_repaired:
            self.log.error("NAV core offline")
            return False
        if self.course_locked:
            self.log.warn(f"Course already locked to {self.waypoint}")
            return False

        self.course_locked = True
        self.log.ok(f"Course locked to {self.waypoint}")
        return True

    def toggle_comms(self) -> bool:
        if not self.bus_b_online:
            self.log.error("BUS B offline")
            return False
        if not self.nav_core_repaired:
            self.log.error("NAV core required for comms routing")
            return False

        self.comms_online = not self.comms_online
        if self.comms_online:
            self.log.ok("COMMS partial uplink established")
        else:
            self.log.warn("COMMS offline")
        return True

    def set_orientation(self, axis: str, value: float) -> bool:
        """
        Set the attitude on one axis.

        Args:
            axis: yaw, pitch or roll.
            value: Angle in degrees, clamped to -180..180.

        Returns:
            True if the axis was set.
        """
        if not isinstance(axis, str) or axis not in self.orientation:
            self.log.error(f"Unknown attitude axis {axis!r}")
            return False
        try:
            value = max(-180.0, min(180.0, float(value)))
        except (TypeError, ValueError):
            self.log.error(f"Invalid {axis} angle: {value!r}")
            return False

        self.orientation[axis] = value
        return True

    def get_status(self) -> dict:
        return {
            "bus_c_stable": self.bus_c_stable,
            "bus_b_online": self.bus_b_online,
            "nav_core_repaired": self.nav_core_repaired,
            "selected_waypoint": self.selected_waypoint,
            "waypoint": self.waypoint,
            "course_locked": self.course_locked,
            "comms_online": self.comms_online,
            "orientation": dict(self.orientation),
            "drift_status": self.drift_status.value,
            "sensor_status": self.sensor_status.value,
            "route_status": self.route_status.value,
        }
