"""
Authority engine: biometrics, command access and the final directive.

Command authority moves through one-way gates:

1. Crew falls below 2 while redundancy is degraded: survival mode engages
2. Reactor phase 2 opens the concealed compartment, the files can be read
3. Survival mode + open compartment + files read: the secondary biometric
   source is enabled
4. A secondary scan declares the principal deceased and grants command
   access (identity flip)
5. With command access, a final directive resolves the ending

Nothing here runs on a timer. Automatic transitions are re-evaluated on
every reconcile and each fires at most once.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .config import ConsoleConfig
from .events import ConsoleLog
from .lifesupport import LifeSupportEngine
from .reactor import ReactorEngine

COMPARTMENT_UNLOCK_PHASE = 2

CLASSIFIED_FILES = (
    "FLIGHT_PLAN_AMENDMENT_7.log",
    "COALITION_BRIEF_REDACTED.enc",
    "MANIFEST_DISCREPANCY.txt",
    "COMM_INTERCEPT_2287-04-11.raw",
)


class PrincipalStatus(Enum):
    UNRESOLVED = "unresolved"
    DECEASED = "deceased"
    CONFIRMED_ALIVE = "confirmed_alive"


class Ending(Enum):
    """Final directive outcomes, in ascending priority."""
    PILOT = "pilot"
    USURP = "usurp"
    CONTAIN = "contain"


class AuthorityEngine:
    """
    Principal identity, access gates and ending resolution.

    Attributes:
        principal_status: Biometric status of the principal.
        redundancy_degraded: Life support redundancy switched off.
        survival_mode_engaged: One-shot, set when crew loss meets degraded
            redundancy.
        compartment_unlocked: Concealed compartment open.
        files_read: Compartment files reviewed.
        secondary_biometric_enabled: One-shot unlock of the secondary scanner.
        identity_flip_done: Command access transferred.
        redundancy_restored: PILOT directive flag.
        overlap_maintained: USURP directive flag.
        collision_course_set: CONTAIN directive flag.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        log: ConsoleLog,
        reactor: ReactorEngine,
        lifesupport: LifeSupportEngine,
    ) -> None:
        self.config = config
        self.log = log
        self.reactor = reactor
        self.lifesupport = lifesupport

        self.principal_status: PrincipalStatus = PrincipalStatus.UNRESOLVED
        self.redundancy_degraded: bool = False
        self.survival_mode_engaged: bool = False
        self.compartment_unlocked: bool = False
        self.files_read: bool = False
        self.secondary_biometric_enabled: bool = False
        self.identity_flip_done: bool = False

        self.redundancy_restored: bool = False
        self.overlap_maintained: bool = False
        self.collision_course_set: bool = False

    @property
    def ending(self) -> Optional[Ending]:
        """Resolved ending. Only defined after command access transfers."""
        if not self.identity_flip_done:
            return None
        if self.collision_course_set:
            return Ending.CONTAIN
        if self.overlap_maintained:
            return Ending.USURP
        if self.redundancy_restored:
            return Ending.PILOT
        return None

    # -------------------------------------------------------------------------
    # Operator Intents
    # -------------------------------------------------------------------------

    def toggle_redundancy(self) -> bool:
        self.redundancy_degraded = not self.redundancy_degraded
        if self.redundancy_degraded:
            self.log.warn("Life support redundancy DEGRADED")
        else:
            self.log.ok("Redundancy systems RESTORED")
        return True

    def unlock_compartment(self) -> bool:
        if self.reactor.phase < COMPARTMENT_UNLOCK_PHASE:
            self.log.error("Compartment lock requires phase 2 reactor")
            return False
        if self.compartment_unlocked:
            return False

        self.compartment_unlocked = True
        self.log.warn("Concealed compartment UNLOCKED, files accessible")
        return True

    def read_files(self) -> bool:
        if not self.compartment_unlocked:
            self.log.error("Compartment still locked")
            return False
        if self.files_read:
            return False

        self.files_read = True
        self.log.warn("Principal documents reviewed: flight plan discrepancy confirmed")
        self.log.warn("Coalition double-cross evidence found in COMM_INTERCEPT")
        return True

    def scan_primary(self) -> bool:
        if self.principal_status == PrincipalStatus.CONFIRMED_ALIVE:
            return False

        self.principal_status = PrincipalStatus.UNRESOLVED
        self.log.error("PRIMARY BIOMETRIC SCAN: principal status UNRESOLVED (no response)")
        return True

    def scan_secondary(self) -> bool:
        if not self.secondary_biometric_enabled:
            if self.survival_mode_engaged and self.compartment_unlocked and not self.files_read:
                self.log.warn("SECONDARY SOURCE DETECTED: justification token required (read the files)")
            elif not self.survival_mode_engaged:
                self.log.error("SECONDARY SOURCE DISABLED: power conservation / security lock")
            else:
                self.log.error("SECONDARY SOURCE LOCKED: conditions not met")
            return False
        if self.identity_flip_done:
            return False

        self.identity_flip_done = True
        self.principal_status = PrincipalStatus.DECEASED
        self.log.warn("DEAD-HAND SCAN ACCEPTED: principal status DECEASED")
        self.log.ok("COMMAND-LEVEL ACCESS GRANTED")
        return True

    def choose_ending(self, choice: str) -> bool:
        """
        Set the final directive.

        Args:
            choice: pilot, usurp or contain.

        Returns:
            True if the directive was set.
        """
        if not self.identity_flip_done:
            self.log.error("Command access required")
            return False
        try:
            ending = Ending(choice)
        except ValueError:
            self.log.error(f"Unknown directive '{choice}'")
            return False

        self.redundancy_restored = ending == Ending.PILOT
        self.overlap_maintained = ending == Ending.USURP
        self.collision_course_set = ending == Ending.CONTAIN
        self.log.warn(f"Final directive set: {ending.value.upper()}")
        return True

    # -------------------------------------------------------------------------
    # Automatic Transitions
    # -------------------------------------------------------------------------

    def reconcile(self) -> None:
        if (
            not self.survival_mode_engaged
            and self.lifesupport.crew_count < self.config.survival_crew_threshold
            and self.redundancy_degraded
        ):
            self.survival_mode_engaged = True
            self.log.warn("SURVIVAL MODE ENGAGED: authority structure compromised")

        if (
            not self.secondary_biometric_enabled
            and self.survival_mode_engaged
            and self.compartment_unlocked
            and self.files_read
        ):
            self.secondary_biometric_enabled = True
            self.log.warn("SECONDARY BIOMETRIC SOURCE ENABLED: scan when ready")

    def get_status(self) -> dict:
        ending = self.ending
        return {
            "principal_status": self.principal_status.value,
            "redundancy_degraded": self.redundancy_degraded,
            "survival_mode_engaged": self.survival_mode_engaged,
            "compartment_unlocked": self.compartment_unlocked,
            "files": list(CLASSIFIED_FILES) if self.compartment_unlocked else [],
            "files_read": self.files_read,
            "secondary_biometric_enabled": self.secondary_biometric_enabled,
            "identity_flip_done": self.identity_flip_done,
            "ending": ending.value if ending else None,
        }
