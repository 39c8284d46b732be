"""
Virtual clock and keyed event scheduler for the ship console.

The console runs as a single-threaded discrete-event simulation. Every
delayed transition is an entry in one event table keyed by kind:
scheduling a kind replaces whatever was pending for it, so timers of the
same kind never stack.

watch() re-arms a delayed transition only when the inputs it depends on
change, which mirrors a reactive effect that restarts its timeout whenever
one of its inputs is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional

logger = logging.getLogger(__name__)


class VirtualClock:
    """Simulation time in seconds, advanced only by the scheduler."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __repr__(self) -> str:
        return f"VirtualClock(now={self.now:.3f})"


@dataclass
class ScheduledEvent:
    """
    A pending transition.

    Attributes:
        kind: Table key. At most one event per kind is pending.
        due: Simulation time at which the event fires.
        callback: Called with no arguments when the event fires.
        seq: Insertion order, breaks ties between events due together.
        interval: Repeat period for periodic events, None for one-shot.
    """
    kind: str
    due: float
    callback: Callable[[], None]
    seq: int
    interval: Optional[float] = None


class Scheduler:
    """
    Single event table driving every timer of the console.

    Usage:
        clock = VirtualClock()
        scheduler = Scheduler(clock)
        scheduler.schedule("explosion", 10.0, on_explode)
        scheduler.run_until(12.0)
    """

    def __init__(self, clock: VirtualClock) -> None:
        self.clock = clock
        self._events: Dict[str, ScheduledEvent] = {}
        self._signatures: Dict[str, Hashable] = {}
        self._seq = 0

    # -------------------------------------------------------------------------
    # Event Table
    # -------------------------------------------------------------------------

    def schedule(
        self,
        kind: str,
        delay: float,
        callback: Callable[[], None],
        interval: Optional[float] = None,
    ) -> ScheduledEvent:
        """
        Schedule an event, replacing any pending event of the same kind.

        Args:
            kind: Event kind.
            delay: Seconds from now until the event fires.
            callback: Function to call when the event fires.
            interval: If set, the event repeats with this period.

        Returns:
            The scheduled event.

        Raises:
            ValueError: If delay is negative or interval is not positive.
        """
        if delay < 0:
            raise ValueError(f"Negative delay for '{kind}': {delay}")
        if interval is not None and interval <= 0:
            raise ValueError(f"Non-positive interval for '{kind}': {interval}")

        self._seq += 1
        event = ScheduledEvent(
            kind=kind,
            due=self.clock.now + delay,
            callback=callback,
            seq=self._seq,
            interval=interval,
        )
        self._events[kind] = event
        return event

    def every(self, kind: str, interval: float, callback: Callable[[], None]) -> ScheduledEvent:
        """Schedule a periodic event whose first firing is one interval away."""
        return self.schedule(kind, interval, callback, interval=interval)

    def cancel(self, kind: str) -> bool:
        """
        Cancel the pending event of a kind.

        Returns:
            True if an event was pending.
        """
        return self._events.pop(kind, None) is not None

    def is_pending(self, kind: str) -> bool:
        return kind in self._events

    def due_time(self, kind: str) -> Optional[float]:
        """Get when the pending event of a kind fires, or None."""
        event = self._events.get(kind)
        return event.due if event else None

    def pending_kinds(self) -> List[str]:
        """Pending event kinds in firing order."""
        return [e.kind for e in sorted(self._events.values(), key=lambda e: (e.due, e.seq))]

    def clear(self) -> None:
        """Drop every pending event and forget all watch signatures."""
        self._events.clear()
        self._signatures.clear()

    # -------------------------------------------------------------------------
    # Watches
    # -------------------------------------------------------------------------

    def watch(
        self,
        kind: str,
        signature: Hashable,
        armed: bool,
        delay: float,
        callback: Callable[[], None],
        interval: Optional[float] = None,
    ) -> bool:
        """
        Keep a delayed transition in step with the inputs that trigger it.

        When the signature differs from the one seen last time, the pending
        event of this kind is cancelled and, if armed, scheduled afresh.
        An unchanged signature leaves the table alone.

        Args:
            kind: Event kind.
            signature: Hashable snapshot of every input the trigger reads.
            armed: Whether the trigger condition currently holds.
            delay: Seconds until the transition fires.
            callback: Transition to run. Must re-check its own precondition.
            interval: If set, the event repeats with this period.

        Returns:
            True if the signature changed.
        """
        if kind in self._signatures and self._signatures[kind] == signature:
            return False

        self._signatures[kind] = signature
        self.cancel(kind)
        if armed:
            self.schedule(kind, delay, callback, interval=interval)
        return True

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def next_due(self, until: float) -> Optional[ScheduledEvent]:
        """Get the earliest event due at or before a time, or None."""
        due = [e for e in self._events.values() if e.due <= until]
        if not due:
            return None
        return min(due, key=lambda e: (e.due, e.seq))

    def run_until(
        self,
        until: float,
        after_each: Optional[Callable[[], Any]] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> int:
        """
        Fire every event due up to a time, in due order.

        The clock is set to each event's due time before it fires, then to
        the target time once no event is left.

        Args:
            until: Target simulation time.
            after_each: Called after every fired event.
            should_stop: Checked before each event; True ends the run early.

        Returns:
            Number of events fired.
        """
        fired = 0

        while not (should_stop and should_stop()):
            event = self.next_due(until)
            if event is None:
                break

            del self._events[event.kind]
            self.clock.now = event.due

            # Re-queue periodic events before firing so the callback may cancel
            if event.interval is not None:
                self._seq += 1
                self._events[event.kind] = ScheduledEvent(
                    kind=event.kind,
                    due=event.due + event.interval,
                    callback=event.callback,
                    seq=self._seq,
                    interval=event.interval,
                )

            logger.debug("T+%.3fs firing %s", self.clock.now, event.kind)
            event.callback()
            fired += 1

            if after_each:
                after_each()

        if until > self.clock.now:
            self.clock.now = until

        return fired
