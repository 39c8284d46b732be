"""
Tests for the operator log.
"""

import logging

import pytest

from shipconsole import ConsoleLog, LogEntry, Severity, VirtualClock


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def log(clock):
    return ConsoleLog(clock)


class TestConsoleLog:
    """Tests for writing and reading the log."""

    def test_write_stamps_clock_time(self, clock, log):
        clock.now = 4.25
        entry = log.warn("Hull stress")
        assert entry == LogEntry("Hull stress", Severity.WARN, 4.25)
        assert log.last is entry

    def test_severity_helpers(self, log):
        log.ok("a")
        log.info("b")
        log.warn("c")
        log.error("d")
        assert [e.severity for e in log.entries] == [
            Severity.OK, Severity.INFO, Severity.WARN, Severity.ERROR,
        ]

    def test_capped_to_most_recent(self, log):
        for i in range(100):
            log.info(f"line {i}")
        assert len(log) == 80
        assert log.entries[0].message == "line 20"
        assert log.last.message == "line 99"

    def test_custom_capacity(self, clock):
        small = ConsoleLog(clock, capacity=3)
        for i in range(5):
            small.info(str(i))
        assert small.messages() == ["2", "3", "4"]

    def test_empty_log(self, log):
        assert len(log) == 0
        assert log.last is None
        assert log.entries == []

    def test_by_severity(self, log):
        log.ok("fine")
        log.error("broken")
        log.ok("fine again")
        assert [e.message for e in log.by_severity(Severity.OK)] == ["fine", "fine again"]

    def test_since(self, clock, log):
        log.info("early")
        clock.now = 5.0
        log.info("on time")
        clock.now = 6.0
        log.info("late")
        assert [e.message for e in log.since(5.0)] == ["on time", "late"]

    def test_str_format(self, clock, log):
        clock.now = 12.34
        entry = log.error("REACTOR OVERLOAD")
        assert str(entry) == "T+12.3s [ERROR] REACTOR OVERLOAD"


class TestCallbacks:
    """Tests for entry callbacks."""

    def test_callback_receives_entries(self, log):
        seen = []
        log.add_callback(seen.append)
        log.ok("online")
        assert [e.message for e in seen] == ["online"]

    def test_removed_callback_not_called(self, log):
        seen = []
        log.add_callback(seen.append)
        log.remove_callback(seen.append)
        log.ok("online")
        assert seen == []

    def test_failing_callback_does_not_break_log(self, log, caplog):
        seen = []

        def broken(entry):
            raise RuntimeError("display gone")

        log.add_callback(broken)
        log.add_callback(seen.append)
        with caplog.at_level(logging.ERROR, logger="shipconsole.events"):
            log.warn("still logged")

        assert log.last.message == "still logged"
        assert len(seen) == 1
        assert "Console log callback failed" in caplog.text

    def test_entries_mirrored_to_logging(self, clock, log, caplog):
        clock.now = 1.0
        with caplog.at_level(logging.INFO, logger="shipconsole.events"):
            log.ok("Reactor phase 1 reached")
        assert "T+1.0s Reactor phase 1 reached" in caplog.text
