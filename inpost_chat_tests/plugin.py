"""pytest plugin turning a test run into a stream of TestEvents."""

from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, Optional, List
from datetime import datetime
import time
import pytest

# Markers that describe mechanics rather than what a test covers
IGNORED_MARKERS = ('parametrize', 'usefixtures', 'skip', 'skipif')


@dataclass
class TestEvent:
    __test__ = False

    event_type: str
    timestamp: str = field(
        default_factory=lambda: datetime.now().isoformat())
    nodeid: str = None
    name: str = None
    location: str = None
    outcome: str = None
    duration_seconds: float = None
    duration_ms: int = None
    message: str = None
    step_name: str = None
    markers: List[str] = None
    step_type: str = None  # "action", "info", or "wait"
    data: Optional[Dict[str, Any]] = None  # transcript of a "result" event

    def to_dict(self):
        return {k: v for k, v in asdict(self).items() if v is not None}


class ResultCollectorPlugin:
    """Collects session, test, step and result events; forwards each to on_event."""

    def __init__(self, on_event: Callable[[TestEvent], None] = None):
        self.on_event = on_event
        self.results: List[TestEvent] = []
        self._current_test_start: float = None
        self._current_nodeid: str = None
        self._current_test_name: str = None

    def _emit(self, event: TestEvent):
        self.results.append(event)
        if self.on_event:
            self.on_event(event)

    def emit_for_current_test(self, event: TestEvent):
        """Attribute an in-test event to the running test and emit it."""
        event.nodeid = self._current_nodeid
        event.name = self._current_test_name
        self._emit(event)

    def _test_end(self, item, outcome: str, message: str = None) -> TestEvent:
        elapsed = time.time() - self._current_test_start if self._current_test_start else None
        return TestEvent(
            "test_end",
            nodeid=item.nodeid,
            name=item.name,
            outcome=outcome,
            duration_seconds=round(elapsed, 3) if elapsed else None,
            message=message,
        )

    def pytest_sessionstart(self, session):
        self._emit(TestEvent("session_start"))

    def pytest_runtest_logstart(self, nodeid, location):
        self._current_test_start = time.time()
        self._current_nodeid = nodeid
        self._current_test_name = nodeid.split("::")[-1]

    def pytest_runtest_setup(self, item):
        markers = [m.name for m in item.iter_markers() if m.name not in IGNORED_MARKERS]
        self._emit(TestEvent(
            "test_start",
            nodeid=item.nodeid,
            name=item.name,
            location=item.location[0],
            markers=markers or None,
        ))

    def pytest_runtest_makereport(self, item, call):
        if call.excinfo:
            skipped = call.excinfo.errisinstance(pytest.skip.Exception)
            message = str(call.excinfo.value).replace("\n", "\n" + " " * 5)
            self._emit(self._test_end(item, "skipped" if skipped else "failed", message))
        elif call.when == "call":
            self._emit(self._test_end(item, "passed"))
        else:
            return
        self._current_nodeid = None
        self._current_test_name = None

    def pytest_sessionfinish(self, session, exitstatus):
        self._emit(TestEvent("session_end", outcome="passed" if exitstatus == 0 else "failed"))


# Plugin receiving step and result events from inside tests
_current_plugin: Optional[ResultCollectorPlugin] = None


def set_current_plugin(plugin: Optional[ResultCollectorPlugin]):
    global _current_plugin
    _current_plugin = plugin


def get_current_plugin() -> Optional[ResultCollectorPlugin]:
    return _current_plugin


def log_step(name: str, outcome: str = "passed", message: str = None, duration_ms: int = None, start_time: float = None, step_type: str = "action"):
    """Log a test step event.

    Args:
        name: Step description
        outcome: "passed" or "failed"
        message: Optional error message
        duration_ms: Duration in milliseconds (if not using start_time)
        start_time: time.time() at step start; the duration is derived from it
        step_type: "action" (timed), "info" (no timing), or "wait" (timed)
    """
    if not _current_plugin:
        return
    ms = int((time.time() - start_time) * 1000) if start_time else duration_ms
    _current_plugin.emit_for_current_test(TestEvent(
        "step",
        step_name=name,
        outcome=outcome,
        message=message,
        duration_ms=ms,
        step_type=step_type,
    ))


def log_result(name: str, data: Dict[str, Any]):
    """Log what a scenario scraped, usually ChatTranscript.to_dict()."""
    if _current_plugin:
        _current_plugin.emit_for_current_test(TestEvent("result", step_name=name, data=data))
