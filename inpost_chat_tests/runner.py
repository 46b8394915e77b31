"""In-process pytest runs with live console output and a JSONL event log."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional

import pytest

from inpost_chat_tests.config import Settings, get_settings
from inpost_chat_tests.plugin import ResultCollectorPlugin, get_current_plugin, set_current_plugin, TestEvent
from inpost_chat_tests.output import JSONLWriter, generate_output_filename
from inpost_chat_tests import console


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunSummary:
    """Counters for one suite run, fed event by event."""

    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: RunStatus = RunStatus.RUNNING
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    responses: int = 0
    actions: int = 0
    duration_seconds: float = 0
    output_file: Optional[str] = None

    def record(self, event: TestEvent) -> None:
        if event.event_type == "result":
            data = event.data or {}
            self.responses += len(data.get("responses", []))
            self.actions += len(data.get("actions", []))
        elif event.event_type == "test_end":
            self.total += 1
            if event.outcome == "passed":
                self.passed += 1
            elif event.outcome == "skipped":
                self.skipped += 1
            elif event.outcome == "failed":
                self.failed += 1

    def finish(self, exit_code: int) -> None:
        self.completed_at = datetime.now()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
        self.status = RunStatus.COMPLETED if exit_code == 0 else RunStatus.FAILED


def print_event(event: TestEvent) -> None:
    """Echo one event to the terminal; skipped tests stay silent."""
    if event.event_type == "test_start":
        console.writeln(f"\n{console.label('TEST:')} {console.info(event.name)}")

    elif event.event_type == "step":
        icon = console.step_icon(event.outcome, event.step_type)
        console.writeln(f"  {icon} {event.step_name}{console.duration_ms(event.duration_ms)}")
        if event.message and event.outcome == "failed":
            console.writeln(" " * 6 + console.error(event.message))

    elif event.event_type == "result":
        data = event.data or {}
        console.writeln(f"  {console.label('RESULT:')} {event.step_name}")
        for line in console.scraped_lines(data.get("responses", []), data.get("actions", [])):
            console.writeln(line)

    elif event.event_type == "test_end" and event.outcome != "skipped":
        status = {
            "passed": console.success("PASSED"),
            "failed": console.error("FAILED"),
        }.get(event.outcome, console.warn(str(event.outcome).upper()))
        took = console.dim(f" ({event.duration_seconds:.2f}s)") if event.duration_seconds else ""
        console.writeln(f"  => {status}{took}")
        if event.message:
            console.writeln(f"     {console.error('Error:')} {event.message}")


class SuiteRunner:
    """Runs the bundled test suite under the event-collecting plugin."""

    tests_dir = Path(__file__).parent / "tests"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def pytest_args(
        self,
        markers: Optional[List[str]] = None,
        headless: bool = True,
        live: bool = True,
    ) -> List[str]:
        args = [str(self.tests_dir), "--browser", self.settings.browser]
        if markers:
            args += ["-m", " or ".join(markers)]
        if not headless:
            args.append("--headed")
        if live:
            args.append("--live")
        return args

    def run(
        self,
        markers: Optional[List[str]] = None,
        headless: bool = True,
        output_path: Optional[Path] = None,
        live: bool = True,
    ) -> RunSummary:
        """Run the suite, writing every event to JSONL as it happens."""
        summary = RunSummary()
        output_path = output_path or self.settings.reports_path / generate_output_filename()
        summary.output_file = str(output_path)

        with JSONLWriter(output_path) as writer:
            def on_event(event: TestEvent):
                writer.write_event(event)
                summary.record(event)
                print_event(event)

            plugin = ResultCollectorPlugin(on_event=on_event)
            previous = get_current_plugin()
            set_current_plugin(plugin)
            try:
                exit_code = pytest.main(self.pytest_args(markers, headless, live), plugins=[plugin])
            finally:
                set_current_plugin(previous)

        summary.finish(exit_code)
        return summary


def run_suite(
    markers: Optional[List[str]] = None,
    headless: bool = True,
    output_path: Optional[Path] = None,
    live: bool = True,
) -> RunSummary:
    return SuiteRunner().run(markers=markers, headless=headless, output_path=output_path, live=live)
