"""Analysis of JSONL test runs: outcomes, failing steps and scraped results."""

from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

from inpost_chat_tests import console
from inpost_chat_tests.output import read_events


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class StepResult:
    """Individual step result."""
    step_name: str
    outcome: str
    duration_ms: Optional[int] = None
    message: Optional[str] = None
    step_type: Optional[str] = None  # "action", "info" or "wait"


@dataclass
class ScrapeResult:
    """Responses and actions scraped by one scenario."""
    name: str
    messages: List[str] = field(default_factory=list)
    responses: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)


@dataclass
class TestResult:
    """Individual test result with steps and scraped results."""
    __test__ = False

    nodeid: str
    name: str
    outcome: str
    duration_seconds: Optional[float] = None
    message: Optional[str] = None
    markers: List[str] = field(default_factory=list)
    steps: List[StepResult] = field(default_factory=list)
    scrapes: List[ScrapeResult] = field(default_factory=list)


@dataclass
class AnalysisResult:
    """Complete analysis of a test run."""

    # === Summary Statistics ===
    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    skipped_tests: int = 0

    total_steps: int = 0
    passed_steps: int = 0
    failed_steps: int = 0

    # === Scraping ===
    total_responses: int = 0
    total_actions: int = 0
    empty_scrapes: int = 0

    # === Timing ===
    session_start: Optional[str] = None
    session_end: Optional[str] = None
    total_duration_seconds: float = 0.0

    # === Details ===
    failing_steps: List[Tuple[str, int]] = field(default_factory=list)
    tests: List[TestResult] = field(default_factory=list)

    source_file: Optional[str] = None

    @property
    def pass_rate(self) -> float:
        """Test pass rate as percentage of non-skipped tests."""
        evaluated = self.total_tests - self.skipped_tests
        if evaluated <= 0:
            return 0.0
        return (self.passed_tests / evaluated) * 100

    @property
    def step_pass_rate(self) -> float:
        """Step pass rate as percentage."""
        if self.total_steps == 0:
            return 0.0
        return (self.passed_steps / self.total_steps) * 100

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["pass_rate"] = round(self.pass_rate, 1)
        data["step_pass_rate"] = round(self.step_pass_rate, 1)
        data["failing_steps"] = [
            {"step_name": name, "count": count} for name, count in self.failing_steps
        ]
        return data


# =============================================================================
# Analysis
# =============================================================================

class _RunLog:
    """Folds run events into an AnalysisResult, one handler per event type."""

    def __init__(self, source_file: Optional[str]):
        self.result = AnalysisResult(source_file=source_file)
        self.tests: Dict[str, TestResult] = {}
        self.current: Optional[TestResult] = None
        self.failing = Counter()

    def feed(self, event: Dict[str, Any]) -> None:
        handler = getattr(self, f"on_{event.get('event_type')}", None)
        if handler:
            handler(event)

    def _owner(self, event: Dict[str, Any]) -> Optional[TestResult]:
        return self.tests.get(event.get("nodeid")) or self.current

    def on_session_start(self, event):
        self.result.session_start = event.get("timestamp")

    def on_session_end(self, event):
        result = self.result
        result.session_end = event.get("timestamp")
        if result.session_start and result.session_end:
            elapsed = datetime.fromisoformat(result.session_end) - datetime.fromisoformat(result.session_start)
            result.total_duration_seconds = elapsed.total_seconds()

    def on_test_start(self, event):
        nodeid = event.get("nodeid", "")
        self.current = self.tests[nodeid] = TestResult(
            nodeid=nodeid,
            name=event.get("name", ""),
            outcome="unknown",
            markers=event.get("markers") or [],
        )

    def on_test_end(self, event):
        test = self.tests.get(event.get("nodeid", ""))
        self.current = None
        if not test:
            return
        test.outcome = event.get("outcome", "unknown")
        test.duration_seconds = event.get("duration_seconds")
        test.message = event.get("message")

        self.result.total_tests += 1
        counter = {"passed": "passed_tests", "failed": "failed_tests", "skipped": "skipped_tests"}.get(test.outcome)
        if counter:
            setattr(self.result, counter, getattr(self.result, counter) + 1)
        self.result.tests.append(test)

    def on_step(self, event):
        step = StepResult(
            step_name=event.get("step_name", ""),
            outcome=event.get("outcome", "unknown"),
            duration_ms=event.get("duration_ms"),
            message=event.get("message"),
            step_type=event.get("step_type"),
        )
        self.result.total_steps += 1
        if step.outcome == "passed":
            self.result.passed_steps += 1
        elif step.outcome == "failed":
            self.result.failed_steps += 1
            self.failing[step.step_name] += 1

        test = self._owner(event)
        if test:
            test.steps.append(step)

    def on_result(self, event):
        data = event.get("data") or {}
        scrape = ScrapeResult(
            name=event.get("step_name", ""),
            messages=data.get("messages", []),
            responses=data.get("responses", []),
            actions=data.get("actions", []),
        )
        self.result.total_responses += len(scrape.responses)
        self.result.total_actions += len(scrape.actions)
        if not (scrape.responses or scrape.actions):
            self.result.empty_scrapes += 1

        test = self._owner(event)
        if test:
            test.scrapes.append(scrape)


def analyze_events(events: List[Dict[str, Any]], source_file: Optional[str] = None) -> AnalysisResult:
    """Build an analysis from already parsed events."""
    log = _RunLog(source_file)
    for event in events:
        log.feed(event)
    log.result.failing_steps = log.failing.most_common()
    return log.result


def analyze_jsonl(file_path: Path) -> AnalysisResult:
    """Analyze a JSONL file written by the runner.

    Args:
        file_path: Path to the JSONL file

    Returns:
        AnalysisResult with outcomes, steps and scraped results
    """
    return analyze_events(read_events(file_path), source_file=str(file_path))


# =============================================================================
# Print Functions
# =============================================================================

def print_summary(analysis: AnalysisResult) -> None:
    print("\n" + console.bold("=" * 60))
    print(console.bold("TEST RUN ANALYSIS"))
    print(console.bold("=" * 60))

    if analysis.source_file:
        print(f"\n{console.label('Source:')} {console.dim(analysis.source_file)}")
    print(f"{console.label('Session:')} {analysis.session_start or 'N/A'}")
    print(f"{console.label('Duration:')} {console.elapsed(analysis.total_duration_seconds)}")

    failed = analysis.failed_tests
    print(f"\n{console.bold('--- Test Summary ---')}")
    print(f"  Total:      {analysis.total_tests}")
    print(f"  Passed:     {console.success(str(analysis.passed_tests))}")
    print(f"  Failed:     {console.nonzero(failed)}")
    print(f"  Skipped:    {console.dim(str(analysis.skipped_tests))}")
    print(f"  Pass Rate:  {console.percentage(analysis.pass_rate)}")

    if analysis.total_steps > 0:
        print(f"\n{console.bold('--- Step Summary ---')}")
        print(f"  Total:      {analysis.total_steps}")
        print(f"  Passed:     {console.success(str(analysis.passed_steps))}")
        print(f"  Failed:     {console.nonzero(analysis.failed_steps)}")
        print(f"  Pass Rate:  {console.percentage(analysis.step_pass_rate)}")

    print(f"\n{console.bold('--- Scraping Summary ---')}")
    print(f"  Responses:      {analysis.total_responses}")
    print(f"  Actions:        {analysis.total_actions}")
    print(f"  Empty scrapes:  {console.nonzero(analysis.empty_scrapes, console.warn)}")

    print(console.bold("=" * 60))


def print_failures(analysis: AnalysisResult) -> None:
    failed_tests = [t for t in analysis.tests if t.outcome == "failed"]
    if not failed_tests and not analysis.failing_steps:
        print(f"\n{console.success('No failures to report.')}")
        return

    print(f"\n{console.bold('--- Failure Analysis ---')}")
    if analysis.failing_steps:
        print(f"\n{console.label('Most Failing Steps:')}")
        for step_name, count in analysis.failing_steps[:5]:
            print(f"  {console.error(str(count))} failures: {step_name}")

    for test in failed_tests:
        print(f"\n  {console.error('FAILED')}: {test.name}")
        if test.message:
            print(f"    Error: {console.dim(test.message)}")
        for step in test.steps:
            if step.outcome == "failed":
                print(f"      - {step.step_name}")
                if step.message:
                    print(f"        {console.dim(step.message)}")


def print_steps(analysis: AnalysisResult) -> None:
    print(f"\n{console.bold('--- Step Details ---')}")
    for test in analysis.tests:
        duration = f" ({console.elapsed(test.duration_seconds)})" if test.duration_seconds else ""
        print(f"[{console.outcome_tag(test.outcome)}] {test.name}{duration}")
        if not test.steps:
            print(f"    {console.dim('(no steps)')}")
        for step in test.steps:
            icon = console.step_icon(step.outcome, step.step_type)
            dur = "" if step.step_type == "info" else console.duration_ms(step.duration_ms)
            print(f"    {icon} {step.step_name}{dur}")
        print()


def print_results(analysis: AnalysisResult) -> None:
    print(f"\n{console.bold('--- Scraped Results ---')}")
    for test in analysis.tests:
        for scrape in test.scrapes:
            sent = console.quoted(scrape.messages)
            print(f"\n{console.label(scrape.name)} {console.dim(test.name)}")
            print(f"  Messages sent: {sent}")
            print(f"  Bot responses ({len(scrape.responses)}):")
            for index, response in enumerate(scrape.responses, 1):
                print(f"    {index}. \"{response}\"")
            print(f"  Action buttons ({len(scrape.actions)}):")
            for index, action in enumerate(scrape.actions, 1):
                print(f"    {index}. \"{action}\"")
