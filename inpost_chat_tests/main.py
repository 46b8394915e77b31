"""Command line interface: run the InPost chat suite or analyze a run log."""

import argparse
import json
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from inpost_chat_tests.config import get_settings, load_settings_from_json
from inpost_chat_tests import console

DEFAULT_CONFIG = Path("config.json")

# Plausible run timestamps: 2025-01-01 .. 2100-01-01
MIN_TIMESTAMP = 1735689600
MAX_TIMESTAMP = 4102444800

RUN_LOG_PATTERN = re.compile(r'_(\d{10,})\.jsonl?$')


def extract_timestamp_from_filename(filename: str) -> Optional[int]:
    """Unix timestamp embedded in a run log name like 'test_run_1790000000.jsonl'."""
    match = RUN_LOG_PATTERN.search(filename)
    if not match:
        return None
    value = int(match.group(1))
    return value if MIN_TIMESTAMP <= value <= MAX_TIMESTAMP else None


def get_timestamp_for_output(input_path: Optional[Path] = None) -> int:
    """Reuse the run log's timestamp so the analysis pairs with it."""
    timestamp = extract_timestamp_from_filename(input_path.name) if input_path else None
    return timestamp or int(datetime.now().timestamp())


def _fail(message: str) -> int:
    console.log(f"{console.error('Error:')} {message}")
    return 1


def load_config(args) -> bool:
    """Apply -c/--config, or ./config.json when present."""
    config_path = Path(args.config) if args.config else DEFAULT_CONFIG
    if not config_path.exists():
        if args.config:
            _fail(f"Config file not found: {config_path}")
            return False
        return True

    try:
        load_settings_from_json(config_path)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        _fail(f"Invalid config file: {e}")
        return False
    console.log(f"Loaded config from: {config_path}")
    return True


def resolve_output_path(output: Optional[str], reports_path: Path) -> Path:
    from inpost_chat_tests.output import generate_output_filename

    if not output:
        return reports_path / generate_output_filename()
    path = Path(output)
    return path / generate_output_filename() if path.is_dir() else path


def _print_run_header(settings, headless: bool, markers, live: bool, output_path: Path):
    console.log(f"Chatting with MAT at {settings.chat_url}")
    for name, value in (
        ("Browser", f"{settings.browser} ({'headless' if headless else 'headed'})"),
        ("Waits", settings.wait_strategy),
        ("Markers", ", ".join(markers) if markers else "all"),
        ("Live scenarios", "yes" if live else "skipped"),
        ("Run log", output_path),
    ):
        console.log(f"  {name}: {value}")
    console.log("")


def _print_run_summary(summary):
    rule = console.dim("=" * 50)
    completed = summary.status.value == "completed"
    console.log(f"\n{rule}")
    console.log(
        f"Run {console.info(summary.run_id[:8])} "
        f"{console.success('COMPLETED') if completed else console.error('FAILED')} "
        f"in {console.elapsed(summary.duration_seconds)}"
    )
    console.log(
        f"Tests: {console.success(str(summary.passed))} passed, "
        f"{console.nonzero(summary.failed)} failed, {summary.skipped} skipped of {summary.total}"
    )
    console.log(f"Scraped: {summary.responses} bot responses, {summary.actions} action buttons")
    console.log(f"Run log: {console.dim(summary.output_file)}")
    console.log(rule)


def cli_run(args):
    from inpost_chat_tests.runner import run_suite

    if not load_config(args):
        return 1
    if args.color:
        console.force_color(True)

    settings = get_settings()
    markers = args.marker.split(",") if args.marker else None
    headless = settings.headless and not args.headed
    live = not args.offline
    output_path = resolve_output_path(args.output, settings.reports_path)

    _print_run_header(settings, headless, markers, live, output_path)
    summary = run_suite(markers=markers, headless=headless, output_path=output_path, live=live)
    _print_run_summary(summary)
    return 0 if summary.status.value == "completed" else 1


def cli_analyze(args):
    from inpost_chat_tests.analyze import (
        analyze_jsonl, print_summary, print_failures, print_steps, print_results
    )
    from inpost_chat_tests.output import write_json

    if not load_config(args):
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        return _fail(f"File not found: {input_path}")
    try:
        analysis = analyze_jsonl(input_path)
    except json.JSONDecodeError as e:
        return _fail(f"Invalid JSONL file: {e}")

    print_summary(analysis)
    for wanted, section in (
        (args.results, print_results),
        (args.steps, print_steps),
        (args.failures, print_failures),
    ):
        if wanted or args.all:
            section(analysis)

    json_path = get_settings().reports_path / f"analysis_{get_timestamp_for_output(input_path)}.json"
    write_json(analysis.to_dict(), json_path)
    console.log(f"Analysis JSON written to: {json_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-c", "--config", help=f"JSON config file (default: ./{DEFAULT_CONFIG} if present)")

    parser = argparse.ArgumentParser(
        prog="inpost-chat-tests",
        description="Playwright tests for the InPost MAT chatbot",
    )
    commands = parser.add_subparsers(dest="command")

    run = commands.add_parser("run", parents=[common], help="Run the suite and log events to JSONL")
    run.add_argument("-m", "--marker", help="Comma-separated markers, e.g. unit,scenario")
    run.add_argument("--headed", action="store_true", help="Show the browser window")
    run.add_argument("--offline", action="store_true", help="Skip scenarios that talk to inpost.pl")
    run.add_argument("-o", "--output", help="Run log file, or a directory for it")
    run.add_argument("--color", action="store_true", help="Force colored output")
    run.set_defaults(func=cli_run)

    analyze = commands.add_parser("analyze", parents=[common], help="Summarize a JSONL run log")
    analyze.add_argument("input", help="Run log to analyze")
    analyze.add_argument("--results", action="store_true", help="Show scraped responses and actions")
    analyze.add_argument("--steps", action="store_true", help="Show every step")
    analyze.add_argument("--failures", action="store_true", help="Show failing tests and steps")
    analyze.add_argument("--all", action="store_true", help="Show every section")
    analyze.set_defaults(func=cli_analyze)

    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
