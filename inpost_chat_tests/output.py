"""Output writers for test run events."""

import json
from pathlib import Path
from typing import List, TextIO, Optional
from datetime import datetime

from inpost_chat_tests.plugin import TestEvent


class JSONLWriter:
    """Writes test events to a JSONL file as they happen."""

    def __init__(self, output_path: Path):
        self.output_path = output_path
        self._file: Optional[TextIO] = None

    def __enter__(self):
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.output_path, 'w', encoding='utf-8')
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()
            self._file = None

    def write_event(self, event: TestEvent):
        """Write a single event as a JSON line."""
        if self._file:
            self._file.write(json.dumps(event.to_dict(), ensure_ascii=False) + '\n')
            self._file.flush()


def read_events(input_path: Path) -> List[dict]:
    """Read events back from a JSONL file, skipping blank lines."""
    events = []
    with open(input_path, encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                events.append(json.loads(line))
    return events


def write_json(data: dict, output_path: Path) -> None:
    """Write data to a pretty-printed JSON file."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def generate_output_filename(prefix: str = "test_run", timestamp: Optional[int] = None) -> str:
    """Generate timestamped output filename.

    Args:
        prefix: Filename prefix (default: 'test_run')
        timestamp: Unix timestamp to use instead of now

    Returns:
        Filename with Unix timestamp, e.g., 'test_run_1706367000.jsonl'
    """
    if timestamp is None:
        timestamp = int(datetime.now().timestamp())
    return f"{prefix}_{timestamp}.jsonl"
