"""Terminal output for test runs and run analysis."""

import os
from typing import Callable, Iterable, List, Optional

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
CYAN = "\033[36m"
YELLOW = "\033[33m"
BRIGHT_GREEN = "\033[92m"
BRIGHT_RED = "\033[91m"
BRIGHT_CYAN = "\033[96m"

# None means: decide from NO_COLOR and whether stdout is a terminal
_force_color: Optional[bool] = None


def use_color() -> bool:
    if _force_color is not None:
        return _force_color
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return os.isatty(1)
    except OSError:
        return False


def force_color(enabled: Optional[bool]):
    """Force colors on or off; None restores autodetection."""
    global _force_color
    _force_color = enabled


def style(text: str, *codes: str) -> str:
    if not use_color():
        return text
    return "".join(codes) + text + RESET


def success(text: str) -> str:
    return style(text, BOLD, BRIGHT_GREEN)


def error(text: str) -> str:
    return style(text, BOLD, BRIGHT_RED)


def info(text: str) -> str:
    return style(text, BRIGHT_CYAN)


def label(text: str) -> str:
    return style(text, BOLD, CYAN)


def dim(text: str) -> str:
    return style(text, DIM)


def warn(text: str) -> str:
    return style(text, YELLOW)


def bold(text: str) -> str:
    return style(text, BOLD)


# === Run vocabulary ===
def step_icon(outcome: str, step_type: Optional[str] = None) -> str:
    """Bracketed marker for a step line: [+] passed, [x] failed, [-] info."""
    if outcome == "failed":
        return f"[{error('x')}]"
    if step_type == "info":
        return f"[{dim('-')}]"
    return f"[{success('+')}]"


def outcome_tag(outcome: str) -> str:
    if outcome == "passed":
        return success("PASS")
    if outcome == "failed":
        return error("FAIL")
    return dim(outcome.upper())


def percentage(value: float, good: float = 90, fair: float = 70) -> str:
    text = f"{value:.1f}%"
    if value >= good:
        return success(text)
    if value >= fair:
        return warn(text)
    return error(text)


def nonzero(count: int, styler: Callable[[str], str] = error) -> str:
    """Highlight a count only when it is worth noticing."""
    return styler(str(count)) if count else "0"


def elapsed(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{int(seconds // 60)}m {seconds % 60:.0f}s"


def duration_ms(ms: Optional[int]) -> str:
    return dim(f" ({ms}ms)") if ms else ""


def scraped_lines(responses: Iterable[str], actions: Iterable[str], indent: int = 4) -> List[str]:
    """One line per scraped bot response and action button."""
    pad = " " * indent
    lines = [f"{pad}{info('bot:')} {text}" for text in responses]
    lines += [f"{pad}{warn('action:')} {text}" for text in actions]
    return lines


def quoted(messages: Iterable[str]) -> str:
    """'"a" + "b"', or 'none' when nothing was sent."""
    return " + ".join(f'"{m}"' for m in messages) or "none"


# === Output ===
def writeln(text: str = ""):
    """Write a line straight to fd 1 so pytest's capture cannot swallow it."""
    os.write(1, f"{text}\n".encode())


def log(text: str, flush: bool = True):
    print(text, flush=flush)
