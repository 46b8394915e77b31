from contextlib import contextmanager
from inpost_chat_tests.plugin import log_step
import linecache
import time
import sys


def _assertion_message(exc_tb) -> str:
    """Recover an assert message from source when pytest rewriting lost it."""
    tb = exc_tb.tb_next if exc_tb.tb_next else exc_tb
    if not tb:
        return ""
    frame = tb.tb_frame
    source_line = linecache.getline(frame.f_code.co_filename, tb.tb_lineno).strip()
    if 'assert ' not in source_line or ', ' not in source_line:
        return ""

    _, msg_part = source_line.split(', ', 1)
    try:
        eval_context = {**frame.f_globals, **frame.f_locals}
        return str(eval(msg_part, eval_context))
    except Exception:
        return msg_part.strip('\'"')


def format_error(exc_type, exc_value, exc_tb) -> str:
    """Format an exception as 'Type: message' for step events."""
    error_msg = str(exc_value) if exc_value.args else ""
    if not error_msg and isinstance(exc_value, AssertionError):
        error_msg = _assertion_message(exc_tb)
    error_msg = error_msg.replace("\n", f"\n{' ' * 6}")
    return f"{exc_type.__name__}: {error_msg}" if error_msg else exc_type.__name__


@contextmanager
def step(description: str, continue_on_failure: bool = False, step_type: str = "action", start: float = None):
    """Time a scenario step and log it as passed or failed.

    A failing step is logged with its error and re-raised, unless
    continue_on_failure is set and the scenario should carry on.
    step_type is "action" or "wait"; start backdates the timer.
    """
    started = start or time.time()
    try:
        yield
    except Exception:
        log_step(description, "failed", format_error(*sys.exc_info()), start_time=started, step_type=step_type)
        if not continue_on_failure:
            raise
    else:
        log_step(description, "passed", start_time=started, step_type=step_type)


def info(message: str, outcome: str = "passed"):
    """Log an untimed line, e.g. what a scrape found or why it found nothing."""
    log_step(message, outcome, step_type="info")
