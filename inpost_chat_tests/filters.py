"""Noise filtering for text scraped from the chat widget.

Scraped fragments are pooled from many overlapping selectors, so most of
them are duplicates, timestamps, leaked CSS or interface labels. The
helpers here keep what looks like bot-authored content and drop the rest.
"""

import re
import unicodedata
from typing import Iterable, List, Optional

# Labels of the chat widget chrome (placeholder text and brand included)
UI_CHROME_LABELS = frozenset({
    "send",
    "upload",
    "emoji",
    "settings",
    "close",
    "twoja wiadomość",
    "inpost",
})

# The launcher tab shows up among the buttons too
ACTION_UI_CHROME_LABELS = UI_CHROME_LABELS | {"chat"}

ACTION_KEYWORDS = (
    "status",
    "package",
    "courier",
    "mobile",
    "app",
    "locker",
    "point",
    "find",
    "track",
    "help",
    "tracking",
    "number",
    "phone",
    "by ",
)

PROBE_KEYWORDS = (
    "package",
    "status",
    "courier",
    "mobile",
    "app",
    "locker",
    "point",
    "find",
    "track",
)

MIN_RESPONSE_LENGTH = 4
MIN_ACTION_LENGTH = 3
MAX_ACTION_LENGTH = 50

TIME_PATTERN = re.compile(r"\d{1,2}:\d{2}\s*(AM|PM)?\s*$", re.IGNORECASE | re.ASCII)
CSS_SELECTOR_PATTERN = re.compile(r"^\s*\.\w+[-\w]*\s*\{", re.ASCII)
# Whitespace plus the byte order mark, matching what a browser trims
EDGE_SPACE_PATTERN = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")
VENDOR_PREFIXES = ("webkit-", "moz-", "ms-")


def _trim(text: str) -> str:
    return EDGE_SPACE_PATTERN.sub("", text)


def _is_blank(text: str) -> bool:
    """Whitespace, control or invisible format characters only."""
    return all(
        char.isspace() or unicodedata.category(char).startswith("C")
        for char in text
    )


def _is_style_leak(text: str) -> bool:
    if "opacity" in text and "transition" in text:
        return True
    if "fade-enter" in text or "fade-leave" in text:
        return True
    if CSS_SELECTOR_PATTERN.match(text):
        return True
    if "{" in text and "}" in text and ":" in text:
        return True
    return any(prefix in text for prefix in VENDOR_PREFIXES)


def _is_filtered(
    text: str,
    sent_text: Optional[str],
    labels: frozenset,
) -> bool:
    """Checks shared by responses and actions, on already trimmed text."""
    if TIME_PATTERN.search(text):
        return True
    if _is_style_leak(text):
        return True
    if isinstance(sent_text, str) and sent_text and sent_text.lower() in text.lower():
        return True
    if text.lower() in labels:
        return True
    return _is_blank(text)


def is_noise(text, sent_text: Optional[str] = "") -> bool:
    """Return True if a fragment is not a genuine bot message.

    Args:
        text: Raw fragment as extracted from the DOM
        sent_text: Text sent by the test; fragments containing it
            (case-insensitive) are treated as echoes. Empty or non-string
            values disable this.

    Returns:
        True for noise, including anything that is not a string
    """
    if not isinstance(text, str):
        return True
    clean_text = _trim(text)
    if len(clean_text) < MIN_RESPONSE_LENGTH:
        return True
    return _is_filtered(clean_text, sent_text, UI_CHROME_LABELS)


def is_action(text, sent_text: Optional[str] = "") -> bool:
    """Return True if a fragment looks like a suggested action button.

    Keyword hits are kept anywhere in the 3..50 character window; other
    fragments only when strictly between 5 and 30 characters long.
    """
    if not isinstance(text, str):
        return False
    clean_text = _trim(text)
    if not MIN_ACTION_LENGTH <= len(clean_text) <= MAX_ACTION_LENGTH:
        return False
    if _is_filtered(clean_text, sent_text, ACTION_UI_CHROME_LABELS):
        return False
    lowered = clean_text.lower()
    if any(keyword in lowered for keyword in ACTION_KEYWORDS):
        return True
    return 5 < len(clean_text) < 30


def unique(fragments: Iterable[str]) -> List[str]:
    """Deduplicate by exact string, keeping first-occurrence order."""
    return list(dict.fromkeys(fragments))


def classify_responses(fragments, sent_text: Optional[str] = "") -> List[str]:
    """Filter pooled fragments down to unique bot responses."""
    if not fragments:
        return []
    return unique(text for text in fragments if not is_noise(text, sent_text))


def classify_actions(fragments, sent_text: Optional[str] = "") -> List[str]:
    """Filter pooled fragments down to unique action button labels."""
    if not fragments:
        return []
    return unique(text for text in fragments if is_action(text, sent_text))


def find_keyword_fragments(fragments, keywords: Iterable[str] = PROBE_KEYWORDS) -> List[str]:
    """Fragments mentioning any action keyword, duplicates kept."""
    if not fragments:
        return []
    keywords = tuple(keywords)
    return [
        text for text in fragments
        if isinstance(text, str)
        and any(keyword in _trim(text).lower() for keyword in keywords)
    ]
