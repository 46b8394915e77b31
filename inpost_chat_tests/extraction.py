"""Selector fan-out for pulling raw text out of the chat widget.

The widget's markup is not under our control, so text is pooled from
several overlapping selectors and cleaned up afterwards by ``filters``.
Each strategy only needs ``root.locator(selector)`` to work, which holds
for a Playwright ``Page``, ``Frame`` and ``FrameLocator``.
"""

from dataclasses import dataclass
from typing import List, Sequence

from inpost_chat_tests.step import info


@dataclass(frozen=True)
class ExtractionStrategy:
    """Text contents of every element matching a selector."""
    name: str
    selector: str
    non_empty: bool = False

    def extract(self, root) -> List[str]:
        texts = root.locator(self.selector).all_text_contents()
        texts = [text for text in texts if text is not None]
        if self.non_empty:
            texts = [text for text in texts if text.strip()]
        return texts


@dataclass(frozen=True)
class ButtonTextStrategy:
    """Per-button label: first non-empty of text, inner text, aria-label, title."""
    name: str = "button texts"
    selector: str = "button"

    def extract(self, root) -> List[str]:
        texts = []
        for button in root.locator(self.selector).all():
            text = (
                button.text_content()
                or button.inner_text()
                or button.get_attribute("aria-label")
                or button.get_attribute("title")
                or ""
            )
            texts.append(text)
        return texts


MESSAGE_CONTAINERS = (
    '[class*="message"], [class*="chat"], [class*="response"], '
    '[data-testid*="message"]'
)
ACTION_CONTAINERS = (
    '[class*="action"], [class*="quick"], [class*="button-group"], '
    '[data-testid*="action"]'
)
CLICKABLE_ELEMENTS = (
    'button, a, [role="button"], [onclick], [class*="button"], '
    '[class*="action"], [class*="quick"], [class*="option"]'
)

# Targeted selectors first, generic fallbacks last
RESPONSE_STRATEGIES = (
    ExtractionStrategy("list items", "li"),
    ExtractionStrategy("paragraphs", "p"),
    ExtractionStrategy("message containers", MESSAGE_CONTAINERS),
    ExtractionStrategy(
        "text nodes", 'span:not([class*="timestamp"]):not([class*="time"])'
    ),
    ExtractionStrategy("spans", "span"),
    ExtractionStrategy("divs", "div"),
)

ACTION_STRATEGIES = (
    ExtractionStrategy("buttons", "button"),
    ButtonTextStrategy(),
    ExtractionStrategy("action containers", ACTION_CONTAINERS),
    ExtractionStrategy("link buttons", 'a[role="button"]'),
    ExtractionStrategy("clickable elements", CLICKABLE_ELEMENTS, non_empty=True),
)

PROBE_STRATEGIES = (
    ExtractionStrategy("elements", "*"),
)


def collect_fragments(
    root,
    strategies: Sequence,
    verbose: bool = True,
    log_failures: bool = True,
) -> List[str]:
    """Run strategies in order and concatenate their fragments.

    A strategy that raises is logged and contributes nothing; the rest
    still run.

    Args:
        root: Page, frame or frame locator to query
        strategies: Ordered extraction strategies
        verbose: Log how many fragments each strategy found
        log_failures: Log strategies that raised

    Returns:
        All fragments, in strategy order
    """
    fragments = []
    for strategy in strategies:
        try:
            found = strategy.extract(root)
        except Exception as e:
            if log_failures:
                info(f"Extraction '{strategy.name}' failed: {e}", outcome="failed")
            continue
        if verbose:
            info(f"Found {len(found)} {strategy.name}")
        fragments.extend(found)
    return fragments
