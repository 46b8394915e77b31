"""Tests for selector fan-out over a fake frame."""

import pytest

from inpost_chat_tests.extraction import (
    ACTION_STRATEGIES,
    CLICKABLE_ELEMENTS,
    RESPONSE_STRATEGIES,
    ButtonTextStrategy,
    ExtractionStrategy,
    collect_fragments,
)


@pytest.mark.unit
class TestStrategies:

    def test_text_contents_drop_none(self, make_root):
        root = make_root({"li": ["One", None, "Two"]})
        assert ExtractionStrategy("list items", "li").extract(root) == ["One", "Two"]

    def test_non_empty_drops_blank_text(self, make_root):
        root = make_root({"a": ["Go", "  ", "", "Back"]})
        strategy = ExtractionStrategy("links", "a", non_empty=True)
        assert strategy.extract(root) == ["Go", "Back"]

    def test_button_text_fallback_order(self, make_root, make_element):
        root = make_root({"button": [
            make_element("Track package"),
            make_element("", inner_text="Courier"),
            make_element("", inner_text="", attrs={"aria-label": "Close chat"}),
            make_element(None, inner_text="", attrs={"title": "Help"}),
            make_element(None, inner_text=""),
        ]})
        assert ButtonTextStrategy().extract(root) == [
            "Track package", "Courier", "Close chat", "Help", "",
        ]

    def test_default_fan_outs_are_ordered(self):
        assert [s.name for s in RESPONSE_STRATEGIES] == [
            "list items", "paragraphs", "message containers", "text nodes", "spans", "divs",
        ]
        assert [s.name for s in ACTION_STRATEGIES] == [
            "buttons", "button texts", "action containers", "link buttons", "clickable elements",
        ]
        assert ACTION_STRATEGIES[-1].selector == CLICKABLE_ELEMENTS
        assert ACTION_STRATEGIES[-1].non_empty


@pytest.mark.unit
class TestCollectFragments:

    def test_fragments_are_concatenated_in_strategy_order(self, make_root):
        root = make_root({"li": ["a1", "a2"], "p": ["b1"], "div": ["c1", "a1"]})
        strategies = [
            ExtractionStrategy("list items", "li"),
            ExtractionStrategy("paragraphs", "p"),
            ExtractionStrategy("divs", "div"),
        ]
        assert collect_fragments(root, strategies) == ["a1", "a2", "b1", "c1", "a1"]
        assert root.queries == ["li", "p", "div"]

    def test_failing_strategy_contributes_nothing(self, make_root, events):
        root = make_root({"li": ["Hello"], "p": RuntimeError("frame detached"), "div": ["World"]})
        strategies = [
            ExtractionStrategy("list items", "li"),
            ExtractionStrategy("paragraphs", "p"),
            ExtractionStrategy("divs", "div"),
        ]
        assert collect_fragments(root, strategies) == ["Hello", "World"]

        failed = [e for e in events if e.outcome == "failed"]
        assert len(failed) == 1
        assert "paragraphs" in failed[0].step_name
        assert "frame detached" in failed[0].step_name

    def test_counts_are_logged(self, make_root, events):
        root = make_root({"li": ["x", "y"]})
        collect_fragments(root, [ExtractionStrategy("list items", "li")])
        assert [e.step_name for e in events] == ["Found 2 list items"]
        assert events[0].step_type == "info"

    def test_quiet_mode_logs_nothing(self, make_root, events):
        root = make_root({"li": ["x"]})
        collect_fragments(root, [ExtractionStrategy("list items", "li")], verbose=False)
        assert events == []

    def test_failures_can_be_silenced(self, make_root, events):
        root = make_root({"li": ["x"], "p": RuntimeError("frame detached")})
        strategies = [ExtractionStrategy("list items", "li"), ExtractionStrategy("paragraphs", "p")]
        assert collect_fragments(root, strategies, verbose=False, log_failures=False) == ["x"]
        assert events == []

    def test_no_strategies(self, make_root):
        assert collect_fragments(make_root(), []) == []
