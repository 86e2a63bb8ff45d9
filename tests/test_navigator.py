"""
Tests for the Cursor Navigator
==============================
"""

import pytest

from inline_suggest.aggregator import aggregate, to_suggestions
from inline_suggest.base import CounterIdGenerator, Match, MatchSource
from inline_suggest.document import Coordinate, TextDocument
from inline_suggest.engine import AnalysisResult
from inline_suggest.navigator import CursorNavigator, apply_edits, nearest_suggestion
from inline_suggest.position import build_index
from tests.conftest import run

TEXT = "0123456789" * 5


def suggestions_for(doc, spans):
    index = build_index(doc.block(0))
    matches = [Match(s, e, r, "fix", MatchSource.LOCAL_RULE, "L") for s, e, r in spans]
    mapped = to_suggestions(matches, index, CounterIdGenerator()).suggestions
    return index, aggregate(mapped).suggestions


class TestApplyEdits:
    """Tests for batch application."""

    def test_batch_applies_end_to_start(self):
        """Test end-to-start batch ordering."""
        doc = TextDocument([[TEXT]])
        spans = [(5, 7, "AAA"), (20, 21, ""), (40, 43, "Z")]
        _, suggestions = suggestions_for(doc, spans)

        applied = apply_edits(doc, suggestions)

        assert [s.range.start.offset for s in applied] == [40, 20, 5]
        expected = TEXT[:5] + "AAA" + TEXT[7:20] + TEXT[21:40] + "Z" + TEXT[43:]
        assert doc.block_text(0) == expected

    def test_batch_order_independent_of_input_order(self):
        """Test that batch order ignores input order."""
        doc = TextDocument([[TEXT]])
        _, suggestions = suggestions_for(doc, [(5, 7, "AAA"), (40, 43, "Z")])
        applied = apply_edits(doc, list(reversed(suggestions)))
        assert [s.range.start.offset for s in applied] == [40, 5]

    def test_cross_segment_fragments(self):
        """Test ordering of cross-segment fragments."""
        doc = TextDocument([["It fixes the th", "e basics."]])
        _, suggestions = suggestions_for(doc, [(12, 16, "")])
        apply_edits(doc, suggestions)
        assert doc.block_text(0) == "It fixes the basics."


class TestNearestSuggestion:
    """Tests for cursor-relative lookup."""

    @pytest.fixture
    def result(self):
        doc = TextDocument([[TEXT]])
        index, suggestions = suggestions_for(doc, [(5, 7, "A"), (20, 22, "B"), (40, 43, "C")])
        return AnalysisResult(0, index, suggestions=suggestions)

    def test_containment_wins(self, result):
        """Test that containment wins."""
        assert nearest_suggestion(result, Coordinate((0, 0), 21)).replacement == "B"

    def test_boundary_counts_as_containment(self, result):
        """Test boundary containment."""
        assert nearest_suggestion(result, Coordinate((0, 0), 22)).replacement == "B"

    def test_nearest_ahead(self, result):
        """Test the nearest suggestion ahead."""
        assert nearest_suggestion(result, Coordinate((0, 0), 25)).replacement == "C"

    def test_falls_back_to_behind(self, result):
        """Test fallback to a suggestion behind."""
        assert nearest_suggestion(result, Coordinate((0, 0), 48)).replacement == "C"

    def test_unknown_point(self, result):
        """Test an unknown point."""
        assert nearest_suggestion(result, Coordinate((3, 0), 0)) is None


class TestCursorNavigator:
    """Tests for apply/skip against a live engine."""

    def test_apply_one_then_refresh(self, engine):
        """Test applying one suggestion."""
        doc = TextDocument.from_paragraphs(["It fixes the the basics."])
        nav = CursorNavigator(doc, engine, 0, Coordinate((0, 0), 14))
        run(nav.refresh())

        suggestion = nav.nearest_to_cursor()
        assert suggestion.rule_id == "REP001"

        result = run(nav.apply_one(suggestion))
        assert doc.block_text(0) == "It fixes the basics."
        assert result.suggestions == []
        assert nav.cursor == Coordinate((0, 0), 12)

    def test_skip_moves_cursor_past_suggestion(self, engine):
        """Test skipping."""
        doc = TextDocument.from_paragraphs(["Try typing a apple now."])
        nav = CursorNavigator(doc, engine, 0, Coordinate((0, 0), 0))
        run(nav.refresh())

        suggestion = nav.nearest_to_cursor()
        assert nav.skip(suggestion) == suggestion.range.end
        assert doc.block_text(0) == "Try typing a apple now."

    def test_apply_batch(self, engine):
        """Test batch application."""
        doc = TextDocument.from_paragraphs(["This is  a demo. It fixes the the basics."])
        nav = CursorNavigator(doc, engine, 0)
        result = run(nav.refresh())

        result = run(nav.apply_batch(result.visible))
        assert doc.block_text(0) == "This is a demo. It fixes the basics."
        assert result.visible == []

    def test_no_result_yet(self, engine):
        """Test navigation before analysis."""
        nav = CursorNavigator(TextDocument.from_paragraphs(["x"]), engine, 0,
                              Coordinate((0, 0), 0))
        assert nav.nearest_to_cursor() is None
        assert nav.suggestions == []
