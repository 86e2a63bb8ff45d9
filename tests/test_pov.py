"""
Tests for Point-of-View Inference and Propagation
=================================================
"""

import pytest

from inline_suggest.base import MatchSource, SuggestionKind
from inline_suggest.pov.anchor import distance, find_ai_anchor, infer_heuristic_anchor
from inline_suggest.pov.categories import (
    ALL_PRONOUNS,
    CROSS_MAP,
    POVCategory,
    category_of,
    literals_of,
    map_literal,
)
from inline_suggest.pov.propagation import HeuristicPOVSource, propagate


def apply(text, matches):
    for m in sorted(matches, key=lambda m: m.start, reverse=True):
        text = text[:m.start] + m.replacement + text[m.end:]
    return text


class TestCategories:
    """Tests for pronoun sets and the cross-mapping."""

    def test_category_of(self):
        """Test category lookup."""
        assert category_of("Her") is POVCategory.SHE
        assert category_of("theirs") is POVCategory.THEY
        assert category_of("Maria") is None

    def test_parse(self):
        """Test label parsing."""
        assert POVCategory.parse("SHE") is POVCategory.SHE
        assert POVCategory.parse(" they ") is POVCategory.THEY
        assert POVCategory.parse("unknown") is None
        assert POVCategory.parse(None) is None

    def test_every_foreign_literal_has_a_cell(self):
        """Test cross-mapping coverage."""
        for category in POVCategory:
            foreign = ALL_PRONOUNS - literals_of(category)
            assert foreign <= set(CROSS_MAP[category])

    def test_lossy_they_cell(self):
        """Test the lossy THEY mapping."""
        assert map_literal("him", POVCategory.THEY) == "them"
        assert map_literal("her", POVCategory.THEY) == "them"

    def test_target_literals_unmapped(self):
        """Test that target literals are unmapped."""
        assert map_literal("his", POVCategory.HE) is None


class TestAnchorInference:
    """Tests for heuristic and AI anchor selection."""

    def test_distance(self):
        """Test cursor distance."""
        assert distance(5, 3, 8) == 0
        assert distance(8, 3, 8) == 0
        assert distance(1, 3, 8) == 2
        assert distance(10, 3, 8) == 2

    def test_nearest_pronoun(self):
        """Test the nearest pronoun."""
        anchor = infer_heuristic_anchor("He said she left.", 12)
        assert anchor.text == "she"
        assert anchor.category is POVCategory.SHE

    def test_tie_keeps_earliest(self):
        """Test that ties keep the earliest pronoun."""
        anchor = infer_heuristic_anchor("he  she", 3)
        assert anchor.text == "he"

    def test_no_pronoun(self):
        """Test text without pronouns."""
        assert infer_heuristic_anchor("Nobody here.", 3) is None

    def test_ai_anchor_prefers_name_under_cursor(self):
        """Test AI anchor selection."""
        anchor = find_ai_anchor("Yesterday Maria said she would come.", 12)
        assert anchor.text == "Maria"
        assert anchor.is_capitalized
        assert anchor.category is None

    def test_ai_anchor_outside_window(self):
        """Test the AI anchor window."""
        text = "the quiet morning went on and on until Maria arrived"
        assert find_ai_anchor(text, 0, window=15) is None

    def test_ai_anchor_accepts_lowercase_pronoun(self):
        """Test lower-case pronoun anchors."""
        anchor = find_ai_anchor("and then she ran", 10)
        assert anchor.text == "she"
        assert anchor.category is POVCategory.SHE


class TestPropagation:
    """Tests for blanket pronoun alignment."""

    def test_align_to_she(self):
        """Test alignment to SHE."""
        text = "He said his dog likes him."
        matches = propagate(text, POVCategory.SHE)
        assert [m.replacement for m in matches] == ["She", "her", "her"]
        assert all(m.source is MatchSource.HEURISTIC_POV for m in matches)
        assert all(m.source.kind is SuggestionKind.POV_ALIGNMENT for m in matches)
        assert apply(text, matches) == "She said her dog likes her."

    def test_idempotent(self):
        """Test idempotent alignment."""
        text = "He said his dog likes him."
        aligned = apply(text, propagate(text, POVCategory.SHE))
        assert propagate(aligned, POVCategory.SHE) == []

    def test_all_caps_preserved(self):
        """Test all-caps preservation."""
        matches = propagate("HE left.", POVCategory.THEY)
        assert matches[0].replacement == "THEY"

    def test_hers_to_he(self):
        """Test possessive mapping."""
        matches = propagate("The book is hers.", POVCategory.HE)
        assert matches[0].replacement == "his"


class TestHeuristicPOVSource:
    """Tests for the heuristic POV source."""

    def test_anchor_from_cursor(self):
        """Test anchoring from the cursor."""
        text = "He walks in. She sits."
        result = HeuristicPOVSource().check(text, cursor=0)
        assert result.success
        assert result.metrics['target'] == "he"
        assert [m.replacement for m in result.matches] == ["He"]
        assert text[result.matches[0].start:result.matches[0].end] == "She"

    def test_no_anchor_no_matches(self):
        """Test text without an anchor."""
        result = HeuristicPOVSource().check("Nothing to align.", cursor=3)
        assert result.matches == []
        assert result.metrics['anchor'] is None

    def test_no_cursor(self):
        """Test a pass without a cursor."""
        assert HeuristicPOVSource().check("He and she.").matches == []
