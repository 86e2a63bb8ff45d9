"""
Cursor Navigator
================
Cursor-relative suggestion lookup and application.

Coordinates from a pass are only valid until the block is edited, so every
apply triggers a fresh pass and batches are applied end-to-start.
"""

from typing import Hashable, List, Optional

from .base import Suggestion
from .config_logging import MappingError, get_logger
from .document import Coordinate, DocumentCollaborator
from .engine import AnalysisResult, SuggestionEngine

__version__ = "1.0.0"

logger = get_logger('inline_suggest.navigator')


def order_for_batch(suggestions: List[Suggestion]) -> List[Suggestion]:
    """Descending structured position, so earlier edits never shift pending ones."""
    return sorted(suggestions, key=lambda s: (s.range.start, s.range.end), reverse=True)


def nearest_suggestion(result: AnalysisResult, point: Coordinate) -> Optional[Suggestion]:
    """
    Containment first: a suggestion whose range holds the point (first in
    result order); else the nearest one ahead of the point; else the
    nearest one behind it.
    """
    for suggestion in result.suggestions:
        if suggestion.range.contains(point):
            return suggestion

    index = result.index
    try:
        cursor = index.to_linear(point)
    except MappingError:
        return None

    forward = None
    forward_distance = None
    backward = None
    backward_distance = None
    for suggestion in result.suggestions:
        start, end = index.range_to_linear(suggestion.range)
        if start >= cursor:
            d = start - cursor
            if forward_distance is None or d < forward_distance:
                forward, forward_distance = suggestion, d
        elif end <= cursor:
            d = cursor - end
            if backward_distance is None or d < backward_distance:
                backward, backward_distance = suggestion, d
    return forward or backward


class CursorNavigator:
    """
    Holds the latest pass for one block and the cursor within it.

    The host feeds cursor moves through move_to() and reacts to Tab /
    Shift+Tab with apply_one() / skip() on nearest_to_cursor().
    """

    def __init__(self, document: DocumentCollaborator, engine: SuggestionEngine,
                 block_id: Hashable, cursor: Optional[Coordinate] = None):
        self.document = document
        self.engine = engine
        self.block_id = block_id
        self.cursor = cursor
        self.result: Optional[AnalysisResult] = None

    @property
    def suggestions(self) -> List[Suggestion]:
        return self.result.suggestions if self.result else []

    async def refresh(self) -> AnalysisResult:
        """Run a fresh pass at the current cursor; replaces the previous result."""
        self.result = await self.engine.analyze(self.document, self.block_id, self.cursor)
        return self.result

    def move_to(self, point: Coordinate):
        self.cursor = point

    def nearest_to_cursor(self, point: Optional[Coordinate] = None) -> Optional[Suggestion]:
        point = point or self.cursor
        if point is None or self.result is None:
            return None
        return nearest_suggestion(self.result, point)

    async def apply_one(self, suggestion: Suggestion) -> AnalysisResult:
        """
        Replace the suggestion's range with its replacement, then re-analyze.

        A match split across segments is several suggestions sharing an id;
        apply them together with apply_batch(result.by_id(id)).
        """
        rng = suggestion.range
        self.document.replace_range(rng, suggestion.replacement)
        self.cursor = Coordinate(rng.start.path, rng.start.offset + len(suggestion.replacement))
        logger.debug("Applied suggestion", suggestion_id=suggestion.id,
                     rule_id=suggestion.rule_id)
        return await self.refresh()

    async def apply_batch(self, suggestions: List[Suggestion]) -> AnalysisResult:
        """Apply several suggestions from one pass, end-to-start, then re-analyze."""
        applied = apply_edits(self.document, suggestions)
        logger.debug("Applied suggestion batch", count=len(applied))
        return await self.refresh()

    def skip(self, suggestion: Suggestion) -> Coordinate:
        """Move a collapsed cursor to the end of the suggestion; text is untouched."""
        self.cursor = suggestion.range.end
        return self.cursor


def apply_edits(document: DocumentCollaborator, suggestions: List[Suggestion]) -> List[Suggestion]:
    """Apply suggestions end-to-start without re-mapping; returns them in applied order."""
    ordered = order_for_batch(suggestions)
    for suggestion in ordered:
        document.replace_range(suggestion.range, suggestion.replacement)
    return ordered
