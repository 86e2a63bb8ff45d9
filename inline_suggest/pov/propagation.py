"""
POV Propagation
===============
Blanket pronoun alignment towards a target category, and the heuristic POV
source that pairs it with nearest-pronoun anchor inference.
"""

from typing import Any, Dict, List, Optional

from ..base import Match, MatchSource, MatchSourceBase
from ..casing import match_case
from .anchor import AnchorToken, infer_heuristic_anchor
from .categories import POVCategory, literals_of, map_literal, tokenize_pronouns

__version__ = "1.0.0"


def propagate(text: str, target: POVCategory,
              source: MatchSource = MatchSource.HEURISTIC_POV) -> List[Match]:
    """
    Suggest replacing every pronoun outside the target set.

    Pronouns already in the target set are left alone, and literals with
    no cell in the cross-mapping are skipped.
    """
    target_literals = literals_of(target)
    matches = []
    for token in tokenize_pronouns(text):
        lower = token.text.lower()
        if lower in target_literals:
            continue
        mapped = map_literal(lower, target)
        if mapped is None:
            continue
        matches.append(Match(
            start=token.start,
            end=token.end,
            replacement=match_case(mapped, token.text),
            message=f"Align pronouns to {target.value} POV.",
            source=source,
            rule_id=f"POV_{target.name}",
        ))
    return matches


class HeuristicPOVSource(MatchSourceBase):
    """Nearest-pronoun anchor plus blanket propagation; needs no collaborator."""

    SOURCE_NAME = "POV (heuristic)"
    SOURCE_VERSION = "1.0.0"

    def _check_impl(self, text: str, metrics: Dict[str, Any],
                    cursor: Optional[int] = None,
                    anchor: Optional[AnchorToken] = None, **kwargs) -> List[Match]:
        if anchor is None or anchor.category is None:
            anchor = infer_heuristic_anchor(text, cursor) if cursor is not None else None
        if anchor is None or anchor.category is None:
            metrics['anchor'] = None
            return []
        metrics['anchor'] = anchor.text
        metrics['target'] = anchor.category.value
        return propagate(text, anchor.category)
