"""
Coreference Source
==================
AI-backed POV alignment scoped to the referent under the cursor.

The source asks the collaborator for the anchor's category, then for the
pronouns that refer to that same referent. An "unknown" category is a
successful empty result (no target this pass). Collaborator failures raise,
so the engine can fall back to the heuristic source.
"""

from typing import Any, Dict, List, Optional

from ..base import AsyncMatchSourceBase, Match, MatchSource
from ..cache import ResultCache, make_key
from ..casing import match_case
from ..config_logging import SourceUnavailable, get_logger
from ..pov.anchor import AnchorToken
from .client import AICollaborator

__version__ = "1.0.0"

logger = get_logger('inline_suggest.ai')


def to_matches(text: str, items: List[Dict[str, Any]], anchor: AnchorToken,
               target_label: str) -> List[Match]:
    """Normalize collaborator replacements, dropping ones that do not fit the text."""
    matches = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            offset = int(item['offset'])
            length = int(item['length'])
            original = str(item.get('original') or text[offset:offset + length])
            replacement = str(item['replacement'])
        except (KeyError, TypeError, ValueError):
            continue
        if offset < 0 or length <= 0 or offset + length > len(text):
            continue
        if text[offset:offset + length].lower() != original.lower():
            continue
        replacement = match_case(replacement, text[offset:offset + length])
        if replacement == text[offset:offset + length]:
            continue
        matches.append(Match(
            start=offset,
            end=offset + length,
            replacement=replacement,
            message=f'Refers to "{anchor.text}" (POV: {target_label}).',
            source=MatchSource.AI_COREFERENCE,
            rule_id="POV_AI",
        ))
    return matches


class CoreferenceSource(AsyncMatchSourceBase):
    """POV alignment through an AICollaborator, with result caching."""

    SOURCE_NAME = "POV (AI coreference)"
    SOURCE_VERSION = "1.0.0"

    def __init__(self, collaborator: AICollaborator,
                 cache: Optional[ResultCache] = None, enabled: bool = True):
        super().__init__(enabled)
        self.collaborator = collaborator
        self.cache = cache

    async def _check_impl(self, text: str, metrics: Dict[str, Any],
                          anchor: Optional[AnchorToken] = None, **kwargs) -> List[Match]:
        if anchor is None:
            raise SourceUnavailable("No anchor for AI alignment", source=self.SOURCE_NAME)
        metrics['anchor'] = anchor.text

        key = make_key(text, anchor.text)
        if self.cache is not None:
            cached = self.cache.get(key, text)
            if cached is not None:
                metrics['cache'] = 'hit'
                return cached

        category = await self.collaborator.infer_category(text, anchor.text)
        if category is None:
            metrics['target'] = None
            logger.debug("AI could not resolve a POV target", anchor=anchor.text)
            return []
        metrics['target'] = category.value

        items = await self.collaborator.align_pronouns(text, anchor.text, category)
        matches = to_matches(text, items, anchor, category.value)
        metrics['rejected'] = len(items) - len(matches)

        if self.cache is not None:
            self.cache.put(key, matches, text)
        return matches
