"""
Remote Grammar Source
=====================
Adapts LanguageTool matches into Match records.

Only the first replacement candidate of each match is used; matches with no
candidate are dropped. Service failures become an empty, unsuccessful
SourceResult and never stop the pass.
"""

import asyncio
from typing import Any, Dict, List, Optional

from ..base import AsyncMatchSourceBase, Match, MatchSource
from ..config import LanguageToolConfig, get_config
from ..config_logging import SourceUnavailable, get_logger
from .client import GrammarMatch, LanguageToolClient

__version__ = "1.0.0"

logger = get_logger('inline_suggest.languagetool')


def to_match(grammar_match: GrammarMatch) -> Optional[Match]:
    if not grammar_match.replacements:
        return None
    return Match(
        start=grammar_match.offset,
        end=grammar_match.offset + grammar_match.length,
        replacement=grammar_match.replacements[0],
        message=grammar_match.message,
        source=MatchSource.REMOTE_GRAMMAR,
        rule_id=grammar_match.rule_id,
    )


class RemoteGrammarSource(AsyncMatchSourceBase):
    """LanguageTool-backed correctness suggestions."""

    SOURCE_NAME = "Grammar (LanguageTool)"
    SOURCE_VERSION = "1.0.0"

    def __init__(self, client: Optional[LanguageToolClient] = None,
                 config: Optional[LanguageToolConfig] = None):
        self.config = config or get_config().languagetool
        super().__init__(self.config.enabled)
        self.client = client or LanguageToolClient(self.config)

    async def _check_impl(self, text: str, metrics: Dict[str, Any], **kwargs) -> List[Match]:
        disabled = self.config.disabled_categories()
        metrics['disabled_categories'] = disabled
        try:
            grammar_matches = await asyncio.to_thread(self.client.check, text, disabled)
        except SourceUnavailable as e:
            logger.warning("Remote grammar service unavailable", error=e.message)
            metrics['unavailable'] = e.message
            raise

        matches = []
        dropped = 0
        for gm in grammar_matches:
            match = to_match(gm)
            if match is None:
                dropped += 1
                continue
            matches.append(match)
        metrics['without_replacement'] = dropped
        return matches
