"""
LanguageTool Client
===================
Wraps language_tool_python against a remote LanguageTool server.

Features:
- Per-request disabled-category list
- Lazy connection on first check
- Failures raised as SourceUnavailable so the caller decides how to degrade

Requires: pip install language-tool-python
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import language_tool_python

from ..config import LanguageToolConfig, get_config
from ..config_logging import SourceUnavailable, get_logger

__version__ = "1.0.0"

logger = get_logger('inline_suggest.languagetool')


@dataclass
class GrammarMatch:
    """One issue reported by LanguageTool."""
    offset: int
    length: int
    message: str
    replacements: List[str] = field(default_factory=list)
    rule_id: str = ""
    category: str = ""


class LanguageToolClient:
    """
    Remote LanguageTool integration.

    The underlying tool object is shared, so category settings and the
    request itself happen under one lock.
    """

    INTEGRATION_NAME = "LanguageTool"
    INTEGRATION_VERSION = "1.0.0"

    def __init__(self, config: Optional[LanguageToolConfig] = None, tool=None):
        self.config = config or get_config().languagetool
        self._tool = tool
        self._lock = threading.Lock()
        self._error: Optional[str] = None

    def _get_tool(self):
        if self._tool is None:
            try:
                self._tool = language_tool_python.LanguageTool(
                    self.config.language,
                    remote_server=self.config.server_url,
                )
            except Exception as e:
                self._error = f"LanguageTool initialization failed: {e}"
                raise SourceUnavailable(self._error, source=self.INTEGRATION_NAME) from e
        return self._tool

    @property
    def error(self) -> Optional[str]:
        return self._error

    def get_status(self) -> Dict[str, Any]:
        return {
            'available': self._tool is not None and self._error is None,
            'language': self.config.language,
            'server_url': self.config.server_url,
            'error': self._error,
        }

    def check(self, text: str,
              disabled_categories: Optional[Iterable[str]] = None) -> List[GrammarMatch]:
        """
        Check text and return normalized matches in service order.

        Raises SourceUnavailable on any transport or parse failure.
        """
        if disabled_categories is None:
            disabled_categories = self.config.disabled_categories()
        with self._lock:
            tool = self._get_tool()
            try:
                tool.disabled_categories = set(disabled_categories)
                raw_matches = tool.check(text)
            except Exception as e:
                self._error = f"Check failed: {e}"
                raise SourceUnavailable(self._error, source=self.INTEGRATION_NAME) from e

        self._error = None
        try:
            return [self._normalize(m) for m in raw_matches]
        except (AttributeError, TypeError, ValueError) as e:
            raise SourceUnavailable(f"Unreadable LanguageTool response: {e}",
                                    source=self.INTEGRATION_NAME) from e

    @staticmethod
    def _normalize(match) -> GrammarMatch:
        length = getattr(match, 'errorLength', None)
        if length is None:
            length = getattr(match, 'error_length')
        rule_id = getattr(match, 'ruleId', None) or getattr(match, 'rule_id', '')
        return GrammarMatch(
            offset=int(match.offset),
            length=int(length),
            message=str(match.message or ''),
            replacements=[str(r) for r in (match.replacements or [])],
            rule_id=str(rule_id or ''),
            category=str(getattr(match, 'category', '') or ''),
        )

    def close(self):
        """Release the underlying tool."""
        if self._tool is not None:
            try:
                self._tool.close()
            except Exception as e:
                logger.debug("LanguageTool close failed", error=str(e))
            self._tool = None
