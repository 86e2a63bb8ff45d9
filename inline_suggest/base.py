"""
InlineSuggest Base Classes
==========================
Shared types for every suggestion source.

Sources normalize whatever their collaborator returns into Match records
straight away; nothing downstream ever sees a raw service payload.
"""

import itertools
import random
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .document import StructuredRange

__version__ = "1.0.0"


class MatchSource(str, Enum):
    """Where a match came from."""
    LOCAL_RULE = "local-rule"
    USER_RULE = "user-rule"
    REMOTE_GRAMMAR = "remote-grammar"
    AI_COREFERENCE = "ai-coreference"
    HEURISTIC_POV = "heuristic-pov"

    @property
    def kind(self) -> 'SuggestionKind':
        if self in (MatchSource.AI_COREFERENCE, MatchSource.HEURISTIC_POV):
            return SuggestionKind.POV_ALIGNMENT
        return SuggestionKind.CORRECTNESS_FIX


class SuggestionKind(str, Enum):
    CORRECTNESS_FIX = "correctness-fix"
    POV_ALIGNMENT = "pov-alignment"


@dataclass(frozen=True)
class Match:
    """A source-produced span in linear-offset space."""
    start: int
    end: int
    replacement: str
    message: str
    source: MatchSource
    rule_id: str = ""

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Suggestion:
    """
    A Match mapped to structured coordinates for one analysis pass.

    A match spanning several segments becomes several suggestions sharing
    one ``id``; ``fragment_index``/``fragment_count`` tell them apart.
    """
    id: str
    kind: SuggestionKind
    range: StructuredRange
    replacement: str
    reason: str
    source: MatchSource
    rule_id: str = ""
    fragment_index: int = 0
    fragment_count: int = 1

    @property
    def length(self) -> int:
        # Fragments never leave their segment
        return self.range.end.offset - self.range.start.offset

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'kind': self.kind.value,
            'range': self.range.to_dict(),
            'replacement': self.replacement,
            'reason': self.reason,
            'source': self.source.value,
            'rule_id': self.rule_id,
            'fragment_index': self.fragment_index,
            'fragment_count': self.fragment_count,
        }


# =============================================================================
# ID GENERATION
# =============================================================================

class IdGenerator(ABC):
    """Produces suggestion ids. Injected so tests get reproducible ids."""

    @abstractmethod
    def next_id(self) -> str:
        pass


class CounterIdGenerator(IdGenerator):
    """Sequential ids: s1, s2, ..."""

    def __init__(self, prefix: str = "s"):
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next_id(self) -> str:
        return f"{self.prefix}{next(self._counter)}"


class SeededUuidGenerator(IdGenerator):
    """UUID4-shaped ids from a seeded PRNG."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def next_id(self) -> str:
        return str(uuid.UUID(int=self._random.getrandbits(128), version=4))


# =============================================================================
# SOURCES
# =============================================================================

@dataclass
class SourceResult:
    """Result of running one source over a block's text."""
    matches: List[Match] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    processing_time_ms: float = 0.0
    source_name: str = ""
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'match_count': len(self.matches),
            'metrics': self.metrics,
            'processing_time_ms': self.processing_time_ms,
            'source_name': self.source_name,
            'success': self.success,
            'error': self.error,
        }


class _SourceMixin:
    SOURCE_NAME: str = "Source"
    SOURCE_VERSION: str = "1.0.0"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def _start(self) -> SourceResult:
        result = SourceResult(source_name=self.SOURCE_NAME)
        if not self.enabled:
            result.metrics['skipped'] = 'disabled'
        return result

    @staticmethod
    def _finish(result: SourceResult, start_time: float) -> SourceResult:
        result.metrics['match_count'] = len(result.matches)
        result.processing_time_ms = (time.time() - start_time) * 1000
        return result


class MatchSourceBase(_SourceMixin, ABC):
    """
    Base class for synchronous match sources.

    check() handles the enabled flag, timing and error capture; a failing
    source yields an unsuccessful result with no matches.
    """

    @abstractmethod
    def _check_impl(self, text: str, metrics: Dict[str, Any], **kwargs) -> List[Match]:
        pass

    def check(self, text: str, **kwargs) -> SourceResult:
        start_time = time.time()
        result = self._start()
        if not self.enabled:
            return result
        try:
            result.matches = self._check_impl(text, result.metrics, **kwargs)
        except Exception as e:
            result.success = False
            result.error = f"Check failed: {e}"
        return self._finish(result, start_time)


class AsyncMatchSourceBase(_SourceMixin, ABC):
    """Base class for sources backed by remote collaborators."""

    @abstractmethod
    async def _check_impl(self, text: str, metrics: Dict[str, Any], **kwargs) -> List[Match]:
        pass

    async def check(self, text: str, **kwargs) -> SourceResult:
        start_time = time.time()
        result = self._start()
        if not self.enabled:
            return result
        try:
            result.matches = await self._check_impl(text, result.metrics, **kwargs)
        except Exception as e:
            result.success = False
            result.error = f"Check failed: {e}"
        return self._finish(result, start_time)
