"""
Suggestion Engine
=================
Runs one analysis pass over one block.

A pass builds a fresh position index, collects matches from every engaged
source (remote grammar, local rules, user rules, POV), maps them to
structured coordinates and aggregates them. Nothing in a pass is fatal:
a failing source only reduces what the pass returns, and the failure is
reported in PassDiagnostics.

The engine does not debounce, cancel or order concurrent passes; the host
keeps the most recently resolved result.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional

from .aggregator import aggregate, to_suggestions
from .ai.client import AICollaborator, GeminiCollaborator
from .ai.source import CoreferenceSource
from .base import (
    AsyncMatchSourceBase, CounterIdGenerator, IdGenerator, Match, SourceResult, Suggestion,
)
from .cache import ResultCache
from .config import EngineConfig, get_config
from .config_logging import MappingError, StructuredLogger, get_logger
from .document import Block, Coordinate, DocumentCollaborator
from .languagetool.source import RemoteGrammarSource
from .pov.anchor import find_ai_anchor
from .pov.propagation import HeuristicPOVSource
from .position import LinearIndex, build_index
from .rules.custom import UserRule, UserRuleChecker
from .rules.generator import RuleGenerator
from .rules.local import LocalRuleChecker

__version__ = "1.0.0"

logger = get_logger('inline_suggest.engine')


@dataclass
class PassDiagnostics:
    """Counts and errors for one pass; how failures reach the host."""
    block_id: Any = None
    sources: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    dropped_matches: int = 0
    duplicates: int = 0
    skipped_rules: List[str] = field(default_factory=list)
    pov_path: str = "disabled"  # disabled, ai, heuristic, none
    cursor_offset: Optional[int] = None

    def record(self, result: SourceResult):
        self.sources[result.source_name] = result.to_dict()
        if not result.success:
            self.failures[result.source_name] = result.error or "unknown error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'block_id': self.block_id,
            'sources': self.sources,
            'failures': self.failures,
            'dropped_matches': self.dropped_matches,
            'duplicates': self.duplicates,
            'skipped_rules': self.skipped_rules,
            'pov_path': self.pov_path,
            'cursor_offset': self.cursor_offset,
        }


@dataclass
class AnalysisResult:
    """Everything one pass produced. Invalid after any edit to the block."""
    block_id: Hashable
    index: LinearIndex
    suggestions: List[Suggestion] = field(default_factory=list)
    visible: List[Suggestion] = field(default_factory=list)
    gated: List[Suggestion] = field(default_factory=list)
    diagnostics: PassDiagnostics = field(default_factory=PassDiagnostics)

    @property
    def text(self) -> str:
        return self.index.text

    def by_id(self, suggestion_id: str) -> List[Suggestion]:
        """All fragments sharing an id, in order."""
        return [s for s in self.suggestions if s.id == suggestion_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'block_id': self.block_id,
            'suggestions': [s.to_dict() for s in self.suggestions],
            'visible': [s.id for s in self.visible],
            'gated': [s.id for s in self.gated],
            'diagnostics': self.diagnostics.to_dict(),
        }


class SuggestionEngine:
    """
    Produces suggestions for a block of a host document.

    Every collaborator can be injected. When one is not, it is built from
    configuration: the LanguageTool source when enabled, and the Gemini
    collaborator when AI is enabled and an API key is present.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        grammar_source: Optional[AsyncMatchSourceBase] = None,
        local_checker: Optional[LocalRuleChecker] = None,
        user_rules: Optional[List[UserRule]] = None,
        ai_collaborator: Optional[AICollaborator] = None,
        cache: Optional[ResultCache] = None,
        id_generator: Optional[IdGenerator] = None,
    ):
        self.config = config or get_config()
        self.id_generator = id_generator or CounterIdGenerator()
        self.cache = cache if cache is not None else ResultCache(self.config.cache.capacity)

        if grammar_source is None and self.config.languagetool.enabled:
            grammar_source = RemoteGrammarSource(config=self.config.languagetool)
        self.grammar_source = grammar_source

        self.local_checker = local_checker or LocalRuleChecker(self.config.local_rules)
        self.user_rule_checker = UserRuleChecker(user_rules, self.config.local_rules)

        if ai_collaborator is None and self.config.ai.enabled and self.config.ai.api_key:
            ai_collaborator = GeminiCollaborator(self.config.ai)
        self.ai_collaborator = ai_collaborator
        self.coreference_source = (
            CoreferenceSource(ai_collaborator, self.cache) if ai_collaborator is not None else None
        )
        self.heuristic_pov_source = HeuristicPOVSource()
        self.rule_generator = RuleGenerator(ai_collaborator)

    # ------------------------------------------------------------------
    # User rules
    # ------------------------------------------------------------------
    def add_rule(self, rule: UserRule):
        self.user_rule_checker.add_rule(rule)

    def remove_rule(self, rule_id: str):
        self.user_rule_checker.remove_rule(rule_id)

    async def add_rule_from_intent(self, intent: str) -> UserRule:
        """Generate a rule from a natural-language intent and enable it."""
        rule = await self.rule_generator.generate(intent)
        self.add_rule(rule)
        return rule

    @property
    def user_rules(self) -> List[UserRule]:
        return list(self.user_rule_checker.rules)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------
    async def analyze_at(self, document: DocumentCollaborator,
                         cursor: Coordinate) -> Optional[AnalysisResult]:
        """Analyze the block enclosing the cursor; None if there is none."""
        block_id = document.block_at(cursor)
        if block_id is None:
            return None
        return await self.analyze(document, block_id, cursor)

    async def analyze(self, document: DocumentCollaborator, block_id: Hashable,
                      cursor: Optional[Coordinate] = None) -> AnalysisResult:
        """Run a full analysis pass over one block."""
        block = document.block(block_id)
        StructuredLogger.new_correlation_id()
        with logger.log_operation('analysis_pass', block_id=str(block_id)):
            return await self._analyze_block(block, cursor)

    async def _analyze_block(self, block: Block, cursor: Optional[Coordinate]) -> AnalysisResult:
        index = build_index(block)
        diagnostics = PassDiagnostics(block_id=block.block_id)
        result = AnalysisResult(block.block_id, index, diagnostics=diagnostics)

        text = index.text
        if not text.strip():
            return result

        cursor_offset = self._cursor_offset(index, cursor)
        diagnostics.cursor_offset = cursor_offset

        grammar_result, pov_result = await asyncio.gather(
            self._run_grammar(text),
            self._run_pov(text, cursor_offset, diagnostics),
        )

        matches: List[Match] = []
        for source_result in (grammar_result,
                              self.local_checker.check(text),
                              self.user_rule_checker.check(text),
                              pov_result):
            if source_result is None:
                continue
            diagnostics.record(source_result)
            diagnostics.skipped_rules.extend(source_result.metrics.get('skipped_rules', []))
            matches.extend(source_result.matches)

        mapped = to_suggestions(matches, index, self.id_generator)
        diagnostics.dropped_matches = mapped.dropped
        aggregated = aggregate(mapped.suggestions)
        diagnostics.duplicates = aggregated.duplicates

        result.suggestions = aggregated.suggestions
        result.visible = aggregated.visible
        result.gated = aggregated.gated

        if diagnostics.failures:
            logger.warning("Analysis pass degraded", failures=diagnostics.failures)
        return result

    def _cursor_offset(self, index: LinearIndex, cursor: Optional[Coordinate]) -> Optional[int]:
        if cursor is None:
            return None
        try:
            return index.to_linear(cursor)
        except MappingError as e:
            logger.debug("Cursor outside analyzed block", error=e.message)
            return None

    async def _run_grammar(self, text: str) -> Optional[SourceResult]:
        if self.grammar_source is None or not self.grammar_source.enabled:
            return None
        return await self._with_timeout(self.grammar_source, text,
                                        self.config.languagetool.request_timeout)

    async def _run_pov(self, text: str, cursor_offset: Optional[int],
                       diagnostics: PassDiagnostics) -> Optional[SourceResult]:
        if not self.config.pov.enabled:
            diagnostics.pov_path = "disabled"
            return None
        if cursor_offset is None:
            diagnostics.pov_path = "none"
            return None

        if self.coreference_source is not None:
            anchor = find_ai_anchor(text, cursor_offset, self.config.pov.ai_window)
            if anchor is not None:
                ai_result = await self._with_timeout(
                    self.coreference_source, text, self.config.ai.request_timeout,
                    anchor=anchor)
                if ai_result.success:
                    diagnostics.pov_path = "ai"
                    return ai_result
                # Failed AI call still shows up in diagnostics
                diagnostics.record(ai_result)

        diagnostics.pov_path = "heuristic"
        return self.heuristic_pov_source.check(text, cursor=cursor_offset)

    async def _with_timeout(self, source: AsyncMatchSourceBase, text: str,
                            timeout: Optional[float], **kwargs) -> SourceResult:
        try:
            return await asyncio.wait_for(source.check(text, **kwargs), timeout)
        except asyncio.TimeoutError:
            logger.warning("Source timed out", source=source.SOURCE_NAME, timeout=timeout)
            return SourceResult(source_name=source.SOURCE_NAME, success=False,
                                error=f"Timed out after {timeout}s")
