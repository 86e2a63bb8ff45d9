"""
Shared fixtures: an offline engine configuration and fake collaborators.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from inline_suggest import config
from inline_suggest.ai.client import AICollaborator
from inline_suggest.base import AsyncMatchSourceBase, CounterIdGenerator
from inline_suggest.config import AIConfig, EngineConfig, LanguageToolConfig
from inline_suggest.config_logging import SourceUnavailable
from inline_suggest.engine import SuggestionEngine
from inline_suggest.pov.categories import POVCategory


def run(coro):
    """Drive a coroutine to completion."""
    return asyncio.run(coro)


class FakeCollaborator(AICollaborator):
    """Scripted AI collaborator that records its calls."""

    def __init__(self, category: Optional[POVCategory] = None,
                 items: Optional[List[Dict[str, Any]]] = None,
                 rule: Optional[Dict[str, Any]] = None,
                 fail: bool = False):
        self.category = category
        self.items = items or []
        self.rule = rule
        self.fail = fail
        self.calls: List[str] = []

    def _maybe_fail(self):
        if self.fail:
            raise SourceUnavailable("collaborator offline", source="fake")

    async def infer_category(self, context, anchor):
        self.calls.append('infer_category')
        self._maybe_fail()
        return self.category

    async def align_pronouns(self, context, anchor, target):
        self.calls.append('align_pronouns')
        self._maybe_fail()
        return list(self.items)

    async def generate_rule(self, intent):
        self.calls.append('generate_rule')
        self._maybe_fail()
        return self.rule


class FailingGrammarSource(AsyncMatchSourceBase):
    """Grammar source whose service is always down."""

    SOURCE_NAME = "Grammar (failing)"

    async def _check_impl(self, text, metrics, **kwargs):
        raise SourceUnavailable("service down", source=self.SOURCE_NAME)


class SlowGrammarSource(AsyncMatchSourceBase):
    """Grammar source that never answers in time."""

    SOURCE_NAME = "Grammar (slow)"

    async def _check_impl(self, text, metrics, **kwargs):
        await asyncio.sleep(5)
        return []


@pytest.fixture(autouse=True)
def reset_global_config():
    """Each test starts from default configuration."""
    config.reset_config()
    yield
    config.reset_config()


@pytest.fixture
def engine_config() -> EngineConfig:
    """Offline configuration: no remote grammar, no AI."""
    return EngineConfig(
        languagetool=LanguageToolConfig(enabled=False),
        ai=AIConfig(enabled=False),
    )


@pytest.fixture
def engine(engine_config) -> SuggestionEngine:
    return SuggestionEngine(config=engine_config, id_generator=CounterIdGenerator())
