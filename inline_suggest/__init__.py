"""
InlineSuggest
=============
Version: 1.0.0

Cursor-aware inline writing suggestions over a structured document:
- LanguageTool: remote grammar, typo, style and punctuation matches
- Local rules: repeated words, spacing, capitalization, a/an, it-were
- User rules: regex rules, written by hand or generated from an intent
- Point of view: pronoun alignment around the cursor (Gemini or heuristic)

Remote sources are optional; every pass degrades to whatever is reachable.
The python-docx adapter is loaded on first access.
"""

from .base import Match, MatchSource, SourceResult, Suggestion, SuggestionKind
from .cache import ResultCache, make_key
from .config import EngineConfig, get_config, load_config, reset_config
from .config_logging import (
    InlineSuggestError,
    InvalidRule,
    MappingError,
    OutOfRange,
    SourceUnavailable,
    UnknownSegment,
    get_logger,
)
from .document import (
    Block,
    Coordinate,
    DocumentCollaborator,
    Segment,
    StructuredRange,
    TextDocument,
)
from .engine import AnalysisResult, PassDiagnostics, SuggestionEngine
from .navigator import CursorNavigator, apply_edits, nearest_suggestion
from .position import LinearIndex, build_index
from .rules import UserRule

__version__ = "1.0.0"

_LAZY = {
    'DocxDocument': 'inline_suggest.docx_document',
}


def __getattr__(name):
    """Lazy load optional adapters on first access."""
    if name in _LAZY:
        import importlib
        module = importlib.import_module(_LAZY[name])
        return getattr(module, name)
    raise AttributeError(f"module 'inline_suggest' has no attribute '{name}'")


def get_status():
    """
    Report which sources a default engine would engage.

    Does not contact any remote service.
    """
    config = get_config()
    return {
        'version': __version__,
        'sources': {
            'languagetool': {
                'enabled': config.languagetool.enabled,
                'server_url': config.languagetool.server_url,
                'disabled_categories': config.languagetool.disabled_categories(),
            },
            'local_rules': {
                'enabled': config.local_rules.enabled,
                'disabled_rules': list(config.local_rules.disabled_rules),
            },
            'pov': {'enabled': config.pov.enabled},
            'ai': {
                'enabled': config.ai.enabled,
                'model': config.ai.model,
                'api_key_present': bool(config.ai.api_key),
            },
        },
    }


__all__ = [
    'AnalysisResult',
    'Block',
    'Coordinate',
    'CursorNavigator',
    'DocumentCollaborator',
    'DocxDocument',
    'EngineConfig',
    'InlineSuggestError',
    'InvalidRule',
    'LinearIndex',
    'MappingError',
    'Match',
    'MatchSource',
    'OutOfRange',
    'PassDiagnostics',
    'ResultCache',
    'Segment',
    'SourceResult',
    'SourceUnavailable',
    'StructuredRange',
    'Suggestion',
    'SuggestionEngine',
    'SuggestionKind',
    'TextDocument',
    'UnknownSegment',
    'UserRule',
    'apply_edits',
    'build_index',
    'get_config',
    'get_logger',
    'get_status',
    'load_config',
    'make_key',
    'nearest_suggestion',
    'reset_config',
]
