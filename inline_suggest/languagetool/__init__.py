"""
LanguageTool Integration
========================
Remote grammar checking for the suggestion engine.

Requires: pip install language-tool-python
"""

from .client import GrammarMatch, LanguageToolClient
from .source import RemoteGrammarSource, to_match

__version__ = "1.0.0"

__all__ = ['GrammarMatch', 'LanguageToolClient', 'RemoteGrammarSource', 'to_match']
