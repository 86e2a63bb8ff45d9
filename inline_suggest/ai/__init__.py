"""
AI Integration
==============
Gemini-backed category inference, coreference alignment and rule generation.

Requires: pip install google-genai
"""

from .client import AICollaborator, GeminiCollaborator, parse_json_object
from .source import CoreferenceSource, to_matches

__version__ = "1.0.0"

__all__ = [
    'AICollaborator',
    'GeminiCollaborator',
    'parse_json_object',
    'CoreferenceSource',
    'to_matches',
]
