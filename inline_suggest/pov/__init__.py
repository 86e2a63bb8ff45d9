"""
Point-of-View Package
=====================
Pronoun categories, anchor inference and propagation.
"""

from .categories import (
    POVCategory,
    PronounForms,
    PronounToken,
    FORMS,
    CROSS_MAP,
    category_of,
    literals_of,
    map_literal,
    tokenize_pronouns,
)
from .anchor import AnchorToken, distance, find_ai_anchor, infer_heuristic_anchor
from .propagation import HeuristicPOVSource, propagate

__version__ = "1.0.0"

__all__ = [
    'POVCategory',
    'PronounForms',
    'PronounToken',
    'FORMS',
    'CROSS_MAP',
    'category_of',
    'literals_of',
    'map_literal',
    'tokenize_pronouns',
    'AnchorToken',
    'distance',
    'find_ai_anchor',
    'infer_heuristic_anchor',
    'HeuristicPOVSource',
    'propagate',
]
