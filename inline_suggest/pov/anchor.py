"""
Anchor Inference
================
Works out which point-of-view category the user is aiming for, from the
cursor position and the text around it.

Two strategies:

- heuristic: the pronoun nearest the cursor anywhere in the block;
- AI: the nearest pronoun or capitalized word inside a small window around
  the cursor, whose category the AI collaborator then decides.

"No anchor" is a normal outcome (None), never an error.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .categories import POVCategory, category_of, tokenize_pronouns

__version__ = "1.0.0"

DEFAULT_AI_WINDOW = 15

WORD_PATTERN = re.compile(r"\b[A-Za-z][\w'-]*\b")


@dataclass(frozen=True)
class AnchorToken:
    """The token the user is focused on."""
    text: str
    start: int
    end: int
    is_capitalized: bool
    category: Optional[POVCategory] = None


def distance(cursor: int, start: int, end: int) -> int:
    """0 if the cursor is within or on a boundary of [start, end], else the gap."""
    if start <= cursor <= end:
        return 0
    if cursor < start:
        return start - cursor
    return cursor - end


def _nearest(cursor: int, spans: Iterable[Tuple[str, int, int]]):
    best = None
    best_distance = None
    for span in spans:
        d = distance(cursor, span[1], span[2])
        # Strict less-than: ties keep the earliest-scanned token
        if best_distance is None or d < best_distance:
            best, best_distance = span, d
    return best


def _make_anchor(text: str, start: int, end: int) -> AnchorToken:
    return AnchorToken(
        text=text,
        start=start,
        end=end,
        is_capitalized=text[:1].isupper(),
        category=category_of(text),
    )


def infer_heuristic_anchor(text: str, cursor: int) -> Optional[AnchorToken]:
    """Nearest closed-set pronoun to the cursor; None if the block has none."""
    tokens = [(t.text, t.start, t.end) for t in tokenize_pronouns(text)]
    nearest = _nearest(cursor, tokens)
    if nearest is None:
        return None
    return _make_anchor(*nearest)


def find_ai_anchor(text: str, cursor: int, window: int = DEFAULT_AI_WINDOW) -> Optional[AnchorToken]:
    """
    Nearest pronoun or capitalized word within +/- window characters.

    The anchor's category here is only the closed-set lookup; for names it
    is None and the AI collaborator decides.
    """
    lo = max(0, cursor - window)
    hi = min(len(text), cursor + window)
    candidates = []
    for m in WORD_PATTERN.finditer(text):
        if m.end() < lo:
            continue
        if m.start() > hi:
            break
        word = m.group()
        if category_of(word) is not None or word[0].isupper():
            candidates.append((word, m.start(), m.end()))
    nearest = _nearest(cursor, candidates)
    if nearest is None:
        return None
    return _make_anchor(*nearest)
