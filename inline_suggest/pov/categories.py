"""
POV Categories
==============
The three closed pronoun alias sets and the cross-mapping between them.

Known lossy cell: towards THEY, both "him" and "her" become "them", and
"her" is also a possessive determiner ("her book" -> "them book" is wrong).
The original literal cannot be recovered from the replacement.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

__version__ = "1.0.0"


class POVCategory(str, Enum):
    HE = "he"
    SHE = "she"
    THEY = "they"

    @classmethod
    def parse(cls, label) -> Optional['POVCategory']:
        """Category for a label like 'she' / 'SHE'; None for 'unknown' or junk."""
        if isinstance(label, cls):
            return label
        if not isinstance(label, str):
            return None
        try:
            return cls(label.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class PronounForms:
    subject: str
    object: str
    possessive_determiner: str
    possessive_pronoun: str

    @property
    def literals(self) -> frozenset:
        return frozenset((self.subject, self.object,
                          self.possessive_determiner, self.possessive_pronoun))


FORMS: Dict[POVCategory, PronounForms] = {
    POVCategory.HE: PronounForms("he", "him", "his", "his"),
    POVCategory.SHE: PronounForms("she", "her", "her", "hers"),
    POVCategory.THEY: PronounForms("they", "them", "their", "theirs"),
}

# (source literal -> replacement) for each target category. Literals already in
# the target set are absent; any other missing cell means "do not propagate".
CROSS_MAP: Dict[POVCategory, Dict[str, str]] = {
    POVCategory.HE: {
        "she": "he",
        "her": "him",
        "hers": "his",
        "they": "he",
        "them": "him",
        "their": "his",
        "theirs": "his",
    },
    POVCategory.SHE: {
        "he": "she",
        "him": "her",
        "his": "her",
        "they": "she",
        "them": "her",
        "their": "her",
        "theirs": "hers",
    },
    POVCategory.THEY: {
        "he": "they",
        "him": "them",
        "his": "their",
        "she": "they",
        "her": "them",
        "hers": "theirs",
    },
}

# Lookup in declaration order, so a literal shared by two sets (none today)
# would resolve to the first
_LITERAL_TO_CATEGORY: Dict[str, POVCategory] = {}
for _category, _forms in FORMS.items():
    for _literal in sorted(_forms.literals):
        _LITERAL_TO_CATEGORY.setdefault(_literal, _category)

ALL_PRONOUNS = frozenset(_LITERAL_TO_CATEGORY)
PRONOUN_PATTERN = re.compile(
    r"\b(" + "|".join(sorted(ALL_PRONOUNS, key=len, reverse=True)) + r")\b",
    re.IGNORECASE,
)


def category_of(literal: str) -> Optional[POVCategory]:
    """Category a pronoun literal belongs to, or None."""
    return _LITERAL_TO_CATEGORY.get(literal.lower())


def literals_of(category: POVCategory) -> frozenset:
    return FORMS[category].literals


def map_literal(literal: str, target: POVCategory) -> Optional[str]:
    """Replacement for literal under target, or None if the cell is undefined."""
    return CROSS_MAP[target].get(literal.lower())


@dataclass(frozen=True)
class PronounToken:
    text: str
    start: int
    end: int

    @property
    def category(self) -> Optional[POVCategory]:
        return category_of(self.text)


def tokenize_pronouns(text: str) -> List[PronounToken]:
    """All closed-set pronoun occurrences in scan order."""
    return [PronounToken(m.group(), m.start(), m.end()) for m in PRONOUN_PATTERN.finditer(text)]
