"""
Local Grammar Rules v1.0.0
==========================
Deterministic pattern passes over a block's flattened text.

Each rule yields Match records in linear offsets. Rules are cheap and run
on every pass; they are the offline floor under the remote grammar service.
"""

import re
from typing import Any, Dict, Iterable, List, Optional

from ..base import Match, MatchSource, MatchSourceBase
from ..casing import match_case
from ..config import LocalRulesConfig, get_config

__version__ = "1.0.0"


class LocalRule:
    """One closed pattern pass."""

    RULE_ID = "LOCAL"
    RULE_NAME = "Local rule"

    def find(self, text: str) -> List[Match]:
        raise NotImplementedError("Subclasses must implement find()")

    def make_match(self, start: int, end: int, replacement: str, message: str) -> Match:
        return Match(
            start=start,
            end=end,
            replacement=replacement,
            message=message,
            source=MatchSource.LOCAL_RULE,
            rule_id=self.RULE_ID,
        )


class RepeatedWordRule(LocalRule):
    """Detects repeated adjacent words (e.g., 'the the')."""

    RULE_ID = "REP001"
    RULE_NAME = "Repeated word"

    # Words that can legitimately be repeated
    ALLOWED_REPEATS = {'that', 'had', 'very', 'really'}

    PATTERN = re.compile(r'\b(\w+)(\s+)(\1)\b', re.IGNORECASE)

    def find(self, text: str) -> List[Match]:
        matches = []
        for m in self.PATTERN.finditer(text):
            word = m.group(1)
            if word.lower() in self.ALLOWED_REPEATS or word.isdigit():
                continue
            # Drop the second occurrence together with the whitespace before it
            matches.append(self.make_match(
                m.end(1), m.end(3), "",
                f'Repeated word: "{m.group()}". Remove the duplicate "{word}".'
            ))
        return matches


class MultipleSpacesRule(LocalRule):
    """Collapses runs of two or more spaces."""

    RULE_ID = "SPC001"
    RULE_NAME = "Multiple spaces"

    PATTERN = re.compile(r' {2,}')

    def find(self, text: str) -> List[Match]:
        return [
            self.make_match(m.start(), m.end(), " ", "Collapse multiple spaces into one.")
            for m in self.PATTERN.finditer(text)
        ]


class SentenceCapitalizationRule(LocalRule):
    """Sentences should start with a capital letter."""

    RULE_ID = "CAP001"
    RULE_NAME = "Sentence capitalization"

    PATTERN = re.compile(r'(^\s*|[.!?]["”’)\]]?\s+)([a-z])')

    # Lower-case continuations after these are not sentence starts
    ABBREVIATIONS = {'e.g', 'i.e', 'etc', 'vs', 'cf', 'approx', 'no', 'fig'}

    def find(self, text: str) -> List[Match]:
        matches = []
        for m in self.PATTERN.finditer(text):
            if m.group(1).strip() and self._after_abbreviation(text, m.start(1)):
                continue
            letter = m.group(2)
            matches.append(self.make_match(
                m.start(2), m.end(2), letter.upper(),
                "Sentence does not start with a capital letter."
            ))
        return matches

    def _after_abbreviation(self, text: str, punct_index: int) -> bool:
        prev = re.search(r'([\w.]+)$', text[:punct_index])
        return bool(prev) and prev.group(1).lower() in self.ABBREVIATIONS


class ArticleAgreementRule(LocalRule):
    """'a' before vowel sounds should be 'an', and the reverse."""

    RULE_ID = "ART001"
    RULE_NAME = "Article agreement"

    PATTERN = re.compile(r"\b(a|an)(\s+)([A-Za-z][\w'-]*)", re.IGNORECASE)

    # Vowel-initial words that start with a consonant sound
    CONSONANT_SOUND_PREFIXES = (
        'uni', 'use', 'usu', 'uti', 'uto', 'ura', 'ure', 'uro', 'eu', 'ewe',
        'one', 'once', 'ubi', 'uku',
    )
    # Consonant-initial words that start with a vowel sound
    VOWEL_SOUND_PREFIXES = ('hour', 'honest', 'honor', 'honour', 'heir')

    def find(self, text: str) -> List[Match]:
        matches = []
        for m in self.PATTERN.finditer(text):
            article, space, word = m.group(1), m.group(2), m.group(3)
            # Acronyms depend on letter names ("an FBI agent"); leave them
            if len(word) > 1 and word.isupper():
                continue
            # "Plan A is ready": a capital A mid-sentence is a label
            if article == 'A' and not self._at_sentence_start(text, m.start()):
                continue
            expected = self.expected_article(word)
            if expected is None or expected == article.lower():
                continue
            replacement = self._shape_article(expected, article) + space + word
            matches.append(self.make_match(
                m.start(), m.end(), replacement,
                f'Use "{expected}" before "{word}".'
            ))
        return matches

    def expected_article(self, word: str) -> Optional[str]:
        lower = word.lower()
        if lower.startswith(self.VOWEL_SOUND_PREFIXES):
            return 'an'
        if lower.startswith(self.CONSONANT_SOUND_PREFIXES):
            return 'a'
        if lower[0] in 'aeiou':
            return 'an'
        if lower[0].isalpha():
            return 'a'
        return None

    @staticmethod
    def _shape_article(expected: str, article: str) -> str:
        # A bare "A" is a capitalized article, not an all-caps word
        if article == 'A':
            return expected.capitalize()
        return match_case(expected, article)

    @staticmethod
    def _at_sentence_start(text: str, index: int) -> bool:
        before = text[:index].rstrip()
        return not before or before[-1] in '.!?"“”'


class MoodAgreementRule(LocalRule):
    """Indicative statements take 'was' after it/he/she, not 'were'."""

    RULE_ID = "MOOD001"
    RULE_NAME = "Subjunctive/indicative mood"

    PATTERN = re.compile(r'\b(it|she|he)(\s+)(were)\b', re.IGNORECASE)
    PREVIOUS_WORD = re.compile(r'(\w+)\s+$')

    # Words that introduce a legitimate subjunctive
    SUBJUNCTIVE_TRIGGERS = {'if', 'wish', 'suppose', 'that'}

    def find(self, text: str) -> List[Match]:
        matches = []
        for m in self.PATTERN.finditer(text):
            prev = self.PREVIOUS_WORD.search(text[:m.start()])
            if prev and prev.group(1).lower() in self.SUBJUNCTIVE_TRIGGERS:
                continue
            subject = m.group(1)
            replacement = subject + m.group(2) + match_case("was", m.group(3))
            matches.append(self.make_match(
                m.start(), m.end(), replacement,
                f'Use "was" for indicative statements with "{subject}".'
            ))
        return matches


DEFAULT_RULES = (
    RepeatedWordRule,
    MultipleSpacesRule,
    SentenceCapitalizationRule,
    ArticleAgreementRule,
    MoodAgreementRule,
)


class LocalRuleChecker(MatchSourceBase):
    """Runs every enabled local rule over a block's text."""

    SOURCE_NAME = "Local Rules"
    SOURCE_VERSION = "1.0.0"

    def __init__(self, config: Optional[LocalRulesConfig] = None,
                 rules: Optional[Iterable[LocalRule]] = None):
        config = config or get_config().local_rules
        super().__init__(config.enabled)
        if rules is None:
            rules = [rule_cls() for rule_cls in DEFAULT_RULES]
        disabled = set(config.disabled_rules)
        self.rules = [r for r in rules if r.RULE_ID not in disabled]

    def _check_impl(self, text: str, metrics: Dict[str, Any], **kwargs) -> List[Match]:
        matches = []
        for rule in self.rules:
            found = rule.find(text)
            if found:
                metrics[rule.RULE_ID] = len(found)
            matches.extend(found)
        return matches
