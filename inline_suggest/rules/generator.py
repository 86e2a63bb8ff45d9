"""
Rule Generator
==============
Turns a natural-language intent ("avoid 'very'", "replace utilize with use")
into a UserRule.

With an AI collaborator the model writes the pattern; its output is
validated like any other user rule. Without one, or when the model fails,
a small deterministic heuristic covers the common phrasings.
"""

import re
from typing import Optional

from ..base import CounterIdGenerator, IdGenerator
from ..config_logging import InvalidRule, SourceUnavailable, get_logger
from .custom import UserRule, compile_rule

__version__ = "1.0.0"

logger = get_logger('inline_suggest.rules')

BAN_INTENT = re.compile(r"\b(?:avoid|never use|ban)\b", re.IGNORECASE)
BAN_TARGET = re.compile(r"\b(?:avoid|use|ban)\W+['\"]?(\w+)", re.IGNORECASE)
REPLACE_WITH = re.compile(r"replace\s+['\"]?(\w+)['\"]?\s+with\s+['\"]?(\w+)", re.IGNORECASE)
USE_INSTEAD_OF = re.compile(r"use\s+['\"]?(\w+)['\"]?\s+instead\s+of\s+['\"]?(\w+)", re.IGNORECASE)


def heuristic_rule(intent: str) -> UserRule:
    """Build a rule from an intent without any model."""
    lower = intent.lower()

    if BAN_INTENT.search(intent):
        m = BAN_TARGET.search(intent)
        word = m.group(1) if m else "word"
        return UserRule(
            pattern=rf"\b{re.escape(word)}\b",
            message=f'Style Guide: Avoid using the word "{word}".',
            intent=intent,
        )

    if 'replace' in lower or 'instead of' in lower:
        m = REPLACE_WITH.search(intent)
        if m:
            banned, preferred = m.group(1), m.group(2)
        else:
            m = USE_INSTEAD_OF.search(intent)
            preferred, banned = (m.group(1), m.group(2)) if m else (None, None)
        if banned:
            return UserRule(
                pattern=rf"\b{re.escape(banned)}\b",
                message=f'Style Guide: Use "{preferred}" instead of "{banned}".',
                replacement=preferred,
                intent=intent,
            )

    words = re.findall(r"\w+", intent)
    last = words[-1] if words else "word"
    return UserRule(
        pattern=rf"\b{re.escape(last)}\b",
        message=f"Custom Rule: {intent}",
        intent=intent,
    )


class RuleGenerator:
    """Creates user rules from intents, preferring the AI collaborator."""

    def __init__(self, collaborator=None, id_generator: Optional[IdGenerator] = None):
        self.collaborator = collaborator
        self.id_generator = id_generator or CounterIdGenerator(prefix="USR")

    async def generate(self, intent: str) -> UserRule:
        intent = intent.strip()
        if not intent:
            raise InvalidRule("Empty intent")

        rule = None
        if self.collaborator is not None:
            rule = await self._generate_with_ai(intent)
        if rule is None:
            rule = heuristic_rule(intent)

        rule.rule_id = self.id_generator.next_id()
        return rule

    async def _generate_with_ai(self, intent: str) -> Optional[UserRule]:
        try:
            data = await self.collaborator.generate_rule(intent)
        except SourceUnavailable as e:
            logger.warning("AI rule generation failed, using heuristic", error=e.message)
            return None

        if not data or not data.get('pattern'):
            logger.warning("AI rule generation returned no pattern, using heuristic")
            return None

        rule = UserRule(
            pattern=str(data['pattern']),
            message=str(data.get('message') or f"Custom Rule: {intent}"),
            replacement=str(data.get('replacement') or ""),
            intent=intent,
        )
        try:
            compile_rule(rule)
        except InvalidRule as e:
            logger.warning("AI produced an invalid pattern, using heuristic",
                           pattern=rule.pattern, error=e.message)
            return None
        return rule
