"""
User-Defined Rules
==================
Regex rules supplied by the user at runtime.

Every rule is compiled on its own. A pattern that does not compile, or that
looks able to backtrack without bound, is reported and skipped; the other
rules still run. Patterns run on the `regex` engine with a per-rule time
budget enforced inside the search itself, so one catastrophic pattern is cut
off instead of stalling the pass; a match count caps the rest.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import regex

from ..base import Match, MatchSource, MatchSourceBase
from ..casing import match_case
from ..config import LocalRulesConfig, get_config
from ..config_logging import InvalidRule, get_logger

__version__ = "1.0.0"

logger = get_logger('inline_suggest.rules')

# A group holding an unbounded quantifier that is itself repeated: (a+)+, (\w*)*
NESTED_QUANTIFIER = re.compile(r'\((?:[^()\\]|\\.)*[+*](?:[^()\\]|\\.)*\)\s*(?:[+*]|\{\d*,\})')


@dataclass
class UserRule:
    """A user rule definition: pattern source, message, optional replacement."""
    pattern: str
    message: str
    replacement: str = ""
    rule_id: str = ""
    intent: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rule_id': self.rule_id,
            'intent': self.intent,
            'pattern': self.pattern,
            'message': self.message,
            'replacement': self.replacement,
        }


@dataclass
class CompiledRule:
    rule: UserRule
    pattern: "regex.Pattern"


def compile_rule(rule: UserRule, max_pattern_length: int = 500) -> CompiledRule:
    """
    Validate and compile a user rule.

    Raises InvalidRule for empty, over-long, nested-quantifier or
    uncompilable patterns.
    """
    pattern = rule.pattern or ""
    if not pattern.strip():
        raise InvalidRule("Empty pattern", pattern=pattern, rule_id=rule.rule_id)
    if len(pattern) > max_pattern_length:
        raise InvalidRule(f"Pattern longer than {max_pattern_length} characters",
                          pattern=pattern, rule_id=rule.rule_id)
    if NESTED_QUANTIFIER.search(pattern):
        raise InvalidRule("Nested unbounded quantifier", pattern=pattern, rule_id=rule.rule_id)
    try:
        compiled = regex.compile(pattern, regex.IGNORECASE)
    except regex.error as e:
        raise InvalidRule(f"Invalid pattern: {e}", pattern=pattern, rule_id=rule.rule_id) from e
    return CompiledRule(rule, compiled)


@dataclass
class RuleSet:
    """Compiled rules plus the ones that were rejected."""
    compiled: List[CompiledRule] = field(default_factory=list)
    invalid: List[InvalidRule] = field(default_factory=list)


def compile_rules(rules: List[UserRule], max_pattern_length: int = 500) -> RuleSet:
    rule_set = RuleSet()
    for rule in rules:
        try:
            rule_set.compiled.append(compile_rule(rule, max_pattern_length))
        except InvalidRule as e:
            logger.warning("Skipping invalid user rule", rule_id=rule.rule_id,
                           pattern=rule.pattern, error=e.message)
            rule_set.invalid.append(e)
    return rule_set


class UserRuleChecker(MatchSourceBase):
    """Runs user-defined regex rules over a block's text."""

    SOURCE_NAME = "User Rules"
    SOURCE_VERSION = "1.0.0"

    def __init__(self, rules: Optional[List[UserRule]] = None,
                 config: Optional[LocalRulesConfig] = None):
        self.config = config or get_config().local_rules
        super().__init__(self.config.enabled)
        self.set_rules(rules or [])

    def set_rules(self, rules: List[UserRule]):
        self.rules = list(rules)
        self._rule_set = compile_rules(self.rules, self.config.max_pattern_length)

    def add_rule(self, rule: UserRule):
        self.set_rules(self.rules + [rule])

    def remove_rule(self, rule_id: str):
        self.set_rules([r for r in self.rules if r.rule_id != rule_id])

    @property
    def invalid_rules(self) -> List[InvalidRule]:
        return list(self._rule_set.invalid)

    def _check_impl(self, text: str, metrics: Dict[str, Any], **kwargs) -> List[Match]:
        matches = []
        skipped = [e.details.get('rule_id', '') for e in self._rule_set.invalid]
        truncated = []
        for compiled in self._rule_set.compiled:
            found, complete = self._run_rule(compiled, text)
            matches.extend(found)
            if not complete:
                truncated.append(compiled.rule.rule_id)
        metrics['skipped_rules'] = skipped
        if truncated:
            metrics['truncated_rules'] = truncated
            logger.warning("User rules stopped early", rule_ids=truncated)
        return matches

    def _run_rule(self, compiled: CompiledRule, text: str):
        """
        Run one rule; returns (matches, ran_to_completion).

        The search carries the rule's time budget as a regex timeout, so a
        pattern that backtracks catastrophically raises TimeoutError mid-search.
        The match cap only truncates when a further match actually exists.
        """
        rule = compiled.rule
        budget = self.config.rule_time_budget_ms / 1000.0
        deadline = time.monotonic() + budget
        found = []
        try:
            for m in compiled.pattern.finditer(text, timeout=budget):
                if len(found) >= self.config.max_matches_per_rule or time.monotonic() > deadline:
                    return found, False
                if m.end() == m.start():
                    continue
                original = m.group()
                replacement = match_case(rule.replacement, original) if rule.replacement else ""
                found.append(Match(
                    start=m.start(),
                    end=m.end(),
                    replacement=replacement,
                    message=rule.message,
                    source=MatchSource.USER_RULE,
                    rule_id=rule.rule_id,
                ))
        except TimeoutError:
            logger.warning("User rule exceeded its time budget", rule_id=rule.rule_id,
                           budget_ms=self.config.rule_time_budget_ms)
            return found, False
        return found, True
