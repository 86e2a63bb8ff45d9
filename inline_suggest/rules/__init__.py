"""
Rule Sources
============
Deterministic local rules, user-defined regex rules, and the intent-to-rule
generator.
"""

from .local import (
    LocalRule,
    LocalRuleChecker,
    RepeatedWordRule,
    MultipleSpacesRule,
    SentenceCapitalizationRule,
    ArticleAgreementRule,
    MoodAgreementRule,
    DEFAULT_RULES,
)
from .custom import UserRule, UserRuleChecker, compile_rule, compile_rules
from .generator import RuleGenerator, heuristic_rule

__version__ = "1.0.0"

__all__ = [
    'LocalRule',
    'LocalRuleChecker',
    'RepeatedWordRule',
    'MultipleSpacesRule',
    'SentenceCapitalizationRule',
    'ArticleAgreementRule',
    'MoodAgreementRule',
    'DEFAULT_RULES',
    'UserRule',
    'UserRuleChecker',
    'compile_rule',
    'compile_rules',
    'RuleGenerator',
    'heuristic_rule',
]
