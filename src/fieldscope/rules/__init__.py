"""Rule implementations for fieldscope.

This module provides the rule base classes and the built-in rule kinds
that every RuleRegistry starts with.
"""

from fieldscope.rules.base import BaseRule, CallableRule, Predicate
from fieldscope.rules.builtin import (
    BUILTIN_RULES,
    AlphaRule,
    BetweenRule,
    ConfirmedRule,
    DecimalRule,
    DigitsRule,
    EmailRule,
    IntegerRule,
    MaxRule,
    MaxValueRule,
    MinRule,
    MinValueRule,
    NumericRule,
    PatternRule,
    RequiredRule,
    UrlRule,
)


def register_builtin_rules(registry) -> None:
    """Register all built-in rule kinds on a registry.

    Call this at startup, or rely on RuleRegistry() doing it by default.
    """
    for kind, rule_class in BUILTIN_RULES.items():
        registry.register(kind, rule_class)


__all__ = [
    "BaseRule",
    "CallableRule",
    "Predicate",
    "BUILTIN_RULES",
    "AlphaRule",
    "BetweenRule",
    "ConfirmedRule",
    "DecimalRule",
    "DigitsRule",
    "EmailRule",
    "IntegerRule",
    "MaxRule",
    "MaxValueRule",
    "MinRule",
    "MinValueRule",
    "NumericRule",
    "PatternRule",
    "RequiredRule",
    "UrlRule",
    "register_builtin_rules",
]
