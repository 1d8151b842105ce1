"""fieldscope: scoped field validation with localized messages.

This package provides:
- RuleRegistry: rule kinds and the declaration parser
- ValidationOrchestrator: per-scope data, rule bindings and validation runs
- ErrorBag: ordered, observable error store
- MessageResolver: locale tables with a deterministic fallback chain

Usage:
    from fieldscope import ValidationOrchestrator

    validator = ValidationOrchestrator({"locale": "en"})
    validator.set_rules("email", "required|email", scope="login")
    validator.set_data({"email": "not-an-email"}, scope="login")

    valid = await validator.validate_scope("login")
    validator.errors.all_by_field()
"""

from fieldscope.config import ValidatorConfig
from fieldscope.errors import ErrorBag
from fieldscope.exceptions import (
    FieldscopeError,
    MessageTableError,
    RuleDeclarationError,
)
from fieldscope.messages import (
    MessageResolver,
    check_message_table,
    humanize_field,
    load_message_file,
)
from fieldscope.orchestrator import ValidationOrchestrator
from fieldscope.parser import RuleToken, tokenize
from fieldscope.registry import RuleDeclaration, RuleRegistry
from fieldscope.rules import (
    BUILTIN_RULES,
    BaseRule,
    CallableRule,
    Predicate,
    register_builtin_rules,
)
from fieldscope.types import (
    ALL_SCOPES,
    DEFAULT_SCOPE,
    GENERIC_MESSAGE,
    INVALID_KIND,
    REQUIRED_KIND,
    ErrorEntry,
    Rule,
    Scope,
    scoped_key,
)

__all__ = [
    # Types
    "ALL_SCOPES",
    "DEFAULT_SCOPE",
    "GENERIC_MESSAGE",
    "INVALID_KIND",
    "REQUIRED_KIND",
    "ErrorEntry",
    "Rule",
    "Scope",
    "scoped_key",
    # Configuration
    "ValidatorConfig",
    # Exceptions
    "FieldscopeError",
    "MessageTableError",
    "RuleDeclarationError",
    # Rules
    "BUILTIN_RULES",
    "BaseRule",
    "CallableRule",
    "Predicate",
    "RuleDeclaration",
    "RuleRegistry",
    "RuleToken",
    "register_builtin_rules",
    "tokenize",
    # Errors
    "ErrorBag",
    # Messages
    "MessageResolver",
    "check_message_table",
    "humanize_field",
    "load_message_file",
    # Orchestration
    "ValidationOrchestrator",
]
