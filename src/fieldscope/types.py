"""Core types for the fieldscope validation engine.

This module defines the types shared by the registry, the error store,
the message resolver and the orchestrator:
- Rule: protocol every rule instance implements
- ErrorEntry: a single recorded failure
- Scope: the per-form isolation unit (data, rule bindings, labels)
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

DEFAULT_SCOPE = "default"
ALL_SCOPES = "all"

REQUIRED_KIND = "required"
INVALID_KIND = "invalid"

GENERIC_MESSAGE = "The {name} field is invalid."

RuleParams = dict[str, Any]
Listener = Callable[[], None]


class Rule(Protocol):
    """Protocol that all rule instances implement.

    Rules receive the normalized field value, the field name and a copy of
    every value in the field's scope (for cross-field rules such as
    ``confirmed``). ``validate`` may return a bool or an awaitable bool.
    """

    kind: str
    params: RuleParams
    message: str | None

    def validate(
        self,
        value: Any,
        field: str,
        all_values: dict[str, Any],
    ) -> bool | Awaitable[bool]:
        ...

    def should_apply(
        self,
        value: Any,
        field: str,
        all_values: dict[str, Any],
    ) -> bool:
        ...


@dataclass(frozen=True)
class ErrorEntry:
    """A single validation failure.

    Attributes:
        field: Scoped key ("field" for the default scope, "scope.field" otherwise)
        message: Resolved, interpolated display message
        rule_kind: Kind of the rule that failed ("invalid" for rule faults)
    """

    field: str
    message: str
    rule_kind: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "ruleKind": self.rule_kind,
        }


@dataclass
class Scope:
    """A named isolation unit for one logical form.

    Attributes:
        name: Scope name ("default" unless the caller names one)
        data: Field -> current value
        rules: Field -> ordered rule instances
        labels: Field -> display label used for the {name} placeholder
    """

    name: str
    data: dict[str, Any] = field(default_factory=dict)
    rules: dict[str, list[Rule]] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)

    def key_for(self, field_name: str) -> str:
        return scoped_key(field_name, self.name)


def scoped_key(field_name: str, scope: str = DEFAULT_SCOPE) -> str:
    """Build the externally visible error key for a field in a scope."""
    if scope == DEFAULT_SCOPE:
        return field_name
    return f"{scope}.{field_name}"


def is_empty(value: Any) -> bool:
    """Check if a value is considered empty for validation purposes."""
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, tuple, set, dict)) and len(value) == 0:
        return True
    return False


def normalize_value(value: Any) -> Any:
    """Trim strings; leave every other value untouched."""
    if isinstance(value, str):
        return value.strip()
    return value
