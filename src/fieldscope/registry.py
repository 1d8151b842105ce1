"""Rule registry for fieldscope.

Provides registration and lookup for:
- Built-in rule kinds (registered on construction)
- Custom rules (rule classes or plain predicates, registered by the application)

and normalizes the three declaration forms (pipe string, list, mapping)
into one ordered list of rule instances.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any

from fieldscope.exceptions import RuleDeclarationError
from fieldscope.parser import iter_segments, tokenize_segment
from fieldscope.rules import BaseRule, CallableRule, Predicate, register_builtin_rules
from fieldscope.types import GENERIC_MESSAGE, Rule

logger = logging.getLogger(__name__)

RuleDeclaration = str | Mapping[str, Any] | list[Any] | tuple[Any, ...] | None


class RuleRegistry:
    """Registry for rule kinds.

    Rule kinds must be registered before declarations can reference them.
    Built-in kinds are registered automatically unless ``builtins=False``.

    Example:
        registry = RuleRegistry()
        registry.register("even", lambda value, field, values: int(value) % 2 == 0,
                          "The {name} field must be even.")

        rules = registry.parse("required|even")
    """

    def __init__(self, builtins: bool = True):
        self._rule_classes: dict[str, tuple[type, str | None]] = {}
        self._predicates: dict[str, tuple[Predicate, str]] = {}
        if builtins:
            register_builtin_rules(self)

    def register(
        self,
        kind: str,
        implementation: type | Predicate,
        fallback_message: str | None = None,
    ) -> None:
        """Register a rule class or predicate under a kind name.

        Re-registering a kind replaces the previous implementation.

        Args:
            kind: Rule kind referenced by declarations (e.g., "min", "even")
            implementation: A rule class exposing ``validate``, or a predicate
                ``(value, field, all_values) -> bool`` (may be async)
            fallback_message: Message used when no locale table has one

        Raises:
            TypeError: If implementation is neither a rule class nor callable
        """
        if not kind:
            raise ValueError("Rule kind must be a non-empty string")

        if self.is_registered(kind):
            logger.debug("Replacing rule '%s'", kind)
            self.unregister(kind)

        if inspect.isclass(implementation):
            if not callable(getattr(implementation, "validate", None)):
                raise TypeError(
                    f"Rule class for '{kind}' must define a validate() method"
                )
            self._rule_classes[kind] = (implementation, fallback_message)
        elif callable(implementation):
            self._predicates[kind] = (implementation, fallback_message or GENERIC_MESSAGE)
        else:
            raise TypeError(
                f"Rule '{kind}' must be a rule class or a callable, got {type(implementation).__name__}"
            )

    def create(self, kind: str, params: Any = None) -> Rule | None:
        """Create a rule instance for a kind.

        Unknown kinds and malformed parameters are not errors: they are
        logged and None is returned so the rest of the declaration survives.

        Args:
            kind: The rule kind
            params: Declared parameters (None, scalar, list or mapping)

        Returns:
            A rule instance, or None if the rule cannot be built
        """
        try:
            if kind in self._rule_classes:
                rule_class, fallback_message = self._rule_classes[kind]
                return self._instantiate(kind, rule_class, params, fallback_message)

            if kind in self._predicates:
                predicate, fallback_message = self._predicates[kind]
                return CallableRule(predicate, params, kind=kind, message=fallback_message)
        except (RuleDeclarationError, TypeError, ValueError) as e:
            logger.warning("Rule '%s' ignored: %s", kind, e)
            return None

        logger.warning("Unknown validation rule '%s'. This rule will be ignored.", kind)
        return None

    def parse(self, declaration: RuleDeclaration) -> list[Rule]:
        """Parse a rule declaration into an ordered list of rule instances.

        Accepts:
            "required|min:5"                 pipe-delimited string
            ["required", {"min": 5}]         list of strings / single-key mappings
            {"required": True, "min": 5}     mapping; False disables an entry

        Returns:
            Rule instances in declared order; unknown or malformed entries
            are dropped.
        """
        if not declaration:
            return []

        if isinstance(declaration, str):
            return self._parse_string(declaration)

        if isinstance(declaration, Mapping):
            return self._parse_mapping(declaration)

        if isinstance(declaration, (list, tuple)):
            rules: list[Rule] = []
            for item in declaration:
                rules.extend(self._parse_item(item))
            return rules

        logger.warning(
            "Unsupported rule declaration of type %s ignored", type(declaration).__name__
        )
        return []

    def is_registered(self, kind: str) -> bool:
        """Check if a rule kind is registered."""
        return kind in self._rule_classes or kind in self._predicates

    def list_registered(self) -> list[str]:
        """List all registered rule kinds."""
        return sorted(set(self._rule_classes) | set(self._predicates))

    def unregister(self, kind: str) -> None:
        """Remove a rule kind. Unknown kinds are ignored."""
        self._rule_classes.pop(kind, None)
        self._predicates.pop(kind, None)

    def count(self) -> int:
        """Number of registered rule kinds."""
        return len(self._rule_classes) + len(self._predicates)

    def clear(self) -> None:
        """Clear all registrations, built-ins included. Primarily for testing."""
        self._rule_classes.clear()
        self._predicates.clear()

    # -------------------------------------------------------------------------
    # Parsing helpers
    # -------------------------------------------------------------------------

    def _parse_string(self, text: str) -> list[Rule]:
        rules: list[Rule] = []
        for segment, position in iter_segments(text):
            try:
                token = tokenize_segment(segment, position)
            except RuleDeclarationError as e:
                logger.warning("Malformed rule segment ignored: %s", e)
                continue
            rule = self.create(token.kind, token.params)
            if rule is not None:
                rules.append(rule)
        return rules

    def _parse_mapping(self, mapping: Mapping[str, Any]) -> list[Rule]:
        rules: list[Rule] = []
        for kind, value in mapping.items():
            if value is False:
                continue  # Explicitly disabled
            rule = self.create(kind) if value is True else self.create(kind, value)
            if rule is not None:
                rules.append(rule)
        return rules

    def _parse_item(self, item: Any) -> list[Rule]:
        if isinstance(item, str):
            return self._parse_string(item)
        if isinstance(item, Mapping):
            return self._parse_mapping(item)
        if isinstance(item, BaseRule):
            return [item]
        kind = getattr(item, "kind", None)
        if (
            not inspect.isclass(item)
            and isinstance(kind, str)
            and kind
            and callable(getattr(item, "validate", None))
        ):
            return [_adapt_instance(kind, item, getattr(item, "params", None), None)]
        logger.warning("Unsupported rule entry %r ignored", item)
        return []

    def _instantiate(
        self,
        kind: str,
        rule_class: type,
        params: Any,
        fallback_message: str | None,
    ) -> Rule:
        if issubclass(rule_class, BaseRule):
            return rule_class(params, kind=kind, message=fallback_message)

        instance = rule_class() if params is None else rule_class(params)
        return _adapt_instance(kind, instance, params, fallback_message)


def _adapt_instance(
    kind: str,
    instance: Any,
    params: Any,
    fallback_message: str | None,
) -> Rule:
    """Wrap an object that only promises validate() in the Rule protocol."""
    rule = CallableRule(
        instance.validate,
        getattr(instance, "params", params),
        kind=kind,
        message=fallback_message or getattr(instance, "message", None),
    )
    if callable(getattr(instance, "should_apply", None)):
        rule.should_apply = instance.should_apply
    return rule
