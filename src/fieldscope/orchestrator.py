"""Validation orchestrator for fieldscope.

Owns per-scope field data, rule bindings and labels; runs rules against the
current data; records failures in the ErrorBag with messages from the
MessageResolver.

Lifecycle of a field validation:
1. Clear the field's errors
2. Normalize the value (strings are trimmed)
3. Run bound rules in declared order, honoring should_apply, the optional
   pass-through for empty values and required/stop-on-first short-circuits
4. Record failures (rule faults count as failures with the "invalid" message)
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from fieldscope.config import ValidatorConfig
from fieldscope.errors import ErrorBag
from fieldscope.messages import MessageResolver
from fieldscope.registry import RuleDeclaration, RuleRegistry
from fieldscope.rules import Predicate
from fieldscope.types import (
    ALL_SCOPES,
    DEFAULT_SCOPE,
    INVALID_KIND,
    REQUIRED_KIND,
    Listener,
    Rule,
    Scope,
    is_empty,
    normalize_value,
)

logger = logging.getLogger(__name__)


class ValidationOrchestrator:
    """Runs validation per field and per scope.

    Scopes are created lazily on first reference and never share data,
    rules, labels or errors. Validation never raises because of rule
    behavior: every failure mode degrades to "this field is invalid".

    Example:
        validator = ValidationOrchestrator({"locale": "en"})
        validator.set_rules("email", {"required": True, "email": True}, scope="login")
        validator.set_data({"email": "not-an-email"}, scope="login")
        if not await validator.validate_scope("login"):
            print(validator.errors.all_by_field())
            # {"login.email": ["The Email field must be a valid email address."]}
    """

    def __init__(
        self,
        config: ValidatorConfig | Mapping[str, Any] | None = None,
        *,
        registry: RuleRegistry | None = None,
        resolver: MessageResolver | None = None,
        error_bag: ErrorBag | None = None,
    ):
        if not isinstance(config, ValidatorConfig):
            config = ValidatorConfig.from_dict(dict(config) if config else None)
        self._config = config

        self.registry = registry or RuleRegistry()
        self.resolver = resolver or MessageResolver(
            locale=config.locale,
            fallback_locale=config.fallback_locale,
        )
        if resolver is not None:
            self.resolver.set_locale(config.locale)
            self.resolver.set_fallback_locale(config.fallback_locale)
        self.errors = error_bag if error_bag is not None else ErrorBag()

        self._scopes: dict[str, Scope] = {}
        # scoped key -> (scope, field), for re-validation after a locale switch
        self._error_owners: dict[str, tuple[str, str]] = {}
        # scoped key -> lock serializing overlapping validate_field calls
        self._field_locks: dict[str, asyncio.Lock] = {}

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def config(self) -> ValidatorConfig:
        return self._config

    def configure(self, **changes: Any) -> ValidatorConfig:
        """Update stop/empty-field options.

        The locale is changed with set_locale, which also refreshes messages.

        Raises:
            ValueError: For unknown options or a locale change
        """
        new_config = self._config.with_changes(**changes)
        if (
            new_config.locale != self._config.locale
            or new_config.fallback_locale != self._config.fallback_locale
        ):
            raise ValueError("Use set_locale() to change the locale")
        self._config = new_config
        return new_config

    # -------------------------------------------------------------------------
    # Scopes, data and rules
    # -------------------------------------------------------------------------

    def scope(self, name: str = DEFAULT_SCOPE) -> Scope:
        """Get a scope, creating it on first reference."""
        if name not in self._scopes:
            self._scopes[name] = Scope(name=name)
        return self._scopes[name]

    def scopes(self) -> list[str]:
        return list(self._scopes)

    def set_rules(
        self,
        field: str,
        declaration: RuleDeclaration,
        scope: str = DEFAULT_SCOPE,
    ) -> "ValidationOrchestrator":
        """Parse a declaration and replace the field's rules in a scope."""
        self.scope(scope).rules[field] = self.registry.parse(declaration)
        return self

    def set_multiple_rules(
        self,
        declarations: Mapping[str, RuleDeclaration],
        scope: str = DEFAULT_SCOPE,
    ) -> "ValidationOrchestrator":
        for field, declaration in declarations.items():
            self.set_rules(field, declaration, scope)
        return self

    def get_rules(self, field: str, scope: str = DEFAULT_SCOPE) -> list[Rule]:
        return list(self.scope(scope).rules.get(field, []))

    def has_rules(self, field: str, scope: str = DEFAULT_SCOPE) -> bool:
        return bool(self.scope(scope).rules.get(field))

    def remove_rules(self, field: str, scope: str = DEFAULT_SCOPE) -> "ValidationOrchestrator":
        """Unbind a field's rules and drop its errors."""
        target = self.scope(scope)
        target.rules.pop(field, None)
        self._drop_errors([target.key_for(field)])
        return self

    def set_data(
        self,
        data: Mapping[str, Any],
        scope: str = DEFAULT_SCOPE,
    ) -> "ValidationOrchestrator":
        """Merge values into a scope's data. Does not validate."""
        self.scope(scope).data.update(data)
        return self

    def set_value(self, field: str, value: Any, scope: str = DEFAULT_SCOPE) -> "ValidationOrchestrator":
        self.scope(scope).data[field] = value
        return self

    def get_value(self, field: str, scope: str = DEFAULT_SCOPE) -> Any:
        return self.scope(scope).data.get(field)

    def get_data(self, scope: str = DEFAULT_SCOPE) -> dict[str, Any]:
        return dict(self.scope(scope).data)

    def set_field_label(self, field: str, label: str, scope: str = DEFAULT_SCOPE) -> "ValidationOrchestrator":
        """Use a display label instead of the humanized field name in messages."""
        self.scope(scope).labels[field] = label
        return self

    # -------------------------------------------------------------------------
    # Rules and messages
    # -------------------------------------------------------------------------

    def extend(
        self,
        kind: str,
        implementation: type | Predicate,
        fallback_message: str | None = None,
    ) -> "ValidationOrchestrator":
        """Register a custom rule kind on this orchestrator's registry."""
        self.registry.register(kind, implementation, fallback_message)
        return self

    def set_messages(
        self,
        locale: str,
        table: Mapping[str, str],
        *,
        merge: bool = False,
    ) -> "ValidationOrchestrator":
        self.resolver.set_messages(locale, table, merge=merge)
        return self

    def add_messages(self, locale: str, table: Mapping[str, str]) -> "ValidationOrchestrator":
        self.resolver.add_messages(locale, table)
        return self

    def get_locale(self) -> str:
        return self.resolver.get_locale()

    async def set_locale(self, locale: str) -> None:
        """Switch locale and re-validate every field that holds an error.

        Displayed messages reflect the new locale once this returns, without
        the caller's data having changed.
        """
        if not self.resolver.set_locale(locale):
            return
        self._config = self._config.with_changes(locale=self.resolver.get_locale())

        owners = [self._error_owners[key] for key in self.errors.keys() if key in self._error_owners]
        if owners:
            await asyncio.gather(
                *(self.validate_field(field, scope) for scope, field in owners)
            )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    async def validate_field(self, field: str, scope: str = DEFAULT_SCOPE) -> bool:
        """Validate one field of a scope against its current value.

        Overlapping calls for the same field and scope run one after another
        in call order.

        Returns:
            True if no errors were recorded for the field
        """
        target = self.scope(scope)
        key = target.key_for(field)
        lock = self._field_locks.setdefault(key, asyncio.Lock())
        async with lock:
            return await self._run_field(target, field, key)

    async def validate_scope(self, scope: str = DEFAULT_SCOPE) -> bool:
        """Validate every field of a scope that has both rules and data.

        Fields with rules but no entry in the scope's data are not
        validated. Eligible fields run concurrently.

        Returns:
            True if every validated field is valid
        """
        target = self.scope(scope)
        fields = [
            field
            for field, rules in target.rules.items()
            if rules and field in target.data
        ]
        if not fields:
            return True

        self._drop_errors([target.key_for(field) for field in fields])

        results = await asyncio.gather(
            *(self.validate_field(field, scope) for field in fields)
        )
        return all(results)

    async def _run_field(self, target: Scope, field: str, key: str) -> bool:
        rules = target.rules.get(field)
        if not rules:
            # Rules may have been unbound or parsed to nothing since the last run
            if self.errors.has(key):
                self._drop_errors([key])
            return True

        self._drop_errors([key])

        value = normalize_value(target.data.get(field))
        all_values = dict(target.data)
        has_required = any(rule.kind == REQUIRED_KIND for rule in rules)
        label = target.labels.get(field)
        failed = False

        for rule in rules:
            is_required = rule.kind == REQUIRED_KIND
            try:
                if not rule.should_apply(value, field, all_values):
                    continue

                # Optional fields accept absence without running format rules
                if (
                    not is_required
                    and not has_required
                    and not self._config.validate_empty_fields
                    and is_empty(value)
                ):
                    continue

                result = rule.validate(value, field, all_values)
                if inspect.isawaitable(result):
                    result = await result
            except Exception:
                logger.exception(
                    "Rule '%s' raised while validating field '%s' in scope '%s'",
                    rule.kind,
                    field,
                    target.name,
                )
                self._record(key, target.name, field, INVALID_KIND, {}, None, label)
                failed = True
                if self._config.stop_on_first_failure or is_required:
                    break
                continue

            if result:
                continue

            self._record(key, target.name, field, rule.kind, rule.params, rule.message, label)
            failed = True
            if self._config.stop_on_first_failure or is_required:
                break

        return not failed

    def _record(
        self,
        key: str,
        scope: str,
        field: str,
        rule_kind: str,
        params: Mapping[str, Any],
        fallback_message: str | None,
        label: str | None,
    ) -> None:
        message = self.resolver.resolve(
            rule_kind,
            field,
            params,
            fallback_message=fallback_message,
            label=label,
        )
        self._error_owners[key] = (scope, field)
        self.errors.add(key, message, rule_kind)

    def _drop_errors(self, keys: list[str]) -> None:
        for key in keys:
            self._error_owners.pop(key, None)
        self.errors.remove_many(keys)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def is_valid(self) -> bool:
        """True if no scope holds an error."""
        return not self.errors.any()

    def has_errors(self) -> bool:
        return self.errors.any()

    def errors_for_scope(self, scope: str = DEFAULT_SCOPE) -> dict[str, list[str]]:
        """Flattened error map restricted to one scope's fields."""
        owned = {
            key for key, (owner, _field) in self._error_owners.items() if owner == scope
        }
        return {
            key: messages
            for key, messages in self.errors.all_by_field().items()
            if key in owned
        }

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Listen for error changes; see ErrorBag.subscribe."""
        return self.errors.subscribe(listener)

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset(self, scope: str = ALL_SCOPES) -> "ValidationOrchestrator":
        """Clear errors and form data for one scope, or for all scopes.

        Rule bindings and labels are kept.
        """
        if scope == ALL_SCOPES:
            self._error_owners.clear()
            self.errors.clear()
            for target in self._scopes.values():
                target.data.clear()
            return self

        keys = [key for key, (owner, _field) in self._error_owners.items() if owner == scope]
        self._drop_errors(keys)
        if scope in self._scopes:
            self._scopes[scope].data.clear()
        return self

