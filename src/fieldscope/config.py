"""Validator configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any

_TRUE_VALUES = {"1", "true", "yes", "on"}

# camelCase aliases accepted by from_dict
_ALIASES: dict[str, str] = {
    "stopOnFirstFailure": "stop_on_first_failure",
    "validateEmptyFields": "validate_empty_fields",
    "fallbackLocale": "fallback_locale",
}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class ValidatorConfig:
    """Options recognized by the validation orchestrator.

    Attributes:
        stop_on_first_failure: Stop iterating a field's rules at the first failure
        locale: Active locale for error messages
        fallback_locale: Locale consulted when the active one has no message
        validate_empty_fields: Run non-required rules against empty optional values
    """

    stop_on_first_failure: bool = False
    locale: str = "en"
    fallback_locale: str = "en"
    validate_empty_fields: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ValidatorConfig:
        """Create config from a mapping with snake_case or camelCase keys.

        Raises:
            ValueError: For keys that are not configuration options.
        """
        if not data:
            return cls()
        return cls(**_normalize_keys(data))

    @classmethod
    def from_env(cls) -> ValidatorConfig:
        """Create config from environment variables.

        Reads FIELDSCOPE_LOCALE, FIELDSCOPE_FALLBACK_LOCALE,
        FIELDSCOPE_STOP_ON_FIRST_FAILURE and FIELDSCOPE_VALIDATE_EMPTY_FIELDS.
        Unset variables keep their defaults.
        """
        defaults = cls()
        return cls(
            stop_on_first_failure=_env_flag(
                "FIELDSCOPE_STOP_ON_FIRST_FAILURE", defaults.stop_on_first_failure
            ),
            locale=os.environ.get("FIELDSCOPE_LOCALE", defaults.locale),
            fallback_locale=os.environ.get(
                "FIELDSCOPE_FALLBACK_LOCALE", defaults.fallback_locale
            ),
            validate_empty_fields=_env_flag(
                "FIELDSCOPE_VALIDATE_EMPTY_FIELDS", defaults.validate_empty_fields
            ),
        )

    def with_changes(self, **changes: Any) -> ValidatorConfig:
        """Return a copy with the given options replaced.

        Keys follow the same rules as from_dict.
        """
        return replace(self, **_normalize_keys(changes))


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(ValidatorConfig)}
    result: dict[str, Any] = {}
    for key, value in data.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise ValueError(
                f"Unknown validator option '{key}'. "
                "Available options: " + ", ".join(sorted(known))
            )
        result[name] = value
    return result
