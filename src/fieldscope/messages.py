"""Localized message resolution for fieldscope.

The MessageResolver stores one message table per locale and turns a rule
failure into display text. Lookup order (first hit wins):

1. ``field.ruleKind`` in the target locale
2. ``ruleKind`` in the target locale
3. ``field.ruleKind`` then ``ruleKind`` in the fallback locale
4. The rule's registration-time fallback message
5. The generic template ``"The {name} field is invalid."``

Tables are plain data. The bundled ones live in ``fieldscope/locales`` as
YAML files named after their locale; callers add their own with
``set_messages`` or ``load_messages_file``.
"""

import json
import logging
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

from fieldscope.exceptions import MessageTableError
from fieldscope.types import GENERIC_MESSAGE, Listener

logger = logging.getLogger(__name__)

_LOCALES_DIR = Path(__file__).parent / "locales"
_SCHEMA_PATH = Path(__file__).parent / "schemas" / "message_table.schema.json"

# {placeholder}
PLACEHOLDER_PATTERN = re.compile(r"\{(\w+)\}")

# Placeholders that receive the field label
NAME_PLACEHOLDERS = ("name", "field")

_table_validator: Draft202012Validator | None = None


def _get_table_validator() -> Draft202012Validator:
    global _table_validator
    if _table_validator is None:
        with _SCHEMA_PATH.open() as fh:
            _table_validator = Draft202012Validator(json.load(fh))
    return _table_validator


def normalize_locale(locale: str) -> str:
    """Locales are case-insensitive; store and compare them lowercased."""
    return locale.strip().lower()


def humanize_field(field: str) -> str:
    """Turn a field identifier into a display name.

    ``firstName`` -> ``First Name``, ``first_name`` -> ``First name``,
    ``email`` -> ``Email``.
    """
    if not field:
        return ""
    words = re.sub(r"(?<=[a-z0-9])([A-Z])", r" \1", field)
    words = re.sub(r"[_\-]+", " ", words).strip()
    words = re.sub(r"\s+", " ", words)
    return words[:1].upper() + words[1:]


def check_message_table(table: Any, locale: str | None = None) -> dict[str, str]:
    """Validate a message table and return it as a plain dict.

    Raises:
        MessageTableError: If the table is not a mapping of key -> template.
    """
    if not isinstance(table, Mapping):
        raise MessageTableError(
            f"Message table must be a mapping, got {type(table).__name__}", locale=locale
        )
    bad_keys = [key for key in table if not isinstance(key, str)]
    if bad_keys:
        raise MessageTableError(
            f"Message table keys must be strings, got {bad_keys!r}", locale=locale
        )

    table = dict(table)
    problems = [
        f"{'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
        for error in _get_table_validator().iter_errors(table)
    ]
    if problems:
        raise MessageTableError(
            f"Invalid message table for locale '{locale}': " + "; ".join(sorted(problems)),
            locale=locale,
        )
    return table


def load_message_file(path: Path) -> dict[str, str]:
    """Read a YAML message table from disk.

    Raises:
        MessageTableError: If the file can't be read, parsed or validated.
    """
    try:
        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except OSError as e:
        raise MessageTableError(f"Cannot read message file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise MessageTableError(f"YAML parse error in {path}: {e}") from e

    if raw is None:
        raise MessageTableError(f"Message file {path} is empty")
    return check_message_table(raw, locale=path.stem)


class MessageResolver:
    """Locale -> message table store with deterministic resolution.

    Example:
        resolver = MessageResolver(locale="pt-BR")
        resolver.resolve("min", "password", {"min": 8})
        # "O campo Password deve ter pelo menos 8 caracteres."
    """

    def __init__(
        self,
        locale: str = "en",
        fallback_locale: str = "en",
        *,
        load_defaults: bool = True,
    ):
        self._locale = normalize_locale(locale)
        self._fallback_locale = normalize_locale(fallback_locale)
        self._messages: dict[str, dict[str, str]] = {}
        self._listeners: list[Listener] = []
        if load_defaults:
            self.load_default_messages()

    # -------------------------------------------------------------------------
    # Locale
    # -------------------------------------------------------------------------

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def fallback_locale(self) -> str:
        return self._fallback_locale

    def get_locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> bool:
        """Switch the active locale.

        Returns:
            True if the locale changed
        """
        normalized = normalize_locale(locale)
        if not normalized or normalized == self._locale:
            return False
        logger.debug("Locale changed from '%s' to '%s'", self._locale, normalized)
        self._locale = normalized
        self._notify()
        return True

    def set_fallback_locale(self, locale: str) -> None:
        self._fallback_locale = normalize_locale(locale)
        self._notify()

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def set_messages(
        self,
        locale: str,
        table: Mapping[str, str],
        *,
        merge: bool = False,
    ) -> None:
        """Install a message table for a locale.

        Args:
            locale: Locale code (case-insensitive)
            table: Lookup key -> template
            merge: Merge into the existing table instead of replacing it

        Raises:
            MessageTableError: If the table is malformed
        """
        normalized = normalize_locale(locale)
        checked = check_message_table(table, locale=locale)
        if merge and normalized in self._messages:
            self._messages[normalized].update(checked)
        else:
            self._messages[normalized] = checked
        logger.debug(
            "%s %d messages for locale '%s'",
            "Merged" if merge else "Loaded",
            len(checked),
            normalized,
        )
        self._notify()

    def add_messages(self, locale: str, table: Mapping[str, str]) -> None:
        """Merge messages into a locale's table."""
        self.set_messages(locale, table, merge=True)

    def load_messages_file(
        self,
        path: Path | str,
        locale: str | None = None,
        *,
        merge: bool = True,
    ) -> None:
        """Load a YAML message table; the locale defaults to the file stem."""
        path = Path(path)
        self.set_messages(locale or path.stem, load_message_file(path), merge=merge)

    def load_default_messages(self) -> None:
        """Load the bundled locale tables (merged into existing ones)."""
        for path in sorted(_LOCALES_DIR.glob("*.yaml")):
            self.load_messages_file(path, merge=True)

    def has_locale(self, locale: str) -> bool:
        return normalize_locale(locale) in self._messages

    def available_locales(self) -> list[str]:
        return sorted(self._messages)

    def get_messages(self, locale: str | None = None) -> dict[str, str]:
        """Copy of one locale's table (the active locale by default)."""
        return dict(self._messages.get(normalize_locale(locale or self._locale), {}))

    def clear(self, *, reload_defaults: bool = True) -> None:
        """Drop every table, then reload the bundled ones unless told not to."""
        self._messages.clear()
        if reload_defaults:
            self.load_default_messages()
        self._notify()

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def lookup(self, rule_kind: str, field: str, locale: str | None = None) -> str | None:
        """Find the template for a rule failure in the locale tables only."""
        target = normalize_locale(locale) if locale else self._locale

        locales = [target]
        if self._fallback_locale != target:
            locales.append(self._fallback_locale)

        for code in locales:
            table = self._messages.get(code)
            if not table:
                continue
            template = table.get(f"{field}.{rule_kind}") or table.get(rule_kind)
            if template:
                return template
        return None

    def resolve(
        self,
        rule_kind: str,
        field: str,
        params: Mapping[str, Any] | None = None,
        locale: str | None = None,
        fallback_message: str | None = None,
        label: str | None = None,
    ) -> str:
        """Resolve and interpolate the message for a rule failure.

        Args:
            rule_kind: Kind of the failing rule
            field: Field identifier (unscoped)
            params: Rule params used for placeholder substitution
            locale: Locale override (active locale by default)
            fallback_message: The rule's registration-time message
            label: Display label replacing the humanized field name

        Returns:
            The display message
        """
        template = (
            self.lookup(rule_kind, field, locale)
            or fallback_message
            or GENERIC_MESSAGE
        )
        return self.format(template, field, params, label)

    def format(
        self,
        template: str,
        field: str,
        params: Mapping[str, Any] | None = None,
        label: str | None = None,
    ) -> str:
        """Substitute {name} and rule params; unknown placeholders stay verbatim."""
        display_name = label or humanize_field(field)
        params = params or {}

        def replace(match: re.Match) -> str:
            key = match.group(1)
            if key in NAME_PLACEHOLDERS:
                return display_name
            if key in params and params[key] is not None:
                return _format_param(params[key])
            return match.group(0)

        return PLACEHOLDER_PATTERN.sub(replace, template)

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for locale and table changes."""
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed:
                subscribed = False
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.warning("MessageResolver listener %r failed", listener, exc_info=True)


def _format_param(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
