"""Built-in rule kinds.

Available rules:
- required: Value must be present and non-blank
- min / max: Length bound for strings and collections, value bound for numbers
- between: Both bounds at once
- email, url: Format checks
- numeric, integer, decimal: Number formats
- alpha: Letters only
- digits: Exactly N digits
- minValue / maxValue: Numeric value bounds
- pattern: Regular expression search
- confirmed: Must equal another field in the same scope

Every rule except ``required`` passes on empty values; emptiness belongs
to the required rule.
"""

import math
import re
from typing import Any

from fieldscope.exceptions import RuleDeclarationError
from fieldscope.parser import PARAM_SEPARATOR
from fieldscope.rules.base import BaseRule, require_number
from fieldscope.types import REQUIRED_KIND, RuleParams, is_empty, normalize_value


# =============================================================================
# Format Patterns
# =============================================================================

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)

URL_PATTERN = re.compile(
    r"^https?://[^\s/$.?#].[^\s]*$",
    re.IGNORECASE
)

DECIMAL_PATTERN = re.compile(r"^-?\d*\.?\d+$")

ALPHA_PATTERN = re.compile(r"^[a-zA-Z]+$")

DIGITS_PATTERN = re.compile(r"^\d+$")


def _size(value: Any) -> int | float | None:
    """Length for strings and collections, the value itself for numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, list, tuple, set, dict)):
        return len(value)
    if isinstance(value, (int, float)):
        return value
    return None


def _to_number(value: Any) -> float | None:
    """Parse a finite number from an int, float or numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _single_param(name: str, params: Any) -> Any:
    if isinstance(params, dict):
        return params.get(name)
    if isinstance(params, list) and len(params) == 1:
        return params[0]
    return params


# =============================================================================
# Presence
# =============================================================================


class RequiredRule(BaseRule):
    """Value must not be None, blank or an empty collection."""

    kind = REQUIRED_KIND
    message = "The {name} field is required."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        return not is_empty(value)


# =============================================================================
# Size Bounds
# =============================================================================


class MinRule(BaseRule):
    """Minimum length (strings, collections) or minimum value (numbers).

    Params:
        min: The lower bound
    """

    kind = "min"
    message = "The {name} field must be at least {min} characters."

    def build_params(self, params: Any) -> RuleParams:
        bound = require_number(self.kind, "min", _single_param("min", params))
        return {"min": bound}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if value is None:
            return True
        size = _size(value)
        return size is not None and size >= self.params["min"]


class MaxRule(BaseRule):
    """Maximum length (strings, collections) or maximum value (numbers).

    Params:
        max: The upper bound
    """

    kind = "max"
    message = "The {name} field may not be greater than {max} characters."

    def build_params(self, params: Any) -> RuleParams:
        bound = require_number(self.kind, "max", _single_param("max", params))
        return {"max": bound}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if value is None:
            return True
        size = _size(value)
        return size is not None and size <= self.params["max"]


class BetweenRule(BaseRule):
    """Length or value within an inclusive range.

    Params:
        min: The lower bound
        max: The upper bound

    Declared as ``between:1:10``, ``{"between": [1, 10]}`` or
    ``{"between": {"min": 1, "max": 10}}``.
    """

    kind = "between"
    message = "The {name} field must be between {min} and {max}."

    def build_params(self, params: Any) -> RuleParams:
        if isinstance(params, dict):
            low, high = params.get("min"), params.get("max")
        elif isinstance(params, (list, tuple)) and len(params) == 2:
            low, high = params
        else:
            raise RuleDeclarationError(
                f"Rule 'between' expects two bounds, got {params!r}", kind=self.kind
            )
        low = require_number(self.kind, "min", low)
        high = require_number(self.kind, "max", high)
        if low > high:
            raise RuleDeclarationError(
                f"Rule 'between' lower bound {low} exceeds upper bound {high}",
                kind=self.kind,
            )
        return {"min": low, "max": high}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        size = _size(value)
        return size is not None and self.params["min"] <= size <= self.params["max"]


# =============================================================================
# Formats
# =============================================================================


class EmailRule(BaseRule):
    """Value must be a valid email address."""

    kind = "email"
    message = "The {name} field must be a valid email address."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        return isinstance(value, str) and EMAIL_PATTERN.match(value.strip()) is not None


class UrlRule(BaseRule):
    """Value must be an http(s) URL."""

    kind = "url"
    message = "The {name} field must be a valid URL."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        return isinstance(value, str) and URL_PATTERN.match(value) is not None


class NumericRule(BaseRule):
    """Value must be a number or a numeric string."""

    kind = "numeric"
    message = "The {name} field must be a number."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        return _to_number(value) is not None


class IntegerRule(BaseRule):
    """Value must be a whole number."""

    kind = "integer"
    message = "The {name} field must be an integer."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        number = _to_number(value)
        return number is not None and number.is_integer()


class DecimalRule(BaseRule):
    """Value must look like a decimal number."""

    kind = "decimal"
    message = "The {name} field must be a valid decimal number."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        if isinstance(value, bool):
            return False
        return DECIMAL_PATTERN.match(str(value)) is not None


class AlphaRule(BaseRule):
    """Value may only contain letters."""

    kind = "alpha"
    message = "The {name} field may only contain letters."

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        return isinstance(value, str) and ALPHA_PATTERN.match(value) is not None


class DigitsRule(BaseRule):
    """Value must be exactly ``length`` digits.

    Params:
        length: Required number of digits
    """

    kind = "digits"
    message = "The {name} field must be {length} digits."

    def build_params(self, params: Any) -> RuleParams:
        length = require_number(self.kind, "length", _single_param("length", params))
        return {"length": int(length)}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        if isinstance(value, bool):
            return False
        text = str(value)
        return DIGITS_PATTERN.match(text) is not None and len(text) == self.params["length"]


# =============================================================================
# Numeric Bounds
# =============================================================================


class MinValueRule(BaseRule):
    """Numeric value must be at least ``minValue``; non-numbers fail."""

    kind = "minValue"
    message = "The {name} field must be at least {minValue}."

    def build_params(self, params: Any) -> RuleParams:
        bound = _single_param("minValue", params)
        if isinstance(params, dict) and bound is None:
            bound = params.get("min")
        return {"minValue": require_number(self.kind, "minValue", bound)}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        number = _to_number(value)
        return number is not None and number >= self.params["minValue"]


class MaxValueRule(BaseRule):
    """Numeric value must be at most ``maxValue``; non-numbers fail."""

    kind = "maxValue"
    message = "The {name} field may not be greater than {maxValue}."

    def build_params(self, params: Any) -> RuleParams:
        bound = _single_param("maxValue", params)
        if isinstance(params, dict) and bound is None:
            bound = params.get("max")
        return {"maxValue": require_number(self.kind, "maxValue", bound)}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        number = _to_number(value)
        return number is not None and number <= self.params["maxValue"]


# =============================================================================
# Pattern
# =============================================================================


class PatternRule(BaseRule):
    """Value must match a regular expression (``re.search`` semantics).

    Params:
        pattern: The expression source

    A list parameter (``pattern:^\\d{2}:\\d{2}$`` splits on ':') is joined
    back with ':'. An invalid expression is a declaration error.
    """

    kind = "pattern"
    message = "The {name} field format is invalid."

    def build_params(self, params: Any) -> RuleParams:
        source = params.get("pattern") if isinstance(params, dict) else params
        if isinstance(source, (list, tuple)):
            source = PARAM_SEPARATOR.join(str(part) for part in source)
        if isinstance(source, re.Pattern):
            self._regex = source
            return {"pattern": source.pattern}
        if not isinstance(source, (str, int, float)) or isinstance(source, bool):
            raise RuleDeclarationError(
                f"Rule 'pattern' expects a regular expression, got {source!r}",
                kind=self.kind,
            )
        try:
            self._regex = re.compile(str(source))
        except re.error as e:
            raise RuleDeclarationError(
                f"Rule 'pattern' has an invalid expression {source!r}: {e}",
                kind=self.kind,
            ) from e
        return {"pattern": str(source)}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return False
        return self._regex.search(str(value)) is not None


# =============================================================================
# Cross-field
# =============================================================================


class ConfirmedRule(BaseRule):
    """Value must equal another field of the same scope.

    Params:
        target: Name of the field to compare against
    """

    kind = "confirmed"
    message = "The {name} field confirmation does not match."

    def build_params(self, params: Any) -> RuleParams:
        target = _single_param("target", params)
        if not isinstance(target, str) or not target:
            raise RuleDeclarationError(
                f"Rule 'confirmed' expects a target field name, got {params!r}",
                kind=self.kind,
            )
        return {"target": target}

    def validate(self, value: Any, field: str, all_values: dict[str, Any]) -> bool:
        if is_empty(value):
            return True
        return value == normalize_value(all_values.get(self.params["target"]))


BUILTIN_RULES: dict[str, type[BaseRule]] = {
    rule.kind: rule
    for rule in (
        RequiredRule,
        MinRule,
        MaxRule,
        BetweenRule,
        EmailRule,
        UrlRule,
        NumericRule,
        IntegerRule,
        DecimalRule,
        AlphaRule,
        DigitsRule,
        MinValueRule,
        MaxValueRule,
        PatternRule,
        ConfirmedRule,
    )
}
