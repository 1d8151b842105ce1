"""Base classes for rule instances.

BaseRule is the class every built-in and class-based custom rule extends.
CallableRule wraps a plain predicate registered under a name.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from fieldscope.exceptions import RuleDeclarationError
from fieldscope.parser import parse_number
from fieldscope.types import RuleParams

Predicate = Callable[[Any, str, dict[str, Any]], bool | Awaitable[bool]]


class BaseRule:
    """Base class for rules with common functionality.

    Subclasses set ``kind`` and override ``validate``. Constructor
    parameters arrive exactly as declared (None, a scalar, a list or a
    mapping); subclasses turn them into the named ``params`` used for
    message interpolation via ``build_params``.
    """

    kind: str = ""
    message: str | None = None

    def __init__(self, params: Any = None, *, kind: str | None = None, message: str | None = None):
        if kind:
            self.kind = kind
        if message is not None:
            self.message = message
        self.params: RuleParams = self.build_params(params)

    def build_params(self, params: Any) -> RuleParams:
        """Convert the declared parameter into a named params dict."""
        if params is None:
            return {}
        if isinstance(params, dict):
            return dict(params)
        return {self.kind: params}

    def validate(
        self,
        value: Any,
        field: str,
        all_values: dict[str, Any],
    ) -> bool | Awaitable[bool]:
        """Check the value. Override in subclasses."""
        raise NotImplementedError("Subclasses must implement validate()")

    def should_apply(
        self,
        value: Any,
        field: str,
        all_values: dict[str, Any],
    ) -> bool:
        """Return False to skip this rule for the current value."""
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, params={self.params!r})"


class CallableRule(BaseRule):
    """A rule backed by a plain predicate ``(value, field, all_values) -> bool``.

    The predicate may be a coroutine function; its result is awaited by the
    orchestrator like any other async rule.
    """

    def __init__(
        self,
        predicate: Predicate,
        params: Any = None,
        *,
        kind: str,
        message: str | None = None,
    ):
        self.predicate = predicate
        super().__init__(params, kind=kind, message=message)

    def validate(
        self,
        value: Any,
        field: str,
        all_values: dict[str, Any],
    ) -> bool | Awaitable[bool]:
        result = self.predicate(value, field, all_values)
        if inspect.isawaitable(result):
            return _as_bool(result)
        return bool(result)


async def _as_bool(result: Awaitable[Any]) -> bool:
    return bool(await result)


def require_number(kind: str, name: str, value: Any) -> int | float:
    """Validate that a declared parameter is a number.

    Numeric strings (``"5"``, ``" 2.5 "``) are converted.

    Raises:
        RuleDeclarationError: If the parameter is missing or not numeric.
    """
    number = parse_number(value) if isinstance(value, str) else value
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise RuleDeclarationError(
            f"Rule '{kind}' expects a numeric '{name}' parameter, got {value!r}",
            kind=kind,
        )
    return number
