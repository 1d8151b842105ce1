"""Exceptions raised by fieldscope.

Validation failures are never raised; they are recorded in the ErrorBag.
These exceptions cover declaration parsing and control-plane misuse.
"""


class FieldscopeError(Exception):
    """Base class for all fieldscope errors."""


class RuleDeclarationError(FieldscopeError, ValueError):
    """A rule declaration could not be turned into a rule instance.

    Raised by the tokenizer and by rule constructors. The registry catches it
    and drops the offending entry, so it never reaches validation callers.
    """

    def __init__(self, message: str, kind: str | None = None, position: int | None = None):
        self.kind = kind
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)


class MessageTableError(FieldscopeError, ValueError):
    """A message table has the wrong shape or could not be loaded."""

    def __init__(self, message: str, locale: str | None = None):
        self.locale = locale
        super().__init__(message)
