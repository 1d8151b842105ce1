"""Error store for fieldscope.

The ErrorBag keeps an ordered list of ErrorEntry objects per scoped key.
Required failures are always placed first. Every mutation notifies
subscribers synchronously, after the state has changed, so a listener (or
the caller, once the mutating call returns) always reads the updated state.
"""

import logging
from collections.abc import Callable, Iterable

from fieldscope.types import REQUIRED_KIND, ErrorEntry, Listener

logger = logging.getLogger(__name__)


class ErrorBag:
    """Field-scoped error accumulation with observers.

    Example:
        bag = ErrorBag()
        unsubscribe = bag.subscribe(lambda: print(bag.all_by_field()))
        bag.add("login.email", "The Email field is required.", "required")
        unsubscribe()
    """

    def __init__(self):
        self._errors: dict[str, list[ErrorEntry]] = {}
        self._listeners: list[Listener] = []

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, key: str, message: str, rule_kind: str = "") -> None:
        """Record an error for a scoped key.

        No-op when key or message is empty. A required error is inserted
        at position 0; every other kind is appended.
        """
        if not key or not message:
            return

        entry = ErrorEntry(field=key, message=message, rule_kind=rule_kind)
        entries = self._errors.setdefault(key, [])
        if rule_kind == REQUIRED_KIND:
            entries.insert(0, entry)
        else:
            entries.append(entry)
        self._notify()

    def remove(self, key: str) -> None:
        """Drop all errors for a scoped key."""
        self._errors.pop(key, None)
        self._notify()

    def remove_many(self, keys: Iterable[str]) -> None:
        """Drop all errors for several keys with a single notification."""
        for key in keys:
            self._errors.pop(key, None)
        self._notify()

    def clear(self) -> None:
        """Drop every error."""
        self._errors.clear()
        self._notify()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def has(self, key: str) -> bool:
        return bool(self._errors.get(key))

    def first(self, key: str) -> str | None:
        entries = self._errors.get(key)
        return entries[0].message if entries else None

    def get(self, key: str) -> list[str]:
        return [entry.message for entry in self._errors.get(key, [])]

    def entries(self, key: str) -> list[ErrorEntry]:
        return list(self._errors.get(key, []))

    def any(self) -> bool:
        return any(self._errors.values())

    def keys(self) -> list[str]:
        return [key for key, entries in self._errors.items() if entries]

    def all(self) -> list[str]:
        """Every message, flattened in key order."""
        return [entry.message for entries in self._errors.values() for entry in entries]

    def all_by_field(self) -> dict[str, list[str]]:
        """Flattened error map: scoped key -> messages."""
        return {
            key: [entry.message for entry in entries]
            for key, entries in self._errors.items()
            if entries
        }

    def count(self) -> int:
        return sum(len(entries) for entries in self._errors.values())

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return self.count()

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called after every mutation.

        Returns:
            A function that unsubscribes the listener. Calling it more than
            once is harmless.
        """
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
                logger.warning("ErrorBag listener %r failed", listener, exc_info=True)
