"""Tests for the ErrorBag."""

import logging
from unittest.mock import MagicMock

import pytest

from fieldscope.errors import ErrorBag
from fieldscope.types import ErrorEntry


@pytest.fixture
def bag():
    return ErrorBag()


# =============================================================================
# Mutation Tests
# =============================================================================


class TestAdd:
    """Tests for recording errors."""

    def test_add_and_get(self, bag):
        bag.add("email", "The Email field must be a valid email address.", "email")

        assert bag.has("email")
        assert bag.get("email") == ["The Email field must be a valid email address."]
        assert bag.first("email") == "The Email field must be a valid email address."

    def test_non_required_entries_append(self, bag):
        bag.add("password", "first", "min")
        bag.add("password", "second", "pattern")
        assert bag.get("password") == ["first", "second"]

    def test_required_goes_first(self, bag):
        bag.add("email", "Bad format", "email")
        bag.add("email", "Required", "required")
        assert bag.first("email") == "Required"
        assert bag.get("email") == ["Required", "Bad format"]

    def test_empty_key_or_message_ignored(self, bag):
        listener = MagicMock()
        bag.subscribe(listener)

        bag.add("", "message")
        bag.add("email", "")

        assert not bag.any()
        listener.assert_not_called()

    def test_entries_keep_rule_kind(self, bag):
        bag.add("login.email", "Required", "required")

        entries = bag.entries("login.email")
        assert entries == [ErrorEntry(field="login.email", message="Required", rule_kind="required")]
        assert entries[0].to_dict() == {
            "field": "login.email",
            "message": "Required",
            "ruleKind": "required",
        }


class TestRemove:
    """Tests for dropping errors."""

    def test_remove(self, bag):
        bag.add("email", "x")
        bag.add("name", "y")

        bag.remove("email")

        assert not bag.has("email")
        assert bag.has("name")

    def test_remove_unknown_key(self, bag):
        bag.remove("missing")
        assert bag.count() == 0

    def test_remove_many_notifies_once(self, bag):
        bag.add("a", "x")
        bag.add("b", "y")
        listener = MagicMock()
        bag.subscribe(listener)

        bag.remove_many(["a", "b"])

        assert not bag.any()
        listener.assert_called_once_with()

    def test_clear(self, bag):
        bag.add("a", "x")
        bag.add("b", "y")
        bag.clear()
        assert bag.all() == []


# =============================================================================
# Query Tests
# =============================================================================


class TestQueries:
    """Tests for read-only queries."""

    def test_unknown_key(self, bag):
        assert not bag.has("missing")
        assert bag.first("missing") is None
        assert bag.get("missing") == []
        assert bag.entries("missing") == []

    def test_flattened_views(self, bag):
        bag.add("email", "e1")
        bag.add("login.password", "p1")
        bag.add("login.password", "p2")

        assert bag.keys() == ["email", "login.password"]
        assert bag.all() == ["e1", "p1", "p2"]
        assert bag.all_by_field() == {"email": ["e1"], "login.password": ["p1", "p2"]}
        assert bag.count() == 3
        assert len(bag) == 3
        assert "email" in bag
        assert "name" not in bag

    def test_queries_return_copies(self, bag):
        bag.add("email", "e1")

        bag.get("email").append("mutated")
        bag.all_by_field()["email"].append("mutated")

        assert bag.get("email") == ["e1"]


# =============================================================================
# Observer Tests
# =============================================================================


class TestSubscribe:
    """Tests for change notification."""

    def test_listener_sees_updated_state(self, bag):
        seen = []
        bag.subscribe(lambda: seen.append(bag.all_by_field()))

        bag.add("email", "Required", "required")

        assert seen == [{"email": ["Required"]}]

    def test_listeners_called_in_order(self, bag):
        calls = []
        bag.subscribe(lambda: calls.append("first"))
        bag.subscribe(lambda: calls.append("second"))

        bag.clear()

        assert calls == ["first", "second"]

    def test_unsubscribe(self, bag):
        listener = MagicMock()
        unsubscribe = bag.subscribe(listener)

        unsubscribe()
        bag.add("email", "x")

        listener.assert_not_called()

    def test_unsubscribe_is_idempotent(self, bag):
        listener = MagicMock()
        first = bag.subscribe(listener)
        bag.subscribe(listener)

        first()
        first()
        bag.add("email", "x")

        assert listener.call_count == 1

    def test_failing_listener_does_not_stop_others(self, bag, caplog):
        def broken():
            raise RuntimeError("listener down")

        after = MagicMock()
        bag.subscribe(broken)
        bag.subscribe(after)

        with caplog.at_level(logging.WARNING):
            bag.add("email", "x")

        after.assert_called_once_with()
        assert "listener down" in caplog.text
        assert bag.has("email")
