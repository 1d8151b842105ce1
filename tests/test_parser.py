"""Tests for the rule declaration tokenizer."""

import pytest

from fieldscope.exceptions import RuleDeclarationError
from fieldscope.parser import (
    RuleToken,
    coerce_param,
    iter_segments,
    parse_number,
    tokenize,
    tokenize_segment,
)


# =============================================================================
# Parameter Coercion Tests
# =============================================================================


class TestCoerceParam:
    """Tests for numeric coercion of declared parameters."""

    def test_integer(self):
        assert coerce_param("5") == 5
        assert isinstance(coerce_param("5"), int)

    def test_negative_integer(self):
        assert coerce_param("-2") == -2

    def test_float(self):
        assert coerce_param("3.5") == 3.5

    def test_numbers_that_do_not_print_back_stay_strings(self):
        assert coerce_param("007") == "007"
        assert coerce_param("1.50") == "1.50"
        assert coerce_param(".5") == ".5"
        assert coerce_param("1e3") == "1e3"
        assert coerce_param("+5") == "+5"

    def test_surrounding_whitespace_is_ignored_for_numbers(self):
        assert coerce_param(" 8 ") == 8

    def test_non_numeric_stays_string(self):
        assert coerce_param("abc") == "abc"
        assert coerce_param("12a") == "12a"
        assert coerce_param("password") == "password"


class TestParseNumber:
    """Tests for lenient number parsing of declared bounds."""

    def test_numbers(self):
        assert parse_number("007") == 7
        assert parse_number(" 2.5 ") == 2.5
        assert parse_number("1e3") == 1000.0
        assert parse_number("+5") == 5

    def test_non_numbers(self):
        assert parse_number("abc") is None
        assert parse_number("") is None
        assert parse_number("nan") is None


# =============================================================================
# Segment Tests
# =============================================================================


class TestTokenizeSegment:
    """Tests for single kind[:params] segments."""

    def test_kind_without_params(self):
        token = tokenize_segment("required")
        assert token == RuleToken(kind="required", params=None, position=0)

    def test_single_param(self):
        token = tokenize_segment("min:5")
        assert token.kind == "min"
        assert token.params == 5

    def test_several_params_become_list(self):
        token = tokenize_segment("between:1:10")
        assert token.params == [1, 10]

    def test_string_param(self):
        token = tokenize_segment("confirmed:password")
        assert token.params == "password"

    def test_leading_zero_params_keep_their_text(self):
        token = tokenize_segment("pattern:^a:01")
        assert token.params == ["^a", "01"]

    def test_empty_param_after_separator(self):
        token = tokenize_segment("pattern:")
        assert token.params == ""

    def test_empty_kind_raises(self):
        with pytest.raises(RuleDeclarationError) as exc_info:
            tokenize_segment(":5", position=9)
        assert exc_info.value.position == 9
        assert "at position 9" in str(exc_info.value)

    def test_kind_with_spaces_raises(self):
        with pytest.raises(RuleDeclarationError):
            tokenize_segment("min length:5")

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            tokenize_segment("9lives")


# =============================================================================
# Full Declaration Tests
# =============================================================================


class TestTokenize:
    """Tests for pipe-delimited declarations."""

    def test_mixed_declaration(self):
        tokens = tokenize("required|min:5|between:1:10")
        assert [t.kind for t in tokens] == ["required", "min", "between"]
        assert [t.params for t in tokens] == [None, 5, [1, 10]]

    def test_positions(self):
        tokens = tokenize("required|email")
        assert [t.position for t in tokens] == [0, 9]

    def test_empty_segments_are_skipped(self):
        tokens = tokenize("required||min:2|")
        assert [t.kind for t in tokens] == ["required", "min"]

    def test_whitespace_around_segments(self):
        tokens = tokenize(" required | email ")
        assert [t.kind for t in tokens] == ["required", "email"]

    def test_empty_text(self):
        assert tokenize("") == []

    def test_raises_on_first_malformed_segment(self):
        with pytest.raises(RuleDeclarationError) as exc_info:
            tokenize("required|:5")
        assert exc_info.value.position == 9

    def test_iter_segments_reports_positions(self):
        assert iter_segments("a| b") == [("a", 0), ("b", 3)]
