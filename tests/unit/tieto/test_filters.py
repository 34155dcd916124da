"""
Unit tests for metadata filter parsing and evaluation.

Tests for:
- Filter grammar and malformed-expression tolerance
- Equality and membership on textual forms
- Numeric and date ordering, numeric first
- AND semantics across filters
"""

import pytest

from tieto.contracts.retrieval_contracts import Filter, FilterOperator
from tieto.core.exceptions import FilterSyntaxError
from tieto.retrieval.filters import (
    evaluate,
    matches_all,
    parse_filter,
    parse_filters,
    to_datetime,
    to_number,
    to_text,
)


class TestParseFilter:
    """Tests for parsing single expressions."""

    @pytest.mark.parametrize("expression,key,operator,value", [
        ("status=current", "status", FilterOperator.EQ, "current"),
        ("rating>=3", "rating", FilterOperator.GTE, "3"),
        ("rating<=3", "rating", FilterOperator.LTE, "3"),
        ("rating>3", "rating", FilterOperator.GT, "3"),
        ("rating<3", "rating", FilterOperator.LT, "3"),
        ("status = current", "status", FilterOperator.EQ, "current"),
        ("price=$19.95", "price", FilterOperator.EQ, "$19.95"),
    ])
    def test_operators(self, expression, key, operator, value):
        """Test each comparison operator parses."""
        flt = parse_filter(expression)

        assert flt.key == key
        assert flt.operator is operator
        assert flt.value == value

    def test_in_operator(self):
        """Test `in` splits a comma list and trims items."""
        flt = parse_filter("category in A, B ,C")

        assert flt.operator is FilterOperator.IN
        assert flt.value == ("A", "B", "C")

    @pytest.mark.parametrize("expression", [
        "???bad???",
        "",
        "status",
        "=current",
        "status=",
        "rating in",
    ])
    def test_malformed(self, expression):
        """Test malformed expressions raise FilterSyntaxError."""
        with pytest.raises(FilterSyntaxError):
            parse_filter(expression)

    def test_str_round_trip(self):
        """Test the textual form of a parsed filter."""
        assert str(parse_filter("rating>=3")).replace(" ", "") == "rating>=3"


class TestParseFilters:
    """Tests for parsing expression lists."""

    def test_drops_malformed_keeps_rest(self):
        """Test a malformed expression is dropped and the rest kept in order."""
        result = parse_filters(["status=current", "???bad???", "rating>=3"])

        assert [f.key for f in result.filters] == ["status", "rating"]
        assert result.rejected == ["???bad???"]

    def test_empty(self):
        """Test no expressions gives no filters."""
        result = parse_filters([])

        assert result.filters == []
        assert result.rejected == []


class TestValueConversion:
    """Tests for textual, numeric and date forms."""

    def test_to_text(self):
        """Test textual forms of metadata values."""
        assert to_text("current") == "current"
        assert to_text(4.0) == "4"
        assert to_text(4.5) == "4.5"
        assert to_text(True) == "true"
        assert to_text(None) == "null"
        assert to_text(["a", "b"]) == "a,b"

    def test_to_number(self):
        """Test numeric conversion accepts finite numbers only."""
        assert to_number("3") == 3.0
        assert to_number(" 4.5 ") == 4.5
        assert to_number(7) == 7.0
        assert to_number("$19.95") is None
        assert to_number("nan") is None
        assert to_number(True) is None

    def test_to_datetime(self):
        """Test several date spellings parse."""
        assert to_datetime("2024-03-01") is not None
        assert to_datetime("2024-03-01T10:00:00Z") is not None
        assert to_datetime("March 1, 2024") is not None
        assert to_datetime("soon") is None


class TestEvaluate:
    """Tests for evaluating filters against metadata."""

    def test_equality_on_text(self):
        """Test equality compares textual forms."""
        assert evaluate({"status": "current"}, parse_filter("status=current"))
        assert not evaluate({"status": "old"}, parse_filter("status=current"))
        assert evaluate({"rating": 4.0}, parse_filter("rating=4"))
        assert evaluate({"active": True}, parse_filter("active=true"))

    def test_missing_key_fails(self):
        """Test a filter on an absent key fails."""
        assert not evaluate({}, parse_filter("status=current"))

    def test_numeric_ordering(self):
        """Test ordering compares numbers, not strings."""
        flt = parse_filter("rating>=3")

        assert evaluate({"rating": 4}, flt)
        assert evaluate({"rating": "10"}, flt)
        assert not evaluate({"rating": 2.5}, flt)

    def test_date_ordering(self):
        """Test ordering compares dates when values are not numbers."""
        flt = parse_filter("published>=2024-01-01")

        assert evaluate({"published": "2024-03-01"}, flt)
        assert not evaluate({"published": "2023-12-31"}, flt)

    def test_mixed_timezones(self):
        """Test naive and aware dates compare without error."""
        flt = parse_filter("updated<2024-01-02")

        assert evaluate({"updated": "2024-01-01T23:00:00Z"}, flt)

    def test_bare_year_is_numeric(self):
        """Test a bare year is compared as a number."""
        assert evaluate({"year": 2024}, parse_filter("year>=2023"))
        assert not evaluate({"published": "2024-06-01"}, parse_filter("published>=2024"))

    def test_incomparable_fails(self):
        """Test ordering on non-numeric, non-date values fails."""
        assert not evaluate({"status": "current"}, parse_filter("status>a"))
        assert not evaluate({"price": "$19.95"}, parse_filter("price<20"))

    def test_in_membership(self):
        """Test `in` matches when the value's text is listed."""
        flt = parse_filter("category in tools,toys")

        assert evaluate({"category": "toys"}, flt)
        assert not evaluate({"category": "food"}, flt)

    def test_filter_objects(self):
        """Test hand-built filters evaluate like parsed ones."""
        flt = Filter(key="rating", operator=FilterOperator.LT, value="3")

        assert evaluate({"rating": 2}, flt)


class TestMatchesAll:
    """Tests for AND semantics."""

    def test_empty_filter_set_passes(self):
        """Test no filters admit every chunk."""
        assert matches_all({}, [])

    def test_all_must_pass(self):
        """Test every filter must pass."""
        filters = parse_filters(["status=current", "rating>=3"]).filters

        assert matches_all({"status": "current", "rating": 4}, filters)
        assert not matches_all({"status": "current", "rating": 2}, filters)
        assert not matches_all({"rating": 4}, filters)

    def test_adding_filters_never_widens(self):
        """Test adding a filter never admits more metadata sets."""
        documents = [
            {"status": "current", "rating": 4},
            {"status": "current", "rating": 2},
            {"status": "old", "rating": 5},
            {"rating": 3},
        ]
        fewer = parse_filters(["rating>=3"]).filters
        more = parse_filters(["rating>=3", "status=current"]).filters

        admitted_fewer = [d for d in documents if matches_all(d, fewer)]
        admitted_more = [d for d in documents if matches_all(d, more)]

        assert len(admitted_more) <= len(admitted_fewer)
        assert all(d in admitted_fewer for d in admitted_more)
