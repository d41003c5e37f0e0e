"""Unit tests for type coercion and comparison primitives."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from typing import NamedTuple

import numpy as np
import pandas as pd
import pytest

from rulesengine.domain.engine.coercion import (
    any_in_list,
    compare_length,
    compare_numeric,
    compare_time,
    compare_time_part,
    in_list,
    is_between,
    is_object,
    is_time_between,
    is_within_time,
    length_of,
    membership_key,
    resolve_expected_time,
    to_float,
    to_int,
    to_list,
    to_string,
    values_equal,
)
from rulesengine.domain.engine.operators import Operator
from rulesengine.domain.errors import NumericError, TypeMismatchError


class TestEquality:
    """Test values_equal."""

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            (1, 1, True),
            (1, 1.0, True),
            ("a", "a", True),
            ([1, 2], [1, 2], True),
            ({"a": 1}, {"a": 1}, True),
            (True, 1, False),
            (0, False, False),
            (True, True, True),
            (np.int64(3), 3, True),
            (None, None, True),
            ("1", 1, False),
        ],
    )
    def test_values_equal(self, a, b, expected):
        assert values_equal(a, b) is expected

    def test_values_equal__with_arrays__returns_false_instead_of_raising(self):
        assert values_equal(np.array([1, 2]), np.array([1, 2])) is False


class TestNumbers:
    """Test numeric coercion."""

    @pytest.mark.parametrize(
        "value, expected",
        [(3, 3.0), (2.5, 2.5), ("4.25", 4.25), (Decimal("1.5"), 1.5), (np.float32(0.5), 0.5), (b"7", 7.0)],
    )
    def test_to_float__accepts_numbers_and_numeric_strings(self, value, expected):
        assert to_float(value) == expected

    @pytest.mark.parametrize("value", ["abc", True, None, [1], {"a": 1}, b"\xff"])
    def test_to_float__rejects_non_numeric(self, value):
        with pytest.raises(NumericError) as exc_info:
            to_float(value)

        assert exc_info.value.value == value

    def test_to_float__with_huge_integer__raises_numeric_error(self):
        with pytest.raises(NumericError):
            to_float(10**400)

    @pytest.mark.parametrize("value", ["nan", "inf", float("-inf"), np.nan])
    def test_to_int__rejects_non_finite(self, value):
        with pytest.raises(NumericError):
            to_int(value)

    def test_to_int__truncates_toward_zero(self):
        assert to_int("-3.9") == -3

    def test_compare_numeric__with_numeric_string_expected(self):
        assert compare_numeric(10, "9.5", Operator.GT) is True

    def test_is_between__with_tuple_range(self):
        assert is_between("15", (10, 20)) is True

    @pytest.mark.parametrize("range_value", [[1], [1, 2, 3], "1-2", None])
    def test_is_between__with_malformed_range__raises_type_error(self, range_value):
        with pytest.raises(TypeMismatchError):
            is_between(1, range_value)


class TestCollections:
    """Test sequence coercion and membership."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ([1, 2], [1, 2]),
            ((1, 2), [1, 2]),
            (range(3), [0, 1, 2]),
            (np.array([1, 2]), [1, 2]),
            (pd.Series(["a", "b"]), ["a", "b"]),
        ],
    )
    def test_to_list__accepts_collections(self, value, expected):
        assert to_list(value) == expected

    @pytest.mark.parametrize("value", ["abc", b"abc", {"a": 1}, 5, None, np.array(5)])
    def test_to_list__rejects_scalars_strings_and_mappings(self, value):
        assert to_list(value) is None

    def test_membership_key__normalizes_numeric_types(self):
        assert membership_key(1) == membership_key(1.0) == membership_key(np.int64(1))
        assert membership_key(True) != membership_key(1)

    def test_in_list__uses_value_equality(self):
        assert in_list(2, [1.0, 2.0]) is True
        assert in_list(True, [1]) is False

    def test_any_in_list__with_mixed_numeric_types(self):
        assert any_in_list([np.int64(2), 9], [1, 2.0]) is True

    def test_any_in_list__with_unhashable_elements(self):
        assert any_in_list([{"a": 1}], [{"a": 1}, [1, 2]]) is True

    def test_any_in_list__with_scalar_actual__raises_type_error(self):
        with pytest.raises(TypeMismatchError):
            any_in_list("a", ["a"])

    def test_in_list__with_scalar_expected__raises_type_error(self):
        with pytest.raises(TypeMismatchError):
            in_list("a", "abc")


class TestStrings:
    """Test to_string and length helpers."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("x", "x"),
            (None, ""),
            (b"bytes", "bytes"),
            (True, "true"),
            (False, "false"),
            (3.0, "3"),
            (2.5, "2.5"),
            (42, "42"),
        ],
    )
    def test_to_string(self, value, expected):
        assert to_string(value) == expected

    @pytest.mark.parametrize("value, expected", [("héllo", 5), ([1, 2, 3], 3), ((), 0)])
    def test_length_of__counts_characters_or_elements(self, value, expected):
        assert length_of(value) == expected

    @pytest.mark.parametrize("value", [123, None, {"a": 1}])
    def test_length_of__non_sized__raises_type_error(self, value):
        with pytest.raises(TypeMismatchError):
            length_of(value)

    def test_compare_length__truncates_target(self):
        assert compare_length("abc", "3.9", Operator.LENGTH_EQ) is True


class TestTypeChecks:
    """Test is_object."""

    def test_is_object__accepts_record_like_values(self):
        @dataclass
        class Point:
            x: int

        class Pair(NamedTuple):
            a: int
            b: int

        assert is_object({"a": 1}) is True
        assert is_object(Point(1)) is True
        assert is_object(Pair(1, 2)) is True
        assert is_object(Point) is False
        assert is_object([1]) is False
        assert is_object("a") is False


class TestTime:
    """Test temporal comparisons."""

    def test_resolve_expected_time__with_date(self, now):
        resolved = resolve_expected_time(date(2024, 3, 1), now)

        assert resolved == datetime(2024, 3, 1, tzinfo=UTC)

    def test_resolve_expected_time__with_iso_string(self, now):
        assert resolve_expected_time("2024-03-01T10:00:00Z", now) == datetime(2024, 3, 1, 10, tzinfo=UTC)

    @pytest.mark.parametrize("value", ["not a date", 12, None, "thisYear+1parsec"])
    def test_resolve_expected_time__with_garbage__raises_type_error(self, value, now):
        with pytest.raises(TypeMismatchError):
            resolve_expected_time(value, now)

    def test_compare_time__naive_vs_aware__raises_type_error(self):
        with pytest.raises(TypeMismatchError):
            compare_time(datetime(2024, 1, 1), datetime(2024, 1, 2, tzinfo=UTC), Operator.BEFORE)

    def test_compare_time__with_naive_values(self):
        assert compare_time(datetime(2024, 1, 1), datetime(2024, 1, 2), Operator.BEFORE) is True

    def test_is_time_between__with_relative_bounds(self):
        stamp = datetime.now(UTC)

        assert is_time_between(stamp, ["today", "today+1d"]) is True

    def test_is_within_time__with_compound_duration(self):
        stamp = datetime.now(UTC) - timedelta(minutes=80)

        assert is_within_time(stamp, "1h30m", Operator.WITHIN_LAST) is True
        assert is_within_time(stamp, "1h", Operator.WITHIN_LAST) is False

    def test_is_within_time__with_non_string_duration__raises_type_error(self):
        with pytest.raises(TypeMismatchError):
            is_within_time(datetime.now(UTC), 10, Operator.WITHIN_LAST)

    def test_is_within_time__window_out_of_range__raises_type_error(self):
        with pytest.raises(TypeMismatchError):
            is_within_time(datetime.now(UTC), "10000y", Operator.WITHIN_LAST)

    @pytest.mark.parametrize(
        "operator, expected, outcome",
        [
            (Operator.YEAR_EQ, 2024, True),
            (Operator.YEAR_EQ, "2024", True),
            (Operator.YEAR_EQ, 2023, False),
            (Operator.MONTH_EQ, 6, True),
            (Operator.MONTH_EQ, datetime(2020, 6, 1), True),
        ],
    )
    def test_compare_time_part(self, operator, expected, outcome):
        assert compare_time_part(datetime(2024, 6, 15), expected, operator) is outcome
