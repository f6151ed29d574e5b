"""Tests for the permissive coercion table."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Annotated

import pytest
from pydantic import Field, NonNegativeInt

from konfbind.binding.coercion import (
    coerce,
    constraint_adapter,
    parse_duration,
    to_bool,
    to_float,
    to_int,
    to_str,
)
from konfbind.errors import CoercionUnrepresentable


class TestScalars:
    def test_str(self) -> None:
        assert coerce(str, 42) == "42"
        assert coerce(str, True) == "true"
        assert coerce(str, b"raw") == "raw"
        assert coerce(str, None) == ""

    def test_str_rejects_containers(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            to_str({"a": 1})

    @pytest.mark.parametrize("raw", ["true", "TRUE", "yes", "on", "1", 1, 2.5, True])
    def test_bool_true(self, raw: object) -> None:
        assert to_bool(raw) is True

    @pytest.mark.parametrize("raw", ["false", "off", "no", "0", 0, None, False])
    def test_bool_false(self, raw: object) -> None:
        assert to_bool(raw) is False

    def test_bool_malformed(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            to_bool("maybe")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("42", 42), (" 7 ", 7), ("0x1f", 31), ("010", 10), (3.9, 3), (True, 1), (None, 0)],
    )
    def test_int(self, raw: object, expected: int) -> None:
        assert to_int(raw) == expected

    @pytest.mark.parametrize("raw", ["not-a-number", "1.5", float("nan"), [1]])
    def test_int_malformed(self, raw: object) -> None:
        with pytest.raises(CoercionUnrepresentable):
            to_int(raw)

    def test_float(self) -> None:
        assert coerce(float, "2.5") == 2.5
        assert coerce(float, 3) == 3.0
        with pytest.raises(CoercionUnrepresentable):
            coerce(float, "abc")

    @pytest.mark.parametrize("raw", [Decimal("sNaN"), Decimal("NaN"), Decimal("Infinity")])
    def test_special_decimals_are_unrepresentable_as_int(self, raw: Decimal) -> None:
        with pytest.raises(CoercionUnrepresentable):
            to_int(raw)

    def test_signaling_nan_is_unrepresentable_as_float(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            to_float(Decimal("sNaN"))


class TestTime:
    def test_datetime_iso(self) -> None:
        assert coerce(datetime, "2024-01-02T03:04:05") == datetime(2024, 1, 2, 3, 4, 5)

    def test_datetime_malformed(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            coerce(datetime, "yesterday-ish")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("250ms", timedelta(milliseconds=250)),
            ("-1.5s", timedelta(seconds=-1.5)),
            ("PT5M", timedelta(minutes=5)),
            (90, timedelta(seconds=90)),
        ],
    )
    def test_timedelta(self, raw: object, expected: timedelta) -> None:
        assert coerce(timedelta, raw) == expected

    def test_parse_duration_rejects_bare_units(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            parse_duration("ms")

    def test_duration_out_of_range(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            parse_duration("99999999999999h")
        with pytest.raises(CoercionUnrepresentable):
            coerce(timedelta, "99999999999999h")


class TestContainers:
    def test_str_list_from_string(self) -> None:
        assert coerce(list[str], "a b  c") == ["a", "b", "c"]

    def test_str_list_from_sequence(self) -> None:
        assert coerce(list[str], [1, "x"]) == ["1", "x"]

    def test_int_list(self) -> None:
        assert coerce(list[int], ["80", 443]) == [80, 443]
        assert coerce(list[int], "1 2") == [1, 2]

    def test_int_list_malformed(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            coerce(list[int], ["80", "http"])

    def test_str_map(self) -> None:
        assert coerce(dict[str, str], {"a": 1}) == {"a": "1"}
        assert coerce(dict[str, str], '{"team": "core"}') == {"team": "core"}

    def test_str_map_malformed(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            coerce(dict[str, str], "team=core")


class TestWrappers:
    def test_optional(self) -> None:
        assert coerce(int | None, "5") == 5
        assert coerce(int | None, None) is None

    def test_annotated_constraint(self) -> None:
        assert coerce(NonNegativeInt, "3") == 3
        with pytest.raises(CoercionUnrepresentable):
            coerce(NonNegativeInt, "-3")

    def test_annotated_field_info(self) -> None:
        with pytest.raises(CoercionUnrepresentable):
            coerce(Annotated[str, Field(max_length=3)], "toolong")

    def test_constraint_adapter_is_reused(self) -> None:
        assert constraint_adapter(NonNegativeInt) is constraint_adapter(NonNegativeInt)

    def test_passthrough(self) -> None:
        marker = object()
        assert coerce(object, marker) is marker
        assert coerce(tuple[int, int], (1, 2)) == (1, 2)
