"""Type coercion — permissive casts from raw input to a field's declared type.

Dispatch is an explicit table keyed by the declared base type. Every
converter either returns a value of that type or raises
:class:`~konfbind.errors.CoercionUnrepresentable`; the resolver maps the
failure to the field's zero value so one malformed setting never fails a
whole update.

Recognized targets: ``str``, ``bool``, ``int``, ``float``, ``datetime``,
``timedelta``, ``list[str]``, ``list[int]``, ``dict[str, str]``, each
optionally wrapped in ``| None`` and/or ``Annotated[...]`` constraints.
Anything else is passed through unchanged.
"""

from __future__ import annotations

import functools
import json
import math
import re
from collections.abc import Callable, Mapping
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, get_args, get_origin

from pydantic import TypeAdapter, ValidationError

from konfbind.binding.shapes import split_optional, strip_annotated
from konfbind.errors import CoercionUnrepresentable

_BOOL = TypeAdapter(bool)
_DATETIME = TypeAdapter(datetime)
_TIMEDELTA = TypeAdapter(timedelta)

# "1h30m", "250ms", "-1.5s"
_DURATION_RE = re.compile(r"^[-+]?(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|ms|s|m|h))+$")
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


# ---------------------------------------------------------------------------
# Scalar converters
# ---------------------------------------------------------------------------


def to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes | bytearray):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CoercionUnrepresentable(str, value) from exc
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return to_str(value.value)
    if isinstance(value, int | float | Decimal | timedelta):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    raise CoercionUnrepresentable(str, value)


def to_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float | Decimal):
        return value != 0
    if isinstance(value, str):
        try:
            return _BOOL.validate_python(value.strip())
        except ValidationError as exc:
            raise CoercionUnrepresentable(bool, value) from exc
    raise CoercionUnrepresentable(bool, value)


def to_int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool | int):
        return int(value)
    if isinstance(value, float | Decimal):
        try:
            if math.isfinite(value):
                return int(value)
        except (ValueError, OverflowError) as exc:
            raise CoercionUnrepresentable(int, value) from exc
        raise CoercionUnrepresentable(int, value)
    if isinstance(value, str):
        text = value.strip()
        # base 0 understands 0x/0o/0b prefixes but rejects leading zeros.
        for base in (0, 10):
            try:
                return int(text, base)
            except ValueError:
                continue
    raise CoercionUnrepresentable(int, value)


def to_float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool | int | float | Decimal | str):
        try:
            return float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError) as exc:
            raise CoercionUnrepresentable(float, value) from exc
    raise CoercionUnrepresentable(float, value)


def to_datetime(value: Any) -> datetime:
    """ISO-8601 strings, unix timestamps (numbers or numeric strings), dates."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if value is None or isinstance(value, bool):
        raise CoercionUnrepresentable(datetime, value)
    try:
        return _DATETIME.validate_python(value.strip() if isinstance(value, str) else value)
    except ValidationError as exc:
        raise CoercionUnrepresentable(datetime, value) from exc


def parse_duration(text: str) -> timedelta:
    """Parse a unit-suffixed duration such as ``"1h30m"`` or ``"250ms"``."""
    text = text.strip()
    if not _DURATION_RE.match(text):
        raise CoercionUnrepresentable(timedelta, text)
    seconds = sum(
        float(amount) * _DURATION_UNITS[unit] for amount, unit in _DURATION_PART.findall(text)
    )
    try:
        return timedelta(seconds=-seconds if text.startswith("-") else seconds)
    except OverflowError as exc:
        raise CoercionUnrepresentable(timedelta, text) from exc


def to_timedelta(value: Any) -> timedelta:
    """Unit strings (``"5s"``), ISO-8601 durations, ``HH:MM:SS``, or seconds."""
    if isinstance(value, timedelta):
        return value
    if value is None or isinstance(value, bool):
        raise CoercionUnrepresentable(timedelta, value)
    if isinstance(value, str) and _DURATION_RE.match(value.strip()):
        return parse_duration(value)
    try:
        return _TIMEDELTA.validate_python(value.strip() if isinstance(value, str) else value)
    except ValidationError as exc:
        raise CoercionUnrepresentable(timedelta, value) from exc


# ---------------------------------------------------------------------------
# Sequence / mapping fall-backs
# ---------------------------------------------------------------------------


def to_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list | tuple | set | frozenset):
        return [to_str(item) for item in value]
    raise CoercionUnrepresentable(list[str], value)


def to_int_list(value: Any) -> list[int]:
    if isinstance(value, str):
        return [to_int(item) for item in value.split()]
    if isinstance(value, list | tuple | set | frozenset):
        return [to_int(item) for item in value]
    raise CoercionUnrepresentable(list[int], value)


def to_str_map(value: Any) -> dict[str, str]:
    """Mappings are stringified key by key; strings are read as JSON objects."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise CoercionUnrepresentable(dict[str, str], value) from exc
    if isinstance(value, Mapping):
        return {to_str(k): to_str(v) for k, v in value.items()}
    raise CoercionUnrepresentable(dict[str, str], value)


CONVERTERS: dict[Any, Callable[[Any], Any]] = {
    str: to_str,
    bool: to_bool,
    int: to_int,
    float: to_float,
    datetime: to_datetime,
    timedelta: to_timedelta,
    (list, (str,)): to_str_list,
    (list, (int,)): to_int_list,
    (dict, (str, str)): to_str_map,
}


def converter_for(target: Any) -> Callable[[Any], Any] | None:
    """Look up the converter for a plain (non-optional, non-annotated) type."""
    origin = get_origin(target)
    if origin is None:
        return CONVERTERS.get(target)
    key = (origin, tuple(strip_annotated(arg) for arg in get_args(target)))
    return CONVERTERS.get(key)


@functools.cache
def _cached_adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def constraint_adapter(target: Any) -> TypeAdapter[Any]:
    """Validator for an ``Annotated[...]`` target, built once per target."""
    try:
        return _cached_adapter(target)
    except TypeError:
        # unhashable metadata
        return TypeAdapter(target)


def coerce(annotation: Any, value: Any) -> Any:
    """Convert *value* to the declared *annotation*.

    Raises:
        CoercionUnrepresentable: *value* has no representation in the target.
    """
    inner, optional = split_optional(annotation)
    if optional and value is None:
        return None
    target = inner if optional else annotation
    plain = strip_annotated(target)

    converter = converter_for(plain)
    if converter is None:
        return value
    result = converter(value)

    if target is not plain:
        try:
            constraint_adapter(target).validate_python(result)
        except ValidationError as exc:
            raise CoercionUnrepresentable(target, value) from exc
    return result
