"""Dotted key-path resolution into records.

``resolve(record, key, value)`` walks the record's field table in
declaration order and returns ``(new_record, touched)``. The input record
is never mutated: every level that changes is rebuilt through its shape's
``replace`` and unchanged children are shared with the previous snapshot.

INVARIANT: when ``touched`` is False the returned record *is* the input.
"""

from __future__ import annotations

import logging
from typing import Any

from konfbind.binding.codec import DECLINED, decode_text
from konfbind.binding.coercion import coerce
from konfbind.binding.shapes import KEY_SEP, FieldDescriptor, FieldKind, shape_of, zero_value
from konfbind.errors import CoercionUnrepresentable

logger = logging.getLogger(__name__)


def assign(fd: FieldDescriptor, current: Any, value: Any, *, path: str) -> Any:
    """Value to store in *fd* for raw *value*: codec, then coercion, then zero."""
    decoded = decode_text(fd.annotation, current, value, key=path)
    if decoded is not DECLINED:
        return decoded
    try:
        return coerce(fd.annotation, value)
    except CoercionUnrepresentable:
        logger.debug("Zeroing %s: %r is not a valid %s", path, value, fd.annotation)
        return zero_value(fd.annotation)


def _descend(fd: FieldDescriptor, current: Any, rest: str, value: Any, path: str) -> tuple[Any, bool]:
    if fd.kind is FieldKind.RECORD:
        child = current if current is not None else shape_of(fd.target).zero()
        return resolve(child, rest, value, path=path)

    if fd.kind is FieldKind.OPTIONAL_RECORD:
        child = current if current is not None else shape_of(fd.target).zero()
        new_child, touched = resolve(child, rest, value, path=path)
        return (new_child, True) if touched else (current, False)

    if fd.kind is FieldKind.RECORD_MAP:
        map_key, sep, sub_key = rest.partition(KEY_SEP)
        if not sep:
            return current, False
        entry = (current or {}).get(map_key)
        if entry is None:
            entry = shape_of(fd.target).zero()
        new_entry, touched = resolve(entry, sub_key, value, path=path)
        if not touched:
            return current, False
        new_map = dict(current or {})
        new_map[map_key] = new_entry
        return new_map, True

    if fd.kind is FieldKind.SCALAR_MAP:
        new_map = dict(current or {})
        new_map[rest] = value
        return new_map, True

    return current, False


def resolve(record: Any, key: str, value: Any, *, path: str | None = None) -> tuple[Any, bool]:
    """Set the field(s) addressed by *key* on a copy of *record*.

    The first field that matches *key* exactly is assigned; later fields are
    still tried as prefixes (embedded records, nested records, maps).

    Raises:
        CodecDecodeFailure: a field codec rejected *value*.
    """
    path = path or key
    shape = shape_of(type(record))
    updates: dict[str, Any] = {}
    exact_done = False

    for fd in shape.fields:
        if fd.skipped:
            continue
        current = getattr(record, fd.name)

        if not exact_done and fd.matches(key):
            updates[fd.name] = assign(fd, current, value, path=path)
            exact_done = True
            continue

        rest = fd.remainder(key)
        if rest is None or fd.kind is FieldKind.LEAF:
            continue
        new, touched = _descend(fd, current, rest, value, path)
        if touched:
            updates[fd.name] = new

    if not updates:
        return record, False
    return shape.replace(record, updates), True
