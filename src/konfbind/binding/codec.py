"""Text-codec hook — custom ``unmarshal_text`` decoding ahead of coercion.

A field whose type implements :class:`TextUnmarshaler` decodes raw input
itself. Codec failures are not degraded to zero values: the codec declares
stricter validation than the generic casts, so a rejection aborts the
whole update with :class:`~konfbind.errors.CodecDecodeFailure`.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable

from konfbind.binding.coercion import to_str
from konfbind.binding.shapes import split_optional, strip_annotated
from konfbind.errors import CodecDecodeFailure, CoercionUnrepresentable

DECLINED: Any = object()


@runtime_checkable
class TextUnmarshaler(Protocol):
    """A type that can populate itself from a text value."""

    def unmarshal_text(self, text: str) -> None: ...


def codec_type(annotation: Any) -> type | None:
    """The ``TextUnmarshaler`` class behind *annotation*, if it has one."""
    base, _ = split_optional(annotation)
    base = strip_annotated(base)
    if isinstance(base, type) and issubclass(base, TextUnmarshaler):
        return base
    return None


def decode_text(annotation: Any, current: Any, value: Any, *, key: str) -> Any:
    """Decode *value* through the field type's codec.

    Returns :data:`DECLINED` when the type has no codec. The codec runs on a
    shallow copy of *current* (or a fresh ``cls()`` when the field is
    empty), never on the published instance.

    Raises:
        CodecDecodeFailure: the codec raised.
    """
    cls = codec_type(annotation)
    if cls is None:
        return DECLINED
    if isinstance(value, cls):
        return value

    target = copy.copy(current) if isinstance(current, cls) else cls()
    try:
        text = to_str(value)
    except CoercionUnrepresentable:
        text = ""
    try:
        target.unmarshal_text(text)
    except Exception as exc:
        raise CodecDecodeFailure(key, cls, text) from exc
    return target
