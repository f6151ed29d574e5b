"""Exception hierarchy for konfbind.

Shape mistakes (bad bind targets) and codec rejections escalate to the
caller. Per-key resolution misses and coercion failures never leave the
binding layer: a miss is logged, a failed coercion zeroes the field.
"""

from __future__ import annotations


class KonfbindError(Exception):
    """Base class for all konfbind errors."""


class InvalidBindTarget(KonfbindError, TypeError):
    """``bind`` received something that is neither a string-keyed dict nor a record."""

    def __init__(self, target: object) -> None:
        super().__init__(f"bind takes a dict[str, Any] or a record type, got {target!r}")
        self.target = target


class InvalidStrictTarget(KonfbindError, TypeError):
    """``bind_strict`` received a non-record value."""

    def __init__(self, target: object) -> None:
        super().__init__(f"bind_strict takes a record type, got {target!r}")
        self.target = target


class NotBound(KonfbindError, RuntimeError):
    """An update reached a binder that has no bound value."""


class CoercionUnrepresentable(KonfbindError, ValueError):
    """A raw value has no representation in the target type.

    Raised by the coercion engine and caught by the resolver, which zeroes
    the field instead.
    """

    def __init__(self, target: object, value: object) -> None:
        super().__init__(f"cannot represent {value!r} as {target!r}")
        self.target = target
        self.value = value


class CodecDecodeFailure(KonfbindError, ValueError):
    """A field's ``unmarshal_text`` rejected its input."""

    def __init__(self, key: str, target: type, text: str) -> None:
        super().__init__(f"{target.__name__}.unmarshal_text rejected {text!r} for key {key!r}")
        self.key = key
        self.target = target
        self.text = text
