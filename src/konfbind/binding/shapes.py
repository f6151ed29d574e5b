"""Field descriptor tables for record shapes.

A *record* is a dataclass or a pydantic ``BaseModel`` subclass. Each record
class is analysed once into a :class:`RecordShape`: an ordered tuple of
:class:`FieldDescriptor` entries carrying the field's alias, its kind and
the nested type the resolver descends into. Shapes are cached per class.

Aliases come from field metadata under :data:`TAG_KEY`::

    @dataclass
    class Database:
        host: str = field(default="", metadata=tag("hostname"))
        base: Common = field(default_factory=Common, metadata=tag(embed=True))
        secret: str = field(default="", metadata=tag("-"))

    class Database(BaseModel):
        host: str = Field("", json_schema_extra=tag("hostname"))
"""

from __future__ import annotations

import dataclasses
import functools
import types
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

TAG_KEY = "konfbind"
KEY_SEP = "."
EMBED = ",embed"
SKIP = "-"

_ZEROS: dict[Any, Any] = {
    str: str,
    bytes: bytes,
    bool: bool,
    int: int,
    float: float,
    datetime: lambda: datetime.min,
    timedelta: timedelta,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}


def tag(alias: str | None = None, *, embed: bool = False) -> dict[str, str]:
    """Build field metadata naming the field's alias.

    ``tag("a")`` renames the field to ``a``; ``tag("-")`` hides it;
    ``tag(embed=True)`` exposes the nested record's fields directly in the
    parent's namespace.
    """
    if embed:
        return {TAG_KEY: EMBED}
    if not alias:
        msg = "tag() needs an alias or embed=True"
        raise TypeError(msg)
    return {TAG_KEY: alias}


class FieldKind(StrEnum):
    """How the resolver treats a field once a key prefix matches it."""

    LEAF = "leaf"
    RECORD = "record"
    OPTIONAL_RECORD = "optional_record"
    RECORD_MAP = "record_map"
    SCALAR_MAP = "scalar_map"


# ---------------------------------------------------------------------------
# Annotation helpers
# ---------------------------------------------------------------------------


def strip_annotated(tp: Any) -> Any:
    """Return the base of an ``Annotated[...]`` type, or *tp* itself."""
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def split_optional(tp: Any) -> tuple[Any, bool]:
    """Split ``X | None`` into ``(X, True)``; anything else into ``(tp, False)``."""
    tp = strip_annotated(tp)
    if get_origin(tp) in (Union, types.UnionType):
        args = get_args(tp)
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1 and len(args) == 2:
            return rest[0], True
    return tp, False


def is_record_type(tp: Any) -> bool:
    """Whether *tp* is a dataclass class or a pydantic model class."""
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_open_map_type(tp: Any) -> bool:
    """Whether *tp* spells a ``dict`` with string keys and untyped values."""
    if tp is dict:
        return True
    if get_origin(tp) is not dict:
        return False
    args = get_args(tp)
    return len(args) == 2 and args[0] is str and args[1] in (Any, object)


def zero_value(tp: Any) -> Any:
    """Zero value for a declared type.

    Optionals zero to ``None``, records to a freshly built instance, known
    scalars and containers to their empty value, everything else to ``None``.
    """
    base, optional = split_optional(tp)
    if optional:
        return None
    base = strip_annotated(base)
    if is_record_type(base):
        return shape_of(base).zero()
    factory = _ZEROS.get(get_origin(base) or base)
    return factory() if factory is not None else None


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldDescriptor:
    """Static description of one record field.

    Attributes:
        name: Python attribute name.
        annotation: Declared type, ``Annotated`` metadata included.
        tag: Explicit alias from field metadata, if any.
        kind: Resolver treatment once a key prefix matches.
        target: Nested record type (record kinds) or map value type
            (``SCALAR_MAP``); ``None`` for leaves.
        required: The field has no default and must be zero-filled.
    """

    name: str
    annotation: Any
    tag: str | None
    kind: FieldKind
    target: Any = None
    required: bool = False

    @property
    def embedded(self) -> bool:
        return self.tag == EMBED

    @property
    def skipped(self) -> bool:
        return self.tag == SKIP

    @property
    def alias(self) -> str:
        return self.tag or self.name.lower()

    def matches(self, key: str) -> bool:
        """Exact match: alias (case-sensitive) or field name (case-insensitive)."""
        return self.alias == key or self.name.lower() == key.lower()

    def remainder(self, key: str) -> str | None:
        """Strip this field's prefix from *key*; ``None`` when it doesn't apply."""
        if self.embedded:
            return key
        prefix = self.alias + KEY_SEP
        if key.startswith(prefix):
            return key[len(prefix) :]
        if key.lower().startswith(self.name.lower() + KEY_SEP):
            return key[len(self.name) + len(KEY_SEP) :]
        return None


def classify(annotation: Any) -> tuple[FieldKind, Any]:
    """Derive ``(kind, target)`` for a declared field type."""
    base, optional = split_optional(annotation)
    base = strip_annotated(base)
    if is_record_type(base):
        return (FieldKind.OPTIONAL_RECORD if optional else FieldKind.RECORD), base

    if optional:
        return FieldKind.LEAF, None

    if base is dict:
        return FieldKind.SCALAR_MAP, Any
    if get_origin(base) is dict:
        key_type, value_type = get_args(base)
        if strip_annotated(key_type) is not str:
            return FieldKind.LEAF, None
        inner, _ = split_optional(value_type)
        inner = strip_annotated(inner)
        if is_record_type(inner):
            return FieldKind.RECORD_MAP, inner
        return FieldKind.SCALAR_MAP, value_type

    return FieldKind.LEAF, None


@dataclass(frozen=True)
class RecordShape:
    """Ordered field table for one record class plus copy-on-write helpers."""

    cls: type
    fields: tuple[FieldDescriptor, ...]
    is_model: bool

    def zero(self) -> Any:
        """New instance: declared defaults, type zeros for required fields."""
        values = {fd.name: zero_value(fd.annotation) for fd in self.fields if fd.required}
        if self.is_model:
            return self.cls.model_construct(**values)
        return self.cls(**values)

    def replace(self, record: Any, updates: dict[str, Any]) -> Any:
        """Return a copy of *record* with *updates* applied; *record* is untouched."""
        if self.is_model:
            return record.model_copy(update=updates)
        return dataclasses.replace(record, **updates)


def _dataclass_fields(cls: type) -> list[FieldDescriptor]:
    try:
        hints = get_type_hints(cls, include_extras=True)
    except NameError as exc:
        msg = f"cannot resolve annotations of record {cls.__qualname__}: {exc}"
        raise TypeError(msg) from exc
    out: list[FieldDescriptor] = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        annotation = hints.get(f.name, Any)
        kind, target = classify(annotation)
        required = f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        out.append(
            FieldDescriptor(
                name=f.name,
                annotation=annotation,
                tag=f.metadata.get(TAG_KEY),
                kind=kind,
                target=target,
                required=required,
            )
        )
    return out


def _model_fields(cls: type[BaseModel]) -> list[FieldDescriptor]:
    out: list[FieldDescriptor] = []
    for name, info in cls.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
        kind, target = classify(annotation)
        raw_tag = extra.get(TAG_KEY)
        out.append(
            FieldDescriptor(
                name=name,
                annotation=annotation,
                tag=raw_tag if isinstance(raw_tag, str) else None,
                kind=kind,
                target=target,
                required=info.is_required(),
            )
        )
    return out


@functools.cache
def shape_of(cls: type) -> RecordShape:
    """Build (once) the field table for a record class."""
    if not is_record_type(cls):
        msg = f"{cls!r} is not a dataclass or pydantic model"
        raise TypeError(msg)
    if issubclass(cls, BaseModel):
        return RecordShape(cls=cls, fields=tuple(_model_fields(cls)), is_model=True)
    return RecordShape(cls=cls, fields=tuple(_dataclass_fields(cls)), is_model=False)
