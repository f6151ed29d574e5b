"""Binder — installs a bound value and applies key updates to it.

A binding is either an *open map* (``dict[str, Any]``) or a *record*
(dataclass or pydantic model). Updates are copy-on-write: each ``set`` or
``set_values`` builds a new snapshot from the current one under the cell's
write lock and publishes it in one swap, so readers never observe a
partially applied batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from konfbind.binding.cell import ValueCell
from konfbind.binding.resolver import resolve
from konfbind.binding.shapes import (
    EMBED,
    KEY_SEP,
    SKIP,
    FieldKind,
    is_open_map_type,
    is_record_type,
    shape_of,
)
from konfbind.errors import InvalidBindTarget, InvalidStrictTarget, NotBound

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Config key %s not found in bound value"


@dataclass(frozen=True)
class Binding:
    """What is currently bound: a record type, or ``None`` for an open map."""

    record_type: type | None

    @property
    def is_map(self) -> bool:
        return self.record_type is None


def binding_for(target: Any) -> Binding:
    """Validate a bind target (type or instance) and describe it.

    Raises:
        InvalidBindTarget: *target* is neither a string-keyed dict nor a record.
    """
    if is_record_type(target):
        return Binding(record_type=target)
    if is_record_type(type(target)):
        return Binding(record_type=type(target))
    if is_open_map_type(target):
        return Binding(record_type=None)
    if isinstance(target, dict) and all(isinstance(k, str) for k in target):
        return Binding(record_type=None)
    raise InvalidBindTarget(target)


def record_keys(record_type: type, prefix: str = "") -> list[str]:
    """Every leaf key path of a record shape, depth-first in declaration order.

    Nested records contribute their leaves instead of themselves; embedded
    records contribute them without a prefix; ``"-"`` fields are dropped
    along with everything beneath them.
    """
    keys: list[str] = []
    for fd in shape_of(record_type).fields:
        alias = fd.alias
        if alias == SKIP:
            continue
        if fd.kind is FieldKind.RECORD:
            child_prefix = prefix if alias == EMBED else prefix + alias + KEY_SEP
            keys.extend(record_keys(fd.target, child_prefix))
            continue
        keys.append(prefix + alias)
    return keys


class Binder:
    """Owns the value cell of one bound value.

    Parameters:
        logger: Sink for "key not found" diagnostics.
        on_strict: Key-validation collaborator; receives the strict key set
            from :meth:`bind_strict`.
        log_not_found: Emit the not-found diagnostic at all.
    """

    def __init__(
        self,
        *,
        logger: logging.Logger | None = None,
        on_strict: Callable[[list[str]], None] | None = None,
        log_not_found: bool = True,
    ) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._on_strict = on_strict
        self._log_not_found = log_not_found
        self._cell = ValueCell()
        self._binding: Binding | None = None

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @property
    def bound(self) -> bool:
        return self._binding is not None

    @property
    def binding(self) -> Binding | None:
        return self._binding

    @property
    def version(self) -> int:
        """Snapshots published since this binder was created."""
        return self._cell.version

    def bind(self, target: Any) -> None:
        """Bind a zero-valued instance of *target*'s shape, replacing any prior binding.

        Raises:
            InvalidBindTarget: *target* is neither a string-keyed dict nor a record.
        """
        binding = binding_for(target)
        zero: Any = {} if binding.is_map else shape_of(binding.record_type).zero()

        def install(_current: Any) -> Any:
            self._binding = binding
            return zero

        self._cell.update(install)
        logger.debug("Bound %s", "open map" if binding.is_map else binding.record_type.__name__)

    def bind_strict(self, target: Any) -> list[str]:
        """Bind a record and register its leaf keys as strict keys.

        Returns the strict key set.

        Raises:
            InvalidStrictTarget: *target* is not a record.
        """
        if is_record_type(target):
            record_type = target
        elif is_record_type(type(target)):
            record_type = type(target)
        else:
            raise InvalidStrictTarget(target)

        keys = record_keys(record_type)
        if self._on_strict is not None:
            self._on_strict(keys)
        self.bind(record_type)
        return keys

    # ------------------------------------------------------------------
    # Reads and updates
    # ------------------------------------------------------------------

    def value(self) -> Any:
        """Current snapshot (``None`` before anything is bound). Never blocks."""
        return self._cell.read()

    def set(self, key: str, value: Any) -> bool:
        """Apply one update. Returns whether any field was touched.

        Raises:
            NotBound: nothing is bound.
            CodecDecodeFailure: a field codec rejected *value*.
        """
        found = True

        def apply(current: Any) -> Any:
            nonlocal found
            binding = self._require_binding()
            if binding.is_map:
                new_map = dict(current)
                new_map[key] = value
                return new_map
            new, found = resolve(current, key, value)
            return new

        self._cell.update(apply)
        if not found:
            self._not_found(key)
        return found

    def set_values(self, values: Mapping[str, Any]) -> list[str]:
        """Apply a batch in sorted key order and publish once.

        Returns the keys that matched nothing.

        Raises:
            NotBound: nothing is bound.
            CodecDecodeFailure: a field codec rejected a value; nothing of the
                batch is published.
        """
        missing: list[str] = []

        def apply(current: Any) -> Any:
            binding = self._require_binding()
            if not values:
                return current
            if binding.is_map:
                new_map = dict(current)
                for key in sorted(values):
                    new_map[key] = values[key]
                return new_map
            working = current
            for key in sorted(values):
                working, touched = resolve(working, key, values[key])
                if not touched:
                    missing.append(key)
            return working

        self._cell.update(apply)
        for key in missing:
            self._not_found(key)
        return missing

    def _require_binding(self) -> Binding:
        if self._binding is None:
            msg = "no value is bound"
            raise NotBound(msg)
        return self._binding

    def _not_found(self, key: str) -> None:
        if self._log_not_found:
            self._logger.debug(NOT_FOUND_MESSAGE, key)
