"""Composition-root default store.

Library code takes a :class:`~konfbind.store.Store` explicitly; applications
that want one process-wide store use these helpers from their entry point.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

from konfbind.config.models import StoreConfig
from konfbind.config.settings import KonfbindSettings
from konfbind.store import Store

_lock = threading.Lock()
_root: Store | None = None


def init(config: StoreConfig | None = None) -> Store:
    """(Re)create the default store. *config* defaults to ``KONFBIND_STORE__*`` settings."""
    global _root
    store = Store(config or KonfbindSettings.from_env().store)
    with _lock:
        _root = store
    return store


def instance() -> Store:
    """The default store, created on first use."""
    global _root
    if _root is None:
        store = Store(KonfbindSettings.from_env().store)
        with _lock:
            if _root is None:
                _root = store
    return _root


def value() -> Any:
    return instance().value()


def bind(target: Any) -> None:
    instance().bind(target)


def bind_strict(target: Any) -> list[str]:
    return instance().bind_strict(target)


def set(key: str, val: Any) -> None:  # noqa: A001
    instance().set(key, val)


def set_values(values: Mapping[str, Any]) -> list[str]:
    return instance().set_values(values)
