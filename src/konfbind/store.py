"""Store — an explicit configuration store handle.

The store keeps the raw ``(key, value)`` pairs it has been given and,
once something is bound, mirrors every update onto the bound value through
its :class:`~konfbind.binding.binder.Binder`. Binding after values have
arrived hydrates the new binding from the raw values in one batch.

Loaders and watchers that discover configuration live outside this package;
they call :meth:`Store.set` / :meth:`Store.set_values`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from konfbind.binding.binder import Binder
from konfbind.config.logging import store_logger_name
from konfbind.config.models import StoreConfig

logger = logging.getLogger(__name__)


class Store:
    """A configuration store with an optional bound value.

    Parameters:
        config: Store options; defaults to :class:`StoreConfig`.
        logger: Diagnostics sink for not-found keys. Defaults to
            ``konfbind.store.<name>``.

    Usage::

        store = Store(StoreConfig(name="app"))
        store.bind_strict(AppConfig)
        store.set_values({"db.host": "localhost", "db.port": "5432"})
        cfg: AppConfig = store.value()
    """

    def __init__(
        self,
        config: StoreConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config or StoreConfig()
        self._logger = logger or logging.getLogger(store_logger_name(self._config.name))
        self._lock = threading.RLock()
        self._values: dict[str, Any] = {}
        self._strict_keys: list[str] = []
        self._binder = Binder(
            logger=self._logger,
            on_strict=lambda keys: self.strict(*keys),
            log_not_found=self._config.log_not_found,
        )

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def binder(self) -> Binder:
        return self._binder

    # ------------------------------------------------------------------
    # Raw values
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Raw value last set for *key*."""
        return self._values.get(key, default)

    def values(self) -> dict[str, Any]:
        """Copy of every raw value set so far."""
        with self._lock:
            return dict(self._values)

    def set(self, key: str, value: Any) -> None:
        """Record a raw value and apply it to the bound value, if any."""
        with self._lock:
            if self._binder.bound:
                self._binder.set(key, value)
            self._values[key] = value

    def set_values(self, values: Mapping[str, Any]) -> list[str]:
        """Record a batch of raw values and apply them as one publication.

        Returns the keys that matched nothing in the bound record.
        """
        missing: list[str] = []
        with self._lock:
            if self._binder.bound:
                missing = self._binder.set_values(values)
            self._values.update(values)
        return missing

    # ------------------------------------------------------------------
    # Strict keys
    # ------------------------------------------------------------------

    def strict(self, *keys: str) -> None:
        """Register keys for strict validation, keeping first-seen order."""
        with self._lock:
            for key in keys:
                if key not in self._strict_keys:
                    self._strict_keys.append(key)

    @property
    def strict_keys(self) -> list[str]:
        return list(self._strict_keys)

    # ------------------------------------------------------------------
    # Bound value
    # ------------------------------------------------------------------

    def value(self) -> Any:
        """Current bound snapshot, ``None`` before anything is bound."""
        return self._binder.value()

    def bind(self, target: Any) -> None:
        """Bind *target* (record type/instance or string-keyed dict).

        Raw values already in the store are replayed into the new binding.
        """
        with self._lock:
            self._binder.bind(target)
            self._hydrate()

    def bind_strict(self, target: Any) -> list[str]:
        """Bind a record and register its leaf keys as strict keys."""
        with self._lock:
            keys = self._binder.bind_strict(target)
            self._hydrate()
            return keys

    def _hydrate(self) -> None:
        if self._values:
            logger.debug("Replaying %d values into %s", len(self._values), self.name)
            self._binder.set_values(self._values)
