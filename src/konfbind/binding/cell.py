"""ValueCell — one atomically swappable snapshot.

Readers load a single attribute and never take the lock; a reference load
is atomic, so a reader sees either the previous snapshot or the next one.
Writers serialize through one lock per cell and publish fully built
snapshots only.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any


class ValueCell:
    """Holder for the current snapshot of a bound value.

    Attributes:
        version: Number of snapshots published so far (0 = initial value).
    """

    def __init__(self, initial: Any = None) -> None:
        self._snapshot = initial
        self._version = 0
        self._lock = threading.Lock()

    def read(self) -> Any:
        """Latest published snapshot. Never blocks."""
        return self._snapshot

    @property
    def version(self) -> int:
        return self._version

    def publish(self, snapshot: Any) -> None:
        """Replace the snapshot unconditionally."""
        with self._lock:
            self._swap(snapshot)

    def update(self, fn: Callable[[Any], Any]) -> Any:
        """Run ``fn(current)`` under the write lock and publish its result.

        Nothing is published when *fn* returns the current snapshot itself
        or raises. Returns the snapshot that is live afterwards.
        """
        with self._lock:
            current = self._snapshot
            new = fn(current)
            if new is not current:
                self._swap(new)
            return new

    def _swap(self, snapshot: Any) -> None:
        self._snapshot = snapshot
        self._version += 1
