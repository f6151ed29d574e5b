"""konfbind — bind live configuration values onto typed records."""

from __future__ import annotations

from konfbind.binding.binder import Binder
from konfbind.binding.shapes import EMBED, KEY_SEP, TAG_KEY, tag
from konfbind.errors import (
    CodecDecodeFailure,
    InvalidBindTarget,
    InvalidStrictTarget,
    KonfbindError,
)
from konfbind.store import Store

__version__ = "0.3.0"

__all__ = [
    "EMBED",
    "KEY_SEP",
    "TAG_KEY",
    "Binder",
    "CodecDecodeFailure",
    "InvalidBindTarget",
    "InvalidStrictTarget",
    "KonfbindError",
    "Store",
    "__version__",
    "tag",
]
