"""Pydantic configuration models with code-baked defaults."""

from __future__ import annotations

from pydantic import BaseModel


class StoreConfig(BaseModel):
    """Options for one :class:`~konfbind.store.Store`."""

    model_config = {"frozen": True}

    name: str = "root"
    log_not_found: bool = True
