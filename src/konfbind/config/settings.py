"""Process settings — init kwargs and ``KONFBIND_*`` env vars in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``KONFBIND_*`` prefix, ``__`` for nested sections
  3. Code defaults — baked into the section models
"""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from konfbind.config.models import StoreConfig


class KonfbindSettings(BaseSettings):
    """Settings for the default store and the ``konfbind`` CLI.

    Attributes:
        verbose: DEBUG-level ``konfbind`` logging (surfaces not-found keys).
        debug_stores: Store names whose not-found keys are logged even when
            not verbose.
        log_json: Structured JSON log lines instead of the console renderer.
        json_output: CLI commands print JSON.
        store: Options for the composition-root store.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KONFBIND_",
        "env_nested_delimiter": "__",
    }

    verbose: bool = False
    log_json: bool = False
    json_output: bool = False
    debug_stores: tuple[str, ...] = ()

    store: StoreConfig = Field(default_factory=StoreConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Only init kwargs and environment variables."""
        return (init_settings, env_settings)

    @classmethod
    def from_env(cls, **overrides: Any) -> KonfbindSettings:
        """Build settings from the environment; *overrides* win over env vars.

        ``None`` overrides are dropped so unset CLI flags fall through.
        """
        return cls(**{k: v for k, v in overrides.items() if v is not None})
