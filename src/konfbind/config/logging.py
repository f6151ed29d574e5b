"""structlog configuration for konfbind.

Two output modes:
- Human (default): console renderer to stderr
- JSON (log_json=True): structured JSON lines to stderr

Library modules log through ``logging.getLogger(__name__)``; each store
logs its not-found diagnostics through ``konfbind.store.<name>`` (see
:func:`store_logger_name`). Those records reach stderr through structlog's
``ProcessorFormatter`` once :func:`configure_logging` has run.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable

import structlog

PACKAGE_LOGGER = "konfbind"
STORE_LOGGER = "konfbind.store"


def store_logger_name(store_name: str) -> str:
    """Logger that carries the not-found diagnostics of store *store_name*."""
    return f"{STORE_LOGGER}.{store_name}"


def _processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    debug_stores: Iterable[str] = (),
) -> None:
    """Route konfbind logging to stderr through structlog.

    Args:
        verbose: DEBUG for every ``konfbind`` logger. When False the package
            logs WARNING+ only.
        log_json: JSON renderer instead of the console renderer.
        debug_stores: Store names whose not-found diagnostics are shown at
            DEBUG even when *verbose* is off.
    """
    shared = _processors()
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in debug_stores:
        logging.getLogger(store_logger_name(name)).setLevel(logging.DEBUG)
