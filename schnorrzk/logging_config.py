"""Logging setup for the Schnorr proof engine.

Engine modules log through ``logging.getLogger("schnorrzk.<module>")`` and
never attach handlers themselves; entry points call :func:`setup_logging`.
"""

from __future__ import annotations

import logging

from .config import Settings, get_settings

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Configure the root logger according to ``SCHNORR_LOG_FORMAT``/``SCHNORR_LOG_LEVEL``."""

    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)
    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers so repeated setup does not double-log.
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    if settings.log_format == "json":
        from pythonjsonlogger.json import JsonFormatter

        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


__all__ = ["TEXT_FORMAT", "setup_logging"]
