"""Root logger setup for the ``stockroom`` command."""

from __future__ import annotations

import logging
from typing import Final

from .env import choice_env_var

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_LEVELS: Final[tuple[str, ...]] = ("debug", "info", "warning", "error")
# One line per HTTP request; only useful when debugging the Firestore store.
_REQUEST_LOGGERS: Final[tuple[str, ...]] = ("httpx", "httpcore")


def log_level_from_env(default: int = logging.INFO) -> int:
    """Return the level named by ``STOCKROOM_LOG_LEVEL``, or ``default`` when unset."""

    fallback = logging.getLevelName(default).lower()
    name = choice_env_var("STOCKROOM_LOG_LEVEL", LOG_LEVELS, default=fallback)
    return logging.getLevelNamesMapping()[name.upper()]


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Configure the root logger for CLI output.

    ``level`` defaults to ``STOCKROOM_LOG_LEVEL``. HTTP request logs are only
    shown at DEBUG. Pass ``force=True`` to replace handlers set up earlier.
    """

    resolved = log_level_from_env() if level is None else level
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%H:%M:%S", force=force)
    request_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in _REQUEST_LOGGERS:
        logging.getLogger(name).setLevel(request_level)
