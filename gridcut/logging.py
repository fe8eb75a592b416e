"""Centralized logging configuration for gridcut.

Every module logs through ``get_logger(__name__)``; records flow to a single
``gridcut`` package logger that owns the only handler. Levels are changed for
the whole package at once with ``set_global_log_level``.
"""

import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "gridcut"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def _coerce_level(level: Union[int, str]) -> int:
    """Accept ``logging.DEBUG``-style ints or case-insensitive level names."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'.")
    return value


def setup_root_logger(
    level: Union[int, str] = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Install the package handler once.

    Later calls return immediately, so importing modules never stack
    handlers. Call ``reset_logging`` first to reconfigure.

    Args:
        level: Package log level (default: INFO).
        format_string: Record format; defaults to ``DEFAULT_FORMAT``.
        handler: Destination; defaults to a stdout stream handler.
    """
    global _configured
    if _configured:
        return

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_coerce_level(level))
    package_logger.handlers.clear()

    handler = handler or logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    package_logger.addHandler(handler)

    # Propagate so pytest's caplog sees records
    package_logger.propagate = True
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``gridcut`` namespace.

    Names outside the namespace (scripts, notebooks) are nested under it so
    they share the package handler and level.

    Args:
        name: Usually ``__name__`` of the calling module.
    """
    setup_root_logger()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: Union[int, str]) -> None:
    """Set the level of the package logger and its handlers.

    Args:
        level: A ``logging`` level or its name, e.g. ``"debug"``.

    Raises:
        ValueError: If a level name is unknown.
    """
    setup_root_logger()
    value = _coerce_level(level)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(value)
    for handler in package_logger.handlers:
        handler.setLevel(value)


def level_from_flags(verbose: bool = False, quiet: bool = False) -> int:
    """Map command-line verbosity flags to a level; ``verbose`` wins."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def enable_debug_logging() -> None:
    set_global_log_level(logging.DEBUG)


def disable_debug_logging() -> None:
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Drop the package handler and level (used by tests)."""
    global _configured
    _configured = False
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


setup_root_logger()
