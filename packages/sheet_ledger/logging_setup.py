"""Logging configuration for ``sheet_ledger``.

Library modules call ``get_logger("sheet_ledger.<module>")`` and never attach
handlers. The package root logger stays silent (a ``NullHandler``) until an
entrypoint calls :func:`configure_logging`; the CLI does so in its root
callback, switching to a ``rich`` handler when stderr is a terminal.

Level precedence: explicit ``level`` argument, then ``SHEET_LEDGER_LOG_LEVEL``,
then ``INFO``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

from rich.console import Console
from rich.logging import RichHandler

_PKG_LOGGER_NAME = "sheet_ledger"
_LEVEL_ENV = "SHEET_LEDGER_LOG_LEVEL"
_DEFAULT_FMT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_handler: logging.Handler | None = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        env_val = os.getenv(_LEVEL_ENV)
        return _parse_level(env_val) if env_val else logging.INFO
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.INFO


def _build_handler(stream: IO[str], fmt: str | None, use_rich: bool) -> logging.Handler:
    if use_rich:
        handler: logging.Handler = RichHandler(
            console=Console(file=stream), show_path=False, rich_tracebacks=False
        )
        handler.setFormatter(logging.Formatter(fmt or "%(name)s: %(message)s"))
        return handler
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FMT))
    return handler


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
    use_rich: bool = False,
) -> None:
    """Attach one handler to the ``sheet_ledger`` logger; later calls only adjust the level.

    ``stream`` defaults to the current ``sys.stderr``. With ``use_rich`` the
    records go through :class:`rich.logging.RichHandler`.
    """

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    resolved = _parse_level(level)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = _build_handler(stream or sys.stderr, fmt, use_rich)
        logger.addHandler(_handler)
        logger.propagate = False

    _handler.setLevel(resolved)
    logger.setLevel(resolved)


def reset_logging() -> None:
    """Detach the handler installed by :func:`configure_logging`."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "reset_logging"]
