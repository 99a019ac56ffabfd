# === FILE: wp_diff/logger.py ===
"""Logging for wp_diff.

Everything goes through the ``WPDiff`` logger; components log to children
(``WPDiff.fetcher``, ``WPDiff.differ`` …) obtained via :func:`get_logger`.
Nothing is attached at import time: the CLI calls :func:`configure` once for
the console and again, with ``console=False``, to add the per-run log file.
"""
from __future__ import annotations

import logging
import re
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

# --------------------------------------------------------------------------- #
# Defaults                                                                    #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "WPDiff"

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


def _stdout_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    Path(file).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
    console: bool = True,
) -> logging.Logger:
    """Set the level and handlers of the ``WPDiff`` logger.

    Parameters
    ----------
    level
        ``"DEBUG"``, ``logging.INFO`` and so on.
    log_file
        Rotating logfile (5 MiB × 3); its directory is created if missing.
    log_format
        :class:`logging.Formatter` format, shared by all handlers.
    replace_handlers
        Close and drop the handlers already attached first.
    console
        Attach a stdout handler.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    if console:
        lg.addHandler(_stdout_handler(log_format))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    return lg


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the project logger or one of its children."""
    if not component:
        return logging.getLogger(_LOGGER_NAME)
    return logging.getLogger(f"{_LOGGER_NAME}.{component}")


def default_log_file(log_dir: str | Path, endpoint: str) -> Path:
    """``{log_dir}/{endpoint}-{unix_ts}.log``; unsafe characters in *endpoint* become ``_``."""
    safe = re.sub(r"[^A-Za-z0-9_.-]+", "_", endpoint).strip("_") or "endpoint"
    return Path(log_dir) / f"{safe}-{int(time.time())}.log"


__all__ = ["configure", "get_logger", "default_log_file"]
