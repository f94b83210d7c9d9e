"""
Log output for the ``ledgerdecimal`` logger tree.

Modules log on children of ``ledgerdecimal`` (``ledgerdecimal.number``,
``ledgerdecimal.roots``, ``ledgerdecimal.codec``).  The package installs a
``NullHandler`` on the parent, so nothing is printed until a host opts in:

    from ledgerdecimal.logging_config import attach_handlers
    attach_handlers(level="DEBUG", fmt="json", log_file="ledgerdecimal.log")

``attach_handlers`` only touches the ``ledgerdecimal`` logger.  The root
logger and any handlers the host installed stay as they are, and calling it
again replaces the handlers from the previous call instead of stacking them.

Root-finder records carry ``order`` and ``iterations`` through ``extra=``;
the JSON formatter emits them as keys and the text formatter appends them
as ``key=value`` pairs.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ledgerdecimal.config import LoggingConfig

LIBRARY_LOGGER = "ledgerdecimal"
FORMATS = ("human", "json")

_CONTEXT_FIELDS = ("order", "iterations")
_OWNED_MARK = "_ledgerdecimal_owned"


def _context(record: logging.LogRecord) -> dict:
    return {k: getattr(record, k) for k in _CONTEXT_FIELDS if hasattr(record, k)}


class AmountJSONFormatter(logging.Formatter):
    """One JSON object per record, with root-finder context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "area": record.name.rpartition(".")[2],
            "event": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class AmountTextFormatter(logging.Formatter):
    """``HH:MM:SS LEVEL   area: message key=value ...``"""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        area = record.name.rpartition(".")[2]
        line = f"{ts} {record.levelname:<7} {area}: {record.getMessage()}"
        ctx = _context(record)
        if ctx:
            line += " " + " ".join(f"{k}={v}" for k, v in ctx.items())
        if record.exc_info and record.exc_info[1]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"unknown log level {level!r}")
    return value


def detach_handlers() -> None:
    """Remove handlers added by ``attach_handlers`` and restore propagation."""
    lib = logging.getLogger(LIBRARY_LOGGER)
    for h in [h for h in lib.handlers if getattr(h, _OWNED_MARK, False)]:
        lib.removeHandler(h)
        h.close()
    lib.setLevel(logging.NOTSET)
    lib.propagate = True


def attach_handlers(
    level: str = "INFO",
    fmt: str = "human",
    log_file: Optional[str] = None,
    propagate: bool = False,
) -> logging.Logger:
    """
    Send the ``ledgerdecimal`` logger tree to stderr and optionally a file.

    Parameters
    ----------
    level : str
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    fmt : str
        ``"human"`` for single-line text, ``"json"`` for newline-delimited JSON.
    log_file : str, optional
        Also write records to this file, always as JSON.
    propagate : bool
        Keep passing records up to the host's root handlers as well.

    Raises ``ValueError`` for an unknown level or format.
    """
    if fmt not in FORMATS:
        raise ValueError(f"unknown log format {fmt!r}, expected one of {FORMATS}")
    numeric = _parse_level(level)

    detach_handlers()
    lib = logging.getLogger(LIBRARY_LOGGER)
    lib.setLevel(numeric)
    lib.propagate = propagate

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(AmountJSONFormatter() if fmt == "json" else AmountTextFormatter())
    handlers: list[logging.Handler] = [console]

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(AmountJSONFormatter())
        handlers.append(fh)

    for h in handlers:
        setattr(h, _OWNED_MARK, True)
        lib.addHandler(h)
    return lib


def attach_handlers_from_config(cfg: LoggingConfig) -> logging.Logger:
    return attach_handlers(level=cfg.level, fmt=cfg.format, log_file=cfg.file)
