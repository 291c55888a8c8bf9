"""
Logging configuration for secretstore.

Two output formats:
  - **human** – coloured, single-line, readable
  - **json**  – newline-delimited JSON for log aggregators

Module loggers live under the ``secretstore.`` namespace.  Nothing in
this package logs passphrases, derived keys or private keys; decode
failures are logged by error kind only.

Usage:
    from secretstore_core.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", log_file="secretstore.log")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from secretstore_core.config import LoggingConfig

_FMT_HUMAN = "human"
_FMT_JSON = "json"


class _JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_obj["error"] = type(record.exc_info[1]).__name__
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, colour: bool = True):
        super().__init__()
        self.colour = colour

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        if not self.colour:
            return f"{ts} [{record.levelname:<7}] {record.name}: {record.getMessage()}"
        colour = self.COLOURS.get(record.levelname, "")
        return (
            f"{colour}{ts} [{record.levelname:<7}]{self.RESET} "
            f"{record.name}: {record.getMessage()}"
        )


def setup_logging(
    level: str = "INFO",
    fmt: str = _FMT_HUMAN,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger and return it.

    Parameters
    ----------
    level : str
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    fmt : str
        ``"human"`` or ``"json"``.  Anything else raises ValueError.
    log_file : str, optional
        Also write to this file, always as JSON lines.
    """
    if fmt not in (_FMT_HUMAN, _FMT_JSON):
        raise ValueError(f"Unknown log format: {fmt!r}")

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    if fmt == _FMT_JSON:
        console.setFormatter(_JSONFormatter())
    else:
        console.setFormatter(_HumanFormatter(colour=sys.stderr.isatty()))
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(_JSONFormatter())
        root.addHandler(fh)

    return root


def setup_from_config(cfg: LoggingConfig) -> logging.Logger:
    """Apply the ``[logging]`` section of a loaded config."""
    return setup_logging(level=cfg.level, fmt=cfg.format, log_file=cfg.file)
