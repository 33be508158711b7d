"""
Logging configuration — set up once by the stackgen CLI.

The codegen core never prints: it logs through module loggers
(``logging.getLogger(__name__)``) and returns Reports.  This module
decides where those records go.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  STACKGEN_LOG_LEVEL  >  WARNING

Optional file output via STACKGEN_LOG_FILE / STACKGEN_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LOG_LEVEL = "STACKGEN_LOG_LEVEL"
ENV_LOG_FILE = "STACKGEN_LOG_FILE"
ENV_LOG_FILE_LEVEL = "STACKGEN_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# WARNING and above — the message is enough
_FMT_MINIMAL = "%(levelname)s: %(message)s"

# INFO / DEBUG — which pipeline step logged it
_FMT_VERBOSE = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# File output — always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, falling back to the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LOG_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the ``stackgen`` logger hierarchy.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = parse_level(level)

    fmt, datefmt = (
        (_FMT_VERBOSE, _DATEFMT_VERBOSE) if numeric_level <= logging.INFO
        else (_FMT_MINIMAL, None)
    )
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    logger = logging.getLogger("stackgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(console)
    logger.propagate = False

    effective_level = numeric_level

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        logger.addHandler(fh)

    logger.setLevel(effective_level)


def parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
