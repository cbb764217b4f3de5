#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/logging_utils.py
"""Logging setup for the mdpipe command line and embedding hosts.

Library modules only create module loggers; handlers are attached here, once,
by whatever process drives the pipeline.

"""

from __future__ import annotations

import logging
import sys
from typing import Optional

# Third-party parser loggers; both are noisy at DEBUG
PARSER_LOGGERS: tuple[str, ...] = ("markdown_it", "mistune")

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
# Background parses run in worker threads, so traces name the thread too
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(threadName)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(log_level: int | str) -> int:
    """Turn a level name or number into a numeric logging level.

    Accepts ints, level names in any case (``"debug"``) and numeric strings
    (``"15"``). Anything unrecognized resolves to ``logging.INFO``.
    """
    if isinstance(log_level, int):
        return log_level
    text = str(log_level).strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
    parser_level: int | str | None = None,
) -> logging.Logger:
    """Attach console and optional file handlers to the root logger.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g., "INFO").
    log_file : str, optional
        Path of a file that receives a copy of the log output.
    trace_mode : bool, default False
        Emit timestamps, thread names and logger names, and let the parser
        libraries log at ``log_level`` as well.
    parser_level : int | str, optional
        Explicit level for the markdown-it and mistune loggers. By default
        they are held at INFO or above unless ``trace_mode`` is set.

    Returns
    -------
    logging.Logger
        The configured root logger instance.

    """
    resolved_level = resolve_log_level(log_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved_level)
    root_logger.handlers.clear()

    if trace_mode:
        formatter = logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    else:
        formatter = logging.Formatter(CONSOLE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            root_logger.warning("Could not create log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_file)

    if parser_level is not None:
        quiet_level = resolve_log_level(parser_level)
    elif trace_mode:
        quiet_level = resolved_level
    else:
        quiet_level = max(resolved_level, logging.INFO)
    for name in PARSER_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return root_logger
