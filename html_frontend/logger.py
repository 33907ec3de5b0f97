"""
Logging configuration for the HTML front-end.

All records go under the "html_frontend" logger.  Each stage logs through a
child of it:

    html_frontend.main       - one INFO line per parsed document, DEBUG for
                               the producer and encoding hint chosen
    html_frontend.producers  - DEBUG byte counts and backend details
    html_frontend.routing    - DEBUG for events the router cannot route

The package is a library first, so the default level is WARNING and a parse
stays silent.  HTMLFrontend(log_level=...) and the CLI's --verbose flag call
setup_logger() again to raise or lower it.  Output goes to stderr; stdout
belongs to run_frontend.py's JSON report.
"""

import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "html_frontend"
DEFAULT_LEVEL = logging.WARNING


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: int = DEFAULT_LEVEL,
    log_file: Optional[str] = None,
    stream: TextIO = None
) -> logging.Logger:
    """
    Configure the front-end's logger and return it.

    The first call attaches a stderr handler (and a file handler when
    ``log_file`` is given).  Later calls only change the level of the logger
    and of the handlers it already has, so repeated HTMLFrontend
    construction never duplicates output.

    Args:
        name: Logger name (default: the package logger)
        level: Logging level (default: WARNING)
        log_file: Optional file to copy records into
        stream: Console stream (default: sys.stderr)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    logger.setLevel(level)

    # Format: timestamp - stage - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


logger = setup_logger()


def get_module_logger(stage: str) -> logging.Logger:
    """
    Get the child logger for one pipeline stage ('main', 'producers',
    'routing').  It shares the package logger's handlers and level.
    """
    return logging.getLogger(f"{PACKAGE_LOGGER}.{stage}")
