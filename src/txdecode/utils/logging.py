"""
Logging for txdecode.

Library modules log through ``get_logger(<component>)``; only the CLI calls
``setup_logging``. Levels: WARNING by default, DEBUG with ``--debug`` (source
failures, rejected candidates) and TRACE with ``--verbose`` (every resolver
state transition).
"""

import logging
import os
import sys
from typing import Optional

from txdecode.utils.colors import Colors

TRACE = 5
logging.addLevelName(TRACE, 'TRACE')

ROOT_NAME = 'txdecode'


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name."""

    LEVEL_COLORS = {
        TRACE: Colors.DIM,
        logging.DEBUG: Colors.DIM,
        logging.WARNING: Colors.BRIGHT_YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color:
            # Copy so the file handler still sees the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{Colors.RESET}"
        return super().format(record)


class TxDecodeLogger(logging.Logger):
    def trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)


logging.setLoggerClass(TxDecodeLogger)


def setup_logging(
    quiet: bool = False,
    debug: bool = False,
    verbose: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the txdecode logger for a CLI run.

    Args:
        quiet: Suppress console logging entirely
        debug: Log at DEBUG
        verbose: Log at TRACE, overrides ``debug``
        log_file: Also write every DEBUG-and-above record to this file

    Returns:
        The configured ``txdecode`` logger
    """
    console_level = TRACE if verbose else logging.DEBUG if debug else logging.WARNING

    logger = logging.getLogger(ROOT_NAME)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(min(console_level, logging.DEBUG) if log_file else console_level)

    if not quiet:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(console_level)
        if sys.stderr.isatty() and 'NO_COLOR' not in os.environ:
            console.setFormatter(ColoredFormatter('%(levelname)s: %(message)s'))
        else:
            console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
        logger.addHandler(console)

    if log_file:
        handler = logging.FileHandler(log_file)
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """The txdecode logger, or its ``txdecode.<name>`` child."""
    return logging.getLogger(f'{ROOT_NAME}.{name}' if name else ROOT_NAME)


logger = get_logger()
