"""
ANSI color helpers for terminal output.

Colors are disabled when stdout is not a TTY or when NO_COLOR is set.
"""

import os
import sys


class Colors:
    """ANSI escape sequences."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    UNDERLINE = '\033[4m'

    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'
    WHITE = '\033[37m'

    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_CYAN = '\033[96m'


SUPPORTS_COLOR = (
    hasattr(sys.stdout, 'isatty')
    and sys.stdout.isatty()
    and 'NO_COLOR' not in os.environ
)


def _wrap(text, code: str) -> str:
    if not SUPPORTS_COLOR:
        return str(text)
    return f"{code}{text}{Colors.RESET}"


def red(text) -> str:
    return _wrap(text, Colors.RED)


def green(text) -> str:
    return _wrap(text, Colors.GREEN)


def yellow(text) -> str:
    return _wrap(text, Colors.YELLOW)


def cyan(text) -> str:
    return _wrap(text, Colors.CYAN)


def bold(text) -> str:
    return _wrap(text, Colors.BOLD)


def dim(text) -> str:
    return _wrap(text, Colors.DIM)


# Semantic helpers
def error(text) -> str:
    return _wrap(text, Colors.BRIGHT_RED)


def success(text) -> str:
    return _wrap(text, Colors.BRIGHT_GREEN)


def warning(text) -> str:
    return _wrap(text, Colors.BRIGHT_YELLOW)


def info(text) -> str:
    return _wrap(text, Colors.BRIGHT_CYAN)


def function_name(text) -> str:
    return _wrap(text, Colors.BOLD + Colors.GREEN)
