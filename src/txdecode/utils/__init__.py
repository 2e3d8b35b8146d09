"""
Utilities module for txdecode.

Provides exception handling, logging and color helpers.
"""

from .exceptions import (
    TxDecodeError,
    MalformedInputError,
    LookupUnavailableError,
    VerifiedAbiError,
    AuthRequiredError,
    RateLimitedError,
    NoPlausibleSignatureError,
    DecodeError,
    ParseError,
    ABIParseError,
    RPCConnectionError,
    TransactionNotFoundError,
    format_error,
    format_error_json,
)
from .logging import TRACE, setup_logging, get_logger, logger
from .colors import (
    Colors,
    SUPPORTS_COLOR,
    red, green, yellow, cyan, bold, dim,
    error, success, warning, info, function_name,
)

__all__ = [
    # Exceptions
    'TxDecodeError',
    'MalformedInputError',
    'LookupUnavailableError',
    'VerifiedAbiError',
    'AuthRequiredError',
    'RateLimitedError',
    'NoPlausibleSignatureError',
    'DecodeError',
    'ParseError',
    'ABIParseError',
    'RPCConnectionError',
    'TransactionNotFoundError',
    # Formatting
    'format_error',
    'format_error_json',
    # Logging
    'TRACE',
    'setup_logging',
    'get_logger',
    'logger',
    # Colors
    'Colors',
    'SUPPORTS_COLOR',
    'red', 'green', 'yellow', 'cyan', 'bold', 'dim',
    'error', 'success', 'warning', 'info', 'function_name',
]
