"""
Custom exceptions for txdecode.

This module provides a hierarchy of exceptions for the different ways a
calldata resolution can fail, along with utilities for formatting errors
consistently.
"""

import json
from typing import Any, Dict, Optional


class TxDecodeError(Exception):
    """
    Base exception for all txdecode errors.

    Attributes:
        message: Human-readable error message
        details: Additional context as key-value pairs
        error_code: Optional error code for programmatic handling
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": True,
            "type": self.error_code,
            "message": self.message,
            **self.details
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert exception to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


# ============================================================================
# Input Errors
# ============================================================================

class MalformedInputError(TxDecodeError):
    """Raised when calldata is too short to carry a selector or is not hex."""

    def __init__(self, message: str, length: Optional[int] = None, **kwargs):
        details = {"length": length} if length is not None else {}
        details.update(kwargs)
        super().__init__(message, details, "MalformedInput")


# ============================================================================
# Lookup Source Errors
# ============================================================================

class LookupUnavailableError(TxDecodeError):
    """Raised when a signature source cannot be reached or answers garbage."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs
    ):
        details = {}
        if source:
            details["source"] = source
        if url:
            details["url"] = url
        details.update(kwargs)
        super().__init__(message, details, "LookupUnavailable")


class VerifiedAbiError(TxDecodeError):
    """Base class for credential problems with the verified ABI source."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        chain_id: Optional[int] = None,
        error_code: Optional[str] = None,
        **kwargs
    ):
        details = {}
        if source:
            details["source"] = source
        if chain_id is not None:
            details["chain_id"] = chain_id
        details.update(kwargs)
        super().__init__(message, details, error_code or "VerifiedAbiError")


class AuthRequiredError(VerifiedAbiError):
    """Raised when the explorer API key is missing or rejected."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="AuthRequired", **kwargs)


class RateLimitedError(VerifiedAbiError):
    """Raised when the explorer API quota is exhausted."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, error_code="RateLimited", **kwargs)


# ============================================================================
# Resolution Errors
# ============================================================================

class NoPlausibleSignatureError(TxDecodeError):
    """Raised when no candidate signature fits the calldata."""

    def __init__(
        self,
        selector: str,
        argument_length: int,
        reason: Optional[str] = None,
        **kwargs
    ):
        message = f"unknown function, 4-byte selector {selector}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            {"selector": selector, "argument_length": argument_length, **kwargs},
            "NoPlausibleSignature"
        )
        self.selector = selector
        self.argument_length = argument_length


class DecodeError(TxDecodeError):
    """Raised when argument bytes do not decode under a candidate signature."""

    def __init__(
        self,
        message: str,
        signature: Optional[str] = None,
        argument_length: Optional[int] = None,
        **kwargs
    ):
        details = {}
        if signature:
            details["signature"] = signature
        if argument_length is not None:
            details["argument_length"] = argument_length
        details.update(kwargs)
        super().__init__(message, details, "DecodeError")


# ============================================================================
# Parsing Errors
# ============================================================================

class ParseError(TxDecodeError):
    """Raised when parsing fails."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        details = {"source": source} if source else {}
        details.update(kwargs)
        super().__init__(message, details, "ParseError")


class ABIParseError(ParseError):
    """Raised when a text signature or ABI entry cannot be parsed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.error_code = "ABIParseError"


# ============================================================================
# RPC Errors
# ============================================================================

class RPCConnectionError(TxDecodeError):
    """Raised when RPC connection fails."""

    def __init__(self, message: str, rpc_url: Optional[str] = None, **kwargs):
        details = {"rpc_url": rpc_url} if rpc_url else {}
        details.update(kwargs)
        super().__init__(message, details, "RPCConnectionError")


class TransactionNotFoundError(TxDecodeError):
    """Raised when transaction is not found."""

    def __init__(self, tx_hash: str, **kwargs):
        super().__init__(
            f"Transaction not found: {tx_hash}",
            {"tx_hash": tx_hash, **kwargs},
            "TransactionNotFoundError"
        )


# ============================================================================
# Error Formatting Utilities
# ============================================================================

def format_error(e: Exception, json_mode: bool = False) -> str:
    """
    Format an exception for display.

    Args:
        e: The exception to format
        json_mode: If True, output as JSON; otherwise use colored text

    Returns:
        Formatted error string
    """
    from txdecode.utils.colors import error

    if isinstance(e, TxDecodeError):
        if json_mode:
            return e.to_json()
        return error(e.message)
    if json_mode:
        return json.dumps(format_error_json(str(e), type(e).__name__), indent=2)
    return error(str(e))


def format_error_json(
    message: str,
    error_type: str = "Error",
    **kwargs
) -> Dict[str, Any]:
    """
    Create a standardized error JSON structure.

    Args:
        message: Error message
        error_type: Error type/code
        **kwargs: Additional fields to include

    Returns:
        Dictionary suitable for JSON output
    """
    return {
        "error": True,
        "type": error_type,
        "message": message,
        **kwargs
    }
