"""
Selector extraction.

Splits raw calldata into its 4-byte function selector and the ABI-encoded
argument bytes, and computes selectors for text signatures.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from eth_hash.auto import keccak
from eth_utils import is_hex, remove_0x_prefix

from txdecode.utils.exceptions import MalformedInputError

SELECTOR_SIZE = 4


@dataclass(frozen=True)
class Selector:
    """Exactly four bytes identifying a function."""
    value: bytes

    def __post_init__(self):
        if not isinstance(self.value, bytes) or len(self.value) != SELECTOR_SIZE:
            raise MalformedInputError(
                f"A selector is exactly {SELECTOR_SIZE} bytes",
                length=len(self.value) if isinstance(self.value, (bytes, bytearray)) else None
            )

    @property
    def hex(self) -> str:
        return '0x' + self.value.hex()

    @classmethod
    def from_hex(cls, text: str) -> 'Selector':
        return cls(parse_hex(text))

    def __str__(self) -> str:
        return self.hex


def parse_hex(text: str) -> bytes:
    """
    Convert a hex string (optionally 0x-prefixed) to bytes.

    Raises:
        MalformedInputError: If the text is not an even-length hex string
    """
    if not isinstance(text, str):
        raise MalformedInputError(f"Expected a hex string, got {type(text).__name__}")
    stripped = text.strip()
    if stripped in ('', '0x', '0X'):
        return b''
    if not is_hex(stripped):
        raise MalformedInputError(f"Not a hex string: {stripped[:20]}")
    body = remove_0x_prefix(stripped)
    if len(body) % 2:
        raise MalformedInputError("Hex string has an odd number of digits", length=len(body))
    return bytes.fromhex(body)


def extract_selector(calldata: Union[bytes, bytearray, str]) -> Tuple[Selector, bytes]:
    """
    Split calldata into (selector, argument bytes).

    Args:
        calldata: Raw bytes or a hex string

    Returns:
        The selector and the remaining bytes, which may be empty

    Raises:
        MalformedInputError: If calldata is shorter than four bytes
    """
    data = parse_hex(calldata) if isinstance(calldata, str) else bytes(calldata)
    if len(data) < SELECTOR_SIZE:
        raise MalformedInputError(
            f"Calldata too short to contain a selector ({len(data)} bytes)",
            length=len(data)
        )
    return Selector(data[:SELECTOR_SIZE]), data[SELECTOR_SIZE:]


def selector_for(signature: str) -> Selector:
    """Selector of a canonical signature: first four bytes of its keccak-256."""
    return Selector(keccak(signature.encode())[:SELECTOR_SIZE])
