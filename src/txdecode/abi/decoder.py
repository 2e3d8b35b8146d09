"""
ABI decoding of argument bytes against a parsed type list.

eth_abi performs the canonical head/tail decoding. Before handing the bytes
over, the top-level head is checked so that offsets pointing backward into
the head or past the end are reported as a DecodeError with a clear reason.
"""

from typing import Any, List, Optional, Sequence

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from eth_utils import to_checksum_address

from txdecode.abi.types import (
    WORD_SIZE,
    AbiType,
    AddressType,
    ArrayType,
    BytesType,
    TupleType,
    head_length,
)
from txdecode.utils.exceptions import DecodeError
from txdecode.utils.logging import get_logger

logger = get_logger("abi.decoder")


class AbiDecoder:
    """Decode argument bytes into Python values for a given type list."""

    def decode(
        self,
        types: Sequence[AbiType],
        data: bytes,
        signature: Optional[str] = None
    ) -> List[Any]:
        """
        Decode ``data`` (calldata without its selector) as ``types``.

        Args:
            types: Ordered parameter types
            data: ABI-encoded argument bytes
            signature: Signature text, used only for error details

        Returns:
            One value per type: ints, bools, checksummed address strings,
            bytes, strings, lists for arrays and tuples for tuples

        Raises:
            DecodeError: If a head or tail read runs out of bounds, an offset
                points backward, or padding/values are invalid for the type
        """
        if not types:
            if data:
                raise DecodeError(
                    f"Zero-parameter function but {len(data)} argument bytes present",
                    signature=signature,
                    argument_length=len(data)
                )
            return []

        self._check_head(types, data, signature)

        try:
            values = abi_decode([t.canonical for t in types], data)
        except (DecodingError, ValueError, OverflowError) as e:
            logger.debug(f"eth_abi rejected {signature or 'arguments'}: {e}")
            raise DecodeError(
                f"Failed to decode arguments: {e}",
                signature=signature,
                argument_length=len(data)
            ) from e

        return [self._normalize(t, v) for t, v in zip(types, values)]

    def _check_head(self, types: Sequence[AbiType], data: bytes, signature: Optional[str]):
        head_size = head_length(types)
        if len(data) < head_size:
            raise DecodeError(
                f"Head needs {head_size} bytes, only {len(data)} present",
                signature=signature,
                argument_length=len(data)
            )

        position = 0
        for abi_type in types:
            if abi_type.is_dynamic:
                offset = int.from_bytes(data[position:position + WORD_SIZE], 'big')
                if offset < head_size:
                    raise DecodeError(
                        f"Offset {offset} for {abi_type.canonical} points back into the head",
                        signature=signature,
                        argument_length=len(data)
                    )
                if offset + WORD_SIZE > len(data):
                    raise DecodeError(
                        f"Offset {offset} for {abi_type.canonical} is out of range",
                        signature=signature,
                        argument_length=len(data)
                    )
            position += abi_type.head_size

    def _normalize(self, abi_type: AbiType, value: Any) -> Any:
        if isinstance(abi_type, AddressType):
            return to_checksum_address(value)
        if isinstance(abi_type, ArrayType):
            return [self._normalize(abi_type.element, v) for v in value]
        if isinstance(abi_type, TupleType):
            return tuple(self._normalize(c, v) for c, v in zip(abi_type.components, value))
        if isinstance(abi_type, BytesType):
            return bytes(value)
        return value
