"""
ABI types and decoding.
"""

from .types import (
    AbiType,
    AddressType,
    ArrayType,
    BoolType,
    BytesType,
    IntType,
    ParsedSignature,
    StringType,
    TupleType,
    UintType,
    head_length,
    parse_abi_param,
    parse_signature,
    parse_type,
)
from .decoder import AbiDecoder

__all__ = [
    'AbiType',
    'AddressType',
    'ArrayType',
    'BoolType',
    'BytesType',
    'IntType',
    'ParsedSignature',
    'StringType',
    'TupleType',
    'UintType',
    'head_length',
    'parse_abi_param',
    'parse_signature',
    'parse_type',
    'AbiDecoder',
]
