"""
ABI parameter types.

Signature text coming from public directories is untrusted. Before anything
ranks or decodes it, it is parsed into a closed set of type variants::

    AddressType | UintType(bits) | IntType(bits) | BoolType
    | BytesType(size) | StringType | ArrayType(element, length) | TupleType(components)

Every variant knows its canonical spelling (the one hashed into a selector),
whether it is dynamic, and how many head bytes it occupies.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from txdecode.utils.exceptions import ABIParseError

WORD_SIZE = 32

_IDENTIFIER_RE = re.compile(r'[A-Za-z_$][A-Za-z0-9_$]*')
_ELEMENTARY_RE = re.compile(r'[a-z]+[0-9]*')
_ARRAY_SUFFIX_RE = re.compile(r'\[(\d*)\]')


@dataclass(frozen=True)
class AbiType:
    """Base class of the ABI type variants."""

    @property
    def canonical(self) -> str:
        raise NotImplementedError

    @property
    def is_dynamic(self) -> bool:
        return False

    @property
    def head_size(self) -> int:
        """Bytes this type occupies in the head region of an encoding."""
        return WORD_SIZE

    def __str__(self) -> str:
        return self.canonical


@dataclass(frozen=True)
class AddressType(AbiType):
    @property
    def canonical(self) -> str:
        return 'address'


@dataclass(frozen=True)
class BoolType(AbiType):
    @property
    def canonical(self) -> str:
        return 'bool'


@dataclass(frozen=True)
class StringType(AbiType):
    @property
    def canonical(self) -> str:
        return 'string'

    @property
    def is_dynamic(self) -> bool:
        return True


@dataclass(frozen=True)
class UintType(AbiType):
    bits: int = 256

    @property
    def canonical(self) -> str:
        return f'uint{self.bits}'


@dataclass(frozen=True)
class IntType(AbiType):
    bits: int = 256

    @property
    def canonical(self) -> str:
        return f'int{self.bits}'


@dataclass(frozen=True)
class BytesType(AbiType):
    """``bytes<size>`` when size is set, variable-length ``bytes`` otherwise."""
    size: Optional[int] = None

    @property
    def canonical(self) -> str:
        return 'bytes' if self.size is None else f'bytes{self.size}'

    @property
    def is_dynamic(self) -> bool:
        return self.size is None


@dataclass(frozen=True)
class ArrayType(AbiType):
    """``element[length]`` when length is set, ``element[]`` otherwise."""
    element: AbiType
    length: Optional[int] = None

    @property
    def canonical(self) -> str:
        size = '' if self.length is None else str(self.length)
        return f'{self.element.canonical}[{size}]'

    @property
    def is_dynamic(self) -> bool:
        return self.length is None or self.element.is_dynamic

    @property
    def head_size(self) -> int:
        if self.is_dynamic:
            return WORD_SIZE
        return self.length * self.element.head_size


@dataclass(frozen=True)
class TupleType(AbiType):
    components: Tuple[AbiType, ...] = ()

    @property
    def canonical(self) -> str:
        return '(' + ','.join(c.canonical for c in self.components) + ')'

    @property
    def is_dynamic(self) -> bool:
        return any(c.is_dynamic for c in self.components)

    @property
    def head_size(self) -> int:
        if self.is_dynamic:
            return WORD_SIZE
        return sum(c.head_size for c in self.components)


@dataclass(frozen=True)
class ParsedSignature:
    """A function name plus its ordered parameter types."""
    name: str
    types: Tuple[AbiType, ...]

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(t.canonical for t in self.types)})"


def head_length(types) -> int:
    """Minimum number of argument bytes an encoding of ``types`` occupies."""
    return sum(t.head_size for t in types)


# ---------------------------------------------------------------------------
# Text parsing
# ---------------------------------------------------------------------------

def _elementary(token: str, source: str) -> AbiType:
    if token == 'address':
        return AddressType()
    if token == 'bool':
        return BoolType()
    if token == 'string':
        return StringType()
    if token == 'bytes':
        return BytesType()
    if token == 'byte':
        return BytesType(1)

    match = re.fullmatch(r'(uint|int|bytes)(\d*)', token)
    if not match:
        raise ABIParseError(f"Unsupported ABI type '{token}'", source=source)

    kind, digits = match.groups()
    if kind == 'bytes':
        size = int(digits)
        if not 1 <= size <= 32 or digits.startswith('0'):
            raise ABIParseError(f"Invalid fixed bytes width in '{token}'", source=source)
        return BytesType(size)

    bits = int(digits) if digits else 256
    if digits.startswith('0') or not (8 <= bits <= 256 and bits % 8 == 0):
        raise ABIParseError(f"Invalid integer width in '{token}'", source=source)
    return UintType(bits) if kind == 'uint' else IntType(bits)


class _TypeParser:
    """Recursive-descent parser over signature text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def fail(self, reason: str):
        raise ABIParseError(f"{reason} at position {self.pos}", source=self.text)

    def skip_ws(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.skip_ws()
        return self.text[self.pos] if self.pos < len(self.text) else ''

    def expect(self, char: str):
        if self.peek() != char:
            self.fail(f"Expected '{char}'")
        self.pos += 1

    def at_end(self) -> bool:
        return self.peek() == ''

    def identifier(self) -> str:
        self.skip_ws()
        match = _IDENTIFIER_RE.match(self.text, self.pos)
        if not match:
            self.fail("Expected function name")
        self.pos = match.end()
        return match.group(0)

    def type_list(self) -> Tuple[AbiType, ...]:
        """Parse ``(t1,t2,...)`` including the parentheses."""
        self.expect('(')
        types: List[AbiType] = []
        if self.peek() == ')':
            self.pos += 1
            return ()
        while True:
            types.append(self.parse_type())
            char = self.peek()
            if char == ',':
                self.pos += 1
                continue
            if char == ')':
                self.pos += 1
                return tuple(types)
            self.fail("Expected ',' or ')'")

    def parse_type(self) -> AbiType:
        if self.peek() == '(':
            components = self.type_list()
            if not components:
                self.fail("Empty tuple")
            base: AbiType = TupleType(components)
        else:
            match = _ELEMENTARY_RE.match(self.text, self.pos)
            if not match:
                self.fail("Expected type")
            self.pos = match.end()
            base = _elementary(match.group(0), self.text)
        return self.array_suffixes(base)

    def array_suffixes(self, base: AbiType) -> AbiType:
        while self.peek() == '[':
            match = _ARRAY_SUFFIX_RE.match(self.text, self.pos)
            if not match:
                self.fail("Malformed array suffix")
            self.pos = match.end()
            size = match.group(1)
            if size and int(size) == 0:
                self.fail("Zero-length fixed array")
            base = ArrayType(base, int(size) if size else None)
        return base


def parse_type(text: str) -> AbiType:
    """Parse a single type such as ``uint256[]`` or ``(address,bytes)[2]``."""
    parser = _TypeParser(text)
    abi_type = parser.parse_type()
    if not parser.at_end():
        parser.fail("Trailing characters")
    return abi_type


def parse_signature(text: str) -> ParsedSignature:
    """
    Parse a text signature like ``transfer(address,uint256)``.

    Raises:
        ABIParseError: If the text is not a well-formed function signature
    """
    if not isinstance(text, str) or not text.strip():
        raise ABIParseError("Empty signature", source=str(text))
    parser = _TypeParser(text)
    name = parser.identifier()
    types = parser.type_list()
    if not parser.at_end():
        parser.fail("Trailing characters")
    return ParsedSignature(name, types)


# ---------------------------------------------------------------------------
# JSON ABI parsing
# ---------------------------------------------------------------------------

def parse_abi_param(item: Dict[str, Any]) -> AbiType:
    """Parse one ``inputs`` element of a JSON ABI, handling tuple components."""
    type_str = item.get('type')
    if not isinstance(type_str, str):
        raise ABIParseError("ABI parameter without a type", source=repr(item))

    if type_str.startswith('tuple'):
        components = item.get('components') or []
        if not components:
            raise ABIParseError("Tuple parameter without components", source=type_str)
        base: AbiType = TupleType(tuple(parse_abi_param(c) for c in components))
        suffix = type_str[len('tuple'):]
        parser = _TypeParser(suffix)
        abi_type = parser.array_suffixes(base)
        if not parser.at_end():
            parser.fail("Trailing characters")
        return abi_type

    return parse_type(type_str)
