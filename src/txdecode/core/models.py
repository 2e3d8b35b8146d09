"""
Data model for signature resolution.

CandidateSignature and VerifiedAbiEntry are the two shapes a resolved
function can take; RankedCandidate wraps either one for a single resolution.
DecodedCall is the final output and Resolution the resolver's terminal state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from txdecode.abi.types import AbiType, parse_abi_param, parse_signature
from txdecode.core.selector import Selector, selector_for
from txdecode.utils.exceptions import ABIParseError, TxDecodeError


class CandidateSignature:
    """
    A text signature proposed for a selector.

    Equality and hashing use the normalized signature string only, so the
    same function reported by two sources collapses to one candidate.
    """

    def __init__(self, name: str, types: Tuple[AbiType, ...], source: str = "directory",
                 position: int = 0):
        self.name = name
        self.types = tuple(types)
        self.source = source
        self.position = position  # index in the source's own ordering

    @classmethod
    def from_text(cls, text: str, source: str = "directory", position: int = 0) -> 'CandidateSignature':
        """Parse untrusted signature text; raises ABIParseError."""
        parsed = parse_signature(text)
        return cls(parsed.name, parsed.types, source=source, position=position)

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(t.canonical for t in self.types)})"

    @property
    def selector(self) -> Selector:
        return selector_for(self.signature)

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(f"param{i}" for i in range(len(self.types)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, CandidateSignature):
            return NotImplemented
        return self.signature == other.signature

    def __hash__(self) -> int:
        return hash(self.signature)

    def __repr__(self) -> str:
        return f"CandidateSignature({self.signature!r}, source={self.source!r})"


@dataclass(frozen=True)
class VerifiedAbiEntry:
    """A function entry taken from a contract's verified ABI."""
    name: str
    types: Tuple[AbiType, ...]
    input_names: Tuple[str, ...]
    chain_id: Optional[int] = None
    address: Optional[str] = None
    source: str = "verified"

    @classmethod
    def from_abi_item(cls, item: Dict[str, Any], chain_id: Optional[int] = None,
                      address: Optional[str] = None) -> 'VerifiedAbiEntry':
        if item.get('type', 'function') != 'function' or not item.get('name'):
            raise ABIParseError("ABI item is not a named function", source=repr(item)[:80])
        inputs = item.get('inputs') or []
        return cls(
            name=item['name'],
            types=tuple(parse_abi_param(inp) for inp in inputs),
            input_names=tuple(inp.get('name') or '' for inp in inputs),
            chain_id=chain_id,
            address=address,
        )

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(t.canonical for t in self.types)})"

    @property
    def selector(self) -> Selector:
        return selector_for(self.signature)

    @property
    def param_names(self) -> Tuple[str, ...]:
        # Unnamed ABI inputs fall back to positional names
        return tuple(name or f"param{i}" for i, name in enumerate(self.input_names))


ResolvedEntry = Union[CandidateSignature, VerifiedAbiEntry]


@dataclass
class RankedCandidate:
    """A candidate annotated for one resolution; never persisted."""
    entry: ResolvedEntry
    score: float
    structural_fit: bool
    priority: bool = False

    @property
    def signature(self) -> str:
        return self.entry.signature

    @property
    def is_verified(self) -> bool:
        return isinstance(self.entry, VerifiedAbiEntry)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return '0x' + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass(frozen=True)
class DecodedParam:
    name: str
    type: str
    value: Any


@dataclass(frozen=True)
class DecodedCall:
    """A function call recovered from calldata."""
    name: str
    signature: str
    selector: str
    params: Tuple[DecodedParam, ...]
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "function": self.name,
            "signature": self.signature,
            "selector": self.selector,
            "source": self.source,
            "params": [
                {"name": p.name, "type": p.type, "value": _jsonable(p.value)}
                for p in self.params
            ],
        }


@dataclass
class Resolution:
    """Terminal state of one resolution: a DecodedCall or the reason there is none."""
    selector: Selector
    argument_length: int
    call: Optional[DecodedCall] = None
    error: Optional[TxDecodeError] = None
    from_cache: bool = False
    attempts: List[str] = field(default_factory=list)
    source_errors: List[TxDecodeError] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.call is not None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "resolved": self.resolved,
            "selector": self.selector.hex,
            "argument_length": self.argument_length,
            "from_cache": self.from_cache,
        }
        if self.call is not None:
            result["call"] = self.call.to_dict()
        if self.error is not None:
            result["error"] = self.error.to_dict()
        if self.source_errors:
            result["source_errors"] = [e.to_dict() for e in self.source_errors]
        return result
