"""
Collision ranking.

Many unrelated signatures share a selector, some of them crafted on purpose
to make a malicious call look like a harmless one. The ranker orders the
candidates gathered for a selector:

1. Drop candidates whose head cannot fit the argument bytes, or whose
   argument bytes are not word aligned.
2. Well-known signatures outrank everything else.
3. Remaining candidates keep the order the directory reported.

A verified ABI entry whose selector matches bypasses 2 and 3.
"""

from typing import Iterable, List, Optional, Sequence, Tuple

from txdecode.abi.types import WORD_SIZE, AbiType, head_length
from txdecode.core.models import CandidateSignature, RankedCandidate, VerifiedAbiEntry
from txdecode.core.selector import Selector
from txdecode.utils.exceptions import NoPlausibleSignatureError
from txdecode.utils.logging import get_logger

logger = get_logger("ranker")

# Widely deployed signatures that collision decoys like to imitate
KNOWN_SIGNATURES = frozenset({
    # ERC-20
    "name()",
    "symbol()",
    "decimals()",
    "totalSupply()",
    "balanceOf(address)",
    "allowance(address,address)",
    "transfer(address,uint256)",
    "approve(address,uint256)",
    "transferFrom(address,address,uint256)",
    "increaseAllowance(address,uint256)",
    "decreaseAllowance(address,uint256)",
    "permit(address,address,uint256,uint256,uint8,bytes32,bytes32)",
    "nonces(address)",
    "DOMAIN_SEPARATOR()",
    # ERC-721
    "ownerOf(uint256)",
    "getApproved(uint256)",
    "isApprovedForAll(address,address)",
    "setApprovalForAll(address,bool)",
    "safeTransferFrom(address,address,uint256)",
    "safeTransferFrom(address,address,uint256,bytes)",
    "tokenURI(uint256)",
    "supportsInterface(bytes4)",
    # ERC-1155
    "balanceOf(address,uint256)",
    "balanceOfBatch(address[],uint256[])",
    "safeTransferFrom(address,address,uint256,uint256,bytes)",
    "safeBatchTransferFrom(address,address,uint256[],uint256[],bytes)",
    # WETH / mint / burn
    "deposit()",
    "withdraw(uint256)",
    "mint(address,uint256)",
    "burn(uint256)",
    "burnFrom(address,uint256)",
    # Ownable
    "owner()",
    "transferOwnership(address)",
    "renounceOwnership()",
    # Multicall
    "multicall(bytes[])",
    "multicall(uint256,bytes[])",
    "aggregate((address,bytes)[])",
    "aggregate3((address,bool,bytes)[])",
})


def structural_fit(types: Sequence[AbiType], argument_length: int) -> Tuple[bool, bool]:
    """
    Check whether ``types`` can describe ``argument_length`` bytes.

    Returns:
        (consistent, exact). ``consistent`` means the length could hold an
        encoding of the types. ``exact`` additionally means the length equals
        the head size of an all-static signature; for signatures with dynamic
        parameters it equals ``consistent`` since only decoding can tell.
    """
    if not types:
        fits = argument_length == 0
        return fits, fits

    required = head_length(types)
    consistent = argument_length >= required and argument_length % WORD_SIZE == 0
    if any(t.is_dynamic for t in types):
        return consistent, consistent
    return consistent, consistent and argument_length == required


class CollisionRanker:
    """Pick the most plausible signature for a selector."""

    def __init__(self, known_signatures: Optional[Iterable[str]] = None):
        self.known_signatures = frozenset(known_signatures) if known_signatures is not None \
            else KNOWN_SIGNATURES

    def is_known(self, signature: str) -> bool:
        return signature in self.known_signatures

    def rank(
        self,
        selector: Selector,
        argument_bytes: bytes,
        candidates: Sequence[CandidateSignature],
        verified: Optional[VerifiedAbiEntry] = None
    ) -> List[RankedCandidate]:
        """
        Order structurally consistent candidates, best first.

        Args:
            selector: Selector being resolved
            argument_bytes: Calldata after the selector
            candidates: Text signatures in directory order
            verified: Verified ABI entry for the called contract, if known

        Raises:
            NoPlausibleSignatureError: If nothing survives the structural filter
        """
        length = len(argument_bytes)

        if verified is not None:
            if verified.selector != selector:
                logger.debug(f"Verified entry {verified.signature} does not match {selector}")
            else:
                consistent, exact = structural_fit(verified.types, length)
                if consistent:
                    return [RankedCandidate(verified, score=float('inf'),
                                            structural_fit=exact, priority=True)]
                logger.debug(f"Verified entry {verified.signature} does not fit {length} bytes")

        priority: List[RankedCandidate] = []
        others: List[RankedCandidate] = []
        seen = set()
        for index, candidate in enumerate(candidates):
            if candidate.signature in seen:
                continue
            seen.add(candidate.signature)

            consistent, exact = structural_fit(candidate.types, length)
            if not consistent:
                logger.debug(f"Dropping {candidate.signature}: does not fit {length} argument bytes")
                continue

            # Earlier directory position scores higher
            order_score = 1.0 / (1 + index)
            if self.is_known(candidate.signature):
                priority.append(RankedCandidate(candidate, score=1.0 + order_score,
                                                structural_fit=exact, priority=True))
            else:
                others.append(RankedCandidate(candidate, score=order_score,
                                              structural_fit=exact))

        ranked = priority + others
        if not ranked:
            reason = f"none of {len(candidates)} candidates fit {length} argument bytes" \
                if candidates else "no candidate signatures"
            raise NoPlausibleSignatureError(selector.hex, length, reason=reason)
        return ranked

    def choose(
        self,
        selector: Selector,
        argument_bytes: bytes,
        candidates: Sequence[CandidateSignature],
        verified: Optional[VerifiedAbiEntry] = None
    ) -> RankedCandidate:
        """Return the single best candidate."""
        return self.rank(selector, argument_bytes, candidates, verified)[0]
