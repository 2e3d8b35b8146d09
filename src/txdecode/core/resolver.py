"""
Signature resolution.

SignatureResolver turns calldata into a DecodedCall by walking a small
state machine::

    CACHE_LOOKUP       fitting hit -> DECODE, miss -> DIRECTORY_LOOKUP
    DIRECTORY_LOOKUP   candidates -> RANK, empty/unavailable -> VERIFIED_FALLBACK
    RANK               ranked -> DECODE, nothing fits -> VERIFIED_FALLBACK
    DECODE             ok -> CACHE_AND_RETURN, DecodeError -> next ranked candidate,
                       queue exhausted -> next unused source or UNRESOLVED
    VERIFIED_FALLBACK  entry found -> DECODE, otherwise -> UNRESOLVED
    CACHE_AND_RETURN   -> RESOLVED

Source failures are absorbed and recorded on the Resolution; only a
malformed calldata buffer raises.
"""

from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Sequence, Union

from txdecode.abi.decoder import AbiDecoder
from txdecode.core.models import (
    CandidateSignature,
    DecodedCall,
    DecodedParam,
    RankedCandidate,
    Resolution,
)
from txdecode.core.ranker import CollisionRanker
from txdecode.core.selector import Selector, extract_selector
from txdecode.sources.cache import SignatureCache, selector_key, verified_abi_key
from txdecode.sources.directory import DirectoryClient
from txdecode.sources.etherscan import VerifiedAbiClient, find_function
from txdecode.utils.exceptions import (
    ABIParseError,
    DecodeError,
    LookupUnavailableError,
    NoPlausibleSignatureError,
    VerifiedAbiError,
)
from txdecode.utils.logging import get_logger

logger = get_logger("resolver")

DEFAULT_CHAIN_ID = 1


class ResolverState(Enum):
    CACHE_LOOKUP = "cache_lookup"
    DIRECTORY_LOOKUP = "directory_lookup"
    RANK = "rank"
    DECODE = "decode"
    VERIFIED_FALLBACK = "verified_fallback"
    CACHE_AND_RETURN = "cache_and_return"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


TERMINAL_STATES = frozenset({ResolverState.RESOLVED, ResolverState.UNRESOLVED})


@dataclass
class _Context:
    """Mutable state of one resolution."""
    selector: Selector
    arguments: bytes
    contract_address: Optional[str]
    chain_id: int
    result: Resolution
    candidates: List[CandidateSignature] = field(default_factory=list)
    queue: Deque[RankedCandidate] = field(default_factory=deque)
    stage: str = ""
    verified_cache_done: bool = False
    selector_cache_done: bool = False
    directory_done: bool = False
    verified_done: bool = False
    verified_items: Optional[List[Dict[str, Any]]] = None
    winner: Optional[RankedCandidate] = None
    no_fit: Optional[NoPlausibleSignatureError] = None


class SignatureResolver:
    """
    Resolve calldata through cache, signature directory and verified ABIs.

    The cache is injected so tests and batch runs can share or isolate it;
    the directory and verified ABI clients are optional.
    """

    def __init__(
        self,
        cache: SignatureCache,
        directory: Optional[DirectoryClient] = None,
        verified: Optional[VerifiedAbiClient] = None,
        ranker: Optional[CollisionRanker] = None,
        decoder: Optional[AbiDecoder] = None,
        default_chain_id: int = DEFAULT_CHAIN_ID
    ):
        self.cache = cache
        self.directory = directory
        self.verified = verified
        self.ranker = ranker or CollisionRanker()
        self.decoder = decoder or AbiDecoder()
        self.default_chain_id = default_chain_id
        self._handlers = {
            ResolverState.CACHE_LOOKUP: self._cache_lookup,
            ResolverState.DIRECTORY_LOOKUP: self._directory_lookup,
            ResolverState.RANK: self._rank,
            ResolverState.DECODE: self._decode,
            ResolverState.VERIFIED_FALLBACK: self._verified_fallback,
            ResolverState.CACHE_AND_RETURN: self._cache_and_return,
        }

    # ------------------------------------------------------------------ #
    #  Public API
    # ------------------------------------------------------------------ #

    def resolve(
        self,
        calldata: Union[bytes, str],
        contract_address: Optional[str] = None,
        chain_id: Optional[int] = None
    ) -> Resolution:
        """
        Resolve one calldata buffer.

        Args:
            calldata: Raw bytes or hex string, selector included
            contract_address: Called contract, enables verified ABI lookups
            chain_id: Chain of the contract (defaults to ``default_chain_id``)

        Returns:
            A Resolution carrying either the DecodedCall or the reason it failed

        Raises:
            MalformedInputError: If calldata is shorter than four bytes
        """
        selector, arguments = extract_selector(calldata)
        ctx = _Context(
            selector=selector,
            arguments=arguments,
            contract_address=contract_address,
            chain_id=chain_id if chain_id is not None else self.default_chain_id,
            result=Resolution(selector=selector, argument_length=len(arguments)),
        )

        state = ResolverState.CACHE_LOOKUP
        while state not in TERMINAL_STATES:
            logger.trace(f"{selector}: {state.value}")
            state = self._handlers[state](ctx)

        logger.trace(f"{selector}: {state.value}")
        if state is ResolverState.UNRESOLVED:
            self._report_unresolved(ctx)
        return ctx.result

    def resolve_many(
        self,
        calldatas: Sequence[Union[bytes, str]],
        contract_address: Optional[str] = None,
        chain_id: Optional[int] = None,
        max_workers: int = 4
    ) -> List[Resolution]:
        """Resolve several buffers concurrently, preserving input order."""
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(
                lambda data: self.resolve(data, contract_address, chain_id),
                calldatas
            ))

    # ------------------------------------------------------------------ #
    #  State handlers
    # ------------------------------------------------------------------ #

    def _cache_lookup(self, ctx: _Context) -> ResolverState:
        if ctx.contract_address and not ctx.verified_cache_done:
            ctx.verified_cache_done = True
            value = self.cache.get(verified_abi_key(ctx.chain_id, ctx.contract_address))
            if value and isinstance(value.get("functions"), list):
                entry = find_function(value["functions"], ctx.selector,
                                      ctx.chain_id, ctx.contract_address)
                if entry is not None:
                    try:
                        ctx.queue = deque(self.ranker.rank(ctx.selector, ctx.arguments, [], verified=entry))
                    except NoPlausibleSignatureError:
                        logger.debug(f"Cached verified entry {entry.signature} does not fit the calldata")
                    else:
                        logger.debug(f"Verified ABI cache hit for {ctx.selector}")
                        ctx.stage = "cache"
                        return ResolverState.DECODE

        ctx.selector_cache_done = True
        value = self.cache.get(selector_key(ctx.selector))
        if value and isinstance(value.get("signature"), str):
            try:
                candidate = CandidateSignature.from_text(value["signature"],
                                                         source=value.get("source") or "cache")
            except ABIParseError as e:
                logger.debug(f"Ignoring unparsable cache entry for {ctx.selector}: {e.message}")
                return ResolverState.DIRECTORY_LOOKUP
            # Cached signatures pass the same structural filter as directory answers
            try:
                ctx.queue = deque(self.ranker.rank(ctx.selector, ctx.arguments, [candidate]))
            except NoPlausibleSignatureError:
                logger.debug(f"Cached {candidate.signature} does not fit the calldata of {ctx.selector}")
                return ResolverState.DIRECTORY_LOOKUP
            ctx.stage = "cache"
            logger.debug(f"Cache hit for {ctx.selector}: {candidate.signature}")
            return ResolverState.DECODE

        return ResolverState.DIRECTORY_LOOKUP

    def _directory_lookup(self, ctx: _Context) -> ResolverState:
        ctx.directory_done = True
        if self.directory is None:
            return ResolverState.VERIFIED_FALLBACK
        try:
            ctx.candidates = self.directory.lookup(ctx.selector)
        except LookupUnavailableError as e:
            logger.debug(f"Directory lookup for {ctx.selector} failed: {e.message}")
            ctx.result.source_errors.append(e)
            ctx.candidates = []
        if not ctx.candidates:
            return ResolverState.VERIFIED_FALLBACK
        return ResolverState.RANK

    def _rank(self, ctx: _Context) -> ResolverState:
        try:
            ranked = self.ranker.rank(ctx.selector, ctx.arguments, ctx.candidates)
        except NoPlausibleSignatureError as e:
            ctx.no_fit = e
            return ResolverState.VERIFIED_FALLBACK
        ctx.queue = deque(ranked)
        ctx.stage = "directory"
        return ResolverState.DECODE

    def _decode(self, ctx: _Context) -> ResolverState:
        if not ctx.queue:
            return self._next_source(ctx)

        ranked = ctx.queue.popleft()
        entry = ranked.entry
        ctx.result.attempts.append(entry.signature)
        try:
            values = self.decoder.decode(entry.types, ctx.arguments, entry.signature)
        except DecodeError as e:
            logger.debug(f"{entry.signature} rejected for {ctx.selector}: {e.message}")
            return ResolverState.DECODE

        ctx.winner = ranked
        ctx.result.from_cache = ctx.stage == "cache"
        ctx.result.call = DecodedCall(
            name=entry.name,
            signature=entry.signature,
            selector=ctx.selector.hex,
            params=tuple(
                DecodedParam(name, abi_type.canonical, value)
                for name, abi_type, value in zip(entry.param_names, entry.types, values)
            ),
            source=entry.source,
        )
        return ResolverState.CACHE_AND_RETURN

    def _verified_fallback(self, ctx: _Context) -> ResolverState:
        ctx.verified_done = True
        if not ctx.contract_address or self.verified is None:
            return self._next_source(ctx)

        try:
            items = self.verified.fetch_abi(ctx.chain_id, ctx.contract_address)
        except VerifiedAbiError as e:
            logger.warning(f"Verified ABI lookup for {ctx.contract_address}: {e.message}")
            ctx.result.source_errors.append(e)
            return self._next_source(ctx)
        except LookupUnavailableError as e:
            logger.debug(f"Verified ABI lookup for {ctx.contract_address} failed: {e.message}")
            ctx.result.source_errors.append(e)
            return self._next_source(ctx)

        if not items:
            return self._next_source(ctx)

        entry = find_function(items, ctx.selector, ctx.chain_id, ctx.contract_address)
        if entry is None:
            logger.debug(f"Verified ABI of {ctx.contract_address} has no function {ctx.selector}")
            return self._next_source(ctx)

        try:
            ctx.queue = deque(self.ranker.rank(ctx.selector, ctx.arguments, [], verified=entry))
        except NoPlausibleSignatureError as e:
            ctx.no_fit = e
            return self._next_source(ctx)
        ctx.verified_items = items
        ctx.stage = "verified"
        return ResolverState.DECODE

    def _cache_and_return(self, ctx: _Context) -> ResolverState:
        winner = ctx.winner
        if ctx.stage != "cache":
            try:
                if winner.is_verified:
                    self.cache.put(verified_abi_key(ctx.chain_id, ctx.contract_address),
                                   {"functions": ctx.verified_items})
                else:
                    self.cache.put(selector_key(ctx.selector),
                                   {"signature": winner.signature, "source": winner.entry.source})
            except (OSError, ValueError) as e:
                logger.warning(f"Could not cache {winner.signature}: {e}")
        return ResolverState.RESOLVED

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def _report_unresolved(self, ctx: _Context) -> None:
        """Pick the most actionable reason for an unresolved call."""
        actionable = [e for e in ctx.result.source_errors if isinstance(e, VerifiedAbiError)]
        if actionable:
            ctx.result.error = actionable[0]
            return
        if ctx.no_fit is not None and not ctx.result.attempts:
            ctx.result.error = ctx.no_fit
            return

        if ctx.result.attempts:
            reason = f"all {len(ctx.result.attempts)} candidate signatures failed to decode"
        elif ctx.result.source_errors:
            reason = "signature sources unavailable"
        else:
            reason = "no candidate signatures"
        ctx.result.error = NoPlausibleSignatureError(ctx.selector.hex, len(ctx.arguments), reason=reason)

    def _next_source(self, ctx: _Context) -> ResolverState:
        if not ctx.selector_cache_done:
            return ResolverState.CACHE_LOOKUP
        if not ctx.directory_done:
            return ResolverState.DIRECTORY_LOOKUP
        if not ctx.verified_done:
            return ResolverState.VERIFIED_FALLBACK
        return ResolverState.UNRESOLVED
