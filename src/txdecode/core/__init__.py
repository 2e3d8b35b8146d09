"""
Core module for txdecode.

This module contains the signature resolution engine:
- extract_selector: splits calldata into selector and arguments
- CollisionRanker: orders colliding candidate signatures
- SignatureResolver: cache -> directory -> verified ABI pipeline
"""

from .selector import Selector, extract_selector, parse_hex, selector_for
from .models import (
    CandidateSignature,
    VerifiedAbiEntry,
    RankedCandidate,
    DecodedParam,
    DecodedCall,
    Resolution,
)
from .ranker import CollisionRanker, KNOWN_SIGNATURES, structural_fit
from .resolver import SignatureResolver, ResolverState

__all__ = [
    'Selector',
    'extract_selector',
    'parse_hex',
    'selector_for',
    'CandidateSignature',
    'VerifiedAbiEntry',
    'RankedCandidate',
    'DecodedParam',
    'DecodedCall',
    'Resolution',
    'CollisionRanker',
    'KNOWN_SIGNATURES',
    'structural_fit',
    'SignatureResolver',
    'ResolverState',
]
