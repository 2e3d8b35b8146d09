"""
txdecode - EVM calldata signature resolution
"""

__version__ = "0.1.0"

# Core components
from .core import (
    Selector,
    extract_selector,
    selector_for,
    CandidateSignature,
    VerifiedAbiEntry,
    RankedCandidate,
    DecodedParam,
    DecodedCall,
    Resolution,
    CollisionRanker,
    SignatureResolver,
    ResolverState,
)

# ABI
from .abi import AbiDecoder, parse_signature, parse_type

# Sources
from .sources import (
    MemoryCache,
    FileCache,
    FourByteDirectoryClient,
    OpenChainDirectoryClient,
    VerifiedAbiClient,
    get_directory_client,
)

from .config import DecoderConfig, build_resolver

from .utils.exceptions import (
    TxDecodeError,
    MalformedInputError,
    LookupUnavailableError,
    AuthRequiredError,
    RateLimitedError,
    NoPlausibleSignatureError,
    DecodeError,
)

# Main entry point
from .cli.main import main

__all__ = [
    '__version__',
    # Core
    'Selector',
    'extract_selector',
    'selector_for',
    'CandidateSignature',
    'VerifiedAbiEntry',
    'RankedCandidate',
    'DecodedParam',
    'DecodedCall',
    'Resolution',
    'CollisionRanker',
    'SignatureResolver',
    'ResolverState',
    # ABI
    'AbiDecoder',
    'parse_signature',
    'parse_type',
    # Sources
    'MemoryCache',
    'FileCache',
    'FourByteDirectoryClient',
    'OpenChainDirectoryClient',
    'VerifiedAbiClient',
    'get_directory_client',
    # Config
    'DecoderConfig',
    'build_resolver',
    # Errors
    'TxDecodeError',
    'MalformedInputError',
    'LookupUnavailableError',
    'AuthRequiredError',
    'RateLimitedError',
    'NoPlausibleSignatureError',
    'DecodeError',
    # CLI
    'main',
]
