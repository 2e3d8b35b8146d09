"""
Signature sources: the resolution cache, public signature directories and
the verified ABI explorer client.
"""

from .cache import (
    SignatureCache,
    MemoryCache,
    FileCache,
    DEFAULT_CACHE_DIR,
    selector_key,
    verified_abi_key,
)
from .directory import (
    DirectoryClient,
    FourByteDirectoryClient,
    OpenChainDirectoryClient,
    get_directory_client,
)
from .etherscan import VerifiedAbiClient, find_function

__all__ = [
    'SignatureCache',
    'MemoryCache',
    'FileCache',
    'DEFAULT_CACHE_DIR',
    'selector_key',
    'verified_abi_key',
    'DirectoryClient',
    'FourByteDirectoryClient',
    'OpenChainDirectoryClient',
    'get_directory_client',
    'VerifiedAbiClient',
    'find_function',
]
