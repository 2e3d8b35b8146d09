"""
Decoder configuration.

Settings come from the environment first and are then overridden by
command-line flags:

    ETHERSCAN_API_KEY    explorer API key for verified ABI lookups
    TXDECODE_CHAIN_ID    chain of the called contract (default 1)
    ETH_RPC_URL          JSON-RPC endpoint used by ``txdecode tx``
    TXDECODE_CACHE_DIR   resolution cache directory
    TXDECODE_NO_CACHE    any non-empty value disables the file cache
    TXDECODE_DIRECTORY   "4byte" (default) or "openchain"
    TXDECODE_TIMEOUT     per-request timeout in seconds for every source
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping, Optional

from txdecode.core.resolver import DEFAULT_CHAIN_ID, SignatureResolver
from txdecode.sources.cache import DEFAULT_CACHE_DIR, FileCache, MemoryCache
from txdecode.sources.directory import get_directory_client
from txdecode.sources.etherscan import VerifiedAbiClient
from txdecode.sources.http import build_session
from txdecode.utils.logging import get_logger

logger = get_logger("config")

DEFAULT_RPC_URL = "http://localhost:8545"
DEFAULT_DIRECTORY = "4byte"


@dataclass(frozen=True)
class DecoderConfig:
    """Everything needed to wire a SignatureResolver."""
    etherscan_api_key: Optional[str] = None
    chain_id: int = DEFAULT_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    cache_dir: Path = DEFAULT_CACHE_DIR
    use_cache: bool = True
    directory: str = DEFAULT_DIRECTORY
    timeout: Optional[float] = None  # None keeps each client's own default

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'DecoderConfig':
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ValueError: If a numeric variable does not parse
        """
        env = os.environ if environ is None else environ

        chain_id = env.get("TXDECODE_CHAIN_ID")
        timeout = env.get("TXDECODE_TIMEOUT")
        cache_dir = env.get("TXDECODE_CACHE_DIR")

        try:
            return cls(
                etherscan_api_key=env.get("ETHERSCAN_API_KEY") or None,
                chain_id=int(chain_id) if chain_id else DEFAULT_CHAIN_ID,
                rpc_url=env.get("ETH_RPC_URL") or DEFAULT_RPC_URL,
                cache_dir=Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR,
                use_cache=not env.get("TXDECODE_NO_CACHE"),
                directory=env.get("TXDECODE_DIRECTORY") or DEFAULT_DIRECTORY,
                timeout=float(timeout) if timeout else None,
            )
        except ValueError as e:
            raise ValueError(f"Invalid txdecode environment setting: {e}") from e

    def with_overrides(self, **overrides) -> 'DecoderConfig':
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        if isinstance(changes.get("cache_dir"), str):
            changes["cache_dir"] = Path(changes["cache_dir"]).expanduser()
        return replace(self, **changes)


def build_resolver(config: DecoderConfig) -> SignatureResolver:
    """
    Wire cache, directory and verified ABI clients from ``config``.

    All clients share one HTTP session. Without the file cache the resolver
    still gets a MemoryCache so repeated selectors in one run are free.
    """
    session = build_session()
    timeout_kwargs = {"timeout": config.timeout} if config.timeout is not None else {}

    if config.use_cache:
        cache = FileCache(config.cache_dir)
    else:
        cache = MemoryCache()

    directory = get_directory_client(config.directory, session=session, **timeout_kwargs)
    verified = VerifiedAbiClient(api_key=config.etherscan_api_key, session=session, **timeout_kwargs)

    logger.debug(
        f"Resolver: directory={config.directory}, chain={config.chain_id}, "
        f"cache={'off' if not config.use_cache else config.cache_dir}, "
        f"etherscan key={'set' if config.etherscan_api_key else 'missing'}"
    )
    return SignatureResolver(
        cache,
        directory=directory,
        verified=verified,
        default_chain_id=config.chain_id,
    )
