"""
Resolution cache.

The resolver only relies on the ``get``/``put`` contract of SignatureCache.
Keys are either a selector (directory-sourced signatures) or a
(chain id, contract address) pair (verified ABIs):

    selector_key(selector)             -> "0xa9059cbb"
    verified_abi_key(1, "0xAbC...")    -> "abi-1-0xabc..."

Values are JSON-compatible dicts. Entries are never invalidated here.
"""

import copy
import json
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from txdecode.utils.logging import get_logger

logger = get_logger("cache")

DEFAULT_CACHE_DIR = Path.home() / ".txdecode" / "cache"

_SAFE_KEY_RE = re.compile(r'^[A-Za-z0-9_.-]+$')


def selector_key(selector) -> str:
    """Cache key for a directory-sourced signature."""
    text = selector if isinstance(selector, str) else selector.hex
    return text.lower()


def verified_abi_key(chain_id: int, address: str) -> str:
    """Cache key for a contract's verified ABI on one chain."""
    return f"abi-{int(chain_id)}-{address.lower()}"


class SignatureCache(ABC):
    """Key/value store contract used by the resolver."""

    @abstractmethod
    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the stored value or None."""

    @abstractmethod
    def put(self, key: str, value: Dict[str, Any]) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""


class MemoryCache(SignatureCache):
    """In-process cache, mainly for tests and batch runs."""

    def __init__(self):
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            value = self._entries.get(key)
            return copy.deepcopy(value) if value is not None else None

    def put(self, key: str, value: Dict[str, Any]) -> None:
        with self._lock:
            self._entries[key] = copy.deepcopy(value)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class FileCache(SignatureCache):
    """
    One JSON document per key under a cache directory.

    Writes go to a temporary file in the same directory that is then
    renamed over the target, so readers see either the old entry or the
    new one and an interrupted write leaves nothing behind.
    """

    def __init__(self, cache_dir: Optional[Union[str, Path]] = None):
        self.cache_dir = Path(cache_dir) if cache_dir else DEFAULT_CACHE_DIR
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def path_for(self, key: str) -> Path:
        if not _SAFE_KEY_RE.match(key):
            raise ValueError(f"Unsafe cache key: {key!r}")
        return self.cache_dir / f"{key}.json"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self.path_for(key)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                value = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            logger.debug(f"Ignoring unreadable cache entry {path}: {e}")
            return None
        if not isinstance(value, dict):
            logger.debug(f"Ignoring malformed cache entry {path}")
            return None
        return value

    def put(self, key: str, value: Dict[str, Any]) -> None:
        path = self.path_for(key)
        payload = json.dumps(value, indent=2, sort_keys=True)
        with self._lock:
            fd, tmp_name = tempfile.mkstemp(dir=str(self.cache_dir), prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        logger.debug(f"Cached {key} at {path}")
