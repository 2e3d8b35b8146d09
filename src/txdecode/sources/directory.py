"""
Public signature directories.

A directory maps a selector to every text signature anyone has submitted
for it. Answers are untrusted: each signature is parsed into ABI types and
re-hashed, and entries whose hash does not match the selector are dropped.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

import requests

from txdecode.core.models import CandidateSignature
from txdecode.core.selector import Selector
from txdecode.sources.http import build_session, http_get, json_body
from txdecode.utils.exceptions import ABIParseError, LookupUnavailableError
from txdecode.utils.logging import get_logger

logger = get_logger("sources.directory")

DEFAULT_TIMEOUT = 5.0


class DirectoryClient(ABC):
    """Look up candidate signatures for a selector."""

    name = "directory"

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or build_session()

    @abstractmethod
    def fetch_signatures(self, selector: Selector) -> List[str]:
        """
        Raw text signatures for ``selector`` in the directory's own order.

        Returns an empty list when the directory knows nothing about the
        selector. Raises LookupUnavailableError on transport failures.
        """

    def lookup(self, selector: Selector) -> List[CandidateSignature]:
        """Parsed, hash-checked candidates for ``selector``."""
        texts = self.fetch_signatures(selector)
        candidates = self._to_candidates(selector, texts)
        logger.debug(
            f"{self.name}: {len(candidates)} of {len(texts)} signatures usable for {selector}"
        )
        return candidates

    def _to_candidates(self, selector: Selector, texts: Iterable[str]) -> List[CandidateSignature]:
        candidates: List[CandidateSignature] = []
        seen = set()
        for text in texts:
            try:
                candidate = CandidateSignature.from_text(text, source=self.name,
                                                         position=len(candidates))
            except ABIParseError as e:
                logger.debug(f"{self.name}: skipping unparsable signature {text!r}: {e.message}")
                continue
            if candidate.signature in seen:
                continue
            if candidate.selector != selector:
                logger.debug(f"{self.name}: {candidate.signature} does not hash to {selector}")
                continue
            seen.add(candidate.signature)
            candidates.append(candidate)
        return candidates


class FourByteDirectoryClient(DirectoryClient):
    """4byte.directory, oldest submissions first."""

    name = "4byte"
    API_URL = "https://www.4byte.directory/api/v1/signatures/"

    def fetch_signatures(self, selector: Selector) -> List[str]:
        response = http_get(
            self.session,
            self.API_URL,
            params={"hex_signature": selector.hex, "ordering": "created_at"},
            timeout=self.timeout,
            source=self.name,
        )
        if response.status_code == 404:
            return []
        if response.status_code != 200:
            raise LookupUnavailableError(
                f"4byte.directory answered HTTP {response.status_code}",
                source=self.name, url=self.API_URL
            )

        data = json_body(response, self.name, self.API_URL)
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise LookupUnavailableError(
                "4byte.directory response has no results list", source=self.name, url=self.API_URL
            )

        # Lower id = older entry
        entries = [r for r in results if isinstance(r, dict) and isinstance(r.get("text_signature"), str)]
        entries.sort(key=lambda r: r.get("id") if isinstance(r.get("id"), int) else 0)
        return [r["text_signature"] for r in entries]


class OpenChainDirectoryClient(DirectoryClient):
    """OpenChain signature database with its junk filter enabled."""

    name = "openchain"
    API_URL = "https://api.openchain.xyz/signature-database/v1/lookup"

    def fetch_signatures(self, selector: Selector) -> List[str]:
        response = http_get(
            self.session,
            self.API_URL,
            params={"function": selector.hex, "filter": "true"},
            timeout=self.timeout,
            source=self.name,
        )
        if response.status_code != 200:
            raise LookupUnavailableError(
                f"OpenChain answered HTTP {response.status_code}",
                source=self.name, url=self.API_URL
            )

        data = json_body(response, self.name, self.API_URL)
        if not isinstance(data, dict) or not data.get("ok"):
            raise LookupUnavailableError(
                f"OpenChain lookup failed: {data.get('error') if isinstance(data, dict) else data}",
                source=self.name, url=self.API_URL
            )

        result = data.get("result")
        functions = result.get("function") if isinstance(result, dict) else None
        if not isinstance(functions, dict):
            raise LookupUnavailableError(
                "OpenChain response has no function map",
                source=self.name, url=self.API_URL
            )
        entries = functions.get(selector.hex) or []
        if not isinstance(entries, list):
            entries = []
        return [
            e["name"] for e in entries
            if isinstance(e, dict) and isinstance(e.get("name"), str) and not e.get("filtered")
        ]


DIRECTORIES = {
    FourByteDirectoryClient.name: FourByteDirectoryClient,
    OpenChainDirectoryClient.name: OpenChainDirectoryClient,
}


def get_directory_client(
    name: str = "4byte",
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None
) -> DirectoryClient:
    """Instantiate a directory client by name ("4byte" or "openchain")."""
    try:
        client_cls = DIRECTORIES[name]
    except KeyError:
        raise ValueError(f"Unknown signature directory '{name}', expected one of {sorted(DIRECTORIES)}")
    return client_cls(timeout=timeout, session=session)
