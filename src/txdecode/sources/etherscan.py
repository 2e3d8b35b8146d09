"""
Verified contract ABIs from Etherscan's multichain (v2) API.
"""

import json
from typing import Any, Dict, List, Optional

import requests

from txdecode.core.models import VerifiedAbiEntry
from txdecode.core.selector import Selector
from txdecode.sources.http import build_session, http_get, json_body
from txdecode.utils.exceptions import (
    ABIParseError,
    AuthRequiredError,
    LookupUnavailableError,
    RateLimitedError,
)
from txdecode.utils.logging import get_logger

logger = get_logger("sources.etherscan")

ETHERSCAN_V2_URL = "https://api.etherscan.io/v2/api"
DEFAULT_TIMEOUT = 10.0


class VerifiedAbiClient:
    """
    Fetch a contract's verified ABI for one chain.

    ``fetch_abi`` returns the contract's function entries, or None when the
    contract is not verified. Missing or rejected keys raise
    AuthRequiredError, exhausted quota raises RateLimitedError, everything
    else that goes wrong raises LookupUnavailableError.
    """

    name = "etherscan"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = ETHERSCAN_V2_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or build_session()

    def fetch_abi(self, chain_id: int, address: str) -> Optional[List[Dict[str, Any]]]:
        if not self.api_key:
            raise AuthRequiredError(
                "An Etherscan API key is required to fetch verified ABIs "
                "(set ETHERSCAN_API_KEY or pass --etherscan-key)",
                source=self.name, chain_id=chain_id
            )

        logger.debug(f"Fetching verified ABI for {address} on chain {chain_id}")
        response = http_get(
            self.session,
            self.base_url,
            params={
                "chainid": chain_id,
                "module": "contract",
                "action": "getabi",
                "address": address,
                "apikey": self.api_key,
            },
            timeout=self.timeout,
            source=self.name,
        )
        if response.status_code == 429:
            raise RateLimitedError("Etherscan rate limit reached", source=self.name, chain_id=chain_id)
        if response.status_code != 200:
            raise LookupUnavailableError(
                f"Etherscan answered HTTP {response.status_code}", source=self.name, url=self.base_url
            )

        data = json_body(response, self.name, self.base_url)
        if not isinstance(data, dict):
            raise LookupUnavailableError("Unexpected Etherscan response", source=self.name, url=self.base_url)

        result = data.get("result")
        if str(data.get("status")) == "1":
            return self._functions(result)

        text = f"{data.get('message', '')} {result}".lower()
        if "rate limit" in text:
            raise RateLimitedError(f"Etherscan: {result}", source=self.name, chain_id=chain_id)
        if "api key" in text or "apikey" in text:
            raise AuthRequiredError(f"Etherscan: {result}", source=self.name, chain_id=chain_id)
        if "not verified" in text:
            logger.debug(f"{address} is not verified on chain {chain_id}")
            return None
        raise LookupUnavailableError(f"Etherscan: {result}", source=self.name, url=self.base_url)

    def _functions(self, result: Any) -> List[Dict[str, Any]]:
        if isinstance(result, str):
            try:
                result = json.loads(result)
            except ValueError as e:
                raise LookupUnavailableError(
                    "Etherscan returned an unparsable ABI", source=self.name, url=self.base_url
                ) from e
        if not isinstance(result, list):
            raise LookupUnavailableError("Etherscan ABI is not a list", source=self.name, url=self.base_url)
        return [item for item in result if isinstance(item, dict) and item.get("type") == "function"]


def find_function(
    abi_items: List[Dict[str, Any]],
    selector: Selector,
    chain_id: Optional[int] = None,
    address: Optional[str] = None
) -> Optional[VerifiedAbiEntry]:
    """The ABI entry whose signature hashes to ``selector``, if any."""
    for item in abi_items:
        try:
            entry = VerifiedAbiEntry.from_abi_item(item, chain_id=chain_id, address=address)
        except ABIParseError as e:
            logger.debug(f"Skipping ABI item {item.get('name')}: {e.message}")
            continue
        if entry.selector == selector:
            return entry
    return None
