"""
Shared fixtures for the txdecode test suite.

No test touches the network: directory and explorer clients are replaced by
the in-memory stand-ins below, or driven through a mocked requests session.
"""

import logging
from unittest.mock import MagicMock

import pytest
from eth_abi import encode

from txdecode.core.models import CandidateSignature
from txdecode.sources.cache import MemoryCache

TRANSFER_SELECTOR = "a9059cbb"
RECIPIENT = "0x0742d35cc6634c0532925a3b844bc9e7595f0beb"

# transfer(0x0742d35cc6634c0532925a3b844bc9e7595f0beb, 1000000)
TRANSFER_CALLDATA = (
    "0x" + TRANSFER_SELECTOR
    + "0000000000000000000000000742d35cc6634c0532925a3b844bc9e7595f0beb"
    + "00000000000000000000000000000000000000000000000000000000000f4240"
)

CONTRACT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"

TRANSFER_ABI_ITEM = {
    "type": "function",
    "name": "transfer",
    "stateMutability": "nonpayable",
    "inputs": [
        {"name": "_to", "type": "address"},
        {"name": "_value", "type": "uint256"},
    ],
    "outputs": [{"name": "", "type": "bool"}],
}

APPROVE_ABI_ITEM = {
    "type": "function",
    "name": "approve",
    "inputs": [
        {"name": "spender", "type": "address"},
        {"name": "amount", "type": "uint256"},
    ],
}


def calldata(selector_hex: str, types, values) -> str:
    """Hex calldata for a selector followed by the ABI encoding of values."""
    return "0x" + selector_hex.replace("0x", "") + encode(types, values).hex()


class StubDirectory:
    """Directory stand-in returning fixed candidates and counting lookups."""

    name = "stub"

    def __init__(self, signatures=(), error=None, source="4byte"):
        self.signatures = list(signatures)
        self.error = error
        self.source = source
        self.calls = 0

    def lookup(self, selector):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [
            CandidateSignature.from_text(text, source=self.source, position=i)
            for i, text in enumerate(self.signatures)
        ]


class StubVerified:
    """Verified ABI client stand-in."""

    name = "etherscan"

    def __init__(self, items=None, error=None):
        self.items = items
        self.error = error
        self.calls = []

    def fetch_abi(self, chain_id, address):
        self.calls.append((chain_id, address))
        if self.error is not None:
            raise self.error
        return self.items


class FailingCache(MemoryCache):
    """Cache whose writes always fail."""

    def put(self, key, value):
        raise OSError("disk full")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers a test (or the CLI) attached to the txdecode logger."""
    yield
    logger = logging.getLogger("txdecode")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def mock_session():
    """A requests session whose get() is a MagicMock."""
    return MagicMock()


def make_response(status_code=200, payload=None, json_error=False):
    """Build a fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response
