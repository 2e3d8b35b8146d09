"""
Transaction lookup over JSON-RPC.
"""

from dataclasses import dataclass
from typing import Optional

from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TransactionNotFound

from txdecode.utils.exceptions import MalformedInputError, RPCConnectionError, TransactionNotFoundError
from txdecode.utils.logging import get_logger

logger = get_logger("rpc")

DEFAULT_RPC_TIMEOUT = 30


@dataclass(frozen=True)
class TransactionCall:
    """The call a transaction makes: input data, target and chain."""
    calldata: bytes
    to: Optional[str]
    chain_id: int
    tx_hash: str


def connect(rpc_url: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> Web3:
    """
    Open a Web3 connection and make sure the node answers.

    Raises:
        RPCConnectionError: If the endpoint does not respond
    """
    logger.debug(f"Connecting to RPC: {rpc_url}")
    w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
    try:
        # A real call is a more reliable liveness check than is_connected()
        w3.eth.block_number
    except Exception as e:
        raise RPCConnectionError(f"Failed to connect to RPC at {rpc_url}: {e}", rpc_url=rpc_url) from e
    return w3


def fetch_transaction(rpc_url: str, tx_hash: str, timeout: float = DEFAULT_RPC_TIMEOUT) -> TransactionCall:
    """
    Fetch a transaction's calldata and target.

    Args:
        rpc_url: JSON-RPC endpoint
        tx_hash: Transaction hash, with or without 0x prefix
        timeout: Per-request timeout in seconds

    Returns:
        TransactionCall for the transaction

    Raises:
        MalformedInputError: If tx_hash is not a 32-byte hex string
        RPCConnectionError: If the node cannot be reached
        TransactionNotFoundError: If the node does not know the transaction
    """
    if not tx_hash.startswith('0x'):
        tx_hash = '0x' + tx_hash
    if len(tx_hash) != 66 or not Web3.is_hex(tx_hash):
        raise MalformedInputError(f"Invalid transaction hash: {tx_hash}")

    w3 = connect(rpc_url, timeout)
    try:
        tx = w3.eth.get_transaction(tx_hash)
    except TransactionNotFound as e:
        raise TransactionNotFoundError(tx_hash, rpc_url=rpc_url) from e
    except Exception as e:
        raise RPCConnectionError(f"Failed to fetch transaction {tx_hash}: {e}", rpc_url=rpc_url) from e

    chain_id = tx.get('chainId')
    if chain_id is None:
        # Legacy pre-EIP-155 transactions carry no chain id
        chain_id = w3.eth.chain_id

    to = tx.get('to')
    return TransactionCall(
        calldata=bytes(HexBytes(tx.get('input') or b'')),
        to=Web3.to_checksum_address(to) if to else None,
        chain_id=int(chain_id),
        tx_hash=tx_hash,
    )
