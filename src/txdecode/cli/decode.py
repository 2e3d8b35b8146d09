"""
Decode command implementations.

This module handles the decode, tx and selector commands.
"""

import json
from typing import Optional

from eth_utils import to_checksum_address
from eth_utils.address import is_address

from txdecode.abi.types import parse_signature
from txdecode.config import DecoderConfig, build_resolver
from txdecode.core.models import Resolution
from txdecode.core.selector import selector_for
from txdecode.display import render_resolution
from txdecode.rpc import fetch_transaction
from txdecode.utils.colors import bold, warning
from txdecode.utils.exceptions import (
    ABIParseError,
    MalformedInputError,
    NoPlausibleSignatureError,
    RPCConnectionError,
    TransactionNotFoundError,
    format_error,
    format_error_json,
)
from txdecode.utils.logging import logger

EXIT_RESOLVED = 0
EXIT_UNRESOLVED = 1
EXIT_INPUT_ERROR = 2


def load_config(args) -> DecoderConfig:
    """
    Build the configuration for a command from the environment and its flags.

    Raises:
        ValueError: If an environment setting is invalid
    """
    config = DecoderConfig.from_env()
    return config.with_overrides(
        etherscan_api_key=getattr(args, 'etherscan_key', None),
        chain_id=getattr(args, 'chain_id', None),
        rpc_url=getattr(args, 'rpc_url', None),
        cache_dir=getattr(args, 'cache_dir', None),
        use_cache=False if getattr(args, 'no_cache', False) else None,
        directory=getattr(args, 'directory', None),
        timeout=getattr(args, 'timeout', None),
    )


def normalize_address(address: str) -> str:
    """
    Normalize an Ethereum address to checksum format.

    Raises:
        MalformedInputError: If address is invalid
    """
    if not address.startswith('0x'):
        address = '0x' + address
    if not is_address(address):
        raise MalformedInputError(f"Invalid contract address: {address}")
    return to_checksum_address(address)


def _print_error(e: Exception, json_mode: bool) -> None:
    print(format_error(e, json_mode))


def _print_resolution(resolution: Resolution, json_mode: bool, extra: Optional[dict] = None) -> int:
    if json_mode:
        output = resolution.to_dict()
        if extra:
            output.update(extra)
        print(json.dumps(output, indent=2))
    else:
        print(render_resolution(resolution))
        if isinstance(resolution.error, NoPlausibleSignatureError):
            logger.debug(resolution.error.message)
        elif resolution.error is not None:
            print(warning(resolution.error.message))
    return EXIT_RESOLVED if resolution.resolved else EXIT_UNRESOLVED


def decode_command(args) -> int:
    """
    Execute the decode command.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 resolved, 1 unresolved, 2 malformed input)
    """
    json_mode = getattr(args, 'json', False)

    try:
        config = load_config(args)
    except ValueError as e:
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR

    try:
        address = normalize_address(args.address) if args.address else None
        resolver = build_resolver(config)
        resolution = resolver.resolve(args.calldata, contract_address=address, chain_id=config.chain_id)
    except MalformedInputError as e:
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR
    except (OSError, ValueError) as e:
        logger.debug(f"Could not set up resolver: {e}")
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR

    return _print_resolution(resolution, json_mode)


def tx_command(args) -> int:
    """
    Execute the tx command.

    Fetches the transaction over JSON-RPC and resolves its input data
    against the called contract on the transaction's chain.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 resolved, 1 unresolved, 2 bad input or RPC failure)
    """
    json_mode = getattr(args, 'json', False)

    try:
        config = load_config(args)
    except ValueError as e:
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR

    try:
        tx = fetch_transaction(config.rpc_url, args.tx_hash)
    except (MalformedInputError, RPCConnectionError, TransactionNotFoundError) as e:
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR

    if tx.to is None:
        _print_error(MalformedInputError(
            f"Transaction {tx.tx_hash} creates a contract; its input is init code, not a call"
        ), json_mode)
        return EXIT_INPUT_ERROR

    chain_id = args.chain_id if args.chain_id is not None else tx.chain_id
    try:
        resolver = build_resolver(config)
        resolution = resolver.resolve(tx.calldata, contract_address=tx.to, chain_id=chain_id)
    except MalformedInputError as e:
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR
    except (OSError, ValueError) as e:
        logger.debug(f"Could not set up resolver: {e}")
        _print_error(e, json_mode)
        return EXIT_INPUT_ERROR

    if not json_mode:
        print(f"{bold('Transaction:')} {tx.tx_hash}")
        print(f"{bold('To:')} {tx.to} (chain {chain_id})")
    return _print_resolution(
        resolution, json_mode,
        extra={"transaction": {"hash": tx.tx_hash, "to": tx.to, "chain_id": chain_id}},
    )


def selector_command(args) -> int:
    """
    Execute the selector command.

    Prints the canonical form of a signature and its 4-byte selector.
    """
    json_mode = getattr(args, 'json', False)

    try:
        parsed = parse_signature(args.signature)
    except ABIParseError as e:
        if json_mode:
            print(json.dumps(format_error_json(e.message, e.error_code, signature=args.signature), indent=2))
        else:
            _print_error(e, json_mode)
        return EXIT_INPUT_ERROR

    selector = selector_for(parsed.canonical)
    if json_mode:
        print(json.dumps({"signature": parsed.canonical, "selector": selector.hex}, indent=2))
    else:
        print(f"{selector.hex}  {parsed.canonical}")
    return EXIT_RESOLVED
