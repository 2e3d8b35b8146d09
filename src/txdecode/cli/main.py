#!/usr/bin/env python3
"""
Main entry point for txdecode

This module serves as the CLI entry point, handling argument parsing
and routing to the command implementations in cli/decode.py.
"""

import sys
import argparse

from txdecode import __version__
from txdecode.utils.logging import setup_logging
from .decode import decode_command, tx_command, selector_command


def _add_resolution_arguments(parser: argparse.ArgumentParser) -> None:
    """Flags shared by every command that resolves calldata."""
    parser.add_argument('--chain-id', type=int, default=None, help='Chain id of the called contract (default: $TXDECODE_CHAIN_ID or 1)')
    parser.add_argument('--etherscan-key', default=None, help='Etherscan API key for verified ABI lookups (default: $ETHERSCAN_API_KEY)')
    parser.add_argument('--directory', choices=['4byte', 'openchain'], default=None, help='Public signature directory to query (default: 4byte)')
    parser.add_argument('--no-cache', action='store_true', default=False, help='Do not read or write the on-disk resolution cache')
    parser.add_argument('--cache-dir', default=None, help='Resolution cache directory (default: ~/.txdecode/cache)')
    parser.add_argument('--timeout', type=float, default=None, help='Per-request timeout in seconds for signature sources')
    parser.add_argument('--json', action='store_true', help='Output the resolution as JSON')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='txdecode - decode EVM calldata into function calls')
    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', action='store_true', help='Show debug logging')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show resolver state transitions (implies --debug)')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress log output on stderr')
    parser.add_argument('--log-file', default=None, help='Also write full debug logs to this file')

    # Create subparsers for different commands
    subparsers = parser.add_subparsers(dest='command', help='Commands')
    subparsers.required = True

    # decode command
    decode_parser = subparsers.add_parser('decode', help='Decode raw calldata')
    decode_parser.add_argument('calldata', help='Calldata as a hex string (0x...)')
    decode_parser.add_argument('--address', '-a', default=None, help='Called contract address, enables verified ABI fallback')
    _add_resolution_arguments(decode_parser)

    # tx command
    tx_parser = subparsers.add_parser('tx', help='Fetch a transaction and decode its calldata')
    tx_parser.add_argument('tx_hash', help='Transaction hash')
    tx_parser.add_argument('--rpc-url', '-r', default=None, help='RPC URL (default: $ETH_RPC_URL or http://localhost:8545)')
    _add_resolution_arguments(tx_parser)

    # selector command
    selector_parser = subparsers.add_parser('selector', help='Compute the 4-byte selector of a function signature')
    selector_parser.add_argument('signature', help='Function signature, e.g. transfer(address,uint256)')
    selector_parser.add_argument('--json', action='store_true', help='Output as JSON')

    return parser


def main(argv=None):
    """Main entry point for txdecode CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        quiet=args.quiet,
        debug=args.debug,
        verbose=args.verbose,
        log_file=args.log_file,
    )

    # Route commands to CLI modules
    if args.command == 'decode':
        return decode_command(args)
    elif args.command == 'tx':
        return tx_command(args)
    elif args.command == 'selector':
        return selector_command(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
