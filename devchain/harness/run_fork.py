#!/usr/bin/env python3
"""
run_fork.py - Forked local chain

Starts the local chain simulator forked from a supported network.

Usage:
    devchain-fork --network bsc-local-testnet
    devchain-fork -n eth-local-mainnet -b 5
    devchain-fork -n optimistic-local-kovan --dry-run
    devchain-fork --list-networks

Exit status mirrors the simulator: 0 on clean shutdown, the simulator's
exit code on failure, 128 + signal number if it was killed by a signal,
and 1 for errors caught before the simulator started.
"""

import argparse
import logging
import sys
from typing import List, Optional

from devchain.config.env import load_env_config
from devchain.config.networks import NETWORK_PROFILES
from devchain.errors import (
    LaunchError,
    ProcessExitError,
    ProcessSignalTermination,
)
from devchain.harness.launcher import ForkLauncher


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devchain-fork",
        description="Start a local chain simulator forked from a remote network.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Supported networks:
  """ + "\n  ".join(NETWORK_PROFILES) + """

Examples:
  # Fork BSC testnet
  devchain-fork -n bsc-local-testnet

  # Fork Ethereum mainnet and mine a block every 5 seconds
  devchain-fork -n eth-local-mainnet -b 5

  # Show the simulator command without starting it
  devchain-fork -n optimistic-local-kovan --dry-run

Ethereum and optimistic networks read INFURA_KEY from the environment or .env.
        """
    )

    parser.add_argument(
        "--network", "-n",
        type=str,
        default=None,
        help="Network to fork"
    )

    parser.add_argument(
        "--blocktime", "-b",
        type=float,
        default=None,
        help="Number of seconds for automatic block mining"
    )

    parser.add_argument(
        "--list-networks",
        action="store_true",
        help="List supported networks and exit"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the simulator command without starting it"
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="dotenv file to read (default: .env if present)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output (debug logging)"
    )

    return parser


def configure_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='[%(name)s] %(levelname)s: %(message)s',
        stream=sys.stderr
    )


def print_networks():
    print(f"{'NETWORK':<26} {'CHAIN ID':>8}  FORK URL")
    for profile in NETWORK_PROFILES.values():
        print(f"{profile.name:<26} {profile.chain_id:>8}  {profile.fork_url}")


def exit_code_for(error: LaunchError) -> int:
    """Map a launch failure to the process exit status."""
    if isinstance(error, ProcessExitError):
        return error.returncode
    if isinstance(error, ProcessSignalTermination):
        return 128 + error.signal_number
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.list_networks:
        print_networks()
        return 0

    if args.network is None:
        parser.error("--network is required (see --list-networks)")

    try:
        env_config = load_env_config(env_file=args.env_file)
        launcher = ForkLauncher(env_config)

        if args.dry_run:
            command = launcher.build_args(args.network, args.blocktime)
            print(launcher.display_command(command))
            return 0

        launcher.launch(args.network, args.blocktime)
        return 0

    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    except LaunchError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return exit_code_for(e)

    except ValueError as e:
        print(f"ERROR: Invalid environment configuration: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
