#!/usr/bin/env python3
"""
show_toolchain.py - Inspect deployment toolchain configuration

Prints a toolchain's resolved configuration as YAML, with credentials
filled in from the environment and masked unless --show-secrets is given.

Usage:
    devchain-toolchain
    devchain-toolchain --toolchain optimistic --network optimistic-kovan
    devchain-toolchain --toolchain path/to/custom.yaml --check
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from devchain.config.env import load_env_config
from devchain.config.toolchain import (
    BUILTIN_TOOLCHAINS,
    load_builtin_toolchain,
    load_toolchain,
    toolchain_to_dict,
    validate_toolchain,
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="devchain-toolchain",
        description="Show or check a compiler/deployment toolchain configuration.",
    )

    parser.add_argument(
        "--toolchain", "-t",
        default="default",
        help=f"Built-in toolchain ({', '.join(BUILTIN_TOOLCHAINS)}) or path to a YAML file"
    )

    parser.add_argument(
        "--network", "-n",
        default=None,
        help="Show a single network only"
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate against the fork network table and exit"
    )

    parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print resolved credentials unmasked"
    )

    parser.add_argument(
        "--env-file",
        default=None,
        help="dotenv file to read (default: .env if present)"
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format='[%(name)s] %(levelname)s: %(message)s',
        stream=sys.stderr
    )

    try:
        if args.toolchain in BUILTIN_TOOLCHAINS:
            toolchain = load_builtin_toolchain(args.toolchain)
        else:
            toolchain = load_toolchain(str(Path(args.toolchain)))
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except (ValueError, yaml.YAMLError) as e:
        print("ERROR: Invalid toolchain configuration:", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        return 1

    if args.check:
        errors = validate_toolchain(toolchain)
        if errors:
            print(f"Toolchain '{toolchain.name}' has {len(errors)} error(s):")
            for error in errors:
                print(f"  - {error}")
            return 1
        print(f"Toolchain '{toolchain.name}' is consistent")
        return 0

    try:
        env_config = load_env_config(env_file=args.env_file)
    except FileNotFoundError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"ERROR: Invalid environment configuration: {e}", file=sys.stderr)
        return 1

    data = toolchain_to_dict(toolchain, env_config, mask_secrets=not args.show_secrets)

    if args.network is not None:
        if args.network not in data['networks']:
            print(f"ERROR: Network {args.network} not in toolchain '{toolchain.name}'",
                  file=sys.stderr)
            return 1
        data = {args.network: data['networks'][args.network]}

    print(yaml.safe_dump(data, sort_keys=False), end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
