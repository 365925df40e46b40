"""
env.py - Environment-driven credentials and simulator settings

Credentials are read once at startup into an EnvConfig and passed
explicitly to the launcher and toolchain resolver. Values from a ``.env``
file are merged underneath the real process environment, so an exported
variable always wins over the file.

Example .env:
    INFURA_KEY=0123456789abcdef
    BINANCE_MNEMONIC="test test test ... junk"
    DEVCHAIN_SIMULATOR=npx ganache-cli
"""

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values

from devchain.errors import MissingCredentialError

logger = logging.getLogger(__name__)

INFURA_KEY_VAR = "INFURA_KEY"
SIMULATOR_VAR = "DEVCHAIN_SIMULATOR"
DEFAULT_ENV_FILE = ".env"
DEFAULT_SIMULATOR_COMMAND: Tuple[str, ...] = ("ganache-cli",)

MNEMONIC_VARS: Tuple[str, ...] = (
    "BINANCE_MNEMONIC",
    "ETHEREUM_ROPSTEN_MNEMONIC",
    "ETHEREUM_MAINNET_MNEMONIC",
    "OPTIMISM_LOCAL_MNEMONIC",
    "OPTIMISM_KOVAN_MNEMONIC",
    "OPTIMISM_MAINNET_MNEMONIC",
)


@dataclass(frozen=True)
class EnvConfig:
    """
    Explicit snapshot of the environment values devchain consumes.

    Attributes:
        infura_key: Hosted-RPC provider key (None if unset)
        mnemonics: Mnemonic phrases keyed by environment variable name
        simulator_command: Executable and leading arguments of the simulator
    """
    infura_key: Optional[str] = None
    mnemonics: Dict[str, str] = field(default_factory=dict)
    simulator_command: Tuple[str, ...] = DEFAULT_SIMULATOR_COMMAND

    def __post_init__(self):
        if not self.simulator_command:
            raise ValueError("simulator_command must not be empty")

    def require_infura_key(self, purpose: str = "") -> str:
        if not self.infura_key:
            raise MissingCredentialError(INFURA_KEY_VAR, purpose)
        return self.infura_key

    def mnemonic(self, variable: str, purpose: str = "") -> str:
        """
        Return the mnemonic stored under an environment variable name.

        Raises:
            MissingCredentialError: If the variable is unset or empty
        """
        phrase = self.mnemonics.get(variable)
        if not phrase:
            raise MissingCredentialError(variable, purpose)
        return phrase


MASK = "****"


def redact(text: str, secret: Optional[str]) -> str:
    """Replace every occurrence of secret in text with a fixed mask."""
    if not secret:
        return text
    return text.replace(secret, MASK)


def _non_empty(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_env_config(environ: Optional[Mapping[str, str]] = None,
                    env_file: Optional[str] = None) -> EnvConfig:
    """
    Build an EnvConfig from the process environment and a dotenv file.

    Args:
        environ: Mapping to read instead of os.environ. When given, no
            implicit ``.env`` lookup happens.
        env_file: Explicit dotenv file to merge under the environment

    Returns:
        EnvConfig snapshot

    Raises:
        FileNotFoundError: If env_file is given and does not exist
        ValueError: If DEVCHAIN_SIMULATOR cannot be split into arguments
    """
    file_values: Dict[str, Optional[str]] = {}

    if env_file is not None:
        path = Path(env_file)
        if not path.exists():
            raise FileNotFoundError(f"Env file not found: {env_file}")
        file_values = dict(dotenv_values(path))
        logger.debug(f"Loaded {len(file_values)} value(s) from {path}")
    elif environ is None and Path(DEFAULT_ENV_FILE).exists():
        file_values = dict(dotenv_values(DEFAULT_ENV_FILE))
        logger.debug(f"Loaded {len(file_values)} value(s) from {DEFAULT_ENV_FILE}")

    if environ is None:
        environ = os.environ

    merged: Dict[str, Optional[str]] = dict(file_values)
    merged.update(environ)

    mnemonics = {}
    for var in MNEMONIC_VARS:
        phrase = _non_empty(merged.get(var))
        if phrase is not None:
            mnemonics[var] = phrase

    simulator = _non_empty(merged.get(SIMULATOR_VAR))
    simulator_command = DEFAULT_SIMULATOR_COMMAND
    if simulator:
        try:
            simulator_command = tuple(shlex.split(simulator))
        except ValueError as e:
            raise ValueError(f"{SIMULATOR_VAR} is not a valid command line: {e}") from e

    return EnvConfig(
        infura_key=_non_empty(merged.get(INFURA_KEY_VAR)),
        mnemonics=mnemonics,
        simulator_command=simulator_command,
    )
