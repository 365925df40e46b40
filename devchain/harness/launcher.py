#!/usr/bin/env python3
"""
launcher.py - Forked Chain Simulator Launcher

Starts the local chain simulator forked from a supported network and waits
for it to exit.

Lifecycle of one invocation:
    NOT_STARTED -> SPAWNED -> SUCCEEDED | FAILED_EXIT | FAILED_SPAWN

Design philosophy:
- Fail fast before spawning (network, credentials, block time)
- Full I/O passthrough: the simulator owns the terminal
- One terminal outcome per invocation: a LaunchResult or a LaunchError
"""

import logging
import math
import signal
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from devchain.config.env import EnvConfig, load_env_config, redact
from devchain.config.networks import NETWORK_PROFILES, NetworkProfile, get_profile
from devchain.errors import (
    InvalidBlockTimeError,
    ProcessExitError,
    ProcessSignalTermination,
    ProcessSpawnError,
    UnsupportedNetworkError,
)

logger = logging.getLogger(__name__)

SpawnFn = Callable[[List[str]], subprocess.Popen]


class LaunchState(Enum):
    NOT_STARTED = "not_started"
    SPAWNED = "spawned"
    SUCCEEDED = "succeeded"
    FAILED_EXIT = "failed_exit"
    FAILED_SPAWN = "failed_spawn"


@dataclass
class LaunchResult:
    """Result of a simulator run that exited cleanly."""
    network: str
    args: List[str]
    returncode: int
    state: LaunchState
    duration_sec: float


def format_block_time(block_time: float) -> str:
    """Render a block time the way the simulator expects it ("5", "2.5")."""
    if float(block_time).is_integer():
        return str(int(block_time))
    return str(block_time)


def signal_name(signal_number: int) -> str:
    try:
        return signal.Signals(signal_number).name
    except ValueError:
        return f"SIG{signal_number}"


class ForkLauncher:
    """
    Launches the chain simulator forked from one network.

    Usage:
        launcher = ForkLauncher(load_env_config())
        result = launcher.launch('bsc-local-testnet', block_time=5)

    The spawn callable receives the full argument list and returns a
    Popen-like object (``wait()`` returning the exit status). It defaults to
    subprocess.Popen with inherited stdin/stdout/stderr.

    Thread safety: Not thread-safe. One invocation at a time.
    """

    def __init__(self, env_config: EnvConfig,
                 spawn: Optional[SpawnFn] = None,
                 profiles: Optional[Dict[str, NetworkProfile]] = None):
        """
        Initialize launcher.

        Args:
            env_config: Credentials and simulator command
            spawn: Process factory (default subprocess.Popen)
            profiles: Fork network table (default NETWORK_PROFILES)
        """
        self.env_config = env_config
        self.profiles = NETWORK_PROFILES if profiles is None else profiles
        self._spawn = spawn if spawn is not None else subprocess.Popen
        self.state = LaunchState.NOT_STARTED
        self.process: Optional[subprocess.Popen] = None

    def resolve(self, network: Optional[str]) -> NetworkProfile:
        """
        Look up the fork profile for a network.

        Raises:
            UnsupportedNetworkError: If the network has no profile
        """
        profile = get_profile(network, self.profiles)
        if profile is None:
            raise UnsupportedNetworkError(network)
        return profile

    def build_args(self, network: Optional[str], block_time: Optional[float] = None) -> List[str]:
        """
        Build the simulator command line for a network.

        Args:
            network: Network identifier
            block_time: Seconds between automatically mined blocks (None
                keeps the simulator's own mining policy)

        Returns:
            Full argument list, executable first

        Raises:
            UnsupportedNetworkError: If the network has no profile
            MissingCredentialError: If the fork URL needs INFURA_KEY
            InvalidBlockTimeError: If block_time is negative or not finite
        """
        profile = self.resolve(network)

        fork_url = profile.fork_url
        if profile.needs_infura_key:
            key = self.env_config.require_infura_key(f"forking {profile.name}")
            fork_url = profile.resolve_fork_url(key)

        if block_time is not None and (not math.isfinite(block_time) or block_time < 0):
            raise InvalidBlockTimeError(block_time)

        args = list(self.env_config.simulator_command)
        args += ['-f', fork_url, '--chainId', str(profile.chain_id)]

        if block_time is not None:
            args += ['--blockTime', format_block_time(block_time)]

        return args

    def display_command(self, args: List[str]) -> str:
        """Command line as text with the hosted-RPC key masked."""
        return redact(' '.join(args), self.env_config.infura_key)

    def launch(self, network: Optional[str], block_time: Optional[float] = None) -> LaunchResult:
        """
        Start the simulator and wait for it to exit.

        Returns:
            LaunchResult for a clean (exit code 0) shutdown

        Raises:
            UnsupportedNetworkError, MissingCredentialError,
            InvalidBlockTimeError: Before anything is spawned
            ProcessSpawnError: If the OS could not start the simulator
            ProcessExitError: If the simulator exited non-zero
            ProcessSignalTermination: If the simulator was killed by a signal
        """
        self.state = LaunchState.NOT_STARTED
        self.process = None

        args = self.build_args(network, block_time)

        logger.info(f"Forking {network} with {args[0]}")
        logger.debug(f"Command: {self.display_command(args)}")

        start = time.monotonic()
        try:
            self.process = self._spawn(args)
        except (OSError, subprocess.SubprocessError) as e:
            self.state = LaunchState.FAILED_SPAWN
            logger.debug(f"Failed to start {args[0]}: {e}")
            raise ProcessSpawnError(args[0], e) from e

        self.state = LaunchState.SPAWNED
        logger.debug(f"Simulator started (pid {getattr(self.process, 'pid', '?')})")

        returncode = self._wait(self.process)
        elapsed = time.monotonic() - start
        self.process = None

        if returncode == 0:
            self.state = LaunchState.SUCCEEDED
            logger.info(f"Simulator exited cleanly after {elapsed:.1f}s")
            return LaunchResult(
                network=network,
                args=args,
                returncode=0,
                state=self.state,
                duration_sec=elapsed,
            )

        self.state = LaunchState.FAILED_EXIT
        if returncode < 0:
            name = signal_name(-returncode)
            logger.debug(f"Simulator terminated by {name}")
            raise ProcessSignalTermination(-returncode, name)

        logger.debug(f"Simulator exited with code {returncode}")
        raise ProcessExitError(returncode)

    def _wait(self, process) -> int:
        """
        Wait for the simulator to exit.

        A terminal interrupt reaches the simulator too, so the first
        KeyboardInterrupt only stops us from abandoning it; a second one
        propagates.
        """
        try:
            return process.wait()
        except KeyboardInterrupt:
            logger.info("Interrupt received, waiting for simulator to exit")
            return process.wait()


def launch(network: Optional[str], block_time: Optional[float] = None,
           env_config: Optional[EnvConfig] = None) -> LaunchResult:
    """
    Convenience function to fork a network with the default spawn.

    Args:
        network: Network identifier
        block_time: Optional automatic mining interval in seconds
        env_config: Credentials (default: read from the environment)

    Returns:
        LaunchResult
    """
    if env_config is None:
        env_config = load_env_config()
    return ForkLauncher(env_config).launch(network, block_time)
