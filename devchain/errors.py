"""
Error types shared by the launcher and the toolchain configuration.

Every failure of a launch invocation is a LaunchError subclass. None of them
are retried: the caller reports the error and exits non-zero.
"""

from typing import Optional


class LaunchError(Exception):
    """Base class for failures of a single launch invocation."""
    pass


class UnsupportedNetworkError(LaunchError):
    """Raised when the requested network has no fork profile."""

    def __init__(self, network: Optional[str]):
        self.network = network
        super().__init__(f"Unsupported network: {network}")


class MissingCredentialError(LaunchError):
    """Raised when a required environment value is unset or empty."""

    def __init__(self, variable: str, purpose: str = ""):
        self.variable = variable
        message = f"Environment variable {variable} is not set"
        if purpose:
            message += f" (required for {purpose})"
        super().__init__(message)


class InvalidBlockTimeError(LaunchError, ValueError):
    """Raised when the block mining interval is negative or not finite."""

    def __init__(self, block_time: float):
        self.block_time = block_time
        super().__init__(f"blocktime must be a finite non-negative number, got {block_time}")


class ProcessSpawnError(LaunchError):
    """Raised when the OS could not start the simulator process."""

    def __init__(self, command: str, cause: BaseException):
        self.command = command
        self.cause = cause
        super().__init__(f"Failed to start {command}: {cause}")


class ProcessExitError(LaunchError):
    """Raised when the simulator exits with a non-zero code."""

    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(f"Exit with error code: {returncode}")


class ProcessSignalTermination(LaunchError):
    """Raised when the simulator is terminated by a signal."""

    def __init__(self, signal_number: int, signal_name: str):
        self.signal_number = signal_number
        self.signal_name = signal_name
        super().__init__(f"Terminated by signal {signal_name}")
