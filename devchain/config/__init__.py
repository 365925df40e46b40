"""
devchain.config - Network, environment and toolchain configuration

Provides the static fork network table, the environment-driven credential
config, and YAML-based toolchain configuration.
"""

from .env import EnvConfig, load_env_config
from .networks import NETWORK_PROFILES, NetworkProfile, get_profile
from .toolchain import ToolchainConfig, load_builtin_toolchain, load_toolchain

__all__ = [
    'EnvConfig',
    'load_env_config',
    'NETWORK_PROFILES',
    'NetworkProfile',
    'get_profile',
    'ToolchainConfig',
    'load_builtin_toolchain',
    'load_toolchain',
]
