"""
toolchain.py - Deployment toolchain configuration

Parses the compiler/deployment toolchain configuration from YAML. Two
toolchains ship with the package: ``default`` (BSC and Ethereum) and
``optimistic`` (optimistic rollup). Each describes its contract directories,
compiler pin and deployment networks.

Design:
- Fail fast: raise ValueError naming the offending field
- Secrets stay out of the YAML: providers name the environment variable
  holding their mnemonic, and URLs use the {infura_key} placeholder

Example YAML:
    toolchain: default
    contracts_directory: ./contracts/ethereum
    contracts_build_directory: ./build/
    compiler:
      version: "0.8.6"
    networks:
      bsc-local-testnet:
        host: 127.0.0.1
        port: 8545
        network_id: 97
      bsc-testnet:
        provider:
          url: https://data-seed-prebsc-1-s1.binance.org:8545
          mnemonic_env: BINANCE_MNEMONIC
        network_id: 97
        confirmations: 10
"""

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from devchain.config.env import MASK, EnvConfig, redact
from devchain.config.networks import INFURA_PLACEHOLDER, NETWORK_PROFILES, NetworkProfile
from devchain.errors import MissingCredentialError

BUILTIN_DIR = Path(__file__).parent / "toolchains"
BUILTIN_TOOLCHAINS = ("default", "optimistic")

NetworkId = Union[int, str]


@dataclass
class CompilerConfig:
    """Solidity compiler pin and optimizer settings."""
    version: str
    optimizer_enabled: bool = False
    optimizer_runs: int = 200

    def __post_init__(self):
        if not self.version:
            raise ValueError("compiler.version must not be empty")
        if self.optimizer_runs <= 0:
            raise ValueError(f"compiler.optimizer.runs must be positive, got {self.optimizer_runs}")


@dataclass
class ProviderConfig:
    """
    Wallet provider for a remote network.

    Attributes:
        url: RPC endpoint (may contain the hosted-RPC key placeholder)
        mnemonic_env: Environment variable holding the signing mnemonic
        address_index: First derived account to use
        number_of_addresses: Number of derived accounts
        chain_id: Chain ID the provider signs for (optional)
    """
    url: str
    mnemonic_env: str
    address_index: int = 0
    number_of_addresses: int = 1
    chain_id: Optional[int] = None

    def __post_init__(self):
        if self.address_index < 0:
            raise ValueError(f"provider.address_index must be non-negative, got {self.address_index}")
        if self.number_of_addresses <= 0:
            raise ValueError(
                f"provider.number_of_addresses must be positive, got {self.number_of_addresses}"
            )


@dataclass
class ToolchainNetwork:
    """
    One deployment network.

    Exactly one of (host, port) or provider is set: local networks talk to
    a node directly, remote networks sign through a wallet provider.
    """
    name: str
    network_id: NetworkId
    host: Optional[str] = None
    port: Optional[int] = None
    provider: Optional[ProviderConfig] = None
    chain_id: Optional[int] = None
    gas: Optional[int] = None
    gas_price: Optional[int] = None
    confirmations: Optional[int] = None
    timeout_blocks: Optional[int] = None
    skip_dry_run: bool = False

    def __post_init__(self):
        is_local = self.host is not None or self.port is not None
        if is_local and self.provider is not None:
            raise ValueError(f"Network {self.name}: set either host/port or provider, not both")
        if not is_local and self.provider is None:
            raise ValueError(f"Network {self.name}: host/port or provider required")
        if is_local and (self.host is None or self.port is None):
            raise ValueError(f"Network {self.name}: host and port must be set together")
        if isinstance(self.network_id, str) and self.network_id != "*":
            raise ValueError(f"Network {self.name}: network_id must be an integer or '*'")

    @property
    def is_local(self) -> bool:
        return self.provider is None


@dataclass
class ToolchainConfig:
    """
    Compiler and deployment configuration for one chain family.

    Attributes:
        name: Toolchain name ("default" or "optimistic")
        contracts_directory: Contract sources
        contracts_build_directory: Build artifact output
        compiler: Compiler pin
        networks: Deployment networks by name
        mocha_timeout_ms: Test runner timeout (None = runner default)
        db_enabled: Whether the toolchain database is enabled
        plugins: Toolchain plugins
    """
    name: str
    contracts_directory: str
    contracts_build_directory: str
    compiler: CompilerConfig
    networks: Dict[str, ToolchainNetwork] = field(default_factory=dict)
    mocha_timeout_ms: Optional[int] = None
    db_enabled: bool = False
    plugins: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.name not in BUILTIN_TOOLCHAINS:
            raise ValueError(
                f"toolchain must be one of {', '.join(BUILTIN_TOOLCHAINS)}, got '{self.name}'"
            )
        if not self.networks:
            raise ValueError(f"Toolchain {self.name}: no networks defined")


@dataclass
class ResolvedProvider:
    """Provider with credentials filled in from the environment."""
    url: str
    mnemonic: str
    address_index: int
    number_of_addresses: int
    chain_id: Optional[int] = None


def _require_int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{where} must be an integer, got {value!r}")
    return value


def _optional_int(data: Dict[str, Any], key: str, where: str) -> Optional[int]:
    if data.get(key) is None:
        return None
    return _require_int(data[key], f"{where}.{key}")


def _parse_provider(data: Any, where: str) -> ProviderConfig:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be a dict")
    for key in ('url', 'mnemonic_env'):
        if key not in data:
            raise ValueError(f"{where}: Missing required field '{key}'")

    return ProviderConfig(
        url=str(data['url']),
        mnemonic_env=str(data['mnemonic_env']),
        address_index=_require_int(data.get('address_index', 0), f"{where}.address_index"),
        number_of_addresses=_require_int(
            data.get('number_of_addresses', 1), f"{where}.number_of_addresses"
        ),
        chain_id=_optional_int(data, 'chain_id', where),
    )


def _parse_network(name: str, data: Any) -> ToolchainNetwork:
    where = f"networks.{name}"
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be a dict, got {type(data)}")
    if 'network_id' not in data:
        raise ValueError(f"{where}: Missing required field 'network_id'")

    network_id = data['network_id']
    if network_id != "*":
        network_id = _require_int(network_id, f"{where}.network_id")

    provider = None
    if 'provider' in data:
        provider = _parse_provider(data['provider'], f"{where}.provider")

    return ToolchainNetwork(
        name=name,
        network_id=network_id,
        host=data.get('host'),
        port=_optional_int(data, 'port', where),
        provider=provider,
        chain_id=_optional_int(data, 'chain_id', where),
        gas=_optional_int(data, 'gas', where),
        gas_price=_optional_int(data, 'gas_price', where),
        confirmations=_optional_int(data, 'confirmations', where),
        timeout_blocks=_optional_int(data, 'timeout_blocks', where),
        skip_dry_run=bool(data.get('skip_dry_run', False)),
    )


def load_toolchain(yaml_path: str) -> ToolchainConfig:
    """
    Load toolchain configuration from a YAML file.

    Args:
        yaml_path: Path to YAML toolchain file

    Returns:
        ToolchainConfig with parsed configuration

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If required fields are missing or invalid
        yaml.YAMLError: If YAML syntax is invalid
    """
    path = Path(yaml_path)
    if not path.exists():
        raise FileNotFoundError(f"Toolchain file not found: {yaml_path}")

    with open(path, 'r') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML syntax in {yaml_path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Toolchain file must contain a YAML dict, got {type(data)}")

    for key in ('toolchain', 'contracts_directory', 'contracts_build_directory', 'compiler', 'networks'):
        if key not in data:
            raise ValueError(f"Missing required field: {key}")

    compiler = data['compiler']
    if not isinstance(compiler, dict):
        raise ValueError("'compiler' section must be a dict")
    if 'version' not in compiler:
        raise ValueError("Missing required field: compiler.version")

    optimizer = compiler.get('optimizer') or {}
    if not isinstance(optimizer, dict):
        raise ValueError("compiler.optimizer must be a dict")

    networks = data['networks']
    if not isinstance(networks, dict):
        raise ValueError("'networks' section must be a dict")

    plugins = data.get('plugins') or []
    if not isinstance(plugins, list):
        raise ValueError("'plugins' must be a list")

    mocha_timeout = data.get('mocha_timeout_ms')
    if mocha_timeout is not None:
        mocha_timeout = _require_int(mocha_timeout, 'mocha_timeout_ms')

    return ToolchainConfig(
        name=str(data['toolchain']),
        contracts_directory=str(data['contracts_directory']),
        contracts_build_directory=str(data['contracts_build_directory']),
        compiler=CompilerConfig(
            version=str(compiler['version']),
            optimizer_enabled=bool(optimizer.get('enabled', False)),
            optimizer_runs=_require_int(optimizer.get('runs', 200), 'compiler.optimizer.runs'),
        ),
        networks={str(name): _parse_network(str(name), net) for name, net in networks.items()},
        mocha_timeout_ms=mocha_timeout,
        db_enabled=bool(data.get('db_enabled', False)),
        plugins=[str(p) for p in plugins],
    )


def load_builtin_toolchain(name: str) -> ToolchainConfig:
    """Load one of the toolchains shipped with the package."""
    if name not in BUILTIN_TOOLCHAINS:
        raise ValueError(
            f"Unknown toolchain '{name}' (expected one of {', '.join(BUILTIN_TOOLCHAINS)})"
        )
    return load_toolchain(str(BUILTIN_DIR / f"{name}.yaml"))


def resolve_provider(network: ToolchainNetwork, env_config: EnvConfig) -> ResolvedProvider:
    """
    Fill in provider credentials from the environment config.

    Raises:
        ValueError: If the network is local
        MissingCredentialError: If the key or mnemonic is unset
    """
    provider = network.provider
    if provider is None:
        raise ValueError(f"Network {network.name} is local and has no provider")

    url = provider.url
    if INFURA_PLACEHOLDER in url:
        key = env_config.require_infura_key(f"network {network.name}")
        url = url.replace(INFURA_PLACEHOLDER, key)

    return ResolvedProvider(
        url=url,
        mnemonic=env_config.mnemonic(provider.mnemonic_env, f"network {network.name}"),
        address_index=provider.address_index,
        number_of_addresses=provider.number_of_addresses,
        chain_id=provider.chain_id,
    )


def validate_toolchain(toolchain: ToolchainConfig,
                       profiles: Optional[Dict[str, NetworkProfile]] = None) -> List[str]:
    """
    Check a toolchain against the fork profiles and itself.

    Returns:
        List of consistency errors (empty if valid)
    """
    profiles = NETWORK_PROFILES if profiles is None else profiles
    errors = []

    for name, network in toolchain.networks.items():
        profile = profiles.get(name)
        if profile is not None:
            if profile.toolchain != toolchain.name:
                errors.append(
                    f"Network {name}: fork profile belongs to toolchain '{profile.toolchain}'"
                )
            if network.network_id != profile.chain_id:
                errors.append(
                    f"Network {name}: network_id {network.network_id} does not match "
                    f"fork chain ID {profile.chain_id}"
                )

        if network.network_id == "*":
            continue

        declared = [('chain_id', network.chain_id)]
        if network.provider is not None:
            declared.append(('provider.chain_id', network.provider.chain_id))
        for label, chain_id in declared:
            if chain_id is not None and chain_id != network.network_id:
                errors.append(
                    f"Network {name}: {label} {chain_id} does not match "
                    f"network_id {network.network_id}"
                )

    for name, profile in profiles.items():
        if profile.toolchain == toolchain.name and name not in toolchain.networks:
            errors.append(f"Fork network {name} has no entry in toolchain '{toolchain.name}'")

    return errors


def _provider_to_dict(network: ToolchainNetwork, env_config: Optional[EnvConfig],
                      mask_secrets: bool) -> Dict[str, Any]:
    provider = network.provider
    out: Dict[str, Any] = {
        'url': provider.url,
        'mnemonic': f"<{provider.mnemonic_env}>",
        'address_index': provider.address_index,
        'number_of_addresses': provider.number_of_addresses,
    }
    if provider.chain_id is not None:
        out['chain_id'] = provider.chain_id
    if env_config is None:
        return out

    try:
        resolved = resolve_provider(network, env_config)
    except MissingCredentialError as e:
        out['unresolved'] = f"{e.variable} is not set"
        return out

    if mask_secrets:
        out['url'] = redact(resolved.url, env_config.infura_key)
        out['mnemonic'] = MASK
    else:
        out['url'] = resolved.url
        out['mnemonic'] = resolved.mnemonic
    return out


def toolchain_to_dict(toolchain: ToolchainConfig, env_config: Optional[EnvConfig] = None,
                      mask_secrets: bool = True) -> Dict[str, Any]:
    """
    Render a toolchain as plain data for display.

    Provider credentials are resolved when env_config is given; secrets are
    masked unless mask_secrets is False.
    """
    networks: Dict[str, Any] = {}
    for name, network in toolchain.networks.items():
        entry: Dict[str, Any] = {'network_id': network.network_id}
        if network.is_local:
            entry['host'] = network.host
            entry['port'] = network.port
        else:
            entry['provider'] = _provider_to_dict(network, env_config, mask_secrets)
        for key in ('chain_id', 'gas', 'gas_price', 'confirmations', 'timeout_blocks'):
            value = getattr(network, key)
            if value is not None:
                entry[key] = value
        if network.skip_dry_run:
            entry['skip_dry_run'] = True
        networks[name] = entry

    compiler: Dict[str, Any] = {'version': toolchain.compiler.version}
    if toolchain.compiler.optimizer_enabled:
        compiler['optimizer'] = {'enabled': True, 'runs': toolchain.compiler.optimizer_runs}

    out: Dict[str, Any] = {
        'toolchain': toolchain.name,
        'contracts_directory': toolchain.contracts_directory,
        'contracts_build_directory': toolchain.contracts_build_directory,
        'compiler': compiler,
        'networks': networks,
        'db_enabled': toolchain.db_enabled,
    }
    if toolchain.mocha_timeout_ms is not None:
        out['mocha_timeout_ms'] = toolchain.mocha_timeout_ms
    if toolchain.plugins:
        out['plugins'] = list(toolchain.plugins)
    return out
