"""
networks.py - Forkable network profiles

Static table of the networks the local simulator can fork. Each profile
names the remote RPC endpoint the simulator replays state from and the
chain ID it reports. Hosted endpoints carry an ``{infura_key}`` placeholder
that is filled in from the environment config at launch time.
"""

from dataclasses import dataclass
from typing import Dict, Optional

INFURA_PLACEHOLDER = "{infura_key}"


@dataclass(frozen=True)
class NetworkProfile:
    """
    Fork source for one supported network.

    Attributes:
        name: Network identifier passed on the command line
        fork_url: RPC endpoint (may contain the hosted-RPC key placeholder)
        chain_id: Chain ID the local simulator reports
        toolchain: Deployment toolchain the network belongs to
    """
    name: str
    fork_url: str
    chain_id: int
    toolchain: str = "default"

    def __post_init__(self):
        if self.chain_id <= 0:
            raise ValueError(f"chain_id must be positive, got {self.chain_id}")
        if self.toolchain not in ("default", "optimistic"):
            raise ValueError(
                f"toolchain must be 'default' or 'optimistic', got '{self.toolchain}'"
            )

    @property
    def needs_infura_key(self) -> bool:
        return INFURA_PLACEHOLDER in self.fork_url

    def resolve_fork_url(self, infura_key: Optional[str]) -> str:
        """
        Return the fork URL with the hosted-RPC key substituted.

        Raises:
            ValueError: If the URL needs a key and none was given
        """
        if not self.needs_infura_key:
            return self.fork_url
        if not infura_key:
            raise ValueError(f"Network {self.name} requires a hosted-RPC key")
        return self.fork_url.replace(INFURA_PLACEHOLDER, infura_key)


def _table(*profiles: NetworkProfile) -> Dict[str, NetworkProfile]:
    return {p.name: p for p in profiles}


NETWORK_PROFILES: Dict[str, NetworkProfile] = _table(
    NetworkProfile(
        name="bsc-local-testnet",
        fork_url="https://data-seed-prebsc-1-s1.binance.org:8545/",
        chain_id=97,
    ),
    NetworkProfile(
        name="bsc-local-mainnet",
        fork_url="https://bsc-dataseed.binance.org/",
        chain_id=56,
    ),
    NetworkProfile(
        name="eth-local-ropsten",
        fork_url="https://ropsten.infura.io/v3/" + INFURA_PLACEHOLDER,
        chain_id=3,
    ),
    NetworkProfile(
        name="eth-local-mainnet",
        fork_url="https://mainnet.infura.io/v3/" + INFURA_PLACEHOLDER,
        chain_id=1,
    ),
    NetworkProfile(
        name="optimistic-local-kovan",
        fork_url="https://optimism-kovan.infura.io/v3/" + INFURA_PLACEHOLDER,
        chain_id=69,
        toolchain="optimistic",
    ),
    NetworkProfile(
        name="optimistic-local-mainnet",
        fork_url="https://optimism-mainnet.infura.io/v3/" + INFURA_PLACEHOLDER,
        chain_id=10,
        toolchain="optimistic",
    ),
)


def get_profile(network: Optional[str],
                profiles: Optional[Dict[str, NetworkProfile]] = None) -> Optional[NetworkProfile]:
    """Look up a profile by exact name. Returns None if absent."""
    table = NETWORK_PROFILES if profiles is None else profiles
    if network is None:
        return None
    return table.get(network)
