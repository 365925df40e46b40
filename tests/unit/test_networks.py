#!/usr/bin/env python3
"""
test_networks.py - Fork network profile table tests
"""

import pytest
import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

# Add project root to path
_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from devchain.config.networks import NETWORK_PROFILES, NetworkProfile, get_profile


class TestProfileTable:
    """Test the static network table."""

    def test_six_supported_networks(self):
        """Test exactly the six supported networks are present."""
        assert set(NETWORK_PROFILES) == {
            'bsc-local-testnet',
            'bsc-local-mainnet',
            'eth-local-ropsten',
            'eth-local-mainnet',
            'optimistic-local-kovan',
            'optimistic-local-mainnet',
        }

    @pytest.mark.parametrize("name,chain_id", [
        ('bsc-local-testnet', 97),
        ('bsc-local-mainnet', 56),
        ('eth-local-ropsten', 3),
        ('eth-local-mainnet', 1),
        ('optimistic-local-kovan', 69),
        ('optimistic-local-mainnet', 10),
    ])
    def test_chain_ids(self, name, chain_id):
        assert NETWORK_PROFILES[name].chain_id == chain_id

    def test_keys_match_profile_names(self):
        for name, profile in NETWORK_PROFILES.items():
            assert profile.name == name

    def test_bsc_profiles_need_no_key(self):
        """Test BSC endpoints are public."""
        assert not NETWORK_PROFILES['bsc-local-testnet'].needs_infura_key
        assert not NETWORK_PROFILES['bsc-local-mainnet'].needs_infura_key

    def test_optimistic_profiles_use_optimistic_toolchain(self):
        assert NETWORK_PROFILES['optimistic-local-kovan'].toolchain == "optimistic"
        assert NETWORK_PROFILES['optimistic-local-mainnet'].toolchain == "optimistic"
        assert NETWORK_PROFILES['eth-local-mainnet'].toolchain == "default"


class TestProfileLookup:
    """Test exact-match lookup."""

    def test_lookup_exact_name(self):
        assert get_profile('bsc-local-mainnet') is NETWORK_PROFILES['bsc-local-mainnet']

    @pytest.mark.parametrize("name", ['BSC-LOCAL-TESTNET', 'bsc-local-testnet ', 'bsc', '', None])
    def test_lookup_is_exact(self, name):
        """Test near-misses and None are not resolved."""
        assert get_profile(name) is None

    def test_lookup_custom_table(self):
        table = {'x': NetworkProfile(name='x', fork_url='http://x', chain_id=7)}
        assert get_profile('x', table).chain_id == 7
        assert get_profile('bsc-local-testnet', table) is None


class TestForkUrl:
    """Test hosted-RPC key substitution."""

    def test_key_substituted(self):
        profile = NETWORK_PROFILES['eth-local-mainnet']
        assert profile.resolve_fork_url("abc123") == "https://mainnet.infura.io/v3/abc123"

    def test_public_url_unchanged(self):
        profile = NETWORK_PROFILES['bsc-local-testnet']
        assert profile.resolve_fork_url(None) == "https://data-seed-prebsc-1-s1.binance.org:8545/"

    def test_missing_key_raises(self):
        with pytest.raises(ValueError, match="hosted-RPC key"):
            NETWORK_PROFILES['optimistic-local-kovan'].resolve_fork_url(None)


class TestProfileValidation:
    """Test NetworkProfile field validation."""

    def test_profile_is_immutable(self):
        profile = NETWORK_PROFILES['bsc-local-testnet']
        with pytest.raises(FrozenInstanceError):
            profile.chain_id = 1

    def test_non_positive_chain_id_rejected(self):
        with pytest.raises(ValueError, match="chain_id must be positive"):
            NetworkProfile(name='bad', fork_url='http://x', chain_id=0)

    def test_unknown_toolchain_rejected(self):
        with pytest.raises(ValueError, match="toolchain must be"):
            NetworkProfile(name='bad', fork_url='http://x', chain_id=5, toolchain='zk')


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
