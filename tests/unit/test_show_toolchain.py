#!/usr/bin/env python3
"""
test_show_toolchain.py - devchain-toolchain command-line tests
"""

import pytest
import sys
import yaml
from pathlib import Path

# Add project root to path
_project_root = Path(__file__).parent.parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from devchain.harness.show_toolchain import main


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / "test.env"
    path.write_text("INFURA_KEY=showkey\nOPTIMISM_KOVAN_MNEMONIC=kovan words\n")
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv('INFURA_KEY', raising=False)
    monkeypatch.delenv('OPTIMISM_KOVAN_MNEMONIC', raising=False)


class TestShow:
    """Test rendering toolchains as YAML."""

    def test_default_toolchain(self, env_file, capsys):
        assert main(['--env-file', str(env_file)]) == 0

        data = yaml.safe_load(capsys.readouterr().out)
        assert data['toolchain'] == 'default'
        assert data['compiler']['version'] == '0.8.6'
        assert 'bsc-local-testnet' in data['networks']

    def test_single_network_masked(self, env_file, capsys):
        code = main(['-t', 'optimistic', '-n', 'optimistic-kovan', '--env-file', str(env_file)])

        out = capsys.readouterr().out
        data = yaml.safe_load(out)
        assert code == 0
        assert data['optimistic-kovan']['provider']['url'] == 'https://optimism-kovan.infura.io/v3/****'
        assert 'kovan words' not in out
        assert 'showkey' not in out

    def test_show_secrets(self, env_file, capsys):
        code = main(['-t', 'optimistic', '-n', 'optimistic-kovan', '--show-secrets',
                     '--env-file', str(env_file)])

        data = yaml.safe_load(capsys.readouterr().out)
        assert code == 0
        assert data['optimistic-kovan']['provider']['mnemonic'] == 'kovan words'

    def test_unknown_network(self, env_file, capsys):
        code = main(['-n', 'optimistic-kovan', '--env-file', str(env_file)])

        assert code == 1
        assert "not in toolchain 'default'" in capsys.readouterr().err

    def test_custom_toolchain_file(self, tmp_path, env_file, capsys):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "toolchain: optimistic\n"
            "contracts_directory: ./c\n"
            "contracts_build_directory: ./b\n"
            "compiler:\n  version: '0.7.6'\n"
            "networks:\n  local:\n    host: 127.0.0.1\n    port: 9545\n    network_id: 420\n"
        )

        assert main(['-t', str(path), '--env-file', str(env_file)]) == 0
        assert yaml.safe_load(capsys.readouterr().out)['networks']['local']['port'] == 9545

    def test_malformed_simulator_command(self, env_file, monkeypatch, capsys):
        monkeypatch.setenv('DEVCHAIN_SIMULATOR', "npx 'ganache-cli")

        assert main(['--env-file', str(env_file)]) == 1
        assert 'DEVCHAIN_SIMULATOR is not a valid command line' in capsys.readouterr().err

    def test_missing_toolchain_file(self, tmp_path, capsys):
        assert main(['-t', str(tmp_path / 'none.yaml')]) == 1
        assert 'Toolchain file not found' in capsys.readouterr().err

    def test_invalid_toolchain_file(self, tmp_path, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text("toolchain: default\n")

        assert main(['-t', str(path)]) == 1
        assert 'Invalid toolchain configuration' in capsys.readouterr().err


class TestCheck:
    """Test --check validation."""

    @pytest.mark.parametrize("name", ['default', 'optimistic'])
    def test_builtin_toolchains_pass(self, name, capsys):
        assert main(['-t', name, '--check']) == 0
        assert 'is consistent' in capsys.readouterr().out

    def test_inconsistent_toolchain_fails(self, tmp_path, capsys):
        path = tmp_path / "bad_ids.yaml"
        path.write_text(
            "toolchain: optimistic\n"
            "contracts_directory: ./c\n"
            "contracts_build_directory: ./b\n"
            "compiler:\n  version: '0.7.6'\n"
            "networks:\n"
            "  optimistic-local-kovan:\n    host: 127.0.0.1\n    port: 8545\n    network_id: 10\n"
            "  optimistic-local-mainnet:\n    host: 127.0.0.1\n    port: 8545\n    network_id: 10\n"
        )

        assert main(['-t', str(path), '--check']) == 1
        out = capsys.readouterr().out
        assert '1 error(s)' in out
        assert 'optimistic-local-kovan' in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
