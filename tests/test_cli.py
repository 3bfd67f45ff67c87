"""Tests for the click CLI."""

import json
from unittest.mock import patch

from click.testing import CliRunner

from wallet_compliance.cli import DEFAULT_CONFIG, cli
from wallet_compliance.models.config import HarnessConfig
from wallet_compliance.provider.base import ProviderError


def _session_results(**overrides):
    results = {
        "account": "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
        "duration": 1.5,
        "results": {"total": 2, "passed": 2, "failed": 0, "warnings": 0},
        "summary": "Ran 2 tests. Results: 2 passed (0 with warnings), 0 failed.",
        "reports": {"json": "wallet-reports/wallet-test-results-1.json"},
    }
    results.update(overrides)
    return results


class TestInit:
    """Tests for `init`."""

    def test_creates_config(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init", "--rpc-url", "http://127.0.0.1:8545"])

            assert result.exit_code == 0, result.output
            config = HarnessConfig.load(DEFAULT_CONFIG)
            assert config.rpc_url == "http://127.0.0.1:8545"

    def test_saved_with_camel_case_chain_fields(self):
        """Test chain specs are written the way the wallet expects them."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            runner.invoke(cli, ["init", "--rpc-url", "http://127.0.0.1:8545"])
            with open(DEFAULT_CONFIG) as f:
                data = json.load(f)
            assert data["switch_chain"]["chainId"] == "0xaa36a7"
            assert data["add_chain"]["chainName"] == "Polygon Mainnet"

    def test_keeps_existing_without_confirmation(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open(DEFAULT_CONFIG, "w") as f:
                f.write("{}")
            result = runner.invoke(cli, ["init", "--rpc-url", "http://x"], input="n\n")
            assert result.exit_code == 0
            with open(DEFAULT_CONFIG) as f:
                assert f.read() == "{}"


class TestList:
    """Tests for `list`."""

    def test_list_all(self):
        result = CliRunner().invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "Test Catalog" in result.output

    def test_unknown_category_rejected(self):
        result = CliRunner().invoke(cli, ["list", "--category", "nft"])
        assert result.exit_code != 0


class TestRun:
    """Tests for `run` and `readonly`."""

    def test_missing_config_exits(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["run", "-c", "missing.json"])
            assert result.exit_code == 1
            assert "Config file not found" in result.output

    def test_invalid_config_exits(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open("bad.json", "w") as f:
                json.dump({"readonly_spacing_seconds": 0.01}, f)
            result = runner.invoke(cli, ["run", "-c", "bad.json"])
            assert result.exit_code == 1
            assert "Invalid config" in result.output

    def test_run_passes_selection(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            HarnessConfig().save(DEFAULT_CONFIG)
            with patch("wallet_compliance.cli.Orchestrator") as orchestrator_cls:
                orchestrator_cls.return_value.run.return_value = _session_results()
                result = runner.invoke(
                    cli, ["run", "--category", "eth", "-t", "readonly:eth_chainId"],
                )

            assert result.exit_code == 0, result.output
            orchestrator_cls.return_value.run.assert_called_once_with(
                categories=("eth",), selectors=("readonly:eth_chainId",),
            )
            assert "Session Complete" in result.output

    def test_unknown_selector_exits(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            HarnessConfig().save(DEFAULT_CONFIG)
            with patch("wallet_compliance.cli.Orchestrator") as orchestrator_cls:
                orchestrator_cls.return_value.run.side_effect = KeyError("Unknown test: eth:nope")
                result = runner.invoke(cli, ["run", "-t", "eth:nope"])
            assert result.exit_code == 1
            assert "Unknown test: eth:nope" in result.output

    def test_readonly_provider_error_exits(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            HarnessConfig().save(DEFAULT_CONFIG)
            with patch("wallet_compliance.cli.Orchestrator") as orchestrator_cls:
                orchestrator_cls.return_value.run_readonly.side_effect = ProviderError(
                    "Wallet returned no accounts", code=4100,
                )
                result = runner.invoke(cli, ["readonly"])
            assert result.exit_code == 1
            assert "Wallet returned no accounts" in result.output


class TestInfo:
    """Tests for `info`."""

    def test_prints_snapshot(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            HarnessConfig().save(DEFAULT_CONFIG)
            with patch("wallet_compliance.cli.Orchestrator") as orchestrator_cls:
                orchestrator_cls.return_value.network_info.return_value = {
                    "chainId": "11155111", "name": "sepolia", "nonce": 5,
                }
                result = runner.invoke(cli, ["info"])
            assert result.exit_code == 0, result.output
            assert "sepolia" in result.output
            assert "11155111" in result.output
