"""Tests for the paced read-only suite."""

from unittest.mock import AsyncMock, patch

import pytest

from wallet_compliance.checks.catalog import descriptors_for, get_descriptor
from wallet_compliance.executor.readonly_suite import MIN_SPACING_SECONDS, ReadOnlySuiteCoordinator


class TestReadOnlySuiteCoordinator:
    """Tests for ReadOnlySuiteCoordinator."""

    def test_spacing_floor(self, runner):
        """Test spacing below 100 ms is raised to the minimum."""
        assert ReadOnlySuiteCoordinator(runner, spacing=0).spacing == MIN_SPACING_SECONDS
        assert ReadOnlySuiteCoordinator(runner, spacing=0.5).spacing == 0.5

    @pytest.mark.asyncio
    async def test_full_suite(self, runner, ledger, fake_provider):
        """Test every read-only test runs once, in catalog order, then a summary."""
        sleep = AsyncMock()
        with patch("wallet_compliance.executor.runner.asyncio.sleep", sleep):
            results = await ReadOnlySuiteCoordinator(runner).run()

        descriptors = descriptors_for("readonly")
        assert len(descriptors) == 27
        assert [r.test for r in results[:-1]] == [d.method for d in descriptors]
        assert all(r.status == "success" for r in results[:-1])

        summary = results[-1]
        assert summary.category == "readonly"
        assert summary.status == "success"
        assert summary.message == "Tests completed: 27 passed, 0 failed out of 27 total"
        assert len(ledger) == 28

        # gaps between calls only
        assert sleep.await_count == 26
        sleep.assert_awaited_with(MIN_SPACING_SECONDS)

    @pytest.mark.asyncio
    async def test_filters_are_released(self, runner, context, fake_provider):
        """Test filter and subscription entries leave nothing installed."""
        with patch("wallet_compliance.executor.runner.asyncio.sleep", AsyncMock()):
            await ReadOnlySuiteCoordinator(runner).run()

        methods = fake_provider.methods()
        created = sum(methods.count(m) for m in ("eth_newFilter", "eth_newBlockFilter"))
        assert created == methods.count("eth_uninstallFilter")
        assert methods.count("eth_subscribe") == methods.count("eth_unsubscribe") == 1
        assert context.lifecycle.open_handles() == []

    @pytest.mark.asyncio
    async def test_failure_messages(self, runner, fake_provider):
        """Test failures read as '<name> failed: <reason>' and do not stop the suite."""
        fake_provider.fail("eth_coinbase", "method not supported", code=-32601)
        subset = [
            get_descriptor("readonly", "eth_coinbase"),
            get_descriptor("readonly", "web3_clientVersion"),
        ]
        with patch("wallet_compliance.executor.runner.asyncio.sleep", AsyncMock()):
            results = await ReadOnlySuiteCoordinator(runner).run(subset)

        assert results[0].status == "error"
        assert results[0].message == "Coinbase failed: method not supported"
        assert results[1].status == "success"
        assert results[1].message == "Client Version passed"
        assert results[1].data == "FakeWallet/v1.0.0"
        assert results[-1].message == "Tests completed: 1 passed, 1 failed out of 2 total"

    @pytest.mark.asyncio
    async def test_unsubscribe_unsupported(self, runner, fake_provider):
        fake_provider.fail("eth_subscribe", "notifications not supported", code=-32601)
        with patch("wallet_compliance.executor.runner.asyncio.sleep", AsyncMock()):
            results = await ReadOnlySuiteCoordinator(runner).run(
                [get_descriptor("readonly", "eth_unsubscribe")]
            )
        assert results[0].message == "Unsubscribe failed: Subscriptions not supported"

    @pytest.mark.asyncio
    async def test_block_hash_methods_use_latest_hash(self, runner, fake_provider):
        block_hash = fake_provider.responses["eth_getBlockByNumber"]["hash"]
        with patch("wallet_compliance.executor.runner.asyncio.sleep", AsyncMock()):
            await ReadOnlySuiteCoordinator(runner).run(
                [get_descriptor("readonly", "eth_getTransactionByBlockHashAndIndex")]
            )
        assert fake_provider.params_for("eth_getTransactionByBlockHashAndIndex") == [
            [block_hash, "0x0"]
        ]
