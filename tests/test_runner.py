"""Tests for the test runner: dispatch, emission, suites, single in-flight test."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from wallet_compliance.checks.catalog import descriptors_for, get_descriptor
from wallet_compliance.executor.context import CheckOutcome, ExecutionContext
from wallet_compliance.executor.runner import TestRunner
from wallet_compliance.ledger import ResultLedger
from wallet_compliance.models.catalog import TestDescriptor


def _make_descriptor(test_id="accounts", category="eth", method="eth_accounts", **kwargs) -> TestDescriptor:
    return TestDescriptor(test_id=test_id, name=test_id, category=category, method=method, **kwargs)


class TestRun:
    """Tests for TestRunner.run."""

    @pytest.mark.asyncio
    async def test_success_emits_one_record(self, runner, ledger, test_account):
        """Test a successful check produces exactly one ledger record."""
        result = await runner.run(get_descriptor("eth", "accounts"))

        assert len(ledger) == 1
        assert ledger.results[0] is result
        assert result.category == "eth"
        assert result.test == "eth_accounts"
        assert result.status == "success"
        assert result.message == "Found 1 account(s)"
        assert result.data == [test_account.address]

    @pytest.mark.asyncio
    async def test_rejection_becomes_error(self, runner, ledger, fake_provider):
        """Test a provider rejection is recorded with its message."""
        fake_provider.fail("eth_accounts", "Unauthorized", code=4100)

        result = await runner.run(get_descriptor("eth", "accounts"))

        assert result.status == "error"
        assert result.message == "Unauthorized"
        assert len(ledger) == 1

    @pytest.mark.asyncio
    async def test_empty_error_uses_fallback(self, runner, fake_provider):
        """Test a rejection with no message uses the descriptor's fallback."""
        fake_provider.fail("wallet_revokePermissions", "")
        result = await runner.run(get_descriptor("wallet", "revokePermissions"))
        assert result.status == "error"
        assert result.message == "Method may not be supported"

    @pytest.mark.asyncio
    async def test_error_uses_display_name(self, runner, fake_provider):
        """Test error records carry the same test name as success records."""
        fake_provider.fail("eth_sign", "method not found", code=-32601)
        result = await runner.run(get_descriptor("signature", "eth_sign"))
        assert result.test == "eth_sign (Deprecated)"

    @pytest.mark.asyncio
    async def test_outcome_name_overrides_label(self, runner):
        """Test an interpreter-chosen test name is used for the record."""
        outcome = CheckOutcome("success", "added", test_name="Add Network")
        with patch("wallet_compliance.executor.runner.interpret", AsyncMock(return_value=outcome)):
            result = await runner.run(_make_descriptor())
        assert result.test == "Add Network"

    @pytest.mark.asyncio
    async def test_no_retries(self, runner, fake_provider):
        """Test a failed call is attempted once."""
        fake_provider.fail("eth_chainId", "boom")
        await runner.run(get_descriptor("readonly", "eth_chainId"))
        assert fake_provider.methods().count("eth_chainId") == 1


class TestTrigger:
    """Tests for the single in-flight test rule."""

    @pytest.mark.asyncio
    async def test_trigger_runs_when_idle(self, runner, ledger, context):
        result = await runner.trigger(get_descriptor("eth", "accounts"))
        assert result is not None
        assert not context.busy
        assert len(ledger) == 1

    @pytest.mark.asyncio
    async def test_trigger_while_busy_is_noop(self, runner, ledger, fake_provider):
        """Test a second trigger during an in-flight test does nothing."""
        gate = asyncio.Event()

        async def slow_accounts(params):
            await gate.wait()
            return ["0x1"]

        slow = AsyncMock(side_effect=slow_accounts)

        original_request = fake_provider.request

        async def request(method, params=None):
            if method == "eth_accounts":
                fake_provider.calls.append((method, params))
                return await slow(params)
            return await original_request(method, params)

        fake_provider.request = request

        first = asyncio.create_task(runner.trigger(get_descriptor("eth", "accounts")))
        await asyncio.sleep(0)
        assert runner.context.status_of("eth:accounts") == "pending"

        second = await runner.trigger(get_descriptor("readonly", "eth_chainId"))

        assert second is None
        assert "eth_chainId" not in fake_provider.methods()

        gate.set()
        result = await first
        assert result.status == "success"
        assert len(ledger) == 1
        assert runner.context.status_of("eth:accounts") is None

    @pytest.mark.asyncio
    async def test_trigger_released_after_failure(self, runner, context, fake_provider):
        fake_provider.fail("eth_accounts", "nope")
        await runner.trigger(get_descriptor("eth", "accounts"))
        assert not context.busy


class TestRunSuite:
    """Tests for sequential suites and their summary."""

    @pytest.mark.asyncio
    async def test_n_plus_one_records(self, runner, ledger):
        """Test a suite emits one record per test plus a summary."""
        descriptors = descriptors_for("network")
        results = await runner.run_suite(descriptors, name="network")

        assert len(results) == len(descriptors) + 1
        assert len(ledger) == len(descriptors) + 1
        summary = results[-1]
        assert summary.test == "Summary"
        assert summary.category == "network"
        assert ledger.results[0] is summary

    @pytest.mark.asyncio
    async def test_summary_counts_errors(self, runner, fake_provider):
        """Test failures downgrade the summary and are counted."""
        fake_provider.fail("eth_chainId", "down")
        fake_provider.fail("eth_gasPrice", "down")
        descriptors = descriptors_for("readonly")[:4]

        results = await runner.run_suite(descriptors, name="readonly")

        summary = results[-1]
        assert summary.status == "warning"
        assert summary.message == "Tests completed: 2 passed, 2 failed out of 4 total"
        assert summary.data == {"total": 4, "passed": 2, "failed": 2, "warnings": 0}

    @pytest.mark.asyncio
    async def test_mixed_categories_use_suite_name(self, runner):
        descriptors = [get_descriptor("eth", "accounts"), get_descriptor("readonly", "eth_chainId")]
        results = await runner.run_suite(descriptors, name="smoke")
        assert results[-1].category == "smoke"

    @pytest.mark.asyncio
    async def test_suite_while_busy_returns_empty(self, runner, context, ledger):
        assert context.claim("eth:accounts")
        results = await runner.run_suite(descriptors_for("network"), name="network")
        assert results == []
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_sequential_order(self, runner, fake_provider):
        """Test descriptors run strictly in the given order."""
        descriptors = [
            get_descriptor("readonly", "eth_blockNumber"),
            get_descriptor("readonly", "eth_chainId"),
            get_descriptor("readonly", "eth_gasPrice"),
        ]
        await runner.run_suite(descriptors)
        assert fake_provider.methods() == ["eth_blockNumber", "eth_chainId", "eth_gasPrice"]


class TestUnknownDispatch:
    """Tests for defensive dispatch errors."""

    @pytest.mark.asyncio
    async def test_unknown_test_id_is_error_record(self, fake_provider, test_account):
        ledger = ResultLedger()
        runner = TestRunner(ExecutionContext(fake_provider, test_account.address), ledger)
        result = await runner.run(_make_descriptor(test_id="doesNotExist"))
        assert result.status == "error"
        assert "doesNotExist" in result.message
