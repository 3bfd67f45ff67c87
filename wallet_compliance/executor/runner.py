"""Test runner: executes catalog descriptors and emits results to the ledger."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, Optional

from wallet_compliance.checks import eth, network, readonly, signature, transaction, wallet
from wallet_compliance.ledger import ResultLedger
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.models.test_result import SuiteSummary, TestResult

from .context import CheckOutcome, ExecutionContext, error_message

logger = logging.getLogger(__name__)


async def interpret(descriptor: TestDescriptor, ctx: ExecutionContext) -> CheckOutcome:
    """Dispatch a descriptor to its category interpreter."""
    match descriptor.category:
        case "wallet":
            return await wallet.run_wallet_check(descriptor, ctx)
        case "eth":
            return await eth.run_eth_check(descriptor, ctx)
        case "signature":
            return await signature.run_signature_check(descriptor, ctx)
        case "transaction":
            return await transaction.run_transaction_check(descriptor, ctx)
        case "readonly":
            return await readonly.run_readonly_check(descriptor, ctx)
        case "network":
            return await network.run_network_check(descriptor, ctx)
        case _:
            raise ValueError(f"Unknown category: {descriptor.category}")


class TestRunner:
    """Runs descriptors one at a time and records exactly one result per run."""

    def __init__(self, context: ExecutionContext, ledger: ResultLedger):
        self.context = context
        self.ledger = ledger

    async def run(self, descriptor: TestDescriptor) -> TestResult:
        """Execute one descriptor. Never raises for provider or check failures."""
        start = time.time()
        logger.debug("Running %s (%s)", descriptor.key, descriptor.method)
        try:
            outcome = await interpret(descriptor, self.context)
            result = TestResult(
                category=descriptor.category,
                test=outcome.test_name or descriptor.label,
                status=outcome.status,
                message=outcome.message or descriptor.fallback_message,
                data=outcome.data,
            )
        except Exception as e:
            logger.debug("%s raised %s: %s", descriptor.key, type(e).__name__, e)
            result = TestResult(
                category=descriptor.category,
                test=descriptor.label,
                status="error",
                message=error_message(e, descriptor.fallback_message),
            )

        self.ledger.emit(result)
        logger.info("[%s] %s/%s: %s (%.1fs)",
                    result.status.upper(), result.category, result.test,
                    result.message, time.time() - start)
        return result

    async def trigger(self, descriptor: TestDescriptor) -> Optional[TestResult]:
        """Interactive single-test entry point; a no-op while another test is in flight."""
        if not self.context.claim(descriptor.key):
            logger.warning("Ignoring %s: %s is still running",
                           descriptor.key, self.context.active_test)
            return None
        try:
            return await self.run(descriptor)
        finally:
            self.context.release(descriptor.key)

    async def run_suite(
        self,
        descriptors: Iterable[TestDescriptor],
        name: str | None = None,
        pause: float = 0.0,
    ) -> list[TestResult]:
        """Run descriptors strictly in order, then emit a Summary record.

        Each call is awaited to completion before the next starts; ``pause``
        seconds are slept between calls. Returns an empty list if another
        test is in flight.
        """
        descriptors = list(descriptors)
        key = f"suite:{name or 'all'}"
        if not self.context.claim(key):
            logger.warning("Ignoring suite %s: %s is still running", key, self.context.active_test)
            return []
        try:
            return await self._run_sequence(descriptors, name, pause)
        finally:
            self.context.release(key)

    async def _run_sequence(
        self, descriptors: list[TestDescriptor], name: str | None, pause: float,
    ) -> list[TestResult]:
        logger.info("Starting suite %s (%d tests)", name or "all", len(descriptors))
        results = []
        for index, descriptor in enumerate(descriptors):
            if index and pause:
                await asyncio.sleep(pause)
            results.append(await self.run(descriptor))
        results.append(self._emit_summary(results, descriptors, name))
        return results

    def _emit_summary(
        self,
        results: list[TestResult],
        descriptors: list[TestDescriptor],
        name: str | None,
    ) -> TestResult:
        summary = SuiteSummary.from_results(results)
        categories = {d.category for d in descriptors}
        category = categories.pop() if len(categories) == 1 else (name or "suite")
        record = TestResult(
            category=category,
            test="Summary",
            status=summary.status,
            message=summary.message,
            data=summary.model_dump(),
        )
        self.ledger.emit(record)
        logger.info("Suite %s complete: %d passed, %d failed (%d warnings)",
                    name or category, summary.passed, summary.failed, summary.warnings)
        return record
