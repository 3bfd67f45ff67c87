"""Session orchestrator: wires config, provider, runner, ledger and reports."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable, Optional

from wallet_compliance.checks.catalog import descriptors_for, resolve
from wallet_compliance.checks.network import network_snapshot
from wallet_compliance.executor.context import ExecutionContext
from wallet_compliance.executor.readonly_suite import ReadOnlySuiteCoordinator
from wallet_compliance.executor.runner import TestRunner
from wallet_compliance.ledger import ResultLedger
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.models.config import ALL_CATEGORIES, HarnessConfig
from wallet_compliance.provider.base import Provider, ProviderError
from wallet_compliance.provider.http import HttpProvider
from wallet_compliance.reporter.reporter import Reporter

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs one harness session against a single provider."""

    def __init__(self, config: HarnessConfig, provider: Optional[Provider] = None):
        self.config = config
        self._provider = provider
        self.ledger = ResultLedger()
        self.reporter = Reporter(config)

    @property
    def provider(self) -> Provider:
        """The session provider, built from config on first use."""
        if self._provider is None:
            self._provider = HttpProvider(
                self.config.rpc_url, timeout=self.config.request_timeout_seconds,
            )
        return self._provider

    def run(
        self,
        categories: Optional[Iterable[str]] = None,
        selectors: Optional[Iterable[str]] = None,
    ) -> dict:
        """Run the selected categories (or ``category:id`` selectors) and write reports."""
        return asyncio.run(self._run_session(self._plan(categories, selectors)))

    def run_readonly(self) -> dict:
        return asyncio.run(self._run_session([("readonly", descriptors_for("readonly"))]))

    def network_info(self) -> dict:
        return asyncio.run(self._network_info())

    def _plan(
        self,
        categories: Optional[Iterable[str]],
        selectors: Optional[Iterable[str]],
    ) -> list[tuple[str, list[TestDescriptor]]]:
        """Group the requested tests by category, in catalog order."""
        selectors = list(selectors or [])
        if selectors:
            chosen = {resolve(s).key for s in selectors}
            order = [c for c in ALL_CATEGORIES if any(k.startswith(f"{c}:") for k in chosen)]
            return [
                (c, [d for d in descriptors_for(c) if d.key in chosen])
                for c in order
            ]
        wanted = list(categories or self.config.categories)
        unknown = [c for c in wanted if c not in ALL_CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")
        return [(c, descriptors_for(c)) for c in ALL_CATEGORIES if c in wanted]

    async def _resolve_account(self) -> str:
        if self.config.account:
            return self.config.account
        accounts = await self.provider.request("eth_requestAccounts", [])
        if not accounts:
            raise ProviderError("Wallet returned no accounts", code=4100)
        logger.info("Connected account %s", accounts[0])
        return accounts[0]

    async def _run_session(self, plan: list[tuple[str, list[TestDescriptor]]]) -> dict:
        start = time.time()
        try:
            account = await self._resolve_account()
            context = ExecutionContext(self.provider, account, self.config)
            runner = TestRunner(context, self.ledger)
            coordinator = ReadOnlySuiteCoordinator(runner, self.config.readonly_spacing_seconds)

            logger.info("=== Starting session for %s (%d categories) ===", account, len(plan))
            for category, descriptors in plan:
                if not descriptors:
                    continue
                if category == "readonly":
                    await coordinator.run(descriptors)
                else:
                    await runner.run_suite(descriptors, name=category)

            await context.lifecycle.drain()
            for handle in context.lifecycle.open_handles():
                logger.warning("Unreleased %s %s", handle.kind, handle.resource_id)
        finally:
            await self.provider.close()

        reports = self.reporter.generate_reports(self.ledger)
        duration = time.time() - start
        logger.info("=== Session complete in %.1fs ===", duration)

        records = [r for r in self.ledger if r.test != "Summary"]
        return {
            "account": account,
            "duration": round(duration, 2),
            "results": {
                "total": len(records),
                "passed": sum(1 for r in records if r.status != "error"),
                "failed": sum(1 for r in records if r.status == "error"),
                "warnings": sum(1 for r in records if r.status == "warning"),
            },
            "summary": self.reporter.basic_summary(self.ledger),
            "reports": reports,
        }

    async def _network_info(self) -> dict:
        try:
            account = await self._resolve_account()
            return await network_snapshot(self.provider, account)
        finally:
            await self.provider.close()
