"""Read-only suite coordinator: paced, strictly sequential run of the idempotent catalog."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from wallet_compliance.checks.catalog import descriptors_for
from wallet_compliance.models.catalog import TestDescriptor
from wallet_compliance.models.test_result import TestResult

from .runner import TestRunner

logger = logging.getLogger(__name__)

# Floor for the gap between read-only calls
MIN_SPACING_SECONDS = 0.1


class ReadOnlySuiteCoordinator:
    """Runs read-only descriptors one after another with a fixed gap."""

    def __init__(self, runner: TestRunner, spacing: float = MIN_SPACING_SECONDS):
        if spacing < MIN_SPACING_SECONDS:
            logger.debug("Spacing %.3fs raised to %.1fs", spacing, MIN_SPACING_SECONDS)
        self.runner = runner
        self.spacing = max(spacing, MIN_SPACING_SECONDS)

    async def run(
        self, descriptors: Optional[Iterable[TestDescriptor]] = None,
    ) -> list[TestResult]:
        """Run the suite; returns N results followed by the Summary record."""
        if descriptors is None:
            descriptors = descriptors_for("readonly")
        return await self.runner.run_suite(descriptors, name="readonly", pause=self.spacing)
