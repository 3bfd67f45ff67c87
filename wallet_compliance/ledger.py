"""Result ledger: the append-only store the runner writes to."""

from __future__ import annotations

import json
import logging
from typing import Iterator

from wallet_compliance.models.test_result import TestResult

logger = logging.getLogger(__name__)


class ResultLedger:
    """Newest-first sequence of test results for the current session."""

    def __init__(self) -> None:
        self._results: list[TestResult] = []

    def emit(self, result: TestResult) -> None:
        if not isinstance(result, TestResult):
            raise TypeError(f"Ledger only accepts TestResult, got {type(result).__name__}")
        self._results.insert(0, result)
        logger.debug("Ledger now holds %d results", len(self._results))

    def clear(self) -> None:
        self._results = []

    @property
    def results(self) -> tuple[TestResult, ...]:
        return tuple(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[TestResult]:
        return iter(tuple(self._results))

    def to_records(self) -> list[dict]:
        return [r.model_dump() for r in self._results]

    def export(self) -> str:
        """Serialize the full ordered sequence as a JSON document."""
        return json.dumps(self.to_records(), indent=2, default=str)
