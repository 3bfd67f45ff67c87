"""JSON report output."""

from __future__ import annotations

from pathlib import Path

from wallet_compliance.ledger import ResultLedger
from wallet_compliance.models.test_result import now_ms


def report_filename(timestamp_ms: int | None = None) -> str:
    return f"wallet-test-results-{timestamp_ms if timestamp_ms is not None else now_ms()}.json"


def generate_json_report(ledger: ResultLedger, output_path: Path) -> None:
    """Write the ledger export: a list of records, newest first."""
    with open(output_path, "w") as f:
        f.write(ledger.export())
