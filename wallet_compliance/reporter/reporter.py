"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from wallet_compliance.ledger import ResultLedger
from wallet_compliance.models.config import HarnessConfig

from .json_report import generate_json_report, report_filename

logger = logging.getLogger(__name__)


class Reporter:
    """Generates reports from the result ledger."""

    def __init__(self, config: HarnessConfig):
        self.config = config

    def generate_reports(
        self,
        ledger: ResultLedger,
        output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        generated = {}
        logger.debug("Report output directory: %s", out_dir)

        if "json" in self.config.report_formats:
            path = out_dir / report_filename()
            generate_json_report(ledger, path)
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        unknown = set(self.config.report_formats) - {"json"}
        if unknown:
            logger.warning("Skipping unsupported report formats: %s", ", ".join(sorted(unknown)))

        return generated

    def basic_summary(self, ledger: ResultLedger) -> str:
        """One-paragraph plain-text summary of the non-summary records."""
        records = [r for r in ledger if r.test != "Summary"]
        errors = [r for r in records if r.status == "error"]
        warnings = [r for r in records if r.status == "warning"]
        parts = [
            f"Ran {len(records)} tests.",
            f"Results: {len(records) - len(errors)} passed "
            f"({len(warnings)} with warnings), {len(errors)} failed.",
        ]
        if errors:
            parts.append(
                f"Failures: {', '.join(f'{r.category}/{r.test}' for r in errors[:5])}"
            )
        return " ".join(parts)
