"""CSV export for scan results."""

import csv
from pathlib import Path

from ..api.models import ScanResult

FIELDNAMES = [
    "url",
    "status",
    "report_url",
    "job_id",
    "tags",
    "visibility",
    "error",
    "timestamp",
]


def export_to_csv(results: list[ScanResult], output_path: str) -> None:
    """
    Export scan results to CSV.

    Args:
        results: List of scan results
        output_path: Path to output CSV file
    """
    if not results:
        return

    rows = [_result_to_row(result) for result in results]

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=FIELDNAMES)
        writer.writeheader()
        writer.writerows(rows)


def _result_to_row(result: ScanResult) -> dict:
    """Convert a scan result to a CSV row."""
    return {
        "url": result.url,
        "status": "SUCCESS" if result.success else "FAILED",
        "report_url": result.report_url or "N/A",
        "job_id": result.job_id or "N/A",
        "tags": "; ".join(result.tags),
        "visibility": result.visibility.value,
        "error": result.error or "",
        "timestamp": result.timestamp.isoformat(),
    }
