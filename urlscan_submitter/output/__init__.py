"""Output formatting modules."""

from .formatters import (
    format_scan_result,
    format_batch_plan,
    format_batch_summary,
    format_quota_report,
    format_rate_limit_status,
    format_json,
    format_bytes,
    format_log_stats,
    format_option_files,
)
from .csv_export import export_to_csv

__all__ = [
    "format_scan_result",
    "format_batch_plan",
    "format_batch_summary",
    "format_quota_report",
    "format_rate_limit_status",
    "format_json",
    "format_bytes",
    "format_log_stats",
    "format_option_files",
    "export_to_csv",
]
