"""urlscan.io API client, poller and quota reporting."""

from .client import UrlscanClient
from .errors import (
    ScanError,
    AuthError,
    MissingCredentialError,
    ValidationError,
    QuotaError,
    RateLimitError,
    ExpiredError,
    PollTimeoutError,
    ApiError,
)
from .models import Visibility, ScanRequest, ScanJob, ScanResult
from .poller import PollState, ResultPoller, transition
from .quotas import calculate_usage, parse_quotas, get_quota_report, seed_tracker

__all__ = [
    "UrlscanClient",
    "ScanError",
    "AuthError",
    "MissingCredentialError",
    "ValidationError",
    "QuotaError",
    "RateLimitError",
    "ExpiredError",
    "PollTimeoutError",
    "ApiError",
    "Visibility",
    "ScanRequest",
    "ScanJob",
    "ScanResult",
    "PollState",
    "ResultPoller",
    "transition",
    "calculate_usage",
    "parse_quotas",
    "get_quota_report",
    "seed_tracker",
]
