"""Utility modules for urlscan-submitter."""

from .rate_limiter import RateLimitState, RateLimitTracker
from .batch_runner import run_batch

__all__ = ["RateLimitState", "RateLimitTracker", "run_batch"]
