"""Client-side rate limit bookkeeping driven by API response headers."""

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping

from ..config import (
    PLACEHOLDER_REMAINING,
    PLACEHOLDER_WINDOW,
    RATE_LIMIT_HEADERS,
    RESET_BUFFER,
)

logger = logging.getLogger(__name__)


@dataclass
class RateLimitState:
    """Last known rate limit counters. ``reset_at`` is a POSIX timestamp."""

    remaining: int
    reset_at: float
    limit: int | None = None
    scope: str | None = None


class RateLimitTracker:
    """
    Advisory rate limiter fed by ``X-Rate-Limit-*`` response headers.

    The API's own 429 response stays authoritative; this only avoids
    submitting when the last response said the budget is spent.

    Usage:
        tracker = RateLimitTracker()
        tracker.before_request()  # Sleeps until reset if exhausted
        response = client.post(...)
        tracker.after_response(response.headers)
    """

    def __init__(
        self,
        state: RateLimitState | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
        buffer: float = RESET_BUFFER,
    ):
        """
        Initialize tracker.

        Args:
            state: Initial state. Defaults to one request left, resetting in a minute.
            sleep: Function used to suspend. Tests inject a recorder.
            clock: Function returning the current POSIX time.
            buffer: Seconds to wait past the advertised reset.
        """
        self.sleep = sleep
        self.clock = clock
        self.buffer = buffer
        self.state = state or RateLimitState(
            remaining=PLACEHOLDER_REMAINING,
            reset_at=clock() + PLACEHOLDER_WINDOW,
        )
        self.has_live_counters = state is not None

    def before_request(self) -> float:
        """
        Wait for the reset if the budget is exhausted.

        Returns:
            Time waited in seconds (0 if no wait was needed).
        """
        if not self.exhausted:
            return 0.0

        wait_time = self.state.reset_at - self.clock() + self.buffer
        logger.warning(
            "Rate limit reached, waiting %d minute(s) for reset",
            math.ceil(wait_time / 60),
        )
        self.sleep(wait_time)

        # Real budget is only known after the next response
        self.state.remaining = PLACEHOLDER_REMAINING
        self.state.reset_at = self.clock() + PLACEHOLDER_WINDOW
        return wait_time

    def after_response(self, headers: Mapping[str, str]) -> None:
        """Update state from response headers. Missing headers change nothing."""
        remaining = _parse_int(headers.get(RATE_LIMIT_HEADERS["remaining"]))
        reset_at = _parse_reset(headers.get(RATE_LIMIT_HEADERS["reset"]))
        limit = _parse_int(headers.get(RATE_LIMIT_HEADERS["limit"]))
        scope = headers.get(RATE_LIMIT_HEADERS["scope"])

        if remaining is not None:
            self.state.remaining = remaining
            self.has_live_counters = True
        if reset_at is not None:
            self.state.reset_at = reset_at
        if limit is not None:
            self.state.limit = limit
        if scope:
            self.state.scope = scope

        if remaining is not None:
            logger.debug(
                "Rate limit: %s remaining (limit %s, scope %s)",
                self.state.remaining, self.state.limit, self.state.scope,
            )

    def seed(self, remaining: int, reset_at: float) -> bool:
        """
        Seed counters from the quota endpoint.

        Ignored once a response has provided live counters.

        Returns:
            True if the state was seeded.
        """
        if self.has_live_counters:
            return False
        self.state.remaining = remaining
        self.state.reset_at = reset_at
        return True

    @property
    def exhausted(self) -> bool:
        return self.state.remaining <= 0 and self.state.reset_at > self.clock()


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.debug("Ignoring unparsable rate limit value: %r", value)
        return None


def _parse_reset(value: str | None) -> float | None:
    """Parse a reset header given as epoch seconds or an ISO-8601 timestamp."""
    if value is None:
        return None
    value = value.strip()
    try:
        return float(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except ValueError:
        logger.debug("Ignoring unparsable rate limit reset: %r", value)
        return None
