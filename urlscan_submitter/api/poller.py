"""Result polling modeled as a small state machine."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import httpx

from ..config import (
    MAX_POLL_RATE_LIMIT_WAITS,
    MAX_POLLING_ATTEMPTS,
    POLLING_INTERVAL,
    PROGRESS_EVERY,
    RATE_LIMIT_COOLDOWN,
)
from .client import UrlscanClient
from .errors import ApiError, ExpiredError, PollTimeoutError, RateLimitError
from .models import ScanJob, ScanRequest, ScanResult

logger = logging.getLogger(__name__)


class PollState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    EXPIRED = "expired"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class Transition:
    state: PollState
    # 429: wait and repeat the attempt without using up a slot
    retry_same_attempt: bool = False


def transition(status_code: int | None, attempt: int, max_attempts: int) -> Transition:
    """
    Decide the next poll state from one attempt's outcome.

    Args:
        status_code: HTTP status, or None for a transport failure.
        attempt: 1-based attempt index.
        max_attempts: Attempt budget.
    """
    if status_code == 200:
        return Transition(PollState.READY)
    if status_code == 410:
        return Transition(PollState.EXPIRED)
    if status_code == 429:
        return Transition(PollState.PENDING, retry_same_attempt=True)
    if attempt >= max_attempts:
        return Transition(PollState.TIMED_OUT)
    return Transition(PollState.PENDING)


class ResultPoller:
    """
    Poll the result endpoint until the scan is ready.

    Usage:
        poller = ResultPoller(client)
        result = poller.poll(job.id, api_key)
    """

    def __init__(
        self,
        client: UrlscanClient,
        interval: float = POLLING_INTERVAL,
        max_attempts: int = MAX_POLLING_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
        cooldown: float = RATE_LIMIT_COOLDOWN,
        max_rate_limit_waits: int = MAX_POLL_RATE_LIMIT_WAITS,
    ):
        self.client = client
        self.interval = interval
        self.max_attempts = max_attempts
        self.sleep = sleep
        self.cooldown = cooldown
        self.max_rate_limit_waits = max_rate_limit_waits

    def poll(
        self,
        job_id: str,
        api_key: str,
        interval: float | None = None,
        max_attempts: int | None = None,
        job: ScanJob | None = None,
        request: ScanRequest | None = None,
    ) -> ScanResult:
        """
        Wait for a job's result.

        Sleeps ``interval`` before every attempt, including the first.

        Raises:
            ExpiredError: The API answered 410.
            PollTimeoutError: No result after ``max_attempts`` attempts.
            RateLimitError: More consecutive 429s than ``max_rate_limit_waits``.
        """
        interval = self.interval if interval is None else interval
        max_attempts = self.max_attempts if max_attempts is None else max_attempts
        job = job or ScanJob(id=job_id, url=request.url if request else "")
        url = job.url or None

        logger.info("Waiting for result of job %s", job_id)

        attempt = 1
        rate_limit_waits = 0
        last_failure = None

        while attempt <= max_attempts:
            self.sleep(interval)

            response = None
            try:
                response = self.client.fetch_result(job_id, api_key)
                status = response.status_code
            except httpx.HTTPError as e:
                status = None
                last_failure = str(e)
                logger.debug("Attempt %d for job %s failed: %s", attempt, job_id, e)

            step = transition(status, attempt, max_attempts)

            if step.state is PollState.READY:
                logger.info("Result for job %s ready on attempt %d/%d", job_id, attempt, max_attempts)
                return ScanResult.succeeded(job, _result_payload(response, job), request)

            if step.state is PollState.EXPIRED:
                raise ExpiredError("Result deleted or expired", url=url, job_id=job_id, status_code=410)

            if step.retry_same_attempt:
                rate_limit_waits += 1
                if rate_limit_waits > self.max_rate_limit_waits:
                    raise RateLimitError(
                        f"Still rate limited after {self.max_rate_limit_waits} waits",
                        url=url, job_id=job_id, status_code=429,
                    )
                logger.warning("Rate limited while polling job %s, waiting %ss", job_id, self.cooldown)
                self.sleep(self.cooldown)
                continue

            rate_limit_waits = 0

            if status == 404:
                if attempt % PROGRESS_EVERY == 0:
                    minutes = attempt * interval / 60
                    logger.info("Job %s still processing (%.1f minutes)", job_id, minutes)
            elif status is not None:
                last_failure = f"HTTP {status}: {response.text[:200]}"
                logger.debug("Attempt %d for job %s got %s", attempt, job_id, last_failure)

            if step.state is PollState.TIMED_OUT:
                break
            attempt += 1

        message = f"No result after {max_attempts} attempts"
        if last_failure:
            message = f"{message}: {last_failure}"
        raise PollTimeoutError(message, url=url, job_id=job_id)


def _result_payload(response: httpx.Response, job: ScanJob) -> dict:
    try:
        data = response.json()
    except ValueError as e:
        raise ApiError("Result response is not JSON", url=job.url or None, job_id=job.id,
                       status_code=response.status_code) from e
    return data if isinstance(data, dict) else {"data": data}
