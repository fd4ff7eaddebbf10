"""HTTP client for the urlscan.io submit, result and quota endpoints."""

import logging
import time
from typing import Callable

import httpx

from ..config import (
    CUSTOM_USER_AGENT_FALLBACK,
    HTTP_TIMEOUT,
    MAX_SUBMIT_RETRIES,
    QUOTA_URL,
    RATE_LIMIT_COOLDOWN,
    RESULT_URL,
    SUBMIT_URL,
)
from ..utils.rate_limiter import RateLimitTracker
from .errors import (
    ApiError,
    AuthError,
    MissingCredentialError,
    QuotaError,
    RateLimitError,
    ValidationError,
)
from .models import ScanJob, ScanRequest

logger = logging.getLogger(__name__)


class UrlscanClient:
    """
    Thin wrapper over the urlscan.io API.

    Every response, successful or not, is fed to the rate limit tracker.

    Usage:
        with UrlscanClient(user_agent="my-agent") as client:
            job = client.submit(ScanRequest("https://example.com"), api_key)
    """

    def __init__(
        self,
        tracker: RateLimitTracker | None = None,
        user_agent: str = CUSTOM_USER_AGENT_FALLBACK,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cooldown: float = RATE_LIMIT_COOLDOWN,
        max_rate_limit_retries: int = MAX_SUBMIT_RETRIES,
    ):
        """
        Initialize client.

        Args:
            tracker: Rate limit state owner. A fresh tracker is created if omitted.
            user_agent: User-Agent sent with submissions.
            http_client: Preconfigured httpx client. One is created if omitted.
            sleep: Function used for the 429 cooldown.
            cooldown: Seconds to wait before re-submitting after a 429.
            max_rate_limit_retries: Re-submits allowed after a 429.
        """
        self.tracker = tracker or RateLimitTracker(sleep=sleep)
        self.user_agent = user_agent
        self.sleep = sleep
        self.cooldown = cooldown
        self.max_rate_limit_retries = max_rate_limit_retries
        self._owns_http = http_client is None
        self.http = http_client or httpx.Client(timeout=HTTP_TIMEOUT)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "UrlscanClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def submit(self, request: ScanRequest, api_key: str | None) -> ScanJob:
        """
        Submit a URL for scanning.

        A 429 answer is retried after ``cooldown`` seconds, at most
        ``max_rate_limit_retries`` times. Other errors propagate immediately.

        Raises:
            MissingCredentialError: No API key given.
            AuthError: Key rejected (401/403).
            QuotaError: Plan quota exhausted (402).
            RateLimitError: Still rate limited after the retries.
            ValidationError: Request rejected as malformed (other 4xx).
            ApiError: Server error, transport failure or unusable body.
        """
        if not api_key:
            raise MissingCredentialError("API key is not configured", url=request.url)

        retries = 0
        while True:
            try:
                return self._submit_once(request, api_key)
            except RateLimitError:
                if retries >= self.max_rate_limit_retries:
                    raise
                retries += 1
                logger.warning(
                    "Rate limit exceeded for %s, retrying in %ss (%d/%d)",
                    request.url, self.cooldown, retries, self.max_rate_limit_retries,
                )
                self.sleep(self.cooldown)

    def _submit_once(self, request: ScanRequest, api_key: str) -> ScanJob:
        self.tracker.before_request()

        headers = {
            "Content-Type": "application/json",
            "API-Key": api_key,
            "User-Agent": self.user_agent,
        }
        payload = request.to_payload()
        logger.info("Submitting %s (tags: %s, visibility: %s)",
                    request.url, ", ".join(request.tags) or "-", request.visibility.value)

        try:
            response = self.http.post(SUBMIT_URL, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise ApiError(f"Submission request failed: {e}", url=request.url) from e

        self.tracker.after_response(response.headers)

        if response.status_code != 200:
            raise _submit_error(response, request.url)

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError("Submission response is not JSON", url=request.url,
                           status_code=response.status_code) from e

        job_id = data.get("uuid") if isinstance(data, dict) else None
        if not job_id:
            raise ApiError("Submission response has no job id", url=request.url,
                           status_code=response.status_code)

        logger.info("Submitted %s as job %s", request.url, job_id)
        return ScanJob(id=job_id, url=request.url)

    def fetch_result(self, job_id: str, api_key: str) -> httpx.Response:
        """
        Fetch the result of a job. Status handling is left to the caller.

        Raises:
            httpx.HTTPError: Transport failure.
        """
        response = self.http.get(RESULT_URL.format(uuid=job_id), headers={"API-Key": api_key})
        self.tracker.after_response(response.headers)
        return response

    def fetch_quotas(self, api_key: str | None) -> tuple[dict, httpx.Headers]:
        """
        Fetch the account quota document.

        Returns:
            Tuple of (parsed JSON body, response headers).
        """
        if not api_key:
            raise MissingCredentialError("API key is not configured")

        try:
            response = self.http.get(QUOTA_URL, headers={"API-Key": api_key})
        except httpx.HTTPError as e:
            raise ApiError(f"Quota request failed: {e}") from e

        self.tracker.after_response(response.headers)

        if response.status_code in (401, 403):
            raise AuthError("API key rejected", status_code=response.status_code)
        if response.status_code != 200:
            raise ApiError(response.text[:100] or "Quota request failed",
                           status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ApiError("Quota response is not JSON", status_code=response.status_code) from e
        if not isinstance(data, dict):
            raise ApiError("Quota response is not a JSON object", status_code=response.status_code)
        return data, response.headers


def _submit_error(response: httpx.Response, url: str) -> Exception:
    """Map a non-200 submit response to the matching error."""
    status = response.status_code
    body = response.text[:200]
    logger.error("Submission of %s failed (%d): %s", url, status, body)

    if status in (401, 403):
        return AuthError("API key invalid or expired", url=url, status_code=status)
    if status == 402:
        return QuotaError("Insufficient quota", url=url, status_code=status)
    if status == 429:
        return RateLimitError("Rate limit exceeded", url=url, status_code=status)
    if 400 <= status < 500:
        return ValidationError(f"Malformed request: {body}", url=url, status_code=status)
    return ApiError(body or "Unexpected response", url=url, status_code=status)
