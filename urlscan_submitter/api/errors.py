"""Error taxonomy for the urlscan.io workflow."""


class ScanError(Exception):
    """
    Base class for per-job failures.

    Carries enough context (URL, job id, HTTP status) for the caller
    to log or display the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        job_id: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.url = url
        self.job_id = job_id
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code is not None:
            parts.append(f"HTTP {self.status_code}")
        if self.job_id:
            parts.append(f"job {self.job_id}")
        if self.url:
            parts.append(f"url {self.url}")
        return " | ".join(parts)


class AuthError(ScanError):
    """Invalid, expired or missing API key."""


class MissingCredentialError(AuthError):
    """No API key is configured."""


class ValidationError(ScanError):
    """The API rejected the request as malformed."""


class QuotaError(ScanError):
    """The plan quota does not cover the request."""


class RateLimitError(ScanError):
    """The API answered 429 Too Many Requests."""


class ExpiredError(ScanError):
    """The scan result was deleted or has expired."""


class PollTimeoutError(ScanError, TimeoutError):
    """Polling ran out of attempts before the result was ready."""


class ApiError(ScanError):
    """Unexpected status, unusable response body or transport failure."""
