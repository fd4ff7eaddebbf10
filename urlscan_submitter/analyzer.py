"""Submit-and-wait workflow for single URLs and batches."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Sequence

from .api.client import UrlscanClient
from .api.errors import MissingCredentialError, ScanError
from .api.models import ScanRequest, ScanResult, Visibility
from .api.poller import ResultPoller
from .config import INTER_REQUEST_DELAY
from .utils.batch_runner import run_batch

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    results: list[ScanResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)


class Analyzer:
    """
    Runs the submit, poll, result cycle.

    Per-job errors become failed results so a batch keeps going.
    """

    def __init__(
        self,
        client: UrlscanClient,
        poller: ResultPoller | None = None,
        inter_request_delay: float = INTER_REQUEST_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.poller = poller or ResultPoller(client, sleep=sleep)
        self.inter_request_delay = inter_request_delay
        self.sleep = sleep

    def analyze(self, request: ScanRequest, api_key: str | None) -> ScanResult:
        """Submit one URL and wait for its result. Never raises ScanError."""
        job = None
        try:
            job = self.client.submit(request, api_key)
            return self.poller.poll(job.id, api_key, job=job, request=request)
        except ScanError as e:
            job_id = e.job_id or (job.id if job else None)
            logger.error("Analysis of %s failed: %s", request.url, e.message)
            return ScanResult.failed(request, e.message, job_id=job_id)

    def analyze_batch(
        self,
        urls: Sequence[str],
        tags: Sequence[str],
        visibility: Visibility,
        api_key: str | None,
        on_start: Callable[[int, str], None] | None = None,
        on_progress: Callable[[int, str, ScanResult], None] | None = None,
    ) -> BatchSummary:
        """
        Analyze URLs one after another.

        Raises:
            MissingCredentialError: No API key, detected before anything is submitted.
        """
        if not api_key:
            raise MissingCredentialError("API key is not configured")

        def scan_url(url: str) -> ScanResult:
            return self.analyze(ScanRequest(url, tuple(tags), visibility), api_key)

        results = run_batch(
            urls,
            scan_url,
            delay=self.inter_request_delay,
            sleep=self.sleep,
            on_start=on_start,
            on_progress=on_progress,
        )
        summary = BatchSummary(results)
        logger.info("Batch finished: %d succeeded, %d failed", summary.succeeded, summary.failed)
        return summary
