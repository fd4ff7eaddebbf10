"""Tests for result polling."""

import logging

import httpx
import pytest
from pytest_httpx import HTTPXMock

from urlscan_submitter.api.errors import ExpiredError, PollTimeoutError, RateLimitError
from urlscan_submitter.api.models import ScanJob, ScanRequest
from urlscan_submitter.api.poller import PollState, ResultPoller, transition
from urlscan_submitter.config import RESULT_URL

JOB_ID = "5f2c0f6e-0000-4000-8000-000000000001"
RESULT = RESULT_URL.format(uuid=JOB_ID)


@pytest.fixture
def poller(client, fake_time):
    return ResultPoller(client, interval=10, max_attempts=5, sleep=fake_time.sleep)


class TestTransition:
    """Tests for the pure transition function."""

    def test_ready_on_200(self):
        assert transition(200, 1, 5).state is PollState.READY

    def test_pending_on_404(self):
        step = transition(404, 2, 5)
        assert step.state is PollState.PENDING
        assert step.retry_same_attempt is False

    def test_expired_on_410(self):
        assert transition(410, 1, 5).state is PollState.EXPIRED

    def test_rate_limited_keeps_attempt(self):
        step = transition(429, 5, 5)
        assert step.state is PollState.PENDING
        assert step.retry_same_attempt is True

    def test_timed_out_on_last_attempt(self):
        assert transition(404, 5, 5).state is PollState.TIMED_OUT

    def test_other_status_pending_before_last(self):
        assert transition(500, 3, 5).state is PollState.PENDING

    def test_transport_failure_on_last_attempt(self):
        assert transition(None, 5, 5).state is PollState.TIMED_OUT


class TestResultPoller:
    """Tests for ResultPoller.poll."""

    def test_ready_after_pending(self, httpx_mock: HTTPXMock, poller, api_key, fake_time):
        """N-1 pending answers then a 200 returns after exactly N attempts."""
        for _ in range(2):
            httpx_mock.add_response(url=RESULT, status_code=404)
        httpx_mock.add_response(url=RESULT, json={"page": {"title": "Example"}})

        result = poller.poll(JOB_ID, api_key)

        assert result.success is True
        assert result.job_id == JOB_ID
        assert result.raw_payload == {"page": {"title": "Example"}}
        assert result.report_url == f"https://urlscan.io/result/{JOB_ID}/"
        assert len(httpx_mock.get_requests()) == 3
        assert fake_time.sleeps == [10, 10, 10]

    def test_sleeps_before_first_attempt(self, httpx_mock: HTTPXMock, poller, api_key, fake_time):
        """No request is made at time zero."""
        httpx_mock.add_response(url=RESULT, json={})

        poller.poll(JOB_ID, api_key)

        assert fake_time.sleeps == [10]

    def test_timeout_after_max_attempts(self, httpx_mock: HTTPXMock, poller, api_key):
        """Always pending raises PollTimeoutError after max_attempts requests."""
        for _ in range(5):
            httpx_mock.add_response(url=RESULT, status_code=404)

        with pytest.raises(PollTimeoutError) as exc_info:
            poller.poll(JOB_ID, api_key)

        assert exc_info.value.job_id == JOB_ID
        assert isinstance(exc_info.value, TimeoutError)
        assert len(httpx_mock.get_requests()) == 5

    def test_expired_fails_fast(self, httpx_mock: HTTPXMock, poller, api_key):
        """A 410 on the first attempt raises without further requests."""
        httpx_mock.add_response(url=RESULT, status_code=410)

        with pytest.raises(ExpiredError) as exc_info:
            poller.poll(JOB_ID, api_key)

        assert exc_info.value.job_id == JOB_ID
        assert len(httpx_mock.get_requests()) == 1

    def test_rate_limit_does_not_consume_attempt(self, httpx_mock: HTTPXMock, client, api_key, fake_time):
        """A 429 waits the cooldown and repeats the same attempt."""
        poller = ResultPoller(client, interval=10, max_attempts=2, sleep=fake_time.sleep)
        httpx_mock.add_response(url=RESULT, status_code=404)
        httpx_mock.add_response(url=RESULT, status_code=429)
        httpx_mock.add_response(url=RESULT, json={"ok": True})

        result = poller.poll(JOB_ID, api_key)

        assert result.success is True
        assert len(httpx_mock.get_requests()) == 3
        assert 60 in fake_time.sleeps

    def test_repeated_rate_limits_are_bounded(self, httpx_mock: HTTPXMock, client, api_key, fake_time):
        poller = ResultPoller(client, interval=1, max_attempts=3, sleep=fake_time.sleep, max_rate_limit_waits=2)
        for _ in range(3):
            httpx_mock.add_response(url=RESULT, status_code=429)

        with pytest.raises(RateLimitError):
            poller.poll(JOB_ID, api_key)

        assert len(httpx_mock.get_requests()) == 3

    def test_rate_limit_count_resets_between_responses(self, httpx_mock: HTTPXMock, client, api_key, fake_time):
        """Only consecutive 429s count towards the wait limit."""
        poller = ResultPoller(client, interval=1, max_attempts=5, sleep=fake_time.sleep, max_rate_limit_waits=1)
        httpx_mock.add_response(url=RESULT, status_code=429)
        httpx_mock.add_response(url=RESULT, status_code=404)
        httpx_mock.add_response(url=RESULT, status_code=429)
        httpx_mock.add_response(url=RESULT, json={"ok": True})

        result = poller.poll(JOB_ID, api_key)

        assert result.success is True
        assert fake_time.sleeps.count(60) == 2

    def test_progress_logged_every_third_attempt(self, httpx_mock: HTTPXMock, client, api_key, fake_time, caplog):
        poller = ResultPoller(client, interval=10, max_attempts=7, sleep=fake_time.sleep)
        for _ in range(7):
            httpx_mock.add_response(url=RESULT, status_code=404)
        caplog.set_level(logging.INFO, logger="urlscan_submitter.api.poller")

        with pytest.raises(PollTimeoutError):
            poller.poll(JOB_ID, api_key)

        notices = [r.getMessage() for r in caplog.records if "still processing" in r.getMessage()]
        assert len(notices) == 2
        assert "(0.5 minutes)" in notices[0]
        assert "(1.0 minutes)" in notices[1]

    def test_transport_errors_are_retried(self, httpx_mock: HTTPXMock, poller, api_key):
        httpx_mock.add_exception(httpx.ReadTimeout("slow"), url=RESULT)
        httpx_mock.add_response(url=RESULT, json={"ok": True})

        result = poller.poll(JOB_ID, api_key)

        assert result.success is True

    def test_unexpected_status_on_last_attempt(self, httpx_mock: HTTPXMock, client, api_key, fake_time):
        poller = ResultPoller(client, interval=1, max_attempts=2, sleep=fake_time.sleep)
        httpx_mock.add_response(url=RESULT, status_code=404)
        httpx_mock.add_response(url=RESULT, status_code=503, text="maintenance")

        with pytest.raises(PollTimeoutError) as exc_info:
            poller.poll(JOB_ID, api_key)

        assert "503" in str(exc_info.value)

    def test_overrides_interval_and_attempts(self, httpx_mock: HTTPXMock, poller, api_key, fake_time):
        httpx_mock.add_response(url=RESULT, status_code=404)

        with pytest.raises(PollTimeoutError):
            poller.poll(JOB_ID, api_key, interval=2, max_attempts=1)

        assert fake_time.sleeps == [2]

    def test_result_carries_request_context(self, httpx_mock: HTTPXMock, poller, api_key, sample_url):
        httpx_mock.add_response(url=RESULT, json={})
        request = ScanRequest(sample_url, ("a",))

        result = poller.poll(JOB_ID, api_key, job=ScanJob(JOB_ID, sample_url), request=request)

        assert result.url == sample_url
        assert result.tags == ("a",)
