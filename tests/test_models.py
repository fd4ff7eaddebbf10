"""Tests for the scan data model."""

import dataclasses

import pytest

from urlscan_submitter.api.errors import PollTimeoutError, ScanError
from urlscan_submitter.api.models import ScanJob, ScanRequest, ScanResult, Visibility


class TestScanRequest:

    def test_tags_deduplicated_in_order(self):
        request = ScanRequest("https://example.com", ("b", "a", "b", " ", "a "))
        assert request.tags == ("b", "a")

    def test_payload(self):
        request = ScanRequest("https://example.com", ["a", "b", "a"], "private")
        assert request.to_payload() == {
            "url": "https://example.com",
            "tags": ["a", "b"],
            "visibility": "private",
        }

    def test_immutable(self):
        request = ScanRequest("https://example.com")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.url = "https://other.com"

    def test_invalid_visibility(self):
        with pytest.raises(ValueError):
            ScanRequest("https://example.com", (), "secret")


class TestVisibility:

    @pytest.mark.parametrize("value, expected", [
        ("public", Visibility.PUBLIC),
        ("UNLISTED", Visibility.UNLISTED),
        (" private\n", Visibility.PRIVATE),
        ("nope", Visibility.PUBLIC),
        (None, Visibility.PUBLIC),
    ])
    def test_parse(self, value, expected):
        assert Visibility.parse(value) is expected


class TestScanResult:

    def test_succeeded(self):
        request = ScanRequest("https://example.com", ("t",), Visibility.UNLISTED)
        result = ScanResult.succeeded(ScanJob("abc", request.url), {"k": 1}, request)

        assert result.success is True
        assert result.report_url == "https://urlscan.io/result/abc/"
        assert result.error is None
        assert result.visibility is Visibility.UNLISTED

    def test_failed(self):
        result = ScanResult.failed(ScanRequest("https://example.com"), "boom", job_id="abc")

        assert result.success is False
        assert result.report_url is None
        assert result.raw_payload is None
        assert result.job_id == "abc"

    def test_to_dict(self):
        result = ScanResult.failed(ScanRequest("https://example.com", ("x",)), "boom")
        data = result.to_dict(include_payload=False)

        assert data["url"] == "https://example.com"
        assert data["tags"] == ["x"]
        assert "raw_payload" not in data


class TestScanError:

    def test_str_includes_context(self):
        error = ScanError("Failed", url="https://example.com", job_id="abc", status_code=500)
        assert str(error) == "Failed | HTTP 500 | job abc | url https://example.com"

    def test_timeout_is_builtin_timeout(self):
        assert issubclass(PollTimeoutError, TimeoutError)
