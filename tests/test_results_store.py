"""Tests for the results store."""

import csv
import json

import pytest

from urlscan_submitter.api.models import ScanJob, ScanRequest, ScanResult
from urlscan_submitter.storage.results import ResultStore


@pytest.fixture
def logs_dir(tmp_path):
    """Create a temporary logs directory."""
    return tmp_path / "logs"


@pytest.fixture
def store(logs_dir):
    return ResultStore(logs_dir)


@pytest.fixture
def results():
    ok = ScanResult.succeeded(ScanJob("job-1", "https://a.com"), {"page": {}}, ScanRequest("https://a.com", ("t",)))
    failed = ScanResult.failed(ScanRequest("https://b.com"), "Insufficient quota")
    return [ok, failed]


class TestResultStore:
    """Tests for ResultStore class."""

    def test_init_creates_categories(self, logs_dir):
        ResultStore(logs_dir)
        for category in ("json", "csv", "success", "errors"):
            assert (logs_dir / category).is_dir()

    def test_save_writes_document(self, store, results):
        paths = store.save(results, "public")

        document = json.loads(paths["json"].read_text(encoding="utf-8"))
        assert document["metadata"]["total_results"] == 2
        assert document["metadata"]["successful_results"] == 1
        assert document["metadata"]["failed_results"] == 1
        assert document["metadata"]["visibility"] == "public"
        assert document["results"][0]["job_id"] == "job-1"

    def test_save_writes_csv(self, store, results):
        paths = store.save(results, "public")

        with paths["csv"].open(newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["status"] for r in rows] == ["SUCCESS", "FAILED"]

    def test_save_splits_success_and_errors(self, store, logs_dir, results):
        store.save(results, "public")

        assert len(list((logs_dir / "success").glob("*.json"))) == 1
        assert len(list((logs_dir / "errors").glob("*.json"))) == 1

    def test_save_nothing(self, store):
        assert store.save([], "public") == {}

    def test_clear_removes_all_files(self, store, results):
        store.save(results, "public")

        count = store.clear()

        assert count == 4
        assert store.stats()["files"] == {"json": 0, "csv": 0, "success": 0, "errors": 0}

    def test_stats(self, store, results):
        store.save(results, "unlisted")

        stats = store.stats()

        assert stats["files"]["json"] == 1
        assert stats["total_size_bytes"] > 0

    def test_stats_sizes_and_recent_files(self, store, results):
        store.save(results, "public")

        stats = store.stats()

        assert stats["total_size_bytes"] == sum(stats["sizes"].values())
        assert len(stats["recent_files"]) == 4
        assert {entry["category"] for entry in stats["recent_files"]} == {"json", "csv", "success", "errors"}
