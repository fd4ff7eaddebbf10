"""File-based archive of scan results."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .. import __version__
from ..api.models import ScanResult
from ..config import LOG_CATEGORIES, RECENT_FILES
from ..output.csv_export import export_to_csv

logger = logging.getLogger(__name__)


class ResultStore:
    """
    Saves analysis results under ``logs/``.

    Layout:
        logs/json/     one document per run, with metadata
        logs/csv/      one CSV per run
        logs/success/  one JSON file per successful result
        logs/errors/   one JSON file per failed result

    Usage:
        store = ResultStore(logs_dir)
        paths = store.save(results, visibility="public")
    """

    def __init__(self, logs_dir: Path):
        self.logs_dir = Path(logs_dir)
        self._ensure_dirs()

    def _ensure_dirs(self) -> None:
        for category in LOG_CATEGORIES:
            (self.logs_dir / category).mkdir(parents=True, exist_ok=True)

    def save(self, results: list[ScanResult], visibility: str) -> dict[str, Path]:
        """
        Store a run's results.

        Args:
            results: Results of the run.
            visibility: Visibility the run used, recorded in the metadata.

        Returns:
            Dict with the ``json`` and ``csv`` paths written.
        """
        if not results:
            return {}

        self._ensure_dirs()
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")

        document = {
            "metadata": {
                "tool": "urlscan-submitter",
                "version": __version__,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "total_results": len(results),
                "successful_results": sum(1 for r in results if r.success),
                "failed_results": sum(1 for r in results if not r.success),
                "visibility": visibility,
            },
            "results": [r.to_dict() for r in results],
        }
        json_path = self._write_json("json", f"results-{stamp}.json", document)

        csv_path = self.logs_dir / "csv" / f"results-{stamp}.csv"
        export_to_csv(results, str(csv_path))

        for index, result in enumerate(results, 1):
            category = "success" if result.success else "errors"
            self._write_json(category, f"result-{stamp}-{index}.json", result.to_dict())

        logger.info("Results saved to %s and %s", json_path, csv_path)
        return {"json": json_path, "csv": csv_path}

    def _write_json(self, category: str, filename: str, data: Any) -> Path:
        path = self.logs_dir / category / filename
        path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
        return path

    def clear(self) -> int:
        """
        Delete every stored file.

        Returns:
            Number of files deleted.
        """
        count = 0
        if self.logs_dir.exists():
            for path in self.logs_dir.rglob("*"):
                if path.is_file():
                    path.unlink()
                    count += 1
        return count

    def stats(self) -> dict[str, Any]:
        """
        Get archive statistics.

        Returns:
            Dict with file count and size per category, total size and
            the most recently written files.
        """
        counts = {}
        sizes = {}
        recent = []
        for category in LOG_CATEGORIES:
            files = [p for p in (self.logs_dir / category).glob("*") if p.is_file()]
            counts[category] = len(files)
            sizes[category] = sum(p.stat().st_size for p in files)
            recent.extend((p.stat().st_mtime, category, p.name) for p in files)

        recent.sort(reverse=True)
        return {
            "files": counts,
            "sizes": sizes,
            "total_size_bytes": sum(sizes.values()),
            "recent_files": [
                {"category": category, "name": name, "modified": mtime}
                for mtime, category, name in recent[:RECENT_FILES]
            ],
            "logs_dir": str(self.logs_dir),
        }
