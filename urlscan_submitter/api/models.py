"""Data model for scan submissions and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from ..config import DEFAULT_VISIBILITY, REPORT_URL


class Visibility(str, Enum):
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"

    @classmethod
    def parse(cls, value: str | None) -> "Visibility":
        """Parse a visibility string, falling back to public for unknown values."""
        try:
            return cls((value or DEFAULT_VISIBILITY).strip().lower())
        except ValueError:
            return cls(DEFAULT_VISIBILITY)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def unique_tags(tags: Iterable[str]) -> tuple[str, ...]:
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    cleaned = (tag.strip() for tag in tags)
    return tuple(dict.fromkeys(tag for tag in cleaned if tag))


@dataclass(frozen=True)
class ScanRequest:
    url: str
    tags: tuple[str, ...] = ()
    visibility: Visibility = Visibility.PUBLIC

    def __post_init__(self):
        object.__setattr__(self, "tags", unique_tags(self.tags))
        object.__setattr__(self, "visibility", Visibility(self.visibility))

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the submit endpoint."""
        return {
            "url": self.url,
            "tags": list(self.tags),
            "visibility": self.visibility.value,
        }


@dataclass(frozen=True)
class ScanJob:
    id: str
    url: str
    submitted_at: datetime = field(default_factory=_utcnow)

    @property
    def report_url(self) -> str:
        return REPORT_URL.format(uuid=self.id)


@dataclass(frozen=True)
class ScanResult:
    """Terminal outcome of one analyzed URL."""

    job_id: str | None
    success: bool
    url: str
    report_url: str | None = None
    raw_payload: dict | None = None
    error: str | None = None
    tags: tuple[str, ...] = ()
    visibility: Visibility = Visibility.PUBLIC
    timestamp: datetime = field(default_factory=_utcnow)

    @classmethod
    def succeeded(cls, job: ScanJob, payload: dict, request: ScanRequest | None = None) -> "ScanResult":
        return cls(
            job_id=job.id,
            success=True,
            url=job.url,
            report_url=job.report_url,
            raw_payload=payload,
            tags=request.tags if request else (),
            visibility=request.visibility if request else Visibility.PUBLIC,
        )

    @classmethod
    def failed(cls, request: ScanRequest, error: str, job_id: str | None = None) -> "ScanResult":
        return cls(
            job_id=job_id,
            success=False,
            url=request.url,
            error=error,
            tags=request.tags,
            visibility=request.visibility,
        )

    def to_dict(self, include_payload: bool = True) -> dict[str, Any]:
        data = {
            "url": self.url,
            "job_id": self.job_id,
            "success": self.success,
            "report_url": self.report_url,
            "error": self.error,
            "tags": list(self.tags),
            "visibility": self.visibility.value,
            "timestamp": self.timestamp.isoformat(),
        }
        if include_payload:
            data["raw_payload"] = self.raw_payload
        return data
