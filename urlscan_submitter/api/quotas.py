"""Quota report parsing and usage calculation."""

import logging
from datetime import datetime, timedelta, timezone

from ..config import (
    FREE_PLAN_LIMITS,
    QUOTA_ACTIONS,
    QUOTA_WINDOWS,
    RATE_LIMIT_HEADERS,
    USAGE_CRITICAL,
    USAGE_WARNING,
)
from ..utils.rate_limiter import RateLimitTracker
from .client import UrlscanClient
from .errors import ScanError

logger = logging.getLogger(__name__)


def calculate_usage(used: int, limit: int) -> dict:
    """
    Describe how much of a limit is used.

    Returns:
        Dict with used, limit, remaining, percentage, status
        (disabled, low, warning or critical).
    """
    if limit <= 0:
        return {"used": 0, "limit": 0, "remaining": 0, "percentage": 0, "status": "disabled"}

    percentage = round(used / limit * 100)
    if percentage >= USAGE_CRITICAL:
        status = "critical"
    elif percentage >= USAGE_WARNING:
        status = "warning"
    else:
        status = "low"

    return {
        "used": used,
        "limit": limit,
        "remaining": max(0, limit - used),
        "percentage": percentage,
        "status": status,
    }


def parse_quotas(limits_data: dict | None) -> dict:
    """
    Turn the ``limits`` section of the quota document into a report.

    Actions missing from the document fall back to the free plan limits.

    Returns:
        Dict with limits, usage and totals keyed by action name.
    """
    result = {
        "limits": {},
        "usage": {},
        "totals": {window: 0 for window in QUOTA_WINDOWS},
    }

    for action in QUOTA_ACTIONS:
        action_data = (limits_data or {}).get(action)

        if not action_data:
            defaults = FREE_PLAN_LIMITS[action]
            result["limits"][action] = dict(defaults)
            result["usage"][action] = {
                window: calculate_usage(0, defaults[window]) for window in QUOTA_WINDOWS
            }
            continue

        limits = {}
        usage = {}
        for window in QUOTA_WINDOWS:
            window_data = action_data.get(window) or {}
            limit = window_data.get("limit") or 0
            used = window_data.get("used") or 0
            limits[window] = limit
            usage[window] = calculate_usage(used, limit)
            result["totals"][window] += used

        if action_data.get("lastIP") or action_data.get("lastActivity"):
            usage["last_ip"] = action_data.get("lastIP")
            usage["last_activity"] = action_data.get("lastActivity")

        result["limits"][action] = limits
        result["usage"][action] = usage

    return result


def next_resets(now: datetime | None = None) -> dict:
    """Next UTC boundaries of the minute, hour and day windows."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    minute = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
    hour = now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
    day = now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)

    return {
        "minute": {"time": minute.isoformat(), "in_seconds": (minute - now).total_seconds()},
        "hour": {"time": hour.isoformat(), "in_seconds": (hour - now).total_seconds()},
        "day": {"time": day.isoformat(), "in_seconds": (day - now).total_seconds()},
    }


def default_report() -> dict:
    """Free plan report used when the quota endpoint is unreachable."""
    report = parse_quotas(None)
    report.update({
        "plan": "Free Plan (default)",
        "rate_limit_headers": {},
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "next_reset": next_resets(),
        "is_default": True,
    })
    return report


def get_quota_report(client: UrlscanClient, api_key: str | None) -> dict:
    """
    Fetch and parse the account quotas.

    Errors are logged and answered with the free plan defaults.
    """
    try:
        data, headers = client.fetch_quotas(api_key)
    except ScanError as e:
        logger.error("Could not check quotas: %s", e)
        return default_report()

    limits = data.get("limits")
    report = parse_quotas(limits if isinstance(limits, dict) else None)
    report.update({
        "plan": "Team Plan" if data.get("scope") == "team" else "Free Plan",
        "rate_limit_headers": {
            name: headers.get(header) for name, header in RATE_LIMIT_HEADERS.items()
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "next_reset": next_resets(),
        "is_default": False,
        "raw": data,
    })
    logger.info("Quotas checked")
    return report


def seed_tracker(tracker: RateLimitTracker, report: dict, visibility: str) -> bool:
    """
    Seed the tracker with the per-minute budget of the visibility's scan action.

    Returns:
        True if the tracker accepted the seed.
    """
    usage = report.get("usage", {}).get(visibility, {}).get("minute")
    if not usage or usage["status"] == "disabled":
        return False

    reset = next_resets()["minute"]["time"]
    return tracker.seed(usage["remaining"], datetime.fromisoformat(reset).timestamp())
