"""Configuration constants for urlscan-submitter."""

import os
from pathlib import Path

# API endpoints
API_BASE = "https://urlscan.io"
SUBMIT_URL = f"{API_BASE}/api/v1/scan/"
RESULT_URL = f"{API_BASE}/api/v1/result/{{uuid}}/"
REPORT_URL = f"{API_BASE}/result/{{uuid}}/"
QUOTA_URL = f"{API_BASE}/user/quotas"

# Timeouts (seconds)
HTTP_TIMEOUT = 30

# Polling
POLLING_INTERVAL = 10  # seconds between result checks
MAX_POLLING_ATTEMPTS = 30
PROGRESS_EVERY = 3  # progress notice every N pending attempts
MAX_POLL_RATE_LIMIT_WAITS = 10  # 429s tolerated while polling a single job

# Rate limiting
RATE_LIMIT_COOLDOWN = 60  # seconds to wait after a 429
MAX_SUBMIT_RETRIES = 1  # re-submits after a 429
INTER_REQUEST_DELAY = 5  # seconds between jobs in a batch
RESET_BUFFER = 1  # seconds added after the advertised reset time
PLACEHOLDER_REMAINING = 1  # assumed budget after waiting out a reset
PLACEHOLDER_WINDOW = 60  # seconds until the assumed budget resets
STATUS_EVERY = 5  # batch shows quota status before every Nth URL

RATE_LIMIT_HEADERS = {
    "remaining": "X-Rate-Limit-Remaining",
    "limit": "X-Rate-Limit-Limit",
    "reset": "X-Rate-Limit-Reset",
    "scope": "X-Rate-Limit-Scope",
}

# Visibility
VISIBILITIES = ("public", "unlisted", "private")
DEFAULT_VISIBILITY = "public"

# Free plan limits, used when the quota endpoint is unavailable
FREE_PLAN_LIMITS = {
    "public": {"minute": 60, "hour": 500, "day": 5000},
    "unlisted": {"minute": 60, "hour": 100, "day": 1000},
    "private": {"minute": 5, "hour": 50, "day": 50},
    "search": {"minute": 120, "hour": 1000, "day": 1000},
    "retrieve": {"minute": 120, "hour": 5000, "day": 10000},
}

QUOTA_ACTIONS = {
    "public": "Public Scans",
    "unlisted": "Unlisted Scans",
    "private": "Private Scans",
    "search": "Search Requests",
    "retrieve": "Result Retrieve",
}

QUOTA_WINDOWS = ("minute", "hour", "day")

# Usage thresholds (percent)
USAGE_WARNING = 50
USAGE_CRITICAL = 80

# User agents
USER_AGENT_TYPES = ("default", "chrome", "firefox", "safari", "custom")
USER_AGENTS = {
    "chrome": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "firefox": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "safari": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/17.0 Safari/605.1.15"
    ),
}
CUSTOM_USER_AGENT_FALLBACK = "urlscan-submitter/1.0"

# Local storage
APP_DIR_ENV = "URLSCAN_SUBMITTER_HOME"
API_KEY_ENV = "URLSCAN_API_KEY"
KEY_FILE = "key.json"
KEY_FORMAT_VERSION = "1.0"
OPTIONS_DIR = "options"
LOGS_DIR = "logs"
LOG_CATEGORIES = ("json", "csv", "success", "errors")
RECENT_FILES = 10

DEFAULT_OPTION_FILES = {
    "links.txt": "# links.txt\n# Add URLs here, one per line\n# Example: https://example.com\n\n",
    "tags.txt": "# tags.txt\n# Add custom tags here, one per line\n# Example: my-tag\n\n",
    "scan-visibility.txt": f"{DEFAULT_VISIBILITY}\n",
    "user-agent.txt": "default\n",
    "custom-user-agent.txt": (
        "# custom-user-agent.txt\n"
        "# Custom User-Agent used when user-agent.txt says 'custom'\n\n"
    ),
}
FIXED_TAGS_FILE = "fixed-tags.txt"


def get_app_dir() -> Path:
    """Return the directory holding the key, options and logs."""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".urlscan-submitter"
