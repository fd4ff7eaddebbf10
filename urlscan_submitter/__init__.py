"""Submit URLs to urlscan.io and collect the results."""

__version__ = "1.0.0"
