"""Local storage for the API key, options and results."""

from .credentials import CredentialStore, is_valid_api_key
from .options import OptionsStore
from .results import ResultStore

__all__ = ["CredentialStore", "is_valid_api_key", "OptionsStore", "ResultStore"]
