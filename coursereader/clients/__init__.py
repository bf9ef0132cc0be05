"""
Remote collaborators of the reader.

This module provides:
- ApiClient / RemoteError: shared HTTP plumbing
- AuthClient: signed-in user lookup
- CatalogClient: course structure
- ProgressStoreClient: best-effort progress, bookmark and notes storage
"""

from .http import ApiClient, RemoteError
from .auth import AuthClient, AuthService
from .catalog import Catalog, CatalogClient
from .progress_store import ProgressStore, ProgressStoreClient

__all__ = [
    "ApiClient",
    "RemoteError",
    "AuthClient",
    "AuthService",
    "Catalog",
    "CatalogClient",
    "ProgressStore",
    "ProgressStoreClient",
]
