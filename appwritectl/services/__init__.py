"""Service layer for Appwrite operations.

Provides service classes that encapsulate Appwrite REST API operations.
"""

from __future__ import annotations

from .base import BaseService
from .functions import FunctionService
from .sites import SiteService
from .storage import StorageService

__all__ = [
    "BaseService",
    "FunctionService",
    "SiteService",
    "StorageService",
]
