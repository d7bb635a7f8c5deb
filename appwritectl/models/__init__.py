"""Data models for appwritectl.

Provides Pydantic models for Appwrite resources and upload progress tracking.
"""

from __future__ import annotations

from .base import AppwriteResource, BaseModel, ChunkedResource
from .deployment import Deployment
from .file import StorageFile
from .progress import ChunkReceipt, ProgressEvent, UploadPhase

__all__ = [
    # Base
    "BaseModel",
    "AppwriteResource",
    "ChunkedResource",
    # Resources
    "Deployment",
    "StorageFile",
    # Progress
    "UploadPhase",
    "ProgressEvent",
    "ChunkReceipt",
]
