"""Storage file model."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from .base import ChunkedResource


class StorageFile(ChunkedResource):
    """File stored in a storage bucket."""

    bucket_id: Optional[str] = Field(None, alias="bucketId", description="Parent bucket ID")
    name: Optional[str] = Field(None, description="Original file name")
    mime_type: Optional[str] = Field(None, alias="mimeType", description="MIME type")
    size_original: Optional[int] = Field(
        None, alias="sizeOriginal", description="Size in bytes before compression"
    )
    signature: Optional[str] = Field(None, description="Server-side file hash")
    permissions: list[str] = Field(default_factory=list, alias="$permissions")

    @property
    def size_mb(self) -> float:
        """Return file size in megabytes."""
        if self.size_original:
            return self.size_original / (1024 * 1024)
        return 0.0
