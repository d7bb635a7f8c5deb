"""Storage service for bucket file operations."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

from appwritectl.core.exceptions import PathValidationError
from appwritectl.models.file import StorageFile
from appwritectl.uploaders.chunked import ProgressCallback

from .base import BaseService

FILES_PATH = "/storage/buckets/{bucketId}/files"
FILE_PATH = "/storage/buckets/{bucketId}/files/{fileId}"


class StorageService(BaseService):
    """Service for storage bucket files."""

    def create_file(
        self,
        bucket_id: str,
        file_id: str,
        file: Path,
        permissions: Optional[Sequence[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> dict[str, Any]:
        """Upload a file into a bucket.

        Files larger than the client's chunk size are sent in several
        requests that the server appends to one file.

        Args:
            bucket_id: Bucket ID
            file_id: Custom file ID or ``unique()``
            file: Local file path
            permissions: Permission strings
            on_progress: Per-chunk progress callback

        Returns:
            File metadata returned for the last chunk
        """
        file = Path(file)
        if file.is_dir():
            raise PathValidationError(str(file), "is a directory, expected a file")

        payload: dict[str, Any] = {"fileId": file_id}
        if permissions is not None:
            payload["permissions"] = list(permissions)

        return self._upload(
            self._build_path(FILES_PATH, bucketId=bucket_id),
            "file",
            file,
            payload,
            on_progress,
        )

    def get_file(self, bucket_id: str, file_id: str) -> StorageFile:
        """Get file metadata."""
        path = self._build_path(FILE_PATH, bucketId=bucket_id, fileId=file_id)
        return StorageFile.model_validate(self._get(path))

    def list_files(
        self,
        bucket_id: str,
        queries: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
    ) -> list[StorageFile]:
        """List files in a bucket."""
        path = self._build_path(FILES_PATH, bucketId=bucket_id)
        data = self._get(path, self._list_params(queries, search))
        return [StorageFile.model_validate(f) for f in data.get("files", [])]

    def delete_file(self, bucket_id: str, file_id: str) -> bool:
        """Delete a file."""
        return self._delete(self._build_path(FILE_PATH, bucketId=bucket_id, fileId=file_id))
