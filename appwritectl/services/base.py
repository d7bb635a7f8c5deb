"""Base service with common methods for all Appwrite services."""

from __future__ import annotations

import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional
from urllib.parse import quote

from appwritectl.core.exceptions import PathValidationError
from appwritectl.uploaders.archive import package_directory
from appwritectl.uploaders.chunked import ProgressCallback, UploadRequest, upload_chunked

if TYPE_CHECKING:
    from appwritectl.core.client import AppwriteClient

JSON_HEADERS = {"content-type": "application/json"}


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "AppwriteClient") -> None:
        """Initialize service with an Appwrite client.

        Args:
            client: Configured AppwriteClient instance
        """
        self.client = client

    def _get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Execute GET request and return decoded data."""
        return self.client.call("get", path, JSON_HEADERS, params or {})

    def _delete(self, path: str) -> bool:
        """Execute DELETE request.

        Returns:
            True if successful
        """
        self.client.call("delete", path, JSON_HEADERS, {})
        return True

    @staticmethod
    def _build_path(template: str, **ids: str) -> str:
        """Substitute ``{placeholder}`` segments with URL-quoted IDs.

        Example:
            _build_path("/functions/{functionId}", functionId="api")
        """
        path = template
        for key, value in ids.items():
            path = path.replace("{" + key + "}", quote(str(value), safe=""))
        return path

    @staticmethod
    def _list_params(
        queries: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
    ) -> dict[str, Any]:
        """Build query parameters for list endpoints."""
        params: dict[str, Any] = {}
        if queries:
            params["queries"] = list(queries)
        if search:
            params["search"] = search
        return params

    def _upload(
        self,
        api_path: str,
        file_field: str,
        source: Path,
        extra_fields: Mapping[str, Any],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """Send a local file through the chunked upload protocol.

        Args:
            api_path: Creation endpoint.
            file_field: Multipart field carrying the file bytes.
            source: Local file.
            extra_fields: Metadata sent with every chunk.
            on_progress: Per-chunk progress callback.

        Returns:
            Final resource metadata.
        """
        request = UploadRequest(
            source_path=source,
            api_path=api_path,
            file_field=file_field,
            chunk_size=self.client.chunk_size,
            extra_fields=extra_fields,
        )
        return upload_chunked(self.client.call, request, on_progress)

    def _upload_code(
        self,
        api_path: str,
        code: Path,
        extra_fields: Mapping[str, Any],
        *,
        archive_name: str,
        ignore: Optional[Sequence[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Any:
        """Upload a code package, packaging a directory first if needed.

        A directory is packed into a temporary ``.tar.gz`` that is removed
        once the upload finishes or fails. A file is uploaded as is.

        Raises:
            PathValidationError: If ``code`` does not exist.
        """
        code = Path(code)
        if code.is_dir():
            with tempfile.TemporaryDirectory(prefix="appwritectl-") as tmp_dir:
                archive = Path(tmp_dir) / archive_name
                package_directory(code, archive, ignore)
                return self._upload(api_path, "code", archive, extra_fields, on_progress)
        if code.is_file():
            return self._upload(api_path, "code", code, extra_fields, on_progress)
        raise PathValidationError(str(code), "does not exist")
