"""Upload machinery for appwritectl.

- Chunked upload session (content-range + x-appwrite-id protocol)
- Code directory packaging (tar.gz)

These are internal implementation details. Use the services in
`appwritectl.services` as the public API.
"""

from appwritectl.uploaders.archive import collect_package_files, package_directory
from appwritectl.uploaders.chunked import (
    DEFAULT_READ_SIZE,
    ByteSource,
    ChunkAccumulator,
    ProgressReporter,
    UploadRequest,
    UploadSession,
    UploadState,
    iter_chunks,
    upload_chunked,
)

__all__ = [
    # Chunked upload
    "DEFAULT_READ_SIZE",
    "ByteSource",
    "ChunkAccumulator",
    "ProgressReporter",
    "UploadRequest",
    "UploadSession",
    "UploadState",
    "iter_chunks",
    "upload_chunked",
    # Packaging
    "collect_package_files",
    "package_directory",
]
