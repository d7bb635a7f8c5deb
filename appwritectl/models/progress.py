"""Progress models for chunked uploads.

Provides the upload phase enum and the immutable per-chunk progress event.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import Field

from .base import BaseModel


class UploadPhase(Enum):
    """Phases of a chunked upload session."""

    INIT = "init"
    SENDING = "sending"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Check if no further chunks will be sent."""
        return self in (UploadPhase.DONE, UploadPhase.ERROR)


@dataclass(frozen=True)
class ProgressEvent:
    """Snapshot emitted after each successfully uploaded chunk.

    ``chunks_total`` and ``chunks_uploaded`` are the server's counters and may
    disagree with the client-side ``chunk`` index.
    """

    resource_id: Optional[str]
    progress: float
    size_uploaded: int
    total_size: int
    chunk: int
    chunks_total: Optional[int] = None
    chunks_uploaded: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        """Check if every byte has been sent."""
        return self.size_uploaded >= self.total_size

    def to_dict(self) -> dict[str, Any]:
        """Render with the API's field names."""
        return {
            "$id": self.resource_id,
            "progress": self.progress,
            "sizeUploaded": self.size_uploaded,
            "chunksTotal": self.chunks_total,
            "chunksUploaded": self.chunks_uploaded,
        }


class ChunkReceipt(BaseModel):
    """Fields of a chunk response that drive the upload loop."""

    id: Optional[str] = Field(None, alias="$id")
    chunks_total: Optional[int] = Field(None, alias="chunksTotal")
    chunks_uploaded: Optional[int] = Field(None, alias="chunksUploaded")
