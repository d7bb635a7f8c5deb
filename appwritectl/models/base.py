"""Base model with common fields for all Appwrite resources."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field


class BaseModel(PydanticBaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary using the API's field names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AppwriteResource(BaseModel):
    """Base model for Appwrite documents with system fields."""

    id: str = Field(..., alias="$id", description="Resource ID")
    created_at: datetime | None = Field(None, alias="$createdAt", description="Creation time")
    updated_at: datetime | None = Field(None, alias="$updatedAt", description="Last update")


class ChunkedResource(AppwriteResource):
    """Resource created through chunked upload, with server chunk counters."""

    chunks_total: int | None = Field(None, alias="chunksTotal", description="Expected chunks")
    chunks_uploaded: int | None = Field(
        None, alias="chunksUploaded", description="Chunks received so far"
    )

    @property
    def is_complete(self) -> bool:
        """True once the server holds every chunk."""
        if self.chunks_total is None or self.chunks_uploaded is None:
            return False
        return self.chunks_uploaded >= self.chunks_total
