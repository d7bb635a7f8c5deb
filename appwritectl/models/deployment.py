"""Deployment model for function and site code uploads."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from .base import ChunkedResource


class Deployment(ChunkedResource):
    """Uploaded code package of a function or site."""

    resource_id: Optional[str] = Field(None, alias="resourceId", description="Owner ID")
    resource_type: Optional[str] = Field(
        None, alias="resourceType", description="functions or sites"
    )
    entrypoint: Optional[str] = Field(None, description="Function entrypoint file")
    source_size: Optional[int] = Field(None, alias="sourceSize", description="Package size")
    build_size: Optional[int] = Field(None, alias="buildSize", description="Build output size")
    activate: Optional[bool] = Field(None, description="Activate when build finishes")
    status: Optional[str] = Field(None, description="Build status")

    @property
    def size_mb(self) -> float:
        """Return package size in megabytes."""
        if self.source_size:
            return self.source_size / (1024 * 1024)
        return 0.0
