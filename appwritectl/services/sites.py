"""Site service for deployment operations."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

from appwritectl.models.deployment import Deployment
from appwritectl.uploaders.chunked import ProgressCallback

from .base import BaseService

DEPLOYMENTS_PATH = "/sites/{siteId}/deployments"
DEPLOYMENT_PATH = "/sites/{siteId}/deployments/{deploymentId}"


class SiteService(BaseService):
    """Service for site deployments."""

    def create_deployment(
        self,
        site_id: str,
        code: Path,
        activate: bool,
        install_command: Optional[str] = None,
        build_command: Optional[str] = None,
        output_directory: Optional[str] = None,
        ignore: Optional[Sequence[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> dict[str, Any]:
        """Upload a new code deployment for a site.

        Args:
            site_id: Site ID
            code: Code directory (packaged to tar.gz) or existing archive
            activate: Activate the deployment once it is built
            install_command: Install command
            build_command: Build command
            output_directory: Build output directory
            ignore: Packaging exclusion patterns
            on_progress: Per-chunk progress callback

        Returns:
            Deployment metadata returned for the last chunk
        """
        payload: dict[str, Any] = {"activate": activate}
        if install_command is not None:
            payload["installCommand"] = install_command
        if build_command is not None:
            payload["buildCommand"] = build_command
        if output_directory is not None:
            payload["outputDirectory"] = output_directory

        return self._upload_code(
            self._build_path(DEPLOYMENTS_PATH, siteId=site_id),
            code,
            payload,
            archive_name=f"sites-{site_id}-code.tar.gz",
            ignore=ignore,
            on_progress=on_progress,
        )

    def get_deployment(self, site_id: str, deployment_id: str) -> Deployment:
        """Get a site deployment."""
        path = self._build_path(DEPLOYMENT_PATH, siteId=site_id, deploymentId=deployment_id)
        return Deployment.model_validate(self._get(path))

    def list_deployments(
        self,
        site_id: str,
        queries: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
    ) -> list[Deployment]:
        """List deployments of a site."""
        path = self._build_path(DEPLOYMENTS_PATH, siteId=site_id)
        data = self._get(path, self._list_params(queries, search))
        return [Deployment.model_validate(d) for d in data.get("deployments", [])]

    def delete_deployment(self, site_id: str, deployment_id: str) -> bool:
        """Delete a site deployment."""
        return self._delete(
            self._build_path(DEPLOYMENT_PATH, siteId=site_id, deploymentId=deployment_id)
        )
