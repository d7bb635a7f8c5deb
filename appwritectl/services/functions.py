"""Function service for deployment operations."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

from appwritectl.models.deployment import Deployment
from appwritectl.uploaders.chunked import ProgressCallback

from .base import BaseService

DEPLOYMENTS_PATH = "/functions/{functionId}/deployments"
DEPLOYMENT_PATH = "/functions/{functionId}/deployments/{deploymentId}"


class FunctionService(BaseService):
    """Service for function deployments."""

    def create_deployment(
        self,
        function_id: str,
        code: Path,
        activate: bool,
        entrypoint: Optional[str] = None,
        commands: Optional[str] = None,
        ignore: Optional[Sequence[str]] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> dict[str, Any]:
        """Upload a new code deployment for a function.

        Args:
            function_id: Function ID
            code: Code directory (packaged to tar.gz) or existing archive
            activate: Activate the deployment once it is built
            entrypoint: Entrypoint file
            commands: Build commands
            ignore: Packaging exclusion patterns
            on_progress: Per-chunk progress callback

        Returns:
            Deployment metadata returned for the last chunk
        """
        payload: dict[str, Any] = {"activate": activate}
        if entrypoint is not None:
            payload["entrypoint"] = entrypoint
        if commands is not None:
            payload["commands"] = commands

        return self._upload_code(
            self._build_path(DEPLOYMENTS_PATH, functionId=function_id),
            code,
            payload,
            archive_name=f"functions-{function_id}-code.tar.gz",
            ignore=ignore,
            on_progress=on_progress,
        )

    def get_deployment(self, function_id: str, deployment_id: str) -> Deployment:
        """Get a function deployment."""
        path = self._build_path(
            DEPLOYMENT_PATH, functionId=function_id, deploymentId=deployment_id
        )
        return Deployment.model_validate(self._get(path))

    def list_deployments(
        self,
        function_id: str,
        queries: Optional[Sequence[str]] = None,
        search: Optional[str] = None,
    ) -> list[Deployment]:
        """List deployments of a function.

        Args:
            function_id: Function ID
            queries: Query strings (filters, limit, offset)
            search: Search term

        Returns:
            List of Deployment objects
        """
        path = self._build_path(DEPLOYMENTS_PATH, functionId=function_id)
        data = self._get(path, self._list_params(queries, search))
        return [Deployment.model_validate(d) for d in data.get("deployments", [])]

    def delete_deployment(self, function_id: str, deployment_id: str) -> bool:
        """Delete a function deployment."""
        return self._delete(
            self._build_path(DEPLOYMENT_PATH, functionId=function_id, deploymentId=deployment_id)
        )
