"""HTTP client for the Appwrite REST API.

Provides retry logic, multipart/JSON body encoding and error mapping behind a
single ``call(method, path, headers, payload)`` primitive.
"""

from __future__ import annotations

import platform
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from appwritectl import __version__
from appwritectl.core.config import DEFAULT_CHUNK_SIZE, DEFAULT_TIMEOUT
from appwritectl.core.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    PermissionDeniedError,
    ResourceNotFoundError,
    RetryExhaustedError,
    ServerUnreachableError,
)
from appwritectl.core.validation import validate_endpoint

# =============================================================================
# Constants
# =============================================================================

DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2
RETRYABLE_STATUS_CODES = {502, 503, 504}
RESPONSE_FORMAT = "1.0.0"
MULTIPART = "multipart/form-data"
JSON = "application/json"


# =============================================================================
# Payload Helpers
# =============================================================================


@dataclass(frozen=True)
class InputFile:
    """File part of a multipart payload."""

    filename: str
    content: bytes
    mime_type: str = "application/octet-stream"

    def __repr__(self) -> str:
        return f"InputFile(filename={self.filename!r}, size={len(self.content)})"


def flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested lists and mappings into bracketed form keys.

    ``{"permissions": ["read", "write"]}`` becomes
    ``{"permissions[0]": "read", "permissions[1]": "write"}``.
    """
    output: dict[str, Any] = {}
    for key, value in data.items():
        final_key = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, (list, tuple)):
            output.update(flatten(dict(enumerate(value)), final_key))
        elif isinstance(value, Mapping):
            output.update(flatten(value, final_key))
        else:
            output[final_key] = value
    return output


def _form_value(value: Any) -> str:
    """Render a scalar as a form/query string."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =============================================================================
# AppwriteClient
# =============================================================================


@dataclass
class AppwriteClient:
    """HTTP client for the Appwrite REST API with retry and error mapping."""

    endpoint: str
    project_id: str | None = None
    api_key: str | None = None
    self_signed: bool = False
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    chunk_size: int = DEFAULT_CHUNK_SIZE
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.endpoint = validate_endpoint(self.endpoint)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.endpoint,
                timeout=self.timeout,
                verify=not self.self_signed,
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> AppwriteClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        headers = {
            "x-sdk-name": "Command Line",
            "x-sdk-platform": "console",
            "x-sdk-language": "cli",
            "x-sdk-version": __version__,
            "user-agent": (
                f"appwritectl/{__version__} "
                f"({platform.system()} {platform.release()}; {platform.machine()})"
            ),
            "x-appwrite-response-format": RESPONSE_FORMAT,
            "content-type": JSON,
        }
        if self.project_id:
            headers["x-appwrite-project"] = self.project_id
        if self.api_key:
            headers["x-appwrite-key"] = self.api_key
        return headers

    # =========================================================================
    # Transport
    # =========================================================================

    def call(
        self,
        method: str,
        path: str = "",
        headers: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        """Send one API request and return the decoded response body.

        GET payloads go to the query string, ``multipart/form-data`` payloads
        are sent as form fields plus InputFile parts, anything else as JSON.

        Args:
            method: HTTP method.
            path: API path relative to the endpoint.
            headers: Per-request headers (merged over the defaults).
            payload: Request parameters.

        Returns:
            Decoded JSON (or text) response body.

        Raises:
            APIError: If the server answers with an error status.
            NetworkError: If the request cannot be delivered.
            RetryExhaustedError: If all retries fail.
        """
        method = method.upper()
        merged = self.default_headers
        merged.update({k.lower(): v for k, v in (headers or {}).items()})
        payload = payload or {}

        params: dict[str, str] | None = None
        body: Any | None = None
        data: dict[str, str] | None = None
        files: dict[str, tuple[str, bytes, str]] | None = None

        if method == "GET":
            params = {k: _form_value(v) for k, v in flatten(payload).items()}
        elif merged["content-type"].lower().startswith(MULTIPART):
            data, files = {}, {}
            for key, value in flatten(payload).items():
                if isinstance(value, InputFile):
                    files[key] = (value.filename, value.content, value.mime_type)
                elif value is not None:
                    data[key] = _form_value(value)
            # httpx writes the boundary into its own content-type
            del merged["content-type"]
        else:
            body = dict(payload)

        resp = self._request(
            method,
            path,
            params=params,
            json=body,
            data=data,
            files=files,
            headers=merged,
        )
        return self._decode(resp)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        data: Any | None = None,
        files: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Execute HTTP request with retry logic."""
        client = self._get_client()
        last_error: Exception | None = None

        for attempt in range(self.max_retries + 1):
            try:
                resp = client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    data=data,
                    files=files,
                    headers=headers,
                )

                if resp.status_code in RETRYABLE_STATUS_CODES:
                    last_error = NetworkError(self.endpoint, f"HTTP {resp.status_code}")
                    if attempt < self.max_retries:
                        time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))
                        continue

                if resp.status_code >= 400:
                    raise self._error_from_response(resp)
                return resp

            except httpx.ConnectError:
                last_error = ServerUnreachableError(self.endpoint)
            except httpx.TimeoutException:
                last_error = NetworkError(self.endpoint, f"Timeout after {self.timeout}s")

            if attempt < self.max_retries:
                time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))

        raise RetryExhaustedError(f"{method} {path}", self.max_retries + 1, last_error)

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        """Decode a successful response body."""
        if not resp.content:
            return {}
        if resp.headers.get("content-type", "").startswith(JSON):
            return resp.json()
        return resp.text

    @staticmethod
    def _error_from_response(resp: httpx.Response) -> APIError:
        """Map an error response to the matching APIError subclass."""
        message = resp.reason_phrase or f"HTTP {resp.status_code}"
        error_type = None
        body: Any = resp.text
        try:
            body = resp.json()
        except ValueError:
            pass
        if isinstance(body, dict):
            message = body.get("message") or message
            error_type = body.get("type")
        elif isinstance(body, str) and body.strip():
            message = body.strip()

        error_cls: type[APIError] = {
            401: AuthenticationError,
            403: PermissionDeniedError,
            404: ResourceNotFoundError,
        }.get(resp.status_code, APIError)
        return error_cls(message, code=resp.status_code, type=error_type, response=body)

    # =========================================================================
    # Convenience Methods
    # =========================================================================

    def ping(self) -> dict[str, Any]:
        """Check server connectivity and get version info."""
        start = time.time()
        resp = self.call("GET", "/health/version")
        latency = int((time.time() - start) * 1000)

        version = resp.get("version", "") if isinstance(resp, dict) else str(resp).strip()
        return {
            "endpoint": self.endpoint,
            "status": "ok",
            "version": version,
            "latency_ms": latency,
        }
