"""Exception hierarchy for appwritectl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class AppwriteCtlError(Exception):
    """Base exception for all appwritectl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AppwriteCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(AppwriteCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class InvalidIdentifierError(ValidationError):
    """Invalid resource identifier (function, site, bucket, file)."""

    def __init__(self, identifier_type: str, value: str, reason: str = ""):
        msg = f"Invalid {identifier_type}: {value}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field=identifier_type, value=value)
        self.identifier_type = identifier_type
        self.reason = reason


class PathValidationError(ValidationError):
    """Path validation failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid path: {path} - {reason}", field="path", value=path)
        self.path = path
        self.reason = reason


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(AppwriteCtlError):
    """Base class for failures of a single HTTP exchange."""


class ConnectionError(TransportError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class RetryExhaustedError(ConnectionError):
    """All retry attempts failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception | None = None):
        msg = f"Operation '{operation}' failed after {attempts} attempts"
        if last_error:
            msg = f"{msg}: {last_error}"
        super().__init__(msg)
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error


class APIError(TransportError):
    """Server answered with a non-success HTTP status."""

    def __init__(
        self,
        message: str,
        code: int | None = None,
        type: str | None = None,
        response: Any = None,
    ):
        details: dict[str, Any] = {}
        if code is not None:
            details["code"] = code
        if type:
            details["type"] = type
        super().__init__(message, details)
        self.code = code
        self.type = type
        self.response = response


class AuthenticationError(APIError):
    """API key or session rejected (HTTP 401)."""


class PermissionDeniedError(APIError):
    """Caller lacks the scope for the requested operation (HTTP 403)."""


class ResourceNotFoundError(APIError):
    """Requested resource does not exist (HTTP 404)."""


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(AppwriteCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during upload."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_path:
            full_details["file"] = file_path
        super().__init__("upload", message, full_details)
        self.file_path = file_path


class SourceUnreadableError(UploadError):
    """Local file cannot be opened, is not a regular file, or failed mid-read."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Cannot read {file_path}: {reason}", file_path)
        self.reason = reason


class ProtocolViolationError(UploadError):
    """Chunk response disagrees with the resource id fixed earlier in the upload."""

    def __init__(
        self,
        message: str,
        chunk: int,
        expected_id: str | None = None,
        received_id: str | None = None,
    ):
        details: dict[str, Any] = {"chunk": chunk}
        if expected_id:
            details["expected_id"] = expected_id
        if received_id:
            details["received_id"] = received_id
        super().__init__(message, details=details)
        self.chunk = chunk
        self.expected_id = expected_id
        self.received_id = received_id
