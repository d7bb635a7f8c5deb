"""Input validation helpers for appwritectl.

Each validator returns the normalized value or raises a ValidationError
subclass describing what was wrong.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from appwritectl.core.exceptions import (
    InvalidIdentifierError,
    InvalidURLError,
    PathValidationError,
    ValidationError,
)

# =============================================================================
# Constants
# =============================================================================

ALLOWED_SCHEMES = ("http", "https")
UNIQUE_ID = "unique()"
MAX_ID_LENGTH = 36
ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
MAX_TIMEOUT = 24 * 60 * 60


# =============================================================================
# URL Validation
# =============================================================================


def validate_endpoint(url: str) -> str:
    """Validate and normalize an API endpoint URL.

    Args:
        url: Endpoint such as ``https://cloud.appwrite.io/v1``.

    Returns:
        URL with surrounding whitespace and trailing slashes removed.

    Raises:
        InvalidURLError: If the URL is empty or malformed.
    """
    if not url or not isinstance(url, str):
        raise InvalidURLError(str(url), "URL is required")

    url = url.strip().rstrip("/")
    parsed = urlparse(url)

    if not parsed.scheme:
        raise InvalidURLError(url, "URL must include scheme (http:// or https://)")
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError(url, f"Unsupported scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidURLError(url, "URL must include hostname")

    return url


# =============================================================================
# Identifier Validation
# =============================================================================


def validate_resource_id(value: str, identifier_type: str = "resource ID") -> str:
    """Validate a custom resource ID or the ``unique()`` placeholder.

    Valid IDs use a-z, A-Z, 0-9, period, hyphen and underscore, cannot start
    with a special character, and are at most 36 characters long.

    Args:
        value: Identifier to check.
        identifier_type: Label used in error messages.

    Returns:
        The stripped identifier.

    Raises:
        InvalidIdentifierError: If the identifier is not acceptable.
    """
    if not value or not value.strip():
        raise InvalidIdentifierError(identifier_type, str(value), "cannot be empty")

    value = value.strip()
    if value == UNIQUE_ID:
        return value

    if len(value) > MAX_ID_LENGTH:
        raise InvalidIdentifierError(
            identifier_type, value, f"must be at most {MAX_ID_LENGTH} characters"
        )
    if not ID_PATTERN.match(value):
        raise InvalidIdentifierError(
            identifier_type,
            value,
            "use a-z, A-Z, 0-9, '.', '-', '_' and do not start with a special character",
        )
    return value


# =============================================================================
# Numeric Validation
# =============================================================================


def validate_chunk_size(value: Any) -> int:
    """Validate an upload chunk size in bytes."""
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid chunk size: {value}", field="chunk_size", value=value)
    if size <= 0:
        raise ValidationError(
            f"Invalid chunk size: {size} (must be positive)", field="chunk_size", value=size
        )
    return size


def validate_timeout(value: Any) -> int:
    """Validate a request timeout in seconds."""
    try:
        timeout = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid timeout: {value}", field="timeout", value=value)
    if timeout < 1 or timeout > MAX_TIMEOUT:
        raise ValidationError(
            f"Invalid timeout: {timeout} (must be 1-{MAX_TIMEOUT})",
            field="timeout",
            value=timeout,
        )
    return timeout


# =============================================================================
# Path Validation
# =============================================================================


def validate_path_exists(path: str | Path, *, must_be_dir: bool = False) -> Path:
    """Validate that a local path exists.

    Args:
        path: Path to check.
        must_be_dir: Require the path to be a directory.

    Returns:
        Resolved Path.

    Raises:
        PathValidationError: If the path is missing or of the wrong kind.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise PathValidationError(str(path), "does not exist")
    if must_be_dir and not p.is_dir():
        raise PathValidationError(str(path), "not a directory")
    return p.resolve()
