"""appwritectl - A CLI for Appwrite REST workflows.

This package provides a command-line interface for an Appwrite backend,
supporting common workflows like:
- Upload function and site code deployments (packaged and chunked)
- Upload large files to storage buckets with progress reporting
- Inspect and delete deployments and files
"""

__version__ = "0.1.0"

from appwritectl.core.client import AppwriteClient
from appwritectl.core.config import Config, Profile
from appwritectl.core.exceptions import (
    APIError,
    AppwriteCtlError,
    ConfigurationError,
    ProtocolViolationError,
    SourceUnreadableError,
    TransportError,
    ValidationError,
)

__all__ = [
    "__version__",
    "AppwriteClient",
    "Config",
    "Profile",
    "AppwriteCtlError",
    "APIError",
    "ConfigurationError",
    "ProtocolViolationError",
    "SourceUnreadableError",
    "TransportError",
    "ValidationError",
]
