"""Core modules for appwritectl."""

from appwritectl.core.client import AppwriteClient, InputFile
from appwritectl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from appwritectl.core.exceptions import (
    APIError,
    AppwriteCtlError,
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    OperationError,
    PermissionDeniedError,
    ProtocolViolationError,
    ResourceNotFoundError,
    RetryExhaustedError,
    SourceUnreadableError,
    TransportError,
    UploadError,
    ValidationError,
)
from appwritectl.core.logging import LogContext, get_logger, log_context, setup_logging
from appwritectl.core.output import (
    OutputFormat,
    console,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from appwritectl.core.validation import (
    validate_chunk_size,
    validate_endpoint,
    validate_path_exists,
    validate_resource_id,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "AppwriteCtlError",
    "ConfigurationError",
    "ValidationError",
    "TransportError",
    "NetworkError",
    "RetryExhaustedError",
    "APIError",
    "AuthenticationError",
    "PermissionDeniedError",
    "ResourceNotFoundError",
    "OperationError",
    "UploadError",
    "SourceUnreadableError",
    "ProtocolViolationError",
    # Validation
    "validate_endpoint",
    "validate_resource_id",
    "validate_chunk_size",
    "validate_timeout",
    "validate_path_exists",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "AppwriteClient",
    "InputFile",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_context",
]
