"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from appwritectl.core.client import AppwriteClient
from appwritectl.core.config import Config, get_api_key
from appwritectl.core.exceptions import (
    AppwriteCtlError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    PermissionDeniedError,
    ProfileNotFoundError,
)
from appwritectl.core.logging import setup_logging
from appwritectl.core.output import OutputFormat, create_progress, print_error, print_warning
from appwritectl.models.base import ChunkedResource
from appwritectl.models.progress import ProgressEvent

F = TypeVar("F", bound=Callable[..., Any])

DEPLOYMENT_COLUMNS = ["$id", "status", "sourceSize", "activate", "chunksUploaded", "chunksTotal"]
DEPLOYMENT_LABELS = {
    "$id": "ID",
    "status": "Status",
    "sourceSize": "Size",
    "activate": "Activate",
    "chunksUploaded": "Chunks",
    "chunksTotal": "Of",
}


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.client: Optional[AppwriteClient] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False

    @property
    def show_progress(self) -> bool:
        """Progress bars only make sense for interactive table output."""
        return not self.quiet and self.output_format == OutputFormat.TABLE

    def get_client(self) -> AppwriteClient:
        """Get or create the API client for the selected profile.

        Raises:
            ConfigurationError: If no profile configured.
        """
        if self.client is not None:
            return self.client

        if self.config is None:
            self.config = Config.load()

        try:
            profile = self.config.get_profile(self.profile_name)
        except ProfileNotFoundError:
            raise ConfigurationError(
                f"Profile '{self.profile_name or self.config.default_profile}' not found. "
                "Run 'appwritectl config init' to create one."
            )

        self.client = AppwriteClient(
            endpoint=profile.endpoint,
            project_id=profile.project_id,
            api_key=get_api_key(),
            self_signed=profile.self_signed,
            timeout=profile.timeout,
            chunk_size=profile.chunk_size,
        )
        return self.client


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="APPWRITE_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output (IDs only)",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)

        if ctx.config is None:
            ctx.config = Config.load()

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Project Decorator
# =============================================================================


def require_project(f: F) -> F:
    """Ensure a project ID and API key are available before running."""

    @wraps(f)
    def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        try:
            client = ctx.get_client()
        except ConfigurationError as e:
            raise click.ClickException(str(e))

        if not client.project_id:
            raise click.ClickException(
                "No project configured. Run 'appwritectl config init' or set APPWRITE_PROJECT."
            )
        if not client.api_key:
            raise click.ClickException("No API key. Set APPWRITE_KEY.")

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Destructive Operation Decorators
# =============================================================================


def confirm_destructive(message: str) -> Callable[[F], F]:
    """Require confirmation for destructive operations."""

    def decorator(f: F) -> F:
        @click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
        @click.option("--dry-run", is_flag=True, help="Preview without making changes")
        @wraps(f)
        def wrapper(*args: Any, yes: bool, dry_run: bool, **kwargs: Any) -> Any:
            if dry_run:
                click.echo("[DRY-RUN] Preview mode - no changes will be made", err=True)
            elif not yes:
                click.confirm(message, abort=True)
            kwargs["dry_run"] = dry_run
            return f(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


# =============================================================================
# Progress
# =============================================================================


@contextmanager
def upload_progress(
    description: str, enabled: bool = True
) -> Iterator[Optional[Callable[[ProgressEvent], None]]]:
    """Yield a progress callback that drives a Rich progress bar.

    Yields None when disabled, so services skip progress reporting entirely.
    """
    if not enabled:
        yield None
        return

    with create_progress() as progress:
        task = progress.add_task(description, total=None)

        def on_progress(event: ProgressEvent) -> None:
            progress.update(task, completed=event.size_uploaded, total=event.total_size)
            if event.is_complete:
                progress.update(task, description=f"{description}: done")

        yield on_progress


def warn_if_incomplete(resource: ChunkedResource, quiet: bool = False) -> None:
    """Warn when the server still lacks chunks of an uploaded resource."""
    if quiet or resource.chunks_total is None or resource.is_complete:
        return
    print_warning(
        f"Upload of {resource.id} is incomplete: "
        f"{resource.chunks_uploaded or 0} of {resource.chunks_total} chunks received"
    )


# =============================================================================
# Error Handling
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3
    PERMISSION_ERROR = 4


def exit_code_for(error: AppwriteCtlError) -> int:
    """Map an error to the process exit code."""
    if isinstance(error, AuthenticationError):
        return ExitCode.AUTH_ERROR
    if isinstance(error, PermissionDeniedError):
        return ExitCode.PERMISSION_ERROR
    if isinstance(error, ConnectionError):
        return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exit codes."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except AppwriteCtlError as e:
            print_error(str(e))
            sys.exit(exit_code_for(e))
        except click.ClickException:
            raise
        except Exception as e:
            print_error(f"Unexpected error: {e}")
            sys.exit(ExitCode.GENERAL_ERROR)

    return wrapper  # type: ignore
