"""Config commands for appwritectl."""

from __future__ import annotations

from typing import Optional

import click

import appwritectl.core.config as config_store
from appwritectl.core.config import DEFAULT_CHUNK_SIZE, DEFAULT_TIMEOUT, Config
from appwritectl.core.exceptions import AppwriteCtlError
from appwritectl.core.output import (
    OutputFormat,
    print_error,
    print_key_value,
    print_output,
    print_success,
)
from appwritectl.core.validation import (
    validate_chunk_size,
    validate_endpoint,
    validate_resource_id,
    validate_timeout,
)


def _load() -> Config:
    try:
        return Config.load()
    except AppwriteCtlError as e:
        print_error(str(e))
        raise SystemExit(1)


@click.group()
def config() -> None:
    """Manage appwritectl configuration."""
    pass


@config.command("init")
@click.option("--endpoint", prompt="Appwrite endpoint", help="API endpoint, e.g. https://cloud.appwrite.io/v1")
@click.option("--project", default=None, help="Project ID")
@click.option("--profile", default="default", help="Profile name")
@click.option("--timeout", type=int, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
@click.option("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="Upload chunk size in bytes")
@click.option("--self-signed", is_flag=True, help="Accept self-signed TLS certificates")
@click.option("--force", is_flag=True, help="Overwrite existing profile")
def config_init(
    endpoint: str,
    project: Optional[str],
    profile: str,
    timeout: int,
    chunk_size: int,
    self_signed: bool,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        appwritectl config init --endpoint https://cloud.appwrite.io/v1 --project demo
    """
    try:
        endpoint = validate_endpoint(endpoint)
        if project is not None:
            project = validate_resource_id(project, "project ID")
        timeout = validate_timeout(timeout)
        chunk_size = validate_chunk_size(chunk_size)
    except AppwriteCtlError as e:
        print_error(str(e))
        raise SystemExit(1)

    cfg = _load()
    if cfg.has_profile(profile) and not force:
        print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
        raise SystemExit(1)

    cfg.add_profile(
        name=profile,
        endpoint=endpoint,
        project_id=project,
        self_signed=self_signed,
        timeout=timeout,
        chunk_size=chunk_size,
    )

    # The first profile becomes the default
    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {config_store.CONFIG_FILE}")
    print_key_value(
        {
            "profile": profile,
            "endpoint": endpoint,
            "project": project or "-",
        }
    )


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    cfg = _load()

    if not cfg.profiles:
        print_error("No configuration found. Run 'appwritectl config init' first.")
        raise SystemExit(1)

    data = {
        "config_file": str(config_store.CONFIG_FILE),
        "default_profile": cfg.default_profile,
        "output_format": cfg.output_format,
        "profiles": list(cfg.profiles.keys()),
    }

    if output == "json":
        data["profile_details"] = {name: p.to_dict() for name, p in cfg.profiles.items()}
        print_output(data, format=OutputFormat.JSON)
        return

    print_key_value(data, title="Configuration")
    click.echo()
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "endpoint": profile.endpoint,
                "project": profile.project_id or "-",
                "self_signed": profile.self_signed,
                "timeout": f"{profile.timeout}s",
                "chunk_size": profile.chunk_size,
            }
        )
        click.echo()


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        appwritectl config use-context production
    """
    cfg = _load()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")


@config.command("current-context")
def config_current_context() -> None:
    """Show the current active profile."""
    cfg = _load()

    if not cfg.profiles:
        print_error("No configuration found.")
        raise SystemExit(1)

    click.echo(cfg.default_profile)
