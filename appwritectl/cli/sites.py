"""Site deployment commands for appwritectl."""

from __future__ import annotations

from typing import Optional

import click

from appwritectl.cli.common import (
    DEPLOYMENT_COLUMNS,
    DEPLOYMENT_LABELS,
    Context,
    confirm_destructive,
    global_options,
    handle_errors,
    require_project,
    upload_progress,
    warn_if_incomplete,
)
from appwritectl.core.output import print_output, print_success, print_warning
from appwritectl.core.validation import validate_path_exists, validate_resource_id
from appwritectl.services.sites import SiteService


@click.group()
def sites() -> None:
    """Manage site deployments."""
    pass


@sites.command("create-deployment")
@click.option("--site-id", required=True, help="Site ID")
@click.option("--code", required=True, help="Code directory or .tar.gz package")
@click.option("--activate/--no-activate", default=False, help="Activate once built")
@click.option("--install-command", default=None, help="Install command")
@click.option("--build-command", default=None, help="Build command")
@click.option("--output-directory", default=None, help="Build output directory")
@click.option("--ignore", multiple=True, help="Exclude matching files when packaging (repeatable)")
@global_options
@require_project
@handle_errors
def sites_create_deployment(
    ctx: Context,
    site_id: str,
    code: str,
    activate: bool,
    install_command: Optional[str],
    build_command: Optional[str],
    output_directory: Optional[str],
    ignore: tuple[str, ...],
) -> None:
    """Upload code as a new site deployment.

    Example:
        appwritectl sites create-deployment --site-id web --code ./dist --build-command "npm run build"
    """
    site_id = validate_resource_id(site_id, "site ID")
    code_path = validate_path_exists(code)
    if ignore and code_path.is_file():
        print_warning("--ignore only applies when --code is a directory")

    service = SiteService(ctx.get_client())
    with upload_progress(f"Uploading {code_path.name}", ctx.show_progress) as on_progress:
        result = service.create_deployment(
            site_id,
            code_path,
            activate,
            install_command=install_command,
            build_command=build_command,
            output_directory=output_directory,
            ignore=list(ignore) or None,
            on_progress=on_progress,
        )

    print_output(
        result,
        format=ctx.output_format,
        columns=DEPLOYMENT_COLUMNS,
        column_labels=DEPLOYMENT_LABELS,
        quiet=ctx.quiet,
    )


@sites.command("get-deployment")
@click.option("--site-id", required=True, help="Site ID")
@click.option("--deployment-id", required=True, help="Deployment ID")
@global_options
@require_project
@handle_errors
def sites_get_deployment(ctx: Context, site_id: str, deployment_id: str) -> None:
    """Show a site deployment."""
    site_id = validate_resource_id(site_id, "site ID")
    deployment_id = validate_resource_id(deployment_id, "deployment ID")

    deployment = SiteService(ctx.get_client()).get_deployment(site_id, deployment_id)
    print_output(deployment.to_dict(), format=ctx.output_format, quiet=ctx.quiet)
    warn_if_incomplete(deployment, ctx.quiet)


@sites.command("list-deployments")
@click.option("--site-id", required=True, help="Site ID")
@click.option("--queries", multiple=True, help="Query string (repeatable)")
@click.option("--search", default=None, help="Search term")
@global_options
@require_project
@handle_errors
def sites_list_deployments(
    ctx: Context,
    site_id: str,
    queries: tuple[str, ...],
    search: Optional[str],
) -> None:
    """List deployments of a site."""
    site_id = validate_resource_id(site_id, "site ID")

    deployments = SiteService(ctx.get_client()).list_deployments(
        site_id, queries=list(queries) or None, search=search
    )

    print_output(
        [d.to_dict() for d in deployments],
        format=ctx.output_format,
        columns=DEPLOYMENT_COLUMNS,
        column_labels=DEPLOYMENT_LABELS,
        quiet=ctx.quiet,
    )


@sites.command("delete-deployment")
@click.option("--site-id", required=True, help="Site ID")
@click.option("--deployment-id", required=True, help="Deployment ID")
@confirm_destructive("Delete this deployment?")
@global_options
@require_project
@handle_errors
def sites_delete_deployment(ctx: Context, site_id: str, deployment_id: str, dry_run: bool) -> None:
    """Delete a site deployment."""
    site_id = validate_resource_id(site_id, "site ID")
    deployment_id = validate_resource_id(deployment_id, "deployment ID")

    if dry_run:
        click.echo(f"[DRY-RUN] Would delete deployment {deployment_id} of {site_id}")
        return

    SiteService(ctx.get_client()).delete_deployment(site_id, deployment_id)
    if not ctx.quiet:
        print_success(f"Deleted deployment {deployment_id}")
