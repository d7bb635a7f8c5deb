"""Function deployment commands for appwritectl."""

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
from appwritectl.services.functions import FunctionService


@click.group()
def functions() -> None:
    """Manage function deployments."""
    pass


@functions.command("create-deployment")
@click.option("--function-id", required=True, help="Function ID")
@click.option("--code", required=True, help="Code directory or .tar.gz package")
@click.option("--activate/--no-activate", default=False, help="Activate once built")
@click.option("--entrypoint", default=None, help="Entrypoint file")
@click.option("--commands", default=None, help="Build commands")
@click.option(
    "--ignore",
    multiple=True,
    help="Exclude matching files when packaging a directory (repeatable, defaults to .gitignore)",
)
@global_options
@require_project
@handle_errors
def functions_create_deployment(
    ctx: Context,
    function_id: str,
    code: str,
    activate: bool,
    entrypoint: Optional[str],
    commands: Optional[str],
    ignore: tuple[str, ...],
) -> None:
    """Upload code as a new function deployment.

    Large packages are sent in chunks with a progress bar.

    Example:
        appwritectl functions create-deployment --function-id api --code ./src --activate
    """
    function_id = validate_resource_id(function_id, "function ID")
    code_path = validate_path_exists(code)
    if ignore and code_path.is_file():
        print_warning("--ignore only applies when --code is a directory")

    service = FunctionService(ctx.get_client())
    with upload_progress(f"Uploading {code_path.name}", ctx.show_progress) as on_progress:
        result = service.create_deployment(
            function_id,
            code_path,
            activate,
            entrypoint=entrypoint,
            commands=commands,
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


@functions.command("get-deployment")
@click.option("--function-id", required=True, help="Function ID")
@click.option("--deployment-id", required=True, help="Deployment ID")
@global_options
@require_project
@handle_errors
def functions_get_deployment(ctx: Context, function_id: str, deployment_id: str) -> None:
    """Show a function deployment."""
    function_id = validate_resource_id(function_id, "function ID")
    deployment_id = validate_resource_id(deployment_id, "deployment ID")

    deployment = FunctionService(ctx.get_client()).get_deployment(function_id, deployment_id)

    print_output(
        deployment.to_dict(),
        format=ctx.output_format,
        quiet=ctx.quiet,
    )
    warn_if_incomplete(deployment, ctx.quiet)


@functions.command("list-deployments")
@click.option("--function-id", required=True, help="Function ID")
@click.option("--queries", multiple=True, help="Query string (repeatable)")
@click.option("--search", default=None, help="Search term")
@global_options
@require_project
@handle_errors
def functions_list_deployments(
    ctx: Context,
    function_id: str,
    queries: tuple[str, ...],
    search: Optional[str],
) -> None:
    """List deployments of a function."""
    function_id = validate_resource_id(function_id, "function ID")

    deployments = FunctionService(ctx.get_client()).list_deployments(
        function_id, queries=list(queries) or None, search=search
    )

    print_output(
        [d.to_dict() for d in deployments],
        format=ctx.output_format,
        columns=DEPLOYMENT_COLUMNS,
        column_labels=DEPLOYMENT_LABELS,
        quiet=ctx.quiet,
    )


@functions.command("delete-deployment")
@click.option("--function-id", required=True, help="Function ID")
@click.option("--deployment-id", required=True, help="Deployment ID")
@confirm_destructive("Delete this deployment?")
@global_options
@require_project
@handle_errors
def functions_delete_deployment(
    ctx: Context, function_id: str, deployment_id: str, dry_run: bool
) -> None:
    """Delete a function deployment."""
    function_id = validate_resource_id(function_id, "function ID")
    deployment_id = validate_resource_id(deployment_id, "deployment ID")

    if dry_run:
        click.echo(f"[DRY-RUN] Would delete deployment {deployment_id} of {function_id}")
        return

    FunctionService(ctx.get_client()).delete_deployment(function_id, deployment_id)
    if not ctx.quiet:
        print_success(f"Deleted deployment {deployment_id}")
