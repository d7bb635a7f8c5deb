"""Storage bucket file commands for appwritectl."""

from __future__ import annotations

from typing import Optional

import click

from appwritectl.cli.common import (
    Context,
    confirm_destructive,
    global_options,
    handle_errors,
    require_project,
    upload_progress,
    warn_if_incomplete,
)
from appwritectl.core.output import print_output, print_success
from appwritectl.core.validation import validate_path_exists, validate_resource_id
from appwritectl.services.storage import StorageService

FILE_COLUMNS = ["$id", "name", "mimeType", "sizeOriginal", "chunksUploaded", "chunksTotal"]
FILE_LABELS = {
    "$id": "ID",
    "name": "Name",
    "mimeType": "Type",
    "sizeOriginal": "Size",
    "chunksUploaded": "Chunks",
    "chunksTotal": "Of",
}


@click.group()
def storage() -> None:
    """Manage files in storage buckets."""
    pass


@storage.command("create-file")
@click.option("--bucket-id", required=True, help="Bucket ID")
@click.option("--file-id", default="unique()", show_default=True, help="File ID")
@click.option("--file", "file_path", required=True, help="Local file to upload")
@click.option("--permissions", multiple=True, help="Permission string (repeatable)")
@global_options
@require_project
@handle_errors
def storage_create_file(
    ctx: Context,
    bucket_id: str,
    file_id: str,
    file_path: str,
    permissions: tuple[str, ...],
) -> None:
    """Upload a local file into a bucket.

    Example:
        appwritectl storage create-file --bucket-id media --file ./video.mp4
        appwritectl storage create-file --bucket-id media --file ./a.png --permissions 'read("any")'
    """
    bucket_id = validate_resource_id(bucket_id, "bucket ID")
    file_id = validate_resource_id(file_id, "file ID")
    path = validate_path_exists(file_path)

    service = StorageService(ctx.get_client())
    with upload_progress(f"Uploading {path.name}", ctx.show_progress) as on_progress:
        result = service.create_file(
            bucket_id,
            file_id,
            path,
            permissions=list(permissions) if permissions else None,
            on_progress=on_progress,
        )

    print_output(
        result,
        format=ctx.output_format,
        columns=FILE_COLUMNS,
        column_labels=FILE_LABELS,
        quiet=ctx.quiet,
    )


@storage.command("get-file")
@click.option("--bucket-id", required=True, help="Bucket ID")
@click.option("--file-id", required=True, help="File ID")
@global_options
@require_project
@handle_errors
def storage_get_file(ctx: Context, bucket_id: str, file_id: str) -> None:
    """Show file metadata."""
    bucket_id = validate_resource_id(bucket_id, "bucket ID")
    file_id = validate_resource_id(file_id, "file ID")

    stored = StorageService(ctx.get_client()).get_file(bucket_id, file_id)
    print_output(stored.to_dict(), format=ctx.output_format, quiet=ctx.quiet)
    warn_if_incomplete(stored, ctx.quiet)


@storage.command("list-files")
@click.option("--bucket-id", required=True, help="Bucket ID")
@click.option("--queries", multiple=True, help="Query string (repeatable)")
@click.option("--search", default=None, help="Search term")
@global_options
@require_project
@handle_errors
def storage_list_files(
    ctx: Context,
    bucket_id: str,
    queries: tuple[str, ...],
    search: Optional[str],
) -> None:
    """List files in a bucket."""
    bucket_id = validate_resource_id(bucket_id, "bucket ID")

    files = StorageService(ctx.get_client()).list_files(
        bucket_id, queries=list(queries) or None, search=search
    )

    print_output(
        [f.to_dict() for f in files],
        format=ctx.output_format,
        columns=FILE_COLUMNS,
        column_labels=FILE_LABELS,
        quiet=ctx.quiet,
    )


@storage.command("delete-file")
@click.option("--bucket-id", required=True, help="Bucket ID")
@click.option("--file-id", required=True, help="File ID")
@confirm_destructive("Delete this file?")
@global_options
@require_project
@handle_errors
def storage_delete_file(ctx: Context, bucket_id: str, file_id: str, dry_run: bool) -> None:
    """Delete a file from a bucket."""
    bucket_id = validate_resource_id(bucket_id, "bucket ID")
    file_id = validate_resource_id(file_id, "file ID")

    if dry_run:
        click.echo(f"[DRY-RUN] Would delete file {file_id} from bucket {bucket_id}")
        return

    StorageService(ctx.get_client()).delete_file(bucket_id, file_id)
    if not ctx.quiet:
        print_success(f"Deleted file {file_id}")
