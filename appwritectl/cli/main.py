"""Main CLI entry point for appwritectl."""

from __future__ import annotations

import click

from appwritectl import __version__
from appwritectl.cli.common import Context, global_options, handle_errors
from appwritectl.cli.config_cmd import config
from appwritectl.cli.functions import functions
from appwritectl.cli.sites import sites
from appwritectl.cli.storage import storage
from appwritectl.core.output import OutputFormat, print_output, print_success

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="appwritectl")
def cli() -> None:
    """appwritectl - Deploy code and upload files to Appwrite.

    Large packages and files are uploaded in chunks with progress reporting.

    Get started:

      appwritectl config init                 # Create config file

      export APPWRITE_KEY=...                 # API key for the project

      appwritectl functions create-deployment --function-id api --code ./src

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Command Groups
# =============================================================================

cli.add_command(config)
cli.add_command(functions)
cli.add_command(sites)
cli.add_command(storage)


# =============================================================================
# Top-Level Commands
# =============================================================================


@cli.group()
def health() -> None:
    """Server health and connectivity checks."""
    pass


@health.command("ping")
@global_options
@handle_errors
def health_ping(ctx: Context) -> None:
    """Check endpoint connectivity and report the server version."""
    result = ctx.get_client().ping()

    if ctx.output_format == OutputFormat.JSON:
        print_output(result, format=OutputFormat.JSON)
        return

    if not ctx.quiet:
        print_success(f"Server reachable: {result['endpoint']}")
    print_output(
        {
            "status": result["status"],
            "version": result["version"],
            "latency": f"{result['latency_ms']}ms",
        },
        format=OutputFormat.TABLE,
        quiet=ctx.quiet,
        id_field="version",
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
