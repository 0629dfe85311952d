"""Main CLI entry point for stashctl."""

from __future__ import annotations

import click

from stashctl import __version__
from stashctl.cli.config_cmd import config
from stashctl.cli.upload import upload

# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="stashctl")
def cli() -> None:
    """stashctl - Upload build artifacts to an artifact service.

    Requests presigned storage destinations, transfers files directly or in
    chunked parts, and verifies the finished upload.

    Get started:

      stashctl config init                      # Store an API key

      stashctl upload app.apk --major 1 ...     # Upload a build

    Use --help on any command for more information.
    """
    pass


# =============================================================================
# Register Commands
# =============================================================================

cli.add_command(config)
cli.add_command(upload)


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
