"""Upload command for stashctl."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

import click

from stashctl.cli.common import Context, global_options, handle_errors
from stashctl.core.exceptions import ConfigurationError
from stashctl.core.output import OutputFormat, print_info, print_output, print_success, print_warning
from stashctl.core.validation import parse_list
from stashctl.detect.ci import detect_ci, populate_ci
from stashctl.detect.vcs import populate_version_control
from stashctl.models.artifact import ArtifactRecord
from stashctl.models.metadata import DEFAULT_STRUCTURE, UploadMetadata
from stashctl.models.progress import UploadEvent

logger = logging.getLogger(__name__)

RECORD_LABELS = {
    "build_id": "Build ID",
    "platform": "Platform",
    "pending_processing": "Pending Processing",
    "build_info_url": "Build Info URL",
    "download_url": "Download URL",
    "message": "Message",
}


# =============================================================================
# Results File
# =============================================================================


def load_results(path: Path) -> list[dict[str, Any]]:
    """Load previously recorded upload results.

    Returns:
        Ordered list of result rows; empty if the file does not exist.

    Raises:
        ConfigurationError: If the file is not a JSON array.
    """
    if not path.exists():
        return []
    try:
        data = json.loads(path.read_text() or "[]")
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read results file: {e}", field="results_file", value=str(path))
    if not isinstance(data, list):
        raise ConfigurationError(
            "Results file must contain a JSON array", field="results_file", value=str(path)
        )
    return data


def append_result(path: Path, record: ArtifactRecord) -> list[dict[str, Any]]:
    """Append one artifact record to the results file, keeping earlier entries."""
    results = load_results(path)
    results.append(record.to_row())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(results, indent=2))
    logger.debug("Recorded upload %d in %s", len(results), path)
    return results


# =============================================================================
# Metadata
# =============================================================================


def build_metadata(
    primary: Path,
    expansion: Optional[Path],
    options: dict[str, Any],
    *,
    detect: bool = True,
) -> UploadMetadata:
    """Build upload metadata from command options.

    Detected CI and version-control values only fill fields the user left
    absent.
    """
    metadata = UploadMetadata(
        primary_file_path=primary,
        expansion_file_path=expansion,
        labels=parse_list(options.pop("labels", None)),
        architectures=parse_list(options.pop("architectures", None)),
        **options,
    )
    if not detect:
        return metadata

    metadata = populate_ci(metadata, detect_ci())
    return populate_version_control(metadata)


def _render_event(event: UploadEvent) -> None:
    print_info(event.message)


# =============================================================================
# Command
# =============================================================================


@click.command("upload")
@click.argument("primary", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--expansion",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Expansion file uploaded alongside the primary file",
)
@click.option("--structure", default=DEFAULT_STRUCTURE, show_default=True, help="Upload structure")
@click.option("--major", help="Major version component")
@click.option("--minor", help="Minor version component")
@click.option("--patch", help="Patch version component")
@click.option("--extra", help="Extra version component (e.g. beta)")
@click.option("--meta", help="Meta version component (e.g. build metadata)")
@click.option("--build-number", "custom_build_number", help="Custom build number")
@click.option("--platform", help="Platform the build targets")
@click.option("--stream", help="Stream the build is filed under")
@click.option("--notes", help="Release notes")
@click.option("--labels", help="Labels, comma or newline separated")
@click.option("--architectures", help="Architectures, comma or newline separated")
@click.option("--source", help="Upload source (defaults to the detected CI server)")
@click.option("--ci-build-duration", help="Build duration as HH:MM:SS")
@click.option("--vc-host-type", help="Version control system (git, svn)")
@click.option("--vc-host", help="Version control host (github, gitlab, ...)")
@click.option("--vc-repo-name", help="Repository name")
@click.option("--vc-repo-url", help="Repository URL")
@click.option("--vc-branch", help="Branch name")
@click.option("--vc-commit-sha", help="Commit SHA or revision")
@click.option("--vc-commit-url", help="Commit web URL")
@click.option(
    "--detect/--no-detect",
    default=True,
    help="Fill absent CI and version control fields from the environment",
)
@click.option(
    "--send-part-receipts",
    is_flag=True,
    help="Send chunked-part ETags when verifying the upload",
)
@click.option(
    "--results-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON file collecting one record per upload",
)
@global_options
@handle_errors
def upload(
    ctx: Context,
    primary: Path,
    expansion: Optional[Path],
    detect: bool,
    send_part_receipts: bool,
    results_file: Optional[Path],
    **options: Any,
) -> None:
    """Upload a build artifact and verify it.

    Example:
        stashctl upload app.apk --major 1 --minor 2 --patch 3 \\
            --platform android --stream default
    """
    from stashctl.services.uploads import UploadService

    metadata = build_metadata(primary, expansion, options, detect=detect)
    client = ctx.get_client()

    show_progress = ctx.output_format == OutputFormat.TABLE and not ctx.quiet
    service = UploadService(
        client,
        send_part_receipts=send_part_receipts,
        progress_callback=_render_event if show_progress else None,
    )

    try:
        record = service.upload(metadata)
    finally:
        client.close()

    if results_file is not None:
        append_result(results_file, record)

    if ctx.quiet:
        print_output(record.to_row(), quiet=True)
        return

    if ctx.output_format == OutputFormat.JSON:
        print_output(record.to_row(), format=OutputFormat.JSON)
        return

    print_success("Upload completed successfully")
    print_output(record.to_row(), key_labels=RECORD_LABELS)
    if record.pending_processing:
        print_warning("Build is still being processed by the server")
