"""Tests for stashctl CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from stashctl.cli.common import Context
from stashctl.cli.main import cli
from stashctl.cli.upload import append_result, build_metadata, load_results
from stashctl.core.config import Config, Profile
from stashctl.core.exceptions import ConfigurationError, ProtocolError
from stashctl.detect.ci import CiInfo
from stashctl.models.artifact import ArtifactRecord

RECORD = ArtifactRecord.model_validate(
    {
        "message": "Upload verified",
        "build_id": "build-1",
        "pending_processing": False,
        "build_info_url": "https://app.test/builds/build-1",
        "download_url": "https://app.test/download/build-1",
        "build": {"platform": {"short_name": "android"}},
    }
)

VERSION_ARGS = [
    "--major", "1",
    "--minor", "2",
    "--patch", "3",
    "--platform", "android",
    "--stream", "default",
]


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def no_config():
    """Keep the user's config file out of CLI tests."""
    with patch("stashctl.cli.common.Config.load", return_value=Config()):
        yield


@pytest.fixture
def upload_service():
    """Patch the upload service and return the mocked class."""
    with patch("stashctl.services.uploads.UploadService") as mock_cls:
        mock_cls.return_value.upload.return_value = RECORD
        yield mock_cls


# =============================================================================
# Basic CLI Tests
# =============================================================================


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_cli_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "stashctl" in result.output
        assert "upload" in result.output
        assert "config" in result.output

    def test_cli_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "stashctl" in result.output
        assert "0.1.0" in result.output

    def test_upload_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["upload", "--help"])
        assert result.exit_code == 0
        assert "--expansion" in result.output
        assert "--send-part-receipts" in result.output
        assert "--results-file" in result.output


# =============================================================================
# Upload Command Tests
# =============================================================================


class TestUploadCommand:
    """Tests for the upload command."""

    def test_upload_table_output(self, runner, no_config, upload_service, make_file):
        primary = make_file("build.apk")

        result = runner.invoke(
            cli,
            ["upload", str(primary), *VERSION_ARGS, "--labels", "qa,nightly", "--no-detect"],
            env={"STASH_API_KEY": "abc"},
        )

        assert result.exit_code == 0, result.output
        assert "Upload completed successfully" in result.output
        assert "build-1" in result.output

        _, kwargs = upload_service.call_args
        assert kwargs["send_part_receipts"] is False
        metadata = upload_service.return_value.upload.call_args.args[0]
        assert metadata.primary_file_path == primary
        assert metadata.major == "1"
        assert metadata.labels == ("qa", "nightly")
        assert metadata.structure == "file"

    def test_upload_json_output(self, runner, no_config, upload_service, make_file):
        result = runner.invoke(
            cli,
            ["upload", str(make_file()), *VERSION_ARGS, "--no-detect", "-o", "json"],
            env={"STASH_API_KEY": "abc"},
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["build_id"] == "build-1"
        assert data["platform"] == "android"
        assert upload_service.call_args.kwargs["progress_callback"] is None

    def test_upload_quiet_prints_build_id(self, runner, no_config, upload_service, make_file):
        result = runner.invoke(
            cli,
            ["upload", str(make_file()), *VERSION_ARGS, "--no-detect", "-q"],
            env={"STASH_API_KEY": "abc"},
        )

        assert result.exit_code == 0
        assert result.stdout.strip() == "build-1"

    def test_upload_passes_receipt_flag(self, runner, no_config, upload_service, make_file):
        result = runner.invoke(
            cli,
            ["upload", str(make_file()), *VERSION_ARGS, "--no-detect", "--send-part-receipts"],
            env={"STASH_API_KEY": "abc"},
        )

        assert result.exit_code == 0
        assert upload_service.call_args.kwargs["send_part_receipts"] is True

    def test_upload_without_api_key_fails(self, runner, no_config, upload_service, make_file):
        result = runner.invoke(
            cli,
            ["upload", str(make_file()), *VERSION_ARGS, "--no-detect"],
            env={"STASH_API_KEY": ""},
        )

        assert result.exit_code == 1
        assert "No API key configured" in result.output
        upload_service.return_value.upload.assert_not_called()

    def test_upload_error_exits_nonzero(self, runner, no_config, upload_service, make_file):
        upload_service.return_value.upload.side_effect = ProtocolError(
            "request upload URLs", 401, "Unauthenticated", endpoint="/upload/request"
        )

        result = runner.invoke(
            cli,
            ["upload", str(make_file()), *VERSION_ARGS, "--no-detect"],
            env={"STASH_API_KEY": "abc"},
        )

        assert result.exit_code == 1
        assert "Failed to request upload URLs: 401" in result.output

    def test_upload_appends_results_file(
        self, runner, no_config, upload_service, make_file, temp_dir: Path
    ):
        results_file = temp_dir / "results.json"
        results_file.write_text(json.dumps([{"build_id": "earlier"}]))

        result = runner.invoke(
            cli,
            [
                "upload", str(make_file()), *VERSION_ARGS,
                "--no-detect", "--results-file", str(results_file),
            ],
            env={"STASH_API_KEY": "abc"},
        )

        assert result.exit_code == 0, result.output
        rows = json.loads(results_file.read_text())
        assert [row["build_id"] for row in rows] == ["earlier", "build-1"]

    def test_upload_fills_detected_metadata(self, runner, no_config, upload_service, make_file):
        with patch(
            "stashctl.cli.upload.detect_ci",
            return_value=CiInfo(source="jenkins", pipeline="app", run_id="41"),
        ), patch("stashctl.cli.upload.populate_version_control", side_effect=lambda m: m):
            result = runner.invoke(
                cli,
                ["upload", str(make_file()), *VERSION_ARGS, "--vc-branch", "manual"],
                env={"STASH_API_KEY": "abc"},
            )

        assert result.exit_code == 0, result.output
        metadata = upload_service.return_value.upload.call_args.args[0]
        assert metadata.source == "jenkins"
        assert metadata.ci_run_id == "41"
        assert metadata.vc_branch == "manual"


# =============================================================================
# Helper Tests
# =============================================================================


class TestResultsFile:
    """Tests for results file helpers."""

    def test_missing_file_is_empty(self, temp_dir: Path):
        assert load_results(temp_dir / "results.json") == []

    def test_append_creates_file(self, temp_dir: Path):
        path = temp_dir / "out" / "results.json"

        rows = append_result(path, RECORD)

        assert rows == [RECORD.to_row()]
        assert json.loads(path.read_text()) == rows

    def test_non_array_file_rejected(self, temp_dir: Path):
        path = temp_dir / "results.json"
        path.write_text('{"build_id": "x"}')

        with pytest.raises(ConfigurationError, match="JSON array"):
            load_results(path)


class TestBuildMetadata:
    """Tests for build_metadata."""

    def test_blank_options_are_absent(self, make_file):
        metadata = build_metadata(
            make_file(),
            None,
            {"major": "1", "notes": "  ", "labels": " , ", "architectures": "arm64\nx86_64"},
            detect=False,
        )

        assert metadata.notes is None
        assert metadata.labels is None
        assert metadata.architectures == ("arm64", "x86_64")


class TestContext:
    """Tests for the CLI context."""

    def test_get_client_uses_profile(self, monkeypatch):
        monkeypatch.delenv("STASH_API_KEY", raising=False)
        ctx = Context()
        ctx.config = Config(
            default_profile="ci",
            profiles={
                "ci": Profile(
                    url="https://stash.example.org/api/v1/",
                    api_key="profile-key",
                    timeout=12,
                    transfer_timeout=300,
                )
            },
        )

        client = ctx.get_client()

        assert client.base_url == "https://stash.example.org/api/v1"
        assert client.api_key == "profile-key"
        assert client.timeout == 12
        assert client.transfer_timeout == 300
        assert ctx.get_client() is client

    def test_unknown_profile_raises(self):
        ctx = Context()
        ctx.config = Config(profiles={"ci": Profile(api_key="k")})
        ctx.profile_name = "staging"

        with pytest.raises(ConfigurationError, match="Profile 'staging' not found"):
            ctx.get_client()

    def test_missing_api_key_raises(self, monkeypatch):
        monkeypatch.delenv("STASH_API_KEY", raising=False)
        ctx = Context()
        ctx.config = Config()

        with pytest.raises(ConfigurationError, match="No API key configured"):
            ctx.get_client()
