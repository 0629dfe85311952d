"""CI server detection for upload metadata."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

from stashctl.models.metadata import UploadMetadata

logger = logging.getLogger(__name__)


def format_build_duration(duration_ms: int) -> str:
    """Format a duration in milliseconds as ``HH:MM:SS``.

    Example:
        >>> format_build_duration(3_725_000)
        '01:02:05'
    """
    total_seconds = max(duration_ms, 0) // 1000
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


@dataclass(frozen=True)
class CiInfo:
    """Pipeline details reported by a CI server."""

    source: str
    pipeline: Optional[str] = None
    run_id: Optional[str] = None
    run_url: Optional[str] = None
    pipeline_url: Optional[str] = None
    build_duration: Optional[str] = None


class CiInfoProvider:
    """Reads one CI server's environment variables."""

    source = "generic"
    marker = ""

    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        self.env = os.environ if env is None else env

    def get(self, name: str) -> Optional[str]:
        value = self.env.get(name)
        if value is None or not value.strip():
            return None
        return value.strip()

    def is_active(self) -> bool:
        return self.get(self.marker) is not None

    def info(self) -> CiInfo:
        raise NotImplementedError


class JenkinsProvider(CiInfoProvider):
    source = "jenkins"
    marker = "JENKINS_URL"

    def info(self) -> CiInfo:
        return CiInfo(
            source=self.source,
            pipeline=self.get("JOB_NAME"),
            run_id=self.get("BUILD_NUMBER"),
            run_url=self.get("BUILD_URL"),
            pipeline_url=self.get("JOB_URL"),
        )


class GitHubActionsProvider(CiInfoProvider):
    source = "github-actions"
    marker = "GITHUB_ACTIONS"

    def info(self) -> CiInfo:
        server = self.get("GITHUB_SERVER_URL") or "https://github.com"
        repository = self.get("GITHUB_REPOSITORY")
        run_id = self.get("GITHUB_RUN_ID")

        repo_url = f"{server.rstrip('/')}/{repository}" if repository else None
        run_url = f"{repo_url}/actions/runs/{run_id}" if repo_url and run_id else None
        return CiInfo(
            source=self.source,
            pipeline=self.get("GITHUB_WORKFLOW"),
            run_id=run_id,
            run_url=run_url,
            pipeline_url=f"{repo_url}/actions" if repo_url else None,
        )


class GitLabCiProvider(CiInfoProvider):
    source = "gitlab-ci"
    marker = "GITLAB_CI"

    def info(self) -> CiInfo:
        project_url = self.get("CI_PROJECT_URL")
        return CiInfo(
            source=self.source,
            pipeline=self.get("CI_PROJECT_PATH") or self.get("CI_PROJECT_NAME"),
            run_id=self.get("CI_PIPELINE_ID"),
            run_url=self.get("CI_PIPELINE_URL"),
            pipeline_url=f"{project_url}/-/pipelines" if project_url else None,
        )


def default_ci_providers(
    env: Optional[Mapping[str, str]] = None,
) -> Sequence[CiInfoProvider]:
    return (JenkinsProvider(env), GitHubActionsProvider(env), GitLabCiProvider(env))


def detect_ci(env: Optional[Mapping[str, str]] = None) -> Optional[CiInfo]:
    """Return details of the CI server running this process, if any."""
    for provider in default_ci_providers(env):
        if provider.is_active():
            info = provider.info()
            logger.debug("Detected CI server: %s", info.source)
            return info
    return None


def populate_ci(
    metadata: UploadMetadata,
    info: Optional[CiInfo],
) -> UploadMetadata:
    """Return a copy of metadata with absent CI fields filled from info."""
    if info is None:
        return metadata

    detected = {
        "source": info.source,
        "ci_pipeline": info.pipeline,
        "ci_run_id": info.run_id,
        "ci_run_url": info.run_url,
        "ci_pipeline_url": info.pipeline_url,
        "ci_build_duration": info.build_duration,
    }
    updates = {k: v for k, v in detected.items() if v and not getattr(metadata, k)}
    if not updates:
        return metadata
    return metadata.model_copy(update=updates)
