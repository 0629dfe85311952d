"""Version-control detection for upload metadata.

Each supported source-control system is a small provider answering three
questions (repository URL, branch, commit id). An unanswerable question
returns None; detection never fails an upload.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import urlparse

from stashctl.models.metadata import UploadMetadata

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 5

# Substring -> host id, checked in order (hosted before self-hosted)
HOST_PATTERNS: Sequence[tuple[tuple[str, ...], str]] = (
    (("github.com",), "github"),
    (("gitlab.com",), "gitlab"),
    (("gitlab",), "gitlab-self"),
    (("bitbucket.org",), "bitbucket"),
    (("azure.com", "visualstudio.com"), "azure-repos"),
    (("gitea",), "gitea"),
    (("forgejo",), "forgejo"),
    (("gogs",), "gogs"),
    (("codeberg",), "codeberg"),
    (("sourceforge.com", "sourceforge.net"), "sourceforge"),
    (("sourcehut", "sr.ht"), "sourcehut"),
    (("codecommit",), "aws-codecommit"),
    (("perforce",), "perforce"),
    (("gitee",), "gitee"),
    (("riouxsvn",), "riouxsvn"),
    (("assembla.com",), "assembla"),
)

# Hosts whose commit pages live at <repo>/commit/<sha>
PLAIN_COMMIT_HOSTS = {
    "github",
    "gitea",
    "forgejo",
    "gogs",
    "codeberg",
    "sourcehut",
    "azure-repos",
    "gitee",
}

SVN_REVISION_VARS = ("SVN_REVISION", "SVN_REV", "SVN_REVISION_NUMBER", "SVN_VERSION")
BRANCH_PREFIXES = re.compile(r"^(refs/heads/|origin/|\*/|\*)")
NUMERIC_REVISION = re.compile(r"^\d+$")


# =============================================================================
# URL Helpers
# =============================================================================


def detect_host_from_url(url: Optional[str]) -> Optional[str]:
    """Identify the hosting service from a repository URL."""
    if not url or not url.strip():
        return None
    lower_url = url.lower()
    for needles, host in HOST_PATTERNS:
        if any(needle in lower_url for needle in needles):
            return host
    return None


def _strip_query(segment: str) -> str:
    return segment.split("?", 1)[0].split("#", 1)[0]


def extract_repo_name_from_url(url: Optional[str]) -> Optional[str]:
    """Extract the repository name from an HTTP(S), SSH or scp-style URL.

    Handles Azure Repos (``.../_git/<repo>``) and Bitbucket Server
    (``/scm/<project>/<repo>``, ``/projects/<P>/repos/<repo>``) layouts.
    """
    if not url or not url.strip():
        return None

    url = re.sub(r"\.git$", "", url.strip().rstrip("/"))
    host = detect_host_from_url(url)

    parsed = urlparse(url)
    path = parsed.path if parsed.scheme else url.split(":", 1)[-1]
    parts = [p for p in path.split("/") if p]
    if not parts:
        return None

    if host == "azure-repos":
        lowered = [p.lower() for p in parts]
        if "_git" in lowered:
            index = lowered.index("_git")
            if index + 1 < len(parts):
                return _strip_query(parts[index + 1])

    if "repos" in parts and ("projects" in parts or "users" in parts):
        index = parts.index("repos")
        if index + 1 < len(parts):
            return re.sub(r"\.git$", "", _strip_query(parts[index + 1])) or None

    name = _strip_query(parts[-1])
    return re.sub(r"\.git$", "", name) or None


def generate_commit_url(
    repo_url: Optional[str],
    commit_sha: Optional[str],
) -> Optional[str]:
    """Build a web URL for a commit, when the host's layout is known.

    Returns None for Perforce and unknown hosts (including generic
    Subversion servers), whose web front ends differ per installation.
    """
    if not repo_url or not commit_sha:
        return None

    base_url = re.sub(r"\.git$", "", repo_url.strip()).rstrip("/")
    host = detect_host_from_url(repo_url)

    if host is None or host == "perforce":
        return None
    if host in PLAIN_COMMIT_HOSTS:
        return f"{base_url}/commit/{commit_sha}"
    if host in ("gitlab", "gitlab-self"):
        return f"{base_url}/-/commit/{commit_sha}"
    if host == "bitbucket":
        return f"{base_url}/commits/{commit_sha}"
    if host == "sourceforge":
        if NUMERIC_REVISION.match(commit_sha):
            return f"{base_url}/{commit_sha}/"
        return f"{base_url}/ci/{commit_sha}/"
    return None


def clean_branch_name(branch: Optional[str]) -> Optional[str]:
    """Strip ref and remote prefixes (``refs/heads/``, ``origin/``, ``*/``)."""
    if not branch or not branch.strip():
        return None
    cleaned = BRANCH_PREFIXES.sub("", branch.strip())
    return cleaned or None


# =============================================================================
# Providers
# =============================================================================


class RepositoryInfoProvider(Protocol):
    """Answers repository questions for one source-control system."""

    host_type: str

    def repo_url(self) -> Optional[str]: ...

    def branch(self) -> Optional[str]: ...

    def commit_id(self) -> Optional[str]: ...


class _EnvProvider:
    """Shared lookup over an environment mapping."""

    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        self.env = os.environ if env is None else env

    def _first(self, *names: str) -> Optional[str]:
        for name in names:
            value = self.env.get(name)
            if value and value.strip():
                return value.strip()
        return None


class GitEnvProvider(_EnvProvider):
    """Git information published by CI servers as environment variables."""

    host_type = "git"

    def repo_url(self) -> Optional[str]:
        url = self._first("GIT_URL", "CI_PROJECT_URL")
        if url:
            return url
        server = self._first("GITHUB_SERVER_URL")
        repository = self._first("GITHUB_REPOSITORY")
        if server and repository:
            return f"{server.rstrip('/')}/{repository}"
        return None

    def branch(self) -> Optional[str]:
        return clean_branch_name(
            self._first(
                "GIT_LOCAL_BRANCH",
                "BRANCH_NAME",
                "GIT_BRANCH",
                "GITHUB_HEAD_REF",
                "GITHUB_REF_NAME",
                "CI_COMMIT_REF_NAME",
            )
        )

    def commit_id(self) -> Optional[str]:
        return self._first("GIT_COMMIT", "GITHUB_SHA", "CI_COMMIT_SHA")


class SvnEnvProvider(_EnvProvider):
    """Subversion information published by Jenkins."""

    host_type = "svn"

    def repo_url(self) -> Optional[str]:
        return self._first("SVN_URL", "SVN_URL_1")

    def branch(self) -> Optional[str]:
        return None

    def commit_id(self) -> Optional[str]:
        return self._first(*SVN_REVISION_VARS)


class GitCliProvider:
    """Git information read from a working copy with the ``git`` command."""

    host_type = "git"

    def __init__(self, cwd: Optional[Path] = None) -> None:
        self.cwd = cwd

    def _git(self, *args: str) -> Optional[str]:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=GIT_TIMEOUT_SECONDS,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("git %s unavailable: %s", " ".join(args), e)
            return None
        if result.returncode != 0:
            return None
        output = result.stdout.strip()
        return output or None

    def repo_url(self) -> Optional[str]:
        return self._git("config", "--get", "remote.origin.url")

    def branch(self) -> Optional[str]:
        branch = self._git("rev-parse", "--abbrev-ref", "HEAD")
        # Detached HEAD
        return None if branch == "HEAD" else clean_branch_name(branch)

    def commit_id(self) -> Optional[str]:
        return self._git("rev-parse", "HEAD")


def default_providers(
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> list[RepositoryInfoProvider]:
    """Providers in priority order: CI-published values, then the working copy."""
    return [GitEnvProvider(env), SvnEnvProvider(env), GitCliProvider(cwd)]


def detect_repository(
    providers: Sequence[RepositoryInfoProvider],
) -> Optional[RepositoryInfoProvider]:
    """First provider that knows the repository URL or the commit."""
    for provider in providers:
        if provider.repo_url() or provider.commit_id():
            return provider
    return None


# =============================================================================
# Metadata Population
# =============================================================================


def populate_version_control(
    metadata: UploadMetadata,
    provider: Optional[RepositoryInfoProvider] = None,
) -> UploadMetadata:
    """Return a copy of metadata with absent version-control fields filled.

    Values already present always win over detected ones.

    Args:
        metadata: Upload description to complete
        provider: Repository provider; detected from the environment and
            working directory when omitted

    Returns:
        New UploadMetadata, or metadata itself when nothing was detected
    """
    if provider is None:
        provider = detect_repository(default_providers())
    if provider is None:
        return metadata

    current = {
        "vc_host_type": metadata.vc_host_type,
        "vc_repo_url": metadata.vc_repo_url,
        "vc_branch": metadata.vc_branch,
        "vc_commit_sha": metadata.vc_commit_sha,
    }
    detected = {
        "vc_host_type": provider.host_type,
        "vc_repo_url": provider.repo_url(),
        "vc_branch": provider.branch(),
        "vc_commit_sha": provider.commit_id(),
    }
    updates = {k: v for k, v in detected.items() if v and not current[k]}

    repo_url = metadata.vc_repo_url or updates.get("vc_repo_url")
    commit_sha = metadata.vc_commit_sha or updates.get("vc_commit_sha")

    if not metadata.vc_host and (host := detect_host_from_url(repo_url)):
        updates["vc_host"] = host
    if not metadata.vc_repo_name and (name := extract_repo_name_from_url(repo_url)):
        updates["vc_repo_name"] = name
    if not metadata.vc_commit_url and (
        commit_url := generate_commit_url(repo_url, commit_sha)
    ):
        updates["vc_commit_url"] = commit_url

    if updates:
        logger.debug("Detected version control fields: %s", sorted(updates))
        return metadata.model_copy(update=updates)
    return metadata
