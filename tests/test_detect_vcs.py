"""Tests for version-control detection."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock

import pytest

from stashctl.detect import vcs
from stashctl.detect.vcs import (
    GitCliProvider,
    GitEnvProvider,
    SvnEnvProvider,
    clean_branch_name,
    detect_host_from_url,
    detect_repository,
    extract_repo_name_from_url,
    generate_commit_url,
    populate_version_control,
)
from stashctl.models.metadata import UploadMetadata


class StaticProvider:
    """Provider returning fixed answers."""

    def __init__(self, host_type="git", repo_url=None, branch=None, commit_id=None):
        self.host_type = host_type
        self._repo_url = repo_url
        self._branch = branch
        self._commit_id = commit_id

    def repo_url(self):
        return self._repo_url

    def branch(self):
        return self._branch

    def commit_id(self):
        return self._commit_id


# =============================================================================
# URL Helper Tests
# =============================================================================


class TestDetectHostFromUrl:
    """Tests for detect_host_from_url."""

    @pytest.mark.parametrize(
        "url,host",
        [
            ("https://github.com/acme/app.git", "github"),
            ("git@github.com:acme/app.git", "github"),
            ("https://gitlab.com/acme/app", "gitlab"),
            ("https://gitlab.acme.internal/team/app", "gitlab-self"),
            ("https://bitbucket.org/acme/app", "bitbucket"),
            ("https://dev.azure.com/acme/proj/_git/app", "azure-repos"),
            ("https://acme.visualstudio.com/proj/_git/app", "azure-repos"),
            ("https://codeberg.org/acme/app", "codeberg"),
            ("https://git.sr.ht/~acme/app", "sourcehut"),
            ("https://sourceforge.net/p/app/code", "sourceforge"),
            ("https://git-codecommit.us-east-1.amazonaws.com/v1/repos/app", "aws-codecommit"),
            ("https://gitee.com/acme/app", "gitee"),
            ("https://svn.riouxsvn.com/app", "riouxsvn"),
            ("https://example.org/app.git", None),
            ("", None),
            (None, None),
        ],
    )
    def test_hosts(self, url, host) -> None:
        assert detect_host_from_url(url) == host


class TestExtractRepoName:
    """Tests for extract_repo_name_from_url."""

    @pytest.mark.parametrize(
        "url,name",
        [
            ("https://github.com/acme/app.git", "app"),
            ("git@github.com:acme/app.git", "app"),
            ("ssh://git@gitlab.com/acme/group/app.git/", "app"),
            ("https://dev.azure.com/acme/proj/_git/app", "app"),
            ("https://bitbucket.acme.com/scm/proj/app.git", "app"),
            ("https://bitbucket.acme.com/projects/PROJ/repos/app/browse", "app"),
            ("https://github.com/acme/app?tab=readme", "app"),
            ("https://github.com/", None),
            (None, None),
        ],
    )
    def test_names(self, url, name) -> None:
        assert extract_repo_name_from_url(url) == name


class TestGenerateCommitUrl:
    """Tests for generate_commit_url."""

    @pytest.mark.parametrize(
        "repo_url,sha,expected",
        [
            ("https://github.com/acme/app.git", "abc1", "https://github.com/acme/app/commit/abc1"),
            ("https://gitlab.com/acme/app/", "abc1", "https://gitlab.com/acme/app/-/commit/abc1"),
            (
                "https://gitlab.acme.internal/team/app",
                "abc1",
                "https://gitlab.acme.internal/team/app/-/commit/abc1",
            ),
            ("https://bitbucket.org/acme/app", "abc1", "https://bitbucket.org/acme/app/commits/abc1"),
            (
                "https://dev.azure.com/acme/proj/_git/app",
                "abc1",
                "https://dev.azure.com/acme/proj/_git/app/commit/abc1",
            ),
            ("https://sourceforge.net/p/app/code", "123", "https://sourceforge.net/p/app/code/123/"),
            (
                "https://sourceforge.net/p/app/code",
                "abc1",
                "https://sourceforge.net/p/app/code/ci/abc1/",
            ),
        ],
    )
    def test_known_hosts(self, repo_url, sha, expected) -> None:
        assert generate_commit_url(repo_url, sha) == expected

    @pytest.mark.parametrize(
        "repo_url,sha",
        [
            ("https://svn.example.org/repo", "123"),
            ("https://perforce.acme.com/depot", "456"),
            ("https://github.com/acme/app", None),
            (None, "abc1"),
        ],
    )
    def test_unknown_layouts(self, repo_url, sha) -> None:
        assert generate_commit_url(repo_url, sha) is None


class TestCleanBranchName:
    """Tests for clean_branch_name."""

    @pytest.mark.parametrize(
        "branch,expected",
        [
            ("refs/heads/main", "main"),
            ("origin/release/1.2", "release/1.2"),
            ("*/develop", "develop"),
            ("*feature", "feature"),
            ("main", "main"),
            ("  ", None),
            (None, None),
        ],
    )
    def test_cleaning(self, branch, expected) -> None:
        assert clean_branch_name(branch) == expected


# =============================================================================
# Provider Tests
# =============================================================================


class TestEnvProviders:
    """Tests for environment-based providers."""

    def test_git_env_from_jenkins(self) -> None:
        provider = GitEnvProvider(
            {"GIT_URL": "https://github.com/acme/app.git", "GIT_BRANCH": "origin/main", "GIT_COMMIT": "abc1"}
        )

        assert provider.repo_url() == "https://github.com/acme/app.git"
        assert provider.branch() == "main"
        assert provider.commit_id() == "abc1"

    def test_git_env_from_github_actions(self) -> None:
        provider = GitEnvProvider(
            {
                "GITHUB_SERVER_URL": "https://github.com",
                "GITHUB_REPOSITORY": "acme/app",
                "GITHUB_REF_NAME": "release",
                "GITHUB_SHA": "abc1",
            }
        )

        assert provider.repo_url() == "https://github.com/acme/app"
        assert provider.branch() == "release"

    def test_svn_env(self) -> None:
        provider = SvnEnvProvider({"SVN_URL": "https://svn.example.org/repo", "SVN_REV": "1234"})

        assert provider.host_type == "svn"
        assert provider.repo_url() == "https://svn.example.org/repo"
        assert provider.branch() is None
        assert provider.commit_id() == "1234"

    def test_empty_env_answers_nothing(self) -> None:
        provider = GitEnvProvider({})

        assert provider.repo_url() is None
        assert provider.branch() is None
        assert provider.commit_id() is None


class TestGitCliProvider:
    """Tests for the git command provider."""

    def test_reads_git_output(self, monkeypatch) -> None:
        outputs = {
            ("config", "--get", "remote.origin.url"): "git@github.com:acme/app.git\n",
            ("rev-parse", "--abbrev-ref", "HEAD"): "main\n",
            ("rev-parse", "HEAD"): "abc1\n",
        }

        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout=outputs[tuple(cmd[1:])], stderr="")

        monkeypatch.setattr(vcs.subprocess, "run", fake_run)
        provider = GitCliProvider()

        assert provider.repo_url() == "git@github.com:acme/app.git"
        assert provider.branch() == "main"
        assert provider.commit_id() == "abc1"

    def test_detached_head_has_no_branch(self, monkeypatch) -> None:
        monkeypatch.setattr(
            vcs.subprocess,
            "run",
            MagicMock(return_value=subprocess.CompletedProcess([], 0, stdout="HEAD\n", stderr="")),
        )

        assert GitCliProvider().branch() is None

    def test_missing_git_answers_nothing(self, monkeypatch) -> None:
        monkeypatch.setattr(vcs.subprocess, "run", MagicMock(side_effect=FileNotFoundError("git")))

        assert GitCliProvider().commit_id() is None

    def test_not_a_repository_answers_nothing(self, monkeypatch) -> None:
        monkeypatch.setattr(
            vcs.subprocess,
            "run",
            MagicMock(return_value=subprocess.CompletedProcess([], 128, stdout="", stderr="fatal")),
        )

        assert GitCliProvider().repo_url() is None


class TestDetectRepository:
    """Tests for detect_repository."""

    def test_first_provider_with_answers_wins(self) -> None:
        empty = StaticProvider()
        svn = StaticProvider(host_type="svn", commit_id="12")
        git = StaticProvider(repo_url="https://github.com/acme/app")

        assert detect_repository([empty, svn, git]) is svn

    def test_none_when_nothing_known(self) -> None:
        assert detect_repository([StaticProvider()]) is None


# =============================================================================
# Metadata Population Tests
# =============================================================================


class TestPopulateVersionControl:
    """Tests for populate_version_control."""

    def test_fills_all_derived_fields(self) -> None:
        provider = StaticProvider(
            repo_url="https://github.com/acme/app.git", branch="main", commit_id="abc1"
        )

        result = populate_version_control(UploadMetadata(), provider)

        assert result.vc_host_type == "git"
        assert result.vc_host == "github"
        assert result.vc_repo_name == "app"
        assert result.vc_repo_url == "https://github.com/acme/app.git"
        assert result.vc_branch == "main"
        assert result.vc_commit_sha == "abc1"
        assert result.vc_commit_url == "https://github.com/acme/app/commit/abc1"

    def test_manual_values_win(self) -> None:
        metadata = UploadMetadata(vc_branch="hotfix", vc_commit_sha="def2", vc_host="custom")
        provider = StaticProvider(
            repo_url="https://gitlab.com/acme/app", branch="main", commit_id="abc1"
        )

        result = populate_version_control(metadata, provider)

        assert result.vc_branch == "hotfix"
        assert result.vc_commit_sha == "def2"
        assert result.vc_host == "custom"
        assert result.vc_commit_url == "https://gitlab.com/acme/app/-/commit/def2"

    def test_blank_manual_value_is_replaced(self) -> None:
        metadata = UploadMetadata(vc_branch="  ")
        provider = StaticProvider(branch="main")

        assert populate_version_control(metadata, provider).vc_branch == "main"

    def test_no_provider_detected(self, monkeypatch) -> None:
        monkeypatch.setattr(vcs, "detect_repository", MagicMock(return_value=None))
        metadata = UploadMetadata()

        assert populate_version_control(metadata) is metadata
