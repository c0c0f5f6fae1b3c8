"""Tests for git helpers."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from semver_bump.git import (
    GitError,
    fetch_remote_tags,
    get_current_branch,
    get_git_root,
    get_tags,
    get_version_tags,
    is_working_tree_clean,
    tag_exists,
)


def _completed(stdout: str = "", returncode: int = 0) -> Mock:
    return Mock(stdout=stdout, stderr="", returncode=returncode)


def _failed(*args, stderr: str = "fatal: boom", **kwargs):
    raise subprocess.CalledProcessError(128, args[0], stderr=stderr)


def test_get_git_root():
    """Test reading the repository root."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("/repo\n")

        assert get_git_root() == Path("/repo")


def test_get_git_root_outside_repository():
    """Test the friendly error outside a repository."""
    with patch("subprocess.run") as mock_run:
        mock_run.side_effect = lambda *a, **kw: _failed(
            *a, stderr="fatal: not a git repository (or any of the parent directories)"
        )

        with pytest.raises(GitError, match="Not in a git repository"):
            get_git_root()


def test_get_git_root_without_git():
    """Test error when git is not installed."""
    with patch("subprocess.run", side_effect=FileNotFoundError):
        with pytest.raises(GitError, match="Git not found"):
            get_git_root()


def test_get_tags(tmp_path):
    """Test listing raw tag names."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("v1.0.0\nlatest\n\nv1.1.0-beta.0\n")

        assert get_tags(tmp_path) == ["v1.0.0", "latest", "v1.1.0-beta.0"]

    args = mock_run.call_args[0][0]
    assert args == ["git", "tag", "--list"]
    assert mock_run.call_args[1]["cwd"] == str(tmp_path)


def test_get_tags_empty(tmp_path):
    """Test a repository without tags."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("")

        assert get_tags(tmp_path) == []


def test_get_version_tags(tmp_path):
    """Test that only version tags are returned, without prefix."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("v1.0.0\nlatest\nv1.1.0-beta.0\nv1.2\n")

        assert get_version_tags("v", tmp_path) == ["1.0.0", "1.1.0-beta.0"]


def test_fetch_remote_tags(tmp_path):
    """Test fetching tags from the remote."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("")

        fetch_remote_tags(tmp_path)

    assert mock_run.call_args[0][0] == ["git", "fetch", "--tags"]


def test_fetch_remote_tags_failure(tmp_path):
    """Test that a failed fetch raises."""
    with patch("subprocess.run", side_effect=_failed):
        with pytest.raises(GitError, match="Git command failed: fatal: boom"):
            fetch_remote_tags(tmp_path)


def test_get_current_branch(tmp_path):
    """Test reading the current branch."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("feature/login\n")

        assert get_current_branch(tmp_path) == "feature/login"


def test_get_current_branch_detached_head(tmp_path):
    """Test error in detached HEAD state."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("")

        with pytest.raises(GitError, match="detached HEAD"):
            get_current_branch(tmp_path)


def test_working_tree_clean(tmp_path):
    """Test a clean working tree."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed("")

        assert is_working_tree_clean(tmp_path) is True

    assert mock_run.call_args[0][0] == ["git", "status", "--porcelain"]


def test_working_tree_dirty(tmp_path):
    """Test modified and untracked files make the tree dirty."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed(" M pyproject.toml\n?? notes.txt\n")

        assert is_working_tree_clean(tmp_path) is False


def test_tag_exists_locally(tmp_path):
    """Test a tag found in the local repository."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = _completed(returncode=0)

        assert tag_exists("v1.0.0", tmp_path) is True

    assert mock_run.call_count == 1


def test_tag_exists_remotely(tmp_path):
    """Test a tag only found on the remote."""
    with patch("subprocess.run") as mock_run:
        mock_run.side_effect = [
            _completed(returncode=1),
            _completed("abc123\trefs/tags/v1.0.0\n"),
        ]

        assert tag_exists("v1.0.0", tmp_path) is True


def test_tag_does_not_exist(tmp_path):
    """Test a tag found nowhere."""
    with patch("subprocess.run") as mock_run:
        mock_run.side_effect = [_completed(returncode=1), _completed("")]

        assert tag_exists("v9.9.9", tmp_path) is False
