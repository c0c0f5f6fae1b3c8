"""Git access for semver-bump: repository root, tags, branches and status."""

import subprocess
from pathlib import Path

from semver_bump.resolver import normalize_tags


class GitError(Exception):
    """Raised when a git command cannot be run or fails."""

    pass


def get_git_root() -> Path:
    """Locate the top-level directory of the enclosing repository.

    Raises:
        GitError: Outside a repository, or when git is missing
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        stderr = e.stderr.strip()
        if "not a git repository" in stderr.lower():
            raise GitError(
                "Not in a git repository. Run semver-bump from inside the "
                "repository whose version you want to bump."
            )
        raise GitError(f"Git command failed: {stderr}")
    except FileNotFoundError:
        raise GitError("Git not found. Please ensure git is installed.")

    return Path(result.stdout.strip())


def _run_git_command(
    args: list[str], cwd: Path | str | None = None, check: bool = True
) -> subprocess.CompletedProcess:
    """Run ``git <args>`` in the repository.

    Args:
        args: Arguments after 'git' (e.g., ['tag', '--list'])
        cwd: Repository directory (default: detected git root)
        check: Raise GitError on a non-zero exit

    Returns:
        The completed process, stdout and stderr decoded as text
    """
    if cwd is None:
        cwd = get_git_root()

    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=check,
        )
    except subprocess.CalledProcessError as e:
        raise GitError(f"Git command failed: {e.stderr.strip()}")
    except FileNotFoundError:
        raise GitError("Git not found. Please ensure git is installed.")


def _git_output(args: list[str], cwd: Path | str | None = None) -> str:
    return _run_git_command(args, cwd).stdout.strip()


def get_tags(cwd: Path | None = None) -> list[str]:
    """List every tag name in the repository, version or not."""
    output = _git_output(["tag", "--list"], cwd)
    return [line.strip() for line in output.splitlines() if line.strip()]


def get_version_tags(prefix: str = "v", cwd: Path | None = None) -> list[str]:
    """List tags that are semantic versions once the prefix is removed.

    Args:
        prefix: Tag prefix to strip (e.g., 'v' for v1.2.3)
        cwd: Repository directory (default: git root)

    Returns:
        Version strings (e.g., ['1.0.0', '1.2.3', '1.2.4-alpha.0'])
    """
    return normalize_tags(get_tags(cwd), prefix)


def fetch_remote_tags(cwd: Path | None = None) -> None:
    """Fetch tags from the remote so that published versions are visible.

    Raises:
        GitError: If the fetch fails
    """
    _run_git_command(["fetch", "--tags"], cwd)


def get_current_branch(git_root: Path) -> str:
    """Return the checked-out branch name.

    Raises:
        GitError: On a detached HEAD or when git fails
    """
    branch = _git_output(["branch", "--show-current"], git_root)
    if not branch:
        raise GitError("Unable to determine current branch (detached HEAD?)")
    return branch


def is_working_tree_clean(git_root: Path) -> bool:
    """Check that git status reports nothing, untracked files included."""
    return not _git_output(["status", "--porcelain"], git_root)


def tag_exists(tag_name: str, git_root: Path) -> bool:
    """Check for a tag in the local repository, then on origin."""
    local = _run_git_command(
        ["rev-parse", "--verify", "--quiet", f"refs/tags/{tag_name}"],
        git_root,
        check=False,
    )
    if local.returncode == 0:
        return True

    remote = _run_git_command(
        ["ls-remote", "--tags", "origin", tag_name], git_root, check=False
    )
    return bool(remote.stdout.strip())
