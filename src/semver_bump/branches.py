"""Branch policy checks for semver-bump."""

import re
from typing import Any


class BranchNotAllowedError(Exception):
    """Raised when a release is attempted from a branch the policy rejects."""

    def __init__(self, branch: str, release_type: str | None = None):
        self.branch = branch
        self.release_type = release_type
        if release_type:
            message = f"Branch '{branch}' is not allowed for a {release_type} release"
        else:
            message = f"Branch '{branch}' is not allowed for version bump"
        super().__init__(message)


def _branch_rule_allows(
    rule: dict[str, Any], branch: str, release_type: str | None
) -> bool:
    if not re.search(rule["name"], branch):
        return False

    if release_type is None:
        return True

    if release_type in (rule.get("disallow-types") or []):
        return False

    allow_types = rule.get("allow-types")
    if allow_types and release_type not in allow_types:
        return False

    return True


def is_branch_allowed(
    branch: str,
    release_type: str | None,
    allowed_branches: list[str | dict[str, Any]] | None,
) -> bool:
    """Check whether a release may be made from a branch.

    Args:
        branch: Current branch name
        release_type: Requested release type, or None to check the branch only
        allowed_branches: Branch regexes or rule mappings with 'name',
            'allow-types' and 'disallow-types'. Empty or None allows any branch.

    Returns:
        True if at least one entry allows the release
    """
    if not allowed_branches:
        return True

    for entry in allowed_branches:
        if isinstance(entry, str):
            if re.search(entry, branch):
                return True
        elif _branch_rule_allows(entry, branch, release_type):
            return True

    return False


def check_branch_allowed(
    branch: str,
    release_type: str | None,
    allowed_branches: list[str | dict[str, Any]] | None,
) -> None:
    """Raise BranchNotAllowedError unless the policy allows the release."""
    if not is_branch_allowed(branch, release_type, allowed_branches):
        raise BranchNotAllowedError(branch, release_type)
