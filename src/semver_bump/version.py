"""Semantic version parsing and increment arithmetic."""

import re

from semver import Version

# Release types understood by semver increment rules
STANDARD_RELEASE_TYPES = (
    "major",
    "minor",
    "patch",
    "premajor",
    "preminor",
    "prepatch",
    "prerelease",
)

# Release types handled outside of plain semver arithmetic
CUSTOM_RELEASE_TYPES = ("branch", "custom")

RELEASE_TYPES = STANDARD_RELEASE_TYPES + CUSTOM_RELEASE_TYPES

# Prerelease channel used when neither caller nor current version names one
DEFAULT_IDENTIFIER = "alpha"

# Prerelease channel used for branch releases without a branch slug
BRANCH_IDENTIFIER = "branch"

_SLUG_INVALID_CHARS = re.compile(r"[^0-9A-Za-z-]+")


class VersionError(Exception):
    """Raised when version operations fail."""

    pass


class InvalidVersionError(VersionError):
    """Raised when a version string is not valid semver."""

    pass


class InvalidReleaseTypeError(VersionError):
    """Raised when a release type is not recognised."""

    pass


def parse_version(version_str: str) -> Version:
    """Parse a semantic version string.

    Args:
        version_str: Version string (e.g., '1.2.3' or '1.2.3-beta.1')

    Returns:
        Parsed Version object

    Raises:
        InvalidVersionError: If version string is invalid
    """
    try:
        return Version.parse(version_str)
    except (TypeError, ValueError) as e:
        raise InvalidVersionError(f"Invalid version string '{version_str}': {e}")


def is_valid_version(version_str: str) -> bool:
    """Check whether a string parses as a semantic version."""
    try:
        parse_version(version_str)
    except InvalidVersionError:
        return False
    return True


def validate_release_type(release_type: str) -> str:
    """Return the release type unchanged if it is known.

    Raises:
        InvalidReleaseTypeError: If release type is not one of RELEASE_TYPES
    """
    if release_type not in RELEASE_TYPES:
        raise InvalidReleaseTypeError(
            f"Invalid release type '{release_type}'. "
            f"Must be one of: {', '.join(RELEASE_TYPES)}"
        )
    return release_type


def get_identifier(version: str | Version) -> str | None:
    """Get the prerelease identifier (channel) of a version.

    Args:
        version: Version string or parsed Version

    Returns:
        Identifier such as 'alpha' for '1.0.0-alpha.3', or None for stable
        versions and purely numeric prereleases like '1.0.0-0'
    """
    if isinstance(version, str):
        version = parse_version(version)

    if not version.prerelease:
        return None

    first = version.prerelease.split(".")[0]
    if first.isdigit():
        return None
    return first


def resolve_identifier(
    current: str | Version, release_type: str, identifier: str | None = None
) -> str:
    """Pick the prerelease identifier for an increment.

    An explicit identifier wins, then the identifier already carried by the
    current version, then the default channel. Branch releases never carry
    the current channel over: they use the branch slug or 'branch'.
    """
    if release_type == "branch":
        return identifier or BRANCH_IDENTIFIER

    if identifier:
        return identifier

    current_identifier = get_identifier(current)
    if current_identifier:
        return current_identifier
    return DEFAULT_IDENTIFIER


def slugify_branch(branch_name: str) -> str:
    """Turn a branch name into a valid prerelease identifier.

    'feature/Login_Form' becomes 'feature-login-form'.
    """
    slug = _SLUG_INVALID_CHARS.sub("-", branch_name.replace("/", "-"))
    slug = re.sub(r"-{2,}", "-", slug).strip("-").lower()
    return slug or BRANCH_IDENTIFIER


def _bump_prerelease(prerelease: str, identifier: str) -> str:
    parts = prerelease.split(".")

    # Bump the right-most numeric part, or start a counter
    for i in range(len(parts) - 1, -1, -1):
        if parts[i].isdigit():
            parts[i] = str(int(parts[i]) + 1)
            break
    else:
        parts.append("0")

    if parts[0] != identifier or len(parts) < 2 or not parts[1].isdigit():
        return f"{identifier}.0"
    return ".".join(parts)


def _increment(version: Version, release_type: str, identifier: str) -> Version:
    major, minor, patch = version.major, version.minor, version.patch
    pre = version.prerelease
    first_pre = f"{identifier}.0"

    if release_type == "major":
        # 2.0.0-alpha.1 releases as 2.0.0
        if pre and minor == 0 and patch == 0:
            return Version(major, 0, 0)
        return Version(major + 1, 0, 0)
    if release_type == "minor":
        if pre and patch == 0:
            return Version(major, minor, 0)
        return Version(major, minor + 1, 0)
    if release_type == "patch":
        if pre:
            return Version(major, minor, patch)
        return Version(major, minor, patch + 1)
    if release_type == "premajor":
        return Version(major + 1, 0, 0, prerelease=first_pre)
    if release_type == "preminor":
        return Version(major, minor + 1, 0, prerelease=first_pre)
    if release_type in ("prepatch", "branch"):
        # Branch builds always start on the next patch
        return Version(major, minor, patch + 1, prerelease=first_pre)

    # prerelease
    if not pre:
        return Version(major, minor, patch + 1, prerelease=first_pre)
    return Version(major, minor, patch, prerelease=_bump_prerelease(pre, identifier))


def increment(current: str, release_type: str, identifier: str | None = None) -> str:
    """Compute the next version from the current one.

    Args:
        current: Current version string (e.g., '1.2.3' or '1.3.0-beta.2')
        release_type: One of RELEASE_TYPES
        identifier: Prerelease identifier; defaults to the current version's
            identifier, then 'alpha' ('branch' for branch releases)

    Returns:
        Next version string. For 'custom' the current version is returned
        unchanged, the caller supplies the target.

    Raises:
        InvalidVersionError: If current version (or the computed one) is invalid
        InvalidReleaseTypeError: If release type is not recognised
    """
    version = parse_version(current)
    validate_release_type(release_type)

    if release_type == "custom":
        return str(version)

    identifier = resolve_identifier(version, release_type, identifier)
    next_version = str(_increment(version, release_type, identifier))

    # Catches identifiers that cannot appear in a prerelease
    parse_version(next_version)
    return next_version


def validate_custom_version(current: str, target: str | None) -> str:
    """Validate a caller-supplied target version.

    Args:
        current: Current version string
        target: Requested version string

    Returns:
        Normalised target version

    Raises:
        InvalidVersionError: If either version is invalid, or target is not
            greater than current
    """
    current_version = parse_version(current)
    if not target:
        raise InvalidVersionError("A custom release requires a target version")

    target_version = parse_version(target.strip())
    if target_version <= current_version:
        raise InvalidVersionError(
            f"Custom version {target_version} must be greater than current version {current_version}"
        )
    return str(target_version)
