"""Tag-aware resolution of the next version.

The version declared in the working copy can lag behind tags that were already
published (several prereleases cut since the last version bump commit, for
example). Incrementing blindly from the declared version would mint a version
that already exists, so the resolver looks up the latest tag within the same
release line and increments from there instead.
"""

from collections.abc import Iterable

from semver import Version

from semver_bump.version import (
    InvalidVersionError,
    VersionError,
    get_identifier,
    increment,
    parse_version,
    resolve_identifier,
    validate_custom_version,
    validate_release_type,
)


class VersionCollisionError(VersionError):
    """Raised when the resolved version already exists as a tag."""

    def __init__(self, version: str):
        self.version = version
        super().__init__(
            f"Version {version} already exists as a tag. "
            f"Refusing to release a duplicate version."
        )


def normalize_tags(tags: Iterable[str], prefix: str = "") -> list[str]:
    """Turn raw tag names into a clean list of version strings.

    Tags that do not parse as semver (after stripping the prefix) are dropped
    silently. Duplicates are removed, first occurrence wins.

    Args:
        tags: Raw tag names (e.g., ['v1.2.3', 'latest', 'v1.3.0-beta.0'])
        prefix: Prefix to strip from tags that carry it (e.g., 'v')

    Returns:
        Version strings in input order
    """
    seen: set[str] = set()
    versions: list[str] = []

    for tag in tags:
        tag = tag.strip()
        if prefix and tag.startswith(prefix):
            tag = tag[len(prefix) :]

        try:
            version = str(parse_version(tag))
        except VersionError:
            continue

        if version not in seen:
            seen.add(version)
            versions.append(version)

    return versions


def _same_base(version: Version, other: Version) -> bool:
    return (version.major, version.minor, version.patch) == (
        other.major,
        other.minor,
        other.patch,
    )


def find_latest_in_line(
    versions: list[Version],
    release_type: str,
    current: Version,
    raw_next: Version,
    identifier: str,
) -> tuple[Version | None, str]:
    """Find the latest version in the release line of a bump.

    Args:
        versions: Parsed tag versions
        release_type: Requested release type
        current: Current version
        raw_next: Version computed from the current version alone
        identifier: Prerelease identifier in effect for this bump

    Returns:
        Tuple of (latest version in line or None, release type to apply to it)
    """
    effective_type = release_type

    if release_type in ("major", "premajor"):
        line = versions
    elif release_type in ("minor", "preminor"):
        line = [v for v in versions if v.major == raw_next.major]
    elif release_type in ("patch", "prepatch"):
        line = [
            v
            for v in versions
            if v.major == raw_next.major and v.minor == raw_next.minor
        ]
    elif release_type == "branch":
        # Each branch keeps its own counter on the next patch
        line = [
            v
            for v in versions
            if _same_base(v, raw_next) and get_identifier(v) == identifier
        ]
        effective_type = "prerelease"
    elif get_identifier(current):
        # Exact prerelease channel: same X.Y.Z and same identifier
        line = [
            v
            for v in versions
            if _same_base(v, current) and get_identifier(v) == identifier
        ]
    else:
        # Stable current: a fresh channel starts from a patch-level bump
        line = [
            v
            for v in versions
            if v.major == raw_next.major and v.minor == raw_next.minor
        ]
        effective_type = "prepatch"

    if not line:
        return None, effective_type
    return max(line), effective_type


def resolve_with_tags(
    current: str,
    release_type: str,
    tags: Iterable[str],
    identifier: str | None = None,
    prefix: str = "",
    custom_version: str | None = None,
) -> str:
    """Resolve the next version, taking existing tags into account.

    Args:
        current: Current version string
        release_type: One of RELEASE_TYPES
        tags: Existing tag names; invalid entries are ignored
        identifier: Prerelease identifier (default: carried over or 'alpha')
        prefix: Tag prefix to strip before parsing (e.g., 'v')
        custom_version: Target version for 'custom' releases

    Returns:
        Next version string, greater than the current version and every tag
        in its release line

    Raises:
        InvalidVersionError: If current version is invalid, or the result
            would not be greater than it
        InvalidReleaseTypeError: If release type is not recognised
        VersionCollisionError: If the resolved version already exists as a tag
    """
    current_version = parse_version(current)
    validate_release_type(release_type)

    if release_type == "custom":
        return validate_custom_version(current, custom_version)

    known = normalize_tags(tags, prefix)
    identifier = resolve_identifier(current_version, release_type, identifier)
    raw_next = parse_version(increment(current, release_type, identifier))
    result = raw_next

    if known:
        versions = [parse_version(v) for v in known]
        latest, effective_type = find_latest_in_line(
            versions, release_type, current_version, raw_next, identifier
        )
        if latest is not None:
            candidate = parse_version(
                increment(str(latest), effective_type, identifier)
            )
            result = max(candidate, raw_next)

    # Switching to a lower channel (rc -> beta) or bumping 1.0.0-alpha.beta
    # would go backwards
    if result <= current_version:
        raise InvalidVersionError(
            f"Resolved version {result} is not greater than current version "
            f"{current_version}. Use a higher identifier or another release type."
        )

    resolved = str(result)
    if resolved in known:
        raise VersionCollisionError(resolved)
    return resolved
