"""Configuration loading and parsing for semver-bump."""

import re
import warnings
from pathlib import Path
from typing import Any

import yaml

from semver_bump.version import RELEASE_TYPES

DEFAULT_CONFIG_FILE = "semver-bump.yaml"

DEFAULT_COMMIT_MESSAGE = "release: v${NEW_VERSION}"

DEFAULT_ALLOWED_BRANCHES = ["main", "master"]

TAG_PREFIX_PATTERN = re.compile(r"^[\w\-.]*$")

FILE_TYPES = ("yaml", "toml", "json", "generic")


class ConfigError(Exception):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


class BumpConfig:
    """Bump configuration loaded from YAML file."""

    def __init__(self, config_path: str | Path | None = None):
        """Load bump configuration from YAML file.

        Args:
            config_path: Path to configuration file, or None to use defaults

        Raises:
            ConfigError: If config file doesn't exist or is invalid
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: dict[str, Any] = {}

        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigError(f"Configuration file not found: {self.config_path}")

            try:
                with open(self.config_path, "r") as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {self.config_path}: {e}")

            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ConfigError("Configuration must be a YAML mapping")
            self._config = data

        self._validate_config()

    def _validate_config(self) -> None:
        """Validate option types and branch rules."""
        errors: list[str] = []
        config = self._config

        prefix = config.get("tag-prefix", "v")
        if not isinstance(prefix, str):
            errors.append("'tag-prefix' must be a string")
        elif not TAG_PREFIX_PATTERN.match(prefix):
            errors.append("'tag-prefix' contains invalid characters")

        for key in ("with-tags", "remote-tags", "allow-dirty"):
            if key in config and not isinstance(config[key], bool):
                errors.append(f"'{key}' must be true or false")

        identifier = config.get("identifier")
        if identifier is not None and not isinstance(identifier, str):
            errors.append("'identifier' must be a string")

        for key in ("leading", "trailing"):
            hooks = config.get(key, [])
            if not isinstance(hooks, list) or not all(
                isinstance(cmd, str) for cmd in hooks
            ):
                errors.append(f"'{key}' must be a list of commands")

        commit_message = config.get("commit-message", DEFAULT_COMMIT_MESSAGE)
        if not isinstance(commit_message, str):
            errors.append("'commit-message' must be a string")
        elif "${NEW_VERSION}" not in commit_message:
            warnings.warn(
                "'commit-message' does not contain the ${NEW_VERSION} placeholder"
            )

        errors.extend(self._validate_allowed_branches())
        errors.extend(self._validate_files())

        if errors:
            raise ConfigError(
                "Configuration validation failed:\n"
                + "\n".join(f"  - {e}" for e in errors)
            )

    def _validate_allowed_branches(self) -> list[str]:
        branches = self._config.get("allowed-branches", DEFAULT_ALLOWED_BRANCHES)
        if not isinstance(branches, list):
            return ["'allowed-branches' must be a list"]

        errors = []
        for branch in branches:
            if isinstance(branch, str):
                continue
            if not isinstance(branch, dict):
                errors.append("Branch entries must be strings or mappings")
                continue
            name = branch.get("name")
            if not name:
                errors.append("Branch configuration must have a name")

            allow = branch.get("allow-types") or []
            disallow = branch.get("disallow-types") or []
            for release_type in list(allow) + list(disallow):
                if release_type not in RELEASE_TYPES:
                    errors.append(
                        f"Branch {name}: unknown release type '{release_type}'"
                    )

            overlap = [t for t in allow if t in disallow]
            if overlap:
                errors.append(
                    f"Branch {name}: allow-types and disallow-types cannot overlap: "
                    f"{', '.join(overlap)}"
                )
        return errors

    def _validate_files(self) -> list[str]:
        errors = []
        entries = []

        version_file = self._config.get("version-file")
        if version_file is not None:
            if not isinstance(version_file, dict):
                return ["'version-file' must be a mapping"]
            entries.append(version_file)

        extra_files = self._config.get("extra-files", [])
        if not isinstance(extra_files, list):
            return errors + ["'extra-files' must be a list"]
        entries.extend(extra_files)

        for entry in entries:
            if not isinstance(entry, dict):
                errors.append("File entries must be mappings")
                continue
            if entry.get("type") not in FILE_TYPES:
                errors.append(
                    f"Unsupported file type '{entry.get('type')}'. "
                    f"Supported types: {', '.join(FILE_TYPES)}"
                )
            if not entry.get("path"):
                errors.append("Missing 'path' field in file configuration")
        return errors

    def get_tag_prefix(self) -> str:
        """Get the tag prefix.

        Returns:
            Tag prefix string (e.g., 'v') or empty string for bare versions
        """
        return self._config.get("tag-prefix", "v")

    def get_with_tags(self) -> bool:
        """Whether version resolution should consult existing git tags."""
        return self._config.get("with-tags", True)

    def get_remote_tags(self) -> bool:
        """Whether tags should be fetched from the remote before resolution."""
        return self._config.get("remote-tags", False)

    def get_allow_dirty(self) -> bool:
        """Whether bump may run with uncommitted changes in the working tree."""
        return self._config.get("allow-dirty", False)

    def get_identifier(self) -> str | None:
        return self._config.get("identifier")

    def get_allowed_branches(self) -> list[str | dict[str, Any]]:
        """Get the branch policy.

        Returns:
            List of branch regexes or branch rule mappings
        """
        return self._config.get("allowed-branches", list(DEFAULT_ALLOWED_BRANCHES))

    def get_leading_hooks(self) -> list[str]:
        return self._config.get("leading", [])

    def get_trailing_hooks(self) -> list[str]:
        return self._config.get("trailing", [])

    def get_commit_message(self) -> str:
        return self._config.get("commit-message", DEFAULT_COMMIT_MESSAGE)

    def get_version_file(self) -> dict[str, Any] | None:
        """Get the file the current version is read from.

        Returns:
            File configuration dictionary or None if not configured
        """
        return self._config.get("version-file")

    def get_extra_files(self) -> list[dict[str, Any]]:
        """Get extra files configuration for version bumping.

        Returns:
            List of file configuration dictionaries
        """
        return self._config.get("extra-files", [])

    def get_files_to_bump(self) -> list[dict[str, Any]]:
        """Get the version file followed by the extra files."""
        version_file = self.get_version_file()
        files = [version_file] if version_file else []
        return files + self.get_extra_files()


def load_config(
    config_path: str | Path | None = None, git_root: Path | None = None
) -> BumpConfig:
    """Load bump configuration.

    An explicit config path must exist. Without one, semver-bump.yaml in the
    git root is used when present, otherwise the defaults apply.

    Args:
        config_path: Path to configuration file
        git_root: Directory searched for the default configuration file

    Returns:
        Loaded configuration object

    Raises:
        ConfigError: If config file is invalid or cannot be loaded
    """
    if config_path is not None:
        return BumpConfig(config_path)

    if git_root is not None:
        default_path = git_root / DEFAULT_CONFIG_FILE
        if default_path.exists():
            return BumpConfig(default_path)

    return BumpConfig()


def generate_config_template() -> str:
    """Generate a complete configuration file template with all parameters documented.

    Returns:
        YAML configuration template as a string with inline documentation
    """
    template = """# semver-bump configuration
#
# All parameters are optional; the values below are the defaults.

# ============================================================================
# VERSION RESOLUTION
# ============================================================================

# Tag prefix (e.g., "v" for v1.2.3, "" for 1.2.3)
# Type: string
# Default: "v"
tag-prefix: "v"

# Look at existing git tags when computing the next version, so that a
# version which was already tagged is never produced again
# Type: boolean
# Default: true
with-tags: true

# Run 'git fetch --tags' before reading tags
# Type: boolean
# Default: false
remote-tags: false

# Default prerelease identifier (e.g., "beta" for 1.2.3-beta.0)
# Type: string
# Default: none (reuse the current identifier, otherwise "alpha")
# identifier: "beta"

# Allow bumping with uncommitted changes in the working tree
# Type: boolean
# Default: false
allow-dirty: false

# ============================================================================
# BRANCH POLICY
# ============================================================================

# Branches a release may be made from
# Type: list of regular expressions or objects with name/allow-types/disallow-types
# Default: shown below
allowed-branches:
  - main
  - master
  # Example with release type restrictions:
  # - name: "^dev/.*"
  #   allow-types: [prerelease, prepatch, branch]
  # - name: "^release/.*"
  #   disallow-types: [major]

# ============================================================================
# HOOKS
# ============================================================================

# Commands run before the version files are written.
# ${NEW_VERSION} is replaced with the resolved version.
# Type: list of shell commands
# Default: []
leading: []

# Commands run after the version files are written
# Type: list of shell commands
# Default: []
trailing: []

# Release commit message template, available to hooks as ${COMMIT_MESSAGE}
# Type: string
# Default: shown below
commit-message: "release: v${NEW_VERSION}"

# ============================================================================
# VERSION FILES
# ============================================================================

# File the current version is read from (and written back to)
# Type: file configuration object
# Default: none (pass --current on the command line)
#
# Supported file types:
#   - yaml: YAML files (requires yaml-path with JSONPath)
#   - toml: TOML files (requires toml-path with JSONPath)
#   - json: JSON files (requires json-path with JSONPath)
#   - generic: Any text file (requires marker comments in the file)
#
# version-file:
#   type: toml
#   path: pyproject.toml
#   toml-path: $.project.version

# Extra files to bump version in
# Type: list of file configuration objects
# Default: [] (empty list)
extra-files: []
  # - type: json
  #   path: package.json
  #   json-path: $.version
  #
  # - type: yaml
  #   path: charts/myapp/Chart.yaml
  #   yaml-path: $.appVersion
  #   use-prefix: "v"  # Optional: include a prefix in this file
  #
  # For generic files, add markers in your file:
  # <!--- semver-bump-start --->
  # Text containing version like: v1.2.3
  # <!--- semver-bump-end --->
"""
    return template
