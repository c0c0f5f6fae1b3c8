"""semver-bump - Semantic version resolution for packages and monorepos."""

from importlib.metadata import version

try:
    __version__ = version("semver-bump")
except Exception:
    __version__ = "0.0.0-dev"
