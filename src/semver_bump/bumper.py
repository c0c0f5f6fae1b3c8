"""Reading and writing versions in project files.

Structured files (YAML, TOML, JSON) locate the version with a JSONPath
expression. Any other text file marks the lines to rewrite with
``semver-bump-start`` / ``semver-bump-end`` comments.
"""

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import tomlkit
import yaml
from jsonpath_ng import parse
from tomlkit.exceptions import TOMLKitError


class FileBumperError(Exception):
    """Raised when a version can't be read from or written to a file."""

    pass


def _read_text(file_path: Path) -> str:
    if not file_path.exists():
        raise FileBumperError(f"File not found: {file_path}")
    return file_path.read_text()


def _write_text(file_path: Path, content: str) -> None:
    try:
        file_path.write_text(content)
    except OSError as e:
        raise FileBumperError(f"Failed to write version to {file_path}: {e}")


class FileBumper(ABC):
    """Reads and replaces the version stored in one kind of file."""

    @abstractmethod
    def read_version(self, file_path: Path, path_spec: str) -> str:
        """Return the version stored in the file, prefix included.

        Raises:
            FileBumperError: If the file or the version can't be found
        """

    @abstractmethod
    def bump_version(self, file_path: Path, path_spec: str, version: str) -> None:
        """Replace the version stored in the file.

        Args:
            file_path: File to update
            path_spec: Where the version lives (JSONPath, unused for generic files)
            version: Value to write, prefix included

        Raises:
            FileBumperError: If the file can't be parsed, the version can't be
                found, or the write fails
        """


class StructuredFileBumper(FileBumper):
    """Bumper for parsed documents addressed with JSONPath."""

    @abstractmethod
    def _parse(self, content: str, file_path: Path) -> Any:
        """Parse file content into a document jsonpath-ng can walk."""

    @abstractmethod
    def _dump(self, data: Any, original: str) -> str:
        """Serialise the document, keeping the original layout where possible."""

    def _find(self, data: Any, path_spec: str, file_path: Path) -> list:
        matches = parse(path_spec).find(data)
        if not matches:
            raise FileBumperError(f"Path '{path_spec}' not found in {file_path}")
        return matches

    def read_version(self, file_path: Path, path_spec: str) -> str:
        data = self._parse(_read_text(file_path), file_path)
        return str(self._find(data, path_spec, file_path)[0].value)

    def bump_version(self, file_path: Path, path_spec: str, version: str) -> None:
        original = _read_text(file_path)
        data = self._parse(original, file_path)

        self._find(data, path_spec, file_path)
        parse(path_spec).update(data, version)

        _write_text(file_path, self._dump(data, original))


class YamlFileBumper(StructuredFileBumper):
    """Chart.yaml and other YAML documents."""

    def _parse(self, content: str, file_path: Path) -> Any:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise FileBumperError(f"YAML parsing error in {file_path}: {e}")

        if data is None:
            raise FileBumperError(f"Empty or invalid YAML file: {file_path}")
        return data

    def _dump(self, data: Any, original: str) -> str:
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


class TomlFileBumper(StructuredFileBumper):
    """pyproject.toml, Cargo.toml and friends."""

    def _parse(self, content: str, file_path: Path) -> tomlkit.TOMLDocument:
        # tomlkit round-trips comments and formatting
        try:
            return tomlkit.parse(content)
        except TOMLKitError as e:
            raise FileBumperError(f"TOML parsing error in {file_path}: {e}")

    def _dump(self, data: tomlkit.TOMLDocument, original: str) -> str:
        return tomlkit.dumps(data)


class JsonFileBumper(StructuredFileBumper):
    """package.json style files. Indentation is detected and kept."""

    def _parse(self, content: str, file_path: Path) -> Any:
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise FileBumperError(f"JSON parsing error in {file_path}: {e}")

    @staticmethod
    def _detect_indent(content: str) -> str | int:
        match = re.search(r"^([ \t]+)", content, flags=re.MULTILINE)
        if not match:
            return 2
        indent = match.group(1)
        return "\t" if "\t" in indent else len(indent)

    def _dump(self, data: Any, original: str) -> str:
        indent = self._detect_indent(original)
        return json.dumps(data, indent=indent, ensure_ascii=False) + "\n"


class GenericFileBumper(FileBumper):
    """Any text file, versions replaced only between marker comments."""

    START_MARKER = "semver-bump-start"
    END_MARKER = "semver-bump-end"

    # Optional 'v', then X.Y.Z with optional prerelease and build metadata
    VERSION_PATTERN = re.compile(
        r"\bv?\d+\.\d+\.\d+"
        r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
        r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?\b"
    )

    def _marked_lines(self, lines: list[str], file_path: Path):
        """Yield (index, inside_block) for every line of the file."""
        inside_block = False
        found_markers = False

        for index, line in enumerate(lines):
            if self.START_MARKER in line:
                inside_block = True
                found_markers = True
                yield index, False
            elif self.END_MARKER in line:
                inside_block = False
                yield index, False
            else:
                yield index, inside_block

        if not found_markers:
            raise FileBumperError(
                f"No '{self.START_MARKER}' markers found in {file_path}. "
                f"Wrap the lines holding the version in "
                f"'{self.START_MARKER}' / '{self.END_MARKER}' comments."
            )

    def _no_version_error(self, file_path: Path) -> FileBumperError:
        return FileBumperError(f"No version strings found between markers in {file_path}")

    def read_version(self, file_path: Path, path_spec: str) -> str:
        """Return the first version found between markers."""
        lines = _read_text(file_path).splitlines(keepends=True)

        for index, inside_block in self._marked_lines(lines, file_path):
            if not inside_block:
                continue
            match = self.VERSION_PATTERN.search(lines[index])
            if match:
                return match.group(0)

        raise self._no_version_error(file_path)

    def bump_version(self, file_path: Path, path_spec: str, version: str) -> None:
        """Replace every version between marker pairs with ``version``.

        Text outside the markers is never touched, so a README can mention
        older versions freely.
        """
        lines = _read_text(file_path).splitlines(keepends=True)
        replaced = 0

        for index, inside_block in self._marked_lines(lines, file_path):
            if inside_block:
                lines[index], count = self.VERSION_PATTERN.subn(version, lines[index])
                replaced += count

        if not replaced:
            raise self._no_version_error(file_path)

        _write_text(file_path, "".join(lines))


BUMPERS: dict[str, type[FileBumper]] = {
    "yaml": YamlFileBumper,
    "toml": TomlFileBumper,
    "json": JsonFileBumper,
    "generic": GenericFileBumper,
}


def get_bumper_for_type(file_type: str) -> FileBumper:
    """Instantiate the bumper for a file type.

    Raises:
        FileBumperError: If the type is not one of BUMPERS
    """
    bumper_class = BUMPERS.get(file_type)
    if bumper_class is None:
        raise FileBumperError(
            f"Unsupported file type: {file_type}. Supported types: {', '.join(BUMPERS)}"
        )
    return bumper_class()


def get_path_spec(file_config: dict[str, Any]) -> str:
    """Get the JSONPath of a file entry ('' for generic files).

    Raises:
        FileBumperError: If the entry is missing required fields
    """
    for field in ("type", "path"):
        if field not in file_config:
            raise FileBumperError(f"Missing '{field}' field in file configuration")

    file_type = file_config["type"]
    if file_type == "generic":
        return ""
    if file_type not in BUMPERS:
        raise FileBumperError(f"Unsupported file type: {file_type}")

    key = f"{file_type}-path"
    path_spec = file_config.get(key)
    if not path_spec:
        raise FileBumperError(
            f"Missing '{key}' for {file_type.upper()} file: {file_config['path']}"
        )
    return path_spec


def read_current_version(file_config: dict[str, Any], root: Path) -> str:
    """Read the current version from a configured file.

    Args:
        file_config: File configuration entry
        root: Directory the entry's path is relative to

    Returns:
        Version string with the entry's 'use-prefix' removed. Generic files
        also lose a leading 'v'.

    Raises:
        FileBumperError: If the entry is invalid or the version can't be read
    """
    path_spec = get_path_spec(file_config)
    bumper = get_bumper_for_type(file_config["type"])
    value = bumper.read_version(root / file_config["path"], path_spec).strip()

    prefix = file_config.get("use-prefix") or ""
    if prefix and value.startswith(prefix):
        return value[len(prefix) :]
    if file_config["type"] == "generic" and value.startswith("v"):
        return value[1:]
    return value


def bump_files(
    files: list[dict[str, Any]],
    version: str,
    root: Path,
    dry_run: bool = False,
) -> dict[str, list[str]]:
    """Write a version into every configured file.

    A broken entry is reported and skipped, the remaining files are still
    written.

    Args:
        files: File configuration entries
        version: Version string without any prefix
        root: Directory the entry paths are relative to
        dry_run: Report what would change without writing

    Returns:
        {'updated': [...], 'errors': [...]} with one message per entry
    """
    results: dict[str, list[str]] = {"updated": [], "errors": []}

    for file_config in files:
        try:
            path_spec = get_path_spec(file_config)
            value = f"{file_config.get('use-prefix') or ''}{version}"

            if not dry_run:
                bumper = get_bumper_for_type(file_config["type"])
                bumper.bump_version(root / file_config["path"], path_spec, value)
        except FileBumperError as e:
            results["errors"].append(str(e))
            continue

        results["updated"].append(f"{file_config['path']}:{path_spec} → {value}")

    return results
