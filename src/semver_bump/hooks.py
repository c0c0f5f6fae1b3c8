"""Hook command rendering and execution for semver-bump."""

import re
import subprocess
from pathlib import Path
from typing import Any


class HookError(Exception):
    """Raised when a hook command fails."""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"Hook '{command}' failed with exit code {returncode}"
        if stderr:
            message += f": {stderr}"
        super().__init__(message)


def to_placeholder(key: str) -> str:
    """Convert a context key to its placeholder name.

    'new_version' and 'newVersion' both become 'NEW_VERSION'.
    """
    key = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", key)
    key = re.sub(r"[^0-9A-Za-z]+", "_", key)
    return key.strip("_").upper()


def render_command(command: str, context: dict[str, Any]) -> str:
    """Substitute ${PLACEHOLDER} values into a hook command.

    Args:
        command: Command template (e.g., 'git tag v${NEW_VERSION}')
        context: Values keyed by name (e.g., {'new_version': '1.2.3'})

    Returns:
        Rendered command. Unknown placeholders are left untouched.
    """
    for key, value in context.items():
        command = command.replace(f"${{{to_placeholder(key)}}}", str(value))
    return command


def run_hooks(
    commands: list[str],
    context: dict[str, Any],
    cwd: Path,
    dry_run: bool = False,
) -> list[str]:
    """Run hook commands in order, stopping at the first failure.

    Args:
        commands: Command templates
        context: Placeholder values for render_command
        cwd: Working directory for the commands
        dry_run: If True, only render the commands

    Returns:
        Rendered commands, in execution order

    Raises:
        HookError: If a command exits with a non-zero status
    """
    rendered = [render_command(cmd, context) for cmd in commands]

    if dry_run:
        return rendered

    for command in rendered:
        result = subprocess.run(
            command,
            shell=True,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise HookError(command, result.returncode, result.stderr.strip())

    return rendered
