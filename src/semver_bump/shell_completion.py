"""Shell completion scripts for the semver-bump CLI."""

import click
from click.shell_completion import BashComplete, FishComplete, ShellComplete, ZshComplete

PROG_NAME = "semver-bump"

# Environment variable click checks to switch into completion mode
COMPLETE_VAR = "_SEMVER_BUMP_COMPLETE"

COMPLETION_CLASSES: dict[str, type[ShellComplete]] = {
    "bash": BashComplete,
    "zsh": ZshComplete,
    "fish": FishComplete,
}


def generate_completion_script(cli: click.Group, shell: str) -> str:
    """Generate shell completion script for the specified shell.

    Args:
        cli: Click CLI group to generate completions for
        shell: Shell type ('bash', 'zsh', or 'fish')

    Returns:
        Shell completion script as a string

    Raises:
        ValueError: If shell type is not supported
    """
    completion_class = COMPLETION_CLASSES.get(shell.lower())
    if completion_class is None:
        raise ValueError(
            f"Unsupported shell: {shell}. "
            f"Supported shells: {', '.join(COMPLETION_CLASSES)}"
        )

    complete = completion_class(
        cli=cli,
        ctx_args={},
        prog_name=PROG_NAME,
        complete_var=COMPLETE_VAR,
    )
    return complete.source()
