"""CLI interface for semver-bump."""

import sys
from dataclasses import dataclass, field
from pathlib import Path

import click

from semver_bump import __version__
from semver_bump.branches import BranchNotAllowedError, check_branch_allowed
from semver_bump.bumper import FileBumperError, bump_files, read_current_version
from semver_bump.config import BumpConfig, ConfigError, load_config
from semver_bump.git import (
    GitError,
    fetch_remote_tags,
    get_current_branch,
    get_git_root,
    get_tags,
    is_working_tree_clean,
    tag_exists,
)
from semver_bump.hooks import HookError, render_command, run_hooks
from semver_bump.resolver import (
    VersionCollisionError,
    normalize_tags,
    resolve_with_tags,
)
from semver_bump.shell_completion import generate_completion_script
from semver_bump.version import (
    RELEASE_TYPES,
    VersionError,
    parse_version,
    slugify_branch,
)

# Exit code used when the branch policy rejects a release
EXIT_BRANCH_NOT_ALLOWED = 2


@dataclass(frozen=True)
class Resolution:
    """Outcome of a next-version calculation."""

    current_version: str
    release_type: str
    identifier: str | None
    next_version: str
    tag_prefix: str = ""
    tags_considered: list[str] = field(default_factory=list)
    used_tags: bool = False

    @property
    def tag_name(self) -> str:
        return f"{self.tag_prefix}{self.next_version}"


def add_help_option(f):
    """Custom decorator to add '-h' as an alias for '--help'."""
    f = click.help_option("--help", "-h")(f)
    return f


def resolution_options(f):
    """Options shared by commands that resolve the next version."""
    options = [
        click.option(
            "--release-type",
            "-t",
            type=click.Choice(RELEASE_TYPES, case_sensitive=False),
            default="patch",
            show_default=True,
            help="Kind of version bump",
        ),
        click.option(
            "--identifier",
            "-i",
            default=None,
            help="Prerelease identifier (e.g., alpha, beta, rc)",
        ),
        click.option(
            "--current",
            default=None,
            help="Current version (default: read from the configured version-file)",
        ),
        click.option(
            "--custom-version",
            default=None,
            help="Exact version to release (requires --release-type custom)",
        ),
        click.option(
            "--no-tags",
            is_flag=True,
            help="Ignore existing git tags when computing the version",
        ),
        click.option(
            "--fetch-remote",
            is_flag=True,
            help="Fetch tags from origin before reading them",
        ),
        click.option(
            "--config",
            "-c",
            default=None,
            help="Path to configuration file (default: semver-bump.yaml in git root)",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def calculate_next_version(
    release_type: str,
    identifier: str | None = None,
    current: str | None = None,
    custom_version: str | None = None,
    use_tags: bool | None = None,
    fetch_remote: bool = False,
    config: BumpConfig | None = None,
    git_root: Path | None = None,
) -> Resolution:
    """Calculate the next semantic version.

    Args:
        release_type: One of RELEASE_TYPES
        identifier: Prerelease identifier (default: from config, then carried
            over from the current version; branch releases use the branch slug)
        current: Current version (default: read from the configured version-file)
        custom_version: Target version for 'custom' releases
        use_tags: Consult git tags (default: 'with-tags' from config)
        fetch_remote: Fetch remote tags first, in addition to 'remote-tags'
        config: Loaded configuration (default: loaded from the git root)
        git_root: Git repository root (default: detected)

    Returns:
        Resolution describing the computed version

    Raises:
        ConfigError: If no current version is available or config is invalid
        GitError: If git operations fail
        FileBumperError: If the version file can't be read
        VersionError: If version resolution fails
    """
    if git_root is None:
        git_root = get_git_root()
    if config is None:
        config = load_config(git_root=git_root)

    if current is None:
        version_file = config.get_version_file()
        if not version_file:
            raise ConfigError(
                "No current version available. Configure 'version-file' "
                "or pass --current."
            )
        current = read_current_version(version_file, git_root)

    if release_type == "branch":
        # Branch builds never reuse the configured channel
        identifier = identifier or slugify_branch(get_current_branch(git_root))
    else:
        identifier = identifier or config.get_identifier()

    if use_tags is None:
        use_tags = config.get_with_tags()

    tag_prefix = config.get_tag_prefix()
    tags: list[str] = []
    use_tags = use_tags and release_type != "custom"
    if use_tags:
        if fetch_remote or config.get_remote_tags():
            fetch_remote_tags(git_root)
        tags = get_tags(git_root)

    next_version = resolve_with_tags(
        current,
        release_type,
        tags,
        identifier=identifier,
        prefix=tag_prefix,
        custom_version=custom_version,
    )

    return Resolution(
        current_version=current,
        release_type=release_type,
        identifier=identifier,
        next_version=next_version,
        tag_prefix=tag_prefix,
        tags_considered=normalize_tags(tags, tag_prefix),
        used_tags=use_tags,
    )


def _fail(label: str, error: Exception) -> None:
    click.echo(f"{label}: {error}", err=True)
    sys.exit(1)


@click.group()
@add_help_option
@click.version_option(__version__, "--version", "-v")
def cli():
    """semver-bump - Semantic version resolution and bumping."""
    pass


@cli.command()
@add_help_option
@resolution_options
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show how the version was resolved",
)
def next_version(
    release_type: str,
    identifier: str | None,
    current: str | None,
    custom_version: str | None,
    no_tags: bool,
    fetch_remote: bool,
    config: str | None,
    verbose: bool,
):
    """Calculate the next semantic version.

    Starts from the current version and, unless --no-tags is given, moves
    past any version already tagged in the same release line.
    """
    try:
        git_root = get_git_root()
        release_config = load_config(config, git_root)
        result = calculate_next_version(
            release_type.lower(),
            identifier=identifier,
            current=current,
            custom_version=custom_version,
            use_tags=False if no_tags else None,
            fetch_remote=fetch_remote,
            config=release_config,
            git_root=git_root,
        )

        if verbose:
            click.echo(f"Current version: {result.current_version}")
            click.echo(f"Release type: {result.release_type}")
            if result.identifier:
                click.echo(f"Identifier: {result.identifier}")
            click.echo(f"Tags considered: {len(result.tags_considered)}")
            click.echo(f"Tag name: {result.tag_name}")
            click.echo(
                f"Version bump: {result.current_version} → {result.next_version}"
            )
            click.echo()

        click.echo(result.next_version)

    except ConfigError as e:
        _fail("Configuration error", e)
    except GitError as e:
        _fail("Git error", e)
    except FileBumperError as e:
        _fail("Version file error", e)
    except VersionError as e:
        _fail("Version error", e)


@cli.command()
@add_help_option
@click.option(
    "--config",
    "-c",
    default=None,
    help="Path to configuration file (default: semver-bump.yaml in git root)",
)
@click.option(
    "--fetch-remote",
    is_flag=True,
    help="Fetch tags from origin before reading them",
)
def tags(config: str | None, fetch_remote: bool):
    """List version tags, newest first.

    Tags that are not semantic versions (after removing the tag prefix)
    are skipped.
    """
    try:
        git_root = get_git_root()
        release_config = load_config(config, git_root)

        if fetch_remote or release_config.get_remote_tags():
            fetch_remote_tags(git_root)

        versions = normalize_tags(get_tags(git_root), release_config.get_tag_prefix())
        for version in sorted(versions, key=parse_version, reverse=True):
            click.echo(version)

    except ConfigError as e:
        _fail("Configuration error", e)
    except GitError as e:
        _fail("Git error", e)


@cli.command()
@add_help_option
@click.option(
    "--release-type",
    "-t",
    type=click.Choice(RELEASE_TYPES, case_sensitive=False),
    default=None,
    help="Release type to check (default: check the branch only)",
)
@click.option(
    "--config",
    "-c",
    default=None,
    help="Path to configuration file (default: semver-bump.yaml in git root)",
)
def check_branch(release_type: str | None, config: str | None):
    """Check whether the current branch may be released from.

    Exits with status 2 when the 'allowed-branches' policy rejects the
    current branch or the requested release type.
    """
    try:
        git_root = get_git_root()
        release_config = load_config(config, git_root)
        branch = get_current_branch(git_root)

        check_branch_allowed(
            branch,
            release_type.lower() if release_type else None,
            release_config.get_allowed_branches(),
        )
        click.echo(f"Branch '{branch}' is allowed")

    except BranchNotAllowedError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_BRANCH_NOT_ALLOWED)
    except ConfigError as e:
        _fail("Configuration error", e)
    except GitError as e:
        _fail("Git error", e)


@cli.command()
@add_help_option
@resolution_options
@click.option(
    "--dry-run",
    "-d",
    is_flag=True,
    help="Show what would be done without running hooks or modifying files",
)
@click.option(
    "--skip-hooks",
    is_flag=True,
    help="Do not run leading and trailing hooks",
)
@click.option(
    "--allow-dirty",
    is_flag=True,
    help="Bump even when the working tree has uncommitted changes",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Show detailed information about the bump",
)
def bump(
    release_type: str,
    identifier: str | None,
    current: str | None,
    custom_version: str | None,
    no_tags: bool,
    fetch_remote: bool,
    config: str | None,
    dry_run: bool,
    skip_hooks: bool,
    allow_dirty: bool,
    verbose: bool,
):
    """Resolve the next version and write it to the configured files.

    Steps:
    1. Checks the branch policy and that the working tree is clean
    2. Resolves the next version (see next-version)
    3. Runs leading hooks
    4. Writes the version to version-file and extra-files
    5. Runs trailing hooks

    Committing, tagging and publishing are left to the trailing hooks or
    to your CI.
    """
    try:
        git_root = get_git_root()
        release_config = load_config(config, git_root)
        release_type = release_type.lower()

        branch = get_current_branch(git_root)
        check_branch_allowed(branch, release_type, release_config.get_allowed_branches())

        allow_dirty = allow_dirty or release_config.get_allow_dirty()
        if not dry_run and not allow_dirty and not is_working_tree_clean(git_root):
            raise GitError(
                "Working tree has uncommitted changes. "
                "Commit or stash them, or pass --allow-dirty."
            )

        result = calculate_next_version(
            release_type,
            identifier=identifier,
            current=current,
            custom_version=custom_version,
            use_tags=False if no_tags else None,
            fetch_remote=fetch_remote,
            config=release_config,
            git_root=git_root,
        )

        if not result.used_tags and tag_exists(result.tag_name, git_root):
            raise VersionCollisionError(result.next_version)

        hook_context = {
            "new_version": result.next_version,
            "current_version": result.current_version,
            "release_type": result.release_type,
            "tag_name": result.tag_name,
            "branch": branch,
        }
        hook_context["commit_message"] = render_command(
            release_config.get_commit_message(), hook_context
        )

        files = release_config.get_files_to_bump()

        if verbose or dry_run:
            click.echo(f"Branch: {branch}")
            click.echo(f"Current version: {result.current_version}")
            click.echo(f"Next version: {result.next_version}")
            click.echo(f"Release type: {result.release_type}")
            click.echo(f"Tag name: {result.tag_name}")
            click.echo()

        if not skip_hooks:
            leading = run_hooks(
                release_config.get_leading_hooks(), hook_context, git_root, dry_run
            )
            for command in leading:
                click.echo(f"{'Would run' if dry_run else 'Ran'}: {command}")

        if files:
            results = bump_files(files, result.next_version, git_root, dry_run=dry_run)

            for update in results["updated"]:
                click.echo(f"  ✓ {update}")
            for error in results["errors"]:
                click.echo(f"  ✗ {error}", err=True)

            if results["errors"]:
                sys.exit(1)
        elif verbose:
            click.echo("No version files configured")

        if not skip_hooks:
            trailing = run_hooks(
                release_config.get_trailing_hooks(), hook_context, git_root, dry_run
            )
            for command in trailing:
                click.echo(f"{'Would run' if dry_run else 'Ran'}: {command}")

        if dry_run:
            click.echo("\nDry run - no files modified")
        else:
            click.echo(f"\n✓ Version: {result.next_version}")

    except BranchNotAllowedError as e:
        click.echo(str(e), err=True)
        sys.exit(EXIT_BRANCH_NOT_ALLOWED)
    except ConfigError as e:
        _fail("Configuration error", e)
    except GitError as e:
        _fail("Git error", e)
    except FileBumperError as e:
        _fail("Version file error", e)
    except HookError as e:
        _fail("Hook error", e)
    except VersionError as e:
        _fail("Version error", e)


@cli.command()
@add_help_option
def generate_config():
    """Generate a complete configuration file template.

    Usage:
        semver-bump generate-config > semver-bump.yaml
    """
    from semver_bump.config import generate_config_template

    click.echo(generate_config_template())


@cli.command()
@add_help_option
@click.argument(
    "shell",
    type=click.Choice(["bash", "zsh", "fish"], case_sensitive=False),
)
def completion(shell: str):
    """Generate shell completion script.

    Usage:
        # Bash - save to file and source in ~/.bashrc
        semver-bump completion bash > ~/.semver-bump-completion.bash
        echo ". ~/.semver-bump-completion.bash" >> ~/.bashrc

        # Fish - save to completions directory
        semver-bump completion fish > ~/.config/fish/completions/semver-bump.fish
    """
    click.echo(generate_completion_script(cli, shell))


if __name__ == "__main__":
    cli()
