"""Tests for hook rendering and execution."""

from unittest.mock import Mock, patch

import pytest

from semver_bump.hooks import HookError, render_command, run_hooks, to_placeholder


@pytest.mark.parametrize(
    "key, expected",
    [
        ("new_version", "NEW_VERSION"),
        ("newVersion", "NEW_VERSION"),
        ("tag-name", "TAG_NAME"),
        ("branch", "BRANCH"),
    ],
)
def test_to_placeholder(key, expected):
    """Test context keys become upper snake case."""
    assert to_placeholder(key) == expected


def test_render_command():
    """Test placeholders are substituted."""
    command = render_command(
        'git commit -am "release: v${NEW_VERSION}" && git tag ${TAG_NAME}',
        {"new_version": "1.2.3", "tag_name": "v1.2.3"},
    )
    assert command == 'git commit -am "release: v1.2.3" && git tag v1.2.3'


def test_render_command_replaces_every_occurrence():
    """Test repeated placeholders."""
    command = render_command("${NEW_VERSION}-${NEW_VERSION}", {"new_version": "2.0.0"})
    assert command == "2.0.0-2.0.0"


def test_render_command_leaves_unknown_placeholders():
    """Test placeholders without a value are kept."""
    assert render_command("echo ${UNKNOWN}", {"new_version": "1.0.0"}) == "echo ${UNKNOWN}"


def test_run_hooks_dry_run(tmp_path):
    """Test dry-run renders without executing."""
    with patch("subprocess.run") as mock_run:
        rendered = run_hooks(
            ["npm run build", "echo ${NEW_VERSION}"],
            {"new_version": "1.0.0"},
            tmp_path,
            dry_run=True,
        )

    assert rendered == ["npm run build", "echo 1.0.0"]
    mock_run.assert_not_called()


def test_run_hooks_executes_in_order(tmp_path):
    """Test hooks run through the shell in the given order."""
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = Mock(returncode=0, stderr="")

        run_hooks(["make build", "make test"], {}, tmp_path)

    calls = mock_run.call_args_list
    assert [c[0][0] for c in calls] == ["make build", "make test"]
    assert calls[0][1]["shell"] is True
    assert calls[0][1]["cwd"] == tmp_path


def test_run_hooks_stops_at_first_failure(tmp_path):
    """Test that a failing hook raises and later hooks don't run."""
    with patch("subprocess.run") as mock_run:
        mock_run.side_effect = [
            Mock(returncode=0, stderr=""),
            Mock(returncode=3, stderr="boom\n"),
        ]

        with pytest.raises(HookError, match="exit code 3: boom") as exc_info:
            run_hooks(["first", "second", "third"], {}, tmp_path)

    assert mock_run.call_count == 2
    assert exc_info.value.command == "second"
    assert exc_info.value.returncode == 3


def test_run_hooks_real_shell(tmp_path):
    """Test a real hook writing the rendered version to a file."""
    run_hooks(["echo ${NEW_VERSION} > out.txt"], {"new_version": "3.1.4"}, tmp_path)

    assert (tmp_path / "out.txt").read_text().strip() == "3.1.4"
