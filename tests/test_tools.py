"""Tests for scrotmenu.tools subprocess wrappers."""

import subprocess
from unittest import mock

import pytest

from scrotmenu import tools
from scrotmenu.errors import SpawnError, ToolExitError
from tests.conftest import completed


class TestRun:
    def test_returns_completed_process(self, mock_run):
        mock_run.return_value = completed(["zenity"], stdout=b"Save as...\n")

        result = tools.run(["zenity", "--list"])

        assert result.stdout == b"Save as...\n"
        mock_run.assert_called_once_with(
            ["zenity", "--list"], input=None, capture_output=True, timeout=None,
        )

    def test_uncaptured_output_goes_to_devnull(self, mock_run):
        mock_run.return_value = completed(["xclip"], stdout=None, stderr=None)

        result = tools.run(["xclip"], input=b"data", capture=False)

        assert result.stdout is None
        mock_run.assert_called_once_with(
            ["xclip"], input=b"data", timeout=None,
            stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
        )

    def test_uncaptured_failure_has_no_stderr(self, mock_run):
        mock_run.return_value = completed(["xclip"], returncode=1, stdout=None, stderr=None)

        with pytest.raises(ToolExitError) as exc_info:
            tools.run(["xclip"], capture=False)

        assert exc_info.value.stderr == ""

    def test_arguments_are_stringified(self, mock_run, tmp_path):
        mock_run.return_value = completed(["scrot"])

        tools.run(["scrot", tmp_path / "shot.png"])

        assert mock_run.call_args.args[0] == ["scrot", str(tmp_path / "shot.png")]

    def test_input_is_passed_to_stdin(self, mock_run):
        mock_run.return_value = completed(["xclip"])

        tools.run(["xclip"], input=b"data")

        assert mock_run.call_args.kwargs["input"] == b"data"

    def test_missing_binary_is_spawn_error(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(SpawnError) as exc_info:
            tools.run(["scrot"])

        assert exc_info.value.tool == "scrot"
        assert "not found" in str(exc_info.value)

    def test_os_error_is_spawn_error(self, mock_run):
        mock_run.side_effect = PermissionError(13, "Permission denied")

        with pytest.raises(SpawnError):
            tools.run(["scrot"])

    def test_timeout_is_spawn_error(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["scrot"], 5)

        with pytest.raises(SpawnError, match="timed out"):
            tools.run(["scrot"], timeout=5)

    def test_non_zero_exit_is_tool_exit_error(self, mock_run):
        mock_run.return_value = completed(["scrot"], returncode=2, stderr=b"giblib error\n")

        with pytest.raises(ToolExitError) as exc_info:
            tools.run(["scrot"])

        assert exc_info.value.returncode == 2
        assert exc_info.value.stderr == "giblib error\n"
        assert "Exit status: 2" in str(exc_info.value)


class TestSpawnDetached:
    @mock.patch("scrotmenu.tools.subprocess.Popen")
    def test_starts_new_session_without_waiting(self, mock_popen):
        tools.spawn_detached(["feh", "/tmp/shot.png"])

        mock_popen.assert_called_once()
        assert mock_popen.call_args.args[0] == ["feh", "/tmp/shot.png"]
        assert mock_popen.call_args.kwargs["start_new_session"] is True
        mock_popen.return_value.wait.assert_not_called()

    @mock.patch("scrotmenu.tools.subprocess.Popen")
    def test_launch_failure_is_spawn_error(self, mock_popen):
        mock_popen.side_effect = FileNotFoundError(2, "No such file or directory")

        with pytest.raises(SpawnError) as exc_info:
            tools.spawn_detached(["no-such-viewer", "/tmp/shot.png"])

        assert exc_info.value.tool == "no-such-viewer"
