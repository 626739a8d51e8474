"""Shared fixtures for scrotmenu tests."""

import subprocess
from unittest import mock

import pytest

from scrotmenu import emit
from scrotmenu.config import Config


def completed(argv, returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(argv, returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def config(tmp_path):
    """Config that keeps every file inside tmp_path and never notifies."""
    return Config(
        temp_dir=tmp_path,
        lock_file=tmp_path / "scrotmenu.lock",
        hooks_dir=tmp_path / "hooks",
        enable_notification=False,
    )


@pytest.fixture
def capture_file(config):
    path = config.capture_path
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image")
    return path


@pytest.fixture(autouse=True)
def quiet_events():
    emit.configure("scrotmenu-test", stderr=False)
    yield
    emit.configure("unknown", stderr=True)


@pytest.fixture
def mock_run():
    with mock.patch("scrotmenu.tools.subprocess.run") as run:
        yield run
