"""Screen capture via an external tool (scrot by default).

The capture file lives at a fixed path in the temp directory and is owned
by a CaptureSession for the duration of one run.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import Config
from .errors import CaptureError, SpawnError, ToolExitError
from . import tools

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CaptureRequest:
    """What to capture, where, and after how long."""

    path: Path
    select_region: bool = False
    delay: int = 0

    @classmethod
    def from_config(cls, config: Config, select_region: bool = False, delay: int = 0) -> "CaptureRequest":
        return cls(path=config.capture_path, select_region=select_region, delay=delay)


class CaptureSession:
    """Owns the capture file for one run.

    The file is removed when the session closes, unless ownership was
    handed to someone else with keep() (for example a detached viewer
    that still needs to read it).
    """

    def __init__(self, path: Path, keep: bool = False):
        self.path = Path(path)
        self._keep = keep

    def __enter__(self) -> "CaptureSession":
        self.prepare()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def kept(self) -> bool:
        return self._keep

    def prepare(self) -> None:
        """Remove a leftover file from an earlier run.

        Some capture tools refuse to overwrite, or pick a new name instead.
        """
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise CaptureError(f"Could not clear old capture {self.path}: {e}") from e

    def keep(self) -> None:
        """Leave the capture file in place when the session closes."""
        self._keep = True

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def close(self) -> None:
        if self._keep:
            log.debug("Keeping capture file: %s", self.path)
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            log.warning("Could not remove capture file %s: %s", self.path, e)


def capture_command(request: CaptureRequest, config: Config) -> list[str]:
    argv = [config.capture_tool]
    if request.select_region:
        argv.append(config.select_flag)
    argv.append(str(request.path))
    return argv


def capture(request: CaptureRequest, config: Optional[Config] = None) -> Path:
    """Capture the screen into request.path.

    Waits request.delay seconds first. The file is not checked afterwards;
    a tool that exits 0 without writing shows up later as an I/O error.

    Returns:
        The path that was written

    Raises:
        CaptureError: If the tool could not be started or failed
    """
    config = config or Config()

    if request.delay:
        log.info("Capturing in %d second(s)", request.delay)
        time.sleep(request.delay)

    try:
        tools.run(capture_command(request, config))
    except SpawnError as e:
        raise CaptureError(f"Screen capture could not start: {e.reason}") from e
    except ToolExitError as e:
        raise CaptureError(f"Screen capture failed. Exit status: {e.returncode}") from e

    log.debug("Captured to %s", request.path)
    return request.path
