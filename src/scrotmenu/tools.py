"""Thin wrappers around external command-line tools.

Every collaborator (capture tool, dialog, clipboard, viewer) is launched
through one of these two functions so that launch failures and non-zero
exits always surface as SpawnError / ToolExitError.
"""

import logging
import subprocess
from typing import Optional, Sequence

from .errors import SpawnError, ToolExitError

log = logging.getLogger(__name__)


def run(
    argv: Sequence[str],
    input: Optional[bytes] = None,
    timeout: Optional[float] = None,
    capture: bool = True,
) -> subprocess.CompletedProcess:
    """Run a tool and block until it exits.

    Args:
        argv: Command line, tool name first
        input: Bytes written to the tool's stdin
        timeout: Seconds to wait before giving up (None waits forever)
        capture: Collect stdout and stderr. Pass False for tools that fork a
            child which keeps running; an inherited pipe would block us
            until that child exits.

    Returns:
        The completed process; stdout and stderr are bytes, or None when
        not captured

    Raises:
        SpawnError: If the tool could not be started
        ToolExitError: If the tool exited with a non-zero status
    """
    argv = [str(a) for a in argv]
    tool = argv[0]
    if capture:
        streams = {"capture_output": True}
    else:
        streams = {"stdout": subprocess.DEVNULL, "stderr": subprocess.DEVNULL}

    log.debug("Running: %s", " ".join(argv))
    try:
        result = subprocess.run(
            argv,
            input=input,
            timeout=timeout,
            **streams,
        )
    except FileNotFoundError:
        raise SpawnError(tool, "command not found")
    except subprocess.TimeoutExpired:
        raise SpawnError(tool, f"timed out after {timeout}s")
    except OSError as e:
        raise SpawnError(tool, str(e))

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace") if result.stderr else ""
        raise ToolExitError(tool, result.returncode, stderr)

    return result


def spawn_detached(argv: Sequence[str]) -> subprocess.Popen:
    """Start a tool in its own session and return without waiting.

    The child is never waited on or reaped by us; it outlives the run.

    Raises:
        SpawnError: If the tool could not be started
    """
    argv = [str(a) for a in argv]
    log.debug("Spawning: %s", " ".join(argv))
    try:
        return subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise SpawnError(argv[0], e.strerror or str(e))
