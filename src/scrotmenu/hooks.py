"""User hook scripts run after an action completes.

Directory structure (hooks_dir resolved by platformdirs):
    <hooks_dir>/
    └── on_dispatch.d/
        ├── 10-archive.sh
        └── 20-log.sh

Scripts run in sorted order, detached. Each receives: action path detail
(action is one of upload, save, open, copy; detail is the link, the
destination, the viewer, or empty).
"""

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .capture import CaptureSession
    from .dispatch import DispatchOutcome

log = logging.getLogger(__name__)


def find_hooks(hooks_dir: Optional[Path], event: str) -> list[Path]:
    """Return executable scripts for an event, sorted by name."""
    if not hooks_dir:
        return []

    event_dir = hooks_dir / f"{event}.d"
    if not event_dir.is_dir():
        return []

    scripts = []
    for script in sorted(event_dir.iterdir()):
        if not script.is_file() or script.name.startswith("."):
            continue
        if not script.stat().st_mode & 0o111:
            log.debug("Skipping non-executable: %s", script)
            continue
        scripts.append(script)
    return scripts


def run_hooks(hooks_dir: Optional[Path], event: str, *args) -> int:
    """Start every hook script for an event without waiting for them.

    A hook that fails to start is logged and skipped.

    Returns:
        Number of scripts started
    """
    started = 0
    for script in find_hooks(hooks_dir, event):
        try:
            subprocess.Popen(
                [str(script)] + [str(a) for a in args],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            log.warning("Hook %s failed: %s", script.name, e)
            continue
        log.debug("Hook executed: %s", script.name)
        started += 1
    return started


def notify_dispatch(outcome: "DispatchOutcome", session: "CaptureSession", hooks_dir: Optional[Path]) -> int:
    """Tell on_dispatch hooks which action ran.

    Hooks run detached and read the capture after the run has ended, so the
    session leaves the file in place whenever there is a hook to read it.
    """
    if not find_hooks(hooks_dir, "on_dispatch"):
        return 0
    session.keep()
    return run_hooks(hooks_dir, "on_dispatch", outcome.action, session.path, outcome.detail)
