"""Single-run lock.

Every run writes the same capture file, so two runs at once would clobber
each other. The lock makes the second one fail fast instead.
"""

import fcntl
import logging
import os
from pathlib import Path
from typing import Optional, TextIO

from .errors import ConfigError

log = logging.getLogger(__name__)


class RunLock:
    """Exclusive, non-blocking flock on a lock file holding our PID."""

    def __init__(self, lock_file: Path):
        self.lock_file = Path(lock_file)
        self._lock_fd: Optional[TextIO] = None

    def __enter__(self) -> "RunLock":
        if not self.acquire():
            pid = self.holder_pid()
            who = f" (PID {pid})" if pid else ""
            raise ConfigError(f"Another scrotmenu run is in progress{who}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    @property
    def held(self) -> bool:
        return self._lock_fd is not None

    def acquire(self) -> bool:
        """Try to take the lock.

        Returns:
            True if we now hold it, False if another run does
        """
        try:
            # 'a+' so a failed attempt does not wipe the holder's PID
            self._lock_fd = open(self.lock_file, "a+")
            fcntl.flock(self._lock_fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            log.debug("Lock acquisition failed: %s", e)
            if self._lock_fd:
                self._lock_fd.close()
                self._lock_fd = None
            return False

        self._lock_fd.seek(0)
        self._lock_fd.truncate()
        self._lock_fd.write(str(os.getpid()))
        self._lock_fd.flush()
        log.debug("Lock acquired: %s", self.lock_file)
        return True

    def release(self) -> None:
        """Clear our PID and drop the lock.

        The file itself stays. Unlinking it would let a waiting run lock the
        old inode while a new run creates and locks a fresh file.
        """
        if not self._lock_fd:
            return
        try:
            self._lock_fd.seek(0)
            self._lock_fd.truncate()
            self._lock_fd.flush()
            fcntl.flock(self._lock_fd.fileno(), fcntl.LOCK_UN)
        except OSError as e:
            log.debug("Could not release lock: %s", e)
        finally:
            self._lock_fd.close()
            self._lock_fd = None

    def holder_pid(self) -> Optional[int]:
        try:
            return int(self.lock_file.read_text().strip())
        except (ValueError, OSError):
            return None
