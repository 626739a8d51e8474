"""Exception hierarchy for scrotmenu.

Two axes meet here:
- what went wrong (SpawnError, ToolExitError, ParseError, ConfigError)
- which pipeline stage it happened in (CaptureError, MenuError,
  ResolveError, DispatchError)

Tool helpers raise the first kind; each stage wraps it in its own error
with ``raise ... from`` so the cause stays attached.
"""

from typing import Optional


class ScrotmenuError(Exception):
    """Base class for every error scrotmenu raises on purpose."""

    stage = "run"


class ConfigError(ScrotmenuError):
    """Invalid configuration value or flag."""

    stage = "config"


class SpawnError(ScrotmenuError):
    """An external tool could not be launched."""

    def __init__(self, tool: str, reason: str):
        super().__init__(f"could not run {tool}: {reason}")
        self.tool = tool
        self.reason = reason


class ToolExitError(ScrotmenuError):
    """An external tool ran but exited with a non-zero status."""

    def __init__(self, tool: str, returncode: int, stderr: str = ""):
        message = f"{tool} failed. Exit status: {returncode}"
        if stderr:
            message = f"{message} ({stderr.strip()})"
        super().__init__(message)
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr


class ParseError(ScrotmenuError):
    """A tool produced output that could not be interpreted."""


class CaptureError(ScrotmenuError):
    """Raised when capture fails."""

    stage = "capture"


class MenuError(ScrotmenuError):
    """The action menu could not be shown or returned an error."""

    stage = "menu"

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class MenuCancelled(MenuError):
    """The user closed a dialog without choosing anything."""


class SaveCancelled(MenuCancelled):
    """The user closed the save dialog after picking "Save as..."."""

    stage = "resolve"


class ResolveError(ScrotmenuError):
    """The menu selection could not be turned into a Choice."""

    stage = "resolve"


class UnknownSelection(ResolveError, ParseError):
    """The dialog returned a label that is not in the action catalog."""

    def __init__(self, raw_label):
        super().__init__(f"dialog returned unknown selection {raw_label!r}")
        self.raw_label = raw_label


class UploadError(ScrotmenuError):
    """The image upload service rejected the upload or was unreachable."""

    stage = "upload"


class DispatchError(ScrotmenuError):
    """The chosen action failed."""

    stage = "dispatch"
