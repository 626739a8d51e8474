"""Clipboard access through xclip (X11) or wl-copy (Wayland)."""

import logging
from pathlib import Path
from typing import Optional

from .config import Config
from . import tools

log = logging.getLogger(__name__)

IMAGE_MIME = "image/png"
TEXT_MIME = "text/plain"


def clipboard_command(config: Config, mime_type: str) -> list[str]:
    tool = config.clipboard_tool
    if Path(tool).name == "wl-copy":
        return [tool, "-t", mime_type]
    return [tool, "-selection", "clipboard", "-t", mime_type]


def copy_bytes(data: bytes, mime_type: str, config: Optional[Config] = None) -> None:
    """Place data on the clipboard tagged with mime_type.

    Raises:
        SpawnError: If the clipboard tool could not be started
        ToolExitError: If the clipboard tool failed
    """
    config = config or Config()
    # xclip and wl-copy fork a child that keeps serving the selection
    tools.run(clipboard_command(config, mime_type), input=data, capture=False)
    log.debug("Copied %d bytes (%s) to clipboard", len(data), mime_type)


def copy_text(text: str, config: Optional[Config] = None) -> None:
    copy_bytes(text.encode("utf-8"), TEXT_MIME, config)


def copy_image(data: bytes, config: Optional[Config] = None) -> None:
    copy_bytes(data, IMAGE_MIME, config)
