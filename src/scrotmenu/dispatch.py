"""Executing the chosen post-capture action.

Exactly one action runs per call. Every failure becomes a DispatchError;
upload failures are additionally shown as a notification first.
"""

import logging
import shutil
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .capture import CaptureSession
from .choice import Choice, CopyToClipboard, OpenWith, SaveAs, Upload
from .config import Config
from .errors import DispatchError, ScrotmenuError, SpawnError, UploadError
from .notify import Notifier
from .upload import ImgurClient
from . import clipboard, tools

log = logging.getLogger(__name__)

UploaderFactory = Callable[[Config], ImgurClient]


@dataclass
class DispatchOutcome:
    """What was done, for events and hooks."""

    action: str
    detail: str = ""


def default_uploader(config: Config) -> ImgurClient:
    return ImgurClient(config.imgur_client_id, url=config.imgur_url, timeout=config.upload_timeout)


def _read_capture(session: CaptureSession) -> bytes:
    try:
        return session.read_bytes()
    except OSError as e:
        raise DispatchError(f"Could not read capture {session.path}: {e}") from e


def _upload(
    session: CaptureSession,
    config: Config,
    notifier: Notifier,
    make_uploader: UploaderFactory,
) -> DispatchOutcome:
    if not config.imgur_client_id:
        raise DispatchError("Upload requested but no imgur client id is configured")

    image = _read_capture(session)
    try:
        result = make_uploader(config).upload(image)
    except UploadError as e:
        notifier.send("Upload failed", str(e), "dialog-error")
        raise DispatchError(str(e)) from e

    if not result.link:
        log.info("Upload finished without a link")
        notifier.send("Upload complete", "No link returned", "dialog-warning")
        return DispatchOutcome("upload")

    try:
        clipboard.copy_text(result.link, config)
    except ScrotmenuError as e:
        raise DispatchError(f"Could not copy link to clipboard: {e}") from e

    log.info("Uploaded to %s", result.link)
    notifier.send("Upload complete", f"Uploaded to {result.link}", "emblem-ok")

    if config.clipboard_grace_seconds:
        # Clipboard managers need the owner alive long enough to grab the link
        log.debug("Holding clipboard for %d second(s)", config.clipboard_grace_seconds)
        time.sleep(config.clipboard_grace_seconds)

    return DispatchOutcome("upload", result.link)


def _save_as(session: CaptureSession, destination: str) -> DispatchOutcome:
    destination = destination.strip()
    if not destination:
        raise DispatchError("No destination given for save")
    try:
        shutil.copyfile(session.path, destination)
    except OSError as e:
        raise DispatchError(f"Could not save to {destination}: {e}") from e
    log.info("Saved to %s", destination)
    return DispatchOutcome("save", destination)


def _open_with(session: CaptureSession, viewer: str) -> DispatchOutcome:
    try:
        tools.spawn_detached([viewer, str(session.path)])
    except SpawnError as e:
        raise DispatchError(f"Could not open {viewer}: {e.reason}") from e
    # The viewer reads the file after we exit
    session.keep()
    log.info("Opened in %s", viewer)
    return DispatchOutcome("open", viewer)


def _copy_image(session: CaptureSession, config: Config) -> DispatchOutcome:
    image = _read_capture(session)
    try:
        clipboard.copy_image(image, config)
    except ScrotmenuError as e:
        raise DispatchError(f"Could not copy image to clipboard: {e}") from e
    log.info("Copied image to clipboard")
    return DispatchOutcome("copy")


def dispatch(
    choice: Choice,
    session: CaptureSession,
    config: Optional[Config] = None,
    notifier: Optional[Notifier] = None,
    make_uploader: UploaderFactory = default_uploader,
) -> DispatchOutcome:
    """Run the action for choice against the captured file.

    Raises:
        DispatchError: If the action failed
    """
    config = config or Config()
    notifier = notifier or Notifier(enabled=config.enable_notification)

    if isinstance(choice, Upload):
        return _upload(session, config, notifier, make_uploader)
    if isinstance(choice, SaveAs):
        return _save_as(session, choice.destination)
    if isinstance(choice, OpenWith):
        return _open_with(session, choice.viewer)
    if isinstance(choice, CopyToClipboard):
        return _copy_image(session, config)
    raise DispatchError(f"Unsupported choice: {choice!r}")
