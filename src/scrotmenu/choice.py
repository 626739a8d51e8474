"""Turning the dialog's output into a typed Choice."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Union

from .config import Config
from .errors import MenuCancelled, ResolveError, SaveCancelled, SpawnError, ToolExitError, UnknownSelection
from .menu import ActionCatalog, ActionKind, build_catalog, dialog_failure, present_menu
from . import tools

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Upload:
    name = "upload"


@dataclass(frozen=True)
class SaveAs:
    destination: str
    name = "save"


@dataclass(frozen=True)
class OpenWith:
    viewer: str
    name = "open"


@dataclass(frozen=True)
class CopyToClipboard:
    name = "copy"


Choice = Union[Upload, SaveAs, OpenWith, CopyToClipboard]

SavePathPicker = Callable[[], str]


def save_dialog_command(config: Config) -> list[str]:
    return [config.dialog_tool, "--file-selection", "--save"]


def ask_save_path(config: Optional[Config] = None) -> str:
    """Ask the user where to save, using the dialog tool's file picker.

    Returns:
        The chosen path without trailing whitespace

    Raises:
        SaveCancelled: If the user closed the picker
        ResolveError: If the picker failed or returned nothing
    """
    config = config or Config()
    try:
        result = tools.run(save_dialog_command(config))
    except SpawnError as e:
        raise ResolveError(f"Save dialog could not start: {e.reason}") from e
    except ToolExitError as e:
        failure = dialog_failure("Save dialog", e)
        if isinstance(failure, MenuCancelled):
            raise SaveCancelled(str(failure), e.returncode) from e
        raise ResolveError(str(failure)) from e

    try:
        path = result.stdout.decode("utf-8").rstrip()
    except UnicodeDecodeError as e:
        raise ResolveError("Save dialog returned a path that is not UTF-8") from e
    if not path:
        raise ResolveError("Save dialog returned an empty path")
    return path


def resolve(
    raw_label: Union[bytes, str],
    catalog: ActionCatalog,
    pick_save_path: Optional[SavePathPicker] = None,
) -> Choice:
    """Map the raw dialog output back to the action it names.

    The output must be one catalog label followed by a single newline,
    exactly as the dialog prints it. Anything else is an UnknownSelection.

    Args:
        raw_label: Dialog stdout, bytes or already decoded
        catalog: The catalog the menu was built from
        pick_save_path: Called to get a destination when "Save as..." was
            picked; errors it raises propagate unchanged

    Raises:
        UnknownSelection: If the label is not in the catalog
        ResolveError: If a save path was needed but no picker was given
    """
    if isinstance(raw_label, bytes):
        try:
            text = raw_label.decode("utf-8")
        except UnicodeDecodeError:
            raise UnknownSelection(raw_label)
    else:
        text = raw_label

    if not text.endswith("\n"):
        raise UnknownSelection(raw_label)
    entry = catalog.lookup(text[:-1])
    if entry is None:
        raise UnknownSelection(raw_label)

    if entry.kind is ActionKind.UPLOAD:
        return Upload()
    if entry.kind is ActionKind.COPY:
        return CopyToClipboard()
    if entry.kind is ActionKind.OPEN:
        return OpenWith(entry.viewer)
    if entry.kind is ActionKind.SAVE:
        if pick_save_path is None:
            raise ResolveError("No save dialog available to choose a destination")
        return SaveAs(pick_save_path())
    raise UnknownSelection(raw_label)


def resolve_label(
    raw_label: Union[bytes, str],
    viewers: Iterable[str],
    enable_upload: bool = True,
    pick_save_path: Optional[SavePathPicker] = None,
) -> Choice:
    """resolve() against the catalog built from a viewer list."""
    return resolve(raw_label, build_catalog(enable_upload, viewers), pick_save_path)


def choose(catalog: ActionCatalog, config: Config) -> Choice:
    """Show the menu and resolve the user's pick, asking for a path if needed.

    Raises:
        MenuError: If the menu failed or was cancelled
        ResolveError: If the selection could not be resolved
    """
    raw = present_menu(catalog, config)
    choice = resolve(raw, catalog, lambda: ask_save_path(config))
    log.debug("Resolved %r to %r", raw, choice)
    return choice

