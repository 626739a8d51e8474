"""Action catalog and the dialog that lets the user pick from it.

The catalog is the one table both the menu and the resolver read, so a
label shown in the menu always maps back to exactly one action.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from .config import Config
from .errors import ConfigError, MenuCancelled, MenuError, SpawnError, ToolExitError
from . import tools

log = logging.getLogger(__name__)

UPLOAD_LABEL = "Upload to imgur.com"
COPY_LABEL = "Copy to clipboard"
SAVE_LABEL = "Save as..."
OPEN_LABEL = "Open with {viewer}"

# zenity exits with 1 when the dialog is closed or Cancel is pressed
DIALOG_CANCEL_STATUS = 1


class ActionKind(enum.Enum):
    UPLOAD = "upload"
    COPY = "copy"
    SAVE = "save"
    OPEN = "open"


@dataclass(frozen=True)
class CatalogEntry:
    label: str
    kind: ActionKind
    viewer: Optional[str] = None


class ActionCatalog:
    """Ordered, immutable list of the actions offered for one run."""

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries = tuple(entries)
        self._by_label: dict[str, CatalogEntry] = {}
        for entry in self._entries:
            if entry.label in self._by_label:
                raise ConfigError(f"Duplicate menu entry: {entry.label!r}")
            self._by_label[entry.label] = entry

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, label: object) -> bool:
        return label in self._by_label

    @property
    def labels(self) -> list[str]:
        return [entry.label for entry in self._entries]

    def lookup(self, label: str) -> Optional[CatalogEntry]:
        return self._by_label.get(label)


def build_catalog(enable_upload: bool, viewers: Iterable[str]) -> ActionCatalog:
    """Build the catalog for this run.

    Upload comes first when enabled, then copy and save, then one
    "Open with" entry per viewer in the order given.
    """
    entries = []
    if enable_upload:
        entries.append(CatalogEntry(UPLOAD_LABEL, ActionKind.UPLOAD))
    entries.append(CatalogEntry(COPY_LABEL, ActionKind.COPY))
    entries.append(CatalogEntry(SAVE_LABEL, ActionKind.SAVE))
    for viewer in viewers:
        entries.append(CatalogEntry(OPEN_LABEL.format(viewer=viewer), ActionKind.OPEN, viewer))
    return ActionCatalog(entries)


def catalog_from_config(config: Config) -> ActionCatalog:
    return build_catalog(config.upload_enabled, config.viewers)


def menu_command(catalog: ActionCatalog, config: Config) -> list[str]:
    return [
        config.dialog_tool,
        "--list",
        "--title", config.menu_title,
        "--column", config.menu_column,
        *catalog.labels,
    ]


def present_menu(catalog: ActionCatalog, config: Optional[Config] = None) -> bytes:
    """Show the action list and block until the user picks one row.

    Returns:
        Raw dialog stdout: the selected label followed by a newline

    Raises:
        MenuCancelled: If the user closed the dialog without choosing
        MenuError: If the dialog could not be started or failed
    """
    config = config or Config()
    try:
        result = tools.run(menu_command(catalog, config))
    except SpawnError as e:
        raise MenuError(f"Action menu could not start: {e.reason}") from e
    except ToolExitError as e:
        raise dialog_failure("Action menu", e) from e

    log.debug("Menu returned %r", result.stdout)
    return result.stdout


def dialog_failure(what: str, error: ToolExitError) -> MenuError:
    if error.returncode == DIALOG_CANCEL_STATUS:
        return MenuCancelled(f"{what} was cancelled", error.returncode)
    return MenuError(f"{what} failed. Exit status: {error.returncode}", error.returncode)
