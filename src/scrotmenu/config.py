"""Configuration management for scrotmenu.

Configuration priority (highest to lowest):
1. CLI overrides (passed to load_config)
2. Environment variables (SCROTMENU_*)
3. Config file (~/.config/scrotmenu/config.yaml)
4. Built-in defaults
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml
from platformdirs import user_config_dir

from .errors import ConfigError

log = logging.getLogger(__name__)

APP_NAME = "scrotmenu"
ENV_PREFIX = "SCROTMENU"
CONFIG_DIR = Path(user_config_dir(APP_NAME))
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"
IMGUR_UPLOAD_URL = "https://api.imgur.com/3/image"


def _default_temp_dir() -> Path:
    return Path(tempfile.gettempdir())


@dataclass
class Config:
    """scrotmenu configuration."""

    # External tools
    capture_tool: str = "scrot"
    select_flag: str = "-s"
    dialog_tool: str = "zenity"
    clipboard_tool: str = "xclip"

    # Menu
    menu_title: str = "Choose Action"
    menu_column: str = "Action"

    # Capture file
    temp_dir: Path = field(default_factory=_default_temp_dir)
    capture_filename: str = f"{APP_NAME}_screenshot.png"
    keep_capture: bool = False

    # Upload
    imgur_client_id: Optional[str] = None
    imgur_url: str = IMGUR_UPLOAD_URL
    upload_timeout: int = 60

    # Actions
    viewers: list[str] = field(default_factory=list)
    clipboard_grace_seconds: int = 0
    enable_notification: bool = True

    # Paths
    lock_file: Path = field(default_factory=lambda: _default_temp_dir() / f"{APP_NAME}.lock")
    hooks_dir: Optional[Path] = field(default_factory=lambda: CONFIG_DIR / "hooks")

    def __post_init__(self):
        if isinstance(self.temp_dir, str):
            self.temp_dir = Path(self.temp_dir)
        if isinstance(self.lock_file, str):
            self.lock_file = Path(self.lock_file)
        if isinstance(self.hooks_dir, str):
            self.hooks_dir = Path(self.hooks_dir)
        self.viewers = normalize_viewers(self.viewers)
        for key in INT_KEYS:
            setattr(self, key, parse_non_negative_int(getattr(self, key), key))

    @property
    def capture_path(self) -> Path:
        return self.temp_dir / self.capture_filename

    @property
    def upload_enabled(self) -> bool:
        return bool(self.imgur_client_id)


PATH_KEYS = {"temp_dir", "lock_file", "hooks_dir"}
INT_KEYS = {"upload_timeout", "clipboard_grace_seconds"}


def parse_non_negative_int(value: Any, name: str) -> int:
    """Parse a whole number of seconds (or similar) without coercion.

    Accepts ints and decimal strings only; "abc", "1.5", "-3" and booleans
    are rejected.

    Raises:
        ConfigError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.strip().isdecimal():
        number = int(value.strip())
    else:
        raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
    if number < 0:
        raise ConfigError(f"{name} must be >= 0, got {number}")
    return number


def normalize_viewers(viewers: Any) -> list[str]:
    """Return viewer names in order with blanks and duplicates removed."""
    if viewers is None:
        return []
    if isinstance(viewers, str):
        viewers = [viewers]
    if not isinstance(viewers, (list, tuple)):
        raise ConfigError(f"viewers must be a list of program names, got {viewers!r}")

    result: list[str] = []
    for viewer in viewers:
        if not isinstance(viewer, str):
            raise ConfigError(f"viewer names must be strings, got {viewer!r}")
        name = viewer.strip()
        if not name:
            continue
        if name in result:
            log.warning("Ignoring duplicate viewer: %s", name)
            continue
        result.append(name)
    return result


def _env(name: str) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}_{name}")


def _config_path_from_env() -> Optional[Path]:
    value = _env("CONFIG")
    if value:
        return Path(value).expanduser()
    return None


def _load_config_file(path: Path, strict: bool = False) -> dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        if strict:
            raise ConfigError(f"Failed to parse config file {path}: {exc}")
        log.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        if strict:
            raise ConfigError(f"Config file {path} must be a mapping")
        log.warning("Ignoring config file %s: not a mapping", path)
        return {}

    return data


def _expand_path(value: Any) -> Any:
    if value is None:
        return value
    return str(Path(value).expanduser())


def config_defaults() -> dict:
    temp_dir = _default_temp_dir()
    return {
        "capture_tool": "scrot",
        "select_flag": "-s",
        "dialog_tool": "zenity",
        "clipboard_tool": "xclip",
        "menu_title": "Choose Action",
        "menu_column": "Action",
        "temp_dir": str(temp_dir),
        "capture_filename": f"{APP_NAME}_screenshot.png",
        "keep_capture": False,
        "imgur_client_id": None,
        "imgur_url": IMGUR_UPLOAD_URL,
        "upload_timeout": 60,
        "viewers": [],
        "clipboard_grace_seconds": 0,
        "enable_notification": True,
        "lock_file": str(temp_dir / f"{APP_NAME}.lock"),
        "hooks_dir": str(CONFIG_DIR / "hooks"),
    }


def _load_env_overrides() -> dict:
    config: dict[str, Any] = {}

    mapping = {
        "CAPTURE_TOOL": "capture_tool",
        "SELECT_FLAG": "select_flag",
        "DIALOG_TOOL": "dialog_tool",
        "CLIPBOARD_TOOL": "clipboard_tool",
        "TEMP_DIR": "temp_dir",
        "CAPTURE_FILENAME": "capture_filename",
        "IMGUR_CLIENT_ID": "imgur_client_id",
        "IMGUR_URL": "imgur_url",
        "UPLOAD_TIMEOUT": "upload_timeout",
        "CLIPBOARD_GRACE_SECONDS": "clipboard_grace_seconds",
        "LOCK_FILE": "lock_file",
        "HOOKS_DIR": "hooks_dir",
    }

    for env_name, key in mapping.items():
        value = _env(env_name)
        if value is None:
            continue
        if key in PATH_KEYS:
            config[key] = _expand_path(value)
        else:
            # Integers are validated by Config.__post_init__
            config[key] = value

    viewers = _env("VIEWERS")
    if viewers is not None:
        config["viewers"] = [v for v in viewers.split(",") if v.strip()]

    for env_name, key in [
        ("KEEP_CAPTURE", "keep_capture"),
        ("ENABLE_NOTIFICATION", "enable_notification"),
    ]:
        value = _env(env_name)
        if value is None:
            continue
        config[key] = value.lower() in ("true", "1", "yes", "on")

    return config


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    return config_path or _config_path_from_env() or DEFAULT_CONFIG_PATH


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[dict] = None,
    strict: bool = False,
) -> Config:
    """Load configuration from all sources.

    Raises:
        ConfigError: If a value is invalid, or the file is malformed in strict mode
    """
    resolved_path = resolve_config_path(config_path)

    config_dict = config_defaults()
    file_config = _load_config_file(resolved_path, strict=strict)
    unknown = set(file_config) - set(config_dict)
    if unknown:
        if strict:
            raise ConfigError(f"Unknown config key(s): {', '.join(sorted(unknown))}")
        log.warning("Ignoring unknown config key(s): %s", ", ".join(sorted(unknown)))
        file_config = {k: v for k, v in file_config.items() if k not in unknown}
    config_dict.update(file_config)
    config_dict.update(_load_env_overrides())

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                config_dict[key] = value

    for key in PATH_KEYS:
        if key in config_dict and config_dict[key] is not None:
            config_dict[key] = _expand_path(config_dict[key])

    return Config(**config_dict)


def config_schema() -> dict:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "capture_tool": {"type": "string"},
            "select_flag": {"type": "string"},
            "dialog_tool": {"type": "string"},
            "clipboard_tool": {"type": "string"},
            "menu_title": {"type": "string"},
            "menu_column": {"type": "string"},
            "temp_dir": {"type": "string"},
            "capture_filename": {"type": "string"},
            "keep_capture": {"type": "boolean"},
            "imgur_client_id": {"type": ["string", "null"]},
            "imgur_url": {"type": "string"},
            "upload_timeout": {"type": "integer", "minimum": 0},
            "viewers": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
            "clipboard_grace_seconds": {"type": "integer", "minimum": 0},
            "enable_notification": {"type": "boolean"},
            "lock_file": {"type": "string"},
            "hooks_dir": {"type": ["string", "null"]},
        },
        "additionalProperties": False,
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config_dict(data: Any) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Config must be a mapping/object"]

    props = config_schema()["properties"]

    for key in data.keys():
        if key not in props:
            errors.append(f"Unknown config key: {key}")

    for key, value in data.items():
        if key not in props:
            continue
        expected = props[key]["type"]
        if isinstance(expected, list):
            if value is None and "null" in expected:
                continue
            if "string" in expected and isinstance(value, str):
                continue
            errors.append(f"{key} must be one of types: {', '.join(expected)}")
        elif expected == "string" and not isinstance(value, str):
            errors.append(f"{key} must be a string")
        elif expected == "boolean" and not isinstance(value, bool):
            errors.append(f"{key} must be a boolean")
        elif expected == "integer":
            if not _is_int(value):
                errors.append(f"{key} must be an integer")
            elif value < 0:
                errors.append(f"{key} must be >= 0")
        elif expected == "array":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                errors.append(f"{key} must be a list of strings")
            elif len(set(value)) != len(value):
                errors.append(f"{key} must not contain duplicates")

    return errors


def validate_config_file(config_path: Optional[Path] = None) -> list[str]:
    path = resolve_config_path(config_path)
    if not path.exists():
        return []
    try:
        data = _load_config_file(path, strict=True)
    except ConfigError as e:
        return [str(e)]
    return validate_config_dict(data)


def config_to_dict(config: Config) -> dict:
    def _format(value: Any) -> Any:
        if isinstance(value, Path):
            return str(value)
        return value

    return {
        "capture_tool": config.capture_tool,
        "select_flag": config.select_flag,
        "dialog_tool": config.dialog_tool,
        "clipboard_tool": config.clipboard_tool,
        "menu_title": config.menu_title,
        "menu_column": config.menu_column,
        "temp_dir": _format(config.temp_dir),
        "capture_filename": config.capture_filename,
        "keep_capture": config.keep_capture,
        "imgur_client_id": config.imgur_client_id,
        "imgur_url": config.imgur_url,
        "upload_timeout": config.upload_timeout,
        "viewers": list(config.viewers),
        "clipboard_grace_seconds": config.clipboard_grace_seconds,
        "enable_notification": config.enable_notification,
        "lock_file": _format(config.lock_file),
        "hooks_dir": _format(config.hooks_dir) if config.hooks_dir else None,
    }
