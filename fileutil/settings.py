"""Settings stored in a small ``config.json`` next to where the tool runs."""

from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

CONFIG_FILE = "config.json"

_COMPRESSION = {
    "stored": zipfile.ZIP_STORED,
    "deflated": zipfile.ZIP_DEFLATED,
    "bzip2": zipfile.ZIP_BZIP2,
    "lzma": zipfile.ZIP_LZMA,
}

# accepted compresslevel range per method; None means no level applies
_LEVELS = {
    "stored": None,
    "deflated": range(0, 10),
    "bzip2": range(1, 10),
    "lzma": None,
}

log = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Settings:
    """Options shared by the copy and archive helpers."""

    compression: str = "deflated"
    compresslevel: int | None = None
    chunk_size: int = 64 * 1024
    keep_full_path: bool = False
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.compression, str) or not isinstance(self.log_level, str):
            raise ValueError("compression and log_level must be strings.")
        if not _is_int(self.chunk_size):
            raise ValueError("chunk_size must be an integer.")
        if self.compresslevel is not None and not _is_int(self.compresslevel):
            raise ValueError("compresslevel must be an integer.")
        if not isinstance(self.keep_full_path, bool):
            raise ValueError("keep_full_path must be true or false.")
        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ValueError("log_file must be a path string.")
        if self.compression not in _COMPRESSION:
            choices = ", ".join(sorted(_COMPRESSION))
            raise ValueError(f"Unknown compression {self.compression!r}; expected one of: {choices}")
        if self.compresslevel is not None:
            levels = _LEVELS[self.compression]
            if levels is None:
                raise ValueError(f"compresslevel is not supported with {self.compression} compression.")
            if self.compresslevel not in levels:
                raise ValueError(
                    f"compresslevel for {self.compression} must be between {levels.start} and {levels.stop - 1}."
                )
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be a positive number of bytes.")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    def zip_compression(self) -> int:
        return _COMPRESSION[self.compression]

    def logging_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        log.warning("Ignoring malformed settings file %s", path)
        return {}
    if not isinstance(config, dict):
        log.warning("Ignoring settings file %s: expected a JSON object", path)
        return {}
    return config


def _config_path(path: Path | str | None) -> Path:
    return Path(path) if path is not None else Path(CONFIG_FILE)


def load_settings(path: Path | str | None = None) -> Settings:
    """Build :class:`Settings` from the config file, falling back to defaults.

    Keys the file does not mention keep their default value and unknown keys
    are ignored. A value of the wrong kind raises ``ValueError``.
    """

    config = _read_config(_config_path(path))
    known = {field.name for field in fields(Settings)}
    values = {key: value for key, value in config.items() if key in known}
    ignored = sorted(set(config) - known)
    if ignored:
        log.debug("Unknown settings ignored: %s", ", ".join(ignored))
    return Settings(**values)


def save_setting(key: str, value: Any, path: Path | str | None = None) -> None:
    """Saves a setting to the config file."""
    config_path = _config_path(path)
    config = _read_config(config_path)
    config[key] = value
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)


def load_setting(key: str, path: Path | str | None = None) -> Any:
    """Loads a setting from the config file."""
    return _read_config(_config_path(path)).get(key)


__all__ = ["CONFIG_FILE", "Settings", "load_setting", "load_settings", "save_setting"]
