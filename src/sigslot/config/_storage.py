"""
Low-level config file I/O for sigslot.

Handles reading, writing, and validating the on-disk config.json.
"""

from __future__ import annotations

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "ConfigDict",
    "load_config",
    "load_raw_config",
    "save_config",
]

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypedDict, cast

from ..constants import MAX_RESERVED_SIZE, MAX_SIGNER_TIMEOUT, MIN_SIGNER_TIMEOUT

_logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".sigslot"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ConfigDict(TypedDict, total=False):
    """Type definition for the config file structure."""

    reserve: int
    signer_timeout: int
    field_name: str


def load_raw_config() -> dict[str, object]:
    """Load raw config dict from disk, preserving all keys.

    Used for merge-and-save operations to preserve unknown keys.
    """
    try:
        data: Any = json.loads(CONFIG_FILE.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return cast("dict[str, object]", data)
    except FileNotFoundError:
        pass
    except json.JSONDecodeError as e:
        _logger.warning("Config file corrupted, ignoring: %s", e)
    except OSError as e:
        _logger.warning("Cannot read config file: %s", e)
    return {}


def _pick_int(data: dict[str, object], key: str, low: int, high: int) -> int | None:
    """Return data[key] if it's an int within [low, high], else None."""
    val = data.get(key)
    if val is None:
        return None
    if isinstance(val, bool) or not isinstance(val, int):
        _logger.warning("Config %s=%r is not an integer, ignoring", key, val)
        return None
    if not low <= val <= high:
        _logger.warning("Config %s=%d out of range [%d, %d], ignoring", key, val, low, high)
        return None
    return val


def _validate_config_dict(data: dict[str, object]) -> ConfigDict:
    """Validate and return config dict, picking only known keys with correct types."""
    result: ConfigDict = {}
    reserve = _pick_int(data, "reserve", 1, MAX_RESERVED_SIZE)
    if reserve is not None:
        result["reserve"] = reserve
    timeout = _pick_int(data, "signer_timeout", MIN_SIGNER_TIMEOUT, MAX_SIGNER_TIMEOUT)
    if timeout is not None:
        result["signer_timeout"] = timeout
    field_name = data.get("field_name")
    if isinstance(field_name, str) and field_name.strip():
        result["field_name"] = field_name.strip()
    return result


def load_config() -> ConfigDict:
    """Load config from disk, returning only known typed keys."""
    return _validate_config_dict(load_raw_config())


def save_config(config: dict[str, object]) -> None:
    """Save config to disk.

    Uses atomic write (temp file + rename) to prevent corruption
    if the process is interrupted mid-write.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    content = json.dumps(config, indent=2, ensure_ascii=False) + "\n"
    fd, tmp_path = tempfile.mkstemp(dir=CONFIG_DIR, suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd = -1  # closed with f from here on
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(CONFIG_FILE)  # atomic on POSIX
    except BaseException:
        if fd >= 0:
            os.close(fd)
        tmp.unlink(missing_ok=True)
        raise
