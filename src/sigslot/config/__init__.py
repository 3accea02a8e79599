"""
Configuration management.

Import from this package rather than from the individual submodules.
"""

from __future__ import annotations

from ._storage import CONFIG_DIR, CONFIG_FILE, load_config
from .config import SigningDefaults, get_signing_defaults, save_signing_defaults

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "SigningDefaults",
    "get_signing_defaults",
    "load_config",
    "save_signing_defaults",
]
