"""
Signing defaults for sigslot.

Stores the reserved slot size, signer timeout, and field name in
~/.sigslot/config.json. Environment variables override the file.
"""

from __future__ import annotations

__all__ = [
    "SigningDefaults",
    "get_signing_defaults",
    "save_signing_defaults",
]

import logging
import os
from dataclasses import dataclass

from ..constants import (
    DEFAULT_FIELD_NAME,
    DEFAULT_RESERVED_SIZE,
    DEFAULT_SIGNER_TIMEOUT,
    ENV_FIELD_NAME,
    ENV_RESERVE,
    ENV_SIGNER_TIMEOUT,
    MAX_RESERVED_SIZE,
    MAX_SIGNER_TIMEOUT,
    MIN_SIGNER_TIMEOUT,
)
from ..errors import ConfigError
from ._storage import load_config, load_raw_config, save_config

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SigningDefaults:
    """Resolved defaults for a signing run.

    Attributes:
        reserve: Raw bytes reserved for the token.
        signer_timeout: Seconds allowed for a command signer.
        field_name: /T of the signature field.
    """

    reserve: int = DEFAULT_RESERVED_SIZE
    signer_timeout: int = DEFAULT_SIGNER_TIMEOUT
    field_name: str = DEFAULT_FIELD_NAME


def _env_int(name: str, low: int, high: int) -> int | None:
    """Read an integer env var; invalid or out-of-range values are ignored."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        _logger.warning("Invalid %s value %r, ignoring", name, raw)
        return None
    if not low <= value <= high:
        _logger.warning("%s=%d out of range [%d, %d], ignoring", name, value, low, high)
        return None
    return value


def get_signing_defaults() -> SigningDefaults:
    """
    Resolve signing defaults.

    Priority: env vars > config file > built-in constants.
    """
    config = load_config()

    reserve = _env_int(ENV_RESERVE, 1, MAX_RESERVED_SIZE)
    if reserve is None:
        reserve = config.get("reserve", DEFAULT_RESERVED_SIZE)

    timeout = _env_int(ENV_SIGNER_TIMEOUT, MIN_SIGNER_TIMEOUT, MAX_SIGNER_TIMEOUT)
    if timeout is None:
        timeout = config.get("signer_timeout", DEFAULT_SIGNER_TIMEOUT)

    field_name = os.environ.get(ENV_FIELD_NAME, "").strip()
    if not field_name:
        field_name = config.get("field_name", DEFAULT_FIELD_NAME)

    return SigningDefaults(reserve=reserve, signer_timeout=timeout, field_name=field_name)


def save_signing_defaults(
    reserve: int | None = None,
    signer_timeout: int | None = None,
    field_name: str | None = None,
) -> None:
    """
    Merge the given values into the config file.

    Unknown keys already in the file are preserved.

    Raises:
        ConfigError: If a value is out of range.
    """
    config = load_raw_config()
    if reserve is not None:
        if not 1 <= reserve <= MAX_RESERVED_SIZE:
            raise ConfigError(f"reserve must be in [1, {MAX_RESERVED_SIZE}], got {reserve}")
        config["reserve"] = reserve
    if signer_timeout is not None:
        if not MIN_SIGNER_TIMEOUT <= signer_timeout <= MAX_SIGNER_TIMEOUT:
            raise ConfigError(
                f"signer_timeout must be in [{MIN_SIGNER_TIMEOUT}, {MAX_SIGNER_TIMEOUT}], "
                f"got {signer_timeout}"
            )
        config["signer_timeout"] = signer_timeout
    if field_name is not None:
        if not field_name.strip():
            raise ConfigError("field_name must not be empty")
        config["field_name"] = field_name.strip()
    save_config(config)
