"""Fixed-length, offset-addressed overwrites of an already-written file.

A patch never inserts, deletes, or resizes: the data must have exactly the
length of the slot it replaces, and the file size is unchanged afterwards.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from ...errors import PatchIOError, SignerError, SlotSizeError

if TYPE_CHECKING:
    from pathlib import Path

__all__ = ["encode_contents", "patch_file"]

_logger = logging.getLogger(__name__)


def patch_file(path: str | Path, offset: int, data: bytes, slot_length: int) -> None:
    """
    Overwrite ``slot_length`` bytes of *path* at *offset* with *data*.

    Args:
        path: Existing file, opened read/write.
        offset: Absolute offset of the slot.
        data: Replacement bytes; must be exactly ``slot_length`` long.
        slot_length: Length of the reserved slot.

    Raises:
        SlotSizeError: If ``len(data) != slot_length``. Checked before the
            file is opened, so nothing is written.
        PatchIOError: On open/seek/write failure, or if the slot reaches
            past the end of the file.
    """
    if len(data) != slot_length:
        raise SlotSizeError(
            f"Patch of {len(data)} bytes does not match {slot_length}-byte slot at offset {offset}",
            expected=slot_length,
            actual=len(data),
        )
    if offset < 0:
        raise PatchIOError(f"Invalid patch offset: {offset}")

    try:
        with open(path, "r+b") as f:
            size = os.fstat(f.fileno()).st_size
            if offset + slot_length > size:
                raise PatchIOError(
                    f"Slot [{offset}, {offset + slot_length}) extends beyond EOF ({size} bytes)"
                )
            f.seek(offset)
            f.write(data)
    except PatchIOError:
        raise
    except OSError as e:
        raise PatchIOError(f"Cannot patch {path} at offset {offset}: {e}") from e

    _logger.debug("Patched %d bytes at offset %d in %s", len(data), offset, path)


def encode_contents(token: bytes, reserved_size: int) -> bytes:
    """Hex-encode *token* and pad with ``0`` to exactly ``2 * reserved_size``.

    Raises:
        SignerError: If the token is empty or larger than the reservation.
    """
    if not token:
        raise SignerError("Signer returned an empty token.")
    if len(token) > reserved_size:
        raise SignerError(
            f"Token too large: {len(token)} bytes > {reserved_size} reserved "
            "(signer exceeded its length estimate)"
        )
    return token.hex().ljust(reserved_size * 2, "0").encode("ascii")
