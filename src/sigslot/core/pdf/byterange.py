"""ByteRange resolution and access to the hashable spans of a written file.

The /ByteRange array names two spans of the file: everything before the
content slot and everything after it. The slot itself (``<`` + 2N hex
characters + ``>``) is never hashed.
"""

from __future__ import annotations

import hashlib
import io
import os
import re
from contextlib import contextmanager
from typing import TYPE_CHECKING, NamedTuple

from ...constants import READ_CHUNK_SIZE
from ...errors import PatchIOError, PDFError
from .asn1 import extract_der_from_padded_hex

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from typing import BinaryIO

    from .layout import WriteLayout

__all__ = [
    "BYTERANGE_PATTERN",
    "ByteRange",
    "ByteRangeReader",
    "digest_byte_range",
    "extract_contents",
    "find_byte_range",
    "open_signed_data",
    "resolve_byte_range",
]

# Regex pattern to find ByteRange arrays in PDF
BYTERANGE_PATTERN = rb"/ByteRange\s*\[\s*(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s*\]"


class ByteRange(NamedTuple):
    """Two hashed spans: ``[start0, start0+len0)`` and ``[start1, start1+len1)``."""

    start0: int
    len0: int
    start1: int
    len1: int

    @property
    def gap(self) -> int:
        """Length of the excluded span between the two hashed spans."""
        return self.start1 - (self.start0 + self.len0)

    def to_pdf(self, width: int | None = None) -> bytes:
        """Render as a PDF array, padded with spaces before ``]`` to *width*.

        Raises:
            PDFError: If the rendered array is wider than *width*.
        """
        body = f"[{self.start0} {self.len0} {self.start1} {self.len1}"
        if width is None:
            return f"{body}]".encode("ascii")
        pad = width - len(body) - 1
        if pad < 0:
            raise PDFError(f"ByteRange {body}] does not fit in a {width}-byte slot")
        return f"{body}{' ' * pad}]".encode("ascii")


def resolve_byte_range(layout: WriteLayout, reserved_size: int) -> ByteRange:
    """Compute the ByteRange for a written file.

    Args:
        layout: Offsets reported by the layout writer for this file.
        reserved_size: Raw size N of the content slot (2N hex characters).

    Returns:
        ``(0, c, c + 2 + 2N, F - (c + 2 + 2N))`` where ``c`` is the offset
        of the slot's ``<`` and ``F`` the file size.

    Raises:
        PDFError: If the slot does not fit inside the written file, which
            means the layout and the reserved size disagree.
    """
    start0 = 0
    len0 = layout.contents_offset - start0
    start1 = layout.contents_offset + 2 + 2 * reserved_size
    len1 = layout.file_size - start1

    if len0 < 0 or len1 < 0 or start1 > layout.file_size:
        raise PDFError(
            f"Content slot of {reserved_size} bytes at offset {layout.contents_offset} "
            f"does not fit in a {layout.file_size}-byte file"
        )
    return ByteRange(start0, len0, start1, len1)


class ByteRangeReader(io.RawIOBase):
    """Read the two spans of a ByteRange from *fileobj* as one stream.

    The excluded span is skipped by seeking, never read. *fileobj* stays
    owned by the caller and is not closed with the reader.
    """

    def __init__(self, fileobj: BinaryIO, byte_range: ByteRange) -> None:
        super().__init__()
        self._fileobj = fileobj
        self._spans = [
            (byte_range.start0, byte_range.len0),
            (byte_range.start1, byte_range.len1),
        ]
        self._span = 0
        self._pos = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        view = memoryview(buffer).cast("B")
        while self._span < len(self._spans) and len(view) > 0:
            start, length = self._spans[self._span]
            remaining = length - self._pos
            if remaining <= 0:
                self._span += 1
                self._pos = 0
                continue
            offset = start + self._pos
            try:
                self._fileobj.seek(offset)
                got = self._fileobj.readinto(view[: min(len(view), remaining)])
            except OSError as e:
                raise PatchIOError(f"Cannot read signed data at offset {offset}: {e}") from e
            if not got:
                raise PatchIOError(f"Unexpected end of file at offset {offset}")
            self._pos += got
            return got
        return 0


@contextmanager
def open_signed_data(path: str | Path, byte_range: ByteRange) -> Iterator[BinaryIO]:
    """Open *path* and yield a buffered stream over its hashable spans.

    Raises:
        PatchIOError: If the file cannot be opened or read.
        PDFError: If the ByteRange reaches past the end of the file.
    """
    try:
        fileobj = open(path, "rb")  # noqa: SIM115
    except OSError as e:
        raise PatchIOError(f"Cannot open {path} for reading: {e}") from e

    with fileobj:
        size = os.fstat(fileobj.fileno()).st_size
        end = byte_range.start1 + byte_range.len1
        if byte_range.start0 + byte_range.len0 > size or end > size:
            raise PDFError(f"ByteRange extends beyond EOF: {end} > {size}")
        raw = ByteRangeReader(fileobj, byte_range)
        with io.BufferedReader(raw, buffer_size=READ_CHUNK_SIZE) as reader:
            yield reader  # type: ignore[misc]


def digest_byte_range(path: str | Path, byte_range: ByteRange, algorithm: str = "sha256") -> bytes:
    """Hash the two spans of *byte_range* in *path* with *algorithm*."""
    h = hashlib.new(algorithm)
    with open_signed_data(path, byte_range) as stream:
        for chunk in iter(lambda: stream.read(READ_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.digest()


# ── Extraction from a patched file ──────────────────────────────────


def find_byte_range(pdf_bytes: bytes) -> ByteRange:
    """Return the last /ByteRange array in *pdf_bytes*.

    Raises:
        PDFError: If the file has no /ByteRange.
    """
    matches = list(re.finditer(BYTERANGE_PATTERN, pdf_bytes))
    if not matches:
        raise PDFError("No /ByteRange found in PDF -- not a signed PDF?")
    m = matches[-1]
    return ByteRange(int(m.group(1)), int(m.group(2)), int(m.group(3)), int(m.group(4)))


def extract_contents(pdf_bytes: bytes, byte_range: ByteRange) -> bytes:
    """
    Extract the DER token stored in the gap of *byte_range*.

    Args:
        pdf_bytes: Complete PDF file bytes.
        byte_range: ByteRange read from the same file.

    Returns:
        DER bytes, without the zero padding of the slot.

    Raises:
        PDFError: If the gap is not a ``<hex>`` slot or holds no token.
    """
    if byte_range.start0 != 0:
        raise PDFError(f"ByteRange offset1 should be 0, got {byte_range.start0}")
    if byte_range.gap < 2:
        raise PDFError(f"ByteRange gap too small for a content slot: {byte_range.gap}")
    if byte_range.start1 > len(pdf_bytes):
        raise PDFError(
            f"ByteRange offset2 ({byte_range.start1}) exceeds PDF size ({len(pdf_bytes)})"
        )

    open_pos = byte_range.len0
    close_pos = byte_range.start1 - 1
    if pdf_bytes[open_pos : open_pos + 1] != b"<":
        raise PDFError(
            f"Expected '<' at offset {open_pos}, got {pdf_bytes[open_pos : open_pos + 1]!r}"
        )
    if pdf_bytes[close_pos : close_pos + 1] != b">":
        raise PDFError(
            f"Expected '>' at offset {close_pos}, got {pdf_bytes[close_pos : close_pos + 1]!r}"
        )

    hex_str = pdf_bytes[open_pos + 1 : close_pos].decode("ascii", errors="replace")
    if not hex_str.strip("0"):
        raise PDFError("Content slot is still empty -- document was never signed")
    try:
        return extract_der_from_padded_hex(hex_str)
    except ValueError as e:
        raise PDFError(f"Invalid hex in content slot: {e}") from e
