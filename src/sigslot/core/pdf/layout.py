"""Layout writer: serialize the document once and report the slot offsets.

pikepdf renumbers objects when it writes, so the written file is reopened
to find the signature dictionary's new object number. Its offset comes from
the classic xref table, and the raw bytes of that object are scanned for
the /ByteRange and /Contents slots.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ...constants import BYTERANGE_PLACEHOLDER_VALUE
from ...errors import PatchIOError, PDFError
from .. import require_pikepdf as _require_pikepdf
from .objects import require_array, require_dictionary

if TYPE_CHECKING:
    import pikepdf

    from .placeholder import SignatureRecord

__all__ = [
    "WriteLayout",
    "WriteOptions",
    "find_signature_objgen",
    "locate_signature_slots",
    "write_document",
]

_logger = logging.getLogger(__name__)

_BYTERANGE_SLOT = re.compile(rb"/ByteRange\s*(\[[^\]]*\])")
_CONTENTS_SLOT = re.compile(rb"/Contents\s*<([0-9A-Fa-f]*)>")

_STARTXREF = re.compile(rb"startxref\s+(\d+)\s+%%EOF")
_XREF_SUBSECTION = re.compile(rb"\s*(\d+)[ \t]+(\d+)[ \t]*\r?\n")
# Fixed 20-byte entries: offset, generation, type, two-byte EOL
_XREF_ENTRY = re.compile(rb"(\d{10}) (\d{5}) ([nf])[ \r\n]{2}")


@dataclass(frozen=True)
class WriteOptions:
    """Writer configuration for one serialization pass.

    Attributes:
        object_streams: Pack objects into object streams. Must be False
            for a signing pass: the signature dictionary has to be written
            as a plain top-level object so its slots can be patched.
        compress_streams: Flate-compress uncompressed content streams.
        static_id: Write a constant /ID (reproducible output, for tests).
    """

    object_streams: bool = False
    compress_streams: bool = True
    static_id: bool = False


@dataclass(frozen=True)
class WriteLayout:
    """Slot offsets in a specific written file.

    Attributes:
        byte_range_offset: Offset of the ``[`` of the /ByteRange array.
        byte_range_length: Width of the array text, ``[`` through ``]``.
        contents_offset: Offset of the ``<`` opening the content slot.
        file_size: Total file size after the write.
    """

    byte_range_offset: int
    byte_range_length: int
    contents_offset: int
    file_size: int


def _xref_table(pdf_bytes: bytes) -> tuple[dict[int, tuple[int, int]], int]:
    """Parse the classic xref table named by the last ``startxref``.

    Returns:
        (in-use entries as {object number: (offset, generation)}, offset
        of the ``xref`` keyword).

    Raises:
        PDFError: If there is no ``startxref`` or it does not point at a
            classic table (object streams produce an xref stream instead).
    """
    markers = list(_STARTXREF.finditer(pdf_bytes))
    if not markers:
        raise PDFError("Written file has no startxref.")
    xref_offset = int(markers[-1].group(1))
    if pdf_bytes[xref_offset : xref_offset + 4] != b"xref":
        raise PDFError(
            f"No classic xref table at offset {xref_offset}; "
            "the signing pass must be written without object streams."
        )

    table: dict[int, tuple[int, int]] = {}
    pos = xref_offset + 4
    while (sub := _XREF_SUBSECTION.match(pdf_bytes, pos)) is not None:
        first, count = int(sub.group(1)), int(sub.group(2))
        pos = sub.end()
        for objnum in range(first, first + count):
            entry = _XREF_ENTRY.match(pdf_bytes, pos)
            if entry is None:
                raise PDFError(f"Malformed xref entry for object {objnum} at offset {pos}")
            if entry.group(3) == b"n":
                table[objnum] = (int(entry.group(1)), int(entry.group(2)))
            pos = entry.end()
    return table, xref_offset


def _is_byte_range_placeholder(array_text: bytes) -> bool:
    values = [int(v) for v in re.findall(rb"\d+", array_text)]
    return values == [0] + [BYTERANGE_PLACEHOLDER_VALUE] * 3


def locate_signature_slots(
    pdf_bytes: bytes, objgen: tuple[int, int], reserved_size: int
) -> WriteLayout:
    """Find the /ByteRange and /Contents slots of object *objgen*.

    The object is located through the xref table, and bounded by the next
    object (or the table itself), so text such as ``7 0 obj`` inside a
    string or an uncompressed stream is never mistaken for its header.

    Args:
        pdf_bytes: Complete written file, with a classic xref table.
        objgen: (object number, generation) of the signature dictionary.
        reserved_size: Raw slot size N; the slot must hold 2N zeros.

    Raises:
        PDFError: If the object or either slot is missing, or a slot does
            not hold its placeholder.
    """
    table, xref_offset = _xref_table(pdf_bytes)
    entry = table.get(objgen[0])
    if entry is None or entry[1] != objgen[1]:
        raise PDFError(f"Cannot find signature object {objgen[0]} {objgen[1]} in written file.")
    obj_offset = entry[0]

    header = re.compile(rb"%d\s+%d\s+obj\b" % objgen).match(pdf_bytes, obj_offset)
    if header is None:
        raise PDFError(
            f"xref offset {obj_offset} does not point at object {objgen[0]} {objgen[1]}"
        )
    obj_start = header.end()
    obj_end = min((off for off, _ in table.values() if off > obj_offset), default=xref_offset)

    # Dictionary keys are written sorted, so both slots precede /Name and /Reason
    br_match = _BYTERANGE_SLOT.search(pdf_bytes, obj_start, obj_end)
    if br_match is None:
        raise PDFError("Cannot find /ByteRange slot in signature object.")
    if not _is_byte_range_placeholder(br_match.group(1)):
        raise PDFError("/ByteRange slot is not the unresolved placeholder.")
    ct_match = _CONTENTS_SLOT.search(pdf_bytes, obj_start, obj_end)
    if ct_match is None:
        raise PDFError("Cannot find /Contents slot in signature object.")

    hex_placeholder = ct_match.group(1)
    if len(hex_placeholder) != reserved_size * 2:
        raise PDFError(
            f"Content slot holds {len(hex_placeholder)} hex chars, expected {reserved_size * 2}"
        )
    if hex_placeholder.strip(b"0"):
        raise PDFError("Content slot is not an empty placeholder.")

    return WriteLayout(
        byte_range_offset=br_match.start(1),
        byte_range_length=len(br_match.group(1)),
        contents_offset=ct_match.start(1) - 1,
        file_size=len(pdf_bytes),
    )


def find_signature_objgen(written: pikepdf.Pdf, record: SignatureRecord) -> tuple[int, int]:
    """Object number of the prepared signature dictionary in a reopened file.

    Takes the last form field whose /V has the record's /Type and a
    /ByteRange entry.
    """
    pikepdf = _require_pikepdf()
    acroform = require_dictionary(written.Root.get("/AcroForm"), "catalog /AcroForm")
    fields = require_array(acroform.get("/Fields"), "/AcroForm /Fields")
    type_name = pikepdf.Name(record.variant.type_name)
    for field in reversed(list(fields)):
        value = field.get("/V") if isinstance(field, pikepdf.Dictionary) else None
        if not isinstance(value, pikepdf.Dictionary):
            continue
        if value.get("/Type") == type_name and "/ByteRange" in value and value.is_indirect:
            return value.objgen
    raise PDFError("Written file has no signature field pointing at the prepared record.")


def write_document(
    pdf: pikepdf.Pdf,
    path: str | Path,
    record: SignatureRecord,
    options: WriteOptions | None = None,
) -> WriteLayout:
    """
    Serialize *pdf* to *path* once and report where the record's slots are.

    Args:
        pdf: Prepared document (see placeholder.py).
        path: Output file; overwritten.
        record: The prepared signature record.
        options: Writer configuration; defaults to WriteOptions().

    Returns:
        Slot offsets and size of the written file.

    Raises:
        PDFError: If pikepdf cannot write the document or the slots cannot
            be located in the output.
        PatchIOError: If the output cannot be written or read back.
    """
    pikepdf = _require_pikepdf()
    if options is None:
        options = WriteOptions()
    stream_mode = (
        pikepdf.ObjectStreamMode.generate
        if options.object_streams
        else pikepdf.ObjectStreamMode.disable
    )

    try:
        pdf.save(
            path,
            object_stream_mode=stream_mode,
            compress_streams=options.compress_streams,
            static_id=options.static_id,
            encryption=False,
            linearize=False,
        )
    except pikepdf.PdfError as e:
        raise PDFError(f"Cannot write document: {e}") from e
    except OSError as e:
        raise PatchIOError(f"Cannot write {path}: {e}") from e

    try:
        with pikepdf.open(path) as written:
            objgen = find_signature_objgen(written, record)
        pdf_bytes = Path(path).read_bytes()
    except pikepdf.PdfError as e:
        raise PDFError(f"Cannot reopen written document: {e}") from e
    except OSError as e:
        raise PatchIOError(f"Cannot read back {path}: {e}") from e

    layout = locate_signature_slots(pdf_bytes, objgen, record.reserved_size)
    _logger.debug(
        "Wrote %d bytes: /ByteRange at %d (%d wide), /Contents at %d",
        layout.file_size,
        layout.byte_range_offset,
        layout.byte_range_length,
        layout.contents_offset,
    )
    return layout
