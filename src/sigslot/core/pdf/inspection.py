# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Inspection of a patched file: ByteRange coverage and token metadata.

Reports what was embedded; it does not validate certificates or check
the signature value.
"""

from __future__ import annotations

import hashlib
import io
import logging
from typing import TypedDict

from ...errors import PDFError
from .. import require_pikepdf as _require_pikepdf
from .byterange import ByteRange, extract_contents, find_byte_range

__all__ = ["SignatureInspection", "inspect_signed_pdf", "token_content_type"]

_logger = logging.getLogger(__name__)


class SignatureInspection(TypedDict):
    """Result of inspecting the last embedded signature or timestamp."""

    byte_range: ByteRange
    covers_file: bool  # Two spans plus the slot account for every byte
    token_size: int
    content_type: str | None  # e.g. "signed_data"; None if not parseable
    digest: str  # SHA-256 hex of the hashed spans
    subfilter: str | None  # e.g. "/adbe.pkcs7.detached"


def token_content_type(token: bytes) -> str | None:
    """Return the CMS content type of *token*, or None if it is not CMS.

    RFC 3161 timestamp tokens are CMS SignedData too, so both variants
    report ``"signed_data"``.
    """
    try:
        from asn1crypto import cms as asn1_cms

        content_info = asn1_cms.ContentInfo.load(token)
        return str(content_info["content_type"].native)
    except (ValueError, TypeError, KeyError) as e:
        _logger.debug("Token is not a parseable CMS ContentInfo: %s", e)
        return None


def _read_subfilter(pdf_bytes: bytes) -> str | None:
    pikepdf = _require_pikepdf()
    try:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            acroform = pdf.Root.get("/AcroForm")
            if not isinstance(acroform, pikepdf.Dictionary):
                return None
            fields = acroform.get("/Fields")
            if not isinstance(fields, pikepdf.Array):
                return None
            for field in reversed(list(fields)):
                value = field.get("/V") if isinstance(field, pikepdf.Dictionary) else None
                if isinstance(value, pikepdf.Dictionary) and "/SubFilter" in value:
                    return str(value["/SubFilter"])
    except pikepdf.PdfError as e:
        _logger.warning("Cannot read /SubFilter: %s", e)
    return None


def inspect_signed_pdf(pdf_bytes: bytes) -> SignatureInspection:
    """
    Inspect the last ByteRange / content slot pair in *pdf_bytes*.

    Args:
        pdf_bytes: Complete signed or timestamped PDF.

    Returns:
        Coverage, digest, and token metadata.

    Raises:
        PDFError: If the file has no ByteRange or the slot holds no token.
    """
    byte_range = find_byte_range(pdf_bytes)
    end = byte_range.start1 + byte_range.len1
    if end > len(pdf_bytes):
        raise PDFError(f"ByteRange extends beyond EOF: {end} > {len(pdf_bytes)}")

    token = extract_contents(pdf_bytes, byte_range)

    h = hashlib.sha256()
    h.update(pdf_bytes[byte_range.start0 : byte_range.start0 + byte_range.len0])
    h.update(pdf_bytes[byte_range.start1 : end])

    covers_file = (
        byte_range.start0 == 0
        and byte_range.len0 + byte_range.gap + byte_range.len1 == len(pdf_bytes)
        and end == len(pdf_bytes)
    )

    return {
        "byte_range": byte_range,
        "covers_file": covers_file,
        "token_size": len(token),
        "content_type": token_content_type(token),
        "digest": h.hexdigest(),
        "subfilter": _read_subfilter(pdf_bytes),
    }
