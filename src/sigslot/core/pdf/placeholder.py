"""Signature placeholder preparation.

Builds the signature dictionary with a zero-filled /Contents slot and a
fixed-width /ByteRange slot, the signature field/widget on the first page,
and the document's /AcroForm. All of this must be in the object graph
before the document is written: slot offsets depend on the final layout.

Object-model accessors are in objects.py.
The layout writer that serializes these objects is in layout.py.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...constants import (
    ANNOT_FLAGS_SIG_WIDGET,
    BYTERANGE_PLACEHOLDER_VALUE,
    DEFAULT_FIELD_NAME,
    FILTER_NAME,
    MAX_RESERVED_SIZE,
    SIG_FLAGS,
)
from ...errors import AlreadySignedError, ConfigError, SignerError
from .. import require_pikepdf as _require_pikepdf
from .objects import first_page, pdf_date, pdf_rect, require_array

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    import pikepdf

    from ...signers.protocol import Signer

__all__ = [
    "SignatureRecord",
    "SignatureVariant",
    "prepare_placeholder",
    "prepare_signature",
    "prepare_timestamp",
]

_logger = logging.getLogger(__name__)


class SignatureVariant(enum.Enum):
    """What goes into the content slot: a CMS signature or a timestamp token."""

    SIGNATURE = ("/Sig", "/adbe.pkcs7.detached")
    TIMESTAMP = ("/DocTimeStamp", "/ETSI.RFC3161")

    @property
    def type_name(self) -> str:
        return self.value[0]

    @property
    def subfilter(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class SignatureRecord:
    """Handle to a prepared signature inside the object graph.

    Attributes:
        sig_dict: The indirect signature dictionary (/Type /Sig or /DocTimeStamp).
        field: The merged signature field / widget annotation.
        variant: Signature or timestamp.
        reserved_size: Raw bytes reserved in /Contents (hex slot is twice that).
    """

    sig_dict: pikepdf.Dictionary
    field: pikepdf.Dictionary
    variant: SignatureVariant
    reserved_size: int

    @property
    def hex_size(self) -> int:
        return self.reserved_size * 2


def _validate_reserved_size(max_length: object) -> int:
    if isinstance(max_length, bool) or not isinstance(max_length, int):
        raise ConfigError(f"Reserved size must be an integer, got {max_length!r}")
    if max_length <= 0:
        raise ConfigError(f"Reserved size must be positive, got {max_length}")
    if max_length > MAX_RESERVED_SIZE:
        raise ConfigError(f"Reserved size {max_length} exceeds maximum ({MAX_RESERVED_SIZE})")
    return max_length


def _shared_with_other_pages(
    pdf: pikepdf.Pdf, page: pikepdf.Dictionary, annots: pikepdf.Array
) -> bool:
    """True if another page's /Annots is the same indirect array."""
    pikepdf = _require_pikepdf()
    for other in pdf.pages:
        if other.obj.objgen == page.objgen:
            continue
        other_annots = other.obj.get("/Annots")
        if (
            isinstance(other_annots, pikepdf.Array)
            and other_annots.is_indirect
            and other_annots.objgen == annots.objgen
        ):
            return True
    return False


def prepare_placeholder(
    pdf: pikepdf.Pdf,
    max_length: int,
    variant: SignatureVariant,
    rect: Sequence[float],
    *,
    field_name: str = DEFAULT_FIELD_NAME,
    reason: str | None = None,
    name: str | None = None,
    signing_time: datetime | None = None,
) -> SignatureRecord:
    """
    Reserve a signature slot in *pdf* and wire it into the first page.

    Args:
        pdf: Open pikepdf document; mutated in place.
        max_length: Upper bound N on the raw token length. /Contents gets
            N zero bytes, written as 2N hex characters.
        variant: SIGNATURE adds /M (signing time); TIMESTAMP never does.
        rect: Widget rectangle (x1, y1, x2, y2). Use (0, 0, 0, 0) for an
            invisible signature.
        field_name: Value of the field's /T entry.
        reason, name: Optional /Reason and /Name (signature variant only).
        signing_time: Value for /M; defaults to now (UTC).

    Returns:
        The record to pass to the signing orchestrator.

    Raises:
        AlreadySignedError: If the catalog already has /AcroForm. The
            document is left untouched.
        ConfigError: If max_length or rect is invalid.
        PDFError: If the page tree is malformed.
    """
    pikepdf = _require_pikepdf()

    # ── Preconditions (no mutation before this point) ───────────────
    if "/AcroForm" in pdf.Root:
        raise AlreadySignedError(
            "Document already has a form container (/AcroForm); "
            "co-signing and re-signing are not supported."
        )
    reserved = _validate_reserved_size(max_length)
    rect_array = pdf_rect(rect)
    page = first_page(pdf)
    annots = page.get("/Annots")
    if annots is not None:
        annots = require_array(annots, "first page /Annots")

    # ── Signature dictionary ────────────────────────────────────────
    sig_dict = pdf.make_indirect(
        pikepdf.Dictionary(
            {
                "/Type": pikepdf.Name(variant.type_name),
                "/Filter": pikepdf.Name(FILTER_NAME),
                "/SubFilter": pikepdf.Name(variant.subfilter),
                "/ByteRange": pikepdf.Array([0] + [BYTERANGE_PLACEHOLDER_VALUE] * 3),
                "/Contents": pikepdf.String(bytes(reserved)),
            }
        )
    )
    if variant is SignatureVariant.SIGNATURE:
        sig_dict["/M"] = pikepdf.String(pdf_date(signing_time))
        if reason:
            sig_dict["/Reason"] = pikepdf.String(reason)
        if name:
            sig_dict["/Name"] = pikepdf.String(name)

    # ── Field / widget on the first page ────────────────────────────
    field = pdf.make_indirect(
        pikepdf.Dictionary(
            {
                "/Type": pikepdf.Name.Annot,
                "/Subtype": pikepdf.Name.Widget,
                "/FT": pikepdf.Name.Sig,
                "/T": pikepdf.String(field_name),
                "/F": ANNOT_FLAGS_SIG_WIDGET,
                "/Rect": rect_array,
                "/P": page,
                "/V": sig_dict,
            }
        )
    )
    if annots is None:
        page["/Annots"] = pikepdf.Array([field])
    elif annots.is_indirect and _shared_with_other_pages(pdf, page, annots):
        page["/Annots"] = pikepdf.Array([*annots, field])
    else:
        annots.append(field)

    # ── Form container ──────────────────────────────────────────────
    pdf.Root["/AcroForm"] = pdf.make_indirect(
        pikepdf.Dictionary({"/Fields": pikepdf.Array([field]), "/SigFlags": SIG_FLAGS})
    )

    _logger.debug(
        "Prepared %s placeholder: %d bytes reserved, field %r",
        variant.name.lower(),
        reserved,
        field_name,
    )
    return SignatureRecord(sig_dict=sig_dict, field=field, variant=variant, reserved_size=reserved)


def _estimate(signer: Signer) -> int:
    estimate = signer.estimate_signature_length()
    if isinstance(estimate, bool) or not isinstance(estimate, int) or estimate <= 0:
        raise SignerError(f"Signer returned an invalid length estimate: {estimate!r}")
    return estimate


def prepare_signature(
    pdf: pikepdf.Pdf,
    signer: Signer,
    rect: Sequence[float],
    *,
    field_name: str = DEFAULT_FIELD_NAME,
    reason: str | None = None,
    name: str | None = None,
    signing_time: datetime | None = None,
) -> SignatureRecord:
    """Prepare a detached-signature placeholder sized by *signer*'s estimate."""
    return prepare_placeholder(
        pdf,
        _estimate(signer),
        SignatureVariant.SIGNATURE,
        rect,
        field_name=field_name,
        reason=reason,
        name=name,
        signing_time=signing_time,
    )


def prepare_timestamp(
    pdf: pikepdf.Pdf,
    signer: Signer,
    rect: Sequence[float],
    *,
    field_name: str = DEFAULT_FIELD_NAME,
) -> SignatureRecord:
    """Prepare a document-timestamp placeholder sized by *signer*'s estimate."""
    return prepare_placeholder(
        pdf,
        _estimate(signer),
        SignatureVariant.TIMESTAMP,
        rect,
        field_name=field_name,
    )
