"""High-level convenience API for signing and timestamping PDF files.

Provides :func:`sign_pdf` which opens the input, prepares the right
placeholder variant, and runs the signing pass with configured defaults.

For lower-level control, use :func:`~sigslot.core.pdf.prepare_signature`
or :func:`~sigslot.core.pdf.prepare_timestamp` on an open pikepdf document
and then :func:`~sigslot.core.signing.sign_prepared`.
"""

from __future__ import annotations

__all__ = ["sign_pdf"]

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .config import get_signing_defaults
from .constants import PDF_MAGIC
from .core import require_pikepdf as _require_pikepdf
from .core.pdf import WriteOptions, prepare_signature, prepare_timestamp
from .core.signing import SignResult, sign_prepared
from .errors import ConfigError, PatchIOError, PDFError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .signers.protocol import Signer

_logger = logging.getLogger(__name__)


def _check_pdf_magic(path: Path) -> None:
    try:
        with path.open("rb") as f:
            head = f.read(1024)
    except OSError as e:
        raise PatchIOError(f"Cannot read {path}: {e}") from e
    if PDF_MAGIC not in head:
        raise PDFError(f"{path.name} does not appear to be a PDF file.")


def sign_pdf(
    input_path: str | Path,
    output_path: str | Path,
    signer: Signer,
    *,
    rect: Sequence[float],
    timestamp: bool = False,
    field_name: str | None = None,
    reason: str | None = None,
    name: str | None = None,
    options: WriteOptions | None = None,
) -> SignResult:
    """
    Sign (or timestamp) *input_path* into *output_path*.

    Args:
        input_path: Unsigned PDF. Must not already have an /AcroForm.
        output_path: Destination; must differ from *input_path*.
        signer: Signer capability; its estimate sizes the content slot.
        rect: Widget rectangle (x1, y1, x2, y2) on the first page.
            Pass (0, 0, 0, 0) for an invisible signature.
        timestamp: Embed an RFC 3161 document timestamp instead of a
            detached CMS signature.
        field_name: Signature field name (default: from configuration).
        reason, name: /Reason and /Name (signature only).
        options: Writer configuration.

    Returns:
        SignResult describing the written file.

    Raises:
        AlreadySignedError: If the input already has a form container.
        ConfigError: If input and output are the same file.
        PDFError: If the input is not a readable PDF.
    """
    pikepdf = _require_pikepdf()
    src = Path(input_path)
    dst = Path(output_path)

    if src.resolve() == dst.resolve():
        raise ConfigError("Output path must differ from the input path.")
    _check_pdf_magic(src)

    if field_name is None:
        field_name = get_signing_defaults().field_name

    try:
        pdf = pikepdf.open(src)
    except pikepdf.PasswordError as e:
        raise PDFError(f"{src.name} is encrypted; decrypt it before signing.") from e
    except pikepdf.PdfError as e:
        raise PDFError(f"Cannot parse {src.name}: {e}") from e

    with pdf:
        if timestamp:
            record = prepare_timestamp(pdf, signer, rect, field_name=field_name)
        else:
            record = prepare_signature(
                pdf, signer, rect, field_name=field_name, reason=reason, name=name
            )
        return sign_prepared(pdf, dst, record, signer, options)
