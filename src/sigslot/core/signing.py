"""
Signing orchestrator: write once, resolve the ByteRange, sign, patch.

The signer is any object satisfying signers.protocol.Signer, making this
module independent of how signatures or timestamp tokens are produced.
"""

from __future__ import annotations

__all__ = ["SignResult", "sign_prepared"]

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import SignerError
from .pdf import (
    ByteRange,
    WriteLayout,
    WriteOptions,
    digest_byte_range,
    encode_contents,
    open_signed_data,
    patch_file,
    resolve_byte_range,
    write_document,
)

if TYPE_CHECKING:
    import pikepdf

    from ..signers.protocol import Signer
    from .pdf import SignatureRecord

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignResult:
    """Outcome of a signing pass.

    Attributes:
        output_path: The signed file.
        layout: Slot offsets of the written file.
        byte_range: The ByteRange patched into the file.
        token_size: Raw length of the embedded token in bytes.
        digest: SHA-256 of the hashed spans (what the signer was fed).
    """

    output_path: Path
    layout: WriteLayout
    byte_range: ByteRange
    token_size: int
    digest: bytes


def _check_estimate(signer: Signer, reserved_size: int) -> None:
    estimate = signer.estimate_signature_length()
    if isinstance(estimate, bool) or not isinstance(estimate, int) or estimate <= 0:
        raise SignerError(f"Signer returned an invalid length estimate: {estimate!r}")
    if estimate > reserved_size:
        raise SignerError(
            f"Signer estimates {estimate} bytes but only {reserved_size} were reserved; "
            "prepare the document with this signer."
        )


def sign_prepared(
    pdf: pikepdf.Pdf,
    output_path: str | Path,
    record: SignatureRecord,
    signer: Signer,
    options: WriteOptions | None = None,
) -> SignResult:
    """
    Write a prepared document to *output_path* and embed the signer's token.

    Steps:
    1. Serialize the document once and locate the record's slots
    2. Resolve the ByteRange and patch it into the /ByteRange slot
    3. Stream the two hashed spans to the signer
    4. Hex-encode the token (rejected if larger than the reservation)
    5. Patch the hex into the /Contents slot

    The file length never changes after step 1. A failure after step 1
    leaves a partially patched file; nothing is rolled back or retried.

    Args:
        pdf: Document prepared with prepare_signature/prepare_timestamp.
        output_path: File to write; owned exclusively by this call.
        record: The prepared signature record.
        signer: Signer capability.
        options: Writer configuration. Object streams are always disabled
            for this pass.

    Returns:
        The written layout, ByteRange, token size, and digest.

    Raises:
        SignerError: If the signer's estimate or token does not fit the slot.
        PatchIOError: On file I/O failure.
        PDFError: If the written layout is inconsistent with the record.
    """
    output_path = Path(output_path)
    reserved = record.reserved_size
    _check_estimate(signer, reserved)

    options = replace(options or WriteOptions(), object_streams=False)

    _logger.info(
        "Signing (%s): %s, %d bytes reserved", record.variant.name.lower(), output_path, reserved
    )

    # Step 1: Serialize once
    _logger.debug("Step 1: Writing document")
    layout = write_document(pdf, output_path, record, options)

    # Step 2: Resolve and patch the ByteRange
    _logger.debug("Step 2: Patching ByteRange")
    byte_range = resolve_byte_range(layout, reserved)
    patch_file(
        output_path,
        layout.byte_range_offset,
        byte_range.to_pdf(layout.byte_range_length),
        layout.byte_range_length,
    )
    _logger.debug("ByteRange: %s", byte_range.to_pdf().decode("ascii"))

    # Step 3: Stream the hashed spans to the signer
    _logger.debug("Step 3: Sending %d bytes to signer", byte_range.len0 + byte_range.len1)
    with open_signed_data(output_path, byte_range) as stream:
        token = signer.sign(stream)
    _logger.debug("Received token: %d bytes", len(token))

    # Step 4: Encode (fails before touching the file if oversize)
    contents = encode_contents(token, reserved)

    # Step 5: Patch the content slot, after the opening '<'
    _logger.debug("Step 5: Patching Contents")
    patch_file(output_path, layout.contents_offset + 1, contents, record.hex_size)

    digest = digest_byte_range(output_path, byte_range)
    _logger.info("Signed %s: %d bytes, token %d bytes", output_path, layout.file_size, len(token))
    return SignResult(
        output_path=output_path,
        layout=layout,
        byte_range=byte_range,
        token_size=len(token),
        digest=digest,
    )
