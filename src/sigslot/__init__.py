"""
sigslot -- Embed detached signatures and RFC 3161 timestamps into PDFs.

A fixed-size placeholder is reserved, the document is written once, and
the ByteRange and signature are patched in place without changing the
file's length.
"""

from __future__ import annotations

from .api import sign_pdf
from .constants import __version__
from .core.pdf import (
    ByteRange,
    SignatureRecord,
    SignatureVariant,
    WriteLayout,
    WriteOptions,
    inspect_signed_pdf,
    prepare_placeholder,
    prepare_signature,
    prepare_timestamp,
    resolve_byte_range,
)
from .core.signing import SignResult, sign_prepared
from .errors import (
    AlreadySignedError,
    ConfigError,
    PatchIOError,
    PDFError,
    SignerError,
    SigslotError,
    SlotSizeError,
)
from .signers import CommandSigner, Signer

__all__ = [
    "AlreadySignedError",
    "ByteRange",
    "CommandSigner",
    "ConfigError",
    "PDFError",
    "PatchIOError",
    "SignResult",
    "SignatureRecord",
    "SignatureVariant",
    "Signer",
    "SignerError",
    "SigslotError",
    "SlotSizeError",
    "WriteLayout",
    "WriteOptions",
    "__version__",
    "inspect_signed_pdf",
    "prepare_placeholder",
    "prepare_signature",
    "prepare_timestamp",
    "resolve_byte_range",
    "sign_pdf",
    "sign_prepared",
]
