"""
Application-wide constants for sigslot.

PDF names, slot sizes, configuration defaults, and environment variable
names are centralized here.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("sigslot")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "ANNOT_FLAGS_SIG_WIDGET",
    "BYTERANGE_DIGITS",
    "BYTERANGE_PLACEHOLDER_VALUE",
    "DEFAULT_FIELD_NAME",
    "DEFAULT_RESERVED_SIZE",
    "DEFAULT_SIGNER_TIMEOUT",
    "ENV_FIELD_NAME",
    "ENV_RESERVE",
    "ENV_SIGNER_TIMEOUT",
    "FILTER_NAME",
    "MAX_RESERVED_SIZE",
    "MAX_SIGNER_TIMEOUT",
    "MIN_SIGNER_TIMEOUT",
    "PDF_MAGIC",
    "READ_CHUNK_SIZE",
    "SIG_FLAGS",
    "__version__",
]

# ── Signature dictionary names ──────────────────────────────────────

# Signature handler for both variants
FILTER_NAME = "/Adobe.PPKLite"

# /SigFlags 3 = SignaturesExist | AppendOnly (PDF 1.7, Table 219)
SIG_FLAGS = 3

# Print flag is 4, Locked flag is 128; combined value is 132.
# See PDF Reference 1.7, Table 165 -- Annotation flags.
_ANNOT_FLAG_PRINT = 4
_ANNOT_FLAG_LOCKED = 128
ANNOT_FLAGS_SIG_WIDGET = _ANNOT_FLAG_PRINT | _ANNOT_FLAG_LOCKED  # 132


# ── Slot sizes ───────────────────────────────────────────────────────

# Default raw size reserved for the signature or timestamp token.
# Typical detached CMS with a short chain is 2-5 KB.
DEFAULT_RESERVED_SIZE = 8192

# Upper bound accepted from config or the command line (1 MB raw = 2 MB hex)
MAX_RESERVED_SIZE = 1024 * 1024

# Each /ByteRange integer reserves this many digits in the written file
BYTERANGE_DIGITS = 10
BYTERANGE_PLACEHOLDER_VALUE = 10**BYTERANGE_DIGITS - 1

# Chunk size when streaming the hashable byte ranges
READ_CHUNK_SIZE = 64 * 1024


# ── Signer defaults ──────────────────────────────────────────────────

DEFAULT_SIGNER_TIMEOUT = 60
MIN_SIGNER_TIMEOUT = 1
MAX_SIGNER_TIMEOUT = 3600

DEFAULT_FIELD_NAME = "Signature"


# ── Environment variable names ──────────────────────────────────────

ENV_RESERVE = "SIGSLOT_RESERVE"
ENV_SIGNER_TIMEOUT = "SIGSLOT_SIGNER_TIMEOUT"
ENV_FIELD_NAME = "SIGSLOT_FIELD_NAME"


# PDF file magic bytes
PDF_MAGIC = b"%PDF-"
