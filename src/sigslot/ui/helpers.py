"""
Common CLI helper functions for sigslot.
"""

from __future__ import annotations

import sys
from pathlib import Path

__all__ = [
    "default_output_path",
    "format_size_kb",
    "safe_read_file",
]

_BYTES_PER_KB = 1024


def format_size_kb(size_bytes: int) -> str:
    """Format a byte count as a human-readable KB string (e.g. '123.4 KB')."""
    return f"{size_bytes / _BYTES_PER_KB:.1f} KB"


def default_output_path(pdf_path: Path) -> Path:
    """Compute default output path for a signed PDF: '<stem>_signed.pdf'."""
    return pdf_path.with_name(f"{pdf_path.stem}_signed.pdf")


def safe_read_file(path: Path, label: str = "File") -> bytes | None:
    """Read a file, printing an error to stderr on failure.

    Returns:
        File contents, or None if the file is missing or unreadable.
    """
    if not path.exists():
        print(f"Error: {label} {path} not found", file=sys.stderr)
        return None
    try:
        return path.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        return None
