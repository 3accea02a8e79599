"""Inspection command for the sigslot CLI."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...core.pdf import inspect_signed_pdf
from ...errors import SigslotError
from ..helpers import format_size_kb, safe_read_file

if TYPE_CHECKING:
    import argparse


def cmd_info(args: argparse.Namespace) -> None:
    """Show the ByteRange and embedded token of a signed PDF."""
    pdf_path = Path(args.pdf)
    pdf_bytes = safe_read_file(pdf_path, "PDF")
    if pdf_bytes is None:
        sys.exit(1)

    print(f"Inspecting {pdf_path.name} ({format_size_kb(len(pdf_bytes))})...")

    try:
        info = inspect_signed_pdf(pdf_bytes)
    except SigslotError as e:
        print(f"  ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    br = info["byte_range"]
    print(f"  ByteRange:    {br.to_pdf().decode('ascii')}")
    print(f"  Excluded:     {br.gap} bytes at offset {br.start0 + br.len0}")
    print(f"  Covers file:  {'yes' if info['covers_file'] else 'NO'}")
    print(f"  SubFilter:    {info['subfilter'] or 'unknown'}")
    print(f"  Token:        {info['token_size']} bytes ({info['content_type'] or 'not CMS'})")
    print(f"  SHA-256:      {info['digest']}")

    if not info["covers_file"]:
        sys.exit(1)
