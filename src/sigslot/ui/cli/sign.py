"""Signing and timestamping command handlers for the sigslot CLI."""

from __future__ import annotations

import argparse
import shlex
import sys
from pathlib import Path

from ...api import sign_pdf
from ...config import get_signing_defaults
from ...errors import AlreadySignedError, SignerError, SigslotError
from ...signers import CommandSigner
from ..helpers import default_output_path, format_size_kb

_INVISIBLE_RECT = (0.0, 0.0, 0.0, 0.0)


def _resolve_rect(args: argparse.Namespace) -> tuple[float, ...]:
    """Widget rectangle from --rect, or the zero-area one for --invisible."""
    if args.invisible:
        return _INVISIBLE_RECT
    return tuple(args.rect)


def _build_signer(args: argparse.Namespace) -> CommandSigner:
    """Create the command signer from CLI arguments and configured defaults."""
    defaults = get_signing_defaults()
    reserve = args.reserve if args.reserve is not None else defaults.reserve
    argv = shlex.split(args.signer_command)
    return CommandSigner(argv, reserve, defaults.signer_timeout)


def cmd_sign(args: argparse.Namespace) -> None:
    """Sign or timestamp a single PDF (``sign`` and ``timestamp`` commands)."""
    timestamp = args.command == "timestamp"
    pdf_path = Path(args.input)

    if not pdf_path.exists():
        print(f"Error: {pdf_path} not found", file=sys.stderr)
        sys.exit(1)

    out = Path(args.output) if args.output else default_output_path(pdf_path)

    try:
        signer = _build_signer(args)
    except ValueError as e:
        print(f"Error: cannot parse signer command: {e}", file=sys.stderr)
        sys.exit(1)
    except SigslotError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    verb = "Timestamping" if timestamp else "Signing"
    size = pdf_path.stat().st_size
    print(f"  {verb} {pdf_path.name} ({format_size_kb(size)})...", end=" ", flush=True)

    try:
        result = sign_pdf(
            pdf_path,
            out,
            signer,
            rect=_resolve_rect(args),
            timestamp=timestamp,
            field_name=args.field_name,
            reason=getattr(args, "reason", None),
            name=getattr(args, "name", None),
        )
    except AlreadySignedError as e:
        print("FAILED", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        print("  Sign a copy of the unsigned document instead.", file=sys.stderr)
        sys.exit(1)
    except SignerError as e:
        print("SIGNER ERROR", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        if out.exists():
            print(f"  {out.name} is incomplete and should be discarded.", file=sys.stderr)
        sys.exit(1)
    except SigslotError as e:
        print("FAILED", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)

    print(f"OK -> {out.name} ({format_size_kb(result.layout.file_size)})")
    print(f"    ByteRange: {result.byte_range.to_pdf().decode('ascii')}")
    print(f"    Token:     {result.token_size} of {signer.estimate} bytes reserved")
