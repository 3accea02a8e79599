"""
Command-line interface for sigslot.

Argument parsing, dispatch, and the config subcommand.
Signing logic lives in ``sign``; inspection in ``info``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ...config import CONFIG_FILE, get_signing_defaults, save_signing_defaults
from ...constants import __version__
from ...errors import ConfigError
from .info import cmd_info
from .sign import cmd_sign


def _cmd_config(args: argparse.Namespace) -> None:
    """Show or update the saved signing defaults."""
    if (
        args.reserve is not None
        or args.signer_timeout is not None
        or args.field_name is not None
    ):
        try:
            save_signing_defaults(
                reserve=args.reserve,
                signer_timeout=args.signer_timeout,
                field_name=args.field_name,
            )
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except OSError as e:
            print(f"Error: cannot write {CONFIG_FILE}: {e}", file=sys.stderr)
            sys.exit(1)
        print(f"Saved to {CONFIG_FILE}")

    defaults = get_signing_defaults()
    print(f"  reserve:        {defaults.reserve} bytes")
    print(f"  signer_timeout: {defaults.signer_timeout} s")
    print(f"  field_name:     {defaults.field_name}")


def _add_signing_arguments(p: argparse.ArgumentParser, *, timestamp: bool) -> None:
    """Arguments shared by the sign and timestamp commands."""
    p.add_argument("input", help="Unsigned PDF file")
    p.add_argument("-o", "--output", help="Output file path (default: <name>_signed.pdf)")
    p.add_argument(
        "-c",
        "--command",
        dest="signer_command",
        required=True,
        help=(
            "Command that reads the hashed bytes on stdin and writes the DER "
            + ("RFC 3161 timestamp token" if timestamp else "detached CMS signature")
            + " to stdout"
        ),
    )
    p.add_argument(
        "--reserve",
        type=int,
        default=None,
        help="Bytes reserved for the token (default: from config, 8192)",
    )
    where = p.add_mutually_exclusive_group(required=True)
    where.add_argument(
        "--rect",
        type=float,
        nargs=4,
        metavar=("X1", "Y1", "X2", "Y2"),
        help="Widget rectangle on the first page, in PDF points",
    )
    where.add_argument(
        "--invisible",
        action="store_true",
        default=False,
        help="Zero-area widget (no visible field)",
    )
    p.add_argument("--field-name", default=None, help="Signature field name")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigslot",
        description="Embed detached signatures and RFC 3161 timestamps into PDF files.",
        epilog=(
            "Environment variables:\n"
            "  SIGSLOT_RESERVE         Bytes reserved for the token (default: 8192)\n"
            "  SIGSLOT_SIGNER_TIMEOUT  Signer command timeout in seconds (default: 60)\n"
            "  SIGSLOT_FIELD_NAME      Signature field name (default: Signature)\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-V", "--version", action="version", version=f"sigslot {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    # sign
    p_sign = sub.add_parser("sign", help="Embed a detached CMS signature")
    _add_signing_arguments(p_sign, timestamp=False)
    p_sign.add_argument("--reason", default=None, help="Signature reason (/Reason)")
    p_sign.add_argument("--name", default=None, help="Signer name (/Name)")

    # timestamp
    p_ts = sub.add_parser("timestamp", help="Embed an RFC 3161 document timestamp")
    _add_signing_arguments(p_ts, timestamp=True)

    # info
    p_info = sub.add_parser("info", help="Show the ByteRange and token of a signed PDF")
    p_info.add_argument("pdf", help="Signed PDF file")

    # config
    p_config = sub.add_parser("config", help="Show or save signing defaults")
    p_config.add_argument("--reserve", type=int, default=None, help="Bytes reserved for the token")
    p_config.add_argument(
        "--signer-timeout", type=int, default=None, help="Signer command timeout (seconds)"
    )
    p_config.add_argument("--field-name", default=None, help="Signature field name")

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command in ("sign", "timestamp"):
        cmd_sign(args)
    elif args.command == "info":
        cmd_info(args)
    elif args.command == "config":
        _cmd_config(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
