"""Tests for sigslot.ui.cli -- argument parsing and command handlers."""

from __future__ import annotations

import argparse
from pathlib import Path
from unittest.mock import patch

import pytest

from sigslot.config import SigningDefaults
from sigslot.core.pdf import ByteRange, WriteLayout
from sigslot.core.signing import SignResult
from sigslot.errors import AlreadySignedError, PDFError, SignerError
from sigslot.ui.cli import build_parser, main

from .conftest import FakeSigner

_DEFAULTS = SigningDefaults(reserve=4096, signer_timeout=15, field_name="Signature")


def _result(out: Path) -> SignResult:
    return SignResult(
        output_path=out,
        layout=WriteLayout(100, 38, 200, 10000),
        byte_range=ByteRange(0, 200, 8394, 1606),
        token_size=1792,
        digest=b"\x00" * 32,
    )


# ── build_parser ──────────────────────────────────────────────────────


def test_parser_sign():
    args = build_parser().parse_args(
        ["sign", "doc.pdf", "-c", "openssl cms -sign", "--rect", "1", "2", "3", "4"]
    )
    assert args.command == "sign"
    assert args.signer_command == "openssl cms -sign"
    assert args.rect == [1.0, 2.0, 3.0, 4.0]
    assert args.invisible is False
    assert args.reserve is None


def test_parser_requires_placement(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["sign", "doc.pdf", "-c", "x"])


def test_parser_rect_and_invisible_exclusive(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(
            ["timestamp", "doc.pdf", "-c", "x", "--invisible", "--rect", "1", "2", "3", "4"]
        )


def test_parser_timestamp_has_no_reason(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["timestamp", "doc.pdf", "-c", "x", "--invisible", "--reason", "r"])


# ── cmd_sign ──────────────────────────────────────────────────────────


def _sign_args(pdf: Path, **overrides) -> argparse.Namespace:
    values = {
        "command": "sign",
        "input": str(pdf),
        "output": None,
        "signer_command": "openssl cms -sign -binary -outform DER",
        "reserve": None,
        "rect": None,
        "invisible": True,
        "field_name": None,
        "reason": None,
        "name": None,
    }
    values.update(overrides)
    return argparse.Namespace(**values)


def test_cmd_sign_success(pdf_file, capsys):
    from sigslot.ui.cli.sign import cmd_sign

    expected_out = pdf_file.with_name("input_signed.pdf")
    with (
        patch("sigslot.ui.cli.sign.get_signing_defaults", return_value=_DEFAULTS),
        patch("sigslot.ui.cli.sign.sign_pdf", return_value=_result(expected_out)) as mock_sign,
    ):
        cmd_sign(_sign_args(pdf_file, reason="Approved"))

    args, kwargs = mock_sign.call_args
    assert args[0] == pdf_file
    assert args[1] == expected_out
    signer = args[2]
    assert signer.argv == ["openssl", "cms", "-sign", "-binary", "-outform", "DER"]
    assert signer.estimate == 4096
    assert signer.timeout == 15
    assert kwargs["rect"] == (0.0, 0.0, 0.0, 0.0)
    assert kwargs["timestamp"] is False
    assert kwargs["reason"] == "Approved"

    out = capsys.readouterr().out
    assert "Signing input.pdf" in out
    assert "OK -> input_signed.pdf" in out
    assert "[0 200 8394 1606]" in out


def test_cmd_timestamp_with_rect_and_reserve(pdf_file, tmp_path, capsys):
    from sigslot.ui.cli.sign import cmd_sign

    out_path = tmp_path / "stamped.pdf"
    args = argparse.Namespace(
        command="timestamp",
        input=str(pdf_file),
        output=str(out_path),
        signer_command="tsa-client --der",
        reserve=12000,
        rect=[10.0, 10.0, 60.0, 30.0],
        invisible=False,
        field_name="TS",
    )
    with (
        patch("sigslot.ui.cli.sign.get_signing_defaults", return_value=_DEFAULTS),
        patch("sigslot.ui.cli.sign.sign_pdf", return_value=_result(out_path)) as mock_sign,
    ):
        cmd_sign(args)

    call_args, kwargs = mock_sign.call_args
    assert call_args[1] == out_path
    assert call_args[2].estimate == 12000
    assert kwargs["rect"] == (10.0, 10.0, 60.0, 30.0)
    assert kwargs["timestamp"] is True
    assert kwargs["field_name"] == "TS"
    assert kwargs["reason"] is None
    assert "Timestamping" in capsys.readouterr().out


def test_cmd_sign_file_not_found(tmp_path, capsys):
    from sigslot.ui.cli.sign import cmd_sign

    with pytest.raises(SystemExit) as exc_info:
        cmd_sign(_sign_args(tmp_path / "missing.pdf"))
    assert exc_info.value.code == 1
    assert "not found" in capsys.readouterr().err


def test_cmd_sign_bad_command_quoting(pdf_file, capsys):
    from sigslot.ui.cli.sign import cmd_sign

    with (
        patch("sigslot.ui.cli.sign.get_signing_defaults", return_value=_DEFAULTS),
        pytest.raises(SystemExit) as exc_info,
    ):
        cmd_sign(_sign_args(pdf_file, signer_command='sign "unterminated'))
    assert exc_info.value.code == 1
    assert "cannot parse signer command" in capsys.readouterr().err


@pytest.mark.parametrize(
    ("error", "marker"),
    [
        (AlreadySignedError("has /AcroForm"), "FAILED"),
        (SignerError("exit 1"), "SIGNER ERROR"),
        (PDFError("bad xref"), "FAILED"),
    ],
)
def test_cmd_sign_errors(pdf_file, capsys, error, marker):
    from sigslot.ui.cli.sign import cmd_sign

    with (
        patch("sigslot.ui.cli.sign.get_signing_defaults", return_value=_DEFAULTS),
        patch("sigslot.ui.cli.sign.sign_pdf", side_effect=error),
        pytest.raises(SystemExit) as exc_info,
    ):
        cmd_sign(_sign_args(pdf_file))
    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert marker in err
    assert str(error) in err


def test_cmd_sign_end_to_end(pdf_file, tmp_path, capsys):
    """Real signing pass with the signer command replaced by a fake."""
    from sigslot.ui.cli.sign import cmd_sign

    out_path = tmp_path / "signed.pdf"
    fake = FakeSigner(estimate=4096)
    with (
        patch("sigslot.ui.cli.sign.get_signing_defaults", return_value=_DEFAULTS),
        patch("sigslot.ui.cli.sign.CommandSigner", return_value=fake),
        patch("sigslot.api.get_signing_defaults", return_value=_DEFAULTS),
    ):
        cmd_sign(_sign_args(pdf_file, output=str(out_path)))

    assert out_path.exists()
    assert fake.calls == 1
    assert "OK -> signed.pdf" in capsys.readouterr().out


# ── cmd_info ──────────────────────────────────────────────────────────


def test_cmd_info_signed(pdf_file, tmp_path, capsys):
    from sigslot import sign_pdf
    from sigslot.ui.cli.info import cmd_info

    out_path = tmp_path / "signed.pdf"
    with patch("sigslot.api.get_signing_defaults", return_value=_DEFAULTS):
        sign_pdf(pdf_file, out_path, FakeSigner(), rect=(0, 0, 0, 0))

    cmd_info(argparse.Namespace(pdf=str(out_path)))
    out = capsys.readouterr().out
    assert "Covers file:  yes" in out
    assert "/adbe.pkcs7.detached" in out
    assert "Token:        1792 bytes" in out


def test_cmd_info_unsigned(pdf_file, capsys):
    from sigslot.ui.cli.info import cmd_info

    with pytest.raises(SystemExit) as exc_info:
        cmd_info(argparse.Namespace(pdf=str(pdf_file)))
    assert exc_info.value.code == 1
    assert "No /ByteRange" in capsys.readouterr().err


def test_cmd_info_missing(tmp_path, capsys):
    from sigslot.ui.cli.info import cmd_info

    with pytest.raises(SystemExit):
        cmd_info(argparse.Namespace(pdf=str(tmp_path / "missing.pdf")))
    assert "not found" in capsys.readouterr().err


# ── config / main() dispatch ──────────────────────────────────────────


def test_main_config_show(capsys):
    with patch("sigslot.ui.cli.get_signing_defaults", return_value=_DEFAULTS):
        main(["config"])
    out = capsys.readouterr().out
    assert "4096 bytes" in out
    assert "15 s" in out


def test_main_config_save(capsys):
    with (
        patch("sigslot.ui.cli.save_signing_defaults") as mock_save,
        patch("sigslot.ui.cli.get_signing_defaults", return_value=_DEFAULTS),
    ):
        main(["config", "--reserve", "4096", "--field-name", "Approval"])
    mock_save.assert_called_once_with(reserve=4096, signer_timeout=None, field_name="Approval")
    assert "Saved to" in capsys.readouterr().out


def test_main_config_invalid(capsys):
    from sigslot.errors import ConfigError

    with (
        patch("sigslot.ui.cli.save_signing_defaults", side_effect=ConfigError("reserve bad")),
        pytest.raises(SystemExit) as exc_info,
    ):
        main(["config", "--reserve", "0"])
    assert exc_info.value.code == 1
    assert "reserve bad" in capsys.readouterr().err


def test_main_config_empty_field_name(tmp_path, capsys):
    config_file = tmp_path / "config.json"
    with (
        patch("sigslot.config._storage.CONFIG_DIR", tmp_path),
        patch("sigslot.config._storage.CONFIG_FILE", config_file),
        pytest.raises(SystemExit) as exc_info,
    ):
        main(["config", "--field-name", ""])
    assert exc_info.value.code == 1
    assert "field_name must not be empty" in capsys.readouterr().err
    assert not config_file.exists()


def test_main_dispatches_sign():
    with patch("sigslot.ui.cli.cmd_sign") as mock_cmd:
        main(["sign", "doc.pdf", "-c", "signer", "--invisible"])
    mock_cmd.assert_called_once()
    assert mock_cmd.call_args[0][0].input == "doc.pdf"


def test_main_dispatches_timestamp():
    with patch("sigslot.ui.cli.cmd_sign") as mock_cmd:
        main(["timestamp", "doc.pdf", "-c", "tsa", "--invisible"])
    assert mock_cmd.call_args[0][0].command == "timestamp"


def test_main_dispatches_info():
    with patch("sigslot.ui.cli.cmd_info") as mock_cmd:
        main(["info", "signed.pdf"])
    mock_cmd.assert_called_once()


def test_main_no_command(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1


def test_main_verbose_sets_debug():
    with (
        patch("sigslot.ui.cli.cmd_info"),
        patch("sigslot.ui.cli.logging.basicConfig") as mock_basic,
    ):
        main(["-v", "info", "x.pdf"])
    assert mock_basic.call_args.kwargs["level"] == 10


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "sigslot" in capsys.readouterr().out
