"""Tests for sigslot.core.signing -- the write/resolve/sign/patch pass."""

import hashlib
import re

import pikepdf
import pytest

from sigslot.core.pdf import (
    WriteOptions,
    extract_contents,
    find_byte_range,
    prepare_signature,
    prepare_timestamp,
)
from sigslot.core.signing import sign_prepared
from sigslot.errors import SignerError

from .conftest import FAKE_CMS, FakeSigner, der_sequence

RECT = (50, 50, 250, 100)


class ExplodingSigner(FakeSigner):
    def sign(self, stream):
        raise RuntimeError("token service unavailable")


# ── Successful pass ─────────────────────────────────────────────────


class TestSignPrepared:
    def test_end_to_end(self, blank_pdf, tmp_path, fake_signer):
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, fake_signer, RECT)
        result = sign_prepared(blank_pdf, out, record, fake_signer)

        data = out.read_bytes()
        assert result.output_path == out
        assert result.layout.file_size == len(data)
        assert result.token_size == len(FAKE_CMS)
        assert fake_signer.calls == 1

        br = find_byte_range(data)
        assert br == result.byte_range
        assert br.start0 == 0
        assert br.len0 + br.gap + br.len1 == len(data)
        assert br.gap == 2 + 2 * record.reserved_size
        assert extract_contents(data, br) == FAKE_CMS

    def test_signer_sees_exactly_the_spans(self, blank_pdf, tmp_path, fake_signer):
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, fake_signer, RECT)
        result = sign_prepared(blank_pdf, out, record, fake_signer)

        data = out.read_bytes()
        br = result.byte_range
        spans = data[: br.len0] + data[br.start1 : br.start1 + br.len1]
        assert fake_signer.seen == spans
        assert result.digest == hashlib.sha256(spans).digest()
        assert re.search(rb"/ByteRange\s*\[0 \d+ \d+ \d+\s*\]", fake_signer.seen)

    def test_file_size_fixed_after_write(self, blank_pdf, tmp_path, fake_signer):
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, fake_signer, RECT)
        result = sign_prepared(blank_pdf, out, record, fake_signer)
        assert out.stat().st_size == result.layout.file_size

    def test_reopens_as_pdf(self, blank_pdf, tmp_path, fake_signer):
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, fake_signer, RECT, reason="Approved")
        sign_prepared(blank_pdf, out, record, fake_signer)
        with pikepdf.open(out) as pdf:
            field = pdf.Root.AcroForm.Fields[0]
            sig = field.V
            assert sig.Type == pikepdf.Name("/Sig")
            assert str(sig.Reason) == "Approved"
            assert bytes(sig.Contents)[: len(FAKE_CMS)] == FAKE_CMS
            assert [int(v) for v in sig.ByteRange][0] == 0

    def test_timestamp_variant(self, blank_pdf, tmp_path):
        signer = FakeSigner(estimate=2048)
        out = tmp_path / "stamped.pdf"
        record = prepare_timestamp(blank_pdf, signer, (0, 0, 0, 0))
        result = sign_prepared(blank_pdf, out, record, signer)
        data = out.read_bytes()
        assert b"/DocTimeStamp" in data
        assert b"/ETSI.RFC3161" in data
        assert extract_contents(data, result.byte_range) == FAKE_CMS

    def test_token_exactly_reserved(self, blank_pdf, tmp_path):
        token = der_sequence(1000)
        signer = FakeSigner(estimate=1000, token=token)
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, signer, RECT)
        result = sign_prepared(blank_pdf, out, record, signer)
        assert extract_contents(out.read_bytes(), result.byte_range) == token

    def test_object_streams_forced_off(self, blank_pdf, tmp_path, fake_signer):
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, fake_signer, RECT)
        result = sign_prepared(
            blank_pdf, out, record, fake_signer, WriteOptions(object_streams=True)
        )
        assert extract_contents(out.read_bytes(), result.byte_range) == FAKE_CMS


# ── Failures ────────────────────────────────────────────────────────


class TestSignFailures:
    def test_oversize_token_leaves_slot_empty(self, blank_pdf, tmp_path):
        signer = FakeSigner(estimate=1000, token=der_sequence(1001))
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, signer, RECT)
        with pytest.raises(SignerError, match="Token too large"):
            sign_prepared(blank_pdf, out, record, signer)

        data = out.read_bytes()
        br = find_byte_range(data)
        assert data[br.len0 + 1 : br.start1 - 1] == b"0" * 2000

    def test_estimate_above_reservation(self, blank_pdf, tmp_path):
        record = prepare_signature(blank_pdf, FakeSigner(estimate=500), RECT)
        bigger = FakeSigner(estimate=600)
        out = tmp_path / "signed.pdf"
        with pytest.raises(SignerError, match="only 500 were reserved"):
            sign_prepared(blank_pdf, out, record, bigger)
        assert not out.exists()
        assert bigger.calls == 0

    def test_signer_exception_propagates(self, blank_pdf, tmp_path):
        signer = ExplodingSigner()
        record = prepare_signature(blank_pdf, signer, RECT)
        with pytest.raises(RuntimeError, match="token service unavailable"):
            sign_prepared(blank_pdf, tmp_path / "signed.pdf", record, signer)

    def test_empty_token(self, blank_pdf, tmp_path):
        signer = FakeSigner(token=b"")
        record = prepare_signature(blank_pdf, signer, RECT)
        with pytest.raises(SignerError, match="empty"):
            sign_prepared(blank_pdf, tmp_path / "signed.pdf", record, signer)


# ── Object header text elsewhere in the file ────────────────────────


class TestHeaderLookalikes:
    def test_reason_mentioning_object_headers(self, blank_pdf, tmp_path, fake_signer):
        reason = " ".join(f"{k} 0 obj" for k in range(1, 40))
        out = tmp_path / "signed.pdf"
        record = prepare_signature(blank_pdf, fake_signer, RECT, reason=reason)
        result = sign_prepared(blank_pdf, out, record, fake_signer)
        assert extract_contents(out.read_bytes(), result.byte_range) == FAKE_CMS
        with pikepdf.open(out) as pdf:
            assert str(pdf.Root.AcroForm.Fields[0].V.Reason) == reason

    def test_uncompressed_content_mentioning_object_headers(self, tmp_path, fake_signer):
        pdf = pikepdf.Pdf.new()
        pdf.add_blank_page()
        pdf.add_blank_page()
        text = b" ".join(b"BT (%d 0 obj) Tj ET" % k for k in range(1, 40))
        pdf.pages[1].obj["/Contents"] = pdf.make_stream(text)
        out = tmp_path / "signed.pdf"
        record = prepare_signature(pdf, fake_signer, RECT)
        result = sign_prepared(
            pdf, out, record, fake_signer, WriteOptions(compress_streams=False)
        )
        data = out.read_bytes()
        assert b"BT (1 0 obj) Tj ET" in data
        assert extract_contents(data, result.byte_range) == FAKE_CMS
        pdf.close()
