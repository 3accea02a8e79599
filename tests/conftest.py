"""Shared test fixtures for the sigslot test suite."""

from __future__ import annotations

import io

import pytest


def der_sequence(size: int) -> bytes:
    """Build a DER SEQUENCE of exactly *size* bytes (size >= 260).

    Uses the two-byte long-form length so the header is always 4 bytes.
    The content ends in zero bytes to exercise padded-hex extraction.
    """
    content_len = size - 4
    content = b"\xab" * (content_len - 2) + b"\x00\x00"
    return b"\x30\x82" + content_len.to_bytes(2, "big") + content


# Fake CMS blob with a valid DER header (1792 bytes total)
FAKE_CMS = der_sequence(1792)


class FakeSigner:
    """Signer stub that records what it was asked to sign."""

    def __init__(self, estimate: int = 4096, token: bytes = FAKE_CMS) -> None:
        self.estimate = estimate
        self.token = token
        self.seen: bytes | None = None
        self.calls = 0

    def estimate_signature_length(self) -> int:
        return self.estimate

    def sign(self, stream) -> bytes:
        self.calls += 1
        self.seen = stream.read()
        return self.token


@pytest.fixture
def fake_signer():
    return FakeSigner()


@pytest.fixture
def blank_pdf():
    """An in-memory one-page pikepdf document."""
    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    yield pdf
    pdf.close()


@pytest.fixture
def valid_pdf_bytes():
    """Create a minimal valid two-page PDF using pikepdf."""
    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    pdf.add_blank_page(page_size=(595, 842))
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


@pytest.fixture
def pdf_file(tmp_path, valid_pdf_bytes):
    """The minimal PDF written to disk."""
    path = tmp_path / "input.pdf"
    path.write_bytes(valid_pdf_bytes)
    return path
