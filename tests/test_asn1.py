"""Tests for sigslot.core.pdf.asn1 -- DER length parsing of padded hex."""

import pytest

from sigslot.core.pdf.asn1 import extract_der_from_padded_hex

from .conftest import FAKE_CMS, der_sequence


def test_short_form_length():
    der = b"\x30\x03\x01\x02\x03"
    assert extract_der_from_padded_hex(der.hex() + "0" * 20) == der


def test_long_form_length():
    assert extract_der_from_padded_hex(FAKE_CMS.hex() + "0" * 100) == FAKE_CMS


def test_trailing_zero_bytes_kept():
    """The token ends in 0x00 bytes; those belong to the DER, not the padding."""
    token = der_sequence(300)
    assert token.endswith(b"\x00\x00")
    assert extract_der_from_padded_hex(token.hex() + "0" * 8) == token


def test_no_padding():
    assert extract_der_from_padded_hex(FAKE_CMS.hex()) == FAKE_CMS


def test_too_short():
    with pytest.raises(ValueError, match="too short"):
        extract_der_from_padded_hex("30")


def test_wrong_tag():
    with pytest.raises(ValueError, match="Expected ASN.1 SEQUENCE"):
        extract_der_from_padded_hex("0401ff")


def test_indefinite_length():
    with pytest.raises(ValueError, match="Indefinite"):
        extract_der_from_padded_hex("3080" + "0" * 10)


def test_length_exceeds_data():
    with pytest.raises(ValueError, match="exceeds available"):
        extract_der_from_padded_hex("3082ffff" + "00" * 10)


def test_length_exceeds_maximum():
    with pytest.raises(ValueError, match="exceeds maximum"):
        extract_der_from_padded_hex("3084ffffffff" + "00" * 10)


def test_length_field_too_large():
    with pytest.raises(ValueError, match="length field too large"):
        extract_der_from_padded_hex("3085" + "00" * 10)


def test_invalid_hex():
    with pytest.raises(ValueError):
        extract_der_from_padded_hex("zz" + "00" * 10)
