"""ASN.1/DER length parsing for tokens stored in a zero-padded content slot."""

from __future__ import annotations

from ...constants import MAX_RESERVED_SIZE

# ASN.1 SEQUENCE tag -- first byte of a CMS ContentInfo (signatures and
# RFC 3161 timestamp tokens alike)
ASN1_SEQUENCE_TAG = 0x30

# DER allows at most 4 length octets for anything we could store
_MAX_LENGTH_OCTETS = 4


def _der_length(slot: bytes) -> int:
    """Total encoded length (header + content) of the TLV at the start of *slot*."""
    if len(slot) < 2:
        raise ValueError("Hex string too short for ASN.1 TLV header")
    if slot[0] != ASN1_SEQUENCE_TAG:
        raise ValueError(f"Expected ASN.1 SEQUENCE (0x30), got 0x{slot[0]:02x}")

    first = slot[1]
    if first < 0x80:
        return 2 + first
    if first == 0x80:
        raise ValueError("Indefinite length encoding is not valid in DER")

    octets = first & 0x7F
    if octets > _MAX_LENGTH_OCTETS:
        raise ValueError(f"ASN.1 length field too large: {octets} bytes")
    if len(slot) < 2 + octets:
        raise ValueError("Hex string too short for ASN.1 length field")
    return 2 + octets + int.from_bytes(slot[2 : 2 + octets], "big")


def extract_der_from_padded_hex(hex_str: str) -> bytes:
    """Extract the exact DER blob from a zero-padded hex string.

    The slot is padded with ``0`` up to its reserved size, so the DER
    length is read from the TLV header instead of stripping zeros (a token
    may legitimately end in 0x00 bytes).

    Args:
        hex_str: Hex-encoded DER data, right-padded with zeros.

    Returns:
        Exact DER-encoded bytes without padding.

    Raises:
        ValueError: If the hex string is invalid or the header is malformed.
    """
    slot = bytes.fromhex(hex_str)
    total = _der_length(slot)

    if total > MAX_RESERVED_SIZE:
        raise ValueError(
            f"ASN.1 claims {total} bytes, exceeds maximum ({MAX_RESERVED_SIZE} bytes)"
        )
    if total > len(slot):
        raise ValueError(
            f"ASN.1 length ({total} bytes) exceeds available hex data ({len(slot)} bytes)"
        )
    return slot[:total]
