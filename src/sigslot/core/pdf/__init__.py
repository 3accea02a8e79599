"""PDF placeholder preparation, layout, byte ranges, and in-place patching."""

from .asn1 import ASN1_SEQUENCE_TAG, extract_der_from_padded_hex
from .byterange import (
    BYTERANGE_PATTERN,
    ByteRange,
    ByteRangeReader,
    digest_byte_range,
    extract_contents,
    find_byte_range,
    open_signed_data,
    resolve_byte_range,
)
from .inspection import SignatureInspection, inspect_signed_pdf, token_content_type
from .layout import (
    WriteLayout,
    WriteOptions,
    find_signature_objgen,
    locate_signature_slots,
    write_document,
)
from .objects import first_page, pdf_date, pdf_rect, require_array, require_dictionary
from .patch import encode_contents, patch_file
from .placeholder import (
    SignatureRecord,
    SignatureVariant,
    prepare_placeholder,
    prepare_signature,
    prepare_timestamp,
)

__all__ = [
    "ASN1_SEQUENCE_TAG",
    "BYTERANGE_PATTERN",
    "ByteRange",
    "ByteRangeReader",
    "SignatureInspection",
    "SignatureRecord",
    "SignatureVariant",
    "WriteLayout",
    "WriteOptions",
    "digest_byte_range",
    "encode_contents",
    "extract_contents",
    "extract_der_from_padded_hex",
    "find_byte_range",
    "find_signature_objgen",
    "first_page",
    "inspect_signed_pdf",
    "locate_signature_slots",
    "open_signed_data",
    "patch_file",
    "pdf_date",
    "pdf_rect",
    "prepare_placeholder",
    "prepare_signature",
    "prepare_timestamp",
    "require_array",
    "require_dictionary",
    "resolve_byte_range",
    "token_content_type",
    "write_document",
]
