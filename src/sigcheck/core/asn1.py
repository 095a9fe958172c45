"""ASN.1/DER helpers for locating the CMS blob inside a signature placeholder."""

from __future__ import annotations

__all__ = [
    "ASN1_SEQUENCE_TAG",
    "MAX_CMS_SIZE",
    "iter_tlv",
    "strip_der_padding",
]

from collections.abc import Iterator

from asn1crypto import parser

# ASN.1 SEQUENCE tag -- first byte of any valid CMS/PKCS#7 blob
ASN1_SEQUENCE_TAG = 0x30

# Upper bound for a single CMS blob (16 MB).
# Protects against malformed length fields claiming absurd sizes.
MAX_CMS_SIZE = 16 * 1024 * 1024

# asn1crypto's method value for constructed encodings
_METHOD_CONSTRUCTED = 1


def strip_der_padding(data: bytes) -> bytes:
    """Return the exact CMS blob from zero-padded placeholder bytes.

    Signature placeholders are reserved larger than the blob and filled
    with zeros.  The TLV header of the outer SEQUENCE tells where the blob
    ends; stripping trailing zeros instead would corrupt blobs that
    legitimately end in 0x00.

    Raises:
        ValueError: If the data does not start with a complete SEQUENCE.
    """
    if not data:
        raise ValueError("Signature contents are empty")
    if data[0] != ASN1_SEQUENCE_TAG:
        raise ValueError(f"Expected ASN.1 SEQUENCE (0x30), got 0x{data[0]:02x}")
    if len(data) > MAX_CMS_SIZE:
        raise ValueError(f"Signature contents exceed maximum ({MAX_CMS_SIZE} bytes)")

    _, _, _, header, contents, trailer = parser.parse(data)
    return data[: len(header) + len(contents) + len(trailer)]


def iter_tlv(data: bytes) -> Iterator[tuple[bool, bytes]]:
    """Yield ``(constructed, contents)`` for each consecutive TLV in ``data``.

    Raises:
        ValueError: If an element is truncated or malformed.
    """
    pointer = 0
    while pointer < len(data):
        _, method, _, header, contents, trailer = parser.parse(data[pointer:])
        yield method == _METHOD_CONSTRUCTED, contents
        pointer += len(header) + len(contents) + len(trailer)
