"""
Signature envelope decoding.

Turns the /Contents of a signature field into a parsed CMS envelope:
hex text -> DER bytes -> 64-column PEM armor -> crypto backend parse.
This module does no cryptography; it only transcodes and frames.
"""

from __future__ import annotations

__all__ = [
    "SignatureEnvelope",
    "contents_to_der",
    "decode_envelope",
    "frame_envelope",
]

import binascii
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from asn1crypto import pem

from ..constants import PEM_LABEL
from ..errors import EnvelopeDecodeError
from .asn1 import ASN1_SEQUENCE_TAG, strip_der_padding

if TYPE_CHECKING:
    from asn1crypto import cms as asn1_cms
    from asn1crypto import x509 as asn1_x509

    from .attributes import AttributeNode
    from .crypto import CryptoBackend

_logger = logging.getLogger(__name__)

# Hex text delivered as bytes (e.g. sliced straight from the placeholder)
_HEX_BYTES = re.compile(rb"[0-9A-Fa-f\s]+")


@dataclass(frozen=True, slots=True)
class SignatureEnvelope:
    """Parsed CMS SignedData with the pieces verification needs.

    Attributes:
        der: Exact DER encoding of the ContentInfo (padding removed).
        certificates: Embedded certificates, in embedded order.
        signer_info: First SignerInfo of the SignedData.
        signed_attrs: Authenticated attributes of that SignerInfo.
        authenticated_attributes: The same attributes as a Scalar/Nested tree.
        signature: Raw signature value.
    """

    der: bytes
    certificates: tuple[asn1_x509.Certificate, ...]
    signer_info: asn1_cms.SignerInfo
    signed_attrs: asn1_cms.CMSAttributes
    authenticated_attributes: AttributeNode
    signature: bytes


def contents_to_der(contents: bytes | str) -> bytes:
    """Decode signature /Contents into the exact DER blob.

    Args:
        contents: Hex text (whitespace ignored), or the binary string a
            PDF parser produces from a hex string literal.

    Raises:
        EnvelopeDecodeError: On odd length, non-hex characters, or data
            that does not start with a complete ASN.1 SEQUENCE.
    """
    if (
        isinstance(contents, bytes)
        and contents[:1] != bytes([ASN1_SEQUENCE_TAG])
        and _HEX_BYTES.fullmatch(contents)
    ):
        contents = contents.decode("ascii")

    if isinstance(contents, str):
        hex_str = "".join(contents.split())
        if len(hex_str) % 2:
            raise EnvelopeDecodeError(f"Hex contents have odd length ({len(hex_str)})")
        try:
            raw = binascii.unhexlify(hex_str)
        except (binascii.Error, ValueError) as e:
            raise EnvelopeDecodeError(f"Invalid hex in signature contents: {e}") from e
    else:
        raw = bytes(contents)

    try:
        der = strip_der_padding(raw)
    except ValueError as e:
        raise EnvelopeDecodeError(f"Signature contents are not a CMS blob: {e}") from e
    if len(der) < len(raw):
        _logger.debug("Stripped %d bytes of placeholder padding", len(raw) - len(der))
    return der


def frame_envelope(der: bytes) -> str:
    """Base64-encode ``der`` inside 64-column PKCS7 PEM armor."""
    return pem.armor(PEM_LABEL, der).decode("ascii")


def decode_envelope(contents: bytes | str, backend: CryptoBackend) -> SignatureEnvelope:
    """Decode signature /Contents into a ``SignatureEnvelope``.

    Args:
        contents: Hex text or binary string from the signature dictionary.
        backend: Cryptography capability that parses the PEM container.

    Raises:
        EnvelopeDecodeError: If transcoding fails or the backend rejects
            the container.
    """
    der = contents_to_der(contents)
    envelope = backend.load_envelope(frame_envelope(der))
    _logger.debug(
        "Envelope: %d bytes, %d certificate(s), %d-byte signature",
        len(der),
        len(envelope.certificates),
        len(envelope.signature),
    )
    return envelope
