"""
Cryptographic check of the signature over the signed attributes.

The signed attributes are re-encoded as a universal SET and hashed; the
signature value is run through the raw RSA public-key operation of the
signer certificate; the trailing digest-sized part of the result must
equal the computed hash.  The trailing comparison tolerates whatever
padding precedes the digest.
"""

from __future__ import annotations

__all__ = [
    "SignatureOutcome",
    "decrypted_digest",
    "signed_attributes_digest",
    "verify_signature",
]

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import STATE_SIGNATURE_INVALID, STATE_SIGNATURE_VALID
from ..errors import SignatureDecryptError

if TYPE_CHECKING:
    from .attributes import DigestAlgorithm
    from .crypto import CryptoBackend
    from .envelope import SignatureEnvelope

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SignatureOutcome:
    """Result of signature verification.

    Attributes:
        valid: Whether the recovered digest matches.
        state: ``"Valid Signature"`` or ``"Invalid Signature!"``.
        message: Human-readable detail line.
    """

    valid: bool
    state: str
    message: str


def signed_attributes_digest(
    envelope: SignatureEnvelope, algorithm: DigestAlgorithm, backend: CryptoBackend
) -> str:
    """Hex digest of the signed attributes in their universal SET encoding."""
    return backend.digest(algorithm, backend.encode_attribute_set(envelope)).hex()


def decrypted_digest(
    envelope: SignatureEnvelope, algorithm: DigestAlgorithm, backend: CryptoBackend
) -> str:
    """Trailing digest-sized hex part of the raw-decrypted signature value.

    The signer is taken to be the first embedded certificate.

    Raises:
        SignatureDecryptError: If there is no certificate or the raw
            public-key operation fails.
    """
    if not envelope.certificates:
        raise SignatureDecryptError("Signature envelope contains no signer certificate")
    decrypted = backend.rsa_raw_decrypt(envelope.signature, envelope.certificates[0]).hex()
    return decrypted[-algorithm.hex_length :]


def _invalid(message: str) -> SignatureOutcome:
    return SignatureOutcome(valid=False, state=STATE_SIGNATURE_INVALID, message=message)


def verify_signature(
    envelope: SignatureEnvelope, algorithm: DigestAlgorithm | None, backend: CryptoBackend
) -> SignatureOutcome:
    """Verify the signature value against the signed attributes.

    Args:
        envelope: Decoded signature envelope.
        algorithm: Digest algorithm recovered from the signed attributes,
            or None if it could not be determined.
        backend: Cryptography capability.

    Returns:
        SignatureOutcome; never raises on verification failure.
    """
    if algorithm is None:
        return _invalid("Signature not checked -- digest algorithm unknown")

    expected = signed_attributes_digest(envelope, algorithm, backend)
    try:
        recovered = decrypted_digest(envelope, algorithm, backend)
    except SignatureDecryptError as e:
        _logger.debug("Signature decryption failed: %s", e)
        return _invalid(f"Signature decryption failed: {e}")

    _logger.debug("Obtained hash: %s", expected)
    _logger.debug("Decrypted hash value: %s", recovered)

    if recovered == expected:
        return SignatureOutcome(
            valid=True,
            state=STATE_SIGNATURE_VALID,
            message=f"Signature OK -- {algorithm.label} of signed attributes matches",
        )
    return _invalid(
        f"Signature MISMATCH!\n"
        f"  Signed attributes {algorithm.label}: {expected}\n"
        f"  Decrypted value:  {recovered}"
    )
