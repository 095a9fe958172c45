# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Cryptography capability used by the verification pipeline.

The pipeline depends on the ``CryptoBackend`` protocol, not on concrete
libraries.  ``DefaultCryptoBackend`` implements it with asn1crypto (CMS
parsing and DER encoding), hashlib, cryptography (RSA public keys) and
pyhanko-certvalidator (certificate path validation).  Build one backend
at startup and pass it to every verification.
"""

from __future__ import annotations

__all__ = [
    "CryptoBackend",
    "DefaultCryptoBackend",
]

import asyncio
import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from asn1crypto import cms as asn1_cms
from asn1crypto import core as asn1_core
from asn1crypto import pem
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pyhanko_certvalidator import CertificateValidator, ValidationContext
from pyhanko_certvalidator.errors import PathError, ValidationError

from ..constants import PEM_LABEL
from ..errors import ChainBuildError, EnvelopeDecodeError, SignatureDecryptError
from .attributes import build_attribute_tree
from .envelope import SignatureEnvelope

if TYPE_CHECKING:
    import datetime

    from asn1crypto import x509 as asn1_x509
    from pyhanko_certvalidator.path import ValidationPath

    from .attributes import DigestAlgorithm

_logger = logging.getLogger(__name__)


class CryptoBackend(Protocol):
    """Primitive operations the verification pipeline delegates.

    Implementations must not keep per-document state: one instance is
    shared by every verification in the process.
    """

    def load_envelope(self, pem_text: str) -> SignatureEnvelope:
        """
        Parse a PEM-armored PKCS7 container.

        Raises:
            EnvelopeDecodeError: If the container is malformed or is not
                a SignedData with signed attributes.
        """
        ...

    def encode_attribute_set(self, envelope: SignatureEnvelope) -> bytes:
        """Return the signed attributes DER-encoded as a universal SET."""
        ...

    def digest(self, algorithm: DigestAlgorithm, data: bytes) -> bytes:
        """Hash ``data`` with ``algorithm``."""
        ...

    def rsa_raw_decrypt(self, signature: bytes, certificate: asn1_x509.Certificate) -> bytes:
        """
        Apply the raw RSA public-key operation to ``signature``.

        Returns:
            The result, left-padded to the modulus length.  No padding
            is removed.

        Raises:
            SignatureDecryptError: If the key is not RSA or the value is
                out of range for the modulus.
        """
        ...

    def verify_chain(
        self, chain: Sequence[asn1_x509.Certificate], anchor: asn1_x509.Certificate
    ) -> None:
        """
        Verify a leaf-first chain against a trust store holding only ``anchor``.

        Args:
            chain: Certificates from the leaf up to and including the anchor.
            anchor: The single trusted certificate.

        Raises:
            ChainBuildError: If no valid path to the anchor exists.
        """
        ...


def _run_path_validation(validator: CertificateValidator) -> ValidationPath:
    """Run the async path validation to completion from synchronous code.

    When called from inside a running event loop (e.g. an asyncio UI),
    the validation gets its own loop on a short-lived worker thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(validator.async_validate_path())

    _logger.debug("Event loop already running, validating path on a worker thread")
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(lambda: asyncio.run(validator.async_validate_path())).result()


class DefaultCryptoBackend:
    """``CryptoBackend`` built on asn1crypto, cryptography and pyhanko-certvalidator.

    Args:
        validation_time: Moment at which certificate validity is judged.
            None means the current time at each verification.
    """

    def __init__(self, validation_time: datetime.datetime | None = None) -> None:
        self._validation_time = validation_time

    # ── Envelope ──────────────────────────────────────────────────

    def load_envelope(self, pem_text: str) -> SignatureEnvelope:
        try:
            type_name, _, der = pem.unarmor(pem_text.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as e:
            raise EnvelopeDecodeError(f"Invalid PEM container: {e}") from e
        if type_name != PEM_LABEL:
            raise EnvelopeDecodeError(f"Expected {PEM_LABEL} PEM block, got {type_name}")

        try:
            content_info = asn1_cms.ContentInfo.load(der, strict=True)
            content_type = content_info["content_type"].native
            if content_type != "signed_data":
                raise EnvelopeDecodeError(f"Unsupported CMS content type: {content_type}")
            signed_data = content_info["content"]

            signer_infos = signed_data["signer_infos"]
            if len(signer_infos) == 0:
                raise EnvelopeDecodeError("CMS SignedData has no SignerInfo")
            signer_info = signer_infos[0]

            signed_attrs = signer_info["signed_attrs"]
            if isinstance(signed_attrs, asn1_core.Void) or len(signed_attrs) == 0:
                raise EnvelopeDecodeError("SignerInfo has no signed attributes")
            tree = build_attribute_tree(signed_attrs.untag().dump())

            cert_set = signed_data["certificates"]
            certificates: tuple[asn1_x509.Certificate, ...] = ()
            if not isinstance(cert_set, asn1_core.Void):
                certificates = tuple(
                    choice.chosen for choice in cert_set if choice.name == "certificate"
                )

            signature = signer_info["signature"].native
        except (ValueError, TypeError, KeyError) as e:
            raise EnvelopeDecodeError(f"Failed to parse CMS envelope: {e}") from e

        return SignatureEnvelope(
            der=der,
            certificates=certificates,
            signer_info=signer_info,
            signed_attrs=signed_attrs,
            authenticated_attributes=tree,
            signature=signature,
        )

    def encode_attribute_set(self, envelope: SignatureEnvelope) -> bytes:
        # Signed attributes are transmitted with an implicit [0] tag but
        # signed as a universal SET.
        return envelope.signed_attrs.untag().dump()

    # ── Primitives ────────────────────────────────────────────────

    def digest(self, algorithm: DigestAlgorithm, data: bytes) -> bytes:
        return hashlib.new(algorithm.value, data).digest()

    def rsa_raw_decrypt(self, signature: bytes, certificate: asn1_x509.Certificate) -> bytes:
        try:
            public_key = serialization.load_der_public_key(certificate.public_key.dump())
        except (ValueError, TypeError, KeyError, UnsupportedAlgorithm) as e:
            raise SignatureDecryptError(f"Cannot load signer public key: {e}") from e
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise SignatureDecryptError(
                f"Signer key is {certificate.public_key.algorithm.upper()}, not RSA"
            )

        numbers = public_key.public_numbers()
        modulus_len = (numbers.n.bit_length() + 7) // 8
        value = int.from_bytes(signature, "big")
        if not signature or len(signature) > modulus_len or value >= numbers.n:
            raise SignatureDecryptError(
                f"Signature value ({len(signature)} bytes) is out of range "
                f"for a {numbers.n.bit_length()}-bit key"
            )
        return pow(value, numbers.e, numbers.n).to_bytes(modulus_len, "big")

    # ── Certificate chain ─────────────────────────────────────────

    def verify_chain(
        self, chain: Sequence[asn1_x509.Certificate], anchor: asn1_x509.Certificate
    ) -> None:
        if not chain:
            raise ChainBuildError("Certificate chain is empty")
        leaf = chain[0]
        anchor_der = anchor.dump()
        intermediates = [cert for cert in chain[1:] if cert.dump() != anchor_der]

        context = ValidationContext(
            trust_roots=[anchor],
            other_certs=intermediates,
            moment=self._validation_time,
            allow_fetching=False,
            revocation_mode="soft-fail",
        )
        validator = CertificateValidator(
            leaf, intermediate_certs=intermediates, validation_context=context
        )
        try:
            path = _run_path_validation(validator)
        except (PathError, ValidationError, ValueError, TypeError, KeyError, RuntimeError) as e:
            raise ChainBuildError(f"Certificate chain verification failed: {e}") from e
        _logger.debug("Validated certificate path of length %d", path.pkix_len)
