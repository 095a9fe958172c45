# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false
"""
Certificate chain orientation and validation.

Signers embed their chain either leaf-first (root last) or root-first
(leaf last).  The position of the CA-flagged certificates decides the
orientation; the anchor becomes the only entry of the trust store and
the remaining certificates are verified leaf-first against it.
"""

from __future__ import annotations

__all__ = [
    "ChainOutcome",
    "OrientedChain",
    "ca_positions",
    "orient_chain",
    "validate_chain",
]

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import ChainBuildError
from .cert_info import common_name

if TYPE_CHECKING:
    from asn1crypto import x509 as asn1_x509

    from .crypto import CryptoBackend

_logger = logging.getLogger(__name__)

# More CA-flagged certificates than this cannot be oriented reliably
_MAX_CA_CERTS = 2


@dataclass(frozen=True, slots=True)
class OrientedChain:
    """A chain in leaf-first order together with its trust anchor.

    Attributes:
        anchor: The certificate placed in the trust store.
        chain: Leaf-first certificates, ending with the anchor.
        anchor_index: Position of the anchor in the embedded order.
    """

    anchor: asn1_x509.Certificate
    chain: tuple[asn1_x509.Certificate, ...]
    anchor_index: int


@dataclass(frozen=True, slots=True)
class ChainOutcome:
    """Result of certificate chain validation."""

    valid: bool
    message: str


def ca_positions(certificates: Sequence[asn1_x509.Certificate]) -> list[int]:
    """Indices of certificates whose basicConstraints mark them as a CA.

    Raises:
        ChainBuildError: If a certificate's extensions cannot be parsed.
    """
    positions: list[int] = []
    for i, cert in enumerate(certificates):
        try:
            is_ca = cert.ca
        except (ValueError, TypeError, KeyError) as e:
            raise ChainBuildError(f"Certificate {i} has malformed extensions: {e}") from e
        if is_ca:
            positions.append(i)
    return positions


def _anchor_label(anchor: asn1_x509.Certificate) -> str:
    try:
        return common_name(anchor) or anchor.subject.human_friendly
    except (ValueError, TypeError, KeyError):
        return "unreadable subject"


def orient_chain(certificates: Sequence[asn1_x509.Certificate]) -> OrientedChain:
    """Pick the trust anchor and put the chain in leaf-first order.

    A CA-flagged last certificate means the chain is already leaf-first;
    otherwise a CA-flagged first certificate means root-first, and the
    chain is reversed.

    Raises:
        ChainBuildError: If the chain is empty, has more than two CA
            certificates, has CA certificates at both ends, has none at
            either end, or holds a certificate with malformed extensions.
    """
    if not certificates:
        raise ChainBuildError("Signature envelope contains no certificates")

    last = len(certificates) - 1
    positions = ca_positions(certificates)
    if len(positions) > _MAX_CA_CERTS:
        raise ChainBuildError(
            f"Chain orientation is ambiguous: {len(positions)} CA certificates "
            f"at positions {positions}"
        )
    if last > 0 and 0 in positions and last in positions:
        raise ChainBuildError(
            "Chain orientation is ambiguous: both the first and the last certificate are CAs"
        )

    if last in positions:
        anchor_index = last
        chain = tuple(certificates)
    elif 0 in positions:
        anchor_index = 0
        chain = tuple(reversed(certificates))
    else:
        raise ChainBuildError("No CA certificate at either end of the embedded chain")

    anchor = certificates[anchor_index]
    _logger.debug(
        "Root CA (%s) in position %d (chain contains %d certificates)",
        _anchor_label(anchor),
        anchor_index,
        len(certificates),
    )
    return OrientedChain(anchor=anchor, chain=chain, anchor_index=anchor_index)


def validate_chain(
    certificates: Sequence[asn1_x509.Certificate], backend: CryptoBackend
) -> ChainOutcome:
    """Validate the embedded chain against its own trust anchor.

    Never raises: orientation and verification failures become an
    invalid outcome carrying the error message.
    """
    try:
        oriented = orient_chain(certificates)
        backend.verify_chain(oriented.chain, oriented.anchor)
    except ChainBuildError as e:
        _logger.debug("Certificate verification failure: %s", e)
        return ChainOutcome(valid=False, message=f"Certificate chain invalid: {e}")

    return ChainOutcome(
        valid=True,
        message=f"Certificate chain OK -- {len(oriented.chain)} certificate(s) to trusted anchor",
    )
