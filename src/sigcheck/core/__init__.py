"""Signature verification core: byte range, envelope, digest, chain, signature."""

from __future__ import annotations

from .attributes import (
    AttributeNode,
    DigestAlgorithm,
    DigestResult,
    Nested,
    Scalar,
    build_attribute_tree,
    locate_digest,
)
from .byterange import check_placeholder, placeholder_span, signed_bytes
from .chain import ChainOutcome, OrientedChain, orient_chain, validate_chain
from .crypto import CryptoBackend, DefaultCryptoBackend
from .envelope import SignatureEnvelope, contents_to_der, decode_envelope, frame_envelope
from .field import SignatureField
from .integrity import check_integrity
from .pipeline import VerificationContext, VerificationTask, run_pipeline, verify_signature_field
from .signature import SignatureOutcome, verify_signature
from .verdict import Verdict, VerdictHolder, aggregate

__all__ = [
    "AttributeNode",
    "ChainOutcome",
    "CryptoBackend",
    "DefaultCryptoBackend",
    "DigestAlgorithm",
    "DigestResult",
    "Nested",
    "OrientedChain",
    "Scalar",
    "SignatureEnvelope",
    "SignatureField",
    "SignatureOutcome",
    "VerificationContext",
    "VerificationTask",
    "Verdict",
    "VerdictHolder",
    "aggregate",
    "build_attribute_tree",
    "check_integrity",
    "check_placeholder",
    "contents_to_der",
    "decode_envelope",
    "frame_envelope",
    "locate_digest",
    "orient_chain",
    "placeholder_span",
    "run_pipeline",
    "signed_bytes",
    "validate_chain",
    "verify_signature",
    "verify_signature_field",
]
