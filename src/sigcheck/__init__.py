"""
sigcheck -- verification of CMS signatures embedded in signed documents.

Checks document integrity (ByteRange digest), the embedded certificate
chain, and the signature over the signed attributes.
"""

from __future__ import annotations

from .api import verify_field, verify_pdf
from .constants import __version__
from .core import (
    CryptoBackend,
    DefaultCryptoBackend,
    SignatureField,
    VerificationTask,
    Verdict,
    verify_signature_field,
)
from .errors import (
    ChainBuildError,
    ConfigError,
    DigestNotFound,
    EnvelopeDecodeError,
    MalformedByteRange,
    SigcheckError,
    SignatureDecryptError,
    SignatureFieldError,
    UnsupportedDigestAlgorithm,
)

__all__ = [
    "ChainBuildError",
    "ConfigError",
    "CryptoBackend",
    "DefaultCryptoBackend",
    "DigestNotFound",
    "EnvelopeDecodeError",
    "MalformedByteRange",
    "SigcheckError",
    "SignatureDecryptError",
    "SignatureField",
    "SignatureFieldError",
    "UnsupportedDigestAlgorithm",
    "VerificationTask",
    "Verdict",
    "__version__",
    "verify_field",
    "verify_pdf",
    "verify_signature_field",
]
