"""Sigcheck error types."""

from __future__ import annotations

__all__ = [
    "ChainBuildError",
    "ConfigError",
    "DigestNotFound",
    "EnvelopeDecodeError",
    "MalformedByteRange",
    "SigcheckError",
    "SignatureDecryptError",
    "SignatureFieldError",
    "UnsupportedDigestAlgorithm",
]


class SigcheckError(Exception):
    """Base error for Sigcheck operations."""


class SignatureFieldError(SigcheckError):
    """No usable signature field (missing dictionary, Contents or ByteRange).

    This is the only condition under which no verdict is produced.
    """


class MalformedByteRange(SigcheckError, ValueError):
    """ByteRange is out of bounds of the document or inverted."""


class EnvelopeDecodeError(SigcheckError):
    """Signature contents could not be decoded into a CMS envelope."""


class DigestNotFound(SigcheckError):
    """No signed attribute holds a value of a known digest length."""


class UnsupportedDigestAlgorithm(SigcheckError):
    """Digest value length does not match SHA-1 or SHA-256.

    Args:
        message: Human-readable error description.
        length: Offending value length in bytes.
    """

    def __init__(self, message: str, *, length: int | None = None) -> None:
        super().__init__(message)
        self.length = length

    def __reduce__(
        self,
    ) -> tuple[type[UnsupportedDigestAlgorithm], tuple[str], dict[str, int | None]]:
        """Preserve the offending length across pickle/unpickle."""
        return (type(self), (str(self),), {"length": self.length})

    def __setstate__(self, state: dict[str, int | None] | None) -> None:
        if state is None:
            return
        self.length = state.get("length")


class ChainBuildError(SigcheckError):
    """Trust anchor is ambiguous or chain verification failed."""


class SignatureDecryptError(SigcheckError):
    """Raw public-key operation on the signature value failed."""


class ConfigError(SigcheckError):
    """Configuration validation error."""
