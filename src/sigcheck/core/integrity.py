"""Document integrity: recomputed digest vs. declared messageDigest."""

from __future__ import annotations

__all__ = ["check_integrity"]

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .attributes import DigestResult
    from .crypto import CryptoBackend

_logger = logging.getLogger(__name__)


def check_integrity(declared: DigestResult, signed_data: bytes, backend: CryptoBackend) -> bool:
    """Return True iff the digest of ``signed_data`` equals the declared one.

    The comparison is exact and case-insensitive: a prefix or substring of
    the declared value never matches.
    """
    actual = backend.digest(declared.algorithm, signed_data).hex()
    expected = declared.hex_value.lower()
    if actual == expected:
        _logger.debug("Integrity OK -- %s %s", declared.algorithm.label, actual)
        return True
    _logger.debug(
        "Integrity MISMATCH -- ByteRange %s %s, declared %s",
        declared.algorithm.label,
        actual,
        expected,
    )
    return False
