"""Reconstruction of the signed byte sequence from a /ByteRange."""

from __future__ import annotations

__all__ = [
    "check_placeholder",
    "placeholder_span",
    "signed_bytes",
    "validate_byte_range",
]

import logging
import re
from collections.abc import Sequence

from ..constants import BYTERANGE_LEN
from ..errors import MalformedByteRange

_logger = logging.getLogger(__name__)

# Hex string placeholder: "<" hex digits, optional whitespace, ">"
_PLACEHOLDER_PATTERN = re.compile(rb"<[0-9A-Fa-f\s]*>")


def validate_byte_range(buffer_len: int, byte_range: Sequence[int]) -> None:
    """Check that ``byte_range`` describes two ordered spans inside the buffer.

    Raises:
        MalformedByteRange: On a wrong entry count, negative values,
            inverted spans, or spans reaching past the end of the buffer.
    """
    if len(byte_range) != BYTERANGE_LEN:
        raise MalformedByteRange(
            f"ByteRange must have {BYTERANGE_LEN} entries, got {len(byte_range)}"
        )
    lim1, lim2, lim3, lim4 = byte_range
    if min(lim1, lim2, lim3, lim4) < 0:
        raise MalformedByteRange(f"ByteRange has negative entries: {list(byte_range)}")
    if lim1 > lim2:
        raise MalformedByteRange(f"ByteRange first span is inverted: {lim1} > {lim2}")
    if lim2 > lim3:
        raise MalformedByteRange(
            f"ByteRange spans overlap: first ends at {lim2}, second starts at {lim3}"
        )
    if lim3 + lim4 > buffer_len:
        raise MalformedByteRange(
            f"ByteRange extends beyond end of document: {lim3}+{lim4} > {buffer_len}"
        )


def signed_bytes(buffer: bytes, byte_range: Sequence[int]) -> bytes:
    """Return the bytes covered by the signature.

    Equivalent to walking every offset from ``lim1`` to ``lim3 + lim4``
    and keeping those below ``lim2`` or at or above ``lim3``.  For PDF
    signatures ``lim1`` is 0, so ``lim2`` is also the first span's length.

    Args:
        buffer: Complete document bytes.
        byte_range: ``[lim1, lim2, lim3, lim4]``.

    Returns:
        ``buffer[lim1:lim2] + buffer[lim3:lim3+lim4]``.

    Raises:
        MalformedByteRange: If the range is invalid for this buffer.
    """
    validate_byte_range(len(buffer), byte_range)
    lim1, lim2, lim3, lim4 = byte_range
    return buffer[lim1:lim2] + buffer[lim3 : lim3 + lim4]


def placeholder_span(byte_range: Sequence[int]) -> tuple[int, int]:
    """Return ``(start, end)`` of the gap excluded from the digest."""
    _, lim2, lim3, _ = byte_range
    return lim2, lim3


def check_placeholder(buffer: bytes, byte_range: Sequence[int]) -> bool:
    """Check that the excluded gap holds exactly one hex string.

    Informational only: a gap that also hides other bytes is suspicious
    but does not change the verdict.  Logs a warning when the check fails.
    """
    start, end = placeholder_span(byte_range)
    gap = buffer[start:end]
    if _PLACEHOLDER_PATTERN.fullmatch(gap):
        return True
    _logger.warning(
        "ByteRange gap [%d, %d) is not a single hex string (%d bytes)", start, end, len(gap)
    )
    return False
