"""Signature field data as supplied by the document collaborator."""

from __future__ import annotations

__all__ = ["SignatureField"]

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..constants import BYTERANGE_LEN
from ..errors import SignatureFieldError


def _lookup(field_dict: Mapping[str, Any], key: str) -> Any:
    """Fetch ``key`` or its PDF-name spelling ``/key``."""
    if key in field_dict:
        return field_dict[key]
    return field_dict.get(f"/{key}")


@dataclass(frozen=True, slots=True)
class SignatureField:
    """Contents and ByteRange of one signed form field.

    Attributes:
        contents: Signature value, either hex text or the binary string
            produced by a PDF parser.
        byte_range: ``(lim1, lim2, lim3, lim4)`` -- hashed spans ``[lim1, lim2)``
            and ``[lim3, lim3+lim4)``.
        name: Fully qualified field name, if known.
    """

    contents: bytes | str
    byte_range: tuple[int, int, int, int]
    name: str | None = None

    @classmethod
    def from_dictionary(
        cls, field_dict: Mapping[str, Any] | None, name: str | None = None
    ) -> SignatureField:
        """Build a field from a mapping exposing ``Contents`` and ``ByteRange``.

        Raises:
            SignatureFieldError: If the dictionary or either entry is missing,
                or ByteRange is not four integers.
        """
        if field_dict is None:
            raise SignatureFieldError("No signature dictionary present")

        contents = _lookup(field_dict, "Contents")
        if contents is None:
            raise SignatureFieldError("Signature dictionary has no /Contents")
        if not isinstance(contents, (bytes, str)):
            raise SignatureFieldError(
                f"/Contents must be a string, got {type(contents).__name__}"
            )

        raw_range = _lookup(field_dict, "ByteRange")
        if raw_range is None:
            raise SignatureFieldError("Signature dictionary has no /ByteRange")
        try:
            values = [int(v) for v in raw_range]
        except (TypeError, ValueError) as e:
            raise SignatureFieldError(f"/ByteRange must contain integers: {e}") from e
        if len(values) != BYTERANGE_LEN:
            raise SignatureFieldError(
                f"/ByteRange must have {BYTERANGE_LEN} entries, got {len(values)}"
            )

        return cls(
            contents=contents,
            byte_range=(values[0], values[1], values[2], values[3]),
            name=name,
        )
