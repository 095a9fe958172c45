# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Signature field discovery in PDF documents.

Walks the AcroForm field tree (including /Kids, with /FT inherited from
parents) and returns the Contents and ByteRange of every signed /Sig
field in document order.
"""

from __future__ import annotations

__all__ = ["find_signature_fields"]

import io
import logging
from typing import TYPE_CHECKING, Any

from ..constants import PDF_MAGIC
from ..core.field import SignatureField
from ..errors import SignatureFieldError
from . import require_pikepdf

if TYPE_CHECKING:
    import pikepdf

_logger = logging.getLogger(__name__)

# Guard against cyclic /Kids references in broken files
_MAX_FIELD_DEPTH = 32


def _collect(
    node: pikepdf.Dictionary,
    inherited_ft: str | None,
    parent_name: str,
    depth: int,
    out: list[SignatureField],
    skipped: list[str],
) -> None:
    if depth > _MAX_FIELD_DEPTH:
        _logger.warning("Field tree deeper than %d levels, skipping subtree", _MAX_FIELD_DEPTH)
        return

    ft_obj = node.get("/FT")
    ft = str(ft_obj) if ft_obj is not None else inherited_ft
    partial = node.get("/T")
    name = parent_name
    if partial is not None:
        name = f"{parent_name}.{partial}" if parent_name else str(partial)

    value = node.get("/V")
    if ft == "/Sig" and value is not None:
        try:
            out.append(_field_from_value(value, name or None))
        except SignatureFieldError as e:
            _logger.warning("Skipping signature field %r: %s", name or "<unnamed>", e)
            skipped.append(f"{name or '<unnamed>'}: {e}")
        return

    kids = node.get("/Kids")
    if kids is not None:
        for kid in kids:
            _collect(kid, ft, name, depth + 1, out, skipped)


def _field_from_value(value: pikepdf.Dictionary, name: str | None) -> SignatureField:
    """Copy /Contents and /ByteRange out of a signature dictionary."""
    entries: dict[str, Any] = {}
    contents = value.get("/Contents")
    if contents is not None:
        entries["Contents"] = bytes(contents)
    byte_range = value.get("/ByteRange")
    if byte_range is not None:
        entries["ByteRange"] = list(byte_range)
    return SignatureField.from_dictionary(entries, name=name)


def find_signature_fields(pdf_bytes: bytes) -> list[SignatureField]:
    """Return every signed signature field of a PDF, in field order.

    A signature dictionary lacking /Contents or a usable /ByteRange is
    skipped with a warning; the remaining fields are still returned.

    Args:
        pdf_bytes: Complete PDF file bytes.

    Returns:
        One SignatureField per usable signed /Sig field.

    Raises:
        SignatureFieldError: If the PDF cannot be read or holds no usable
            signed signature field.
    """
    if not pdf_bytes.startswith(PDF_MAGIC):
        raise SignatureFieldError("Not a PDF file (missing %PDF- header)")

    pikepdf = require_pikepdf()
    fields: list[SignatureField] = []
    skipped: list[str] = []
    try:
        with pikepdf.open(io.BytesIO(pdf_bytes)) as pdf:
            acroform = pdf.Root.get("/AcroForm")
            top_fields = acroform.get("/Fields") if acroform is not None else None
            if top_fields is not None:
                for node in top_fields:
                    _collect(node, None, "", 0, fields, skipped)
    except (ValueError, RuntimeError, OSError, TypeError, pikepdf.PdfError) as e:
        raise SignatureFieldError(f"Cannot read signature fields: {e}") from e

    if not fields:
        if skipped:
            raise SignatureFieldError(
                f"No usable signature field found ({'; '.join(skipped)})"
            )
        raise SignatureFieldError("No signed signature field found -- not a signed PDF?")
    _logger.debug("Found %d signed signature field(s)", len(fields))
    return fields
