"""High-level convenience API for signature verification.

Provides :func:`verify_pdf` for signed PDF files and :func:`verify_field`
for callers that already hold a signature dictionary and the document
bytes.  Both accept an injected backend; create one
:class:`~sigcheck.core.crypto.DefaultCryptoBackend` at startup and reuse it.
"""

from __future__ import annotations

__all__ = ["verify_field", "verify_pdf"]

import logging
from typing import TYPE_CHECKING, Any

from .core.crypto import DefaultCryptoBackend
from .core.field import SignatureField
from .core.pipeline import verify_signature_field
from .pdf import find_signature_fields

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .core.crypto import CryptoBackend
    from .core.verdict import Verdict

_logger = logging.getLogger(__name__)


def verify_field(
    field_dict: Mapping[str, Any] | None,
    document: bytes,
    backend: CryptoBackend | None = None,
    *,
    name: str | None = None,
) -> Verdict:
    """Verify a signature dictionary exposing ``Contents`` and ``ByteRange``.

    Args:
        field_dict: Signature dictionary (``/V`` of the signature field).
        document: Complete document bytes.
        backend: Cryptography capability; a default one is built if None.
        name: Field name to report in the verdict.

    Returns:
        The verdict; verification failures never raise.

    Raises:
        SignatureFieldError: If the dictionary is missing or incomplete.
    """
    field = SignatureField.from_dictionary(field_dict, name=name)
    return verify_signature_field(field, document, backend or DefaultCryptoBackend())


def verify_pdf(
    pdf_bytes: bytes,
    backend: CryptoBackend | None = None,
    *,
    all_signatures: bool = False,
) -> list[Verdict]:
    """Verify the signatures embedded in a PDF.

    Args:
        pdf_bytes: The signed PDF.
        backend: Cryptography capability; a default one is built if None.
        all_signatures: Verify every signed field instead of only the last.

    Returns:
        One verdict per verified field, in field order.

    Raises:
        SignatureFieldError: If the PDF has no signed signature field.
    """
    fields = find_signature_fields(pdf_bytes)
    if not all_signatures:
        fields = fields[-1:]
    backend = backend or DefaultCryptoBackend()
    return [verify_signature_field(field, pdf_bytes, backend) for field in fields]
