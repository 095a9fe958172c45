"""Document collaborator: signature fields of PDF files, read with pikepdf."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import SigcheckError

if TYPE_CHECKING:
    import types

__all__ = ["find_signature_fields", "require_pikepdf"]


def require_pikepdf() -> types.ModuleType:
    """Lazily import pikepdf to avoid loading the C extension at startup.

    pikepdf is a required dependency; this defers the import for
    startup performance, not optionality.
    """
    try:
        import pikepdf
    except ImportError as exc:
        raise SigcheckError(
            "pikepdf is required for this operation.\nInstall with: pip install pikepdf"
        ) from exc
    else:
        return pikepdf


from .fields import find_signature_fields  # noqa: E402
