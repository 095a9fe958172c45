"""Aggregation of the three checks into a single immutable verdict."""

from __future__ import annotations

__all__ = [
    "REASON_CERTIFICATE",
    "REASON_INTEGRITY",
    "REASON_SIGNATURE",
    "Verdict",
    "VerdictHolder",
    "aggregate",
]

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from ..constants import MESSAGE_INVALID, MESSAGE_VALID, STATE_SIGNATURE_INVALID

# Names of failed checks, listed in this order in Verdict.reasons
REASON_INTEGRITY = "integrity"
REASON_CERTIFICATE = "certificate"
REASON_SIGNATURE = "signature"


@dataclass(frozen=True, slots=True)
class Verdict:
    """Outcome of verifying one signature field.

    Attributes:
        valid_integrity: Document digest matches the declared messageDigest.
        valid_certificate: Embedded chain validates against its anchor.
        valid_signature: Signature value matches the signed attributes.
        reasons: Names of the failed checks, in stable order.
        details: Human-readable messages, including recovered errors.
        signature_state: ``"Valid Signature"`` or ``"Invalid Signature!"``.
        signer: Read-only signer identity (name, email, organization, dn),
            if known.
        field_name: Name of the verified signature field, if known.
    """

    valid_integrity: bool
    valid_certificate: bool
    valid_signature: bool
    reasons: tuple[str, ...]
    details: tuple[str, ...] = ()
    signature_state: str = STATE_SIGNATURE_INVALID
    signer: Mapping[str, str | None] | None = field(default=None, compare=False)
    field_name: str | None = None

    @property
    def valid(self) -> bool:
        return self.valid_integrity and self.valid_certificate and self.valid_signature

    @property
    def message(self) -> str:
        return MESSAGE_VALID if self.valid else MESSAGE_INVALID


def aggregate(
    valid_integrity: bool,
    valid_certificate: bool,
    valid_signature: bool,
    *,
    signature_state: str = STATE_SIGNATURE_INVALID,
    details: Iterable[str] = (),
    signer: Mapping[str, str | None] | None = None,
    field_name: str | None = None,
) -> Verdict:
    """Combine the three check outcomes into a ``Verdict``."""
    checks = (
        (REASON_INTEGRITY, valid_integrity),
        (REASON_CERTIFICATE, valid_certificate),
        (REASON_SIGNATURE, valid_signature),
    )
    return Verdict(
        valid_integrity=valid_integrity,
        valid_certificate=valid_certificate,
        valid_signature=valid_signature,
        reasons=tuple(name for name, ok in checks if not ok),
        details=tuple(details),
        signature_state=signature_state,
        signer=MappingProxyType(dict(signer)) if signer is not None else None,
        field_name=field_name,
    )


class VerdictHolder:
    """Set-once slot through which a finished verdict is handed to the UI."""

    def __init__(self) -> None:
        self._verdict: Verdict | None = None
        self._lock = threading.Lock()
        self._ready = threading.Event()

    def publish(self, verdict: Verdict) -> None:
        """Store the verdict.

        Raises:
            RuntimeError: If a verdict was already published.
        """
        with self._lock:
            if self._verdict is not None:
                raise RuntimeError("Verdict already published")
            self._verdict = verdict
        self._ready.set()

    def get(self) -> Verdict | None:
        """Return the published verdict, or None if not yet available."""
        return self._verdict

    def wait(self, timeout: float | None = None) -> Verdict | None:
        """Block until a verdict is published or ``timeout`` expires."""
        self._ready.wait(timeout)
        return self._verdict
