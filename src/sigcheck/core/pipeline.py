"""
Signature verification pipeline.

Each run threads an immutable ``VerificationContext`` through the stages:
byte range -> envelope -> {digest lookup -> integrity, chain, signature}
-> verdict.  Stage failures are recovered locally and recorded as
detail messages; only the verdict leaves the pipeline.

Constraints:
- No module-level mutable state
- No stdout/stderr output
- Never raises on verification failures
"""

from __future__ import annotations

__all__ = [
    "VerificationContext",
    "VerificationTask",
    "run_pipeline",
    "verify_signature_field",
]

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import STATE_SIGNATURE_INVALID
from ..errors import (
    DigestNotFound,
    EnvelopeDecodeError,
    MalformedByteRange,
)
from .attributes import locate_digest
from .byterange import check_placeholder, signed_bytes
from .cert_info import signer_identity
from .chain import validate_chain
from .envelope import decode_envelope
from .integrity import check_integrity
from .signature import verify_signature
from .verdict import Verdict, VerdictHolder, aggregate

if TYPE_CHECKING:
    from collections.abc import Callable

    from .crypto import CryptoBackend
    from .field import SignatureField

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VerificationContext:
    """Everything one verification run needs, passed explicitly.

    Attributes:
        document: Complete document bytes.
        field: Signature field being verified.
        backend: Cryptography capability.
    """

    document: bytes
    field: SignatureField
    backend: CryptoBackend


def run_pipeline(ctx: VerificationContext) -> Verdict:
    """Run every stage for ``ctx`` and aggregate the verdict."""
    details: list[str] = []
    field_name = ctx.field.name

    # ── 1. Signed byte range ─────────────────────────────────────
    signed_data: bytes | None = None
    try:
        signed_data = signed_bytes(ctx.document, ctx.field.byte_range)
        details.append(f"ByteRange OK -- signed data: {len(signed_data)} bytes")
        check_placeholder(ctx.document, ctx.field.byte_range)
    except MalformedByteRange as e:
        details.append(f"ByteRange error: {e}")

    # ── 2. Envelope ──────────────────────────────────────────────
    try:
        envelope = decode_envelope(ctx.field.contents, ctx.backend)
    except EnvelopeDecodeError as e:
        _logger.debug("Envelope decoding failed: %s", e)
        details.append(f"Envelope error: {e}")
        return aggregate(
            False,
            False,
            False,
            signature_state=STATE_SIGNATURE_INVALID,
            details=details,
            field_name=field_name,
        )
    details.append(f"CMS envelope: {len(envelope.der)} bytes")

    signer = None
    if envelope.certificates:
        try:
            signer = signer_identity(envelope.certificates[0])
        except (ValueError, TypeError, KeyError) as e:
            _logger.debug("Cannot read signer identity: %s", e)
            details.append(f"Signer identity unavailable: {e}")
    if signer and signer.get("name"):
        details.append(f"Signer: {signer['name']}")

    # ── 3. Declared digest and integrity ─────────────────────────
    declared = None
    valid_integrity = False
    try:
        declared = locate_digest(envelope.authenticated_attributes)
    except DigestNotFound as e:
        details.append(f"Integrity not checked: {e}")

    if declared is not None and signed_data is not None:
        valid_integrity = check_integrity(declared, signed_data, ctx.backend)
        label = declared.algorithm.label
        if valid_integrity:
            details.append(f"Hash OK -- {label} matches messageDigest")
        else:
            details.append(f"Hash MISMATCH -- {label} differs from messageDigest")
    elif declared is not None:
        details.append("Integrity not checked: signed byte range unavailable")

    # ── 4. Certificate chain ─────────────────────────────────────
    chain = validate_chain(envelope.certificates, ctx.backend)
    details.append(chain.message)

    # ── 5. Signature ─────────────────────────────────────────────
    signature = verify_signature(
        envelope, declared.algorithm if declared is not None else None, ctx.backend
    )
    details.append(signature.message)

    verdict = aggregate(
        valid_integrity,
        chain.valid,
        signature.valid,
        signature_state=signature.state,
        details=details,
        signer=signer,
        field_name=field_name,
    )
    if verdict.valid:
        _logger.info("Valid signature%s", f" ({field_name})" if field_name else "")
    else:
        _logger.info("Invalid signature, failed checks: %s", ", ".join(verdict.reasons))
    return verdict


def verify_signature_field(
    field: SignatureField, document: bytes, backend: CryptoBackend
) -> Verdict:
    """Verify one signature field of ``document``.

    Args:
        field: Contents and ByteRange from the signature dictionary.
        document: Complete document bytes.
        backend: Cryptography capability, created once per process.

    Returns:
        The verdict; never raises on verification failure.
    """
    return run_pipeline(VerificationContext(document=document, field=field, backend=backend))


class VerificationTask:
    """Runs a verification on a daemon thread and hands over the verdict.

    The verdict is published (``holder``) and passed to ``on_done`` only
    once every check has finished.  After ``cancel()`` the run still
    completes but its result is discarded.  Failures are not retried.

    Args:
        field: Signature field to verify.
        document: Complete document bytes.
        backend: Cryptography capability.
        on_done: Called with the verdict.
        on_error: Called with an unexpected exception from the run.
        dispatch: Schedules a callback on the consumer's thread, e.g.
            ``lambda fn: root.after(0, fn)`` for tkinter.  Defaults to
            calling it directly on the worker thread.
    """

    def __init__(
        self,
        field: SignatureField,
        document: bytes,
        backend: CryptoBackend,
        on_done: Callable[[Verdict], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        dispatch: Callable[[Callable[[], None]], None] | None = None,
    ) -> None:
        self._ctx = VerificationContext(document=document, field=field, backend=backend)
        self._on_done = on_done
        self._on_error = on_error
        self._dispatch = dispatch
        self._cancelled = threading.Event()
        self._thread: threading.Thread | None = None
        self.holder = VerdictHolder()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def verdict(self) -> Verdict | None:
        return self.holder.get()

    def start(self) -> None:
        """Start the background run.

        Raises:
            RuntimeError: If the task was already started.
        """
        if self._thread is not None:
            raise RuntimeError("Verification task already started")
        self._thread = threading.Thread(target=self._worker, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        """Discard the result when it arrives."""
        self._cancelled.set()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the background run to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def _deliver(self, callback: Callable[[], None]) -> None:
        if self._dispatch is not None:
            self._dispatch(callback)
        else:
            callback()

    def _worker(self) -> None:
        try:
            verdict = run_pipeline(self._ctx)
        except Exception as e:
            _logger.debug("Verification task failed: %s", e, exc_info=True)
            if self._cancelled.is_set():
                return
            if self._on_error is not None:
                on_error = self._on_error
                self._deliver(lambda err=e: on_error(err))
            return

        if self._cancelled.is_set():
            _logger.debug("Verification finished after cancel, discarding verdict")
            return
        self.holder.publish(verdict)
        if self._on_done is not None:
            on_done = self._on_done
            self._deliver(lambda v=verdict: on_done(v))
