"""
Verdict formatting for display.

Turns verdicts into the three status fields a signature panel shows and
into structured per-signature entries for the CLI.  No printing here.
"""

from __future__ import annotations

__all__ = [
    "VerdictFields",
    "VerifyEntry",
    "VerifyResult",
    "format_certificate",
    "format_verdicts",
    "verdict_fields",
]

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import STATE_CERTIFICATE_INVALID, STATE_CERTIFICATE_VALID

if TYPE_CHECKING:
    from ..core.cert_info import CertificateDescription
    from ..core.verdict import Verdict


@dataclass(frozen=True, slots=True)
class VerdictFields:
    """The three text fields shown for a verified signature."""

    certification: str
    signature: str
    message: str


@dataclass(frozen=True, slots=True)
class VerifyEntry:
    """Structured display data for a single signature."""

    index: int
    total: int
    valid: bool
    signer_name: str
    fields: VerdictFields
    detail_lines: list[str]


@dataclass(frozen=True, slots=True)
class VerifyResult:
    """Structured display data for every verified signature in a document."""

    all_valid: bool
    total_count: int
    failed_count: int
    entries: list[VerifyEntry]


def verdict_fields(verdict: Verdict) -> VerdictFields:
    """Return certification status, signature status and overall message."""
    return VerdictFields(
        certification=(
            STATE_CERTIFICATE_VALID if verdict.valid_certificate else STATE_CERTIFICATE_INVALID
        ),
        signature=verdict.signature_state,
        message=verdict.message,
    )


def format_verdicts(verdicts: list[Verdict]) -> VerifyResult:
    """Convert verdicts into structured display data.

    Args:
        verdicts: Verdicts in field order.

    Returns:
        VerifyResult with one entry per verdict.
    """
    total = len(verdicts)
    entries: list[VerifyEntry] = []
    failed = 0

    for i, verdict in enumerate(verdicts):
        signer = verdict.signer
        signer_name = (signer.get("name") or "Unknown") if signer else "Unknown"
        if not verdict.valid:
            failed += 1

        detail_lines: list[str] = []
        for detail in verdict.details:
            detail_lines.extend(detail.split("\n"))

        entries.append(
            VerifyEntry(
                index=i,
                total=total,
                valid=verdict.valid,
                signer_name=signer_name,
                fields=verdict_fields(verdict),
                detail_lines=detail_lines,
            )
        )

    return VerifyResult(
        all_valid=(failed == 0),
        total_count=total,
        failed_count=failed,
        entries=entries,
    )


def format_certificate(description: CertificateDescription) -> list[str]:
    """Render a certificate description as indented text lines."""
    lines = ["Subject:"]
    lines.extend(f"  {attr['name']}: {attr['value']}" for attr in description["subject"])
    lines.append("Issuer:")
    lines.extend(f"  {attr['name']}: {attr['value']}" for attr in description["issuer"])
    lines.append(f"CA:      {'yes' if description['is_ca'] else 'no'}")
    lines.append(f"Serial:  {description['serial']}")
    lines.append(f"Valid:   {description['not_before']} - {description['not_after']}")
    return lines
