"""Signature checking and certificate inspection subcommands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ...api import verify_pdf
from ...core.cert_info import describe_certificate
from ...core.envelope import decode_envelope
from ...errors import EnvelopeDecodeError, SigcheckError
from ...pdf import find_signature_fields
from ..display import format_certificate, format_verdicts

if TYPE_CHECKING:
    import argparse

    from ...core.crypto import CryptoBackend

_BYTES_PER_KB = 1024


def _read_pdf(path_arg: str) -> tuple[Path, bytes]:
    pdf_path = Path(path_arg)
    if not pdf_path.exists():
        print(f"Error: {pdf_path} not found", file=sys.stderr)
        sys.exit(1)
    try:
        return pdf_path, pdf_path.read_bytes()
    except OSError as e:
        print(f"Error: cannot read {pdf_path}: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_check(args: argparse.Namespace, backend: CryptoBackend) -> None:
    """Verify the last (or every) signature of a PDF and print the verdicts."""
    pdf_path, pdf_bytes = _read_pdf(args.pdf)
    print(f"Checking {pdf_path.name} ({len(pdf_bytes) / _BYTES_PER_KB:.1f} KB)...")

    try:
        verdicts = verify_pdf(pdf_bytes, backend, all_signatures=args.all)
    except SigcheckError as e:
        print(f"  ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    vr = format_verdicts(verdicts)
    for entry in vr.entries:
        if vr.total_count > 1:
            print(f"\n  Signature {entry.index + 1}/{entry.total} ({entry.signer_name}):")
            indent = "    "
        else:
            print(f"  Signer: {entry.signer_name}")
            indent = "  "

        print(f"{indent}Certificate: {entry.fields.certification}")
        print(f"{indent}Signature:   {entry.fields.signature}")
        print(f"{indent}{entry.fields.message}")
        if args.verbose:
            for line in entry.detail_lines:
                print(f"{indent}  {line}")

    print()
    if vr.all_valid:
        sig_word = "signature" if vr.total_count == 1 else f"all {vr.total_count} signatures"
        print(f"  RESULT: {sig_word.capitalize()} VALID")
    else:
        print(f"  RESULT: {vr.failed_count} of {vr.total_count} signature(s) FAILED")
        sys.exit(1)


def cmd_info(args: argparse.Namespace, backend: CryptoBackend) -> None:
    """Show the certificates embedded in each signature of a PDF."""
    pdf_path, pdf_bytes = _read_pdf(args.pdf)

    try:
        fields = find_signature_fields(pdf_bytes)
    except SigcheckError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"{pdf_path.name}: {len(fields)} signature field(s)")
    for field in fields:
        print(f"\nField: {field.name or '(unnamed)'}")
        try:
            envelope = decode_envelope(field.contents, backend)
        except EnvelopeDecodeError as e:
            print(f"  Error parsing signature: {e}", file=sys.stderr)
            continue

        certs = envelope.certificates
        if not certs:
            print("  No certificates found in signature.")
            continue

        print(f"  Certificates ({len(certs)}):")
        for i, cert in enumerate(certs):
            print(f"\n  [{i + 1}]")
            try:
                description = describe_certificate(cert)
            except (ValueError, TypeError, KeyError) as e:
                print(f"  Error reading certificate: {e}", file=sys.stderr)
                continue
            for line in format_certificate(description):
                print(f"  {line}")
