"""
Application-wide constants for Sigcheck.

Digest sizes, envelope framing, status strings and environment variable
names are centralized here for easy maintenance and configuration.
"""

from __future__ import annotations

import importlib.metadata

try:
    __version__ = importlib.metadata.version("sigcheck")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "BYTERANGE_LEN",
    "ENV_LOG_LEVEL",
    "ENV_VALIDATION_TIME",
    "MESSAGE_INVALID",
    "MESSAGE_VALID",
    "PDF_MAGIC",
    "PEM_LABEL",
    "SHA1_DIGEST_SIZE",
    "SHA256_DIGEST_SIZE",
    "STATE_CERTIFICATE_INVALID",
    "STATE_CERTIFICATE_VALID",
    "STATE_SIGNATURE_INVALID",
    "STATE_SIGNATURE_VALID",
    "__version__",
]

# ── Digest sizes (bytes) ──────────────────────────────────────────────

SHA1_DIGEST_SIZE = 20
SHA256_DIGEST_SIZE = 32


# ── Envelope framing ─────────────────────────────────────────────────

# PEM armor label accepted by the CMS loader
PEM_LABEL = "PKCS7"


# ── Document structure ───────────────────────────────────────────────

# Number of integers in a /ByteRange array
BYTERANGE_LEN = 4

# PDF file magic bytes
PDF_MAGIC = b"%PDF-"


# ── Status strings shown to the user ─────────────────────────────────

STATE_SIGNATURE_VALID = "Valid Signature"
STATE_SIGNATURE_INVALID = "Invalid Signature!"
STATE_CERTIFICATE_VALID = "Valid Certificate!"
STATE_CERTIFICATE_INVALID = "Invalid Certificate!"
MESSAGE_VALID = "The authentication on this document is valid!"
MESSAGE_INVALID = "The authentication on this document is invalid!"


# ── Environment variable names ──────────────────────────────────────

ENV_VALIDATION_TIME = "SIGCHECK_VALIDATION_TIME"
ENV_LOG_LEVEL = "SIGCHECK_LOG_LEVEL"
