# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Certificate information for display: signer identity and attribute listings.

Pure data-parsing helpers over asn1crypto certificates.  Nothing here
affects the verdict.
"""

from __future__ import annotations

__all__ = [
    "CertificateDescription",
    "NameAttribute",
    "common_name",
    "describe_certificate",
    "signer_identity",
]

import datetime
import logging
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from asn1crypto import x509 as asn1_x509

_logger = logging.getLogger(__name__)

# OIDs for common subject fields
_OID_CN = "2.5.4.3"
_OID_EMAIL = "1.2.840.113549.1.9.1"
_OID_ORG = "2.5.4.10"


class NameAttribute(TypedDict):
    """One attribute of a distinguished name."""

    oid: str
    name: str
    value: str


class CertificateDescription(TypedDict):
    """Read-only view of an embedded certificate."""

    subject: list[NameAttribute]
    issuer: list[NameAttribute]
    is_ca: bool
    serial: int
    not_before: datetime.datetime | None
    not_after: datetime.datetime | None


def _name_attributes(name: asn1_x509.Name) -> list[NameAttribute]:
    attributes: list[NameAttribute] = []
    for rdn in name.chosen:
        for attr in rdn:
            value = attr["value"].native
            attributes.append(
                {
                    "oid": attr["type"].dotted,
                    "name": attr["type"].human_friendly,
                    "value": value if isinstance(value, str) else str(value),
                }
            )
    return attributes


def common_name(cert: asn1_x509.Certificate) -> str | None:
    """Subject CN of ``cert``, or None if it has none."""
    for attr in _name_attributes(cert.subject):
        if attr["oid"] == _OID_CN:
            return attr["value"]
    return None


def describe_certificate(cert: asn1_x509.Certificate) -> CertificateDescription:
    """List subject and issuer attributes, CA flag, serial and validity."""
    validity = cert["tbs_certificate"]["validity"]
    return {
        "subject": _name_attributes(cert.subject),
        "issuer": _name_attributes(cert.issuer),
        "is_ca": bool(cert.ca),
        "serial": cert.serial_number,
        "not_before": validity["not_before"].native,
        "not_after": validity["not_after"].native,
    }


def signer_identity(cert: asn1_x509.Certificate) -> dict[str, str | None]:
    """Extract CN, email, org and dn from the signer certificate.

    Also logs warnings for expired or not-yet-valid certificates.
    """
    try:
        not_before = cert.not_valid_before
        not_after = cert.not_valid_after
        now = datetime.datetime.now(datetime.timezone.utc)
        if not_before and now < not_before:
            _logger.warning("Certificate is not yet valid (notBefore: %s)", not_before)
        elif not_after and now > not_after:
            _logger.warning("Certificate has expired (notAfter: %s)", not_after)
    except (KeyError, TypeError, ValueError) as e:
        _logger.debug("Cannot check certificate validity dates: %s", e)

    fields: dict[str, str | None] = {"name": None, "email": None, "organization": None}
    oid_map = {_OID_CN: "name", _OID_EMAIL: "email", _OID_ORG: "organization"}
    for attr in _name_attributes(cert.subject):
        key = oid_map.get(attr["oid"])
        if key is not None:
            fields[key] = attr["value"]

    fields["dn"] = cert.subject.human_friendly
    return fields
