"""Shared test fixtures for Sigcheck test suite.

Certificates and keys are generated once per session with ``cryptography``;
CMS envelopes are assembled with ``asn1crypto`` the way PDF signers do.
"""

from __future__ import annotations

import datetime
import hashlib
import io
import re
from dataclasses import dataclass
from unittest.mock import patch

import pytest
from asn1crypto import algos, cms, core
from asn1crypto import x509 as asn1_x509
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

from sigcheck.core.crypto import DefaultCryptoBackend
from sigcheck.core.field import SignatureField

# Bytes reserved for the CMS blob inside a signature placeholder
PLACEHOLDER_SIZE = 8192

SIGNING_TIME = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)

_HASHES = {"sha1": hashes.SHA1, "sha256": hashes.SHA256}


@dataclass(frozen=True)
class Pki:
    """Keys and asn1crypto certificates of a small test hierarchy.

    ``leaf`` is issued by ``root``; ``sub_leaf`` by ``intermediate``,
    which is issued by ``root``.
    """

    root_key: rsa.RSAPrivateKey
    leaf_key: rsa.RSAPrivateKey
    sub_leaf_key: rsa.RSAPrivateKey
    root: asn1_x509.Certificate
    intermediate: asn1_x509.Certificate
    leaf: asn1_x509.Certificate
    sub_leaf: asn1_x509.Certificate


def _to_asn1(cert: x509.Certificate) -> asn1_x509.Certificate:
    return asn1_x509.Certificate.load(cert.public_bytes(serialization.Encoding.DER))


def _ca_extensions(builder: x509.CertificateBuilder, key: rsa.RSAPrivateKey):
    return (
        builder.add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .add_extension(
            x509.KeyUsage(
                digital_signature=False,
                content_commitment=False,
                key_encipherment=False,
                data_encipherment=False,
                key_agreement=False,
                key_cert_sign=True,
                crl_sign=True,
                encipher_only=False,
                decipher_only=False,
            ),
            critical=True,
        )
        .add_extension(
            x509.SubjectKeyIdentifier.from_public_key(key.public_key()), critical=False
        )
    )


def _builder(
    subject: x509.Name, issuer: x509.Name, key: rsa.RSAPrivateKey, serial: int, days: int
):
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(serial)
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=days))
    )


@pytest.fixture(scope="session")
def pki() -> Pki:
    """Root CA, intermediate CA and two end-entity certificates.

    The root carries more subject attributes and extensions than the
    leaf, so the leaf always encodes first inside a DER SET OF.
    """
    root_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    inter_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    leaf_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    sub_leaf_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    root_name = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Sigcheck Test Authority"),
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, "Certification Services"),
            x509.NameAttribute(NameOID.COMMON_NAME, "Sigcheck Test Root CA"),
        ]
    )
    inter_name = x509.Name(
        [
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Sigcheck Test Authority"),
            x509.NameAttribute(NameOID.COMMON_NAME, "Sigcheck Test Issuing CA"),
        ]
    )
    leaf_name = x509.Name(
        [
            x509.NameAttribute(NameOID.COMMON_NAME, "Test Signer"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Sigcheck Test"),
            x509.NameAttribute(NameOID.EMAIL_ADDRESS, "signer@example.com"),
        ]
    )
    sub_leaf_name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "Second Signer")])

    root = _ca_extensions(_builder(root_name, root_name, root_key, 1000, 3650), root_key).sign(
        root_key, hashes.SHA256()
    )
    intermediate = _ca_extensions(
        _builder(inter_name, root_name, inter_key, 1001, 1825), inter_key
    ).sign(root_key, hashes.SHA256())
    leaf = _builder(leaf_name, root_name, leaf_key, 1002, 365).sign(root_key, hashes.SHA256())
    sub_leaf = _builder(sub_leaf_name, inter_name, sub_leaf_key, 1003, 365).sign(
        inter_key, hashes.SHA256()
    )

    return Pki(
        root_key=root_key,
        leaf_key=leaf_key,
        sub_leaf_key=sub_leaf_key,
        root=_to_asn1(root),
        intermediate=_to_asn1(intermediate),
        leaf=_to_asn1(leaf),
        sub_leaf=_to_asn1(sub_leaf),
    )


def _attr(attr_type: str, value) -> cms.CMSAttribute:
    return cms.CMSAttribute({"type": cms.CMSAttributeType(attr_type), "values": (value,)})


def build_cms(
    data: bytes,
    key: rsa.RSAPrivateKey,
    certificates: list[asn1_x509.Certificate],
    *,
    digest_algorithm: str = "sha256",
    message_digest: bytes | None = None,
    flip_digest: bool = False,
    corrupt_signature: bool = False,
) -> bytes:
    """Assemble a detached CMS SignedData over ``data``, signed with ``key``.

    ``flip_digest`` declares the real digest of ``data`` with its first
    byte flipped.
    """
    if message_digest is None:
        message_digest = hashlib.new(digest_algorithm, data).digest()
        if flip_digest:
            message_digest = bytes([message_digest[0] ^ 0x01]) + message_digest[1:]

    signed_attrs = cms.CMSAttributes(
        [
            _attr("content_type", cms.ContentType("data")),
            _attr("signing_time", cms.Time({"utc_time": core.UTCTime(SIGNING_TIME)})),
            _attr("message_digest", core.OctetString(message_digest)),
        ]
    )
    signature = key.sign(signed_attrs.dump(), padding.PKCS1v15(), _HASHES[digest_algorithm]())
    if corrupt_signature:
        signature = signature[:-1] + bytes([signature[-1] ^ 0x01])

    signer_cert = certificates[0]
    signer_info = cms.SignerInfo(
        {
            "version": "v1",
            "sid": cms.SignerIdentifier(
                {
                    "issuer_and_serial_number": cms.IssuerAndSerialNumber(
                        {"issuer": signer_cert.issuer, "serial_number": signer_cert.serial_number}
                    )
                }
            ),
            "digest_algorithm": algos.DigestAlgorithm({"algorithm": digest_algorithm}),
            "signature_algorithm": algos.SignedDigestAlgorithm(
                {"algorithm": "rsassa_pkcs1v15"}
            ),
            "signed_attrs": signed_attrs,
            "signature": signature,
        }
    )
    signed_data = cms.SignedData(
        {
            "version": "v1",
            "digest_algorithms": cms.DigestAlgorithms(
                (algos.DigestAlgorithm({"algorithm": digest_algorithm}),)
            ),
            "encap_content_info": {"content_type": "data"},
            "certificates": [
                cms.CertificateChoices(name="certificate", value=cert) for cert in certificates
            ],
            "signer_infos": [signer_info],
        }
    )
    return cms.ContentInfo(
        {"content_type": cms.ContentType("signed_data"), "content": signed_data}
    ).dump()


@dataclass(frozen=True)
class SignedBuffer:
    """A document buffer with one signature placeholder filled in."""

    document: bytes
    byte_range: tuple[int, int, int, int]
    contents: str

    @property
    def field(self) -> SignatureField:
        return SignatureField(contents=self.contents, byte_range=self.byte_range, name="Sig1")


_PREFIX = b"%PDF-1.7\n% sigcheck test document\n<< /Type /Sig /Contents "
_SUFFIX = b" >>\nText covered by the second span.\n%%EOF\n"


def build_signed_buffer(pki: Pki, certificates=None, **cms_options) -> SignedBuffer:
    """Sign a small buffer laid out like a PDF signature dictionary."""
    certs = certificates if certificates is not None else [pki.leaf, pki.root]
    key = cms_options.pop("key", pki.leaf_key)
    placeholder_len = 2 * PLACEHOLDER_SIZE + 2
    byte_range = (0, len(_PREFIX), len(_PREFIX) + placeholder_len, len(_SUFFIX))

    der = build_cms(_PREFIX + _SUFFIX, key, certs, **cms_options)
    hex_contents = der.hex().upper().ljust(2 * PLACEHOLDER_SIZE, "0")
    document = _PREFIX + b"<" + hex_contents.encode("ascii") + b">" + _SUFFIX
    return SignedBuffer(document=document, byte_range=byte_range, contents=hex_contents)


@pytest.fixture
def signed_buffer_factory(pki):
    """Build signed buffers with custom CMS options."""

    def factory(**options) -> SignedBuffer:
        return build_signed_buffer(pki, **options)

    return factory


@pytest.fixture
def signed_buffer(pki) -> SignedBuffer:
    return build_signed_buffer(pki)


@pytest.fixture(scope="session")
def backend() -> DefaultCryptoBackend:
    return DefaultCryptoBackend()


# ── PDF documents ────────────────────────────────────────────────────

# Wide enough for any real offset, so the array can be rewritten in place
_BYTERANGE_PLACEHOLDER = [0, 9999999999, 9999999999, 9999999999]
_BYTERANGE_PATTERN = re.compile(rb"/ByteRange\s*\[[^\]]*\]")
_CONTENTS_PATTERN = re.compile(rb"/Contents\s*(<0+>)")


def _save(pdf) -> bytes:
    import pikepdf

    buf = io.BytesIO()
    pdf.save(
        buf,
        static_id=True,
        compress_streams=False,
        object_stream_mode=pikepdf.ObjectStreamMode.disable,
    )
    return buf.getvalue()


def _sig_value(pdf, contents: bytes | None = None):
    import pikepdf

    return pdf.make_indirect(
        pikepdf.Dictionary(
            Type=pikepdf.Name.Sig,
            Filter=pikepdf.Name("/Adobe.PPKLite"),
            SubFilter=pikepdf.Name("/adbe.pkcs7.detached"),
            ByteRange=pikepdf.Array(_BYTERANGE_PLACEHOLDER),
            Contents=pikepdf.String(
                contents if contents is not None else b"\x00" * PLACEHOLDER_SIZE
            ),
        )
    )


def build_signed_pdf(pki: Pki, **cms_options) -> bytes:
    """Create a one-page PDF with a filled /Sig field named ``Signature1``."""
    import pikepdf

    pdf = pikepdf.Pdf.new()
    pdf.add_blank_page(page_size=(612, 792))
    field = pdf.make_indirect(
        pikepdf.Dictionary(
            FT=pikepdf.Name.Sig,
            T=pikepdf.String("Signature1"),
            V=_sig_value(pdf),
        )
    )
    pdf.Root.AcroForm = pikepdf.Dictionary(Fields=pikepdf.Array([field]), SigFlags=3)
    data = bytearray(_save(pdf))

    contents = _CONTENTS_PATTERN.search(data)
    assert contents is not None
    gap_start, gap_end = contents.span(1)
    byte_range = [0, gap_start, gap_end, len(data) - gap_end]

    range_match = _BYTERANGE_PATTERN.search(data)
    assert range_match is not None
    width = range_match.end() - range_match.start()
    rendered = f"/ByteRange [{' '.join(str(v) for v in byte_range)}]".encode("ascii")
    data[range_match.start() : range_match.end()] = rendered.ljust(width)

    signed = bytes(data[:gap_start] + data[gap_end:])
    key = cms_options.pop("key", pki.leaf_key)
    der = build_cms(signed, key, [pki.leaf, pki.root], **cms_options)
    hex_contents = der.hex().ljust(gap_end - gap_start - 2, "0").encode("ascii")
    data[gap_start:gap_end] = b"<" + hex_contents + b">"
    return bytes(data)


@pytest.fixture
def signed_pdf(pki) -> bytes:
    return build_signed_pdf(pki)


@pytest.fixture
def tampered_pdf(pki) -> bytes:
    """Signed PDF whose declared digest has one byte flipped."""
    return build_signed_pdf(pki, flip_digest=True)


@pytest.fixture
def pdf_factory():
    """Build a PDF from a list of field dictionaries created by a callback.

    The callback receives the ``pikepdf.Pdf`` and returns the list of
    top-level field objects for /AcroForm /Fields.
    """
    import pikepdf

    def factory(make_fields=None) -> bytes:
        pdf = pikepdf.Pdf.new()
        pdf.add_blank_page(page_size=(612, 792))
        if make_fields is not None:
            pdf.Root.AcroForm = pikepdf.Dictionary(Fields=pikepdf.Array(make_fields(pdf)))
        return _save(pdf)

    return factory


@pytest.fixture
def sig_value():
    """Return a helper creating an unfilled signature dictionary."""
    return _sig_value


@pytest.fixture
def config_dir(tmp_path):
    """Redirect the config file to a temp directory."""
    config_file = tmp_path / "config.json"
    with (
        patch("sigcheck.config._storage.CONFIG_DIR", tmp_path),
        patch("sigcheck.config._storage.CONFIG_FILE", config_file),
    ):
        yield tmp_path, config_file


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host environment settings out of the tests."""
    monkeypatch.delenv("SIGCHECK_VALIDATION_TIME", raising=False)
    monkeypatch.delenv("SIGCHECK_LOG_LEVEL", raising=False)


# basicConstraints value for cA=TRUE without pathLenConstraint
_BASIC_CONSTRAINTS_CA = b"\x30\x03\x01\x01\xff"


@pytest.fixture(scope="session")
def malformed_root(pki) -> asn1_x509.Certificate:
    """Root CA whose basicConstraints value is encoded as an INTEGER.

    asn1crypto parses extensions lazily, so loading succeeds and the
    error only surfaces when the CA flag is read.
    """
    der = pki.root.dump()
    assert der.count(_BASIC_CONSTRAINTS_CA) == 1
    return asn1_x509.Certificate.load(
        der.replace(_BASIC_CONSTRAINTS_CA, b"\x02" + _BASIC_CONSTRAINTS_CA[1:])
    )
