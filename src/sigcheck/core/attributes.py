"""
Authenticated-attribute tree and message-digest lookup.

The signed attributes of a CMS SignerInfo are turned into a tree of
``Scalar`` (primitive encodings) and ``Nested`` (constructed encodings)
nodes once, at parse time.  The declared document digest is the first
scalar, in encoding order, whose length matches a supported algorithm.
"""

from __future__ import annotations

__all__ = [
    "AttributeNode",
    "DigestAlgorithm",
    "DigestResult",
    "Nested",
    "Scalar",
    "build_attribute_tree",
    "digest_algorithm_for_length",
    "iter_scalars",
    "locate_digest",
]

import enum
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from ..constants import SHA1_DIGEST_SIZE, SHA256_DIGEST_SIZE
from ..errors import DigestNotFound, UnsupportedDigestAlgorithm
from .asn1 import iter_tlv

_logger = logging.getLogger(__name__)

# Nesting depth beyond which an attribute set is rejected as malformed
_MAX_DEPTH = 32


class DigestAlgorithm(str, enum.Enum):
    """Digest algorithms recognized by value length.  Values are hashlib names."""

    SHA1 = "sha1"
    SHA256 = "sha256"

    @property
    def digest_size(self) -> int:
        return SHA1_DIGEST_SIZE if self is DigestAlgorithm.SHA1 else SHA256_DIGEST_SIZE

    @property
    def hex_length(self) -> int:
        return self.digest_size * 2

    @property
    def label(self) -> str:
        """Display name, e.g. ``SHA-256``."""
        return f"SHA-{self.value[3:]}"


@dataclass(frozen=True, slots=True)
class Scalar:
    """Primitive attribute value (raw content octets)."""

    value: bytes


@dataclass(frozen=True, slots=True)
class Nested:
    """Constructed attribute value (SEQUENCE, SET, or tagged wrapper)."""

    children: tuple[AttributeNode, ...]


AttributeNode = Scalar | Nested


@dataclass(frozen=True, slots=True)
class DigestResult:
    """Declared message digest recovered from the signed attributes."""

    algorithm: DigestAlgorithm
    hex_value: str


def build_attribute_tree(der: bytes) -> AttributeNode:
    """Turn a DER encoding into an attribute tree, preserving element order.

    Args:
        der: A single DER element, typically the signed attributes SET.

    Raises:
        ValueError: If the encoding is truncated, has trailing data,
            or nests deeper than supported.
    """
    elements = list(iter_tlv(der))
    if len(elements) != 1:
        raise ValueError(f"Expected a single ASN.1 element, found {len(elements)}")
    constructed, contents = elements[0]
    return _build_node(constructed, contents, 0)


def _build_node(constructed: bool, contents: bytes, depth: int) -> AttributeNode:
    if not constructed:
        return Scalar(contents)
    if depth >= _MAX_DEPTH:
        raise ValueError(f"Attribute nesting exceeds {_MAX_DEPTH} levels")
    return Nested(
        tuple(
            _build_node(child_constructed, child, depth + 1)
            for child_constructed, child in iter_tlv(contents)
        )
    )


def iter_scalars(node: AttributeNode) -> Iterator[bytes]:
    """Yield scalar values depth-first, in encoding order."""
    if isinstance(node, Scalar):
        yield node.value
        return
    for child in node.children:
        yield from iter_scalars(child)


def digest_algorithm_for_length(length: int) -> DigestAlgorithm:
    """Infer the digest algorithm from a digest value length in bytes.

    Raises:
        UnsupportedDigestAlgorithm: If the length is neither 20 nor 32.
    """
    if length == SHA256_DIGEST_SIZE:
        return DigestAlgorithm.SHA256
    if length == SHA1_DIGEST_SIZE:
        return DigestAlgorithm.SHA1
    raise UnsupportedDigestAlgorithm(
        f"No supported digest algorithm produces {length}-byte values", length=length
    )


def locate_digest(root: AttributeNode) -> DigestResult:
    """Find the declared message digest in an attribute tree.

    The first scalar of digest length wins.  Other attributes
    (content type OID, signing time) never have 20 or 32 content octets
    in practice, but order still matters if one does.

    Raises:
        DigestNotFound: If no scalar has a supported digest length.
    """
    for value in iter_scalars(root):
        try:
            algorithm = digest_algorithm_for_length(len(value))
        except UnsupportedDigestAlgorithm:
            continue
        _logger.debug("Declared digest: %s %s", algorithm.label, value.hex())
        return DigestResult(algorithm=algorithm, hex_value=value.hex())
    raise DigestNotFound("No signed attribute holds a SHA-1 or SHA-256 digest value")
