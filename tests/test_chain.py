"""Tests for sigcheck.core.chain -- orientation and validation."""

from __future__ import annotations

import datetime
from unittest.mock import Mock

import pytest

from sigcheck.core.chain import ca_positions, orient_chain, validate_chain
from sigcheck.core.crypto import DefaultCryptoBackend
from sigcheck.errors import ChainBuildError


def _dumps(certs) -> list[bytes]:
    return [c.dump() for c in certs]


# ── orient_chain ──────────────────────────────────────────────────


def test_leaf_first_kept(pki):
    oriented = orient_chain([pki.leaf, pki.root])
    assert oriented.anchor_index == 1
    assert oriented.anchor.dump() == pki.root.dump()
    assert _dumps(oriented.chain) == _dumps([pki.leaf, pki.root])


def test_root_first_reversed(pki):
    oriented = orient_chain([pki.root, pki.leaf])
    assert oriented.anchor_index == 0
    assert oriented.anchor.dump() == pki.root.dump()
    assert _dumps(oriented.chain) == _dumps([pki.leaf, pki.root])


def test_three_level_root_first_reversed(pki):
    oriented = orient_chain([pki.root, pki.intermediate, pki.sub_leaf])
    assert oriented.anchor_index == 0
    assert _dumps(oriented.chain) == _dumps([pki.sub_leaf, pki.intermediate, pki.root])


def test_three_level_leaf_first_kept(pki):
    oriented = orient_chain([pki.sub_leaf, pki.intermediate, pki.root])
    assert oriented.anchor_index == 2
    assert ca_positions(oriented.chain) == [1, 2]


def test_single_self_signed_root(pki):
    oriented = orient_chain([pki.root])
    assert oriented.anchor_index == 0
    assert len(oriented.chain) == 1


def test_empty_chain_rejected():
    with pytest.raises(ChainBuildError, match="no certificates"):
        orient_chain([])


def test_no_ca_rejected(pki):
    with pytest.raises(ChainBuildError, match="No CA certificate"):
        orient_chain([pki.leaf])


def test_ca_at_both_ends_rejected(pki):
    with pytest.raises(ChainBuildError, match="both the first and the last"):
        orient_chain([pki.root, pki.leaf, pki.intermediate])


def test_too_many_ca_rejected(pki):
    with pytest.raises(ChainBuildError, match="3 CA certificates"):
        orient_chain([pki.leaf, pki.intermediate, pki.root, pki.root])


# ── validate_chain ────────────────────────────────────────────────


def test_validate_passes_oriented_chain_to_backend(pki):
    backend = Mock()
    outcome = validate_chain([pki.root, pki.leaf], backend)
    assert outcome.valid is True
    chain, anchor = backend.verify_chain.call_args.args
    assert _dumps(chain) == _dumps([pki.leaf, pki.root])
    assert anchor.dump() == pki.root.dump()


def test_validate_backend_failure_is_invalid(pki):
    backend = Mock()
    backend.verify_chain.side_effect = ChainBuildError("path broken")
    outcome = validate_chain([pki.leaf, pki.root], backend)
    assert outcome.valid is False
    assert "path broken" in outcome.message


def test_validate_orientation_failure_skips_backend(pki):
    backend = Mock()
    outcome = validate_chain([pki.leaf], backend)
    assert outcome.valid is False
    backend.verify_chain.assert_not_called()


@pytest.mark.parametrize(
    "order",
    [
        ("leaf", "root"),
        ("root", "leaf"),
        ("sub_leaf", "intermediate", "root"),
        ("root", "intermediate", "sub_leaf"),
    ],
)
def test_real_backend_accepts_both_orientations(pki, backend, order):
    certs = [getattr(pki, name) for name in order]
    outcome = validate_chain(certs, backend)
    assert outcome.valid is True, outcome.message


def test_real_backend_rejects_wrong_anchor(pki, backend):
    # sub_leaf is issued by the intermediate, not by the root directly
    outcome = validate_chain([pki.sub_leaf, pki.root], backend)
    assert outcome.valid is False


def test_real_backend_rejects_expired_at_validation_time(pki):
    later = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(days=4000)
    outcome = validate_chain([pki.leaf, pki.root], DefaultCryptoBackend(validation_time=later))
    assert outcome.valid is False


def test_malformed_extensions_become_chain_error(pki, malformed_root):
    with pytest.raises(ChainBuildError, match="malformed extensions"):
        ca_positions([pki.leaf, malformed_root])


def test_validate_malformed_extensions_is_invalid(pki, malformed_root):
    backend = Mock()
    outcome = validate_chain([pki.leaf, malformed_root], backend)
    assert outcome.valid is False
    assert "malformed extensions" in outcome.message
    backend.verify_chain.assert_not_called()
