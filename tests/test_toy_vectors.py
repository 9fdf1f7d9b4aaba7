"""Hand-checkable vectors over the toy group of order 23 (g = 5)."""

import pytest
from charm.toolbox.pairinggroup import G1, GT, ZR

from kuibe import core
from kuibe.engine import ToyPairingEngine
from kuibe.errors import DegenerateParameter


def test_setup_with_fixed_generator():
    engine = ToyPairingEngine(23)
    g = engine.element(G1, 5)
    res = core.setup(engine, g=g)
    p = res.params

    assert p.g == g
    assert p.g1 == g ** res.msk.alpha
    for elem in (p.g2, p.g3, p.U, p.V):
        assert not engine.is_identity(elem)
    assert "alpha" not in repr(p)
    assert "alpha=" not in repr(res.msk)


def test_keygen_vector(toy):
    engine = toy.params.engine
    alpha = int(toy.msk.alpha)
    key = core.keygen(toy.params, toy.msk, 7, blinding=(2, 5))

    # W = 6*7 + 9 = 5
    assert key.sk1 == engine.element(G1, 4 * alpha + 5 * 2)       # 22
    assert key.sk2 == engine.element(G1, -5 * 2)                  # 13
    assert key.sk3 == engine.element(G1, 2 * alpha + 5 * 5)       # 8
    assert key.sk4 == engine.element(G1, -5 * 5)                  # 21
    assert key.version == 1


def test_update_matches_keygen_with_summed_exponents(toy):
    key = core.keygen(toy.params, toy.msk, 7, blinding=(2, 5))
    updated = core.key_update(toy.params, key, rerandomizers=(1, 4))
    direct = core.keygen(toy.params, toy.msk, 7, blinding=(3, 9))

    assert updated.components() == direct.components()
    assert updated.version == 2


def test_encrypt_decrypt_vector(toy):
    params = toy.params
    engine = params.engine
    key = core.keygen(params, toy.msk, 7, blinding=(2, 5))
    M = engine.element(GT, 11)
    s = 4

    ct = core.encrypt(params, 7, M, b"eta", s=s)
    assert ct.c2 == engine.element(G1, 5 * s)
    assert ct.c3 == engine.element(G1, 5 * s)      # W = 5

    D = core.encrypt_side_value(params, ct, s)
    assert core.key_side_value(params, ct, key) == D

    k1, k2 = params.oracles.KDF(D)
    assert int(ct.theta) == (s * int(k1) + int(k2)) % engine.order

    res = core.decrypt(params, ct, key)
    assert res.ok
    assert res.message == M


def test_every_identity_decrypts(toy, toy_bad_id):
    params = toy.params
    engine = params.engine
    for ident in range(1, engine.order):
        if ident == toy_bad_id:
            continue
        key = core.key_update(params, core.keygen(params, toy.msk, ident))
        M = engine.random(GT)
        ct = core.encrypt(params, ident, M, "ctx")
        assert core.decrypt(params, ct, key).unwrap() == M


def test_identity_zero_rejected(toy):
    M = toy.params.engine.element(GT, 1)
    with pytest.raises(DegenerateParameter):
        core.keygen(toy.params, toy.msk, 0)
    with pytest.raises(DegenerateParameter):
        core.encrypt(toy.params, 0, M)
    with pytest.raises(DegenerateParameter):
        core.encrypt(toy.params, toy.params.engine.order, M)   # p == 0 in ZR


def test_identity_with_trivial_binding_rejected(toy, toy_bad_id):
    params = toy.params
    engine = params.engine
    assert engine.is_identity(params.binding(engine.scalar(toy_bad_id)))

    with pytest.raises(DegenerateParameter):
        core.keygen(params, toy.msk, toy_bad_id)
    with pytest.raises(DegenerateParameter):
        core.encrypt(params, toy_bad_id, engine.element(GT, 3))

    good = core.keygen(params, toy.msk, 7)
    forged = core.UserKey(toy_bad_id, *good.components())
    with pytest.raises(DegenerateParameter):
        core.key_update(params, forged)


def test_degenerate_generator_rejected():
    engine = ToyPairingEngine(23)
    with pytest.raises(DegenerateParameter):
        core.setup(engine, g=engine.identity(G1))


def test_toy_pairing_is_bilinear():
    engine = ToyPairingEngine(23)
    a, b = engine.element(G1, 5), engine.element(G1, 7)
    x, y = engine.scalar(3), engine.scalar(11)
    assert engine.pair(a ** x, b ** y) == engine.pair(a, b) ** (x * y)
    assert engine.random(ZR).value != 0


def test_toy_decoding_rejects_non_elements():
    engine = ToyPairingEngine(23)
    assert engine.deserialize(b"1:22") == engine.element(G1, 22)
    for bad in (b"0:\xb5", b"9:4", b"1:23", b"1", b"x:y"):
        with pytest.raises(ValueError):
            engine.deserialize(bad)


def test_verify_key_at_every_version(toy):
    params = toy.params
    key = core.keygen(params, toy.msk, 7)
    for _ in range(3):
        assert core.verify_key(params, key)
        key = core.key_update(params, key)

    # same identity, different alpha
    other = core.keygen(params, core.MasterSecret(alpha=params.engine.scalar(5)), 7)
    assert not core.verify_key(params, other)
    # components of a valid key for 7 relabeled as 8 (W = 11 instead of 5)
    fixed = core.keygen(params, toy.msk, 7, blinding=(2, 5))
    assert not core.verify_key(params, core.UserKey(8, *fixed.components()))
