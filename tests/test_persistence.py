import base64
import dataclasses
import json

import pytest
from charm.toolbox.pairinggroup import GT

from kuibe import core, hybrid, serialize
from kuibe.engine import CharmPairingEngine, ToyPairingEngine, engine_for
from kuibe.errors import IntegrityFailure
from kuibe.object_store import FileObjectStore, new_object_id

ALICE = "alice@example.com"


def test_reload_everything_and_decrypt(ss512, tmp_path):
    params, msk = ss512.params, ss512.msk
    key = core.keygen(params, msk, ALICE)
    m = params.engine.random(GT)
    ct = core.encrypt(params, ALICE, m, b"ctx")

    serialize.save_json(str(tmp_path / "params.json"), serialize.dump_params(params))
    serialize.save_json(str(tmp_path / "msk.json"), serialize.dump_msk(params, msk))
    serialize.save_json(str(tmp_path / "alice.json"), serialize.dump_user_key(params, key))
    serialize.save_json(str(tmp_path / "ct.json"), serialize.dump_ciphertext(params, ct))

    params2 = serialize.load_params(serialize.load_json(str(tmp_path / "params.json")))
    msk2 = serialize.load_msk(params2, serialize.load_json(str(tmp_path / "msk.json")))
    key2 = serialize.load_user_key(params2, serialize.load_json(str(tmp_path / "alice.json")))
    ct2 = serialize.load_ciphertext(params2, serialize.load_json(str(tmp_path / "ct.json")))

    assert params2 == params
    assert key2 == key
    assert core.decrypt(params2, ct2, key2).unwrap() == m

    # a key issued from the reloaded master secret works with old ciphertexts
    assert core.decrypt(params2, ct2, core.keygen(params2, msk2, ALICE)).unwrap() == m


def test_params_document_has_no_master_secret(ss512):
    doc = serialize.dump_params(ss512.params)
    assert set(doc["params"]) == {"g", "g1", "g2", "g3", "U", "V"}
    alpha = serialize.dump_msk(ss512.params, ss512.msk)["alpha"]
    assert alpha not in json.dumps(doc)


def test_wrong_document_kind(ss512):
    with pytest.raises(ValueError):
        serialize.load_params(serialize.dump_msk(ss512.params, ss512.msk))


def test_toy_engine_roundtrip(toy):
    doc = serialize.dump_params(toy.params)
    assert doc["curve"] == "toy-23"
    assert serialize.load_params(doc) == toy.params


def test_engine_for():
    assert isinstance(engine_for("toy-23"), ToyPairingEngine)
    assert engine_for("toy-23").order == 23
    assert isinstance(engine_for("SS512"), CharmPairingEngine)
    with pytest.raises(ValueError):
        CharmPairingEngine("BN254")


def test_sealed_payload(ss512):
    params = ss512.params
    key = core.keygen(params, ss512.msk, ALICE)
    sealed = hybrid.seal(params, ALICE, b"hello world", b"ctx")

    key = core.key_update(params, key)
    assert hybrid.open_sealed(params, key, sealed).unwrap() == b"hello world"

    doc = serialize.dump_sealed(params, sealed)
    assert hybrid.open_sealed(params, key, serialize.load_sealed(params, doc)).unwrap() == b"hello world"


def test_sealed_payload_tampering(ss512):
    params = ss512.params
    key = core.keygen(params, ss512.msk, ALICE)
    sealed = hybrid.seal(params, ALICE, b"hello world", b"ctx")

    flipped = bytes([sealed.body[0] ^ 1]) + sealed.body[1:]
    res = hybrid.open_sealed(params, key, dataclasses.replace(sealed, body=flipped))
    assert not res.ok and isinstance(res.error, IntegrityFailure)

    # eta is authenticated by the payload layer
    relabeled = dataclasses.replace(sealed, ct=dataclasses.replace(sealed.ct, eta=b"other"))
    res = hybrid.open_sealed(params, key, relabeled)
    assert not res.ok and isinstance(res.error, IntegrityFailure)

    other = core.keygen(params, ss512.msk, "mallory")
    res = hybrid.open_sealed(params, other, sealed)
    assert not res.ok and res.message is None


def test_object_store_revisions(tmp_path):
    store = FileObjectStore(str(tmp_path / "store"))
    oid = new_object_id()

    assert oid not in store
    assert store.revisions(oid) == []
    assert store.put(oid, {"payload": "a"}) == 1
    assert store.put(oid, {"payload": "b"}) == 2

    assert oid in store
    assert store.revisions(oid) == [1, 2]
    assert store.get(oid)["payload"] == "b"
    assert store.get(oid, 1) == {"payload": "a", "revision": 1}

    with pytest.raises(FileNotFoundError):
        store.get(oid, 3)
    with pytest.raises(FileNotFoundError):
        store.get(new_object_id())


def test_documents_for_another_curve_are_refused(ss512, toy):
    key = core.keygen(toy.params, toy.msk, 7)
    ct = core.encrypt(toy.params, 7, toy.params.engine.random(GT))

    with pytest.raises(ValueError, match="curve"):
        serialize.load_user_key(ss512.params, serialize.dump_user_key(toy.params, key))
    with pytest.raises(ValueError, match="curve"):
        serialize.load_ciphertext(ss512.params, serialize.dump_ciphertext(toy.params, ct))
    with pytest.raises(ValueError):
        serialize.load_ciphertext(toy.params, serialize.dump_user_key(toy.params, key))


def _flip_last_byte(encoded: str) -> str:
    raw = bytearray(base64.b64decode(encoded))
    raw[-1] ^= 0x80
    return base64.b64encode(bytes(raw)).decode("ascii")


@pytest.mark.parametrize("field", ["c1", "c2", "c3", "theta"])
def test_undecodable_ciphertext_field(toy, field):
    ct = core.encrypt(toy.params, 7, toy.params.engine.random(GT), b"ctx")
    doc = serialize.dump_ciphertext(toy.params, ct)
    doc[field] = _flip_last_byte(doc[field])

    with pytest.raises(ValueError, match=field):
        serialize.load_ciphertext(toy.params, doc)


def test_undecodable_sealed_payload(ss512):
    sealed = hybrid.seal(ss512.params, ALICE, b"hello world")
    doc = serialize.dump_sealed(ss512.params, sealed)

    del doc["ct"]["theta"]
    with pytest.raises(ValueError, match="theta"):
        serialize.load_sealed(ss512.params, doc)
    with pytest.raises(ValueError):
        serialize.load_sealed(ss512.params, {"nonce": doc["nonce"], "body": doc["body"]})
