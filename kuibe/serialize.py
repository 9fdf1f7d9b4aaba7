# -*- coding: utf-8 -*-
"""
serialize.py  (JSON persistence of params, keys and ciphertexts)
----------------------------------------------------------------
Group and scalar elements are written with the engine's canonical encoding,
base64'd into JSON. The engine itself is not serialized: its name is stored
and engine_for() rebuilds it on load, together with the default oracles.

The master secret lives in its own document; dump_params() never emits it.
"""

from __future__ import annotations

import base64
import json
import os
from typing import Any, Dict, Optional

from kuibe.core import Ciphertext, MasterSecret, SystemParameters, UserKey
from kuibe.engine import PairingEngine, engine_for
from kuibe.hybrid import SealedPayload
from kuibe.oracles import make_oracles

FORMAT = "kuibe/1"

_PARAM_FIELDS = ("g", "g1", "g2", "g3", "U", "V")
_KEY_FIELDS = ("sk1", "sk2", "sk3", "sk4")
_CT_FIELDS = ("c1", "c2", "c3", "theta")


def _b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def _b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))

def save_json(path: str, obj: Any) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=2)

def load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _enc(engine: PairingEngine, elem: Any) -> str:
    return _b64e(engine.serialize(elem))

def _dec(engine: PairingEngine, s: str) -> Any:
    return engine.deserialize(_b64d(s))


def _check_format(blob: Dict[str, Any], kind: str) -> None:
    if blob.get("format") != FORMAT or blob.get("kind") != kind:
        raise ValueError(
            f"not a {FORMAT} {kind} document "
            f"(format={blob.get('format')!r}, kind={blob.get('kind')!r})"
        )

def _check_curve(blob: Dict[str, Any], params: SystemParameters, what: str) -> None:
    if blob.get("curve") != params.curve:
        raise ValueError(f"{what} is for curve {blob.get('curve')!r}, params use {params.curve!r}")


# ============================================================
# Identities
# ============================================================

def dump_identity(identity: Any) -> Dict[str, Any]:
    if isinstance(identity, bool):
        raise TypeError("identity must be an int, str or bytes to be serialized")
    if isinstance(identity, int):
        return {"type": "int", "value": identity}
    if isinstance(identity, str):
        return {"type": "str", "value": identity}
    if isinstance(identity, bytes):
        return {"type": "bytes", "value": _b64e(identity)}
    raise TypeError(f"cannot serialize identity of type {type(identity).__name__}")

def load_identity(blob: Dict[str, Any]) -> Any:
    kind = blob["type"]
    if kind == "int":
        return int(blob["value"])
    if kind == "str":
        return blob["value"]
    if kind == "bytes":
        return _b64d(blob["value"])
    raise ValueError(f"unknown identity type {kind!r}")


# ============================================================
# Params / master secret
# ============================================================

def dump_params(params: SystemParameters) -> Dict[str, Any]:
    engine = params.engine
    return {
        "format": FORMAT,
        "kind":   "params",
        "curve":  params.curve,
        "params": {k: _enc(engine, getattr(params, k)) for k in _PARAM_FIELDS},
    }

def load_params(blob: Dict[str, Any], engine: Optional[PairingEngine] = None) -> SystemParameters:
    _check_format(blob, "params")
    engine = engine or engine_for(blob["curve"])
    if engine.name != blob["curve"]:
        raise ValueError(f"engine {engine.name!r} does not match curve {blob['curve']!r}")
    elems = {k: _dec(engine, blob["params"][k]) for k in _PARAM_FIELDS}
    return SystemParameters(engine=engine, oracles=make_oracles(engine), **elems)

def dump_msk(params: SystemParameters, msk: MasterSecret) -> Dict[str, Any]:
    return {
        "format": FORMAT,
        "kind":   "msk",
        "curve":  params.curve,
        "alpha":  _enc(params.engine, msk.alpha),
    }

def load_msk(params: SystemParameters, blob: Dict[str, Any]) -> MasterSecret:
    _check_format(blob, "msk")
    _check_curve(blob, params, "master secret")
    return MasterSecret(alpha=_dec(params.engine, blob["alpha"]))


# ============================================================
# User keys
# ============================================================

def dump_user_key(params: SystemParameters, key: UserKey) -> Dict[str, Any]:
    engine = params.engine
    return {
        "format":   FORMAT,
        "kind":     "user_key",
        "curve":    params.curve,
        "identity": dump_identity(key.identity),
        "version":  key.version,
        "sk":       {k: _enc(engine, getattr(key, k)) for k in _KEY_FIELDS},
    }

def load_user_key(params: SystemParameters, blob: Dict[str, Any]) -> UserKey:
    _check_format(blob, "user_key")
    _check_curve(blob, params, "user key")
    engine = params.engine
    return UserKey(
        identity=load_identity(blob["identity"]),
        version=int(blob["version"]),
        **{k: _dec(engine, blob["sk"][k]) for k in _KEY_FIELDS},
    )


# ============================================================
# Ciphertexts / sealed payloads
# ============================================================

def dump_ciphertext(params: SystemParameters, ct: Ciphertext) -> Dict[str, Any]:
    engine = params.engine
    return {
        "format": FORMAT,
        "kind":   "ciphertext",
        "curve":  params.curve,
        "c1":    _enc(engine, ct.c1),
        "c2":    _enc(engine, ct.c2),
        "c3":    _enc(engine, ct.c3),
        "theta": _enc(engine, ct.theta),
        "eta":   _b64e(ct.eta),
    }

def load_ciphertext(params: SystemParameters, blob: Dict[str, Any]) -> Ciphertext:
    """
    Every decoding problem (missing field, bad base64, bytes that are not an
    element of the group) surfaces as ValueError.
    """
    _check_format(blob, "ciphertext")
    _check_curve(blob, params, "ciphertext")
    engine = params.engine
    fields = {}
    for name in _CT_FIELDS:
        try:
            fields[name] = _dec(engine, blob[name])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"cannot decode ciphertext field {name!r}: {e}") from e
    try:
        eta = _b64d(blob["eta"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"cannot decode ciphertext field 'eta': {e}") from e
    return Ciphertext(eta=eta, **fields)

def dump_sealed(params: SystemParameters, sealed: SealedPayload) -> Dict[str, Any]:
    return {
        "ct":    dump_ciphertext(params, sealed.ct),
        "nonce": _b64e(sealed.nonce),
        "body":  _b64e(sealed.body),
    }

def load_sealed(params: SystemParameters, blob: Dict[str, Any]) -> SealedPayload:
    ct = load_ciphertext(params, blob.get("ct", {}))
    try:
        nonce, body = _b64d(blob["nonce"]), _b64d(blob["body"])
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"cannot decode sealed payload: {e}") from e
    return SealedPayload(ct=ct, nonce=nonce, body=body)
