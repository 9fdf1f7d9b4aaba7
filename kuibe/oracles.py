# -*- coding: utf-8 -*-
"""
oracles.py  (Primitive Oracles H, KDF, Ext)
-------------------------------------------
  H(c1, c2, c3) -> ZR           compression of a ciphertext prefix
  KDF(x in GT)  -> (k1, k2)     tag keys
  Ext(x in GT, label) -> GT     one-time-pad mask in GT

All three are deterministic functions of their inputs: encryptor and
decryptor must land on the same beta, the same (k1, k2) and the same mask.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Tuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from kuibe.engine import PairingEngine

_H_DOMAIN = b"kuibe/H"
_KDF_INFO = b"kuibe/KDF"
_EXT_INFO = b"kuibe/Ext|"


@dataclass(frozen=True)
class Oracles:
    H: Callable[[Any, Any, Any], Any]
    KDF: Callable[[Any], Tuple[Any, Any]]
    Ext: Callable[[Any, bytes], Any]


def _frame(*parts: bytes) -> bytes:
    # length-prefixed so that (a, bc) and (ab, c) never collide
    return b"".join(len(p).to_bytes(4, "big") + p for p in parts)


def _scalar_width(engine: PairingEngine) -> int:
    # 16 extra bytes: bias of the reduction mod p stays below 2^-128
    return (engine.order.bit_length() + 7) // 8 + 16


def _hkdf(ikm: bytes, info: bytes, length: int) -> bytes:
    return HKDF(algorithm=hashes.SHA256(), length=length, salt=None, info=info).derive(ikm)


def make_H(engine: PairingEngine) -> Callable[[Any, Any, Any], Any]:
    """Return H : GT x G1 x G1 -> ZR."""
    def H(c1: Any, c2: Any, c3: Any) -> Any:
        data = _frame(engine.serialize(c1), engine.serialize(c2), engine.serialize(c3))
        return engine.hash_to_scalar(_H_DOMAIN + data)
    return H


def make_KDF(engine: PairingEngine) -> Callable[[Any], Tuple[Any, Any]]:
    """Return KDF : GT -> ZR x ZR."""
    width = _scalar_width(engine)

    def KDF(x: Any) -> Tuple[Any, Any]:
        okm = _hkdf(engine.serialize(x), _KDF_INFO, 2 * width)
        k1 = engine.scalar(int.from_bytes(okm[:width], "big"))
        k2 = engine.scalar(int.from_bytes(okm[width:], "big"))
        return k1, k2
    return KDF


def make_Ext(engine: PairingEngine) -> Callable[[Any, bytes], Any]:
    """Return Ext : GT x {0,1}* -> GT."""
    width = _scalar_width(engine)

    def Ext(x: Any, label: bytes) -> Any:
        okm = _hkdf(engine.serialize(x), _EXT_INFO + bytes(label), width)
        return engine.gt_base() ** engine.scalar(int.from_bytes(okm, "big"))
    return Ext


def make_oracles(engine: PairingEngine) -> Oracles:
    return Oracles(H=make_H(engine), KDF=make_KDF(engine), Ext=make_Ext(engine))
