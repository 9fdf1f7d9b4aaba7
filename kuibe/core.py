# -*- coding: utf-8 -*-
"""
core.py  (key-updatable IBE protocol engine)
--------------------------------------------
Roles:
  Issuer : Setup / KeyGen            (holds alpha)
  Holder : KeyUpdate / Decrypt       (never sees alpha)
  Sender : Encrypt

  params = (g, g1 = g^alpha, g2, g3, U, V, H, KDF, Ext)
  msk    = alpha

  W(id)  = U^id * V

  sk_id^v = ( g3^alpha * W^t1,  g^-t1,  g2^alpha * W^t2,  g^-t2 )

  KeyUpdate (fresh m1, m2):
    sk1 * W^m1,  sk2 * g^-m1,  sk3 * W^m2,  sk4 * g^-m2
    == KeyGen with blinding exponents (t1 + m1, t2 + m2)

  Encrypt(id, M, eta):
    c2 = g^s,  c3 = W^s
    c1 = Ext(e(g1,g2)^s, eta) * M
    beta = H(c1, c2, c3)                        (only once c1 is fixed)
    D    = e(g1,g3)^s * e(g1,g2)^(beta*s)
    (k1, k2) = KDF(D),  theta = s*k1 + k2

  Decrypt(ct, sk):
    X1 = e(sk1,c2) * e(sk2,c3) = e(g1,g3)^s
    X2 = e(sk3,c2) * e(sk4,c3) = e(g1,g2)^s
    D' = X1 * X2^beta,  (k1', k2') = KDF(D')
    reject unless g^theta == c2^k1' * g^k2'
    M  = c1 / Ext(X2, eta)

The pairing must be symmetric: every generator lives in G1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from charm.toolbox.pairinggroup import ZR, G1

from kuibe.engine import CharmPairingEngine, PairingEngine
from kuibe.errors import DegenerateParameter, IntegrityFailure, ProtocolError
from kuibe.oracles import Oracles, make_oracles

log = logging.getLogger(__name__)

Label = Union[bytes, str]


# ============================================================
# Data model
# ============================================================

@dataclass(frozen=True)
class SystemParameters:
    """Public parameters. Safe to publish: alpha is never part of it."""
    engine: PairingEngine = field(repr=False, compare=False)
    g:  Any
    g1: Any
    g2: Any
    g3: Any
    U:  Any
    V:  Any
    oracles: Oracles = field(repr=False, compare=False)

    @property
    def curve(self) -> str:
        return self.engine.name

    def binding(self, id_z: Any) -> Any:
        """W = U^id * V"""
        return (self.U ** id_z) * self.V


@dataclass(frozen=True)
class MasterSecret:
    """Issuer-only half of Setup's output."""
    alpha: Any = field(repr=False)


@dataclass(frozen=True)
class SetupResult:
    params: SystemParameters
    msk: MasterSecret


@dataclass(frozen=True)
class UserKey:
    identity: Any
    sk1: Any
    sk2: Any
    sk3: Any
    sk4: Any
    version: int = 1

    def components(self) -> Tuple[Any, Any, Any, Any]:
        return (self.sk1, self.sk2, self.sk3, self.sk4)


@dataclass(frozen=True)
class Ciphertext:
    c1: Any      # GT, masked message
    c2: Any      # G1, g^s
    c3: Any      # G1, W^s
    theta: Any   # ZR, s*k1 + k2
    eta: bytes = b""


@dataclass(frozen=True)
class DecryptResult:
    ok: bool
    message: Any = None
    error: Optional[ProtocolError] = None

    def unwrap(self) -> Any:
        if not self.ok:
            raise self.error or ProtocolError("decryption failed")
        return self.message


# ============================================================
# Helpers
# ============================================================

def _label(eta: Label) -> bytes:
    return eta.encode("utf-8") if isinstance(eta, str) else bytes(eta)


def identity_to_scalar(engine: PairingEngine, identity: Any) -> Any:
    """Map an opaque identity into ZR (ints directly, strings/bytes hashed)."""
    if isinstance(identity, bool):
        raise TypeError("identity must be an int, str, bytes or ZR element")
    if isinstance(identity, int):
        return engine.scalar(identity)
    if isinstance(identity, str):
        identity = identity.encode("utf-8")
    if isinstance(identity, bytes):
        return engine.hash_to_scalar(b"ID:" + identity)
    return identity


def _require_generator(engine: PairingEngine, elem: Any, what: str) -> None:
    if engine.is_identity(elem, G1):
        raise DegenerateParameter(f"{what} is the identity of G1")


def _identity_binding(params: SystemParameters, identity: Any) -> Tuple[Any, Any]:
    """Return (id_z, W), rejecting id = 0 and W = 1 before W is ever used."""
    engine = params.engine
    id_z = identity_to_scalar(engine, identity)
    if int(id_z) == 0:
        raise DegenerateParameter(f"identity {identity!r} maps to 0 in ZR")
    W = params.binding(id_z)
    _require_generator(engine, W, f"W = U^id * V for identity {identity!r}")
    return id_z, W


# ============================================================
# Setup
# ============================================================

def setup(engine: Optional[PairingEngine] = None, *, g: Any = None,
          oracles: Optional[Oracles] = None) -> SetupResult:
    """
    Setup() -> (params, alpha)

    g, g2, g3, U, V independently sampled from G1; alpha from ZR; g1 = g^alpha.
    """
    engine = engine or CharmPairingEngine()

    g     = engine.random(G1) if g is None else g
    alpha = engine.random(ZR)
    g2    = engine.random(G1)
    g3    = engine.random(G1)
    U     = engine.random(G1)
    V     = engine.random(G1)

    for name, elem in (("g", g), ("g2", g2), ("g3", g3), ("U", U), ("V", V)):
        _require_generator(engine, elem, name)
    if int(alpha) == 0:
        raise DegenerateParameter("alpha sampled as 0")

    g1 = g ** alpha

    params = SystemParameters(
        engine=engine, g=g, g1=g1, g2=g2, g3=g3, U=U, V=V,
        oracles=oracles or make_oracles(engine),
    )
    log.debug("[Setup] curve=%s", engine.name)
    return SetupResult(params=params, msk=MasterSecret(alpha=alpha))


# ============================================================
# KeyGen
# ============================================================

def keygen(params: SystemParameters, msk: MasterSecret, identity: Any, *,
           blinding: Optional[Tuple[Any, Any]] = None) -> UserKey:
    """
    KeyGen(params, alpha, id) -> sk_id at version 1

    sk1 = g3^alpha * W^t1,  sk2 = g^-t1
    sk3 = g2^alpha * W^t2,  sk4 = g^-t2

    `blinding` pins (t1, t2); leave it unset outside of test vectors.
    """
    engine = params.engine
    _, W = _identity_binding(params, identity)

    if blinding is None:
        t1, t2 = engine.random(ZR), engine.random(ZR)
    else:
        t1, t2 = blinding

    alpha = msk.alpha
    g = params.g

    sk1 = (params.g3 ** alpha) * (W ** t1)
    sk2 = g ** (-t1)
    sk3 = (params.g2 ** alpha) * (W ** t2)
    sk4 = g ** (-t2)

    log.debug("[KeyGen] identity=%r version=1", identity)
    return UserKey(identity=identity, sk1=sk1, sk2=sk2, sk3=sk3, sk4=sk4, version=1)


# ============================================================
# KeyUpdate
# ============================================================

def key_update(params: SystemParameters, key: UserKey, *,
               rerandomizers: Optional[Tuple[Any, Any]] = None) -> UserKey:
    """
    KeyUpdate(params, sk_id^v) -> sk_id^(v+1), without alpha.

    Adds fresh (m1, m2) to the blinding exponents; the g3^alpha / g2^alpha
    factors are never touched. Each call must use fresh (m1, m2).
    """
    engine = params.engine
    _, W = _identity_binding(params, key.identity)

    if rerandomizers is None:
        m1, m2 = engine.random(ZR), engine.random(ZR)
    else:
        m1, m2 = rerandomizers

    g = params.g
    updated = UserKey(
        identity=key.identity,
        sk1=key.sk1 * (W ** m1),
        sk2=key.sk2 * (g ** (-m1)),
        sk3=key.sk3 * (W ** m2),
        sk4=key.sk4 * (g ** (-m2)),
        version=key.version + 1,
    )
    log.debug("[KeyUpdate] identity=%r version %d -> %d",
              key.identity, key.version, updated.version)
    return updated


def verify_key(params: SystemParameters, key: UserKey) -> bool:
    """
    Public consistency check of a user key, at any version:

      e(sk1, g) * e(sk2, W) == e(g3, g1)
      e(sk3, g) * e(sk4, W) == e(g2, g1)

    The blinding terms cancel, so only a key derived from this setup's alpha
    for this identity passes.
    """
    e = params.engine.pair
    _, W = _identity_binding(params, key.identity)
    ok = (e(key.sk1, params.g) * e(key.sk2, W) == e(params.g3, params.g1)
          and e(key.sk3, params.g) * e(key.sk4, W) == e(params.g2, params.g1))
    if not ok:
        log.warning("[VerifyKey] identity=%r version=%d does not verify",
                    key.identity, key.version)
    return ok


# ============================================================
# Encrypt
# ============================================================

def encrypt_side_value(params: SystemParameters, ct: Ciphertext, s: Any) -> Any:
    """D = e(g1,g3)^s * e(g1,g2)^(beta*s), with beta = H(c1, c2, c3)."""
    beta = params.oracles.H(ct.c1, ct.c2, ct.c3)
    e = params.engine.pair
    return (e(params.g1, params.g3) ** s) * (e(params.g1, params.g2) ** (beta * s))


def encrypt(params: SystemParameters, identity: Any, message: Any,
            eta: Label = b"", *, s: Any = None) -> Ciphertext:
    """
    Encrypt(params, id, M, eta) -> (c1, c2, c3, theta)

    `s` pins the encryption randomness; leave it unset outside of test vectors.
    """
    engine = params.engine
    oracles = params.oracles
    label = _label(eta)
    _, W = _identity_binding(params, identity)

    if s is None:
        s = engine.random(ZR)

    c2 = params.g ** s
    c3 = W ** s

    mask = oracles.Ext(engine.pair(params.g1, params.g2) ** s, label)
    c1 = mask * message

    # beta (inside encrypt_side_value) is taken over the final c1
    prefix = Ciphertext(c1=c1, c2=c2, c3=c3, theta=None, eta=label)
    D = encrypt_side_value(params, prefix, s)
    k1, k2 = oracles.KDF(D)
    theta = s * k1 + k2

    log.debug("[Encrypt] identity=%r eta=%r", identity, label)
    return Ciphertext(c1=c1, c2=c2, c3=c3, theta=theta, eta=label)


# ============================================================
# Decrypt
# ============================================================

def _key_side(params: SystemParameters, ct: Ciphertext, key: UserKey) -> Tuple[Any, Any, Any]:
    e = params.engine.pair
    X1 = e(key.sk1, ct.c2) * e(key.sk2, ct.c3)
    X2 = e(key.sk3, ct.c2) * e(key.sk4, ct.c3)
    beta = params.oracles.H(ct.c1, ct.c2, ct.c3)
    return X1, X2, X1 * (X2 ** beta)


def key_side_value(params: SystemParameters, ct: Ciphertext, key: UserKey) -> Any:
    """D' = X1 * X2^beta, rebuilt from the user key."""
    return _key_side(params, ct, key)[2]


def decrypt(params: SystemParameters, ct: Ciphertext, key: UserKey) -> DecryptResult:
    """
    Decrypt(ct, sk_id) -> M, or IntegrityFailure.

    Works with any correctly derived version of the key: ciphertexts are not
    bound to a version. No message is released when the tag check fails.
    """
    engine = params.engine
    g = params.g

    if engine.is_identity(ct.c2, G1):
        log.warning("[Decrypt] identity=%r rejected: c2 is the identity", key.identity)
        return DecryptResult(ok=False, error=IntegrityFailure("c2 is the identity of G1"))

    X1, X2, D_prime = _key_side(params, ct, key)
    k1, k2 = params.oracles.KDF(D_prime)

    if g ** ct.theta != (ct.c2 ** k1) * (g ** k2):
        log.warning("[Decrypt] identity=%r version=%d: tag check failed",
                    key.identity, key.version)
        return DecryptResult(
            ok=False,
            error=IntegrityFailure(
                f"tag check failed for identity={key.identity!r} (version {key.version})"
            ),
        )

    message = ct.c1 / params.oracles.Ext(X2, ct.eta)
    log.debug("[Decrypt] identity=%r version=%d ok", key.identity, key.version)
    return DecryptResult(ok=True, message=message)
