# -*- coding: utf-8 -*-
"""
hybrid.py  (sealed byte payloads)
---------------------------------
Arbitrary bytes are not GT elements, so payloads are enveloped:

  1. sample a GT session key K and encrypt it to the identity (core.encrypt)
  2. DEK = SHA-256(serialize(K))
  3. AES-256-GCM(DEK) over the plaintext, eta as associated data
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from typing import Any

from charm.toolbox.pairinggroup import GT
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from kuibe import core
from kuibe.core import Ciphertext, DecryptResult, Label, SystemParameters, UserKey
from kuibe.errors import IntegrityFailure


@dataclass(frozen=True)
class SealedPayload:
    ct: Ciphertext     # session key under the scheme
    nonce: bytes
    body: bytes        # AES-GCM ciphertext || tag


def _dek(params: SystemParameters, key_gt: Any) -> bytes:
    """Derive a 32-byte AES key from a GT element via SHA-256."""
    return hashlib.sha256(params.engine.serialize(key_gt)).digest()


def seal(params: SystemParameters, identity: Any, plaintext: bytes,
         eta: Label = b"") -> SealedPayload:
    key_gt = params.engine.random(GT)
    ct = core.encrypt(params, identity, key_gt, eta)

    nonce = os.urandom(12)
    body = AESGCM(_dek(params, key_gt)).encrypt(nonce, plaintext, ct.eta)
    return SealedPayload(ct=ct, nonce=nonce, body=body)


def open_sealed(params: SystemParameters, key: UserKey, sealed: SealedPayload) -> DecryptResult:
    res = core.decrypt(params, sealed.ct, key)
    if not res.ok:
        return res
    try:
        pt = AESGCM(_dek(params, res.message)).decrypt(sealed.nonce, sealed.body, sealed.ct.eta)
    except InvalidTag:
        return DecryptResult(ok=False, error=IntegrityFailure("payload AEAD tag mismatch"))
    return DecryptResult(ok=True, message=pt)
