# -*- coding: utf-8 -*-
"""
kuibe: identity-based encryption with holder-side key updates.

  Setup -> KeyGen -> KeyUpdate* -> Encrypt / Decrypt

>>> from charm.toolbox.pairinggroup import GT
>>> from kuibe import setup, keygen, key_update, encrypt, decrypt
>>> res = setup()
>>> key = keygen(res.params, res.msk, "alice@example.com")
>>> key = key_update(res.params, key)
>>> m = res.params.engine.random(GT)
>>> ct = encrypt(res.params, "alice@example.com", m, b"ctx")
>>> decrypt(res.params, ct, key).unwrap() == m
True
"""

from kuibe.core import (
    Ciphertext,
    DecryptResult,
    MasterSecret,
    SetupResult,
    SystemParameters,
    UserKey,
    decrypt,
    encrypt,
    key_update,
    keygen,
    setup,
    verify_key,
)
from kuibe.engine import CharmPairingEngine, PairingEngine, ToyPairingEngine, engine_for
from kuibe.errors import (
    DegenerateParameter,
    IntegrityFailure,
    ProtocolError,
    SamplingFailure,
    UnknownIdentity,
    VersionMismatch,
)
from kuibe.registry import KeyRegistry

__version__ = "1.0.0"
