# -*- coding: utf-8 -*-
"""
errors.py  (typed failures of the protocol engine)
--------------------------------------------------
Setup / KeyGen / KeyUpdate / Encrypt raise these.  Decrypt never raises
IntegrityFailure: it hands it back inside a DecryptResult.
"""


class ProtocolError(Exception):
    """Base class for every failure reported by kuibe."""


class SamplingFailure(ProtocolError):
    """The pairing backend could not produce a uniform element."""


class DegenerateParameter(ProtocolError):
    """A generator, the identity scalar or W = U^id * V is degenerate."""


class IntegrityFailure(ProtocolError):
    """The ciphertext tag (or the payload AEAD tag) did not verify."""


class VersionMismatch(ProtocolError):
    """A key version does not follow the expected monotonic sequence."""

    def __init__(self, identity, expected, actual):
        super().__init__(
            f"key version mismatch for identity={identity!r}: "
            f"expected {expected}, got {actual}"
        )
        self.identity = identity
        self.expected = expected
        self.actual = actual


class UnknownIdentity(ProtocolError, KeyError):
    """No key has been issued for this identity."""
