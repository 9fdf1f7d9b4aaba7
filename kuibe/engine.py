# -*- coding: utf-8 -*-
"""
engine.py  (Pairing Engine capability interface)
------------------------------------------------
The protocol only needs a handful of capabilities from a pairing backend:

  random(G)        uniform element of ZR / G1 / G2 / GT
  scalar(n)        integer -> ZR (mod p)
  pair(a, b)       e : G1 x G1 -> GT   (symmetric setting)
  mul / pow / inv  group law
  hash_to_scalar   {0,1}* -> ZR
  gt_base()        a fixed generator of GT
  serialize / deserialize

Two backends are provided:

  CharmPairingEngine  Charm-Crypto PairingGroup (default curve SS512)
  ToyPairingEngine    cyclic group of tiny prime order in "exponent form";
                      INSECURE, only meant for hand-checkable test vectors
"""

from __future__ import annotations

import hashlib
import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2, GT, pair

from kuibe.config import DEFAULT_CURVE
from kuibe.errors import SamplingFailure

# Charm's symmetric (type-A) parameter sets.
SYMMETRIC_CURVES = ("SS512", "SS1024")

_GROUP_NAMES = {ZR: "ZR", G1: "G1", G2: "G2", GT: "GT"}


class PairingEngine(ABC):
    """Group / pairing operations the protocol engine is written against."""

    name: str = ""
    symmetric: bool = True

    @property
    @abstractmethod
    def order(self) -> int:
        ...

    @abstractmethod
    def random(self, group: int) -> Any:
        ...

    @abstractmethod
    def scalar(self, n: int) -> Any:
        ...

    @abstractmethod
    def identity(self, group: int) -> Any:
        ...

    @abstractmethod
    def pair(self, a: Any, b: Any) -> Any:
        ...

    @abstractmethod
    def hash_to_scalar(self, data: bytes) -> Any:
        ...

    @abstractmethod
    def gt_base(self) -> Any:
        ...

    @abstractmethod
    def serialize(self, elem: Any) -> bytes:
        ...

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        ...

    def is_identity(self, elem: Any, group: int = G1) -> bool:
        return elem == self.identity(group)

    def mul(self, a: Any, b: Any) -> Any:
        return a * b

    def pow(self, a: Any, x: Any) -> Any:
        return a ** x

    def inv(self, a: Any) -> Any:
        return a ** -1

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


# ============================================================
# Charm backend
# ============================================================

class CharmPairingEngine(PairingEngine):

    def __init__(self, curve: str = DEFAULT_CURVE):
        if curve not in SYMMETRIC_CURVES:
            raise ValueError(
                f"curve {curve!r} is asymmetric; kuibe needs a symmetric pairing "
                f"(one of {', '.join(SYMMETRIC_CURVES)})"
            )
        self.name = curve
        self.group = PairingGroup(curve)
        self._order = int(self.group.order())
        self._gt_base = None

    @property
    def order(self) -> int:
        return self._order

    def random(self, group: int) -> Any:
        try:
            return self.group.random(group)
        except Exception as e:
            raise SamplingFailure(
                f"{self.name}: cannot sample from {_GROUP_NAMES.get(group, group)}"
            ) from e

    def scalar(self, n: int) -> Any:
        return self.group.init(ZR, int(n) % self._order)

    def identity(self, group: int) -> Any:
        return self.group.init(group, 1)

    def pair(self, a: Any, b: Any) -> Any:
        return pair(a, b)

    def hash_to_scalar(self, data: bytes) -> Any:
        return self.group.hash(data, ZR)

    def gt_base(self) -> Any:
        if self._gt_base is None:
            h = self.group.hash(b"kuibe/gt-base", G1)
            self._gt_base = pair(h, h)
        return self._gt_base

    def serialize(self, elem: Any) -> bytes:
        return self.group.serialize(elem)

    def deserialize(self, data: bytes) -> Any:
        try:
            elem = self.group.deserialize(data)
        except Exception as e:
            raise ValueError(f"{self.name}: cannot decode group element") from e
        if elem is None:
            raise ValueError(f"{self.name}: cannot decode group element")
        return elem


# ============================================================
# Toy backend (test vectors only)
# ============================================================

@dataclass(frozen=True)
class ToyScalar:
    value: int
    p: int

    def _v(self, other: Any) -> int:
        return other.value if isinstance(other, ToyScalar) else int(other)

    def __add__(self, other):
        return ToyScalar((self.value + self._v(other)) % self.p, self.p)

    __radd__ = __add__

    def __sub__(self, other):
        return ToyScalar((self.value - self._v(other)) % self.p, self.p)

    def __rsub__(self, other):
        return ToyScalar((self._v(other) - self.value) % self.p, self.p)

    def __mul__(self, other):
        return ToyScalar((self.value * self._v(other)) % self.p, self.p)

    __rmul__ = __mul__

    def __neg__(self):
        return ToyScalar((-self.value) % self.p, self.p)

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"{self.value} (mod {self.p})"


@dataclass(frozen=True)
class ToyElement:
    """Group element g0^log, stored by its discrete log w.r.t. a fixed g0."""

    group: int
    log: int
    p: int

    def __mul__(self, other: "ToyElement") -> "ToyElement":
        if other.group != self.group:
            raise TypeError("cannot multiply elements of different groups")
        return ToyElement(self.group, (self.log + other.log) % self.p, self.p)

    def __truediv__(self, other: "ToyElement") -> "ToyElement":
        if other.group != self.group:
            raise TypeError("cannot divide elements of different groups")
        return ToyElement(self.group, (self.log - other.log) % self.p, self.p)

    def __pow__(self, x: Any) -> "ToyElement":
        return ToyElement(self.group, (self.log * int(x)) % self.p, self.p)

    def __repr__(self) -> str:
        return f"{_GROUP_NAMES[self.group]}<{self.log}>"


class ToyPairingEngine(PairingEngine):
    """
    Symmetric pairing over the cyclic group of prime order p, written in
    exponent form: G1 = GT = Z_p, e(g0^a, g0^b) = gt0^(a*b).

    Discrete logs are public here, so this offers no security at all.
    """

    def __init__(self, p: int = 23, rng: Optional[Any] = None):
        if p < 3:
            raise ValueError("p must be an odd prime")
        self.p = p
        self.name = f"toy-{p}"
        self._rng = rng or secrets.SystemRandom()

    @property
    def order(self) -> int:
        return self.p

    def element(self, group: int, log: int) -> ToyElement:
        return ToyElement(group, int(log) % self.p, self.p)

    def random(self, group: int) -> Any:
        # zero scalars / identity elements are excluded: in a group this small
        # they would trip the degenerate-value checks every few runs
        log = self._rng.randrange(1, self.p)
        if group == ZR:
            return ToyScalar(log, self.p)
        return self.element(group, log)

    def scalar(self, n: int) -> ToyScalar:
        return ToyScalar(int(n) % self.p, self.p)

    def identity(self, group: int) -> ToyElement:
        return self.element(group, 0)

    def pair(self, a: ToyElement, b: ToyElement) -> ToyElement:
        if a.group == GT or b.group == GT:
            raise TypeError("pairing inputs must be source-group elements")
        return self.element(GT, a.log * b.log)

    def hash_to_scalar(self, data: bytes) -> ToyScalar:
        return self.scalar(int.from_bytes(hashlib.sha256(data).digest(), "big"))

    def gt_base(self) -> ToyElement:
        return self.element(GT, 1)

    def serialize(self, elem: Any) -> bytes:
        if isinstance(elem, ToyScalar):
            return f"{ZR}:{elem.value}".encode("ascii")
        return f"{elem.group}:{elem.log}".encode("ascii")

    def deserialize(self, data: bytes) -> Any:
        # UnicodeDecodeError is a ValueError too
        tag, value = data.decode("ascii").split(":")
        tag, value = int(tag), int(value)
        if tag not in _GROUP_NAMES or not 0 <= value < self.p:
            raise ValueError(f"{self.name}: not a group element: {data!r}")
        if tag == ZR:
            return self.scalar(value)
        return self.element(tag, value)


def engine_for(name: str) -> PairingEngine:
    """Rebuild an engine from its serialized name ("SS512", "toy-23", ...)."""
    if name.startswith("toy-"):
        return ToyPairingEngine(int(name[len("toy-"):]))
    return CharmPairingEngine(name)
