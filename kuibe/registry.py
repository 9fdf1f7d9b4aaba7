# -*- coding: utf-8 -*-
"""
registry.py  (identity -> current user key)
-------------------------------------------
The only mutable state of the scheme is each identity's current key version.
KeyRegistry owns it: every write for an identity goes through that identity's
lock, so concurrent updates cannot lose an increment or rebase on a stale key.
The map itself is only touched under _guard, which is never held while
waiting on an identity lock.
Prior versions are dropped; use snapshot() to keep one around.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterator, List, Optional

from kuibe import core
from kuibe.core import MasterSecret, SystemParameters, UserKey
from kuibe.errors import IntegrityFailure, UnknownIdentity, VersionMismatch

log = logging.getLogger(__name__)


class KeyRegistry:

    def __init__(self, params: SystemParameters):
        self.params = params
        self._keys: Dict[Any, UserKey] = {}
        self._locks: Dict[Any, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, identity: Any) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(identity)
            if lock is None:
                lock = self._locks[identity] = threading.Lock()
            return lock

    def _get(self, identity: Any) -> UserKey:
        with self._guard:
            key = self._keys.get(identity)
        if key is None:
            raise UnknownIdentity(identity)
        return key

    def _put(self, key: UserKey) -> None:
        with self._guard:
            self._keys[key.identity] = key

    # ---- issuer side ----------------------------------------------------

    def issue(self, msk: MasterSecret, identity: Any) -> UserKey:
        """KeyGen for `identity`; replaces any existing key with version 1."""
        key = core.keygen(self.params, msk, identity)
        with self._lock_for(identity):
            if identity in self:
                log.info("[Registry] re-issuing identity=%r (was version %d)",
                         identity, self._get(identity).version)
            self._put(key)
        return key

    def register(self, key: UserKey) -> UserKey:
        """Track a key issued elsewhere (e.g. loaded from disk) as-is."""
        with self._lock_for(key.identity):
            self._put(key)
        return key

    # ---- holder side ----------------------------------------------------

    def update(self, identity: Any, expected_version: Optional[int] = None) -> UserKey:
        """Run KeyUpdate on the stored key and store version v+1."""
        with self._lock_for(identity):
            key = self._get(identity)
            if expected_version is not None and key.version != expected_version:
                raise VersionMismatch(identity, expected_version, key.version)
            new_key = core.key_update(self.params, key)
            self._put(new_key)
            return new_key

    def commit(self, key: UserKey) -> UserKey:
        """
        Accept a key the holder updated on its own. It must be version v+1
        and pass core.verify_key; otherwise the stored key is kept.
        """
        with self._lock_for(key.identity):
            current = self._get(key.identity)
            if key.version != current.version + 1:
                raise VersionMismatch(key.identity, current.version + 1, key.version)
            if not core.verify_key(self.params, key):
                raise IntegrityFailure(
                    f"key for identity={key.identity!r} (version {key.version}) "
                    f"does not verify against the public parameters"
                )
            self._put(key)
            log.debug("[Registry] identity=%r committed version %d",
                      key.identity, key.version)
            return key

    # ---- reads ----------------------------------------------------------

    def current(self, identity: Any) -> UserKey:
        return self._get(identity)

    # keys are immutable, so the current one doubles as a snapshot
    snapshot = current

    def version(self, identity: Any) -> int:
        return self.current(identity).version

    def identities(self) -> List[Any]:
        with self._guard:
            return list(self._keys)

    def __contains__(self, identity: Any) -> bool:
        with self._guard:
            return identity in self._keys

    def __len__(self) -> int:
        with self._guard:
            return len(self._keys)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.identities())
