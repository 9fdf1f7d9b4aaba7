# -*- coding: utf-8 -*-
"""
holder_local.py  (Key holder role: KeyUpdate / Decrypt)
-------------------------------------------------------
Commands:
  python -m kuibe.holder_local update  --setup keys/params.json --user keys/bob.json --expect-version 1
  python -m kuibe.holder_local decrypt --setup keys/params.json --user keys/bob.json \\
      --object_id <OID> --store_dir keys/store

Notes:
- update re-randomizes the key in place (the user key file is overwritten
  unless --out is given); the previous version is not kept.
- --expect-version guards against updating a stale copy of the key.
- decrypt verifies the ciphertext tag before releasing anything.
"""

from __future__ import annotations

import argparse
import logging
import sys

from kuibe import config, hybrid, serialize
from kuibe.errors import ProtocolError
from kuibe.object_store import FileObjectStore
from kuibe.registry import KeyRegistry


def cmd_update(args: argparse.Namespace) -> None:
    params = serialize.load_params(serialize.load_json(args.setup))
    key = serialize.load_user_key(params, serialize.load_json(args.user))

    registry = KeyRegistry(params)
    registry.register(key)
    try:
        new_key = registry.update(key.identity, expected_version=args.expect_version)
    except ProtocolError as e:
        raise SystemExit(f"[HOLDER] Update FAILED: {e}")

    out = args.out or args.user
    serialize.save_json(out, serialize.dump_user_key(params, new_key))
    print(f"[HOLDER] Update OK -> {out}  (version {key.version} -> {new_key.version})")


def cmd_decrypt(args: argparse.Namespace) -> None:
    params = serialize.load_params(serialize.load_json(args.setup))
    key = serialize.load_user_key(params, serialize.load_json(args.user))

    record = FileObjectStore(args.store_dir).get(args.object_id, args.revision)
    if record.get("curve") != params.curve:
        raise SystemExit(
            f"[HOLDER] bundle curve {record.get('curve')!r} does not match params {params.curve!r}"
        )
    try:
        sealed = serialize.load_sealed(params, record.get("sealed", {}))
    except ValueError as e:
        raise SystemExit(f"[HOLDER] Integrity check FAILED  (malformed ciphertext: {e})")

    res = hybrid.open_sealed(params, key, sealed)
    if not res.ok:
        raise SystemExit(f"[HOLDER] Integrity check FAILED  ({res.error})")
    print("[HOLDER] Integrity check PASSED")
    print("[HOLDER] Plaintext:", res.message.decode("utf-8", errors="replace"))


def main() -> None:
    ap = argparse.ArgumentParser(description="kuibe key holder (KeyUpdate / Decrypt)")
    ap.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # --- update ---
    s0 = sub.add_parser("update", help="Re-randomize the user key (version v -> v+1)")
    s0.add_argument("--setup", default=config.PARAMS_FILE, help="Public params JSON path")
    s0.add_argument("--user",  required=True, help="User key JSON path")
    s0.add_argument("--expect-version", type=int, default=None,
                    help="Fail unless the stored key is at this version")
    s0.add_argument("--out",   default=None, help="Output path (default: overwrite --user)")
    s0.set_defaults(func=cmd_update)

    # --- decrypt ---
    s1 = sub.add_parser("decrypt", help="Verify and open a stored bundle")
    s1.add_argument("--setup",     default=config.PARAMS_FILE, help="Public params JSON path")
    s1.add_argument("--user",      required=True, help="User key JSON path")
    s1.add_argument("--object_id", required=True, help="Object ID printed by sender_encrypt.py")
    s1.add_argument("--revision",  type=int, default=None, help="Bundle revision (default: latest)")
    s1.add_argument("--store_dir", default=config.STORE_DIR, help="Directory that holds bundles")
    s1.set_defaults(func=cmd_decrypt)

    args = ap.parse_args()
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if args.verbose else logging.WARNING)
    args.func(args)


if __name__ == "__main__":
    main()
