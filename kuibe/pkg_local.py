# -*- coding: utf-8 -*-
"""
pkg_local.py  (issuer utilities)
--------------------------------
Commands:
  python -m kuibe.pkg_local setup  --out keys/params.json --msk-out keys/msk.json --curve SS512
  python -m kuibe.pkg_local keygen --setup keys/params.json --msk keys/msk.json --id bob@example.com --out keys/bob.json

Notes:
- params.json is public; msk.json holds alpha and must stay with the issuer.
- keygen always produces a fresh key at version 1. Later versions are made
  by the key holder (holder_local.py update), which never needs msk.json.
"""

from __future__ import annotations

import argparse
import logging
import sys

from kuibe import config, core, serialize
from kuibe.engine import engine_for
from kuibe.errors import ProtocolError


def cmd_setup(args: argparse.Namespace) -> None:
    try:
        res = core.setup(engine_for(args.curve))
    except (ProtocolError, ValueError) as e:
        raise SystemExit(f"[PKG] Setup FAILED: {e}")
    serialize.save_json(args.out, serialize.dump_params(res.params))
    serialize.save_json(args.msk_out, serialize.dump_msk(res.params, res.msk))
    print(f"[PKG] Setup OK -> {args.out}  (msk -> {args.msk_out}, curve={args.curve})")


def cmd_keygen(args: argparse.Namespace) -> None:
    params = serialize.load_params(serialize.load_json(args.setup))
    msk = serialize.load_msk(params, serialize.load_json(args.msk))
    identity = int(args.id) if args.numeric else args.id

    try:
        key = core.keygen(params, msk, identity)
    except ProtocolError as e:
        raise SystemExit(f"[PKG] KeyGen FAILED: {e}")

    serialize.save_json(args.out, serialize.dump_user_key(params, key))
    print(f"[PKG] KeyGen OK -> {args.out}  (id={identity!r}, version={key.version})")


def main() -> None:
    ap = argparse.ArgumentParser(description="kuibe issuer (Setup / KeyGen)")
    ap.add_argument("--verbose", action="store_true", help="Debug logging on stderr")
    sub = ap.add_subparsers(dest="cmd", required=True)

    # --- setup ---
    s0 = sub.add_parser("setup", help="Run Setup; write public params and master secret")
    s0.add_argument("--curve",   default=config.DEFAULT_CURVE, help="Symmetric pairing curve (default: %(default)s)")
    s0.add_argument("--out",     default=config.PARAMS_FILE, help="Public params output path")
    s0.add_argument("--msk-out", default=config.MSK_FILE, help="Master secret output path")
    s0.set_defaults(func=cmd_setup)

    # --- keygen ---
    s1 = sub.add_parser("keygen", help="Issue a user key (version 1)")
    s1.add_argument("--setup",   default=config.PARAMS_FILE, help="Public params JSON path")
    s1.add_argument("--msk",     default=config.MSK_FILE, help="Master secret JSON path")
    s1.add_argument("--id",      required=True, help="User identity")
    s1.add_argument("--numeric", action="store_true", help="Treat --id as an integer in ZR")
    s1.add_argument("--out",     required=True, help="Output path for the user key JSON")
    s1.set_defaults(func=cmd_keygen)

    args = ap.parse_args()
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if args.verbose else logging.WARNING)
    args.func(args)


if __name__ == "__main__":
    main()
