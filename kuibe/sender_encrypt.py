# -*- coding: utf-8 -*-
"""
sender_encrypt.py  (Sender role: seal + store)
----------------------------------------------
Seals a plaintext to an identity (GT session key under the scheme, payload
under AES-GCM) and stores the bundle in a FileObjectStore.

Example:
  python -m kuibe.sender_encrypt \\
      --setup keys/params.json \\
      --id bob@example.com \\
      --plaintext "hello world" \\
      --store_dir keys/store

Prints the object_id that holder_local.py decrypt needs.
"""

from __future__ import annotations

import argparse
import logging
import sys

from kuibe import config, hybrid, serialize
from kuibe.errors import ProtocolError
from kuibe.object_store import FileObjectStore, new_object_id


def main() -> None:
    ap = argparse.ArgumentParser(description="kuibe encrypt")
    ap.add_argument("--setup",     default=config.PARAMS_FILE,
                    help="Public params JSON produced by pkg_local.py setup")
    ap.add_argument("--id",        required=True,
                    help="Recipient identity")
    ap.add_argument("--numeric",   action="store_true",
                    help="Treat --id as an integer in ZR")
    ap.add_argument("--plaintext", required=True,
                    help="Plaintext string to encrypt")
    ap.add_argument("--eta",       default=config.DEFAULT_ETA,
                    help="Context label fed to the extractor (default: %(default)s)")
    ap.add_argument("--recipient-version", type=int, default=None,
                    help="Recipient key version to record with the bundle (informational)")
    ap.add_argument("--store_dir", default=config.STORE_DIR,
                    help="Directory to store the bundle")
    ap.add_argument("--verbose",   action="store_true", help="Debug logging on stderr")
    args = ap.parse_args()
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if args.verbose else logging.WARNING)

    params = serialize.load_params(serialize.load_json(args.setup))
    identity = int(args.id) if args.numeric else args.id

    try:
        sealed = hybrid.seal(params, identity, args.plaintext.encode("utf-8"), args.eta)
    except ProtocolError as e:
        raise SystemExit(f"[SENDER] Encrypt FAILED: {e}")

    obj_id = new_object_id()
    record = {
        "scheme":      "kuibe",
        "curve":       params.curve,
        "identity":    serialize.dump_identity(identity),
        "key_version": args.recipient_version,
        "sealed":      serialize.dump_sealed(params, sealed),
    }
    store = FileObjectStore(args.store_dir)
    store.put(obj_id, record)

    # Print obj_id first so callers can capture it easily
    print(obj_id)
    print(f"[SENDER] Bundle stored -> {args.store_dir}/{obj_id}  (id={identity!r})")


if __name__ == "__main__":
    main()
