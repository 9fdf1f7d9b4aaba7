# -*- coding: utf-8 -*-
"""
bench.py  (per-phase timings)
-----------------------------
  python -m kuibe.bench --curve SS512 --rounds 10

Times Setup, KeyGen, KeyUpdate, Encrypt and Decrypt and prints the averages.
Every round is checked end to end: a round that does not decrypt to the
message it encrypted aborts the run.
"""

from __future__ import annotations

import argparse
import time
from typing import Dict

from charm.toolbox.pairinggroup import GT

from kuibe import config, core
from kuibe.engine import engine_for

PHASES = ("Setup", "KeyGen", "KeyUpdate", "Encrypt", "Decrypt")


def run(curve: str, rounds: int, identity: str = "bench@example.com") -> Dict[str, float]:
    engine = engine_for(curve)
    totals = dict.fromkeys(PHASES, 0.0)

    for _ in range(rounds):
        t0 = time.perf_counter()
        res = core.setup(engine)
        t1 = time.perf_counter()
        key = core.keygen(res.params, res.msk, identity)
        t2 = time.perf_counter()
        key = core.key_update(res.params, key)
        t3 = time.perf_counter()
        msg = engine.random(GT)
        ct = core.encrypt(res.params, identity, msg, config.DEFAULT_ETA)
        t4 = time.perf_counter()
        out = core.decrypt(res.params, ct, key)
        t5 = time.perf_counter()

        if not out.ok or out.message != msg:
            raise SystemExit("[BENCH] round failed to decrypt its own ciphertext")

        for phase, dt in zip(PHASES, (t1 - t0, t2 - t1, t3 - t2, t4 - t3, t5 - t4)):
            totals[phase] += dt

    return {phase: total / rounds for phase, total in totals.items()}


def main() -> None:
    ap = argparse.ArgumentParser(description="kuibe per-phase benchmark")
    ap.add_argument("--curve",  default=config.DEFAULT_CURVE, help="Pairing curve (default: %(default)s)")
    ap.add_argument("--rounds", type=int, default=10, help="Rounds to average over")
    args = ap.parse_args()
    if args.rounds < 1:
        raise SystemExit("[BENCH] --rounds must be >= 1")

    avgs = run(args.curve, args.rounds)
    print(f"curve={args.curve}  rounds={args.rounds}")
    print("-" * 32)
    for phase in PHASES:
        print(f"{phase:<12}| {avgs[phase]:.6f} sec")
    print("-" * 32)
    print(f"{'Total':<12}| {sum(avgs.values()):.6f} sec")


if __name__ == "__main__":
    main()
