#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
elliptic_crosscheck.py

C1: Certificate for elliptic12.py, verified against an independent
    high-precision reference (mpmath: Carlson-form ellipf/ellipe) and against
    the structural properties the AGM/Landen evaluator must satisfy:
  (i)   random (u, m) with |u| <= 3π, 0 < m < 1: F, E, Z agree with mpmath,
  (ii)  F and Z are exactly odd in u (E too),
  (iii) m = 0 is the identity (u, u, 0),
  (iv)  grouping by distinct modulus gives the same numbers as per-pair columns,
  (v)   complete integrals K(m), E(m) agree with mpmath,
  (vi)  Z = E(u|m) − E(m)/K(m)·F(u|m),
  (vii) m = 1: finite just below π/2, signed ∞ at ±π/2, E matches mpmath.

Usage:
  python src/elliptic_crosscheck.py --n-random 200 --seed 0 --rtol 1e-12 --json-out outputs/elliptic_crosscheck.json
"""

from __future__ import annotations
import argparse
import math
from typing import Any, Dict, Tuple

import mpmath as mp
import numpy as np

from elliptic12 import EPS, elliptic12, ellipke
from ellipse_utils import default_json_out, write_json, make_meta

DEFAULT_N_RANDOM = 200
DEFAULT_SEED = 0
DEFAULT_RTOL = 1e-12
DEFAULT_DPS = 30
U_SPAN = 3 * math.pi

def mp_reference(u: float, m: float, dps: int = DEFAULT_DPS) -> Tuple[float, float, float]:
    """(F, E, Z) from mpmath at `dps` digits, rounded to double."""
    with mp.workdps(dps):
        uu, mm = mp.mpf(u), mp.mpf(m)
        F = mp.ellipf(uu, mm)
        E = mp.ellipe(uu, mm)
        Z = E - mp.ellipe(mm) / mp.ellipk(mm) * F
        return float(F), float(E), float(Z)

def scaled_error(x: np.ndarray, ref: np.ndarray) -> float:
    """max |x − ref| / max(1, |ref|)."""
    x = np.asarray(x, dtype=float)
    ref = np.asarray(ref, dtype=float)
    if x.size == 0:
        return 0.0
    return float(np.max(np.abs(x - ref) / np.maximum(1.0, np.abs(ref))))

def check_elliptic(n_random: int = DEFAULT_N_RANDOM, seed: int = DEFAULT_SEED,
                   rtol: float = DEFAULT_RTOL, dps: int = DEFAULT_DPS) -> Dict[str, Any]:
    rng = np.random.default_rng(seed)
    u = rng.uniform(-U_SPAN, U_SPAN, n_random)
    m = rng.uniform(0.0, 1.0, n_random)
    m[m == 0.0] = 0.5

    # (i) mpmath agreement
    F, E, Z = elliptic12(u, m)
    ref = np.array([mp_reference(float(ui), float(mi), dps) for ui, mi in zip(u, m)]).reshape(-1, 3)
    err_F = scaled_error(F, ref[:, 0])
    err_E = scaled_error(E, ref[:, 1])
    err_Z = scaled_error(Z, ref[:, 2])
    passed_mpmath = bool(max(err_F, err_E, err_Z) <= rtol)

    # (ii) oddness (bit-exact)
    Fn, En, Zn = elliptic12(-u, m)
    passed_odd = bool(np.array_equal(Fn, -F) and np.array_equal(Zn, -Z) and np.array_equal(En, -E))

    # (iii) circular case
    F0, E0, Z0 = elliptic12(u, 0.0)
    passed_circular = bool(np.array_equal(F0, u) and np.array_equal(E0, u) and not np.any(Z0))

    # (iv) grouped vs per-pair columns on repeated moduli
    m_rep = rng.choice(m[: max(1, n_random // 10)], n_random)
    grouped = np.stack(elliptic12(u, m_rep, group_moduli=True))
    per_pair = np.stack(elliptic12(u, m_rep, group_moduli=False))
    err_grouping = scaled_error(grouped, per_pair)
    passed_grouping = bool(err_grouping <= 4 * EPS)

    # (v) complete integrals
    Kc, Ec = ellipke(m)
    with mp.workdps(dps):
        Kref = np.array([float(mp.ellipk(mp.mpf(float(mi)))) for mi in m])
        Eref = np.array([float(mp.ellipe(mp.mpf(float(mi)))) for mi in m])
    err_complete = max(scaled_error(Kc, Kref), scaled_error(Ec, Eref))
    passed_complete = bool(err_complete <= rtol)

    # (vi) Zeta identity through the complete integrals
    err_zeta = scaled_error(Z, E - Ec / Kc * F)
    passed_zeta = bool(err_zeta <= rtol)

    # (vii) m = 1 boundary
    u1 = np.array([math.pi / 2 - 1e-9, -(math.pi / 2 - 1e-9), math.pi / 2, -math.pi / 2])
    F1, E1, _ = elliptic12(u1, 1.0)
    u1e = rng.uniform(-U_SPAN, U_SPAN, 16)
    _, E1e, _ = elliptic12(u1e, 1.0)
    with mp.workdps(dps):
        E1ref = np.array([float(mp.ellipe(mp.mpf(float(x)), 1)) for x in u1e])
    err_m1 = scaled_error(E1e, E1ref)
    passed_boundary = bool(np.all(np.isfinite(F1[:2])) and F1[2] == math.inf
                           and F1[3] == -math.inf and err_m1 <= rtol)

    all_passed = (passed_mpmath and passed_odd and passed_circular and passed_grouping
                  and passed_complete and passed_zeta and passed_boundary)
    return {
        "seed": int(seed),
        "n_random": int(n_random),
        "rtol": float(rtol),
        "dps": int(dps),
        "max_err_F": err_F,
        "max_err_E": err_E,
        "max_err_Z": err_Z,
        "max_err_grouping": err_grouping,
        "max_err_complete": err_complete,
        "max_err_zeta": err_zeta,
        "max_err_E_m1": err_m1,
        "passed_mpmath": passed_mpmath,
        "passed_odd": passed_odd,
        "passed_circular": passed_circular,
        "passed_grouping": passed_grouping,
        "passed_complete": passed_complete,
        "passed_zeta": passed_zeta,
        "passed_boundary": passed_boundary,
        "all_passed": bool(all_passed),
    }

def main() -> None:
    ap = argparse.ArgumentParser(description="C1: elliptic12 vs mpmath plus structural checks.")
    ap.add_argument("--n-random", type=int, default=DEFAULT_N_RANDOM, help="Number of random (u, m) pairs.")
    ap.add_argument("--seed", type=int, default=DEFAULT_SEED, help="RNG seed for reproducibility.")
    ap.add_argument("--rtol", type=float, default=DEFAULT_RTOL,
                    help="Tolerance on |x − ref| / max(1, |ref|).")
    ap.add_argument("--dps", type=int, default=DEFAULT_DPS, help="mpmath reference precision (digits).")
    ap.add_argument("--json-out", type=str, default=None, help="Optional path to write a JSON result.")
    args = ap.parse_args()

    res = check_elliptic(n_random=args.n_random, seed=args.seed, rtol=args.rtol, dps=args.dps)

    print("\n=== elliptic12 cross-check (C1) ===")
    print(f"Seed / samples     : {res['seed']} / {res['n_random']}   (mpmath dps={res['dps']})")
    print(f"Tolerance          : {res['rtol']:.2e}")
    print(f"F, E, Z vs mpmath  : {res['max_err_F']:.2e}, {res['max_err_E']:.2e}, {res['max_err_Z']:.2e}  -> PASS={res['passed_mpmath']}")
    print(f"Odd in u           : -> PASS={res['passed_odd']}")
    print(f"m = 0 identity     : -> PASS={res['passed_circular']}")
    print(f"Grouped vs per-pair: {res['max_err_grouping']:.2e}  -> PASS={res['passed_grouping']}")
    print(f"K(m), E(m)         : {res['max_err_complete']:.2e}  -> PASS={res['passed_complete']}")
    print(f"Zeta identity      : {res['max_err_zeta']:.2e}  -> PASS={res['passed_zeta']}")
    print(f"m = 1 boundary     : E err {res['max_err_E_m1']:.2e}  -> PASS={res['passed_boundary']}")
    print(f"ALL PASSED         : {res['all_passed']}\n")

    payload = {
        "meta": make_meta(__file__,
                          description="elliptic12 certificate: mpmath agreement and structural properties."),
        "inputs": {"n_random": res["n_random"], "seed": res["seed"], "rtol": res["rtol"], "dps": res["dps"]},
        "outputs": {k: v for k, v in res.items() if k not in ("n_random", "seed", "rtol", "dps")},
        "status": {"ok": res["all_passed"]},
    }
    out_path = default_json_out(args.json_out, __file__)
    write_json(out_path, payload)
    print(f"Wrote JSON results to: {out_path}")

if __name__ == "__main__":
    main()
