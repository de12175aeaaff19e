#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
arclength_crosscheck.py

ETHOS
  • The arc length under test is imported from the upstream script
    (arclength_ellipse.json via run.py), not recomputed and trusted.
  • The reference is independent of elliptic integrals: mpmath quadrature of
    the speed ds/dθ = sqrt(a^2 sin^2 θ + b^2 cos^2 θ).

WHAT THIS CERTIFIES
  For one ellipse (a, b) and bounds (θ0, θ1):
  (i)   the upstream value equals a fresh arclength_ellipse(a, b, θ0, θ1),
  (ii)  it equals ∫_{θ0}^{θ1} sqrt(a^2 sin^2 θ + b^2 cos^2 θ) dθ (mpmath.quad),
  (iii) antisymmetry: L(θ1, θ0) = −L(θ0, θ1) exactly, and L(θ, θ) = 0,
  (iv)  additivity:   L(θ0, θm) + L(θm, θ1) = L(θ0, θ1) at the midpoint θm,
  (v)   axis swap:    L_{b,a}(θ0, θ1) = L_{a,b}(π/2 − θ1, π/2 − θ0)
        (ties the a < b branch to the a > b branch),
  (vi)  monotone:     L(θ0, θ) strictly increases on a grid θ ∈ (θ0, θ0 + 2π].

INPUTS (CLI)
  REQUIRED (per scripts table)
    --a, --b             Semi-axes (from arclength_ellipse.json inputs)
    --theta0, --theta1   Bounds in radians (from arclength_ellipse.json inputs)
    --arclength          Upstream arc length (from arclength_ellipse.json outputs)
  OPTIONAL
    --rtol <float>       Relative tolerance (default 1e-12)
    --dps <int>          mpmath quadrature precision (default 30)
    --json-out <path>    Output path (default: outputs/arclength_crosscheck.json)
"""

from __future__ import annotations
import argparse
import math
from typing import Any, Dict

import mpmath as mp
import numpy as np

from arclength_ellipse import arclength_ellipse
from ellipse_utils import (
    InvalidArgument,
    ComputationFailed,
    parse_number,
    number_record,
    fmt_float,
    default_json_out,
    write_json,
    make_meta,
    ledger_header,
    console_show,
)

DEFAULT_RTOL = 1e-12
DEFAULT_DPS = 30
MONOTONE_GRID = 64

def quad_arclength(a: float, b: float, theta0: float, theta1: float, dps: int = DEFAULT_DPS) -> float:
    """∫ sqrt(a^2 sin^2 θ + b^2 cos^2 θ) dθ by mpmath.quad on pieces no longer than π/2."""
    with mp.workdps(dps):
        a2, b2 = mp.mpf(a) ** 2, mp.mpf(b) ** 2
        t0, t1 = mp.mpf(theta0), mp.mpf(theta1)
        pieces = max(1, int(math.ceil(abs(theta1 - theta0) / (math.pi / 2))))
        nodes = [t0 + (t1 - t0) * k / pieces for k in range(pieces + 1)]
        speed = lambda t: mp.sqrt(a2 * mp.sin(t) ** 2 + b2 * mp.cos(t) ** 2)
        return float(mp.quad(speed, nodes))

def check_arclength(a: float, b: float, theta0: float, theta1: float, upstream: float,
                    rtol: float = DEFAULT_RTOL, dps: int = DEFAULT_DPS) -> Dict[str, Any]:
    scale = max(1.0, abs(upstream))

    L = arclength_ellipse(a, b, theta0, theta1)
    err_recompute = abs(L - upstream) / scale
    passed_recompute = bool(err_recompute <= rtol)

    ref = quad_arclength(a, b, theta0, theta1, dps)
    err_quad = abs(upstream - ref) / max(1.0, abs(ref))
    passed_quad = bool(err_quad <= rtol)

    passed_antisym = bool(arclength_ellipse(a, b, theta1, theta0) == -L
                          and arclength_ellipse(a, b, theta0, theta0) == 0.0)

    tm = 0.5 * (theta0 + theta1)
    split = arclength_ellipse(a, b, theta0, tm) + arclength_ellipse(a, b, tm, theta1)
    err_additive = abs(split - L) / scale
    passed_additive = bool(err_additive <= rtol)

    swapped = arclength_ellipse(b, a, math.pi / 2 - theta1, math.pi / 2 - theta0)
    err_swap = abs(swapped - L) / scale
    passed_swap = bool(err_swap <= rtol)

    grid = theta0 + np.linspace(0.0, 2.0 * math.pi, MONOTONE_GRID + 1)[1:]
    prefix = arclength_ellipse(a, b, np.full(grid.shape, theta0), grid)
    passed_monotone = bool(prefix[0] > 0.0 and np.all(np.diff(prefix) > 0.0))

    all_passed = (passed_recompute and passed_quad and passed_antisym and passed_additive
                  and passed_swap and passed_monotone)
    return {
        "arclength": float(L),
        "quad_reference": ref,
        "err_recompute": err_recompute,
        "err_quad": err_quad,
        "err_additive": err_additive,
        "err_swap": err_swap,
        "passed_recompute": passed_recompute,
        "passed_quad": passed_quad,
        "passed_antisym": passed_antisym,
        "passed_additive": passed_additive,
        "passed_swap": passed_swap,
        "passed_monotone": passed_monotone,
        "all_passed": bool(all_passed),
    }

def main() -> None:
    ap = argparse.ArgumentParser(description="C2: ellipse arc length vs quadrature and structural checks.")
    ap.add_argument("--a", type=str, required=True, help="Semi-axis along x.")
    ap.add_argument("--b", type=str, required=True, help="Semi-axis along y.")
    ap.add_argument("--theta0", type=str, required=True, help="Start angle (radians).")
    ap.add_argument("--theta1", type=str, required=True, help="End angle (radians).")
    ap.add_argument("--arclength", type=str, required=True, help="Upstream arc length under test.")
    ap.add_argument("--rtol", type=float, default=DEFAULT_RTOL, help="Relative tolerance.")
    ap.add_argument("--dps", type=int, default=DEFAULT_DPS, help="mpmath quadrature precision (digits).")
    ap.add_argument("--json-out", type=str, default=None,
                    help="Output path (default: outputs/arclength_crosscheck.json)")
    args = ap.parse_args()

    try:
        pa, pb = parse_number(args.a), parse_number(args.b)
        p0, p1 = parse_number(args.theta0), parse_number(args.theta1)
        pL = parse_number(args.arclength)
        res = check_arclength(pa.value, pb.value, p0.value, p1.value, pL.value,
                              rtol=args.rtol, dps=args.dps)
    except (InvalidArgument, ComputationFailed) as e:
        raise SystemExit(f"[arclength_crosscheck] {e}") from e

    ledger_header("Ellipse arc length cross-check (C2)")
    console_show("upstream", None, pL.value)
    console_show("recomputed", None, res["arclength"])
    console_show("quad", None, res["quad_reference"])
    print(f"Recompute          : {res['err_recompute']:.2e}  -> PASS={res['passed_recompute']}")
    print(f"Quadrature         : {res['err_quad']:.2e}  -> PASS={res['passed_quad']}")
    print(f"Antisymmetry       : -> PASS={res['passed_antisym']}")
    print(f"Additivity         : {res['err_additive']:.2e}  -> PASS={res['passed_additive']}")
    print(f"Axis swap          : {res['err_swap']:.2e}  -> PASS={res['passed_swap']}")
    print(f"Monotone in theta1 : -> PASS={res['passed_monotone']}")
    print(f"ALL PASSED         : {res['all_passed']}\n")

    payload = {
        "meta": make_meta(__file__,
                          description="Arc length certificate: quadrature, antisymmetry, additivity, axis swap.",
                          ethos_note="Upstream value consumed via CLI; reference independent of E(u|m)."),
        "inputs": {
            "a": number_record(pa), "b": number_record(pb),
            "theta0": number_record(p0), "theta1": number_record(p1),
            "arclength": number_record(pL, "Upstream value (arclength_ellipse.py)"),
            "rtol": fmt_float(args.rtol), "dps": int(args.dps),
        },
        "outputs": {k: (fmt_float(v) if isinstance(v, float) else v) for k, v in res.items()},
        "status": {"ok": res["all_passed"]},
    }
    out_path = default_json_out(args.json_out, __file__)
    write_json(out_path, payload)
    print(f"Wrote JSON results to: {out_path}")

if __name__ == "__main__":
    main()
