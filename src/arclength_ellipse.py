#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
arclength_ellipse.py

ETHOS
  • The only numerical dependency is elliptic12.py (E(u|m)); nothing is tabulated.
  • Formulas are stated at the point of use; the CLI writes one deterministic JSON.

WHAT THIS COMPUTES
  Exact arc length of the ellipse
      x(θ) = a cos θ,   y(θ) = b sin θ,      x^2/a^2 + y^2/b^2 = 1
  between parameters θ0 and θ1 (radians, measured from the positive a semi-axis
  in the positive direction), via the incomplete elliptic integral of the
  second kind. Also the ellipse's eccentricity, focal parameter and foci.

DERIVATION SKETCH (auditor refresher)
  ds/dθ = sqrt(a^2 sin^2 θ + b^2 cos^2 θ).
  • a < b:  ds/dθ = b sqrt(1 − m sin^2 θ), m = 1 − (a/b)^2 ∈ (0,1)
            ⇒ L = b [E(θ1|m) − E(θ0|m)].
  • a > b:  that m would be negative. With ψ = π/2 − θ,
            ds/dθ = a sqrt(1 − m' sin^2 ψ), m' = 1 − (b/a)^2,
            and dψ/dθ = −1 flips the operands: L = a [E(π/2−θ0|m') − E(π/2−θ1|m')].
  • a = b:  L = a (θ1 − θ0).
  Consequences: L(θ0,θ1) = −L(θ1,θ0), L(θ,θ) = 0, L is additive over
  adjacent intervals and strictly increasing in θ1.

  Reference values (a=5, b=10):
      full perimeter                 48.442241102738436
      arc from π/10 to 2π/5          7.363580791393055

INPUTS (CLI)
  --a, --b            Semi-axes (> 0); decimals, "p/q"
  --theta0, --theta1  Bounds, given together or not at all (default 0 and 2π);
                      decimals, "p/q", or π forms ("pi/10", "3pi/4", "-2*pi")
  --degrees           Interpret the bounds in degrees
  --tol               AGM tolerance passed to elliptic12 (default: machine epsilon)
  --json-out          Output path (default: outputs/arclength_ellipse.json)

OUTPUTS
  outputs.arclength.decimal   Arc length between the bounds
  outputs.perimeter.decimal   Full perimeter (θ from 0 to 2π)
  outputs.geometry            Eccentricity, focal parameter, focal distance, foci
"""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

import mpmath as mp
import numpy as np

from elliptic12 import EPS, elliptic12
from ellipse_utils import (
    InvalidArgument,
    ComputationFailed,
    ParsedNumber,
    as_real_array,
    ensure_finite,
    require,
    parse_number,
    number_record,
    fmt_float,
    default_json_out,
    write_json,
    make_meta,
    ledger_header,
    console_show,
)

# ------------------------------ validation ----------------------------------

def _semi_axis(x: Any, name: str) -> float:
    arr = as_real_array(x, name)
    require(arr.ndim == 0, f"{name} must be a scalar semi-axis, got shape {arr.shape}")
    v = float(arr)
    ensure_finite([(name, v)])
    require(v > 0.0, f"{name} must be a positive length, got {v!r}")
    return v

# ------------------------------ arc length ----------------------------------

def arclength_ellipse(a, b, *bounds, tol: float = EPS):
    """
    Arc length of the ellipse (a cos θ, b sin θ) from theta0 to theta1.

    Call as arclength_ellipse(a, b) for the full perimeter (0 to 2π) or
    arclength_ellipse(a, b, theta0, theta1). Bounds may be arrays; they are
    broadcast together and the result has their shape (a float for scalars).
    """
    require(len(bounds) in (0, 2),
            "arclength_ellipse requires two or four inputs: (a, b) or (a, b, theta0, theta1)")
    theta0, theta1 = bounds if bounds else (0.0, 2.0 * np.pi)
    a = _semi_axis(a, "a")
    b = _semi_axis(b, "b")
    t0 = as_real_array(theta0, "theta0")
    t1 = as_real_array(theta1, "theta1")
    try:
        t0, t1 = np.broadcast_arrays(t0, t1)
    except ValueError as e:
        raise InvalidArgument(f"theta0 and theta1 cannot be broadcast together: {e}") from e

    if a == b:
        L = a * (t1 - t0)
    elif a < b:
        # angle measured from the minor axis: standard form, m in (0,1)
        m = 1.0 - (a / b) ** 2
        _, E, _ = elliptic12(np.stack([t1, t0]), m, tol)
        L = b * (E[0] - E[1])
    else:
        # angle measured from the major axis: complementary angle, b/a instead of a/b
        m = 1.0 - (b / a) ** 2
        _, E, _ = elliptic12(np.stack([np.pi / 2 - t1, np.pi / 2 - t0]), m, tol)
        L = a * (E[1] - E[0])

    L = np.asarray(L, dtype=float)
    return float(L) if L.ndim == 0 else L

# ------------------------------ geometry ------------------------------------

@dataclass(frozen=True)
class EllipseGeometry:
    """Standard ellipse quantities; the major axis lies along a when a >= b."""
    major_axis: str                  # "a" or "b"
    semi_major: float
    semi_minor: float
    eccentricity: float              # sqrt(1 − (minor/major)^2)
    focal_distance: float            # sqrt(major^2 − minor^2)
    focal_parameter: float           # minor^2 / focal_distance (∞ for a circle)
    foci: Tuple[Tuple[float, float], Tuple[float, float]]

def ellipse_geometry(a, b) -> EllipseGeometry:
    a = _semi_axis(a, "a")
    b = _semi_axis(b, "b")
    major, minor = max(a, b), min(a, b)
    c = math.sqrt(major * major - minor * minor)
    p = minor * minor / c if c > 0.0 else math.inf
    foci = ((-c, 0.0), (c, 0.0)) if a >= b else ((0.0, -c), (0.0, c))
    return EllipseGeometry(
        major_axis="a" if a >= b else "b",
        semi_major=major,
        semi_minor=minor,
        eccentricity=math.sqrt(1.0 - (minor / major) ** 2),
        focal_distance=c,
        focal_parameter=p,
        foci=foci,
    )

# ------------------------------ CLI -----------------------------------------

def _angle(pn: ParsedNumber, degrees: bool) -> float:
    """Radians from a parsed bound, converting degrees exactly before rounding."""
    if not degrees:
        return pn.value
    with mp.workdps(50):
        return float(pn.exact * mp.pi / 180)

def main() -> None:
    ap = argparse.ArgumentParser(description="Exact ellipse arc length via E(u|m) (AGM + Landen).")
    ap.add_argument("--a", type=str, required=True, help="Semi-axis along x (> 0).")
    ap.add_argument("--b", type=str, required=True, help="Semi-axis along y (> 0).")
    ap.add_argument("--theta0", type=str, default=None, help='Start angle (e.g. "pi/10").')
    ap.add_argument("--theta1", type=str, default=None, help='End angle (e.g. "pi/2").')
    ap.add_argument("--degrees", action="store_true", help="Interpret the bounds in degrees.")
    ap.add_argument("--tol", type=float, default=EPS, help="AGM tolerance (default: machine epsilon).")
    ap.add_argument("--json-out", type=str, default=None,
                    help="Output path (default: outputs/arclength_ellipse.json)")
    args = ap.parse_args()

    try:
        pa = parse_number(args.a)
        pb = parse_number(args.b)
        given = [s for s in (args.theta0, args.theta1) if s is not None]
        bounds = [parse_number(s) for s in given]
        # arity is enforced by arclength_ellipse: both bounds or none
        angles = [_angle(pn, args.degrees) for pn in bounds]
        L = arclength_ellipse(pa.value, pb.value, *angles, tol=args.tol)
        P = arclength_ellipse(pa.value, pb.value, tol=args.tol)
        geo = ellipse_geometry(pa.value, pb.value)
    except (InvalidArgument, ComputationFailed) as e:
        raise SystemExit(f"[arclength_ellipse] {e}") from e

    if bounds:
        t0, t1 = angles
        rec0, rec1 = number_record(bounds[0]), number_record(bounds[1])
        rec0["decimal"], rec1["decimal"] = fmt_float(t0), fmt_float(t1)
    else:
        t0, t1 = 0.0, 2.0 * math.pi
        rec0 = {"raw": "0", "decimal": fmt_float(t0)}
        rec1 = {"raw": "2*pi", "pi_fraction": "2/1", "decimal": fmt_float(t1)}

    ledger_header("Ellipse arc length (b·ΔE or a·ΔE on the complementary angle)")
    console_show("a", pa.rational, pa.value)
    console_show("b", pb.rational, pb.value)
    console_show("theta0", None, t0)
    console_show("theta1", None, t1)
    console_show("arclength", None, L)
    console_show("perimeter", None, P)
    console_show("ecc", None, geo.eccentricity)
    console_show("focal_p", None, geo.focal_parameter)
    print()

    payload: Dict[str, Any] = {
        "meta": make_meta(__file__,
                          description="Arc length of x=a cos t, y=b sin t between theta0 and theta1.",
                          ethos_note="CLI in → JSON out; E(u|m) from elliptic12.py; no JSON reads."),
        "inputs": {
            "a": number_record(pa, "Semi-axis along x"),
            "b": number_record(pb, "Semi-axis along y"),
            "theta0": {**rec0, "desc": "Start angle (radians, from the +a semi-axis)"},
            "theta1": {**rec1, "desc": "End angle (radians, from the +a semi-axis)"},
            "tol": fmt_float(args.tol),
        },
        "outputs": {
            "arclength": {"decimal": fmt_float(L), "desc": "Signed arc length from theta0 to theta1"},
            "perimeter": {"decimal": fmt_float(P), "desc": "Full perimeter (0 to 2π)"},
            "geometry": {
                k: ([[fmt_float(x) for x in pt] for pt in v] if k == "foci"
                    else (v if isinstance(v, str) else fmt_float(v)))
                for k, v in asdict(geo).items()
            },
        },
        "status": {"ok": True},
    }
    out_path = default_json_out(args.json_out, __file__)
    write_json(out_path, payload)
    print(f"Wrote JSON results to: {out_path}")

if __name__ == "__main__":
    main()
