#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
elliptic12.py

ETHOS
  • Library functions are pure: arrays in, arrays out, no printing, no I/O.
  • The CLI consumes ONLY flags and writes one deterministic JSON payload.
  • Constants are stated where they are used (A&S 17.6 recurrences, machine epsilon).

WHAT THIS COMPUTES
  Incomplete elliptic integrals of the first and second kind and the Jacobi
  Zeta function for arbitrary real (phase u, modulus m) pairs:
      F(u|m) = ∫_0^u dt / sqrt(1 − m sin^2 t)
      E(u|m) = ∫_0^u sqrt(1 − m sin^2 t) dt
      Z(u|m) = E(u|m) − E(m)/K(m) · F(u|m)
  using the Arithmetic-Geometric Mean and the descending Landen
  transformation (Abramowitz & Stegun, Handbook of Mathematical Functions,
  Ch. 17.6). Also the complete integrals K(m), E(m) from the same AGM table.

DERIVATION SKETCH (auditor refresher)
  AGM:     a_0 = 1, b_0 = sqrt(1−m), c_0 = sqrt(m)
           a_i = (a_{i−1}+b_{i−1})/2, b_i = sqrt(a_{i−1} b_{i−1}), c_i = (a_{i−1}−b_{i−1})/2
           depth n = first i with |c_i| <= tol; N = n − 1.
  Landen: tan(φ_i − φ_{i−1}) = (b_{i−1}/a_{i−1}) tan φ_{i−1}, unwrapped by the
           multiple of π that keeps φ_i continuous in φ_0 (period of tan is π,
           the integral is quasi-periodic: F(φ+kπ) = F(φ) + 2k K).
  Result:  F = φ_N / (2^N a_N)
           Z = Σ_{i=1..N} c_i sin φ_i
           E = Z + (1 − ½ Σ_{j=0..N} 2^j c_j^2) · F
  Degenerate moduli are closed forms: m = 0 → (u, u, 0);
  m = 1 → F = gd^{-1}(u) for |u| < π/2 (±∞ beyond), E, Z from |cos t|.

  Tables generating grid (A&S pp. 613–621):
      φ = 0..90° step 5°, α = 0..90° step 2°, m = sin^2 α   (see --table)

INPUTS (CLI)
  --u        <list>   Phases (radians unless --degrees); "0.5, pi/3, 3pi/4"
  --m        <list>   Moduli in [0, 1]; one value broadcasts against --u
  --tol      <float>  AGM convergence tolerance (default: machine epsilon)
  --degrees           Interpret --u in degrees
  --table             Ignore --u/--m; evaluate the A&S tables grid
  --json-out <path>   Output path (default: outputs/elliptic12.json)

OUTPUTS
  outputs.F / outputs.E / outputs.Z : {"shape": [...], "values": ["...", ...]}
  outputs.complete                  : per distinct modulus {"m", "K", "E"}
"""

from __future__ import annotations

import argparse
from typing import Any, Dict, List, Tuple

import numpy as np

from ellipse_utils import (
    InvalidArgument,
    ComputationFailed,
    as_real_array,
    require,
    parse_number_list,
    fmt_float,
    default_json_out,
    write_json,
    make_meta,
    ledger_header,
    console_show,
)

# ------------------------------ tunables ------------------------------------

EPS: float = float(np.finfo(float).eps)   # default tolerance: float64 machine epsilon
MAX_AGM_ITER: int = 64                    # quadratic convergence needs ~6 for float64

# ------------------------------ helpers -------------------------------------

def nearest_multiple_of_pi(x):
    """
    π·k where k is the integer nearest to x/π, ties rounded away from zero.

    Used to pick the branch of atan inside the Landen recursion.
    """
    q = np.asarray(x, dtype=float) / np.pi
    return np.pi * (np.sign(q) * np.floor(np.abs(q) + 0.5))

def _broadcast_pair(u: np.ndarray, m: np.ndarray) -> Tuple[np.ndarray, np.ndarray, Tuple[int, ...]]:
    """A single-element operand broadcasts against the other; otherwise shapes must match."""
    if u.size == 1 and m.size == 1:
        shape = np.broadcast_shapes(u.shape, m.shape)
    elif m.size == 1:
        shape = u.shape
    elif u.size == 1:
        shape = m.shape
    else:
        require(u.shape == m.shape, f"u and m must be the same size (got {u.shape} and {m.shape})")
        shape = u.shape
    if u.shape != shape:
        u = np.full(shape, u.reshape(-1)[0])
    if m.shape != shape:
        m = np.full(shape, m.reshape(-1)[0])
    return u.ravel(), m.ravel(), shape

def _check_moduli(m: np.ndarray) -> None:
    # NaN fails both comparisons
    require(bool(np.all((m >= 0.0) & (m <= 1.0))), "m must be in the range 0 <= m <= 1")

# ------------------------------ AGM core ------------------------------------

def agm_sequence(moduli, tol: float = EPS):
    """
    Arithmetic-Geometric Mean table for each modulus column.

    Returns (a, b, c, depth): a, b, c have shape (rows, len(moduli)); depth[k]
    is the first row index with |c| <= tol for column k. All columns advance in
    lockstep until the slowest has converged.

    Raises ComputationFailed if MAX_AGM_ITER iterations are not enough.
    """
    mu = np.atleast_1d(np.asarray(moduli, dtype=float))
    a: List[np.ndarray] = [np.ones_like(mu)]
    b: List[np.ndarray] = [np.sqrt(1.0 - mu)]
    c: List[np.ndarray] = [np.sqrt(mu)]
    depth = np.zeros(mu.shape, dtype=np.int64)
    done = np.abs(c[0]) <= tol
    i = 0
    while not np.all(done):
        i += 1
        require(i <= MAX_AGM_ITER,
                f"AGM did not converge to tol={tol!r} within {MAX_AGM_ITER} iterations",
                ComputationFailed)
        a_prev, b_prev = a[-1], b[-1]
        a.append(0.5 * (a_prev + b_prev))
        b.append(np.sqrt(a_prev * b_prev))
        c.append(0.5 * (a_prev - b_prev))
        hit = ~done & (np.abs(c[-1]) <= tol)
        depth[hit] = i
        done |= hit
    return np.vstack(a), np.vstack(b), np.vstack(c), depth

def _agm_groups(mu: np.ndarray, tol: float):
    """AGM table plus Landen length N = depth − 1 and C = Σ_{j<=N} 2^j c_j^2 per column."""
    a, b, c, depth = agm_sequence(mu, tol)
    N = np.maximum(depth - 1, 0)
    C = np.zeros(mu.shape)
    for j in range(c.shape[0]):
        C += np.where(j <= N, 2.0 ** j * c[j] ** 2, 0.0)
    return a, b, c, N, C

# ------------------------------ public API ----------------------------------

def elliptic12(u, m, tol: float = EPS, *, group_moduli: bool = True):
    """
    Incomplete elliptic integrals F(u|m), E(u|m) and Jacobi Zeta Z(u|m).

    u and m are real scalars or arrays; a single-element operand broadcasts
    against the other, otherwise their shapes must be equal. Every m must lie
    in [0, 1]. Returns (F, E, Z) as float arrays of the broadcast shape.

    Pairs sharing a modulus share one AGM column; group_moduli=False gives
    every pair its own column (same numbers, more work).

    >>> F, E, Z = elliptic12(np.pi / 2, 0.5)      # complete: K(0.5), E(0.5), 0
    """
    u = as_real_array(u, "u")
    m = as_real_array(m, "m")
    uf, mf, shape = _broadcast_pair(u, m)
    _check_moduli(mf)

    F = np.zeros_like(uf)
    E = np.zeros_like(uf)
    Z = np.zeros_like(uf)

    I = np.flatnonzero((mf != 0.0) & (mf != 1.0))
    if I.size:
        if group_moduli:
            mu, K = np.unique(mf[I], return_inverse=True)
            K = K.reshape(-1)
        else:
            mu, K = mf[I], np.arange(I.size)
        a, b, c, N, C = _agm_groups(mu, tol)

        s = np.sign(uf[I])
        phi = s * uf[I]                 # work on |u|; F and Z are odd in u
        Cp = np.zeros_like(phi)
        Np = N[K]
        for i in range(1, int(N.max()) + 1):
            act = Np >= i
            k = K[act]
            p = phi[act]
            theta = np.arctan(b[i - 1, k] / a[i - 1, k] * np.tan(p))
            p = p + theta + nearest_multiple_of_pi(p - theta)
            phi[act] = p
            Cp[act] += c[i, k] * np.sin(p)

        Fu = phi / (2.0 ** Np * a[Np, K])
        F[I] = s * Fu
        Z[I] = s * Cp
        E[I] = s * (Cp + (1.0 - 0.5 * C[K]) * Fu)

    # m == 0: the integrand is identically 1
    m0 = mf == 0.0
    F[m0] = uf[m0]
    E[m0] = uf[m0]
    Z[m0] = 0.0

    # m == 1: integrand is 1/|cos t| (F) and |cos t| (E)
    J = np.flatnonzero(mf == 1.0)
    if J.size:
        uj = uf[J]
        aj = np.abs(uj)
        sj = np.sign(uj)
        quad = np.floor((aj + np.pi / 2) / np.pi)
        par = (-1.0) ** quad
        inside = aj < np.pi / 2
        Fj = np.empty_like(uj)
        Fj[inside] = sj[inside] * np.log(np.tan(np.pi / 4 + aj[inside] / 2))
        Fj[~inside] = sj[~inside] * np.inf      # diverges at odd multiples of π/2
        F[J] = Fj
        E[J] = sj * (par * np.sin(aj) + 2.0 * quad)
        Z[J] = sj * par * np.sin(aj)

    return F.reshape(shape), E.reshape(shape), Z.reshape(shape)

def ellipke(m, tol: float = EPS):
    """
    Complete elliptic integrals K(m) and E(m) from the AGM table.

    K = π / (2 a_N), E = K · (1 − ½ Σ 2^j c_j^2); K(1) = ∞, E(1) = 1.
    """
    m = as_real_array(m, "m")
    shape = m.shape
    mf = m.ravel()
    _check_moduli(mf)

    K = np.empty_like(mf)
    E = np.empty_like(mf)
    I = np.flatnonzero((mf != 0.0) & (mf != 1.0))
    if I.size:
        mu, inv = np.unique(mf[I], return_inverse=True)
        inv = inv.reshape(-1)
        a, _, _, N, C = _agm_groups(mu, tol)
        Kmu = np.pi / (2.0 * a[N, np.arange(mu.size)])
        K[I] = Kmu[inv]
        E[I] = (Kmu * (1.0 - 0.5 * C))[inv]
    m0 = mf == 0.0
    K[m0] = np.pi / 2
    E[m0] = np.pi / 2
    m1 = mf == 1.0
    K[m1] = np.inf
    E[m1] = 1.0
    return K.reshape(shape), E.reshape(shape)

# ------------------------------ CLI -----------------------------------------

def table_grid() -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """A&S tables grid: rows α = 0..90° step 2, columns φ = 0..90° step 5."""
    phi_deg, alpha_deg = np.meshgrid(np.arange(0, 91, 5), np.arange(0, 91, 2))
    phi = np.deg2rad(phi_deg)
    m = np.sin(np.deg2rad(alpha_deg)) ** 2
    return phi, m, alpha_deg

def _array_record(x: np.ndarray, desc: str) -> Dict[str, Any]:
    return {
        "shape": list(x.shape),
        "values": [fmt_float(v) for v in np.asarray(x).ravel()],
        "desc": desc,
    }

def main() -> None:
    ap = argparse.ArgumentParser(
        description="Incomplete elliptic integrals F, E and Jacobi Zeta Z via AGM + descending Landen.")
    ap.add_argument("--u", type=str, default="pi/2",
                    help='Phases, comma/space separated ("0.3, pi/4, 3pi/2").')
    ap.add_argument("--m", type=str, default="1/2",
                    help="Moduli in [0,1]; a single value broadcasts against --u.")
    ap.add_argument("--tol", type=float, default=EPS,
                    help="AGM convergence tolerance (default: float64 machine epsilon).")
    ap.add_argument("--degrees", action="store_true", help="Interpret --u in degrees.")
    ap.add_argument("--table", action="store_true",
                    help="Evaluate the A&S tables grid instead of --u/--m.")
    ap.add_argument("--json-out", type=str, default=None,
                    help="Output path (default: outputs/elliptic12.json)")
    args = ap.parse_args()

    try:
        if args.table:
            u, m, _ = table_grid()
            inputs: Dict[str, Any] = {"grid": {"value": "A&S: phi 0..90 step 5 deg, alpha 0..90 step 2 deg, m = sin^2 alpha"}}
        else:
            pu = parse_number_list(args.u)
            pm = parse_number_list(args.m)
            scale = np.pi / 180 if args.degrees else 1.0
            u = np.array([p.value for p in pu]) * scale
            m = np.array([p.value for p in pm])
            inputs = {
                "u": {"raw": args.u, "degrees": bool(args.degrees), "values": [fmt_float(v) for v in u]},
                "m": {"raw": args.m, "values": [fmt_float(v) for v in m]},
            }
        F, E, Z = elliptic12(u, m, args.tol)
        mb = np.broadcast_to(m, F.shape) if np.size(m) == 1 else np.asarray(m)
        mu = np.unique(mb)
        Kc, Ec = ellipke(mu, args.tol)
    except (InvalidArgument, ComputationFailed) as e:
        raise SystemExit(f"[elliptic12] {e}") from e

    ledger_header("Incomplete elliptic integrals (AGM + descending Landen)")
    print(f"tol = {args.tol:.3e}, pairs = {F.size}, distinct moduli = {mu.size}")
    if not args.table:
        ub = np.broadcast_to(u, F.shape)
        for k in range(F.size):
            print(f"-- u = {ub.flat[k]:.17g}, m = {mb.flat[k]:.17g}")
            console_show("F", None, F.flat[k])
            console_show("E", None, E.flat[k])
            console_show("Z", None, Z.flat[k])
    for mv, kv, ev in zip(mu, Kc, Ec):
        print(f"-- complete, m = {mv:.17g}")
        console_show("K(m)", None, kv)
        console_show("E(m)", None, ev)
    print()

    payload: Dict[str, Any] = {
        "meta": make_meta(__file__,
                          description="F, E, Z by AGM and descending Landen transformation (A&S 17.6).",
                          ethos_note="CLI in → JSON out; float64 arithmetic; no JSON reads."),
        "inputs": {**inputs, "tol": fmt_float(args.tol)},
        "outputs": {
            "F": _array_record(F, "Incomplete elliptic integral of the first kind F(u|m)"),
            "E": _array_record(E, "Incomplete elliptic integral of the second kind E(u|m)"),
            "Z": _array_record(Z, "Jacobi Zeta function Z(u|m)"),
            "complete": [
                {"m": fmt_float(mv), "K": fmt_float(kv), "E": fmt_float(ev)}
                for mv, kv, ev in zip(mu, Kc, Ec)
            ],
        },
        "status": {"ok": True},
    }
    out_path = default_json_out(args.json_out, __file__)
    write_json(out_path, payload)
    print(f"Wrote JSON results to: {out_path}")

if __name__ == "__main__":
    main()
