#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ellipse_utils.py — shared error types, CLI number/angle parsing, JSON and ledger helpers

ETHOS
  • Scripts consume ONLY CLI flags. No JSON file reads inside helpers.
  • No embedded theory constants. Pure plumbing/formatting utilities.
  • Numerics are IEEE double (numpy float64); mpmath is used only to parse
    CLI scalars exactly (p/q, π multiples) before rounding once to float.

WHAT THIS PROVIDES
  Errors & Validation
    - InvalidArgument   (ValueError)      bad arity, domain, shape, complex input
    - ComputationFailed (ArithmeticError) AGM did not converge within its cap
    - require(cond, "message", exc=InvalidArgument)
    - as_real_array(x, "u") -> float64 ndarray (complex / non-numeric rejected)
    - ensure_finite([("a", a), ("b", b)])

  Parsing & Numbers
    - parse_number("8/105")   -> ParsedNumber(raw="8/105", rational="8/105", value=0.0761...)
    - parse_number("pi/10")   -> ParsedNumber(raw="pi/10", pi_fraction="1/10", value=0.3141...)
    - parse_number_list("0, pi/4, 3pi/2") -> [ParsedNumber, ...]
    - pi_fraction_or_none(0.7853981633974483) -> "1/4"   (cosmetic)

  JSON I/O (write only) & Meta
    - default_json_out(args.json_out, __file__)
    - write_json(path, payload)
    - make_meta(__file__, description="...", ethos_note="...")
    - fmt_float(x) -> shortest round-trip decimal string ("inf"/"-inf"/"nan" kept)

  Console Ledger
    - ledger_header("Title")
    - console_show("F", tag, value)  # aligned name/value/[tag]
"""

from __future__ import annotations

import json
import math
import re
import sys
import platform
from dataclasses import dataclass
from fractions import Fraction
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import mpmath as mp
import numpy as np

# --------------------------- precision & cosmetics ---------------------------

PARSE_DPS = 50          # working digits for exact CLI parsing
PI_TAG_MAX_DEN = 360    # cosmetic π-fraction reconstruction bound

# ---------------------------------- errors -----------------------------------

class InvalidArgument(ValueError):
    """Caller supplied an argument outside the operation's contract."""


class ComputationFailed(ArithmeticError):
    """An iteration exceeded its safety cap without meeting its convergence test."""


def require(condition: bool, message: str, exc: type = InvalidArgument) -> None:
    """
    Fail loudly with a clear message if a required condition is not met.
    """
    if not condition:
        raise exc(message)

# ------------------------------- data classes --------------------------------

@dataclass(frozen=True)
class ParsedNumber:
    """Uniform representation of a CLI-provided scalar."""
    raw: str                     # original CLI string
    rational: Optional[str]      # "p/q" if given as an exact rational, else None
    pi_fraction: Optional[str]   # "p/q" when the input was (p/q)·π, else None
    exact: mp.mpf                # value at PARSE_DPS digits
    value: float                 # exact rounded once to IEEE double

# ------------------------------- num parsing ---------------------------------

# optional sign, optional coefficient (int, decimal or p/q, with optional '*'),
# 'pi' or 'π', optional '/q' divisor
_PI_FORM = re.compile(
    r"^(?P<sign>[+-]?)\s*(?P<coef>\d+(?:\.\d*)?(?:/\d+)?)?\s*\*?\s*(?:pi|π)\s*(?:/\s*(?P<div>\d+(?:\.\d*)?))?$",
    re.I,
)

def _exact_from_token(t: str) -> Tuple[Optional[Fraction], mp.mpf]:
    """'p/q' or decimal token → (Fraction|None, mpf). Decimals are not rationals."""
    if "/" in t:
        fr = Fraction(t)
        return fr, mp.mpf(fr.numerator) / mp.mpf(fr.denominator)
    return None, mp.mpf(t)

def parse_number(s: str) -> ParsedNumber:
    """
    Parse a CLI scalar: decimal ("0.75"), rational ("3/4") or a multiple of π
    ("pi", "pi/10", "3pi/4", "-2*pi", "0.5π"). Raises InvalidArgument on junk
    or non-finite values.
    """
    t = str(s).strip()
    with mp.workdps(PARSE_DPS):
        m = _PI_FORM.match(t)
        try:
            if m:
                coef = Fraction(m.group("coef")) if m.group("coef") else Fraction(1)
                if m.group("div"):
                    coef /= Fraction(m.group("div"))
                if m.group("sign") == "-":
                    coef = -coef
                exact = mp.mpf(coef.numerator) / mp.mpf(coef.denominator) * mp.pi
                pi_tag = f"{coef.numerator}/{coef.denominator}"
                rational = None
            else:
                fr, exact = _exact_from_token(t)
                rational = f"{fr.numerator}/{fr.denominator}" if fr is not None else None
                pi_tag = None
        except (ValueError, ZeroDivisionError) as e:
            raise InvalidArgument(f"Cannot parse number from {s!r}") from e
        require(mp.isfinite(exact), f"Non-finite value after parsing {s!r}")
        return ParsedNumber(raw=str(s), rational=rational, pi_fraction=pi_tag,
                            exact=+exact, value=float(exact))

def parse_number_list(s: str) -> List[ParsedNumber]:
    """Comma- or whitespace-separated list of parse_number tokens."""
    tokens = [tok for tok in re.split(r"[,\s]+", str(s).strip()) if tok]
    require(len(tokens) > 0, f"Empty number list: {s!r}")
    return [parse_number(tok) for tok in tokens]

# ---------------------------- cosmetic π tags --------------------------------

def pi_fraction_or_none(x: float, max_den: int = PI_TAG_MAX_DEN) -> Optional[str]:
    """
    Try to represent x as (p/q)·π with q <= max_den, to within a few ulps.
    Cosmetic only; never feeds back into computation.
    """
    if not math.isfinite(x):
        return None
    if x == 0.0:
        return "0"
    fr = Fraction(x / math.pi).limit_denominator(max_den)
    if abs(float(fr) * math.pi - x) <= 8 * math.ulp(x):
        return f"{fr.numerator}/{fr.denominator}"
    return None

def fmt_float(x: Any) -> str:
    """Shortest round-trip decimal string of a double ('inf', '-inf', 'nan' kept)."""
    return repr(float(x))

# ------------------------------ JSON utilities -------------------------------

def default_json_out(arg: Optional[str], script_file: str) -> Path:
    """
    Compute the output JSON path following the project convention:
      - if arg is provided, use it (create parent dirs)
      - else write to outputs/<script_basename>.json
    """
    if arg:
        p = Path(arg)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p
    outdir = Path("outputs")
    outdir.mkdir(parents=True, exist_ok=True)
    return outdir / (Path(script_file).with_suffix(".json").name)

def write_json(path: Path | str, payload: Dict[str, Any]) -> None:
    """
    Deterministically write JSON (sorted keys, 2-space indent).
    Callers pass float results through fmt_float so non-finite values stay valid JSON.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

def make_meta(script_file: str, *, description: Optional[str] = None,
              ethos_note: Optional[str] = None) -> Dict[str, Any]:
    """
    Standard meta block with script name, runtime, and optional description/ethos note.
    """
    return {
        "schema_version": "1.0",
        "script": Path(script_file).name,
        "run_env": {"python": sys.version.split()[0], "platform": platform.platform()},
        **({"description": description} if description else {}),
        **({"ethos": ethos_note} if ethos_note else {}),
    }

def number_record(pn: ParsedNumber, desc: Optional[str] = None) -> Dict[str, Any]:
    """JSON echo of a parsed CLI input: {raw, rational?, pi_fraction?, decimal}."""
    return {
        "raw": pn.raw,
        **({"rational": pn.rational} if pn.rational else {}),
        **({"pi_fraction": pn.pi_fraction} if pn.pi_fraction else {}),
        "decimal": fmt_float(pn.value),
        **({"desc": desc} if desc else {}),
    }

# ----------------------------- console formatting ----------------------------

def ledger_header(title: str) -> None:
    print(f"\n=== {title} ===")

def console_show(name: str, tag: Optional[str], value: float, width: int = 12) -> None:
    """
    Pretty console line: right-aligned name, value (17 significant digits),
    and a [tag] (explicit, else a reconstructed π-fraction, else '-').
    """
    v = float(value)
    if tag is None:
        pf = pi_fraction_or_none(v)
        tag = f"{pf}·π" if pf not in (None, "0") else None
    print(f"{name:>{width}} : {v:.17g}   [{tag or '-'}]")

# ------------------------------ validations ----------------------------------

def as_real_array(x: Any, name: str) -> np.ndarray:
    """float64 array view of x; complex or non-numeric input raises InvalidArgument."""
    arr = np.asarray(x)
    require(not np.iscomplexobj(arr),
            f"{name} must be real; use a complex-argument variant for complex input")
    require(arr.dtype.kind in "biuf", f"{name} must be numeric, got dtype {arr.dtype}")
    return arr.astype(float)

def ensure_finite(name_value_pairs: Iterable[Tuple[str, Any]]) -> None:
    """
    Assert all values are finite reals; raise InvalidArgument otherwise.
    """
    for name, v in name_value_pairs:
        try:
            vv = float(v)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"Non-numeric value for {name}: {v!r}") from e
        if not math.isfinite(vv):
            raise InvalidArgument(f"Non-finite value for {name}: {v!r}")
