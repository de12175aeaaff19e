# run_utils.py
"""
Value plumbing for run.py: split var paths and turn JSON leaves written by
the scripts in src/ back into exact values for the next script's CLI.

Nodes written by ellipse_utils.number_record and the script outputs look like
  {"raw": "pi/10", "pi_fraction": "1/10", "decimal": "0.3141592653589793"}
  {"raw": "3/4", "rational": "3/4", "decimal": "0.75"}
  {"decimal": "48.442241102738436", "desc": "..."}
Bare JSON scalars (numbers, "n/d" strings) are accepted too.
"""
from __future__ import annotations
from typing import Any, Optional, Tuple, Union
import re
import mpmath as mp
from fractions import Fraction

# generous working precision for parsing
mp.mp.dps = 60

# trailing coercion tags a var path may carry
COERCION_TAGS = ("int", "float", "rational")

# 'decimal', 'decimal_30', 'float:24' ...; the largest digit hint wins
_DIGITS_KEY = re.compile(r"^(?:decimal|float)(?:[_:](\d+))?$", re.I)

Parsed = Union[Tuple[int, int], int, mp.mpf, str]

def split_root_sub_comp(v: str) -> tuple[str, Optional[str], Optional[str]]:
    """
    'ellipse.theta1.float:24' -> ('ellipse', 'theta1', 'float:24')
    'arclength.float'         -> ('arclength', None, 'float')
    'arclength'               -> ('arclength', None, None)
    """
    parts = v.split(".")
    comp: Optional[str] = None
    if len(parts) > 1 and (parts[-1] in COERCION_TAGS or parts[-1].startswith("float:")):
        comp = parts.pop()
    root = parts[0]
    sub = ".".join(parts[1:]) or None
    return root, sub, comp

def _as_fraction(s: Any) -> Optional[Fraction]:
    """'n/d' string -> Fraction; anything else (decimals, 'pi/10') -> None."""
    if not isinstance(s, str) or "/" not in s:
        return None
    try:
        return Fraction(s.strip())
    except (ValueError, ZeroDivisionError):
        return None

def _decimal_candidate(node: dict) -> Any:
    best, best_digits = None, -1
    for k, v in node.items():
        hit = _DIGITS_KEY.match(k)
        if hit and v is not None:
            digits = int(hit.group(1) or 0)
            if digits > best_digits:
                best, best_digits = v, digits
    if best is None:
        best = node.get("value", node.get("raw"))
    return best

def parse_input(obj: Any) -> Parsed:
    """
    Parse a JSON node (or a single-key wrapper around one) into:
      • (n, d)   when the node states an exact rational ("n/d" or a 'rational' key)
      • int      for a bare JSON integer
      • mp.mpf   from the most precise decimal/float/value/raw entry
      • str      when that entry is not numeric (symbolic forms such as "pi/10")
    Raises ValueError when nothing usable is found (e.g. a boolean).
    """
    node = obj
    if isinstance(node, dict) and len(node) == 1:
        (node,) = node.values()

    fr = _as_fraction(node.get("rational") if isinstance(node, dict) else node)
    if fr is not None:
        return fr.numerator, fr.denominator

    if isinstance(node, bool):
        raise ValueError(f"parse_input: boolean is not a CLI value: {obj!r}")
    if isinstance(node, int):
        return node

    cand = _decimal_candidate(node) if isinstance(node, dict) else node
    if isinstance(cand, float):
        return mp.mpf(repr(cand))
    if not isinstance(cand, (str, int)) or isinstance(cand, bool):
        raise ValueError(f"parse_input: could not parse value from {obj!r}")
    try:
        return mp.mpf(str(cand).strip())
    except ValueError:
        return str(cand).strip()
