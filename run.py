#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
run.py — dependency-aware runner for the elliptic / arc-length scripts

Each script in src/ reads only CLI flags and writes outputs/<script>.json.
CONFIG declares, per script, which JSON nodes it publishes (outputs) and
which flags it needs (inputs: a literal, or a var published by another
script). Dependencies are inferred from those var references.

Usage:
  python run.py <script_name.py> [--force]
  python run.py all [--force]
"""

from __future__ import annotations
import json, subprocess, sys
from pathlib import Path
from typing import Any, Dict
import mpmath as mp

from run_utils import parse_input, split_root_sub_comp

ROOT = Path(__file__).resolve().parent
SRC  = ROOT / "src"
OUT  = ROOT / "outputs"
OUT.mkdir(exist_ok=True, parents=True)

# ------------------------------- CONFIG -------------------------------

CONFIG = {
  "scripts": {
    # ---- F, E, Z on a handful of phases at m = 3/4 ----
    "elliptic12.py": {
      "outputs": {
        "elliptic_F": "outputs.F",
        "elliptic_E": "outputs.E",
        "elliptic_Z": "outputs.Z"
      },
      "inputs": [
        {"flag": "--u", "literal": "0, pi/10, pi/4, pi/2, 3pi/4, 2pi"},
        {"flag": "--m", "literal": "3/4"}
      ]
    },

    # ---- C1: elliptic12 vs mpmath ----
    "elliptic_crosscheck.py": {
      "outputs": {"elliptic_certificate": "outputs.all_passed"},
      "inputs": [
        {"flag": "--n-random", "literal": "200"},
        {"flag": "--seed",     "literal": "0"}
      ]
    },

    # ---- Reference ellipse a=5, b=10 ----
    "arclength_ellipse.py": {
      "outputs": {
        "arclength": "outputs.arclength",
        "perimeter": "outputs.perimeter",
        "ellipse":   "inputs"
      },
      "inputs": [
        {"flag": "--a",      "literal": "5"},
        {"flag": "--b",      "literal": "10"},
        {"flag": "--theta0", "literal": "pi/10"},
        {"flag": "--theta1", "literal": "2pi/5"}
      ]
    },

    # ---- C2: CONSUMES the arc length and its inputs ----
    "arclength_crosscheck.py": {
      "outputs": {"arclength_certificate": "outputs.all_passed"},
      "inputs": [
        {"flag": "--a",         "var": "ellipse.a"},
        {"flag": "--b",         "var": "ellipse.b"},
        {"flag": "--theta0",    "var": "ellipse.theta0.float:24"},
        {"flag": "--theta1",    "var": "ellipse.theta1.float:24"},
        {"flag": "--arclength", "var": "arclength.float:24"},
        {"flag": "--rtol",      "literal": "1e-12", "optional": True}
      ]
    }
  }
}

# ----------------------------- helpers (generic) -----------------------------

def jpath(script: str) -> Path:
    return OUT / (Path(script).with_suffix(".json").name)

def exists(p: Path) -> bool:
    return p.is_file() and p.stat().st_size > 0

def load_json(p: Path) -> dict:
    return json.loads(p.read_text(encoding="utf-8"))

def run_cmd(cmd: list[str]) -> None:
    print(" ".join(cmd))
    subprocess.run(cmd, check=True, cwd=ROOT)

def get_by_path(obj: Any, path: str) -> Any:
    cur = obj
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur

# ----------------------------- coercion for CLI -----------------------------

def _digits_of(comp: str) -> int:
    """'float' -> 24, 'float:17' -> 17."""
    if ":" not in comp:
        return 24
    try:
        return max(1, int(comp.split(":", 1)[1]))
    except ValueError:
        raise SystemExit(f"[run.py] Bad digit count in component {comp!r}")

def _format_for_cli_from_node(node: Any, comp: str | None) -> str:
    """
    Turn a JSON node into a CLI string.
      - untyped: exact "n/d" if the node carries one, else int, else 24-digit decimal
      - '.rational' / '.int' / '.float[:digits]': enforce that type
    Symbolic pass-through strings are only allowed untyped.
    """
    parsed = parse_input({"x": node})  # -> (n,d) | int | mpf | str

    if comp is None:
        if isinstance(parsed, tuple):
            return f"{parsed[0]}/{parsed[1]}"
        if isinstance(parsed, (int, str)):
            return str(parsed)
        return mp.nstr(parsed, 24)

    if isinstance(parsed, str):
        raise SystemExit(f"[run.py] Requested '.{comp}' but source is a non-numeric string: {parsed!r}")

    if comp == "rational":
        if isinstance(parsed, tuple):
            return f"{parsed[0]}/{parsed[1]}"
        if isinstance(parsed, int):
            return f"{parsed}/1"
        raise SystemExit("[run.py] Requested '.rational' but source is a decimal.")

    if comp == "int":
        if isinstance(parsed, tuple):
            if parsed[1] != 1:
                raise SystemExit("[run.py] Requested '.int' but rational has denominator != 1.")
            return str(parsed[0])
        if isinstance(parsed, int):
            return str(parsed)
        if mp.floor(parsed) != parsed:
            raise SystemExit("[run.py] Requested '.int' but value is not an exact integer.")
        return str(int(parsed))

    if comp == "float" or comp.startswith("float:"):
        digits = _digits_of(comp)
        if isinstance(parsed, tuple):
            return mp.nstr(mp.mpf(parsed[0]) / mp.mpf(parsed[1]), digits)
        return mp.nstr(mp.mpf(parsed), digits)

    raise SystemExit(f"[run.py] Unsupported component suffix: {comp!r}")

# ----------------------------- dependency engine -----------------------------

_JSON_CACHE: Dict[str, dict] = {}
_VAR_PRODUCER: Dict[str, str] = {}  # output root -> script
_VAR_PATH: Dict[str, str] = {}      # output root -> base json path
_VAR_CACHE: Dict[str, str] = {}
_RUNNING: set[str] = set()

for sname, entry in CONFIG["scripts"].items():
    for var_root, path in entry.get("outputs", {}).items():
        if var_root in _VAR_PRODUCER:
            raise SystemExit(
                f"[run.py] Variable root '{var_root}' produced by multiple scripts: "
                f"{_VAR_PRODUCER[var_root]} and {sname}"
            )
        _VAR_PRODUCER[var_root] = sname
        _VAR_PATH[var_root] = path

def _load_script_json(script: str) -> dict:
    if script not in _JSON_CACHE:
        ensure_ran(script, force=False)
        _JSON_CACHE[script] = load_json(jpath(script))
    return _JSON_CACHE[script]

def inferred_deps(script: str) -> list[str]:
    deps: list[str] = []
    for item in CONFIG["scripts"][script].get("inputs", []):
        if "var" not in item:
            continue
        root, _, _ = split_root_sub_comp(item["var"])
        prod = _VAR_PRODUCER.get(root)
        if prod and prod not in deps:
            deps.append(prod)
    return deps

def resolve_var(var: str) -> str:
    if var in _VAR_CACHE:
        return _VAR_CACHE[var]

    root, sub, comp = split_root_sub_comp(var)
    prod = _VAR_PRODUCER.get(root)
    if not prod:
        raise SystemExit(f"[run.py] Missing required value '{root}'. No producer.")

    data = _load_script_json(prod)
    base_path = _VAR_PATH[root]  # e.g. 'outputs.arclength'
    full_path = base_path if sub is None else f"{base_path}.{sub}"

    node = get_by_path(data, full_path)
    if node is None:
        raise SystemExit(f"[run.py] Missing '{root}' in {jpath(prod)} at '{full_path}'.")

    val = _format_for_cli_from_node(node, comp)
    _VAR_CACHE[var] = val
    return val

def build_args(script: str) -> list[tuple[str, str, str]]:
    """(flag, value, provenance) triples for the script's declared inputs."""
    out: list[tuple[str, str, str]] = []
    for item in CONFIG["scripts"][script].get("inputs", []):
        flag = item["flag"]
        if "literal" in item:
            val, src = item["literal"], f"literal:{item['literal']}"
        elif "var" in item:
            root, _, _ = split_root_sub_comp(item["var"])
            val = resolve_var(item["var"])
            src = f"var:{item['var']} from {_VAR_PRODUCER.get(root, '<missing producer>')}"
        else:
            val, src = None, "unknown"
        if val is None or val == "":
            if item.get("optional", False):
                continue
            raise SystemExit(f"[run.py] Missing required CLI value for {flag} in {script} (source: {src}).")
        out.append((flag, str(val), src))
    return out

def ensure_ran(script: str, force: bool) -> None:
    pj = jpath(script)
    if exists(pj) and not force:
        print(f"[run.py] {script}: using cached {pj} (use --force to re-run)")
        return
    if script in _RUNNING:
        raise SystemExit(f"[run.py] Cycle detected while running {script}")
    _RUNNING.add(script)

    for dep in inferred_deps(script):
        ensure_ran(dep, force=False)

    args = build_args(script)
    print(f"[run.py] {script} args:")
    argv: list[str] = []
    for flag, val, src in args:
        print(f"         {flag:>16} <- {src}")
        argv += [flag, val]
    run_cmd([sys.executable, str(SRC / script), "--json-out", str(pj), *argv])
    if not exists(pj):
        raise SystemExit(f"[run.py] '{script}' ran but did not write its JSON: {pj}")
    print(f"[run.py] wrote {pj}")
    _RUNNING.remove(script)

# --------------------------------- main ---------------------------------

if __name__ == "__main__":
    if len(sys.argv) not in (2, 3):
        print("Usage: python run.py <script_name.py|all> [--force]")
        sys.exit(2)
    target = sys.argv[1]
    force = (len(sys.argv) == 3 and sys.argv[2] == "--force")
    if target == "all":
        for name in CONFIG["scripts"]:
            ensure_ran(name, force=force)
        sys.exit(0)
    if target not in CONFIG["scripts"]:
        print(f"[run.py] Unknown script '{target}'. Add it under CONFIG['scripts'].")
        sys.exit(2)
    ensure_ran(target, force=force)
