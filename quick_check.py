# quick_check.py
# Run after `python run.py all`; compares published numbers against reference values.
import json, sys, pathlib as p
root = p.Path("outputs")
expect = {
  "arclength_ellipse.json": [
    ("outputs.perimeter.decimal", 48.442241102738436, 1e-9),
    ("outputs.arclength.decimal", 7.363580791393055, 1e-9),
    ("outputs.geometry.eccentricity", 0.8660254037844386, 1e-15),
  ],
  "elliptic12.json": [
    ("outputs.complete", [{"m": 0.75, "K": 2.1565156474996434, "E": 1.2110560275684594}], 1e-14),
  ],
  "elliptic_crosscheck.json": [("outputs.all_passed", True, None)],
  "arclength_crosscheck.json": [("outputs.all_passed", True, None)],
}

def get(data, path):
    for part in path.split("."):
        data = data[part]
    return data

def close(val, ref, tol):
    if isinstance(ref, list):
        return len(val) == len(ref) and all(close(v, r, tol) for v, r in zip(val, ref))
    if isinstance(ref, dict):
        return all(close(val[k], r, tol) for k, r in ref.items())
    return abs(float(val) - ref) <= tol

ok = True
for fname, checks in expect.items():
    f = root/fname
    if not f.exists():
        print("MISSING", f); ok=False; continue
    data = json.loads(f.read_text())
    for path, ref, tol in checks:
        try:
            val = get(data, path)
        except (KeyError, TypeError):
            print("MISSING", f, path); ok=False; continue
        if tol is None:
            if val is not True: print("FAIL", f, path, val); ok=False
        elif not close(val, ref, tol):
            print("FAIL", f, path, val, "≠", ref); ok=False
print("ALL PASS" if ok else "SOME FAIL"); sys.exit(0 if ok else 1)
