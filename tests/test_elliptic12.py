import json
import math
import sys

import mpmath as mp
import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

import elliptic12 as e12
from elliptic12 import EPS, MAX_AGM_ITER, agm_sequence, elliptic12, ellipke, nearest_multiple_of_pi, table_grid
from ellipse_utils import ComputationFailed, InvalidArgument

U_SAMPLES = [-7.0, -2.0, -0.3, 0.5, 1.5, 4.0, 10.0]
M_SAMPLES = [0.1, 0.5, 0.9, 0.99]


def mp_fez(u, m):
    with mp.workdps(30):
        uu, mm = mp.mpf(u), mp.mpf(m)
        F = mp.ellipf(uu, mm)
        E = mp.ellipe(uu, mm)
        Z = E - mp.ellipe(mm) / mp.ellipk(mm) * F
        return float(F), float(E), float(Z)


@pytest.mark.parametrize("m", M_SAMPLES)
def test_matches_mpmath(m):
    u = np.array(U_SAMPLES)
    F, E, Z = elliptic12(u, m)
    ref = np.array([mp_fez(x, m) for x in U_SAMPLES])
    assert_allclose(F, ref[:, 0], rtol=1e-13, atol=1e-14)
    assert_allclose(E, ref[:, 1], rtol=1e-13, atol=1e-14)
    assert_allclose(Z, ref[:, 2], rtol=1e-12, atol=1e-14)


def test_quarter_period_gives_complete_integrals():
    F, E, Z = elliptic12(np.pi / 2, 0.5)
    with mp.workdps(30):
        K_ref = float(mp.ellipk(0.5))
        E_ref = float(mp.ellipe(0.5))
    assert F == pytest.approx(K_ref, rel=1e-14)
    assert E == pytest.approx(E_ref, rel=1e-14)
    assert abs(float(Z)) < 1e-14


def test_quasi_periodicity():
    m = 0.7
    K, _ = ellipke(m)
    u = np.linspace(-3.0, 3.0, 13)
    F0, _, Z0 = elliptic12(u, m)
    F1, _, Z1 = elliptic12(u + np.pi, m)
    assert_allclose(F1, F0 + 2 * K, rtol=1e-13)
    assert_allclose(Z1, Z0, atol=1e-13)


def test_odd_in_u_bit_exact():
    rng = np.random.default_rng(7)
    u = rng.uniform(-10, 10, 50)
    m = rng.uniform(0, 1, 50)
    F, E, Z = elliptic12(u, m)
    Fn, En, Zn = elliptic12(-u, m)
    assert_array_equal(Fn, -F)
    assert_array_equal(En, -E)
    assert_array_equal(Zn, -Z)


def test_zero_modulus_is_identity():
    u = np.array([-4.0, 0.0, 0.25, 9.0])
    F, E, Z = elliptic12(u, 0.0)
    assert_array_equal(F, u)
    assert_array_equal(E, u)
    assert not np.any(Z)


def test_unit_modulus_closed_forms():
    u = np.array([0.3, math.pi / 2 - 1e-9, -(math.pi / 2 - 1e-9), 2.0, -2.0])
    F, E, Z = elliptic12(u, 1.0)
    assert np.isfinite(F[:3]).all()
    assert F[3] == math.inf
    assert F[4] == -math.inf
    assert F[0] == pytest.approx(math.atanh(math.sin(0.3)), rel=1e-14)
    assert F[2] == -F[1]
    # ∫_0^2 |cos t| dt = 2 − sin 2
    assert E[3] == pytest.approx(2.0 - math.sin(2.0), rel=1e-15)
    assert E[4] == -E[3]
    assert Z[3] == pytest.approx(-math.sin(2.0), rel=1e-15)


def test_unit_modulus_diverges_at_quarter_period():
    F, E, _ = elliptic12(np.array([np.pi / 2, -np.pi / 2, 3.0]), 1.0)
    assert F[0] == math.inf
    assert F[1] == -math.inf
    assert F[2] == math.inf
    assert E[0] == pytest.approx(1.0)


def test_zeta_identity():
    u = np.linspace(-5, 5, 21)
    m = 0.35
    F, E, Z = elliptic12(u, m)
    K, Ec = ellipke(m)
    assert_allclose(Z, E - Ec / K * F, atol=1e-13)


@pytest.mark.parametrize("bad", [1.5, -0.1, float("nan")])
def test_rejects_modulus_outside_unit_interval(bad):
    with pytest.raises(InvalidArgument, match="0 <= m <= 1"):
        elliptic12(0.5, bad)


def test_rejects_complex_input():
    with pytest.raises(InvalidArgument, match="complex"):
        elliptic12(0.5 + 1j, 0.5)
    with pytest.raises(InvalidArgument, match="complex"):
        elliptic12(0.5, np.array([0.5 + 0j]))


def test_rejects_mismatched_shapes():
    with pytest.raises(InvalidArgument, match="same size"):
        elliptic12([0.1, 0.2], [0.1, 0.2, 0.3])


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        elliptic12(0.5, 2.0)


def test_agm_cap_raises_computation_failed():
    with pytest.raises(ComputationFailed, match=str(MAX_AGM_ITER)):
        elliptic12(0.5, 0.5, tol=-1.0)


def test_grouped_matches_per_pair():
    rng = np.random.default_rng(3)
    u = rng.uniform(-8, 8, 40)
    m = rng.choice([0.2, 0.6, 0.95], 40)
    grouped = elliptic12(u, m, group_moduli=True)
    per_pair = elliptic12(u, m, group_moduli=False)
    for g, p in zip(grouped, per_pair):
        assert_allclose(g, p, rtol=4 * EPS, atol=1e-15)


def test_shapes_preserved_and_broadcast():
    u = np.linspace(0, 3, 6).reshape(2, 3)
    F, E, Z = elliptic12(u, 0.4)
    assert F.shape == E.shape == Z.shape == (2, 3)
    F, _, _ = elliptic12(1.0, np.full((4, 1), 0.4))
    assert F.shape == (4, 1)
    F, _, _ = elliptic12(1.0, 0.4)
    assert F.shape == ()


def test_empty_input():
    F, E, Z = elliptic12(np.array([]), 0.5)
    assert F.size == E.size == Z.size == 0


def test_nearest_multiple_of_pi_ties_away_from_zero():
    x = np.array([0.0, 0.49 * np.pi, 0.5 * np.pi, -0.5 * np.pi, 0.51 * np.pi, -1.2 * np.pi])
    k = nearest_multiple_of_pi(x) / np.pi
    assert_array_equal(k, [0.0, 0.0, 1.0, -1.0, 1.0, -1.0])


def test_agm_sequence_depth():
    m = np.array([0.1, 0.5, 0.999])
    a, b, c, depth = agm_sequence(m)
    assert a.shape == b.shape == c.shape
    assert a.shape[1] == 3
    assert_array_equal(a[0], 1.0)
    for k in range(3):
        n = depth[k]
        assert n >= 1
        assert abs(c[n, k]) <= EPS
        assert np.all(np.abs(c[:n, k]) > EPS)
    # harder moduli need at least as many steps
    assert depth[2] >= depth[0]


def test_ellipke_matches_mpmath():
    m = np.array([0.0, 0.05, 0.5, 0.9, 0.999999, 1.0])
    K, E = ellipke(m)
    with mp.workdps(30):
        K_ref = [float(mp.ellipk(x)) for x in m[:-1]]
        E_ref = [float(mp.ellipe(x)) for x in m[:-1]]
    assert_allclose(K[:-1], K_ref, rtol=1e-14)
    assert_allclose(E[:-1], E_ref, rtol=1e-14)
    assert K[-1] == math.inf
    assert E[-1] == 1.0
    assert K[0] == E[0] == np.pi / 2


def test_table_grid_layout():
    phi, m, alpha = table_grid()
    assert phi.shape == m.shape == alpha.shape == (46, 19)
    assert phi[0, -1] == pytest.approx(np.pi / 2)
    assert m[-1, 0] == pytest.approx(1.0)
    F, _, _ = elliptic12(phi, m)
    assert F[-1, -1] == math.inf
    assert np.all(np.isfinite(F[:-1]))


def test_cli_writes_json(tmp_path, monkeypatch, capsys):
    out = tmp_path / "e12.json"
    monkeypatch.setattr(sys, "argv", ["elliptic12.py", "--u", "0, pi/2, 2pi", "--m", "1/2", "--json-out", str(out)])
    e12.main()
    data = json.loads(out.read_text())
    values = [float(v) for v in data["outputs"]["F"]["values"]]
    K = float(data["outputs"]["complete"][0]["K"])
    assert values[0] == 0.0
    assert values[1] == pytest.approx(K, rel=1e-14)
    assert values[2] == pytest.approx(4 * K, rel=1e-14)
    assert data["status"]["ok"] is True
    assert "Wrote JSON results to" in capsys.readouterr().out


def test_cli_rejects_bad_modulus(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["elliptic12.py", "--u", "1", "--m", "2", "--json-out", str(tmp_path / "x.json")])
    with pytest.raises(SystemExit, match=r"\[elliptic12\]"):
        e12.main()
