import json
import math
import sys

import numpy as np
import pytest

import arclength_ellipse as ae
from arclength_ellipse import arclength_ellipse, ellipse_geometry
from arclength_crosscheck import quad_arclength
from ellipse_utils import InvalidArgument

PI = math.pi


def test_full_perimeter():
    assert arclength_ellipse(5, 10) == pytest.approx(48.442241102738436, abs=1e-9)


def test_perimeter_is_symmetric_in_axes():
    assert arclength_ellipse(10, 5) == pytest.approx(arclength_ellipse(5, 10), rel=1e-14)


def test_reference_arc():
    assert arclength_ellipse(5, 10, PI / 10, 2 * PI / 5) == pytest.approx(7.363580791393055, abs=1e-9)


@pytest.mark.parametrize("a,b", [(5, 10), (10, 5), (1, 0.5), (2, 2.0001), (3, 0.5)])
@pytest.mark.parametrize("t0,t1", [(PI / 10, PI / 2), (-1.0, 4.0), (0.3, 0.30001), (2.0, 9.5)])
def test_matches_quadrature(a, b, t0, t1):
    ref = quad_arclength(a, b, t0, t1)
    assert arclength_ellipse(a, b, t0, t1) == pytest.approx(ref, rel=1e-12, abs=1e-13)


def test_short_arc_near_minor_vertex():
    L = arclength_ellipse(1, 0.5, PI * 0.001, PI * 0.002)
    assert L == pytest.approx(PI * 0.0005, rel=1e-4)
    assert L == pytest.approx(quad_arclength(1, 0.5, PI * 0.001, PI * 0.002), rel=1e-12)


@pytest.mark.parametrize("a,b", [(5, 10), (10, 5), (3, 3)])
def test_antisymmetric_and_zero(a, b):
    L = arclength_ellipse(a, b, 0.4, 2.2)
    assert arclength_ellipse(a, b, 2.2, 0.4) == -L
    assert arclength_ellipse(a, b, 1.3, 1.3) == 0.0


def test_circle_is_radius_times_angle():
    assert arclength_ellipse(3, 3, 0.2, 1.1) == pytest.approx(3 * 0.9, rel=1e-15)
    assert arclength_ellipse(3, 3) == pytest.approx(6 * PI, rel=1e-15)


@pytest.mark.parametrize("a,b", [(5, 10), (10, 5)])
def test_additive(a, b):
    whole = arclength_ellipse(a, b, -0.7, 5.0)
    parts = arclength_ellipse(a, b, -0.7, 1.1) + arclength_ellipse(a, b, 1.1, 5.0)
    assert parts == pytest.approx(whole, rel=1e-13)


@pytest.mark.parametrize("a,b", [(5, 10), (10, 5), (1, 0.01)])
def test_increasing_in_upper_bound(a, b):
    t1 = np.linspace(0.01, 4 * PI, 400)
    L = arclength_ellipse(a, b, np.zeros_like(t1), t1)
    assert L[0] > 0
    assert np.all(np.diff(L) > 0)


def test_array_bounds_match_scalar_calls():
    t0 = np.array([[0.0, 0.5], [1.0, -2.0]])
    t1 = np.array([[1.0, 3.0], [1.0, 7.0]])
    L = arclength_ellipse(4, 7, t0, t1)
    assert L.shape == (2, 2)
    for idx in np.ndindex(L.shape):
        assert L[idx] == pytest.approx(arclength_ellipse(4, 7, float(t0[idx]), float(t1[idx])), rel=1e-15)


def test_array_bounds_broadcast():
    L = arclength_ellipse(4, 7, 0.0, np.array([1.0, 2.0, 3.0]))
    assert L.shape == (3,)
    with pytest.raises(InvalidArgument, match="broadcast"):
        arclength_ellipse(4, 7, np.zeros(2), np.ones(3))


def test_scalar_result_is_float():
    assert isinstance(arclength_ellipse(5, 10, 0.1, 0.2), float)
    assert isinstance(arclength_ellipse(5, 5), float)


@pytest.mark.parametrize("bounds", [(0.1,), (0.1, 0.2, 0.3)])
def test_rejects_wrong_number_of_bounds(bounds):
    with pytest.raises(InvalidArgument, match="two or four inputs"):
        arclength_ellipse(5, 10, *bounds)


@pytest.mark.parametrize("a,b", [(0, 1), (1, -2), (math.inf, 1), (1, math.nan)])
def test_rejects_bad_semi_axes(a, b):
    with pytest.raises(InvalidArgument):
        arclength_ellipse(a, b)


def test_non_finite_axes_name_the_axis():
    with pytest.raises(InvalidArgument, match="Non-finite value for b"):
        arclength_ellipse(1, math.inf)
    with pytest.raises(InvalidArgument, match="positive"):
        arclength_ellipse(-1, 2)


def test_rejects_complex_and_array_axes():
    with pytest.raises(InvalidArgument, match="complex"):
        arclength_ellipse(5 + 1j, 10)
    with pytest.raises(InvalidArgument, match="scalar"):
        arclength_ellipse(np.array([5, 6]), 10)
    with pytest.raises(InvalidArgument, match="complex"):
        arclength_ellipse(5, 10, 0.0, 1j)


def test_geometry_tall_ellipse():
    g = ellipse_geometry(5, 10)
    assert g.major_axis == "b"
    assert (g.semi_major, g.semi_minor) == (10.0, 5.0)
    assert g.eccentricity == pytest.approx(math.sqrt(0.75))
    assert g.focal_distance == pytest.approx(math.sqrt(75))
    assert g.focal_parameter == pytest.approx(25 / math.sqrt(75))
    assert g.foci == ((0.0, -g.focal_distance), (0.0, g.focal_distance))


def test_geometry_circle():
    g = ellipse_geometry(2, 2)
    assert g.eccentricity == 0.0
    assert g.focal_distance == 0.0
    assert g.focal_parameter == math.inf
    assert g.major_axis == "a"


def run_cli(monkeypatch, tmp_path, *argv):
    out = tmp_path / "arc.json"
    monkeypatch.setattr(sys, "argv", ["arclength_ellipse.py", *argv, "--json-out", str(out)])
    ae.main()
    return json.loads(out.read_text())


def test_cli_reference_ellipse(monkeypatch, tmp_path):
    data = run_cli(monkeypatch, tmp_path, "--a", "5", "--b", "10", "--theta0", "pi/10", "--theta1", "2pi/5")
    assert float(data["outputs"]["arclength"]["decimal"]) == pytest.approx(7.363580791393055, abs=1e-9)
    assert float(data["outputs"]["perimeter"]["decimal"]) == pytest.approx(48.442241102738436, abs=1e-9)
    assert data["inputs"]["theta0"]["pi_fraction"] == "1/10"
    assert data["outputs"]["geometry"]["major_axis"] == "b"


def test_cli_degrees_agree_with_radians(monkeypatch, tmp_path):
    rad = run_cli(monkeypatch, tmp_path, "--a", "5", "--b", "10", "--theta0", "pi/10", "--theta1", "2pi/5")
    deg = run_cli(monkeypatch, tmp_path, "--a", "5", "--b", "10", "--theta0", "18", "--theta1", "72", "--degrees")
    assert deg["outputs"]["arclength"] == rad["outputs"]["arclength"]
    assert deg["inputs"]["theta1"]["decimal"] == rad["inputs"]["theta1"]["decimal"]


def test_cli_default_bounds_give_perimeter(monkeypatch, tmp_path):
    data = run_cli(monkeypatch, tmp_path, "--a", "5", "--b", "10")
    assert data["outputs"]["arclength"]["decimal"] == data["outputs"]["perimeter"]["decimal"]


def test_cli_requires_both_bounds(monkeypatch, tmp_path):
    with pytest.raises(SystemExit, match=r"\[arclength_ellipse\].*two or four"):
        run_cli(monkeypatch, tmp_path, "--a", "5", "--b", "10", "--theta0", "0.1")
