from __future__ import annotations

import logging

import pytest

from windtunnel.config import AeroConstants
from windtunnel.geometry import presets
from windtunnel.geometry.analysis import DEGENERATE_PROFILE, analyze_geometry


def test_square_profile():
    geom = analyze_geometry(presets.rectangle(100.0, 100.0))
    assert geom.camber == pytest.approx(0.0, abs=1e-12)
    assert geom.is_symmetric
    assert geom.thickness_ratio == pytest.approx(1.0)
    assert geom.trailing_edge_angle_deg == pytest.approx(90.0)
    assert geom.leading_edge_radius == pytest.approx(0.5 * 2.0**0.5)
    assert geom.zero_lift_angle_deg == pytest.approx(0.0, abs=1e-10)


def test_symmetric_airfoil():
    geom = analyze_geometry(presets.naca4("0012"))
    assert geom.is_symmetric
    assert geom.camber == pytest.approx(0.0, abs=1e-9)
    assert geom.thickness_ratio == pytest.approx(0.12, rel=0.02)

    # Leading-edge neighbours are the first upper and lower surface points.
    foil = presets.naca4("0012")
    assert geom.leading_edge_radius == pytest.approx(abs(foil[1, 1]) / 200.0)
    assert geom.leading_edge_radius > 0.0


def test_cambered_airfoil_has_positive_camber():
    geom = analyze_geometry(presets.naca4("2412"))
    assert geom.camber > 0.0
    assert not geom.is_symmetric
    assert geom.zero_lift_angle_deg < 0.0


def test_camber_sign_follows_screen_y_down():
    # Hump upwards on screen (negative y) is positive camber.
    hump = [[0.0, 0.0], [50.0, -20.0], [100.0, 0.0], [50.0, -10.0]]
    assert analyze_geometry(hump).camber > 0.0
    flipped = [[x, -y] for x, y in hump]
    assert analyze_geometry(flipped).camber < 0.0


def test_sharp_trailing_edge_angle():
    wedge = [[0.0, -10.0], [100.0, 0.0], [0.0, 10.0]]
    geom = analyze_geometry(wedge)
    assert geom.trailing_edge_angle_deg < 20.0


def test_zero_width_silhouette_is_degenerate(caplog):
    vertical = [[0.0, 0.0], [0.0, 50.0], [0.0, 100.0]]
    with caplog.at_level(logging.WARNING):
        geom = analyze_geometry(vertical)
    assert geom == DEGENERATE_PROFILE
    assert "degenerate" in caplog.text


def test_thresholds_come_from_constants():
    lopsided = [[0.0, 0.0], [50.0, -20.0], [100.0, 0.0], [50.0, 16.0]]
    assert not analyze_geometry(lopsided).is_symmetric

    relaxed = AeroConstants(symmetry_balance_threshold=0.5, symmetry_camber_threshold=0.1)
    assert analyze_geometry(lopsided, constants=relaxed).is_symmetric
