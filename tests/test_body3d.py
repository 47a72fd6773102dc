from __future__ import annotations

import math

import numpy as np
import pytest

from windtunnel.aero.body3d import (
    Body3D,
    Primitive,
    drag_coefficient_3d,
    lift_coefficient_3d,
    projected_area,
    rotation_matrix,
    solve_body,
)
from windtunnel.aero.solver import FlowParameters
from windtunnel.errors import InvalidInputError


def test_sphere_drag_regimes():
    assert drag_coefficient_3d(Primitive.SPHERE, 0.5) == pytest.approx(48.0)
    assert drag_coefficient_3d(Primitive.SPHERE, 1e4) == 0.47
    assert drag_coefficient_3d(Primitive.SPHERE, 3.5e5) == pytest.approx(0.335)
    assert drag_coefficient_3d(Primitive.SPHERE, 1e6) == 0.2


def test_sphere_forces():
    body = Body3D(Primitive.SPHERE, radius=0.5)
    result = solve_body(body, FlowParameters(36.0, 0.0, 1.225))

    assert result.projected_area_m2 == pytest.approx(math.pi * 0.25)
    assert result.dynamic_pressure_pa == pytest.approx(0.5 * 1.225 * 100.0)
    assert result.reynolds == pytest.approx(1.225 * 10.0 * 1.0 / 1.81e-5)
    assert result.drag_force_n == pytest.approx(result.dynamic_pressure_pa * result.projected_area_m2 * result.cd)
    assert result.cl == 0.0


def test_box_projected_area_follows_rotation():
    box = Body3D(Primitive.BOX, width=2.0, height=1.0, depth=3.0)
    # Flow along X sees the height x depth face.
    assert projected_area(box) == pytest.approx(3.0)

    yawed = Body3D(Primitive.BOX, width=2.0, height=1.0, depth=3.0, rotation_deg=(0.0, 0.0, 90.0))
    assert projected_area(yawed) == pytest.approx(2.0 * 3.0)

    diagonal = Body3D(Primitive.BOX, width=1.0, height=1.0, depth=1.0, rotation_deg=(0.0, 0.0, 45.0))
    assert projected_area(diagonal) == pytest.approx(math.sqrt(2.0))


def test_rotation_matrix_is_orthonormal():
    rot = rotation_matrix((30.0, -45.0, 110.0))
    np.testing.assert_allclose(rot @ rot.T, np.eye(3), atol=1e-12)
    assert np.linalg.det(rot) == pytest.approx(1.0)


def test_lift_follows_pitch():
    assert lift_coefficient_3d(Primitive.BOX, 45.0) == pytest.approx(0.5)
    assert lift_coefficient_3d(Primitive.CONE, 45.0) == pytest.approx(0.3)
    assert lift_coefficient_3d(Primitive.TORUS, 45.0) == 0.0

    pitched = Body3D(Primitive.CYLINDER, radius_top=0.5, radius_bottom=0.5, height=2.0, rotation_deg=(45.0, 0.0, 0.0))
    result = solve_body(pitched, {"windSpeed": 36.0, "angle": 0.0, "airDensity": 1.225})
    assert result.cl == pytest.approx(0.5)
    assert result.lift_force_n > 0.0


def test_wire_form_and_parsing():
    body = Body3D.from_mapping({"type": "Torus", "radius": 1.0, "tube": 0.25, "rotation": [0, 10, 0]})
    assert body.primitive is Primitive.TORUS
    assert body.rotation_deg == (0.0, 10.0, 0.0)

    out = solve_body(body, FlowParameters(36.0, 0.0, 1.225)).to_dict()
    assert out["cd"] == 1.2
    assert out["projectedArea"] == pytest.approx(round(math.pi * 1.25**2, 4))
    assert out["sideForce"] == 0.0
    assert out["pitchingMoment"] == 0.0


def test_invalid_bodies():
    with pytest.raises(InvalidInputError):
        Body3D.from_mapping({"type": "pyramid"})
    with pytest.raises(InvalidInputError):
        Body3D(Primitive.SPHERE, radius=-1.0)
    with pytest.raises(InvalidInputError):
        Body3D(Primitive.BOX, rotation_deg=(0.0, float("nan"), 0.0))


@pytest.mark.parametrize(
    "raw",
    [
        None,
        [{"type": "sphere"}],
        "sphere",
        {"type": "sphere", "radius": "big"},
        {"type": "sphere", "radius": True},
        {"type": "box", "width": None},
        {"type": "box", "rotation": [0, 0]},
        {"type": "box", "rotation": "010"},
        {"type": "box", "rotation": [0, "up", 0]},
    ],
)
def test_from_mapping_rejects_bad_values(raw):
    with pytest.raises(InvalidInputError):
        Body3D.from_mapping(raw)
