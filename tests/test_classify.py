from __future__ import annotations

from windtunnel.geometry import presets
from windtunnel.geometry.classify import ShapeType, classify_shape
from windtunnel.geometry.polygon import bounding_box, solidity


def _classify(points):
    box = bounding_box(points)
    return classify_shape(points, box, solidity(points, box))


def test_circle_is_circular():
    assert _classify(presets.circle(radius=50.0, n_points=64)) is ShapeType.CIRCULAR
    assert _classify(presets.circle(radius=50.0, n_points=32)) is ShapeType.CIRCULAR


def test_four_corner_boxes_are_rectangular():
    assert _classify(presets.rectangle(100.0, 100.0)) is ShapeType.RECTANGULAR
    assert _classify(presets.rectangle(100.0, 20.0)) is ShapeType.RECTANGULAR


def test_slender_outline_is_streamlined():
    assert _classify(presets.naca4("0012")) is ShapeType.STREAMLINED
    assert _classify(presets.naca4("2412")) is ShapeType.STREAMLINED

    # Five vertices so the rectangular bucket does not apply.
    slender = [[0.0, 0.0], [50.0, -8.0], [150.0, -5.0], [150.0, 5.0], [50.0, 8.0]]
    assert _classify(slender) is ShapeType.STREAMLINED

    tall = [[0.0, 0.0], [8.0, 50.0], [5.0, 150.0], [-5.0, 150.0], [-8.0, 50.0]]
    assert _classify(tall) is ShapeType.STREAMLINED


def test_triangle_is_bluff():
    assert _classify(presets.triangle()) is ShapeType.BLUFF


def test_shape_type_values_are_wire_strings():
    assert [s.value for s in ShapeType] == ["circular", "rectangular", "streamlined", "bluff"]
    assert ShapeType("bluff") is ShapeType.BLUFF
