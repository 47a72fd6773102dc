from __future__ import annotations

import math

from windtunnel.config import AeroConstants
from windtunnel.geometry.analysis import GeometryAnalysis
from windtunnel.geometry.classify import ShapeType

CD_MIN = 0.01
CD_MAX = 2.5

# Used when a caller has no geometric analysis for the silhouette.
UNKNOWN_PROFILE = GeometryAnalysis(
    camber=0.0,
    thickness_ratio=0.12,
    is_symmetric=False,
    trailing_edge_angle_deg=30.0,
    leading_edge_radius=0.0,
)


def _clamp(value: float, lo: float, hi: float) -> float:
    if math.isnan(value):
        raise ValueError("Cannot clamp NaN.")
    return float(min(max(value, lo), hi))


def _fineness(aspect_ratio: float) -> float:
    if not math.isfinite(aspect_ratio) or aspect_ratio <= 0.0:
        return 1.0
    return max(aspect_ratio, 1.0 / aspect_ratio)


def _circular_cylinder_cd(reynolds: float, constants: AeroConstants) -> float:
    """Cylinder in cross-flow: Stokes, subcritical plateau, drag crisis, supercritical."""
    if reynolds <= 0.0:
        return CD_MAX
    if reynolds < 1.0:
        return max(24.0 / reynolds, 2.0)
    if reynolds < 2e5:
        return 1.17
    if reynolds < 5e5:
        x = (reynolds - constants.drag_crisis_center_re) / constants.drag_crisis_width_re
        sig = 1.0 / (1.0 + math.exp(x))
        return 0.3 + (1.2 - 0.3) * sig
    return 0.35 + (reynolds / 1e7) * 0.1


def drag_coefficient(
    shape: ShapeType,
    reynolds: float,
    aspect_ratio: float,
    solidity: float,
    angle_deg: float,
    geometry: GeometryAnalysis | None = None,
    constants: AeroConstants | None = None,
) -> float:
    """Regime-dependent drag coefficient, clamped to [0.01, 2.5]."""
    consts = constants or AeroConstants()
    geom = geometry or UNKNOWN_PROFILE
    angle_rad = abs(math.radians(angle_deg))

    match shape:
        case ShapeType.CIRCULAR:
            cd = _circular_cylinder_cd(reynolds, consts)
            if angle_rad > 0.1:
                cd *= 1.0 + 0.05 * math.sin(angle_rad)

        case ShapeType.RECTANGULAR:
            cd = _clamp(2.0 / math.sqrt(_fineness(aspect_ratio)), 1.0, 2.1)
            if reynolds < 1e4:
                cd *= 1.1

        case ShapeType.STREAMLINED:
            cd = 0.05 + 0.3 / math.sqrt(_fineness(aspect_ratio))
            if geom.is_symmetric and abs(angle_deg) < 5.0:
                cd *= 0.8
            if geom.trailing_edge_angle_deg > 20.0:
                # Blunt base adds base drag.
                cd += 0.1 * (geom.trailing_edge_angle_deg - 20.0) / 70.0
            if angle_rad > math.pi / 12.0:
                cd *= 1.0 + 1.2 * math.sin(angle_rad) ** 2

        case ShapeType.BLUFF:
            cd = 1.0 + 0.5 / _fineness(aspect_ratio)
            cd *= 0.85 + 0.15 * solidity
            if reynolds < 1e4:
                cd *= 1.05

        case _:
            raise ValueError(f"Unknown shape type: {shape!r}")

    return _clamp(cd, CD_MIN, CD_MAX)


def _airfoil_cl(aspect_ratio: float, angle_deg: float, geom: GeometryAnalysis) -> float:
    """Thin-airfoil lift with a camber-shifted zero-lift angle and a blended stall.

    Linear up to 0.8x the stall angle, cosine blend towards the separated
    flat-plate value sin(2 alpha) up to 1.5x, fully separated beyond.
    """
    alpha_l0 = 0.0 if geom.is_symmetric else geom.zero_lift_angle_deg
    effective_deg = angle_deg - alpha_l0
    effective_rad = math.radians(effective_deg)

    # A blunt trailing edge weakens the Kutta condition.
    kutta = 1.0
    if geom.trailing_edge_angle_deg > 20.0:
        kutta = max(0.5, 1.0 - (geom.trailing_edge_angle_deg - 20.0) / 100.0)

    ar = max(aspect_ratio, 0.0) if math.isfinite(aspect_ratio) else 0.0
    lift_slope = 0.09 * (ar / (ar + 2.0)) * kutta

    stall_deg = 12.0 + 20.0 * geom.thickness_ratio
    x = abs(effective_deg) / max(stall_deg, 1e-6)

    linear = lift_slope * effective_deg
    if x < 0.8:
        return linear

    separated = math.sin(2.0 * effective_rad)
    if x < 1.5:
        t = (x - 0.8) / (1.5 - 0.8)
        blend = (1.0 + math.cos(math.pi * t)) / 2.0
        peak_boost = 0.1 * math.sin(math.pi * t)
        return linear * blend + separated * (1.0 - blend) + peak_boost
    return separated


def lift_coefficient(
    shape: ShapeType,
    reynolds: float,
    aspect_ratio: float,
    angle_deg: float,
    solidity: float,
    geometry: GeometryAnalysis | None = None,
) -> float:
    geom = geometry or UNKNOWN_PROFILE
    angle_rad = math.radians(angle_deg)
    camber = geom.camber

    can_lift = (
        shape is ShapeType.STREAMLINED
        or aspect_ratio > 2.0
        or aspect_ratio < 0.5
        or abs(camber) > 0.001
    )
    if not can_lift and abs(angle_deg) < 10.0:
        return 0.0
    if geom.is_symmetric and abs(angle_deg) < 0.5:
        return 0.0

    match shape:
        case ShapeType.CIRCULAR:
            cl = 0.3 * math.sin(2.0 * angle_rad) if abs(angle_deg) > 5.0 else 0.0

        case ShapeType.STREAMLINED:
            cl = _airfoil_cl(aspect_ratio, angle_deg, geom)

        case ShapeType.RECTANGULAR:
            # Flat plate, post-stall beyond 25 deg.
            if abs(angle_deg) < 25.0:
                cl = 1.1 * math.sin(2.0 * angle_rad)
            else:
                cl = 1.0 * math.sin(angle_rad)
            if camber != 0.0 and not geom.is_symmetric:
                cl += camber * 2.0

        case ShapeType.BLUFF:
            cl = 0.5 * math.sin(2.0 * angle_rad)
            if solidity < 0.5:
                cl *= 0.5

        case _:
            raise ValueError(f"Unknown shape type: {shape!r}")

    return cl * low_reynolds_lift_factor(reynolds)


def low_reynolds_lift_factor(reynolds: float) -> float:
    """1.0 from Re = 1e5 up, 0.88 at 1e4, 0.76 at 1e3, 0.4 at Re <= 1."""
    if reynolds >= 100_000.0:
        return 1.0
    factor = 0.4 + 0.6 * (math.log10(max(1.0, reynolds)) / 5.0)
    return _clamp(factor, 0.1, 1.0)


def strouhal_number(shape: ShapeType, reynolds: float) -> float:
    match shape:
        case ShapeType.CIRCULAR:
            return 0.1 if reynolds < 100.0 else 0.2
        case ShapeType.RECTANGULAR:
            return 0.15
        case ShapeType.STREAMLINED:
            return 0.10
        case ShapeType.BLUFF:
            return 0.18
    raise ValueError(f"Unknown shape type: {shape!r}")


def pressure_drag_ratio(shape: ShapeType) -> float:
    """Share of total drag carried by pressure; the remainder is skin friction."""
    match shape:
        case ShapeType.STREAMLINED:
            return 0.6
        case ShapeType.CIRCULAR:
            return 0.85
        case ShapeType.RECTANGULAR | ShapeType.BLUFF:
            return 0.9
    raise ValueError(f"Unknown shape type: {shape!r}")
