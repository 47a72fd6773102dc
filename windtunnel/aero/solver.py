from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from numpy.typing import ArrayLike

from windtunnel.aero.coefficients import (
    drag_coefficient,
    lift_coefficient,
    pressure_drag_ratio,
    strouhal_number,
)
from windtunnel.config import AeroConstants
from windtunnel.errors import InvalidInputError
from windtunnel.geometry.analysis import GeometryAnalysis, analyze_geometry
from windtunnel.geometry.classify import ShapeType, classify_shape
from windtunnel.geometry.polygon import (
    as_points,
    bounding_box,
    polygon_area,
    rotate,
    solidity as fill_ratio,
)

LOGGER = logging.getLogger(__name__)

KMH_PER_MS = 3.6

# Decimal places applied when a result leaves the process.
_ROUNDING: dict[str, int] = {
    "cd": 3,
    "cl": 3,
    "dragForce": 2,
    "liftForce": 2,
    "area": 4,
    "referenceArea": 4,
    "reynolds": 0,
    "vortexFrequency": 2,
    "strouhal": 3,
    "pressureDrag": 2,
    "frictionDrag": 2,
}


def _finite_number(raw: Mapping[str, Any], key: str) -> float:
    if key not in raw or raw[key] is None:
        raise InvalidInputError(f"Missing flow parameter `{key}`.")
    value = raw[key]
    if isinstance(value, bool):
        raise InvalidInputError(f"Flow parameter `{key}` must be a number, got {value!r}.")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Flow parameter `{key}` must be a number, got {value!r}.") from exc
    if not math.isfinite(number):
        raise InvalidInputError(f"Flow parameter `{key}` must be finite, got {value!r}.")
    return number


def _require_finite(name: str, value: float) -> float:
    if not math.isfinite(value):
        raise InvalidInputError(f"Silhouette is too large to solve: {name} is {value!r}.")
    return value


def normalize_angle(angle_deg: float) -> float:
    """Map any angle into (-180, 180]."""
    angle = math.fmod(angle_deg, 360.0)
    if angle > 180.0:
        angle -= 360.0
    elif angle <= -180.0:
        angle += 360.0
    return angle


def reynolds_number(density: float, velocity_ms: float, length_m: float, viscosity: float) -> float:
    """Re = rho V L / mu."""
    return density * velocity_ms * length_m / viscosity


@dataclass(frozen=True)
class FlowParameters:
    wind_speed_kmh: float
    angle_deg: float
    air_density: float

    def __post_init__(self) -> None:
        for name in ("wind_speed_kmh", "angle_deg", "air_density"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidInputError(f"`{name}` must be a finite number, got {value!r}.")
        if self.wind_speed_kmh < 0.0:
            raise InvalidInputError(f"`wind_speed_kmh` must be >= 0, got {self.wind_speed_kmh}.")
        if self.air_density <= 0.0:
            raise InvalidInputError(f"`air_density` must be > 0, got {self.air_density}.")

    @property
    def velocity_ms(self) -> float:
        return self.wind_speed_kmh / KMH_PER_MS

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "FlowParameters":
        """Build from the wire keys `windSpeed`, `angle` and `airDensity`."""
        if not isinstance(raw, Mapping):
            raise InvalidInputError("Flow parameters must be an object.")
        return cls(
            wind_speed_kmh=_finite_number(raw, "windSpeed"),
            angle_deg=_finite_number(raw, "angle"),
            air_density=_finite_number(raw, "airDensity"),
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "windSpeed": self.wind_speed_kmh,
            "angle": self.angle_deg,
            "airDensity": self.air_density,
        }


@dataclass(frozen=True)
class AerodynamicResult:
    cd: float
    cl: float
    drag_force_n: float
    lift_force_n: float
    area_m2: float
    reference_area_m2: float
    reynolds: float
    shape_type: ShapeType
    vortex_frequency_hz: float
    strouhal: float
    pressure_drag_n: float
    friction_drag_n: float
    geometry: GeometryAnalysis
    debug: dict[str, float | bool] = field(default_factory=dict)

    def to_dict(self, rounded: bool = True, include_debug: bool = True) -> dict[str, Any]:
        """Flat wire/storage form with camelCase keys."""
        out: dict[str, Any] = {
            "cd": self.cd,
            "cl": self.cl,
            "dragForce": self.drag_force_n,
            "liftForce": self.lift_force_n,
            "area": self.area_m2,
            "referenceArea": self.reference_area_m2,
            "reynolds": self.reynolds,
            "vortexFrequency": self.vortex_frequency_hz,
            "strouhal": self.strouhal,
            "pressureDrag": self.pressure_drag_n,
            "frictionDrag": self.friction_drag_n,
        }
        if rounded:
            # `+ 0.0` folds a rounded -0.0 into 0.0.
            out = {key: round(value, _ROUNDING[key]) + 0.0 for key, value in out.items()}
        out["shapeType"] = self.shape_type.value
        if include_debug:
            debug = dict(self.debug)
            if rounded:
                debug = {key: (round(value, 4) if isinstance(value, float) else value) for key, value in debug.items()}
            out["debug"] = debug
        return out


class AerodynamicSolver:
    """Empirical force estimate for a 2D silhouette in a uniform stream.

    Points are screen pixels (Y down) converted with
    `constants.pixels_per_meter`; the body is treated as an extrusion of
    `constants.unit_depth_m`.
    """

    def __init__(self, constants: AeroConstants | None = None) -> None:
        self.constants = constants or AeroConstants()

    def solve(self, points: ArrayLike, params: FlowParameters | Mapping[str, Any]) -> AerodynamicResult:
        flow = params if isinstance(params, FlowParameters) else FlowParameters.from_mapping(params)
        pts = as_points(points, min_points=3)
        consts = self.constants
        scale = consts.pixels_per_meter

        velocity = flow.velocity_ms
        rho = flow.air_density
        angle = normalize_angle(flow.angle_deg)

        rotated_box = bounding_box(rotate(pts, angle))
        height_m = rotated_box.height / scale
        width_m = rotated_box.width / scale
        frontal_area = height_m * consts.unit_depth_m
        reference_area = max(height_m, width_m) * consts.unit_depth_m

        box = bounding_box(pts)
        _require_finite("rotated bounding box area", rotated_box.area)
        _require_finite("bounding box area", box.area)
        area_px = _require_finite("polygon area", polygon_area(pts))
        solidity = fill_ratio(pts, box)
        aspect_ratio = box.aspect_ratio
        if box.area <= 0.0:
            LOGGER.warning("Silhouette has a zero-area bounding box (%.3g x %.3g px).", box.width, box.height)

        shape = classify_shape(pts, box, solidity)
        if shape in (ShapeType.CIRCULAR, ShapeType.STREAMLINED):
            char_length = box.width / scale
        else:
            char_length = math.sqrt(area_px) / scale

        reynolds = reynolds_number(rho, velocity, char_length, consts.dynamic_viscosity)
        _require_finite("Reynolds number", reynolds)
        geometry = analyze_geometry(pts, box, consts)

        cd = drag_coefficient(shape, reynolds, aspect_ratio, solidity, angle, geometry, consts)
        cl = lift_coefficient(shape, reynolds, aspect_ratio, angle, solidity, geometry)

        q = 0.5 * rho * velocity * velocity
        drag_force = q * frontal_area * cd
        lift_force = q * reference_area * cl

        strouhal = strouhal_number(shape, reynolds)
        if char_length > 0.0:
            vortex_frequency = strouhal * velocity / char_length
        else:
            LOGGER.warning("Zero characteristic length; vortex shedding frequency set to 0.")
            vortex_frequency = 0.0

        ratio = pressure_drag_ratio(shape)
        LOGGER.debug(
            "Solved %s silhouette: Re=%.3g Cd=%.3f Cl=%.3f angle=%.1f deg",
            shape.value,
            reynolds,
            cd,
            cl,
            angle,
        )
        return AerodynamicResult(
            cd=cd,
            cl=float(cl),
            drag_force_n=float(drag_force),
            lift_force_n=float(lift_force),
            area_m2=float(frontal_area),
            reference_area_m2=float(reference_area),
            reynolds=float(reynolds),
            shape_type=shape,
            vortex_frequency_hz=float(vortex_frequency),
            strouhal=strouhal,
            pressure_drag_n=float(drag_force * ratio),
            friction_drag_n=float(drag_force * (1.0 - ratio)),
            geometry=geometry,
            debug={
                "velocityMs": velocity,
                "angleDeg": angle,
                "widthM": width_m,
                "heightM": height_m,
                "characteristicLength": char_length,
                "aspectRatio": aspect_ratio,
                "solidity": solidity,
                "camber": geometry.camber,
                "thickness": geometry.thickness_ratio,
                "alphaL0": geometry.zero_lift_angle_deg,
                "teAngle": geometry.trailing_edge_angle_deg,
                "leRadius": geometry.leading_edge_radius,
                "isSymmetric": geometry.is_symmetric,
            },
        )


def solve(
    points: ArrayLike,
    params: FlowParameters | Mapping[str, Any],
    constants: AeroConstants | None = None,
) -> AerodynamicResult:
    return AerodynamicSolver(constants).solve(points, params)
