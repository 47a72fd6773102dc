from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

import numpy as np

from windtunnel.aero.solver import FlowParameters, reynolds_number
from windtunnel.config import AeroConstants
from windtunnel.errors import InvalidInputError

LOGGER = logging.getLogger(__name__)

# Wind blows along +X.
FLOW_DIRECTION = np.array([1.0, 0.0, 0.0])


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(f"`{key}` must be a number, got {value!r}.")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"`{key}` must be a number, got {value!r}.") from exc


class Primitive(str, Enum):
    SPHERE = "sphere"
    BOX = "box"
    CYLINDER = "cylinder"
    CONE = "cone"
    TORUS = "torus"


@dataclass(frozen=True)
class Body3D:
    """A solid primitive in meters, rotated by Euler angles (deg, applied X then Y then Z).

    Pitch (rotation about X) is taken as the angle of attack.
    """

    primitive: Primitive
    radius: float = 1.0
    width: float = 1.0
    height: float = 1.0
    depth: float = 1.0
    radius_top: float = 0.5
    radius_bottom: float = 0.5
    tube: float = 0.4
    rotation_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        for name in ("radius", "width", "height", "depth", "radius_top", "radius_bottom", "tube"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise InvalidInputError(f"`{name}` must be a finite, non-negative length.")
        if len(self.rotation_deg) != 3 or not all(math.isfinite(a) for a in self.rotation_deg):
            raise InvalidInputError("`rotation_deg` must hold three finite angles.")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Body3D":
        """Build from the wire keys `type`, `radius`, `radiusTop`, `rotation`, ..."""
        if not isinstance(raw, Mapping):
            raise InvalidInputError("Body must be an object.")
        try:
            primitive = Primitive(str(raw["type"]).lower())
        except (KeyError, ValueError) as exc:
            raise InvalidInputError(f"Unknown or missing body type: {raw.get('type')!r}.") from exc
        kwargs: dict[str, Any] = {"primitive": primitive}
        for key, attr in (
            ("radius", "radius"),
            ("width", "width"),
            ("height", "height"),
            ("depth", "depth"),
            ("radiusTop", "radius_top"),
            ("radiusBottom", "radius_bottom"),
            ("tube", "tube"),
        ):
            if key in raw:
                kwargs[attr] = _number(raw[key], key)
        if "rotation" in raw:
            rotation = raw["rotation"]
            if isinstance(rotation, (str, bytes)) or not isinstance(rotation, Sequence) or len(rotation) != 3:
                raise InvalidInputError("`rotation` must be a list of three angles.")
            kwargs["rotation_deg"] = tuple(_number(a, "rotation") for a in rotation)
        return cls(**kwargs)

    @property
    def angle_of_attack_deg(self) -> float:
        return float(self.rotation_deg[0])


@dataclass(frozen=True)
class Body3DResult:
    cd: float
    cl: float
    drag_force_n: float
    lift_force_n: float
    reynolds: float
    dynamic_pressure_pa: float
    projected_area_m2: float
    characteristic_length_m: float
    primitive: Primitive
    debug: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cd": round(self.cd, 3),
            "cl": round(self.cl, 3) + 0.0,
            "cm": 0.0,
            "dragForce": round(self.drag_force_n, 2),
            "liftForce": round(self.lift_force_n, 2) + 0.0,
            "sideForce": 0.0,
            "pitchingMoment": 0.0,
            "yawingMoment": 0.0,
            "rollingMoment": 0.0,
            "reynolds": round(self.reynolds, 0),
            "dynamicPressure": round(self.dynamic_pressure_pa, 2),
            "projectedArea": round(self.projected_area_m2, 4),
            "debug": {key: round(value, 3) for key, value in self.debug.items()},
        }


def rotation_matrix(rotation_deg: tuple[float, float, float]) -> np.ndarray:
    """Intrinsic X-Y-Z Euler rotation, R = Rx @ Ry @ Rz."""
    ax, ay, az = (math.radians(a) for a in rotation_deg)
    cx, sx = math.cos(ax), math.sin(ax)
    cy, sy = math.cos(ay), math.sin(ay)
    cz, sz = math.cos(az), math.sin(az)
    rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
    ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
    rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
    return rx @ ry @ rz


def _bounding_radius(body: Body3D) -> float:
    match body.primitive:
        case Primitive.SPHERE:
            return body.radius
        case Primitive.BOX:
            return 0.5 * math.sqrt(body.width**2 + body.height**2 + body.depth**2)
        case Primitive.CYLINDER:
            return math.hypot(max(body.radius_top, body.radius_bottom), body.height / 2.0)
        case Primitive.CONE:
            return math.hypot(body.radius, body.height / 2.0)
        case Primitive.TORUS:
            return body.radius + body.tube
    raise ValueError(f"Unknown primitive: {body.primitive!r}")


def projected_area(body: Body3D, flow_direction: np.ndarray = FLOW_DIRECTION) -> float:
    """Area seen by the stream, in m^2."""
    match body.primitive:
        case Primitive.SPHERE:
            return math.pi * body.radius**2
        case Primitive.BOX:
            rot = rotation_matrix(body.rotation_deg)
            face_areas = np.array(
                [body.height * body.depth, body.width * body.depth, body.width * body.height]
            )
            # Column i of `rot` is the world-space normal of the faces on local axis i.
            cosines = np.abs(rot.T @ flow_direction)
            return float(np.dot(cosines, face_areas))
        case Primitive.CYLINDER:
            avg_radius = 0.5 * (body.radius_top + body.radius_bottom)
            side = 2.0 * avg_radius * body.height
            end = math.pi * avg_radius**2
            return max(side, end)
        case Primitive.CONE:
            side = body.radius * body.height
            base = math.pi * body.radius**2
            return max(side, base)
        case Primitive.TORUS:
            return math.pi * _bounding_radius(body) ** 2
    raise ValueError(f"Unknown primitive: {body.primitive!r}")


def characteristic_length(body: Body3D) -> float:
    match body.primitive:
        case Primitive.SPHERE:
            return 2.0 * body.radius
        case Primitive.BOX:
            return max(body.width, body.height, body.depth)
        case Primitive.CYLINDER:
            return 2.0 * body.radius_top
        case Primitive.CONE:
            return 2.0 * body.radius
        case Primitive.TORUS:
            return 2.0 * _bounding_radius(body)
    raise ValueError(f"Unknown primitive: {body.primitive!r}")


def drag_coefficient_3d(primitive: Primitive, reynolds: float) -> float:
    match primitive:
        case Primitive.SPHERE:
            if reynolds <= 0.0:
                return 2.0
            if reynolds < 1.0:
                return max(24.0 / reynolds, 2.0)
            if reynolds < 2e5:
                return 0.47
            if reynolds < 5e5:
                # Linear drag crisis between subcritical and supercritical plateaus.
                t = (reynolds - 2e5) / (5e5 - 2e5)
                return 0.47 * (1.0 - t) + 0.2 * t
            return 0.2
        case Primitive.BOX:
            return 1.05
        case Primitive.CYLINDER:
            return 0.82
        case Primitive.CONE:
            return 0.5
        case Primitive.TORUS:
            return 1.2
    raise ValueError(f"Unknown primitive: {primitive!r}")


def lift_coefficient_3d(primitive: Primitive, angle_of_attack_deg: float) -> float:
    """Cross-flow lift k sin(2 alpha); the torus carries none."""
    alpha = math.radians(angle_of_attack_deg)
    match primitive:
        case Primitive.SPHERE:
            return 0.1 * math.sin(2.0 * alpha)
        case Primitive.BOX | Primitive.CYLINDER:
            return 0.5 * math.sin(2.0 * alpha)
        case Primitive.CONE:
            return 0.3 * math.sin(2.0 * alpha)
        case Primitive.TORUS:
            return 0.0
    raise ValueError(f"Unknown primitive: {primitive!r}")


def solve_body(
    body: Body3D,
    params: FlowParameters | Mapping[str, Any],
    constants: AeroConstants | None = None,
) -> Body3DResult:
    """Drag and lift of a 3D primitive; moments are not modelled."""
    flow = params if isinstance(params, FlowParameters) else FlowParameters.from_mapping(params)
    consts = constants or AeroConstants()

    velocity = flow.velocity_ms
    rho = flow.air_density
    area = projected_area(body)
    length = characteristic_length(body)
    reynolds = reynolds_number(rho, velocity, length, consts.dynamic_viscosity)
    aoa = body.angle_of_attack_deg

    cd = drag_coefficient_3d(body.primitive, reynolds)
    cl = lift_coefficient_3d(body.primitive, aoa)
    q = 0.5 * rho * velocity * velocity

    LOGGER.debug("Solved %s body: Re=%.3g Cd=%.3f Cl=%.3f", body.primitive.value, reynolds, cd, cl)
    return Body3DResult(
        cd=cd,
        cl=cl,
        drag_force_n=q * area * cd,
        lift_force_n=q * area * cl,
        reynolds=reynolds,
        dynamic_pressure_pa=q,
        projected_area_m2=area,
        characteristic_length_m=length,
        primitive=body.primitive,
        debug={
            "velocityMs": velocity,
            "charLength": length,
            "angleOfAttack": aoa,
        },
    )
