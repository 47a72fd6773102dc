from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from windtunnel.config import AeroConstants
from windtunnel.geometry.polygon import BoundingBox, as_points, bounding_box

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeometryAnalysis:
    """Intrinsic profile properties of an unrotated silhouette.

    `trailing_edge_angle_deg` below ~20 deg reads as a sharp trailing edge,
    above ~40 deg as blunt. `leading_edge_radius` is a chord-normalized
    heuristic (half the gap between the leading-edge neighbours), not a
    fitted radius.
    """

    camber: float
    thickness_ratio: float
    is_symmetric: bool
    trailing_edge_angle_deg: float
    leading_edge_radius: float

    @property
    def zero_lift_angle_deg(self) -> float:
        # Thin-airfoil rule of thumb: 2% camber ~ -2 deg.
        return -100.0 * self.camber


DEGENERATE_PROFILE = GeometryAnalysis(
    camber=0.0,
    thickness_ratio=0.0,
    is_symmetric=True,
    trailing_edge_angle_deg=180.0,
    leading_edge_radius=0.0,
)


def _balance(a: float, b: float) -> float:
    if a <= 0.0 or b <= 0.0:
        return 0.0
    return min(a, b) / max(a, b)


def _edge_point(pts: np.ndarray, target_x: float, tol: float) -> tuple[int, np.ndarray]:
    """Vertex index closest to `target_x` plus the chord endpoint on that edge.

    The index is the first vertex at the extreme, used for neighbour lookups.
    When several vertices share the extreme (a flat nose or base), the chord
    endpoint is their midpoint so a flat edge does not tilt the chord.
    """
    dist = np.abs(pts[:, 0] - target_x)
    idx = int(np.argmin(dist))
    on_edge = dist <= dist[idx] + tol
    return idx, pts[on_edge].mean(axis=0)


def _vertex_angle_deg(pts: np.ndarray, idx: int) -> float:
    n = len(pts)
    apex = pts[idx]
    v1 = pts[(idx - 1) % n] - apex
    v2 = pts[(idx + 1) % n] - apex
    angle = abs(math.degrees(math.atan2(v1[1], v1[0]) - math.atan2(v2[1], v2[0])))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def analyze_geometry(
    points: ArrayLike,
    bbox: BoundingBox | None = None,
    constants: AeroConstants | None = None,
) -> GeometryAnalysis:
    """Camber, thickness, symmetry and edge shape of a raw polygon.

    Leading edge is the vertex at min x, trailing edge the vertex at max x.
    Every vertex is projected onto the chord normal; the signed distances give
    camber (mean offset) and the upper/lower balance used for symmetry.
    """
    pts = as_points(points, min_points=3)
    box = bbox if bbox is not None else bounding_box(pts)
    consts = constants or AeroConstants()

    chord_length = box.width
    if chord_length <= 0.0:
        LOGGER.warning("Zero chord length (width=%.3g px); using degenerate profile.", chord_length)
        return DEGENERATE_PROFILE

    le_idx, le_point = _edge_point(pts, box.min_x, consts.edge_tolerance_px)
    te_idx, te_point = _edge_point(pts, box.max_x, consts.edge_tolerance_px)

    chord_vec = te_point - le_point
    chord_span = float(np.hypot(chord_vec[0], chord_vec[1]))
    if chord_span <= 0.0:
        LOGGER.warning("Leading and trailing edge coincide; using degenerate profile.")
        return DEGENERATE_PROFILE

    ux, uy = chord_vec / chord_span
    normal = np.array([-uy, ux], dtype=float)
    dist = (pts - le_point) @ normal

    upper = dist[dist > 0.0]
    lower = -dist[dist <= 0.0]
    upper_sum = float(upper.sum())
    lower_sum = float(lower.sum())
    max_upper = float(upper.max()) if upper.size else 0.0
    max_lower = float(lower.max()) if lower.size else 0.0

    camber = -float(dist.mean()) / chord_length
    thickness_ratio = box.height / chord_length

    threshold = consts.symmetry_balance_threshold
    is_symmetric = (
        _balance(upper_sum, lower_sum) > threshold
        and _balance(max_upper, max_lower) > threshold
        and abs(camber) < consts.symmetry_camber_threshold
    )

    n = len(pts)
    le_gap = pts[(le_idx - 1) % n] - pts[(le_idx + 1) % n]
    le_radius = float(np.hypot(le_gap[0], le_gap[1])) / (2.0 * chord_length)

    return GeometryAnalysis(
        camber=camber,
        thickness_ratio=float(thickness_ratio),
        is_symmetric=bool(is_symmetric),
        trailing_edge_angle_deg=_vertex_angle_deg(pts, te_idx),
        leading_edge_radius=le_radius,
    )
