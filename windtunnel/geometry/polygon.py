from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from windtunnel.errors import InvalidInputError

Point = tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width over height; a flat (zero-height) box reports 1.0."""
        if self.height <= 0.0:
            return 1.0
        return self.width / self.height


def as_points(points: ArrayLike, min_points: int = 1) -> np.ndarray:
    """Coerce `points` into a finite (n, 2) float array with at least `min_points` rows."""
    try:
        arr = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Points must be numeric [x, y] pairs: {exc}") from exc

    if arr.size == 0:
        raise InvalidInputError(f"At least {min_points} point(s) required, got 0.")
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise InvalidInputError(f"Points must be a sequence of [x, y] pairs, got shape {arr.shape}.")
    if arr.shape[0] < min_points:
        raise InvalidInputError(f"At least {min_points} point(s) required, got {arr.shape[0]}.")
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError("Points must be finite numbers.")
    return arr


def centroid(points: ArrayLike) -> Point:
    pts = as_points(points)
    cx, cy = pts.mean(axis=0)
    return float(cx), float(cy)


def rotate(points: ArrayLike, angle_deg: float) -> np.ndarray:
    """Rotate about the centroid.

    The standard rotation matrix is applied directly to screen (Y-down)
    coordinates, so a positive angle looks clockwise on screen.
    """
    pts = as_points(points)
    if math.fmod(angle_deg, 360.0) == 0.0:
        return pts.copy()

    theta = math.radians(angle_deg)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    rot = np.array([[cos_t, -sin_t], [sin_t, cos_t]], dtype=float)
    center = pts.mean(axis=0)
    return center + (pts - center) @ rot.T


def bounding_box(points: ArrayLike) -> BoundingBox:
    pts = as_points(points)
    min_x, min_y = pts.min(axis=0)
    max_x, max_y = pts.max(axis=0)
    return BoundingBox(min_x=float(min_x), max_x=float(max_x), min_y=float(min_y), max_y=float(max_y))


def polygon_area(points: ArrayLike) -> float:
    """Shoelace area of the implicitly closed polygon, independent of winding."""
    pts = as_points(points)
    x = pts[:, 0]
    y = pts[:, 1]
    signed = np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)
    return float(abs(signed) / 2.0)


def solidity(points: ArrayLike, bbox: BoundingBox | None = None) -> float:
    """Polygon area over bounding-box area; 1.0 when the box has no area."""
    box = bbox if bbox is not None else bounding_box(points)
    if box.area <= 0.0:
        return 1.0
    return polygon_area(points) / box.area


def points_to_list(points: ArrayLike) -> list[list[float]]:
    """Plain `[[x, y], ...]` form for JSON payloads."""
    return [[float(x), float(y)] for x, y in as_points(points)]
