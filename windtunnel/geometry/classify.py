from __future__ import annotations

from enum import Enum

import numpy as np
from numpy.typing import ArrayLike

from windtunnel.geometry.polygon import BoundingBox

# A regular n-gon tends to pi/4 ~= 0.785 solidity.
CIRCULAR_SOLIDITY_RANGE = (0.70, 0.82)
CIRCULAR_ASPECT_RANGE = (0.8, 1.25)
RECTANGULAR_MIN_SOLIDITY = 0.85
STREAMLINED_MIN_FINENESS = 3.0
STREAMLINED_MAX_INVERSE_FINENESS = 0.33


class ShapeType(str, Enum):
    CIRCULAR = "circular"
    RECTANGULAR = "rectangular"
    STREAMLINED = "streamlined"
    BLUFF = "bluff"


def classify_shape(points: ArrayLike, bbox: BoundingBox, solidity: float) -> ShapeType:
    """Bucket a silhouette by solidity and bounding-box aspect ratio; the first match wins."""
    n_points = len(np.asarray(points))
    aspect = bbox.width / bbox.height if bbox.height > 0.0 else 1.0

    if (
        CIRCULAR_SOLIDITY_RANGE[0] < solidity < CIRCULAR_SOLIDITY_RANGE[1]
        and CIRCULAR_ASPECT_RANGE[0] < aspect < CIRCULAR_ASPECT_RANGE[1]
    ):
        return ShapeType.CIRCULAR
    if solidity > RECTANGULAR_MIN_SOLIDITY and n_points == 4:
        return ShapeType.RECTANGULAR
    if aspect > STREAMLINED_MIN_FINENESS or 0.0 < aspect < STREAMLINED_MAX_INVERSE_FINENESS:
        return ShapeType.STREAMLINED
    return ShapeType.BLUFF
