from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike

from windtunnel.aero.solver import AerodynamicSolver, FlowParameters
from windtunnel.geometry.polygon import as_points

LOGGER = logging.getLogger(__name__)


def angle_range(start_deg: float, stop_deg: float, step_deg: float) -> np.ndarray:
    """Inclusive range of angles; `stop_deg` is kept when the step lands on it."""
    if step_deg <= 0.0:
        raise ValueError("`step_deg` must be > 0.")
    if start_deg > stop_deg:
        raise ValueError("`start_deg` must not exceed `stop_deg`.")
    n_steps = int(np.floor((stop_deg - start_deg) / step_deg + 1e-9))
    return start_deg + step_deg * np.arange(n_steps + 1)


def angle_sweep(
    solver: AerodynamicSolver,
    points: ArrayLike,
    params: FlowParameters,
    angles_deg: Iterable[float],
) -> pd.DataFrame:
    """Solve one silhouette across several angles of attack.

    Rows keep full precision; one row per angle with the wire column names.
    """
    pts = as_points(points, min_points=3)
    rows: list[dict[str, object]] = []
    for angle in angles_deg:
        result = solver.solve(pts, replace(params, angle_deg=float(angle)))
        row: dict[str, object] = {"angle": float(angle)}
        row.update(result.to_dict(rounded=False, include_debug=False))
        row["liftToDrag"] = result.cl / result.cd if result.cd > 0.0 else float("nan")
        rows.append(row)

    df = pd.DataFrame(rows)
    LOGGER.info("Angle sweep finished: %d angles", len(df))
    return df
