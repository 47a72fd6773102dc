from __future__ import annotations

import logging
from typing import Any, Mapping

import numpy as np

from windtunnel.aero.body3d import Body3D, solve_body
from windtunnel.aero.solver import AerodynamicSolver, FlowParameters
from windtunnel.errors import InvalidInputError, StorageError
from windtunnel.geometry.polygon import as_points
from windtunnel.storage.store import DEFAULT_HISTORY_LIMIT, SavedTestStore

LOGGER = logging.getLogger(__name__)

MISSING_INPUT_MESSAGE = "Invalid input. Need shape.points and parameters."


def _shape_and_parameters(payload: Any) -> tuple[Mapping[str, Any], Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        raise InvalidInputError(MISSING_INPUT_MESSAGE)
    shape = payload.get("shape")
    parameters = payload.get("parameters")
    if not isinstance(shape, Mapping) or shape.get("points") is None or not isinstance(parameters, Mapping):
        raise InvalidInputError(MISSING_INPUT_MESSAGE)
    return shape, parameters


def parse_simulate_request(payload: Any) -> tuple[np.ndarray, FlowParameters]:
    """Validate `{"shape": {"points": ...}, "parameters": {...}}` into solver inputs."""
    shape, parameters = _shape_and_parameters(payload)
    flow = FlowParameters.from_mapping(parameters)
    points = as_points(shape["points"], min_points=3)
    return points, flow


def simulate(payload: Any, solver: AerodynamicSolver | None = None) -> dict[str, Any]:
    """Wire-level solve: the rounded result object, or `{"error": ...}` on invalid input."""
    try:
        points, flow = parse_simulate_request(payload)
        result = (solver or AerodynamicSolver()).solve(points, flow)
    except InvalidInputError as exc:
        LOGGER.info("Rejected simulate request: %s", exc)
        return {"error": str(exc)}
    return result.to_dict()


def simulate_body(payload: Any) -> dict[str, Any]:
    """Wire-level 3D solve of `{"body": {"type", ...}, "parameters": {...}}`."""
    try:
        if not isinstance(payload, Mapping) or payload.get("body") is None:
            raise InvalidInputError("Invalid input. Need body and parameters.")
        body = Body3D.from_mapping(payload["body"])
        flow = FlowParameters.from_mapping(payload.get("parameters"))
    except InvalidInputError as exc:
        LOGGER.info("Rejected 3D simulate request: %s", exc)
        return {"error": str(exc)}
    return solve_body(body, flow).to_dict()


def save_test(payload: Any, store: SavedTestStore) -> dict[str, Any]:
    """Persist `{"shape", "parameters", "results"}` and echo the stored record."""
    try:
        shape, parameters = _shape_and_parameters(payload)
        results = payload.get("results")
        if results is None:
            raise InvalidInputError("Invalid input. Need results to save a test.")
        record = store.save(
            shape["points"],
            parameters,
            results,
            shape_type=str(shape.get("type", "polygon")),
        )
    except (InvalidInputError, StorageError) as exc:
        LOGGER.warning("Failed to save test: %s", exc)
        return {"error": f"Failed to save test: {exc}"}
    return record.to_dict()


def recent_tests(store: SavedTestStore, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict[str, Any]]:
    return [test.to_dict() for test in store.recent(limit)]
