from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

import numpy as np
import pandas as pd

from windtunnel.aero.solver import FlowParameters
from windtunnel.errors import InvalidInputError, StorageError
from windtunnel.geometry.polygon import as_points, points_to_list

LOGGER = logging.getLogger(__name__)

REQUIRED_RESULT_FIELDS = ("area", "cd", "dragForce")
OPTIONAL_RESULT_FIELDS = ("cl", "liftForce")
DEFAULT_HISTORY_LIMIT = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(stamp: datetime) -> datetime:
    # Hand-edited records may lack an offset; those are read as UTC.
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp


def _check_results(results: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(results, Mapping):
        raise StorageError("`results` must be an object.")
    for key in REQUIRED_RESULT_FIELDS:
        value = results.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise StorageError(f"`results.{key}` is required and must be a finite number.")
    for key in OPTIONAL_RESULT_FIELDS:
        value = results.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, float))):
            raise StorageError(f"`results.{key}` must be a number when present.")
    return dict(results)


@dataclass(frozen=True)
class SavedTest:
    """One persisted wind tunnel run: silhouette, flow parameters and the solver output."""

    id: str
    shape_type: str
    points: list[list[float]]
    parameters: FlowParameters
    results: dict[str, Any]
    created_at: datetime

    @property
    def polygon(self) -> np.ndarray:
        return as_points(self.points, min_points=3)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "shape": {"type": self.shape_type, "points": self.points},
            "parameters": self.parameters.to_dict(),
            "results": self.results,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SavedTest":
        try:
            shape = raw["shape"]
            return cls(
                id=str(raw["id"]),
                shape_type=str(shape.get("type", "polygon")),
                points=points_to_list(shape["points"]),
                parameters=FlowParameters.from_mapping(raw["parameters"]),
                results=_check_results(raw["results"]),
                created_at=_as_utc(datetime.fromisoformat(str(raw["createdAt"]))),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise StorageError(f"Malformed saved test record: {exc}") from exc


class SavedTestStore:
    """Saved tests kept in a JSON file, or in memory when `path` is None."""

    def __init__(
        self,
        path: str | Path | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self._clock = clock
        self._memory: list[dict[str, Any]] = []

    def _read(self) -> list[dict[str, Any]]:
        if self.path is None:
            return list(self._memory)
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt test store {self.path}: {exc}") from exc
        tests = data.get("tests") if isinstance(data, dict) else None
        if not isinstance(tests, list):
            raise StorageError(f"Test store {self.path} must hold a `tests` list.")
        return tests

    def _write(self, tests: list[dict[str, Any]]) -> None:
        if self.path is None:
            self._memory = list(tests)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"tests": tests}, indent=2), encoding="utf-8")

    def save(
        self,
        points: Any,
        parameters: FlowParameters | Mapping[str, Any],
        results: Mapping[str, Any],
        shape_type: str = "polygon",
    ) -> SavedTest:
        try:
            flow = parameters if isinstance(parameters, FlowParameters) else FlowParameters.from_mapping(parameters)
            pts = points_to_list(as_points(points, min_points=3))
        except InvalidInputError as exc:
            raise StorageError(f"Cannot save test: {exc}") from exc

        record = SavedTest(
            id=uuid.uuid4().hex,
            shape_type=shape_type,
            points=pts,
            parameters=flow,
            results=_check_results(results),
            created_at=_as_utc(self._clock()),
        )
        tests = self._read()
        tests.append(record.to_dict())
        self._write(tests)
        LOGGER.info("Saved test %s (%d points)", record.id, len(pts))
        return record

    def all(self) -> list[SavedTest]:
        return [SavedTest.from_dict(raw) for raw in self._read()]

    def recent(self, limit: int | None = DEFAULT_HISTORY_LIMIT) -> list[SavedTest]:
        """Most recent first; ties on `created_at` keep the later save first. `None` returns all."""
        if limit is not None and limit < 1:
            raise ValueError("`limit` must be >= 1.")
        newest_first = list(reversed(self.all()))
        newest_first.sort(key=lambda t: t.created_at, reverse=True)
        return newest_first if limit is None else newest_first[:limit]

    def get(self, test_id: str) -> SavedTest:
        for test in self.all():
            if test.id == test_id:
                return test
        raise KeyError(test_id)

    def to_dataframe(self, limit: int | None = None) -> pd.DataFrame:
        rows: list[dict[str, Any]] = []
        for test in self.recent(limit):
            row: dict[str, Any] = {
                "id": test.id,
                "createdAt": test.created_at.isoformat(),
                "shape": test.shape_type,
                "nPoints": len(test.points),
            }
            row.update(test.parameters.to_dict())
            row.update({k: v for k, v in test.results.items() if not isinstance(v, (dict, list))})
            rows.append(row)
        return pd.DataFrame(rows)
