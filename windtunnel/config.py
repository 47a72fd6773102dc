from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping

import yaml


def _load_mapping(path: Path) -> Mapping[str, Any]:
    # YAML is a superset of JSON, so both config flavours go through safe_load.
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config file must contain a mapping at top level: {path}")
    return data


def _coerce_dataclass(cls: type[Any], raw: Mapping[str, Any] | None) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, Mapping):
        raise ValueError(f"Config section for {cls.__name__} must be a mapping.")
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        if f.name in raw:
            kwargs[f.name] = _coerce_value(f.default, raw[f.name], f"{cls.__name__}.{f.name}")
    return cls(**kwargs)


def _coerce_value(default: Any, value: Any, name: str) -> Any:
    # PyYAML reads `3.5e5` (no exponent sign) as a string.
    try:
        if isinstance(default, float):
            return float(value)
        if isinstance(default, int) and not isinstance(default, bool):
            return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"`{name}` must be numeric, got {value!r}.") from exc
    return value


@dataclass(frozen=True)
class AeroConstants:
    """Physical and empirical constants shared by the 2D and 3D engines."""

    pixels_per_meter: float = 100.0
    dynamic_viscosity: float = 1.81e-5
    unit_depth_m: float = 1.0
    default_air_density: float = 1.225
    symmetry_balance_threshold: float = 0.85
    symmetry_camber_threshold: float = 0.02
    drag_crisis_center_re: float = 3.5e5
    drag_crisis_width_re: float = 5.0e4
    edge_tolerance_px: float = 1e-6


@dataclass
class StorageConfig:
    path: str = "outputs/tests.json"
    history_limit: int = 10


@dataclass
class SweepConfig:
    start_deg: float = -20.0
    stop_deg: float = 20.0
    step_deg: float = 2.0


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    constants: AeroConstants = field(default_factory=AeroConstants)
    storage: StorageConfig = field(default_factory=StorageConfig)
    sweep: SweepConfig = field(default_factory=SweepConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AppConfig":
        return cls(
            constants=_coerce_dataclass(AeroConstants, raw.get("constants")),
            storage=_coerce_dataclass(StorageConfig, raw.get("storage")),
            sweep=_coerce_dataclass(SweepConfig, raw.get("sweep")),
            logging=_coerce_dataclass(LoggingConfig, raw.get("logging")),
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> "AppConfig":
        return cls.from_dict(_load_mapping(Path(path)))


def validate_config(cfg: AppConfig) -> AppConfig:
    constants = cfg.constants
    if constants.pixels_per_meter <= 0.0:
        raise ValueError("`constants.pixels_per_meter` must be > 0.")
    if constants.dynamic_viscosity <= 0.0:
        raise ValueError("`constants.dynamic_viscosity` must be > 0.")
    if constants.unit_depth_m <= 0.0:
        raise ValueError("`constants.unit_depth_m` must be > 0.")
    if constants.default_air_density <= 0.0:
        raise ValueError("`constants.default_air_density` must be > 0.")
    if not 0.0 < constants.symmetry_balance_threshold <= 1.0:
        raise ValueError("`constants.symmetry_balance_threshold` must be in (0, 1].")
    if constants.symmetry_camber_threshold < 0.0:
        raise ValueError("`constants.symmetry_camber_threshold` must be >= 0.")
    if constants.drag_crisis_width_re <= 0.0:
        raise ValueError("`constants.drag_crisis_width_re` must be > 0.")
    if constants.edge_tolerance_px < 0.0:
        raise ValueError("`constants.edge_tolerance_px` must be >= 0.")
    if cfg.storage.history_limit < 1:
        raise ValueError("`storage.history_limit` must be >= 1.")
    if cfg.sweep.step_deg <= 0.0:
        raise ValueError("`sweep.step_deg` must be > 0.")
    if cfg.sweep.start_deg > cfg.sweep.stop_deg:
        raise ValueError("`sweep.start_deg` must not exceed `sweep.stop_deg`.")
    return cfg


def load_config(path: Path | str) -> AppConfig:
    return validate_config(AppConfig.from_yaml(path))
