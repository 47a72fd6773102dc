from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

import numpy as np

from windtunnel.aero.body3d import Body3D, solve_body
from windtunnel.aero.solver import AerodynamicSolver, FlowParameters
from windtunnel.aero.sweep import angle_range, angle_sweep
from windtunnel.config import AppConfig, load_config
from windtunnel.errors import InvalidInputError, StorageError
from windtunnel.geometry import presets
from windtunnel.geometry.polygon import as_points
from windtunnel.storage.store import SavedTestStore

LOGGER = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _load_points(args: argparse.Namespace) -> np.ndarray:
    if args.preset:
        return presets.from_name(args.preset)
    if not args.points:
        raise InvalidInputError("Provide --points FILE or --preset NAME.")
    try:
        raw: Any = json.loads(Path(args.points).read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidInputError(f"Cannot read points file {args.points}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidInputError(f"Points file {args.points} is not valid JSON: {exc}") from exc
    if isinstance(raw, dict):
        raw = raw.get("points", raw.get("shape", {}).get("points"))
    return as_points(raw, min_points=3)


def _flow_from_args(args: argparse.Namespace, cfg: AppConfig) -> FlowParameters:
    density = args.air_density if args.air_density is not None else cfg.constants.default_air_density
    return FlowParameters(wind_speed_kmh=args.wind_speed, angle_deg=args.angle, air_density=density)


def _add_shape_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--points", help="JSON file with [[x, y], ...] or {\"points\": [...]}.")
    parser.add_argument("--preset", help="circle | rectangle | square | triangle | naca:XXXX")
    parser.add_argument("--wind-speed", type=float, default=50.0, help="Wind speed [km/h].")
    parser.add_argument("--angle", type=float, default=0.0, help="Angle of attack [deg].")
    parser.add_argument("--air-density", type=float, default=None, help="Air density [kg/m^3].")


def _cmd_solve(args: argparse.Namespace, cfg: AppConfig) -> dict[str, Any]:
    solver = AerodynamicSolver(cfg.constants)
    result = solver.solve(_load_points(args), _flow_from_args(args, cfg))
    return result.to_dict()


def _cmd_solve3d(args: argparse.Namespace, cfg: AppConfig) -> dict[str, Any]:
    raw: dict[str, Any] = {"type": args.type, "rotation": args.rotation}
    for key in ("radius", "width", "height", "depth", "radiusTop", "radiusBottom", "tube"):
        value = getattr(args, key)
        if value is not None:
            raw[key] = value
    body = Body3D.from_mapping(raw)
    return solve_body(body, _flow_from_args(args, cfg), cfg.constants).to_dict()


def _cmd_save(args: argparse.Namespace, cfg: AppConfig) -> dict[str, Any]:
    solver = AerodynamicSolver(cfg.constants)
    points = _load_points(args)
    flow = _flow_from_args(args, cfg)
    result = solver.solve(points, flow)
    store = SavedTestStore(args.store or cfg.storage.path)
    record = store.save(points, flow, result.to_dict())
    return record.to_dict()


def _cmd_sweep(args: argparse.Namespace, cfg: AppConfig) -> dict[str, Any]:
    solver = AerodynamicSolver(cfg.constants)
    start = args.start if args.start is not None else cfg.sweep.start_deg
    stop = args.stop if args.stop is not None else cfg.sweep.stop_deg
    step = args.step if args.step is not None else cfg.sweep.step_deg
    df = angle_sweep(solver, _load_points(args), _flow_from_args(args, cfg), angle_range(start, stop, step))
    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(out_path, index=False)
        LOGGER.info("Wrote sweep to %s", out_path.resolve())
    best = df.loc[df["liftToDrag"].idxmax()] if df["liftToDrag"].notna().any() else None
    return {
        "angles": len(df),
        "bestLiftToDragAngle": float(best["angle"]) if best is not None else None,
        "rows": json.loads(df.to_json(orient="records")),
    }


def _cmd_history(args: argparse.Namespace, cfg: AppConfig) -> Any:
    store = SavedTestStore(args.store or cfg.storage.path)
    limit = args.limit or cfg.storage.history_limit
    if args.csv:
        out_path = Path(args.csv)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        store.to_dataframe(limit).to_csv(out_path, index=False)
        LOGGER.info("Wrote history to %s", out_path.resolve())
    return [test.to_dict() for test in store.recent(limit)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Empirical 2D wind tunnel estimator")
    parser.add_argument("--config", default=None, help="Path to YAML/JSON config file")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    sub = parser.add_subparsers(dest="command", required=True)

    p_solve = sub.add_parser("solve", help="Estimate forces for one silhouette")
    _add_shape_args(p_solve)
    p_solve.set_defaults(handler=_cmd_solve)

    p_3d = sub.add_parser("solve3d", help="Estimate forces for a 3D primitive")
    p_3d.add_argument("--type", required=True, help="sphere | box | cylinder | cone | torus")
    for flag, dest in (
        ("--radius", "radius"),
        ("--width", "width"),
        ("--height", "height"),
        ("--depth", "depth"),
        ("--radius-top", "radiusTop"),
        ("--radius-bottom", "radiusBottom"),
        ("--tube", "tube"),
    ):
        p_3d.add_argument(flag, dest=dest, type=float, default=None, help="Length [m].")
    p_3d.add_argument(
        "--rotation", type=float, nargs=3, default=[0.0, 0.0, 0.0], metavar=("PITCH", "YAW", "ROLL"),
        help="Euler angles [deg]; pitch is the angle of attack.",
    )
    p_3d.add_argument("--wind-speed", type=float, default=50.0, help="Wind speed [km/h].")
    p_3d.add_argument("--angle", type=float, default=0.0, help=argparse.SUPPRESS)
    p_3d.add_argument("--air-density", type=float, default=None, help="Air density [kg/m^3].")
    p_3d.set_defaults(handler=_cmd_solve3d)

    p_save = sub.add_parser("save", help="Solve and persist the run")
    _add_shape_args(p_save)
    p_save.add_argument("--store", default=None, help="Path of the JSON test store")
    p_save.set_defaults(handler=_cmd_save)

    p_sweep = sub.add_parser("sweep", help="Solve across a range of angles of attack")
    _add_shape_args(p_sweep)
    p_sweep.add_argument("--start", type=float, default=None)
    p_sweep.add_argument("--stop", type=float, default=None)
    p_sweep.add_argument("--step", type=float, default=None)
    p_sweep.add_argument("--output", default=None, help="CSV path for the sweep table")
    p_sweep.set_defaults(handler=_cmd_sweep)

    p_hist = sub.add_parser("history", help="List saved runs, most recent first")
    p_hist.add_argument("--store", default=None, help="Path of the JSON test store")
    p_hist.add_argument("--limit", type=int, default=None)
    p_hist.add_argument("--csv", default=None, help="Also export the listing to CSV")
    p_hist.set_defaults(handler=_cmd_history)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = load_config(args.config) if args.config else AppConfig()
    _configure_logging(args.log_level or cfg.logging.level)

    try:
        output = args.handler(args, cfg)
    except (InvalidInputError, StorageError) as exc:
        LOGGER.error("%s", exc)
        print(json.dumps({"error": str(exc)}, indent=2))
        return 2
    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
