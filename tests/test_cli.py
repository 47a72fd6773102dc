from __future__ import annotations

import json

import pandas as pd

from windtunnel.cli import main


def _json_out(capsys):
    return json.loads(capsys.readouterr().out)


def test_solve_preset(capsys):
    assert main(["solve", "--preset", "square", "--wind-speed", "50"]) == 0
    out = _json_out(capsys)
    assert out["shapeType"] == "rectangular"
    assert out["cd"] == 2.0


def test_solve_points_file(tmp_path, capsys):
    path = tmp_path / "shape.json"
    path.write_text(json.dumps({"points": [[0, 0], [100, 0], [100, 100], [0, 100]]}), encoding="utf-8")
    assert main(["solve", "--points", str(path), "--angle", "45"]) == 0
    assert _json_out(capsys)["cl"] == 0.707


def test_invalid_input_exit_code(capsys):
    assert main(["solve", "--preset", "square", "--wind-speed", "-3"]) == 2
    assert "error" in _json_out(capsys)
    assert main(["solve"]) == 2


def test_sweep_writes_csv(tmp_path, capsys):
    csv_path = tmp_path / "sweep.csv"
    code = main(
        ["sweep", "--preset", "naca:0012", "--start", "-4", "--stop", "4", "--step", "2", "--output", str(csv_path)]
    )
    assert code == 0
    out = _json_out(capsys)
    assert out["angles"] == 5
    assert out["bestLiftToDragAngle"] == 4.0
    assert len(pd.read_csv(csv_path)) == 5


def test_save_then_history(tmp_path, capsys):
    store = tmp_path / "tests.json"
    assert main(["save", "--preset", "circle", "--wind-speed", "100", "--store", str(store)]) == 0
    saved = _json_out(capsys)
    assert saved["results"]["shapeType"] == "circular"

    csv_path = tmp_path / "history.csv"
    assert main(["history", "--store", str(store), "--csv", str(csv_path)]) == 0
    listed = _json_out(capsys)
    assert [t["id"] for t in listed] == [saved["id"]]
    assert pd.read_csv(csv_path)["id"].tolist() == [saved["id"]]


def test_missing_points_file(tmp_path, capsys):
    assert main(["solve", "--points", str(tmp_path / "nowhere.json")]) == 2
    assert "Cannot read points file" in _json_out(capsys)["error"]


def test_malformed_points_file(tmp_path, capsys):
    path = tmp_path / "shape.json"
    path.write_text("[[0, 0], [100, 0],", encoding="utf-8")
    assert main(["solve", "--points", str(path)]) == 2
    assert "not valid JSON" in _json_out(capsys)["error"]


def test_solve3d_sphere(capsys):
    assert main(["solve3d", "--type", "sphere", "--radius", "0.5", "--wind-speed", "36"]) == 0
    out = _json_out(capsys)
    assert out["cd"] == 0.2
    assert out["cl"] == 0.0
    assert out["dynamicPressure"] == 61.25


def test_solve3d_pitched_box_lifts(capsys):
    assert main(["solve3d", "--type", "box", "--rotation", "45", "0", "0", "--wind-speed", "36"]) == 0
    assert _json_out(capsys)["cl"] == 0.5


def test_solve3d_unknown_type(capsys):
    assert main(["solve3d", "--type", "pyramid"]) == 2
    assert "error" in _json_out(capsys)
