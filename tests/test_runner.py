"""
End-to-end tests: iteration loops with screen, history and HDF5 output.

Run: pytest tests/test_runner.py -v
"""

from pathlib import Path

import h5py
import numpy as np
import pytest

from feaout.config import load_config
from feaout.fields import FieldFormat, FieldSchema
from feaout.monitors.base import format_value
from feaout.runner import create_monitors, run_simulation

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"


def _config(name: str, tmp_path: Path):
    config = load_config(CONFIG_DIR / name)
    config.output.directory = str(tmp_path)
    return config


def _history_rows(path: Path) -> tuple[str, list[list[str]]]:
    lines = path.read_text().splitlines()
    return lines[0], [line.split(",") for line in lines[1:]]


def test_format_value():
    integer = FieldSchema("INNER_ITER", "Inner_Iter", FieldFormat.INTEGER, "ITER")
    fixed = FieldSchema("LOAD_RAMP", "Load_Ramp", FieldFormat.FIXED, "LOAD_RAMP")
    sci = FieldSchema("VMS", "VonMises", FieldFormat.SCIENTIFIC, "VMS")

    assert format_value(integer, 7) == "7"
    assert format_value(integer, 7, 4) == "   7"
    assert format_value(fixed, 0.5) == "0.500000"
    assert format_value(sci, 2.5e8) == "2.5000e+08"
    assert format_value(sci, float("nan"), 3) == "  -"
    assert format_value(sci, None) == "-"


def test_create_monitors(tmp_path):
    config = _config("beam_3d_nonlinear.yaml", tmp_path)
    monitors = create_monitors(config, tmp_path)
    assert [type(m).__name__ for m in monitors] == [
        "ScreenMonitor", "HistoryMonitor", "HDF5Monitor",
    ]
    assert monitors[0].total_steps == 5 * 4 * 10
    assert monitors[2].every_n_steps == 2


def test_linear_2d_run_converges(tmp_path, capsys):
    config = _config("beam_2d_linear.yaml", tmp_path)

    output = run_simulation(config)

    # 0.4**21 is the first residual below 1e-8
    assert output.history.get_value("INNER_ITER") == 21
    assert output.is_converged(config.iterations.conv_residual_min)

    header, rows = _history_rows(tmp_path / "history.csv")
    assert header == '"Time_Iter","Outer_Iter","Inner_Iter","rms[DispX]","rms[DispY]"'
    assert len(rows) == 22
    assert rows[0][:3] == ["0", "0", "0"]
    assert rows[-1][2] == "21"
    assert float(rows[-1][3]) < -8.0

    stdout = capsys.readouterr().out
    assert "rms[DispX]" in stdout
    assert "Zone" not in stdout

    with h5py.File(tmp_path / "beam_2d.h5", "r") as f:
        assert f.attrs["ndim"] == 2
        assert f.attrs["n_points"] == 21 * 5
        assert sorted(f.keys()) == ["schema", "step_000000"]
        assert f["schema/COORD-X"].attrs["label"] == "x"
        snapshot = f["step_000000"]
        assert "VELOCITY-X" not in snapshot
        np.testing.assert_allclose(snapshot["COORD-X"][:5], [0.0, 0.1, 0.2, 0.3, 0.4])
        assert not np.isnan(snapshot["VON_MISES_STRESS"][()]).any()
        # Clamped end
        assert snapshot["DISPLACEMENT-Y"][0] == 0.0


def test_nonlinear_3d_multizone_run(tmp_path, capsys):
    config = _config("beam_3d_nonlinear.yaml", tmp_path)

    output = run_simulation(config)

    assert output.context.nonlinear
    assert output.context.dynamic
    assert output.conv_field == "RMS_UTOL"

    header, rows = _history_rows(tmp_path / "history.csv")
    labels = header.split(",")
    assert labels[:4] == ['"Time_Iter"', '"Outer_Iter"', '"Inner_Iter"', '"Time(min)"']
    assert '"rms[U]"' in labels and '"bgs[DispZ]"' in labels
    assert len(rows) == 5 * 4 * 10
    assert {len(row) for row in rows} == {len(labels)}
    assert float(rows[-1][3]) == pytest.approx(0.25)

    stdout = capsys.readouterr().out
    assert stdout.count("Zone 1 (Structure)") == 5 * 4
    assert "Load_Ramp" in stdout

    with h5py.File(tmp_path / "volume.h5", "r") as f:
        steps = [k for k in f.keys() if k.startswith("step_")]
        assert len(steps) == 10
        last = f[steps[-1]]
        assert last.attrs["time_iter"] == 4
        assert last.attrs["outer_iter"] == 2
        for key in ["COORD-Z", "VELOCITY-Z", "ACCELERATION-X", "STRESS-YZ", "VON_MISES_STRESS"]:
            assert last[key].shape == (11 * 3 * 3,)


def test_history_file_uses_one_delimiter(tmp_path):
    config = _config("beam_2d_linear.yaml", tmp_path)
    run_simulation(config)

    lines = (tmp_path / "history.csv").read_text().splitlines()
    n_columns = len(lines[0].split(","))
    for line in lines:
        assert ", " not in line
        assert len(line.split(",")) == n_columns
