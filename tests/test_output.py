"""
Unit tests: ElasticityOutput wiring, requested fields and convergence.

Run: pytest tests/test_output.py -v
"""

import pytest

from conftest import StubGeometry, StubSolver, make_config
from feaout.context import IterationCounters
from feaout.errors import ConfigurationError
from feaout.output import ElasticityOutput
from feaout.warnings import OutputFieldWarning


def test_context_is_captured_from_config_and_geometry():
    output = ElasticityOutput(make_config(ndim=2, linear=False), StubGeometry(ndim=3))
    ctx = output.context
    assert ctx.ndim == 3
    assert ctx.nonlinear
    assert not ctx.dynamic
    assert output.volume.n_points == 4


def test_default_screen_fields_linear_2d():
    output = ElasticityOutput(make_config(ndim=2), StubGeometry(ndim=2))
    assert output.screen_fields == ["INNER_ITER", "RMS_DISP_X", "RMS_DISP_Y", "VMS"]


def test_default_screen_fields_dynamic_multizone():
    config = make_config(ndim=3, linear=False, dynamic=True, multizone=True)
    output = ElasticityOutput(config, StubGeometry(ndim=3))
    assert output.screen_fields == [
        "TIME_ITER", "OUTER_ITER", "INNER_ITER",
        "RMS_UTOL", "RMS_RTOL", "RMS_ETOL", "VMS",
    ]


def test_default_history_and_volume_fields():
    output = ElasticityOutput(make_config(ndim=2, dynamic=True), StubGeometry(ndim=2))
    assert output.history_file_fields == [
        "TIME_ITER", "OUTER_ITER", "INNER_ITER", "RMS_DISP_X", "RMS_DISP_Y",
    ]
    assert output.volume_output_fields == [
        "COORD-X", "COORD-Y", "DISPLACEMENT-X", "DISPLACEMENT-Y",
        "STRESS-XX", "STRESS-YY", "STRESS-XY", "VON_MISES_STRESS",
    ]


def test_requested_fields_resolve_groups_and_warn_on_unknown():
    config = make_config(
        ndim=2,
        screen_fields=["VMS", "RMS_RES", "BGS_RES", "RMS_DISP_Z"],
        volume_fields=["VELOCITY", "COORDINATES"],
    )
    with pytest.warns(OutputFieldWarning) as record:
        output = ElasticityOutput(config, StubGeometry(ndim=2))

    messages = " ".join(str(w.message) for w in record)
    assert "BGS_RES" in messages
    assert "RMS_DISP_Z" in messages
    assert "VELOCITY" in messages
    assert output.screen_fields == ["RMS_DISP_X", "RMS_DISP_Y", "VMS"]
    assert output.volume_output_fields == ["COORD-X", "COORD-Y"]


def test_conv_field_defaults():
    linear = ElasticityOutput(make_config(ndim=2), StubGeometry(ndim=2))
    nonlinear = ElasticityOutput(make_config(ndim=2, linear=False), StubGeometry(ndim=2))
    assert linear.conv_field == "RMS_DISP_X"
    assert nonlinear.conv_field == "RMS_UTOL"


def test_undeclared_conv_field_is_rejected():
    config = make_config(ndim=2, linear=False, conv_field="RMS_DISP_X")
    with pytest.raises(ConfigurationError, match="RMS_DISP_X"):
        ElasticityOutput(config, StubGeometry(ndim=2))


def test_is_converged():
    output = ElasticityOutput(make_config(ndim=2), StubGeometry(ndim=2))
    assert not output.is_converged(-2.0)

    output.load_history_data(IterationCounters(), StubSolver(ndim=2, residual=1e-3))
    assert output.is_converged(-2.0)
    assert not output.is_converged(-4.0)
    assert not output.is_converged(None)


def test_load_and_gates_through_facade():
    geometry = StubGeometry(ndim=3, n_points=2)
    output = ElasticityOutput(make_config(ndim=3, linear=False), geometry)
    solver = StubSolver(ndim=3)

    output.load_history_data(IterationCounters(inner_iter=0), solver)
    output.load_volume_data(solver)

    assert output.history.get_value("RMS_UTOL") == pytest.approx(-3.0)
    assert output.volume.get_value("STRESS-YZ", 1) == 1005.0
    assert output.decisions(IterationCounters(inner_iter=0)).screen_header
    assert not output.decisions(IterationCounters(inner_iter=5)).screen_header


def test_multizone_header_and_filenames():
    config = make_config(ndim=2, volume_filename="beam", history_filename="conv")
    config.problem.zone = 2
    output = ElasticityOutput(config, StubGeometry(ndim=2))
    assert output.multizone_header == "Zone 2 (Structure)"
    assert output.volume_filename == "beam"
    assert output.history_filename == "conv"
    assert output.restart_filename == "restart"
    assert output.surface_filename == "surface"
