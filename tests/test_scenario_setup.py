from __future__ import annotations

import pytest

from sim_stochastic_crm.scenario_setup import (
    DEFAULT_SCENARIO_PATH,
    EXAMPLES_DIR,
    build_flight_heights,
    build_monthly_density,
    build_run_settings,
    build_simulator,
    build_turbine_scenario,
    load_scenario_data,
    resolve_data_path,
)
from sim_stochastic_crm.simulation import DensityMode, ModelOption, SpeedPitchMode


def test_default_scenario_loads():
    data = load_scenario_data()
    assert data["scenario_name"] == "kittiwake_offshore_5mw"
    assert load_scenario_data(DEFAULT_SCENARIO_PATH) == data


def test_month_keyed_operation_matches_list_order():
    data = load_scenario_data()
    turbine = build_turbine_scenario(data)
    assert turbine.monthly_operation[0].mean == pytest.approx(96.28)
    assert turbine.monthly_operation[11].mean == pytest.approx(97.28)
    assert turbine.air_gap.mean == 36.0
    assert turbine.speed_pitch_mode is SpeedPitchMode.PROBABILITY


def test_incomplete_monthly_mapping_rejected():
    data = load_scenario_data()
    data["turbine"] = dict(data["turbine"])
    operation = dict(data["turbine"]["monthly_operation"])
    operation.pop("Dec")
    data["turbine"]["monthly_operation"] = operation
    with pytest.raises(ValueError):
        build_turbine_scenario(data)


def test_wind_speed_scenario_sections():
    data = load_scenario_data(EXAMPLES_DIR / "wind_speed_scenario.json")
    turbine = build_turbine_scenario(data)
    assert turbine.wind_lookup.threshold() == 3.0
    density = build_monthly_density(data, EXAMPLES_DIR)
    assert density.mode is DensityMode.PERCENTILES
    settings = build_run_settings(data)
    assert settings.model_options == (ModelOption.BASIC, ModelOption.EXTENDED)
    assert settings.n_iter == 500


def test_flight_heights_columns_and_absence():
    data = load_scenario_data()
    data["flight_heights"] = {"csv": "generic_fhd_bootstraps.csv", "columns": ["bootId_1", "bootId_2"]}
    fhd = build_flight_heights(data, EXAMPLES_DIR)
    assert fhd.n_draws == 2
    assert fhd.heights[0] == 0.0

    data.pop("flight_heights")
    assert build_flight_heights(data) is None


def test_missing_data_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        resolve_data_path("no_such_file.csv", tmp_path)


def test_confined_paths_reject_absolute_and_parent_references():
    absolute = EXAMPLES_DIR / "generic_fhd_bootstraps.csv"
    assert resolve_data_path(absolute) == absolute
    with pytest.raises(ValueError):
        resolve_data_path(absolute, EXAMPLES_DIR, confined=True)
    with pytest.raises(ValueError):
        resolve_data_path("../scenario_setup.py", EXAMPLES_DIR, confined=True)
    assert resolve_data_path("generic_fhd_bootstraps.csv", EXAMPLES_DIR, confined=True) == absolute


def test_inline_scenario_cannot_read_files_outside_examples():
    data = load_scenario_data()
    data["flight_heights"] = {"csv": str(EXAMPLES_DIR / "generic_fhd_bootstraps.csv")}
    with pytest.raises(ValueError):
        build_simulator(data)
    assert build_simulator(data, confined=False).flight_heights is not None
