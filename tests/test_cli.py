from __future__ import annotations

import json
from pathlib import Path

import pytest

from sim_stochastic_crm import cli


def test_daylight_command_prints_table(capsys):
    cli.main(["daylight", "--latitude", "0"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["day_length_hours"] == [12.0] * 12


def test_analyze_command_without_saving(tmp_path, capsys, simple_scenario_data):
    scenario_file = tmp_path / "scenario.json"
    scenario_file.write_text(json.dumps(simple_scenario_data), encoding="utf-8")
    cli.main(["analyze", "--no-save", "--scenario-file", str(scenario_file), "--n-iter", "2", "--options", "1,2"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["n_iter"] == 2
    assert payload["model_options"] == [1, 2]


def test_analyze_command_saves_reports(tmp_path, monkeypatch, capsys, simple_scenario_data):
    monkeypatch.setenv("SIM_CRM_RESULTS_DIR", str(tmp_path / "results"))
    scenario_file = tmp_path / "scenario.json"
    scenario_file.write_text(json.dumps(simple_scenario_data), encoding="utf-8")
    cli.main(["analyze", "--scenario-file", str(scenario_file), "--n-iter", "2", "--options", "1"])
    payload = json.loads(capsys.readouterr().out)
    output_dir = Path(payload["output_dir"])
    assert output_dir.parent == tmp_path / "results"
    assert (output_dir / "report.txt").exists()


def test_missing_scenario_file_exits(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["analyze", "--scenario-file", str(tmp_path / "missing.json")])


def test_invalid_option_exits(simple_scenario_data, tmp_path):
    scenario_file = tmp_path / "scenario.json"
    scenario_file.write_text(json.dumps(simple_scenario_data), encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", "--no-save", "--scenario-file", str(scenario_file), "--options", "4"])
    assert "Errore" in str(excinfo.value)


def test_batch_command_applies_model_options(tmp_path, capsys, simple_scenario_data):
    first = tmp_path / "first.json"
    second = tmp_path / "second.json"
    first.write_text(json.dumps(simple_scenario_data), encoding="utf-8")
    second.write_text(json.dumps(dict(simple_scenario_data, scenario_name="second")), encoding="utf-8")
    cli.main([
        "batch", "--no-save",
        "--scenario-file", str(first),
        "--scenario-file", str(second),
        "--n-iter", "2",
        "--options", "1,3",
    ])
    payload = json.loads(capsys.readouterr().out)
    assert [item["model_options"] for item in payload["scenarios"]] == [[1, 3], [1, 3]]
