from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from sim_stochastic_crm.result_builder import ResultBuilder
from sim_stochastic_crm.scenario_setup import build_simulator
from sim_stochastic_crm.simulation.monte_carlo import ScenarioRun


def _make_run(scenario_data: dict, name: str = "scenario-test") -> ScenarioRun:
    simulator = build_simulator(scenario_data)
    results = simulator.run(n_iter=4, model_options=[1, 3], seed=3, show_progress=False)
    return ScenarioRun(name=name, simulator=simulator, results=results)


def test_result_builder_build_analysis(tmp_path, simple_scenario_data):
    """Ensure the analysis report writes tables, plots and the text summary."""
    run = _make_run(simple_scenario_data)
    builder = ResultBuilder(output_root=tmp_path)
    output = builder.build_analysis(
        run.name,
        results=run.results,
        bird=run.simulator.bird,
        turbine=run.simulator.turbine,
        wind_farm=run.simulator.wind_farm,
    )
    assert output.parent == tmp_path
    for filename in (
        "collisions_option_1.csv",
        "monthly_summary_option_3.csv",
        "seasonal_summary_option_1.csv",
        "monthly_collisions_option_3.png",
        "annual_summary.csv",
        "sampled_parameters.csv",
        "sampled_density.csv",
        "annual_collisions_distribution.png",
        "collision_probability.png",
        "report.txt",
    ):
        assert (output / filename).exists(), filename

    annual = pd.read_csv(output / "annual_summary.csv", index_col="option")
    assert list(annual.index) == ["option_1", "option_3"]
    assert "Collisioni annue" in (output / "report.txt").read_text(encoding="utf-8")


def test_result_builder_build_batch_bundle(tmp_path, monkeypatch, simple_scenario_data):
    """Ensure the batch bundle writes the comparison summary and per-scenario reports."""
    runs = [_make_run(simple_scenario_data, "a"), _make_run(simple_scenario_data, "b")]
    builder = ResultBuilder(output_root=tmp_path)

    monkeypatch.setattr("sim_stochastic_crm.result_builder._plot_monthly_means", lambda *args, **kwargs: None)
    monkeypatch.setattr("sim_stochastic_crm.result_builder._plot_annual_distribution", lambda *a, **k: None)

    def fake_generate_report(**kwargs):
        output_root = Path(kwargs["output_root"]) / kwargs["scenario_name"]
        output_root.mkdir(parents=True, exist_ok=True)
        return output_root

    monkeypatch.setattr("sim_stochastic_crm.result_builder.generate_report", fake_generate_report)

    run_dir = builder.build_batch_bundle("batch_test", runs)

    assert run_dir.exists()
    assert run_dir.name.endswith("_batch_test_batch")
    summary = pd.read_csv(run_dir / "comparison" / "summary.csv")
    assert len(summary) == 4
    assert set(summary["scenario"]) == {"a", "b"}
    assert (run_dir / "scenarios" / "a").is_dir()


def test_result_builder_requires_runs(tmp_path):
    with pytest.raises(ValueError):
        ResultBuilder(tmp_path).build_batch_bundle("empty", [])


def test_batch_bundle_keeps_reports_of_same_named_scenarios(tmp_path, simple_scenario_data):
    """Scenarios sharing a name still get one report directory each."""
    runs = [
        _make_run(simple_scenario_data, "custom_scenario"),
        _make_run(simple_scenario_data, "custom_scenario"),
    ]
    run_dir = ResultBuilder(output_root=tmp_path).build_batch_bundle("dup", runs)

    report_dirs = sorted(p for p in (run_dir / "scenarios").iterdir() if p.is_dir())
    assert len(report_dirs) == 2
    assert report_dirs[0].name != report_dirs[1].name
    for report_dir in report_dirs:
        assert (report_dir / "report.txt").exists()
