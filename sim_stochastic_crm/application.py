from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from .calendar_utils import MONTH_LABELS
from .config import get_default_iterations, get_default_seed
from .result_builder import ResultBuilder
from .scenario_setup import (
    build_run_settings,
    build_simulator,
    data_paths_confined,
    load_scenario_data,
    scenario_base_dir,
)
from .simulation.daylight import day_night_hours
from .simulation.monte_carlo import CollisionResults, ScenarioRun
from .summary import summarise_annual, summarise_monthly, summarise_seasons, summary_to_dict

ScenarioData = Mapping[str, Any] | str | Path | None


def _first_set(*values: Any) -> Any:
    """Return the first value that is not None (explicit request, scenario, environment)."""
    return next((value for value in values if value is not None), None)


def _build_summary(
    scenario_name: str,
    run: ScenarioRun,
    seasons: Mapping[str, Sequence[str]] | None = None,
) -> Dict[str, Any]:
    """
    Extract JSON-ready statistics for a completed scenario run.

    Args:
        scenario_name: Label reported back to the caller.
        run: Completed scenario run.
        seasons: Optional season definition for the seasonal statistics.

    Returns:
        Dictionary with annual, monthly and seasonal statistics per option
        plus the series needed to plot monthly bands.
    """
    results: CollisionResults = run.results
    monthly: Dict[str, Any] = {}
    seasonal: Dict[str, Any] = {}
    plots: Dict[str, Any] = {"months": list(MONTH_LABELS)}
    for option, frame in results.collisions.items():
        key = f"option_{int(option)}"
        month_stats = summarise_monthly(frame)
        monthly[key] = summary_to_dict(month_stats)
        seasonal[key] = summary_to_dict(summarise_seasons(frame, seasons))
        plots[key] = {
            "mean": month_stats["mean"].tolist(),
            "p2_5": month_stats["p2_5"].tolist(),
            "p97_5": month_stats["p97_5"].tolist(),
        }
    return {
        "scenario": scenario_name,
        "species": run.simulator.bird.name,
        "turbine": run.simulator.turbine.name,
        "n_iter": results.n_iter,
        "seed": results.seed,
        "model_options": [int(option) for option in results.options],
        "annual": summary_to_dict(summarise_annual(results)),
        "monthly": monthly,
        "seasonal": seasonal,
        "plots_data": plots,
    }


class SimulationApplication:
    """
    High-level orchestrator used by the CLI and the FastAPI surface.
    """

    def __init__(
        self,
        *,
        save_outputs: bool = False,
        result_builder: ResultBuilder | None = None,
        show_progress: bool = False,
    ) -> None:
        """
        Args:
            save_outputs: When True, ResultBuilder saves plots/reports.
            result_builder: Optional ResultBuilder for CLI outputs.
            show_progress: Print the Monte Carlo progress bar.
        """
        self.save_outputs = save_outputs
        self.result_builder = result_builder
        self.show_progress = show_progress

    def _run_scenario(
        self,
        scenario_data: ScenarioData,
        *,
        n_iter: int | None,
        seed: int | None,
        model_options: Iterable[int] | None,
    ) -> ScenarioRun:
        scenario_payload = load_scenario_data(scenario_data)
        settings = build_run_settings(scenario_payload)
        simulator = build_simulator(
            scenario_payload,
            base_dir=scenario_base_dir(scenario_data),
            confined=data_paths_confined(scenario_data),
        )

        results = simulator.run(
            n_iter=_first_set(n_iter, settings.n_iter, get_default_iterations()),
            model_options=_first_set(model_options, settings.model_options),
            seed=_first_set(seed, settings.seed, get_default_seed()),
            show_progress=self.show_progress,
        )
        name = scenario_payload.get("scenario_name", "custom_scenario")
        return ScenarioRun(name=name, simulator=simulator, results=results)

    def run_analysis(
        self,
        *,
        n_iter: int | None = None,
        seed: int | None = None,
        model_options: Iterable[int] | None = None,
        scenario_data: ScenarioData = None,
        seasons: Mapping[str, Sequence[str]] | None = None,
    ) -> Dict[str, Any]:
        """
        Execute the single-scenario collision risk analysis.

        Args:
            n_iter: Monte Carlo iterations (defaults to the scenario, then
                ``SIM_CRM_N_ITER``).
            seed: RNG seed (defaults to the scenario, then ``SIM_CRM_SEED``).
            model_options: Model options to evaluate (defaults to the
                scenario's).
            scenario_data: Optional mapping/path overriding the default
                scenario definition.
            seasons: Optional season definition for seasonal statistics.

        Returns:
            Summary dictionary with collision statistics and optional output path.
        """
        run = self._run_scenario(scenario_data, n_iter=n_iter, seed=seed, model_options=model_options)
        summary = _build_summary(run.name, run, seasons)

        output_dir = None
        if self.save_outputs and self.result_builder:
            output_dir = self.result_builder.build_analysis(
                run.name,
                results=run.results,
                bird=run.simulator.bird,
                turbine=run.simulator.turbine,
                wind_farm=run.simulator.wind_farm,
                seasons=seasons,
            )

        summary["output_dir"] = str(output_dir) if output_dir else None
        return summary

    def run_batch(
        self,
        *,
        scenarios: Sequence[ScenarioData],
        batch_name: str = "batch",
        n_iter: int | None = None,
        seed: int | None = None,
        model_options: Iterable[int] | None = None,
    ) -> Dict[str, Any]:
        """
        Run several scenarios one after the other and compare them.

        Args:
            scenarios: Scenario mappings or JSON paths.
            batch_name: Base name of the comparison output directory.
            n_iter: Override for Monte Carlo iterations of every scenario.
            seed: Override for the seed of every scenario.
            model_options: Override for the model options of every scenario.

        Returns:
            Dictionary with per-scenario summaries and optional output dir.
        """
        if not scenarios:
            raise ValueError("At least one scenario is required for a batch run.")

        options = list(model_options) if model_options is not None else None
        runs: List[ScenarioRun] = [
            self._run_scenario(source, n_iter=n_iter, seed=seed, model_options=options)
            for source in scenarios
        ]

        output_dir = None
        if self.save_outputs and self.result_builder:
            output_dir = self.result_builder.build_batch_bundle(batch_name, runs)

        return {
            "batch": batch_name,
            "scenarios": [_build_summary(run.name, run) for run in runs],
            "output_dir": str(output_dir) if output_dir else None,
        }

    @staticmethod
    def daylight(latitude: float) -> Dict[str, Any]:
        """
        Monthly daylight and night hours at a latitude, as JSON-ready lists.
        """
        hours = day_night_hours(latitude)
        return {
            "latitude": latitude,
            "months": hours["month"].tolist(),
            "day_length_hours": hours["day_length_hours"].round(3).tolist(),
            "day_hours": hours["day_hours"].round(2).tolist(),
            "night_hours": hours["night_hours"].round(2).tolist(),
        }
