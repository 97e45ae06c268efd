from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Mapping, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .calendar_utils import MONTH_LABELS
from .reporting import generate_report
from .simulation.bird import BirdParameters
from .simulation.monte_carlo import CollisionResults, ScenarioRun
from .simulation.turbine import TurbineScenario, WindFarmScenario


def _slugify(value: str) -> str:
    """
    Convert a free-form string into a filesystem-safe slug.

    Args:
        value: Input string.

    Returns:
        Slug containing only alphanumeric characters, dash, or underscore.
    """
    return "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in value.strip()).strip("_")


def _create_run_directory(batch_name: str, output_root: Path) -> Path:
    """
    Create the timestamped comparison directory for batch results.
    """
    timestamp = datetime.now().strftime("%y%m%d_%H%M%S")
    slug = _slugify(batch_name) or "batch"
    run_dir = output_root / f"{timestamp}_{slug}_batch"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _short_label(value: str, max_len: int = 50) -> str:
    """
    Truncate long labels for plots.
    """
    return value if len(value) <= max_len else value[: max_len - 3] + "..."


def _plot_monthly_means(runs: List[ScenarioRun], save_path: Path) -> None:
    """
    Plot mean monthly collisions of every scenario and option.
    """
    fig, ax = plt.subplots(figsize=(10, 5))
    x = np.arange(len(MONTH_LABELS))
    for run in runs:
        for option, frame in run.results.collisions.items():
            ax.plot(
                x,
                frame.mean(axis=0).values,
                marker="o",
                label=_short_label(f"{run.name} - opz. {int(option)}", 40),
            )
    ax.set_xticks(x)
    ax.set_xticklabels(MONTH_LABELS)
    ax.set_xlabel("Mese")
    ax.set_ylabel("Collisioni medie [uccelli/mese]")
    ax.set_title("Confronto collisioni mensili medie")
    ax.grid(True, alpha=0.3)
    ax.legend(fontsize=8, loc="best")
    fig.tight_layout()
    fig.savefig(save_path, dpi=300)
    plt.close(fig)


def _plot_annual_distribution(runs: List[ScenarioRun], save_path: Path) -> None:
    """
    Plot violin charts summarizing annual collision distributions.
    """
    datasets = []
    labels = []
    for run in runs:
        annual = run.results.annual_totals()
        for column in annual.columns:
            datasets.append(annual[column].to_numpy())
            labels.append(_short_label(f"{run.name} - {column}", 35))
    if not datasets:
        return
    fig_width = max(8, len(labels) * 0.9)
    fig, ax = plt.subplots(figsize=(fig_width, 5))
    parts = ax.violinplot(datasets, showmeans=True, showextrema=False)
    for pc in parts["bodies"]:
        pc.set_alpha(0.5)
    ax.set_xticks(range(1, len(labels) + 1))
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_ylabel("Collisioni annue [uccelli/anno]")
    ax.set_title("Distribuzione Monte Carlo collisioni annue")
    ax.grid(True, axis="y", alpha=0.2)
    fig.tight_layout()
    fig.savefig(save_path, dpi=300)
    plt.close(fig)


def _save_comparison_summary(runs: List[ScenarioRun], save_path: Path) -> pd.DataFrame:
    """
    Save CSV summary of annual collisions for every scenario and option.
    """
    rows = []
    for run in runs:
        annual = run.results.annual_totals()
        for column in annual.columns:
            values = annual[column]
            rows.append(
                {
                    "scenario": run.name,
                    "option": column,
                    "species": run.simulator.bird.name,
                    "turbine": run.simulator.turbine.name,
                    "n_iter": run.results.n_iter,
                    "mean": round(float(values.mean()), 4),
                    "median": round(float(values.median()), 4),
                    "p2_5": round(float(values.quantile(0.025)), 4),
                    "p97_5": round(float(values.quantile(0.975)), 4),
                }
            )
    df = pd.DataFrame(rows)
    df.to_csv(save_path, index=False)
    return df


class ResultBuilder:
    """
    Handle persistence of analysis and batch deliverables.
    """

    def __init__(self, output_root: str | Path = "results") -> None:
        """
        Args:
            output_root: Base directory for generated assets.
        """
        self.output_root = Path(output_root)

    def build_analysis(
        self,
        scenario_name: str,
        *,
        results: CollisionResults,
        bird: BirdParameters,
        turbine: TurbineScenario,
        wind_farm: WindFarmScenario,
        seasons: Mapping[str, Sequence[str]] | None = None,
    ) -> Path:
        """
        Save the analysis report for a single scenario.

        Args:
            scenario_name: Name used for the output directory.
            results: CollisionResults of the run.
            bird: Species parameters of the run.
            turbine: Turbine parameters of the run.
            wind_farm: Wind farm parameters of the run.
            seasons: Optional season definition for the seasonal tables.
        """
        return generate_report(
            scenario_name=scenario_name,
            results=results,
            bird=bird,
            turbine=turbine,
            wind_farm=wind_farm,
            output_root=self.output_root,
            seasons=seasons,
        )

    def build_batch_bundle(self, batch_name: str, runs: List[ScenarioRun]) -> Path:
        """
        Persist comparison plots and per-scenario reports for a batch.

        Args:
            batch_name: Base name for the run directory.
            runs: Completed scenario runs to compare.
        """
        if not runs:
            raise ValueError("No scenario runs available to build results.")

        run_dir = _create_run_directory(batch_name, self.output_root)
        comparison_dir = run_dir / "comparison"
        comparison_dir.mkdir(parents=True, exist_ok=True)

        _plot_monthly_means(runs, comparison_dir / "monthly_means.png")
        _plot_annual_distribution(runs, comparison_dir / "annual_distribution.png")
        _save_comparison_summary(runs, comparison_dir / "summary.csv")

        for run in runs:
            generate_report(
                scenario_name=run.name,
                results=run.results,
                bird=run.simulator.bird,
                turbine=run.simulator.turbine,
                wind_farm=run.simulator.wind_farm,
                output_root=run_dir / "scenarios",
            )

        return run_dir
