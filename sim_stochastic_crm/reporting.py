from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Mapping, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .calendar_utils import MONTH_LABELS
from .simulation.bird import BirdParameters
from .simulation.model_options import ModelOption
from .simulation.monte_carlo import CollisionResults
from .simulation.turbine import TurbineScenario, WindFarmScenario
from .summary import summarise_annual, summarise_monthly, summarise_seasons

MONTH_NAMES = [
    "Gennaio", "Febbraio", "Marzo", "Aprile", "Maggio", "Giugno",
    "Luglio", "Agosto", "Settembre", "Ottobre", "Novembre", "Dicembre",
]

OPTION_NAMES = {
    ModelOption.BASIC: "Opzione 1 (modello base, PCH da survey)",
    ModelOption.GENERIC_FHD: "Opzione 2 (modello base, distribuzione altezze)",
    ModelOption.EXTENDED: "Opzione 3 (modello esteso)",
}


def _slugify(value: str) -> str:
    return "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in value.strip()).strip("_")


def _create_results_directory(scenario_name: str, base_dir: Path) -> Path:
    timestamp = datetime.now().strftime("%y%m%d_%H%M")
    slug = _slugify(scenario_name) or "scenario"
    output_dir = base_dir / f"{timestamp}_{slug}"
    suffix = 2
    while output_dir.exists():
        output_dir = base_dir / f"{timestamp}_{slug}_{suffix}"
        suffix += 1
    output_dir.mkdir(parents=True)
    return output_dir


def plot_monthly_collision_bands(
    collisions: pd.DataFrame,
    title: str = "",
    save_path: Path | str | None = None,
    show: bool = True,
) -> None:
    """
    Plot mean monthly collisions with the 2.5-97.5 percentile band.

    Args:
        collisions: ``(n_iter x 12)`` collisions of one model option.
    """
    summary = summarise_monthly(collisions)
    x = np.arange(len(MONTH_LABELS))

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(x, summary["mean"].values, marker="o", label="Collisioni medie")
    ax.fill_between(
        x,
        summary["p2_5"].values,
        summary["p97_5"].values,
        alpha=0.3,
        label="Banda 2,5°-97,5° percentile",
    )
    ax.set_xticks(x)
    ax.set_xticklabels(MONTH_LABELS)
    ax.set_xlabel("Mese")
    ax.set_ylabel("Collisioni [uccelli/mese]")
    if title:
        ax.set_title(title)
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    if save_path is not None:
        fig.savefig(save_path, dpi=300)
    if show:
        plt.show()
    else:
        plt.close(fig)


def _plot_annual_distribution(results: CollisionResults, save_path: Path) -> None:
    annual = results.annual_totals()
    fig, ax = plt.subplots(figsize=(8, 4.5))
    for option in results.options:
        ax.hist(
            annual[f"option_{int(option)}"].values,
            bins=40,
            density=True,
            histtype="step",
            linewidth=2,
            label=OPTION_NAMES[option],
        )
    ax.set_xlabel("Collisioni annue [uccelli/anno]")
    ax.set_ylabel("Densità di probabilità")
    ax.set_title("Distribuzione Monte Carlo delle collisioni annue")
    ax.grid(True, alpha=0.2)
    ax.legend(fontsize=8)
    fig.tight_layout()
    fig.savefig(save_path, dpi=300)
    plt.close(fig)


def _plot_collision_probability(sampled_params: pd.DataFrame, save_path: Path) -> None:
    data = sampled_params["p_single_collision"].to_numpy()
    weights = np.ones_like(data, dtype=float) / max(len(data), 1) * 100.0
    fig, ax = plt.subplots(figsize=(8, 4.5))
    ax.hist(data, bins=40, color="#1f77b4", alpha=0.8, weights=weights)
    ax.set_xlabel("Probabilità di collisione per singolo attraversamento")
    ax.set_ylabel("Percentuale [%]")
    ax.set_title("Distribuzione della probabilità di collisione")
    ax.grid(True, alpha=0.2)
    fig.tight_layout()
    fig.savefig(save_path, dpi=300)
    plt.close(fig)


def _format_estimate(estimate) -> str:
    if estimate is None:
        return "-"
    if estimate.is_fixed:
        return f"{estimate.mean:g}"
    return f"{estimate.mean:g} ± {estimate.sd:g}"


def _write_text_report(
    output_path: Path,
    scenario_name: str,
    results: CollisionResults,
    bird: BirdParameters,
    turbine: TurbineScenario,
    wind_farm: WindFarmScenario,
    annual_summary: pd.DataFrame,
) -> None:
    lines = []
    lines.append(f"Scenario: {scenario_name}")
    lines.append("== Specie ==")
    lines.append(f"- Specie: {bird.name} (volo {bird.flight_type.value})")
    lines.append(f"- Apertura alare: {_format_estimate(bird.wingspan)} m")
    lines.append(f"- Lunghezza corpo: {_format_estimate(bird.body_length)} m")
    lines.append(f"- Velocità di volo: {_format_estimate(bird.flight_speed)} m/s")
    lines.append(f"- Proporzione ad altezza di rischio: {_format_estimate(bird.prop_crh)}")
    lines.append(f"- Attività notturna: {_format_estimate(bird.nocturnal_activity)}")
    lines.append(
        f"- Tasso di evitamento base/esteso: {_format_estimate(bird.avoidance_basic)} / "
        f"{_format_estimate(bird.avoidance_extended)}"
    )
    lines.append("== Turbina e parco eolico ==")
    lines.append(f"- Modello: {turbine.name}, {turbine.n_blades} pale")
    lines.append(f"- Raggio rotore: {_format_estimate(turbine.rotor_radius)} m")
    lines.append(f"- Larghezza massima pala: {_format_estimate(turbine.blade_width)} m")
    if turbine.air_gap is not None:
        lines.append(f"- Franco sul mare (air gap): {_format_estimate(turbine.air_gap)} m")
    else:
        lines.append(f"- Altezza mozzo: {_format_estimate(turbine.hub_height)} m")
    lines.append(f"- Velocità/passo: modalità {turbine.speed_pitch_mode.value}")
    lines.append(
        f"- Turbine: {wind_farm.n_turbines}, larghezza parco {wind_farm.width_km:g} km, "
        f"latitudine {wind_farm.latitude:g}°"
    )
    lines.append(
        f"- Correzione grandi parchi: {'attiva' if wind_farm.large_array_correction else 'disattivata'}"
    )
    lines.append(f"- Iterazioni Monte Carlo: {results.n_iter} (seed {results.seed})")
    lines.append("")
    lines.append("== Collisioni annue ==")
    lines.append(
        f"{'Opzione':>8} | {'Media':>10} | {'Dev. std':>10} | {'Mediana':>10} | "
        f"{'2,5°':>10} | {'97,5°':>10} | {'CV [%]':>8}"
    )
    lines.append("-" * 84)
    for option_label, row in annual_summary.iterrows():
        lines.append(
            f"{str(option_label):>8} | "
            f"{row['mean']:10.2f} | "
            f"{row['sd']:10.2f} | "
            f"{row['median']:10.2f} | "
            f"{row['p2_5']:10.2f} | "
            f"{row['p97_5']:10.2f} | "
            f"{row['cv']:8.1f}"
        )

    for option in results.options:
        monthly_mean = results.collisions[option].mean(axis=0)
        peak = int(np.argmax(monthly_mean.values))
        lines.append("")
        lines.append(f"== {OPTION_NAMES[option]} ==")
        lines.append(
            f"Mese con più collisioni: {MONTH_NAMES[peak]} (~{monthly_mean.iloc[peak]:.2f} in media)."
        )

    output_path.write_text("\n".join(lines), encoding="utf-8")


def generate_report(
    scenario_name: str,
    results: CollisionResults,
    bird: BirdParameters,
    turbine: TurbineScenario,
    wind_farm: WindFarmScenario,
    output_root: Path | str = "results",
    seasons: Mapping[str, Sequence[str]] | None = None,
) -> Path:
    """
    Generate full report: CSV tables, plots and textual summary saved to disk.
    """
    output_dir = _create_results_directory(scenario_name, Path(output_root))

    for option in results.options:
        collisions = results.collisions[option]
        suffix = f"option_{int(option)}"
        collisions.to_csv(output_dir / f"collisions_{suffix}.csv")
        summarise_monthly(collisions).to_csv(output_dir / f"monthly_summary_{suffix}.csv")
        summarise_seasons(collisions, seasons).to_csv(output_dir / f"seasonal_summary_{suffix}.csv")
        plot_monthly_collision_bands(
            collisions,
            title=OPTION_NAMES[option],
            save_path=output_dir / f"monthly_collisions_{suffix}.png",
            show=False,
        )

    annual_summary = summarise_annual(results)
    annual_summary.to_csv(output_dir / "annual_summary.csv")
    results.sampled_params.to_csv(output_dir / "sampled_parameters.csv")
    results.sampled_density.to_csv(output_dir / "sampled_density.csv")

    _plot_annual_distribution(results, output_dir / "annual_collisions_distribution.png")
    _plot_collision_probability(results.sampled_params, output_dir / "collision_probability.png")

    _write_text_report(
        output_path=output_dir / "report.txt",
        scenario_name=scenario_name,
        results=results,
        bird=bird,
        turbine=turbine,
        wind_farm=wind_farm,
        annual_summary=annual_summary,
    )

    return output_dir
