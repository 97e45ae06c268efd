from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Tuple

import numpy as np
import pandas as pd

from .calendar_utils import MONTH_LABELS, N_MONTHS, month_indices
from .simulation import (
    BirdParameters,
    ChordProfile,
    CollisionRiskSimulator,
    FlightHeightDistribution,
    FlightType,
    MonthlyDensity,
    ParameterEstimate,
    TurbineScenario,
    WindFarmScenario,
    WindSpeedLookup,
    default_chord_profile,
)
from .simulation.density import DensityMode
from .simulation.model_options import validate_model_options
from .simulation.turbine import LookupMethod

EXAMPLES_DIR = Path(__file__).resolve().parent / "examples"
DEFAULT_SCENARIO_PATH = EXAMPLES_DIR / "default_scenario.json"

ScenarioSource = str | Path | Mapping[str, Any] | None


def load_scenario_data(source: ScenarioSource = None) -> dict[str, Any]:
    """
    Load scenario data from JSON or return the provided mapping.

    Args:
        source: Path to a JSON file, mapping, or None for default example.

    Returns:
        Dictionary containing scenario configuration.
    """
    if source is None:
        path = DEFAULT_SCENARIO_PATH
        return json.loads(path.read_text(encoding="utf-8"))
    if isinstance(source, (str, Path)):
        path = Path(source)
        return json.loads(path.read_text(encoding="utf-8"))
    return dict(source)


def scenario_base_dir(source: ScenarioSource) -> Path:
    """Directory against which relative data file paths of a scenario are resolved."""
    if isinstance(source, (str, Path)):
        return Path(source).resolve().parent
    return EXAMPLES_DIR


def data_paths_confined(source: ScenarioSource) -> bool:
    """Inline scenarios (mappings) may only reference files inside the data directories."""
    return not isinstance(source, (str, Path)) and source is not None


def resolve_data_path(
    reference: str | Path,
    base_dir: Path | None = None,
    confined: bool = False,
) -> Path:
    """
    Locate a data file referenced by a scenario.

    Absolute paths are used as-is; relative paths are tried against
    ``base_dir`` and then against the bundled examples directory. With
    ``confined`` set, absolute paths and paths escaping those directories
    are rejected.
    """
    path = Path(reference).expanduser()
    if path.is_absolute():
        if confined:
            raise ValueError(f"Absolute data file paths are not allowed: {reference}")
        return path
    for root in (base_dir, EXAMPLES_DIR):
        if root is None:
            continue
        candidate = root / path
        if confined and not candidate.resolve().is_relative_to(root.resolve()):
            raise ValueError(f"Data file outside the scenario directory: {reference}")
        if candidate.exists():
            return candidate
    raise FileNotFoundError(f"Data file not found: {reference}")


def _estimate(cfg: Mapping[str, Any], key: str) -> ParameterEstimate:
    if key not in cfg:
        raise ValueError(f"Missing parameter '{key}'")
    return ParameterEstimate.from_value(cfg[key])


def _optional_estimate(cfg: Mapping[str, Any], key: str) -> ParameterEstimate | None:
    value = cfg.get(key)
    return None if value is None else ParameterEstimate.from_value(value)


def _monthly_estimates(raw: Any) -> Tuple[ParameterEstimate, ...]:
    """Twelve monthly estimates from a list (Jan..Dec) or a mapping keyed by month."""
    if isinstance(raw, Mapping):
        positions = month_indices(list(raw.keys()))
        if sorted(positions) != list(range(N_MONTHS)):
            raise ValueError("Monthly values must cover every month exactly once")
        ordered: List[Any] = [None] * N_MONTHS
        for pos, value in zip(positions, raw.values()):
            ordered[pos] = value
        raw = ordered
    values = list(raw)
    if len(values) != N_MONTHS:
        raise ValueError(f"Expected 12 monthly values, got {len(values)}")
    return tuple(ParameterEstimate.from_value(v) for v in values)


def build_bird_parameters(scenario_data: ScenarioSource = None) -> BirdParameters:
    data = load_scenario_data(scenario_data)
    bird_cfg = data["species"]
    return BirdParameters(
        wingspan=_estimate(bird_cfg, "wingspan"),
        body_length=_estimate(bird_cfg, "body_length"),
        flight_speed=_estimate(bird_cfg, "flight_speed"),
        prop_crh=_estimate(bird_cfg, "prop_crh"),
        nocturnal_activity=_estimate(bird_cfg, "nocturnal_activity"),
        avoidance_basic=_estimate(bird_cfg, "avoidance_basic"),
        avoidance_extended=_estimate(bird_cfg, "avoidance_extended"),
        flight_type=FlightType(bird_cfg.get("flight_type", "flapping").lower()),
        name=bird_cfg.get("name", "species"),
    )


def build_turbine_scenario(scenario_data: ScenarioSource = None) -> TurbineScenario:
    data = load_scenario_data(scenario_data)
    turbine_cfg = data["turbine"]

    lookup_cfg = turbine_cfg.get("wind_lookup")
    wind_lookup = (
        WindSpeedLookup(
            wind_speed=lookup_cfg["wind_speed"],
            rotation_speed=lookup_cfg["rotation_speed"],
            pitch=lookup_cfg["pitch"],
        )
        if lookup_cfg
        else None
    )

    chord_cfg = turbine_cfg.get("chord_profile")
    chord_profile = (
        ChordProfile(radius=chord_cfg["radius"], chord=chord_cfg["chord"])
        if chord_cfg
        else default_chord_profile()
    )

    return TurbineScenario(
        n_blades=int(turbine_cfg.get("n_blades", 3)),
        rotor_radius=_estimate(turbine_cfg, "rotor_radius"),
        blade_width=_estimate(turbine_cfg, "blade_width"),
        monthly_operation=_monthly_estimates(turbine_cfg["monthly_operation"]),
        hub_height=_optional_estimate(turbine_cfg, "hub_height"),
        air_gap=_optional_estimate(turbine_cfg, "air_gap"),
        rotation_speed=_optional_estimate(turbine_cfg, "rotation_speed"),
        blade_pitch=_optional_estimate(turbine_cfg, "blade_pitch"),
        speed_pitch_mode=turbine_cfg.get("speed_pitch_mode", "probability"),
        wind_lookup=wind_lookup,
        chord_profile=chord_profile,
        name=turbine_cfg.get("name", "turbine"),
    )


def build_wind_farm(scenario_data: ScenarioSource = None) -> WindFarmScenario:
    data = load_scenario_data(scenario_data)
    farm_cfg = data["wind_farm"]
    return WindFarmScenario(
        n_turbines=int(farm_cfg["n_turbines"]),
        width_km=float(farm_cfg["width_km"]),
        latitude=float(farm_cfg["latitude"]),
        tidal_offset=float(farm_cfg.get("tidal_offset", 0.0)),
        large_array_correction=bool(farm_cfg.get("large_array_correction", True)),
        prop_upwind=float(farm_cfg.get("prop_upwind", 0.5)),
        wind_speed=_optional_estimate(farm_cfg, "wind_speed"),
    )


def build_monthly_density(
    scenario_data: ScenarioSource = None,
    base_dir: Path | None = None,
    confined: bool = False,
) -> MonthlyDensity:
    """
    Monthly density from the ``density`` section.

    ``mode`` selects the sampling scheme: ``truncated_normal`` reads
    ``monthly`` (12 mean/SD values), ``resample`` reads a ``samples`` table
    or ``samples_csv`` file, ``percentiles`` reads ``probabilities`` with a
    ``values`` table or ``values_csv`` file. Tables have one column per
    month.
    """
    data = load_scenario_data(scenario_data)
    density_cfg = data["density"]
    mode = DensityMode(density_cfg.get("mode", DensityMode.TRUNCATED_NORMAL.value))

    if mode is DensityMode.TRUNCATED_NORMAL:
        return MonthlyDensity(mode=mode, estimates=_monthly_estimates(density_cfg["monthly"]))

    if mode is DensityMode.RESAMPLE:
        if "samples_csv" in density_cfg:
            samples = pd.read_csv(resolve_data_path(density_cfg["samples_csv"], base_dir, confined))
        else:
            samples = pd.DataFrame(density_cfg["samples"], columns=MONTH_LABELS)
        return MonthlyDensity.from_samples(samples)

    if "values_csv" in density_cfg:
        values = pd.read_csv(resolve_data_path(density_cfg["values_csv"], base_dir, confined))
    else:
        values = pd.DataFrame(density_cfg["values"], columns=MONTH_LABELS)
    return MonthlyDensity.from_percentiles(density_cfg["probabilities"], values)


def build_flight_heights(
    scenario_data: ScenarioSource = None,
    base_dir: Path | None = None,
    confined: bool = False,
) -> FlightHeightDistribution | None:
    """
    Flight height distribution from the optional ``flight_heights`` section.

    Accepts either ``csv`` (first column heights, one column per bootstrap
    distribution) or inline ``heights`` and ``distributions``. Returns None
    when the section is absent.
    """
    data = load_scenario_data(scenario_data)
    fhd_cfg = data.get("flight_heights")
    if not fhd_cfg:
        return None
    if "csv" in fhd_cfg:
        path = resolve_data_path(fhd_cfg["csv"], base_dir, confined)
        columns = fhd_cfg.get("columns")
        if not columns:
            return FlightHeightDistribution.from_csv(path)
        frame = pd.read_csv(path)
        return FlightHeightDistribution.from_frame(frame[[frame.columns[0], *columns]])
    return FlightHeightDistribution(
        heights=np.asarray(fhd_cfg["heights"], dtype=float),
        distributions=np.asarray(fhd_cfg["distributions"], dtype=float),
    )


@dataclass(frozen=True)
class RunSettings:
    """Monte Carlo settings of a scenario (``simulation`` section)."""

    n_iter: int | None
    model_options: Tuple[int, ...]
    seed: int | None
    lookup_method: LookupMethod


def build_run_settings(scenario_data: ScenarioSource = None) -> RunSettings:
    data = load_scenario_data(scenario_data)
    sim_cfg = data.get("simulation", {})
    return RunSettings(
        n_iter=sim_cfg.get("n_iter"),
        model_options=tuple(int(o) for o in validate_model_options(sim_cfg.get("model_options", [1]))),
        seed=sim_cfg.get("seed"),
        lookup_method=LookupMethod(sim_cfg.get("lookup_method", LookupMethod.STEP.value)),
    )


def build_simulator(
    source: ScenarioSource = None,
    base_dir: Path | None = None,
    confined: bool | None = None,
) -> CollisionRiskSimulator:
    """
    Assemble a ready-to-run simulator from a scenario file or mapping.

    Args:
        source: Scenario JSON path, mapping, or None for the default example.
        base_dir: Directory for relative data file paths; defaults to the
            scenario file's directory (or the bundled examples).
        confined: Reject data paths outside ``base_dir`` and the bundled
            examples; defaults to True for mapping sources.
    """
    data = load_scenario_data(source)
    if base_dir is None:
        base_dir = scenario_base_dir(source)
    if confined is None:
        confined = data_paths_confined(source)
    turbine = build_turbine_scenario(data)
    return CollisionRiskSimulator(
        bird=build_bird_parameters(data),
        turbine=turbine,
        wind_farm=build_wind_farm(data),
        density=build_monthly_density(data, base_dir, confined),
        flight_heights=build_flight_heights(data, base_dir, confined),
        chord_profile=turbine.chord_profile,
        lookup_method=build_run_settings(data).lookup_method,
    )
