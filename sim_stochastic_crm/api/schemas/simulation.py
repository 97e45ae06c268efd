"""
Simulation execution schemas for API validation.

This module contains Pydantic models for the collision risk endpoints:
- Analysis: Single scenario Monte Carlo run
- Batch: Several scenarios run in sequence and compared
- Daylight: Monthly day/night hours at a latitude

Scenario payloads follow the JSON layout of the bundled
``examples/default_scenario.json`` (sections ``species``, ``turbine``,
``wind_farm``, ``density``, optional ``flight_heights`` and ``simulation``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnalysisRequest(BaseModel):
    """
    Request schema for a single-scenario collision risk analysis.

    Attributes:
        n_iter: Number of Monte Carlo iterations (default from the scenario,
            then from ``SIM_CRM_N_ITER``).
        seed: Random seed for reproducibility. The same scenario and seed
            give identical results.
        model_options: Band model options to evaluate (1 basic, 2 generic
            flight heights, 3 extended). Defaults to the scenario's.
        scenario: Complete scenario configuration as JSON, or None for the
            bundled default scenario.
        seasons: Optional season name -> month labels mapping for the
            seasonal statistics.

    Example:
        ```python
        # POST /api/analysis
        {
            "n_iter": 500,
            "seed": 123,
            "model_options": [1, 3],
            "scenario": {
                "species": {"name": "Black_legged_Kittiwake", "wingspan": {"mean": 1.08, "sd": 0.0625}, ...},
                "turbine": {"n_blades": 3, "rotor_radius": {"mean": 120.0}, ...},
                "wind_farm": {"n_turbines": 100, "width_km": 10.0, "latitude": 55.8},
                "density": {"mode": "truncated_normal", "monthly": [...]},
                "flight_heights": {"csv": "generic_fhd_bootstraps.csv"}
            }
        }
        ```
    """

    model_config = ConfigDict(protected_namespaces=())

    n_iter: Optional[int] = Field(
        default=None,
        ge=1,
        description="Number of Monte Carlo iterations (must be >= 1)"
    )
    seed: Optional[int] = Field(
        default=None,
        description="Random seed for reproducibility"
    )
    model_options: Optional[List[int]] = Field(
        default=None,
        min_length=1,
        description="Band model options to evaluate (1, 2, 3)"
    )
    scenario: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Complete scenario configuration (JSON), or None for default"
    )
    seasons: Optional[Dict[str, List[str]]] = Field(
        default=None,
        description="Season name -> month labels for seasonal statistics"
    )


class AnalysisResponse(BaseModel):
    """
    Response schema for a completed collision risk analysis.

    Statistics tables map a row label (option, month or season) to
    ``{mean, sd, cv, median, iqr, p2_5, p97_5}``.

    Attributes:
        scenario: Scenario name.
        species: Species label.
        turbine: Turbine model label.
        n_iter: Monte Carlo iterations run.
        seed: Master seed used.
        model_options: Options evaluated.
        annual: Annual collision statistics, one row per option.
        monthly: Per option, monthly collision statistics.
        seasonal: Per option, seasonal collision statistics.
        output_dir: Directory of saved reports, if any.
        plots_data: Monthly mean and percentile series for plotting.
    """

    model_config = ConfigDict(protected_namespaces=())

    scenario: str = Field(..., description="Scenario name or identifier")
    species: str = Field(..., description="Species label")
    turbine: str = Field(..., description="Turbine model label")
    n_iter: int = Field(..., ge=1, description="Monte Carlo iterations")
    seed: int = Field(..., description="Master random seed")
    model_options: List[int] = Field(..., description="Evaluated model options")
    annual: Dict[str, Dict[str, Optional[float]]] = Field(..., description="Annual statistics per option")
    monthly: Dict[str, Dict[str, Dict[str, Optional[float]]]] = Field(..., description="Monthly statistics per option")
    seasonal: Dict[str, Dict[str, Dict[str, Optional[float]]]] = Field(..., description="Seasonal statistics per option")
    output_dir: Optional[str] = Field(None, description="Output directory path (if saved)")
    plots_data: Optional[Dict[str, Any]] = Field(None, description="Embedded plot data for visualization")


class BatchRequest(BaseModel):
    """
    Request schema for a sequential multi-scenario batch.

    Attributes:
        scenarios: Scenario configurations to run, in order.
        batch_name: Label of the comparison.
        n_iter: Iterations applied to every scenario (optional override).
        seed: Seed applied to every scenario (optional override).
        model_options: Options applied to every scenario (optional override).
    """

    model_config = ConfigDict(protected_namespaces=())

    scenarios: List[Dict[str, Any]] = Field(..., min_length=1, description="Scenario configurations")
    batch_name: str = Field(default="batch", description="Batch label")
    n_iter: Optional[int] = Field(default=None, ge=1, description="Iterations per scenario")
    seed: Optional[int] = Field(default=None, description="Random seed for every scenario")
    model_options: Optional[List[int]] = Field(default=None, min_length=1, description="Model options override")


class BatchResponse(BaseModel):
    """
    Response schema for a completed batch.

    Attributes:
        batch: Batch label.
        scenarios: One analysis summary per scenario, in request order.
        output_dir: Directory of the saved comparison bundle, if any.
    """

    batch: str
    scenarios: List[AnalysisResponse]
    output_dir: Optional[str] = None


class DaylightResponse(BaseModel):
    """Monthly daylight and night hours at a latitude."""

    latitude: float
    months: List[str]
    day_length_hours: List[float]
    day_hours: List[float]
    night_hours: List[float]
