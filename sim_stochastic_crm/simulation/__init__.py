"""
Core collision risk simulation models.

This package collects all components of the stochastic collision risk
engine:

* Parameter sampling (`sampling`, `density`) and the per-iteration bird and
  turbine draws (`bird`, `turbine`).
* Deterministic Band geometry: daylight hours, flux through the rotors,
  single-transit collision probability, large array correction and flight
  heights at rotor level.
* The three collision formulas (`model_options`) and the Monte Carlo
  orchestrator (`monte_carlo`).

Higher layers (`application`, FastAPI routes, CLI) import from this single
namespace.
"""

from __future__ import annotations

from .array_correction import large_array_correction
from .bird import BirdDraw, BirdParameters, FlightType
from .collision import (
    CollisionGeometry,
    collision_integral,
    collision_risk_at_radius,
    prob_single_collision,
)
from .daylight import day_length_hours, day_night_hours
from .density import DensityMode, MonthlyDensity
from .errors import (
    CollisionModelError,
    DegenerateGeometryError,
    InvalidDistributionError,
    MissingFlightHeightDataError,
    NonFiniteResultError,
)
from .flight_height import FlightHeightDistribution, RotorHeightDistribution, band_centres, fhd_at_rotor
from .flux import flux_factor
from .model_options import (
    IterationInputs,
    ModelOption,
    basic_collisions,
    extended_collisions,
    generic_fhd_collisions,
)
from .monte_carlo import (
    CollisionAccumulator,
    CollisionResults,
    CollisionRiskSimulator,
    IterationResult,
)
from .sampling import DistributionKind, ParameterEstimate, sample_parameter
from .turbine import (
    ChordProfile,
    LookupMethod,
    SpeedPitchMode,
    TurbineDraw,
    TurbineOperationSampler,
    TurbineScenario,
    WindFarmScenario,
    WindSpeedLookup,
    default_chord_profile,
)

__all__ = [
    # Parameter sampling
    "DistributionKind",
    "ParameterEstimate",
    "sample_parameter",
    "DensityMode",
    "MonthlyDensity",
    # Bird + turbine inputs
    "BirdParameters",
    "BirdDraw",
    "FlightType",
    "ChordProfile",
    "default_chord_profile",
    "LookupMethod",
    "SpeedPitchMode",
    "TurbineScenario",
    "TurbineDraw",
    "TurbineOperationSampler",
    "WindFarmScenario",
    "WindSpeedLookup",
    # Band geometry
    "day_length_hours",
    "day_night_hours",
    "flux_factor",
    "CollisionGeometry",
    "collision_risk_at_radius",
    "collision_integral",
    "prob_single_collision",
    "large_array_correction",
    "FlightHeightDistribution",
    "RotorHeightDistribution",
    "band_centres",
    "fhd_at_rotor",
    # Collision formulas + Monte Carlo
    "ModelOption",
    "IterationInputs",
    "basic_collisions",
    "generic_fhd_collisions",
    "extended_collisions",
    "CollisionAccumulator",
    "CollisionResults",
    "CollisionRiskSimulator",
    "IterationResult",
    # Errors
    "CollisionModelError",
    "DegenerateGeometryError",
    "InvalidDistributionError",
    "MissingFlightHeightDataError",
    "NonFiniteResultError",
]
