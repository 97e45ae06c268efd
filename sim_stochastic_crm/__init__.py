from .calendar_utils import MONTH_LABELS, MONTH_LENGTHS
from .simulation.bird import BirdParameters, FlightType
from .simulation.density import MonthlyDensity
from .simulation.errors import (
    CollisionModelError,
    DegenerateGeometryError,
    MissingFlightHeightDataError,
    NonFiniteResultError,
)
from .simulation.flight_height import FlightHeightDistribution
from .simulation.model_options import ModelOption
from .simulation.monte_carlo import CollisionResults, CollisionRiskSimulator, ScenarioRun
from .simulation.sampling import ParameterEstimate
from .simulation.turbine import ChordProfile, TurbineScenario, WindFarmScenario, WindSpeedLookup
from .reporting import generate_report
from .result_builder import ResultBuilder
from .scenario_setup import build_simulator
from .application import SimulationApplication

__all__ = [
    "MONTH_LABELS",
    "MONTH_LENGTHS",
    "BirdParameters",
    "FlightType",
    "MonthlyDensity",
    "CollisionModelError",
    "DegenerateGeometryError",
    "MissingFlightHeightDataError",
    "NonFiniteResultError",
    "FlightHeightDistribution",
    "ModelOption",
    "CollisionResults",
    "CollisionRiskSimulator",
    "ScenarioRun",
    "ParameterEstimate",
    "ChordProfile",
    "TurbineScenario",
    "WindFarmScenario",
    "WindSpeedLookup",
    "generate_report",
    "ResultBuilder",
    "build_simulator",
    "SimulationApplication",
]
