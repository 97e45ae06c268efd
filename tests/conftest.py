from __future__ import annotations

import copy
import json
import math
import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sim_stochastic_crm.scenario_setup import DEFAULT_SCENARIO_PATH  # noqa: E402
from sim_stochastic_crm.simulation import (  # noqa: E402
    BirdParameters,
    ChordProfile,
    CollisionGeometry,
    CollisionRiskSimulator,
    FlightType,
    MonthlyDensity,
    ParameterEstimate,
    TurbineScenario,
    WindFarmScenario,
)

# Density giving exactly 100 January transits for the analytic scenario
# (1 turbine, R = 10 m, v = 10 m/s, 744 active hours).
ANALYTIC_DENSITY = 100.0 * 1e6 / (10.0 * (math.pi * 100.0 / 20.0) * 744.0 * 3600.0)

# Single-transit probability of the analytic geometry (trapezoid over 0, .25, .5, .75, 1).
ANALYTIC_P_SINGLE = 0.525 / math.pi


def _fixed(value: float) -> ParameterEstimate:
    return ParameterEstimate(mean=value)


def make_analytic_profile() -> ChordProfile:
    return ChordProfile(radius=np.array([0.25, 0.5, 0.75, 1.0]), chord=np.ones(4))


def make_analytic_geometry() -> CollisionGeometry:
    return CollisionGeometry(
        flight_speed=10.0,
        body_length=0.0,
        wingspan=1.0,
        flap_glide_factor=1.0,
        prop_upwind=0.5,
        rotation_speed=10.0,
        rotor_radius=10.0,
        blade_width=1.0,
        blade_pitch=0.0,
        n_blades=3,
    )


def make_analytic_simulator(large_array_correction: bool = False) -> CollisionRiskSimulator:
    """Fully deterministic scenario with a closed-form January estimate."""
    bird = BirdParameters(
        wingspan=_fixed(1.0),
        body_length=_fixed(0.0),
        flight_speed=_fixed(10.0),
        prop_crh=_fixed(0.1),
        nocturnal_activity=_fixed(1.0),
        avoidance_basic=_fixed(0.98),
        avoidance_extended=_fixed(0.98),
        flight_type=FlightType.FLAPPING,
        name="analytic_bird",
    )
    profile = make_analytic_profile()
    turbine = TurbineScenario(
        n_blades=3,
        rotor_radius=_fixed(10.0),
        blade_width=_fixed(1.0),
        monthly_operation=tuple(_fixed(100.0) for _ in range(12)),
        hub_height=_fixed(50.0),
        rotation_speed=_fixed(10.0),
        blade_pitch=_fixed(0.0),
        chord_profile=profile,
        name="analytic_turbine",
    )
    wind_farm = WindFarmScenario(
        n_turbines=1,
        width_km=1.0,
        latitude=55.0,
        large_array_correction=large_array_correction,
    )
    density = MonthlyDensity.from_estimates([(ANALYTIC_DENSITY, 0.0)] * 12)
    return CollisionRiskSimulator(bird, turbine, wind_farm, density)


def _build_simple_scenario_data() -> dict:
    data = json.loads(DEFAULT_SCENARIO_PATH.read_text(encoding="utf-8"))
    data = copy.deepcopy(data)
    data["scenario_name"] = "test_minimal"
    data["flight_heights"] = {"csv": "generic_fhd_bootstraps.csv"}
    data["simulation"] = {"n_iter": 5, "model_options": [1, 2, 3], "seed": 7}
    return data


@pytest.fixture()
def simple_scenario_data() -> dict:
    """Return the bundled scenario shrunk to a handful of iterations."""
    return _build_simple_scenario_data()


@pytest.fixture()
def analytic_simulator() -> CollisionRiskSimulator:
    return make_analytic_simulator()


@pytest.fixture()
def analytic_geometry() -> CollisionGeometry:
    return make_analytic_geometry()


@pytest.fixture()
def analytic_profile() -> ChordProfile:
    return make_analytic_profile()
