from __future__ import annotations

import dataclasses
import math

import numpy as np
import pytest

from sim_stochastic_crm.simulation.array_correction import large_array_correction
from sim_stochastic_crm.simulation.collision import (
    collision_integral,
    collision_risk_at_radius,
    prob_single_collision,
)
from sim_stochastic_crm.simulation.errors import DegenerateGeometryError
from sim_stochastic_crm.simulation.flight_height import band_centres, fhd_at_rotor
from sim_stochastic_crm.simulation.flux import flux_factor
from sim_stochastic_crm.simulation.turbine import default_chord_profile

from conftest import ANALYTIC_DENSITY, ANALYTIC_P_SINGLE


def test_prob_single_collision_closed_form(analytic_geometry, analytic_profile) -> None:
    assert prob_single_collision(analytic_geometry, analytic_profile) == pytest.approx(
        ANALYTIC_P_SINGLE, rel=1e-12
    )


def test_risk_is_one_at_hub_and_capped(analytic_geometry, analytic_profile) -> None:
    risk = collision_risk_at_radius(analytic_geometry, analytic_profile, np.array([0.0, 0.01, 5.0]))
    assert risk[0] == 1.0
    assert risk[1] == 1.0
    assert risk[2] == pytest.approx(3.0 / (math.pi * 5.0))


def test_pitch_makes_upwind_riskier() -> None:
    from conftest import make_analytic_geometry

    geometry = dataclasses.replace(make_analytic_geometry(), blade_pitch=30.0, body_length=0.5)
    profile = default_chord_profile()
    radius = np.array([20.0, 60.0]) * 0.1
    up = collision_risk_at_radius(geometry, profile, radius, upwind=True)
    down = collision_risk_at_radius(geometry, profile, radius, upwind=False)
    assert np.all(up >= down)


def test_realistic_turbine_probability_range() -> None:
    from sim_stochastic_crm.simulation.collision import CollisionGeometry

    geometry = CollisionGeometry(
        flight_speed=13.1,
        body_length=0.39,
        wingspan=1.08,
        flap_glide_factor=1.0,
        prop_upwind=0.5,
        rotation_speed=10.0,
        rotor_radius=120.0,
        blade_width=5.5,
        blade_pitch=15.0,
        n_blades=3,
    )
    p = prob_single_collision(geometry, default_chord_profile())
    assert 0.0 < p < 0.2


def test_degenerate_flight_speed_raises(analytic_geometry, analytic_profile) -> None:
    geometry = dataclasses.replace(analytic_geometry, flight_speed=0.0)
    with pytest.raises(DegenerateGeometryError):
        prob_single_collision(geometry, analytic_profile)


def test_collision_integral_with_full_risk_is_chord_length(analytic_geometry, analytic_profile) -> None:
    # Body length large enough that the risk saturates at 1 everywhere.
    geometry = dataclasses.replace(analytic_geometry, body_length=30.0)
    y = np.array([-1.0, -0.5, 0.0, 0.6])
    integral = collision_integral(geometry, analytic_profile, y)
    assert integral == pytest.approx(2.0 * np.sqrt(1.0 - y**2))
    assert collision_integral(geometry, analytic_profile, np.array([])).size == 0


def test_large_array_correction_formula() -> None:
    factor = large_array_correction(
        n_turbines=100,
        rotor_radius=120.0,
        avoidance_rate=0.98,
        prob_single_collision=0.1,
        mean_prop_operational=0.9,
        wf_width_km=10.0,
    )
    rotors_crossed = 100 * math.pi * 120.0 / (2000.0 * 10.0)
    assert factor == pytest.approx(1.0 - 0.02 * 0.1 * 0.9 * rotors_crossed / 2.0)
    assert 0.0 < factor < 1.0


def test_large_array_correction_disabled_is_exactly_one() -> None:
    factor = large_array_correction(100, 120.0, 0.5, 0.9, 1.0, 0.1, enabled=False)
    assert factor == 1.0


def test_flux_factor_counts_transits() -> None:
    day = np.full(12, 400.0)
    night = np.full(12, 344.0)
    flux = flux_factor(
        n_turbines=1,
        rotor_radius=10.0,
        flight_speed=10.0,
        bird_density=np.full(12, ANALYTIC_DENSITY),
        day_hours=day,
        night_hours=night,
        nocturnal_activity=1.0,
    )
    assert flux == pytest.approx(np.full(12, 100.0), rel=1e-12)

    daytime_only = flux_factor(1, 10.0, 10.0, np.full(12, ANALYTIC_DENSITY), day, night, 0.0)
    assert daytime_only == pytest.approx(flux * 400.0 / 744.0)


def test_flux_factor_zero_radius_is_nan() -> None:
    flux = flux_factor(1, 0.0, 10.0, np.ones(12), np.ones(12), np.ones(12), 0.5)
    assert np.all(np.isnan(flux))


def test_fhd_at_rotor_renormalises_retained_bins() -> None:
    heights = np.arange(0.0, 100.0)
    fhd = np.full(100, 0.01)
    rotor = fhd_at_rotor(
        hub_height=45.0, fhd=fhd, bin_centres=band_centres(heights), rotor_radius=10.0, tidal_offset=5.0
    )
    # Centres 40.5..59.5 fall within 50 +- 10.
    assert rotor.y.size == 20
    assert np.all(np.abs(rotor.y) <= 1.0)
    assert rotor.probabilities.sum() == pytest.approx(1.0)
    assert rotor.prop_at_rotor == pytest.approx(0.2)
    assert rotor.masses.sum() == pytest.approx(0.2)


def test_fhd_at_rotor_outside_range_is_empty() -> None:
    rotor = fhd_at_rotor(hub_height=500.0, fhd=[0.5, 0.5], bin_centres=[0.5, 1.5], rotor_radius=10.0)
    assert rotor.y.size == 0
    assert rotor.prop_at_rotor == 0.0


def test_fhd_at_rotor_requires_positive_radius() -> None:
    with pytest.raises(DegenerateGeometryError):
        fhd_at_rotor(hub_height=50.0, fhd=[1.0], bin_centres=[0.5], rotor_radius=0.0)
