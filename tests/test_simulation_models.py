from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from sim_stochastic_crm.calendar_utils import MONTH_LABELS, month_indices
from sim_stochastic_crm.simulation.bird import BirdParameters, FlightType
from sim_stochastic_crm.simulation.daylight import day_night_hours
from sim_stochastic_crm.simulation.density import DensityMode, MonthlyDensity
from sim_stochastic_crm.simulation.errors import InvalidDistributionError
from sim_stochastic_crm.simulation.flight_height import FlightHeightDistribution
from sim_stochastic_crm.simulation.sampling import (
    DistributionKind,
    ParameterEstimate,
    beta_shape_parameters,
    sample_parameter,
    sample_percentiles,
    sample_truncated_normal,
)
from sim_stochastic_crm.simulation.turbine import (
    TurbineOperationSampler,
    TurbineScenario,
    WindSpeedLookup,
)


def _operation(mean: float = 95.0, sd: float = 1.0):
    return tuple(ParameterEstimate(mean, sd) for _ in range(12))


def _lookup() -> WindSpeedLookup:
    return WindSpeedLookup(
        wind_speed=[0.0, 1.0, 2.0, 3.0],
        rotation_speed=[0.0, 0.0, 5.0, 6.0],
        pitch=[90.0, 90.0, 0.0, 1.0],
    )


def test_parameter_estimate_from_value_variants() -> None:
    assert ParameterEstimate.from_value(3) == ParameterEstimate(3.0, 0.0)
    assert ParameterEstimate.from_value({"mean": 1.5, "sd": None}).is_fixed
    assert ParameterEstimate.from_value([2.0, 0.5]) == ParameterEstimate(2.0, 0.5)
    with pytest.raises(ValueError):
        ParameterEstimate.from_value([1.0, 2.0, 3.0])


def test_parameter_estimate_accepts_missing_sd() -> None:
    estimate = ParameterEstimate(1.0, None)
    assert estimate.sd == 0.0
    draws = sample_parameter(np.random.default_rng(0), 3, estimate, DistributionKind.TRUNCATED_NORMAL)
    assert np.all(draws == 1.0)


def test_fixed_estimate_does_not_consume_rng() -> None:
    rng = np.random.default_rng(0)
    draws = sample_parameter(rng, 4, ParameterEstimate(0.7), DistributionKind.BETA)
    assert np.all(draws == 0.7)
    assert rng.random() == np.random.default_rng(0).random()


def test_truncated_normal_respects_bounds() -> None:
    rng = np.random.default_rng(1)
    draws = sample_truncated_normal(rng, 2000, mean=0.1, sd=5.0, lower=0.0, upper=3.0)
    assert draws.shape == (2000,)
    assert draws.min() >= 0.0
    assert draws.max() <= 3.0


def test_negative_sd_is_rejected() -> None:
    rng = np.random.default_rng(1)
    with pytest.raises(InvalidDistributionError):
        sample_parameter(rng, 1, ParameterEstimate(1.0, -0.1))


def test_beta_shape_parameters_match_moments() -> None:
    alpha, beta = beta_shape_parameters(0.2, 0.05)
    mean = alpha / (alpha + beta)
    var = alpha * beta / ((alpha + beta) ** 2 * (alpha + beta + 1))
    assert mean == pytest.approx(0.2)
    assert np.sqrt(var) == pytest.approx(0.05)


@pytest.mark.parametrize("mean, sd", [(1.2, 0.1), (0.0, 0.1), (0.5, 0.6)])
def test_invalid_beta_parameters_raise(mean: float, sd: float) -> None:
    rng = np.random.default_rng(2)
    with pytest.raises(InvalidDistributionError):
        sample_parameter(rng, 1, ParameterEstimate(mean, sd), DistributionKind.BETA)


def test_beta_draws_are_proportions() -> None:
    rng = np.random.default_rng(3)
    draws = sample_parameter(rng, 500, ParameterEstimate(0.98, 0.01), DistributionKind.BETA)
    assert np.all((draws > 0.0) & (draws < 1.0))


def test_percentile_sampling_stays_within_curve() -> None:
    rng = np.random.default_rng(4)
    draws = sample_percentiles(rng, 500, [0.0, 0.5, 1.0], [2.0, 3.0, 4.0])
    assert draws.min() >= 2.0
    assert draws.max() <= 4.0
    with pytest.raises(InvalidDistributionError):
        sample_percentiles(rng, 1, [0.5, 0.2], [1.0, 2.0])


def test_month_indices_accepts_long_names() -> None:
    assert month_indices(["January", "dec", "Mar"]) == [0, 11, 2]
    with pytest.raises(ValueError):
        month_indices(["Foo"])


def test_daylight_equator_is_twelve_hours() -> None:
    hours = day_night_hours(0.0)
    assert np.allclose(hours["day_length_hours"], 12.0)
    assert np.allclose(hours["day_hours"] + hours["night_hours"], 24.0 * hours["days"])


def test_daylight_polar_night_and_midnight_sun() -> None:
    hours = day_night_hours(80.0).set_index("month")
    assert hours.loc["Dec", "day_hours"] == pytest.approx(0.0)
    assert hours.loc["Jun", "night_hours"] == pytest.approx(0.0)


def test_daylight_rejects_invalid_latitude() -> None:
    with pytest.raises(ValueError):
        day_night_hours(95.0)


def test_bird_sample_shapes_and_flight_factor() -> None:
    bird = BirdParameters(
        wingspan=ParameterEstimate(1.08, 0.06),
        body_length=ParameterEstimate(0.39, 0.005),
        flight_speed=ParameterEstimate(13.1, 0.4),
        prop_crh=ParameterEstimate(0.06, 0.009),
        nocturnal_activity=ParameterEstimate(0.033, 0.0045),
        avoidance_basic=ParameterEstimate(0.989, 0.0006),
        avoidance_extended=ParameterEstimate(0.967, 0.0012),
        flight_type="gliding",
    )
    draw = bird.sample(np.random.default_rng(5), n=10)
    frame = draw.to_frame()
    assert frame.shape == (10, 7)
    assert (frame["wingspan"] >= 0).all()
    assert bird.flight_type is FlightType.GLIDING
    assert bird.flap_glide_factor == pytest.approx(2.0 / np.pi)


def test_wind_lookup_step_and_linear() -> None:
    lookup = _lookup()
    assert lookup.threshold() == 2.0

    rot, pitch = lookup.lookup(np.array([2.5, -1.0, 10.0]), "step")
    assert rot.tolist() == [5.0, 0.0, 6.0]
    assert pitch.tolist() == [0.0, 90.0, 1.0]

    rot, pitch = lookup.lookup(np.array([2.5]), "linear")
    assert rot[0] == pytest.approx(5.5)
    assert pitch[0] == pytest.approx(0.5)


def test_wind_lookup_without_rotation_has_no_threshold() -> None:
    lookup = WindSpeedLookup(wind_speed=[0.0, 1.0], rotation_speed=[0.0, 0.0], pitch=[0.0, 0.0])
    with pytest.raises(ValueError):
        lookup.threshold()


def test_turbine_scenario_requires_hub_or_air_gap() -> None:
    with pytest.raises(ValueError):
        TurbineScenario(
            n_blades=3,
            rotor_radius=ParameterEstimate(100.0),
            blade_width=ParameterEstimate(5.0),
            monthly_operation=_operation(),
            rotation_speed=ParameterEstimate(10.0),
            blade_pitch=ParameterEstimate(10.0),
        )


def test_sampler_air_gap_sets_hub_height() -> None:
    turbine = TurbineScenario(
        n_blades=3,
        rotor_radius=ParameterEstimate(100.0, 2.0),
        blade_width=ParameterEstimate(5.0),
        monthly_operation=_operation(99.0, 10.0),
        air_gap=ParameterEstimate(30.0),
        rotation_speed=ParameterEstimate(10.0, 1.0),
        blade_pitch=ParameterEstimate(10.0, 1.0),
    )
    draw = TurbineOperationSampler(turbine).sample(np.random.default_rng(6), n=50)
    assert np.allclose(draw.hub_height, draw.rotor_radius + 30.0)
    assert draw.prop_operational.shape == (50, 12)
    assert draw.prop_operational.max() <= 1.0
    assert np.all(np.isnan(draw.wind_speed))


def test_sampler_wind_mode_floors_at_threshold() -> None:
    turbine = TurbineScenario(
        n_blades=3,
        rotor_radius=ParameterEstimate(100.0),
        blade_width=ParameterEstimate(5.0),
        monthly_operation=_operation(),
        hub_height=ParameterEstimate(120.0),
        speed_pitch_mode="wind_speed",
        wind_lookup=_lookup(),
    )
    sampler = TurbineOperationSampler(turbine, wind_speed=ParameterEstimate(1.0, 2.0))
    draw = sampler.sample(np.random.default_rng(7), n=200)
    assert draw.wind_speed.min() >= 2.0
    assert draw.rotation_speed.min() >= 5.0

    fixed = TurbineOperationSampler(turbine, wind_speed=ParameterEstimate(0.5))
    assert fixed.sample(np.random.default_rng(7)).rotation_speed[0] == 5.0


def test_sampler_mode_data_is_validated() -> None:
    wind_turbine = TurbineScenario(
        n_blades=3,
        rotor_radius=ParameterEstimate(100.0),
        blade_width=ParameterEstimate(5.0),
        monthly_operation=_operation(),
        hub_height=ParameterEstimate(120.0),
        speed_pitch_mode="wind_speed",
    )
    with pytest.raises(ValueError):
        TurbineOperationSampler(wind_turbine, wind_speed=ParameterEstimate(9.0))

    prob_turbine = TurbineScenario(
        n_blades=3,
        rotor_radius=ParameterEstimate(100.0),
        blade_width=ParameterEstimate(5.0),
        monthly_operation=_operation(),
        hub_height=ParameterEstimate(120.0),
    )
    with pytest.raises(ValueError):
        TurbineOperationSampler(prob_turbine)


def test_density_resample_reorders_month_columns() -> None:
    shuffled = list(reversed(MONTH_LABELS))
    table = pd.DataFrame([[float(month_indices([m])[0]) for m in shuffled]] * 3, columns=shuffled)
    density = MonthlyDensity.from_samples(table)
    assert density.mode is DensityMode.RESAMPLE
    draws = density.sample(np.random.default_rng(8), n=4)
    assert draws.shape == (4, 12)
    assert draws[0].tolist() == [float(i) for i in range(12)]


def test_density_percentiles_and_validation() -> None:
    values = np.vstack([np.zeros(12), np.full(12, 2.0)])
    density = MonthlyDensity.from_percentiles([0.0, 1.0], values)
    draws = density.sample(np.random.default_rng(9), n=100)
    assert draws.min() >= 0.0
    assert draws.max() <= 2.0

    with pytest.raises(ValueError):
        MonthlyDensity.from_estimates([(1.0, 0.1)] * 11)


def test_density_truncated_normal_is_non_negative() -> None:
    density = MonthlyDensity.from_estimates([(0.1, 1.0)] * 12)
    assert density.sample(np.random.default_rng(10), n=200).min() >= 0.0


def test_flight_height_distribution_from_frame() -> None:
    frame = pd.DataFrame({"height": [0, 1, 2], "b1": [0.5, 0.3, 0.2], "b2": [0.2, 0.3, 0.5]})
    fhd = FlightHeightDistribution.from_frame(frame)
    assert fhd.n_draws == 2
    assert fhd.bin_centres.tolist() == [0.5, 1.5, 2.5]
    column = fhd.sample_column(np.random.default_rng(11))
    assert column.sum() == pytest.approx(1.0)
    with pytest.raises(ValueError):
        FlightHeightDistribution(heights=[0, 2, 1], distributions=[0.2, 0.3, 0.5])
