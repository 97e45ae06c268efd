"""
Monthly collision formulas of the Band model options.

Option 1 uses the survey proportion of flights at collision risk height,
option 2 the proportion derived from a generic flight height distribution,
and option 3 (extended model) integrates the collision risk over the flight
height distribution across the rotor disc.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterable, Tuple

import numpy as np

from .errors import NonFiniteResultError
from .flight_height import RotorHeightDistribution


class ModelOption(IntEnum):
    BASIC = 1
    GENERIC_FHD = 2
    EXTENDED = 3


FHD_OPTIONS = frozenset({ModelOption.GENERIC_FHD, ModelOption.EXTENDED})


def validate_model_options(options: Iterable[int | str]) -> Tuple[ModelOption, ...]:
    """
    Normalise requested model options to a sorted tuple without duplicates.

    Raises:
        ValueError: If no option is given or an option is not 1, 2 or 3.
    """
    parsed = set()
    for option in options:
        try:
            parsed.add(ModelOption(int(option)))
        except (TypeError, ValueError):
            raise ValueError(f"Unknown model option {option!r}; expected 1, 2 or 3") from None
    if not parsed:
        raise ValueError("At least one model option is required")
    return tuple(sorted(parsed))


def requires_flight_heights(options: Iterable[ModelOption]) -> bool:
    return any(option in FHD_OPTIONS for option in options)


def basic_collisions(
    flux_factor: np.ndarray,
    prop_crh: float,
    prob_single_collision: float,
    prop_operational: np.ndarray,
    avoidance_rate: float,
    lac_factor: float,
) -> np.ndarray:
    """Option 1: monthly collisions with the survey proportion at risk height."""
    return (
        np.asarray(flux_factor, dtype=float)
        * prop_crh
        * prob_single_collision
        * np.asarray(prop_operational, dtype=float)
        * (1.0 - avoidance_rate)
        * lac_factor
    )


def generic_fhd_collisions(
    flux_factor: np.ndarray,
    prop_at_rotor: float,
    prob_single_collision: float,
    prop_operational: np.ndarray,
    avoidance_rate: float,
    lac_factor: float,
) -> np.ndarray:
    """Option 2: as option 1 with the proportion at rotor height from the flight height distribution."""
    return basic_collisions(
        flux_factor, prop_at_rotor, prob_single_collision, prop_operational, avoidance_rate, lac_factor
    )


def extended_collisions(
    flux_factor: np.ndarray,
    bin_masses: np.ndarray,
    collision_integral: np.ndarray,
    prop_operational: np.ndarray,
    avoidance_rate: float,
    lac_factor: float,
) -> np.ndarray:
    """
    Option 3: monthly collisions from the extended model.

    ``flux * (2 / pi) * sum_b(m_b * X_b) * op * (1 - A) * LAC`` where ``m_b``
    is the share of all flights in height bin ``b`` and ``X_b`` the collision
    risk integrated along the rotor chord at that height.

    Args:
        flux_factor: 12 monthly transit counts.
        bin_masses: Share of all flights in each rotor-height bin.
        collision_integral: Chord integral of the risk for each bin.
        prop_operational: 12 monthly operational proportions.
        avoidance_rate: Extended-model avoidance rate.
        lac_factor: Large array correction factor.
    """
    masses = np.asarray(bin_masses, dtype=float)
    integral = np.asarray(collision_integral, dtype=float)
    risk_index = 2.0 / np.pi * float(np.sum(masses * integral))
    return (
        np.asarray(flux_factor, dtype=float)
        * risk_index
        * np.asarray(prop_operational, dtype=float)
        * (1.0 - avoidance_rate)
        * lac_factor
    )


@dataclass(frozen=True)
class IterationInputs:
    """
    Quantities of one Monte Carlo iteration shared by all model options.

    ``rotor_fhd`` and ``collision_integral`` are ``None`` when options 2 and
    3 are not requested.
    """

    flux_factor: np.ndarray
    prop_crh: float
    prob_single_collision: float
    prop_operational: np.ndarray
    avoidance_basic: float
    avoidance_extended: float
    lac_factor: float
    rotor_fhd: RotorHeightDistribution | None = None
    collision_integral: np.ndarray | None = None


def _option_1(inputs: IterationInputs) -> np.ndarray:
    return basic_collisions(
        inputs.flux_factor,
        inputs.prop_crh,
        inputs.prob_single_collision,
        inputs.prop_operational,
        inputs.avoidance_basic,
        inputs.lac_factor,
    )


def _option_2(inputs: IterationInputs) -> np.ndarray:
    return generic_fhd_collisions(
        inputs.flux_factor,
        inputs.rotor_fhd.prop_at_rotor,
        inputs.prob_single_collision,
        inputs.prop_operational,
        inputs.avoidance_basic,
        inputs.lac_factor,
    )


def _option_3(inputs: IterationInputs) -> np.ndarray:
    return extended_collisions(
        inputs.flux_factor,
        inputs.rotor_fhd.masses,
        inputs.collision_integral,
        inputs.prop_operational,
        inputs.avoidance_extended,
        inputs.lac_factor,
    )


OPTION_FORMULAS: Dict[ModelOption, Callable[[IterationInputs], np.ndarray]] = {
    ModelOption.BASIC: _option_1,
    ModelOption.GENERIC_FHD: _option_2,
    ModelOption.EXTENDED: _option_3,
}


def compute_option(
    option: ModelOption,
    inputs: IterationInputs,
    iteration: int | None = None,
) -> np.ndarray:
    """
    Evaluate one model option and check the monthly counts.

    Raises:
        NonFiniteResultError: If any monthly count is negative, NaN or
            infinite.
    """
    option = ModelOption(option)
    if option in FHD_OPTIONS and inputs.rotor_fhd is None:
        raise ValueError(f"Model option {int(option)} needs the flight height distribution at rotor height")
    monthly = OPTION_FORMULAS[option](inputs)
    if not np.all(np.isfinite(monthly)) or np.any(monthly < 0):
        raise NonFiniteResultError(
            "Collision estimate is negative or not finite",
            option=int(option),
            iteration=iteration,
        )
    return monthly
