"""
Species morphology and behaviour parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum

import numpy as np
import pandas as pd

from .sampling import DistributionKind, ParameterEstimate, sample_parameter


class FlightType(str, Enum):
    FLAPPING = "flapping"
    GLIDING = "gliding"


@dataclass(frozen=True)
class BirdParameters:
    """
    Per-species inputs of the collision risk model.

    Lengths are in metres, flight speed in m/s. Rates and proportions are
    fractions in [0, 1] and are sampled from beta distributions; physical
    magnitudes are sampled from normals truncated at zero.

    Attributes:
        wingspan: Wingspan (m).
        body_length: Body length (m).
        flight_speed: Flight speed (m/s).
        prop_crh: Proportion of flights at collision risk height, from
            site survey data. Used by model option 1.
        nocturnal_activity: Night-time activity as a proportion of daytime
            activity (0 = inactive at night, 1 = as active as by day).
        avoidance_basic: Avoidance rate for the basic model (options 1, 2).
        avoidance_extended: Avoidance rate for the extended model (option 3).
        flight_type: Flapping or gliding flight.
        name: Species label used in reports.

    Example:
        ```python
        kittiwake = BirdParameters(
            wingspan=ParameterEstimate(1.08, 0.0625),
            body_length=ParameterEstimate(0.39, 0.005),
            flight_speed=ParameterEstimate(13.1, 0.4),
            prop_crh=ParameterEstimate(0.06, 0.009),
            nocturnal_activity=ParameterEstimate(0.033, 0.0045),
            avoidance_basic=ParameterEstimate(0.989, 0.0006),
            avoidance_extended=ParameterEstimate(0.967, 0.0012),
            flight_type=FlightType.FLAPPING,
            name="Black_legged_Kittiwake",
        )
        ```
    """

    wingspan: ParameterEstimate
    body_length: ParameterEstimate
    flight_speed: ParameterEstimate
    prop_crh: ParameterEstimate
    nocturnal_activity: ParameterEstimate
    avoidance_basic: ParameterEstimate
    avoidance_extended: ParameterEstimate
    flight_type: FlightType = FlightType.FLAPPING
    name: str = "species"

    def __post_init__(self) -> None:
        object.__setattr__(self, "flight_type", FlightType(self.flight_type))

    @property
    def flap_glide_factor(self) -> float:
        """Band's flight-type factor: 1 for flapping, 2/pi for gliding."""
        return 1.0 if self.flight_type is FlightType.FLAPPING else 2.0 / np.pi

    def sample(self, rng: np.random.Generator, n: int = 1) -> "BirdDraw":
        """
        Draw ``n`` realisations of every stochastic bird parameter.

        Draw order is fixed (wingspan, body length, flight speed, proportion
        at collision height, nocturnal activity, basic avoidance, extended
        avoidance) so that a seeded generator always yields the same draws.
        """
        tnorm = DistributionKind.TRUNCATED_NORMAL
        beta = DistributionKind.BETA
        return BirdDraw(
            wingspan=sample_parameter(rng, n, self.wingspan, tnorm, lower=0.0),
            body_length=sample_parameter(rng, n, self.body_length, tnorm, lower=0.0),
            flight_speed=sample_parameter(rng, n, self.flight_speed, tnorm, lower=0.0),
            prop_crh=sample_parameter(rng, n, self.prop_crh, beta),
            nocturnal_activity=sample_parameter(rng, n, self.nocturnal_activity, beta),
            avoidance_basic=sample_parameter(rng, n, self.avoidance_basic, beta),
            avoidance_extended=sample_parameter(rng, n, self.avoidance_extended, beta),
        )


@dataclass(frozen=True)
class BirdDraw:
    """Sampled bird parameters; every field has shape ``(n,)``."""

    wingspan: np.ndarray
    body_length: np.ndarray
    flight_speed: np.ndarray
    prop_crh: np.ndarray
    nocturnal_activity: np.ndarray
    avoidance_basic: np.ndarray
    avoidance_extended: np.ndarray

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({f.name: getattr(self, f.name) for f in fields(self)})
