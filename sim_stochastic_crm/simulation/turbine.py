"""
Turbine geometry and operation: chord-taper profile, wind-speed lookup and
the per-iteration turbine operation sampler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from ..calendar_utils import N_MONTHS
from .sampling import DistributionKind, ParameterEstimate, sample_parameter

# Chord taper of a typical 5 MW offshore blade: radius at the bird passage
# point and chord width, as proportions of rotor radius and maximum chord.
DEFAULT_CHORD_RADIUS = np.round(np.arange(1, 21) * 0.05, 2)
DEFAULT_CHORD_WIDTH = np.array([
    0.73, 0.79, 0.88, 0.96, 1.00, 0.98, 0.92, 0.85, 0.80, 0.75,
    0.70, 0.64, 0.58, 0.52, 0.47, 0.41, 0.37, 0.30, 0.24, 0.00,
])


@dataclass(frozen=True, eq=False)
class ChordProfile:
    """
    Blade chord width as a function of radial position.

    Attributes:
        radius: Relative radius (0..1] of each sample point, strictly
            increasing, last point at the blade tip.
        chord: Chord width at each radius as a proportion of the maximum
            chord (blade width).
    """

    radius: np.ndarray
    chord: np.ndarray

    def __post_init__(self) -> None:
        radius = np.asarray(self.radius, dtype=float)
        chord = np.asarray(self.chord, dtype=float)
        if radius.ndim != 1 or radius.shape != chord.shape or radius.size < 2:
            raise ValueError("Chord profile needs matching 1-D radius/chord arrays with at least 2 points")
        if np.any(np.diff(radius) <= 0):
            raise ValueError("Chord profile radii must be strictly increasing")
        if radius[0] < 0 or radius[-1] > 1:
            raise ValueError("Chord profile radii must lie within [0, 1]")
        if np.any(chord < 0):
            raise ValueError("Chord widths must be non-negative")
        object.__setattr__(self, "radius", radius)
        object.__setattr__(self, "chord", chord)

    def chord_at(self, radius: np.ndarray) -> np.ndarray:
        """
        Relative chord at arbitrary relative radii.

        Linear interpolation between profile points; radii inside the
        innermost point take the innermost chord width.
        """
        return np.interp(radius, self.radius, self.chord)


def default_chord_profile() -> ChordProfile:
    return ChordProfile(radius=DEFAULT_CHORD_RADIUS.copy(), chord=DEFAULT_CHORD_WIDTH.copy())


class LookupMethod(str, Enum):
    STEP = "step"
    LINEAR = "linear"


@dataclass(frozen=True, eq=False)
class WindSpeedLookup:
    """
    Tabulated relationship between wind speed, rotor speed and blade pitch.

    Attributes:
        wind_speed: Strictly increasing wind speeds (m/s).
        rotation_speed: Rotor speed at each wind speed (rpm).
        pitch: Blade pitch at each wind speed (degrees).
    """

    wind_speed: np.ndarray
    rotation_speed: np.ndarray
    pitch: np.ndarray

    def __post_init__(self) -> None:
        ws = np.asarray(self.wind_speed, dtype=float)
        rot = np.asarray(self.rotation_speed, dtype=float)
        pitch = np.asarray(self.pitch, dtype=float)
        if ws.ndim != 1 or ws.size == 0 or ws.shape != rot.shape or ws.shape != pitch.shape:
            raise ValueError("Wind lookup columns must be non-empty 1-D arrays of equal length")
        if np.any(np.diff(ws) <= 0):
            raise ValueError("Wind lookup wind speeds must be strictly increasing")
        object.__setattr__(self, "wind_speed", ws)
        object.__setattr__(self, "rotation_speed", rot)
        object.__setattr__(self, "pitch", pitch)

    def threshold(self) -> float:
        """
        Lowest tabulated wind speed at which the rotor turns.

        Raises:
            ValueError: If no entry has a non-zero rotation speed.
        """
        turning = np.flatnonzero(self.rotation_speed != 0)
        if turning.size == 0:
            raise ValueError("Wind lookup has no entry with non-zero rotation speed")
        return float(self.wind_speed[turning[0]])

    def lookup(
        self,
        wind_speed: np.ndarray,
        method: LookupMethod | str = LookupMethod.STEP,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Rotor speed and pitch for sampled wind speeds.

        Args:
            wind_speed: Wind speeds to look up (m/s).
            method: ``"step"`` takes the row with the largest tabulated wind
                speed not exceeding each value (values below the table use
                the first row). ``"linear"`` interpolates between rows and
                holds the end rows outside the table.

        Returns:
            Tuple of (rotation_speed_rpm, pitch_deg) arrays.
        """
        ws = np.asarray(wind_speed, dtype=float)
        method = LookupMethod(method)
        if method is LookupMethod.LINEAR:
            return (
                np.interp(ws, self.wind_speed, self.rotation_speed),
                np.interp(ws, self.wind_speed, self.pitch),
            )
        idx = np.searchsorted(self.wind_speed, ws, side="right") - 1
        idx = np.clip(idx, 0, self.wind_speed.size - 1)
        return self.rotation_speed[idx], self.pitch[idx]


class SpeedPitchMode(str, Enum):
    """How rotor speed and pitch are drawn each iteration."""

    PROBABILITY = "probability"
    WIND_SPEED = "wind_speed"


@dataclass(frozen=True, eq=False)
class TurbineScenario:
    """
    Turbine model inputs.

    Attributes:
        n_blades: Number of blades.
        rotor_radius: Rotor radius (m).
        blade_width: Maximum blade chord (m).
        monthly_operation: Twelve estimates (Jan..Dec) of the percentage of
            time the turbines are operational.
        hub_height: Hub height above highest astronomical tide (m). Either
            this or ``air_gap`` is required.
        air_gap: Clearance between blade tip and highest astronomical tide
            (m); when given, hub height is rotor radius + air gap.
        rotation_speed: Rotor speed (rpm), used in ``PROBABILITY`` mode.
        blade_pitch: Blade pitch (degrees), used in ``PROBABILITY`` mode.
        speed_pitch_mode: Direct sampling of speed/pitch or lookup from a
            sampled wind speed.
        wind_lookup: Wind speed vs rotor speed/pitch table for
            ``WIND_SPEED`` mode.
        chord_profile: Blade chord-taper profile.
        name: Turbine model label used in reports.
    """

    n_blades: int
    rotor_radius: ParameterEstimate
    blade_width: ParameterEstimate
    monthly_operation: Tuple[ParameterEstimate, ...]
    hub_height: ParameterEstimate | None = None
    air_gap: ParameterEstimate | None = None
    rotation_speed: ParameterEstimate | None = None
    blade_pitch: ParameterEstimate | None = None
    speed_pitch_mode: SpeedPitchMode = SpeedPitchMode.PROBABILITY
    wind_lookup: WindSpeedLookup | None = None
    chord_profile: ChordProfile = field(default_factory=default_chord_profile)
    name: str = "turbine"

    def __post_init__(self) -> None:
        if self.n_blades < 1:
            raise ValueError(f"n_blades must be >= 1, got {self.n_blades}")
        if len(self.monthly_operation) != N_MONTHS:
            raise ValueError("monthly_operation must contain 12 entries")
        if self.hub_height is None and self.air_gap is None:
            raise ValueError("Either hub_height or air_gap must be provided")
        object.__setattr__(self, "monthly_operation", tuple(self.monthly_operation))
        object.__setattr__(self, "speed_pitch_mode", SpeedPitchMode(self.speed_pitch_mode))


@dataclass(frozen=True)
class TurbineDraw:
    """
    Sampled turbine parameters for ``n`` iterations.

    Scalar fields have shape ``(n,)``; ``prop_operational`` has shape
    ``(n, 12)``. ``wind_speed`` is NaN when speed and pitch are sampled
    directly.
    """

    rotor_radius: np.ndarray
    blade_width: np.ndarray
    hub_height: np.ndarray
    rotation_speed: np.ndarray
    blade_pitch: np.ndarray
    wind_speed: np.ndarray
    prop_operational: np.ndarray
    mean_prop_operational: np.ndarray

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "rotor_radius": self.rotor_radius,
                "blade_width": self.blade_width,
                "hub_height": self.hub_height,
                "rotation_speed": self.rotation_speed,
                "blade_pitch": self.blade_pitch,
                "wind_speed": self.wind_speed,
                "mean_prop_operational": self.mean_prop_operational,
            }
        )


class TurbineOperationSampler:
    """
    Per-iteration sampler of turbine geometry and operation.

    The wind threshold (lowest wind speed at which the rotor turns) is derived
    once at construction; in wind-speed mode every sampled wind speed is
    floored at it before rotor speed and pitch are looked up.

    Args:
        turbine: Turbine scenario to sample.
        wind_speed: Site wind speed estimate (m/s); required in
            ``WIND_SPEED`` mode.
        lookup_method: Wind lookup rule, ``"step"`` (default) or
            ``"linear"``.

    Raises:
        ValueError: If the turbine lacks the data its speed/pitch mode needs.
    """

    def __init__(
        self,
        turbine: TurbineScenario,
        wind_speed: ParameterEstimate | None = None,
        lookup_method: LookupMethod | str = LookupMethod.STEP,
    ) -> None:
        self.turbine = turbine
        self.wind_speed = wind_speed
        self.lookup_method = LookupMethod(lookup_method)
        self.wind_threshold: float | None = None

        if turbine.speed_pitch_mode is SpeedPitchMode.WIND_SPEED:
            if turbine.wind_lookup is None:
                raise ValueError("Wind-speed mode requires a wind speed vs rotation/pitch lookup table")
            if wind_speed is None:
                raise ValueError("Wind-speed mode requires a site wind speed estimate")
            self.wind_threshold = turbine.wind_lookup.threshold()
        elif turbine.rotation_speed is None or turbine.blade_pitch is None:
            raise ValueError("Probability mode requires rotation_speed and blade_pitch estimates")

    def sample(self, rng: np.random.Generator, n: int = 1) -> TurbineDraw:
        """
        Draw ``n`` turbine realisations.

        Draw order: rotor radius, blade width, hub height (or air gap), rotor
        speed and pitch (or wind speed), then the twelve monthly operation
        percentages.
        """
        tnorm = DistributionKind.TRUNCATED_NORMAL
        turbine = self.turbine

        rotor_radius = sample_parameter(rng, n, turbine.rotor_radius, tnorm, lower=0.0)
        blade_width = sample_parameter(rng, n, turbine.blade_width, tnorm, lower=0.0)
        if turbine.air_gap is not None:
            hub_height = rotor_radius + sample_parameter(rng, n, turbine.air_gap, tnorm, lower=0.0)
        else:
            hub_height = sample_parameter(rng, n, turbine.hub_height, tnorm, lower=0.0)

        if turbine.speed_pitch_mode is SpeedPitchMode.WIND_SPEED:
            wind_speed = sample_parameter(
                rng, n, self.wind_speed, tnorm, lower=self.wind_threshold
            )
            wind_speed = np.maximum(wind_speed, self.wind_threshold)
            rotation_speed, blade_pitch = turbine.wind_lookup.lookup(wind_speed, self.lookup_method)
        else:
            wind_speed = np.full(n, np.nan)
            rotation_speed = sample_parameter(rng, n, turbine.rotation_speed, tnorm, lower=0.0)
            blade_pitch = sample_parameter(rng, n, turbine.blade_pitch, tnorm, lower=0.0)

        prop_operational = sample_monthly_operation(rng, n, turbine.monthly_operation)

        return TurbineDraw(
            rotor_radius=rotor_radius,
            blade_width=blade_width,
            hub_height=hub_height,
            rotation_speed=np.asarray(rotation_speed, dtype=float),
            blade_pitch=np.asarray(blade_pitch, dtype=float),
            wind_speed=wind_speed,
            prop_operational=prop_operational,
            mean_prop_operational=prop_operational.mean(axis=1),
        )


def sample_monthly_operation(
    rng: np.random.Generator,
    n: int,
    monthly_operation: Sequence[ParameterEstimate],
) -> np.ndarray:
    """
    Operational proportion per month, shape ``(n, 12)``.

    Percentages are sampled from normals truncated to [0, 100] and converted
    to proportions.
    """
    percent = np.column_stack(
        [
            sample_parameter(rng, n, est, DistributionKind.TRUNCATED_NORMAL, lower=0.0, upper=100.0)
            for est in monthly_operation
        ]
    )
    return percent / 100.0


@dataclass(frozen=True)
class WindFarmScenario:
    """
    Site-level inputs shared by all turbines of the wind farm.

    Attributes:
        n_turbines: Number of turbines.
        width_km: Width of the array across the main flight direction (km).
        latitude: Site latitude in decimal degrees.
        tidal_offset: Difference between highest astronomical tide and mean
            sea level (m), added to hub height when projecting flight heights.
        large_array_correction: Apply the large array correction.
        prop_upwind: Proportion of flights made upwind.
        wind_speed: Site wind speed (m/s), needed in wind-speed mode.
    """

    n_turbines: int
    width_km: float
    latitude: float
    tidal_offset: float = 0.0
    large_array_correction: bool = True
    prop_upwind: float = 0.5
    wind_speed: ParameterEstimate | None = None

    def __post_init__(self) -> None:
        if self.n_turbines < 1:
            raise ValueError(f"n_turbines must be >= 1, got {self.n_turbines}")
        if not 0.0 <= self.prop_upwind <= 1.0:
            raise ValueError(f"prop_upwind must lie within [0, 1], got {self.prop_upwind}")
