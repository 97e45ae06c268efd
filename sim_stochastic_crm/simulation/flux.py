"""
Flux of birds through the rotor-swept area.
"""

from __future__ import annotations

import numpy as np

SECONDS_PER_HOUR = 3600.0
M2_PER_KM2 = 1e6


def flux_factor(
    n_turbines: int,
    rotor_radius: float,
    flight_speed: float,
    bird_density: np.ndarray,
    day_hours: np.ndarray,
    night_hours: np.ndarray,
    nocturnal_activity: float,
) -> np.ndarray:
    """
    Monthly number of bird transits through the rotors, before avoidance.

    ``flux = v * (D / 1e6) * (N * pi * R**2 / (2 * R)) * (day + nu * night) * 3600``

    The frontal area of the array is divided by the rotor diameter so that
    the result counts birds crossing a window as high as the rotor.

    Args:
        n_turbines: Number of turbines N.
        rotor_radius: Rotor radius R (m).
        flight_speed: Bird flight speed v (m/s).
        bird_density: Monthly density D (birds/km^2), 12 values.
        day_hours: Monthly daylight hours, 12 values.
        night_hours: Monthly night hours, 12 values.
        nocturnal_activity: Night activity nu as a proportion of daytime
            activity.

    Returns:
        np.ndarray: 12 monthly transit counts. A zero rotor radius yields NaN.
    """
    density = np.asarray(bird_density, dtype=float)
    day = np.asarray(day_hours, dtype=float)
    night = np.asarray(night_hours, dtype=float)
    active_seconds = (day + nocturnal_activity * night) * SECONDS_PER_HOUR
    with np.errstate(divide="ignore", invalid="ignore"):
        radius = np.float64(rotor_radius)
        frontal_ratio = n_turbines * np.pi * radius**2 / (2.0 * radius)
    return flight_speed * (density / M2_PER_KM2) * frontal_ratio * active_seconds
