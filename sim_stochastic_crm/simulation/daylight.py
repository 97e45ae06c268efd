"""
Monthly daylight and night-time hours from latitude.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..calendar_utils import MONTH_LABELS, MONTH_LENGTHS, mid_month_days


def solar_declination_deg(day_of_year: np.ndarray) -> np.ndarray:
    """
    Solar declination (degrees) by Cooper's approximation.

    ``delta = 23.45 * sin(2*pi * (284 + N) / 365)`` with ``N`` the 1-based
    day of year.
    """
    day_of_year = np.asarray(day_of_year, dtype=float)
    return 23.45 * np.sin(2.0 * np.pi * (284.0 + day_of_year) / 365.0)


def day_length_hours(latitude: float, day_of_year: np.ndarray) -> np.ndarray:
    """
    Hours between sunrise and sunset.

    Args:
        latitude: Decimal degrees, positive north.
        day_of_year: 1-based day numbers.

    Returns:
        np.ndarray: Day length in hours. Polar night gives 0, midnight sun 24.
    """
    phi = np.radians(latitude)
    delta = np.radians(solar_declination_deg(day_of_year))
    cos_omega = np.clip(-np.tan(phi) * np.tan(delta), -1.0, 1.0)
    omega_deg = np.degrees(np.arccos(cos_omega))
    return 2.0 * omega_deg / 15.0


def day_night_hours(latitude: float) -> pd.DataFrame:
    """
    Average daylight and night-time hours for each month at a latitude.

    Day length is evaluated at the mid-point day of each month and scaled by
    the number of days in that month, giving total daylight and night hours
    available to birds per month.

    Args:
        latitude: Site latitude in decimal degrees (WGS 1984), in [-90, 90].

    Returns:
        pd.DataFrame: One row per month (Jan..Dec) with columns
            - month: 3-letter month label
            - days: days in month
            - day_length_hours: mid-month sunrise-to-sunset hours
            - day_hours: total daylight hours in the month
            - night_hours: total night hours in the month

    Raises:
        ValueError: If latitude is outside [-90, 90].

    Example:
        ```python
        hours = day_night_hours(56.0)
        hours.loc[hours["month"] == "Jun", "day_hours"]  # ~520 h
        ```
    """
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"latitude must be within [-90, 90], got {latitude}")

    days = np.asarray(MONTH_LENGTHS, dtype=float)
    length = day_length_hours(latitude, mid_month_days())
    day_hours = length * days
    night_hours = 24.0 * days - day_hours
    return pd.DataFrame(
        {
            "month": MONTH_LABELS,
            "days": days.astype(int),
            "day_length_hours": length,
            "day_hours": day_hours,
            "night_hours": night_hours,
        }
    )
