"""
Large array correction.

Birds crossing a large wind farm meet several rows of rotors; those killed
at the front rows are no longer at risk further in, so the expected count
from independent rotors is scaled down.
"""

from __future__ import annotations

import numpy as np


def large_array_correction(
    n_turbines: int,
    rotor_radius: float,
    avoidance_rate: float,
    prob_single_collision: float,
    mean_prop_operational: float,
    wf_width_km: float,
    enabled: bool = True,
) -> float:
    """
    Correction factor for bird depletion across a large array.

    The per-rotor risk ``rho = (1 - A) * P * op`` is combined with the number
    of rotors crossed on a transit of the array,
    ``n_x = N * pi * R / (2000 * W)`` (``R`` in metres, ``W`` in km), giving
    ``1 - rho * n_x / 2``.

    Args:
        n_turbines: Number of turbines N.
        rotor_radius: Rotor radius R (m).
        avoidance_rate: Basic avoidance rate A.
        prob_single_collision: Single-transit collision probability P.
        mean_prop_operational: Mean monthly operational proportion.
        wf_width_km: Width of the array W (km).
        enabled: When ``False`` the factor is exactly 1.0.

    Returns:
        float: Multiplicative correction factor.
    """
    if not enabled:
        return 1.0
    risk_per_rotor = (1.0 - avoidance_rate) * prob_single_collision * mean_prop_operational
    rotors_crossed = n_turbines * np.pi * rotor_radius / (2000.0 * wf_width_km)
    return float(1.0 - risk_per_rotor * rotors_crossed / 2.0)
