"""
Band (2012) single-transit collision probability.

The probability that a bird flying through the rotor disc is struck depends
on where it crosses the disc. At radius ``r`` (metres) the risk for a blade
with chord ``c`` and pitch ``gamma`` is::

    p(r) = b / (2*pi*v) * (|+-Omega*c*sin(gamma) + (v/r)*c*cos(gamma)|
                           + max(Omega*L, (v/r)*W*F))

with ``+`` for upwind and ``-`` for downwind passage. Averaging ``p`` over the
disc gives the single-transit probability used by model options 1 and 2;
option 3 integrates ``p`` along horizontal chords at each flight height.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.integrate import trapezoid

from .errors import DegenerateGeometryError
from .turbine import ChordProfile

# Points per horizontal chord in the option 3 collision integral.
CHORD_INTEGRAL_POINTS = 41


@dataclass(frozen=True)
class CollisionGeometry:
    """
    Bird and rotor quantities entering the Band risk formula.

    Attributes:
        flight_speed: Bird flight speed v (m/s).
        body_length: Bird body length L (m).
        wingspan: Bird wingspan W (m).
        flap_glide_factor: F, 1 for flapping and 2/pi for gliding flight.
        prop_upwind: Proportion of transits made upwind.
        rotation_speed: Rotor speed (rpm).
        rotor_radius: Rotor radius R (m).
        blade_width: Maximum blade chord (m).
        blade_pitch: Blade pitch gamma (degrees).
        n_blades: Number of blades b.
    """

    flight_speed: float
    body_length: float
    wingspan: float
    flap_glide_factor: float
    prop_upwind: float
    rotation_speed: float
    rotor_radius: float
    blade_width: float
    blade_pitch: float
    n_blades: int

    @property
    def omega(self) -> float:
        """Angular rotor speed (rad/s)."""
        return 2.0 * np.pi * self.rotation_speed / 60.0


def collision_risk_at_radius(
    geometry: CollisionGeometry,
    chord_profile: ChordProfile,
    radius: np.ndarray,
    upwind: bool = True,
) -> np.ndarray:
    """
    Collision risk for a single transit at the given radii.

    Args:
        geometry: Bird and rotor geometry.
        chord_profile: Blade chord-taper profile.
        radius: Distances from the hub (m), any shape.
        upwind: Upwind (``True``) or downwind passage.

    Returns:
        np.ndarray: Risk in [0, 1] with the shape of ``radius``. The hub
        (``r == 0``) is assigned risk 1. NaN is propagated for degenerate
        geometry so the caller can detect it.
    """
    r = np.asarray(radius, dtype=float)
    g = geometry
    omega = g.omega
    gamma = np.radians(g.blade_pitch)
    sign = 1.0 if upwind else -1.0

    with np.errstate(divide="ignore", invalid="ignore"):
        chord = chord_profile.chord_at(r / g.rotor_radius) * g.blade_width
        speed = np.float64(g.flight_speed)
        v_over_r = speed / r
        blade_term = np.abs(sign * omega * chord * np.sin(gamma) + v_over_r * chord * np.cos(gamma))
        bird_term = np.maximum(omega * g.body_length, v_over_r * g.wingspan * g.flap_glide_factor)
        risk = g.n_blades / (2.0 * np.pi * speed) * (blade_term + bird_term)
    risk = np.where(r > 0, risk, 1.0)
    # np.minimum keeps NaN
    return np.minimum(risk, 1.0)


def directional_risk(
    geometry: CollisionGeometry,
    chord_profile: ChordProfile,
    radius: np.ndarray,
) -> np.ndarray:
    """Risk at ``radius`` weighted by the upwind/downwind split."""
    up = collision_risk_at_radius(geometry, chord_profile, radius, upwind=True)
    down = collision_risk_at_radius(geometry, chord_profile, radius, upwind=False)
    return geometry.prop_upwind * up + (1.0 - geometry.prop_upwind) * down


def prob_single_collision(geometry: CollisionGeometry, chord_profile: ChordProfile) -> float:
    """
    Average probability of collision for a bird crossing the rotor disc.

    Computes ``P = integral_0^1 2*x*p(x*R) dx`` with the trapezoid rule over
    the chord profile's relative radii, the hub point (x = 0, integrand 0)
    prepended.

    Args:
        geometry: Bird and rotor geometry for one iteration.
        chord_profile: Blade chord-taper profile.

    Returns:
        float: Single-transit collision probability.

    Raises:
        DegenerateGeometryError: If the integral is not finite.

    Example:
        ```python
        geometry = CollisionGeometry(
            flight_speed=13.1, body_length=0.39, wingspan=1.08,
            flap_glide_factor=1.0, prop_upwind=0.5, rotation_speed=10.0,
            rotor_radius=120.0, blade_width=5.5, blade_pitch=15.0, n_blades=3,
        )
        prob_single_collision(geometry, default_chord_profile())  # ~0.06
        ```
    """
    rel = chord_profile.radius[chord_profile.radius > 0]
    risk = directional_risk(geometry, chord_profile, rel * geometry.rotor_radius)
    x = np.concatenate(([0.0], rel))
    integrand = np.concatenate(([0.0], 2.0 * rel * risk))
    prob = float(trapezoid(integrand, x))
    if not np.isfinite(prob):
        raise DegenerateGeometryError(
            f"Single collision probability is not finite (rotor radius {geometry.rotor_radius}, "
            f"flight speed {geometry.flight_speed})"
        )
    return prob


def collision_integral(
    geometry: CollisionGeometry,
    chord_profile: ChordProfile,
    rotor_heights: np.ndarray,
) -> np.ndarray:
    """
    Collision risk integrated along the horizontal chord at each height.

    For a relative height ``y`` in [-1, 1] the bird crosses the disc along a
    chord of half-length ``sqrt(1 - y**2)``; the returned value is
    ``2 * integral_0^sqrt(1-y^2) p(sqrt(x^2 + y^2) * R) dx``.

    Args:
        geometry: Bird and rotor geometry for one iteration.
        chord_profile: Blade chord-taper profile.
        rotor_heights: Relative heights ``y`` of the flight-height bins.

    Returns:
        np.ndarray: One integral per height, shape ``(len(rotor_heights),)``.

    Raises:
        DegenerateGeometryError: If any integral is not finite.
    """
    y = np.asarray(rotor_heights, dtype=float)
    if y.size == 0:
        return np.zeros(0)
    half_chord = np.sqrt(np.clip(1.0 - y**2, 0.0, None))
    x = np.linspace(0.0, 1.0, CHORD_INTEGRAL_POINTS)[None, :] * half_chord[:, None]
    rel_radius = np.sqrt(x**2 + y[:, None] ** 2)
    risk = directional_risk(geometry, chord_profile, rel_radius * geometry.rotor_radius)
    integral = 2.0 * trapezoid(risk, x, axis=1)
    if not np.all(np.isfinite(integral)):
        raise DegenerateGeometryError("Collision integral over flight heights is not finite")
    return integral
