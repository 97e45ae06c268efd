"""
Flight height distributions and their projection onto the rotor disc.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from .errors import DegenerateGeometryError


def band_centres(heights: Sequence[float]) -> np.ndarray:
    """Mid-point of each height band; the last band reuses the previous width."""
    heights = np.asarray(heights, dtype=float)
    if heights.size == 1:
        widths = np.ones(1)
    else:
        steps = np.diff(heights)
        widths = np.append(steps, steps[-1])
    return heights + widths / 2.0


@dataclass(frozen=True, eq=False)
class FlightHeightDistribution:
    """
    Proportion of flights in each height band.

    Attributes:
        heights: Lower edge of each height band (m above sea level),
            strictly increasing.
        distributions: ``(n_bins, n_draws)`` table of probability masses.
            Each column is one bootstrap realisation of the distribution; a
            single column represents a site-specific distribution.
    """

    heights: np.ndarray
    distributions: np.ndarray

    def __post_init__(self) -> None:
        heights = np.asarray(self.heights, dtype=float)
        table = np.asarray(self.distributions, dtype=float)
        if table.ndim == 1:
            table = table[:, None]
        if heights.ndim != 1 or heights.size == 0 or table.shape[0] != heights.size or table.shape[1] == 0:
            raise ValueError("Flight height table must have one row per height and at least one column")
        if np.any(np.diff(heights) <= 0):
            raise ValueError("Flight heights must be strictly increasing")
        object.__setattr__(self, "heights", heights)
        object.__setattr__(self, "distributions", table)
        object.__setattr__(self, "_centres", band_centres(heights))

    @property
    def n_draws(self) -> int:
        return int(self.distributions.shape[1])

    @property
    def bin_centres(self) -> np.ndarray:
        """Mid-point of each height band, computed once at construction."""
        return self._centres

    def sample_column(self, rng: np.random.Generator) -> np.ndarray:
        """Pick one bootstrap column uniformly at random (with replacement across calls)."""
        return self.distributions[:, int(rng.integers(0, self.n_draws))]

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "FlightHeightDistribution":
        """
        Build from a table whose first column holds the heights and whose
        remaining columns hold one distribution each.
        """
        if frame.shape[1] < 2:
            raise ValueError("Flight height table needs a height column and at least one distribution column")
        return cls(
            heights=frame.iloc[:, 0].to_numpy(dtype=float),
            distributions=frame.iloc[:, 1:].to_numpy(dtype=float),
        )

    @classmethod
    def from_csv(cls, path: str | Path) -> "FlightHeightDistribution":
        return cls.from_frame(pd.read_csv(path))


@dataclass(frozen=True, eq=False)
class RotorHeightDistribution:
    """
    Flight height distribution restricted to the rotor disc.

    Attributes:
        y: Relative heights of the retained bins, in [-1, 1] (0 = hub).
        probabilities: Renormalised masses of the retained bins (sum to 1,
            empty when no bin falls within the rotor).
        prop_at_rotor: Share of all flights whose height lies within the
            rotor disc.
    """

    y: np.ndarray
    probabilities: np.ndarray
    prop_at_rotor: float

    @property
    def masses(self) -> np.ndarray:
        """Un-normalised share of all flights in each retained bin."""
        return self.probabilities * self.prop_at_rotor


def fhd_at_rotor(
    hub_height: float,
    fhd: Sequence[float],
    bin_centres: Sequence[float],
    rotor_radius: float,
    tidal_offset: float = 0.0,
) -> RotorHeightDistribution:
    """
    Project a flight height distribution onto rotor coordinates.

    Band centres ``z`` are mapped to ``y = (z - (H + T)) / R``; bands with
    ``|y| <= 1`` are kept.

    Args:
        hub_height: Hub height H (m).
        fhd: Probability mass per height band.
        bin_centres: Centre of each height band (m), as given by
            ``FlightHeightDistribution.bin_centres`` or ``band_centres``.
        rotor_radius: Rotor radius R (m).
        tidal_offset: Tidal offset T (m).

    Returns:
        RotorHeightDistribution: Retained bins with masses renormalised to
        sum to 1 (uniform if the retained mass is zero) and the retained
        mass as ``prop_at_rotor``.

    Raises:
        DegenerateGeometryError: If ``rotor_radius`` is not positive.
    """
    if not rotor_radius > 0:
        raise DegenerateGeometryError(f"Rotor radius must be positive to project flight heights, got {rotor_radius}")
    centres = np.asarray(bin_centres, dtype=float)
    mass = np.asarray(fhd, dtype=float)
    if mass.shape != centres.shape:
        raise ValueError("Flight height masses and band centres must have the same length")

    y = (centres - (hub_height + tidal_offset)) / rotor_radius
    keep = np.abs(y) <= 1.0
    if not np.any(keep):
        return RotorHeightDistribution(y=np.zeros(0), probabilities=np.zeros(0), prop_at_rotor=0.0)

    retained = mass[keep]
    total = float(retained.sum())
    if total > 0:
        probabilities = retained / total
    else:
        probabilities = np.full(retained.size, 1.0 / retained.size)
    return RotorHeightDistribution(y=y[keep], probabilities=probabilities, prop_at_rotor=total)
