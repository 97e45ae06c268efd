"""
Monthly bird density inputs and their per-iteration sampling.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

import numpy as np
import pandas as pd

from ..calendar_utils import N_MONTHS, month_indices
from .errors import InvalidDistributionError
from .sampling import (
    DistributionKind,
    ParameterEstimate,
    sample_parameter,
    sample_percentiles,
    sample_resample,
)


class DensityMode(str, Enum):
    TRUNCATED_NORMAL = "truncated_normal"
    RESAMPLE = "resample"
    PERCENTILES = "percentiles"


@dataclass(frozen=True, eq=False)
class MonthlyDensity:
    """
    Bird density (birds/km^2) in each month, with its uncertainty.

    Exactly one data source is used depending on ``mode``:

    - ``TRUNCATED_NORMAL``: ``estimates`` holds 12 mean/SD pairs.
    - ``RESAMPLE``: ``samples`` is an ``(n_samples, 12)`` table of
      empirical densities (e.g. bootstrap replicates of survey data).
    - ``PERCENTILES``: ``probabilities`` and an ``(n_probs, 12)`` table of
      ``percentile_values`` define one percentile curve per month.

    Example:
        ```python
        density = MonthlyDensity.from_estimates(
            [(0.97, 0.67), (1.04, 0.75), (1.15, 0.80)] + [(0.5, 0.1)] * 9
        )
        ```
    """

    mode: DensityMode
    estimates: Tuple[ParameterEstimate, ...] = ()
    samples: np.ndarray | None = None
    probabilities: np.ndarray | None = None
    percentile_values: np.ndarray | None = None

    def __post_init__(self) -> None:
        mode = DensityMode(self.mode)
        object.__setattr__(self, "mode", mode)
        object.__setattr__(self, "estimates", tuple(self.estimates))
        if mode is DensityMode.TRUNCATED_NORMAL:
            if len(self.estimates) != N_MONTHS:
                raise ValueError("Truncated-normal density needs 12 monthly estimates")
        elif mode is DensityMode.RESAMPLE:
            if self.samples is None:
                raise ValueError("Resample density needs a samples table")
            samples = np.asarray(self.samples, dtype=float)
            if samples.ndim != 2 or samples.shape[1] != N_MONTHS:
                raise ValueError("Density samples table must have 12 monthly columns")
            if samples.shape[0] == 0:
                raise InvalidDistributionError("Density samples table is empty")
            object.__setattr__(self, "samples", samples)
        else:
            if self.probabilities is None or self.percentile_values is None:
                raise ValueError("Percentile density needs probabilities and percentile values")
            probs = np.asarray(self.probabilities, dtype=float)
            values = np.asarray(self.percentile_values, dtype=float)
            if values.ndim != 2 or values.shape != (probs.size, N_MONTHS):
                raise ValueError("Percentile values must be an (n_probabilities, 12) table")
            object.__setattr__(self, "probabilities", probs)
            object.__setattr__(self, "percentile_values", values)

    @classmethod
    def from_estimates(cls, estimates: Sequence) -> "MonthlyDensity":
        return cls(
            mode=DensityMode.TRUNCATED_NORMAL,
            estimates=tuple(ParameterEstimate.from_value(e) for e in estimates),
        )

    @classmethod
    def from_samples(cls, samples: pd.DataFrame | np.ndarray) -> "MonthlyDensity":
        """Empirical density table; DataFrame columns are reordered Jan..Dec."""
        if isinstance(samples, pd.DataFrame):
            samples = _month_columns(samples)
        return cls(mode=DensityMode.RESAMPLE, samples=np.asarray(samples, dtype=float))

    @classmethod
    def from_percentiles(
        cls,
        probabilities: Sequence[float],
        values: pd.DataFrame | np.ndarray,
    ) -> "MonthlyDensity":
        if isinstance(values, pd.DataFrame):
            values = _month_columns(values)
        return cls(
            mode=DensityMode.PERCENTILES,
            probabilities=np.asarray(probabilities, dtype=float),
            percentile_values=np.asarray(values, dtype=float),
        )

    def sample(self, rng: np.random.Generator, n: int = 1) -> np.ndarray:
        """
        Draw ``n`` sets of monthly densities, shape ``(n, 12)``.

        Months are drawn in calendar order; densities are non-negative.
        """
        if self.mode is DensityMode.TRUNCATED_NORMAL:
            columns = [
                sample_parameter(rng, n, est, DistributionKind.TRUNCATED_NORMAL, lower=0.0)
                for est in self.estimates
            ]
        elif self.mode is DensityMode.RESAMPLE:
            columns = [sample_resample(rng, n, self.samples[:, m]) for m in range(N_MONTHS)]
        else:
            columns = [
                sample_percentiles(rng, n, self.probabilities, self.percentile_values[:, m])
                for m in range(N_MONTHS)
            ]
        return np.clip(np.column_stack(columns), 0.0, None)


def _month_columns(frame: pd.DataFrame) -> np.ndarray:
    positions = month_indices(frame.columns)
    if sorted(positions) != list(range(N_MONTHS)):
        raise ValueError("Density table must have exactly one column per month")
    values = frame.to_numpy(dtype=float)
    ordered = np.empty_like(values)
    ordered[:, positions] = values
    return ordered
