"""
Random draws of uncertain model parameters.

Provides :class:`ParameterEstimate` (a mean/SD pair) and the samplers used by
the Monte Carlo engine: fixed, truncated-normal, beta (moment matched),
empirical resampling and percentile-curve interpolation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence, Tuple

import numpy as np
from scipy.stats import truncnorm

from .errors import InvalidDistributionError


class DistributionKind(str, Enum):
    """Sampling schemes supported by :func:`sample_parameter`."""

    FIXED = "fixed"
    TRUNCATED_NORMAL = "truncated_normal"
    BETA = "beta"
    RESAMPLE = "resample"
    PERCENTILES = "percentiles"


@dataclass(frozen=True)
class ParameterEstimate:
    """
    Central estimate and uncertainty of a scalar model parameter.

    Attributes:
        mean: Central value in the parameter's own units.
        sd: Standard deviation. ``0.0`` (or ``None``, stored as ``0.0``)
            marks the parameter as non-stochastic: every draw equals ``mean``.

    Example:
        ```python
        wingspan = ParameterEstimate(mean=1.08, sd=0.04)   # metres
        blades = ParameterEstimate(mean=3.0)                # fixed
        ```
    """

    mean: float
    sd: float = 0.0

    def __post_init__(self) -> None:
        if self.sd is None:
            object.__setattr__(self, "sd", 0.0)

    @property
    def is_fixed(self) -> bool:
        return self.sd == 0.0

    @classmethod
    def from_value(cls, value: Any) -> "ParameterEstimate":
        """
        Build an estimate from a number, a ``(mean, sd)`` pair or a mapping
        with ``mean``/``sd`` keys.
        """
        if isinstance(value, ParameterEstimate):
            return value
        if isinstance(value, Mapping):
            sd = value.get("sd")
            return cls(mean=float(value["mean"]), sd=0.0 if sd is None else float(sd))
        if isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError(f"Expected (mean, sd) pair, got {value!r}")
            mean, sd = value
            return cls(mean=float(mean), sd=0.0 if sd is None else float(sd))
        return cls(mean=float(value))


def sample_fixed(n: int, value: float) -> np.ndarray:
    """Degenerate distribution: ``n`` copies of ``value``."""
    return np.full(n, float(value), dtype=float)


def sample_truncated_normal(
    rng: np.random.Generator,
    n: int,
    mean: float,
    sd: float,
    lower: float = 0.0,
    upper: float = np.inf,
) -> np.ndarray:
    """
    Draw from a normal distribution truncated to ``[lower, upper]``.

    Args:
        rng: Random generator consumed by the draw.
        n: Number of draws.
        mean: Mean of the untruncated normal.
        sd: Standard deviation of the untruncated normal. Zero returns
            ``mean`` exactly without touching ``rng``.
        lower: Lower truncation bound (0 for all physical magnitudes).
        upper: Upper truncation bound.

    Returns:
        np.ndarray: Shape ``(n,)``.

    Raises:
        InvalidDistributionError: If ``sd`` is negative or the bounds are
            inverted.
    """
    if sd < 0:
        raise InvalidDistributionError(f"Standard deviation must be >= 0, got {sd}")
    if sd == 0:
        return sample_fixed(n, mean)
    if not lower < upper:
        raise InvalidDistributionError(f"Truncation bounds must satisfy lower < upper, got [{lower}, {upper}]")
    a = (lower - mean) / sd
    b = (upper - mean) / sd
    draws = truncnorm.rvs(a, b, loc=mean, scale=sd, size=n, random_state=rng)
    return np.clip(np.asarray(draws, dtype=float), lower, upper)


def beta_shape_parameters(mean: float, sd: float) -> Tuple[float, float]:
    """
    Moment-matched beta shape parameters for a given mean and SD.

    Uses ``k = mean * (1 - mean) / sd**2 - 1``, ``alpha = mean * k`` and
    ``beta = (1 - mean) * k``.

    Raises:
        InvalidDistributionError: If ``mean`` is not strictly inside (0, 1),
            ``sd`` is not positive, or the implied shapes are not positive
            (SD too large for the mean).
    """
    if not 0.0 < mean < 1.0:
        raise InvalidDistributionError(f"Beta mean must lie strictly in (0, 1), got {mean}")
    if sd <= 0:
        raise InvalidDistributionError(f"Beta standard deviation must be > 0, got {sd}")
    k = mean * (1.0 - mean) / sd**2 - 1.0
    alpha = mean * k
    beta = (1.0 - mean) * k
    if not (alpha > 0 and beta > 0):
        raise InvalidDistributionError(
            f"No beta distribution with mean {mean} and sd {sd} "
            f"(shape parameters alpha={alpha:.4g}, beta={beta:.4g})"
        )
    return alpha, beta


def sample_beta(rng: np.random.Generator, n: int, mean: float, sd: float) -> np.ndarray:
    """
    Draw proportions from a beta distribution matched to ``mean`` and ``sd``.

    A zero SD returns ``mean`` exactly.
    """
    if sd < 0:
        raise InvalidDistributionError(f"Standard deviation must be >= 0, got {sd}")
    if sd == 0:
        return sample_fixed(n, mean)
    alpha, beta = beta_shape_parameters(mean, sd)
    return rng.beta(alpha, beta, size=n)


def sample_resample(rng: np.random.Generator, n: int, samples: Sequence[float]) -> np.ndarray:
    """Draw ``n`` values with replacement from an empirical sample set."""
    values = np.asarray(samples, dtype=float).ravel()
    if values.size == 0:
        raise InvalidDistributionError("Cannot resample from an empty sample set")
    return rng.choice(values, size=n, replace=True)


def sample_percentiles(
    rng: np.random.Generator,
    n: int,
    probabilities: Sequence[float],
    values: Sequence[float],
) -> np.ndarray:
    """
    Sample through a percentile curve.

    Draws ``n`` uniform numbers on [0, 1] and maps each through linear
    interpolation of the ``(probability, value)`` pairs. Uniform draws outside
    the tabulated probability range take the nearest end value.

    Raises:
        InvalidDistributionError: If the curve has fewer than two points,
            mismatched lengths, or probabilities that are not strictly
            increasing within [0, 1].
    """
    probs = np.asarray(probabilities, dtype=float)
    vals = np.asarray(values, dtype=float)
    if probs.ndim != 1 or probs.shape != vals.shape:
        raise InvalidDistributionError("Percentile probabilities and values must be 1-D and of equal length")
    if probs.size < 2:
        raise InvalidDistributionError("Percentile curve needs at least two points")
    if np.any(np.diff(probs) <= 0) or probs[0] < 0 or probs[-1] > 1:
        raise InvalidDistributionError("Percentile probabilities must be strictly increasing within [0, 1]")
    u = rng.uniform(0.0, 1.0, size=n)
    return np.interp(u, probs, vals)


def sample_parameter(
    rng: np.random.Generator,
    n: int,
    estimate: ParameterEstimate,
    kind: DistributionKind = DistributionKind.TRUNCATED_NORMAL,
    lower: float = 0.0,
    upper: float = np.inf,
) -> np.ndarray:
    """
    Sample a :class:`ParameterEstimate` with the requested scheme.

    This is the single entry point used for bird and turbine parameters.
    Non-stochastic estimates (``sd == 0``) always return the mean, whatever
    ``kind`` says.

    Args:
        rng: Random generator consumed by the draw.
        n: Number of draws (>= 1).
        estimate: Mean/SD pair to sample.
        kind: ``FIXED``, ``TRUNCATED_NORMAL`` or ``BETA``. Resampling and
            percentile schemes need extra data and are called directly.
        lower: Truncation lower bound for ``TRUNCATED_NORMAL``.
        upper: Truncation upper bound for ``TRUNCATED_NORMAL``.

    Returns:
        np.ndarray: Shape ``(n,)``.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    if estimate.sd < 0:
        raise InvalidDistributionError(f"Standard deviation must be >= 0, got {estimate.sd}")
    kind = DistributionKind(kind)
    if kind is DistributionKind.FIXED or estimate.is_fixed:
        return sample_fixed(n, estimate.mean)
    if kind is DistributionKind.TRUNCATED_NORMAL:
        return sample_truncated_normal(rng, n, estimate.mean, estimate.sd, lower=lower, upper=upper)
    if kind is DistributionKind.BETA:
        return sample_beta(rng, n, estimate.mean, estimate.sd)
    raise ValueError(f"{kind.value!r} sampling needs sample data; call the dedicated sampler")
