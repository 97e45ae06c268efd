"""
Exception types raised by the collision risk engine.

Every failure aborts the whole run: sampling and computation are
deterministic for a given seed, so an error always points at a structural
input problem rather than a transient condition.
"""

from __future__ import annotations


class CollisionModelError(Exception):
    """Base class for all collision risk engine errors."""


class MissingFlightHeightDataError(CollisionModelError, ValueError):
    """Flight height bootstrap data is required by the requested model options."""


class InvalidDistributionError(CollisionModelError, ValueError):
    """Distribution parameters cannot define a valid sampling distribution."""


class DegenerateGeometryError(CollisionModelError, RuntimeError):
    """
    Rotor geometry produced non-finite intermediate values.

    Attributes:
        iteration: 0-based Monte Carlo iteration, when known.
    """

    def __init__(self, message: str, *, iteration: int | None = None) -> None:
        self.iteration = iteration
        if iteration is not None:
            message = f"{message} (iteration {iteration})"
        super().__init__(message)


class NonFiniteResultError(CollisionModelError, RuntimeError):
    """
    A collision formula returned negative, NaN or infinite monthly counts.

    Attributes:
        option: Model option identifier (1, 2 or 3).
        iteration: 0-based Monte Carlo iteration, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        option: int | None = None,
        iteration: int | None = None,
    ) -> None:
        self.option = option
        self.iteration = iteration
        context = []
        if option is not None:
            context.append(f"option {option}")
        if iteration is not None:
            context.append(f"iteration {iteration}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
