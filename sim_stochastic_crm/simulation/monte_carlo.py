"""
Monte Carlo orchestration of the stochastic collision risk model.

Each iteration samples bird, density, flight height and turbine inputs from
its own random stream, evaluates the Band geometry and writes one row of
monthly collisions per requested model option.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd

from ..calendar_utils import MONTH_LABELS, N_MONTHS
from .array_correction import large_array_correction
from .bird import BirdParameters
from .collision import CollisionGeometry, collision_integral, prob_single_collision
from .daylight import day_night_hours
from .density import MonthlyDensity
from .errors import DegenerateGeometryError, MissingFlightHeightDataError
from .flight_height import FlightHeightDistribution, fhd_at_rotor
from .flux import flux_factor
from .model_options import (
    FHD_OPTIONS,
    IterationInputs,
    ModelOption,
    compute_option,
    requires_flight_heights,
    validate_model_options,
)
from .turbine import (
    ChordProfile,
    LookupMethod,
    TurbineOperationSampler,
    TurbineScenario,
    WindFarmScenario,
)


@dataclass(frozen=True)
class IterationResult:
    """
    Outcome of one Monte Carlo iteration.

    Attributes:
        iteration: 0-based iteration index.
        collisions: Monthly collisions (12 values) per model option.
        params: Sampled scalar inputs and derived quantities.
        density: The 12 sampled monthly densities.
    """

    iteration: int
    collisions: Dict[ModelOption, np.ndarray]
    params: Dict[str, float]
    density: np.ndarray


class CollisionAccumulator:
    """
    Pre-allocated storage for the per-iteration results of a run.

    Every iteration owns exactly one row of each matrix, so rows can be
    written in any order.
    """

    def __init__(self, n_iter: int, options: Tuple[ModelOption, ...]) -> None:
        self.n_iter = n_iter
        self.options = options
        self.collisions = {option: np.full((n_iter, N_MONTHS), np.nan) for option in options}
        self.density = np.full((n_iter, N_MONTHS), np.nan)
        self.params: List[Dict[str, float] | None] = [None] * n_iter

    def store(self, result: IterationResult) -> None:
        i = result.iteration
        for option in self.options:
            self.collisions[option][i, :] = result.collisions[option]
        self.density[i, :] = result.density
        self.params[i] = result.params

    def to_results(self, seed: int) -> "CollisionResults":
        index = pd.RangeIndex(self.n_iter, name="iteration")
        return CollisionResults(
            collisions={
                option: pd.DataFrame(matrix, columns=MONTH_LABELS, index=index)
                for option, matrix in self.collisions.items()
            },
            sampled_params=pd.DataFrame(self.params, index=index),
            sampled_density=pd.DataFrame(self.density, columns=MONTH_LABELS, index=index),
            seed=seed,
            n_iter=self.n_iter,
        )


@dataclass
class CollisionResults:
    """
    Results of a stochastic collision risk run.

    Attributes:
        collisions: One ``(n_iter x 12)`` DataFrame (columns Jan..Dec) of
            monthly collision counts per requested model option.
        sampled_params: One row per iteration with the sampled bird and
            turbine parameters, the single-transit collision probability
            (``p_single_collision``), the large array correction factor
            (``lac_factor``) and, when flight heights are used, the
            proportion of flights at rotor height (``prop_at_rotor``).
        sampled_density: ``(n_iter x 12)`` sampled monthly densities.
        seed: Master seed of the run.
        n_iter: Number of iterations.

    Example:
        ```python
        results = simulator.run(n_iter=1000, model_options=[1, 3], seed=42)
        results.collisions[ModelOption.BASIC].sum(axis=1).mean()  # annual mean
        results.option_frame(3).quantile(0.975)
        ```
    """

    collisions: Dict[ModelOption, pd.DataFrame]
    sampled_params: pd.DataFrame
    sampled_density: pd.DataFrame
    seed: int
    n_iter: int
    options: Tuple[ModelOption, ...] = field(init=False)

    def __post_init__(self) -> None:
        self.options = tuple(sorted(self.collisions))

    def option_frame(self, option: int | ModelOption) -> pd.DataFrame:
        return self.collisions[ModelOption(int(option))]

    def annual_totals(self) -> pd.DataFrame:
        """Annual collisions per iteration, one column per option (``option_1``...)."""
        return pd.DataFrame(
            {f"option_{int(option)}": frame.sum(axis=1) for option, frame in self.collisions.items()}
        )


class CollisionRiskSimulator:
    """
    Stochastic Band collision risk model for one species and one wind farm.

    Args:
        bird: Species parameters.
        turbine: Turbine model parameters.
        wind_farm: Site parameters (array size, latitude, tide, upwind share).
        density: Monthly bird density and its uncertainty.
        flight_heights: Flight height distribution(s), required for model
            options 2 and 3. With several columns, one is drawn per
            iteration.
        chord_profile: Blade chord-taper profile; defaults to the turbine's.
        lookup_method: Wind lookup rule in wind-speed mode (``"step"`` or
            ``"linear"``).

    Example:
        ```python
        simulator = CollisionRiskSimulator(bird, turbine, wind_farm, density, fhd)
        results = simulator.run(n_iter=1000, model_options=[1, 2, 3], seed=123)
        ```
    """

    def __init__(
        self,
        bird: BirdParameters,
        turbine: TurbineScenario,
        wind_farm: WindFarmScenario,
        density: MonthlyDensity,
        flight_heights: FlightHeightDistribution | None = None,
        chord_profile: ChordProfile | None = None,
        lookup_method: LookupMethod | str = LookupMethod.STEP,
    ) -> None:
        self.bird = bird
        self.turbine = turbine
        self.wind_farm = wind_farm
        self.density = density
        self.flight_heights = flight_heights
        self.chord_profile = chord_profile if chord_profile is not None else turbine.chord_profile
        self.lookup_method = LookupMethod(lookup_method)

    def run(
        self,
        n_iter: int,
        model_options: Iterable[int] = (1,),
        seed: int = 123,
        progress_callback: Callable[[int, int, float, float], None] | None = None,
        show_progress: bool = True,
    ) -> CollisionResults:
        """
        Run ``n_iter`` Monte Carlo iterations.

        Args:
            n_iter: Number of iterations (>= 1).
            model_options: Any of 1 (basic), 2 (generic flight heights),
                3 (extended).
            seed: Master seed; the same inputs and seed give identical
                results.
            progress_callback: Optional ``callback(done, total, elapsed, eta)``
                called after every iteration.
            show_progress: Print a progress bar when no callback is given.

        Returns:
            CollisionResults: Monthly collision matrices and sampled inputs.

        Raises:
            ValueError: Invalid ``n_iter`` or model options, or turbine data
                inconsistent with its speed/pitch mode.
            MissingFlightHeightDataError: Options 2/3 requested without
                flight height data. Raised before any sampling.
            InvalidDistributionError: A parameter cannot be sampled.
            DegenerateGeometryError: Non-finite geometry in some iteration.
            NonFiniteResultError: Negative or non-finite monthly collisions.
        """
        if n_iter < 1:
            raise ValueError(f"n_iter must be >= 1, got {n_iter}")
        options = validate_model_options(model_options)
        use_fhd = requires_flight_heights(options)
        if use_fhd and self.flight_heights is None:
            requested = ", ".join(str(int(o)) for o in options if o in FHD_OPTIONS)
            raise MissingFlightHeightDataError(
                f"Flight height distribution data is required for model option(s) {requested}"
            )

        turbine_sampler = TurbineOperationSampler(
            self.turbine, wind_speed=self.wind_farm.wind_speed, lookup_method=self.lookup_method
        )
        hours = day_night_hours(self.wind_farm.latitude)
        day_hours = hours["day_hours"].to_numpy()
        night_hours = hours["night_hours"].to_numpy()

        rng_global = np.random.default_rng(seed)
        iteration_seeds = rng_global.integers(0, 1_000_000_000, size=n_iter)
        accumulator = CollisionAccumulator(n_iter, options)

        bar_len = 30
        start_time = time.time()
        update_every = max(1, n_iter // 100)

        def print_progress(iteration: int) -> None:
            """Print progress bar for the collision risk simulation."""
            done = iteration + 1
            frac = done / n_iter
            elapsed = time.time() - start_time
            eta = (elapsed / frac - elapsed) if frac > 0 else 0.0

            filled = int(bar_len * frac)
            bar = "#" * filled + "-" * (bar_len - filled)

            msg = (
                f"\rCRM {done:5d}/{n_iter:<5d} "
                f"[{bar}] {frac*100:6.2f}%  "
                f"elapsed: {elapsed:6.1f}s  ETA: {eta:6.1f}s"
            )
            sys.stdout.write(msg)
            sys.stdout.flush()

        for i in range(n_iter):
            rng = np.random.default_rng(iteration_seeds[i])
            result = self._run_iteration(
                i, rng, options, use_fhd, turbine_sampler, day_hours, night_hours
            )
            accumulator.store(result)

            iteration_done = i + 1
            elapsed = time.time() - start_time
            frac = iteration_done / n_iter
            eta = (elapsed / frac - elapsed) if frac > 0 else 0.0
            if progress_callback is not None:
                progress_callback(iteration_done, n_iter, elapsed, eta)
            elif show_progress:
                if (i + 1) % update_every == 0 or (i + 1) == n_iter:
                    print_progress(i)

        if progress_callback is None and show_progress:
            sys.stdout.write("\n")

        return accumulator.to_results(seed)

    def _run_iteration(
        self,
        i: int,
        rng: np.random.Generator,
        options: Tuple[ModelOption, ...],
        use_fhd: bool,
        turbine_sampler: TurbineOperationSampler,
        day_hours: np.ndarray,
        night_hours: np.ndarray,
    ) -> IterationResult:
        # Draw order is part of the reproducibility contract.
        bird_draw = self.bird.sample(rng)
        density = self.density.sample(rng)[0]
        fhd_column = self.flight_heights.sample_column(rng) if use_fhd else None
        turbine_draw = turbine_sampler.sample(rng)

        farm = self.wind_farm
        rotor_radius = float(turbine_draw.rotor_radius[0])
        flight_speed = float(bird_draw.flight_speed[0])
        prop_operational = turbine_draw.prop_operational[0]
        mean_operational = float(turbine_draw.mean_prop_operational[0])

        geometry = CollisionGeometry(
            flight_speed=flight_speed,
            body_length=float(bird_draw.body_length[0]),
            wingspan=float(bird_draw.wingspan[0]),
            flap_glide_factor=self.bird.flap_glide_factor,
            prop_upwind=farm.prop_upwind,
            rotation_speed=float(turbine_draw.rotation_speed[0]),
            rotor_radius=rotor_radius,
            blade_width=float(turbine_draw.blade_width[0]),
            blade_pitch=float(turbine_draw.blade_pitch[0]),
            n_blades=self.turbine.n_blades,
        )
        try:
            p_single = prob_single_collision(geometry, self.chord_profile)
        except DegenerateGeometryError as exc:
            raise DegenerateGeometryError(str(exc), iteration=i) from exc

        lac = large_array_correction(
            n_turbines=farm.n_turbines,
            rotor_radius=rotor_radius,
            avoidance_rate=float(bird_draw.avoidance_basic[0]),
            prob_single_collision=p_single,
            mean_prop_operational=mean_operational,
            wf_width_km=farm.width_km,
            enabled=farm.large_array_correction,
        )

        flux = flux_factor(
            n_turbines=farm.n_turbines,
            rotor_radius=rotor_radius,
            flight_speed=flight_speed,
            bird_density=density,
            day_hours=day_hours,
            night_hours=night_hours,
            nocturnal_activity=float(bird_draw.nocturnal_activity[0]),
        )
        if not np.all(np.isfinite(flux)):
            raise DegenerateGeometryError("Flux factor is not finite", iteration=i)

        rotor_fhd = None
        chord_integral = None
        if use_fhd:
            try:
                rotor_fhd = fhd_at_rotor(
                    hub_height=float(turbine_draw.hub_height[0]),
                    fhd=fhd_column,
                    bin_centres=self.flight_heights.bin_centres,
                    rotor_radius=rotor_radius,
                    tidal_offset=farm.tidal_offset,
                )
                if ModelOption.EXTENDED in options:
                    chord_integral = collision_integral(geometry, self.chord_profile, rotor_fhd.y)
            except DegenerateGeometryError as exc:
                raise DegenerateGeometryError(str(exc), iteration=i) from exc

        inputs = IterationInputs(
            flux_factor=flux,
            prop_crh=float(bird_draw.prop_crh[0]),
            prob_single_collision=p_single,
            prop_operational=prop_operational,
            avoidance_basic=float(bird_draw.avoidance_basic[0]),
            avoidance_extended=float(bird_draw.avoidance_extended[0]),
            lac_factor=lac,
            rotor_fhd=rotor_fhd,
            collision_integral=chord_integral,
        )
        collisions = {option: compute_option(option, inputs, iteration=i) for option in options}

        params = {key: float(values[0]) for key, values in bird_draw.to_frame().items()}
        params.update({key: float(values[0]) for key, values in turbine_draw.to_frame().items()})
        params["p_single_collision"] = p_single
        params["lac_factor"] = lac
        if rotor_fhd is not None:
            params["prop_at_rotor"] = rotor_fhd.prop_at_rotor

        return IterationResult(iteration=i, collisions=collisions, params=params, density=density)


@dataclass
class ScenarioRun:
    """A named scenario together with the simulator that produced its results."""

    name: str
    simulator: CollisionRiskSimulator
    results: CollisionResults
