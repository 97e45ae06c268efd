"""
Direct simulation execution API endpoints.

This module provides endpoints for executing collision risk simulations
with inline scenario configurations.

Endpoints:
- POST /analysis: Single-scenario Monte Carlo collision estimate
- POST /batch: Several scenarios run in sequence and compared
- GET /daylight: Monthly day/night hours at a latitude

Engine errors (invalid parameters, missing flight height data, degenerate
geometry) are reported as HTTP 400 with the error message as detail.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ...application import SimulationApplication
from ...simulation.errors import CollisionModelError
from .. import dependencies
from ..schemas import simulation as sim_schemas

router = APIRouter(prefix="/api", tags=["simulation"])

ENGINE_ERRORS = (CollisionModelError, ValueError, FileNotFoundError)


@router.post("/analysis", response_model=sim_schemas.AnalysisResponse)
def trigger_analysis(
    payload: sim_schemas.AnalysisRequest | None = None,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.AnalysisResponse:
    """
    Execute a single-scenario Monte Carlo collision risk analysis.

    Every iteration samples species, turbine and density parameters and
    evaluates the requested Band model options for the twelve months.

    Args:
        payload: Analysis request with optional scenario configuration,
            iteration count, seed and model options. If None or scenario is
            None, the bundled default scenario is used.
        app_service: Simulation application service (dependency injected).

    Returns:
        AnalysisResponse with annual, monthly and seasonal statistics per
        model option.

    Raises:
        HTTPException: 400 if the scenario is invalid or the simulation
            cannot be evaluated.

    Example:
        ```python
        # POST /api/analysis
        {"n_iter": 200, "seed": 42, "model_options": [1, 3]}

        # Response (abridged)
        {
            "scenario": "kittiwake_offshore_5mw",
            "model_options": [1, 3],
            "annual": {"option_1": {"mean": 31.2, "sd": 9.8, ...}, ...},
            ...
        }
        ```

    Notes:
        - Request values override the scenario's ``simulation`` section
        - Same scenario and seed give identical results
        - Computation time scales linearly with n_iter
    """
    payload = payload or sim_schemas.AnalysisRequest()
    try:
        summary = app_service.run_analysis(
            n_iter=payload.n_iter,
            seed=payload.seed,
            model_options=payload.model_options,
            scenario_data=payload.scenario,
            seasons=payload.seasons,
        )
    except ENGINE_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return sim_schemas.AnalysisResponse(**summary)


@router.post("/batch", response_model=sim_schemas.BatchResponse)
def trigger_batch(
    payload: sim_schemas.BatchRequest,
    app_service: SimulationApplication = Depends(dependencies.get_application_service),
) -> sim_schemas.BatchResponse:
    """
    Run several scenarios one after the other.

    Scenarios are executed sequentially with the same overrides; results
    are returned in request order.

    Raises:
        HTTPException: 400 if any scenario fails.
    """
    try:
        summary = app_service.run_batch(
            scenarios=payload.scenarios,
            batch_name=payload.batch_name,
            n_iter=payload.n_iter,
            seed=payload.seed,
            model_options=payload.model_options,
        )
    except ENGINE_ERRORS as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return sim_schemas.BatchResponse(**summary)


@router.get("/daylight", response_model=sim_schemas.DaylightResponse)
def get_daylight(
    latitude: float = Query(..., ge=-90.0, le=90.0, description="Latitudine in gradi decimali"),
) -> sim_schemas.DaylightResponse:
    """
    Monthly day and night hours at a latitude.
    """
    return sim_schemas.DaylightResponse(**SimulationApplication.daylight(latitude))
