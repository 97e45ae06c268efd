"""
Pydantic schemas for API request/response validation.

Example:
    ```python
    # Both import styles work:
    from sim_stochastic_crm.api.schemas import AnalysisRequest
    from sim_stochastic_crm.api.schemas.simulation import AnalysisRequest
    ```
"""

from __future__ import annotations

from .simulation import (
    AnalysisRequest,
    AnalysisResponse,
    BatchRequest,
    BatchResponse,
    DaylightResponse,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "BatchRequest",
    "BatchResponse",
    "DaylightResponse",
]
