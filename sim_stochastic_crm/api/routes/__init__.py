"""
API route modules for the collision risk application.

- simulation: Direct simulation execution (analysis, batch, daylight)

All routers are prefixed with /api when included in the main application.
"""

from __future__ import annotations

from .simulation import router as simulation_router

__all__ = [
    "simulation_router",
]
