from __future__ import annotations

from ..application import SimulationApplication


def get_application_service() -> SimulationApplication:
    """
    Provide a SimulationApplication configured for API usage.
    """
    # API responses carry the statistics; reports are not written to disk
    return SimulationApplication(
        save_outputs=False,
        result_builder=None,
        show_progress=False,
    )
