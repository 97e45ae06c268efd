from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np

MONTH_LENGTHS: List[int] = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
"""Number of days in each month (January through December)."""

MONTH_LABELS: List[str] = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]
"""Month column labels shared by every input and output table."""

N_MONTHS = len(MONTH_LABELS)


def mid_month_days() -> np.ndarray:
    """
    Returns the day of year (1-based) at the mid-point of each month.
    """
    starts = np.concatenate(([0], np.cumsum(MONTH_LENGTHS)[:-1]))
    lengths = np.asarray(MONTH_LENGTHS)
    return starts + (lengths + 1) // 2


def month_indices(labels: Sequence[str]) -> List[int]:
    """
    Map month labels (case-insensitive, 3-letter prefix) to 0-based indices.

    Raises:
        ValueError: If a label does not identify a month.
    """
    lookup: Dict[str, int] = {label.lower(): idx for idx, label in enumerate(MONTH_LABELS)}
    indices = []
    for label in labels:
        key = str(label).strip()[:3].lower()
        if key not in lookup:
            raise ValueError(f"Unknown month label: {label!r}")
        indices.append(lookup[key])
    return indices
