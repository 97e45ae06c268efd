from __future__ import annotations

from typing import Dict, Mapping, Sequence

import numpy as np
import pandas as pd

from .calendar_utils import MONTH_LABELS, month_indices
from .simulation.monte_carlo import CollisionResults

DEFAULT_SEASONS: Dict[str, Sequence[str]] = {
    "Winter": ("Dec", "Jan", "Feb"),
    "Spring": ("Mar", "Apr", "May"),
    "Summer": ("Jun", "Jul", "Aug"),
    "Autumn": ("Sep", "Oct", "Nov"),
}

STAT_COLUMNS = ["mean", "sd", "cv", "median", "iqr", "p2_5", "p97_5"]


def _describe(samples: pd.DataFrame) -> pd.DataFrame:
    """
    Column-wise statistics of Monte Carlo samples.

    The coefficient of variation is reported in percent and is NaN when the
    mean is zero.
    """
    mean = samples.mean(axis=0)
    sd = samples.std(axis=0, ddof=1) if len(samples) > 1 else samples.std(axis=0, ddof=0)
    q = samples.quantile([0.025, 0.25, 0.5, 0.75, 0.975], axis=0)
    with np.errstate(divide="ignore", invalid="ignore"):
        cv = np.where(mean != 0, sd / mean * 100.0, np.nan)
    return pd.DataFrame(
        {
            "mean": mean,
            "sd": sd,
            "cv": cv,
            "median": q.loc[0.5],
            "iqr": q.loc[0.75] - q.loc[0.25],
            "p2_5": q.loc[0.025],
            "p97_5": q.loc[0.975],
        },
        index=samples.columns,
    )[STAT_COLUMNS]


def summarise_monthly(collisions: pd.DataFrame) -> pd.DataFrame:
    """
    Statistics of monthly collisions across iterations.

    Args:
        collisions: ``(n_iter x 12)`` collisions of one model option.

    Returns:
        DataFrame indexed by month (Jan..Dec) with columns mean, sd, cv,
        median, iqr, p2_5, p97_5.
    """
    summary = _describe(collisions[MONTH_LABELS])
    summary.index.name = "month"
    return summary


def summarise_seasons(
    collisions: pd.DataFrame,
    seasons: Mapping[str, Sequence[str]] | None = None,
) -> pd.DataFrame:
    """
    Statistics of collisions summed over seasons.

    Args:
        collisions: ``(n_iter x 12)`` collisions of one model option.
        seasons: Season name to month labels. Defaults to meteorological
            seasons.

    Returns:
        DataFrame indexed by season with the same columns as
        :func:`summarise_monthly`.
    """
    seasons = DEFAULT_SEASONS if seasons is None else seasons
    totals = pd.DataFrame(
        {
            name: collisions.iloc[:, month_indices(months)].sum(axis=1)
            for name, months in seasons.items()
        }
    )
    summary = _describe(totals)
    summary.index.name = "season"
    return summary


def summarise_annual(results: CollisionResults) -> pd.DataFrame:
    """
    Statistics of annual collisions, one row per model option.
    """
    summary = _describe(results.annual_totals())
    summary.index.name = "option"
    return summary


def summary_to_dict(summary: pd.DataFrame) -> Dict[str, Dict[str, float | None]]:
    """JSON-ready mapping ``row label -> {statistic: value}`` (NaN becomes None)."""
    payload: Dict[str, Dict[str, float | None]] = {}
    for label, row in summary.iterrows():
        payload[str(label)] = {
            column: (None if pd.isna(value) else float(value)) for column, value in row.items()
        }
    return payload
