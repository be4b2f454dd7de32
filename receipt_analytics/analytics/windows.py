"""
Shared group-by-date and first/last-N windowing primitives.

Used by the daily time-series builder and by the per-offer exclusion window,
so "which dates does this set span, and which are at its edges" is answered
in one place.
"""
from __future__ import annotations

import pandas as pd

from receipt_analytics.data.normalize import is_blank


def distinct_dates(df: pd.DataFrame, date_field: str) -> list[str]:
    """Sorted distinct non-blank ISO dates present in ``date_field``."""
    if df.empty or date_field not in df.columns:
        return []
    dates = df.loc[~is_blank(df[date_field]), date_field].astype(str)
    return sorted(dates.unique().tolist())


def edge_dates(
    dates: list[str],
    first_n: int,
    last_n: int,
    min_for_first: int,
    min_for_last: int,
    take_first: bool = True,
    take_last: bool = True,
) -> set[str]:
    """Dates at the start/end of an ascending date list.

    The first ``first_n`` dates are returned only when at least
    ``min_for_first`` distinct dates exist, likewise the last ``last_n``.
    The two edges may overlap; the result is their union.
    """
    edges: set[str] = set()
    if take_first and len(dates) >= min_for_first:
        edges.update(dates[:first_n])
    if take_last and last_n > 0 and len(dates) >= min_for_last:
        edges.update(dates[-last_n:])
    return edges


def bucket_counts(keys: pd.Series, values: pd.Series | None = None) -> pd.DataFrame:
    """Count rows (and sum ``values``) per key, keys sorted ascending.

    Rows with a blank key are dropped. Returns columns ``key``, ``count``,
    ``sum_value``.
    """
    mask = ~is_blank(keys)
    frame = pd.DataFrame({
        "key": keys[mask].astype(str),
        "value": (
            pd.to_numeric(values[mask], errors="coerce").fillna(0).astype(float)
            if values is not None else 0.0
        ),
    })
    if frame.empty:
        return pd.DataFrame({"key": pd.Series(dtype=str), "count": pd.Series(dtype=int), "sum_value": pd.Series(dtype=float)})

    grouped = frame.groupby("key", sort=True).agg(
        count=("value", "size"),
        sum_value=("value", "sum"),
    ).reset_index()
    return grouped


def count_by_date(df: pd.DataFrame, date_field: str, value_field: str | None = None) -> pd.DataFrame:
    """Per-date record counts and value sums in chronological order."""
    if df.empty or date_field not in df.columns:
        return bucket_counts(pd.Series(dtype=str))
    values = df[value_field] if value_field and value_field in df.columns else None
    return bucket_counts(df[date_field], values)
