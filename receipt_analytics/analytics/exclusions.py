"""
Offer exclusion window — drop each offer's ramp-up and ramp-down days.

Dates are judged per group (offer), not globally: an offer that launched late
still loses its own first week.
"""
from __future__ import annotations

import pandas as pd

from receipt_analytics.analytics.windows import distinct_dates, edge_dates
from receipt_analytics.config import (
    EXCLUDE_FIRST_DAYS, EXCLUDE_FIRST_MIN_DATES, EXCLUDE_LAST_DAYS, EXCLUDE_LAST_MIN_DATES,
)
from receipt_analytics.data.normalize import is_blank


def excluded_dates_by_group(
    df: pd.DataFrame,
    group_field: str = "offer_name",
    date_field: str = "hit_date",
    exclude_first: bool = True,
    exclude_last: bool = True,
) -> dict[str, list[str]]:
    """Dates removed for each group, ascending. Groups with nothing removed are omitted."""
    if df.empty or group_field not in df.columns or date_field not in df.columns:
        return {}
    if not exclude_first and not exclude_last:
        return {}

    placed = df[~is_blank(df[group_field])]
    result: dict[str, list[str]] = {}
    for group, items in placed.groupby(placed[group_field].astype(str), sort=True):
        dates = distinct_dates(items, date_field)
        edges = edge_dates(
            dates,
            first_n=EXCLUDE_FIRST_DAYS,
            last_n=EXCLUDE_LAST_DAYS,
            min_for_first=EXCLUDE_FIRST_MIN_DATES,
            min_for_last=EXCLUDE_LAST_MIN_DATES,
            take_first=exclude_first,
            take_last=exclude_last,
        )
        if edges:
            result[group] = sorted(edges)
    return result


def exclude_edge_days(
    df: pd.DataFrame,
    group_field: str = "offer_name",
    date_field: str = "hit_date",
    exclude_first: bool = True,
    exclude_last: bool = True,
) -> pd.DataFrame:
    """Remove records on each group's first 7 / last 3 observed dates.

    The first-days cut needs at least 8 distinct dates in the group and the
    last-days cut at least 4. Groups below both thresholds, and records with
    no group, pass through untouched. In a group that does lose dates, its
    undated records go too since they cannot be placed in the window. The
    result may be empty.
    """
    if df.empty or (not exclude_first and not exclude_last):
        return df
    if group_field not in df.columns or date_field not in df.columns:
        return df

    excluded = excluded_dates_by_group(df, group_field, date_field, exclude_first, exclude_last)
    if not excluded:
        return df

    pairs = {(group, date) for group, dates in excluded.items() for date in dates}
    keys = zip(
        df[group_field].astype(str), df[date_field].astype(str),
        is_blank(df[group_field]), is_blank(df[date_field]),
    )
    keep = []
    for group, date, no_group, no_date in keys:
        if no_group:
            keep.append(True)
        elif no_date:
            keep.append(group not in excluded)
        else:
            keep.append((group, date) not in pairs)
    return df[pd.Series(keep, index=df.index, dtype=bool)]
