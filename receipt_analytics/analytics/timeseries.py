"""
Time-series analytics — hourly/daily/weekly/monthly buckets and moving-average trend.
"""
from __future__ import annotations

import pandas as pd

from receipt_analytics.analytics.common import safe_divide
from receipt_analytics.analytics.windows import bucket_counts, count_by_date
from receipt_analytics.config import TIME_GRANULARITIES, TREND_WINDOW


def _points(buckets: pd.DataFrame, label_for) -> list[dict]:
    return [
        {
            "key": key,
            "label": label_for(key),
            "count": int(count),
            "sum_value": float(total),
            "avg_value": safe_divide(float(total), int(count)),
        }
        for key, count, total in zip(buckets["key"], buckets["count"], buckets["sum_value"])
    ]


def _values(df: pd.DataFrame, value_field: str) -> pd.Series | None:
    return df[value_field] if value_field in df.columns else None


def _hourly(df: pd.DataFrame, value_field: str) -> list[dict]:
    if "hour_of_day" in df.columns:
        hours = pd.to_numeric(df["hour_of_day"], errors="coerce")
    else:
        hours = pd.Series(float("nan"), index=df.index)
    values = _values(df, value_field)
    values = (
        pd.to_numeric(values, errors="coerce").fillna(0).astype(float)
        if values is not None else pd.Series(0.0, index=df.index)
    )
    frame = pd.DataFrame({"hour": hours, "value": values}).dropna(subset=["hour"])
    frame["hour"] = frame["hour"].astype(int)
    grouped = frame.groupby("hour")["value"].agg(["size", "sum"])

    points = []
    for hour in range(24):
        count = int(grouped["size"].get(hour, 0))
        total = float(grouped["sum"].get(hour, 0.0))
        points.append({
            "key": hour,
            "label": f"{hour}:00",
            "count": count,
            "sum_value": total,
            "avg_value": safe_divide(total, count),
        })
    return points


def week_start(df: pd.DataFrame, date_field: str = "receipt_date") -> pd.Series:
    """ISO date of the Sunday beginning each record's week."""
    dates = pd.to_datetime(df[date_field], errors="coerce", format="%Y-%m-%d")
    if "day_of_week" in df.columns:
        dow = pd.to_numeric(df["day_of_week"], errors="coerce").astype(float)
    else:
        dow = ((dates.dt.dayofweek + 1) % 7).astype(float)
    anchors = dates - pd.to_timedelta(dow, unit="D")
    return anchors.dt.strftime("%Y-%m-%d")


def week_label(anchor: str) -> str:
    """'Jan 7 – Jan 13' for the week starting on ``anchor``."""
    start = pd.Timestamp(anchor)
    end = start + pd.Timedelta(days=6)
    return f"{start:%b} {start.day} – {end:%b} {end.day}"


def time_series(
    df: pd.DataFrame,
    granularity: str = "daily",
    date_field: str = "receipt_date",
    value_field: str = "receipt_total",
) -> list[dict]:
    """Records bucketed by hour of day, day, week (Sunday-anchored), or month.

    Hourly output always has 24 points ordered by hour; the others hold only
    buckets with data, ordered by their ISO key.
    """
    if granularity not in TIME_GRANULARITIES:
        raise ValueError(f"Unknown granularity: {granularity!r} (expected one of {TIME_GRANULARITIES})")
    if df.empty:
        return []

    if granularity == "hourly":
        return _hourly(df, value_field)

    if granularity == "daily":
        if date_field not in df.columns:
            return []
        return _points(count_by_date(df, date_field, value_field), lambda k: k)

    if granularity == "weekly":
        if date_field not in df.columns:
            return []
        return _points(bucket_counts(week_start(df, date_field), _values(df, value_field)), week_label)

    if "month" not in df.columns:
        return []
    return _points(bucket_counts(df["month"], _values(df, value_field)), lambda k: k)


def trend_line(series: list[dict], window: int = TREND_WINDOW) -> list[float | None]:
    """Trailing moving average of ``count``.

    Output has the same length as ``series``; the first ``window - 1`` entries
    are None. The series must already be in chronological order.
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    counts = [p["count"] for p in series]
    trend: list[float | None] = []
    running = 0
    for i, count in enumerate(counts):
        running += count
        if i >= window:
            running -= counts[i - window]
        trend.append(running / window if i >= window - 1 else None)
    return trend


def with_trend(series: list[dict], window: int = TREND_WINDOW) -> list[dict]:
    """Copies of the series points carrying a ``trend`` overlay value."""
    return [{**point, "trend": t} for point, t in zip(series, trend_line(series, window))]
