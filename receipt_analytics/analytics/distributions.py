"""
Distribution analytics — summary metrics, grouped shares, weekday/hour profiles, growth.
"""
from __future__ import annotations

import pandas as pd

from receipt_analytics.analytics.brands import BrandInfo, fallback_display_name
from receipt_analytics.analytics.common import (
    safe_divide, pct_of_total, pct_change, present, value_sum, labelled_keys,
)
from receipt_analytics.analytics.windows import distinct_dates
from receipt_analytics.config import (
    AGE_GROUP_ORDER, DAY_NAMES, UNKNOWN_LABEL, MIN_DATES_FOR_WEEKLY_TREND,
)


# ---------------------------------------------------------------------------
# Summary metrics
# ---------------------------------------------------------------------------

def metrics(df: pd.DataFrame, date_field: str = "receipt_date", value_field: str = "receipt_total") -> dict:
    """Record count, distinct dates, total value, and average records per day."""
    dates = distinct_dates(df, date_field)
    total = len(df)
    return {
        "total_count": total,
        "unique_dates": dates,
        "days_in_range": len(dates),
        "total_value": value_sum(df, value_field),
        "avg_per_day": safe_divide(total, len(dates)),
    }


def growth_metrics(
    current_df: pd.DataFrame,
    comparison_df: pd.DataFrame,
    date_field: str = "receipt_date",
    value_field: str = "receipt_total",
) -> dict:
    """Absolute and percentage growth of the current set over a comparison set.

    Everything is zero when either side is empty.
    """
    zero = {
        "unit_growth": 0,
        "unit_growth_pct": 0.0,
        "value_growth": 0.0,
        "value_growth_pct": 0.0,
        "daily_volume_growth": 0.0,
        "daily_volume_growth_pct": 0.0,
    }
    if current_df.empty or comparison_df.empty:
        return zero

    cur = metrics(current_df, date_field, value_field)
    comp = metrics(comparison_df, date_field, value_field)

    unit_growth = cur["total_count"] - comp["total_count"]
    value_growth = cur["total_value"] - comp["total_value"]
    daily_growth = cur["avg_per_day"] - comp["avg_per_day"]
    return {
        "unit_growth": unit_growth,
        "unit_growth_pct": pct_change(cur["total_count"], comp["total_count"]) or 0.0,
        "value_growth": value_growth,
        "value_growth_pct": pct_change(cur["total_value"], comp["total_value"]) or 0.0,
        "daily_volume_growth": daily_growth,
        "daily_volume_growth_pct": pct_change(cur["avg_per_day"], comp["avg_per_day"]) or 0.0,
    }


# ---------------------------------------------------------------------------
# Grouped distributions
# ---------------------------------------------------------------------------

def _grouped(df: pd.DataFrame, field: str, value_field: str = "receipt_total") -> pd.DataFrame:
    """name / count / value per distinct field value, blanks as "Unknown"."""
    if field in df.columns:
        keys = labelled_keys(df[field])
    else:
        keys = pd.Series(UNKNOWN_LABEL, index=df.index)
    if value_field in df.columns:
        values = pd.to_numeric(df[value_field], errors="coerce").fillna(0).astype(float)
    else:
        values = pd.Series(0.0, index=df.index)

    frame = pd.DataFrame({"name": keys.values, "value": values.values})
    agg = frame.groupby("name").agg(
        count=("value", "size"),
        value=("value", "sum"),
    ).reset_index()
    return agg.sort_values(["count", "name"], ascending=[False, True])


def distribution_by(df: pd.DataFrame, field: str) -> list[dict]:
    """Share of records per value of ``field``, largest first.

    Every record lands in exactly one bucket (blank values under "Unknown"),
    so percentages sum to 100.
    """
    if df.empty:
        return []
    total = len(df)
    agg = _grouped(df, field)
    return [
        {
            "name": str(name),
            "count": int(count),
            "percentage": pct_of_total(int(count), total),
        }
        for name, count in zip(agg["name"], agg["count"])
    ]


def retailer_distribution(df: pd.DataFrame) -> list[dict]:
    return distribution_by(df, "chain")


def product_distribution(df: pd.DataFrame, brand_mapping: dict[str, BrandInfo] | None = None) -> list[dict]:
    """Product shares with brand-normalized display labels.

    When the mapping leaves a product's label unchanged and the name has three
    or more words, the leading word(s) are stripped so long un-branded names
    still read short.
    """
    if df.empty:
        return []
    brand_mapping = brand_mapping or {}
    total = len(df)
    agg = _grouped(df, "product_name")

    rows = []
    for name, count, value in zip(agg["name"], agg["count"], agg["value"]):
        product = str(name)
        info = brand_mapping.get(product)
        display = info.display_name if info is not None and info.display_name else product
        if display == product and product != UNKNOWN_LABEL:
            display = fallback_display_name(product)
        rows.append({
            "name": product,
            "display_name": display,
            "brand_name": info.brand_prefix if info is not None else "",
            "count": int(count),
            "percentage": pct_of_total(int(count), total),
            "value": float(value),
        })
    return rows


def sort_age_groups(rows: list[dict], key: str = "name") -> list[dict]:
    """Order rows by the canonical age-group sequence; unknown groups last, alphabetically."""
    def _rank(row):
        group = row[key]
        if group in AGE_GROUP_ORDER:
            return (0, AGE_GROUP_ORDER.index(group), "")
        return (1, 0, str(group))
    return sorted(rows, key=_rank)


def demographic_distribution(df: pd.DataFrame, field: str, ordered: bool = False) -> list[dict]:
    """Share of records per demographic value.

    Records without the field are left out of every bucket but still count in
    the denominator, so percentages can sum to less than 100.
    """
    if df.empty:
        return []
    total = len(df)
    known = present(df, field)
    if known.empty:
        return []
    agg = _grouped(known, field)
    rows = [
        {
            "name": str(name),
            "count": int(count),
            "percentage": pct_of_total(int(count), total),
        }
        for name, count in zip(agg["name"], agg["count"])
    ]
    if ordered and field == "age_group":
        return sort_age_groups(rows)
    return rows


def rank_distribution(df: pd.DataFrame, field: str = "rank_for_viewer") -> list[dict]:
    """Share of records per display rank, in ascending rank order."""
    if df.empty:
        return []
    total = len(df)
    known = present(df, field)
    if known.empty:
        return []
    ranks = pd.to_numeric(known[field], errors="coerce").dropna().astype(int)
    counts = ranks.value_counts().sort_index()
    return [
        {"name": str(rank), "count": int(count), "percentage": pct_of_total(int(count), total)}
        for rank, count in counts.items()
    ]


# ---------------------------------------------------------------------------
# Weekday / hour profiles
# ---------------------------------------------------------------------------

def _position_counts(df: pd.DataFrame, field: str, size: int) -> list[int]:
    if df.empty or field not in df.columns:
        return [0] * size
    positions = pd.to_numeric(df[field], errors="coerce").dropna().astype(int)
    counts = positions.value_counts()
    return [int(counts.get(i, 0)) for i in range(size)]


def day_of_week_distribution(df: pd.DataFrame) -> list[dict]:
    """Seven buckets, Sunday first, zero-filled."""
    if df.empty:
        return []
    total = len(df)
    counts = _position_counts(df, "day_of_week", 7)
    return [
        {
            "name": name,
            "short_name": name[:3],
            "count": counts[i],
            "percentage": pct_of_total(counts[i], total),
        }
        for i, name in enumerate(DAY_NAMES)
    ]


def hour_of_day_distribution(df: pd.DataFrame) -> list[dict]:
    """Twenty-four hourly buckets, zero-filled."""
    if df.empty:
        return []
    total = len(df)
    counts = _position_counts(df, "hour_of_day", 24)
    return [
        {
            "hour": hour,
            "name": f"{hour}:00",
            "count": counts[hour],
            "percentage": pct_of_total(counts[hour], total),
        }
        for hour in range(24)
    ]


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

def key_insights(df: pd.DataFrame, date_field: str = "receipt_date") -> list[dict]:
    """Top retailer, best weekday, and last-7-days trend."""
    if df.empty:
        return []
    insights = []

    retailers = retailer_distribution(df)
    if retailers:
        top = retailers[0]
        insights.append({
            "type": "retailer",
            "text": f"{top['name']} is your top retailer with {top['percentage']:.1f}% of redemptions",
            "data": f"{top['percentage']:.1f}%",
        })

    days = day_of_week_distribution(df)
    if days and any(d["count"] for d in days):
        best = max(days, key=lambda d: d["count"])
        insights.append({
            "type": "day",
            "text": f"{best['short_name']} is your best performing day with {best['percentage']:.1f}% of redemptions",
            "data": f"{best['percentage']:.1f}%",
        })

    dates = distinct_dates(df, date_field)
    if len(dates) >= MIN_DATES_FOR_WEEKLY_TREND:
        last7 = set(dates[-7:])
        prev7 = set(dates[-14:-7])
        day_keys = df[date_field].astype(str)
        last_count = int(day_keys.isin(list(last7)).sum())
        prev_count = int(day_keys.isin(list(prev7)).sum())
        change = pct_change(last_count, prev_count)
        if change is not None:
            direction = "up" if last_count >= prev_count else "down"
            insights.append({
                "type": "trend",
                "text": f"Sales are {direction} {abs(change):.1f}% in the last 7 days",
                "data": f"{abs(change):.1f}%",
                "status": "positive" if direction == "up" else "negative",
            })

    return insights
