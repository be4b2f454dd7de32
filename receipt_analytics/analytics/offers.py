"""
Offer analytics — hit counts per offer, per-day averages, time profiles.
"""
from __future__ import annotations

import pandas as pd

from receipt_analytics.analytics.common import safe_divide, pct_of_total, present
from receipt_analytics.analytics.distributions import day_of_week_distribution, hour_of_day_distribution
from receipt_analytics.analytics.windows import count_by_date, distinct_dates
from receipt_analytics.data.schemas import ALL, as_selection


def offer_distribution(df: pd.DataFrame) -> list[dict]:
    """Hits per offer with share and average hits per active day, largest first."""
    if df.empty:
        return []
    total = len(df)
    named = present(df, "offer_name")
    rows = []
    for offer, items in named.groupby(named["offer_name"].astype(str)):
        days = len(distinct_dates(items, "hit_date"))
        rows.append({
            "name": offer,
            "count": len(items),
            "percentage": pct_of_total(len(items), total),
            "avg_hits_per_day": round(safe_divide(len(items), days), 2),
        })
    return sorted(rows, key=lambda r: (-r["count"], r["name"]))


def offer_metrics(df: pd.DataFrame, selected_offers=ALL) -> dict:
    """Total hits, active days, and hits/day; per-offer detail when offers are selected."""
    if df.empty:
        return {"total_hits": 0, "period_days": 0, "avg_hits_per_day": 0.0, "hits_per_offer": {}}

    selected_offers = as_selection(selected_offers)
    days = len(distinct_dates(df, "hit_date"))
    hits_per_offer = {}
    if selected_offers != ALL:
        names = df["offer_name"].astype(str) if "offer_name" in df.columns else pd.Series("", index=df.index)
        for offer in sorted(selected_offers):
            items = df[names == offer]
            offer_days = len(distinct_dates(items, "hit_date"))
            hits_per_offer[offer] = {
                "total_hits": len(items),
                "days": offer_days,
                "avg_per_day": round(safe_divide(len(items), offer_days), 2),
            }

    return {
        "total_hits": len(df),
        "period_days": days,
        "avg_hits_per_day": round(safe_divide(len(df), days), 2),
        "hits_per_offer": hits_per_offer,
    }


def offer_time_distribution(df: pd.DataFrame) -> dict:
    """Hour-of-day and weekday profiles plus a daily hit trend."""
    if df.empty:
        return {"hour_data": [], "day_data": [], "trend_data": []}
    daily = count_by_date(df, "hit_date")
    return {
        "hour_data": hour_of_day_distribution(df),
        "day_data": day_of_week_distribution(df),
        "trend_data": [
            {"date": key, "count": int(n)} for key, n in zip(daily["key"], daily["count"])
        ],
    }
