"""
Dashboard analytics — compose distributions, time series, matrices and insights.

Sales Overview, Offer Insights, Survey Responses.
"""
from __future__ import annotations

from typing import Optional

from receipt_analytics.analytics.common import sanitize_for_json
from receipt_analytics.analytics.crosstab import (
    available_questions, find_repurchase_question, product_retailer_matrix,
    question_text, response_age_matrix, response_distribution,
)
from receipt_analytics.analytics.distributions import (
    demographic_distribution, growth_metrics, key_insights, metrics,
    product_distribution, rank_distribution, retailer_distribution,
)
from receipt_analytics.analytics.exclusions import exclude_edge_days, excluded_dates_by_group
from receipt_analytics.analytics.offers import offer_distribution, offer_metrics, offer_time_distribution
from receipt_analytics.analytics.timeseries import time_series, with_trend
from receipt_analytics.data.schemas import ALL, FilterSpec
from receipt_analytics.data.store import DataStore


def _label(spec: FilterSpec | None) -> str:
    return spec.label if spec else "All Time"


def _summary_metrics(df) -> dict:
    m = metrics(df)
    return {
        "total_count": m["total_count"],
        "days_in_range": m["days_in_range"],
        "total_value": m["total_value"],
        "avg_per_day": round(m["avg_per_day"], 2),
    }


# ---------------------------------------------------------------------------
# Sales Overview
# ---------------------------------------------------------------------------

def sales_dashboard(
    store: DataStore,
    primary: FilterSpec | None = None,
    comparison: FilterSpec | None = None,
    granularity: str = "daily",
) -> dict:
    """Metrics, distributions, time series with trend, matrix and insights.

    The comparison filter is evaluated independently of the primary one; its
    block is only present when a comparison is given.
    """
    sales = store.get_sales(primary)
    label = _label(primary)

    if sales.empty:
        result = {"period_label": label, "empty": True, "metrics": _summary_metrics(sales)}
        if comparison is not None:
            result["comparison"] = _comparison_block(store, sales, comparison)
        return sanitize_for_json(result)

    series = with_trend(time_series(sales, granularity))

    result = {
        "period_label": label,
        "date_range": store.date_range(primary),
        "granularity": granularity,
        "metrics": _summary_metrics(sales),
        "retailers": retailer_distribution(sales),
        "products": product_distribution(sales, store.brand_mapping),
        "brands": store.brand_list,
        "time_series": series,
        "matrix": {
            "by_product": product_retailer_matrix(sales, relative_to="row"),
            "by_retailer": product_retailer_matrix(sales, relative_to="column"),
        },
        "insights": key_insights(sales),
    }
    if comparison is not None:
        result["comparison"] = _comparison_block(store, sales, comparison)
    return sanitize_for_json(result)


def _comparison_block(store: DataStore, sales, comparison: FilterSpec) -> dict:
    comp = store.get_sales(comparison)
    return {
        "period_label": _label(comparison),
        "date_range": store.date_range(comparison),
        "metrics": _summary_metrics(comp),
        "growth": growth_metrics(sales, comp),
    }


# ---------------------------------------------------------------------------
# Offer Insights
# ---------------------------------------------------------------------------

def offers_dashboard(
    store: DataStore,
    spec: FilterSpec | None = None,
    exclude_first: bool = True,
    exclude_last: bool = True,
) -> dict:
    """Offer-hit metrics after trimming each offer's first week / last days."""
    offers = store.get_offers(spec)
    label = _label(spec)
    excluded = excluded_dates_by_group(offers, exclude_first=exclude_first, exclude_last=exclude_last)
    hits = exclude_edge_days(offers, exclude_first=exclude_first, exclude_last=exclude_last)

    if hits.empty:
        return sanitize_for_json({
            "period_label": label,
            "empty": True,
            "excluded_dates": excluded,
            "metrics": offer_metrics(hits),
        })

    selected = spec.products if spec else ALL
    return sanitize_for_json({
        "period_label": label,
        "exclude_first": exclude_first,
        "exclude_last": exclude_last,
        "excluded_dates": excluded,
        "metrics": offer_metrics(hits, selected),
        "offers": offer_distribution(hits),
        "gender": demographic_distribution(hits, "gender"),
        "age_groups": demographic_distribution(hits, "age_group", ordered=True),
        "ranks": rank_distribution(hits),
        "time": offer_time_distribution(hits),
    })


# ---------------------------------------------------------------------------
# Survey Responses
# ---------------------------------------------------------------------------

def survey_summary(
    store: DataStore,
    spec: FilterSpec | None = None,
    question: Optional[str] = None,
    relative_to: str = "column",
) -> dict:
    """Answer shares and answer × age-group matrix for one survey question.

    Defaults to the repurchase question when none is named.
    """
    sales = store.get_sales(spec)
    questions = available_questions(sales)
    number = question or find_repurchase_question(sales)
    if number is None or number not in questions:
        return sanitize_for_json({"period_label": _label(spec), "questions": questions, "empty": True})

    return sanitize_for_json({
        "period_label": _label(spec),
        "questions": [{"number": n, "text": question_text(sales, n)} for n in questions],
        "question": number,
        "question_text": question_text(sales, number),
        "responses": response_distribution(sales, number),
        "by_age_group": response_age_matrix(sales, number, relative_to=relative_to),
    })
