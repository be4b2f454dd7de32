"""
Record filtering — product / retailer / date-window predicates over a record frame.
"""
from __future__ import annotations

import pandas as pd

from receipt_analytics.data.normalize import is_blank
from receipt_analytics.data.schemas import ALL, FilterSpec, InvalidFilterSpec, WindowKind


def _selection_mask(df: pd.DataFrame, field: str, selection) -> pd.Series:
    if selection == ALL:
        return pd.Series(True, index=df.index)
    if field not in df.columns:
        return pd.Series(False, index=df.index)
    col = df[field]
    return (~is_blank(col)) & col.astype(str).isin(list(selection))


def _window_mask(df: pd.DataFrame, spec: FilterSpec, date_field: str) -> pd.Series:
    window = spec.date_window
    if window.kind == WindowKind.ALL:
        return pd.Series(True, index=df.index)

    if window.kind == WindowKind.MONTH:
        if "month" not in df.columns:
            return pd.Series(False, index=df.index)
        months = df["month"].astype("string")
        return (months == window.month).fillna(False).astype(bool)

    if window.kind == WindowKind.CUSTOM:
        if date_field not in df.columns:
            return pd.Series(False, index=df.index)
        # ISO dates: lexical order == chronological order
        dates = df[date_field].astype("string")
        in_range = (dates >= window.start) & (dates <= window.end)
        return in_range.fillna(False).astype(bool)

    raise InvalidFilterSpec(f"Unsupported date window kind: {window.kind!r}")


def apply_filter(
    df: pd.DataFrame,
    spec: FilterSpec | None,
    product_field: str = "product_name",
    retailer_field: str = "chain",
    date_field: str = "receipt_date",
) -> pd.DataFrame:
    """Rows matching every predicate of ``spec``.

    Returns a filtered view; the input frame is never modified. ``None`` means
    no filtering.
    """
    if spec is None:
        return df
    if not isinstance(spec, FilterSpec):
        raise InvalidFilterSpec(f"Expected FilterSpec, got {type(spec).__name__}")
    if df.empty:
        return df

    mask = (
        _selection_mask(df, product_field, spec.products)
        & _selection_mask(df, retailer_field, spec.retailers)
        & _window_mask(df, spec, date_field)
    )
    return df[mask]


def filter_options(
    df: pd.DataFrame,
    product_field: str = "product_name",
    retailer_field: str = "chain",
) -> dict[str, list[str]]:
    """Sorted distinct values available for each filter control."""

    def _distinct(col: str) -> list[str]:
        if df.empty or col not in df.columns:
            return []
        values = df.loc[~is_blank(df[col]), col].astype(str)
        return sorted(values.unique().tolist())

    return {
        "products": _distinct(product_field),
        "retailers": _distinct(retailer_field),
        "months": _distinct("month"),
    }
