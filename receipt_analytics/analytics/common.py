"""
Safe math and grouping helpers used across all analytics modules.
"""
from __future__ import annotations

import math

import numpy as np
import pandas as pd

from receipt_analytics.config import UNKNOWN_LABEL
from receipt_analytics.data.normalize import is_blank


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide safely, returning default if denominator is zero or NaN."""
    if denominator == 0 or pd.isna(denominator):
        return default
    result = numerator / denominator
    return default if pd.isna(result) else result


def pct_of_total(part: float, total: float) -> float:
    """Percentage of total."""
    return safe_divide(part, total) * 100


def pct_change(current: float, previous: float) -> float | None:
    """Percentage change from previous to current. Returns None if previous is 0."""
    if previous == 0 or pd.isna(previous):
        return None
    return (current - previous) / abs(previous) * 100


def present(df: pd.DataFrame, col: str) -> pd.DataFrame:
    """Rows where ``col`` exists and is non-blank."""
    if col not in df.columns:
        return df.iloc[0:0]
    return df[~is_blank(df[col])]


def value_sum(df: pd.DataFrame, col: str = "receipt_total") -> float:
    """Sum of a numeric column treating missing values as 0."""
    if df.empty or col not in df.columns:
        return 0.0
    return float(pd.to_numeric(df[col], errors="coerce").fillna(0).sum())


def labelled_keys(series: pd.Series) -> pd.Series:
    """String keys for grouping; blanks become ``"Unknown"``."""
    keys = series.astype("string").str.strip()
    return keys.mask(is_blank(series), UNKNOWN_LABEL).astype(str)


def sanitize_for_json(obj):
    """Recursively convert numpy/pandas types to native Python for JSON serialization."""
    if isinstance(obj, dict):
        clean = {}
        for k, v in obj.items():
            if k is None:
                continue
            if isinstance(k, float) and (math.isnan(k) or math.isinf(k)):
                continue
            clean[str(k) if not isinstance(k, str) else k] = sanitize_for_json(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, (set, frozenset)):
        return sorted(sanitize_for_json(v) for v in obj)
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        v = float(obj)
        return 0.0 if (math.isnan(v) or math.isinf(v)) else v
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.ndarray):
        return sanitize_for_json(obj.tolist())
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return sanitize_for_json(obj.to_dict())
    if pd.api.types.is_scalar(obj) and pd.isna(obj):
        return None
    return obj
