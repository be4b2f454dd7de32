"""
Column aliasing, value cleaning, and derived date fields for sales and offer records.
"""
from __future__ import annotations

import re

import pandas as pd

from receipt_analytics.config import (
    SALES_COLUMN_MAP, OFFER_COLUMN_MAP, SALES_REQUIRED, OFFER_REQUIRED, AGE_GROUP_ALIASES,
)


# ---------------------------------------------------------------------------
# Column normalisation
# ---------------------------------------------------------------------------

def _canonical_header(col) -> str:
    return re.sub(r"\s+", "_", str(col).strip().lower())


def rename_aliases(df: pd.DataFrame, column_map: dict[str, str]) -> pd.DataFrame:
    """Lower-case headers and rename known aliases to internal names.

    An alias is only renamed when its target column is not already present,
    so an export carrying both ``date`` and ``receipt_date`` keeps the latter.
    """
    df = df.rename(columns=_canonical_header)
    renames: dict[str, str] = {}
    for col in df.columns:
        target = column_map.get(col)
        if target and target not in df.columns and target not in renames.values():
            renames[col] = target
    return df.rename(columns=renames)


def missing_required(df: pd.DataFrame, required: list[str]) -> list[str]:
    """Required columns absent from the frame."""
    return [c for c in required if c not in df.columns]


# ---------------------------------------------------------------------------
# Value cleaning
# ---------------------------------------------------------------------------

def clean_text(series: pd.Series) -> pd.Series:
    """Trim, collapse internal whitespace, drop surrounding quotes; blanks → NA."""
    cleaned = (
        series.astype("string")
        .str.strip()
        .str.replace(r"\s+", " ", regex=True)
        .str.replace(r'^"|"$', "", regex=True)
    )
    blank = (cleaned.fillna("") == "").astype(bool)
    return cleaned.mask(blank, pd.NA)


def clean_numeric(series: pd.Series) -> pd.Series:
    """Strip currency symbols and thousands separators → float (NaN if unparseable)."""
    if pd.api.types.is_numeric_dtype(series):
        return series.astype(float)
    stripped = series.astype("string").str.replace(r"[^\d.\-]", "", regex=True)
    return pd.to_numeric(stripped, errors="coerce").astype(float)


def parse_timestamps(series: pd.Series) -> pd.Series:
    """Parse heterogeneous date strings; unparseable values become NaT."""
    try:
        parsed = pd.to_datetime(series, errors="coerce", format="mixed")
    except ValueError:
        # Mixed tz-aware / naive values
        parsed = pd.to_datetime(series, errors="coerce", format="mixed", utc=True)
    if getattr(parsed.dt, "tz", None) is not None:
        parsed = parsed.dt.tz_convert(None)
    return parsed


def standardize_age_group(value):
    """Map free-form ages ("34", "25-34 yrs", "over 65") to canonical buckets."""
    if pd.isna(value) or str(value).strip() == "":
        return pd.NA
    age_str = str(value).strip().lower()
    for keyword, canonical in AGE_GROUP_ALIASES:
        if keyword in age_str:
            return canonical
    match = re.search(r"(\d+)", age_str)
    if match:
        age = int(match.group(1))
        if age < 18:
            return "Under 18"
        if age <= 24:
            return "16-24"
        if age <= 34:
            return "25-34"
        if age <= 44:
            return "35-44"
        if age <= 54:
            return "45-54"
        if age <= 64:
            return "55-64"
        return "65+"
    return str(value).strip()


def standardize_gender(value):
    """Map gender spellings to Male / Female / Other."""
    if pd.isna(value) or str(value).strip() == "":
        return pd.NA
    g = str(value).strip().lower()
    if "other" in g or "non-binary" in g or "nonbinary" in g:
        return "Other"
    if g.startswith("f") or g.startswith("w"):
        return "Female"
    if g.startswith("m"):
        return "Male"
    return str(value).strip()


# ---------------------------------------------------------------------------
# Derived date fields
# ---------------------------------------------------------------------------

def add_date_fields(df: pd.DataFrame, timestamps: pd.Series, date_col: str) -> pd.DataFrame:
    """Attach ISO date, month, weekday (Sunday=0) and hour columns."""
    df[date_col] = timestamps.dt.strftime("%Y-%m-%d").astype("string")
    df["month"] = timestamps.dt.strftime("%Y-%m").astype("string")
    df["day_of_week"] = ((timestamps.dt.dayofweek + 1) % 7).astype("Int64")
    df["hour_of_day"] = timestamps.dt.hour.astype("Int64")
    return df


# ---------------------------------------------------------------------------
# Sales / offer pipelines
# ---------------------------------------------------------------------------

def normalize_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Rename, clean and derive fields for a raw receipts export."""
    df = rename_aliases(df, SALES_COLUMN_MAP)
    for col in missing_required(df, SALES_REQUIRED):
        df[col] = pd.NA

    for col in ["product_name", "chain"]:
        df[col] = clean_text(df[col])
    if "receipt_total" in df.columns:
        df["receipt_total"] = clean_numeric(df["receipt_total"])

    timestamps = parse_timestamps(df["receipt_date"])
    df = add_date_fields(df, timestamps, "receipt_date")

    if "age_group" in df.columns:
        df["age_group"] = df["age_group"].map(standardize_age_group).astype("string")
    if "gender" in df.columns:
        df["gender"] = df["gender"].map(standardize_gender).astype("string")
    return df


def normalize_offers(df: pd.DataFrame) -> pd.DataFrame:
    """Rename, clean and derive fields for a raw offer-hits export."""
    df = rename_aliases(df, OFFER_COLUMN_MAP)
    for col in missing_required(df, OFFER_REQUIRED):
        df[col] = pd.NA
    if "offer_name" not in df.columns:
        df["offer_name"] = pd.NA

    df["hit_id"] = clean_text(df["hit_id"])
    df["offer_name"] = clean_text(df["offer_name"])

    timestamps = parse_timestamps(df["created_at"])
    df["created_at"] = timestamps
    df = add_date_fields(df, timestamps, "hit_date")

    if "age_group" in df.columns:
        df["age_group"] = df["age_group"].map(standardize_age_group).astype("string")
    if "gender" in df.columns:
        df["gender"] = df["gender"].map(standardize_gender).astype("string")
    if "rank_for_viewer" in df.columns:
        df["rank_for_viewer"] = pd.to_numeric(df["rank_for_viewer"], errors="coerce").round().astype("Int64")
    return df


def is_blank(series: pd.Series) -> pd.Series:
    """True where a value is missing or whitespace-only."""
    as_str = series.astype("string")
    return (as_str.fillna("").str.strip() == "").astype(bool)


def question_columns(df: pd.DataFrame) -> list[str]:
    """Two-digit survey numbers having both question_NN and proposition_NN columns."""
    numbers = []
    for col in df.columns:
        m = re.fullmatch(r"question_(\d+)", str(col))
        if m and f"proposition_{m.group(1)}" in df.columns:
            numbers.append(m.group(1))
    return sorted(numbers)

