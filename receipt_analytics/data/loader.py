"""
CSV discovery and loading for receipt and offer-hit exports.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from receipt_analytics.config import (
    INBOX_FOLDER, OFFER_KEYWORDS, SALES_REQUIRED, OFFER_REQUIRED, SALES_COLUMN_MAP, OFFER_COLUMN_MAP,
)
from receipt_analytics.data.normalize import (
    normalize_sales, normalize_offers, rename_aliases, missing_required,
)


def is_offer_file(filepath: Path) -> bool:
    """Offer-hit exports are recognised by filename keyword."""
    name = filepath.name.lower()
    return any(kw in name for kw in OFFER_KEYWORDS)


def discover_csvs(inbox: Path = INBOX_FOLDER) -> tuple[list[Path], list[Path]]:
    """Recursively find CSVs in inbox, split into (sales files, offer files)."""
    sales: list[Path] = []
    offers: list[Path] = []
    if not inbox.exists():
        return sales, offers
    for csv_file in sorted(inbox.rglob("*.csv")):
        (offers if is_offer_file(csv_file) else sales).append(csv_file)
    return sales, offers


def load_sales_csv(filepath: Path) -> pd.DataFrame:
    """Read one receipts CSV and normalise it."""
    raw = pd.read_csv(filepath, dtype=str, keep_default_na=False)
    missing = missing_required(rename_aliases(raw.head(0), SALES_COLUMN_MAP), SALES_REQUIRED)
    if missing:
        print(f"  Warning: {filepath.name} is missing columns {missing}")
    return normalize_sales(raw)


def load_offer_csv(filepath: Path) -> pd.DataFrame:
    """Read one offer-hits CSV and normalise it."""
    raw = pd.read_csv(filepath, dtype=str, keep_default_na=False)
    missing = missing_required(rename_aliases(raw.head(0), OFFER_COLUMN_MAP), OFFER_REQUIRED)
    if missing:
        print(f"  Warning: {filepath.name} is missing columns {missing}")
    return normalize_offers(raw)


def _load_many(files: list[Path], reader, dedup_cols: list[str]) -> pd.DataFrame:
    frames = []
    for f in files:
        try:
            chunk = reader(f)
        except (OSError, ValueError, pd.errors.ParserError) as exc:
            print(f"  Warning: skipping {f.name}: {exc}")
            continue
        print(f"  {f.name}: {len(chunk):,} rows")
        frames.append(chunk)

    if not frames:
        return pd.DataFrame()

    df = pd.concat(frames, ignore_index=True)
    subset = [c for c in dedup_cols if c in df.columns]
    if subset and len(frames) > 1:
        keyed = df[subset].notna().all(axis=1)
        dup = df.duplicated(subset=subset, keep="first") & keyed
        if dup.any():
            df = df[~dup].reset_index(drop=True)
            print(f"  Dedup: -{int(dup.sum()):,} rows seen in more than one file")
    return df


def load_all_sales(files: list[Path]) -> pd.DataFrame:
    return _load_many(files, load_sales_csv, [])


def load_all_offers(files: list[Path]) -> pd.DataFrame:
    """Offer hits, deduplicated on ``hit_id`` across overlapping exports."""
    return _load_many(files, load_offer_csv, ["hit_id"])


def load_csv(filepath: Path) -> pd.DataFrame:
    """Read one export, dispatching on the filename keyword."""
    return load_offer_csv(filepath) if is_offer_file(filepath) else load_sales_csv(filepath)


def load_inbox(inbox: Path = INBOX_FOLDER) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Every CSV under ``inbox`` as (sales records, offer hits)."""
    sales_files, offer_files = discover_csvs(inbox)
    return load_all_sales(sales_files), load_all_offers(offer_files)
