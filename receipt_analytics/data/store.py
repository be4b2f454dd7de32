"""
DataStore — in-memory record sets backed by pandas.

Loaded once, queried on every filter change. The brand mapping is computed
once per load and handed to callers explicitly.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd

from receipt_analytics.analytics.brands import BrandMapping, analyze_brands
from receipt_analytics.analytics.filters import apply_filter, filter_options
from receipt_analytics.analytics.windows import distinct_dates
from receipt_analytics.config import INBOX_FOLDER
from receipt_analytics.data.loader import load_inbox
from receipt_analytics.data.schemas import FilterSpec


class DataStore:
    """Sales and offer records with filter-aware accessors."""

    def __init__(self, sales: pd.DataFrame | None = None, offers: pd.DataFrame | None = None) -> None:
        self.sales_df: pd.DataFrame = sales if sales is not None else pd.DataFrame()
        self.offers_df: pd.DataFrame = offers if offers is not None else pd.DataFrame()
        self.brand_mapping: BrandMapping = {}
        self.brand_list: list[str] = []
        self._loaded = sales is not None or offers is not None
        if self._loaded:
            self._index_brands()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, inbox: Path = INBOX_FOLDER) -> "DataStore":
        """Load every CSV in the inbox and detect brands."""
        print("Loading redemption data...")
        self.sales_df, self.offers_df = load_inbox(inbox)
        if self.sales_df.empty:
            print("  No sales CSVs found — starting with empty dataset")
        else:
            print(f"  Sales: {len(self.sales_df):,} rows")
        if not self.offers_df.empty:
            print(f"  Offer hits: {len(self.offers_df):,} rows")

        self._index_brands()
        self._loaded = True
        return self

    def _index_brands(self) -> None:
        self.brand_mapping, self.brand_list = analyze_brands(self.sales_df)
        if self.brand_list:
            print(f"  Detected {len(self.brand_list)} brand(s) across {len(self.brand_mapping)} products")

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def get_sales(self, spec: FilterSpec | None = None) -> pd.DataFrame:
        """Sales records matching ``spec`` (all records when None)."""
        return apply_filter(self.sales_df, spec)

    def get_offers(self, spec: FilterSpec | None = None) -> pd.DataFrame:
        """Offer hits matching ``spec``; its product selection applies to offer names."""
        return apply_filter(
            self.offers_df, spec,
            product_field="offer_name",
            retailer_field="chain",
            date_field="hit_date",
        )

    # ------------------------------------------------------------------
    # Metadata queries
    # ------------------------------------------------------------------

    def filter_options(self) -> dict[str, list[str]]:
        return filter_options(self.sales_df)

    def offer_names(self) -> list[str]:
        return filter_options(self.offers_df, product_field="offer_name")["products"]

    def date_range(self, spec: FilterSpec | None = None) -> str:
        """Human-readable date range string."""
        dates = distinct_dates(self.get_sales(spec), "receipt_date")
        if not dates:
            return "N/A"
        return f"{dates[0]} to {dates[-1]}"

    def row_count(self) -> int:
        return len(self.sales_df)

    def offer_count(self) -> int:
        return len(self.offers_df)
