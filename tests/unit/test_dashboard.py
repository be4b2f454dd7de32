"""
Unit Tests - DataStore and Dashboard Composition
"""
import json

import pandas as pd
import pytest

from receipt_analytics.analytics.dashboard import offers_dashboard, sales_dashboard, survey_summary
from receipt_analytics.data.schemas import DateWindow, FilterSpec
from receipt_analytics.data.store import DataStore


MARCH = FilterSpec(date_window=DateWindow.for_month("2024-03"))


class TestDataStore:
    """Tests for the in-memory store"""

    def test_brands_indexed_on_construction(self, store):
        assert store.is_loaded
        assert store.brand_list == ["Acme", "Acme Cola", "Zest"]
        assert store.brand_mapping["Zest Lime Soda"].display_name == "Lime Soda"

    def test_get_sales(self, store):
        assert len(store.get_sales()) == 10
        assert len(store.get_sales(MARCH)) == 9

    def test_get_offers_by_offer_name(self, store):
        spec = FilterSpec(products={"Short Deal"})
        assert len(store.get_offers(spec)) == 6

    def test_metadata(self, store):
        assert store.date_range() == "2024-02-28 to 2024-03-08"
        assert store.date_range(FilterSpec(date_window=DateWindow.for_month("2023-01"))) == "N/A"
        assert store.offer_names() == ["Mid Deal", "Short Deal", "Spring Promo"]
        assert store.filter_options()["retailers"] == ["Kroger", "Target", "Walmart"]
        assert store.row_count() == 10
        assert store.offer_count() == 24

    def test_empty_store(self):
        store = DataStore()

        assert not store.is_loaded
        assert store.get_sales(MARCH).empty
        assert store.date_range() == "N/A"

    def test_load_from_inbox(self, tmp_path):
        (tmp_path / "receipts.csv").write_text(
            "Date,Product,Retailer\n"
            "2024-03-01 09:00,Acme Bar,Target\n"
            "2024-03-02 10:00,Acme Drink,Walmart\n"
        )
        (tmp_path / "offer_hits.csv").write_text("id,timestamp,offer\nh1,2024-03-01 10:00,Promo\n")

        store = DataStore().load(tmp_path)

        assert store.is_loaded
        assert store.row_count() == 2
        assert store.offer_count() == 1
        assert store.brand_list == ["Acme"]


class TestSalesDashboard:
    """Tests for sales_dashboard"""

    def test_sections(self, store):
        data = sales_dashboard(store, MARCH)

        assert data["period_label"] == "March 2024"
        assert data["metrics"]["total_count"] == 9
        assert data["retailers"][0]["name"] == "Target"
        assert data["products"][0]["display_name"] == "Classic 12oz"
        assert [p["key"] for p in data["time_series"]][0] == "2024-03-01"
        assert "trend" in data["time_series"][0]
        assert data["matrix"]["by_product"]["relative_to"] == "row"
        assert data["matrix"]["by_retailer"]["relative_to"] == "column"
        assert "comparison" not in data

    def test_json_safe(self, store):
        data = sales_dashboard(store, MARCH, MARCH.previous_window(), granularity="weekly")
        json.dumps(data)

    def test_comparison_independent(self, store):
        """Comparison metrics come from their own filter pass"""
        data = sales_dashboard(store, MARCH, MARCH.previous_window())
        comp = data["comparison"]

        assert comp["period_label"] == "February 2024"
        assert comp["metrics"]["total_count"] == 1
        assert comp["growth"]["unit_growth"] == 8
        assert data["metrics"]["total_count"] == 9

    def test_empty_period(self, store):
        data = sales_dashboard(store, FilterSpec(date_window=DateWindow.for_month("2023-01")))

        assert data["empty"] is True
        assert data["metrics"]["total_count"] == 0

    def test_unknown_granularity(self, store):
        with pytest.raises(ValueError):
            sales_dashboard(store, MARCH, granularity="yearly")


class TestOffersDashboard:
    """Tests for offers_dashboard"""

    def test_with_exclusions(self, store):
        data = offers_dashboard(store)

        assert data["metrics"]["total_hits"] == 11
        assert data["metrics"]["period_days"] == 7
        assert [o["name"] for o in data["offers"]] == ["Short Deal", "Spring Promo", "Mid Deal"]
        assert set(data["excluded_dates"]) == {"Spring Promo", "Mid Deal"}
        assert [g["name"] for g in data["gender"]] == ["Male", "Female"]
        assert len(data["time"]["hour_data"]) == 24
        json.dumps(data)

    def test_without_exclusions(self, store):
        data = offers_dashboard(store, exclude_first=False, exclude_last=False)

        assert data["metrics"]["total_hits"] == 24
        assert data["excluded_dates"] == {}

    def test_selected_offer(self, store):
        data = offers_dashboard(store, FilterSpec(products={"Mid Deal"}))

        assert data["metrics"]["total_hits"] == 2
        assert data["metrics"]["hits_per_offer"]["Mid Deal"]["days"] == 2

    def test_everything_excluded(self):
        dates = pd.date_range("2024-01-01", periods=10).strftime("%Y-%m-%d")
        offers = pd.DataFrame({"offer_name": "Promo", "hit_date": dates})
        data = offers_dashboard(DataStore(offers=offers))

        assert data["empty"] is True
        assert data["metrics"]["total_hits"] == 0
        assert len(data["excluded_dates"]["Promo"]) == 10


class TestSurveySummary:
    """Tests for survey_summary"""

    def test_survey(self):
        sales = pd.DataFrame({
            "receipt_date": ["2024-03-01"] * 3,
            "product_name": ["A", "B", "C"],
            "chain": ["X", "X", "Y"],
            "age_group": ["25-34", "16-24", "25-34"],
            "question_01": ["Would you buy again?"] * 3,
            "proposition_01": ["Yes", "No", "Yes"],
        })
        data = survey_summary(DataStore(sales=sales))

        assert data["question"] == "01"
        assert data["responses"][0]["response"] == "Yes"
        assert data["by_age_group"]["columns"] == ["16-24", "25-34"]

    def test_no_questions(self, store):
        data = survey_summary(store)
        assert data["empty"] is True
