"""
Unit Tests - Offer Analytics
"""
import pandas as pd
import pytest

from receipt_analytics.analytics.exclusions import exclude_edge_days
from receipt_analytics.analytics.offers import offer_distribution, offer_metrics, offer_time_distribution


class TestOfferDistribution:
    """Tests for per-offer hit shares"""

    def test_distribution(self, offers_df):
        dist = offer_distribution(offers_df)

        assert [(d["name"], d["count"]) for d in dist] == [
            ("Spring Promo", 13), ("Short Deal", 6), ("Mid Deal", 5),
        ]
        assert dist[0]["avg_hits_per_day"] == pytest.approx(1.08)
        assert dist[1]["avg_hits_per_day"] == pytest.approx(2.0)
        assert sum(d["percentage"] for d in dist) == pytest.approx(100.0)

    def test_after_exclusion(self, offers_df):
        dist = offer_distribution(exclude_edge_days(offers_df))

        assert [(d["name"], d["count"]) for d in dist] == [
            ("Short Deal", 6), ("Spring Promo", 3), ("Mid Deal", 2),
        ]
        assert dist[1]["avg_hits_per_day"] == pytest.approx(1.5)

    def test_empty(self):
        assert offer_distribution(pd.DataFrame()) == []


class TestOfferMetrics:
    """Tests for offer_metrics"""

    def test_all_offers(self, offers_df):
        m = offer_metrics(offers_df)

        assert m["total_hits"] == 24
        assert m["period_days"] == 12
        assert m["avg_hits_per_day"] == pytest.approx(2.0)
        assert m["hits_per_offer"] == {}

    def test_selected_offers(self, offers_df):
        m = offer_metrics(offers_df, frozenset({"Mid Deal"}))

        assert m["hits_per_offer"] == {"Mid Deal": {"total_hits": 5, "days": 5, "avg_per_day": 1.0}}

    def test_single_offer_name(self, offers_df):
        """A bare offer name is one selection, not a set of characters"""
        m = offer_metrics(offers_df, "Mid Deal")

        assert list(m["hits_per_offer"]) == ["Mid Deal"]
        assert m["hits_per_offer"]["Mid Deal"]["total_hits"] == 5

    def test_all_sentinel(self, offers_df):
        assert offer_metrics(offers_df, None)["hits_per_offer"] == {}
        assert offer_metrics(offers_df, ["all"])["hits_per_offer"] == {}

    def test_empty(self):
        m = offer_metrics(pd.DataFrame())
        assert m["total_hits"] == 0
        assert m["avg_hits_per_day"] == 0.0


class TestOfferTimeDistribution:
    """Tests for hour, weekday and daily profiles of hits"""

    def test_profiles(self, offers_df):
        time = offer_time_distribution(offers_df)

        assert len(time["hour_data"]) == 24
        assert time["hour_data"][10]["count"] == 12
        assert len(time["day_data"]) == 7
        assert time["trend_data"][0] == {"date": "2024-03-01", "count": 2}
        assert len(time["trend_data"]) == 12

    def test_empty(self):
        assert offer_time_distribution(pd.DataFrame()) == {"hour_data": [], "day_data": [], "trend_data": []}
