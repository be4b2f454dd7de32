"""
Test Suite Configuration
"""
import pandas as pd
import pytest

from receipt_analytics.data.normalize import normalize_sales, normalize_offers
from receipt_analytics.data.store import DataStore


@pytest.fixture
def raw_sales_df() -> pd.DataFrame:
    """Receipts export as read from CSV (all strings, export-style headers)"""
    return pd.DataFrame({
        "Date": [
            "2024-02-28 10:15:00",
            "2024-03-01 09:00:00",
            "2024-03-01 14:30:00",
            "2024-03-02 11:00:00",
            "2024-03-03 18:45:00",
            "2024-03-03 19:10:00",
            "2024-03-05 08:05:00",
            "2024-03-05 12:00:00",
            "2024-03-05 16:20:00",
            "2024-03-08 20:00:00",
        ],
        "Product": [
            "Acme Cola Classic 12oz",
            "Acme Cola Classic 12oz",
            "Acme Cola Zero 12oz",
            "Acme Chips Original",
            "Zest Lemon Soda",
            "Zest Lime Soda",
            "Solo Water",
            "Acme Cola Classic 12oz",
            "  Acme Cola Classic 12oz ",
            "Zest Lemon Soda",
        ],
        "Retailer": [
            "Target", "Target", "Walmart", "Target", "Kroger",
            "Target", "Walmart", "Walmart", "", "Target",
        ],
        "Amount": [
            "$2.50", "2.50", "2.75", "3.00", "1.99",
            "1.99", "1.00", "2.50", "2.50", "1.99",
        ],
    })


@pytest.fixture
def sales_df(raw_sales_df) -> pd.DataFrame:
    """Normalized sales records"""
    return normalize_sales(raw_sales_df)


def _offer_hits() -> pd.DataFrame:
    rows = []
    genders = ["F", "male", "Female", "M", ""]
    ages = ["25-34", "34", "over 65", "", "19"]

    def add(offer, day, hour):
        n = len(rows)
        rows.append({
            "id": f"hit-{n:03d}",
            "timestamp": f"2024-03-{day:02d} {hour:02d}:00:00",
            "offer": offer,
            "sex": genders[n % len(genders)],
            "age": ages[n % len(ages)],
            "rank": str(n % 3 + 1),
        })

    # 12 distinct dates, two hits on the 8th
    for day in range(1, 13):
        add("Spring Promo", day, 10)
    add("Spring Promo", 8, 15)
    # 5 distinct dates
    for day in range(1, 6):
        add("Mid Deal", day, 12)
    # 3 distinct dates, two hits each
    for day in range(5, 8):
        add("Short Deal", day, 9)
        add("Short Deal", day, 17)
    return pd.DataFrame(rows)


@pytest.fixture
def offers_df() -> pd.DataFrame:
    """Normalized offer hits: Spring Promo 13, Mid Deal 5, Short Deal 6"""
    return normalize_offers(_offer_hits())


@pytest.fixture
def store(sales_df, offers_df) -> DataStore:
    """DataStore over the sample frames"""
    return DataStore(sales=sales_df, offers=offers_df)
