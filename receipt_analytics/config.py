"""
Receipt Analytics — Configuration: paths, column aliases, analysis constants.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths — override with RECEIPT_ANALYTICS_DATA_DIR env var
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("RECEIPT_ANALYTICS_DATA_DIR", str(Path.home() / "Receipt Analytics")))
BASE_FOLDER = _data_dir
INBOX_FOLDER = _data_dir / "inbox"

# ---------------------------------------------------------------------------
# File-discovery patterns (keywords matched case-insensitively in filename)
# ---------------------------------------------------------------------------
OFFER_KEYWORDS = ["hits_offer", "offer_hits"]

# ---------------------------------------------------------------------------
# Column aliases from raw exports → internal names
# ---------------------------------------------------------------------------
SALES_COLUMN_MAP = {
    # Date
    "date": "receipt_date",
    "transaction_date": "receipt_date",
    "purchase_date": "receipt_date",
    "order_date": "receipt_date",
    "created_at": "receipt_date",
    "timestamp": "receipt_date",
    # Product
    "product": "product_name",
    "item": "product_name",
    "item_name": "product_name",
    "product_title": "product_name",
    "description": "product_name",
    "sku": "product_name",
    # Retailer
    "retailer": "chain",
    "store": "chain",
    "merchant": "chain",
    "vendor": "chain",
    "shop": "chain",
    "outlet": "chain",
    # Amount
    "amount": "receipt_total",
    "total": "receipt_total",
    "price": "receipt_total",
    "value": "receipt_total",
    "spend": "receipt_total",
    # User
    "customer_id": "user_id",
    "customer": "user_id",
    "user": "user_id",
    "userid": "user_id",
}

OFFER_COLUMN_MAP = {
    "id": "hit_id",
    "offer_hit_id": "hit_id",
    "engagement_id": "hit_id",
    "interaction_id": "hit_id",
    "timestamp": "created_at",
    "date": "created_at",
    "hit_date": "created_at",
    "engagement_date": "created_at",
    "offer": "offer_name",
    "campaign": "offer_name",
    "promotion": "offer_name",
    "deal": "offer_name",
    "age": "age_group",
    "age_range": "age_group",
    "age_bracket": "age_group",
    "sex": "gender",
    "rank": "rank_for_viewer",
    "customer_id": "user_id",
    "customer": "user_id",
    "user": "user_id",
    "userid": "user_id",
}

SALES_REQUIRED = ["receipt_date", "product_name", "chain"]
OFFER_REQUIRED = ["hit_id", "created_at"]

# ---------------------------------------------------------------------------
# Offer exclusion window (ramp-up / ramp-down trimming per offer)
# First N days are dropped only when the offer has at least N+1 distinct days;
# same for the last M days.
# ---------------------------------------------------------------------------
EXCLUDE_FIRST_DAYS = 7
EXCLUDE_FIRST_MIN_DATES = 8
EXCLUDE_LAST_DAYS = 3
EXCLUDE_LAST_MIN_DATES = 4

# ---------------------------------------------------------------------------
# Aggregation defaults
# ---------------------------------------------------------------------------
TREND_WINDOW = 7
MATRIX_TOP_PRODUCTS = 10
MATRIX_TOP_RETAILERS = 5
UNKNOWN_LABEL = "Unknown"
MIN_DATES_FOR_WEEKLY_TREND = 15

TIME_GRANULARITIES = ("hourly", "daily", "weekly", "monthly")

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# ---------------------------------------------------------------------------
# Demographics — preferred display order for age groups
# ---------------------------------------------------------------------------
AGE_GROUP_ORDER = [
    "16-24",
    "25-34",
    "35-44",
    "45-54",
    "55-64",
    "65+",
    "Under 18",
]

# Keyword → canonical age group (first match wins)
AGE_GROUP_ALIASES = [
    ("under 18", "Under 18"),
    ("16-24", "16-24"),
    ("25-34", "25-34"),
    ("35-44", "35-44"),
    ("45-54", "45-54"),
    ("55-64", "55-64"),
    ("65+", "65+"),
    ("over 65", "65+"),
]
