"""Data loading, normalization, and filter schemas."""
from .loader import discover_csvs, load_csv, load_inbox, load_all_sales, load_all_offers
from .schemas import ALL, DateWindow, FilterSpec, InvalidFilterSpec, WindowKind
from .normalize import normalize_sales, normalize_offers
