"""
Unit Tests - Normalization and CSV Loading
"""
import pandas as pd
import pytest

from receipt_analytics.data.loader import (
    discover_csvs,
    is_offer_file,
    load_all_offers,
    load_all_sales,
    load_csv,
    load_inbox,
    load_sales_csv,
)
from receipt_analytics.data.normalize import (
    clean_numeric,
    clean_text,
    is_blank,
    question_columns,
    rename_aliases,
    standardize_age_group,
    standardize_gender,
)
from receipt_analytics.config import SALES_COLUMN_MAP


class TestNormalize:
    """Tests for column and value normalization"""

    def test_rename_aliases(self):
        df = pd.DataFrame(columns=["Date", "Product", "Store", "Receipt Total"])
        renamed = rename_aliases(df, SALES_COLUMN_MAP)

        assert list(renamed.columns) == ["receipt_date", "product_name", "chain", "receipt_total"]

    def test_alias_does_not_overwrite_canonical(self):
        df = pd.DataFrame(columns=["date", "receipt_date"])
        renamed = rename_aliases(df, SALES_COLUMN_MAP)

        assert list(renamed.columns) == ["date", "receipt_date"]

    def test_clean_text(self):
        cleaned = clean_text(pd.Series(["  Acme   Bar ", '"Quoted"', "", None]))

        assert cleaned.iloc[0] == "Acme Bar"
        assert cleaned.iloc[1] == "Quoted"
        assert pd.isna(cleaned.iloc[2])
        assert pd.isna(cleaned.iloc[3])

    def test_clean_numeric(self):
        values = clean_numeric(pd.Series(["$1,250.50", "3", "n/a"]))

        assert values.iloc[0] == pytest.approx(1250.5)
        assert values.iloc[1] == pytest.approx(3.0)
        assert pd.isna(values.iloc[2])

    @pytest.mark.parametrize("raw,expected", [
        ("25-34", "25-34"),
        ("34", "25-34"),
        ("over 65", "65+"),
        ("17", "Under 18"),
        ("Under 18", "Under 18"),
        ("50 yrs", "45-54"),
    ])
    def test_standardize_age_group(self, raw, expected):
        assert standardize_age_group(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("F", "Female"),
        ("female", "Female"),
        ("Woman", "Female"),
        ("m", "Male"),
        ("MALE", "Male"),
        ("non-binary", "Other"),
    ])
    def test_standardize_gender(self, raw, expected):
        assert standardize_gender(raw) == expected

    def test_blank_values_stay_missing(self):
        assert pd.isna(standardize_gender(""))
        assert pd.isna(standardize_age_group(None))

    def test_is_blank(self):
        mask = is_blank(pd.Series(["x", " ", None, ""]))
        assert mask.tolist() == [False, True, True, True]

    def test_question_columns(self):
        df = pd.DataFrame(columns=["question_02", "proposition_02", "question_01", "proposition_01", "question_05"])
        assert question_columns(df) == ["01", "02"]


class TestNormalizedRecords:
    """Tests for derived fields on normalized frames"""

    def test_sales_fields(self, sales_df):
        row = sales_df.iloc[1]

        assert row["receipt_date"] == "2024-03-01"
        assert row["month"] == "2024-03"
        assert row["day_of_week"] == 5
        assert row["hour_of_day"] == 9
        assert sales_df["receipt_total"].iloc[0] == pytest.approx(2.5)
        assert pd.isna(sales_df["chain"].iloc[8])
        assert sales_df["product_name"].iloc[8] == "Acme Cola Classic 12oz"

    def test_offer_fields(self, offers_df):
        assert len(offers_df) == 24
        assert offers_df["hit_id"].iloc[0] == "hit-000"
        assert offers_df["hit_date"].iloc[0] == "2024-03-01"
        assert offers_df["gender"].iloc[0] == "Female"
        assert offers_df["gender"].iloc[1] == "Male"
        assert offers_df["age_group"].iloc[1] == "25-34"
        assert offers_df["rank_for_viewer"].iloc[2] == 3

    def test_unparseable_dates(self):
        from receipt_analytics.data.normalize import normalize_sales

        df = normalize_sales(pd.DataFrame({
            "receipt_date": ["not a date", "2024-03-01"],
            "product_name": ["A", "B"],
            "chain": ["X", "Y"],
        }))

        assert pd.isna(df["receipt_date"].iloc[0])
        assert df["receipt_date"].iloc[1] == "2024-03-01"


class TestLoader:
    """Tests for CSV discovery and loading"""

    def _write(self, path, text):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text)
        return path

    def test_is_offer_file(self, tmp_path):
        assert is_offer_file(tmp_path / "March_Offer_Hits.csv")
        assert is_offer_file(tmp_path / "export_hits_offer_2024.csv")
        assert not is_offer_file(tmp_path / "receipts.csv")

    def test_discover_csvs(self, tmp_path):
        self._write(tmp_path / "receipts.csv", "date,product,retailer\n")
        self._write(tmp_path / "nested" / "offer_hits.csv", "id,timestamp\n")
        self._write(tmp_path / "notes.txt", "ignore me")

        sales, offers = discover_csvs(tmp_path)

        assert [p.name for p in sales] == ["receipts.csv"]
        assert [p.name for p in offers] == ["offer_hits.csv"]

    def test_discover_missing_inbox(self, tmp_path):
        assert discover_csvs(tmp_path / "nope") == ([], [])

    def test_load_sales_csv(self, tmp_path):
        path = self._write(
            tmp_path / "receipts.csv",
            "Date,Product,Retailer,Amount\n"
            "2024-03-01 09:00,Acme Bar,Target,$2.50\n"
            "2024-03-02 10:00,Acme Drink,,3\n",
        )
        df = load_sales_csv(path)

        assert df["product_name"].tolist() == ["Acme Bar", "Acme Drink"]
        assert pd.isna(df["chain"].iloc[1])
        assert df["receipt_total"].sum() == pytest.approx(5.5)

    def test_missing_columns_warned(self, tmp_path, capsys):
        path = self._write(tmp_path / "receipts.csv", "Date,Product\n2024-03-01,Acme Bar\n")
        df = load_sales_csv(path)

        assert "chain" in df.columns
        assert "missing columns ['chain']" in capsys.readouterr().out

    def test_offers_deduplicated_across_files(self, tmp_path):
        header = "id,timestamp,offer\n"
        a = self._write(tmp_path / "a_offer_hits.csv", header + "h1,2024-03-01 10:00,Promo\nh2,2024-03-01 11:00,Promo\n")
        b = self._write(tmp_path / "b_offer_hits.csv", header + "h2,2024-03-01 11:00,Promo\nh3,2024-03-02 09:00,Promo\n")

        df = load_all_offers([a, b])

        assert sorted(df["hit_id"].tolist()) == ["h1", "h2", "h3"]

    def test_unreadable_file_skipped(self, tmp_path, capsys):
        good = self._write(tmp_path / "good.csv", "date,product,retailer\n2024-03-01,Acme Bar,Target\n")
        df = load_all_sales([tmp_path / "missing.csv", good])

        assert len(df) == 1
        assert "skipping missing.csv" in capsys.readouterr().out

    def test_no_files(self):
        assert load_all_sales([]).empty

    def test_load_csv_dispatches_on_name(self, tmp_path):
        offers = self._write(tmp_path / "offer_hits.csv", "id,timestamp,offer\nh1,2024-03-01 10:00,Promo\n")
        sales = self._write(tmp_path / "receipts.csv", "date,product,retailer\n2024-03-01,Acme Bar,Target\n")

        assert "hit_date" in load_csv(offers).columns
        assert "receipt_date" in load_csv(sales).columns

    def test_load_inbox(self, tmp_path):
        self._write(tmp_path / "receipts.csv", "date,product,retailer\n2024-03-01,Acme Bar,Target\n")
        self._write(tmp_path / "march" / "offer_hits.csv", "id,timestamp,offer\nh1,2024-03-01 10:00,Promo\n")

        sales, offers = load_inbox(tmp_path)

        assert len(sales) == 1
        assert offers["offer_name"].tolist() == ["Promo"]
