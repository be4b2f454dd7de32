"""
Cross-tabulation — product×retailer and survey-response×age-group matrices.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from receipt_analytics.analytics.common import pct_of_total
from receipt_analytics.config import AGE_GROUP_ORDER, MATRIX_TOP_PRODUCTS, MATRIX_TOP_RETAILERS
from receipt_analytics.data.normalize import is_blank, question_columns

RELATIVE_TO = ("row", "column")

REPURCHASE_KEYWORDS = ["purchase again", "buy again", "repurchase", "reorder"]


@dataclass
class CrossTab:
    """Count matrix between two categorical fields.

    ``row_totals`` / ``column_totals`` / ``grand_total`` always describe the
    full matrix; ``rows`` / ``columns`` are the (possibly truncated) display
    order. ``percentages`` covers the displayed cells and is relative to the
    full row or column totals.
    """
    row_field: str
    column_field: str
    relative_to: str
    rows: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    counts: dict[str, dict[str, int]] = field(default_factory=dict)
    row_totals: dict[str, int] = field(default_factory=dict)
    column_totals: dict[str, int] = field(default_factory=dict)
    grand_total: int = 0
    percentages: dict[str, dict[str, float]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.grand_total == 0

    def count(self, row: str, column: str) -> int:
        return self.counts.get(row, {}).get(column, 0)

    def to_records(self) -> list[dict]:
        """One dict per displayed row: the row value, each displayed column's count, and the row total."""
        records = []
        for row in self.rows:
            rec = {self.row_field: row}
            for col in self.columns:
                rec[col] = self.count(row, col)
            rec["total"] = self.row_totals.get(row, 0)
            records.append(rec)
        return records

    def to_dict(self) -> dict:
        return {
            "row_field": self.row_field,
            "column_field": self.column_field,
            "relative_to": self.relative_to,
            "rows": self.rows,
            "columns": self.columns,
            "data": {r: {c: self.count(r, c) for c in self.columns} for r in self.rows},
            "percentages": self.percentages,
            "row_totals": self.row_totals,
            "column_totals": self.column_totals,
            "grand_total": self.grand_total,
        }


def _by_total(totals: dict[str, int]) -> list[str]:
    return sorted(totals, key=lambda k: (-totals[k], k))


def cross_tabulate(
    df: pd.DataFrame,
    row_field: str,
    column_field: str,
    relative_to: str = "row",
    top_rows: Optional[int] = None,
    top_columns: Optional[int] = None,
    column_order: Optional[list[str]] = None,
) -> CrossTab:
    """Count records per (row value, column value) pair.

    Records blank on either field are left out. Totals come from the full
    matrix before any top-K truncation, so percentages reflect true share.
    ``column_order`` puts listed values first in that order, the rest by total.
    """
    if relative_to not in RELATIVE_TO:
        raise ValueError(f"relative_to must be one of {RELATIVE_TO}, got {relative_to!r}")

    tab = CrossTab(row_field=row_field, column_field=column_field, relative_to=relative_to)
    if df.empty or row_field not in df.columns or column_field not in df.columns:
        return tab

    known = df[~is_blank(df[row_field]) & ~is_blank(df[column_field])]
    if known.empty:
        return tab

    matrix = pd.crosstab(known[row_field].astype(str), known[column_field].astype(str))
    tab.counts = {
        str(r): {str(c): int(v) for c, v in row.items() if v}
        for r, row in matrix.iterrows()
    }
    tab.row_totals = {str(k): int(v) for k, v in matrix.sum(axis=1).items()}
    tab.column_totals = {str(k): int(v) for k, v in matrix.sum(axis=0).items()}
    tab.grand_total = int(matrix.to_numpy().sum())

    rows = _by_total(tab.row_totals)
    columns = _by_total(tab.column_totals)
    if column_order:
        listed = [c for c in column_order if c in tab.column_totals]
        columns = listed + [c for c in columns if c not in listed]
    tab.rows = rows[:top_rows] if top_rows is not None else rows
    tab.columns = columns[:top_columns] if top_columns is not None else columns

    for r in tab.rows:
        tab.percentages[r] = {}
        for c in tab.columns:
            base = tab.row_totals[r] if relative_to == "row" else tab.column_totals[c]
            tab.percentages[r][c] = pct_of_total(tab.count(r, c), base)
    return tab


def product_retailer_matrix(
    df: pd.DataFrame,
    relative_to: str = "row",
    top_products: int = MATRIX_TOP_PRODUCTS,
    top_retailers: int = MATRIX_TOP_RETAILERS,
) -> CrossTab:
    """Products × retailers.

    ``relative_to="row"`` gives each retailer's share of a product's sales;
    ``"column"`` gives each product's share of a retailer's sales.
    """
    return cross_tabulate(
        df, "product_name", "chain",
        relative_to=relative_to, top_rows=top_products, top_columns=top_retailers,
    )


# ---------------------------------------------------------------------------
# Survey responses
# ---------------------------------------------------------------------------

def available_questions(df: pd.DataFrame) -> list[str]:
    """Survey numbers with at least one answered question/proposition pair."""
    numbers = []
    for num in question_columns(df):
        answered = ~is_blank(df[f"question_{num}"]) & ~is_blank(df[f"proposition_{num}"])
        if answered.any():
            numbers.append(num)
    return numbers


def question_text(df: pd.DataFrame, number: str) -> str:
    col = f"question_{number}"
    if col in df.columns:
        texts = df.loc[~is_blank(df[col]), col]
        if not texts.empty:
            return str(texts.iloc[0]).strip()
    return f"Question {number}"


def find_repurchase_question(df: pd.DataFrame) -> Optional[str]:
    """First question whose text mentions buying again; else the first question."""
    questions = available_questions(df)
    for num in questions:
        text = question_text(df, num).lower()
        if any(kw in text for kw in REPURCHASE_KEYWORDS):
            return num
    return questions[0] if questions else None


def _answered(df: pd.DataFrame, number: str) -> pd.DataFrame:
    q, p = f"question_{number}", f"proposition_{number}"
    needed = [q, p, "age_group"]
    if df.empty or any(c not in df.columns for c in needed):
        return df.iloc[0:0]
    mask = ~is_blank(df[q]) & ~is_blank(df[p]) & ~is_blank(df["age_group"])
    return df[mask]


def response_distribution(df: pd.DataFrame, number: str) -> list[dict]:
    """Answer shares for one survey question among respondents with a known age group."""
    answered = _answered(df, number)
    if answered.empty:
        return []
    total = len(answered)
    counts = answered[f"proposition_{number}"].astype(str).value_counts()
    rows = [
        {"response": str(resp), "count": int(n), "percentage": pct_of_total(int(n), total)}
        for resp, n in counts.items()
    ]
    return sorted(rows, key=lambda r: (-r["count"], r["response"]))


def response_age_matrix(
    df: pd.DataFrame,
    number: str,
    relative_to: str = "column",
    responses: Optional[list[str]] = None,
) -> CrossTab:
    """Survey answers × age groups, age groups in canonical order.

    ``responses`` restricts the rows to the selected answers.
    """
    answered = _answered(df, number)
    prop = f"proposition_{number}"
    if responses is not None and not answered.empty:
        answered = answered[answered[prop].astype(str).isin(list(responses))]
    return cross_tabulate(
        answered, prop, "age_group",
        relative_to=relative_to, column_order=AGE_GROUP_ORDER,
    )
