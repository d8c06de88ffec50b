"""
Sales aggregation: filtered pivot matrices and dashboard summaries.

Computes:
- Store x Category, Store x Month, Product x Month and Product x Store
  quantity matrices over a filtered record set
- Headline metrics, monthly year-over-year trend and category mix
"""

from dataclasses import dataclass, field
from typing import Iterable

import numpy as np
import pandas as pd

from .models import SaleRecord
from .parsers import month_index

MONTHS = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]
MONTHS_SHORT = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]

ALL = "all"

TOTAL_LABEL = "TOTAL"
TOTALS_ROW_LABEL = "TOTALES"

RECORD_COLUMNS = [
    "id", "file_id", "date", "store", "category", "product",
    "quantity", "revenue", "sku", "source",
]


@dataclass(frozen=True)
class SalesFilter:
    """
    Report filter. Every criterion must hold for a record to be counted.

    year: 4-digit prefix of the record date, or "all"
    categories: allowed categories; empty means no restriction
    months: allowed zero-based months; empty means no restriction
    store: exact store name, or "all"
    """

    year: str = ALL
    categories: frozenset[str] = frozenset()
    months: frozenset[int] = frozenset()
    store: str = ALL


@dataclass
class PivotMatrix:
    """
    Sparse quantity matrix keyed data[row][col].

    Missing cells mean "no sales" and are kept apart from real zeros so the
    dashboard can render them differently; totals treat them as 0.
    """

    title: str
    row_key: str
    rows: list[str]
    cols: list[str]
    data: dict[str, dict[str, int]] = field(default_factory=dict)

    def get(self, row: str, col: str) -> int | None:
        return self.data.get(row, {}).get(col)

    def row_total(self, row: str) -> int:
        cells = self.data.get(row, {})
        return sum(cells.get(col, 0) for col in self.cols)

    def row_totals(self) -> dict[str, int]:
        return {row: self.row_total(row) for row in self.rows}

    def col_totals(self) -> dict[str, int]:
        return {
            col: sum(self.data.get(row, {}).get(col, 0) for row in self.rows)
            for col in self.cols
        }

    @property
    def grand_total(self) -> int:
        return sum(self.row_totals().values())

    def to_frame(self) -> pd.DataFrame:
        """Rows x cols DataFrame; absent cells are NaN."""
        frame = pd.DataFrame.from_dict(self.data, orient="index", dtype=float)
        frame = frame.reindex(index=self.rows, columns=self.cols)
        frame.index.name = self.row_key
        return frame

    def to_table(self) -> pd.DataFrame:
        """
        Display table: one column with the row labels, the matrix cells, a
        row-total column and a final totals row.

        The index is positional, so the totals row never replaces a data row
        even when a store or product is itself called "TOTALES".
        """
        total_col = _free_label(TOTAL_LABEL, self.cols)
        key_col = _free_label(self.row_key, [*self.cols, total_col])

        body = self.to_frame().reset_index(drop=True)
        body[total_col] = [self.row_total(row) for row in self.rows]
        body.insert(0, key_col, list(self.rows))

        totals = {key_col: TOTALS_ROW_LABEL, total_col: self.grand_total}
        totals.update(self.col_totals())
        footer = pd.DataFrame([totals], columns=body.columns)

        return pd.concat([body, footer], ignore_index=True)


def _free_label(label: str, taken: Iterable[str]) -> str:
    """`label`, with spaces appended until it differs from every taken name."""
    taken = set(taken)
    while label in taken:
        label += " "
    return label


@dataclass
class SalesMatrices:
    """The four report matrices built from one filter."""

    store_category: PivotMatrix
    store_month: PivotMatrix
    product_month: PivotMatrix
    product_store: PivotMatrix


def records_to_frame(records: Iterable[SaleRecord]) -> pd.DataFrame:
    """
    Flatten records into a DataFrame with a derived `month` column
    (zero-based, NaN when the date is not a calendar date).
    """
    frame = pd.DataFrame(
        [record.model_dump() for record in records], columns=RECORD_COLUMNS
    )
    frame["quantity"] = pd.to_numeric(frame["quantity"]).fillna(0).astype(int)
    frame["revenue"] = pd.to_numeric(frame["revenue"]).fillna(0.0).astype(float)
    frame["month"] = pd.Series(
        [month_index(value) for value in frame["date"]], index=frame.index, dtype=float
    )
    return frame


def apply_filter(frame: pd.DataFrame, sales_filter: SalesFilter) -> pd.DataFrame:
    """Rows of `frame` satisfying every criterion of the filter."""
    mask = pd.Series(True, index=frame.index)

    if sales_filter.year != ALL:
        mask &= frame["date"].astype(str).str.startswith(sales_filter.year)

    if sales_filter.categories:
        mask &= frame["category"].isin(sales_filter.categories)

    if sales_filter.months:
        mask &= frame["month"].isin(sales_filter.months)

    if sales_filter.store != ALL:
        mask &= frame["store"] == sales_filter.store

    return frame[mask]


def _sparse_pivot(frame: pd.DataFrame, row_col: str, col_col: str) -> dict[str, dict[str, int]]:
    """Sum quantity by (row, col), keeping rows in first-seen order."""
    sums = frame.groupby([row_col, col_col], sort=False)["quantity"].sum()
    data: dict[str, dict[str, int]] = {}
    for (row, col), qty in sums.items():
        data.setdefault(row, {})[col] = int(qty)
    return data


def build_matrices(
    records: Iterable[SaleRecord], sales_filter: SalesFilter | None = None
) -> SalesMatrices:
    """
    Build the four quantity matrices for a filter.

    Records without a store or without a derivable month are left out of
    every matrix. Stores and categories are sorted alphabetically; products
    are sorted by total quantity, highest first.
    """
    sales_filter = sales_filter or SalesFilter()
    frame = apply_filter(records_to_frame(records), sales_filter)

    valid = frame[(frame["store"].fillna("") != "") & frame["month"].notna()].copy()
    valid["month_name"] = [MONTHS[int(m)] for m in valid["month"]]

    store_category = _sparse_pivot(valid, "store", "category")
    store_month = _sparse_pivot(valid, "store", "month_name")
    product_month = _sparse_pivot(valid, "product", "month_name")
    product_store = _sparse_pivot(valid, "product", "store")

    stores = sorted(set(valid["store"]))
    categories = sorted(set(valid["category"]))
    products = sorted(
        product_month, key=lambda product: -sum(product_month[product].values())
    )

    return SalesMatrices(
        store_category=PivotMatrix(
            "Ventas por Tienda y Categoría", "Tienda", stores, categories, store_category
        ),
        store_month=PivotMatrix(
            "Ventas por Tienda y Mes", "Tienda", stores, list(MONTHS), store_month
        ),
        product_month=PivotMatrix(
            "Ventas por Producto y Mes", "Producto", products, list(MONTHS), product_month
        ),
        product_store=PivotMatrix(
            "Ventas por Producto y Tienda", "Producto", products, stores, product_store
        ),
    )


# --- Dashboard summaries ---


def available_categories(records: Iterable[SaleRecord]) -> list[str]:
    return sorted({record.category for record in records})


def available_stores(records: Iterable[SaleRecord]) -> list[str]:
    return sorted({record.store for record in records})


def compute_key_metrics(records: Iterable[SaleRecord]) -> dict:
    """Headline numbers over the whole consolidated set."""
    frame = records_to_frame(records)
    if len(frame) == 0:
        return {
            "total_quantity": 0,
            "total_revenue": 0.0,
            "top_store": ("N/A", 0),
            "top_product": ("N/A", 0),
        }

    by_store = frame.groupby("store", sort=False)["quantity"].sum()
    by_product = frame.groupby("product", sort=False)["quantity"].sum()

    return {
        "total_quantity": int(frame["quantity"].sum()),
        "total_revenue": float(frame["revenue"].sum()),
        "top_store": (by_store.idxmax(), int(by_store.max())),
        "top_product": (by_product.idxmax(), int(by_product.max())),
    }


def compute_monthly_trend(records: Iterable[SaleRecord]) -> pd.DataFrame:
    """
    Quantity per calendar month, split into 2025 and 2026 series.

    A record counts towards a year when it came from that year's export or
    its date falls in that year. Months with no dated sales are omitted.
    """
    frame = records_to_frame(records)
    frame = frame[frame["month"].notna()]
    if len(frame) == 0:
        return pd.DataFrame(columns=["month", "name", "2025", "2026"])

    dates = frame["date"].astype(str)
    frame = frame.assign(
        **{
            "2025": np.where(
                (frame["source"] == "2025") | dates.str.startswith("2025"),
                frame["quantity"], 0,
            ),
            "2026": np.where(
                (frame["source"] == "2026") | dates.str.startswith("2026"),
                frame["quantity"], 0,
            ),
        }
    )
    trend = frame.groupby("month")[["2025", "2026"]].sum().reset_index()
    trend["month"] = trend["month"].astype(int)
    trend["name"] = trend["month"].map(lambda m: MONTHS_SHORT[m])
    return trend[["month", "name", "2025", "2026"]]


def compute_category_mix(records: Iterable[SaleRecord], top: int = 6) -> pd.DataFrame:
    """Largest categories by quantity."""
    frame = records_to_frame(records)
    mix = (
        frame.groupby("category", sort=False)["quantity"]
        .sum()
        .sort_values(ascending=False, kind="stable")
        .head(top)
    )
    return mix.rename("value").rename_axis("name").reset_index()


def cutoff_label(year: str) -> str:
    """Cut-off caption shown above the matrices."""
    return "Todo el Periodo" if year == ALL else f"31/12/{year}"
