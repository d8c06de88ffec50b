"""
Client-specific parsers for the Sodimac sales exports.

THIS FILE CONTAINS CLIENT-SPECIFIC HARDCODED LOGIC:
- Header keywords for each export (Spanish column names, with and without accents)
- Which column holds the store in the 2026 report (fixed position, no header)
- Fallback labels for blank categories and products
- The pending category placeholder used until the SKU master is joined in

To adapt for a new client:
1. Copy this file as a template
2. Update the header keywords in each loader method
3. Adjust the fallback labels and sentinels
4. The core cells, parsers and reports can be reused as-is
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..core.cells import Row, as_int, as_money, as_text, cell_at, is_blank
from ..core.models import FileType, InventoryRecord, SaleRecord, SkuMaster
from ..core.parsers import (
    DateNormalizer,
    StoreNameNormalizer,
    find_any_column,
    find_column,
    find_header_row,
    find_named_column,
    header_texts,
)
from ..exceptions import UnknownFileTypeError

logger = logging.getLogger(__name__)

NO_CATEGORY = "Sin Categoría"
UNKNOWN_PRODUCT = "Producto Desconocido"
UNKNOWN_REPORT_PRODUCT = "Desconocido"
PENDING_CATEGORY = "Pendiente"


@dataclass
class ParsedUpload:
    """Container for everything parsed out of one workbook."""

    file_type: FileType
    records: list[SaleRecord] = field(default_factory=list)
    skus: list[SkuMaster] = field(default_factory=list)
    inventory: list[InventoryRecord] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.records) + len(self.skus) + len(self.inventory)


class SodimacClientLoader:
    """
    Parses the four workbook kinds this client uploads.

    Client-specific quirks handled:
    - The 2025 history has a plain header ("Fecha", "Tienda", "Grupo", ...)
      somewhere below a report title
    - The 2026 report puts the store in the second column with no usable
      header, dates in "Fecha final", and revenue as "$1,234.50" text
    - The 2026 report has no category; it is looked up from the SKU master
      when the data is read back
    - Store names come prefixed with "SODIMAC - " and in upper case
    """

    # 2026 report column keywords, most specific first
    REPORT_DATE_HEADERS = ("fecha final", "fecha")
    REPORT_PRODUCT_HEADERS = ("descripción del ítem", "descripcion del item", "artículo")
    REPORT_QTY_HEADERS = ("cantidad vendida", "unidades")
    REPORT_SKU_HEADERS = ("código de ítem", "sku", "comprador")
    REPORT_REVENUE_HEADERS = ("precio neto", "venta neta", "revenue")
    REPORT_STORE_COLUMN = 1

    def __init__(self):
        self.date_normalizer = DateNormalizer()
        self.store_normalizer = StoreNameNormalizer()

    def load(self, rows: Sequence[Row], file_type: FileType, file_id: str) -> ParsedUpload:
        """
        Dispatch a decoded workbook to the parser for its file type.

        The date cache only lives for one workbook, so a long-running loader
        does not accumulate every date it has ever seen.
        """
        self.date_normalizer.clear_cache()
        if file_type == "history2025":
            return ParsedUpload(file_type, records=self.load_history_2025(rows, file_id))
        if file_type == "report2026":
            return ParsedUpload(file_type, records=self.load_report_2026(rows, file_id))
        if file_type == "skuMaster":
            return ParsedUpload(file_type, skus=self.load_sku_master(rows))
        if file_type == "inventory":
            return ParsedUpload(file_type, inventory=self.load_inventory(rows, file_id))
        raise UnknownFileTypeError(f"Unsupported file type: {file_type!r}")

    def load_history_2025(self, rows: Sequence[Row], file_id: str) -> list[SaleRecord]:
        """
        Parse the 2025 sales history.

        Client-specific handling:
        - Header is the first row mentioning "fecha"
        - Date column must be named exactly "Fecha"
        - Rows without a date are skipped, but still count towards the row index
        - Category comes straight from the "Grupo" column
        """
        header_index = find_header_row(rows, lambda text, _row: "fecha" in text)
        if header_index is None:
            logger.info("History file %s: no header row found", file_id)
            return []

        headers = header_texts(rows[header_index])
        idx_date = headers.index("fecha") if "fecha" in headers else None
        idx_store = find_named_column(headers, "tienda")
        idx_group = find_named_column(headers, "grupo")
        idx_desc = find_named_column(headers, "descripcion")
        idx_qty = find_any_column(headers, "cantidad", "cant")
        logger.debug(
            "History columns: date=%s store=%s group=%s desc=%s qty=%s",
            idx_date, idx_store, idx_group, idx_desc, idx_qty,
        )

        records = []
        for index, row in enumerate(rows[header_index + 1:]):
            date_cell = cell_at(row, idx_date)
            if is_blank(date_cell):
                continue

            records.append(
                SaleRecord(
                    id=f"{file_id}-{index}",
                    file_id=file_id,
                    date=self.date_normalizer.normalize(date_cell),
                    store=self.store_normalizer.normalize(cell_at(row, idx_store)),
                    category=as_text(cell_at(row, idx_group)) or NO_CATEGORY,
                    product=as_text(cell_at(row, idx_desc)) or UNKNOWN_PRODUCT,
                    quantity=as_int(cell_at(row, idx_qty)),
                    revenue=0.0,
                    sku=None,
                    source="2025",
                )
            )
        return records

    def load_report_2026(self, rows: Sequence[Row], file_id: str) -> list[SaleRecord]:
        """
        Parse the 2026 sell-out report.

        Client-specific handling:
        - Header is the first row mentioning "fecha final" or "ean", or a
          "descripción" column in a row wider than 5 cells
        - Store is always the second column
        - Revenue may be currency text
        - A row is only dropped when it has neither date nor SKU
        """

        def is_header(text: str, row: Row) -> bool:
            return (
                "fecha final" in text
                or "ean" in text
                or ("descripción" in text and len(row) > 5)
            )

        header_index = find_header_row(rows, is_header)
        if header_index is None:
            logger.info("Report file %s: no header row found", file_id)
            return []

        headers = header_texts(rows[header_index])
        idx_date = find_column(headers, *self.REPORT_DATE_HEADERS)
        idx_product = find_column(headers, *self.REPORT_PRODUCT_HEADERS)
        idx_qty = find_column(headers, *self.REPORT_QTY_HEADERS)
        idx_sku = find_column(headers, *self.REPORT_SKU_HEADERS)
        idx_revenue = find_column(headers, *self.REPORT_REVENUE_HEADERS)
        logger.debug(
            "Report columns: date=%s product=%s qty=%s sku=%s revenue=%s",
            idx_date, idx_product, idx_qty, idx_sku, idx_revenue,
        )

        records = []
        for index, row in enumerate(rows[header_index + 1:]):
            date_cell = cell_at(row, idx_date)
            sku_cell = cell_at(row, idx_sku)
            if is_blank(date_cell) and is_blank(sku_cell):
                continue

            records.append(
                SaleRecord(
                    id=f"{file_id}-{index}",
                    file_id=file_id,
                    date=self.date_normalizer.normalize(date_cell),
                    store=self.store_normalizer.normalize(
                        cell_at(row, self.REPORT_STORE_COLUMN)
                    ),
                    category=PENDING_CATEGORY,
                    product=as_text(cell_at(row, idx_product)) or UNKNOWN_REPORT_PRODUCT,
                    quantity=as_int(cell_at(row, idx_qty)),
                    revenue=as_money(cell_at(row, idx_revenue)),
                    sku=as_text(sku_cell) or None,
                    source="2026",
                )
            )
        return records

    def load_sku_master(self, rows: Sequence[Row]) -> list[SkuMaster]:
        """
        Parse the SKU classification master.

        Rows are not tied to the uploading file; the store upserts them by sku.
        """
        header_index = find_header_row(
            rows, lambda text, _row: "sku" in text or "item" in text
        )
        if header_index is None:
            logger.info("SKU master: no header row found")
            return []

        headers = header_texts(rows[header_index])
        idx_sku = find_column(headers, "sku", "item", "codigo")
        idx_desc = find_column(headers, "descripcion")
        idx_group = find_column(headers, "grupo", "categoria")

        skus = []
        for row in rows[header_index + 1:]:
            sku = as_text(cell_at(row, idx_sku))
            if not sku:
                continue
            skus.append(
                SkuMaster(
                    sku=sku,
                    description=as_text(cell_at(row, idx_desc)),
                    group=as_text(cell_at(row, idx_group)),
                )
            )
        return skus

    def load_inventory(self, rows: Sequence[Row], file_id: str) -> list[InventoryRecord]:
        """
        Parse a store inventory extract.

        Client-specific handling:
        - Header is the first row mentioning a SKU/EAN/code column
        - Store names get the same cleanup as the sales exports
        """
        header_index = find_header_row(
            rows,
            lambda text, _row: any(k in text for k in ("sku", "ean", "código", "codigo")),
        )
        if header_index is None:
            logger.info("Inventory file %s: no header row found", file_id)
            return []

        headers = header_texts(rows[header_index])
        idx_sku = find_column(headers, "sku", "ean", "código", "codigo")
        idx_desc = find_column(headers, "descripci")
        idx_qty = find_column(
            headers, "inventario", "existencia", "stock", "cantidad", "unidades"
        )
        idx_store = find_column(headers, "tienda", "local")
        idx_date = find_column(headers, "fecha")

        items = []
        for index, row in enumerate(rows[header_index + 1:]):
            sku = as_text(cell_at(row, idx_sku))
            if not sku:
                continue
            items.append(
                InventoryRecord(
                    id=f"{file_id}-{index}",
                    file_id=file_id,
                    sku=sku,
                    description=as_text(cell_at(row, idx_desc)),
                    quantity=as_int(cell_at(row, idx_qty)),
                    store=self.store_normalizer.normalize(cell_at(row, idx_store)),
                    date=self.date_normalizer.normalize(cell_at(row, idx_date)),
                )
            )
        return items
