"""
Unified data model shared by the parsers, the record store and the reports.

Both sales exports end up as `SaleRecord`s; the SKU master and the
inventory extract keep their own shapes.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FileType = Literal["history2025", "report2026", "skuMaster", "inventory"]
FILE_TYPES: tuple[str, ...] = ("history2025", "report2026", "skuMaster", "inventory")

Source = Literal["2025", "2026"]


class SaleRecord(BaseModel):
    """One sales line from either export, keyed by its file and row."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(description="'<file_id>-<row index after the header>'")
    file_id: str
    date: str = Field(description="YYYY-MM-DD, or the raw text when unparsable")
    store: str
    category: str
    product: str
    quantity: int = 0
    revenue: float = 0.0
    sku: str | None = None
    source: Source


class SkuMaster(BaseModel):
    """Product classification row. Keyed by sku, not scoped to a file."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    sku: str
    description: str = ""
    group: str = ""


class StoredFile(BaseModel):
    """Metadata for one uploaded workbook."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    type: FileType
    upload_date: datetime
    row_count: int = 0


class InventoryRecord(BaseModel):
    """Stock position row from an inventory extract."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    file_id: str
    sku: str
    description: str = ""
    quantity: int = 0
    store: str
    date: str = ""


class ProcessingStats(BaseModel):
    """
    Ingestion counters.

    Declared for reporting integrations; the pipeline does not fill it in yet.
    """

    total_rows: int = 0
    history_rows: int = 0
    report_rows: int = 0
    mapped_rows: int = 0
    missing_skus: int = 0
