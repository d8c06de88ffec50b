"""
Pytest fixtures for the Sales Intel tests.

Provides row matrices for each export format, a SQLite-backed record store
and a helper that builds real .xlsx bytes with openpyxl.
"""

import io
import itertools
from datetime import datetime

import openpyxl
import pytest

from sales_intel.core.cells import from_values
from sales_intel.core.models import SaleRecord, StoredFile
from sales_intel.storage import RecordStore


_record_ids = itertools.count()


def make_rows(*raw_rows):
    """Wrap raw python rows as tagged cell rows."""
    return [from_values(row) for row in raw_rows]


def make_workbook(rows, extra_sheets=()) -> bytes:
    """Serialize rows into the first sheet of an in-memory workbook."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(list(row))
    for extra in extra_sheets:
        other = workbook.create_sheet()
        for row in extra:
            other.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def make_record(
    store="Cali",
    date="2025-03-01",
    quantity=1,
    category="Puertas",
    product="Puerta Blanca",
    source="2025",
    sku=None,
    revenue=0.0,
    file_id="f1",
) -> SaleRecord:
    """SaleRecord with sensible defaults and a unique id."""
    return SaleRecord(
        id=f"{file_id}-{next(_record_ids)}",
        file_id=file_id,
        date=date,
        store=store,
        category=category,
        product=product,
        quantity=quantity,
        revenue=revenue,
        sku=sku,
        source=source,
    )


def make_file(file_id="f1", file_type="history2025", name="ventas.xlsx", row_count=0) -> StoredFile:
    return StoredFile(
        id=file_id,
        name=name,
        type=file_type,
        upload_date=datetime(2026, 1, 15, 10, 30),
        row_count=row_count,
    )


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def history_rows():
    """2025 history export: title rows, then the header, then sales."""
    return make_rows(
        ["Informe de ventas 2025"],
        [],
        ["Fecha", "Tienda", "Grupo", "Descripcion", "Cantidad"],
        ["01/03/2025", "SODIMAC - CALI", "Puertas", "Puerta Blanca", "10"],
        [None, "SODIMAC - CALI", "Puertas", "Puerta Blanca", 4],
        [45717, "SODIMAC - BOGOTA NORTE", None, None, "abc"],
    )


@pytest.fixture
def report_rows():
    """2026 sell-out report with the store in the second column."""
    return make_rows(
        ["Reporte de sell out", "Sodimac Colombia"],
        [
            "Fecha inicial",
            "Local",
            "Código de ítem",
            "Descripción del ítem",
            "Unidades",
            "Venta neta",
            "Fecha final",
        ],
        ["01/01/2026", "SODIMAC - MEDELLIN", "X1", "Puerta Roble", 3, "$1,234.50", "31/01/2026"],
        ["01/01/2026", "SODIMAC - MEDELLIN", 7701234567890, "Marco", "2", 500, 46053],
        ["01/01/2026", "SODIMAC - PASTO", None, None, 1, None, None],
        [None, "SODIMAC - PASTO", "Z9", "Bisagra", 5, "$10", None],
    )


@pytest.fixture
def sku_rows():
    return make_rows(
        ["Maestro de productos"],
        ["SKU", "Descripcion", "Grupo"],
        ["X1", "Puerta Roble", "Puertas"],
        [7701234567890, "Marco", "Marcos"],
        [None, "Sin codigo", "Otros"],
    )


@pytest.fixture
def record_store(tmp_path):
    """Record store backed by a throwaway SQLite file."""
    return RecordStore(f"sqlite:///{tmp_path / 'sales.db'}")
