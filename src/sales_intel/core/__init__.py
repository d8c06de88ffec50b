# Core reusable components for retail sales consolidation
# These patterns can be reused across different retail clients

from .cells import EMPTY, DateCell, Number, Text, as_int, as_money, as_text, is_blank
from .parsers import (
    DateNormalizer,
    StoreNameNormalizer,
    clean_store_name,
    month_index,
    parse_excel_date,
)
from .models import InventoryRecord, ProcessingStats, SaleRecord, SkuMaster, StoredFile
from .reader import read_workbook
from .consolidation import (
    MISSING_MASTER_CATEGORY,
    ConsolidationResult,
    build_sku_map,
    consolidate,
    summarize_mapping,
)
from .aggregation import (
    MONTHS,
    PivotMatrix,
    SalesFilter,
    SalesMatrices,
    build_matrices,
    compute_key_metrics,
    compute_monthly_trend,
    compute_category_mix,
)
from .ranking import MISSING_RANK_PENALTY, StoreRanking, rank_stores

__all__ = [
    "EMPTY",
    "DateCell",
    "Number",
    "Text",
    "as_int",
    "as_money",
    "as_text",
    "is_blank",
    "DateNormalizer",
    "StoreNameNormalizer",
    "clean_store_name",
    "month_index",
    "parse_excel_date",
    "InventoryRecord",
    "ProcessingStats",
    "SaleRecord",
    "SkuMaster",
    "StoredFile",
    "read_workbook",
    "MISSING_MASTER_CATEGORY",
    "ConsolidationResult",
    "build_sku_map",
    "consolidate",
    "summarize_mapping",
    "MONTHS",
    "PivotMatrix",
    "SalesFilter",
    "SalesMatrices",
    "build_matrices",
    "compute_key_metrics",
    "compute_monthly_trend",
    "compute_category_mix",
    "MISSING_RANK_PENALTY",
    "StoreRanking",
    "rank_stores",
]
