"""
Consolidation join: classify sales records against the SKU master.

The 2026 report carries no category, only a SKU. Records are persisted as
parsed, and the category is derived here every time the data is read back,
so uploading or deleting a SKU master re-classifies existing sales without
rewriting them.
"""

from dataclasses import dataclass, field
from typing import Iterable

from .models import SaleRecord, SkuMaster

MISSING_MASTER_CATEGORY = "Sin Asignar (Falta Master)"


def build_sku_map(skus: Iterable[SkuMaster]) -> dict[str, str]:
    """sku -> group. Later rows overwrite earlier ones for the same sku."""
    return {item.sku: item.group for item in skus}


def classify(record: SaleRecord, sku_map: dict[str, str]) -> str:
    """
    Category a record should be reported under.

    - "2025" records were classified at parse time and keep their category
    - "2026" records with a SKU take the master's group, or the
      missing-master sentinel when the SKU is unknown or its group is blank
    - "2026" records without a SKU keep their pending placeholder
    """
    if record.source == "2026" and record.sku:
        return sku_map.get(record.sku) or MISSING_MASTER_CATEGORY
    return record.category


def consolidate(
    records: Iterable[SaleRecord], skus: Iterable[SkuMaster]
) -> list[SaleRecord]:
    """
    Project stored records onto their reporting categories.

    Pure: inputs are not modified and the same inputs always give the same
    output, so running it twice is the same as running it once.
    """
    sku_map = build_sku_map(skus)
    consolidated = []
    for record in records:
        category = classify(record, sku_map)
        if category != record.category:
            record = record.model_copy(update={"category": category})
        consolidated.append(record)
    return consolidated


@dataclass
class ConsolidationResult:
    """Summary of how many 2026 records the SKU master could classify."""

    total_records: int
    mapped_records: int
    unmapped_skus: list[str] = field(default_factory=list)

    @property
    def match_rate(self) -> float:
        if self.total_records == 0:
            return 0
        return self.mapped_records / self.total_records

    def summary(self) -> dict:
        return {
            "total": self.total_records,
            "mapped": self.mapped_records,
            "unmapped_skus": len(self.unmapped_skus),
            "match_rate": f"{self.match_rate:.1%}",
        }


def summarize_mapping(
    records: Iterable[SaleRecord], skus: Iterable[SkuMaster]
) -> ConsolidationResult:
    """Count 2026 records with a SKU and list the SKUs the master does not classify."""
    sku_map = build_sku_map(skus)
    total = 0
    mapped = 0
    missing: dict[str, None] = {}
    for record in records:
        if record.source != "2026" or not record.sku:
            continue
        total += 1
        if sku_map.get(record.sku):
            mapped += 1
        else:
            missing.setdefault(record.sku)
    return ConsolidationResult(
        total_records=total, mapped_records=mapped, unmapped_skus=list(missing)
    )


def unmapped_skus(records: Iterable[SaleRecord], skus: Iterable[SkuMaster]) -> list[str]:
    """Distinct 2026 SKUs with no master group, in first-seen order."""
    return summarize_mapping(records, skus).unmapped_skus
