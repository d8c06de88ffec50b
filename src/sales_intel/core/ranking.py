"""
Multi-month store ranking by cumulative rank sum.

Each month every store is ranked by units sold (1 = best). Ranks are added
up month by month, and the store with the lowest total across the year
wins. Ties inside a month go to the store whose name sorts first.
"""

from dataclasses import dataclass, field
from typing import Iterable

import pandas as pd

from .aggregation import MONTHS, PivotMatrix

# Added instead of a rank for a month in which a store was not ranked
MISSING_RANK_PENALTY = 999


@dataclass
class RankingEntry:
    position: int
    store: str
    points: int


@dataclass
class StoreRanking:
    """
    Full ranking output.

    monthly_ranks: store x month rank table (NaN where the store was not ranked)
    cumulative: store x month running sum of ranks (penalties included)
    final: stores ordered best first
    """

    months: list[str]
    monthly_ranks: pd.DataFrame
    cumulative: pd.DataFrame
    final: list[RankingEntry] = field(default_factory=list)

    def points(self, store: str) -> int:
        return int(self.cumulative.loc[store].iloc[-1])

    def position(self, store: str) -> int:
        for entry in self.final:
            if entry.store == store:
                return entry.position
        raise KeyError(store)


def rank_month(scores: pd.Series) -> pd.Series:
    """
    Rank stores for one month: highest quantity first, ties alphabetical.

    Args:
        scores: quantity per store (index = store name)

    Returns:
        Series store -> rank (1..N)
    """
    ordered = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
    return pd.Series(
        {store: position for position, (store, _) in enumerate(ordered, start=1)},
        dtype=int,
    )


def rank_stores(
    store_month: PivotMatrix,
    stores: Iterable[str] | None = None,
    months: list[str] | None = None,
) -> StoreRanking:
    """
    Build the cumulative rank-sum ranking from a Store x Month matrix.

    Args:
        store_month: quantity matrix with stores as rows
        stores: stores to report on; defaults to the matrix rows. A store
            missing from the matrix gets the penalty for every month.
        months: month columns in calendar order; defaults to January-December

    Returns:
        StoreRanking with per-month ranks, running totals and final order
    """
    months = list(months or MONTHS)
    ranked_stores = list(store_month.rows)
    stores = list(stores) if stores is not None else ranked_stores

    quantities = pd.DataFrame(
        [[store_month.data.get(store, {}).get(month, 0) for month in months] for store in ranked_stores],
        index=pd.Index(ranked_stores, dtype=object),
        columns=months,
    )

    monthly_ranks = pd.DataFrame(
        {month: rank_month(quantities[month]) for month in months},
        index=pd.Index(ranked_stores, dtype=object),
        columns=months,
    ).reindex(stores)

    cumulative = monthly_ranks.fillna(MISSING_RANK_PENALTY).cumsum(axis=1).astype(int)

    final_points = [(store, int(cumulative.loc[store].iloc[-1])) for store in stores]
    final_points.sort(key=lambda item: (item[1], item[0]))
    final = [
        RankingEntry(position=position, store=store, points=points)
        for position, (store, points) in enumerate(final_points, start=1)
    ]

    return StoreRanking(
        months=months, monthly_ranks=monthly_ranks, cumulative=cumulative, final=final
    )
