"""
Tests for the cumulative rank-sum store ranking.
"""
import pandas as pd
import pytest

from sales_intel.core.aggregation import MONTHS, PivotMatrix, build_matrices
from sales_intel.core.ranking import MISSING_RANK_PENALTY, rank_month, rank_stores

from conftest import make_record


def store_month(data):
    return PivotMatrix("Ventas por Tienda y Mes", "Tienda", sorted(data), list(MONTHS), data)


def test_rank_month_orders_by_quantity():
    ranks = rank_month(pd.Series({"Cali": 5, "Bogota": 9, "Pasto": 1}))
    assert ranks.to_dict() == {"Bogota": 1, "Cali": 2, "Pasto": 3}


def test_rank_month_ties_are_alphabetical():
    ranks = rank_month(pd.Series({"Pasto": 3, "Armenia": 3, "Cali": 7}))
    assert ranks.to_dict() == {"Cali": 1, "Armenia": 2, "Pasto": 3}


def test_consistent_leader_wins_over_two_months():
    matrix = store_month({
        "Tienda B": {"Enero": 3, "Febrero": 4},
        "Tienda A": {"Enero": 10, "Febrero": 8},
    })
    ranking = rank_stores(matrix, months=["Enero", "Febrero"])

    assert ranking.points("Tienda A") == 2
    assert ranking.points("Tienda B") == 4
    assert ranking.points("Tienda A") < ranking.points("Tienda B")
    assert ranking.final[0].store == "Tienda A"
    assert ranking.final[0].position == 1


def test_cumulative_points_over_the_year():
    matrix = store_month({
        "Armenia": {"Enero": 10, "Febrero": 10},
        "Cali": {"Enero": 1},
    })
    ranking = rank_stores(matrix)

    assert list(ranking.cumulative.columns) == MONTHS
    assert list(ranking.cumulative.loc["Armenia"]) == list(range(1, 13))
    assert list(ranking.cumulative.loc["Cali"]) == list(range(2, 25, 2))
    assert [e.store for e in ranking.final] == ["Armenia", "Cali"]
    assert ranking.position("Cali") == 2


def test_monthly_ranks_table():
    matrix = store_month({
        "Cali": {"Enero": 1, "Marzo": 9},
        "Pasto": {"Enero": 5},
    })
    ranking = rank_stores(matrix)
    assert ranking.monthly_ranks.loc["Pasto", "Enero"] == 1
    assert ranking.monthly_ranks.loc["Cali", "Enero"] == 2
    assert ranking.monthly_ranks.loc["Cali", "Marzo"] == 1


def test_store_without_entries_gets_penalty():
    matrix = store_month({"Cali": {"Enero": 4}})
    ranking = rank_stores(matrix, stores=["Cali", "Pasto"])

    assert ranking.points("Cali") == 12
    assert ranking.points("Pasto") == MISSING_RANK_PENALTY * 12
    assert pd.isna(ranking.monthly_ranks.loc["Pasto", "Enero"])
    assert [e.store for e in ranking.final] == ["Cali", "Pasto"]


def test_final_ties_are_alphabetical():
    matrix = store_month({
        "Cali": {"Enero": 5, "Febrero": 1},
        "Bogota": {"Enero": 1, "Febrero": 5},
    })
    ranking = rank_stores(matrix, months=["Enero", "Febrero"])
    assert ranking.points("Cali") == ranking.points("Bogota") == 3
    assert [e.store for e in ranking.final] == ["Bogota", "Cali"]


def test_ranking_from_built_matrices():
    records = [
        make_record(store="Cali", date="2025-01-05", quantity=10),
        make_record(store="Pasto", date="2025-01-05", quantity=2),
        make_record(store="Cali", date="2025-02-05", quantity=6),
        make_record(store="Pasto", date="2025-02-05", quantity=1),
    ]
    ranking = rank_stores(build_matrices(records).store_month)
    assert ranking.final[0].store == "Cali"
    assert ranking.final[0].points == 12
    assert ranking.final[1].points == 24


def test_empty_matrix():
    ranking = rank_stores(store_month({}))
    assert ranking.final == []
    with pytest.raises(KeyError):
        ranking.position("Cali")
