"""
Tests for the SQLAlchemy record store.
"""
import pytest

from sales_intel.core.models import InventoryRecord, SkuMaster
from sales_intel.exceptions import PersistenceError

from conftest import make_file, make_record


def test_save_upload_and_load_all(record_store):
    meta = make_file("f1", row_count=2)
    records = [make_record(file_id="f1"), make_record(file_id="f1", sku=None, quantity=4)]

    record_store.save_upload(meta, records=records)
    data = record_store.load_all()

    assert data.files == [meta]
    assert sorted(r.id for r in data.records) == sorted(r.id for r in records)
    assert {r.quantity for r in data.records} == {1, 4}
    assert data.skus == []


def test_put_and_get_all(record_store):
    record_store.put_file(make_file("f1"))
    record = make_record(file_id="f1", source="2026", sku="X1", revenue=12.5)
    record_store.put_record(record)
    item = InventoryRecord(id="f1-0", file_id="f1", sku="X1", quantity=3, store="Cali")
    record_store.put_inventory(item)

    assert record_store.get_all("records") == [record]
    assert record_store.get_all("inventory") == [item]
    assert [f.id for f in record_store.get_all("files")] == ["f1"]


def test_put_sku_upserts(record_store):
    record_store.put_sku(SkuMaster(sku="X1", group="Viejo"))
    record_store.put_sku(SkuMaster(sku="X1", group="Nuevo"))
    assert record_store.get_all("skus") == [SkuMaster(sku="X1", group="Nuevo")]


def test_save_upload_last_sku_in_batch_wins(record_store):
    skus = [SkuMaster(sku="X1", group="A"), SkuMaster(sku="X2", group="B"), SkuMaster(sku="X1", group="C")]
    record_store.save_upload(make_file("m1", "skuMaster"), skus=skus)
    assert {s.sku: s.group for s in record_store.get_all("skus")} == {"X1": "C", "X2": "B"}


def test_unknown_kind(record_store):
    with pytest.raises(ValueError):
        record_store.get_all("sales")
    with pytest.raises(ValueError):
        record_store.delete_by_file("skus", "f1")


def test_delete_by_file_only_touches_that_file(record_store):
    record_store.save_upload(make_file("f1"), records=[make_record(file_id="f1")])
    record_store.save_upload(make_file("f2"), records=[make_record(file_id="f2")])

    assert record_store.delete_by_file("records", "f1") == 1
    assert [r.file_id for r in record_store.get_all("records")] == ["f2"]


def test_delete_file_cascades(record_store):
    record_store.save_upload(make_file("f1"), records=[make_record(file_id="f1")])
    record_store.save_upload(
        make_file("inv", "inventory"),
        inventory=[InventoryRecord(id="inv-0", file_id="inv", sku="X1", store="Cali")],
    )
    record_store.save_upload(make_file("f2"), records=[make_record(file_id="f2")])

    deleted = record_store.delete_file("f1")
    assert deleted.id == "f1"
    record_store.delete_file("inv")

    data = record_store.load_all()
    assert [f.id for f in data.files] == ["f2"]
    assert [r.file_id for r in data.records] == ["f2"]
    assert data.inventory == []


def test_delete_unknown_file_is_harmless(record_store):
    record_store.save_upload(make_file("f1"), records=[make_record(file_id="f1")])
    assert record_store.delete_file("nope") is None
    assert len(record_store.get_all("records")) == 1


def test_deleting_a_sku_master_clears_every_sku(record_store):
    record_store.save_upload(make_file("m1", "skuMaster"), skus=[SkuMaster(sku="X1", group="Puertas")])
    record_store.save_upload(make_file("m2", "skuMaster"), skus=[SkuMaster(sku="X2", group="Marcos")])

    record_store.delete_file("m1")

    assert record_store.get_all("skus") == []
    assert [f.id for f in record_store.get_all("files")] == ["m2"]


def test_deleting_a_sales_file_keeps_skus(record_store):
    record_store.save_upload(make_file("m1", "skuMaster"), skus=[SkuMaster(sku="X1", group="Puertas")])
    record_store.save_upload(make_file("f1"), records=[make_record(file_id="f1")])

    record_store.delete_file("f1")

    assert len(record_store.get_all("skus")) == 1


def test_clear_all(record_store):
    record_store.put_sku(SkuMaster(sku="X1"))
    record_store.put_sku(SkuMaster(sku="X2"))
    assert record_store.clear_all("skus") == 2
    assert record_store.get_all("skus") == []


def test_failed_upload_writes_nothing(record_store):
    record = make_record(file_id="f1")
    record_store.save_upload(make_file("f1"), records=[record])

    with pytest.raises(PersistenceError):
        record_store.save_upload(make_file("f2"), records=[record])

    assert [f.id for f in record_store.get_all("files")] == ["f1"]
    assert len(record_store.get_all("records")) == 1
