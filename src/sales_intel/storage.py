"""
Record store: persistence for uploaded files and everything parsed from them.

Four tables:
- files:     one row per uploaded workbook
- records:   sales lines, owned by a file (deleted with it)
- skus:      SKU master, keyed by sku code and shared across files
- inventory: inventory lines, owned by a file

Each upload and each delete runs in a single transaction, so a failed
parse or write never leaves half a file behind.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from sqlalchemy import Column, DateTime, Float, Integer, String, create_engine, delete, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import DB_ECHO, DB_URL
from .core.models import InventoryRecord, SaleRecord, SkuMaster, StoredFile
from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

Base = declarative_base()


class FileRow(Base):
    __tablename__ = "files"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)
    upload_date = Column(DateTime, nullable=False)
    row_count = Column(Integer, nullable=False, default=0)


class RecordRow(Base):
    __tablename__ = "records"

    id = Column(String, primary_key=True)
    file_id = Column(String, nullable=False, index=True)
    date = Column(String, nullable=False, default="")
    store = Column(String, nullable=False)
    category = Column(String, nullable=False)
    product = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    revenue = Column(Float, nullable=False, default=0.0)
    sku = Column(String, nullable=True)
    source = Column(String, nullable=False)


class SkuRow(Base):
    __tablename__ = "skus"

    sku = Column(String, primary_key=True)
    description = Column(String, nullable=False, default="")
    group = Column(String, nullable=False, default="")


class InventoryRow(Base):
    __tablename__ = "inventory"

    id = Column(String, primary_key=True)
    file_id = Column(String, nullable=False, index=True)
    sku = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=0)
    store = Column(String, nullable=False)
    date = Column(String, nullable=False, default="")


# kind -> (table, model, primary key column)
KINDS = {
    "files": (FileRow, StoredFile, FileRow.id),
    "records": (RecordRow, SaleRecord, RecordRow.id),
    "skus": (SkuRow, SkuMaster, SkuRow.sku),
    "inventory": (InventoryRow, InventoryRecord, InventoryRow.id),
}

# kinds whose rows belong to a file
FILE_OWNED = {
    "files": FileRow.id,
    "records": RecordRow.file_id,
    "inventory": InventoryRow.file_id,
}


@dataclass
class StoredData:
    """Everything in the store, as read back by `RecordStore.load_all`."""

    files: list[StoredFile] = field(default_factory=list)
    records: list[SaleRecord] = field(default_factory=list)
    skus: list[SkuMaster] = field(default_factory=list)
    inventory: list[InventoryRecord] = field(default_factory=list)


def _ensure_sqlite_dir(url: str) -> None:
    parsed = make_url(url)
    if parsed.drivername.startswith("sqlite") and parsed.database not in (None, "", ":memory:"):
        Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


class RecordStore:
    """
    SQLAlchemy-backed store implementing the put / get-all / delete-by-file
    contract the pipeline relies on.

    Usage:
        store = RecordStore("sqlite:///data/sales_intel.db")
        store.save_upload(meta, records=records)
        data = store.load_all()
    """

    def __init__(self, db_url: str | None = None, echo: bool | None = None, engine: Engine | None = None):
        if engine is None:
            url = db_url or DB_URL
            _ensure_sqlite_dir(url)
            engine = create_engine(url, echo=DB_ECHO if echo is None else echo)
        self.engine = engine
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not initialize database: {exc}") from exc

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide transaction scope for database operations."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            raise PersistenceError(str(exc)) from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # --- single-item writes ---

    def put_file(self, meta: StoredFile) -> None:
        with self.session_scope() as session:
            session.merge(FileRow(**meta.model_dump()))

    def put_record(self, record: SaleRecord) -> None:
        with self.session_scope() as session:
            session.merge(RecordRow(**record.model_dump()))

    def put_sku(self, sku: SkuMaster) -> None:
        """Upsert by sku code; the latest write wins."""
        with self.session_scope() as session:
            session.merge(SkuRow(**sku.model_dump()))

    def put_inventory(self, item: InventoryRecord) -> None:
        with self.session_scope() as session:
            session.merge(InventoryRow(**item.model_dump()))

    # --- reads ---

    def get_all(self, kind: str) -> list:
        """Every row of a kind ("files", "records", "skus", "inventory"), in key order."""
        table, model, key = self._kind(kind)
        with self.session_scope() as session:
            rows = session.scalars(select(table).order_by(key)).all()
            return [model.model_validate(row) for row in rows]

    def load_all(self) -> StoredData:
        """Read every table in one transaction."""
        with self.session_scope() as session:
            data = StoredData()
            for kind in KINDS:
                table, model, key = KINDS[kind]
                rows = session.scalars(select(table).order_by(key)).all()
                setattr(data, kind, [model.model_validate(row) for row in rows])
            return data

    # --- deletes ---

    def delete_by_file(self, kind: str, file_id: str) -> int:
        """Delete the rows of `kind` owned by a file. Returns the row count."""
        if kind not in FILE_OWNED:
            raise ValueError(f"{kind!r} rows are not owned by a file")
        with self.session_scope() as session:
            return self._delete_owned(session, kind, file_id)

    def clear_all(self, kind: str) -> int:
        """Delete every row of a kind."""
        table, _, _ = self._kind(kind)
        with self.session_scope() as session:
            return session.execute(delete(table)).rowcount

    # --- transactional operations ---

    def save_upload(
        self,
        meta: StoredFile,
        records: Iterable[SaleRecord] = (),
        skus: Iterable[SkuMaster] = (),
        inventory: Iterable[InventoryRecord] = (),
    ) -> None:
        """Persist a file and everything parsed from it, all or nothing."""
        with self.session_scope() as session:
            session.merge(FileRow(**meta.model_dump()))
            session.add_all(RecordRow(**record.model_dump()) for record in records)
            session.add_all(InventoryRow(**item.model_dump()) for item in inventory)
            # last occurrence of a sku in the batch wins
            latest = {sku.sku: sku for sku in skus}
            for sku in latest.values():
                session.merge(SkuRow(**sku.model_dump()))
        logger.info("Saved file %s (%s, %d rows)", meta.name, meta.type, meta.row_count)

    def delete_file(self, file_id: str) -> StoredFile | None:
        """
        Delete a file and the rows it owns.

        SKU master rows are not tracked per file: deleting any skuMaster file
        clears the whole SKU table, including rows other files contributed.
        """
        with self.session_scope() as session:
            row = session.get(FileRow, file_id)
            meta = StoredFile.model_validate(row) if row is not None else None

            removed = self._delete_owned(session, "records", file_id)
            removed += self._delete_owned(session, "inventory", file_id)
            self._delete_owned(session, "files", file_id)

            if meta is not None and meta.type == "skuMaster":
                removed += session.execute(delete(SkuRow)).rowcount

        logger.info("Deleted file %s (%d dependent rows)", file_id, removed)
        return meta

    def _delete_owned(self, session: Session, kind: str, file_id: str) -> int:
        table = KINDS[kind][0]
        return session.execute(delete(table).where(FILE_OWNED[kind] == file_id)).rowcount

    def _kind(self, kind: str):
        try:
            return KINDS[kind]
        except KeyError:
            raise ValueError(f"Unknown kind {kind!r}; expected one of {sorted(KINDS)}") from None
