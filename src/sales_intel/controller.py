"""
Application controller: upload, delete and reload as commands over an
immutable state snapshot.

The dashboard holds one SalesController and re-renders from `state` after
every command. A command that fails leaves the previous snapshot in place.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from .clients.sodimac_client import SodimacClientLoader
from .core.consolidation import consolidate, unmapped_skus
from .core.models import FILE_TYPES, FileType, InventoryRecord, SaleRecord, SkuMaster, StoredFile
from .core.reader import read_workbook
from .exceptions import SalesIntelError, UnknownFileTypeError
from .storage import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_NAME = "upload.xlsx"


@dataclass(frozen=True)
class AppState:
    """Snapshot of everything the dashboard renders."""

    files: tuple[StoredFile, ...] = ()
    records: tuple[SaleRecord, ...] = ()
    skus: tuple[SkuMaster, ...] = ()
    inventory: tuple[InventoryRecord, ...] = ()
    consolidated: tuple[SaleRecord, ...] = ()

    @property
    def unmapped_skus(self) -> list[str]:
        return unmapped_skus(self.records, self.skus)


def _upload_name(source: Any, name: str | None) -> str:
    if name:
        return name
    if isinstance(source, (str, Path)):
        return Path(source).name
    return getattr(source, "name", None) or DEFAULT_UPLOAD_NAME


class SalesController:
    """
    Owns the record store and the current AppState.

    Usage:
        controller = SalesController(RecordStore())
        controller.reload()
        state = controller.upload(uploaded_file, "report2026")
    """

    def __init__(self, store: RecordStore | None = None, loader: SodimacClientLoader | None = None):
        self.store = store or RecordStore()
        self.loader = loader or SodimacClientLoader()
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    def reload(self) -> AppState:
        """Re-read the store and re-run the consolidation join."""
        data = self.store.load_all()
        self._state = AppState(
            files=tuple(data.files),
            records=tuple(data.records),
            skus=tuple(data.skus),
            inventory=tuple(data.inventory),
            consolidated=tuple(consolidate(data.records, data.skus)),
        )
        logger.info(
            "Loaded %d files, %d records, %d skus",
            len(data.files), len(data.records), len(data.skus),
        )
        return self._state

    def upload(self, source: Any, file_type: FileType, name: str | None = None) -> AppState:
        """
        Read, parse and persist one workbook, then reload.

        Raises:
            UnknownFileTypeError: file_type is not one of the four kinds
            ReadError: the workbook could not be decoded
            PersistenceError: the store rejected the write
        """
        if file_type not in FILE_TYPES:
            raise UnknownFileTypeError(f"Unsupported file type: {file_type!r}")

        name = _upload_name(source, name)
        try:
            rows = read_workbook(source)
            file_id = str(uuid.uuid4())
            parsed = self.loader.load(rows, file_type, file_id)
            meta = StoredFile(
                id=file_id,
                name=name,
                type=file_type,
                upload_date=datetime.now(),
                row_count=parsed.row_count,
            )
            self.store.save_upload(
                meta, records=parsed.records, skus=parsed.skus, inventory=parsed.inventory
            )
        except SalesIntelError:
            logger.exception("Error uploading file %s", name)
            raise

        return self.reload()

    def delete(self, file_id: str, confirm: Callable[[], bool]) -> AppState:
        """
        Delete a file and its rows once the user confirms.

        Declining is a no-op and returns the current snapshot.
        """
        if not confirm():
            logger.info("Delete of %s cancelled", file_id)
            return self._state

        try:
            self.store.delete_file(file_id)
        except SalesIntelError:
            logger.exception("Error deleting file %s", file_id)
            raise

        return self.reload()
