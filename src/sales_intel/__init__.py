"""Sales Intel: consolidated retail sales reporting from spreadsheet exports."""

from .controller import AppState, SalesController
from .storage import RecordStore

__version__ = "0.1.0"

__all__ = ["AppState", "SalesController", "RecordStore"]
