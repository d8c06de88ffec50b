"""
Exceptions raised by the ingestion pipeline.

All failures are terminal for the operation that raised them: nothing is
retried, and persisted data is left as it was before the operation started.
"""


class SalesIntelError(Exception):
    """Base class for all errors raised by this package."""


class ReadError(SalesIntelError):
    """The uploaded workbook could not be decoded."""


class PersistenceError(SalesIntelError):
    """The record store failed to read or write."""


class UnknownFileTypeError(SalesIntelError):
    """An upload was tagged with a file type the pipeline does not handle."""
