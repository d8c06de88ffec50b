"""
Reusable parsers for the field formats found in retail spreadsheet exports.

These parsers handle the messy reality of vendor exports:
- Dates stored as spreadsheet serials, native dates or D/M/Y text
- Store names carrying the retailer prefix and random casing
- Header rows buried under report titles and filter summaries
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, Sequence

from .cells import Cell, DateCell, Number, as_text, is_blank, to_cell


class DateNormalizer:
    """
    Normalizes spreadsheet date cells to ISO `YYYY-MM-DD` strings.

    Handles:
    - Serial numbers counted in days from 1899-12-30 (the spreadsheet epoch,
      25569 days before 1970-01-01)
    - Cells the workbook already typed as dates
    - D/M/Y text, rewritten to Y-M-D as written

    Anything else is passed through untouched; callers must tolerate
    unparsable strings (see `month_index`).
    """

    EPOCH = datetime(1899, 12, 30)
    MS_PER_DAY = 86_400_000

    def __init__(self):
        self._cache: dict[Cell, str] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def normalize(self, value: Any) -> str:
        cell = to_cell(value)
        if cell in self._cache:
            return self._cache[cell]
        result = self._normalize(cell)
        self._cache[cell] = result
        return result

    def _normalize(self, cell: Cell) -> str:
        if is_blank(cell):
            return ""

        if isinstance(cell, Number):
            try:
                moment = self.EPOCH + timedelta(
                    milliseconds=round(cell.value * self.MS_PER_DAY)
                )
            except (OverflowError, ValueError):
                return as_text(cell)
            return moment.strftime("%Y-%m-%d")

        if isinstance(cell, DateCell):
            return cell.value.strftime("%Y-%m-%d")

        text = as_text(cell)
        parts = text.split("/")
        if len(parts) == 3:
            day, month, year = parts
            return f"{year}-{month}-{day}"
        return text


class StoreNameNormalizer:
    """
    Canonicalizes store names so the same store matches across exports.

    "SODIMAC - VILLAVICENCIO" -> "Villavicencio"
    "sodimac-bogota  norte"   -> "Bogota Norte"
    blank                     -> "Desconocida"
    """

    UNKNOWN_STORE = "Desconocida"
    DEFAULT_PREFIX = re.compile(r"^SODIMAC\s*-\s*", re.IGNORECASE)

    def __init__(self, prefix: re.Pattern | None = None):
        self.prefix = prefix or self.DEFAULT_PREFIX

    def normalize(self, value: Any) -> str:
        text = as_text(to_cell(value))
        if not text:
            return self.UNKNOWN_STORE

        cleaned = self.prefix.sub("", text)
        words = cleaned.lower().split()
        return " ".join(word[:1].upper() + word[1:] for word in words)


_default_dates = DateNormalizer()
_default_stores = StoreNameNormalizer()


def parse_excel_date(value: Any) -> str:
    """Normalize one date cell with the shared DateNormalizer."""
    return _default_dates.normalize(value)


def clean_store_name(value: Any) -> str:
    """Canonicalize one store name with the shared StoreNameNormalizer."""
    return _default_stores.normalize(value)


_ISO_PREFIX = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})")


def month_index(value: str | None) -> int | None:
    """
    Zero-based month of a normalized date, or None if it is not a real
    calendar date. Accepts unpadded month/day ("2025-3-1").
    """
    if not value:
        return None
    match = _ISO_PREFIX.match(value)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        date(year, month, day)
    except ValueError:
        return None
    return month - 1


# --- Header detection helpers ---


def header_texts(row: Sequence[Cell]) -> list[str]:
    """Lower-cased, trimmed text of every cell in a header row."""
    return [as_text(cell).lower() for cell in row]


def find_header_row(
    rows: Sequence[Sequence[Cell]],
    matches: Callable[[str, Sequence[Cell]], bool],
) -> int | None:
    """
    Index of the first row with a cell satisfying `matches(text, row)`.

    `text` is the cell's trimmed, lower-cased text; `row` is passed so the
    predicate can look at the row's width.
    """
    for index, row in enumerate(rows):
        if any(matches(text, row) for text in header_texts(row)):
            return index
    return None


def find_column(headers: Sequence[str], *needles: str) -> int | None:
    """
    Index of the first header containing a needle, trying needles in order.

    The first needle that matches any header wins, so callers list the most
    specific names first ("fecha final" before "fecha").
    """
    for needle in needles:
        for index, header in enumerate(headers):
            if needle in header:
                return index
    return None


def find_any_column(headers: Sequence[str], *needles: str) -> int | None:
    """Index of the first header containing any of the needles."""
    for index, header in enumerate(headers):
        if any(needle in header for needle in needles):
            return index
    return None


def find_named_column(headers: Sequence[str], name: str) -> int | None:
    """Index of the header equal to `name`, else the first one containing it."""
    if name in headers:
        return list(headers).index(name)
    return find_column(headers, name)
