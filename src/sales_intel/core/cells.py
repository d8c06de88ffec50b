"""
Tagged spreadsheet cells and typed extractors.

Workbook exports mix numbers, text and blanks in the same column (an EAN may
arrive as 7701234567890 in one file and "7701234567890" in the next). Every
raw value is wrapped once by `from_raw` so the parsers can ask for the type
they need instead of coercing ad hoc.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Sequence, Union

import pandas as pd


@dataclass(frozen=True)
class Number:
    value: float | int


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class DateCell:
    """A cell the workbook stored with a date format."""

    value: datetime


class _Empty:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = _Empty()

Cell = Union[Number, Text, DateCell, _Empty]
Row = list[Cell]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_CURRENCY_CHARS = re.compile(r"[$,]")


def from_raw(value: Any) -> Cell:
    """Wrap a raw value coming out of pandas/openpyxl."""
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return Text(str(value).upper())
    if isinstance(value, (pd.Timestamp, datetime)):
        if pd.isna(value):
            return EMPTY
        return DateCell(pd.Timestamp(value).to_pydatetime())
    if isinstance(value, date):
        return DateCell(datetime(value.year, value.month, value.day))
    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return EMPTY
        return Number(value)
    if isinstance(value, str):
        return Text(value)
    # numpy scalars and anything else pandas hands back
    if pd.isna(value):
        return EMPTY
    try:
        return Number(float(value))
    except (TypeError, ValueError):
        return Text(str(value))


def to_cell(value: Any) -> Cell:
    """Return value unchanged if it is already a cell, else wrap it."""
    if isinstance(value, (Number, Text, DateCell, _Empty)):
        return value
    return from_raw(value)


def from_values(values: Sequence[Any]) -> Row:
    """Wrap a whole row of raw values."""
    return [to_cell(v) for v in values]


def cell_at(row: Sequence[Cell], index: int | None) -> Cell:
    """Return the cell at index, or EMPTY when the column is missing."""
    if index is None or index < 0 or index >= len(row):
        return EMPTY
    return row[index]


def as_text(cell: Cell) -> str:
    """Trimmed text rendering of a cell. Integral numbers lose their '.0'."""
    if isinstance(cell, Text):
        return cell.value.strip()
    if isinstance(cell, Number):
        value = cell.value
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(cell, DateCell):
        return cell.value.date().isoformat()
    return ""


def is_blank(cell: Cell) -> bool:
    """Empty, whitespace-only text, or a numeric zero."""
    if isinstance(cell, Number):
        return cell.value == 0
    if isinstance(cell, Text):
        return not cell.value.strip()
    return cell is EMPTY


def as_int(cell: Cell, default: int = 0) -> int:
    """Integer value of a cell; numbers truncate, text reads a leading integer."""
    if isinstance(cell, Number):
        if not math.isfinite(cell.value):
            return default
        return int(cell.value)
    if isinstance(cell, Text):
        match = _LEADING_INT.match(cell.value)
        if match:
            return int(match.group(1))
    return default


def as_money(cell: Cell) -> float:
    """
    Monetary value of a cell.

    Numbers pass through. Text such as "$1,234.50" has the currency sign and
    thousand separators removed before parsing. Anything else is 0.0.
    """
    if isinstance(cell, Number):
        return float(cell.value)
    if isinstance(cell, Text):
        cleaned = _CURRENCY_CHARS.sub("", cell.value)
        match = _LEADING_FLOAT.match(cleaned)
        if match:
            return float(match.group(0))
    return 0.0


def trim_row(row: Row) -> Row:
    """Drop trailing EMPTY cells so a row's width ends at its last value."""
    end = len(row)
    while end > 0 and row[end - 1] is EMPTY:
        end -= 1
    return row[:end]
