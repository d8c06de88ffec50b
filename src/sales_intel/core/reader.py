"""
Spreadsheet reader: workbook bytes in, rows of tagged cells out.

Only the first sheet is read and no header is assumed; the format parsers
locate their own header rows.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO

import pandas as pd

from ..exceptions import ReadError
from .cells import Row, from_values, trim_row

logger = logging.getLogger(__name__)


def read_workbook(source: bytes | str | Path | BinaryIO) -> list[Row]:
    """
    Decode a workbook into a row-major matrix of cells.

    Args:
        source: Raw workbook bytes, a path, or a binary file-like object
            (e.g. a Streamlit UploadedFile).

    Returns:
        One list of cells per sheet row, trailing blanks trimmed.

    Raises:
        ReadError: the content is not a readable workbook.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        # only truly empty cells are missing; "NA", "None", "#N/A" stay text
        frame = pd.read_excel(
            source,
            sheet_name=0,
            header=None,
            dtype=object,
            engine="openpyxl",
            keep_default_na=False,
            na_values=[""],
        )
    except Exception as exc:
        raise ReadError(f"Could not read workbook: {exc}") from exc

    rows = [trim_row(from_values(values)) for values in frame.itertuples(index=False, name=None)]
    logger.debug("Read %d rows from first sheet", len(rows))
    return rows
