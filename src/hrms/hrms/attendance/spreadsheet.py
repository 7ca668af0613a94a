"""Read an uploaded attendance sheet into raw rows."""

from __future__ import annotations

from pathlib import Path
from typing import Any, BinaryIO
from zipfile import BadZipFile

import pandas as pd

from ..core.constants import IMPORT_COL_DATE, IMPORT_COL_TIME_IN, IMPORT_COL_TIME_OUT
from ..core.exceptions import ValidationError

SUPPORTED_EXTENSIONS = {".xlsx", ".xls", ".csv"}


def _numeric_cells(column: pd.Series) -> pd.Series:
    """Purely numeric text becomes a number, every other cell is kept as read."""
    numbers = pd.to_numeric(column, errors="coerce")
    return numbers.astype(object).where(numbers.notna(), column)


def read_rows(stream: BinaryIO, filename: str) -> list[list[Any]]:
    """Return every row of the first sheet (header row included).

    Cells are kept as read (numbers stay numbers) and NaN cells become None,
    so the normalizer sees the raw values. CSV text has no cell types, so the
    date and time columns get spreadsheet serials back as numbers.
    """
    ext = Path(filename or "").suffix.lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValidationError("Unsupported file type. Upload an .xlsx, .xls or .csv file.")

    try:
        if ext == ".csv":
            frame = pd.read_csv(stream, header=None, dtype=object, keep_default_na=True)
            for col in (IMPORT_COL_DATE, IMPORT_COL_TIME_IN, IMPORT_COL_TIME_OUT):
                if col in frame.columns:
                    frame[col] = _numeric_cells(frame[col])
        else:
            frame = pd.read_excel(stream, header=None, dtype=object, sheet_name=0)
    except (ValueError, ImportError, BadZipFile) as e:
        raise ValidationError(f"Could not read spreadsheet: {e}")

    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.values.tolist()
