"""
Spreadsheet utilities for marketplace order exports.
"""

import io
import logging
from pathlib import Path

import pandas as pd

from app.domain.models import REQUIRED_IMPORT_COLUMNS, RawImportRow
from app.utils.error_handler import InvalidImportFileException

logger = logging.getLogger(__name__)


def check_import_filename(filename: str | None, allowed_extensions: list[str]) -> None:
    """
    Raises:
        InvalidImportFileException: If the file has no allowed extension
    """
    extension = Path(filename or "").suffix.lower()
    if extension not in allowed_extensions:
        raise InvalidImportFileException(
            message=f"Unsupported file type '{extension or filename}'. Allowed: {', '.join(allowed_extensions)}",
            filename=filename,
        )


def read_import_rows(contents: bytes, filename: str | None = None) -> list[RawImportRow]:
    """
    Read the first sheet of an .xlsx export into raw import rows.

    Cells are read as text; empty cells become "". Fully empty rows are
    dropped.

    Args:
        contents: File contents
        filename: Original file name, for error messages

    Returns:
        list[RawImportRow]: Rows in sheet order

    Raises:
        InvalidImportFileException: If the file is empty, unreadable or lacks
            a required column
    """
    if not contents:
        raise InvalidImportFileException(message="Uploaded file is empty", filename=filename)

    try:
        df = pd.read_excel(io.BytesIO(contents), engine="openpyxl", dtype=str)
    except Exception as e:
        logger.warning(f"Could not read spreadsheet {filename}: {e}")
        raise InvalidImportFileException(message=f"Could not read spreadsheet: {e}", filename=filename) from e

    df.columns = [str(column).strip() for column in df.columns]

    missing_columns = [column for column in REQUIRED_IMPORT_COLUMNS if column not in df.columns]
    if missing_columns:
        raise InvalidImportFileException(
            message=f"Missing required columns: {', '.join(missing_columns)}",
            filename=filename,
        )

    df = df.dropna(how="all").fillna("")
    rows = [RawImportRow.from_record(record) for record in df.to_dict(orient="records")]

    logger.info(f"Read {len(rows)} rows from {filename or 'spreadsheet'}")
    return rows
