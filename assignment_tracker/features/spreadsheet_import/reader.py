"""
Spreadsheet reader: uploaded bytes -> list of row dicts (first sheet only).

CSV goes through pandas.read_csv; .xlsx/.xls through pandas.read_excel
(openpyxl / xlrd engines). Empty cells come back as None; text such as "NA" or
"None" is kept as written. Float columns holding only whole numbers (integer
columns with blanks) come back as ints.
"""
import logging
from io import BytesIO
from pathlib import PurePath
from typing import Any, Dict, List

import pandas as pd

from .errors import UploadFatal

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".csv")


def file_extension(filename: str) -> str:
    return PurePath(filename or "").suffix.lower()


def _read_frame(content: bytes, extension: str) -> pd.DataFrame:
    if extension == ".csv":
        return pd.read_csv(
            BytesIO(content), skipinitialspace=True, keep_default_na=False, na_values=[""]
        )
    if extension == ".xlsx":
        return pd.read_excel(
            BytesIO(content), sheet_name=0, engine="openpyxl", keep_default_na=False, na_values=[""]
        )
    if extension == ".xls":
        return pd.read_excel(
            BytesIO(content), sheet_name=0, engine="xlrd", keep_default_na=False, na_values=[""]
        )
    raise UploadFatal(
        f"File type {extension or '(none)'} not allowed. Only Excel (.xlsx, .xls) and CSV files are accepted."
    )


def frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame -> records with stripped string headers and None for empty cells."""
    df = df.dropna(how="all").copy()
    df.columns = [str(c).strip() for c in df.columns]
    for column in df.columns:
        if pd.api.types.is_float_dtype(df[column]) and df[column].dropna().apply(float.is_integer).all():
            df[column] = df[column].astype("Int64")
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def read_rows(content: bytes, filename: str) -> List[Dict[str, Any]]:
    """Parse an uploaded spreadsheet. Raises UploadFatal when the file cannot be read."""
    extension = file_extension(filename)
    if not content:
        raise UploadFatal(f"{filename} is empty")
    try:
        df = _read_frame(content, extension)
    except UploadFatal:
        raise
    except Exception as e:
        logger.warning(f"Could not read spreadsheet {filename}: {e}")
        raise UploadFatal(f"Could not read {filename}: {e}") from e
    rows = frame_to_rows(df)
    logger.debug(f"Read {len(rows)} row(s) from {filename} (columns: {list(df.columns)})")
    return rows
