# src/pupil_anonymiser/io/table_loader.py
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import logging
import pandas as pd

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def load_class_record(path: Path | str, sheet_name: str | int = 0) -> pd.DataFrame:
    """
    Class record (CSV or Excel) -> DataFrame of strings.

    Every cell is read as text so that pupil numbers, dates and codes
    stay exactly as typed; blank cells become "".
    """
    path = Path(path)
    if path.suffix.lower() in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet_name, dtype=str)
    else:
        df = pd.read_csv(path, dtype=str, encoding="utf-8-sig", skipinitialspace=True)

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")
    # rows where every cell is blank are spreadsheet padding
    df = df[(df != "").any(axis=1)].reset_index(drop=True)
    logger.info("Loaded class record from %s (rows=%d, columns=%d)", path, len(df), len(df.columns))
    return df


def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, str]]:
    """DataFrame -> list of {column: cell text}, the shape the core works on."""
    return [
        {str(k): ("" if v is None else str(v)) for k, v in row.items()}
        for row in df.to_dict(orient="records")
    ]


def load_class_record_rows(path: Path | str) -> List[Dict[str, str]]:
    return dataframe_to_rows(load_class_record(path))
