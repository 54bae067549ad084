# src/pupil_anonymiser/io/excel_writer.py
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter


def _autosize_columns(ws, max_chars: int = 80) -> None:
    """wrap_text on every cell and a column width based on the longest value."""
    for col_cells in ws.columns:
        col_letter = get_column_letter(col_cells[0].column)
        max_len = 0
        for cell in col_cells:
            if cell.value is None:
                continue
            cell.alignment = cell.alignment.copy(wrap_text=True)
            max_len = max(max_len, min(len(str(cell.value)), max_chars))
        ws.column_dimensions[col_letter].width = max(15, max_len * 0.8)


def write_rows(
    path: Path,
    rows: Sequence[Mapping[str, str]],
    sheet_name: str = "class_record",
) -> None:
    """
    Anonymised class record -> .xlsx (or .csv if the suffix says so).
    Column order follows the first row.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(list(rows))
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False, encoding="utf-8-sig")
        return

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
        _autosize_columns(writer.sheets[sheet_name])


def write_reports_excel(path: Path, report_rows: List[Dict[str, str]]) -> None:
    """
    Generated reports: one row per pupil, one column per section
    (plus "<section>_next_step" where asked for).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(report_rows)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="reports")
        _autosize_columns(writer.sheets["reports"])
