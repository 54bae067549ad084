# src/pupil_anonymiser/pipelines/anonymise_pipeline.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import COMMON_FIRST_NAMES, DEFAULT_PSEUDONYM_SCHEME, DEFAULT_START_AT
from ..io.excel_writer import write_rows
from ..io.table_loader import load_class_record_rows
from ..preprocess.anonymizer import PseudonymMap, build_pseudonym_map
from ..preprocess.name_leak_scanner import (
    detect_name_column,
    ensure_no_name_leaks,
    looks_like_pupil_name,
)
from ..preprocess.name_normalizer import normalize_name
from ..preprocess.substitution import anonymise
from ..utils.id_generator import Scheme
from ..utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)


@dataclass
class AnonymisedClassRecord:
    """
    Result of anonymising one uploaded class record.

    rows[i] and pupil_ids[i] belong to original_rows[i]. Rows whose name cell
    is blank or is not a pupil name (see looks_like_pupil_name) are dropped.
    """
    name_column: str
    pseudonym_map: PseudonymMap
    rows: List[Dict[str, str]] = field(default_factory=list)
    pupil_ids: List[str] = field(default_factory=list)
    original_rows: List[Dict[str, str]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def anonymise_class_record(
    rows: Sequence[Mapping[str, str]],
    name_column: Optional[str] = None,
    scheme: Scheme = DEFAULT_PSEUDONYM_SCHEME,
    start_at: int = DEFAULT_START_AT,
    seed: Optional[int] = None,
    common_names: Iterable[str] = COMMON_FIRST_NAMES,
    ignore_case: bool = False,
) -> AnonymisedClassRecord:
    """
    - find the name column (unless given)
    - run the name check; UnresolvedNameLeakError stops everything here
    - build the pseudonym map from the name column
    - name cell -> pseudonym, every other column -> substituted text
    """
    rows = [dict(r) for r in rows]
    if name_column is None:
        name_column = detect_name_column(rows)
    logger.info("Using name column '%s'", name_column)

    ensure_no_name_leaks(rows, name_column, common_names)

    # same notion of "pupil" as the name check: programme codes such as
    # "RWI group 3" get no pseudonym
    pupil_rows = [r for r in rows if looks_like_pupil_name(r.get(name_column))]
    pseudonym_map = build_pseudonym_map(
        [r[name_column] for r in pupil_rows],
        scheme=scheme,
        start_at=start_at,
        seed=seed,
    )

    other_columns = list(dict.fromkeys(k for r in pupil_rows for k in r if k != name_column))

    result = AnonymisedClassRecord(name_column=name_column, pseudonym_map=pseudonym_map)
    for row in pupil_rows:
        pseudo = pseudonym_map.real_to_pseudo[normalize_name(row[name_column])]
        if ignore_case:
            # the replacer cached on the map is case-sensitive
            anon_row = anonymise(row, pseudonym_map.real_to_pseudo, fields=other_columns, ignore_case=True)
        else:
            anon_row = pseudonym_map.anonymise(row, fields=other_columns)
        anon_row[name_column] = pseudo

        result.rows.append(anon_row)
        result.pupil_ids.append(pseudo)
        result.original_rows.append(row)

    logger.info(
        "Anonymised %d row(s); %d distinct pupil(s)",
        len(result.rows),
        len(pseudonym_map),
    )
    return result


def run_anonymise(
    input_path: Path,
    output_path: Path,
    log_path: Path,
    name_column: Optional[str] = None,
    scheme: Scheme = DEFAULT_PSEUDONYM_SCHEME,
    start_at: int = DEFAULT_START_AT,
    seed: Optional[int] = None,
) -> AnonymisedClassRecord:
    """
    Class record file -> anonymised file.

    The pseudonym map is returned to the caller and never written to disk.
    """
    setup_logging(log_path)
    logger.info("Start anonymise pipeline (input=%s)", input_path)

    rows = load_class_record_rows(input_path)
    record = anonymise_class_record(
        rows,
        name_column=name_column,
        scheme=scheme,
        start_at=start_at,
        seed=seed,
    )

    write_rows(Path(output_path), record.rows)
    logger.info("Wrote anonymised class record to %s", output_path)
    return record
