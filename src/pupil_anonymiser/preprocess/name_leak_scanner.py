# src/pupil_anonymiser/preprocess/name_leak_scanner.py
"""
Pre-flight check: are there pupil names outside the name column?

This is a heuristic. Common words that are also first names ("Grace",
"Summer") give false positives, and misspelt or unusual names slip
through. It blocks the obvious mistakes before anonymisation; the
substitution engine is what actually keeps mapped names out of prompts.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set

from ..config import (
    BLOCKED_NAME_KEYWORDS,
    COMMON_FIRST_NAMES,
    NAME_COLUMN_CANDIDATES,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    NAME_PART_MIN_LENGTH,
)
from ..errors import MissingNameColumnError, UnresolvedNameLeakError
from .name_normalizer import normalize_name

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

_BLOCKED_KEYWORD_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(kw) for kw in BLOCKED_NAME_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class FlaggedCell:
    row_index: int
    column: str


@dataclass(frozen=True)
class NameLeak:
    row_index: int
    column: str
    matched: str

    @property
    def cell(self) -> FlaggedCell:
        return FlaggedCell(self.row_index, self.column)

    def describe(self) -> str:
        # 1-based row numbers, as the teacher sees them in a spreadsheet
        return f"Row {self.row_index + 1}, Column '{self.column}': \"{self.matched}\""


def _word_pattern(name: str, ignore_case: bool = True) -> re.Pattern:
    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(rf"\b{re.escape(name)}\b", flags)


def looks_like_pupil_name(value: Any) -> bool:
    """
    Filter for name column values: drops programme codes such as
    "RWI group 3" or "HAST test" and implausibly short / long strings.
    Keywords only count as whole words, so "Vincent" and "Hastings" are names.
    """
    if value is None:
        return False
    text = str(value).strip()
    if _BLOCKED_KEYWORD_RE.search(text):
        return False
    return NAME_MIN_LENGTH <= len(text) <= NAME_MAX_LENGTH


def _name_targets(rows: Sequence[Row], name_column: str) -> List[str]:
    """
    Full names from the name column plus their individual words, so that
    "spoke to Bob" is caught for "Bob Jones".
    """
    targets: Dict[str, None] = {}
    for row in rows:
        value = row.get(name_column)
        if not looks_like_pupil_name(value):
            continue
        norm = normalize_name(value)
        if not norm:
            continue
        targets[norm] = None
        for part in norm.split(" "):
            if len(part) >= NAME_PART_MIN_LENGTH:
                targets[part] = None
    return list(targets)


def find_name_leaks(
    rows: Sequence[Row],
    name_column: str,
    common_names: Iterable[str] = COMMON_FIRST_NAMES,
) -> List[NameLeak]:
    """
    Every (row, column, name) hit outside `name_column`, in row order.

    A cell is hit when it contains, as a whole word and ignoring case,
    (a) a name from the name column of any row (full name or one of its
        words), or
    (b) an entry of `common_names`.
    Rows are only read.
    """
    patterns = [(n, _word_pattern(n)) for n in _name_targets(rows, name_column)]
    seen = {n.lower() for n, _ in patterns}
    for name in common_names:
        name = str(name).strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            patterns.append((name, _word_pattern(name)))

    leaks: List[NameLeak] = []
    for row_index, row in enumerate(rows):
        for column, cell in row.items():
            if column == name_column or cell is None:
                continue
            text = str(cell)
            if not text.strip():
                continue
            for name, pattern in patterns:
                if pattern.search(text):
                    leaks.append(NameLeak(row_index, column, name))

    logger.info(
        "Name check: %d row(s), %d search term(s), %d hit(s)",
        len(rows),
        len(patterns),
        len(leaks),
    )
    return leaks


def scan_for_name_leaks(
    rows: Sequence[Row],
    name_column: str,
    common_names: Iterable[str] = COMMON_FIRST_NAMES,
) -> Set[FlaggedCell]:
    """Cells outside the name column that look like they contain a pupil name."""
    return {leak.cell for leak in find_name_leaks(rows, name_column, common_names)}


def ensure_no_name_leaks(
    rows: Sequence[Row],
    name_column: str,
    common_names: Iterable[str] = COMMON_FIRST_NAMES,
) -> None:
    """
    Gate in front of anonymisation.
    Raises UnresolvedNameLeakError while any cell is flagged.
    """
    leaks = find_name_leaks(rows, name_column, common_names)
    if leaks:
        raise UnresolvedNameLeakError(leaks)


def find_pupil_names_in_text(text: str, pupil_names: Iterable[str]) -> List[str]:
    """
    Normalized pupil names that occur whole-word (case-sensitive) in `text`.
    """
    hits: Dict[str, None] = {}
    if not text:
        return []
    for raw in pupil_names:
        norm = normalize_name(raw)
        if norm and _word_pattern(norm, ignore_case=False).search(text):
            hits[norm] = None
    return list(hits)


def _contains_common_name(value: Any, common_names: Iterable[str]) -> bool:
    if value is None:
        return False
    cleaned = str(value).strip()
    if len(cleaned) <= 1:
        return False
    return any(_word_pattern(n).search(cleaned) for n in common_names)


def detect_name_column(
    rows: Sequence[Row],
    candidates: Iterable[str] = NAME_COLUMN_CANDIDATES,
    common_names: Iterable[str] = COMMON_FIRST_NAMES,
) -> str:
    """
    Which column holds pupil names.

    1. first header equal (ignoring case / outer spaces) to a candidate
       such as "Name", "Pupil" or "Full Name"
    2. otherwise the column with most values containing a common first name
    Raises MissingNameColumnError when neither finds anything.
    """
    headers: List[str] = []
    for row in rows:
        for h in row.keys():
            if h not in headers:
                headers.append(h)

    for candidate in candidates:
        for header in headers:
            if isinstance(header, str) and header.strip().lower() == candidate:
                return header

    common_names = list(common_names)
    best_header: Optional[str] = None
    best_score = 0
    for header in headers:
        score = sum(1 for row in rows if _contains_common_name(row.get(header), common_names))
        if score > best_score:
            best_header, best_score = header, score

    if best_header is None:
        raise MissingNameColumnError(headers)

    logger.info("No name header found; using '%s' (%d name-like values)", best_header, best_score)
    return best_header
