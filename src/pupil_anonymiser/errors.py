# src/pupil_anonymiser/errors.py
from __future__ import annotations

from typing import Sequence


class AnonymiserError(Exception):
    """Base class for errors raised by pupil_anonymiser."""


class MissingNameColumnError(AnonymiserError, ValueError):
    """No column in the class record looks like it holds pupil names."""

    def __init__(self, headers: Sequence[str] = ()) -> None:
        self.headers = list(headers)
        super().__init__(
            "Couldn't find a 'Name', 'Pupil' or 'Pupil Name' column "
            f"(headers: {', '.join(self.headers) or 'none'})"
        )


class UnresolvedNameLeakError(AnonymiserError):
    """
    Raised by the leak gate when pupil names were found outside the name column.

    `leaks` holds the NameLeak records so the caller can show them.
    """

    def __init__(self, leaks: Sequence) -> None:
        self.leaks = list(leaks)
        cells = {(leak.row_index, leak.column) for leak in self.leaks}
        super().__init__(
            f"{len(cells)} cell(s) outside the name column contain pupil names; "
            "anonymise these entries and re-run the check"
        )


class PseudonymCollisionError(AnonymiserError, ValueError):
    """A custom pseudonym scheme produced a label that is empty or already taken."""
