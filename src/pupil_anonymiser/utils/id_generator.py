# src/pupil_anonymiser/utils/id_generator.py
from __future__ import annotations

import re
from typing import Callable, Union

from ..config import (
    DEFAULT_NUMBER_WIDTH,
    DEFAULT_PSEUDONYM_SCHEME,
    GREEK_LETTERS,
    GREEK_SCHEME_NAME,
)

# (number, index) -> label; number = start_at + index
SchemeFunc = Callable[[int, int], str]
Scheme = Union[str, SchemeFunc]

_HASH_RUN_RE = re.compile(r"#+")


def _from_template(template: str, number: int) -> str:
    """
    "Pupil-###", 7 -> "Pupil-007"
    "Anon-##",   7 -> "Anon-07"
    "Pupil #",   7 -> "Pupil 7"
    Only the first run of '#' is filled; without one the template is a prefix.
    """
    m = _HASH_RUN_RE.search(template)
    if not m:
        return f"{template}{number:0{DEFAULT_NUMBER_WIDTH}d}"
    width = m.end() - m.start()
    return f"{template[:m.start()]}{number:0{width}d}{template[m.end():]}"


def _from_cycle(symbols: tuple[str, ...], index: int) -> str:
    """
    Alpha-1 .. Omega-1, then Alpha-2 ... once the alphabet runs out.
    """
    base = symbols[index % len(symbols)]
    cycle = index // len(symbols) + 1
    return f"{base}-{cycle}"


def generate_pseudonym(
    scheme: Scheme = DEFAULT_PSEUDONYM_SCHEME,
    start_at: int = 1,
    index: int = 0,
) -> str:
    """
    Pseudonym for the name at zero-based position `index`.

    - callable scheme : scheme(start_at + index, index)
    - "Greek"         : cyclical Greek-letter labels (start_at is ignored)
    - any other str   : numbered template
    """
    number = start_at + index
    if callable(scheme):
        return scheme(number, index)
    if scheme == GREEK_SCHEME_NAME:
        return _from_cycle(GREEK_LETTERS, index)
    return _from_template(scheme, number)
