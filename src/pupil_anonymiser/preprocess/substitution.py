# src/pupil_anonymiser/preprocess/substitution.py
"""
Whole-word name <-> pseudonym replacement.

anonymise() and reidentify() are the same operation with the mapping
pointed in opposite directions. Input can be:

- str               : every mapped name replaced
- list / tuple      : each element handled recursively, order and length kept
- Mapping (a row)   : only the keys listed in `fields` are touched, a new dict
                      is returned
- anything else     : returned as is

Nothing is mutated in place.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from functools import singledispatch
from typing import Any, Dict, Iterable, Optional, Tuple

from .name_normalizer import normalize_name

logger = logging.getLogger(__name__)


class NameReplacer:
    """
    Compiled form of one mapping direction.

    All keys go into a single alternation, longest key first, so that
    "Anna" wins over "Ann" and "Alice Smith" over "Alice" at the same
    position. Replacement is a single pass: a pseudonym that was just
    written in is never matched again by another key.
    """

    def __init__(
        self,
        mapping: Mapping,
        extra_names: Iterable[str] = (),
        ignore_case: bool = False,
    ) -> None:
        targets = [*mapping.keys(), *(normalize_name(n) for n in extra_names)]

        lookup: Dict[str, str] = {}
        for name in targets:
            if not isinstance(name, str) or not name or name in lookup:
                continue
            replacement = mapping.get(name)
            # names without an entry are skipped, never replaced with a placeholder
            if not isinstance(replacement, str) or not replacement:
                continue
            lookup[name] = replacement

        self.ignore_case = ignore_case
        self._lookup = lookup
        self._folded: Dict[str, str] = {}
        if ignore_case:
            for name, replacement in lookup.items():
                self._folded.setdefault(name.lower(), replacement)

        self.pattern: Optional[re.Pattern] = None
        if lookup:
            keys = sorted(lookup, key=len, reverse=True)
            alternation = "|".join(re.escape(k) for k in keys)
            flags = re.IGNORECASE if ignore_case else 0
            self.pattern = re.compile(rf"\b(?:{alternation})\b", flags)

    def __len__(self) -> int:
        return len(self._lookup)

    def _replacement(self, m: re.Match) -> str:
        found = m.group(0)
        if self.ignore_case:
            return self._folded.get(found.lower(), found)
        return self._lookup.get(found, found)

    def replace_text(self, text: str) -> str:
        if self.pattern is None or not text:
            return text
        return self.pattern.sub(self._replacement, text)

    def apply(self, value: Any, fields: Iterable[str] = ()) -> Any:
        return _substitute(value, self, tuple(fields))


@singledispatch
def _substitute(value: Any, replacer: NameReplacer, fields: Tuple[str, ...]) -> Any:
    # numbers, None, bytes, ...: untouched
    return value


@_substitute.register(str)
def _substitute_text(value: str, replacer: NameReplacer, fields: Tuple[str, ...]) -> str:
    return replacer.replace_text(value)


@_substitute.register(list)
def _substitute_list(value: list, replacer: NameReplacer, fields: Tuple[str, ...]) -> list:
    return [_substitute(item, replacer, fields) for item in value]


@_substitute.register(tuple)
def _substitute_tuple(value: tuple, replacer: NameReplacer, fields: Tuple[str, ...]) -> tuple:
    return tuple(_substitute(item, replacer, fields) for item in value)


@_substitute.register(Mapping)
def _substitute_record(value: Mapping, replacer: NameReplacer, fields: Tuple[str, ...]) -> dict:
    record = dict(value)
    for key in fields:
        if key not in record or record[key] is None:
            continue
        record[key] = _substitute(record[key], replacer, fields)
    return record


def anonymise(
    value: Any,
    real_to_pseudo: Mapping,
    fields: Iterable[str] = (),
    extra_names: Iterable[str] = (),
    ignore_case: bool = False,
) -> Any:
    """
    Real names -> pseudonyms.

    - fields      : record keys to rewrite when `value` holds records
    - extra_names : more names to look for; each is normalized and only used
                    if `real_to_pseudo` has an entry for it
    - ignore_case : also catch "alice smith" typed in lower case. The text
                    then reidentifies to the normalized spelling.
    """
    replacer = NameReplacer(real_to_pseudo, extra_names=extra_names, ignore_case=ignore_case)
    return replacer.apply(value, fields)


def reidentify(
    value: Any,
    pseudo_to_real: Mapping,
    fields: Iterable[str] = (),
) -> Any:
    """
    Pseudonyms -> real names. Same input shapes as anonymise().
    """
    replacer = NameReplacer(pseudo_to_real)
    return replacer.apply(value, fields)
