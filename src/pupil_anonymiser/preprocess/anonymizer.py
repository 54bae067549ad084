# src/pupil_anonymiser/preprocess/anonymizer.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Optional

from ..config import DEFAULT_PSEUDONYM_SCHEME, DEFAULT_START_AT
from ..errors import PseudonymCollisionError
from ..utils.id_generator import Scheme, generate_pseudonym
from ..utils.seeded_shuffle import shuffle_deterministic
from .name_normalizer import normalize_name
from .substitution import NameReplacer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PseudonymPair:
    real: str
    pseudo: str


@dataclass
class PseudonymMap:
    """
    One anonymisation session's name <-> pseudonym table.

    - pairs          : in assignment order, for showing to the teacher
    - real_to_pseudo : normalized name -> pseudonym (anonymise with this)
    - pseudo_to_real : exact inverse (reidentify with this)

    Lives in memory only. Build a new one for every upload.
    """
    pairs: List[PseudonymPair] = field(default_factory=list)
    real_to_pseudo: Dict[str, str] = field(default_factory=dict)
    pseudo_to_real: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.pairs)

    def __bool__(self) -> bool:
        return bool(self.pairs)

    def display_lines(self) -> List[str]:
        return [f"{p.pseudo} ⟷ {p.real}" for p in self.pairs]

    @cached_property
    def _anonymiser(self) -> NameReplacer:
        return NameReplacer(self.real_to_pseudo)

    @cached_property
    def _reidentifier(self) -> NameReplacer:
        return NameReplacer(self.pseudo_to_real)

    def anonymise(self, value: Any, fields: Iterable[str] = ()) -> Any:
        """Real names -> pseudonyms, reusing the patterns compiled for this map."""
        return self._anonymiser.apply(value, fields)

    def reidentify(self, value: Any, fields: Iterable[str] = ()) -> Any:
        """Pseudonyms -> real names."""
        return self._reidentifier.apply(value, fields)


def _dedupe_normalized(names: Iterable[Any]) -> List[str]:
    seen: set[str] = set()
    clean: List[str] = []
    for raw in names:
        norm = normalize_name(raw)
        if not norm or norm in seen:
            continue
        seen.add(norm)
        clean.append(norm)
    return clean


def build_pseudonym_map(
    names: Iterable[Any],
    scheme: Scheme = DEFAULT_PSEUDONYM_SCHEME,
    start_at: int = DEFAULT_START_AT,
    seed: Optional[int] = None,
) -> PseudonymMap:
    """
    Pupil names -> PseudonymMap.

    1. normalize every name, drop blanks
    2. de-duplicate, keeping first-seen order
    3. if `seed` is an int, shuffle with it (same seed -> same order)
    4. assign scheme labels by position

    An empty / all-blank list gives an empty map.
    A custom scheme that repeats a label raises PseudonymCollisionError.
    """
    clean = _dedupe_normalized(names)

    seeded = isinstance(seed, int) and not isinstance(seed, bool)
    if seeded:
        clean = shuffle_deterministic(clean, seed)

    mapping = PseudonymMap()
    for i, real in enumerate(clean):
        pseudo = generate_pseudonym(scheme, start_at, i)
        if not isinstance(pseudo, str) or not pseudo:
            raise PseudonymCollisionError(
                f"Pseudonym scheme returned an empty label at position {i}: {pseudo!r}"
            )
        if pseudo in mapping.pseudo_to_real:
            raise PseudonymCollisionError(
                f"Pseudonym scheme returned {pseudo!r} twice (positions "
                f"{clean.index(mapping.pseudo_to_real[pseudo])} and {i})"
            )
        mapping.real_to_pseudo[real] = pseudo
        mapping.pseudo_to_real[pseudo] = real
        mapping.pairs.append(PseudonymPair(real=real, pseudo=pseudo))

    logger.debug("Built pseudonym map with %d entries (seeded=%s)", len(mapping), seeded)
    return mapping
