# src/pupil_anonymiser/__init__.py
"""
Swap pupil names for pseudonyms before text leaves the machine, and put
them back afterwards.
"""
from .errors import (
    AnonymiserError,
    MissingNameColumnError,
    PseudonymCollisionError,
    UnresolvedNameLeakError,
)
from .preprocess.anonymizer import PseudonymMap, PseudonymPair, build_pseudonym_map
from .preprocess.name_leak_scanner import (
    FlaggedCell,
    NameLeak,
    detect_name_column,
    ensure_no_name_leaks,
    find_name_leaks,
    find_pupil_names_in_text,
    scan_for_name_leaks,
)
from .preprocess.name_normalizer import normalize_name
from .preprocess.substitution import NameReplacer, anonymise, reidentify
from .utils.id_generator import generate_pseudonym
from .utils.seeded_shuffle import shuffle_deterministic

__version__ = "0.1.0"

__all__ = [
    "AnonymiserError",
    "FlaggedCell",
    "MissingNameColumnError",
    "NameLeak",
    "NameReplacer",
    "PseudonymCollisionError",
    "PseudonymMap",
    "PseudonymPair",
    "UnresolvedNameLeakError",
    "anonymise",
    "build_pseudonym_map",
    "detect_name_column",
    "ensure_no_name_leaks",
    "find_name_leaks",
    "find_pupil_names_in_text",
    "generate_pseudonym",
    "normalize_name",
    "reidentify",
    "scan_for_name_leaks",
    "shuffle_deterministic",
]
