# src/pupil_anonymiser/preprocess/name_normalizer.py
import re

_WHITESPACE_RE = re.compile(r"\s+")


def _capitalise(word: str) -> str:
    word = word.lower()
    first = word[:1].title()
    # "ß" -> "Ss", "ŉ" -> "ʼN": keep the character when its title form
    # would not lower-case back to it, otherwise a second pass changes the word
    if first.lower() != word[:1]:
        first = word[:1]
    return first + word[1:]


def normalize_name(raw) -> str:
    """
    Teacher-typed name -> canonical form used as a map key.

    - None / empty / whitespace only -> ""
    - runs of whitespace collapsed to one space, ends trimmed
    - every word lower-cased, then its first character upper-cased

    "  aLICE   smith " -> "Alice Smith"
    """
    if raw is None:
        return ""

    text = _WHITESPACE_RE.sub(" ", str(raw)).strip()
    if not text:
        return ""

    return " ".join(_capitalise(word) for word in text.split(" "))
