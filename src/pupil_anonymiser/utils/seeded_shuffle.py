# src/pupil_anonymiser/utils/seeded_shuffle.py
from __future__ import annotations

from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def mulberry32(seed: int) -> Callable[[], float]:
    """
    Small 32-bit PRNG returning floats in [0, 1).
    Not for anything security related; it only has to give the same
    sequence for the same seed everywhere.
    """
    state = seed & _MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    return next_float


def shuffle_deterministic(items: Sequence[T], seed: int) -> List[T]:
    """
    Fisher-Yates shuffle driven by mulberry32(seed).
    Returns a new list; `items` is left alone.
    """
    rnd = mulberry32(seed)
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = int(rnd() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out
