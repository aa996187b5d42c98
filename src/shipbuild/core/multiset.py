"""List helpers that treat sequences as multisets.

Membership uses ``==``; catalog definitions compare by identity, so a card
matches only references handed out by the same repository.
"""
from __future__ import annotations

from typing import List, MutableSequence, Sequence, TypeVar

T = TypeVar("T")


def remove_first(values: MutableSequence[T], value: T) -> bool:
    """Remove the first occurrence of value, returning whether one was found."""
    try:
        index = values.index(value)
    except ValueError:
        return False
    del values[index]
    return True


def intersection_single(values: Sequence[T], pool: Sequence[T]) -> List[T]:
    """Keep entries of values that can each claim one distinct entry of pool."""
    remaining = list(pool)
    kept: List[T] = []
    for value in values:
        if remove_first(remaining, value):
            kept.append(value)
    return kept


def difference_single(values: Sequence[T], removals: Sequence[T]) -> List[T]:
    """Drop one entry of values per entry of removals."""
    remaining = list(values)
    for value in removals:
        remove_first(remaining, value)
    return remaining


def difference_all(values: Sequence[T], removals: Sequence[T]) -> List[T]:
    """Drop every entry of values that appears anywhere in removals."""
    return [value for value in values if value not in removals]
