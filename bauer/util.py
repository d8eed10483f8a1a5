"""Small helpers for naming generated builder members."""

from __future__ import annotations

import keyword
from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")


def replace_at(iterable: Iterable[T], index: int, value: T) -> Iterator[T]:
    """Yield the items of ``iterable``, with the item at ``index`` swapped for ``value``."""
    for position, item in enumerate(iterable):
        yield value if position == index else item


def escape_ident(name: str) -> str:
    """Make ``name`` usable as an attribute name by suffixing reserved words with ``_``."""
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


def ensure_no_conflict(name: str, known: Iterable[str]) -> str:
    """Prefix ``name`` with underscores until it is not among ``known``."""
    taken = set(known)
    while name in taken:
        name = f"_{name}"
    return name