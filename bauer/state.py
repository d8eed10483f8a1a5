"""Helpers for reading a builder slot that may or may not have been set."""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def into_option(is_set: bool, value: T) -> Optional[T]:
    """Return ``value`` if the slot was set, otherwise None."""
    return value if is_set else None


def unwrap_or_else(is_set: bool, value: T, or_else: Callable[[], T]) -> T:
    """Return ``value`` if the slot was set, otherwise the result of ``or_else()``."""
    if is_set:
        return value
    return or_else()