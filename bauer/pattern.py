"""Match type annotations against patterns that contain wildcards.

A pattern is an ordinary annotation in which :class:`Wildcard` stands for any
type or value, for example ``dict[Wildcard, Wildcard]`` or
``Callable[[Wildcard], int]``. Matching collects whatever each wildcard stood
for, in the order the wildcards appear. Those captures can then be put back
into another annotation or option value wherever a :class:`Match` placeholder
refers to them by index.
"""

from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from typing import Any, Optional, Sequence, get_args, get_origin

__all__ = ["Wildcard", "Match", "pattern_match_type", "replace"]


class Wildcard:
    """Stands for any type (or type argument) inside a pattern.

    The class itself is used in patterns, e.g. ``list[Wildcard]``; instances
    are accepted as well.
    """

    def __repr__(self) -> str:
        return "_"


@dataclass(frozen=True)
class Match:
    """Placeholder for the capture with the given index, used with :func:`replace`."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"match index must not be negative, got {self.index}")

    def __repr__(self) -> str:
        return f"#{self.index}"


def _is_wildcard(value: Any) -> bool:
    return value is Wildcard or isinstance(value, Wildcard)


def _same(left: Any, right: Any) -> bool:
    try:
        return bool(left == right)
    except Exception:
        return False


def _origin(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is types.UnionType:
        return typing.Union
    return origin


def _match(pattern: Any, annotation: Any, captures: list[Any]) -> bool:
    if _same(pattern, annotation):
        return True

    if _is_wildcard(pattern):
        captures.append(annotation)
        return True

    # Parameter lists of callables arrive as plain lists.
    if isinstance(pattern, list) and isinstance(annotation, list):
        if len(pattern) != len(annotation):
            return False
        return all(_match(p, a, captures) for p, a in zip(pattern, annotation))

    pattern_origin = _origin(pattern)
    annotation_origin = _origin(annotation)
    if pattern_origin is None or annotation_origin is None:
        return False
    if not _same(pattern_origin, annotation_origin):
        return False

    pattern_args = get_args(pattern)
    annotation_args = get_args(annotation)
    if len(pattern_args) != len(annotation_args):
        return False
    return all(_match(p, a, captures) for p, a in zip(pattern_args, annotation_args))


def pattern_match_type(pattern: Any, annotation: Any) -> Optional[list[Any]]:
    """Match ``annotation`` against ``pattern``.

    Returns the list of what each wildcard matched, in order, or None when the
    annotation does not fit the pattern. A pattern equal to the annotation
    matches with no captures.
    """
    captures: list[Any] = []
    if _match(pattern, annotation, captures):
        return captures
    return None


def _rebuild(origin: Any, args: tuple[Any, ...]) -> Any:
    if origin is typing.Union:
        return typing.Union[args]
    return origin[args]


def replace(matches: Sequence[Any], value: Any) -> Any:
    """Return ``value`` with every :class:`Match` placeholder swapped for its capture.

    Placeholders are found inside generic annotations and inside tuples,
    lists, sets and dicts; anything else is returned unchanged. An index with
    no capture raises IndexError.
    """
    if isinstance(value, Match):
        if value.index >= len(matches):
            raise IndexError(
                f"index out of bounds: there were {len(matches)} matches "
                f"but the index is {value.index}"
            )
        return matches[value.index]

    if isinstance(value, list):
        return [replace(matches, item) for item in value]
    if isinstance(value, dict):
        return {replace(matches, k): replace(matches, v) for k, v in value.items()}
    if isinstance(value, frozenset):
        return frozenset(replace(matches, item) for item in value)
    if isinstance(value, set):
        return {replace(matches, item) for item in value}
    if isinstance(value, tuple) and type(value) is tuple:
        return tuple(replace(matches, item) for item in value)

    origin = _origin(value)
    if origin is None:
        return value
    args = get_args(value)
    new_args = tuple(replace(matches, arg) for arg in args)
    if all(new is old for new, old in zip(new_args, args)):
        return value
    return _rebuild(origin, new_args)