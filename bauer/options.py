"""Options that control how a builder is generated for a class and its fields."""

from __future__ import annotations

import dataclasses
import enum
import keyword
import re
from typing import Any, Callable, Mapping, Optional, Union

from bauer.pattern import pattern_match_type, replace

__all__ = [
    "Kind",
    "RepeatRange",
    "parse_range",
    "FieldOptions",
    "field",
    "OnRule",
    "BuilderOptions",
]


class Kind(enum.Enum):
    """The style of builder to generate."""

    OWNED = "owned"
    BORROWED = "borrowed"
    TYPE_STATE = "type-state"


@dataclasses.dataclass(frozen=True)
class RepeatRange:
    """The allowed number of values for a repeated field: ``low <= n < high``.

    ``high`` is None when there is no upper bound.
    """

    low: int = 0
    high: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("low", "high"):
            value = getattr(self, name)
            if value is None and name == "high":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"range bound {name} must be an int, got {value!r}")
        if self.low < 0:
            raise ValueError(f"range lower bound must not be negative, got {self.low}")
        if self.high is not None and self.high <= self.low:
            raise ValueError(f"range {self.low}..{self.high} is empty")

    def contains(self, count: int) -> bool:
        """True when ``count`` values are allowed."""
        return count >= self.low and (self.high is None or count < self.high)

    def __contains__(self, count: object) -> bool:
        return isinstance(count, int) and self.contains(count)

    def __str__(self) -> str:
        if self.high is None:
            return f"{self.low}.."
        if self.high == self.low + 1:
            return str(self.low)
        return f"{self.low}..{self.high}"


_RANGE_RE = re.compile(r"(?P<low>[0-9]+)?\.\.(?P<eq>=)?(?P<high>[0-9]+)?")
_NUMBER_RE = re.compile(r"[0-9]+")


def parse_range(spec: Union[int, str, range, RepeatRange]) -> RepeatRange:
    """Turn a count specification into a :class:`RepeatRange`.

    Accepts an exact count (``3`` or ``"3"``), a ``range`` with step 1, or a
    string in range syntax: ``"2..5"``, ``"2..=5"``, ``"3.."``, ``"..5"``,
    ``"..=5"``.
    """
    if isinstance(spec, RepeatRange):
        return spec
    if isinstance(spec, bool):
        raise TypeError(f"invalid repeat range: {spec!r}")
    if isinstance(spec, int):
        return RepeatRange(spec, spec + 1)
    if isinstance(spec, range):
        if spec.step != 1:
            raise ValueError(f"repeat range must have a step of 1, got {spec.step}")
        return RepeatRange(spec.start, spec.stop)
    if isinstance(spec, str):
        text = "".join(spec.split())
        if _NUMBER_RE.fullmatch(text):
            count = int(text)
            return RepeatRange(count, count + 1)
        found = _RANGE_RE.fullmatch(text)
        if found is None:
            raise ValueError(f"invalid repeat range: {spec!r}")
        low = int(found["low"]) if found["low"] else 0
        high_text = found["high"]
        if found["eq"]:
            if high_text is None:
                raise ValueError(f"inclusive range needs an upper bound: {spec!r}")
            high: Optional[int] = int(high_text) + 1
        else:
            high = int(high_text) if high_text else None
        return RepeatRange(low, high)
    raise TypeError(f"invalid repeat range: {spec!r}")


def _check_name(value: Optional[str], what: str) -> None:
    if value is None:
        return
    if not isinstance(value, str) or not value.isidentifier() or keyword.iskeyword(value):
        raise ValueError(f"{what} must be a valid identifier, got {value!r}")


@dataclasses.dataclass(frozen=True)
class FieldOptions:
    """How one field is handled by its builder.

    - ``skip``: leave the field out of the builder; True uses the type's
      default, a callable computes the value from the fields its parameters name.
    - ``default``: True uses the type's default, a zero-argument callable
      supplies the value.
    - ``repeat``: each call adds one item; True infers the item type, any
      other value is the item type.
    - ``repeat_n``: allowed number of items (see :func:`parse_range`).
    - ``collector``: turns the collected items into the field value.
    - ``into``: convert arguments to the field type; True uses the type, a
      callable converts.
    - ``tuple_``: take tuple items as separate arguments; True or the names.
    - ``adapter``: a callable whose arguments the method takes and whose
      result becomes the value.
    - ``rename``, ``skip_prefix``, ``skip_suffix``: naming of the method.
    - ``flag``: the method takes no argument and sets True; False otherwise.
    - ``doc``, ``attributes``: docstring and decorators of the method.
    """

    skip: Union[bool, Callable[..., Any]] = False
    default: Union[bool, Callable[[], Any]] = False
    repeat: Any = False
    repeat_n: Optional[RepeatRange] = None
    collector: Optional[Callable[..., Any]] = None
    into: Union[bool, Callable[[Any], Any]] = False
    tuple_: Union[bool, tuple] = False
    adapter: Optional[Callable[..., Any]] = None
    rename: Optional[str] = None
    skip_prefix: bool = False
    skip_suffix: bool = False
    flag: bool = False
    doc: Optional[str] = None
    attributes: tuple = ()

    def __post_init__(self) -> None:
        set_ = lambda name, value: object.__setattr__(self, name, value)  # noqa: E731

        if self.repeat is None:
            set_("repeat", False)
        if self.repeat_n is not None:
            set_("repeat_n", parse_range(self.repeat_n))

        for name in ("skip", "default", "into"):
            value = getattr(self, name)
            if not isinstance(value, bool) and not callable(value):
                raise TypeError(f"{name} must be a bool or a callable, got {value!r}")
        for name in ("collector", "adapter"):
            value = getattr(self, name)
            if value is not None and not callable(value):
                raise TypeError(f"{name} must be callable, got {value!r}")
        for name in ("skip_prefix", "skip_suffix", "flag"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a bool")
        if self.doc is not None and not isinstance(self.doc, str):
            raise TypeError(f"doc must be a string, got {self.doc!r}")

        if not isinstance(self.tuple_, bool):
            if isinstance(self.tuple_, str):
                raise TypeError("tuple names must be given as a sequence of names")
            names = tuple(self.tuple_)
            if not names:
                raise ValueError("tuple names must not be empty")
            for item in names:
                _check_name(item, "tuple parameter name")
            if len(set(names)) != len(names):
                raise ValueError(f"tuple parameter names must be distinct: {names}")
            set_("tuple_", names)

        attributes = self.attributes
        if callable(attributes):
            attributes = (attributes,)
        attributes = tuple(attributes)
        for decorator in attributes:
            if not callable(decorator):
                raise TypeError(f"attributes must be callables, got {decorator!r}")
        set_("attributes", attributes)

        _check_name(self.rename, "rename")
        self._check_conflicts()

    def _set_names(self) -> list[str]:
        names = []
        for spec in dataclasses.fields(self):
            value = getattr(self, spec.name)
            if value is not spec.default and value != spec.default:
                names.append(spec.name)
        return names

    def _check_conflicts(self) -> None:
        if self.skip is not False:
            others = [name for name in self._set_names() if name != "skip"]
            if others:
                raise ValueError(f"skip cannot be combined with: {', '.join(others)}")
        if self.adapter is not None and (self.into is not False or self.tuple_ is not False):
            raise ValueError("adapter cannot be combined with into or tuple")
        if self.repeat_n is not None and self.repeat is False:
            raise ValueError("repeat_n requires repeat")
        if self.collector is not None and self.repeat is False:
            raise ValueError("collector requires repeat")
        if self.flag:
            clashing = [
                name
                for name in ("repeat", "adapter", "into", "tuple_")
                if name in self._set_names()
            ]
            if clashing:
                raise ValueError(f"flag cannot be combined with: {', '.join(clashing)}")

    def merged(self, other: "FieldOptions") -> "FieldOptions":
        """Return these options with every option set in ``other`` taking precedence."""
        changes = {name: getattr(other, name) for name in other._set_names()}
        return dataclasses.replace(self, **changes)


_FIELD_NAMES = frozenset(spec.name for spec in dataclasses.fields(FieldOptions))
_ALIASES = {"tuple": "tuple_", "attribute": "attributes", "docs": "doc"}


def _canonical(options: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key)
        if name not in _FIELD_NAMES:
            raise TypeError(f"unknown field option: {key!r}")
        if name in result:
            raise TypeError(f"field option {name!r} given more than once")
        result[name] = value
    return result


def field(**kwargs: Any) -> FieldOptions:
    """Build :class:`FieldOptions` from keyword options.

    ``tuple``, ``attribute`` and ``docs`` are accepted as spellings of
    ``tuple_``, ``attributes`` and ``doc``.
    """
    return FieldOptions(**_canonical(kwargs))


@dataclasses.dataclass(frozen=True)
class OnRule:
    """Field options applied to every field whose annotation matches ``pattern``.

    Option values may hold :class:`~bauer.pattern.Match` placeholders, which
    are replaced with what the pattern's wildcards matched.
    """

    pattern: Any
    options: Mapping[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", _canonical(self.options))

    def apply(self, annotation: Any) -> Optional[FieldOptions]:
        """Return the options for ``annotation``, or None if it does not match."""
        matches = pattern_match_type(self.pattern, annotation)
        if matches is None:
            return None
        return FieldOptions(**replace(matches, dict(self.options)))


@dataclasses.dataclass(frozen=True)
class BuilderOptions:
    """Options for a whole builder."""

    kind: Kind = Kind.OWNED
    prefix: str = ""
    suffix: str = ""
    build_fn: str = "build"
    builder_fn: str = "builder"
    doc: Optional[str] = None
    build_doc: Optional[str] = None
    on: tuple = ()

    def __post_init__(self) -> None:
        if not isinstance(self.kind, Kind):
            object.__setattr__(self, "kind", Kind(self.kind))
        for name in ("prefix", "suffix"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be a string")
        sample = f"{self.prefix}a{self.suffix}"
        if not sample.isidentifier():
            raise ValueError(
                f"prefix {self.prefix!r} and suffix {self.suffix!r} do not form valid names"
            )
        _check_name(self.build_fn, "build_fn")
        _check_name(self.builder_fn, "builder_fn")
        for name in ("doc", "build_doc"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise TypeError(f"{name} must be a string")
        rules = (self.on,) if isinstance(self.on, OnRule) else tuple(self.on)
        for rule in rules:
            if not isinstance(rule, OnRule):
                raise TypeError(f"on rules must be OnRule instances, got {rule!r}")
        object.__setattr__(self, "on", rules)