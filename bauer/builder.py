"""Generate builder classes for classes whose fields are described by annotations.

Decorate a class (typically a dataclass) with :func:`builder`. Every annotated
field gets a method on the generated builder; per-field options are attached
with ``typing.Annotated[T, field(...)]``.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from typing import Any, Callable, Optional, get_args, get_origin

from bauer.options import BuilderOptions, FieldOptions, Kind
from bauer.pushable import PushableArray
from bauer.util import escape_ident

__all__ = [
    "BuildError",
    "MissingFieldError",
    "RangeError",
    "Builder",
    "pascal_case",
    "builder",
]


def pascal_case(name: str) -> str:
    """Turn a snake_case name into PascalCase: ``field_a`` becomes ``FieldA``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


class BuildError(Exception):
    """Raised when a builder cannot produce a value."""

    prefix = ""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message)
        self.field = field_name

    @property
    def variant(self) -> str:
        """The error's name together with the PascalCase field name."""
        return f"{self.prefix}{pascal_case(self.field)}"

    def _key(self) -> tuple:
        return (type(self), self.field)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BuildError):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())


class MissingFieldError(BuildError):
    """A required field was never set."""

    prefix = "Missing"

    def __init__(self, field_name: str) -> None:
        super().__init__(field_name, f"missing required field {field_name!r}")


class RangeError(BuildError):
    """A repeated field received a number of values outside its allowed range."""

    prefix = "Range"

    def __init__(self, field_name: str, count: int) -> None:
        super().__init__(
            field_name, f"field {field_name!r} was given {count} values, which is not allowed"
        )
        self.count = count

    def _key(self) -> tuple:
        return (type(self), self.field, self.count)


@dataclasses.dataclass(frozen=True)
class _FieldSpec:
    name: str
    annotation: Any
    options: FieldOptions
    method: Optional[str]
    optional: bool
    item_type: Any
    array_len: Optional[int]

    @property
    def repeated(self) -> bool:
        return self.options.repeat is not False


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is typing.Union or origin is types.UnionType


def _strip_optional(tp: Any) -> tuple[Any, bool]:
    if _is_union(tp):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) != len(get_args(tp)):
            return (args[0] if len(args) == 1 else typing.Union[tuple(args)]), True
    return tp, False


def _fixed_tuple_args(tp: Any) -> Optional[tuple]:
    if get_origin(tp) is tuple:
        args = get_args(tp)
        if args and Ellipsis not in args:
            return args
    return None


def _type_default(tp: Any) -> Any:
    _, optional = _strip_optional(tp)
    if optional or tp is Any:
        return None
    fixed = _fixed_tuple_args(tp)
    if fixed is not None:
        return tuple(_type_default(arg) for arg in fixed)
    origin = get_origin(tp) or tp
    try:
        return origin()
    except TypeError as exc:
        raise TypeError(f"no default value for type {tp!r}") from exc


def _convert(tp: Any, value: Any) -> Any:
    if tp is None or tp is Any:
        return value
    tp, _ = _strip_optional(tp)
    origin = get_origin(tp) or tp
    if not isinstance(origin, type) or isinstance(value, origin):
        return value
    return origin(value)


def _collect(tp: Any, items: list) -> Any:
    tp, _ = _strip_optional(tp)
    origin = get_origin(tp) or tp
    if origin is str:
        return "".join(items)
    if not isinstance(origin, type):
        return list(items)
    return origin(items)


def _item_type(base: Any, repeat: Any) -> Any:
    if repeat is not True:
        return repeat
    args = get_args(base)
    if get_origin(base) is tuple and args:
        return args[0]
    return args[0] if len(args) == 1 else None


def _array_len(base: Any) -> Optional[int]:
    fixed = _fixed_tuple_args(base)
    if fixed is not None and all(arg == fixed[0] for arg in fixed):
        return len(fixed)
    return None


def _parameter_names(func: Callable[..., Any]) -> tuple[str, ...]:
    code = getattr(func, "__code__", None)
    if code is None:
        return ()
    count = code.co_argcount + code.co_kwonlyargcount
    return tuple(code.co_varnames[:count])


def _argument_value(spec: _FieldSpec, args: tuple, kwargs: dict) -> Any:
    opts = spec.options
    method = spec.method
    if opts.flag:
        if args or kwargs:
            raise TypeError(f"{method}() takes no arguments")
        return True
    if opts.adapter is not None:
        return opts.adapter(*args, **kwargs)

    target = spec.item_type if spec.repeated else spec.annotation
    if opts.tuple_ is not False:
        names = opts.tuple_ if isinstance(opts.tuple_, tuple) else None
        element_types = _fixed_tuple_args(target) if target is not None else None
        if kwargs:
            if names is None:
                raise TypeError(f"{method}() takes positional arguments only")
            values = list(args)
            for name in names[len(args):]:
                if name not in kwargs:
                    raise TypeError(f"{method}() missing argument {name!r}")
                values.append(kwargs.pop(name))
            if kwargs:
                raise TypeError(f"{method}() got unexpected arguments: {', '.join(kwargs)}")
            args = tuple(values)
        expected = len(names) if names else (len(element_types) if element_types else None)
        if expected is not None and len(args) != expected:
            raise TypeError(f"{method}() takes {expected} arguments, got {len(args)}")
        if opts.into is not False:
            if callable(opts.into) and opts.into is not True:
                return opts.into(tuple(args))
            types_ = element_types or (None,) * len(args)
            return tuple(_convert(tp, value) for tp, value in zip(types_, args))
        return tuple(args)

    if kwargs or len(args) != 1:
        raise TypeError(f"{method}() takes exactly one positional argument")
    (value,) = args
    if opts.into is True:
        return _convert(target, value)
    if opts.into is not False:
        return opts.into(value)
    return value


class Builder:
    """Base of every generated builder."""

    _target_cls: type
    _specs: tuple
    _options: BuilderOptions

    def __init__(self) -> None:
        self._reset()

    def _reset(self) -> None:
        self._values: dict[str, Any] = {}
        self._items: dict[str, list] = {s.name: [] for s in self._specs if s.repeated}

    def _copy(self) -> "Builder":
        other = object.__new__(type(self))
        other._values = dict(self._values)
        other._items = {name: list(items) for name, items in self._items.items()}
        return other

    def _receiver(self) -> "Builder":
        return self if self._options.kind is Kind.BORROWED else self._copy()

    def _repeated_value(self, spec: _FieldSpec) -> Any:
        items = self._items[spec.name]
        opts = spec.options
        if spec.array_len is not None:
            array: PushableArray = PushableArray(spec.array_len)
            for item in items:
                array.push(item)
            collected = array.into_array()
            if collected is None:
                raise RangeError(spec.name, len(array))
            return opts.collector(iter(collected)) if opts.collector else collected
        if opts.repeat_n is not None and not opts.repeat_n.contains(len(items)):
            raise RangeError(spec.name, len(items))
        if opts.collector is not None:
            return opts.collector(iter(items))
        return _collect(spec.annotation, items)

    def build(self) -> Any:
        """Create the target object, raising :class:`BuildError` if the builder is incomplete."""
        values: dict[str, Any] = {}
        for spec in self._specs:
            opts = spec.options
            if opts.skip is not False:
                continue
            if spec.repeated:
                values[spec.name] = self._repeated_value(spec)
            elif spec.name in self._values:
                values[spec.name] = self._values[spec.name]
            elif opts.flag:
                values[spec.name] = False
            elif opts.default is True:
                values[spec.name] = _type_default(spec.annotation)
            elif opts.default is not False:
                values[spec.name] = opts.default()
            elif spec.optional:
                values[spec.name] = None
            else:
                raise MissingFieldError(spec.name)

        visible = dict(values)
        for spec in self._specs:
            skip = spec.options.skip
            if skip is True:
                values[spec.name] = _type_default(spec.annotation)
            elif skip is not False:
                params = _parameter_names(skip)
                values[spec.name] = skip(**{name: visible[name] for name in params})

        ordered = {spec.name: values[spec.name] for spec in self._specs}
        result = self._target_cls(**ordered)
        if self._options.kind is Kind.BORROWED:
            self._reset()
        return result

    def __repr__(self) -> str:
        parts = [f"{k}={v!r}" for k, v in self._values.items()]
        parts += [f"{k}={v!r}" for k, v in self._items.items() if v]
        return f"{type(self).__name__}({', '.join(parts)})"


def _make_method(spec: _FieldSpec) -> Callable[..., Any]:
    def method(self: Builder, *args: Any, **kwargs: Any) -> Builder:
        value = _argument_value(spec, args, kwargs)
        target = self._receiver()
        if spec.repeated:
            target._items[spec.name].append(value)
        else:
            target._values[spec.name] = value
        return target

    method.__name__ = spec.method or spec.name
    method.__doc__ = spec.options.doc or f"Set ``{spec.name}``."
    for decorator in reversed(spec.options.attributes):
        method = decorator(method)
    return method


def _class_annotations(target: type) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    for klass in reversed(target.__mro__):
        for name, hint in klass.__dict__.get("__annotations__", {}).items():
            if isinstance(hint, str):
                raise TypeError(
                    f"annotation of {target.__name__}.{name} is a string; "
                    "use evaluated annotations"
                )
            hints[name] = hint
    return hints


def _field_specs(target: type, options: BuilderOptions) -> list[_FieldSpec]:
    hints = _class_annotations(target)
    specs = []
    for name, hint in hints.items():
        if get_origin(hint) is typing.ClassVar or hint is typing.ClassVar:
            continue
        own: Optional[FieldOptions] = None
        base = hint
        if get_origin(hint) is typing.Annotated:
            base, *metadata = get_args(hint)
            for item in metadata:
                if isinstance(item, FieldOptions):
                    own = item
        opts = FieldOptions()
        for rule in options.on:
            applied = rule.apply(base)
            if applied is not None:
                opts = opts.merged(applied)
        if own is not None:
            opts = opts.merged(own)

        inner, optional = _strip_optional(base)
        method = None
        if opts.skip is False:
            stem = opts.rename or name
            prefix = "" if opts.skip_prefix else options.prefix
            suffix = "" if opts.skip_suffix else options.suffix
            method = escape_ident(f"{prefix}{stem}{suffix}")
        repeated = opts.repeat is not False
        specs.append(
            _FieldSpec(
                name=name,
                annotation=base,
                options=opts,
                method=method,
                optional=optional,
                item_type=_item_type(inner, opts.repeat) if repeated else None,
                array_len=_array_len(inner) if repeated else None,
            )
        )
    return specs


def builder(cls: Optional[type] = None, /, **kwargs: Any) -> Any:
    """Attach a builder to ``cls``; usable as ``@builder`` or ``@builder(**options)``.

    The keyword options are those of :class:`~bauer.options.BuilderOptions`.
    """
    options = BuilderOptions(**kwargs)

    def decorate(target: type) -> type:
        specs = _field_specs(target, options)
        namespace: dict[str, Any] = {
            "_target_cls": target,
            "_specs": tuple(specs),
            "_options": options,
            "__doc__": options.doc or f"Builder for {target.__name__}.",
        }
        taken = {options.build_fn}
        for spec in specs:
            if spec.method is None:
                continue
            if spec.method in taken:
                raise ValueError(f"builder method name {spec.method!r} is used twice")
            taken.add(spec.method)
            namespace[spec.method] = _make_method(spec)
        if options.build_fn != "build":
            def build_alias(self: Builder) -> Any:
                return Builder.build(self)

            build_alias.__name__ = options.build_fn
            namespace[options.build_fn] = build_alias
            namespace[options.build_fn].__doc__ = options.build_doc or Builder.build.__doc__
        elif options.build_doc:
            def build_documented(self: Builder) -> Any:
                return Builder.build(self)

            build_documented.__name__ = "build"
            build_documented.__doc__ = options.build_doc
            namespace["build"] = build_documented
        builder_cls = type(f"{target.__name__}Builder", (Builder,), namespace)

        def make(owner: type) -> Builder:
            return builder_cls()

        make.__doc__ = f"Return a new {builder_cls.__name__}."
        setattr(target, options.builder_fn, classmethod(make))
        return target

    return decorate if cls is None else decorate(cls)