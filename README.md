# bauer

`bauer` attaches a builder to a class. The class is typically a dataclass.
You describe each field once, through its type annotation and optional
`typing.Annotated` metadata. The builder then collects values one call at a
time and fills in defaults. It checks that required fields are present and
that repeated fields were given an allowed number of values. Finally it calls
the class with every field as a keyword argument.

## Example

```python
from dataclasses import dataclass
from typing import Annotated

from bauer.builder import MissingFieldError, builder
from bauer.options import field


@builder(prefix="set_")
@dataclass
class Foo:
    field_a: Annotated[int, field(default=lambda: 42)]
    field_b: bool
    field_c: Annotated[str, field(into=True)]
    field_d: Annotated[
        list[float],
        field(repeat=True, repeat_n="3..", rename="add_d", skip_prefix=True),
    ]


foo = (
    Foo.builder()
    .set_field_b(True)
    .set_field_c("hello world")
    .add_d(1.0)
    .add_d(2.0)
    .add_d(3.0)
    .build()
)
assert foo.field_a == 42
assert foo.field_d == [1.0, 2.0, 3.0]

try:
    Foo.builder().build()
except MissingFieldError as err:
    assert err.variant == "MissingFieldB"
```

## Field options

Pass field options to `bauer.options.field(...)` and attach the result with
`Annotated[T, field(...)]`. The call returns a frozen `FieldOptions`.

- **required**: this is the default. A field that is never set makes `build()`
  raise `MissingFieldError`. Fields annotated `Optional[...]` or `X | None`
  fall back to `None`.
- **`default`**: `True` uses the type's empty value, such as `0`, `""`, `[]`
  or `None` for optional types. A zero-argument callable supplies the value
  instead.
- **`skip`**: the field gets no setter. `True` uses the type's empty value.
  A callable computes the value, and its parameter names pick which of the
  other non-skipped fields it receives.
- **`repeat`**: each call adds one item. `True` infers the item type from the
  annotation; any other value is taken as the item type. At build time the
  items are collected into the annotation's container. A `str` field joins its
  items, and a fixed-length homogeneous `tuple[T, T, T]` must receive exactly
  that many items.
- **`repeat_n`**: how many items are allowed. It accepts an exact count, a
  `range`, or a string: `"3"`, `"2..5"`, `"2..=5"`, `"3.."`, `"..5"` or
  `"..=5"`. A count outside the range raises `RangeError`, which carries the
  count. Parsing is done by `parse_range`, which returns a `RepeatRange`.
- **`collector`**: a callable that receives an iterator over the items and
  returns the field value.
- **`into`**: `True` converts the argument to the annotated type. A callable
  does the conversion instead.
- **`tuple`** (or `tuple_`): the setter takes the tuple's items as separate
  arguments. Given a sequence of names, it also accepts them as keywords.
- **`adapter`**: a callable. The setter takes its arguments, and its result
  becomes the value. It cannot be combined with `into` or `tuple`.
- **`flag`**: the setter takes no argument and sets the field to `True`. The
  field is `False` when not set.
- **`rename`**, **`skip_prefix`**, **`skip_suffix`**: control the setter's
  name. Names that are Python keywords get a trailing `_`.
- **`doc`** (or `docs`) and **`attributes`** (or `attribute`): the setter's
  docstring, and decorators applied to it.

Conflicting combinations raise `ValueError` when the options are created.
For example, `skip` cannot be combined with other options, and `repeat_n` or
`collector` cannot be used without `repeat`.

## Builder options

`builder(cls, **options)` can be used as `@builder` or `@builder(...)`. The
options are those of `BuilderOptions`:

- `kind`: a `Kind` or its value (`"owned"`, `"borrowed"`, `"type-state"`).
  With an owned builder, each setter returns a new builder. A borrowed builder
  changes itself, returns itself, and is reset after a successful `build()`.
- `prefix` / `suffix`: added to every setter name.
- `build_fn` / `builder_fn`: the names of the build method and of the
  classmethod that creates a builder. The defaults are `build` and `builder`.
- `doc` / `build_doc`: docstrings for the builder class and the build method.
- `on`: one or more `OnRule(pattern, options)`. These apply field options to
  every field whose annotation matches `pattern`. A field's own `Annotated`
  options take precedence.

The generated class is named `<Class>Builder` and derives from `Builder`.

## Type patterns

`bauer.pattern.pattern_match_type(pattern, annotation)` matches an annotation
against a pattern in which `Wildcard` stands for any type. On a match it
returns what the wildcards captured, in order; otherwise it returns `None`.
`replace(matches, value)` puts those captures back wherever a `Match(i)`
placeholder appears. Placeholders are found in generic annotations and in
lists, tuples, sets and dicts. So a rule such as the following makes every
`dict` field take key/value pairs:

```python
from bauer.options import OnRule
from bauer.pattern import Match, Wildcard

OnRule(dict[Wildcard, Wildcard], {"repeat": tuple[Match(0), Match(1)], "tuple": True})
```

## Other modules

| Module           | Contents                                                                          |
| ---------------- | --------------------------------------------------------------------------------- |
| `bauer.pushable` | `PushableArray`: fixed capacity, counts every push, `into_array()` when exact    |
| `bauer.state`    | `into_option`, `unwrap_or_else`: read a slot that may not have been set          |
| `bauer.util`     | `replace_at`, `escape_ident`, `ensure_no_conflict`: naming helpers               |

## Limitations

- Every kind, `"type-state"` included, checks its fields only when `build()`
  runs. Nothing is checked when the builder is defined.
- Annotations must be evaluated objects. A class that uses string annotations
  (for instance through `from __future__ import annotations`) raises
  `TypeError` when it is decorated.

## Running the tests

Install the package with its `test` extra, then run `pytest` from the project
root.