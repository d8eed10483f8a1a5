import math
from dataclasses import dataclass
from typing import Annotated, Optional

import pytest

from bauer.builder import MissingFieldError, RangeError, builder, pascal_case
from bauer.options import OnRule, field
from bauer.pattern import Match, Wildcard

KINDS = ["owned", "borrowed", "type-state"]


def add_2(it):
    return [n + 2 for n in it]


def count(it):
    return sum(1 for _ in it)


def complex_dataclass():
    @dataclass
    class Complex:
        required: int
        optional: Optional[int]
        default: Annotated[int, field(default=True)]
        default_value: Annotated[int, field(default=lambda: 42)]
        repeat: Annotated[list[int], field(repeat=True)]
        repeat_ty: Annotated[str, field(repeat=str)]
        repeat_n_exact: Annotated[list[int], field(repeat=True, repeat_n=3)]
        repeat_n_at_least: Annotated[list[int], field(repeat=True, repeat_n="3..")]
        repeat_n_at_most: Annotated[list[int], field(repeat=True, repeat_n="..5")]
        repeat_n_range_ex: Annotated[list[int], field(repeat=True, repeat_n="2..5")]
        repeat_n_range_in: Annotated[list[int], field(repeat=True, repeat_n="2..=5")]
        collector_map: Annotated[list[int], field(repeat=True, collector=add_2)]
        collector_sum: Annotated[int, field(repeat=int, collector=sum)]
        into: Annotated[str, field(into=True)]
        into_repeat: Annotated[list[str], field(into=True, repeat=True)]
        tuple: Annotated[tuple[int, int], field(tuple=True)]
        tuple_into: Annotated[tuple[str, str], field(tuple=True, into=True)]
        tuple_repeat: Annotated[list[tuple[int, int]], field(repeat=True, tuple=True)]
        tuple_repeat_into: Annotated[
            list[tuple[str, str]], field(repeat=True, tuple=True, into=True)
        ]
        not_renamed: Annotated[int, field(rename="renamed")]

    return Complex


@pytest.mark.parametrize("kind", KINDS)
def test_complex_minimal(kind):
    Complex = builder(complex_dataclass(), kind=kind)
    c = (
        Complex.builder()
        .required(69)
        .repeat_n_exact(1).repeat_n_exact(2).repeat_n_exact(3)
        .repeat_n_at_least(1).repeat_n_at_least(2).repeat_n_at_least(3)
        .repeat_n_range_ex(1).repeat_n_range_ex(2)
        .repeat_n_range_in(1).repeat_n_range_in(2)
        .into("into")
        .tuple(8, 9)
        .tuple_into("a", "b")
        .renamed(4)
        .build()
    )
    assert c.required == 69
    assert c.optional is None
    assert c.default == 0
    assert c.default_value == 42
    assert c.repeat == []
    assert c.repeat_ty == ""
    assert c.repeat_n_exact == [1, 2, 3]
    assert c.repeat_n_at_least == [1, 2, 3]
    assert c.repeat_n_at_most == []
    assert c.repeat_n_range_ex == [1, 2]
    assert c.repeat_n_range_in == [1, 2]
    assert c.collector_map == []
    assert c.collector_sum == 0
    assert c.into == "into"
    assert c.into_repeat == []
    assert c.tuple == (8, 9)
    assert c.tuple_into == ("a", "b")
    assert c.tuple_repeat == []
    assert c.tuple_repeat_into == []
    assert c.not_renamed == 4


@pytest.mark.parametrize("kind", KINDS)
def test_complex_full(kind):
    Complex = builder(complex_dataclass(), kind=kind)
    c = (
        Complex.builder()
        .required(69).optional(8675309).default(42).default_value(1337)
        .repeat(1).repeat(2).repeat_ty("h").repeat_ty("i")
        .repeat_n_exact(1).repeat_n_exact(2).repeat_n_exact(3)
        .repeat_n_at_least(1).repeat_n_at_least(2).repeat_n_at_least(3)
        .repeat_n_at_most(1).repeat_n_at_most(2).repeat_n_at_most(3)
        .repeat_n_range_ex(1).repeat_n_range_ex(2)
        .repeat_n_range_in(1).repeat_n_range_in(2)
        .collector_map(1).collector_map(2).collector_map(3)
        .collector_sum(1).collector_sum(2).collector_sum(3)
        .into("into").into_repeat("a").into_repeat("b").into_repeat("c")
        .tuple(8, 9).tuple_into("a", "b")
        .tuple_repeat(1, 2).tuple_repeat(3, 4)
        .tuple_repeat_into("a", "b").tuple_repeat_into("c", "d")
        .renamed(4)
        .build()
    )
    assert c.required == 69
    assert c.optional == 8675309
    assert c.default == 42
    assert c.default_value == 1337
    assert c.repeat == [1, 2]
    assert c.repeat_ty == "hi"
    assert c.repeat_n_exact == [1, 2, 3]
    assert c.repeat_n_at_least == [1, 2, 3]
    assert c.repeat_n_at_most == [1, 2, 3]
    assert c.repeat_n_range_ex == [1, 2]
    assert c.repeat_n_range_in == [1, 2]
    assert c.collector_map == [3, 4, 5]
    assert c.collector_sum == 6
    assert c.into == "into"
    assert c.into_repeat == ["a", "b", "c"]
    assert c.tuple == (8, 9)
    assert c.tuple_into == ("a", "b")
    assert c.tuple_repeat == [(1, 2), (3, 4)]
    assert c.tuple_repeat_into == [("a", "b"), ("c", "d")]
    assert c.not_renamed == 4


@pytest.mark.parametrize("kind", KINDS)
def test_simple_prefix(kind):
    @dataclass
    class Foo:
        field_a: Annotated[int, field(default=lambda: 42)]
        field_b: Optional[str]
        field_c: bool
        field_d: Annotated[str, field(into=True)]
        field_e: Annotated[
            list[float], field(skip_prefix=True, rename="add_e", repeat=True, repeat_n="3..")
        ]

    Foo = builder(Foo, kind=kind, prefix="set_")
    f = (
        Foo.builder().set_field_a(69).set_field_c(True).set_field_d("hello world")
        .add_e(math.pi).add_e(math.tau).add_e(2.72).build()
    )
    assert f == Foo(69, None, True, "hello world", [math.pi, math.tau, 2.72])


@pytest.mark.parametrize("kind", KINDS)
def test_array(kind):
    @dataclass
    class Foo:
        no_repeat: tuple[str, str, str]
        repeat: Annotated[tuple[int, int, int], field(repeat=True)]
        repeat_tuple: Annotated[
            tuple[tuple[int, int], tuple[int, int], tuple[int, int]],
            field(repeat=True, tuple=True),
        ]
        repeat_adapter: Annotated[
            tuple[int, int, int, int], field(repeat=True, adapter=lambda x: x + 2)
        ]

    Foo = builder(Foo, kind=kind)
    x = (
        Foo.builder().no_repeat(("a", "b", "c"))
        .repeat(0).repeat(1).repeat(2)
        .repeat_tuple(1, 6).repeat_tuple(2, 5).repeat_tuple(3, 4)
        .repeat_adapter(6).repeat_adapter(12).repeat_adapter(18).repeat_adapter(24)
        .build()
    )
    assert x.no_repeat == ("a", "b", "c")
    assert x.repeat == (0, 1, 2)
    assert x.repeat_tuple == ((1, 6), (2, 5), (3, 4))
    assert x.repeat_adapter == (8, 14, 20, 26)


@pytest.mark.parametrize("kind", KINDS)
def test_adapters(kind):
    @dataclass
    class Conv:
        name: Annotated[str, field(adapter=lambda v: v.upper(), rename="title")]
        max_value: Annotated[
            int,
            field(adapter=lambda v: max(v, default=0), rename="set_max_value",
                  skip_prefix=True, default=True),
        ]
        tags: Annotated[list[str], field(adapter=lambda v: [str(s) for s in v], default=True)]

    Conv = builder(Conv, kind=kind, prefix="with_")
    full = Conv.builder().with_title("hello world").set_max_value([1, 5, 3, 9, 2]).build()
    assert full.name == "HELLO WORLD"
    assert full.max_value == 9
    bare = Conv.builder().with_title("test").build()
    assert (bare.name, bare.max_value, bare.tags) == ("TEST", 0, [])


@pytest.mark.parametrize("kind", KINDS)
@pytest.mark.parametrize("name", ["finish", "complete"])
def test_build_fn_rename(kind, name):
    @dataclass
    class Struct:
        field: int

    Struct = builder(Struct, kind=kind, build_fn=name, builder_fn="make")
    assert getattr(Struct.make().field(0), name)().field == 0


@pytest.mark.parametrize("kind", KINDS)
def test_collectors(kind):
    @dataclass
    class Foo:
        total: Annotated[int, field(repeat=int, collector=sum)]
        upper: Annotated[int, field(repeat=int, repeat_n="..5", collector=count)]
        text: Annotated[str, field(repeat=int, repeat_n="2..5",
                                   collector=lambda it: "".join(map(str, it)))]

    Foo = builder(Foo, kind=kind)
    foo = Foo.builder().total(1).total(2).total(3).upper(1).upper(2).text(1).text(2).text(3)
    assert foo.build() == Foo(6, 2, "123")


@pytest.mark.parametrize("kind", KINDS)
def test_flag(kind):
    @dataclass
    class Foo:
        bar: Annotated[bool, field(flag=True)]

    Foo = builder(Foo, kind=kind)
    assert Foo.builder().bar().build().bar is True
    assert Foo.builder().build().bar is False


@pytest.mark.parametrize("kind", KINDS)
def test_skip(kind):
    @dataclass
    class Skip:
        x: int
        y: int
        zero: Annotated[int, field(skip=True)]
        none: Annotated[Optional[int], field(skip=True)]
        fixed: Annotated[int, field(skip=lambda: 42)]
        total: Annotated[int, field(skip=lambda x, y: x + y)]

    Skip = builder(Skip, kind=kind)
    for x in [89, 123]:
        for y in [12, 173]:
            f = Skip.builder().x(x).y(y).build()
            assert f == Skip(x, y, 0, None, 42, x + y)
    assert not hasattr(Skip.builder(), "zero")


@pytest.mark.parametrize("kind", KINDS)
def test_skip_collected(kind):
    @dataclass
    class C:
        sum: Annotated[int, field(repeat=int, collector=sum)]
        sum_squared: Annotated[int, field(skip=lambda sum: sum * sum)]

    C = builder(C, kind=kind)
    f = C.builder().sum(89).sum(12).sum(123).build()
    assert (f.sum, f.sum_squared) == (224, 224 * 224)


@pytest.mark.parametrize("kind", KINDS)
def test_on_rules(kind):
    @dataclass
    class Foo:
        u32: Annotated[int, field(default=True)]
        vec: list[int]
        map: dict[int, int]
        name: Annotated[str, field(default=True)]

    Foo = builder(
        Foo,
        kind=kind,
        on=(
            OnRule(list[Wildcard], {"repeat": True}),
            OnRule(dict[Wildcard, Wildcard], {"repeat": tuple[Match(0), Match(1)], "tuple": True}),
            OnRule(str, {"into": True}),
        ),
    )
    assert Foo.builder().build() == Foo(0, [], {}, "")
    c = Foo.builder().u32(42).vec(123).vec(456).map(1, 2).map(3, 4).name("n").build()
    assert c == Foo(42, [123, 456], {1: 2, 3: 4}, "n")


@pytest.mark.parametrize("kind", KINDS)
def test_on_all_default_and_adapter(kind):
    @dataclass
    class AllDefault:
        u32: int
        vec: list[int]

    AllDefault = builder(AllDefault, kind=kind, on=(OnRule(Wildcard, {"default": True}),))
    assert AllDefault.builder().build() == AllDefault(0, [])

    @dataclass
    class Pair:
        foo: tuple[int, str]

    Pair = builder(
        Pair,
        kind=kind,
        on=(OnRule(tuple[Wildcard, Wildcard], {"adapter": lambda a, b: (a, b)}),),
    )
    assert Pair.builder().foo(69, "hello").build().foo == (69, "hello")


@pytest.mark.parametrize("kind", ["owned", "borrowed"])
def test_missing_errors(kind):
    @dataclass
    class Req:
        field_a: Annotated[int, field(default=True)]
        field_b: int

    Req = builder(Req, kind=kind)
    with pytest.raises(MissingFieldError) as info:
        Req.builder().build()
    assert info.value == MissingFieldError("field_b")
    assert info.value.variant == "MissingFieldB"
    assert Req.builder().field_b(42).build() == Req(0, 42)


@pytest.mark.parametrize("kind", ["owned", "borrowed"])
@pytest.mark.parametrize(
    "spec, counts_ok, counts_err",
    [
        ("3", [3], [0, 1, 4]),
        ("3..", [3, 4], [0, 1]),
        ("..3", [0, 1], [3, 4]),
        ("2..3", [2], [0, 1, 3, 4]),
        ("2..=3", [2, 3], [0, 1, 4]),
    ],
)
def test_range_errors(kind, spec, counts_ok, counts_err):
    @dataclass
    class Repeat:
        values: Annotated[list[int], field(repeat=True, repeat_n=spec)]

    Repeat = builder(Repeat, kind=kind)

    def make(n):
        b = Repeat.builder()
        for i in range(n):
            b = b.values(i + 1)
        return b

    for n in counts_ok:
        assert make(n).build().values == list(range(1, n + 1))
    for n in counts_err:
        with pytest.raises(RangeError) as info:
            make(n).build()
        assert info.value == RangeError("values", n)


@pytest.mark.parametrize("n", [0, 1, 4])
def test_array_range_error(n):
    @dataclass
    class Repeat:
        exact: Annotated[tuple[int, int, int], field(repeat=True)]

    Repeat = builder(Repeat)
    b = Repeat.builder()
    for i in range(n):
        b = b.exact(i)
    with pytest.raises(RangeError) as info:
        b.build()
    assert info.value.count == n
    assert info.value.variant == "RangeExact"


def test_borrowed_resets_and_owned_is_immutable():
    @dataclass
    class B:
        values: Annotated[list[int], field(repeat=True)]
        a: int

    B = builder(B, kind="borrowed")
    b = B.builder()
    for x in range(3):
        b.values(x)
    b.a(1)
    assert b.build() == B([0, 1, 2], 1)
    with pytest.raises(MissingFieldError):
        b.build()

    @dataclass
    class O:
        a: int

    O = builder(O)
    first = O.builder().a(1)
    second = first.a(2)
    assert (first.build().a, second.build().a) == (1, 2)


def test_wrong_argument_count():
    @dataclass
    class T:
        pair: Annotated[tuple[int, int], field(tuple=("x", "y"))]

    T = builder(T)
    assert T.builder().pair(1, y=2).build().pair == (1, 2)
    with pytest.raises(TypeError):
        T.builder().pair(1, 2, 3)


def test_pascal_case():
    assert pascal_case("field_a") == "FieldA"
    assert pascal_case("exact") == "Exact"