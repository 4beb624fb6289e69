"""Integration tests for parsing type expressions into type values."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from packages.typeexpr import ast, errors, grammar, types
from packages.typeexpr.config import ParserSettings
from packages.typeexpr.reflect import (
    PRIMITIVES,
    ClassType,
    GenericArrayType,
    ParameterizedType,
    Type,
    WildcardType,
    format_type,
)
from packages.typeexpr.resolver import ClassCatalog

CATALOG = ClassCatalog.default()


def _cls(name: str) -> ClassType:
    return CATALOG.resolve(name)


STRING = _cls("java.lang.String")
INTEGER = _cls("java.lang.Integer")
NUMBER = _cls("java.lang.Number")
ITERABLE = _cls("java.lang.Iterable")
LIST = _cls("java.util.List")
MAP = _cls("java.util.Map")
INT = PRIMITIVES["int"]


def _assert_round_trip(value: Type) -> None:
    assert grammar.parse(format_type(value)) == value
    assert grammar.parse(format_type(value, canonical=True)) == value


def test_class_names_default_to_java_lang() -> None:
    assert grammar.parse("Integer") == INTEGER
    assert grammar.parse("Void") == _cls("java.lang.Void")


def test_fully_qualified_class_name() -> None:
    assert grammar.parse("java.lang.Integer") == INTEGER
    assert grammar.parse("java.util.List") == LIST
    assert grammar.parse("java.util.List").arity == 1


@pytest.mark.parametrize(
    "name", ["void", "boolean", "byte", "short", "int", "long", "float", "double"]
)
def test_primitive_type_names(name: str) -> None:
    value = grammar.parse(name)
    assert value == PRIMITIVES[name]
    assert isinstance(value, ClassType) and value.primitive


def test_primitive_array_types() -> None:
    assert grammar.parse("int[]") == INT.array_class()
    assert grammar.parse("int[]").name == "[I"
    assert grammar.parse("boolean [ ]") == grammar.parse("boolean[]")
    assert grammar.parse("int[][]") == grammar.parse("[[I")
    assert grammar.parse("[[I").canonical_name == "int[][]"


@pytest.mark.parametrize(
    "name",
    [
        "[Z",
        "[[Z",
        "[B",
        "[S",
        "[I",
        "[J",
        "[F",
        "[D",
        "[Ljava.lang.String;",
        "[[[Ljava.util.List;",
    ],
)
def test_internal_array_names_round_trip(name: str) -> None:
    value = grammar.parse(name)
    assert isinstance(value, ClassType) and value.is_array
    assert format_type(value) == name
    _assert_round_trip(value)


def test_internal_object_array_matches_canonical_form() -> None:
    assert grammar.parse("[Ljava.lang.Object;") == grammar.parse("Object[]")
    assert grammar.parse("[[Ljava.lang.String;[]") == grammar.parse("String[][][]")


def test_generic_array_types() -> None:
    iterable_of_string = ParameterizedType(ITERABLE, (STRING,))
    assert grammar.parse("Iterable<String>[]") == GenericArrayType(iterable_of_string)

    nested = grammar.parse("java.util.List<Iterable<int[][]>[][]>")
    inner = ParameterizedType(ITERABLE, (INT.array_class().array_class(),))
    assert nested == ParameterizedType(LIST, (GenericArrayType(GenericArrayType(inner)),))
    _assert_round_trip(nested)


def test_recursive_generic_type() -> None:
    assert grammar.parse("Enum<?>") == ParameterizedType(_cls("java.lang.Enum"), (WildcardType(),))


def test_declared_bounds_are_not_checked() -> None:
    value = grammar.parse("Enum<String>")
    assert value == ParameterizedType(_cls("java.lang.Enum"), (STRING,))


def test_nested_class_names_use_dollar_separator() -> None:
    entry = grammar.parse("java.util.Map$Entry")
    assert entry == _cls("java.util.Map$Entry")
    assert entry.canonical_name == "java.util.Map.Entry"
    value = grammar.parse("java.util.Map$Entry<String, ? extends Number>")
    assert value == ParameterizedType(entry, (STRING, types.subtype_of(NUMBER)))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Iterable<?>", ParameterizedType(ITERABLE, (WildcardType(),))),
        ("Iterable<? extends String>", ParameterizedType(ITERABLE, (WildcardType((STRING,)),))),
        (
            "Iterable<? super String>",
            ParameterizedType(ITERABLE, (WildcardType(lower_bounds=(STRING,)),)),
        ),
        ("Iterable<String>", ParameterizedType(ITERABLE, (STRING,))),
        (
            "java.util.Map<?, ? extends Number>",
            ParameterizedType(MAP, (WildcardType(), WildcardType((NUMBER,)))),
        ),
    ],
)
def test_parameterized_and_wildcard_types(text: str, expected: Type) -> None:
    value = grammar.parse(text)
    assert value == expected
    assert hash(value) == hash(expected)
    _assert_round_trip(value)


def test_top_level_wildcards() -> None:
    assert grammar.parse("?") == types.subtype_of()
    assert grammar.parse("? extends Number") == types.subtype_of(NUMBER)
    assert grammar.parse("? super Integer[]") == types.supertype_of(INTEGER.array_class())


def test_upper_bounded_wildcards_accept_several_bounds() -> None:
    chars = _cls("java.lang.CharSequence")
    value = grammar.parse("java.util.List<? extends Number & CharSequence>")
    assert value == ParameterizedType(LIST, (types.subtype_of(NUMBER, chars),))
    assert grammar.parse("? extends CharSequence & Number") == types.subtype_of(NUMBER, chars)
    assert grammar.parse("? extends Object & Number") == types.subtype_of(NUMBER)
    _assert_round_trip(value)


@pytest.mark.parametrize(
    "value",
    [
        types.subtype_of(_cls("java.lang.Object"), NUMBER),
        types.subtype_of(NUMBER, _cls("java.lang.CharSequence"), _cls("java.io.Serializable")),
        types.parameterized_of(_cls("java.util.Map$Entry"), [STRING, types.subtype_of()]),
    ],
)
def test_factory_values_survive_printing_and_parsing(value: Type) -> None:
    _assert_round_trip(value)


@pytest.mark.parametrize(
    "text, error",
    [
        ("Iterable<int>", errors.InvalidTypeArgumentError),
        ("? super int", errors.InvalidTypeArgumentError),
        ("void[]", errors.ParseError),
        ("java.util.Map<String>", errors.ArityMismatchError),
        ("java.util.List<String, ?>", errors.ArityMismatchError),
        ("Integer<String>", errors.ArityMismatchError),
        ("no.such.Class", errors.ClassNotFoundError),
        ("NoSuchClass", errors.ClassNotFoundError),
        ("int[]<String>", errors.ParseError),
        ("[I<String>", errors.ParseError),
        ("int<String>", errors.ParseError),
        ("[Ljava.lang.Object", errors.MalformedInternalNameError),
        ("[java.lang.Object;", errors.MalformedInternalNameError),
        ("[Ljava.lang.Object;;", errors.MalformedInternalNameError),
        ("[V", errors.MalformedInternalNameError),
        ("[Q", errors.MalformedInternalNameError),
        ("Iterable<Integer><String>", errors.ParseError),
        ("Iterable<>", errors.ParseError),
        ("java.util.List<String", errors.ParseError),
        ("java.", errors.ParseError),
        ("? extends ?", errors.ParseError),
        ("? extends Number & ?", errors.ParseError),
        ("? extends Number &", errors.ParseError),
        ("? extends Number & int", errors.InvalidTypeArgumentError),
        ("? super Number & CharSequence", errors.ParseError),
        ("& Number", errors.ParseError),
        ("String String", errors.TrailingInputError),
        ("String;", errors.LexError),
        ("", errors.ParseError),
        ("   ", errors.ParseError),
    ],
)
def test_invalid_expressions_are_rejected(text: str, error: type[Exception]) -> None:
    with pytest.raises(error):
        grammar.parse(text)


def test_resolution_failures_are_not_parse_errors() -> None:
    with pytest.raises(errors.ClassNotFoundError) as exc:
        grammar.parse("java.util.List<no.such.Thing>")
    assert not isinstance(exc.value, errors.ParseError)
    assert isinstance(exc.value, errors.TypeExpressionError)
    assert exc.value.name == "no.such.Thing"
    assert exc.value.position == 15


@pytest.mark.parametrize("value", [None, 42, b"int"])
def test_absent_or_non_string_input_is_an_invalid_argument(value: object) -> None:
    with pytest.raises(errors.InvalidArgumentError) as exc:
        grammar.parse(value)  # type: ignore[arg-type]
    assert not isinstance(exc.value, errors.ParseError)


def test_errors_report_positions() -> None:
    with pytest.raises(errors.TrailingInputError) as trailing:
        grammar.parse("java.util.List<String> x")
    assert trailing.value.position == 23

    with pytest.raises(errors.ArityMismatchError) as arity:
        grammar.parse("java.util.Map<String>")
    assert arity.value.position == 0
    assert (arity.value.expected_count, arity.value.actual_count) == (2, 1)

    with pytest.raises(errors.ParseError) as empty_args:
        grammar.parse("Iterable<>")
    assert empty_args.value.position == 9
    assert empty_args.value.expected == "type argument"


def test_malformed_internal_names_explain_the_problem() -> None:
    with pytest.raises(errors.MalformedInternalNameError, match="missing trailing ';'"):
        grammar.parse("[Ljava.lang.Object")
    with pytest.raises(errors.MalformedInternalNameError, match="must start with 'L'"):
        grammar.parse("[java.lang.Object;")
    with pytest.raises(errors.MalformedInternalNameError, match="superfluous ';'"):
        grammar.parse("[Ljava.lang.Object;;")


def test_parse_expression_builds_syntax_tree_without_resolving() -> None:
    tree = grammar.parse_expression("java.util.Map<?, ? super int[]>")
    assert tree == ast.Parameterized(
        ast.RawName("java.util.Map"),
        (
            ast.Wildcard(ast.WildcardKind.UNBOUNDED),
            ast.Wildcard(ast.WildcardKind.LOWER, (ast.ArrayOf(ast.Primitive("int")),)),
        ),
    )
    assert tree.span == ast.Span(0, 31)
    unresolved = grammar.parse_expression("com.example.Missing<Foo>")
    assert isinstance(unresolved, ast.Parameterized)
    assert unresolved.raw == ast.RawName("com.example.Missing")


def test_wildcard_node_keeps_every_upper_bound() -> None:
    tree = grammar.parse_expression("? extends Number & CharSequence")
    assert tree == ast.Wildcard(
        ast.WildcardKind.UPPER, (ast.RawName("Number"), ast.RawName("CharSequence"))
    )
    assert tree.span == ast.Span(0, 31)


def test_internal_name_nodes_expose_depth_and_element() -> None:
    tree = grammar.parse_expression("[[Ljava.lang.String;")
    assert isinstance(tree, ast.InternalArrayName)
    assert tree.depth == 2
    assert tree.element == "Ljava.lang.String;"


def test_custom_resolver_and_default_package() -> None:
    catalog = ClassCatalog({"com.example.Box": ["T"], "com.example.Pair": ["A", "B"]})
    parser = grammar.TypeParser(catalog, settings=ParserSettings(default_package="com.example"))
    box = catalog.resolve("com.example.Box")
    pair = catalog.resolve("com.example.Pair")

    value = parser.parse("Pair<Box<?>, Box<Box<?>>[]>")
    boxed = ParameterizedType(box, (WildcardType(),))
    assert value == ParameterizedType(
        pair, (boxed, GenericArrayType(ParameterizedType(box, (boxed,))))
    )
    with pytest.raises(errors.ClassNotFoundError):
        parser.parse("Box<String>")


def test_literal_name_is_tried_before_default_package() -> None:
    catalog = ClassCatalog({"Widget": [], "java.lang.Widget": []})
    parser = grammar.TypeParser(catalog, settings=ParserSettings())
    assert parser.parse("Widget").name == "Widget"
    with pytest.raises(errors.ClassNotFoundError) as exc:
        parser.resolve_class("lang.Widget", position=3)
    assert exc.value.position == 3


@pytest.mark.parametrize(
    "text",
    [
        "int",
        "java.util.List",
        "String[][]",
        "[[D",
        "java.util.Map<String, java.util.List<? extends Number>>",
        "java.util.function.BiFunction<? super Integer, Long[], ? extends Comparable<String>>",
        "java.util.Optional<java.util.Map$Entry<String, int[]>[]>[]",
        "Class<?>",
        "? super java.util.List<String>",
    ],
)
def test_reparsing_the_string_form_is_idempotent(text: str) -> None:
    value = grammar.parse(text)
    again = grammar.parse(format_type(value))
    assert again == value
    assert hash(again) == hash(value)
    assert format_type(again) == format_type(value)


def test_shared_parser_is_safe_across_threads() -> None:
    parser = grammar.TypeParser()
    texts = ["java.util.Map<String, Integer[]>", "Iterable<? super Number>", "[[J"] * 20
    expected = [parser.parse(text) for text in texts]
    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(parser.parse, texts))
    assert results == expected
