from __future__ import annotations

import pytest

from parse.name_resolution import (
    NameContext,
    parse_name,
    resolve_class_name,
    use_declaration_imports,
)
from parse.php_parser import parse_source


def _imports(source: str) -> list[tuple[str, str]]:
    source_bytes = source.encode("utf-8")
    tree = parse_source(source_bytes)
    pairs: list[tuple[str, str]] = []
    for node in tree.root_node.named_children:
        if node.type == "namespace_use_declaration":
            pairs.extend(use_declaration_imports(source_bytes, node))
    return pairs


def test_parse_name_marks_fully_qualified() -> None:
    ref = parse_name("\\Foo\\Bar")

    assert ref.segments == ("Foo", "Bar")
    assert ref.fully_qualified is True
    assert ref.namespace_relative is False


def test_parse_name_namespace_relative() -> None:
    ref = parse_name("namespace\\Foo")

    assert ref.segments == ("Foo",)
    assert ref.namespace_relative is True


@pytest.mark.parametrize("keyword", ["self", "parent", "static", "Self"])
def test_self_reference_keywords_skip_alias_table(keyword: str) -> None:
    context = NameContext(namespace="App", aliases={keyword: "Evil\\Alias"})

    assert resolve_class_name(parse_name(keyword), context) == keyword


def test_alias_with_single_segment() -> None:
    context = NameContext()
    context.add_alias("Baz", "Foo\\Bar")

    assert resolve_class_name(parse_name("Baz"), context) == "Foo\\Bar"


def test_alias_with_remaining_segments() -> None:
    context = NameContext()
    context.add_alias("Baz", "Foo\\Bar")

    assert resolve_class_name(parse_name("Baz\\Qux"), context) == "Foo\\Bar\\Qux"


def test_alias_wins_over_namespace_prefix() -> None:
    context = NameContext(namespace="App")
    context.add_alias("Thing", "\\Other\\Thing")

    assert resolve_class_name(parse_name("Thing"), context) == "Other\\Thing"


def test_unqualified_name_gets_namespace_prefix() -> None:
    context = NameContext(namespace="App\\Models")

    assert resolve_class_name(parse_name("User"), context) == "App\\Models\\User"


def test_fully_qualified_name_is_not_prefixed() -> None:
    context = NameContext(namespace="App")

    assert resolve_class_name(parse_name("\\Vendor\\Lib"), context) == "Vendor\\Lib"


def test_namespace_relative_name_uses_current_namespace() -> None:
    context = NameContext(namespace="App")
    context.add_alias("Foo", "Elsewhere\\Foo")

    assert resolve_class_name(parse_name("namespace\\Foo"), context) == "App\\Foo"


def test_global_scope_returns_name_verbatim() -> None:
    assert resolve_class_name(parse_name("User"), NameContext()) == "User"


def test_enter_namespace_replaces_previous_namespace() -> None:
    context = NameContext(namespace="First")
    context.enter_namespace("Second\\Inner")

    assert context.namespace == "Second\\Inner"
    assert resolve_class_name(parse_name("X"), context) == "Second\\Inner\\X"


def test_use_declaration_simple_and_aliased() -> None:
    pairs = _imports("<?php\nuse Foo\\Bar;\nuse Foo\\Baz as Qux;\n")

    assert pairs == [("Bar", "Foo\\Bar"), ("Qux", "Foo\\Baz")]


def test_use_declaration_multiple_clauses() -> None:
    pairs = _imports("<?php\nuse A\\One, B\\Two as Deux;\n")

    assert pairs == [("One", "A\\One"), ("Deux", "B\\Two")]


def test_use_declaration_group() -> None:
    pairs = _imports("<?php\nuse A\\{B, C as D};\n")

    assert pairs == [("B", "A\\B"), ("D", "A\\C")]


def test_use_declaration_leading_separator_is_dropped() -> None:
    pairs = _imports("<?php\nuse \\Vendor\\Package\\Client;\n")

    assert pairs == [("Client", "Vendor\\Package\\Client")]
