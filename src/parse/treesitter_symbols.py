"""Tree-sitter based declaration extraction for PHP files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from artifacts.models.symbols import SymbolKind, SymbolRecord
from parse.name_resolution import NAMESPACE_SEPARATOR, namespace_name
from parse.php_parser import node_text, parse_source

if TYPE_CHECKING:
    from tree_sitter import Node

_CLASS_LIKE_KINDS: dict[str, SymbolKind] = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "trait_declaration": "trait",
    "enum_declaration": "enum",
}


def _qualify(namespace: str, name: str) -> str:
    if namespace:
        return f"{namespace}{NAMESPACE_SEPARATOR}{name}"
    return name


def _create_symbol_record(
    node: Node,
    relative_path: str,
    kind: SymbolKind,
    name: str,
    qualified_name: str,
) -> SymbolRecord:
    """Create a SymbolRecord from a tree-sitter node."""
    return SymbolRecord(
        path=relative_path,
        kind=kind,
        name=name,
        qualified_name=qualified_name,
        start_line=node.start_point[0] + 1,
        end_line=node.end_point[0] + 1,
    )


def _constant_names(source_bytes: bytes, node: Node) -> list[tuple[Node, str]]:
    names: list[tuple[Node, str]] = []
    for element in node.named_children:
        if element.type != "const_element":
            continue
        for child in element.named_children:
            if child.type == "name":
                names.append((element, node_text(source_bytes, child)))
                break
    return names


def _handle_class_like(
    node: Node,
    source_bytes: bytes,
    symbols: list[SymbolRecord],
    relative_path: str,
    namespace: str,
) -> None:
    """Record a class-like declaration and its methods and constants.

    Method bodies are not descended into; closures and anonymous classes
    inside them are not declarations of this file's API.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return

    class_name = node_text(source_bytes, name_node)
    qualified = _qualify(namespace, class_name)
    symbols.append(
        _create_symbol_record(
            node, relative_path, _CLASS_LIKE_KINDS[node.type], class_name, qualified
        )
    )

    body = node.child_by_field_name("body")
    if body is None:
        return

    for member in body.named_children:
        if member.type == "method_declaration":
            method_name_node = member.child_by_field_name("name")
            if method_name_node is None:
                continue
            method_name = node_text(source_bytes, method_name_node)
            symbols.append(
                _create_symbol_record(
                    member,
                    relative_path,
                    "method",
                    method_name,
                    f"{qualified}::{method_name}",
                )
            )
        elif member.type == "const_declaration":
            for element, const_name in _constant_names(source_bytes, member):
                symbols.append(
                    _create_symbol_record(
                        element,
                        relative_path,
                        "constant",
                        const_name,
                        f"{qualified}::{const_name}",
                    )
                )


def _traverse_node(
    node: Node,
    source_bytes: bytes,
    symbols: list[SymbolRecord],
    relative_path: str,
    namespace: list[str],
) -> None:
    """Traverse top-level statements (and namespace bodies) collecting symbols.

    ``namespace`` is a one-element list so unbraced namespace clauses carry
    over to the sibling statements that follow them.
    """
    for child in node.named_children:
        if child.type == "namespace_definition":
            namespace[0] = namespace_name(source_bytes, child)
            body = child.child_by_field_name("body")
            if body is not None:
                _traverse_node(body, source_bytes, symbols, relative_path, namespace)
        elif child.type in _CLASS_LIKE_KINDS:
            _handle_class_like(child, source_bytes, symbols, relative_path, namespace[0])
        elif child.type == "function_definition":
            name_node = child.child_by_field_name("name")
            if name_node is not None:
                function_name = node_text(source_bytes, name_node)
                symbols.append(
                    _create_symbol_record(
                        child,
                        relative_path,
                        "function",
                        function_name,
                        _qualify(namespace[0], function_name),
                    )
                )
        elif child.type == "const_declaration":
            for element, const_name in _constant_names(source_bytes, child):
                symbols.append(
                    _create_symbol_record(
                        element,
                        relative_path,
                        "constant",
                        const_name,
                        _qualify(namespace[0], const_name),
                    )
                )
        elif child.type in ("compound_statement", "declaration_list"):
            _traverse_node(child, source_bytes, symbols, relative_path, namespace)


def extract_symbols_treesitter(
    source_bytes: bytes,
    relative_path: str,
) -> list[SymbolRecord]:
    """Extract declared symbols from PHP source using Tree-sitter.

    Args:
        source_bytes: Raw file contents
        relative_path: Path recorded on each symbol

    Returns:
        List of SymbolRecord objects in source order.

    Raises:
        PhpSyntaxError: If the source does not parse.
    """
    tree = parse_source(source_bytes)
    symbols: list[SymbolRecord] = []
    _traverse_node(tree.root_node, source_bytes, symbols, relative_path, [""])
    return symbols
