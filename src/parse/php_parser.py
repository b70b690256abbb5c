"""Tree-sitter front end for PHP source files."""

from __future__ import annotations

import threading

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_php import language_php

_LOCAL = threading.local()


class PhpSyntaxError(Exception):
    """Raised when PHP source does not parse into an error-free tree."""

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.line = line


def _get_parser() -> Parser:
    """Return the calling thread's Tree-sitter parser for PHP."""
    parser: Parser | None = getattr(_LOCAL, "parser", None)
    if parser is None:
        parser = Parser(Language(language_php()))
        _LOCAL.parser = parser
    return parser


def _first_error_node(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error_node(child)
        if found is not None:
            return found
    return node


def parse_source(source_bytes: bytes) -> Tree:
    """Parse PHP source into a syntax tree.

    Raises:
        PhpSyntaxError: If the tree contains error or missing nodes. A
            partial tree is never returned.
    """
    tree = _get_parser().parse(source_bytes)
    root_node = tree.root_node
    if root_node.has_error:
        error_node = _first_error_node(root_node)
        line = error_node.start_point[0] + 1 if error_node is not None else None
        msg = "Syntax error" if line is None else f"Syntax error near line {line}"
        raise PhpSyntaxError(msg, line=line)
    return tree


def node_text(source_bytes: bytes, node: Node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode(
        "utf8", errors="ignore"
    )


def node_line(node: Node) -> int:
    """1-based line of the node's start position."""
    return node.start_point[0] + 1


__all__ = ["PhpSyntaxError", "node_line", "node_text", "parse_source"]
