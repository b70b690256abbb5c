"""Parsing utilities for PHP sources."""

from parse.name_resolution import (
    NameContext,
    NameRef,
    parse_name,
    resolve_class_name,
    use_declaration_imports,
)
from parse.php_parser import PhpSyntaxError, parse_source
from parse.treesitter_symbols import extract_symbols_treesitter
from parse.usage_visitor import UsageVisitor, find_usages_in_source

__all__ = [
    "NameContext",
    "NameRef",
    "PhpSyntaxError",
    "UsageVisitor",
    "extract_symbols_treesitter",
    "find_usages_in_source",
    "parse_name",
    "parse_source",
    "resolve_class_name",
    "use_declaration_imports",
]
