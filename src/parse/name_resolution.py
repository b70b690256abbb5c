"""Per-file namespace and import-alias resolution for PHP class references."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from parse.php_parser import node_text

if TYPE_CHECKING:
    from tree_sitter import Node

NAMESPACE_SEPARATOR = "\\"

SELF_REFERENCE_KEYWORDS = frozenset({"self", "parent", "static"})

_NAME_NODE_TYPES = frozenset({"name", "qualified_name", "namespace_name"})
_GROUP_CLAUSE_TYPES = frozenset({"namespace_use_clause", "namespace_use_group_clause"})


@dataclass(frozen=True)
class NameRef:
    """A class reference as written: identifier segments plus qualification."""

    segments: tuple[str, ...]
    fully_qualified: bool = False
    namespace_relative: bool = False

    @property
    def name(self) -> str:
        return NAMESPACE_SEPARATOR.join(self.segments)

    @property
    def first(self) -> str:
        return self.segments[0] if self.segments else ""


@dataclass
class NameContext:
    """Namespace and alias table for the file currently being traversed.

    A new context is created for every file; nothing here outlives one file.
    """

    namespace: str = ""
    aliases: dict[str, str] = field(default_factory=dict)

    def enter_namespace(self, namespace: str) -> None:
        self.namespace = namespace.strip(NAMESPACE_SEPARATOR)

    def add_alias(self, short_name: str, qualified_name: str) -> None:
        self.aliases[short_name] = qualified_name.lstrip(NAMESPACE_SEPARATOR)


def parse_name(text: str) -> NameRef:
    """Split written name text into a :class:`NameRef`.

    Examples:
        >>> parse_name("\\\\Foo\\\\Bar")
        NameRef(segments=('Foo', 'Bar'), fully_qualified=True, namespace_relative=False)
        >>> parse_name("namespace\\\\Foo").namespace_relative
        True
    """
    written = "".join(text.split())
    fully_qualified = written.startswith(NAMESPACE_SEPARATOR)
    namespace_relative = False
    if written.lower().startswith("namespace" + NAMESPACE_SEPARATOR):
        namespace_relative = True
        written = written[len("namespace") :]
    segments = tuple(part for part in written.split(NAMESPACE_SEPARATOR) if part)
    return NameRef(
        segments=segments,
        fully_qualified=fully_qualified,
        namespace_relative=namespace_relative,
    )


def resolve_class_name(ref: NameRef, context: NameContext) -> str:
    """Canonicalize a class reference against the current file context.

    Self-reference keywords are returned as written. Names whose first
    segment is an imported alias are expanded through the alias table.
    Unqualified and qualified names are prefixed with the active namespace.
    Anything else is returned verbatim.
    """
    if ref.first.lower() in SELF_REFERENCE_KEYWORDS:
        return ref.name

    if ref.namespace_relative:
        if context.namespace:
            return f"{context.namespace}{NAMESPACE_SEPARATOR}{ref.name}"
        return ref.name

    aliased = context.aliases.get(ref.first)
    if aliased is not None:
        if len(ref.segments) == 1:
            return aliased
        rest = NAMESPACE_SEPARATOR.join(ref.segments[1:])
        return f"{aliased}{NAMESPACE_SEPARATOR}{rest}"

    if not ref.fully_qualified and context.namespace:
        return f"{context.namespace}{NAMESPACE_SEPARATOR}{ref.name}"

    return ref.name


def namespace_name(source_bytes: bytes, node: Node) -> str:
    """Return the declared name of a ``namespace_definition`` ("" if global)."""
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return ""
    return parse_name(node_text(source_bytes, name_node)).name


def _clause_alias(clause: Node) -> Node | None:
    alias_node = clause.child_by_field_name("alias")
    if alias_node is not None:
        return alias_node
    for child in clause.named_children:
        if child.type == "namespace_aliasing_clause":
            for alias_child in child.named_children:
                if alias_child.type == "name":
                    return alias_child
    return None


def _clause_import(
    source_bytes: bytes, clause: Node, prefix: str
) -> tuple[str, str] | None:
    alias_node = _clause_alias(clause)
    imported: str | None = None
    for child in clause.named_children:
        if alias_node is not None and child.id == alias_node.id:
            continue
        if child.type in _NAME_NODE_TYPES:
            imported = parse_name(node_text(source_bytes, child)).name
            break
    if not imported:
        return None

    if prefix:
        imported = f"{prefix}{NAMESPACE_SEPARATOR}{imported}"
    if alias_node is not None:
        short_name = node_text(source_bytes, alias_node).strip()
    else:
        short_name = imported.rsplit(NAMESPACE_SEPARATOR, 1)[-1]
    return short_name, imported


def use_declaration_imports(source_bytes: bytes, node: Node) -> list[tuple[str, str]]:
    """Extract ``(short_name, qualified_name)`` pairs from a use declaration.

    Handles single (``use A\\B;``), aliased (``use A\\B as C;``), multiple
    (``use A, B;``) and grouped (``use A\\{B, C as D};``) forms.
    """
    imports: list[tuple[str, str]] = []
    group_prefix = ""
    for child in node.named_children:
        if child.type == "namespace_use_clause":
            pair = _clause_import(source_bytes, child, "")
            if pair is not None:
                imports.append(pair)
        elif child.type in _NAME_NODE_TYPES:
            group_prefix = parse_name(node_text(source_bytes, child)).name
        elif child.type == "namespace_use_group":
            for clause in child.named_children:
                if clause.type not in _GROUP_CLAUSE_TYPES:
                    continue
                pair = _clause_import(source_bytes, clause, group_prefix)
                if pair is not None:
                    imports.append(pair)
    return imports


__all__ = [
    "NAMESPACE_SEPARATOR",
    "SELF_REFERENCE_KEYWORDS",
    "NameContext",
    "NameRef",
    "namespace_name",
    "parse_name",
    "resolve_class_name",
    "use_declaration_imports",
]
