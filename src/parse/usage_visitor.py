"""Tree-sitter based detection of symbol usages in one PHP file."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from artifacts.models.usages import Confidence, UsageKind, UsageRecord
from parse.name_resolution import (
    NAMESPACE_SEPARATOR,
    NameContext,
    namespace_name,
    parse_name,
    resolve_class_name,
    use_declaration_imports,
)
from parse.php_parser import node_line, node_text, parse_source
from utils import context_window, line_at, split_source_lines

if TYPE_CHECKING:
    from collections.abc import Callable

    from tree_sitter import Node, Tree

logger = logging.getLogger(__name__)

MEMBER_SEPARATOR = "::"

# Node types that spell a class reference directly.
_CLASS_NAME_TYPES = frozenset(
    {"name", "qualified_name", "relative_name", "relative_scope"}
)


class NodeShape(Enum):
    """Syntactic shapes the visitor reacts to."""

    NAMESPACE = "namespace"
    IMPORT = "import"
    INSTANTIATION = "instantiation"
    STATIC_CALL = "static_call"
    METHOD_CALL = "method_call"
    NULLSAFE_METHOD_CALL = "nullsafe_method_call"
    INSTANCEOF = "instanceof"
    CONSTANT_FETCH = "constant_fetch"
    TYPED_PARAMETER = "typed_parameter"
    TYPED_PROPERTY = "typed_property"
    OTHER = "other"


_SHAPE_BY_NODE_TYPE: dict[str, NodeShape] = {
    "namespace_definition": NodeShape.NAMESPACE,
    "namespace_use_declaration": NodeShape.IMPORT,
    "object_creation_expression": NodeShape.INSTANTIATION,
    "scoped_call_expression": NodeShape.STATIC_CALL,
    "member_call_expression": NodeShape.METHOD_CALL,
    "nullsafe_member_call_expression": NodeShape.NULLSAFE_METHOD_CALL,
    "instanceof_expression": NodeShape.INSTANCEOF,
    "class_constant_access_expression": NodeShape.CONSTANT_FETCH,
    "simple_parameter": NodeShape.TYPED_PARAMETER,
    "variadic_parameter": NodeShape.TYPED_PARAMETER,
    "property_promotion_parameter": NodeShape.TYPED_PARAMETER,
    "property_declaration": NodeShape.TYPED_PROPERTY,
}


def classify_node(source_bytes: bytes, node: Node) -> NodeShape:
    """Map a syntax node onto the shape the visitor dispatches on."""
    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if (
            operator is not None
            and node_text(source_bytes, operator).lower() == "instanceof"
        ):
            return NodeShape.INSTANCEOF
        return NodeShape.OTHER
    return _SHAPE_BY_NODE_TYPE.get(node.type, NodeShape.OTHER)


class UsageVisitor:
    """Collects usages of one target symbol while walking one file's tree.

    The namespace and alias table live in a :class:`NameContext` created per
    instance, and an instance only ever visits a single file.
    """

    def __init__(self, target_symbol: str, file_path: str, source_bytes: bytes) -> None:
        self.target_symbol = target_symbol
        self.file_path = file_path
        self._source_bytes = source_bytes
        self._lines = split_source_lines(source_bytes.decode("utf8", errors="replace"))
        self._normalized_target = target_symbol.lstrip(NAMESPACE_SEPARATOR)
        _, _, member = self._normalized_target.partition(MEMBER_SEPARATOR)
        self._target_member = member or None
        self._context = NameContext()
        self._usages: list[UsageRecord] = []

    @property
    def usages(self) -> list[UsageRecord]:
        return list(self._usages)

    def visit(self, tree: Tree) -> list[UsageRecord]:
        """Walk ``tree`` in source order and return the usages found."""
        stack: list[Node] = [tree.root_node]
        while stack:
            node = stack.pop()
            shape = classify_node(self._source_bytes, node)
            descend = _HANDLERS[shape](self, node)
            if descend:
                stack.extend(reversed(node.children))
        logger.debug(
            "%s: %d usage(s) of %s", self.file_path, len(self._usages), self.target_symbol
        )
        return self.usages

    # -- matching ---------------------------------------------------------

    def matches_target(self, name: str) -> bool:
        """Exact match, or the target ends with ``\\`` + the resolved name."""
        normalized = name.lstrip(NAMESPACE_SEPARATOR)
        if not normalized:
            return False
        return normalized == self._normalized_target or self._normalized_target.endswith(
            NAMESPACE_SEPARATOR + normalized
        )

    def _resolve(self, node: Node | None) -> str | None:
        if node is None or node.type not in _CLASS_NAME_TYPES:
            return None
        ref = parse_name(node_text(self._source_bytes, node))
        if not ref.segments:
            return None
        return resolve_class_name(ref, self._context)

    def _add_usage(self, node: Node, kind: UsageKind, confidence: Confidence) -> None:
        line = node_line(node)
        self._usages.append(
            UsageRecord(
                file=self.file_path,
                line=line,
                code=line_at(self._lines, line),
                kind=kind,
                confidence=confidence,
                context=context_window(self._lines, line),
            )
        )

    # -- handlers (return True to descend into children) ------------------

    def _on_namespace(self, node: Node) -> bool:
        self._context.enter_namespace(namespace_name(self._source_bytes, node))
        return True

    def _on_import(self, node: Node) -> bool:
        for short_name, qualified_name in use_declaration_imports(
            self._source_bytes, node
        ):
            self._context.add_alias(short_name, qualified_name)
        return False

    def _on_instantiation(self, node: Node) -> bool:
        class_node = node.named_children[0] if node.named_children else None
        class_name = self._resolve(class_node)
        if class_name is not None and self.matches_target(class_name):
            self._add_usage(node, "instantiation", Confidence.CERTAIN)
        return True

    def _on_static_call(self, node: Node) -> bool:
        class_name = self._resolve(node.child_by_field_name("scope"))
        if class_name is None:
            return True

        name_node = node.child_by_field_name("name")
        member = (
            node_text(self._source_bytes, name_node)
            if name_node is not None and name_node.type == "name"
            else None
        )
        full_name = f"{class_name}{MEMBER_SEPARATOR}{member or ''}"
        if self.matches_target(full_name) or self.matches_target(class_name):
            self._add_usage(node, "static-call", Confidence.CERTAIN)
        elif (
            class_name.lower() == "parent"
            and member is not None
            and member == self._target_member
        ):
            self._add_usage(node, "static-call", Confidence.CERTAIN)
        return True

    def _on_method_call(self, node: Node, *, nullsafe: bool = False) -> bool:
        if self._target_member is None:
            return True
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return True

        if name_node.type != "name":
            # $obj->$method(): any member may be called
            self._add_usage(node, "method-call", Confidence.DYNAMIC)
            return True

        if node_text(self._source_bytes, name_node) == self._target_member:
            seed = Confidence.PROBABLE if nullsafe else Confidence.CERTAIN
            self._add_usage(node, "method-call", seed)
        return True

    def _on_nullsafe_method_call(self, node: Node) -> bool:
        return self._on_method_call(node, nullsafe=True)

    def _on_instanceof(self, node: Node) -> bool:
        class_node = node.child_by_field_name("right")
        if class_node is None and node.named_children:
            class_node = node.named_children[-1]
        class_name = self._resolve(class_node)
        if class_name is not None and self.matches_target(class_name):
            self._add_usage(node, "instanceof-check", Confidence.CERTAIN)
        return True

    def _on_constant_fetch(self, node: Node) -> bool:
        scope_node = node.named_children[0] if node.named_children else None
        class_name = self._resolve(scope_node)
        if class_name is not None and self.matches_target(class_name):
            self._add_usage(node, "class-constant-fetch", Confidence.CERTAIN)
        return True

    def _on_typed_declaration(self, node: Node) -> bool:
        type_node = node.child_by_field_name("type")
        if type_node is not None and any(
            self.matches_target(class_name)
            for class_name in self._declared_classes(type_node)
        ):
            self._add_usage(node, "type-declaration", Confidence.CERTAIN)
        return True

    def _declared_classes(self, type_node: Node) -> list[str]:
        """Resolve every class named in a (possibly nullable/union) type."""
        classes: list[str] = []
        pending = [type_node]
        while pending:
            current = pending.pop()
            if current.type in _CLASS_NAME_TYPES:
                class_name = self._resolve(current)
                if class_name is not None:
                    classes.append(class_name)
                continue
            pending.extend(current.named_children)
        return classes

    def _on_other(self, node: Node) -> bool:
        return True


_HANDLERS: dict[NodeShape, Callable[[UsageVisitor, Node], bool]] = {
    NodeShape.NAMESPACE: UsageVisitor._on_namespace,
    NodeShape.IMPORT: UsageVisitor._on_import,
    NodeShape.INSTANTIATION: UsageVisitor._on_instantiation,
    NodeShape.STATIC_CALL: UsageVisitor._on_static_call,
    NodeShape.METHOD_CALL: UsageVisitor._on_method_call,
    NodeShape.NULLSAFE_METHOD_CALL: UsageVisitor._on_nullsafe_method_call,
    NodeShape.INSTANCEOF: UsageVisitor._on_instanceof,
    NodeShape.CONSTANT_FETCH: UsageVisitor._on_constant_fetch,
    NodeShape.TYPED_PARAMETER: UsageVisitor._on_typed_declaration,
    NodeShape.TYPED_PROPERTY: UsageVisitor._on_typed_declaration,
    NodeShape.OTHER: UsageVisitor._on_other,
}

_missing_shapes = set(NodeShape) - set(_HANDLERS)
if _missing_shapes:
    msg = f"No usage handler for: {sorted(shape.value for shape in _missing_shapes)}"
    raise RuntimeError(msg)


def find_usages_in_source(
    target_symbol: str, file_path: str, source_bytes: bytes
) -> list[UsageRecord]:
    """Parse ``source_bytes`` and return usages of ``target_symbol``.

    Raises:
        PhpSyntaxError: If the source does not parse.
    """
    tree = parse_source(source_bytes)
    return UsageVisitor(target_symbol, file_path, source_bytes).visit(tree)


__all__ = [
    "NodeShape",
    "UsageVisitor",
    "classify_node",
    "find_usages_in_source",
]
