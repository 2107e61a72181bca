# src/pagecraft/dom/serializer.py
import logging
from typing import List, Set, Tuple, Union

from pydantic import ValidationError

from pagecraft.errors import SerializationFailure
from pagecraft.model import EngineSettings
from .core import LEAF_KINDS, DocumentNode, NodeKind
from .markup import RenderContext
from .props import validate_props
from .registry import KindRegistry

logger = logging.getLogger(__name__)

DOCUMENT_SHELL = ("<!DOCTYPE html><html><head></head><body>", "</body></html>")


class DocumentSerializer:
    """
    Renders a document tree back to HTML.

    Output is deterministic: attributes are sorted, styles are emitted in
    canonical order and opaque content is copied verbatim. Trees that break
    the node contract raise SerializationFailure instead of producing
    partial markup.
    """

    def __init__(self, settings: EngineSettings):
        KindRegistry.discover()
        self.settings = settings

    def serialize(self, node: DocumentNode, full_document: bool = False) -> str:
        ctx = RenderContext(settings=self.settings, full_document=full_document)
        parts: List[str] = []
        if full_document and self._kind_of(node) != NodeKind.ROOT:
            parts.append(DOCUMENT_SHELL[0])

        seen: Set[int] = set()
        stack: List[Union[str, Tuple[DocumentNode, bool]]] = [(node, True)]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue

            current, is_top = item
            if id(current) in seen:
                raise SerializationFailure(f"Node {getattr(current, 'id', '?')} appears more than once in the tree")
            seen.add(id(current))

            opening, closing = self._render(current, ctx, is_top)
            parts.append(opening)
            if closing:
                stack.append(closing)
            for child in reversed(current.children):
                stack.append((child, False))

        if full_document and self._kind_of(node) != NodeKind.ROOT:
            parts.append(DOCUMENT_SHELL[1])
        return "".join(parts)

    @staticmethod
    def _kind_of(node: DocumentNode):
        try:
            return NodeKind(node.kind)
        except ValueError:
            return None

    def _render(self, node: DocumentNode, ctx: RenderContext, is_top: bool) -> Tuple[str, str]:
        kind = self._kind_of(node)
        definition = KindRegistry.get(kind) if kind is not None else None
        if definition is None:
            raise SerializationFailure(f"Unknown node kind: {node.kind!r}")
        if kind == NodeKind.ROOT and not is_top:
            raise SerializationFailure("Root node found below the top of the tree")
        if kind in LEAF_KINDS and node.children:
            raise SerializationFailure(f"{kind.value} node {node.id} cannot have children")

        if kind == NodeKind.OPAQUE_HTML:
            if not isinstance(node.raw_content, str):
                raise SerializationFailure(f"OpaqueHTML node {node.id} has no raw content")
            if node.props or not node.style.is_empty:
                raise SerializationFailure(f"OpaqueHTML node {node.id} must not carry props or style")
        else:
            try:
                props = validate_props(kind, node.props)
            except ValidationError as e:
                raise SerializationFailure(f"Invalid props on {kind.value} node {node.id}: {e}") from e
            node = node.model_copy(update={"props": props})

        return definition.renderer(node, ctx)
