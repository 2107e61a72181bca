# src/pagecraft/dom/elements/opaque.py
from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext


def render_opaque(node: DocumentNode, ctx: RenderContext):
    """Sealed content is emitted byte for byte."""
    return node.raw_content or "", ""


# Opaque nodes are never parsed into props: the builder captures their markup.
DEFINITION = KindDefinition(NodeKind.OPAQUE_HTML, None, render_opaque)
