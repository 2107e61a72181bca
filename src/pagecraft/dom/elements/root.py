# src/pagecraft/dom/elements/root.py
from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext, render_attributes


def has_document_data(node: DocumentNode) -> bool:
    """True when the root carries anything that only a full document can express."""
    props = node.props
    return bool(
        props.get("head")
        or props.get("html_attributes")
        or props.get("attributes")
        or props.get("class_name")
        or not node.style.is_empty
    )


def render_root(node: DocumentNode, ctx: RenderContext):
    """
    A root without document-level data renders as a bare fragment. Otherwise,
    or when a full document is requested, it restores the <html>, <head> and
    <body> shell around the children.
    """
    if not ctx.full_document and not has_document_data(node):
        return "", ""
    props = node.props
    html_attributes = render_attributes(props.get("html_attributes", {}), ctx)
    body_attributes = render_attributes(
        props.get("attributes", {}), ctx, props.get("class_name", ""), node.style
    )
    opening = (
        f"<!DOCTYPE html><html{html_attributes}>"
        f"<head>{props.get('head', '')}</head>"
        f"<body{body_attributes}>"
    )
    return opening, "</body></html>"


DEFINITION = KindDefinition(NodeKind.ROOT, None, render_root, container=True)
