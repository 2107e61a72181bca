# src/pagecraft/dom/elements/link.py
from bs4 import Tag

from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext, close_tag, escape_text
from ..styles import StyleExtraction
from .base import element_props, start_tag, tag_text


def parse_link(tag: Tag, extraction: StyleExtraction) -> dict:
    """
    Parses an <a> tag. Text-only anchors keep their text in props; anchors
    with element children keep their content as child nodes.
    """
    props = element_props(tag, extraction, exclude=("href", "target"))
    props["href"] = tag.get("href")
    props["target"] = tag.get("target")
    if tag.find(True) is None:
        props["text"] = tag_text(tag)
    return props


def render_link(node: DocumentNode, ctx: RenderContext):
    props = node.props
    opening = start_tag(node, ctx, {"href": props.get("href"), "target": props.get("target")})
    if props.get("text") is not None:
        opening += escape_text(props["text"])
    return opening, close_tag("a")


DEFINITION = KindDefinition(NodeKind.LINK, parse_link, render_link, container=True)
