# src/pagecraft/dom/elements/button.py
from bs4 import Tag

from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext, close_tag, escape_text
from ..styles import StyleExtraction
from .base import element_props, start_tag, tag_text


def parse_button(tag: Tag, extraction: StyleExtraction) -> dict:
    """Parses a text-only <button>, or an anchor styled as a button."""
    if tag.name == "a":
        props = element_props(tag, extraction, exclude=("href",))
        props["href"] = tag.get("href")
    else:
        props = element_props(tag, extraction)
    props["text"] = tag_text(tag)
    return props


def render_button(node: DocumentNode, ctx: RenderContext):
    props = node.props
    opening = start_tag(node, ctx, {"href": props.get("href")})
    return opening + escape_text(props.get("text", "")), close_tag(props["tag"])


DEFINITION = KindDefinition(NodeKind.BUTTON, parse_button, render_button)
