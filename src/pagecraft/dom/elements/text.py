# src/pagecraft/dom/elements/text.py
from bs4 import Tag

from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext, close_tag, escape_text
from ..styles import StyleExtraction
from ..tags import BLOCK_TEXT_TAGS
from .base import element_props, start_tag, tag_text


def parse_text(tag: Tag, extraction: StyleExtraction) -> dict:
    """Parses a text-only element; block elements lose surrounding whitespace."""
    props = element_props(tag, extraction)
    props["text"] = tag_text(tag, block=tag.name in BLOCK_TEXT_TAGS)
    return props


def render_text(node: DocumentNode, ctx: RenderContext):
    tag = node.props.get("tag")
    text = escape_text(node.props.get("text", ""))
    if tag is None:
        return text, ""
    return start_tag(node, ctx) + text, close_tag(tag)


DEFINITION = KindDefinition(NodeKind.TEXT, parse_text, render_text)
