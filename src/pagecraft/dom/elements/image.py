# src/pagecraft/dom/elements/image.py
from bs4 import Tag

from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext
from ..styles import StyleExtraction
from .base import element_props, start_tag


def parse_image(tag: Tag, extraction: StyleExtraction) -> dict:
    """Parses an <img> tag. A missing alt stays None, an empty alt stays empty."""
    props = element_props(tag, extraction, exclude=("src", "alt"))
    props["src"] = tag.get("src") or ""
    props["alt"] = tag.get("alt")
    return props


def render_image(node: DocumentNode, ctx: RenderContext):
    props = node.props
    return start_tag(node, ctx, {"src": props.get("src") or None, "alt": props.get("alt")}), ""


DEFINITION = KindDefinition(NodeKind.IMAGE, parse_image, render_image)
