# src/pagecraft/dom/elements/base.py
"""Parsing and rendering helpers shared by the kind definitions."""
import re
from typing import Any, Dict, Iterable, Optional

from bs4 import NavigableString, Tag

from ..core import DocumentNode
from ..markup import RenderContext, close_tag, open_tag, render_attributes
from ..styles import StyleExtraction

HTML_WHITESPACE_RE = re.compile(r"[ \t\n\r\f]+")
HTML_WHITESPACE = " \t\n\r\f"


def collapse_whitespace(text: str) -> str:
    """Collapses runs of HTML whitespace into one space; non-breaking spaces are content."""
    return HTML_WHITESPACE_RE.sub(" ", text)


def tag_text(tag: Tag, block: bool = False) -> str:
    """The collapsed text of a text-only element; block elements are stripped as well."""
    text = collapse_whitespace("".join(str(c) for c in tag.children if type(c) is NavigableString))
    return text.strip(HTML_WHITESPACE) if block else text


def element_props(tag: Tag, extraction: StyleExtraction, exclude: Iterable[str] = ()) -> Dict[str, Any]:
    """Props shared by every element kind: tag, unconsumed classes and plain attributes."""
    skipped = {"class", "style", *exclude}
    return {
        "tag": tag.name,
        "class_name": extraction.class_name,
        "attributes": {name: value for name, value in tag.attrs.items() if name not in skipped},
    }


def start_tag(
        node: DocumentNode,
        ctx: RenderContext,
        extra_attributes: Optional[Dict[str, Optional[str]]] = None,
        extra_css: Optional[Dict[str, str]] = None,
) -> str:
    """Opening markup of an element node, with its class, style and attributes."""
    props = node.props
    attributes = dict(props.get("attributes", {}))
    for name, value in (extra_attributes or {}).items():
        if value is not None:
            attributes[name] = value
    rendered = render_attributes(attributes, ctx, props.get("class_name", ""), node.style, extra_css)
    return open_tag(props["tag"], rendered)


def render_element(node: DocumentNode, ctx: RenderContext):
    """Renderer for plain elements whose children are emitted by the serializer."""
    return start_tag(node, ctx), close_tag(node.props["tag"])
