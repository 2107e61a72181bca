# src/pagecraft/dom/elements/layout.py
import re

from bs4 import Tag

from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext, close_tag
from ..styles import StyleExtraction
from .base import element_props, render_element, start_tag

COLUMNS_CLASS_RE = re.compile(r"^grid-cols-(\d+)$")
COLUMNS_CSS_RE = re.compile(r"^repeat\(\s*(\d+)\s*,\s*minmax\(\s*0(?:px)?\s*,\s*1fr\s*\)\s*\)$")


def parse_container(tag: Tag, extraction: StyleExtraction) -> dict:
    """Parses a layout element (Container, Row or Column)."""
    return element_props(tag, extraction)


def parse_grid(tag: Tag, extraction: StyleExtraction) -> dict:
    """
    Parses a grid container. The column count comes from inline
    `grid-template-columns: repeat(N, minmax(0, 1fr))` or, when no inline
    template is set, from a `grid-cols-N` class, which is then consumed.
    """
    columns = None
    template = extraction.style.extra.get("grid-template-columns")
    if template is not None:
        match = COLUMNS_CSS_RE.match(template)
        if match and int(match.group(1)) >= 1:
            columns = int(match.group(1))
            del extraction.style.extra["grid-template-columns"]
    else:
        tokens = extraction.tokens
        for token in tokens:
            match = COLUMNS_CLASS_RE.match(token)
            if match and int(match.group(1)) >= 1:
                columns = int(match.group(1))
                tokens.remove(token)
                extraction.class_name = " ".join(tokens)
                break

    props = element_props(tag, extraction)
    if columns is not None:
        props["columns"] = columns
    return props


def render_grid(node: DocumentNode, ctx: RenderContext):
    columns = node.props.get("columns")
    extra_css = {"grid-template-columns": f"repeat({columns}, minmax(0, 1fr))"} if columns else None
    return start_tag(node, ctx, extra_css=extra_css), close_tag(node.props["tag"])


DEFINITIONS = [
    KindDefinition(NodeKind.CONTAINER, parse_container, render_element, container=True),
    KindDefinition(NodeKind.ROW, parse_container, render_element, container=True),
    KindDefinition(NodeKind.COLUMN, parse_container, render_element, container=True),
    KindDefinition(NodeKind.GRID, parse_grid, render_grid, container=True),
]
