# src/pagecraft/dom/elements/divider.py
from bs4 import Tag

from ..core import DocumentNode, KindDefinition, NodeKind
from ..markup import RenderContext
from ..styles import StyleExtraction
from .base import element_props, start_tag


def parse_divider(tag: Tag, extraction: StyleExtraction) -> dict:
    return element_props(tag, extraction)


def render_divider(node: DocumentNode, ctx: RenderContext):
    return start_tag(node, ctx), ""


DEFINITION = KindDefinition(NodeKind.DIVIDER, parse_divider, render_divider)
