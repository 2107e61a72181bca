# src/pagecraft/dom/elements/spacer.py
from bs4 import Tag

from ..core import KindDefinition, NodeKind
from ..styles import StyleExtraction
from .base import element_props, render_element


def parse_spacer(tag: Tag, extraction: StyleExtraction) -> dict:
    """An empty <div>/<span> whose only purpose is its height."""
    return element_props(tag, extraction)


DEFINITION = KindDefinition(NodeKind.SPACER, parse_spacer, render_element)
