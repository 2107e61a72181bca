# src/pagecraft/dom/classifier.py
import re
from typing import List, NamedTuple

from bs4 import NavigableString, Tag

from .core import NodeKind
from .props import ATTRIBUTE_RE, TAG_PATTERN
from .styles import split_declarations
from .tags import (
    CONTAINER_TAGS,
    INTERACTIVE_TAGS,
    OPAQUE_TAGS,
    SEMANTIC_TAGS,
    SPACER_TAGS,
    TEXT_TAGS,
)

TAG_NAME_RE = re.compile(TAG_PATTERN)

FLEX_CLASSES = frozenset({"flex", "inline-flex"})
GRID_CLASSES = frozenset({"grid", "inline-grid"})
BUTTON_CLASS_RE = re.compile(r"^(?:btn|button)(?:$|[-_])")
HEIGHT_CLASS_RE = re.compile(r"^h-\S+$")


class Classification(NamedTuple):
    kind: NodeKind
    confidence: float
    reason: str


class NodeClassifier:
    """
    Decides the kind of a single normalized element.

    The decision depends only on the element's name, its attributes and its
    direct children, never on ancestors or siblings.
    """

    def classify(self, tag: Tag) -> Classification:
        name = tag.name
        if name in OPAQUE_TAGS:
            return Classification(NodeKind.OPAQUE_HTML, 1.0, f"<{name}> is always preserved verbatim")
        if not TAG_NAME_RE.match(name):
            return Classification(NodeKind.OPAQUE_HTML, 1.0, f"<{name}> is a custom or namespaced element")
        if any(not ATTRIBUTE_RE.match(attr) for attr in tag.attrs):
            return Classification(NodeKind.OPAQUE_HTML, 1.0, "element carries framework attributes")

        elements = [child for child in tag.children if isinstance(child, Tag)]
        has_text = any(
            type(child) is NavigableString and child.strip() for child in tag.children
        )

        if name in SEMANTIC_TAGS:
            return self._classify_semantic(tag, elements)

        if name in CONTAINER_TAGS or name in TEXT_TAGS:
            if elements:
                if len(elements) >= 2:
                    layout = self._layout_kind(tag)
                    if layout is not None:
                        return Classification(layout, 0.8, "flex/grid container")
                return Classification(NodeKind.CONTAINER, 1.0, "element with element children")
            if has_text:
                return Classification(NodeKind.TEXT, 1.0, "text-only element")
            if name in SPACER_TAGS and self._declares_height(tag):
                return Classification(NodeKind.SPACER, 0.8, "empty element with a height")
            if name in CONTAINER_TAGS:
                return Classification(NodeKind.CONTAINER, 1.0, "empty container")
            return Classification(NodeKind.TEXT, 1.0, "empty text element")

        return Classification(NodeKind.OPAQUE_HTML, 0.0, f"<{name}> has no structural mapping")

    def _classify_semantic(self, tag: Tag, elements: List[Tag]) -> Classification:
        kind = NodeKind(SEMANTIC_TAGS[tag.name])
        if kind == NodeKind.BUTTON:
            if elements:
                return Classification(NodeKind.OPAQUE_HTML, 1.0, "button with nested markup")
            return Classification(kind, 1.0, "text-only button")
        if kind == NodeKind.LINK:
            if tag.find(list(INTERACTIVE_TAGS)) is not None:
                return Classification(NodeKind.OPAQUE_HTML, 1.0, "link nests interactive content")
            if not elements and self._has_button_class(tag):
                return Classification(NodeKind.BUTTON, 0.9, "text-only link styled as a button")
        return Classification(kind, 1.0, f"<{tag.name}> maps to {kind.value}")

    @staticmethod
    def _base_classes(tag: Tag) -> List[str]:
        return [token for token in (tag.get("class") or "").split() if ":" not in token]

    def _has_button_class(self, tag: Tag) -> bool:
        return any(BUTTON_CLASS_RE.match(token) for token in self._base_classes(tag))

    def _layout_kind(self, tag: Tag):
        classes = set(self._base_classes(tag))
        inline = dict(split_declarations(tag.get("style") or ""))
        display = inline.get("display", "").lower()
        direction = inline.get("flex-direction", "").lower()

        if classes & GRID_CLASSES or display in GRID_CLASSES:
            return NodeKind.GRID
        if classes & FLEX_CLASSES or "flex-col" in classes or display in FLEX_CLASSES or direction:
            if "flex-col" in classes or "flex-col-reverse" in classes or direction.startswith("column"):
                return NodeKind.COLUMN
            return NodeKind.ROW
        return None

    def _declares_height(self, tag: Tag) -> bool:
        if any(HEIGHT_CLASS_RE.match(token) for token in self._base_classes(tag)):
            return True
        return any(prop in ("height", "min-height") for prop, _ in split_declarations(tag.get("style") or ""))
