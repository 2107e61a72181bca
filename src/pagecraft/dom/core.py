from __future__ import annotations

import uuid
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def new_node_id() -> str:
    """Generates a fresh node identifier. Identifiers are never reused."""
    return uuid.uuid4().hex


class NodeKind(str, Enum):
    """The structural role of a DocumentNode."""
    CONTAINER = "Container"
    ROW = "Row"
    COLUMN = "Column"
    GRID = "Grid"
    TEXT = "Text"
    IMAGE = "Image"
    LINK = "Link"
    DIVIDER = "Divider"
    SPACER = "Spacer"
    BUTTON = "Button"
    OPAQUE_HTML = "OpaqueHTML"
    ROOT = "Root"


LEAF_KINDS = frozenset({
    NodeKind.TEXT, NodeKind.IMAGE, NodeKind.DIVIDER, NodeKind.SPACER,
    NodeKind.BUTTON, NodeKind.OPAQUE_HTML,
})


# --- Canonical style record ---

SIDES = ("top", "right", "bottom", "left")

# CSS longhand -> (field, side). Order defines the canonical declaration order.
CSS_FIELDS: Dict[str, Tuple[str, Optional[str]]] = {
    "padding-top": ("padding", "top"),
    "padding-right": ("padding", "right"),
    "padding-bottom": ("padding", "bottom"),
    "padding-left": ("padding", "left"),
    "margin-top": ("margin", "top"),
    "margin-right": ("margin", "right"),
    "margin-bottom": ("margin", "bottom"),
    "margin-left": ("margin", "left"),
    "width": ("width", None),
    "height": ("height", None),
    "min-width": ("min_width", None),
    "min-height": ("min_height", None),
    "max-width": ("max_width", None),
    "max-height": ("max_height", None),
    "color": ("color", None),
    "background-color": ("background_color", None),
    "background-image": ("background_image", None),
    "border-color": ("border_color", None),
    "border-width": ("border_width", None),
    "border-style": ("border_style", None),
    "border-radius": ("border_radius", None),
    "box-shadow": ("box_shadow", None),
    "font-size": ("font_size", None),
    "font-weight": ("font_weight", None),
    "font-family": ("font_family", None),
    "font-style": ("font_style", None),
    "line-height": ("line_height", None),
    "letter-spacing": ("letter_spacing", None),
    "text-align": ("text_align", None),
    "text-decoration": ("text_decoration", None),
    "text-transform": ("text_transform", None),
    "gap": ("gap", None),
    "opacity": ("opacity", None),
}

TEXT_ALIGN_VALUES = ("left", "center", "right", "justify", "start", "end")
TEXT_DECORATION_VALUES = ("none", "underline", "line-through", "overline")
TEXT_TRANSFORM_VALUES = ("none", "uppercase", "lowercase", "capitalize")
FONT_STYLE_VALUES = ("normal", "italic")
BORDER_STYLE_VALUES = ("none", "solid", "dashed", "dotted", "double", "hidden", "groove", "ridge", "inset", "outset")


class BoxSpacing(BaseModel):
    """Per-side spacing values (padding or margin)."""
    model_config = ConfigDict(extra="forbid")

    top: Optional[str] = None
    right: Optional[str] = None
    bottom: Optional[str] = None
    left: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, side) is None for side in SIDES)


class StyleValues(BaseModel):
    """
    A set of canonical style values. Every value is a normalized CSS string
    (lengths in px where convertible, colors as lowercase hex).
    """
    model_config = ConfigDict(extra="forbid")

    padding: Optional[BoxSpacing] = None
    margin: Optional[BoxSpacing] = None

    width: Optional[str] = None
    height: Optional[str] = None
    min_width: Optional[str] = None
    min_height: Optional[str] = None
    max_width: Optional[str] = None
    max_height: Optional[str] = None

    color: Optional[str] = None
    background_color: Optional[str] = None
    background_image: Optional[str] = None
    border_color: Optional[str] = None
    border_width: Optional[str] = None
    border_style: Optional[Literal[BORDER_STYLE_VALUES]] = None
    border_radius: Optional[str] = None
    box_shadow: Optional[str] = None

    font_size: Optional[str] = None
    font_weight: Optional[str] = Field(default=None, pattern=r"^[1-9]00$")
    font_family: Optional[str] = None
    font_style: Optional[Literal[FONT_STYLE_VALUES]] = None
    line_height: Optional[str] = None
    letter_spacing: Optional[str] = None
    text_align: Optional[Literal[TEXT_ALIGN_VALUES]] = None
    text_decoration: Optional[Literal[TEXT_DECORATION_VALUES]] = None
    text_transform: Optional[Literal[TEXT_TRANSFORM_VALUES]] = None

    gap: Optional[str] = None
    opacity: Optional[str] = None

    @model_validator(mode="after")
    def drop_empty_spacing(self):
        for box in ("padding", "margin"):
            value = getattr(self, box)
            if value is not None and value.is_empty:
                setattr(self, box, None)
        return self

    def to_css(self) -> Dict[str, str]:
        """Returns the set values as an ordered {css-property: value} mapping."""
        css: Dict[str, str] = {}
        for prop, (field, side) in CSS_FIELDS.items():
            value = getattr(self, field)
            if side is not None:
                value = getattr(value, side) if value is not None else None
            if value is not None:
                css[prop] = value
        return css

    @classmethod
    def css_payload(cls, css: Dict[str, str]) -> Dict[str, Any]:
        """Maps a {css-property: value} dict onto model field data."""
        data: Dict[str, Any] = {}
        for prop, value in css.items():
            field, side = CSS_FIELDS[prop]
            if side is None:
                data[field] = value
            else:
                data.setdefault(field, {})[side] = value
        return data

    @classmethod
    def from_css(cls, css: Dict[str, str]) -> "StyleValues":
        return cls.model_validate(cls.css_payload(css))

    @property
    def is_empty(self) -> bool:
        return not self.to_css()


class StyleRecord(StyleValues):
    """
    Canonical style record of a node: base values, inline declarations with
    no canonical field (`extra`) and per-breakpoint overrides.

    Overrides hold only explicitly set values. Inheritance between
    breakpoints is resolved at read time by `resolve` and never stored.
    """
    extra: Dict[str, str] = Field(default_factory=dict)
    breakpoints: Dict[str, StyleValues] = Field(default_factory=dict)

    @field_validator("breakpoints")
    @classmethod
    def drop_empty_overrides(cls, value: Dict[str, StyleValues]) -> Dict[str, StyleValues]:
        return {name: values for name, values in value.items() if not values.is_empty}

    @classmethod
    def from_css(
            cls,
            css: Dict[str, str],
            extra: Optional[Dict[str, str]] = None,
            breakpoints: Optional[Dict[str, Dict[str, str]]] = None,
    ) -> "StyleRecord":
        data = cls.css_payload(css)
        data["extra"] = dict(extra or {})
        data["breakpoints"] = {
            name: StyleValues.from_css(values) for name, values in (breakpoints or {}).items()
        }
        return cls.model_validate(data)

    def resolve(self, breakpoint: str, order: List[str]) -> StyleValues:
        """
        Returns the effective values at `breakpoint`: the base cascaded with every
        override of a breakpoint at or below it in `order` (ascending width).
        """
        css = self.to_css()
        for name in order:
            override = self.breakpoints.get(name)
            if override is not None:
                css.update(override.to_css())
            if name == breakpoint:
                break
        return StyleValues.from_css(css)

    @property
    def is_empty(self) -> bool:
        return not self.to_css() and not self.extra and not self.breakpoints


# --- The document node ---


class DocumentNode(BaseModel):
    """
    The unit of the structured builder document tree.

    `props` is validated against the schema registered for `kind`; OpaqueHTML
    nodes are sealed: no props, no style, no children, only `raw_content`.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_node_id)
    kind: NodeKind
    props: Dict[str, Any] = Field(default_factory=dict)
    style: StyleRecord = Field(default_factory=StyleRecord)
    children: List["DocumentNode"] = Field(default_factory=list)
    raw_content: Optional[str] = Field(default=None, alias="rawContent")

    @model_validator(mode="after")
    def check_kind_contract(self):
        # Imported here: props schemas depend on the tag tables only.
        from .props import validate_props

        if self.kind == NodeKind.OPAQUE_HTML:
            if self.raw_content is None:
                raise ValueError("OpaqueHTML nodes require raw_content")
            if self.props:
                raise ValueError("OpaqueHTML nodes cannot carry props")
            if not self.style.is_empty:
                raise ValueError("OpaqueHTML nodes cannot carry style")
        elif self.raw_content is not None:
            raise ValueError(f"raw_content is only allowed on OpaqueHTML nodes, not {self.kind.value}")

        if self.kind in LEAF_KINDS and self.children:
            raise ValueError(f"{self.kind.value} nodes cannot have children")

        self.props = validate_props(self.kind, self.props)
        return self

    def walk(self) -> Iterator["DocumentNode"]:
        """Pre-order traversal without recursion."""
        stack: List[DocumentNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


# --- Kind definitions ---


class KindDefinition:
    """
    Configuration object binding a node kind to its props parser and renderer.

    parser(tag, extraction) -> props dict, called by the tree builder.
    renderer(node, ctx) -> (opening markup, closing markup); children are
    emitted in between by the serializer.
    """

    def __init__(
            self,
            kind: NodeKind,
            parser: Optional[Callable[..., Dict[str, Any]]],
            renderer: Callable[..., Tuple[str, str]],
            container: bool = False,
    ):
        self.kind = kind
        self.parser = parser
        self.renderer = renderer
        self.container = container


DocumentNode.model_rebuild()
