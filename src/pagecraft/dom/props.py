# src/pagecraft/dom/props.py
"""
Per-kind props schemas for DocumentNode.

Every schema forbids unknown keys so a tree edited outside the engine cannot
smuggle arbitrary data into the serializer.
"""
import re
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .core import NodeKind
from .tags import CONTAINER_TAGS, SPACER_TAGS, TEXT_TAGS

TAG_PATTERN = r"^[a-z][a-z0-9]*$"
ATTRIBUTE_RE = re.compile(r"^[a-z_:][a-z0-9_.:-]*$")


def _collapse_classes(value: str) -> str:
    return " ".join(value.split())


def _check_attribute_names(value: Dict[str, str], reserved=("class", "style")) -> Dict[str, str]:
    for name in value:
        if not ATTRIBUTE_RE.match(name):
            raise ValueError(f"invalid attribute name: {name!r}")
        if name in reserved:
            raise ValueError(f"'{name}' must be expressed through class_name/style")
    return value


class ElementProps(BaseModel):
    """Props shared by every kind that renders an element of its own."""
    model_config = ConfigDict(extra="forbid")

    tag: str = Field(default="div", pattern=TAG_PATTERN)
    class_name: str = ""
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("class_name")
    @classmethod
    def collapse_classes(cls, value: str) -> str:
        return _collapse_classes(value)

    @field_validator("attributes")
    @classmethod
    def check_attributes(cls, value: Dict[str, str]) -> Dict[str, str]:
        return _check_attribute_names(value)


class ContainerProps(ElementProps):
    @field_validator("tag")
    @classmethod
    def check_tag(cls, value: str) -> str:
        if value not in CONTAINER_TAGS and value not in TEXT_TAGS:
            raise ValueError(f"<{value}> cannot render a container")
        return value


class GridProps(ContainerProps):
    columns: Optional[int] = Field(default=None, ge=1)


class TextProps(ElementProps):
    """A text-only element, or a bare text run when `tag` is None."""
    tag: Optional[str] = Field(default=None, pattern=TAG_PATTERN)
    text: str = ""

    @field_validator("tag")
    @classmethod
    def check_tag(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in TEXT_TAGS and value not in CONTAINER_TAGS:
            raise ValueError(f"<{value}> cannot render text")
        return value

    @model_validator(mode="after")
    def bare_text_has_no_markup(self):
        if self.tag is None and (self.class_name or self.attributes):
            raise ValueError("bare text runs cannot carry classes or attributes")
        return self


class ImageProps(ElementProps):
    tag: str = Field(default="img", pattern=r"^img$")
    src: str = ""
    alt: Optional[str] = None


class LinkProps(ElementProps):
    tag: str = Field(default="a", pattern=r"^a$")
    href: Optional[str] = None
    target: Optional[str] = None
    text: Optional[str] = None


class ButtonProps(ElementProps):
    tag: str = Field(default="button", pattern=r"^(button|a)$")
    text: str = ""
    href: Optional[str] = None


class DividerProps(ElementProps):
    tag: str = Field(default="hr", pattern=r"^hr$")


class SpacerProps(ElementProps):
    @field_validator("tag")
    @classmethod
    def check_tag(cls, value: str) -> str:
        if value not in SPACER_TAGS:
            raise ValueError(f"<{value}> cannot render a spacer")
        return value


class RootProps(BaseModel):
    """Document-level data: sanitized <head> markup and <html>/<body> attributes."""
    model_config = ConfigDict(extra="forbid")

    head: str = ""
    html_attributes: Dict[str, str] = Field(default_factory=dict)
    class_name: str = ""
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("class_name")
    @classmethod
    def collapse_classes(cls, value: str) -> str:
        return _collapse_classes(value)

    @field_validator("attributes")
    @classmethod
    def check_attributes(cls, value: Dict[str, str]) -> Dict[str, str]:
        return _check_attribute_names(value)

    @field_validator("html_attributes")
    @classmethod
    def check_html_attributes(cls, value: Dict[str, str]) -> Dict[str, str]:
        return _check_attribute_names(value, reserved=())


class OpaqueProps(BaseModel):
    model_config = ConfigDict(extra="forbid")


PROPS_SCHEMAS = {
    NodeKind.CONTAINER: ContainerProps,
    NodeKind.ROW: ContainerProps,
    NodeKind.COLUMN: ContainerProps,
    NodeKind.GRID: GridProps,
    NodeKind.TEXT: TextProps,
    NodeKind.IMAGE: ImageProps,
    NodeKind.LINK: LinkProps,
    NodeKind.BUTTON: ButtonProps,
    NodeKind.DIVIDER: DividerProps,
    NodeKind.SPACER: SpacerProps,
    NodeKind.ROOT: RootProps,
    NodeKind.OPAQUE_HTML: OpaqueProps,
}


def validate_props(kind: NodeKind, props: Dict[str, Any]) -> Dict[str, Any]:
    """Validates `props` against the schema of `kind` and returns the canonical dump."""
    schema = PROPS_SCHEMAS[kind]
    return schema.model_validate(props).model_dump(exclude_none=True)
