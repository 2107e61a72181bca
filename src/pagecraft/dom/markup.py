# src/pagecraft/dom/markup.py
"""Helpers shared by the kind renderers: escaping, attributes and breakpoint classes."""
import html
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict

from pagecraft.model import EngineSettings
from .core import StyleRecord
from .normalizer import is_denied_attribute
from .styles import format_css
from .tailwind import override_class, screen_prefix, utility_class


class RenderContext(BaseModel):
    """Per-call state handed to every renderer."""
    model_config = ConfigDict(frozen=True)

    settings: EngineSettings
    full_document: bool = False


def escape_text(text: str) -> str:
    return html.escape(text or "", quote=False)


def escape_attribute(value: str) -> str:
    return html.escape(value, quote=True)


def responsive_props(style: StyleRecord) -> Set[str]:
    """Canonical properties that at least one breakpoint overrides."""
    props: Set[str] = set()
    for override in style.breakpoints.values():
        props.update(override.to_css())
    return props


def breakpoint_classes(style: StyleRecord, settings: EngineSettings) -> List[str]:
    """
    Utility classes expressing the per-breakpoint overrides of `style`.

    Base values of overridden properties come first as plain utilities: an
    inline declaration would shadow the override at every width.
    """
    responsive = responsive_props(style)
    classes = [utility_class(prop, value) for prop, value in style.to_css().items() if prop in responsive]
    for name in settings.breakpoint_order:
        override = style.breakpoints.get(name)
        if override is None:
            continue
        width = settings.breakpoints.get(name)
        if width is None:
            continue
        prefix = screen_prefix(width)
        for prop, value in override.to_css().items():
            classes.append(override_class(prefix, prop, value))
    return classes


def style_declarations(style: StyleRecord, extra_css: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    responsive = responsive_props(style)
    declarations = {prop: value for prop, value in style.to_css().items() if prop not in responsive}
    for prop, value in (extra_css or {}).items():
        declarations.setdefault(prop, value)
    for prop, value in style.extra.items():
        declarations.setdefault(prop, value)
    return declarations


def render_attributes(
        attributes: Dict[str, str],
        ctx: RenderContext,
        class_name: str = "",
        style: Optional[StyleRecord] = None,
        extra_css: Optional[Dict[str, str]] = None,
) -> str:
    """
    Renders the attribute list of an element, sorted by name and with
    denylisted attributes filtered out. Returns a string with a leading space
    (or an empty string).
    """
    merged: Dict[str, str] = {
        name: value for name, value in attributes.items() if value is not None
    }

    tokens = class_name.split()
    if style is not None:
        tokens.extend(breakpoint_classes(style, ctx.settings))
    if tokens:
        merged["class"] = " ".join(tokens)

    declarations = style_declarations(style, extra_css) if style is not None else dict(extra_css or {})
    if declarations:
        merged["style"] = format_css(declarations)

    parts = []
    for name in sorted(merged):
        value = merged[name]
        if is_denied_attribute(ctx.settings, name, value):
            continue
        parts.append(f' {name}="{escape_attribute(value)}"')
    return "".join(parts)


def open_tag(tag: str, attributes: str) -> str:
    return f"<{tag}{attributes}>"


def close_tag(tag: str) -> str:
    return f"</{tag}>"
