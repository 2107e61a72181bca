# src/pagecraft/dom/styles.py
import logging
from typing import Dict, List, Optional, Set, Tuple

import tinycss2
from bs4 import Tag
from pydantic import BaseModel, Field

from pagecraft.model import EngineSettings
from .core import BORDER_STYLE_VALUES, CSS_FIELDS, SIDES, StyleRecord
from .tailwind import resolve_utility, split_variants, variant_width
from .values import (
    BORDER_WIDTH_KEYWORDS,
    normalize_color,
    normalize_image,
    normalize_length,
    normalize_value,
    split_values,
)

logger = logging.getLogger(__name__)

# Shorthand -> the canonical longhands it sets.
SHORTHANDS = {
    "padding": tuple(f"padding-{side}" for side in SIDES),
    "margin": tuple(f"margin-{side}" for side in SIDES),
    "border": ("border-width", "border-style", "border-color"),
    "background": ("background-color", "background-image"),
    "font": ("font-size", "font-weight", "font-family", "font-style", "line-height"),
}


# --- Inline CSS parsing ---

def split_declarations(text: str) -> List[Tuple[str, str]]:
    """
    Splits an inline style attribute into (property, value) pairs.

    Comments are dropped, escapes in property names are resolved and
    `!important` stays part of the value. Invalid fragments and empty values
    are skipped.
    """
    declarations = []
    for item in tinycss2.parse_declaration_list(text or "", skip_comments=True, skip_whitespace=True):
        if item.type != "declaration":
            continue
        value = " ".join(tinycss2.serialize(item.value).split())
        if not value:
            continue
        if item.important:
            value = f"{value} !important"
        declarations.append((item.lower_name, value))
    return declarations


def css_value(value: str) -> str:
    """A value in the form inline parsing produces: comments dropped, strings double quoted."""
    tokens = tinycss2.parse_component_value_list(value, skip_comments=True)
    return " ".join(tinycss2.serialize(tokens).split())


def canonical_css(text: str) -> str:
    """Rewrites a style attribute as `prop: value; ...` with the last declaration of a property winning."""
    declarations: Dict[str, str] = {}
    for prop, value in split_declarations(text):
        declarations.pop(prop, None)
        declarations[prop] = value
    return format_css(declarations)


def format_css(declarations: Dict[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in declarations.items())


class StyleExtraction(BaseModel):
    """Canonical style of an element plus the class tokens that were not consumed."""
    style: StyleRecord = Field(default_factory=StyleRecord)
    class_name: str = ""

    @property
    def tokens(self) -> List[str]:
        return self.class_name.split()


class StyleExtractor:
    """
    Converts an element's inline style and utility classes into a canonical
    StyleRecord.

    Inline declarations always win over classes. A class whose effect is
    shadowed by inline CSS stays in the class list verbatim so nothing is lost.
    """

    def __init__(self, settings: EngineSettings):
        self.settings = settings
        self.rem_px = settings.rem_px

    def extract(self, tag: Tag) -> StyleExtraction:
        css, extra, covered = self.parse_inline(tag.get("style") or "")
        shadowed = set(css) | covered

        base_layers: List[Tuple[int, int, Dict[str, str]]] = []
        override_layers: Dict[str, List[Tuple[int, int, Dict[str, str]]]] = {}
        kept: List[str] = []

        for index, token in enumerate((tag.get("class") or "").split()):
            variants, utility_name = split_variants(token)
            breakpoint = None
            if variants:
                width = variant_width(variants[0]) if len(variants) == 1 else None
                breakpoint = self.settings.breakpoint_for_width(width) if width is not None else None
                if breakpoint is None:
                    logger.debug(f"Class '{token}' kept verbatim: no matching breakpoint")
                    kept.append(token)
                    continue

            utility = resolve_utility(utility_name, self.rem_px)
            if utility is None:
                kept.append(token)
                continue

            # Inline declarations win at every width, overrides included.
            if shadowed.intersection(utility.css):
                kept.append(token)
            visible = {p: css_value(v) for p, v in utility.css.items() if p not in shadowed}
            if not visible:
                continue
            layers = base_layers if breakpoint is None else override_layers.setdefault(breakpoint, [])
            layers.append((utility.specificity, index, visible))

        base = self._cascade(base_layers)
        base.update(css)
        breakpoints = {name: self._cascade(layers) for name, layers in override_layers.items()}

        style = StyleRecord.from_css(base, extra, breakpoints)
        return StyleExtraction(style=style, class_name=" ".join(kept))

    @staticmethod
    def _cascade(layers: List[Tuple[int, int, Dict[str, str]]]) -> Dict[str, str]:
        result: Dict[str, str] = {}
        for _, _, css in sorted(layers, key=lambda layer: (layer[0], layer[1])):
            result.update(css)
        return result

    # --- Inline declarations ---

    def parse_inline(self, text: str) -> Tuple[Dict[str, str], Dict[str, str], Set[str]]:
        """
        Splits inline CSS into canonical longhands, verbatim extras and the set of
        canonical properties governed by an extra declaration.
        """
        css: Dict[str, str] = {}
        extra: Dict[str, str] = {}
        # longhands whose value is owned by a shorthand kept in `extra`
        owned: Set[str] = set()

        for prop, value in split_declarations(text):
            if prop in SHORTHANDS:
                longhands = SHORTHANDS[prop]
                for longhand in longhands:
                    css.pop(longhand, None)
                    extra.pop(longhand, None)
                extra.pop(prop, None)
                expanded = self.expand_shorthand(prop, value)
                if expanded is None:
                    extra[prop] = value
                    owned.update(longhands)
                else:
                    owned.difference_update(longhands)
                    css.update(expanded)
            elif prop in CSS_FIELDS:
                css.pop(prop, None)
                extra.pop(prop, None)
                normalized = None if prop in owned else normalize_value(prop, value, self.rem_px)
                if normalized is None:
                    extra[prop] = value
                else:
                    css[prop] = normalized
            else:
                extra.pop(prop, None)
                extra[prop] = value

        covered = owned | {prop for prop in extra if prop in CSS_FIELDS}
        return css, extra, covered

    def expand_shorthand(self, prop: str, value: str) -> Optional[Dict[str, str]]:
        if "!important" in value.lower():
            return None
        parts = split_values(value)
        if prop in ("padding", "margin"):
            return self._expand_box(prop, parts)
        if prop == "border":
            return self._expand_border(parts)
        if prop == "background" and len(parts) == 1:
            color = normalize_color(parts[0])
            if color is not None:
                return {"background-color": color}
            image = normalize_image(parts[0])
            if image is not None and image != "none":
                return {"background-image": image}
        return None

    def _expand_box(self, prop: str, parts: List[str]) -> Optional[Dict[str, str]]:
        if not 1 <= len(parts) <= 4:
            return None
        keywords = frozenset({"auto"}) if prop == "margin" else frozenset()
        values = [normalize_length(part, self.rem_px, keywords=keywords) for part in parts]
        if any(v is None for v in values):
            return None
        top, right, bottom, left = {
            1: lambda v: (v[0], v[0], v[0], v[0]),
            2: lambda v: (v[0], v[1], v[0], v[1]),
            3: lambda v: (v[0], v[1], v[2], v[1]),
            4: lambda v: (v[0], v[1], v[2], v[3]),
        }[len(values)](values)
        return {
            f"{prop}-top": top,
            f"{prop}-right": right,
            f"{prop}-bottom": bottom,
            f"{prop}-left": left,
        }

    def _expand_border(self, parts: List[str]) -> Optional[Dict[str, str]]:
        if not 1 <= len(parts) <= 3:
            return None
        result: Dict[str, str] = {}
        for part in parts:
            lowered = part.lower()
            if lowered in BORDER_STYLE_VALUES and "border-style" not in result:
                result["border-style"] = lowered
                continue
            if lowered in BORDER_WIDTH_KEYWORDS and "border-width" not in result:
                result["border-width"] = BORDER_WIDTH_KEYWORDS[lowered]
                continue
            width = normalize_length(part, self.rem_px, keywords=frozenset())
            if width is not None and "border-width" not in result:
                result["border-width"] = width
                continue
            color = normalize_color(part)
            if color is not None and "border-color" not in result:
                result["border-color"] = color
                continue
            return None
        return result
