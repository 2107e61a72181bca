# src/pagecraft/dom/values.py
"""
Normalization of individual CSS values into their canonical string form.

Every normalizer returns None when the value cannot be canonicalized; callers
keep such declarations verbatim instead of guessing.
"""
import re
from types import MappingProxyType
from typing import List, Optional

from .core import (
    BORDER_STYLE_VALUES,
    FONT_STYLE_VALUES,
    TEXT_ALIGN_VALUES,
    TEXT_DECORATION_VALUES,
    TEXT_TRANSFORM_VALUES,
)

NUMBER_RE = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)$")
LENGTH_RE = re.compile(r"^(-?(?:\d+\.?\d*|\.\d+))([a-z%]*)$")
FUNCTION_RE = re.compile(r"^(?:calc|min|max|clamp|var)\(.*\)$", re.S)
HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")
RGB_RE = re.compile(r"^rgba?\((.*)\)$", re.S)

PX_FACTORS = MappingProxyType({
    "px": 1.0,
    "pt": 96 / 72,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96 / 2.54,
    "mm": 96 / 25.4,
    "q": 96 / 101.6,
})

RELATIVE_UNITS = frozenset({
    "em", "ex", "ch", "lh", "%", "vw", "vh", "vmin", "vmax",
    "svw", "svh", "lvw", "lvh", "dvw", "dvh",
})

LENGTH_KEYWORDS = frozenset({"auto", "none", "fit-content", "min-content", "max-content"})
BORDER_WIDTH_KEYWORDS = MappingProxyType({"thin": "1px", "medium": "3px", "thick": "5px"})
FONT_WEIGHT_KEYWORDS = MappingProxyType({"normal": "400", "bold": "700"})

NAMED_COLORS = MappingProxyType({
    "black": "#000000", "white": "#ffffff", "red": "#ff0000", "green": "#008000",
    "blue": "#0000ff", "yellow": "#ffff00", "gray": "#808080", "grey": "#808080",
    "silver": "#c0c0c0", "maroon": "#800000", "purple": "#800080",
    "fuchsia": "#ff00ff", "lime": "#00ff00", "olive": "#808000", "navy": "#000080",
    "teal": "#008080", "aqua": "#00ffff", "orange": "#ffa500",
})
COLOR_KEYWORDS = frozenset({"transparent", "currentcolor"})

# Canonical CSS property -> value family.
VALUE_KINDS = MappingProxyType({
    **{f"padding-{side}": "spacing" for side in ("top", "right", "bottom", "left")},
    **{f"margin-{side}": "margin" for side in ("top", "right", "bottom", "left")},
    "width": "length", "height": "length",
    "min-width": "length", "min-height": "length",
    "max-width": "length", "max-height": "length",
    "color": "color", "background-color": "color", "border-color": "color",
    "background-image": "image",
    "border-width": "border_width",
    "border-style": "border_style",
    "border-radius": "length",
    "box-shadow": "text",
    "font-size": "length",
    "font-weight": "font_weight",
    "font-family": "text",
    "font-style": "font_style",
    "line-height": "line_height",
    "letter-spacing": "length",
    "text-align": "text_align",
    "text-decoration": "text_decoration",
    "text-transform": "text_transform",
    "gap": "length",
    "opacity": "number",
})

KEYWORD_VALUES = MappingProxyType({
    "border_style": BORDER_STYLE_VALUES,
    "font_style": FONT_STYLE_VALUES,
    "text_align": TEXT_ALIGN_VALUES,
    "text_decoration": TEXT_DECORATION_VALUES,
    "text_transform": TEXT_TRANSFORM_VALUES,
})


def collapse(value: str) -> str:
    return " ".join(value.split())


def format_number(value: float) -> str:
    """Formats a float with at most four decimals and no trailing zeros."""
    text = f"{round(value, 4):.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def split_values(value: str) -> List[str]:
    """Splits a space separated value list, keeping parenthesized groups and quotes intact."""
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    quote = None
    for char in value.strip():
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char.isspace() and depth == 0:
            if current:
                parts.append("".join(current))
                current = []
            continue
        current.append(char)
    if current:
        parts.append("".join(current))
    return parts


def is_dimension(value: str) -> bool:
    """True for a number with a unit or a CSS math function."""
    text = value.strip().lower()
    if FUNCTION_RE.match(text):
        return True
    match = LENGTH_RE.match(text)
    return bool(match and match.group(2))


def normalize_length(value: str, rem_px: float = 16.0, keywords=LENGTH_KEYWORDS) -> Optional[str]:
    """
    Canonical form of a CSS length: absolute units become px, relative units
    and math functions are kept, a bare zero becomes 0px.
    """
    raw = value.strip()
    text = raw.lower()
    if text in keywords:
        return text
    if FUNCTION_RE.match(text):
        return collapse(raw)
    match = LENGTH_RE.match(text)
    if not match:
        return None
    number, unit = float(match.group(1)), match.group(2)
    if not unit:
        return "0px" if number == 0 else None
    if unit == "rem":
        return f"{format_number(number * rem_px)}px"
    if unit in PX_FACTORS:
        return f"{format_number(number * PX_FACTORS[unit])}px"
    if unit in RELATIVE_UNITS:
        return f"{format_number(number)}{unit}"
    return None


def _channel(text: str) -> Optional[int]:
    if text.endswith("%"):
        if not NUMBER_RE.match(text[:-1]):
            return None
        number = float(text[:-1]) * 255 / 100
    elif NUMBER_RE.match(text):
        number = float(text)
    else:
        return None
    if number < 0 or number > 255:
        return None
    return int(round(number))


def _alpha(text: str) -> Optional[float]:
    if text.endswith("%"):
        if not NUMBER_RE.match(text[:-1]):
            return None
        number = float(text[:-1]) / 100
    elif NUMBER_RE.match(text):
        number = float(text)
    else:
        return None
    return number if 0 <= number <= 1 else None


def normalize_color(value: str) -> Optional[str]:
    """Canonical form of a CSS color: lowercase #rrggbb where the color is opaque."""
    text = collapse(value.strip().lower())
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    if text in COLOR_KEYWORDS:
        return text

    match = HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(d * 2 for d in digits)
        if len(digits) == 8 and digits.endswith("ff"):
            digits = digits[:6]
        return f"#{digits}"

    match = RGB_RE.match(text)
    if match:
        parts = [p for p in re.split(r"[\s,/]+", match.group(1).strip()) if p]
        if len(parts) not in (3, 4):
            return None
        channels = [_channel(p) for p in parts[:3]]
        if any(c is None for c in channels):
            return None
        alpha = _alpha(parts[3]) if len(parts) == 4 else 1.0
        if alpha is None:
            return None
        if alpha == 1:
            return "#{:02x}{:02x}{:02x}".format(*channels)
        return "rgba({}, {}, {}, {})".format(*channels, format_number(alpha))
    return None


def normalize_font_weight(value: str) -> Optional[str]:
    text = value.strip().lower()
    if text in FONT_WEIGHT_KEYWORDS:
        return FONT_WEIGHT_KEYWORDS[text]
    if re.match(r"^[1-9]00$", text):
        return text
    return None


def normalize_line_height(value: str, rem_px: float = 16.0) -> Optional[str]:
    text = value.strip().lower()
    if text == "normal":
        return text
    if NUMBER_RE.match(text):
        return format_number(float(text))
    return normalize_length(text, rem_px, keywords=frozenset())


def normalize_number(value: str) -> Optional[str]:
    text = value.strip()
    if text.endswith("%") and NUMBER_RE.match(text[:-1]):
        return format_number(float(text[:-1]) / 100)
    if NUMBER_RE.match(text):
        return format_number(float(text))
    return None


def normalize_image(value: str) -> Optional[str]:
    text = collapse(value.strip())
    lowered = text.lower()
    if lowered == "none":
        return lowered
    if lowered.startswith("url(") or re.match(r"^(?:repeating-)?(?:linear|radial|conic)-gradient\(", lowered):
        return text if text.endswith(")") else None
    return None


def normalize_value(prop: str, value: str, rem_px: float = 16.0) -> Optional[str]:
    """
    Canonical form of `value` for the canonical property `prop`, or None when
    the declaration must be kept verbatim.
    """
    if "!important" in value.lower() or not value.strip():
        return None
    kind = VALUE_KINDS[prop]
    if kind == "spacing":
        return normalize_length(value, rem_px, keywords=frozenset())
    if kind == "margin":
        return normalize_length(value, rem_px, keywords=frozenset({"auto"}))
    if kind == "length":
        return normalize_length(value, rem_px)
    if kind == "color":
        return normalize_color(value)
    if kind == "image":
        return normalize_image(value)
    if kind == "border_width":
        text = value.strip().lower()
        if text in BORDER_WIDTH_KEYWORDS:
            return BORDER_WIDTH_KEYWORDS[text]
        return normalize_length(text, rem_px, keywords=frozenset())
    if kind == "font_weight":
        return normalize_font_weight(value)
    if kind == "line_height":
        return normalize_line_height(value, rem_px)
    if kind == "number":
        return normalize_number(value)
    if kind == "text":
        return collapse(value)
    text = value.strip().lower()
    return text if text in KEYWORD_VALUES[kind] else None
