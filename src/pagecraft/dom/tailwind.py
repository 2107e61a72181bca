# src/pagecraft/dom/tailwind.py
"""
Tailwind CSS vocabulary.

`resolve_utility` maps a single utility (variants already removed) onto
canonical CSS longhands. `override_class` does the inverse for breakpoint
overrides, which have no inline-style equivalent and are therefore rendered
back as responsive utility classes.
"""
import re
from types import MappingProxyType
from typing import Dict, List, NamedTuple, Optional, Tuple

from .core import CSS_FIELDS
from .values import (
    collapse,
    format_number,
    is_dimension,
    normalize_color,
    normalize_image,
    normalize_length,
    normalize_line_height,
    normalize_number,
    normalize_value,
)

SCREENS = MappingProxyType({"sm": 640, "md": 768, "lg": 1024, "xl": 1280, "2xl": 1536})
MIN_VARIANT_RE = re.compile(r"^min-\[(\d+)px\]$")

SPACING_KEYS = frozenset(
    "0 0.5 1 1.5 2 2.5 3 3.5 4 5 6 7 8 9 10 11 12 14 16 20 24 28 32 36 40 44 48 "
    "52 56 60 64 72 80 96".split()
)

_SIDES_ALL = ("top", "right", "bottom", "left")
SPACING_SIDES = MappingProxyType({
    "": (_SIDES_ALL, 0),
    "x": (("left", "right"), 1),
    "y": (("top", "bottom"), 1),
    "t": (("top",), 2),
    "r": (("right",), 2),
    "b": (("bottom",), 2),
    "l": (("left",), 2),
})
SPACING_RE = re.compile(r"^(-?)([pm])([xytrbl]?)-(.+)$")

SIZING_PROPS = MappingProxyType({
    "w": "width", "h": "height",
    "min-w": "min-width", "min-h": "min-height",
    "max-w": "max-width", "max-h": "max-height",
})
SIZING_RE = re.compile(r"^(min-w|min-h|max-w|max-h|w|h)-(.+)$")
FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")

SIZING_KEYWORDS = MappingProxyType({
    "full": "100%", "auto": "auto", "fit": "fit-content",
    "min": "min-content", "max": "max-content", "none": "none",
})

# Named max-width scale (rem unless suffixed).
MAX_WIDTH_SCALE = MappingProxyType({
    "xs": "20rem", "sm": "24rem", "md": "28rem", "lg": "32rem", "xl": "36rem",
    "2xl": "42rem", "3xl": "48rem", "4xl": "56rem", "5xl": "64rem", "6xl": "72rem",
    "7xl": "80rem", "prose": "65ch",
    "screen-sm": "640px", "screen-md": "768px", "screen-lg": "1024px",
    "screen-xl": "1280px", "screen-2xl": "1536px",
})

# text-{size} -> (font-size, line-height)
FONT_SIZE_MAP = MappingProxyType({
    "xs": ("0.75rem", "1rem"),
    "sm": ("0.875rem", "1.25rem"),
    "base": ("1rem", "1.5rem"),
    "lg": ("1.125rem", "1.75rem"),
    "xl": ("1.25rem", "1.75rem"),
    "2xl": ("1.5rem", "2rem"),
    "3xl": ("1.875rem", "2.25rem"),
    "4xl": ("2.25rem", "2.5rem"),
    "5xl": ("3rem", "1"),
    "6xl": ("3.75rem", "1"),
    "7xl": ("4.5rem", "1"),
    "8xl": ("6rem", "1"),
    "9xl": ("8rem", "1"),
})

FONT_WEIGHT_MAP = MappingProxyType({
    "thin": "100", "extralight": "200", "light": "300", "normal": "400",
    "medium": "500", "semibold": "600", "bold": "700", "extrabold": "800",
    "black": "900",
})

FONT_FAMILY_MAP = MappingProxyType({
    "sans": 'ui-sans-serif, system-ui, sans-serif, "Apple Color Emoji", '
            '"Segoe UI Emoji", "Segoe UI Symbol", "Noto Color Emoji"',
    "serif": 'ui-serif, Georgia, Cambria, "Times New Roman", Times, serif',
    "mono": 'ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, '
            '"Liberation Mono", "Courier New", monospace',
})

LEADING_MAP = MappingProxyType({
    "none": "1", "tight": "1.25", "snug": "1.375", "normal": "1.5",
    "relaxed": "1.625", "loose": "2",
    "3": "0.75rem", "4": "1rem", "5": "1.25rem", "6": "1.5rem",
    "7": "1.75rem", "8": "2rem", "9": "2.25rem", "10": "2.5rem",
})

TRACKING_MAP = MappingProxyType({
    "tighter": "-0.05em", "tight": "-0.025em", "normal": "0em",
    "wide": "0.025em", "wider": "0.05em", "widest": "0.1em",
})

ROUNDED_MAP = MappingProxyType({
    "": "0.25rem", "none": "0px", "sm": "0.125rem", "md": "0.375rem",
    "lg": "0.5rem", "xl": "0.75rem", "2xl": "1rem", "3xl": "1.5rem",
    "full": "9999px",
})

SHADOW_MAP = MappingProxyType({
    "sm": "0 1px 2px 0 rgb(0 0 0 / 0.05)",
    "": "0 1px 3px 0 rgb(0 0 0 / 0.1), 0 1px 2px -1px rgb(0 0 0 / 0.1)",
    "md": "0 4px 6px -1px rgb(0 0 0 / 0.1), 0 2px 4px -2px rgb(0 0 0 / 0.1)",
    "lg": "0 10px 15px -3px rgb(0 0 0 / 0.1), 0 4px 6px -4px rgb(0 0 0 / 0.1)",
    "xl": "0 20px 25px -5px rgb(0 0 0 / 0.1), 0 8px 10px -6px rgb(0 0 0 / 0.1)",
    "2xl": "0 25px 50px -12px rgb(0 0 0 / 0.25)",
    "inner": "inset 0 2px 4px 0 rgb(0 0 0 / 0.05)",
    "none": "0 0 #0000",
})

BORDER_WIDTH_MAP = MappingProxyType({"": "1px", "0": "0px", "2": "2px", "4": "4px", "8": "8px"})
BORDER_STYLES = frozenset({"solid", "dashed", "dotted", "double", "hidden", "none"})

COLOR_NAMES = MappingProxyType({
    "white": "#ffffff", "black": "#000000",
    "transparent": "transparent", "current": "currentcolor",
})

TEXT_ALIGN_CLASSES = frozenset({"left", "center", "right", "justify", "start", "end"})
KEYWORD_CLASSES = MappingProxyType({
    "italic": ("font-style", "italic"),
    "not-italic": ("font-style", "normal"),
    "underline": ("text-decoration", "underline"),
    "line-through": ("text-decoration", "line-through"),
    "overline": ("text-decoration", "overline"),
    "no-underline": ("text-decoration", "none"),
    "uppercase": ("text-transform", "uppercase"),
    "lowercase": ("text-transform", "lowercase"),
    "capitalize": ("text-transform", "capitalize"),
    "normal-case": ("text-transform", "none"),
})

OPACITY_STEPS = frozenset({0, 5, 10, 15, 20, 25, 30, 35, 40, 45, 50, 55, 60, 65, 70, 75, 80, 85, 90, 95, 100})

# Canonical property -> utility prefix taking an arbitrary length value.
ARBITRARY_PREFIXES = MappingProxyType({
    **{f"padding-{side}": f"p{side[0]}" for side in _SIDES_ALL},
    **{f"margin-{side}": f"m{side[0]}" for side in _SIDES_ALL},
    "width": "w", "height": "h",
    "min-width": "min-w", "min-height": "min-h",
    "max-width": "max-w", "max-height": "max-h",
    "gap": "gap",
    "border-radius": "rounded",
    "letter-spacing": "tracking",
})


class Utility(NamedTuple):
    """CSS produced by one utility. Higher specificity wins regardless of class order."""
    css: Dict[str, str]
    specificity: int = 0


# --- Arbitrary values ---

URL_RE = re.compile(r"url\([^)]*\)", re.I)


def _map_outside_urls(value: str, convert) -> str:
    """Applies `convert` to the text between url(...) groups; the groups stay as written."""
    parts: List[str] = []
    position = 0
    for match in URL_RE.finditer(value):
        parts.append(convert(value[position:match.start()]))
        parts.append(match.group(0))
        position = match.end()
    parts.append(convert(value[position:]))
    return "".join(parts)


def decode_arbitrary(value: str) -> str:
    """`_` stands for a space inside [...], `\\_` for a literal underscore. URLs are kept verbatim."""
    return _map_outside_urls(
        value, lambda text: re.sub(r"\\_|_", lambda m: "_" if m.group(0) == "\\_" else " ", text)
    )


def encode_arbitrary(value: str) -> str:
    return _map_outside_urls(value, lambda text: text.replace("_", "\\_").replace(" ", "_"))


def _arbitrary(value: str) -> Optional[str]:
    if len(value) > 2 and value.startswith("[") and value.endswith("]"):
        return decode_arbitrary(value[1:-1])
    return None


# --- Variants ---

def split_variants(token: str) -> Tuple[List[str], str]:
    """Splits `md:hover:p-4` into (['md', 'hover'], 'p-4'), ignoring ':' inside brackets."""
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    for char in token:
        if char == "[":
            depth += 1
        elif char == "]":
            depth = max(depth - 1, 0)
        elif char == ":" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts[:-1], parts[-1]


def variant_width(variant: str) -> Optional[int]:
    """Min-width in px of a responsive variant, or None for any other variant."""
    if variant in SCREENS:
        return SCREENS[variant]
    match = MIN_VARIANT_RE.match(variant)
    return int(match.group(1)) if match else None


def screen_prefix(width: int) -> str:
    """The responsive variant targeting `width`: a named screen if one matches exactly."""
    for name, screen_width in SCREENS.items():
        if screen_width == width:
            return name
    return f"min-[{width}px]"


# --- Resolvers ---

def _spacing_length(key: str, rem_px: float) -> Optional[str]:
    if key == "px":
        return "1px"
    if key in SPACING_KEYS:
        return f"{format_number(float(key) * 0.25 * rem_px)}px"
    arbitrary = _arbitrary(key)
    if arbitrary is not None:
        return normalize_length(arbitrary, rem_px, keywords=frozenset({"auto"}))
    return None


def _rem(value: str, rem_px: float) -> str:
    return normalize_length(value, rem_px) if value.endswith("rem") else value


def _resolve_spacing(utility: str, rem_px: float) -> Optional[Utility]:
    match = SPACING_RE.match(utility)
    if not match:
        return None
    negative, box, side, key = match.groups()
    if negative and box == "p":
        return None
    if key == "auto":
        if box == "p" or negative:
            return None
        value = "auto"
    else:
        value = _spacing_length(key, rem_px)
        if value is None or (box == "p" and value == "auto"):
            return None
    if negative and value != "0px":
        value = value[1:] if value.startswith("-") else f"-{value}"
    sides, specificity = SPACING_SIDES[side]
    prop = "padding" if box == "p" else "margin"
    return Utility({f"{prop}-{s}": value for s in sides}, specificity)


def _resolve_sizing(utility: str, rem_px: float) -> Optional[Utility]:
    match = SIZING_RE.match(utility)
    if not match:
        return None
    prefix, key = match.groups()
    prop = SIZING_PROPS[prefix]
    value = None
    if key == "px" or key in SPACING_KEYS:
        value = _spacing_length(key, rem_px)
    elif key == "screen":
        value = "100vh" if prop.endswith("height") else "100vw"
    elif key in SIZING_KEYWORDS and (key != "none" or prefix.startswith("max")):
        value = SIZING_KEYWORDS[key]
    elif prop == "max-width" and key in MAX_WIDTH_SCALE:
        value = _rem(MAX_WIDTH_SCALE[key], rem_px)
    elif FRACTION_RE.match(key) and prefix in ("w", "h"):
        numerator, denominator = (int(x) for x in FRACTION_RE.match(key).groups())
        if denominator:
            value = f"{format_number(numerator * 100 / denominator)}%"
    else:
        arbitrary = _arbitrary(key)
        if arbitrary is not None:
            value = normalize_length(arbitrary, rem_px)
    if value is None:
        return None
    return Utility({prop: value})


def _resolve_text(rest: str, rem_px: float) -> Optional[Utility]:
    if rest in FONT_SIZE_MAP:
        size, leading = FONT_SIZE_MAP[rest]
        return Utility({"font-size": _rem(size, rem_px), "line-height": _rem(leading, rem_px)})
    if rest in TEXT_ALIGN_CLASSES:
        return Utility({"text-align": rest})
    if rest in COLOR_NAMES:
        return Utility({"color": COLOR_NAMES[rest]})
    arbitrary = _arbitrary(rest)
    if arbitrary is None:
        return None
    if is_dimension(arbitrary):
        size = normalize_length(arbitrary, rem_px)
        return Utility({"font-size": size}) if size else None
    color = normalize_color(arbitrary)
    return Utility({"color": color}) if color else None


def _resolve_font(rest: str) -> Optional[Utility]:
    if rest in FONT_WEIGHT_MAP:
        return Utility({"font-weight": FONT_WEIGHT_MAP[rest]})
    if rest in FONT_FAMILY_MAP:
        return Utility({"font-family": FONT_FAMILY_MAP[rest]})
    arbitrary = _arbitrary(rest)
    if arbitrary is None:
        return None
    if re.match(r"^[1-9]00$", arbitrary.strip()):
        return Utility({"font-weight": arbitrary.strip()})
    return Utility({"font-family": collapse(arbitrary)}) if arbitrary.strip() else None


def _resolve_border(key: str, rem_px: float) -> Optional[Utility]:
    if key in BORDER_WIDTH_MAP:
        return Utility({"border-width": BORDER_WIDTH_MAP[key]})
    if key in BORDER_STYLES:
        return Utility({"border-style": key})
    if key in COLOR_NAMES:
        return Utility({"border-color": COLOR_NAMES[key]})
    arbitrary = _arbitrary(key)
    if arbitrary is None:
        return None
    if is_dimension(arbitrary):
        width = normalize_length(arbitrary, rem_px, keywords=frozenset())
        return Utility({"border-width": width}) if width else None
    color = normalize_color(arbitrary)
    return Utility({"border-color": color}) if color else None


def _resolve_background(rest: str) -> Optional[Utility]:
    if rest in COLOR_NAMES:
        return Utility({"background-color": COLOR_NAMES[rest]})
    if rest == "none":
        return Utility({"background-image": "none"})
    arbitrary = _arbitrary(rest)
    if arbitrary is None:
        return None
    color = normalize_color(arbitrary)
    if color:
        return Utility({"background-color": color})
    image = normalize_image(arbitrary)
    return Utility({"background-image": image}) if image else None


def _resolve_arbitrary_property(utility: str, rem_px: float) -> Optional[Utility]:
    inner = _arbitrary(utility)
    if inner is None or ":" not in inner:
        return None
    prop, _, value = inner.partition(":")
    prop = prop.strip().lower()
    if prop not in CSS_FIELDS:
        return None
    normalized = normalize_value(prop, value, rem_px)
    return Utility({prop: normalized}, 3) if normalized is not None else None


def resolve_utility(utility: str, rem_px: float = 16.0) -> Optional[Utility]:
    """
    Resolves a variant-free utility class into canonical CSS, or None when the
    utility is outside the supported vocabulary.
    """
    if not utility or utility.startswith("!"):
        return None
    if utility.startswith("["):
        return _resolve_arbitrary_property(utility, rem_px)
    if utility in KEYWORD_CLASSES:
        prop, value = KEYWORD_CLASSES[utility]
        return Utility({prop: value})

    found = _resolve_spacing(utility, rem_px)
    if found is None:
        found = _resolve_sizing(utility, rem_px)
    if found is not None:
        return found

    head, _, rest = utility.partition("-")
    if head == "text" and rest:
        return _resolve_text(rest, rem_px)
    if head == "font" and rest:
        return _resolve_font(rest)
    if head == "leading" and rest:
        if rest in LEADING_MAP:
            return Utility({"line-height": _rem(LEADING_MAP[rest], rem_px)}, 1)
        arbitrary = _arbitrary(rest)
        value = normalize_line_height(arbitrary, rem_px) if arbitrary is not None else None
        return Utility({"line-height": value}, 1) if value else None
    if head == "tracking" and rest:
        value = TRACKING_MAP.get(rest)
        if value is None and _arbitrary(rest) is not None:
            value = normalize_length(_arbitrary(rest), rem_px, keywords=frozenset())
        return Utility({"letter-spacing": value}) if value else None
    if head == "border":
        return _resolve_border(rest, rem_px)
    if head == "bg" and rest:
        return _resolve_background(rest)
    if head == "rounded":
        if rest in ROUNDED_MAP:
            return Utility({"border-radius": _rem(ROUNDED_MAP[rest], rem_px)})
        arbitrary = _arbitrary(rest)
        value = normalize_length(arbitrary, rem_px, keywords=frozenset()) if arbitrary is not None else None
        return Utility({"border-radius": value}) if value else None
    if head == "shadow":
        if rest in SHADOW_MAP:
            return Utility({"box-shadow": SHADOW_MAP[rest]})
        arbitrary = _arbitrary(rest)
        return Utility({"box-shadow": collapse(arbitrary)}) if arbitrary and arbitrary.strip() else None
    if head == "gap" and rest:
        value = _spacing_length(rest, rem_px)
        return Utility({"gap": value}) if value and value != "auto" else None
    if head == "opacity" and rest:
        if rest.isdigit() and int(rest) in OPACITY_STEPS:
            return Utility({"opacity": format_number(int(rest) / 100)})
        arbitrary = _arbitrary(rest)
        value = normalize_number(arbitrary) if arbitrary is not None else None
        return Utility({"opacity": value}) if value else None
    return None


def utility_class(prop: str, value: str) -> str:
    """A variant-free utility class setting one canonical declaration."""
    encoded = encode_arbitrary(value)
    utility_prefix = ARBITRARY_PREFIXES.get(prop)
    if utility_prefix is not None and is_dimension(value):
        return f"{utility_prefix}-[{encoded}]"
    if prop == "font-size" and is_dimension(value):
        return f"text-[{encoded}]"
    return f"[{prop}:{encoded}]"


def override_class(prefix: str, prop: str, value: str) -> str:
    """Renders one breakpoint override declaration as a responsive utility class."""
    return f"{prefix}:{utility_class(prop, value)}"
