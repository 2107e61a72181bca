# tests/core/test_styles.py
import pytest
from bs4 import BeautifulSoup

from pagecraft.dom.core import StyleRecord
from pagecraft.dom.styles import StyleExtractor, canonical_css, split_declarations
from pagecraft.dom.tailwind import (
    decode_arbitrary,
    encode_arbitrary,
    override_class,
    resolve_utility,
    screen_prefix,
    split_variants,
    utility_class,
)
from pagecraft.dom.values import normalize_color, normalize_length
from pagecraft.model import EngineSettings


@pytest.fixture
def settings():
    return EngineSettings()


@pytest.fixture
def extractor(settings):
    return StyleExtractor(settings)


def extract(extractor, html):
    tag = BeautifulSoup(html, "html.parser", multi_valued_attributes=None).find(True)
    return extractor.extract(tag)


# --- Inline CSS ---

def test_split_declarations_respects_quotes_and_parens():
    text = "color: red; background: url('a;b.png'); ; :x; FONT-SIZE : 2rem"
    assert split_declarations(text) == [
        ("color", "red"),
        ("background", "url(\"a;b.png\")"),
        ("font-size", "2rem"),
    ]


def test_comments_are_dropped_from_inline_css(extractor):
    """Een puntkomma in commentaar mag de declaratie niet afbreken."""
    text = "color: red /* note; */; padding: 4px"
    assert split_declarations(text) == [("color", "red"), ("padding", "4px")]
    assert canonical_css(text) == "color: red; padding: 4px"

    style = extract(extractor, f'<div style="{text}">x</div>').style
    assert style.color == "#ff0000"
    assert style.padding.top == "4px"
    assert style.extra == {}


def test_escapes_in_inline_css():
    text = r"\63 olor: blue; font-family: 'Open Sans', serif; content: 'a;b'"
    assert split_declarations(text) == [
        ("color", "blue"),
        ("font-family", '"Open Sans", serif'),
        ("content", '"a;b"'),
    ]


def test_canonical_css_last_declaration_wins():
    assert canonical_css("color: red; margin:0;COLOR: blue") == "margin: 0; color: blue"


def test_shorthand_expansion(extractor):
    result = extract(extractor, '<div style="margin: 1rem auto; padding: 2px 4px 6px">x</div>')
    style = result.style
    assert (style.margin.top, style.margin.right, style.margin.bottom, style.margin.left) == (
        "16px", "auto", "16px", "auto"
    )
    assert (style.padding.top, style.padding.right, style.padding.bottom, style.padding.left) == (
        "2px", "4px", "6px", "4px"
    )


def test_border_shorthand(extractor):
    style = extract(extractor, '<div style="border: 2px dashed #ABC">x</div>').style
    assert style.border_width == "2px"
    assert style.border_style == "dashed"
    assert style.border_color == "#aabbcc"


def test_unknown_and_important_declarations_go_to_extra(extractor):
    style = extract(extractor, '<div style="display: flex; color: red !important; z-index: 3">x</div>').style
    assert style.color is None
    assert style.extra == {"display": "flex", "color": "red !important", "z-index": "3"}


def test_unparseable_shorthand_owns_its_longhands(extractor):
    """Een shorthand die niet te ontleden is blijft letterlijk en overschaduwt klassen."""
    result = extract(extractor, '<div class="p-4" style="padding: var(--gap) 0 0 0 1px">x</div>')
    assert result.style.padding is None
    assert result.style.extra == {"padding": "var(--gap) 0 0 0 1px"}
    assert result.class_name == "p-4"


# --- Utility klassen ---

def test_inline_beats_class(extractor):
    result = extract(
        extractor,
        '<div class="p-4 md:pt-8 hover:bg-white onbekend" style="padding-top: 2px">x</div>',
    )
    style = result.style
    assert style.padding.top == "2px"
    assert style.padding.right == "16px"
    assert style.padding.left == "16px"
    assert "tablet" not in style.breakpoints
    # p-4 is deels overschaduwd, md:pt-8 helemaal: beide blijven letterlijk staan
    assert result.class_name == "p-4 md:pt-8 hover:bg-white onbekend"


def test_inline_beats_breakpoint_class(extractor, settings):
    """Inline CSS wint op elke breedte, ook van een md: klasse."""
    result = extract(extractor, '<div class="md:p-8" style="padding: 4px">x</div>')
    assert result.style.breakpoints == {}
    assert result.style.resolve("tablet", settings.breakpoint_order).padding.top == "4px"
    assert result.class_name == "md:p-8"


def test_partially_shadowed_breakpoint_class(extractor, settings):
    result = extract(extractor, '<div class="md:p-8" style="padding-top: 4px">x</div>')
    tablet = result.style.breakpoints["tablet"]
    assert tablet.padding.top is None
    assert (tablet.padding.right, tablet.padding.bottom, tablet.padding.left) == ("32px", "32px", "32px")
    assert result.style.resolve("tablet", settings.breakpoint_order).padding.top == "4px"
    assert result.class_name == "md:p-8"


def test_side_specificity_beats_class_order(extractor):
    style = extract(extractor, '<div class="px-2 p-4">x</div>').style
    assert style.padding.left == "8px"
    assert style.padding.right == "8px"
    assert style.padding.top == "16px"


def test_breakpoint_without_exact_match_is_kept(extractor):
    """sm: (640px) heeft geen breakpoint in de standaardtabel."""
    result = extract(extractor, '<div class="sm:p-2 lg:p-6">x</div>')
    assert result.class_name == "sm:p-2"
    assert result.style.breakpoints["desktop"].padding.top == "24px"


def test_min_width_variant_matches_custom_breakpoint():
    settings = EngineSettings(breakpoints={"base": 0, "wide": 900})
    result = extract(StyleExtractor(settings), '<div class="min-[900px]:text-center">x</div>')
    assert result.style.breakpoints["wide"].text_align == "center"
    assert result.class_name == ""


def test_layout_classes_are_kept(extractor):
    result = extract(extractor, '<div class="flex items-center gap-4">x</div>')
    assert result.class_name == "flex items-center"
    assert result.style.gap == "16px"


def test_rem_setting_is_used():
    settings = EngineSettings(rem_px=10)
    style = extract(StyleExtractor(settings), '<p class="text-lg" style="margin-top: 2rem">x</p>').style
    assert style.font_size == "11.25px"
    assert style.line_height == "17.5px"
    assert style.margin.top == "20px"


@pytest.mark.parametrize("utility, css", [
    ("p-4", {"padding-top": "16px", "padding-right": "16px", "padding-bottom": "16px", "padding-left": "16px"}),
    ("-mt-2", {"margin-top": "-8px"}),
    ("mx-auto", {"margin-left": "auto", "margin-right": "auto"}),
    ("w-1/2", {"width": "50%"}),
    ("w-[calc(100%_-_2rem)]", {"width": "calc(100% - 2rem)"}),
    ("max-w-md", {"max-width": "448px"}),
    ("h-screen", {"height": "100vh"}),
    ("text-center", {"text-align": "center"}),
    ("text-[#FF0000]", {"color": "#ff0000"}),
    ("font-bold", {"font-weight": "700"}),
    ("leading-tight", {"line-height": "1.25"}),
    ("border-2", {"border-width": "2px"}),
    ("rounded-lg", {"border-radius": "8px"}),
    ("bg-[url('/a.png')]", {"background-image": "url('/a.png')"}),
    ("opacity-50", {"opacity": "0.5"}),
    ("[letter-spacing:0.1rem]", {"letter-spacing": "1.6px"}),
])
def test_resolve_utility(utility, css):
    assert resolve_utility(utility).css == css


@pytest.mark.parametrize("utility", ["flex", "bg-blue-500", "-p-4", "w-none", "p-auto", "!p-4", "[display:grid]"])
def test_unsupported_utilities(utility):
    assert resolve_utility(utility) is None


def test_split_variants_ignores_colons_in_brackets():
    assert split_variants("md:hover:[color:red]") == (["md", "hover"], "[color:red]")
    assert split_variants("p-4") == ([], "p-4")


def test_arbitrary_value_escaping():
    assert decode_arbitrary("a_b\\_c") == "a b_c"
    assert decode_arbitrary(encode_arbitrary("1px solid snake_case")) == "1px solid snake_case"


def test_underscores_in_urls_are_kept(extractor):
    assert decode_arbitrary("url(/a_b.png)_no-repeat") == "url(/a_b.png) no-repeat"
    assert encode_arbitrary("url(/a_b.png) no-repeat") == "url(/a_b.png)_no-repeat"

    style = extract(extractor, '<div class="bg-[url(\x27/img/hero_bg.png\x27)]">x</div>').style
    assert style.background_image == 'url("/img/hero_bg.png")'


def test_override_classes():
    assert screen_prefix(768) == "md"
    assert screen_prefix(900) == "min-[900px]"
    assert override_class("md", "padding-top", "32px") == "md:pt-[32px]"
    assert override_class("lg", "font-size", "18px") == "lg:text-[18px]"
    assert override_class("md", "color", "#ff0000") == "md:[color:#ff0000]"
    assert utility_class("padding-top", "16px") == "pt-[16px]"
    assert utility_class("color", "#ff0000") == "[color:#ff0000]"


# --- Waarden ---

@pytest.mark.parametrize("value, expected", [
    ("#FFF", "#ffffff"),
    ("#abcdefff", "#abcdef"),
    ("rgb(255, 0, 0)", "#ff0000"),
    ("rgba(0,0,0,0.5)", "rgba(0, 0, 0, 0.5)"),
    ("rgb(100% 0% 0% / 1)", "#ff0000"),
    ("Navy", "#000080"),
    ("transparent", "transparent"),
    ("hsl(0, 100%, 50%)", None),
])
def test_normalize_color(value, expected):
    assert normalize_color(value) == expected


@pytest.mark.parametrize("value, expected", [
    ("1.5rem", "24px"),
    ("12pt", "16px"),
    ("0", "0px"),
    ("50%", "50%"),
    ("2EM", "2em"),
    ("calc(100% - 10px)", "calc(100% - 10px)"),
    ("auto", "auto"),
    ("12", None),
    ("10parsecs", None),
])
def test_normalize_length(value, expected):
    assert normalize_length(value) == expected


# --- Breakpoint overerving ---

def test_resolve_inherits_from_smaller_breakpoints(settings):
    """Overrides bevatten alleen expliciete waarden; overerving gebeurt bij het lezen."""
    record = StyleRecord.from_css(
        {"padding-top": "4px", "color": "#000000"},
        breakpoints={"tablet": {"padding-top": "8px"}, "desktop": {"color": "#ffffff"}},
    )
    order = settings.breakpoint_order
    assert record.resolve("mobile", order).padding.top == "4px"
    assert record.resolve("tablet", order).padding.top == "8px"
    desktop = record.resolve("desktop", order)
    assert desktop.padding.top == "8px"
    assert desktop.color == "#ffffff"
    # niets van de overerving wordt opgeslagen
    assert record.breakpoints["desktop"].padding is None


def test_empty_overrides_are_dropped():
    record = StyleRecord.from_css({}, breakpoints={"tablet": {}})
    assert record.breakpoints == {}
    assert record.is_empty
