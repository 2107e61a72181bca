# src/pagecraft/dom/tags.py
"""
Static tag tables shared by the classifier, the props schemas and the builder.

All tables are immutable; nothing here is ever mutated at runtime.
"""
from types import MappingProxyType

# Block-level elements that act as plain layout containers.
CONTAINER_TAGS = frozenset({
    "div", "section", "main", "header", "footer", "nav", "article", "aside",
    "ul", "ol", "dl", "figure", "address", "hgroup", "center",
})

# Elements whose text-only form maps to a Text node.
TEXT_TAGS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "span", "li", "blockquote",
    "label", "strong", "b", "em", "i", "u", "s", "small", "mark", "sub", "sup",
    "del", "ins", "q", "cite", "abbr", "time", "figcaption", "dt", "dd",
    "legend", "caption", "summary",
})

# Text tags rendered as blocks: their text is stripped, not just collapsed.
BLOCK_TEXT_TAGS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6", "li", "blockquote", "figcaption",
    "dt", "dd", "legend", "caption", "summary",
}) | CONTAINER_TAGS

# Contexts in which whitespace-only text between elements is significant.
INLINE_CONTEXT_TAGS = TEXT_TAGS | frozenset({"a", "button"})

# Elements that may become Spacer nodes when empty and sized.
SPACER_TAGS = frozenset({"div", "span"})

# Elements that are always preserved verbatim.
OPAQUE_TAGS = frozenset({
    "svg", "math", "canvas", "video", "audio", "picture", "source", "track",
    "form", "input", "select", "option", "optgroup", "textarea", "fieldset",
    "output", "progress", "meter", "datalist",
    "table", "thead", "tbody", "tfoot", "tr", "td", "th", "colgroup", "col",
    "pre", "code", "kbd", "samp", "var",
    "template", "slot", "noscript", "style", "link", "meta", "title",
    "br", "wbr", "map", "area", "details", "dialog", "menu",
    "html", "head", "body",
})

# Tags that map 1:1 to a kind before any heuristic runs.
SEMANTIC_TAGS = MappingProxyType({
    "img": "Image",
    "hr": "Divider",
    "a": "Link",
    "button": "Button",
})

# Descendants that cannot be nested inside links or buttons.
INTERACTIVE_TAGS = frozenset({"a", "button"})

# Attributes whose value is a URL.
URL_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "xlink:href", "poster", "background"})

# HTML void elements.
VOID_TAGS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input", "link",
    "meta", "param", "source", "track", "wbr",
})

# Elements whose content is raw text for the tokenizer.
RAW_TEXT_TAGS = frozenset({"script", "style", "textarea", "title", "xmp"})
