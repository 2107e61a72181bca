# src/pagecraft/dom/normalizer.py
import logging
import re
from collections import Counter
from typing import List, Optional

from bs4 import BeautifulSoup, Doctype, NavigableString
from bs4.element import PreformattedString

from pagecraft.model import EngineSettings
from .models import NormalizedDocument
from .styles import canonical_css
from .tags import RAW_TEXT_TAGS, URL_ATTRIBUTES, VOID_TAGS

logger = logging.getLogger(__name__)

TAG_TOKEN_RE = re.compile(r"<!--.*?-->|<(/?)([a-zA-Z][a-zA-Z0-9:-]*)\b[^>]*?(/?)>", re.S)
SCRIPT_URL_RE = re.compile(r"^(?:javascript|vbscript):", re.I)
CONTROL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]+")

# End tags the HTML grammar allows to be omitted.
OPTIONAL_END_TAGS = frozenset({
    "p", "li", "dt", "dd", "option", "optgroup", "tr", "td", "th", "thead",
    "tbody", "tfoot", "colgroup", "caption", "rt", "rp", "html", "head", "body",
})


def is_script_url(value: str) -> bool:
    return bool(SCRIPT_URL_RE.match(CONTROL_CHARS_RE.sub("", value or "")))


def is_denied_attribute(settings: EngineSettings, name: str, value: Optional[str]) -> bool:
    """True for attributes the denylist removes: named, prefixed (on*) or script URLs."""
    if name in settings.denied_attributes or name.startswith(tuple(settings.denied_attribute_prefixes)):
        return True
    return settings.strip_javascript_urls and name in URL_ATTRIBUTES and is_script_url(value or "")


class HTMLNormalizer:
    """
    Turns raw HTML text into a sanitized BeautifulSoup tree that always has
    <html>, <head> and <body>.

    The normalizer never raises for bad markup: the parser's own error
    recovery handles malformed input, and a parser failure degrades the
    document to its scrubbed raw text.
    """

    def __init__(self, settings: EngineSettings):
        self.settings = settings
        self.denied_tags = frozenset(settings.denied_tags)
        self.denied_prefixes = tuple(settings.denied_attribute_prefixes)

    def normalize(self, html: str) -> NormalizedDocument:
        try:
            return self._normalize(html)
        except Exception as e:
            logger.warning(f"HTML parser failed, degrading input to opaque content: {e}", exc_info=True)
            return NormalizedDocument(raw=self.scrub(html), degraded=True)

    # --- Pipeline ---

    def _normalize(self, html: str) -> NormalizedDocument:
        clean_html = html.replace("\ufeff", "")
        recovered = self.detect_malformed(clean_html)
        soup = BeautifulSoup(clean_html, "html.parser", multi_valued_attributes=None)

        has_doctype, dropped = self._drop_markup_declarations(soup)
        stripped = self._strip_denied_tags(soup)
        stripped.extend(self._canonicalize_attributes(soup))

        head, body, html_attributes, wrapped, moved = self._ensure_structure(soup)
        self._merge_strings(soup)

        if moved:
            recovered = True
        if stripped:
            logger.info(f"Stripped denylisted content: {', '.join(sorted(set(stripped)))}")
        if recovered:
            logger.debug("Malformed markup recovered by the parser")

        return NormalizedDocument(
            raw=html,
            soup=soup,
            head=head,
            body=body,
            html_attributes=html_attributes,
            has_doctype=has_doctype,
            wrapped=wrapped,
            recovered=recovered,
            stripped=stripped,
            comments_dropped=dropped,
        )

    def _drop_markup_declarations(self, soup: BeautifulSoup):
        """Removes comments, doctype, CDATA, declarations and processing instructions."""
        has_doctype = False
        dropped = 0
        for node in [n for n in soup.descendants if isinstance(n, PreformattedString)]:
            if isinstance(node, Doctype):
                has_doctype = True
            else:
                dropped += 1
            node.extract()
        return has_doctype, dropped

    def _strip_denied_tags(self, soup: BeautifulSoup) -> List[str]:
        stripped: List[str] = []
        if not self.denied_tags:
            return stripped
        for tag in soup.find_all(list(self.denied_tags)):
            if tag.decomposed:
                continue
            stripped.append(tag.name)
            tag.decompose()
        return stripped

    def _canonicalize_attributes(self, soup: BeautifulSoup) -> List[str]:
        stripped: List[str] = []
        for tag in soup.find_all(True):
            attrs = {}
            for name, value in tag.attrs.items():
                name = name.lower()
                value = "" if value is None else str(value)
                if is_denied_attribute(self.settings, name, value):
                    stripped.append(f"@{name}")
                    continue
                if name == "class":
                    value = " ".join(value.split())
                elif name == "style":
                    value = canonical_css(value)
                if name in ("class", "style") and not value:
                    continue
                attrs[name] = value
            tag.attrs = dict(sorted(attrs.items()))
        return stripped

    def _ensure_structure(self, soup: BeautifulSoup):
        """
        Rebuilds the top level as <html><head/><body/></html>.

        Content found outside an existing <body> is moved into it in document
        order; a document without <body> is treated as a fragment.
        """
        old_html = soup.find("html")
        old_head = soup.find("head")
        old_body = soup.find("body")

        html_attributes = dict(old_html.attrs) if old_html is not None else {}
        body_attributes = dict(old_body.attrs) if old_body is not None else {}
        wrapped = old_body is None

        head_nodes = list(old_head.contents) if old_head is not None else []
        body_nodes = []
        moved = False
        pending = list(reversed(soup.contents))
        while pending:
            node = pending.pop()
            if node is old_head:
                continue
            if node is old_html or node is old_body:
                pending.extend(reversed(node.contents))
                continue
            if isinstance(node, NavigableString) and not node.strip():
                if old_body is None or node.parent is old_body:
                    body_nodes.append(node)
                continue
            if old_body is not None and node.parent is not old_body:
                moved = True
            body_nodes.append(node)

        new_html = soup.new_tag("html", attrs=html_attributes)
        new_head = soup.new_tag("head")
        new_body = soup.new_tag("body", attrs=body_attributes)
        for node in head_nodes:
            if isinstance(node, NavigableString) and not node.strip():
                continue
            new_head.append(node.extract())
        for node in body_nodes:
            new_body.append(node.extract())

        soup.clear()
        new_html.append(new_head)
        new_html.append(new_body)
        soup.append(new_html)
        if moved:
            logger.debug("Moved content found outside <body> into the body")
        return new_head, new_body, html_attributes, wrapped, moved

    @staticmethod
    def _merge_strings(soup: BeautifulSoup) -> None:
        """Merges adjacent plain text nodes left behind by removals."""
        for tag in soup.find_all(True):
            children = tag.contents
            index = 0
            while index < len(children):
                current = children[index]
                if type(current) is NavigableString and not current:
                    current.extract()
                    continue
                nxt = children[index + 1] if index + 1 < len(children) else None
                if type(current) is NavigableString and type(nxt) is NavigableString:
                    current.replace_with(NavigableString(str(current) + str(nxt)))
                    nxt.extract()
                    continue
                index += 1

    # --- Diagnostics ---

    @staticmethod
    def detect_malformed(html: str) -> bool:
        """
        Linear tag-balance scan of the raw markup: stray end tags and unclosed
        elements whose end tag is not optional count as malformed.
        """
        stack: List[str] = []
        open_counts: Counter = Counter()
        raw_text_until = None
        malformed = False

        for match in TAG_TOKEN_RE.finditer(html):
            name = match.group(2)
            if name is None:
                continue
            name = name.lower()
            closing = match.group(1) == "/"
            if raw_text_until is not None:
                if closing and name == raw_text_until:
                    raw_text_until = None
                continue
            if closing:
                if name in VOID_TAGS:
                    continue
                if not open_counts[name]:
                    malformed = True
                    continue
                while stack:
                    top = stack.pop()
                    open_counts[top] -= 1
                    if top == name:
                        break
                    if top not in OPTIONAL_END_TAGS:
                        malformed = True
                continue
            if name in VOID_TAGS or match.group(3):
                continue
            if name in RAW_TEXT_TAGS:
                raw_text_until = name
                continue
            stack.append(name)
            open_counts[name] += 1

        if raw_text_until is not None:
            malformed = True
        if any(name not in OPTIONAL_END_TAGS for name in stack):
            malformed = True
        return malformed

    def scrub(self, html: str) -> str:
        """Regex-only removal of denylisted tags and attributes, used when parsing failed."""
        text = html
        for name in self.denied_tags:
            escaped = re.escape(name)
            text = re.sub(rf"<{escaped}\b[^>]*>.*?</{escaped}\s*>", "", text, flags=re.I | re.S)
            text = re.sub(rf"</?{escaped}\b[^>]*>", "", text, flags=re.I)
        for prefix in self.denied_prefixes:
            text = re.sub(
                rf"\s{re.escape(prefix)}[\w-]*\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>]+)", "", text, flags=re.I
            )
        for name in self.settings.denied_attributes:
            text = re.sub(
                rf"\s{re.escape(name)}\s*=\s*(\"[^\"]*\"|'[^']*'|[^\s>]+)", "", text, flags=re.I
            )
        if self.settings.strip_javascript_urls:
            text = re.sub(
                r"\s(href|src|action|formaction|poster|background)\s*=\s*([\"']?)\s*(javascript|vbscript):[^\"'>]*\2",
                "",
                text,
                flags=re.I,
            )
        return text
