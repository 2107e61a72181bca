# src/pagecraft/services/page_service.py
import logging
import re
from typing import List, Optional, Union

from pagecraft.model import Page, SiteContent

logger = logging.getLogger(__name__)

FENCE_OPEN_RE = re.compile(r"```html\s*", re.I)
FENCE_RE = re.compile(r"```\s*")
FENCED_HTML_RE = re.compile(r"```html\s*([\s\S]*?)```", re.I)
FENCED_ANY_RE = re.compile(r"```\s*([\s\S]*?)```", re.I)
DOCUMENT_RE = re.compile(r"(<!DOCTYPE html[\s\S]*?</html>|<html[\s\S]*?</html>)", re.I)
BODY_RE = re.compile(r"<body[\s\S]*?</body>", re.I)
BLOCK_FRAGMENT_RE = re.compile(r"<(div|main|section|header|nav|footer|article)[\s\S]*</\1>", re.I)
PAGE_MARKER_RE = re.compile(r"<!-- page: (.*?) -->([\s\S]*?)(?=<!-- page: |$)")

DOCUMENT_HEAD = (
    '<head><meta charset="UTF-8">'
    '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
    '<script src="https://cdn.tailwindcss.com"></script></head>'
)


def clean_page_content(text: str) -> str:
    """Removes markdown code fence markers around generated HTML."""
    return FENCE_RE.sub("", FENCE_OPEN_RE.sub("", text))


def extract_html(text: str) -> Optional[str]:
    """
    Extracts an HTML document from a generated (often markdown wrapped) response.

    Tried in order: a fenced code block, a full document, a <body> element
    (wrapped into a document), a top-level block fragment (wrapped), and
    finally raw markup starting with '<'. Returns None when nothing looks
    like HTML.
    """
    match = FENCED_HTML_RE.search(text) or FENCED_ANY_RE.search(text)
    if match:
        return match.group(1)

    match = DOCUMENT_RE.search(text)
    if match:
        return match.group(1)

    match = BODY_RE.search(text)
    if match:
        return f"<!DOCTYPE html><html>{DOCUMENT_HEAD}{match.group(0)}</html>"

    match = BLOCK_FRAGMENT_RE.search(text)
    if match:
        return f"<!DOCTYPE html><html>{DOCUMENT_HEAD}<body>{match.group(0)}</body></html>"

    if text.strip().startswith("<") and ">" in text:
        return text
    return None


def parse_multi_page_response(text: str) -> List[Page]:
    """
    Splits a response using `<!-- page: name -->` markers into pages.
    Page paths always end in .html; pages without content are skipped.
    """
    if "<!-- page:" not in text:
        return []

    pages = []
    for match in PAGE_MARKER_RE.finditer(text):
        raw_path = match.group(1).strip()
        path = raw_path if raw_path.endswith(".html") else f"{raw_path}.html"
        content = clean_page_content(match.group(2).strip())
        if path and content:
            pages.append(Page(path=path, content=content))
    logger.debug(f"Parsed {len(pages)} page(s) from multi-page response")
    return pages


def resolve_page(content: Union[SiteContent, dict, None], path: Optional[str]) -> Optional[str]:
    """
    Resolves the HTML served for `path` from stored site content.

    Multi-page content matches the normalized path or the path plus '.html';
    single-page content only answers the index. None means not found.
    """
    if content is None:
        return None
    site = content if isinstance(content, SiteContent) else SiteContent.model_validate(content)

    requested = path or "index.html"
    normalized = requested[1:] if requested.startswith("/") else requested

    if site.pages is not None:
        for page in site.pages:
            page_path = page.path[1:] if page.path.startswith("/") else page.path
            if page_path == normalized or page_path == f"{normalized}.html":
                return page.content
        return None

    if site.html is not None and normalized in ("index.html", ""):
        return site.html
    return None
