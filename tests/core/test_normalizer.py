# tests/core/test_normalizer.py
import pytest

from pagecraft.dom import normalizer as normalizer_module
from pagecraft.dom.normalizer import HTMLNormalizer, is_script_url
from pagecraft.model import EngineSettings


@pytest.fixture
def normalizer():
    """Een normalizer met de standaard denylist."""
    return HTMLNormalizer(EngineSettings())


# --- Structuur ---

def test_fragment_is_wrapped(normalizer):
    """Een fragment krijgt altijd <html>, <head> en <body>."""
    doc = normalizer.normalize("<p>Hallo</p>")
    assert doc.wrapped
    assert not doc.degraded
    assert doc.soup.html is not None
    assert doc.head.name == "head"
    assert [t.name for t in doc.body.find_all(True, recursive=False)] == ["p"]


def test_full_document_keeps_head_and_attributes(normalizer):
    html = (
        '<!DOCTYPE html><html lang="nl"><head><title>T</title></head>'
        '<body class="bg-white"><p>x</p></body></html>'
    )
    doc = normalizer.normalize(html)
    assert doc.has_doctype
    assert not doc.wrapped
    assert doc.html_attributes == {"lang": "nl"}
    assert doc.head.find("title").get_text() == "T"
    assert doc.body.get("class") == "bg-white"


def test_content_after_body_is_moved_into_body(normalizer):
    """Inhoud buiten <body> wordt in documentvolgorde naar de body verplaatst."""
    html = "<html><head></head><body><p>a</p></body><p>b</p></html>"
    doc = normalizer.normalize(html)
    assert doc.recovered
    assert [p.get_text() for p in doc.body.find_all("p")] == ["a", "b"]


def test_bom_is_removed(normalizer):
    doc = normalizer.normalize("\ufeff<p>x</p>")
    assert "\ufeff" not in str(doc.soup)


# --- Denylist ---

def test_script_is_stripped_with_content(normalizer):
    doc = normalizer.normalize("<div><p>A<script>alert(1)</script></p></div>")
    assert doc.stripped == ["script"]
    assert doc.soup.find("script") is None
    assert "alert" not in str(doc.soup)
    assert doc.body.find("p").get_text() == "A"


def test_event_handlers_are_stripped(normalizer):
    doc = normalizer.normalize('<div id="a" onclick="steal()">x</div>')
    div = doc.body.find("div")
    assert div.attrs == {"id": "a"}
    assert "@onclick" in doc.stripped


def test_javascript_urls_are_stripped(normalizer):
    doc = normalizer.normalize('<a href=" JavaScript:alert(1)">x</a>')
    assert doc.body.find("a").get("href") is None
    assert "@href" in doc.stripped


def test_custom_denylist():
    """De denylist komt uit de settings van de host."""
    settings = EngineSettings(denied_tags=["video"], denied_attributes=["data-secret"])
    doc = HTMLNormalizer(settings).normalize('<video src="a.mp4"></video><p data-secret="1">x</p><script>ok</script>')
    assert doc.body.find("video") is None
    assert doc.body.find("p").attrs == {}
    # script staat niet op deze denylist
    assert doc.body.find("script") is not None


@pytest.mark.parametrize("value, expected", [
    ("javascript:alert(1)", True),
    ("  java\nscript:alert(1)", True),
    ("VBScript:msg", True),
    ("https://example.com", False),
    ("/pad/javascript:x", False),
])
def test_is_script_url(value, expected):
    assert is_script_url(value) is expected


# --- Canonieke vorm ---

def test_comments_are_dropped(normalizer):
    doc = normalizer.normalize("<!-- opmerking --><p>x<!-- binnen --></p>")
    assert doc.comments_dropped == 2
    assert "opmerking" not in str(doc.soup)


def test_attributes_are_canonical(normalizer):
    doc = normalizer.normalize('<div style="COLOR: red;  padding:4px;" class="  a   b " ID="x">t</div>')
    div = doc.body.find("div")
    assert list(div.attrs) == ["class", "id", "style"]
    assert div["class"] == "a b"
    assert div["style"] == "color: red; padding: 4px"


def test_empty_class_and_style_are_removed(normalizer):
    doc = normalizer.normalize('<div class="  " style=";">t</div>')
    assert doc.body.find("div").attrs == {}


def test_adjacent_strings_are_merged(normalizer):
    doc = normalizer.normalize("<p>een <script>x</script>twee</p>")
    p = doc.body.find("p")
    assert len(p.contents) == 1
    assert str(p.contents[0]) == "een twee"


# --- Herstel en degradatie ---

@pytest.mark.parametrize("html, expected", [
    ("<div><p>Unclosed", True),
    ("<div><span>x</div>", True),
    ("</span><div></div>", True),
    ("<div><p>ok</p></div>", False),
    ("<ul><li>een<li>twee</ul>", False),
    ("<p>een<p>twee", False),
    ("<img src='a.png'><br>", False),
    ("<script>if (a < b) { x('</div>') }</script>", False),
])
def test_detect_malformed(html, expected):
    assert HTMLNormalizer.detect_malformed(html) is expected


def test_unclosed_markup_is_recovered(normalizer):
    doc = normalizer.normalize("<div><p>Unclosed")
    assert doc.recovered
    assert doc.body.find("p").get_text() == "Unclosed"


def test_parser_failure_degrades(normalizer, monkeypatch):
    """Als de parser crasht, levert de normalizer de gescrubde invoer op."""
    def broken_parser(*args, **kwargs):
        raise RuntimeError("parser kapot")

    monkeypatch.setattr(normalizer_module, "BeautifulSoup", broken_parser)
    doc = normalizer.normalize('<p onclick="x()">a</p><script>evil()</script>')
    assert doc.degraded
    assert doc.body is None
    assert doc.raw == "<p>a</p>"


def test_scrub_removes_denied_markup(normalizer):
    html = '<a href="javascript:go()">x</a><iframe src="y"></iframe><div onload=run()>z</div>'
    assert normalizer.scrub(html) == "<a>x</a><div>z</div>"
