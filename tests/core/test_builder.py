# tests/core/test_builder.py
import pytest

from pagecraft.dom.builder import DocumentBuilder
from pagecraft.dom.core import NodeKind
from pagecraft.dom.normalizer import HTMLNormalizer
from pagecraft.dom.registry import KindRegistry
from pagecraft.model import EngineSettings


@pytest.fixture
def settings():
    return EngineSettings()


@pytest.fixture
def build(settings):
    """Normaliseert en bouwt in één stap; levert de BuildOutput op."""
    normalizer = HTMLNormalizer(settings)
    builder = DocumentBuilder(settings)

    def _build(html):
        return builder.build(normalizer.normalize(html))

    return _build


def kinds(node):
    return [child.kind for child in node.children]


def test_registry_knows_every_kind():
    assert set(KindRegistry.kinds()) == set(NodeKind)
    assert KindRegistry.get("Nonsense") is None


def test_container_with_text(build):
    root = build('<div class="flex"><p>Hello</p></div>').root
    assert root.kind == NodeKind.ROOT
    assert kinds(root) == [NodeKind.CONTAINER]
    container = root.children[0]
    assert container.props == {"tag": "div", "class_name": "flex", "attributes": {}}
    text = container.children[0]
    assert text.kind == NodeKind.TEXT
    assert text.props["tag"] == "p"
    assert text.props["text"] == "Hello"


def test_block_text_is_stripped_and_collapsed(build):
    root = build("<h2>\n   Een   titel \n</h2><span> a  b </span>").root
    assert root.children[0].props["text"] == "Een titel"
    assert root.children[1].props["text"] == " a b "


def test_non_breaking_space_is_content(build):
    root = build("<p>a&nbsp;&nbsp;b</p>").root
    assert root.children[0].props["text"] == "a\u00a0\u00a0b"


def test_mixed_content_keeps_bare_text_runs(build):
    root = build("<p>Een <strong>vet</strong> woord</p>").root
    paragraph = root.children[0]
    assert paragraph.kind == NodeKind.CONTAINER
    assert [c.props.get("tag") for c in paragraph.children] == [None, "strong", None]
    assert [c.props["text"] for c in paragraph.children] == ["Een ", "vet", " woord"]


def test_whitespace_between_blocks_is_dropped(build):
    root = build("<div>\n  <p>a</p>\n  <p>b</p>\n</div>").root
    assert kinds(root.children[0]) == [NodeKind.TEXT, NodeKind.TEXT]


def test_whitespace_between_inline_elements_is_kept(build):
    root = build("<div><a href='/a'>a</a> <a href='/b'>b</a></div>").root
    children = root.children[0].children
    assert kinds(root.children[0]) == [NodeKind.LINK, NodeKind.TEXT, NodeKind.LINK]
    assert children[1].props["text"] == " "


def test_opaque_subtree_is_sealed(build):
    output = build('<div><canvas id="chart"></canvas><p>x</p></div>')
    container = output.root.children[0]
    opaque = container.children[0]
    assert opaque.kind == NodeKind.OPAQUE_HTML
    assert opaque.raw_content == '<canvas id="chart"></canvas>'
    assert opaque.props == {}
    assert opaque.children == []
    assert output.unsupported == ["canvas"]


def test_sources_point_at_normalized_elements(build):
    output = build("<section><h1>T</h1></section>")
    section = output.root.children[0]
    assert output.sources[section.id].name == "section"
    assert output.sources[section.children[0].id].name == "h1"


def test_image_link_and_button_props(build):
    root = build(
        '<img src="/a.png" alt="">'
        '<a href="/x" target="_blank" rel="noopener">Lees meer</a>'
        '<a class="btn" href="/koop">Koop</a>'
        '<button type="submit">Verstuur</button>'
    ).root
    image, link, anchor_button, button = root.children
    assert image.props == {"tag": "img", "class_name": "", "attributes": {}, "src": "/a.png", "alt": ""}
    assert link.props["href"] == "/x"
    assert link.props["target"] == "_blank"
    assert link.props["attributes"] == {"rel": "noopener"}
    assert link.props["text"] == "Lees meer"
    assert anchor_button.kind == NodeKind.BUTTON
    assert anchor_button.props["href"] == "/koop"
    assert button.props["attributes"] == {"type": "submit"}
    assert button.props["text"] == "Verstuur"


def test_link_with_children_keeps_them_as_nodes(build):
    link = build('<a href="/"><img src="/logo.png" alt="Logo"><span>Home</span></a>').root.children[0]
    assert link.kind == NodeKind.LINK
    assert "text" not in link.props
    assert kinds(link) == [NodeKind.IMAGE, NodeKind.TEXT]


def test_grid_columns_from_class(build):
    grid = build('<div class="grid grid-cols-3 gap-2"><div>1</div><div>2</div></div>').root.children[0]
    assert grid.kind == NodeKind.GRID
    assert grid.props["columns"] == 3
    assert grid.props["class_name"] == "grid"
    assert grid.style.gap == "8px"


def test_root_carries_document_data(build):
    html = '<html lang="nl"><head><title>T</title></head><body class="bg-white" data-page="home"><p>x</p></body></html>'
    root = build(html).root
    assert root.props["head"] == "<title>T</title>"
    assert root.props["html_attributes"] == {"lang": "nl"}
    assert root.props["attributes"] == {"data-page": "home"}
    assert root.style.background_color == "#ffffff"


def test_invalid_body_attributes_are_dropped(build):
    root = build('<html><body @keydown="x" id="top"><p>x</p></body></html>').root
    assert root.props["attributes"] == {"id": "top"}


def test_degraded_input_becomes_one_opaque_node(settings):
    from pagecraft.dom.models import NormalizedDocument

    output = DocumentBuilder(settings).build(NormalizedDocument(raw="<p>kapot", degraded=True))
    assert kinds(output.root) == [NodeKind.OPAQUE_HTML]
    assert output.root.children[0].raw_content == "<p>kapot"


def test_deep_nesting_does_not_recurse(build):
    """Geen recursie: 1500 niveaus diep mag geen RecursionError geven."""
    depth = 1500
    html = "<div>" * depth + "diep" + "</div>" * depth
    node = build(html).root
    levels = 0
    while node.children:
        node = node.children[0]
        levels += 1
    assert levels == depth
    assert node.props["text"] == "diep"
