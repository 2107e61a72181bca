# tests/core/test_cli.py
import json

import pytest

from pagecraft import cli
from pagecraft.core.managers.config_manager import config_manager


@pytest.fixture(autouse=True)
def fresh_config():
    """Zorgt dat --set overrides niet naar andere tests lekken."""
    config_manager.reset()
    yield
    config_manager.reset()


@pytest.fixture
def html_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text('<div class="flex"><p>Hello</p></div>', encoding="utf-8")
    return path


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "usage: pagecraft" in capsys.readouterr().out


def test_unknown_command_exits_with_usage_error():
    assert cli.main(["explode"]) == 2


def test_convert_to_stdout(html_file, capsys):
    assert cli.main(["convert", str(html_file)]) == 0
    tree = json.loads(capsys.readouterr().out)
    assert tree["kind"] == "Root"
    container = tree["children"][0]
    assert container["kind"] == "Container"
    assert container["children"][0]["props"]["text"] == "Hello"


def test_convert_then_render(html_file, tmp_path, capsys):
    """convert -> render levert dezelfde markup op."""
    tree_file = tmp_path / "out" / "page.json"
    assert cli.main(["convert", str(html_file), "-o", str(tree_file)]) == 0
    assert "✅ Converted" in capsys.readouterr().out
    assert tree_file.exists()

    assert cli.main(["render", str(tree_file)]) == 0
    assert capsys.readouterr().out == '<div class="flex"><p>Hello</p></div>\n'


def test_convert_flat_then_render_full_document(html_file, tmp_path, capsys):
    tree_file = tmp_path / "flat.json"
    html_out = tmp_path / "page.html.out"
    assert cli.main(["convert", str(html_file), "--flat", "-o", str(tree_file)]) == 0

    data = json.loads(tree_file.read_text(encoding="utf-8"))
    assert data["ROOT"]["kind"] == "Root"
    assert data["ROOT"]["parent"] is None

    assert cli.main(["render", str(tree_file), "--full-document", "-o", str(html_out)]) == 0
    html = html_out.read_text(encoding="utf-8")
    assert html.startswith("<!DOCTYPE html><html>")
    assert '<div class="flex"><p>Hello</p></div>' in html


def test_set_override_changes_engine_settings(tmp_path, capsys):
    page = tmp_path / "rem.html"
    page.write_text('<p style="margin-top: 2rem">x</p>', encoding="utf-8")

    assert cli.main(["--set", "engine.rem_px=10", "convert", str(page)]) == 0
    tree = json.loads(capsys.readouterr().out)
    assert tree["children"][0]["style"]["margin"]["top"] == "20px"


def test_invalid_override_fails(html_file, capsys):
    assert cli.main(["--set", "zonder-gelijkteken", "convert", str(html_file)]) == 1
    assert "Invalid override" in capsys.readouterr().out


def test_missing_file_fails(tmp_path, capsys):
    assert cli.main(["convert", str(tmp_path / "bestaat-niet.html")]) == 1
    assert "❌" in capsys.readouterr().out


def test_empty_file_is_a_conversion_error(tmp_path, capsys):
    page = tmp_path / "leeg.html"
    page.write_text("   ", encoding="utf-8")
    assert cli.main(["convert", str(page)]) == 1
    assert "Conversion error" in capsys.readouterr().out


def test_render_unknown_kind_fails(tmp_path, capsys):
    tree_file = tmp_path / "bad.json"
    tree_file.write_text(json.dumps({"ROOT": {"kind": "Widget", "nodes": []}}), encoding="utf-8")
    assert cli.main(["render", str(tree_file)]) == 1
    assert "Conversion error" in capsys.readouterr().out


def test_render_invalid_json_fails(tmp_path):
    tree_file = tmp_path / "kapot.json"
    tree_file.write_text("{ geen json", encoding="utf-8")
    assert cli.main(["render", str(tree_file)]) == 1


# --- pages ---

def test_pages_splits_multi_page_response(tmp_path, capsys):
    response = tmp_path / "response.md"
    response.write_text(
        "<!-- page: index -->\n<p>home</p>\n<!-- page: about -->\n<p>over ons</p>\n",
        encoding="utf-8",
    )
    out_dir = tmp_path / "site"
    assert cli.main(["pages", str(response), "--out", str(out_dir)]) == 0
    assert "Wrote 2 page(s)" in capsys.readouterr().out
    assert (out_dir / "index.html").read_text(encoding="utf-8") == "<p>home</p>"
    assert (out_dir / "about.html").read_text(encoding="utf-8") == "<p>over ons</p>"


def test_pages_single_fenced_response(tmp_path):
    response = tmp_path / "response.md"
    response.write_text("Hier is je site:\n```html\n<html><body>x</body></html>\n```\n", encoding="utf-8")
    out_dir = tmp_path / "site"
    assert cli.main(["pages", str(response), "--out", str(out_dir)]) == 0
    assert (out_dir / "index.html").read_text(encoding="utf-8") == "<html><body>x</body></html>\n"


def test_pages_without_html_fails(tmp_path, capsys):
    response = tmp_path / "response.md"
    response.write_text("Sorry, daar kan ik niet mee helpen.", encoding="utf-8")
    assert cli.main(["pages", str(response), "--out", str(tmp_path / "site")]) == 1
    assert "No HTML found" in capsys.readouterr().out


def test_pages_refuses_paths_outside_out_dir(tmp_path, capsys):
    """Een paginanaam met ../ mag niet buiten --out schrijven."""
    response = tmp_path / "response.md"
    response.write_text(
        "<!-- page: index -->\n<p>home</p>\n<!-- page: ../escaped -->\n<p>weg</p>\n",
        encoding="utf-8",
    )
    out_dir = tmp_path / "site"
    assert cli.main(["pages", str(response), "--out", str(out_dir)]) == 1
    assert "points outside" in capsys.readouterr().out
    assert not (tmp_path / "escaped.html").exists()
    assert not (out_dir / "index.html").exists()


# --- batch ---

def test_batch_converts_directory(tmp_path, capsys):
    source = tmp_path / "pages"
    source.mkdir()
    (source / "a.html").write_text("<h1>A</h1>", encoding="utf-8")
    (source / "b.html").write_text("<p>B</p>", encoding="utf-8")
    out_dir = tmp_path / "trees"

    code = cli.main(["batch", str(source), "--out", str(out_dir), "--workers", "1", "--no-progress"])
    assert code == 0
    assert "Converted 2/2 pages" in capsys.readouterr().out
    assert sorted(p.name for p in out_dir.iterdir()) == ["a.json", "b.json"]


def test_batch_empty_directory_fails(tmp_path, capsys):
    assert cli.main(["batch", str(tmp_path), "--no-progress"]) == 1
    assert "No HTML files found" in capsys.readouterr().out


def test_batch_not_a_directory_fails(html_file):
    assert cli.main(["batch", str(html_file), "--no-progress"]) == 1
