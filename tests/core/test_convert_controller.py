# tests/core/test_convert_controller.py
import json

import pytest

from pagecraft.controllers.convert_controller import ConvertController
from pagecraft.core.utils.parallel_workers import convert_file_worker
from pagecraft.model import EngineSettings


@pytest.fixture
def source_dir(tmp_path):
    """Een map met twee geldige pagina's, een lege pagina en een niet-HTML bestand."""
    src = tmp_path / "pages"
    src.mkdir()
    (src / "home.html").write_text('<div class="flex"><p>Home</p></div>', encoding="utf-8")
    (src / "about.htm").write_text("<h1>Over ons</h1><canvas></canvas>", encoding="utf-8")
    (src / "empty.html").write_text("  ", encoding="utf-8")
    (src / "notes.txt").write_text("<p>geen pagina</p>", encoding="utf-8")
    return src


def test_convert_directory(source_dir, tmp_path):
    out_dir = tmp_path / "trees"
    stats = ConvertController(default_workers=1).convert_directory(
        source_dir=source_dir, out_dir=out_dir, settings=EngineSettings(), flat=False, show_progress=False,
    )

    assert stats["pages_total"] == 3
    assert stats["pages_success"] == 2
    assert stats["pages_failed"] == 1
    assert stats["pages_degraded"] == 0
    assert stats["out_dir"] == str(out_dir)
    assert sorted(p.name for p in out_dir.iterdir()) == ["about.json", "home.json"]

    payload = json.loads((out_dir / "home.json").read_text(encoding="utf-8"))
    assert payload["source"] == "home.html"
    assert payload["tree"]["kind"] == "Root"
    assert payload["demoted"] is False


def test_convert_directory_flat_defaults_to_source_dir(source_dir):
    stats = ConvertController(default_workers=1).convert_directory(
        source_dir=source_dir, settings=EngineSettings(), flat=True, show_progress=False,
    )
    assert stats["out_dir"] == str(source_dir)
    payload = json.loads((source_dir / "home.json").read_text(encoding="utf-8"))
    assert "ROOT" in payload["tree"]


def test_convert_directory_without_pages(tmp_path):
    stats = ConvertController(default_workers=1).convert_directory(source_dir=tmp_path, show_progress=False)
    assert stats["pages_total"] == 0
    assert stats["out_dir"] is None


def test_convert_directory_rejects_files(source_dir):
    with pytest.raises(NotADirectoryError):
        ConvertController().convert_directory(source_dir=source_dir / "home.html", show_progress=False)


# --- De worker zelf, zonder procespool ---

def test_worker_returns_json(source_dir):
    result = convert_file_worker(str(source_dir / "about.htm"), EngineSettings().model_dump())
    payload = json.loads(result)
    assert payload["source"] == "about.htm"
    assert "UnsupportedStructure" in [d["code"] for d in payload["diagnostics"]]


def test_worker_returns_none_on_errors(source_dir):
    settings_data = EngineSettings().model_dump()
    assert convert_file_worker(str(source_dir / "empty.html"), settings_data) is None
    assert convert_file_worker(str(source_dir / "missing.html"), settings_data) is None
