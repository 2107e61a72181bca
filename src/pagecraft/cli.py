# ============================================
# file: src/pagecraft/cli.py
# ============================================
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pagecraft.controllers.convert_controller import ConvertController
from pagecraft.converter import document_to_html, export_tree, html_to_document
from pagecraft.core.managers.config_manager import config_manager
from pagecraft.core.utils.configure_logging import configure_logger
from pagecraft.core.utils.path_utils import PathUtils
from pagecraft.errors import ConversionError
from pagecraft.model import EngineSettings
from pagecraft.services.page_service import extract_html, parse_multi_page_response

logger = logging.getLogger(__name__)

help_text = """
  pagecraft convert FILE [-o OUT] [--flat]
      Converts an HTML file into a document tree (JSON).
  pagecraft render TREE [-o OUT] [--full-document]
      Renders a document tree (nested or flat JSON) back to HTML.
  pagecraft batch DIR [--out DIR] [--workers N] [--flat] [--no-progress]
      Converts every .html file in DIR in parallel.
  pagecraft pages FILE --out DIR
      Splits a generated (multi-page) response into HTML files.
  pagecraft serve [--host HOST] [--port PORT]
      Starts the conversion API server.

  Global: --set key=value overrides a settings.json value (e.g. engine.rem_px=10).
""".strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagecraft",
        description="Convert HTML pages to builder document trees and back.",
        epilog=help_text,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                        help="Override a configuration value for this run.")
    subs = parser.add_subparsers(dest="command")

    p_convert = subs.add_parser("convert", help="Convert an HTML file to a document tree.")
    p_convert.add_argument("file", type=Path)
    p_convert.add_argument("-o", "--out", type=Path, default=None, help="Output file (default: stdout).")
    p_convert.add_argument("--flat", action="store_true", help="Emit flat builder data instead of a nested tree.")

    p_render = subs.add_parser("render", help="Render a document tree to HTML.")
    p_render.add_argument("tree", type=Path)
    p_render.add_argument("-o", "--out", type=Path, default=None, help="Output file (default: stdout).")
    p_render.add_argument("--full-document", action="store_true", help="Always emit a complete document.")

    p_batch = subs.add_parser("batch", help="Convert a directory of HTML files.")
    p_batch.add_argument("directory", type=Path)
    p_batch.add_argument("--out", type=Path, default=None, help="Output directory (default: DIR).")
    p_batch.add_argument("--workers", type=int, default=None, help="Number of parallel processes.")
    p_batch.add_argument("--flat", action="store_true", default=None, help="Emit flat builder data.")
    p_batch.add_argument("--no-progress", action="store_true", help="Hide the progress bar.")

    p_pages = subs.add_parser("pages", help="Split a generated response into page files.")
    p_pages.add_argument("file", type=Path)
    p_pages.add_argument("--out", type=Path, required=True, help="Output directory.")

    p_serve = subs.add_parser("serve", help="Start the conversion API server.")
    p_serve.add_argument("--host", type=str, default=None)
    p_serve.add_argument("--port", type=int, default=None)
    return parser


def _apply_overrides(overrides: List[str]) -> bool:
    for item in overrides:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            print(f"❌ Invalid override '{item}', expected key=value.")
            return False
        if not config_manager.set_nested(key.strip(), value.strip()):
            print(f"❌ Could not set '{key}'.")
            return False
    return True


def _write_output(text: str, out: Optional[Path]) -> None:
    if out is None:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    PathUtils.ensure_dir(out.parent)
    out.write_text(text, encoding="utf-8")


# --- Command handlers ---


def handle_convert(pargs, settings: EngineSettings) -> int:
    html = pargs.file.read_text(encoding="utf-8")
    result = html_to_document(html, settings)
    for diagnostic in result.diagnostics:
        logger.info(f"{diagnostic.code.value}: {diagnostic.message}" + (f" ({diagnostic.tag})" if diagnostic.tag else ""))

    _write_output(json.dumps(export_tree(result.root, flat=pargs.flat), ensure_ascii=False, indent=2), pargs.out)
    if pargs.out is not None:
        summary = f"✅ Converted {pargs.file} -> {pargs.out}"
        if result.has_warnings:
            summary += f" ({result.demoted_count} demoted, {len(result.unsupported)} unsupported)"
        print(summary)
    return 0


def handle_render(pargs, settings: EngineSettings) -> int:
    with open(pargs.tree, "r", encoding="utf-8") as f:
        data = json.load(f)
    html = document_to_html(data, settings, full_document=pargs.full_document)
    _write_output(html, pargs.out)
    if pargs.out is not None:
        print(f"✅ Rendered {pargs.tree} -> {pargs.out}")
    return 0


def handle_batch(pargs, settings: EngineSettings) -> int:
    controller = ConvertController(default_workers=pargs.workers)
    stats = controller.convert_directory(
        source_dir=pargs.directory,
        out_dir=pargs.out,
        settings=settings,
        flat=pargs.flat,
        workers=pargs.workers,
        show_progress=not pargs.no_progress,
    )
    if not stats["pages_total"]:
        print(f"❌ No HTML files found in {pargs.directory}.")
        return 1
    print(
        f"✅ Converted {stats['pages_success']}/{stats['pages_total']} pages "
        f"({stats['pages_demoted']} with demoted subtrees, {stats['pages_failed']} failed) "
        f"in {stats['duration_s']}s ({stats['pages_per_s']} p/s)."
    )
    return 0 if not stats["pages_failed"] else 1


def handle_pages(pargs, _settings: EngineSettings) -> int:
    text = pargs.file.read_text(encoding="utf-8")
    pages = parse_multi_page_response(text)
    if not pages:
        html = extract_html(text)
        if html is None:
            print(f"❌ No HTML found in {pargs.file}.")
            return 1
        pages_out = {"index.html": html}
    else:
        pages_out = {page.path.lstrip("/"): page.content for page in pages}

    # Page names come from generated text: every target must stay inside --out.
    out_root = pargs.out.resolve()
    targets = {}
    for path, content in pages_out.items():
        target = (out_root / path).resolve()
        if target == out_root or not target.is_relative_to(out_root):
            print(f"❌ Page path '{path}' points outside {pargs.out}.")
            return 1
        targets[target] = content

    out_dir = PathUtils.ensure_dir(pargs.out)
    for target, content in targets.items():
        PathUtils.ensure_dir(target.parent)
        target.write_text(content, encoding="utf-8")
    print(f"✅ Wrote {len(pages_out)} page(s) to {out_dir}.")
    return 0


def handle_serve(pargs, settings: EngineSettings) -> int:
    # Imported lazily: the server is optional for the other commands.
    from pagecraft.server.app import create_app

    host = pargs.host or config_manager.get_nested("server.host", "127.0.0.1")
    port = pargs.port or int(config_manager.get_nested("server.port", 5055))
    app = create_app(settings)
    print(f"🚀 pagecraft API on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, use_reloader=False)
    return 0


HANDLERS = {
    "convert": handle_convert,
    "render": handle_render,
    "batch": handle_batch,
    "pages": handle_pages,
    "serve": handle_serve,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        pargs = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)

    if not pargs.command:
        parser.print_help()
        return 0
    if not _apply_overrides(pargs.overrides):
        return 1

    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        config_manager.get_nested("logging.module_levels"),
        config_manager.get_nested("logging.silenced"),
    )

    try:
        settings = EngineSettings.from_config()
        return HANDLERS[pargs.command](pargs, settings)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("I/O error: %s", e, exc_info=True)
        print(f"❌ {e}")
        return 1
    except (ConversionError, ValueError) as e:
        logger.error("Conversion failed: %s", e, exc_info=True)
        print(f"❌ Conversion error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
