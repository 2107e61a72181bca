import logging

from flask import Blueprint, current_app, jsonify, request

from pagecraft.converter import document_to_html, export_tree, html_to_document
from pagecraft.errors import InvalidInput, SerializationFailure
from pagecraft.model import EngineSettings

logger = logging.getLogger(__name__)

convert_router = Blueprint('convert_router', __name__)


# --- HELPER FUNCTION ---

def get_engine_settings() -> EngineSettings:
    """Retrieves the engine settings from the Flask application context."""
    settings = current_app.config.get('ENGINE_SETTINGS')
    if settings is None:
        raise RuntimeError("EngineSettings are not set in app.config['ENGINE_SETTINGS']")
    return settings


# --- API ROUTES ---

@convert_router.route('/health', methods=['GET'])
def health():
    return jsonify({"status": "ok"})


@convert_router.route('/convert', methods=['POST'])
def convert():
    """
    HTML -> document tree.
    Body: {"html": "...", "flat": false}. Returns the tree plus diagnostics.
    """
    payload = request.get_json(silent=True) or {}
    html = payload.get('html')
    flat = bool(payload.get('flat', False))

    try:
        result = html_to_document(html, get_engine_settings())
        tree = export_tree(result.root, flat=flat)
    except InvalidInput as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        logger.error(f"Error converting HTML: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify({
        "tree": tree,
        "demoted": result.demoted,
        "demotedCount": result.demoted_count,
        "recovered": result.recovered,
        "degraded": result.degraded,
        "hasWarnings": result.has_warnings,
        "diagnostics": [d.model_dump(mode="json") for d in result.diagnostics],
    })


@convert_router.route('/render', methods=['POST'])
def render():
    """
    Document tree -> HTML.
    Body: {"tree": {...}, "fullDocument": false}. The tree may be nested or flat.
    """
    payload = request.get_json(silent=True) or {}
    tree = payload.get('tree')
    if tree is None:
        return jsonify({"error": "Missing required field 'tree'"}), 400

    try:
        html = document_to_html(tree, get_engine_settings(), full_document=bool(payload.get('fullDocument', False)))
    except SerializationFailure as e:
        return jsonify({"error": str(e)}), 422
    except Exception as e:
        logger.error(f"Error rendering tree: {e}", exc_info=True)
        return jsonify({"error": str(e)}), 500

    return jsonify({"html": html})
