# file: src/pagecraft/core/utils/parallel_workers.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pagecraft.converter import export_tree, html_to_document
from pagecraft.errors import ConversionError
from pagecraft.model import EngineSettings

logger = logging.getLogger(__name__)


def convert_file_worker(
    path: str,
    settings_data: Dict[str, Any],
    flat: bool = False,
) -> Optional[str]:
    """
    Worker function converting one HTML file.
    Returns a JSON string with the tree and its diagnostics (or None on error).
    """
    source = Path(path)
    try:
        html = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"WORKER ERROR reading {source}: {e}")
        return None

    try:
        settings = EngineSettings(**settings_data)
        result = html_to_document(html, settings)
        out = {
            "source": source.name,
            "tree": export_tree(result.root, flat=flat),
            "demoted": result.demoted,
            "degraded": result.degraded,
            "diagnostics": [d.model_dump(mode="json") for d in result.diagnostics],
        }
        # Serialized to JSON to keep pickling cheap across spawn-based pools
        return json.dumps(out, ensure_ascii=False)

    except ConversionError as e:
        logger.warning(f"WORKER skip {source}: {e}")
        return None
    except Exception as e:
        logger.error(f"WORKER ERROR converting {source}: {e}", exc_info=True)
        return None
