# src/pagecraft/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package paths.
    """

    @staticmethod
    def get_package_root() -> Path:
        """Returns the absolute path of the installed 'pagecraft' package."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_settings_file() -> Path:
        """Returns the path of the bundled settings.json file."""
        return PathUtils.get_package_root() / "settings.json"

    @staticmethod
    def ensure_dir(path: Path) -> Path:
        """
        Creates the directory (and parents) if it doesn't exist.
        Returns the path for chaining.
        """
        path.mkdir(parents=True, exist_ok=True)
        return path
