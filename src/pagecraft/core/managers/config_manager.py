# src/pagecraft/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, List, Optional

from pagecraft.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

TRUE_WORDS = ("1", "true", "yes", "on")


class ConfigManager:
    """
    Process-wide holder of the pagecraft settings.

    The bundled settings.json is read once; `--set` style overrides only
    change the in-memory copy and disappear on `reset()`. Engine code never
    reads this directly: it receives an EngineSettings built from the
    'engine' section.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._config = {}
            instance._overrides = []
            cls._instance = instance
            instance.reset()
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        return self._config

    def section(self, name: str) -> Dict[str, Any]:
        """A shallow copy of a top-level section; {} when it is missing or not a mapping."""
        value = self._config.get(name)
        return dict(value) if isinstance(value, dict) else {}

    @property
    def overrides(self) -> List[str]:
        """Key paths changed in memory since the last reset, in order."""
        return list(self._overrides)

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """Looks up a dotted path such as 'engine.max_guard_passes'."""
        node: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return default if node is None else node

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a dotted path in memory, creating missing sections.

        Strings are cast to the type of the value they replace: 'false' for a
        bool, '10' for an int and 'a,b' for a list. Returns False when the
        path runs through a non-section value.
        """
        *parents, leaf = key_path.split('.')
        target = self._config
        for key in parents:
            target = target.setdefault(key, {})
            if not isinstance(target, dict):
                logger.error("Cannot set '%s': '%s' is not a section.", key_path, key)
                return False

        target[leaf] = self._cast(key_path, target.get(leaf), value)
        self._overrides.append(key_path)
        logger.info("Configuration updated: %s = %r", key_path, target[leaf])
        return True

    @staticmethod
    def _cast(key_path: str, current: Any, value: Any) -> Any:
        if current is None or isinstance(current, dict) or not isinstance(value, str):
            return value
        try:
            if isinstance(current, bool):
                return value.strip().lower() in TRUE_WORDS
            if isinstance(current, list):
                return [item.strip() for item in value.split(',') if item.strip()]
            return type(current)(value)
        except (TypeError, ValueError):
            logger.warning("'%s' expects %s, keeping %r as text.", key_path, type(current).__name__, value)
            return value

    def reset(self) -> None:
        """Drops in-memory overrides and reloads settings.json."""
        self._overrides = []
        settings_file = PathUtils.get_settings_file()
        if not settings_file.exists():
            logger.warning("No settings file at %s, running with an empty configuration.", settings_file)
            self._config = {}
            return
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Could not read %s: %s", settings_file, e, exc_info=True)
            loaded = {}
        self._config = loaded if isinstance(loaded, dict) else {}
        logger.debug("Loaded configuration from %s", settings_file)


config_manager = ConfigManager()
