# src/pagecraft/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Optional

from .core import KindDefinition, NodeKind

logger = logging.getLogger(__name__)


class KindRegistry:
    """
    Central registry of node kinds.

    Dynamically discovers the modules of the 'pagecraft.dom.elements' package
    and registers every KindDefinition they expose, either as `DEFINITION` or
    as a `DEFINITIONS` list.
    """

    _definitions: Dict[NodeKind, KindDefinition] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        if cls._loaded:
            return

        try:
            import pagecraft.dom.elements as elements_pkg

            for _, name, _ in pkgutil.iter_modules(elements_pkg.__path__):
                full_name = f"pagecraft.dom.elements.{name}"
                try:
                    module = importlib.import_module(full_name)
                except ImportError as e:
                    logger.error(f"Error loading module {name}: {e}")
                    continue

                definitions = list(getattr(module, "DEFINITIONS", []))
                if isinstance(getattr(module, "DEFINITION", None), KindDefinition):
                    definitions.append(module.DEFINITION)
                for defn in definitions:
                    cls._definitions[defn.kind] = defn
                    logger.debug(f"Kind loaded: {defn.kind.value}")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find elements package: {e}")

    @classmethod
    def get(cls, kind) -> Optional[KindDefinition]:
        """Retrieves the definition of a kind, or None for kinds nobody registered."""
        cls.discover()
        try:
            return cls._definitions.get(NodeKind(kind))
        except ValueError:
            return None

    @classmethod
    def kinds(cls) -> List[NodeKind]:
        cls.discover()
        return sorted(cls._definitions, key=lambda kind: kind.value)
