# src/pagecraft/dom/guard.py
import logging
from typing import Dict, List, Set

from bs4 import Tag
from pydantic import BaseModel

from pagecraft.model import EngineSettings
from .builder import DocumentBuilder
from .core import DocumentNode, NodeKind
from .equivalence import find_divergences, tree_words, visible_words
from .models import BuildOutput, NormalizedDocument
from .normalizer import HTMLNormalizer
from .serializer import DocumentSerializer

logger = logging.getLogger(__name__)


class GuardReport(BaseModel):
    root: DocumentNode
    demoted_count: int = 0
    passes: int = 0
    whole_body: bool = False


class FallbackGuard:
    """
    Ensures a built tree survives a serialize -> parse -> build round trip.

    Every pass demotes the first diverging node of each path to OpaqueHTML
    holding its original markup. Each demotion removes at least one
    classified node, so the loop reaches a fixed point; if it does not within
    `max_guard_passes`, the whole body becomes a single opaque fragment.
    """

    def __init__(self, settings: EngineSettings):
        self.settings = settings
        self.normalizer = HTMLNormalizer(settings)
        self.builder = DocumentBuilder(settings)
        self.serializer = DocumentSerializer(settings)

    def enforce(self, normalized: NormalizedDocument, output: BuildOutput) -> GuardReport:
        root = output.root
        sources = output.sources
        demoted_count = 0
        passes = 0
        converged = False

        while passes < self.settings.max_guard_passes:
            passes += 1
            markup = self.serializer.serialize(root, full_document=True)
            reparsed = self.normalizer.normalize(markup)
            if reparsed.degraded:
                break
            rebuilt = self.builder.build(reparsed).root

            divergence = find_divergences(root, rebuilt)
            if divergence.equivalent:
                converged = True
                break
            if divergence.root_level:
                logger.info(f"Round trip diverged at the document root (pass {passes})")
                break

            demoted_count += self._demote(root, set(divergence.offenders), sources)
            logger.info(f"Guard pass {passes}: demoted {len(divergence.offenders)} subtree(s) to opaque HTML")

        if converged and tree_words(root) != visible_words(normalized.body):
            logger.warning("Visible text changed during conversion, keeping the body verbatim")
            converged = False

        if not converged:
            self._demote_body(root, normalized.body)
            demoted_count += 1
            return GuardReport(root=root, demoted_count=demoted_count, passes=passes, whole_body=True)

        return GuardReport(root=root, demoted_count=demoted_count, passes=passes)

    @staticmethod
    def _demote(root: DocumentNode, offenders: Set[str], sources: Dict[str, Tag]) -> int:
        """Replaces every offender with an opaque copy of its source markup, outermost first."""
        demoted = 0
        stack: List[DocumentNode] = [root]
        while stack:
            node = stack.pop()
            for index, child in enumerate(node.children):
                if child.id in offenders:
                    node.children[index] = DocumentNode(
                        kind=NodeKind.OPAQUE_HTML, raw_content=str(sources[child.id])
                    )
                    demoted += 1
                else:
                    stack.append(child)
        return demoted

    @staticmethod
    def _demote_body(root: DocumentNode, body: Tag) -> None:
        root.children = [
            DocumentNode(kind=NodeKind.OPAQUE_HTML, raw_content=body.decode_contents())
        ]
