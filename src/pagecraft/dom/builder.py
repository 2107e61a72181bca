# src/pagecraft/dom/builder.py
import logging
from typing import Dict, List, Optional, Tuple

from bs4 import NavigableString, Tag
from pydantic import ValidationError

from pagecraft.model import EngineSettings
from .classifier import NodeClassifier
from .core import DocumentNode, NodeKind
from .elements.base import HTML_WHITESPACE, collapse_whitespace
from .models import BuildOutput, NormalizedDocument
from .props import ATTRIBUTE_RE
from .registry import KindRegistry
from .styles import StyleExtractor
from .tags import BLOCK_TEXT_TAGS, INLINE_CONTEXT_TAGS

logger = logging.getLogger(__name__)


class DocumentBuilder:
    """
    Builds the structured document tree from a normalized HTML tree.

    Traversal uses an explicit stack, so arbitrarily deep documents never hit
    the interpreter's recursion limit.
    """

    def __init__(self, settings: EngineSettings):
        """Initializes the builder and ensures the KindRegistry is populated."""
        KindRegistry.discover()
        self.settings = settings
        self.classifier = NodeClassifier()
        self.extractor = StyleExtractor(settings)

    def build(self, normalized: NormalizedDocument) -> BuildOutput:
        if normalized.degraded or normalized.body is None:
            opaque = DocumentNode(kind=NodeKind.OPAQUE_HTML, raw_content=normalized.raw)
            root = DocumentNode(kind=NodeKind.ROOT, children=[opaque])
            return BuildOutput(root=root)

        root = self._build_root(normalized)
        sources: Dict[str, Tag] = {}
        unsupported: List[str] = []

        stack: List[Tuple[object, DocumentNode]] = [
            (child, root) for child in reversed(normalized.body.contents)
        ]
        while stack:
            element, parent = stack.pop()

            if isinstance(element, NavigableString):
                text_node = self._build_text_run(element)
                if text_node is not None:
                    parent.children.append(text_node)
                continue
            if not isinstance(element, Tag):
                continue

            node, descend = self._build_element(element, unsupported)
            parent.children.append(node)
            sources[node.id] = element
            if descend:
                stack.extend((child, node) for child in reversed(element.contents))

        if unsupported:
            logger.debug(f"Unsupported structures kept as opaque HTML: {', '.join(unsupported)}")
        return BuildOutput(root=root, sources=sources, unsupported=unsupported)

    # --- Node construction ---

    def _build_root(self, normalized: NormalizedDocument) -> DocumentNode:
        body = normalized.body
        extraction = self.extractor.extract(body)
        props = {
            "head": normalized.head.decode_contents() if normalized.head is not None else "",
            "html_attributes": _valid_attributes(normalized.html_attributes, "html"),
            "class_name": extraction.class_name,
            "attributes": _valid_attributes(
                {k: v for k, v in body.attrs.items() if k not in ("class", "style")}, "body"
            ),
        }
        return DocumentNode(kind=NodeKind.ROOT, props=props, style=extraction.style)

    def _build_element(self, tag: Tag, unsupported: List[str]) -> Tuple[DocumentNode, bool]:
        classification = self.classifier.classify(tag)
        definition = KindRegistry.get(classification.kind)

        if classification.kind == NodeKind.OPAQUE_HTML or definition is None or definition.parser is None:
            if tag.name not in unsupported:
                unsupported.append(tag.name)
            return DocumentNode(kind=NodeKind.OPAQUE_HTML, raw_content=str(tag)), False

        try:
            extraction = self.extractor.extract(tag)
            props = definition.parser(tag, extraction)
            node = DocumentNode(kind=classification.kind, props=props, style=extraction.style)
        except ValidationError as e:
            logger.debug(f"<{tag.name}> does not fit the {classification.kind.value} schema, keeping it opaque: {e}")
            return DocumentNode(kind=NodeKind.OPAQUE_HTML, raw_content=str(tag)), False
        descend = definition.container and tag.find(True, recursive=False) is not None
        return node, descend

    @staticmethod
    def _build_text_run(text: NavigableString) -> Optional[DocumentNode]:
        """
        Bare text between elements. Whitespace-only runs are kept as a single
        space where they separate inline content, and dropped elsewhere.
        """
        if type(text) is not NavigableString:
            return None
        value = collapse_whitespace(str(text))
        if not value.strip(HTML_WHITESPACE):
            if not _whitespace_is_significant(text):
                return None
            value = " "
        return DocumentNode(kind=NodeKind.TEXT, props={"text": value})


def _valid_attributes(attributes: Dict[str, str], owner: str) -> Dict[str, str]:
    valid = {name: value for name, value in attributes.items() if ATTRIBUTE_RE.match(name)}
    for name in attributes.keys() - valid.keys():
        logger.warning(f"Dropped unsupported <{owner}> attribute '{name}'")
    return valid


def _whitespace_is_significant(text: NavigableString) -> bool:
    parent = text.parent
    if parent is not None and parent.name in INLINE_CONTEXT_TAGS:
        return True
    previous, following = text.previous_sibling, text.next_sibling
    if previous is None or following is None:
        return False
    return not (_is_block(previous) and _is_block(following))


def _is_block(element) -> bool:
    return isinstance(element, Tag) and element.name in BLOCK_TEXT_TAGS
