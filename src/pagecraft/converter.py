# src/pagecraft/converter.py
"""
Public conversion API.

    html_to_document(html)       HTML text -> DocumentTreeResult
    document_to_html(tree)       tree (node, nested dict or flat map) -> HTML text
    html_equivalent(a, b)        do two HTML texts convert to equivalent trees?

All three functions are pure: they keep no state between calls and only read
the configuration when no EngineSettings are passed in.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from pagecraft.dom.builder import DocumentBuilder
from pagecraft.dom.core import LEAF_KINDS, DocumentNode
from pagecraft.dom.equivalence import trees_equivalent
from pagecraft.dom.flat import ROOT_KEY, flatten_document, unflatten_document
from pagecraft.dom.guard import FallbackGuard, GuardReport
from pagecraft.dom.models import Diagnostic, DiagnosticCode, DocumentTreeResult
from pagecraft.dom.normalizer import HTMLNormalizer
from pagecraft.dom.registry import KindRegistry
from pagecraft.dom.serializer import DocumentSerializer
from pagecraft.errors import InvalidInput, SerializationFailure
from pagecraft.model import EngineSettings

logger = logging.getLogger(__name__)

KindRegistry.discover()

TreeInput = Union[DocumentNode, Dict[str, Any]]


def _settings(settings: Optional[EngineSettings]) -> EngineSettings:
    return settings if settings is not None else EngineSettings.from_config()


def html_to_document(html: str, settings: Optional[EngineSettings] = None) -> DocumentTreeResult:
    """
    Converts HTML text into a structured document tree.

    Malformed markup, unsupported structures and round-trip divergences never
    fail the call: they are absorbed into OpaqueHTML nodes and reported as
    diagnostics on the result.

    Raises:
        InvalidInput: `html` is not a string or holds only whitespace.
    """
    if not isinstance(html, str):
        raise InvalidInput(f"Expected HTML text, got {type(html).__name__}")
    if not html.strip():
        raise InvalidInput("HTML input is empty")

    settings = _settings(settings)
    normalized = HTMLNormalizer(settings).normalize(html)
    output = DocumentBuilder(settings).build(normalized)

    if normalized.degraded:
        report = GuardReport(root=output.root)
    else:
        report = FallbackGuard(settings).enforce(normalized, output)

    diagnostics = []
    if normalized.recovered:
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.MALFORMED_INPUT_RECOVERED,
            message="Malformed markup was repaired by the parser",
        ))
    if normalized.degraded:
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.INPUT_DEGRADED,
            message="The input could not be parsed and is kept as a single opaque block",
        ))
    for name in sorted(set(normalized.stripped)):
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.CONTENT_STRIPPED,
            message=f"Removed denylisted {'attribute' if name.startswith('@') else 'element'}",
            tag=name,
        ))
    for name in output.unsupported:
        diagnostics.append(Diagnostic(
            code=DiagnosticCode.UNSUPPORTED_STRUCTURE,
            message="Element kept as opaque HTML",
            tag=name,
        ))
    if report.demoted_count:
        message = (
            "The whole body is kept as opaque HTML" if report.whole_body
            else f"{report.demoted_count} subtree(s) kept as opaque HTML to preserve the round trip"
        )
        diagnostics.append(Diagnostic(code=DiagnosticCode.SUBTREE_DEMOTED, message=message))
        logger.info(message)

    return DocumentTreeResult(
        root=report.root,
        demoted=report.demoted_count > 0,
        demoted_count=report.demoted_count,
        recovered=normalized.recovered,
        degraded=normalized.degraded,
        unsupported=list(output.unsupported),
        stripped=list(normalized.stripped),
        guard_passes=report.passes,
        diagnostics=diagnostics,
    )


def load_tree(tree: TreeInput) -> DocumentNode:
    """Accepts a DocumentNode, a nested node dict or flat builder data."""
    if isinstance(tree, DocumentNode):
        return tree
    if not isinstance(tree, dict):
        raise SerializationFailure(f"Cannot render a {type(tree).__name__}")
    if ROOT_KEY in tree:
        return unflatten_document(tree)
    return _load_nested(tree)


def _load_nested(data: Dict[str, Any]) -> DocumentNode:
    """Validates nested node dicts one node at a time; depth is bounded by memory, not the stack."""
    root: Optional[DocumentNode] = None
    stack: List[Tuple[Any, Optional[DocumentNode]]] = [(data, None)]
    while stack:
        record, parent = stack.pop()
        if not isinstance(record, dict):
            raise SerializationFailure(f"Invalid document tree: expected a node object, got {type(record).__name__}")
        children = record.get("children") or []
        if not isinstance(children, list):
            raise SerializationFailure("Invalid document tree: 'children' must be a list")
        try:
            node = DocumentNode.model_validate({k: v for k, v in record.items() if k != "children"})
        except ValidationError as e:
            raise SerializationFailure(f"Invalid document tree: {e}") from e
        if node.kind in LEAF_KINDS and children:
            raise SerializationFailure(f"{node.kind.value} node {node.id} cannot have children")

        if parent is None:
            root = node
        else:
            parent.children.append(node)
        stack.extend((child, node) for child in reversed(children))
    return root


def _node_data(node: DocumentNode) -> Dict[str, Any]:
    data = node.model_dump(mode="json", by_alias=True, exclude={"children"})
    data["children"] = []
    return data


def export_tree(root: DocumentNode, flat: bool = False) -> Dict[str, Any]:
    """JSON-ready tree data: nested node dicts, or the flat builder map when `flat` is set."""
    if flat:
        return flatten_document(root)

    exported = _node_data(root)
    stack: List[Tuple[DocumentNode, Dict[str, Any]]] = [(root, exported)]
    while stack:
        node, data = stack.pop()
        for child in node.children:
            child_data = _node_data(child)
            data["children"].append(child_data)
            stack.append((child, child_data))
    return exported


def document_to_html(
        tree: TreeInput,
        settings: Optional[EngineSettings] = None,
        full_document: bool = False,
) -> str:
    """
    Renders a document tree as HTML.

    Raises:
        SerializationFailure: the tree breaks the node contract (unknown kind,
        nested root, shared or cyclic nodes, invalid props).
    """
    node = load_tree(tree)
    return DocumentSerializer(_settings(settings)).serialize(node, full_document=full_document)


def html_equivalent(a: str, b: str, settings: Optional[EngineSettings] = None) -> bool:
    """True when both HTML texts convert to equivalent document trees."""
    settings = _settings(settings)
    first = html_to_document(a, settings).root
    second = html_to_document(b, settings).root
    return trees_equivalent(first, second)
