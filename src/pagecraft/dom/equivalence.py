# src/pagecraft/dom/equivalence.py
"""
The equivalence relation between document trees.

Two trees are equivalent when their kinds nest identically, every pair of
classified nodes carries equal props and style, and opaque fragments show the
same visible words as whatever the other side produced in their place.
Node ids never take part in the comparison.
"""
from typing import List, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

from .core import DocumentNode, NodeKind

TEXT_PROP_KINDS = frozenset({NodeKind.TEXT, NodeKind.LINK, NodeKind.BUTTON})


def visible_words(tag: Tag) -> List[str]:
    """Whitespace-separated words of the text a reader sees inside `tag`."""
    pieces = [str(s) for s in tag.descendants if type(s) is NavigableString]
    return " ".join(pieces).split()


def markup_words(markup: str) -> List[str]:
    if not markup:
        return []
    return visible_words(BeautifulSoup(markup, "html.parser", multi_valued_attributes=None))


def tree_words(root: DocumentNode) -> List[str]:
    """Visible words reachable from a tree, in document order."""
    words: List[str] = []
    for node in root.walk():
        if node.kind == NodeKind.OPAQUE_HTML:
            words.extend(markup_words(node.raw_content or ""))
        elif node.kind in TEXT_PROP_KINDS and node.props.get("text"):
            words.extend(node.props["text"].split())
    return words


def is_bare_text(node: DocumentNode) -> bool:
    return node.kind == NodeKind.TEXT and node.props.get("tag") is None


def nodes_match(a: DocumentNode, b: DocumentNode) -> bool:
    """
    Node-local comparison: kind, props, style and number of children. An
    opaque fragment matches whatever the other side shows with the same
    visible words.
    """
    if NodeKind.OPAQUE_HTML in (a.kind, b.kind):
        return tree_words(a) == tree_words(b)
    if a.kind != b.kind:
        return False
    return a.props == b.props and a.style == b.style and len(a.children) == len(b.children)


class Divergence(NamedTuple):
    """
    Outcome of a lockstep comparison: the ids of the nodes to demote and
    whether the divergence reached the root itself.
    """
    offenders: List[str]
    root_level: bool

    @property
    def equivalent(self) -> bool:
        return not self.offenders and not self.root_level


def find_divergences(expected: DocumentNode, actual: DocumentNode) -> Divergence:
    """
    Walks both trees in lockstep and collects the first diverging node on
    every path. Bare text runs and opaque fragments cannot be demoted on
    their own, so their divergence is charged to the parent element.
    """
    offenders: List[str] = []
    root_level = False
    stack: List[Tuple[DocumentNode, DocumentNode, Optional[DocumentNode]]] = [(expected, actual, None)]

    while stack:
        a, b, parent = stack.pop()
        if nodes_match(a, b):
            stack.extend(
                (ca, cb, a) for ca, cb in zip(reversed(a.children), reversed(b.children))
            )
            continue

        blamed = a
        if a.kind == NodeKind.OPAQUE_HTML or is_bare_text(a):
            blamed = parent
        if blamed is None or blamed.kind == NodeKind.ROOT:
            root_level = True
        elif blamed.id not in offenders:
            offenders.append(blamed.id)

    return Divergence(offenders, root_level)


def trees_equivalent(a: DocumentNode, b: DocumentNode) -> bool:
    """Full equivalence: lockstep structure plus identical visible word sequences."""
    return find_divergences(a, b).equivalent and tree_words(a) == tree_words(b)
