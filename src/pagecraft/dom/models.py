# src/pagecraft/dom/models.py
from enum import Enum
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict, Field

from .core import DocumentNode


class DiagnosticCode(str, Enum):
    """Recoverable conditions reported alongside a conversion result."""
    MALFORMED_INPUT_RECOVERED = "MalformedInputRecovered"
    UNSUPPORTED_STRUCTURE = "UnsupportedStructure"
    SUBTREE_DEMOTED = "SubtreeDemoted"
    CONTENT_STRIPPED = "ContentStripped"
    INPUT_DEGRADED = "InputDegraded"


class Diagnostic(BaseModel):
    code: DiagnosticCode
    message: str
    tag: Optional[str] = None


class NormalizedDocument(BaseModel):
    """
    Output of the HTML normalizer: a sanitized tree that always has
    <html>, <head> and <body>, plus what was repaired or removed on the way.

    When `degraded` is set the parser failed and `soup`/`body` are None; only
    `raw` is available.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    raw: str
    soup: Optional[BeautifulSoup] = None
    head: Optional[Tag] = None
    body: Optional[Tag] = None
    html_attributes: Dict[str, str] = Field(default_factory=dict)
    has_doctype: bool = False
    wrapped: bool = False
    recovered: bool = False
    degraded: bool = False
    stripped: List[str] = Field(default_factory=list)
    comments_dropped: int = 0


class BuildOutput(BaseModel):
    """
    Output of the tree builder. `sources` maps node ids to the normalized
    element each node was built from; the fallback guard uses it to capture
    a subtree's markup when demoting it.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    root: DocumentNode
    sources: Dict[str, Tag] = Field(default_factory=dict)
    unsupported: List[str] = Field(default_factory=list)


class DocumentTreeResult(BaseModel):
    """
    Result of the forward conversion (HTML -> structured document tree).
    """
    root: DocumentNode
    demoted: bool = False
    demoted_count: int = 0
    recovered: bool = False
    degraded: bool = False
    unsupported: List[str] = Field(default_factory=list)
    stripped: List[str] = Field(default_factory=list)
    guard_passes: int = 0
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        """True when the editor should warn that parts of the page are not editable."""
        return self.demoted or bool(self.unsupported) or self.degraded
