# ============================================
# file: src/pagecraft/model.py
# ============================================
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pagecraft.core.managers.config_manager import config_manager


class EngineSettings(BaseModel):
    """
    Tunable policy for the conversion engine.

    The hosting application owns the security denylist and the breakpoint
    table; both are passed explicitly into every conversion call.
    """
    model_config = ConfigDict(frozen=True)

    denied_tags: Tuple[str, ...] = (
        "script", "iframe", "object", "embed", "applet", "frame", "frameset", "base",
    )
    denied_attributes: Tuple[str, ...] = ("srcdoc", "formaction")
    denied_attribute_prefixes: Tuple[str, ...] = ("on",)
    strip_javascript_urls: bool = True
    breakpoints: Dict[str, int] = Field(
        default_factory=lambda: {"mobile": 0, "tablet": 768, "desktop": 1024}
    )
    rem_px: float = Field(default=16.0, gt=0)
    max_guard_passes: int = Field(default=8, ge=1)

    @field_validator("denied_tags", "denied_attributes", "denied_attribute_prefixes", mode="before")
    @classmethod
    def lowercase_names(cls, value):
        if isinstance(value, str):
            value = [value]
        return tuple(str(v).strip().lower() for v in value if str(v).strip())

    @field_validator("breakpoints")
    @classmethod
    def check_breakpoints(cls, value: Dict[str, int]) -> Dict[str, int]:
        if not value:
            raise ValueError("at least one breakpoint is required")
        widths = list(value.values())
        if any(w < 0 for w in widths):
            raise ValueError("breakpoint widths must be >= 0")
        if len(set(widths)) != len(widths):
            raise ValueError("breakpoint widths must be unique")
        return value

    @property
    def breakpoint_order(self) -> List[str]:
        """Breakpoint names sorted by ascending min-width; the first one is the base."""
        return sorted(self.breakpoints, key=lambda name: self.breakpoints[name])

    @property
    def base_breakpoint(self) -> str:
        return self.breakpoint_order[0]

    def breakpoint_for_width(self, width: int) -> Optional[str]:
        """Returns the breakpoint whose min-width is exactly `width`, if any."""
        for name, bp_width in self.breakpoints.items():
            if bp_width == width:
                return name
        return None

    @classmethod
    def from_config(cls) -> "EngineSettings":
        """Builds settings from the 'engine' section of settings.json."""
        return cls(**config_manager.section("engine"))


class Page(BaseModel):
    """A single page of a (possibly multi-page) generated site."""
    path: str
    content: str


class SiteContent(BaseModel):
    """
    Stored site content as handed to the static site server.
    Either `pages` (multi-page mode) or `html` (single-page mode) is set.
    """
    pages: Optional[List[Page]] = None
    html: Optional[str] = None
