from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AssetKind(StrEnum):
    JS = "js"
    CSS = "css"

    @property
    def content_type(self) -> str:
        return "application/javascript" if self is AssetKind.JS else "text/css"

    @property
    def missing_placeholder(self) -> str:
        # Comments keep the response valid as a script or stylesheet include
        if self is AssetKind.JS:
            return "// Widget JS not found"
        return "/* Widget CSS not found */"

    @property
    def error_placeholder(self) -> str:
        if self is AssetKind.JS:
            return "// Error loading widget JS"
        return "/* Error loading widget CSS */"


@dataclass
class WidgetFiles:
    """Filenames discovered in the widget site's index.html."""

    js: str = ""
    css: str = ""
    discovered_at: float | None = None  # time.monotonic() of last successful discovery

    def filename_for(self, kind: AssetKind) -> str:
        return self.js if kind is AssetKind.JS else self.css
