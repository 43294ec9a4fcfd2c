"""margin: live markdown preview with scroll, zoom and link preservation."""

from __future__ import annotations

from margin.converter import DEFAULT_EXTENSIONS, KNOWN_EXTENSIONS, Converter, MarkdownConverter
from margin.errors import (
    ConfigError,
    ConversionError,
    MarginError,
    SessionDisposedError,
    ZoomUnavailableError,
)
from margin.links import LinkBinding, LinkInterceptor
from margin.orchestrator import RenderOrchestrator, RenderState
from margin.position import PositionTracker, capture_percentage, restore_offset
from margin.session import PreviewState, RenderSession
from margin.template import TemplateShell, build_template_shell
from margin.zoom import zoom_percent_for_dpi

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_EXTENSIONS",
    "KNOWN_EXTENSIONS",
    "ConfigError",
    "ConversionError",
    "Converter",
    "LinkBinding",
    "LinkInterceptor",
    "MarginError",
    "MarkdownConverter",
    "PositionTracker",
    "PreviewState",
    "RenderOrchestrator",
    "RenderSession",
    "RenderState",
    "SessionDisposedError",
    "TemplateShell",
    "ZoomUnavailableError",
    "build_template_shell",
    "capture_percentage",
    "restore_offset",
    "zoom_percent_for_dpi",
]
