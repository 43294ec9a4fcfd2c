"""Render cycle sequencing around the surface's load-complete signal."""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Callable

from margin.converter import Converter
from margin.errors import ConversionError, SessionDisposedError, ZoomUnavailableError
from margin.links import LinkBinding, LinkInterceptor
from margin.session import PreviewState, RenderSession
from margin.surface import RenderSurface
from margin.zoom import zoom_percent_for_dpi

logger = logging.getLogger(__name__)


class RenderState(enum.Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    CONVERTING = "converting"
    COMPOSING = "composing"
    NAVIGATING = "navigating"
    AWAITING_LOAD = "awaiting_load"
    APPLYING = "applying"


class RenderOrchestrator:
    """Drives one preview session: capture, convert, compose, navigate, apply.

    Every `render` replaces the whole document, so scroll position is carried
    over as a percentage and local-file links are re-bound once the new
    document reports load-complete. Each navigation carries a generation
    number; load-complete events for superseded navigations are ignored.
    """

    def __init__(
        self,
        session: RenderSession,
        surface: RenderSurface,
        converter: Converter,
        open_file: Callable[[Path], object],
        dpi: float | None = None,
    ) -> None:
        self.session = session
        self._surface = surface
        self._converter = converter
        self._interceptor = LinkInterceptor(open_file)
        zoom_percent = zoom_percent_for_dpi(dpi) if dpi is not None else 100
        self._preview = PreviewState(zoom_percent=zoom_percent)
        self._zoom_supported = True
        self._state = RenderState.IDLE
        self._disposed = False
        surface.on_load_complete(self._on_load_complete)

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def preview_state(self) -> PreviewState:
        return self._preview

    @property
    def last_bindings(self) -> list[LinkBinding]:
        return self._interceptor.bindings

    @property
    def disposed(self) -> bool:
        return self._disposed

    def render(self, source_text: str) -> int:
        """Start a render cycle and return its generation number.

        Raises `ConversionError` without touching the displayed document when
        the converter fails.
        """
        if self._disposed:
            raise SessionDisposedError(f"Render session for {self.session.source_path} was disposed")

        state_before = self._state
        self._state = RenderState.CAPTURING
        # While a load is pending the surface may already show the new, not yet
        # restored document; the last captured percentage is still current.
        if self._preview.has_document and state_before is not RenderState.AWAITING_LOAD:
            self._preview.position.capture(self._surface.scroll_offset(), self._surface.content_height())

        self._state = RenderState.CONVERTING
        try:
            body = self._converter.to_html(source_text)
        except ConversionError:
            self._state = state_before
            raise
        except Exception as exc:
            self._state = state_before
            raise ConversionError(f"Markdown conversion failed: {exc}") from exc

        self._state = RenderState.COMPOSING
        html_doc = self.session.shell.compose(body)

        self._state = RenderState.NAVIGATING
        self._interceptor.discard()
        self._preview.generation += 1
        generation = self._preview.generation
        self._surface.navigate(html_doc, generation)
        if self._state is RenderState.NAVIGATING and self._preview.generation == generation:
            self._state = RenderState.AWAITING_LOAD
        return generation

    def _on_load_complete(self, generation: int, ok: bool) -> None:
        if self._disposed:
            return
        if generation != self._preview.generation:
            logger.debug("Ignoring load-complete for superseded generation %d", generation)
            return
        if self._state not in (RenderState.NAVIGATING, RenderState.AWAITING_LOAD):
            logger.debug("Ignoring repeated load-complete for generation %d", generation)
            return
        if not ok:
            # A superseded load can report failure before the current one
            # finishes; keep waiting for a successful load of this generation.
            logger.warning("Preview load failed for %s", self.session.source_path)
            self._state = RenderState.AWAITING_LOAD
            return

        self._state = RenderState.APPLYING
        self._preview.has_document = True
        self._apply_zoom()
        offset = self._preview.position.restore(self._surface.content_height())
        self._surface.set_scroll_offset(offset)
        self._interceptor.scan_and_bind(self._surface.anchors())
        self._state = RenderState.IDLE

    def _apply_zoom(self) -> None:
        zoom_percent = self._preview.zoom_percent
        if zoom_percent == 100 or not self._zoom_supported:
            return
        try:
            self._surface.set_zoom_percent(zoom_percent)
        except ZoomUnavailableError as exc:
            self._zoom_supported = False
            logger.debug("Zoom unavailable, previewing at 100%%: %s", exc)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._interceptor.discard()
        self._preview.position.reset()
        self._preview.has_document = False
        self._state = RenderState.IDLE
        self._surface.dispose()
