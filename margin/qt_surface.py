"""QtWebEngine implementation of the render surface."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from PySide6.QtCore import QUrl
from PySide6.QtGui import QGuiApplication
from PySide6.QtWebEngineCore import QWebEnginePage, QWebEngineSettings
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QWidget

from margin.errors import ZoomUnavailableError
from margin.surface import ClickHandler, LoadCompleteCallback
from margin.zoom import BASELINE_DPI

logger = logging.getLogger(__name__)

# QWebEngineView.setZoomFactor silently ignores values outside this range.
MIN_ZOOM_FACTOR = 0.25
MAX_ZOOM_FACTOR = 5.0

GENERATION_META = "margin-generation"

_COLLECT_LINKS_JS = """
(() => {
  const meta = document.querySelector('meta[name="margin-generation"]');
  return {
    generation: meta ? Number(meta.content) : null,
    ready: document.readyState === "complete",
    links: Array.from(document.links).map((a, index) => {
      a.setAttribute("data-margin-link", String(index));
      const raw = a.getAttribute("href") || "";
      return {
        index: index,
        href: a.href,
        protocol: raw.startsWith("#") ? "" : a.protocol,
        pathname: a.pathname,
      };
    }),
  };
})();
"""


def _link_key(url: QUrl) -> str:
    return url.adjusted(QUrl.UrlFormattingOption.RemoveFragment).toString()


def tag_generation(html_doc: str, generation: int) -> str:
    """Embed the navigation generation so a finished load can name its document."""
    meta = f'<meta name="{GENERATION_META}" content="{int(generation)}"/>'
    if "<head>" in html_doc:
        return html_doc.replace("<head>", f"<head>\n  {meta}", 1)
    return f"{meta}\n{html_doc}"


def parse_link_report(result) -> tuple[int | None, list[dict]]:
    """Split the page's link report into its generation and link entries.

    The generation is None when the page carries no tag or has not finished
    loading yet.
    """
    if not isinstance(result, dict) or not result.get("ready"):
        return None, []
    raw_generation = result.get("generation")
    try:
        generation = int(raw_generation) if raw_generation is not None else None
    except (TypeError, ValueError):
        generation = None
    links = [item for item in result.get("links") or [] if isinstance(item, dict)]
    return generation, links


def display_dpi(widget: QWidget | None = None) -> float:
    """Horizontal logical DPI of the screen showing `widget`."""
    screen = widget.screen() if widget is not None else None
    if screen is None:
        screen = QGuiApplication.primaryScreen()
    if screen is None:
        return float(BASELINE_DPI)
    return float(screen.logicalDotsPerInchX())


class PreviewPage(QWebEnginePage):
    """Keeps link clicks on local files from navigating the preview away."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.link_handlers: dict[str, ClickHandler] = {}
        self.document_url = QUrl()

    def acceptNavigationRequest(self, url, nav_type, is_main_frame):  # noqa: N802
        if nav_type == QWebEnginePage.NavigationType.NavigationTypeLinkClicked and url.isLocalFile():
            key = _link_key(url)
            if url.hasFragment() and key == _link_key(self.document_url):
                # In-document fragment jump.
                return super().acceptNavigationRequest(url, nav_type, is_main_frame)
            handler = self.link_handlers.get(key)
            if handler is not None:
                handler()
            else:
                logger.info("Blocked navigation to unbound local link: %s", url.toString())
            return False
        return super().acceptNavigationRequest(url, nav_type, is_main_frame)


@dataclass(eq=False)
class WebEngineAnchor:
    """Snapshot of one `<a>` element reported by the page after load."""

    surface: WebEngineSurface = field(repr=False)
    generation: int
    index: int
    href: str
    scheme: str
    path: str

    def set_title(self, text: str) -> None:
        self.surface._run_for_generation(
            self.generation,
            f"""
(() => {{
  const a = document.querySelector('a[data-margin-link="{self.index}"]');
  if (a) a.title = {json.dumps(text)};
}})();
""",
        )

    def on_click(self, handler: ClickHandler) -> None:
        if self.generation != self.surface.generation:
            return
        self.surface.page.link_handlers[_link_key(QUrl(self.href))] = handler


class WebEngineSurface:
    """Drives a `QWebEngineView` for one preview session.

    Load-complete is reported only after the document's anchors have been
    collected, so `anchors()` is populated when the callback runs.
    """

    def __init__(self, view: QWebEngineView, base_url: QUrl) -> None:
        self.view = view
        self.base_url = base_url
        self.page = PreviewPage(view)
        self.page.document_url = base_url
        view.setPage(self.page)

        settings = view.settings()
        settings.setAttribute(QWebEngineSettings.WebAttribute.LocalContentCanAccessFileUrls, True)
        settings.setAttribute(QWebEngineSettings.WebAttribute.JavascriptEnabled, True)

        self.generation = 0
        self._anchors: list[WebEngineAnchor] = []
        self._callbacks: list[LoadCompleteCallback] = []
        self._disposed = False
        view.loadFinished.connect(self._on_load_finished)

    def navigate(self, html_doc: str, generation: int) -> None:
        self.generation = generation
        self._anchors = []
        self.page.link_handlers.clear()
        self.view.setHtml(tag_generation(html_doc, generation), self.base_url)

    def on_load_complete(self, callback: LoadCompleteCallback) -> None:
        self._callbacks.append(callback)

    def scroll_offset(self) -> float:
        return float(self.page.scrollPosition().y())

    def set_scroll_offset(self, offset: float) -> None:
        scroll_json = json.dumps(float(offset))
        # Apply twice (RAF + timeout) because late layout work can override scroll.
        self.page.runJavaScript(
            f"""
(() => {{
  const y = {scroll_json};
  requestAnimationFrame(() => window.scrollTo(0, y));
  setTimeout(() => window.scrollTo(0, y), 60);
}})();
"""
        )

    def content_height(self) -> float:
        return float(self.page.contentsSize().height())

    def set_zoom_percent(self, percent: int) -> None:
        factor = percent / 100
        if not MIN_ZOOM_FACTOR <= factor <= MAX_ZOOM_FACTOR:
            raise ZoomUnavailableError(f"Zoom {percent}% is outside the supported range")
        self.view.setZoomFactor(factor)

    def anchors(self) -> list[WebEngineAnchor]:
        return list(self._anchors)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self.view.loadFinished.disconnect(self._on_load_finished)
        self._callbacks.clear()
        self._anchors = []
        self.page.link_handlers.clear()
        self.view.deleteLater()

    def _on_load_finished(self, ok: bool) -> None:
        if not ok:
            # The failed document cannot be identified; the orchestrator keeps
            # waiting for a successful load of its current generation.
            self._emit(self.generation, False)
            return
        self.page.runJavaScript(_COLLECT_LINKS_JS, self._on_links_collected)

    def _on_links_collected(self, result) -> None:
        if self._disposed:
            return
        # A late loadFinished for a superseded navigation must not be reported
        # as the current document; trust only the generation the page carries.
        generation, links = parse_link_report(result)
        if generation != self.generation:
            logger.debug("Dropping link report for generation %s (current %d)", generation, self.generation)
            return
        self._anchors = [
            WebEngineAnchor(
                self,
                generation,
                int(item.get("index", 0)),
                str(item.get("href") or ""),
                str(item.get("protocol") or ""),
                str(item.get("pathname") or ""),
            )
            for item in links
        ]
        self._emit(generation, True)

    def _emit(self, generation: int, ok: bool) -> None:
        for callback in list(self._callbacks):
            callback(generation, ok)

    def _run_for_generation(self, generation: int, js: str) -> None:
        if self._disposed or generation != self.generation:
            return
        self.page.runJavaScript(js)
