"""Interfaces the rendering surface exposes to the preview engine."""

from __future__ import annotations

from typing import Callable, Iterable, Protocol

FILE_SCHEME = "file"

LoadCompleteCallback = Callable[[int, bool], None]
ClickHandler = Callable[[], None]


class Anchor(Protocol):
    """One link element of the currently displayed document."""

    href: str
    scheme: str
    path: str

    def set_title(self, text: str) -> None: ...
    def on_click(self, handler: ClickHandler) -> None: ...


class RenderSurface(Protocol):
    """Embedded HTML view driven by `RenderOrchestrator`.

    `navigate` fully replaces the displayed document. The surface reports the
    end of each navigation through the `on_load_complete` callback with the
    generation passed to `navigate`, so stale loads can be told apart.
    """

    def navigate(self, html_doc: str, generation: int) -> None: ...
    def on_load_complete(self, callback: LoadCompleteCallback) -> None: ...
    def scroll_offset(self) -> float: ...
    def set_scroll_offset(self, offset: float) -> None: ...
    def content_height(self) -> float: ...
    def set_zoom_percent(self, percent: int) -> None: ...
    def anchors(self) -> Iterable[Anchor]: ...
    def dispose(self) -> None: ...
