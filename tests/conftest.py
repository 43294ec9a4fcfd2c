from __future__ import annotations

from pathlib import Path

import pytest

from margin.errors import ZoomUnavailableError
from margin.session import RenderSession


class FakeAnchor:
    def __init__(self, href: str, scheme: str = "file", path: str | None = None):
        self.href = href
        self.scheme = scheme
        self.path = path if path is not None else href.split("://", 1)[-1].split("#", 1)[0]
        self.title: str | None = None
        self.handlers = []

    def set_title(self, text: str) -> None:
        self.title = text

    def on_click(self, handler) -> None:
        self.handlers.append(handler)

    def click(self) -> None:
        for handler in self.handlers:
            handler()


class FakeSurface:
    """In-memory surface; each navigate replaces the document and its anchors."""

    def __init__(self, content_height: float = 1000.0, zoom_supported: bool = True):
        self.documents: list[tuple[str, int]] = []
        self.callbacks = []
        self.offset = 0.0
        self.height = content_height
        self.zoom_calls: list[int] = []
        self.scroll_calls: list[float] = []
        self.next_anchors: list[FakeAnchor] = []
        self.current_anchors: list[FakeAnchor] = []
        self.zoom_supported = zoom_supported
        self.disposed = False

    @property
    def current_html(self) -> str | None:
        return self.documents[-1][0] if self.documents else None

    def navigate(self, html_doc: str, generation: int) -> None:
        self.documents.append((html_doc, generation))
        self.offset = 0.0
        self.current_anchors = []

    def on_load_complete(self, callback) -> None:
        self.callbacks.append(callback)

    def finish_load(self, generation: int | None = None, ok: bool = True, anchors=None) -> None:
        if generation is None:
            generation = self.documents[-1][1]
        self.current_anchors = list(anchors if anchors is not None else self.next_anchors)
        for callback in list(self.callbacks):
            callback(generation, ok)

    def scroll_offset(self) -> float:
        return self.offset

    def set_scroll_offset(self, offset: float) -> None:
        self.scroll_calls.append(offset)
        self.offset = offset

    def content_height(self) -> float:
        return self.height

    def set_zoom_percent(self, percent: int) -> None:
        if not self.zoom_supported:
            raise ZoomUnavailableError("no zoom")
        self.zoom_calls.append(percent)

    def anchors(self):
        return list(self.current_anchors)

    def dispose(self) -> None:
        self.disposed = True


class FakeConverter:
    def __init__(self):
        self.calls: list[str] = []
        self.fail_with: Exception | None = None

    def to_html(self, source_text: str) -> str:
        self.calls.append(source_text)
        if self.fail_with is not None:
            raise self.fail_with
        return f"<p>{source_text}</p>"


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "doc.md"
    path.write_text("# Title\n", encoding="utf-8")
    return path


@pytest.fixture
def session(source_file: Path, tmp_path: Path) -> RenderSession:
    return RenderSession.for_file(source_file, tmp_path / "assets")


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()
