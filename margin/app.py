"""Tabbed preview window hosting one render session per markdown file."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QTimer, QUrl, Signal
from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import QApplication, QMainWindow, QTabWidget, QVBoxLayout, QWidget

from margin.config import PreviewConfig, parse_dpi
from margin.converter import Converter, MarkdownConverter, parse_extensions
from margin.errors import ConfigError, ConversionError
from margin.orchestrator import RenderOrchestrator
from margin.qt_surface import WebEngineSurface, display_dpi
from margin.session import RenderSession

logger = logging.getLogger(__name__)


class PreviewTab(QWidget):
    """Live preview of one file, re-rendered whenever it changes on disk."""

    statusMessage = Signal(str, int)

    def __init__(self, path: Path, config: PreviewConfig, converter: Converter, open_file, parent=None):
        super().__init__(parent)
        self.path = path
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.view = QWebEngineView(self)
        layout.addWidget(self.view)

        base_url = QUrl.fromLocalFile(f"{path.parent}/")
        self.surface = WebEngineSurface(self.view, base_url)
        session = RenderSession.for_file(path, config.assets_dir, config.stylesheet, config.script)
        dpi = None
        if config.dpi_compensation:
            dpi = config.dpi_override if config.dpi_override is not None else display_dpi(self)
        self.orchestrator = RenderOrchestrator(session, self.surface, converter, open_file, dpi=dpi)

        # On-disk signature of the previewed file, used to detect external edits.
        self._signature: tuple[int, int] | None = None
        self._watch_timer = QTimer(self)
        self._watch_timer.setInterval(config.watch_interval_ms)
        self._watch_timer.timeout.connect(self._on_file_change_watch_tick)
        self._watch_timer.start()

    def refresh(self) -> bool:
        """Render the file's current content; return False when it failed."""
        try:
            stat = self.path.stat()
            markdown_text = self.path.read_text(encoding="utf-8", errors="replace")
            self._signature = (int(stat.st_mtime_ns), int(stat.st_size))
            self.orchestrator.render(markdown_text)
        except (OSError, ConversionError) as exc:
            # The previously displayed document stays in place.
            logger.warning("Preview render failed for %s: %s", self.path, exc)
            self.statusMessage.emit(f"Preview render failed: {exc}", 5000)
            return False
        self.statusMessage.emit(f"Preview rendered: {self.path.name}", 3000)
        return True

    def _on_file_change_watch_tick(self) -> None:
        try:
            stat = self.path.stat()
        except OSError:
            # File may be temporarily inaccessible while an editor saves it.
            return
        current = (int(stat.st_mtime_ns), int(stat.st_size))
        if current == self._signature:
            return
        # Update baseline first so repeated ticks during one save do not
        # trigger duplicate renders.
        self._signature = current
        self.refresh()

    def close_preview(self) -> None:
        self._watch_timer.stop()
        self.orchestrator.dispose()


class PreviewWindow(QMainWindow):
    def __init__(self, config: PreviewConfig):
        super().__init__()
        self.config = config
        self.converter = MarkdownConverter(config.extensions)
        self.setWindowTitle("margin")
        self.resize(960, 1100)

        self.tabs = QTabWidget(self)
        self.tabs.setTabsClosable(True)
        self.tabs.setDocumentMode(True)
        self.tabs.tabCloseRequested.connect(self._close_tab)
        self.setCentralWidget(self.tabs)
        self.statusBar().showMessage("Ready")

    def open_file_in_preview_tab(self, path: Path) -> PreviewTab | None:
        """Focus the tab previewing `path`, opening a new one when needed."""
        resolved = Path(path).expanduser().resolve()
        for index in range(self.tabs.count()):
            tab = self.tabs.widget(index)
            if isinstance(tab, PreviewTab) and tab.path == resolved:
                self.tabs.setCurrentIndex(index)
                return tab
        if not resolved.is_file():
            self.statusBar().showMessage(f"File not found: {resolved}", 5000)
            return None

        tab = PreviewTab(resolved, self.config, self.converter, self._open_from_link, self.tabs)
        tab.statusMessage.connect(self.statusBar().showMessage)
        index = self.tabs.addTab(tab, resolved.name)
        self.tabs.setTabToolTip(index, str(resolved))
        self.tabs.setCurrentIndex(index)
        tab.refresh()
        return tab

    def _open_from_link(self, path: Path) -> None:
        # Defer so the tab is not created from inside a navigation callback.
        QTimer.singleShot(0, lambda target=path: self.open_file_in_preview_tab(target))

    def _close_tab(self, index: int) -> None:
        tab = self.tabs.widget(index)
        self.tabs.removeTab(index)
        if isinstance(tab, PreviewTab):
            tab.close_preview()
            tab.deleteLater()

    def closeEvent(self, event) -> None:  # noqa: N802
        for index in range(self.tabs.count()):
            tab = self.tabs.widget(index)
            if isinstance(tab, PreviewTab):
                tab.close_preview()
        super().closeEvent(event)


def build_config(args: argparse.Namespace, environ=None) -> PreviewConfig:
    """Merge CLI flags over `MARGIN_*` environment settings."""
    config = PreviewConfig.from_env(environ)
    return config.with_overrides(
        dpi_override=parse_dpi(args.dpi) if args.dpi is not None else None,
        dpi_compensation=False if args.no_dpi_compensation else None,
        extensions=parse_extensions(args.extensions.split(",")) if args.extensions else None,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="margin",
        description="Live preview of markdown files with scroll and zoom preservation.",
    )
    parser.add_argument("files", nargs="+", help="Markdown files to preview, one tab each.")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("MARGIN_LOG_LEVEL", "WARNING"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    parser.add_argument("--dpi", default=None, help="Display DPI to compensate for instead of the screen's.")
    parser.add_argument(
        "--no-dpi-compensation",
        action="store_true",
        help="Render at 100%% zoom regardless of display DPI.",
    )
    parser.add_argument("--extensions", default=None, help="Comma-separated markdown extensions to enable.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(levelname)s:%(name)s:%(message)s",
    )

    try:
        config = build_config(args)
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    paths = [Path(raw).expanduser() for raw in args.files]
    for path in paths:
        if not path.is_file():
            print(f"File does not exist: {path}", file=sys.stderr)
            return 2

    app = QApplication(sys.argv[:1])
    app.setApplicationName("margin")
    window = PreviewWindow(config)
    for path in paths:
        window.open_file_in_preview_tab(path)
    window.show()
    return app.exec()
