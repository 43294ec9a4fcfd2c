"""Per-file session data owned by the render orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from margin.position import PositionTracker
from margin.template import TemplateShell, build_template_shell


@dataclass(frozen=True)
class RenderSession:
    source_path: Path
    shell: TemplateShell

    @classmethod
    def for_file(
        cls,
        source_path: Path,
        install_dir: Path,
        stylesheet: str = "highlight.css",
        script: str = "prism.js",
    ) -> RenderSession:
        source_path = Path(source_path).expanduser()
        return cls(source_path, build_template_shell(source_path, install_dir, stylesheet, script))


@dataclass
class PreviewState:
    """Mutable preview state; `zoom_percent` is fixed when the session starts."""

    zoom_percent: int = 100
    generation: int = 0
    has_document: bool = False
    position: PositionTracker = field(default_factory=PositionTracker)

    @property
    def scroll_percentage(self) -> float:
        return self.position.scroll_percentage

    @property
    def content_height(self) -> float:
        return self.position.content_height
