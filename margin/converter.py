"""Markdown to HTML conversion with a fixed set of named extensions."""

from __future__ import annotations

import html
from typing import Iterable, Protocol

from markdown_it import MarkdownIt
from mdit_py_emoji import emoji_plugin
from mdit_py_plugins.anchors import anchors_plugin
from mdit_py_plugins.container import container_plugin
from mdit_py_plugins.deflist import deflist_plugin
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from margin.errors import ConfigError, ConversionError

KNOWN_EXTENSIONS = frozenset(
    {
        "tables",
        "strikethrough",
        "footnotes",
        "deflists",
        "tasklists",
        "math",
        "front_matter",
        "heading_anchors",
        "containers",
        "emoji",
    }
)
DEFAULT_EXTENSIONS = KNOWN_EXTENSIONS
CONTAINER_NAMES = ("note", "tip", "important", "warning", "caution")


class Converter(Protocol):
    """Turns markdown source into an HTML body fragment."""

    def to_html(self, source_text: str) -> str: ...


def parse_extensions(names: Iterable[str]) -> frozenset[str]:
    """Validate extension names against `KNOWN_EXTENSIONS`."""
    selected = frozenset(name.strip().lower() for name in names if name and name.strip())
    unknown = sorted(selected - KNOWN_EXTENSIONS)
    if unknown:
        raise ConfigError(f"Unknown markdown extension(s): {', '.join(unknown)}")
    return selected


class MarkdownConverter:
    """markdown-it-py pipeline built once from an extension configuration."""

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions = parse_extensions(extensions)
        self._md = MarkdownIt("commonmark", {"html": True, "linkify": False, "typographer": True})

        if "tables" in self.extensions:
            self._md.enable("table")
        if "strikethrough" in self.extensions:
            self._md.enable("strikethrough")
        if "front_matter" in self.extensions:
            self._md.use(front_matter_plugin)
        if "footnotes" in self.extensions:
            self._md.use(footnote_plugin)
        if "deflists" in self.extensions:
            self._md.use(deflist_plugin)
        if "tasklists" in self.extensions:
            self._md.use(tasklists_plugin)
        if "heading_anchors" in self.extensions:
            self._md.use(anchors_plugin, max_level=6)
        if "containers" in self.extensions:
            for name in CONTAINER_NAMES:
                self._md.use(container_plugin, name)
        if "emoji" in self.extensions:
            self._md.use(emoji_plugin)
        if "math" in self.extensions:
            # Parse $...$ / $$...$$ before emphasis rules so TeX survives
            # untouched for a client-side typesetter.
            self._md.use(dollarmath_plugin)
            self._md.add_render_rule("math_inline", _render_math_inline)
            self._md.add_render_rule("math_block", _render_math_block)

    def to_html(self, source_text: str) -> str:
        try:
            return self._md.render(source_text or "")
        except Exception as exc:
            raise ConversionError(f"Markdown conversion failed: {exc}") from exc


def _render_math_inline(self, tokens, idx, options, env):
    return f"${html.escape(tokens[idx].content)}$"


def _render_math_block(self, tokens, idx, options, env):
    body = (tokens[idx].content or "").strip("\n")
    return f'<div class="math-block">$$\n{html.escape(body)}\n$$</div>\n'
