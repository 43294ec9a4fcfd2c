"""Static HTML shell that wraps each rendered markdown body."""

from __future__ import annotations

import html
from dataclasses import dataclass
from pathlib import Path

BODY_TOKEN = "__MARGIN_BODY_HTML__"


@dataclass(frozen=True)
class TemplateShell:
    """HTML document with one substitution point for the rendered body."""

    base_href: str
    stylesheet_href: str
    script_href: str
    text: str

    def compose(self, body_html: str) -> str:
        # Split once so a body that happens to contain the token is left alone.
        head, _, tail = self.text.partition(BODY_TOKEN)
        return f"{head}{body_html}{tail}"


def directory_base_href(source_path: Path) -> str:
    """Return the `file:` URL of the source's directory, with trailing slash."""
    folder = Path(source_path).expanduser().resolve().parent
    return f"{folder.as_uri().rstrip('/')}/"


def build_template_shell(
    source_path: Path,
    install_dir: Path,
    stylesheet: str = "highlight.css",
    script: str = "prism.js",
) -> TemplateShell:
    """Build the shell once for `source_path`.

    Asset files are not required to exist; unresolved stylesheet or script
    links are left to the rendering surface.
    """
    base_href = directory_base_href(source_path)
    assets = Path(install_dir).expanduser().resolve()
    stylesheet_href = (assets / stylesheet).as_uri()
    script_href = (assets / script).as_uri()
    title = html.escape(Path(source_path).name or "Markdown Preview")

    text = f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta http-equiv="X-UA-Compatible" content="IE=Edge"/>
  <meta charset="utf-8"/>
  <base href="{html.escape(base_href, quote=True)}"/>
  <title>{title}</title>
  <link rel="stylesheet" href="{html.escape(stylesheet_href, quote=True)}"/>
</head>
<body class="markdown-body">
{BODY_TOKEN}
<script src="{html.escape(script_href, quote=True)}" async defer></script>
</body>
</html>
"""
    return TemplateShell(base_href, stylesheet_href, script_href, text)
