"""Rebinding of local-file links after every document replacement."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable
from urllib.parse import unquote

from margin.surface import FILE_SCHEME, Anchor

logger = logging.getLogger(__name__)

MISSING_FILE_TITLE = "The file does not exist"

# `/C:/notes/a.md` style paths produced by `file:///C:/...` URLs.
_DRIVE_URL_PATH = re.compile(r"^/+[A-Za-z]:[/\\]")


@dataclass(frozen=True)
class LinkBinding:
    """A `file:` anchor of the current document wired to the host."""

    anchor: Anchor
    path: Path


def local_path_from_url_path(url_path: str) -> Path:
    """Turn the path part of a `file:` URL into a platform path."""
    decoded = unquote(url_path or "")
    if _DRIVE_URL_PATH.match(decoded):
        decoded = decoded.lstrip("/")
    return Path(os.path.normpath(decoded.replace("/", os.sep)))


class LinkInterceptor:
    """Reroutes clicks on existing local files to `open_file`.

    Bindings only last for one document: the surface replaces every anchor
    object on navigation, so `discard` runs before each replacement and
    `scan_and_bind` after each load.
    """

    def __init__(self, open_file: Callable[[Path], object]) -> None:
        self._open_file = open_file
        self._bindings: list[LinkBinding] = []
        self._bound: set[int] = set()

    @property
    def bindings(self) -> list[LinkBinding]:
        return list(self._bindings)

    def discard(self) -> None:
        self._bindings = []
        self._bound = set()

    def scan_and_bind(self, anchors: Iterable[Anchor]) -> list[LinkBinding]:
        broken = 0
        for anchor in anchors:
            if (anchor.scheme or "").lower().rstrip(":") != FILE_SCHEME:
                continue
            if id(anchor) in self._bound:
                continue

            path = local_path_from_url_path(anchor.path)
            if not path.is_file():
                # Mark and keep going; one dead link must not leave later
                # links unbound.
                anchor.set_title(MISSING_FILE_TITLE)
                broken += 1
                logger.warning("Local link target does not exist: %s", path)
                continue

            anchor.on_click(self._click_handler(path))
            self._bound.add(id(anchor))
            self._bindings.append(LinkBinding(anchor, path))

        logger.debug("Bound %d local links (%d broken)", len(self._bindings), broken)
        return self.bindings

    def _click_handler(self, path: Path) -> Callable[[], None]:
        def handler() -> None:
            self._open_file(path)

        return handler
