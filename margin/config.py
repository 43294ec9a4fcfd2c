"""Preview configuration from environment variables and CLI overrides."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from margin.converter import DEFAULT_EXTENSIONS, parse_extensions
from margin.errors import ConfigError

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_ASSETS_DIR = PACKAGE_DIR / "assets"
DEFAULT_WATCH_INTERVAL_MS = 1200
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PreviewConfig:
    assets_dir: Path = DEFAULT_ASSETS_DIR
    stylesheet: str = "highlight.css"
    script: str = "prism.js"
    extensions: frozenset[str] = DEFAULT_EXTENSIONS
    dpi_override: float | None = None
    dpi_compensation: bool = True
    watch_interval_ms: int = DEFAULT_WATCH_INTERVAL_MS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PreviewConfig:
        """Read `MARGIN_*` variables; unset or blank values keep defaults."""
        env = os.environ if environ is None else environ
        config = cls()

        assets_dir = env.get("MARGIN_ASSETS_DIR", "").strip()
        if assets_dir:
            config = replace(config, assets_dir=Path(assets_dir).expanduser())

        extensions = env.get("MARGIN_EXTENSIONS")
        if extensions is not None and extensions.strip():
            config = replace(config, extensions=parse_extensions(extensions.split(",")))

        dpi = env.get("MARGIN_DPI", "").strip()
        if dpi:
            config = replace(config, dpi_override=parse_dpi(dpi))

        compensation = env.get("MARGIN_DPI_COMPENSATION", "").strip().lower()
        if compensation:
            config = replace(config, dpi_compensation=compensation not in _FALSE_VALUES)

        interval = env.get("MARGIN_WATCH_INTERVAL_MS", "").strip()
        if interval:
            config = replace(config, watch_interval_ms=parse_interval(interval))
        return config

    def with_overrides(self, **changes) -> PreviewConfig:
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{key: value for key, value in changes.items() if value is not None})


def parse_dpi(raw: str | float) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid DPI value: {raw!r}") from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"DPI must be a positive number, got {raw!r}")
    return value


def parse_interval(raw: str | int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid watch interval: {raw!r}") from exc
    if value < 100:
        raise ConfigError(f"Watch interval must be at least 100 ms, got {value}")
    return value
