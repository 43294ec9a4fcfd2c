"""Exception types raised by the preview engine."""

from __future__ import annotations


class MarginError(Exception):
    """Base class for preview engine errors."""


class ConfigError(MarginError, ValueError):
    """Raised for invalid configuration values."""


class ConversionError(MarginError):
    """Raised when markdown conversion fails; the displayed document is kept."""


class ZoomUnavailableError(MarginError):
    """Raised by a surface that cannot apply a zoom percentage."""


class SessionDisposedError(MarginError, RuntimeError):
    """Raised when a disposed render session is asked to render."""
