"""Structured error classes for md2word.

Error Hierarchy:
    Md2WordError (base)
    ├── RenderError (a single formula/graphic could not be rasterized)
    │   ├── SandboxLaunchError (browser process failed to start)
    │   ├── SandboxTimeoutError (page or screenshot did not settle in time)
    │   ├── TargetNotFoundError (screenshot selector matched nothing)
    │   ├── RasterConversionError (cairosvg/Pillow rejected the SVG)
    │   └── TypesetError (LaTeX could not be converted to MathML)
    ├── AssetError (image file missing or unreadable)
    ├── ConversionError (document failed even in safe mode)
    └── ConfigError (invalid configuration file)

RenderError never escapes the resilience controller; it is turned into an
absent result there. ConversionError is the only error a caller of
``MarkdownToWordConverter.convert_markdown`` has to handle.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class RenderFailureKind(str, Enum):
    """Normalized cause of a render failure."""

    LAUNCH = "launch"
    TIMEOUT = "timeout"
    MISSING_TARGET = "missing_target"
    RASTER = "raster"
    TYPESET = "typeset"
    UNKNOWN = "unknown"


class Md2WordError(Exception):
    """Base exception for all md2word errors."""


class RenderError(Md2WordError):
    """A formula or graphic could not be turned into an image.

    Attributes:
        kind: Normalized failure cause
    """

    kind: RenderFailureKind = RenderFailureKind.UNKNOWN

    def __init__(self, message: str, *, kind: RenderFailureKind | None = None) -> None:
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class SandboxLaunchError(RenderError):
    """Chromium could not be launched."""

    kind = RenderFailureKind.LAUNCH


class SandboxTimeoutError(RenderError):
    """Page load, layout settle or screenshot exceeded the timeout."""

    kind = RenderFailureKind.TIMEOUT


class TargetNotFoundError(RenderError):
    """The element to screenshot was not present on the page."""

    kind = RenderFailureKind.MISSING_TARGET

    def __init__(self, selector: str) -> None:
        super().__init__(f"Target element not found: {selector}")
        self.selector = selector


class RasterConversionError(RenderError):
    """Direct SVG rasterization failed."""

    kind = RenderFailureKind.RASTER


class TypesetError(RenderError):
    """LaTeX source could not be converted to MathML."""

    kind = RenderFailureKind.TYPESET


class AssetError(Md2WordError):
    """An image referenced by the document could not be loaded."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"Cannot load image {path}: {message}")
        self.path = Path(path)


class ConversionError(Md2WordError):
    """Conversion failed terminally, after the safe-mode retry.

    Attributes:
        cause: The exception raised by the last attempt
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigError(Md2WordError):
    """Configuration file could not be loaded or validated."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Invalid config {path}: {message}")
        self.path = path
