"""Shared value types for md2word."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Union

from md2word.constants import SAFE_MODE_FAILURE_THRESHOLD


class RenderKind(str, Enum):
    """What a render request asks for."""

    FORMULA = "formula"
    GRAPHIC = "graphic"


@dataclass(frozen=True)
class RenderRequest:
    """A single formula or SVG fragment to rasterize.

    Attributes:
        source: LaTeX formula or SVG source text
        kind: Formula or graphic
        display: Display (block) mode for formulas; ignored for graphics
        attempt: Zero-based attempt number
    """

    source: str
    kind: RenderKind
    display: bool = False
    attempt: int = 0

    @classmethod
    def formula(cls, latex: str, display: bool = False) -> RenderRequest:
        return cls(source=latex, kind=RenderKind.FORMULA, display=display)

    @classmethod
    def graphic(cls, svg: str) -> RenderRequest:
        return cls(source=svg, kind=RenderKind.GRAPHIC)

    def with_attempt(self, attempt: int) -> RenderRequest:
        return replace(self, attempt=attempt)


@dataclass(frozen=True)
class RenderedImage:
    """A successfully rendered asset on disk."""

    path: Path
    filename: str


# None is the absence value: the request could not be rendered
RenderResult = Union[RenderedImage, None]


@dataclass
class FailureState:
    """Cumulative render failures for one conversion.

    Owned by a ConversionContext and mutated only by the resilience
    controller.
    """

    failure_count: int = 0
    safe_mode: bool = False
    threshold: int = SAFE_MODE_FAILURE_THRESHOLD

    def record_failure(self) -> bool:
        """Count a failed attempt.

        Returns:
            True if this failure tripped safe mode
        """
        self.failure_count += 1
        if not self.safe_mode and self.failure_count >= self.threshold:
            self.safe_mode = True
            return True
        return False

    def record_success(self) -> None:
        self.failure_count = 0


@dataclass
class ConversionMetrics:
    """Timing and volume counters collected during a conversion."""

    formula_render_seconds: float = 0.0
    graphic_render_seconds: float = 0.0
    total_seconds: float = 0.0
    formula_count: int = 0
    graphic_count: int = 0
    image_count: int = 0
    render_attempts: int = 0
    short_circuited: int = 0

    def add_render_time(self, kind: RenderKind, seconds: float) -> None:
        if kind is RenderKind.FORMULA:
            self.formula_render_seconds += seconds
        else:
            self.graphic_render_seconds += seconds

    def count_request(self, kind: RenderKind) -> None:
        if kind is RenderKind.FORMULA:
            self.formula_count += 1
        else:
            self.graphic_count += 1


@dataclass
class ImageAsset:
    """Image bytes embedded in (or extracted from) a document."""

    data: bytes
    path: Path | None
    width: int
    height: int
    content_type: str = "image/png"
    filename: str = ""


@dataclass
class ConversionResult:
    """Output of a Markdown to Word conversion.

    Attributes:
        content: The .docx file bytes
        warnings: Recovered problems (failed renders, missing images...)
        images: Images embedded in the document
        metrics: Render timings and counts
        safe_mode_used: True if the document was produced by the safe-mode retry
    """

    content: bytes
    warnings: list[str] = field(default_factory=list)
    images: list[ImageAsset] = field(default_factory=list)
    metrics: ConversionMetrics = field(default_factory=ConversionMetrics)
    safe_mode_used: bool = False


@dataclass
class ReverseConversionResult:
    """Output shape of a Word to Markdown conversion."""

    markup: str
    images: list[ImageAsset] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
