"""Per-conversion state."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from md2word.config import ConversionOptions
from md2word.constants import ASSET_DIR_NAME
from md2word.types import ConversionMetrics, FailureState, ImageAsset

if TYPE_CHECKING:
    from md2word.assembly.elements import DocumentElement


@dataclass
class ConversionContext:
    """Mutable state owned by exactly one conversion.

    ``options`` is always a private copy, so flipping flags for the
    safe-mode retry never leaks into the caller's options or into another
    conversion.
    """

    base_dir: Path
    options: ConversionOptions = field(default_factory=ConversionOptions)
    elements: list[DocumentElement] = field(default_factory=list)
    images: list[ImageAsset] = field(default_factory=list)
    has_headings: bool = False
    failure_state: FailureState = field(default_factory=FailureState)
    metrics: ConversionMetrics = field(default_factory=ConversionMetrics)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)
        self.options = self.options.model_copy(deep=True)
        if self.options.safe_mode_enabled:
            self.failure_state.safe_mode = True

    @property
    def asset_dir(self) -> Path:
        """Directory that receives rendered formula/graphic images."""
        return self.base_dir / ASSET_DIR_NAME

    @property
    def safe_mode(self) -> bool:
        return self.options.safe_mode_enabled or self.failure_state.safe_mode

    def warn(self, message: str) -> None:
        """Record a recovered problem for the caller and log it."""
        logger.warning(message)
        self.warnings.append(message)

    def reset_document_state(self) -> None:
        """Drop assembled output before re-running the pipeline."""
        self.elements = []
        self.images = []
        self.has_headings = False

    @contextmanager
    def enter_safe_mode(self) -> Iterator[ConversionContext]:
        """Disable all rendering for the duration of the block.

        The previous flags are restored on exit, whatever the outcome.
        """
        saved = (
            self.options.math_to_image,
            self.options.render_svg,
            self.options.safe_mode_enabled,
        )
        self.options.math_to_image = False
        self.options.render_svg = False
        self.options.safe_mode_enabled = True
        try:
            yield self
        finally:
            (
                self.options.math_to_image,
                self.options.render_svg,
                self.options.safe_mode_enabled,
            ) = saved
