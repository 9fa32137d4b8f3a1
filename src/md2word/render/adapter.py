"""Rendering adapter: formulas and SVG graphics to PNG files."""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from loguru import logger

from md2word.config import SandboxConfig
from md2word.constants import (
    ASSET_FILE_SUFFIX,
    DEFAULT_FONT,
    FORMULA_FILE_PREFIX,
    GRAPHIC_FILE_PREFIX,
)
from md2word.errors import RenderError
from md2word.render.formula import (
    FORMULA_SELECTOR,
    build_formula_page,
    build_graphic_page,
    ensure_xml_declaration,
    latex_to_mathml,
)
from md2word.render.raster import CairoRasterizer
from md2word.render.sandbox import PlaywrightSandbox
from md2word.types import RenderedImage, RenderKind, RenderRequest


class Renderer(Protocol):
    """Anything that can turn a RenderRequest into an image file.

    Implementations raise on failure; the resilience controller converts
    failures into absent results.
    """

    async def render(self, request: RenderRequest) -> RenderedImage: ...


def asset_filename(prefix: str) -> str:
    """Build a time-stamped asset filename.

    A short random suffix keeps names unique when several renders finish
    within the same millisecond.
    """
    return f"{prefix}{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}{ASSET_FILE_SUFFIX}"


class RenderingAdapter:
    """Render formulas through Chromium and graphics through cairosvg.

    Args:
        asset_dir: Directory receiving the PNG files
        sandbox_config: Chromium launch and viewport settings
        font: Body font used on the formula page
        sandbox_factory: Callable returning a fresh sandbox context manager
        rasterizer: Direct SVG rasterizer
    """

    def __init__(
        self,
        asset_dir: Path,
        *,
        sandbox_config: SandboxConfig | None = None,
        font: str = DEFAULT_FONT,
        sandbox_factory: Callable[[], PlaywrightSandbox] | None = None,
        rasterizer: CairoRasterizer | None = None,
    ) -> None:
        self.asset_dir = Path(asset_dir)
        self.sandbox_config = sandbox_config or SandboxConfig()
        self.font = font
        self._sandbox_factory = sandbox_factory or (
            lambda: PlaywrightSandbox(self.sandbox_config)
        )
        self.rasterizer = rasterizer or CairoRasterizer()

    async def render(self, request: RenderRequest) -> RenderedImage:
        if request.kind is RenderKind.FORMULA:
            return await self.render_formula(request.source, request.display)
        return await self.render_graphic(request.source)

    async def render_formula(self, latex: str, display: bool = False) -> RenderedImage:
        """Typeset ``latex`` to MathML and screenshot it in Chromium.

        Raises:
            RenderError: Typesetting, launch, timeout or missing target
        """
        mathml = latex_to_mathml(latex, display)
        html = build_formula_page(mathml, display, self.font)

        filename = asset_filename(FORMULA_FILE_PREFIX)
        output_path = self.asset_dir / filename
        viewport = (
            self.sandbox_config.formula_viewport_width,
            self.sandbox_config.formula_viewport_height,
        )
        async with self._sandbox_factory() as sandbox:
            await sandbox.screenshot(
                html, output_path, selector=FORMULA_SELECTOR, viewport=viewport
            )

        logger.debug(f"Formula image saved to: {output_path}")
        return RenderedImage(path=output_path, filename=filename)

    async def render_graphic(self, svg: str) -> RenderedImage:
        """Rasterize SVG with cairosvg, falling back to Chromium.

        Raises:
            RenderError: Both the rasterizer and the sandbox failed
        """
        source = ensure_xml_declaration(svg)
        filename = asset_filename(GRAPHIC_FILE_PREFIX)
        output_path = self.asset_dir / filename

        try:
            await asyncio.to_thread(self.rasterizer.rasterize, source, output_path)
            logger.debug(f"SVG image saved using cairosvg: {output_path}")
            return RenderedImage(path=output_path, filename=filename)
        except RenderError as e:
            logger.warning(f"cairosvg failed, trying sandbox: {e}")

        viewport = (
            self.sandbox_config.graphic_viewport_width,
            self.sandbox_config.graphic_viewport_height,
        )
        async with self._sandbox_factory() as sandbox:
            await sandbox.screenshot(build_graphic_page(source), output_path, viewport=viewport)

        logger.debug(f"SVG image saved using sandbox: {output_path}")
        return RenderedImage(path=output_path, filename=filename)
