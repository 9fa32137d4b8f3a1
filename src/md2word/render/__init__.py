"""Formula and SVG rendering backends."""

from md2word.render.adapter import Renderer, RenderingAdapter, asset_filename
from md2word.render.chaos import ChaosConfig, ChaosRenderer, ChaosStats
from md2word.render.raster import CairoRasterizer
from md2word.render.sandbox import (
    PlaywrightSandbox,
    find_chrome_executable,
    is_playwright_available,
)

__all__ = [
    "CairoRasterizer",
    "ChaosConfig",
    "ChaosRenderer",
    "ChaosStats",
    "PlaywrightSandbox",
    "Renderer",
    "RenderingAdapter",
    "asset_filename",
    "find_chrome_executable",
    "is_playwright_available",
]
