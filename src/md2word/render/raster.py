"""Direct SVG rasterization with cairosvg."""

from __future__ import annotations

import io
from pathlib import Path

from loguru import logger
from PIL import Image

from md2word.constants import DEFAULT_RASTER_MAX_HEIGHT, DEFAULT_RASTER_MAX_WIDTH
from md2word.errors import RasterConversionError


class CairoRasterizer:
    """Convert well-formed SVG source to PNG, fitted inside pixel bounds.

    Synchronous; callers move it off the event loop.
    """

    def __init__(
        self,
        max_width: int = DEFAULT_RASTER_MAX_WIDTH,
        max_height: int = DEFAULT_RASTER_MAX_HEIGHT,
    ) -> None:
        self.max_width = max_width
        self.max_height = max_height

    def rasterize(self, svg: str, output_path: Path) -> Path:
        """Render ``svg`` to ``output_path``.

        The image is scaled down to fit the bounds, keeping the aspect
        ratio; it is never enlarged.

        Raises:
            RasterConversionError: cairosvg is unavailable or rejected the SVG
        """
        try:
            import cairosvg
        except (ImportError, OSError) as e:
            # OSError: the cairo shared library is missing
            raise RasterConversionError(f"cairosvg unavailable: {e}") from e

        try:
            png_bytes = cairosvg.svg2png(bytestring=svg.encode("utf-8"))
        except Exception as e:
            raise RasterConversionError(f"cairosvg failed: {e}") from e

        try:
            with Image.open(io.BytesIO(png_bytes)) as img:
                img.load()
                if img.width > self.max_width or img.height > self.max_height:
                    img.thumbnail((self.max_width, self.max_height))
                output_path.parent.mkdir(parents=True, exist_ok=True)
                img.save(output_path, format="PNG")
        except OSError as e:
            raise RasterConversionError(f"Cannot write raster image: {e}") from e

        logger.debug(f"SVG rasterized with cairosvg: {output_path}")
        return output_path
