"""Load images referenced from Markdown and size them for the page."""

from __future__ import annotations

import io
from pathlib import Path
from urllib.parse import unquote

import aiofiles
from loguru import logger
from PIL import Image

from md2word.assembly.elements import ImageRun, TextRun
from md2word.constants import (
    IMAGE_FALLBACK_HEIGHT,
    IMAGE_FALLBACK_WIDTH,
    IMAGE_MAX_HEIGHT,
    IMAGE_MAX_WIDTH,
)
from md2word.context import ConversionContext
from md2word.errors import AssetError
from md2word.types import ImageAsset

_CONTENT_TYPES = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "BMP": "image/bmp",
    "TIFF": "image/tiff",
    "WEBP": "image/webp",
}


def fit_within(
    width: int,
    height: int,
    max_width: int = IMAGE_MAX_WIDTH,
    max_height: int = IMAGE_MAX_HEIGHT,
) -> tuple[int, int]:
    """Scale (width, height) to fit the box, preserving aspect ratio.

    Images already inside the box keep their size.
    """
    if width <= 0 or height <= 0:
        return IMAGE_FALLBACK_WIDTH, IMAGE_FALLBACK_HEIGHT
    scale = min(max_width / width, max_height / height, 1.0)
    return max(1, round(width * scale)), max(1, round(height * scale))


def image_placeholder(alt: str) -> TextRun:
    return TextRun(text=f"[Image: {alt}]", italic=True)


def _read_dimensions(data: bytes) -> tuple[int, int, str]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.width, img.height, _CONTENT_TYPES.get(img.format or "", "image/png")
    except Exception as e:
        logger.debug(f"Could not read image dimensions: {e}")
        return IMAGE_FALLBACK_WIDTH, IMAGE_FALLBACK_HEIGHT, "image/png"


async def read_image_bytes(path: Path) -> bytes:
    """Read an image file.

    Raises:
        AssetError: The file is missing, unreadable or empty
    """
    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except OSError as e:
        raise AssetError(path, e.strerror or str(e)) from e
    if not data:
        raise AssetError(path, "file is empty")
    return data


class ImageLoader:
    """Resolve image references against a conversion's base directory."""

    def __init__(self, context: ConversionContext) -> None:
        self.context = context

    def resolve_path(self, src: str) -> Path:
        path = Path(unquote(src))
        if not path.is_absolute():
            path = self.context.base_dir / path
        return path

    async def load(self, src: str, alt: str = "") -> ImageRun | TextRun:
        """Return an image run, or a bracketed placeholder if loading fails."""
        label = alt or src
        if src.startswith(("http://", "https://", "data:")):
            self.context.warn(f"Remote image not embedded: {src[:80]}")
            return image_placeholder(label)

        path = self.resolve_path(src)
        try:
            data = await read_image_bytes(path)
        except AssetError as e:
            self.context.warn(str(e))
            return image_placeholder(label)

        natural_width, natural_height, content_type = _read_dimensions(data)
        width, height = fit_within(natural_width, natural_height)

        self.context.images.append(
            ImageAsset(
                data=data,
                path=path,
                width=natural_width,
                height=natural_height,
                content_type=content_type,
                filename=path.name,
            )
        )
        self.context.metrics.image_count += 1
        logger.debug(f"Loaded image {path.name} ({natural_width}x{natural_height} -> {width}x{height})")
        return ImageRun(data=data, width=width, height=height, alt=alt)
