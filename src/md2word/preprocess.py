"""Replace formulas and SVG blocks in Markdown with rendered image references.

Four passes run in order, each feeding the next:

1. Display formulas ``$$ ... $$``
2. Fenced ``svg`` code blocks
3. Broken inline SVG (an HTML comment followed by ``<rect>``/``<text>``
   elements without an ``<svg>`` wrapper), which is reconstructed first
4. Inline formulas ``$ ... $``

A fragment that cannot be rendered is left exactly as it was, except for
broken inline SVG, which becomes a fixed caption.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from loguru import logger

from md2word.constants import GRAPHIC_PLACEHOLDER_CAPTION
from md2word.context import ConversionContext
from md2word.resilience import ResilienceController
from md2word.substitute import replace_async
from md2word.types import RenderedImage, RenderRequest

DISPLAY_FORMULA_PATTERN = re.compile(r"\$\$\s*\n?([\s\S]*?)\n?\s*\$\$")
FENCED_GRAPHIC_PATTERN = re.compile(r"```svg\s*\n([\s\S]*?)\n```")
MALFORMED_GRAPHIC_PATTERN = re.compile(r"<!--\s*[\s\S]*?-->\s*<rect[\s\S]*?/text>")
INLINE_FORMULA_PATTERN = re.compile(r"(?<!\$)\$([^$\n]+)\$(?!\$)")

_RECT_PATTERN = re.compile(r"<rect[^>]*>")
_TEXT_PATTERN = re.compile(r"<text[^>]*>[^<]*</text>")
_CLASS_ATTR_PATTERN = re.compile(r"\sclass\s*=")

RECONSTRUCTED_SVG_HEADER = """<svg xmlns="http://www.w3.org/2000/svg" width="300" height="200" viewBox="0 0 300 200">
  <style>
    .bar { fill: #4CAF50; }
    .label { font-family: Arial, sans-serif; font-size: 12px; fill: #333; }
  </style>"""


@dataclass(frozen=True)
class Reconstructed:
    """A broken SVG fragment rebuilt into a standalone SVG document."""

    svg: str


@dataclass(frozen=True)
class PlaceholderCaption:
    """Reconstruction was impossible; use this text instead."""

    text: str = GRAPHIC_PLACEHOLDER_CAPTION


Reconstruction = Union[Reconstructed, PlaceholderCaption]


def _with_class(tag: str, element: str, css_class: str) -> str:
    if _CLASS_ATTR_PATTERN.search(tag):
        return tag
    return tag.replace(f"<{element}", f'<{element} class="{css_class}"', 1)


def reconstruct_graphic(fragment: str) -> Reconstruction:
    """Rebuild a bar-chart style SVG from loose ``<rect>`` and ``<text>`` tags.

    This is a heuristic for one specific malformed shape, not a general SVG
    repair.
    """
    rects = _RECT_PATTERN.findall(fragment)
    texts = _TEXT_PATTERN.findall(fragment)
    if not rects and not texts:
        return PlaceholderCaption()

    lines = [RECONSTRUCTED_SVG_HEADER]
    for rect in rects:
        if not rect.endswith("/>"):
            rect = rect[:-1].rstrip() + "/>"
        lines.append("  " + _with_class(rect, "rect", "bar"))
    for text in texts:
        lines.append("  " + _with_class(text, "text", "label"))
    lines.append("</svg>")
    return Reconstructed("\n".join(lines))


def image_reference(alt: str, image: RenderedImage) -> str:
    """Markdown image syntax pointing at a rendered asset."""
    return f"![{alt}](<{Path(image.path).resolve().as_posix()}>)"


class MarkupPreprocessor:
    """Run the four substitution passes for one conversion."""

    def __init__(self, context: ConversionContext, controller: ResilienceController) -> None:
        self.context = context
        self.controller = controller

    async def process(self, markup: str) -> str:
        options = self.context.options
        if options.math_enabled:
            markup = await self.process_display_formulas(markup)
        if options.render_svg:
            markup = await self.process_fenced_graphics(markup)
            markup = await self.process_malformed_graphics(markup)
        if options.math_enabled:
            markup = await self.process_inline_formulas(markup)
        return markup

    async def process_display_formulas(self, markup: str) -> str:
        async def replace(match: re.Match[str]) -> str:
            return await self._render_formula(match, display=True)

        return await replace_async(markup, DISPLAY_FORMULA_PATTERN, replace)

    async def process_inline_formulas(self, markup: str) -> str:
        async def replace(match: re.Match[str]) -> str:
            return await self._render_formula(match, display=False)

        return await replace_async(markup, INLINE_FORMULA_PATTERN, replace)

    async def process_fenced_graphics(self, markup: str) -> str:
        async def replace(match: re.Match[str]) -> str:
            svg = match.group(1).strip()
            image = await self._resolve(RenderRequest.graphic(svg))
            if image is not None:
                return image_reference("svg", image)
            self.context.warn("SVG block could not be rendered, kept as code")
            return match.group(0)

        return await replace_async(markup, FENCED_GRAPHIC_PATTERN, replace)

    async def process_malformed_graphics(self, markup: str) -> str:
        async def replace(match: re.Match[str]) -> str:
            fragment = match.group(0)
            logger.debug(f"Found embedded SVG content: {fragment[:100]}...")
            try:
                reconstruction = reconstruct_graphic(fragment)
            except Exception as e:
                logger.warning(f"SVG reconstruction error: {e}")
                reconstruction = PlaceholderCaption()

            if isinstance(reconstruction, Reconstructed):
                image = await self._resolve(RenderRequest.graphic(reconstruction.svg))
                if image is not None:
                    return image_reference("svg", image)
                caption = PlaceholderCaption().text
            else:
                caption = reconstruction.text

            self.context.warn("Embedded SVG could not be rendered, using placeholder caption")
            return caption

        return await replace_async(markup, MALFORMED_GRAPHIC_PATTERN, replace)

    async def _render_formula(self, match: re.Match[str], display: bool) -> str:
        formula = match.group(1).strip()
        if not formula:
            return match.group(0)
        image = await self._resolve(RenderRequest.formula(formula, display))
        if image is not None:
            return image_reference("math", image)
        mode = "Display" if display else "Inline"
        self.context.warn(f"{mode} formula could not be rendered, kept as text: {formula[:60]}")
        return match.group(0)

    async def _resolve(self, request: RenderRequest) -> RenderedImage | None:
        try:
            return await self.controller.resolve(request)
        except Exception as e:
            logger.warning(f"Unexpected render error for {request.kind.value}: {e}")
            return None
