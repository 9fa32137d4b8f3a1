"""Markdown to Word conversion entry point.

Usage:
    converter = MarkdownToWordConverter({"mathToImage": True})
    result = await converter.convert_markdown(markdown_text, base_dir)
    Path("out.docx").write_bytes(result.content)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import aiofiles
from loguru import logger

from md2word.assembly import DocumentAssembler, DocxWriter
from md2word.config import ConversionOptions, Md2WordConfig, get_config
from md2word.context import ConversionContext
from md2word.errors import ConversionError
from md2word.preprocess import MarkupPreprocessor
from md2word.render import Renderer, RenderingAdapter
from md2word.resilience import ResilienceController
from md2word.types import ConversionResult


class MarkdownToWordConverter:
    """Convert Markdown (with LaTeX formulas and SVG) into .docx bytes.

    Rendering failures never abort a conversion. A fragment that cannot be
    rendered stays as text. If the pipeline itself raises, the whole
    document is converted once more with all rendering disabled; only if
    that also fails does ``convert_markdown`` raise ConversionError.

    Args:
        options: ConversionOptions or a dict using the option record keys
            (``mathToImage``, ``maxRetries``...); overrides ``config``
        renderer: Custom rendering backend; defaults to Chromium + cairosvg
        config: Full configuration (sandbox settings, default options);
            defaults to the loaded md2word.json / MD2WORD_CONFIG file
    """

    def __init__(
        self,
        options: ConversionOptions | Mapping[str, Any] | None = None,
        renderer: Renderer | None = None,
        config: Md2WordConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.options = self._merge_options(self.config.conversion, options)
        self.renderer = renderer

    @staticmethod
    def _merge_options(
        base: ConversionOptions,
        overrides: ConversionOptions | Mapping[str, Any] | None,
    ) -> ConversionOptions:
        if overrides is None:
            return base.model_copy(deep=True)
        if not isinstance(overrides, ConversionOptions):
            overrides = ConversionOptions.model_validate(dict(overrides))
        update = {name: getattr(overrides, name) for name in overrides.model_fields_set}
        return base.model_copy(update=update, deep=True)

    def create_context(self, base_dir: Path | str = ".") -> ConversionContext:
        return ConversionContext(base_dir=Path(base_dir), options=self.options)

    def _renderer_for(self, context: ConversionContext) -> Renderer:
        if self.renderer is not None:
            return self.renderer
        return RenderingAdapter(
            context.asset_dir,
            sandbox_config=self.config.sandbox,
            font=context.options.font,
        )

    async def preprocess(self, markup: str, context: ConversionContext) -> str:
        """Replace formulas and SVG blocks with image references."""
        controller = ResilienceController.for_context(self._renderer_for(context), context)
        return await MarkupPreprocessor(context, controller).process(markup)

    async def _run_pipeline(self, markup: str, context: ConversionContext) -> bytes:
        preprocessed = await self.preprocess(markup, context)
        elements = await DocumentAssembler(context).assemble(preprocessed)
        writer = DocxWriter(context.options)
        content = await asyncio.to_thread(writer.write, elements)
        context.warnings.extend(writer.warnings)
        return content

    async def convert_markdown(
        self, markup: str, base_dir: Path | str = "."
    ) -> ConversionResult:
        """Convert Markdown text to .docx bytes.

        Args:
            markup: Markdown source
            base_dir: Directory that relative image paths resolve against
                and that receives the rendered assets

        Raises:
            ConversionError: The safe-mode retry failed too
        """
        start_time = time.perf_counter()
        context = self.create_context(base_dir)
        safe_mode_used = context.options.safe_mode_enabled
        logger.info(f"Converting Markdown ({len(markup)} chars) in {context.base_dir}")

        try:
            content = await self._run_pipeline(markup, context)
        except Exception as e:
            logger.warning(f"Conversion failed, retrying in safe mode: {e}")
            context.reset_document_state()
            safe_mode_used = True
            try:
                with context.enter_safe_mode():
                    content = await self._run_pipeline(markup, context)
            except Exception as inner:
                logger.error(f"Conversion failed even in safe mode: {inner}")
                raise ConversionError(
                    f"Conversion failed even in safe mode: {inner}", cause=inner
                ) from inner
            logger.info("Safe-mode conversion succeeded")

        metrics = context.metrics
        metrics.total_seconds = time.perf_counter() - start_time
        logger.info(
            f"Conversion done in {metrics.total_seconds:.2f}s: "
            f"{metrics.formula_count} formulas, {metrics.graphic_count} graphics, "
            f"{metrics.image_count} images, {len(context.warnings)} warnings"
        )
        return ConversionResult(
            content=content,
            warnings=list(context.warnings),
            images=list(context.images),
            metrics=metrics,
            safe_mode_used=safe_mode_used,
        )

    async def convert_file(
        self,
        markdown_path: Path | str,
        output_path: Path | str | None = None,
    ) -> ConversionResult:
        """Convert a Markdown file; relative references resolve from its directory.

        Raises:
            ConversionError: The file could not be read or written, or
                conversion failed
        """
        markdown_path = Path(markdown_path)
        try:
            async with aiofiles.open(markdown_path, encoding="utf-8") as f:
                markup = await f.read()
            result = await self.convert_markdown(markup, markdown_path.parent)
            if output_path is not None:
                output_path = Path(output_path)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(output_path, "wb") as f:
                    await f.write(result.content)
                logger.info(f"Written: {output_path}")
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(f"Failed to convert {markdown_path}: {e}", cause=e) from e
        return result

    def convert_markdown_sync(
        self, markup: str, base_dir: Path | str = "."
    ) -> ConversionResult:
        """Blocking wrapper around convert_markdown for non-async callers."""
        return asyncio.run(self.convert_markdown(markup, base_dir))
