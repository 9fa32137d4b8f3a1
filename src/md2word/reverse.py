"""Word to Markdown direction (interface only)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from md2word.types import ReverseConversionResult


@runtime_checkable
class WordToMarkdownConverter(Protocol):
    """Extract Markdown, images and warnings from .docx bytes."""

    async def convert(self, data: bytes) -> ReverseConversionResult: ...
