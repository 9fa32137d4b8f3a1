"""Markdown token stream to .docx document."""

from md2word.assembly.builder import DocumentAssembler, create_parser
from md2word.assembly.elements import DocumentElement
from md2word.assembly.images import ImageLoader, fit_within
from md2word.assembly.writer import DocxWriter

__all__ = [
    "DocumentAssembler",
    "DocumentElement",
    "DocxWriter",
    "ImageLoader",
    "create_parser",
    "fit_within",
]
