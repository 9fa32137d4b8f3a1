"""md2word - Markdown to Word converter with resilient formula and SVG rendering."""

__version__ = "0.1.0"

from md2word.config import ConversionOptions, Md2WordConfig, SandboxConfig
from md2word.converter import MarkdownToWordConverter
from md2word.errors import ConversionError, Md2WordError, RenderError
from md2word.reverse import WordToMarkdownConverter
from md2word.types import ConversionResult, ReverseConversionResult

__all__ = [
    "ConversionError",
    "ConversionOptions",
    "ConversionResult",
    "MarkdownToWordConverter",
    "Md2WordConfig",
    "Md2WordError",
    "RenderError",
    "ReverseConversionResult",
    "SandboxConfig",
    "WordToMarkdownConverter",
    "__version__",
]
