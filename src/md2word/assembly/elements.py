"""Document element model produced by the assembler and consumed by the writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from md2word.constants import TOC_HEADING_RANGE, TOC_TITLE


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    JUSTIFY = "justify"


@dataclass
class TextRun:
    """A span of text sharing one set of character properties.

    ``size`` is in half-points; None means the document default.
    """

    text: str
    bold: bool = False
    italic: bool = False
    code: bool = False
    font: str | None = None
    size: int | None = None


@dataclass
class ImageRun:
    """An embedded picture, already scaled to its display size in pixels."""

    data: bytes
    width: int
    height: int
    alt: str = ""


Run = Union[TextRun, ImageRun]
# Table cells from the assembler carry runs; plain strings are accepted too
Cell = Union[str, list[Run]]


def runs_text(runs: list[Run]) -> str:
    return "".join(run.text for run in runs if isinstance(run, TextRun))


@dataclass
class Heading:
    level: int
    text: str
    runs: list[Run] = field(default_factory=list)

    @property
    def alignment(self) -> Alignment:
        return Alignment.CENTER if self.level <= 2 else Alignment.LEFT


@dataclass
class Paragraph:
    runs: list[Run] = field(default_factory=list)
    alignment: Alignment = Alignment.JUSTIFY
    first_line_indent: int = 0  # twips

    @property
    def has_image(self) -> bool:
        return any(isinstance(run, ImageRun) for run in self.runs)

    @property
    def text(self) -> str:
        return runs_text(self.runs)


@dataclass
class Table:
    header: list[Cell] = field(default_factory=list)
    rows: list[list[Cell]] = field(default_factory=list)


@dataclass
class ListItem:
    runs: list[Run]
    marker: str
    ordered: bool = False
    level: int = 0

    @property
    def text(self) -> str:
        return runs_text(self.runs)


@dataclass
class CodeBlock:
    text: str
    language: str = ""


@dataclass
class Blockquote:
    runs: list[Run] = field(default_factory=list)


@dataclass
class BlankLine:
    pass


@dataclass
class Spacer:
    """Empty paragraph placed around tables to keep them off page edges."""


@dataclass
class TitlePage:
    text: str


@dataclass
class TableOfContents:
    title: str = TOC_TITLE
    levels: str = TOC_HEADING_RANGE


@dataclass
class PageBreak:
    pass


DocumentElement = Union[
    Heading,
    Paragraph,
    Table,
    ListItem,
    CodeBlock,
    Blockquote,
    BlankLine,
    Spacer,
    TitlePage,
    TableOfContents,
    PageBreak,
]
