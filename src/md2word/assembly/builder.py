"""Turn preprocessed Markdown into document elements.

Parsing is done by markdown-it-py (CommonMark plus GFM tables). The token
stream is walked once; block tokens map to elements and inline children map
to runs. Nested lists are flattened to indented items.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from markdown_it import MarkdownIt
from markdown_it.token import Token

from md2word.assembly.elements import (
    Alignment,
    BlankLine,
    Blockquote,
    Cell,
    CodeBlock,
    DocumentElement,
    Heading,
    ListItem,
    PageBreak,
    Paragraph,
    Run,
    Spacer,
    Table,
    TableOfContents,
    TextRun,
    TitlePage,
    runs_text,
)
from md2word.assembly.images import ImageLoader
from md2word.constants import (
    BULLET_GLYPH,
    CODE_FONT,
    PARAGRAPH_FIRST_LINE_INDENT_TWIPS,
    TOC_TITLE,
)
from md2word.context import ConversionContext


def create_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable("table")


@dataclass
class _ListLevel:
    ordered: bool
    counter: int = 0


class DocumentAssembler:
    """Build ``context.elements`` from Markdown text."""

    def __init__(self, context: ConversionContext, parser: MarkdownIt | None = None) -> None:
        self.context = context
        self.parser = parser or create_parser()
        self.images = ImageLoader(context)

    async def assemble(self, markup: str) -> list[DocumentElement]:
        """Parse ``markup`` and append its elements to the context.

        Returns:
            The full element sequence, including the contents front matter
            when the document has headings
        """
        tokens = self.parser.parse(markup)
        await self._walk(tokens)
        logger.debug(
            f"Assembled {len(self.context.elements)} elements "
            f"(headings: {self.context.has_headings})"
        )
        return self.build_elements()

    def build_elements(self) -> list[DocumentElement]:
        """Prefix the body with a title, contents field and page break if any heading exists."""
        front: list[DocumentElement] = []
        if self.context.has_headings:
            front = [TitlePage(TOC_TITLE), TableOfContents(), PageBreak()]
        return front + list(self.context.elements)

    async def _walk(self, tokens: list[Token]) -> None:
        elements = self.context.elements
        lists: list[_ListLevel] = []
        pending_marker: str | None = None
        quote_depth = 0
        quote_runs: list[Run] = []
        quote_split = False
        last_block_end: int | None = None
        i = 0

        def emit(*blocks: DocumentElement) -> None:
            # Quoted text seen so far goes out first so block order follows the source
            nonlocal quote_runs, quote_split
            if quote_depth:
                if quote_runs:
                    elements.append(Blockquote(runs=quote_runs))
                    quote_runs = []
                quote_split = True
            elements.extend(blocks)

        while i < len(tokens):
            token = tokens[i]

            if token.level == 0 and token.nesting >= 0 and token.map:
                start, end = token.map
                if last_block_end is not None and start - last_block_end >= 2:
                    elements.append(BlankLine())
                last_block_end = end

            if token.type == "heading_open":
                inline = tokens[i + 1]
                emit(await self._heading(token, inline))
                i += 3
                continue

            if token.type == "blockquote_open":
                quote_depth += 1
            elif token.type == "blockquote_close":
                quote_depth -= 1
                if quote_depth == 0:
                    if quote_runs or not quote_split:
                        elements.append(Blockquote(runs=quote_runs))
                    quote_runs = []
                    quote_split = False

            elif token.type in ("bullet_list_open", "ordered_list_open"):
                level = _ListLevel(ordered=token.type == "ordered_list_open")
                start = token.attrGet("start")
                if level.ordered and start is not None:
                    level.counter = int(start) - 1
                lists.append(level)
            elif token.type in ("bullet_list_close", "ordered_list_close"):
                lists.pop()
            elif token.type == "list_item_open":
                current = lists[-1]
                if current.ordered:
                    current.counter += 1
                    pending_marker = f"{current.counter}. "
                else:
                    pending_marker = f"{BULLET_GLYPH} "

            elif token.type == "table_open":
                close = _find_close(tokens, i, "table_close")
                emit(Spacer(), await self._table(tokens[i:close]), Spacer())
                i = close + 1
                continue

            elif token.type in ("fence", "code_block"):
                emit(CodeBlock(text=token.content.rstrip("\n"), language=token.info.strip()))

            elif token.type == "html_block":
                text = token.content.strip()
                if text:
                    emit(Paragraph(runs=[TextRun(text)], alignment=Alignment.LEFT))

            elif token.type == "inline":
                runs = await self.inline_runs(token.children)
                if quote_depth:
                    if quote_runs:
                        quote_runs.append(TextRun("\n"))
                    if lists and pending_marker:
                        quote_runs.append(TextRun(pending_marker))
                        pending_marker = None
                    quote_runs.extend(runs)
                elif lists:
                    current = lists[-1]
                    elements.append(
                        ListItem(
                            runs=runs,
                            marker=pending_marker or "",
                            ordered=current.ordered,
                            level=len(lists) - 1,
                        )
                    )
                    pending_marker = None
                else:
                    elements.append(self._paragraph(runs))

            i += 1

    async def _heading(self, token: Token, inline: Token) -> Heading:
        self.context.has_headings = True
        level = min(int(token.tag[1:]), 6)
        runs = await self.inline_runs(inline.children)
        return Heading(level=level, text=runs_text(runs).strip(), runs=runs)

    def _paragraph(self, runs: list[Run]) -> Paragraph:
        paragraph = Paragraph(runs=runs)
        if paragraph.has_image:
            paragraph.alignment = Alignment.CENTER
        else:
            paragraph.first_line_indent = PARAGRAPH_FIRST_LINE_INDENT_TWIPS
        return paragraph

    async def _table(self, tokens: list[Token]) -> Table:
        table = Table()
        row: list[Cell] | None = None
        in_header = False
        for token in tokens:
            if token.type == "thead_open":
                in_header = True
            elif token.type == "thead_close":
                in_header = False
            elif token.type == "tr_open":
                row = []
            elif token.type == "inline" and row is not None:
                row.append(await self.inline_runs(token.children))
            elif token.type == "tr_close" and row is not None:
                if in_header:
                    table.header = row
                else:
                    table.rows.append(row)
                row = None
        return table

    async def inline_runs(self, children: list[Token] | None) -> list[Run]:
        """Convert inline tokens to runs, loading any referenced images."""
        runs: list[Run] = []
        bold = italic = False
        for child in children or []:
            kind = child.type
            if kind == "strong_open":
                bold = True
            elif kind == "strong_close":
                bold = False
            elif kind == "em_open":
                italic = True
            elif kind == "em_close":
                italic = False
            elif kind in ("text", "html_inline"):
                if child.content:
                    runs.append(TextRun(child.content, bold=bold, italic=italic))
            elif kind == "code_inline":
                runs.append(TextRun(child.content, bold=bold, italic=italic, code=True, font=CODE_FONT))
            elif kind == "softbreak":
                runs.append(TextRun(" ", bold=bold, italic=italic))
            elif kind == "hardbreak":
                runs.append(TextRun("\n", bold=bold, italic=italic))
            elif kind == "image":
                src = child.attrGet("src") or ""
                runs.append(await self.images.load(str(src), child.content))
        return runs


def _find_close(tokens: list[Token], start: int, close_type: str) -> int:
    for j in range(start + 1, len(tokens)):
        if tokens[j].type == close_type:
            return j
    return len(tokens) - 1
