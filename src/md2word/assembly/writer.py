"""Serialize document elements to .docx with python-docx."""

from __future__ import annotations

import io

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Pt, Twips
from docx.text.paragraph import Paragraph as DocxParagraph
from loguru import logger

from md2word.assembly.elements import (
    Alignment,
    BlankLine,
    Blockquote,
    CodeBlock,
    DocumentElement,
    Heading,
    ImageRun,
    ListItem,
    PageBreak,
    Paragraph,
    Run,
    Spacer,
    Table,
    TableOfContents,
    TextRun,
    TitlePage,
)
from md2word.config import ConversionOptions
from md2word.constants import (
    BLOCKQUOTE_BORDER_COLOR,
    BLOCKQUOTE_INDENT_TWIPS,
    CODE_BLOCK_BORDER_COLOR,
    CODE_BLOCK_FILL,
    CODE_BLOCK_FONT_SIZE,
    CODE_FONT,
    HEADING_SIZE_TIERS,
    INLINE_CODE_FILL,
    LIST_INDENT_TWIPS,
    TABLE_BODY_FONT_SIZE,
    TABLE_HEADER_FILL,
    TABLE_HEADER_FONT_SIZE,
    TABLE_WIDTH_PERCENT,
)

# (width, height) in twips
PAGE_SIZES_TWIPS = {
    "A3": (16838, 23811),
    "A4": (11906, 16838),
    "A5": (8391, 11906),
    "LETTER": (12240, 15840),
    "LEGAL": (12240, 20160),
}

EMU_PER_PIXEL = 9525  # at 96 dpi

_ALIGNMENTS = {
    Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Alignment.JUSTIFY: WD_ALIGN_PARAGRAPH.JUSTIFY,
}


def half_points(size: int) -> Pt:
    return Pt(size / 2)


def heading_size(level: int) -> int:
    return HEADING_SIZE_TIERS[min(level, len(HEADING_SIZE_TIERS)) - 1]


def _shading(fill: str):
    shd = OxmlElement("w:shd")
    shd.set(qn("w:val"), "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"), fill)
    return shd


def _border(container, edges: tuple[str, ...], color: str, size: int, space: int = 1) -> None:
    for edge in edges:
        el = OxmlElement(f"w:{edge}")
        el.set(qn("w:val"), "single")
        el.set(qn("w:sz"), str(size))
        el.set(qn("w:space"), str(space))
        el.set(qn("w:color"), color)
        container.append(el)


def set_paragraph_border(
    paragraph: DocxParagraph, edges: tuple[str, ...], color: str, size: int = 4
) -> None:
    """Add paragraph borders; call before setting indents or alignment."""
    p_bdr = OxmlElement("w:pBdr")
    _border(p_bdr, edges, color, size)
    paragraph._p.get_or_add_pPr().append(p_bdr)


def set_paragraph_shading(paragraph: DocxParagraph, fill: str) -> None:
    paragraph._p.get_or_add_pPr().append(_shading(fill))


def add_toc_field(paragraph: DocxParagraph, levels: str) -> None:
    """Insert a hyperlinked TOC field that Word fills in on open/update."""
    run = paragraph.add_run()
    begin = OxmlElement("w:fldChar")
    begin.set(qn("w:fldCharType"), "begin")
    begin.set(qn("w:dirty"), "true")
    run._r.append(begin)

    run = paragraph.add_run()
    instr = OxmlElement("w:instrText")
    instr.set(qn("xml:space"), "preserve")
    instr.text = f' TOC \\o "{levels}" \\h \\z \\u '
    run._r.append(instr)

    run = paragraph.add_run()
    separate = OxmlElement("w:fldChar")
    separate.set(qn("w:fldCharType"), "separate")
    run._r.append(separate)

    paragraph.add_run("Right-click to update the table of contents.")

    run = paragraph.add_run()
    end = OxmlElement("w:fldChar")
    end.set(qn("w:fldCharType"), "end")
    run._r.append(end)


class DocxWriter:
    """Write an element sequence into a single .docx document."""

    def __init__(self, options: ConversionOptions | None = None) -> None:
        self.options = options or ConversionOptions()
        self.warnings: list[str] = []

    def write(self, elements: list[DocumentElement]) -> bytes:
        doc = Document()
        self._setup_document(doc)
        for element in elements:
            self._write_element(doc, element)

        buffer = io.BytesIO()
        doc.save(buffer)
        data = buffer.getvalue()
        logger.debug(f"Wrote {len(elements)} elements ({len(data)} bytes)")
        return data

    def _setup_document(self, doc: DocxDocument) -> None:
        options = self.options
        section = doc.sections[0]
        width, height = PAGE_SIZES_TWIPS[options.page_size]
        section.page_width = Twips(width)
        section.page_height = Twips(height)
        section.top_margin = Twips(options.margins.top)
        section.right_margin = Twips(options.margins.right)
        section.bottom_margin = Twips(options.margins.bottom)
        section.left_margin = Twips(options.margins.left)

        normal = doc.styles["Normal"]
        normal.font.name = options.font
        normal.font.size = half_points(options.font_size)
        r_fonts = normal.element.get_or_add_rPr().get_or_add_rFonts()
        r_fonts.set(qn("w:eastAsia"), options.font)

        for level in range(1, 7):
            style = doc.styles[f"Heading {level}"]
            style.font.name = options.font
            style.font.size = half_points(heading_size(level))
            style.font.bold = True

    def _write_element(self, doc: DocxDocument, element: DocumentElement) -> None:
        if isinstance(element, Heading):
            paragraph = doc.add_heading(level=element.level)
            paragraph.alignment = _ALIGNMENTS[element.alignment]
            runs = element.runs or [TextRun(element.text)]
            self._add_runs(paragraph, runs, size=heading_size(element.level))
        elif isinstance(element, Paragraph):
            paragraph = doc.add_paragraph()
            paragraph.alignment = _ALIGNMENTS[element.alignment]
            if element.first_line_indent:
                paragraph.paragraph_format.first_line_indent = Twips(element.first_line_indent)
            self._add_runs(paragraph, element.runs)
        elif isinstance(element, Table):
            self._write_table(doc, element)
        elif isinstance(element, ListItem):
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.left_indent = Twips(LIST_INDENT_TWIPS * (element.level + 1))
            if element.marker:
                paragraph.add_run(element.marker)
            self._add_runs(paragraph, element.runs)
        elif isinstance(element, CodeBlock):
            paragraph = doc.add_paragraph()
            set_paragraph_border(
                paragraph, ("top", "left", "bottom", "right"), CODE_BLOCK_BORDER_COLOR
            )
            set_paragraph_shading(paragraph, CODE_BLOCK_FILL)
            paragraph.alignment = WD_ALIGN_PARAGRAPH.LEFT
            run = paragraph.add_run(element.text)
            run.font.name = CODE_FONT
            run.font.size = half_points(CODE_BLOCK_FONT_SIZE)
        elif isinstance(element, Blockquote):
            paragraph = doc.add_paragraph()
            set_paragraph_border(paragraph, ("left",), BLOCKQUOTE_BORDER_COLOR, size=12)
            paragraph.paragraph_format.left_indent = Twips(BLOCKQUOTE_INDENT_TWIPS)
            self._add_runs(paragraph, element.runs)
        elif isinstance(element, (BlankLine, Spacer)):
            doc.add_paragraph()
        elif isinstance(element, TitlePage):
            paragraph = doc.add_paragraph(element.text, style="Title")
            paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            paragraph.paragraph_format.space_after = Twips(400)
        elif isinstance(element, TableOfContents):
            add_toc_field(doc.add_paragraph(), element.levels)
        elif isinstance(element, PageBreak):
            doc.add_page_break()
        else:
            raise TypeError(f"Unsupported document element: {type(element).__name__}")

    def _add_runs(
        self,
        paragraph: DocxParagraph,
        runs: list[Run],
        size: int | None = None,
        bold: bool = False,
    ) -> None:
        """Append runs; ``size`` and ``bold`` apply where a run sets neither."""
        for item in runs:
            if isinstance(item, ImageRun):
                run = paragraph.add_run()
                try:
                    run.add_picture(
                        io.BytesIO(item.data),
                        width=Emu(item.width * EMU_PER_PIXEL),
                        height=Emu(item.height * EMU_PER_PIXEL),
                    )
                except Exception as e:
                    message = f"Could not embed image '{item.alt}': {e}"
                    logger.warning(message)
                    self.warnings.append(message)
                    run.text = f"[Image: {item.alt}]"
                    run.italic = True
                continue

            run = paragraph.add_run(item.text)
            run.bold = item.bold or bold or None
            run.italic = item.italic or None
            if item.font:
                run.font.name = item.font
            run_size = item.size or size
            if run_size:
                run.font.size = half_points(run_size)
            if item.code:
                run._r.get_or_add_rPr().append(_shading(INLINE_CODE_FILL))

    def _write_table(self, doc: DocxDocument, element: Table) -> None:
        columns = max([len(element.header)] + [len(row) for row in element.rows] + [1])
        has_header = bool(element.header)
        table = doc.add_table(rows=len(element.rows) + int(has_header), cols=columns)
        table.style = "Table Grid"
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        table.autofit = False

        tbl_pr = table._tbl.tblPr
        tbl_w = tbl_pr.find(qn("w:tblW"))
        if tbl_w is None:
            tbl_w = OxmlElement("w:tblW")
            tbl_pr.append(tbl_w)
        tbl_w.set(qn("w:type"), "pct")
        tbl_w.set(qn("w:w"), str(TABLE_WIDTH_PERCENT * 50))  # fiftieths of a percent

        rows = ([element.header] if has_header else []) + element.rows
        for row_index, values in enumerate(rows):
            is_header = has_header and row_index == 0
            row = table.rows[row_index]
            row._tr.get_or_add_trPr().append(OxmlElement("w:cantSplit"))
            for col_index in range(columns):
                value = values[col_index] if col_index < len(values) else ""
                runs = [TextRun(value)] if isinstance(value, str) else value
                cell = row.cells[col_index]
                paragraph = cell.paragraphs[0]
                if is_header:
                    self._add_runs(paragraph, runs, size=TABLE_HEADER_FONT_SIZE, bold=True)
                    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
                    cell._tc.get_or_add_tcPr().append(_shading(TABLE_HEADER_FILL))
                else:
                    self._add_runs(paragraph, runs, size=TABLE_BODY_FONT_SIZE)
