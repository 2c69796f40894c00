"""Word document generator using python-docx."""

import io

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_BREAK
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls
from docx.shared import Pt, Twips

from artifact_server.storage.store import ArtifactKind
from artifact_server.utils.exceptions import ValidationError

from .base import BaseGenerator, merge_config
from .models import ContentItem, HeaderFooterSpec, SectionSpec, WordConfig, WordRequest

DEFAULT_WORD_CONFIG = WordConfig()

TITLE_FONT_SIZE = 32
TOC_FONT_SIZE = 16
HEADING_SPACING = Pt(4)
TITLE_SPACING_AFTER = Pt(12)
TABLE_HEADER_FILL = "D9E2F3"

# Page margins in twips: (top, bottom, left, right)
PAGE_MARGINS = {
    "normal": (1440, 1440, 1440, 1440),
    "narrow": (720, 720, 720, 720),
    "moderate": (1440, 1440, 1080, 1080),
    "wide": (1440, 1440, 2880, 2880),
    "mirrored": (1440, 1440, 1800, 1440),
}

ALIGNMENTS = {
    "left": WD_ALIGN_PARAGRAPH.LEFT,
    "center": WD_ALIGN_PARAGRAPH.CENTER,
    "right": WD_ALIGN_PARAGRAPH.RIGHT,
}

# Heading numbering schemes: one (format, template) pair per heading depth.
# ``%n`` in a template is replaced by the formatted counter of depth n.
NUMBERING_OPTIONS: dict[str, list[tuple[str, str]]] = {
    "1.1.1.1 (Decimal)": [
        ("decimal", "%1"),
        ("decimal", "%1.%2"),
        ("decimal", "%1.%2.%3"),
        ("decimal", "%1.%2.%3.%4"),
    ],
    "I.1.a.i (Roman -> Decimal > Lower Letter -> Lower Roman)": [
        ("upperRoman", "%1."),
        ("decimal", "%2."),
        ("lowerLetter", "%3."),
        ("lowerRoman", "%4."),
    ],
    "I.A.1.a (Roman -> Upper Letter -> Decimal -> Lower Letter)": [
        ("upperRoman", "%1"),
        ("upperLetter", "%2"),
        ("decimal", "%3"),
        ("lowerLetter", "%4"),
    ],
    "1)a)i)(i) (Decimal -> Lower Letter -> Lower Roman -> Lower Roman with Parentheses)": [
        ("decimal", "%1)"),
        ("lowerLetter", "%2)"),
        ("lowerRoman", "%3)"),
        ("lowerRoman", "(%4)"),
    ],
    "A.1.a.i (Upper Letter -> Decimal -> Lower Letter -> Lower Roman)": [
        ("upperLetter", "%1"),
        ("decimal", "%1.%2"),
        ("lowerLetter", "%1.%2.%3"),
        ("lowerRoman", "%1.%2.%3.%4"),
    ],
}
DEFAULT_NUMBERING = "1.1.1.1 (Decimal)"

_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"), (100, "C"), (90, "XC"),
    (50, "L"), (40, "XL"), (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)


def _to_roman(number: int) -> str:
    out = []
    for value, symbol in _ROMAN:
        while number >= value:
            out.append(symbol)
            number -= value
    return "".join(out)


def _to_letter(number: int) -> str:
    out = ""
    while number > 0:
        number, rem = divmod(number - 1, 26)
        out = chr(ord("A") + rem) + out
    return out


def format_counter(number: int, fmt: str) -> str:
    """Render a counter value in one of the supported list formats."""
    if fmt == "upperRoman":
        return _to_roman(number)
    if fmt == "lowerRoman":
        return _to_roman(number).lower()
    if fmt == "upperLetter":
        return _to_letter(number)
    if fmt == "lowerLetter":
        return _to_letter(number).lower()
    return str(number)


class HeadingNumberer:
    """Produces hierarchical heading labels such as ``1.2`` or ``I.A``."""

    def __init__(self, levels: list[tuple[str, str]]):
        self.levels = levels
        self.counters = [0] * len(levels)

    def next_label(self, heading_level: int) -> str:
        depth = min(max(heading_level, 1), len(self.levels)) - 1
        self.counters[depth] += 1
        for deeper in range(depth + 1, len(self.counters)):
            self.counters[deeper] = 0

        _, template = self.levels[depth]
        label = template
        for idx in range(len(self.levels), 0, -1):
            fmt = self.levels[idx - 1][0]
            label = label.replace(f"%{idx}", format_counter(max(self.counters[idx - 1], 1), fmt))
        return label


def _set_cell_shading(cell, hex_color: str):
    """Apply background shading to a table cell."""
    shading_elm = parse_xml(
        f'<w:shd {nsdecls("w")} w:fill="{hex_color}" w:val="clear"/>'
    )
    cell._tc.get_or_add_tcPr().append(shading_elm)


def _append_field(paragraph, instruction: str, placeholder: str = "1"):
    """Append a simple field (PAGE, NUMPAGES, ...) to *paragraph*."""
    field = parse_xml(
        f'<w:fldSimple {nsdecls("w")} w:instr="{instruction}">'
        f"<w:r><w:t>{placeholder}</w:t></w:r>"
        "</w:fldSimple>"
    )
    paragraph._p.append(field)


class DOCXGenerator(BaseGenerator):
    """Generates Word (.docx) documents from titled, nested sections."""

    kind = ArtifactKind.DOCUMENT
    request_model = WordRequest

    def resolve_config(self, payload: WordRequest) -> WordConfig:
        return merge_config(DEFAULT_WORD_CONFIG, payload.word_config)

    def validate(self, payload: WordRequest) -> None:
        if not payload.sections:
            raise ValidationError(
                "Sections is required!",
                "Please make sure you have sent the sections content.",
            )
        self.resolve_config(payload)

    def build(self, payload: WordRequest) -> bytes:
        """Generate a DOCX file and return it as bytes."""
        config = self.resolve_config(payload)
        doc = Document()

        self._configure_default_style(doc, config)
        self._configure_page(doc, config)
        self._add_header_footer(doc, payload.header, payload.footer, config)

        title = doc.add_heading(level=0)
        title.paragraph_format.space_after = TITLE_SPACING_AFTER
        title_run = title.add_run(payload.title)
        title_run.font.size = Pt(TITLE_FONT_SIZE)

        if config.show_table_of_content:
            self._add_table_of_contents(doc)

        numberer = self._numberer(config)
        for section in payload.sections:
            self._render_section(doc, section, numberer)

        buf = io.BytesIO()
        doc.save(buf)
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    #  Document setup
    # ------------------------------------------------------------------ #

    def _configure_default_style(self, doc: Document, config: WordConfig):
        style = doc.styles["Normal"]
        style.font.name = config.font_family
        style.font.size = Pt(config.font_size)
        style.paragraph_format.line_spacing = float(config.line_height)

    def _configure_page(self, doc: Document, config: WordConfig):
        section = doc.sections[0]
        if config.page_orientation == "landscape":
            width, height = section.page_width, section.page_height
            section.orientation = WD_ORIENT.LANDSCAPE
            section.page_width, section.page_height = height, width

        top, bottom, left, right = PAGE_MARGINS[config.margins]
        section.top_margin = Twips(top)
        section.bottom_margin = Twips(bottom)
        section.left_margin = Twips(left)
        section.right_margin = Twips(right)

    def _add_header_footer(
        self,
        doc: Document,
        header: HeaderFooterSpec | None,
        footer: HeaderFooterSpec | None,
        config: WordConfig,
    ):
        section = doc.sections[0]

        if header and header.text:
            para = section.header.paragraphs[0]
            para.text = header.text
            para.alignment = ALIGNMENTS[header.alignment]

        paragraphs = section.footer.paragraphs
        if footer and footer.text:
            paragraphs[0].text = footer.text
            paragraphs[0].alignment = ALIGNMENTS[footer.alignment]

        if config.show_page_number:
            para = paragraphs[0] if not (footer and footer.text) else section.footer.add_paragraph()
            para.add_run("Page ")
            _append_field(para, "PAGE")
            para.add_run(" of ")
            _append_field(para, "NUMPAGES")

    def _add_table_of_contents(self, doc: Document):
        heading = doc.add_paragraph()
        run = heading.add_run("Table of Contents")
        run.bold = True
        run.font.size = Pt(TOC_FONT_SIZE)
        heading.paragraph_format.space_after = Pt(6)

        # Word fills the field in when the document is opened / fields are updated.
        toc = doc.add_paragraph()
        toc._p.append(parse_xml(
            f'<w:r {nsdecls("w")}><w:fldChar w:fldCharType="begin"/></w:r>'
        ))
        toc._p.append(parse_xml(
            f'<w:r {nsdecls("w")}><w:instrText xml:space="preserve">'
            'TOC \\o "1-4" \\h \\z \\u</w:instrText></w:r>'
        ))
        toc._p.append(parse_xml(
            f'<w:r {nsdecls("w")}><w:fldChar w:fldCharType="separate"/></w:r>'
        ))
        toc._p.append(parse_xml(
            f'<w:r {nsdecls("w")}><w:t>Update field to build the table of contents.</w:t></w:r>'
        ))
        toc._p.append(parse_xml(
            f'<w:r {nsdecls("w")}><w:fldChar w:fldCharType="end"/></w:r>'
        ))

    def _numberer(self, config: WordConfig) -> HeadingNumberer | None:
        levels = NUMBERING_OPTIONS.get(config.numbering_reference)
        if levels is None and config.show_numbering_in_header:
            levels = NUMBERING_OPTIONS[DEFAULT_NUMBERING]
        return HeadingNumberer(levels) if levels else None

    # ------------------------------------------------------------------ #
    #  Section rendering
    # ------------------------------------------------------------------ #

    def _render_section(
        self, doc: Document, section: SectionSpec, numberer: HeadingNumberer | None
    ):
        """Render a section heading, its content, then its sub-sections."""
        level = min(max(section.heading_level, 1), 9)
        text = section.heading
        if numberer is not None:
            text = f"{numberer.next_label(section.heading_level)} {text}"

        heading = doc.add_heading(text, level=level)
        heading.paragraph_format.space_before = HEADING_SPACING
        heading.paragraph_format.space_after = HEADING_SPACING

        for item in section.content:
            self._render_item(doc, item)

        for sub_section in section.sub_sections:
            self._render_section(doc, sub_section, numberer)

    def _render_item(self, doc: Document, item: ContentItem):
        if item.type == "paragraph":
            doc.add_paragraph(item.text or "")
        elif item.type == "listing":
            for entry in item.items or []:
                doc.add_paragraph(entry, style="List Bullet")
        elif item.type == "table":
            self._render_table(doc, item)
        elif item.type == "pageBreak":
            doc.add_paragraph().add_run().add_break(WD_BREAK.PAGE)
        elif item.type == "emptyLine":
            doc.add_paragraph()

    def _render_table(self, doc: Document, item: ContentItem):
        """Render a table with an optional shaded header row."""
        headers = item.headers or []
        rows = [[cell.text for cell in row.cells] for row in item.rows or []]
        num_cols = max([len(headers)] + [len(r) for r in rows])
        if num_cols == 0:
            return

        all_rows = ([headers] if headers else []) + rows
        table = doc.add_table(rows=len(all_rows), cols=num_cols)
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        table.style = "Table Grid"

        for row_idx, row_data in enumerate(all_rows):
            is_header = bool(headers) and row_idx == 0
            for col_idx in range(num_cols):
                cell = table.rows[row_idx].cells[col_idx]
                cell.text = ""
                para = cell.paragraphs[0]
                run = para.add_run(row_data[col_idx] if col_idx < len(row_data) else "")
                if is_header:
                    run.bold = True
                    para.alignment = WD_ALIGN_PARAGRAPH.CENTER
                    _set_cell_shading(cell, TABLE_HEADER_FILL)
