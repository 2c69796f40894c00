"""PowerPoint presentation generator using python-pptx."""

import io
import re

from pptx import Presentation
from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from artifact_server.storage.store import ArtifactKind
from artifact_server.utils.exceptions import ValidationError

from .base import BaseGenerator, merge_config
from .models import PowerpointRequest, SlideConfig, SlideSpec

DEFAULT_SLIDE_CONFIG = SlideConfig()

# Slide sizes in inches (width, height)
SLIDE_LAYOUTS = {
    "LAYOUT_WIDE": (13.333, 7.5),
    "LAYOUT_16x9": (10.0, 5.625),
    "LAYOUT_16x10": (10.0, 6.25),
    "LAYOUT_4x3": (10.0, 7.5),
}

CHART_TYPES = {
    "pie": XL_CHART_TYPE.PIE,
    "line": XL_CHART_TYPE.LINE_MARKERS,
    "bar": XL_CHART_TYPE.COLUMN_CLUSTERED,
    "doughnut": XL_CHART_TYPE.DOUGHNUT,
}

# Alternating body-row fills for table slides
TABLE_ROW_FILLS = ("E8F1FA", "DDEBF7")

FOOTER_HEIGHT = Inches(0.6)
BLANK_LAYOUT = 6

_NUMBER = re.compile(r"^[+-]?\d+(\.\d+)?$")
_PERCENT = re.compile(r"^[+-]?\d+(\.\d+)?%$")
_CURRENCY = re.compile(r"^[€$]\d+(\.\d+)?$")


def _hex_to_rgb(hex_color: str) -> RGBColor:
    """Convert a hex color string (with or without #) to an RGBColor."""
    return RGBColor.from_string(hex_color.lstrip("#").upper())


def detect_type(value: str) -> str:
    """Classify a table cell as currency, percent, number or text."""
    if _CURRENCY.match(value):
        return "currency"
    if _PERCENT.match(value):
        return "percent"
    if _NUMBER.match(value):
        return "number"
    return "text"


def _set_text_style(
    run,
    *,
    font_name: str,
    font_size: float,
    bold: bool = False,
    color: str | None = None,
):
    run.font.name = font_name
    run.font.size = Pt(font_size)
    run.font.bold = bold
    if color:
        run.font.color.rgb = _hex_to_rgb(color)


def _set_cell_border(cell, hex_color: str, width_pt: float):
    """Draw all four borders of a table cell."""
    tc_pr = cell._tc.get_or_add_tcPr()
    for tag in ("a:lnL", "a:lnR", "a:lnT", "a:lnB"):
        line = OxmlElement(tag)
        line.set("w", str(int(Pt(width_pt))))
        fill = OxmlElement("a:solidFill")
        color = OxmlElement("a:srgbClr")
        color.set("val", hex_color.lstrip("#").upper())
        fill.append(color)
        line.append(fill)
        tc_pr.append(line)


class PPTXGenerator(BaseGenerator):
    """Generates PowerPoint (.pptx) presentations from slide definitions."""

    kind = ArtifactKind.PRESENTATION
    request_model = PowerpointRequest

    def resolve_config(self, payload: PowerpointRequest) -> SlideConfig:
        return merge_config(DEFAULT_SLIDE_CONFIG, payload.slide_config)

    def validate(self, payload: PowerpointRequest) -> None:
        if not payload.slides:
            raise ValidationError(
                "Presentation slides is required!",
                "Please make sure you have sent the slide content.",
            )
        for index, slide in enumerate(payload.slides, start=1):
            if not slide.type or not slide.title:
                raise ValidationError(f"Slide {index} is missing required properties: type or title.")
            if slide.type == "content_slide" and not slide.content:
                raise ValidationError(f"Invalid content length on slide {index}")
            if slide.type == "table_slide" and not (
                slide.content and all(isinstance(row, list) for row in slide.content)
            ):
                raise ValidationError(f"Table slide {index} needs a list of rows")
            if slide.type == "chart_slide" and slide.chart_content is None:
                raise ValidationError(f"Chart slide {index} is missing chartContent")
        self.resolve_config(payload)

    def build(self, payload: PowerpointRequest) -> bytes:
        """Generate a PPTX file and return it as bytes."""
        config = self.resolve_config(payload)
        prs = Presentation()
        width, height = SLIDE_LAYOUTS[config.layout]
        prs.slide_width = Inches(width)
        prs.slide_height = Inches(height)

        for number, slide_data in enumerate(payload.slides, start=1):
            if slide_data.type == "title_slide":
                slide = self._add_title_slide(prs, slide_data, config)
            elif slide_data.type == "table_slide":
                slide = self._add_table_slide(prs, slide_data, config)
            elif slide_data.type == "chart_slide":
                slide = self._add_chart_slide(prs, slide_data, config)
            else:
                slide = self._add_content_slide(prs, slide_data, config)

            if config.show_footer:
                self._add_footer(prs, slide, number, config)

        buf = io.BytesIO()
        prs.save(buf)
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    #  Slide builders
    # ------------------------------------------------------------------ #

    def _new_slide(self, prs: Presentation, config: SlideConfig):
        slide = prs.slides.add_slide(prs.slide_layouts[BLANK_LAYOUT])
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _hex_to_rgb(config.background_color)
        return slide

    def _body_box(self, prs: Presentation, config: SlideConfig) -> tuple[int, int, int, int]:
        """Left, top, width, height of the body placeholder area."""
        ratio = 0.6 if config.show_footer else 0.7
        return (
            int(prs.slide_width * 0.1),
            int(prs.slide_height * 0.2),
            int(prs.slide_width * 0.8),
            int(prs.slide_height * ratio),
        )

    def _add_heading(self, prs: Presentation, slide, text: str, config: SlideConfig):
        box = slide.shapes.add_textbox(
            int(prs.slide_width * 0.1),
            int(prs.slide_height * 0.05),
            int(prs.slide_width * 0.8),
            Inches(1.0),
        )
        tf = box.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = MSO_ANCHOR.MIDDLE
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.CENTER
        run = p.add_run()
        run.text = text
        _set_text_style(
            run, font_name=config.font_family, font_size=config.header_font_size, color=config.text_color
        )

    def _add_title_slide(self, prs: Presentation, slide_data: SlideSpec, config: SlideConfig):
        slide = self._new_slide(prs, config)
        left = int(prs.slide_width * 0.1)
        width = int(prs.slide_width * 0.8)

        title_box = slide.shapes.add_textbox(left, int(prs.slide_height * 0.2), width, Inches(0.75))
        tf = title_box.text_frame
        tf.word_wrap = True
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.CENTER
        run = p.add_run()
        run.text = slide_data.title
        _set_text_style(
            run, font_name=config.font_family, font_size=config.title_font_size, color=config.text_color
        )

        if slide_data.subtitle:
            sub_box = slide.shapes.add_textbox(left, int(prs.slide_height * 0.35), width, Inches(1.25))
            tf2 = sub_box.text_frame
            tf2.word_wrap = True
            p2 = tf2.paragraphs[0]
            p2.alignment = PP_ALIGN.CENTER
            run2 = p2.add_run()
            run2.text = slide_data.subtitle
            _set_text_style(
                run2, font_name=config.font_family, font_size=config.header_font_size, color=config.text_color
            )
        return slide

    def _add_content_slide(self, prs: Presentation, slide_data: SlideSpec, config: SlideConfig):
        slide = self._new_slide(prs, config)
        self._add_heading(prs, slide, slide_data.title, config)

        left, top, width, height = self._body_box(prs, config)
        box = slide.shapes.add_textbox(left, top, width, height)
        tf = box.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = MSO_ANCHOR.TOP

        items = [str(item) for item in slide_data.content]
        bullets = len(items) > 1
        for idx, item in enumerate(items):
            p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
            p.space_after = Pt(6)
            run = p.add_run()
            run.text = f"• {item}" if bullets else item
            _set_text_style(
                run, font_name=config.font_family, font_size=config.body_font_size, color=config.text_color
            )
        return slide

    def _add_table_slide(self, prs: Presentation, slide_data: SlideSpec, config: SlideConfig):
        slide = self._new_slide(prs, config)
        self._add_heading(prs, slide, slide_data.title, config)

        rows = [[str(cell) for cell in row] for row in slide_data.content]
        num_rows = len(rows)
        num_cols = max(len(r) for r in rows)
        left, top, width, height = self._body_box(prs, config)
        table = slide.shapes.add_table(num_rows, num_cols, left, top, width, height).table

        for row_idx, row_data in enumerate(rows):
            is_header = row_idx == 0
            for col_idx in range(num_cols):
                cell = table.cell(row_idx, col_idx)
                text = row_data[col_idx] if col_idx < len(row_data) else ""
                cell.text = ""
                p = cell.text_frame.paragraphs[0]
                run = p.add_run()
                run.text = text

                if config.show_table_border:
                    _set_cell_border(cell, config.table_border_color, config.table_border_thickness)

                if is_header:
                    _set_text_style(
                        run,
                        font_name=config.font_family,
                        font_size=config.table_font_size,
                        bold=True,
                        color=config.table_header_text_color,
                    )
                    fill_color = config.table_header_background_color
                    p.alignment = PP_ALIGN.CENTER
                else:
                    _set_text_style(
                        run,
                        font_name=config.font_family,
                        font_size=config.table_font_size,
                        color=config.table_text_color,
                    )
                    fill_color = TABLE_ROW_FILLS[(row_idx - 1) % 2]
                    p.alignment = PP_ALIGN.LEFT if detect_type(text) == "text" else PP_ALIGN.CENTER

                cell.fill.solid()
                cell.fill.fore_color.rgb = _hex_to_rgb(fill_color)
                cell.vertical_anchor = MSO_ANCHOR.MIDDLE
        return slide

    def _add_chart_slide(self, prs: Presentation, slide_data: SlideSpec, config: SlideConfig):
        slide = self._new_slide(prs, config)
        self._add_heading(prs, slide, slide_data.title, config)

        chart_content = slide_data.chart_content
        chart_data = CategoryChartData()
        categories = chart_content.data[0].labels if chart_content.data else []
        chart_data.categories = categories
        for series in chart_content.data:
            chart_data.add_series(series.name, series.values)

        left, top, width, height = self._body_box(prs, config)
        chart = slide.shapes.add_chart(
            CHART_TYPES[chart_content.type], left, top, width, height, chart_data
        ).chart
        chart.has_legend = True
        chart.legend.position = XL_LEGEND_POSITION.BOTTOM
        chart.legend.include_in_layout = False

        if chart_content.type in ("pie", "doughnut"):
            plot = chart.plots[0]
            plot.has_data_labels = True
            plot.data_labels.show_percentage = True
            plot.data_labels.number_format = "0%"
            plot.data_labels.number_format_is_linked = False
        return slide

    # ------------------------------------------------------------------ #
    #  Footer
    # ------------------------------------------------------------------ #

    def _add_footer(self, prs: Presentation, slide, number: int, config: SlideConfig):
        top = prs.slide_height - FOOTER_HEIGHT
        bar = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, 0, top, prs.slide_width, FOOTER_HEIGHT)
        bar.fill.solid()
        bar.fill.fore_color.rgb = _hex_to_rgb(config.footer_background_color)
        bar.line.fill.background()

        tf = bar.text_frame
        tf.vertical_anchor = MSO_ANCHOR.MIDDLE
        p = tf.paragraphs[0]
        p.alignment = PP_ALIGN.CENTER
        run = p.add_run()
        run.text = config.footer_text
        _set_text_style(
            run, font_name=config.font_family, font_size=config.footer_font_size, color=config.footer_text_color
        )

        if config.show_slide_number:
            box = slide.shapes.add_textbox(
                prs.slide_width - Inches(1.0), top, Inches(0.8), FOOTER_HEIGHT
            )
            box.text_frame.vertical_anchor = MSO_ANCHOR.MIDDLE
            num_p = box.text_frame.paragraphs[0]
            num_p.alignment = PP_ALIGN.RIGHT
            num_run = num_p.add_run()
            num_run.text = str(number)
            _set_text_style(
                num_run,
                font_name=config.font_family,
                font_size=config.footer_font_size,
                bold=True,
                color=config.footer_text_color,
            )
