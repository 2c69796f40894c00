"""Request bodies and renderer configuration for each artifact kind."""

from typing import Annotated, Any, ClassVar, Literal, Optional

from pydantic import Field, field_validator

from .base import CamelModel, RenderConfig

HexColor = Annotated[str, Field(pattern=r"^#?[0-9A-Fa-f]{6}$")]


# ---------------------------------------------------------------------------
# Spreadsheet
# ---------------------------------------------------------------------------

class CellData(CamelModel):
    type: Literal["static_value", "formula"] = "static_value"
    value: str | int | float | bool | None = None


class ColumnSpec(CamelModel):
    name: str
    type: Literal["string", "number", "boolean", "percent", "currency", "date"] = "string"
    format: Optional[str] = None


class TableSpec(CamelModel):
    title: Optional[str] = None
    start_cell: str = "A1"
    columns: list[ColumnSpec] = []
    rows: list[list[CellData]] = []
    skip_header: bool = False


class SheetSpec(CamelModel):
    sheet_name: str
    tables: list[TableSpec] = []


class ExcelConfig(RenderConfig):
    font_family: str = "Calibri"
    table_title_font_size: float = 13
    header_font_size: float = 11
    font_size: float = 11
    auto_fit_column_width: bool = True
    auto_filter: bool = False
    wrap_text: bool = False
    border_style: Optional[Literal["thin", "double", "dashed", "thick"]] = None

    legacy_aliases: ClassVar[dict[str, str]] = {"titleFontSize": "table_title_font_size"}
    # Only a missing or null key keeps the default here
    blank_keeps_default: ClassVar[bool] = False

    @field_validator("border_style", mode="before")
    @classmethod
    def _none_means_no_border(cls, value: Any) -> Any:
        return None if value == "none" else value


class ExcelRequest(CamelModel):
    sheets_data: list[SheetSpec] = []
    excel_configs: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

class ChartSeries(CamelModel):
    name: str = ""
    labels: list[str] = []
    values: list[float] = []


class ChartContent(CamelModel):
    type: Literal["pie", "line", "bar", "doughnut"]
    data: list[ChartSeries] = []


class SlideSpec(CamelModel):
    type: Literal["title_slide", "content_slide", "table_slide", "chart_slide", ""] = ""
    title: str = ""
    subtitle: Optional[str] = None
    # content_slide: list of strings; table_slide: list of rows (first = headers)
    content: list[Any] = []
    chart_content: Optional[ChartContent] = None


class SlideConfig(RenderConfig):
    layout: Literal["LAYOUT_WIDE", "LAYOUT_16x9", "LAYOUT_16x10", "LAYOUT_4x3"] = "LAYOUT_WIDE"
    title_font_size: float = 44
    header_font_size: float = 32
    body_font_size: float = 22
    font_family: str = "Calibri"
    background_color: HexColor = "#FFFFFF"
    text_color: HexColor = "#000000"
    show_footer: bool = False
    show_slide_number: bool = False
    footer_background_color: HexColor = "#003B75"
    footer_text: str = "footer text"
    footer_text_color: HexColor = "#FFFFFF"
    footer_font_size: float = 10
    show_table_border: bool = True
    table_header_background_color: HexColor = "#003B75"
    table_header_text_color: HexColor = "#FFFFFF"
    table_border_thickness: float = 1
    table_border_color: HexColor = "#000000"
    table_font_size: float = 14
    table_text_color: HexColor = "#000000"


class PowerpointRequest(CamelModel):
    slides: list[SlideSpec] = []
    slide_config: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

class TableCellText(CamelModel):
    text: str = ""


class TableRowSpec(CamelModel):
    cells: list[TableCellText] = []


class ContentItem(CamelModel):
    type: Literal["paragraph", "listing", "table", "pageBreak", "emptyLine"]
    text: Optional[str] = None
    items: Optional[list[str]] = None
    headers: Optional[list[str]] = None
    rows: Optional[list[TableRowSpec]] = None


class SectionSpec(CamelModel):
    heading: str = ""
    heading_level: int = Field(default=1, ge=1)
    content: list[ContentItem] = []
    sub_sections: list["SectionSpec"] = []


class HeaderFooterSpec(CamelModel):
    text: str = ""
    alignment: Literal["left", "center", "right"] = "left"


class WordConfig(RenderConfig):
    font_size: float = 12
    line_height: Literal["1", "1.15", "1.25", "1.5", "2"] = "1.15"
    font_family: str = "Arial"
    show_page_number: bool = False
    show_table_of_content: bool = False
    show_numbering_in_header: bool = False
    numbering_reference: str = ""
    page_orientation: Literal["portrait", "landscape"] = "portrait"
    margins: Literal["normal", "narrow", "moderate", "wide", "mirrored"] = "normal"

    @field_validator("line_height", mode="before")
    @classmethod
    def _line_height_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value:g}"
        return value


class WordRequest(CamelModel):
    title: str = ""
    header: Optional[HeaderFooterSpec] = None
    footer: Optional[HeaderFooterSpec] = None
    sections: list[SectionSpec] = []
    word_config: dict[str, Any] = Field(default_factory=dict)
