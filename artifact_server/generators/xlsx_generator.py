"""Excel spreadsheet generator using openpyxl."""

import io
from datetime import datetime
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import column_index_from_string, coordinate_from_string
from openpyxl.utils.exceptions import CellCoordinatesException
from openpyxl.worksheet.worksheet import Worksheet

from artifact_server.storage.store import ArtifactKind
from artifact_server.utils.exceptions import ValidationError

from .base import BaseGenerator, merge_config
from .models import ColumnSpec, ExcelConfig, ExcelRequest, TableSpec

DEFAULT_EXCEL_CONFIG = ExcelConfig()

# Default number formats per column type when the column gives none.
DEFAULT_FORMATS = {
    "number": "0",
    "percent": "0.00%",
    "currency": "$#,##0",
    "date": "yyyy-mm-dd",
}

_TRUE_STRINGS = {"true", "yes", "1", "y"}


def _parse_start_cell(start_cell: str) -> tuple[int, int]:
    """Return ``(column, row)`` for an A1-style reference."""
    column_letter, row = coordinate_from_string(start_cell.strip().upper())
    return column_index_from_string(column_letter), row


def _to_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    try:
        return float(str(value).replace(",", "").strip())
    except ValueError:
        return value


def _coerce_value(value: Any, column_type: str, has_format: bool) -> Any:
    """Convert a raw cell value to the Python type openpyxl should store."""
    if value is None:
        return ""

    if column_type == "number":
        number = _to_number(value)
        # Without an explicit format numbers are stored as whole numbers.
        if isinstance(number, float) and not has_format:
            return round(number)
        return number
    if column_type in ("percent", "currency"):
        return _to_number(value)
    if column_type == "boolean":
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return bool(value)
    if column_type == "date":
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip())
            except ValueError:
                return value
        return value
    return str(value)


def _auto_column_width(ws: Worksheet, col_idx: int, first_row: int, last_row: int) -> None:
    max_len = 0
    for row in ws.iter_rows(min_row=first_row, max_row=last_row, min_col=col_idx, max_col=col_idx):
        for cell in row:
            if cell.value is not None:
                max_len = max(max_len, len(str(cell.value)))
    ws.column_dimensions[get_column_letter(col_idx)].width = max_len + 2


class XLSXGenerator(BaseGenerator):
    """Generates Excel (.xlsx) workbooks from sheet/table definitions."""

    kind = ArtifactKind.SPREADSHEET
    request_model = ExcelRequest

    def resolve_config(self, payload: ExcelRequest) -> ExcelConfig:
        return merge_config(DEFAULT_EXCEL_CONFIG, payload.excel_configs)

    def validate(self, payload: ExcelRequest) -> None:
        if not payload.sheets_data:
            raise ValidationError(
                "Sheets data is required!",
                "Please make sure you have sent the excel sheets content.",
            )
        for sheet in payload.sheets_data:
            for table in sheet.tables:
                try:
                    _parse_start_cell(table.start_cell)
                except (ValueError, CellCoordinatesException) as exc:
                    raise ValidationError(
                        f"Invalid start cell '{table.start_cell}' on sheet '{sheet.sheet_name}'"
                    ) from exc
        self.resolve_config(payload)

    def build(self, payload: ExcelRequest) -> bytes:
        """Generate an XLSX file and return it as bytes."""
        config = self.resolve_config(payload)
        wb = Workbook()
        wb.remove(wb.active)

        for sheet in payload.sheets_data:
            ws = wb.create_sheet(title=sheet.sheet_name[:31] or "Sheet")
            for table in sheet.tables:
                self._write_table(ws, table, config)

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    # ------------------------------------------------------------------ #
    #  Table population
    # ------------------------------------------------------------------ #

    def _write_table(self, ws: Worksheet, table: TableSpec, config: ExcelConfig) -> None:
        start_col, start_row = _parse_start_cell(table.start_cell)
        columns = table.columns
        num_cols = max(len(columns), max((len(r) for r in table.rows), default=0), 1)

        side = Side(style=config.border_style) if config.border_style else None
        border = Border(left=side, right=side, top=side, bottom=side) if side else Border()

        title_font = Font(name=config.font_family, bold=True, size=config.table_title_font_size)
        header_font = Font(name=config.font_family, bold=True, size=config.header_font_size)
        body_font = Font(name=config.font_family, size=config.font_size)
        centered = Alignment(horizontal="center", vertical="center", wrap_text=config.wrap_text)
        body_alignment = Alignment(wrap_text=config.wrap_text)

        row_idx = start_row

        # Title row, merged across the table width
        if table.title:
            cell = ws.cell(row=row_idx, column=start_col, value=table.title)
            if num_cols > 1:
                ws.merge_cells(
                    start_row=row_idx,
                    start_column=start_col,
                    end_row=row_idx,
                    end_column=start_col + num_cols - 1,
                )
            cell.alignment = centered
            cell.font = title_font
            cell.border = border
            row_idx += 1

        header_row = row_idx
        if not table.skip_header and columns:
            for offset, column in enumerate(columns):
                cell = ws.cell(row=row_idx, column=start_col + offset, value=column.name)
                cell.alignment = centered
                cell.font = header_font
                cell.border = border
            row_idx += 1

        for row_data in table.rows:
            for offset, cell_data in enumerate(row_data):
                column = columns[offset] if offset < len(columns) else ColumnSpec(name="")
                cell = ws.cell(row=row_idx, column=start_col + offset)
                number_format = column.format or DEFAULT_FORMATS.get(column.type)

                if cell_data.type == "formula":
                    formula = str(cell_data.value or "")
                    cell.value = formula if formula.startswith("=") else f"={formula}"
                else:
                    cell.value = _coerce_value(cell_data.value, column.type, bool(column.format))

                if column.type in DEFAULT_FORMATS and number_format:
                    cell.number_format = number_format
                cell.font = body_font
                cell.border = border
                cell.alignment = body_alignment
            row_idx += 1

        last_row = max(row_idx - 1, header_row)

        if config.auto_filter and columns:
            first = f"{get_column_letter(start_col)}{header_row}"
            last = f"{get_column_letter(start_col + len(columns) - 1)}{last_row}"
            ws.auto_filter.ref = f"{first}:{last}"

        if config.auto_fit_column_width:
            for offset in range(num_cols):
                _auto_column_width(ws, start_col + offset, header_row, last_row)
