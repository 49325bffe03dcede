"""Rendering of the UPD template into a finished workbook.

Rendering runs in three strictly ordered phases over one loaded workbook:

1. sheet-wide pass: every existing cell is rendered without a position, so
   document-level expressions are resolved and position-bound ones are kept;
2. row pass: the template row is duplicated once per line item and each row
   is rendered with its own position in scope;
3. cleanup pass: any cell still containing ``${`` is blanked and reported.

After the cleanup pass the sheet contains no expression syntax at all.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from io import BytesIO
from typing import Callable, Iterable, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.cell import Cell
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from . import pdf_exporter
from .context import DocumentContext, LineItem
from .errors import TemplateError
from .merge_guard import is_non_writable, write_cell
from .rows import expand_template_row
from .template import render_value
from .tokenizer import find_expressions, has_expression

DEFAULT_TEMPLATE_ROW = 21  # строка позиций в шаблоне УПД МойСклад


@dataclass(frozen=True)
class ClearedExpression:
    """A cell blanked by the cleanup pass."""

    sheet: str
    coordinate: str
    text: str
    expressions: Sequence[str]


@dataclass
class RenderResult:
    workbook: Workbook
    cleared: List[ClearedExpression] = field(default_factory=list)


class UpdRenderer:
    """Fill one UPD template worksheet from a :class:`DocumentContext`."""

    def __init__(
        self,
        template_row: int = DEFAULT_TEMPLATE_ROW,
        sheet_name: Optional[str] = None,
    ) -> None:
        if template_row < 1:
            raise TemplateError(f"Template row must be positive, got {template_row}")
        self.template_row = template_row
        self.sheet_name = sheet_name
        self.logger = logging.getLogger("UpdRenderer")

    # ----------------------------- ЗАГРУЗКА/СОХРАНЕНИЕ -----------------------------

    def load_template(self, template: bytes) -> Workbook:
        if not template:
            raise TemplateError("Template is empty")
        try:
            return load_workbook(BytesIO(template))
        except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
            raise TemplateError(f"Template is not a readable XLSX workbook: {exc}") from exc

    def select_sheet(self, wb: Workbook) -> Worksheet:
        if self.sheet_name is not None:
            if self.sheet_name not in wb.sheetnames:
                raise TemplateError(f"Template sheet not found: {self.sheet_name}")
            return wb[self.sheet_name]
        if not wb.worksheets:
            raise TemplateError("Template sheet not found")
        return wb.worksheets[0]

    @staticmethod
    def save(wb: Workbook) -> bytes:
        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    # ----------------------------- ФАЗЫ -----------------------------

    def _render_cells(
        self, cells: Iterable[Cell], context: DocumentContext, item: Optional[LineItem]
    ) -> int:
        written = 0
        for cell in cells:
            if not has_expression(cell.value) or is_non_writable(cell):
                continue
            rendered = render_value(cell.value, context, item)
            if rendered != cell.value and write_cell(cell, rendered):
                written += 1
        return written

    def render_sheet_wide(self, ws: Worksheet, context: DocumentContext) -> int:
        """Phase 1: resolve document-level expressions in every existing cell."""
        written = 0
        for row in ws.iter_rows():
            written += self._render_cells(row, context, None)
        self.logger.debug("Sheet-wide pass updated %d cell(s)", written)
        return written

    def render_positions(self, ws: Worksheet, context: DocumentContext) -> List[int]:
        """Phase 2: materialize one row per position and fill it."""
        positions = context.positions
        if not positions:
            self.logger.debug("No positions; template row %d left for cleanup", self.template_row)
            return []

        rows = expand_template_row(ws, self.template_row, len(positions))
        max_col = ws.max_column
        for row_idx, item in zip(rows, positions):
            cells = (ws.cell(row_idx, c) for c in range(1, max_col + 1))
            self._render_cells(cells, context, item)
        self.logger.debug("Rendered %d position row(s)", len(rows))
        return rows

    def cleanup(self, ws: Worksheet) -> List[ClearedExpression]:
        """Phase 3: blank every cell that still holds expression syntax."""
        cleared: List[ClearedExpression] = []
        for row in ws.iter_rows():
            for cell in row:
                if not has_expression(cell.value) or is_non_writable(cell):
                    continue
                entry = ClearedExpression(
                    sheet=ws.title,
                    coordinate=cell.coordinate,
                    text=cell.value,
                    expressions=tuple(find_expressions(cell.value)),
                )
                if write_cell(cell, ""):
                    cleared.append(entry)
                    self.logger.warning(
                        "Cleared unresolved expression(s) at %s!%s: %s",
                        entry.sheet,
                        entry.coordinate,
                        ", ".join(entry.expressions) or entry.text,
                    )
        return cleared

    # ----------------------------- ПУБЛИЧНЫЙ АПИ -----------------------------

    def render_workbook(self, wb: Workbook, context: DocumentContext) -> RenderResult:
        ws = self.select_sheet(wb)
        self.render_sheet_wide(ws, context)
        self.render_positions(ws, context)
        cleared = self.cleanup(ws)
        return RenderResult(workbook=wb, cleared=cleared)

    def render(self, template: bytes, context: DocumentContext) -> bytes:
        self.logger.info(
            "Rendering UPD %s with %d position(s)",
            context.invoice_number,
            len(context.positions),
        )
        wb = self.load_template(template)
        result = self.render_workbook(wb, context)
        if result.cleared:
            self.logger.info("Cleanup blanked %d cell(s)", len(result.cleared))
        return self.save(result.workbook)


def render(
    template: bytes,
    context: DocumentContext,
    *,
    template_row: int = DEFAULT_TEMPLATE_ROW,
    sheet_name: Optional[str] = None,
) -> bytes:
    """Render *template* bytes into XLSX bytes for *context*."""
    return UpdRenderer(template_row, sheet_name).render(template, context)


def render_to_pdf(
    template: bytes,
    context: DocumentContext,
    *,
    converter: Optional[Callable[[bytes], bytes]] = None,
    template_row: int = DEFAULT_TEMPLATE_ROW,
    sheet_name: Optional[str] = None,
) -> bytes:
    """Render *template* and convert the result to PDF bytes.

    Raises :class:`~upd_render.errors.PdfNotAvailableError` when the converter
    is missing or fails; template problems surface as ``TemplateError`` first.
    """
    if converter is None:
        converter = pdf_exporter.xlsx_bytes_to_pdf
    xlsx = render(template, context, template_row=template_row, sheet_name=sheet_name)
    return converter(xlsx)


def output_filename(context: DocumentContext, fmt: str) -> str:
    return f"UPD_{context.invoice_number}.{fmt.lower()}"
