"""Duplication of the line-item template row.

openpyxl's ``insert_rows`` only moves cell values and styles; merged ranges,
row heights, images and the print area stay where they were.  The helpers
below take care of all of them so that the sheet keeps its layout after the
template row has been copied once per line item.
"""

from __future__ import annotations

import logging
from copy import copy
from typing import List, Tuple

from openpyxl.cell import Cell
from openpyxl.cell.cell import MergedCell
from openpyxl.drawing.spreadsheet_drawing import OneCellAnchor, TwoCellAnchor
from openpyxl.utils import get_column_letter, range_boundaries
from openpyxl.utils.cell import coordinate_from_string
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)

Bounds = Tuple[int, int, int, int]  # min_row, min_col, max_row, max_col


def copy_style(s: Cell, d: Cell) -> None:
    """Copy value and formatting of *s* into *d*."""
    d.value = s.value
    if not s.has_style:
        return
    d.font = copy(s.font)
    d.alignment = copy(s.alignment)
    d.fill = copy(s.fill)
    d.border = copy(s.border)
    d.number_format = s.number_format
    d.protection = copy(s.protection)


def _shift_images(ws: Worksheet, idx: int, amount: int) -> None:
    """Сдвигает изображения, расположенные ниже вставленных строк."""
    for image in getattr(ws, "_images", []):
        anchor = getattr(image, "anchor", None)
        if anchor is None:
            continue
        if isinstance(anchor, str):
            col, row = coordinate_from_string(anchor)
            if row >= idx:
                image.anchor = f"{col}{row + amount}"
        elif isinstance(anchor, TwoCellAnchor):
            from_attr = "from_" if hasattr(anchor, "from_") else "_from"
            if getattr(anchor, from_attr).row >= idx - 1:
                getattr(anchor, from_attr).row += amount
                anchor.to.row += amount
        elif isinstance(anchor, OneCellAnchor):
            if anchor._from.row >= idx - 1:
                anchor._from.row += amount


def _shift_row_dimensions(ws: Worksheet, after_row: int, amount: int) -> None:
    dims = ws.row_dimensions
    moved = {r: dims[r] for r in list(dims.keys()) if r > after_row}
    for r in moved:
        del dims[r]
    for r, dim in moved.items():
        dim.index = r + amount
        dims[r + amount] = dim


def _extend_print_area(ws: Worksheet, template_row: int, amount: int) -> None:
    area = ws.print_area
    if not area:
        return
    refs = []
    for part in area.split(","):
        ref = part.split("!")[-1].replace("$", "")
        min_col, min_row, max_col, max_row = range_boundaries(ref)
        if min_row > template_row:
            min_row += amount
        if max_row >= template_row:
            max_row += amount
        refs.append(
            f"{get_column_letter(min_col)}{min_row}:{get_column_letter(max_col)}{max_row}"
        )
    ws.print_area = refs


def _merge(ws: Worksheet, bounds: Bounds) -> None:
    min_row, min_col, max_row, max_col = bounds
    ws.merge_cells(
        start_row=min_row, start_column=min_col, end_row=max_row, end_column=max_col
    )


def expand_template_row(ws: Worksheet, template_row: int, count: int) -> List[int]:
    """Make room for *count* line items starting at *template_row*.

    For ``count > 1`` the template row is copied ``count - 1`` times directly
    below itself (values, styles, height and single-row merges).  All copies
    are made before any row is filled, so row indices do not shift under the
    caller afterwards.  Returns the row numbers to fill, in item order.
    """
    if count <= 1:
        return [template_row]

    add = count - 1
    insert_at = template_row + 1
    logger.debug(
        "Duplicating template row %d %d time(s) on sheet %s", template_row, add, ws.title
    )

    # снимаем затронутые слияния до вставки, иначе они останутся на старых строках
    row_merges: List[Bounds] = []
    shifted: List[Bounds] = []
    for m in list(ws.merged_cells.ranges):
        bounds = (m.min_row, m.min_col, m.max_row, m.max_col)
        if m.max_row < template_row:
            continue
        ws.unmerge_cells(str(m))
        if m.min_row > template_row:
            shifted.append((m.min_row + add, m.min_col, m.max_row + add, m.max_col))
        elif m.min_row == m.max_row == template_row:
            row_merges.append(bounds)
        else:
            # range crossing the template row grows with the inserted rows
            shifted.append((m.min_row, m.min_col, m.max_row + add, m.max_col))

    ws.insert_rows(insert_at, add)
    _shift_row_dimensions(ws, template_row, add)
    _shift_images(ws, insert_at, add)
    _extend_print_area(ws, template_row, add)

    src_dim = ws.row_dimensions[template_row]
    max_col = ws.max_column
    for k in range(add):
        dst_row = insert_at + k
        if src_dim.height is not None:
            ws.row_dimensions[dst_row].height = src_dim.height
        for c in range(1, max_col + 1):
            src = ws.cell(template_row, c)
            if isinstance(src, MergedCell):
                continue
            copy_style(src, ws.cell(dst_row, c))

    for bounds in shifted:
        _merge(ws, bounds)
    for min_row, min_col, _, max_col in row_merges:
        for r in range(template_row, template_row + count):
            _merge(ws, (r, min_col, r, max_col))

    return list(range(template_row, template_row + count))
