"""Protection of merged ranges against writes into non-master cells.

Excel stores the value of a merged range only in its top-left (master) cell.
Writing into any other cell of the range produces duplicated text and visual
artefacts inside merged blocks of the printed document, so every write made by
the renderer goes through :func:`write_cell`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Tuple

from openpyxl.cell.cell import MergedCell
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)

Bounds = Tuple[int, int, int, int]  # min_row, min_col, max_row, max_col


def is_merged_child(row: int, col: int, ranges: Iterable[Bounds]) -> bool:
    """Return ``True`` if (*row*, *col*) lies inside a range but is not its anchor."""
    for min_row, min_col, max_row, max_col in ranges:
        if min_row <= row <= max_row and min_col <= col <= max_col:
            return (row, col) != (min_row, min_col)
    return False


def merged_bounds(ws: Worksheet) -> Tuple[Bounds, ...]:
    return tuple(
        (m.min_row, m.min_col, m.max_row, m.max_col) for m in ws.merged_cells.ranges
    )


def is_non_writable(cell: Any) -> bool:
    """Return ``True`` for a cell that is the non-master part of a merged range."""
    if isinstance(cell, MergedCell):
        return True
    ws = getattr(cell, "parent", None)
    merged = getattr(ws, "merged_cells", None)
    if merged is None or not merged.ranges:
        return False
    return is_merged_child(cell.row, cell.column, merged_bounds(ws))


def write_cell(cell: Any, value: Any) -> bool:
    """Assign *value* to *cell* unless the merge guard forbids it.

    Returns ``True`` when the value was written.
    """
    if is_non_writable(cell):
        logger.debug("Skipping write into merged cell %s", cell.coordinate)
        return False
    cell.value = value
    return True
