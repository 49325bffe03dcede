from __future__ import annotations

from types import SimpleNamespace

from openpyxl import Workbook
from openpyxl.drawing.spreadsheet_drawing import AnchorMarker, OneCellAnchor
from openpyxl.styles import Border, Font, Side

from upd_render.rows import _shift_images, copy_style, expand_template_row


def _merged(ws):
    return {str(m) for m in ws.merged_cells.ranges}


def _sheet():
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "Шапка"
    ws["A2"] = "${position.printName}"
    ws["A2"].font = Font(bold=True)
    ws["B2"] = "${position.quantity}"
    ws["B2"].number_format = "0.00"
    ws["B2"].border = Border(bottom=Side(style="thin"))
    ws["C2"] = "${position.good.code}"
    ws.merge_cells("C2:D2")
    ws["A3"] = "Итого"
    ws.merge_cells("A3:D3")
    ws.merge_cells("E1:E3")
    ws.row_dimensions[2].height = 18
    ws.row_dimensions[3].height = 30
    ws.print_area = "A1:E5"
    return ws


def test_copy_style_copies_value_and_format():
    ws = _sheet()
    copy_style(ws["B2"], ws["B9"])
    assert ws["B9"].value == "${position.quantity}"
    assert ws["B9"].number_format == "0.00"
    assert ws["B9"].border.bottom.style == "thin"


def test_copy_style_without_style_copies_value_only():
    ws = _sheet()
    ws["F1"] = "plain"
    copy_style(ws["F1"], ws["F9"])
    assert ws["F9"].value == "plain"
    assert not ws["F9"].has_style


def test_single_item_leaves_sheet_untouched():
    ws = _sheet()
    before = _merged(ws)
    assert expand_template_row(ws, 2, 1) == [2]
    assert expand_template_row(ws, 2, 0) == [2]
    assert _merged(ws) == before
    assert ws["A3"].value == "Итого"


def test_expansion_copies_template_row():
    ws = _sheet()
    rows = expand_template_row(ws, 2, 3)

    assert rows == [2, 3, 4]
    for r in rows:
        assert ws.cell(r, 1).value == "${position.printName}"
        assert ws.cell(r, 1).font.bold is True
        assert ws.cell(r, 2).number_format == "0.00"
        assert ws.row_dimensions[r].height == 18
        assert f"C{r}:D{r}" in _merged(ws)


def test_expansion_shifts_rows_below():
    ws = _sheet()
    expand_template_row(ws, 2, 3)

    assert ws["A1"].value == "Шапка"
    assert ws["A5"].value == "Итого"
    assert ws.row_dimensions[5].height == 30
    assert "A5:D5" in _merged(ws)
    assert "A3:D3" not in _merged(ws)


def test_expansion_grows_crossing_merge_and_print_area():
    ws = _sheet()
    expand_template_row(ws, 2, 3)

    assert "E1:E5" in _merged(ws)
    assert "A1:E7" in ws.print_area.replace("$", "")


def test_expansion_without_print_area():
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "${position.printName}"
    assert expand_template_row(ws, 1, 2) == [1, 2]
    assert ws["A2"].value == "${position.printName}"
    assert not ws.print_area


def test_shift_images_moves_only_anchors_below():
    below = SimpleNamespace(anchor="B10")
    above = SimpleNamespace(anchor="B1")
    marker = OneCellAnchor(_from=AnchorMarker(col=0, row=9))
    one_cell = SimpleNamespace(anchor=marker)
    ws = SimpleNamespace(_images=[below, above, one_cell])

    _shift_images(ws, 3, 4)

    assert below.anchor == "B14"
    assert above.anchor == "B1"
    assert marker._from.row == 13
