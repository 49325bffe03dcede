from __future__ import annotations

import logging

from openpyxl import Workbook

from upd_render.merge_guard import is_merged_child, is_non_writable, merged_bounds, write_cell


def test_is_merged_child():
    ranges = [(3, 1, 4, 3)]
    assert is_merged_child(3, 2, ranges) is True
    assert is_merged_child(4, 1, ranges) is True
    assert is_merged_child(3, 1, ranges) is False
    assert is_merged_child(5, 1, ranges) is False
    assert is_merged_child(1, 1, []) is False


def test_anchor_is_writable_and_children_are_not(caplog):
    wb = Workbook()
    ws = wb.active
    ws.merge_cells("A1:C2")

    assert merged_bounds(ws) == ((1, 1, 2, 3),)
    assert write_cell(ws["A1"], "Поставщик") is True
    assert ws["A1"].value == "Поставщик"

    with caplog.at_level(logging.DEBUG, logger="upd_render.merge_guard"):
        assert write_cell(ws["B2"], "дубль") is False
    assert ws["B2"].value is None
    assert "B2" in caplog.text


def test_stale_cell_reference_inside_merge_is_rejected():
    wb = Workbook()
    ws = wb.active
    stale = ws["B1"]
    ws.merge_cells("A1:B1")

    assert is_non_writable(stale) is True
    assert write_cell(stale, "x") is False


def test_cells_outside_merges_are_writable():
    wb = Workbook()
    ws = wb.active
    assert is_non_writable(ws["D4"]) is False
    ws.merge_cells("A1:B1")
    assert is_non_writable(ws["D4"]) is False
    assert write_cell(ws["D4"], 5) is True
    assert ws["D4"].value == 5
