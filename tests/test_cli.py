from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from openpyxl import Workbook, load_workbook

import main
from upd_render import config, logging_utils, pdf_exporter, rules

_VARS = (
    "UPD_TEMPLATE_PATH",
    "UPD_TEMPLATE_ROW",
    "UPD_SHEET_NAME",
    "SOFFICE_PATH",
    "UPD_LOG_DIR",
    "UPD_DOTENV_DIR",
)


@pytest.fixture(autouse=True)
def workspace(monkeypatch, tmp_path):
    for name in _VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr(config, "_loaded_path", None)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("UPD_LOG_DIR", str(tmp_path / "logs"))
    logging_utils.reset_logging()
    yield tmp_path
    logging_utils.reset_logging()


@pytest.fixture
def template(tmp_path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws["A1"] = "УПД № ${o.name}"
    ws["A3"] = rules.EXPR_POSITION_NAME
    ws["B3"] = rules.EXPR_POSITION_COST_WITH_VAT
    ws["A4"] = "Итого"
    path = tmp_path / "upd.xlsx"
    wb.save(path)
    return path


@pytest.fixture
def context_file(tmp_path) -> Path:
    payload = {
        "invoice_number": "42",
        "invoice_date": "2024-03-05",
        "issuer": {"name": "ТахоСервис", "payer_vat": True},
        "customer": {"name": "Грузовоз"},
        "positions": [
            {"name": "Ремонт", "quantity": 2, "price_gross": 1200, "vat_rate": "VAT_20"},
            {"name": "Диагностика", "quantity": 1, "price_gross": 600, "vat_rate": "VAT_20"},
        ],
    }
    path = tmp_path / "context.json"
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_renders_xlsx(workspace, template, context_file):
    code = main.main([str(context_file), "--template", str(template), "--template-row", "3"])

    assert code == main.EXIT_OK
    output = workspace / "UPD_42.xlsx"
    ws = load_workbook(output).active
    assert ws["A1"].value == "УПД № 42"
    assert [ws["A3"].value, ws["A4"].value, ws["A5"].value] == ["Ремонт", "Диагностика", "Итого"]
    assert ws["B3"].value == 2400

    history = (workspace / "logs" / "app.md").read_text(encoding="utf-8")
    assert "УПД сформирован" in history


def test_explicit_output_path(workspace, template, context_file):
    target = workspace / "out" / "doc.xlsx"
    target.parent.mkdir()
    code = main.main(
        [str(context_file), "--template", str(template), "--template-row", "3", "--output", str(target)]
    )
    assert code == main.EXIT_OK
    assert target.exists()


def test_template_from_environment(monkeypatch, workspace, template, context_file):
    monkeypatch.setenv("UPD_TEMPLATE_PATH", str(template))
    monkeypatch.setenv("UPD_TEMPLATE_ROW", "3")

    assert main.main([str(context_file)]) == main.EXIT_OK
    assert (workspace / "UPD_42.xlsx").exists()


def test_missing_template(workspace, context_file):
    code = main.main([str(context_file), "--template", str(workspace / "nope.xlsx")])
    assert code == main.EXIT_TEMPLATE_ERROR


def test_broken_template(workspace, context_file):
    broken = workspace / "broken.xlsx"
    broken.write_bytes(b"not a workbook")
    assert main.main([str(context_file), "--template", str(broken)]) == main.EXIT_TEMPLATE_ERROR


def test_invalid_context(workspace, template):
    bad = workspace / "bad.json"
    bad.write_text('{"invoice_date": "2024-03-05"}', encoding="utf-8")
    assert main.main([str(bad), "--template", str(template)]) == main.EXIT_CONTEXT_ERROR
    assert main.main([str(workspace / "missing.json"), "--template", str(template)]) == main.EXIT_CONTEXT_ERROR


def test_pdf_not_available(monkeypatch, workspace, template, context_file):
    def missing(*args, **kwargs):
        raise FileNotFoundError("soffice")

    monkeypatch.setattr(pdf_exporter.subprocess, "run", missing)

    code = main.main([str(context_file), "--template", str(template), "--format", "pdf"])

    assert code == main.EXIT_PDF_NOT_AVAILABLE
    assert not (workspace / "UPD_42.pdf").exists()


def test_renders_pdf(monkeypatch, workspace, template, context_file):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        outdir = Path(args[args.index("--outdir") + 1])
        (outdir / pdf_exporter.OUTPUT_NAME).write_bytes(b"%PDF-1.7")
        return SimpleNamespace(returncode=0)

    monkeypatch.setenv("SOFFICE_PATH", "/opt/lo/soffice")
    monkeypatch.setattr(pdf_exporter.subprocess, "run", fake_run)

    code = main.main([str(context_file), "--template", str(template), "--format", "pdf", "--template-row", "3"])

    assert code == main.EXIT_OK
    assert (workspace / "UPD_42.pdf").read_bytes() == b"%PDF-1.7"
    assert calls[0][0] == "/opt/lo/soffice"


@pytest.mark.parametrize("flag_value", ["0", "-3"])
def test_non_positive_template_row_is_rejected(workspace, template, context_file, flag_value):
    code = main.main([str(context_file), "--template", str(template), "--template-row", flag_value])
    assert code == main.EXIT_TEMPLATE_ERROR
    assert not (workspace / "UPD_42.xlsx").exists()
