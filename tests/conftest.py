from __future__ import annotations

from datetime import date
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from upd_render.context import DocumentContext, Issuer, LineItem, Party, VatRate


def make_item(name: str = "Калибровка тахографа", **overrides) -> LineItem:
    values = dict(
        name=name,
        quantity=1,
        price_gross=1200.0,
        vat_rate=VatRate.VAT_20,
        unit="шт",
        sku="TX-100",
    )
    values.update(overrides)
    return LineItem(**values)


def make_context(positions=(), **overrides) -> DocumentContext:
    values = dict(
        invoice_number="INV-42",
        invoice_date=date(2024, 3, 5),
        order_number="ORD-7",
        order_date=date(2024, 2, 29),
        issuer=Issuer(
            name="ТахоСервис",
            legal_title='ООО "ТахоСервис"',
            inn="7701234567",
            kpp="770101001",
            address="Москва, ул. Ленина, 1",
            legal_address="Москва, ул. Ленина, 1, офис 5",
            director="Иванов И.И.",
            chief_accountant="Петрова А.А.",
            payer_vat=True,
        ),
        customer=Party(
            name="Грузовоз",
            legal_title="",
            inn="5009876543",
            kpp=None,
            address="Казань, ул. Баумана, 10",
        ),
        positions=tuple(positions),
    )
    values.update(overrides)
    return DocumentContext(**values)


def workbook_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def load_bytes(data: bytes):
    return load_workbook(BytesIO(data))


@pytest.fixture
def context() -> DocumentContext:
    return make_context(positions=[make_item()])
