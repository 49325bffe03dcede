"""Rendering of UPD (universal transfer document) spreadsheets from XLSX templates."""

from .context import DocumentContext, Issuer, LineItem, Party, VatRate
from .errors import ContextError, PdfNotAvailableError, TemplateError, UpdRenderError
from .renderer import (
    DEFAULT_TEMPLATE_ROW,
    ClearedExpression,
    RenderResult,
    UpdRenderer,
    output_filename,
    render,
    render_to_pdf,
)
from .rules import RULES, UNRESOLVED, Rule, resolve

__all__ = [
    "ClearedExpression",
    "ContextError",
    "DEFAULT_TEMPLATE_ROW",
    "DocumentContext",
    "Issuer",
    "LineItem",
    "Party",
    "PdfNotAvailableError",
    "RULES",
    "RenderResult",
    "Rule",
    "TemplateError",
    "UNRESOLVED",
    "UpdRenderError",
    "UpdRenderer",
    "VatRate",
    "output_filename",
    "render",
    "render_to_pdf",
    "resolve",
]
