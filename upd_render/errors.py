"""Exceptions raised by the UPD rendering engine."""

from __future__ import annotations


class UpdRenderError(Exception):
    """Base class for all rendering failures."""


class TemplateError(UpdRenderError):
    """The template is missing, unreadable or does not have the expected layout.

    Indicates a deployment defect rather than a transient failure, so callers
    should not retry.
    """


class PdfNotAvailableError(UpdRenderError):
    """The external document converter is absent or failed.

    Only raised by the PDF path; the XLSX path never depends on the converter.
    """


class ContextError(UpdRenderError):
    """The document context supplied by the caller is malformed."""


__all__ = [
    "ContextError",
    "PdfNotAvailableError",
    "TemplateError",
    "UpdRenderError",
]
