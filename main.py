"""Command line entry point: render a UPD document from a JSON context."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from upd_render.activity_logger import log_render_event
from upd_render.config import Settings
from upd_render.context_io import load_context
from upd_render.errors import ContextError, PdfNotAvailableError, TemplateError
from upd_render.logging_utils import enable_console_logging, setup_logging
from upd_render.pdf_exporter import xlsx_bytes_to_pdf
from upd_render.renderer import UpdRenderer, output_filename

EXIT_OK = 0
EXIT_TEMPLATE_ERROR = 2
EXIT_PDF_NOT_AVAILABLE = 3
EXIT_CONTEXT_ERROR = 4

logger = logging.getLogger("upd_render.cli")


def _parse_cli_arguments(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="upd-render",
        description="Render a UPD spreadsheet (and optionally a PDF) from a template.",
    )
    parser.add_argument("context", type=Path, help="JSON file with the document context")
    parser.add_argument("--template", type=Path, default=None, help="XLSX template path")
    parser.add_argument(
        "--format",
        dest="fmt",
        choices=("xlsx", "pdf"),
        default="xlsx",
        help="Output format (default: xlsx)",
    )
    parser.add_argument("--output", type=Path, default=None, help="Output file path")
    parser.add_argument("--template-row", type=int, default=None)
    parser.add_argument("--sheet", default=None, help="Template sheet name")
    parser.add_argument("--verbose", action="store_true", help="Log debug output to stderr")
    return parser.parse_args(list(argv))


def _read_template(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise TemplateError(f"Шаблон не найден: {path}") from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_cli_arguments(sys.argv[1:] if argv is None else argv)
    settings = Settings.from_env()

    setup_logging(settings.log_dir)
    enable_console_logging(logging.DEBUG if args.verbose else logging.INFO)

    template_path = args.template or settings.template_path
    template_row = args.template_row if args.template_row is not None else settings.template_row
    sheet_name = args.sheet or settings.sheet_name

    try:
        context = load_context(args.context)
        renderer = UpdRenderer(template_row=template_row, sheet_name=sheet_name)
        wb = renderer.load_template(_read_template(template_path))
        result = renderer.render_workbook(wb, context)
        payload = renderer.save(result.workbook)
        if args.fmt == "pdf":
            payload = xlsx_bytes_to_pdf(payload, settings.soffice_path)
    except ContextError as exc:
        logger.error("Invalid document context: %s", exc)
        return EXIT_CONTEXT_ERROR
    except TemplateError as exc:
        logger.error("Template error: %s", exc)
        return EXIT_TEMPLATE_ERROR
    except PdfNotAvailableError as exc:
        logger.error("PDF not available: %s", exc)
        return EXIT_PDF_NOT_AVAILABLE

    output = args.output or Path(output_filename(context, args.fmt))
    output.write_bytes(payload)

    log_render_event(
        "УПД сформирован",
        details={
            "invoice_number": context.invoice_number,
            "format": args.fmt,
            "template": str(template_path),
            "positions": len(context.positions),
            "cleared_expressions": len(result.cleared),
            "output": str(output),
        },
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
