import logging
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

from .errors import PdfNotAvailableError

logger = logging.getLogger("PdfExporter")

WINDOWS_SOFFICE = r"C:\Program Files\LibreOffice\program\soffice.com"
INPUT_NAME = "doc.xlsx"
OUTPUT_NAME = "doc.pdf"


def soffice_command(explicit: Optional[str] = None) -> str:
    """Return the LibreOffice executable to use for conversion."""
    if explicit:
        return explicit
    env = os.getenv("SOFFICE_PATH")
    if env:
        return env
    return WINDOWS_SOFFICE if sys.platform == "win32" else "soffice"


def _convert_args(soffice: str, outdir: Path, input_path: Path) -> List[str]:
    return [
        soffice,
        "--headless",
        "--nologo",
        "--nofirststartwizard",
        "--convert-to",
        "pdf",
        "--outdir",
        str(outdir),
        str(input_path),
    ]


def xlsx_bytes_to_pdf(xlsx: bytes, soffice: Optional[str] = None) -> bytes:
    """Convert an XLSX document to PDF using LibreOffice in headless mode.

    The workbook is written to a private temporary directory which is removed
    on every exit path.  Any failure of the converter (missing binary,
    non-zero exit code, no output file) is reported as
    :class:`PdfNotAvailableError`; there is no retry and no timeout.
    """
    command = soffice_command(soffice)
    with tempfile.TemporaryDirectory(prefix="upd-") as tmp:
        tmp_dir = Path(tmp)
        input_path = tmp_dir / INPUT_NAME
        input_path.write_bytes(xlsx)

        logger.debug("Converting %s with %s", input_path, command)
        try:
            proc = subprocess.run(
                _convert_args(command, tmp_dir, input_path),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            logger.error("PDF converter %s is not available: %s", command, exc)
            raise PdfNotAvailableError(
                "PDF generation is not available on this server "
                "(LibreOffice soffice is required)."
            ) from exc

        if proc.returncode != 0:
            logger.error("soffice convert failed (code %s)", proc.returncode)
            raise PdfNotAvailableError(f"soffice convert failed (code {proc.returncode})")

        pdf_path = tmp_dir / OUTPUT_NAME
        if not pdf_path.exists():
            logger.error("soffice finished but %s was not produced", pdf_path.name)
            raise PdfNotAvailableError("soffice did not produce a PDF file")
        return pdf_path.read_bytes()
