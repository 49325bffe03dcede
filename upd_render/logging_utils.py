"""Logging configuration helpers for the renderer and its command line tool."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from tempfile import gettempdir
from typing import Optional

LOG_DIR_NAME = "logs"
LAST_RUN_LOG_NAME = "last_run.md"
ROTATING_LOG_NAME = "app.md"
ROTATING_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
ROTATING_BACKUP_COUNT = 5

_configured = False
_last_run_log_path: Optional[Path] = None
_console_handler: Optional[logging.Handler] = None


def _candidate_log_directories(preferred: Optional[Path]) -> list[Path]:
    candidates = [Path.cwd() / LOG_DIR_NAME, Path.home() / ".upd_render" / LOG_DIR_NAME]
    if preferred is not None:
        candidates.insert(0, Path(preferred))
    candidates.append(Path(gettempdir()) / "upd_render_logs")
    return candidates


def _ensure_log_directory(preferred: Optional[Path] = None) -> Path:
    for directory in _candidate_log_directories(preferred):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        else:
            return directory
    return Path.cwd()


class _MarkdownFormatter(logging.Formatter):
    """Render log records as Markdown blocks."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        message = super().format(record).rstrip()
        if message:
            message = f"{message}\n"
        return f"---\n### {timestamp} · {record.levelname} · {record.name}\n\n{message}"


def _initialise_markdown_file(path: Path, title: str, fresh: bool) -> None:
    """Ensure *path* starts with a Markdown heading."""

    header = f"# {title}\n\n"
    if fresh or not path.exists() or path.stat().st_size == 0:
        path.write_text(header, encoding="utf-8")


def enable_console_logging(level: int = logging.INFO) -> bool:
    """Stream log records to stderr.

    Returns
    -------
    bool
        ``True`` when logging to a console stream is now active.
    """

    global _console_handler

    root_logger = logging.getLogger()

    if _console_handler is not None and _console_handler in root_logger.handlers:
        _console_handler.setLevel(level)
        return True

    stream = sys.stderr if sys.stderr is not None else sys.stdout
    if stream is None:
        return False

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root_logger.addHandler(console_handler)
    _console_handler = console_handler
    return True


def setup_logging(log_dir: Optional[Path] = None) -> Path:
    """Configure file handlers for the application.

    Returns
    -------
    Path
        Path to the ``last_run.md`` file.
    """

    global _configured, _last_run_log_path

    if _configured and _last_run_log_path is not None:
        return _last_run_log_path

    directory = _ensure_log_directory(log_dir)
    last_run_log = directory / LAST_RUN_LOG_NAME
    rotating_log = directory / ROTATING_LOG_NAME

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = _MarkdownFormatter("%(message)s")

    _initialise_markdown_file(last_run_log, "Журнал последнего запуска", fresh=True)
    last_run_handler = logging.FileHandler(last_run_log, mode="a", encoding="utf-8")
    last_run_handler.setLevel(logging.DEBUG)
    last_run_handler.setFormatter(formatter)

    _initialise_markdown_file(
        rotating_log,
        "История формирования документов",
        fresh=not rotating_log.exists(),
    )
    rotating_handler = RotatingFileHandler(
        rotating_log,
        maxBytes=ROTATING_MAX_BYTES,
        backupCount=ROTATING_BACKUP_COUNT,
        encoding="utf-8",
    )
    rotating_handler.setLevel(logging.INFO)
    rotating_handler.setFormatter(formatter)

    root_logger.addHandler(last_run_handler)
    root_logger.addHandler(rotating_handler)

    _configured = True
    _last_run_log_path = last_run_log

    root_logger.debug("Logging configured. Logs directory: %s", directory)

    return last_run_log


def reset_logging() -> None:
    """Drop handlers installed by :func:`setup_logging` (used by tests)."""

    global _configured, _last_run_log_path, _console_handler

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _configured = False
    _last_run_log_path = None
    _console_handler = None
