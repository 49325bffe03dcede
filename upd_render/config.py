"""Helpers for loading renderer configuration from the environment and ``.env`` files."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

from resource_utils import default_template_path

from .renderer import DEFAULT_TEMPLATE_ROW

_ENV_FILENAME = ".env"

logger = logging.getLogger(__name__)
_loaded_path: Optional[Path] = None


def _candidate_directories() -> Iterable[Path]:
    """Yield directories that may contain the ``.env`` file."""

    cwd = Path.cwd()
    yield cwd

    # When running from source, the repository root is one level above this file.
    repo_root = Path(__file__).resolve().parent.parent
    yield repo_root

    # PyInstaller bundles extract into ``sys._MEIPASS``.
    bundle_dir = Path(getattr(sys, "_MEIPASS", repo_root))
    yield bundle_dir

    custom_dir = os.getenv("UPD_DOTENV_DIR")
    if custom_dir:
        yield Path(custom_dir)


def load_application_env() -> Optional[Path]:
    """Load the first available ``.env`` file from common locations."""

    global _loaded_path

    if _loaded_path is not None:
        return _loaded_path

    tried: set[Path] = set()
    for directory in _candidate_directories():
        path = Path(directory) / _ENV_FILENAME
        if path in tried:
            continue
        tried.add(path)
        if path.exists():
            load_dotenv(dotenv_path=path, override=False)
            _loaded_path = path
            return path

    return None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    template_path: Path
    template_row: int = DEFAULT_TEMPLATE_ROW
    sheet_name: Optional[str] = None
    soffice_path: Optional[str] = None
    log_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from environment variables (after loading ``.env``)."""

        load_application_env()
        template = os.getenv("UPD_TEMPLATE_PATH")
        log_dir = os.getenv("UPD_LOG_DIR")
        return cls(
            template_path=Path(template) if template else default_template_path(),
            template_row=_env_int("UPD_TEMPLATE_ROW", DEFAULT_TEMPLATE_ROW),
            sheet_name=os.getenv("UPD_SHEET_NAME") or None,
            soffice_path=os.getenv("SOFFICE_PATH") or None,
            log_dir=Path(log_dir) if log_dir else None,
        )


__all__ = ["Settings", "load_application_env"]
