"""Utility helpers for accessing bundled resources such as the UPD template."""

from __future__ import annotations

from pathlib import Path
import sys

DEFAULT_TEMPLATE = "templates/upd_new.xlsx"


def resource_path(relative: str) -> Path:
    """Return absolute path to a resource for dev and PyInstaller builds.

    Parameters
    ----------
    relative:
        Path to the resource relative to the project root or the temporary
        directory used by PyInstaller.
    """
    base_path = getattr(sys, "_MEIPASS", Path(__file__).resolve().parent)
    return Path(base_path) / relative


def default_template_path() -> Path:
    """Return the location of the bundled UPD template."""
    return resource_path(DEFAULT_TEMPLATE)
