from __future__ import annotations

from pathlib import Path

import resource_utils


def test_template_resolves_next_to_sources():
    relative = resource_utils.DEFAULT_TEMPLATE
    expected = Path(resource_utils.__file__).resolve().parent / relative
    assert resource_utils.resource_path(relative) == expected


def test_resource_path_uses_meipass_when_available(monkeypatch, tmp_path):
    base = tmp_path / "bundle"
    base.mkdir()
    monkeypatch.setattr(resource_utils.sys, "_MEIPASS", str(base), raising=False)

    assert resource_utils.resource_path("templates/upd_new.xlsx") == base / "templates" / "upd_new.xlsx"


def test_default_template_is_bundled_resource(monkeypatch, tmp_path):
    monkeypatch.setattr(resource_utils.sys, "_MEIPASS", str(tmp_path), raising=False)
    assert resource_utils.default_template_path() == tmp_path / "templates" / "upd_new.xlsx"
