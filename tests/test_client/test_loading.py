"""Tests for loading generated modules by file location."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from tasc.client.loading import load_sibling


class TestLoadSibling:
    def test_loads_relative_module(self, tmp_path: Path) -> None:
        (tmp_path / "gen").mkdir()
        (tmp_path / "gen" / "values.py").write_text("ANSWER = 42\n")
        module = load_sibling(str(tmp_path / "app" / "main.py"), "../gen/values.py")
        assert module.ANSWER == 42

    def test_module_is_cached(self, tmp_path: Path) -> None:
        (tmp_path / "counter.py").write_text("import itertools\nTOKEN = object()\n")
        first = load_sibling(str(tmp_path / "x.py"), "counter.py")
        second = load_sibling(str(tmp_path / "y.py"), "./counter.py")
        assert first is second
        assert first.__name__ in sys.modules

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImportError, match="not found"):
            load_sibling(str(tmp_path / "x.py"), "absent.py")

    def test_failed_module_is_not_cached(self, tmp_path: Path) -> None:
        broken = tmp_path / "broken.py"
        broken.write_text("raise RuntimeError('boom')\n")
        with pytest.raises(RuntimeError, match="boom"):
            load_sibling(str(tmp_path / "x.py"), "broken.py")
        broken.write_text("OK = True\n")
        assert load_sibling(str(tmp_path / "x.py"), "broken.py").OK is True
