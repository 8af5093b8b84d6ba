"""Tests for output path resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from tasc.models import OutputsConfig, TascConfig
from tasc.paths import get_resolved_paths, resolve_output_path


class TestResolveOutputPath:
    def test_defaults_under_dot_tasc(self, tmp_path: Path) -> None:
        result = resolve_output_path(OutputsConfig(), "api_types", tmp_path)
        assert result == (tmp_path / ".tasc" / "api_types.py").resolve()

    def test_specific_path(self, tmp_path: Path) -> None:
        outputs = OutputsConfig(api_operations="src/api/ops.py")
        result = resolve_output_path(outputs, "api_operations", tmp_path)
        assert result == (tmp_path / "src" / "api" / "ops.py").resolve()

    def test_dir_wins_over_specific_path(self, tmp_path: Path) -> None:
        outputs = OutputsConfig(dir="generated", doc_file="elsewhere/spec.json")
        result = resolve_output_path(outputs, "doc_file", tmp_path)
        assert result == (tmp_path / "generated" / "openapi.json").resolve()

    def test_base_path_prefixes_everything(self, tmp_path: Path) -> None:
        outputs = OutputsConfig(base_path="frontend", export_path="client.py")
        result = resolve_output_path(outputs, "export_path", tmp_path)
        assert result == (tmp_path / "frontend" / "client.py").resolve()

    def test_unknown_key(self, tmp_path: Path) -> None:
        with pytest.raises(KeyError):
            resolve_output_path(OutputsConfig(), "readme", tmp_path)


class TestGetResolvedPaths:
    def test_all_defaults(self, tmp_path: Path) -> None:
        paths = get_resolved_paths(TascConfig(), tmp_path)
        base = tmp_path.resolve()
        assert paths.api_types == base / ".tasc" / "api_types.py"
        assert paths.api_operations == base / ".tasc" / "api_operations.py"
        assert paths.doc_file == base / ".tasc" / "openapi.json"
        assert paths.export_path == base / ".tasc" / "api_client.py"
        assert paths.cache_file == base / ".api-cache.json"

    def test_cache_file_ignores_dir(self, tmp_path: Path) -> None:
        config = TascConfig(outputs=OutputsConfig(dir="gen", cache_file="state/cache.json"))
        paths = get_resolved_paths(config, tmp_path)
        assert paths.api_types == (tmp_path / "gen" / "api_types.py").resolve()
        assert paths.cache_file == (tmp_path / "state" / "cache.json").resolve()

    def test_defaults_to_cwd(self, project_dir: Path) -> None:
        paths = get_resolved_paths(TascConfig())
        assert paths.doc_file == project_dir.resolve() / ".tasc" / "openapi.json"
