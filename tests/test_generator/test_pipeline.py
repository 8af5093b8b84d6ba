"""Tests for the end-to-end generation pipeline and the generated client module."""

from __future__ import annotations

from pathlib import Path

import pytest

from tasc.client.loading import load_sibling
from tasc.exceptions import DuplicateOperationIdError, SpecParseError
from tasc.generator.client import api_origin, render_client_module
from tasc.generator.pipeline import relative_import, run_generation
from tasc.models import FetchedSpec, OutputsConfig, TascConfig


class TestApiOrigin:
    def test_strips_path(self) -> None:
        assert api_origin("https://api.example.com:8443/doc/openapi.json") == (
            "https://api.example.com:8443"
        )

    def test_falls_back_to_default(self) -> None:
        assert api_origin("openapi.json") == "http://localhost:8080"


class TestRenderClientModule:
    def test_example_call_in_docstring(self, users_operations) -> None:
        source = render_client_module(TascConfig(), operations=users_operations)
        assert "api.op.listUsers()" in source
        assert "'http://localhost:8080'" in source

    def test_example_with_path_params(self, users_operations) -> None:
        source = render_client_module(TascConfig(), operations=users_operations[2:])
        assert 'api.op.getUserById({"id": ...})' in source


class TestRelativeImport:
    def test_same_directory(self, tmp_path: Path) -> None:
        assert relative_import(tmp_path / "a.py", tmp_path / "b.py") == "a.py"

    def test_sibling_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "types" / "api_types.py"
        importer = tmp_path / "ops" / "api_operations.py"
        assert relative_import(target, importer) == "../types/api_types.py"


class TestRunGeneration:
    def test_writes_all_outputs(
        self, tmp_path: Path, sample_config: TascConfig, users_spec_bytes: bytes
    ) -> None:
        result = run_generation(sample_config, spec_bytes=users_spec_bytes, cwd=tmp_path)

        paths = result.paths
        assert result.operation_count == 6
        assert result.changed is True
        assert set(result.written) == {
            paths.doc_file,
            paths.api_types,
            paths.api_operations,
            paths.export_path,
        }
        assert paths.doc_file.read_bytes() == users_spec_bytes
        assert paths.api_types.parent == (tmp_path / ".tasc").resolve()

    def test_second_run_changes_nothing(
        self, tmp_path: Path, sample_config: TascConfig, users_spec_bytes: bytes
    ) -> None:
        first = run_generation(sample_config, spec_bytes=users_spec_bytes, cwd=tmp_path)
        mtime = first.paths.api_operations.stat().st_mtime_ns

        second = run_generation(sample_config, spec_bytes=users_spec_bytes, cwd=tmp_path)

        assert second.written == []
        assert len(second.unchanged) == 4
        assert second.paths.api_operations.stat().st_mtime_ns == mtime

    def test_generated_client_is_usable(
        self,
        tmp_path: Path,
        sample_config: TascConfig,
        users_spec_bytes: bytes,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("API_URL", raising=False)
        result = run_generation(sample_config, spec_bytes=users_spec_bytes, cwd=tmp_path)

        module = load_sibling(str(result.paths.export_path), result.paths.export_path.name)
        try:
            assert module.api.config.base_url == "https://api.example.com"
            assert "getUserById" in module.api.op
            assert len(module.OPERATIONS) == 6
        finally:
            module.api.close()

    def test_split_output_locations(
        self, tmp_path: Path, users_spec_bytes: bytes
    ) -> None:
        config = TascConfig(
            outputs=OutputsConfig(
                api_types="gen/types/api_types.py",
                api_operations="gen/ops/api_operations.py",
                export_path="app/client.py",
            )
        )
        result = run_generation(config, spec_bytes=users_spec_bytes, cwd=tmp_path)

        assert "'../types/api_types.py'" in result.paths.api_operations.read_text()
        module = load_sibling(str(result.paths.export_path), "client.py")
        try:
            assert len(module.api.op) == 6
        finally:
            module.api.close()

    def test_fetches_when_no_bytes_given(
        self,
        tmp_path: Path,
        sample_config: TascConfig,
        users_spec_bytes: bytes,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls: list[tuple[str, float]] = []

        def fake_fetch(url: str, timeout: float) -> FetchedSpec:
            calls.append((url, timeout))
            return FetchedSpec.from_bytes(users_spec_bytes)

        monkeypatch.setattr("tasc.generator.pipeline.fetch_spec", fake_fetch)
        result = run_generation(sample_config, cwd=tmp_path)

        assert calls == [("https://api.example.com/doc/openapi.json", 30.0)]
        assert result.operation_count == 6

    def test_from_file_reads_saved_copy(
        self, tmp_path: Path, sample_config: TascConfig, users_spec_bytes: bytes
    ) -> None:
        doc = tmp_path / ".tasc" / "openapi.json"
        doc.parent.mkdir()
        doc.write_bytes(users_spec_bytes)

        result = run_generation(sample_config, from_file=True, cwd=tmp_path)

        assert result.operation_count == 6
        assert result.paths.doc_file not in result.written
        assert result.paths.doc_file not in result.unchanged

    def test_from_file_without_saved_copy(self, tmp_path: Path, sample_config: TascConfig) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            run_generation(sample_config, from_file=True, cwd=tmp_path)

    def test_duplicate_ids_write_no_modules(
        self, tmp_path: Path, sample_config: TascConfig
    ) -> None:
        spec = (
            b'{"paths": {"/a": {"get": {"operationId": "x"}},'
            b' "/b": {"get": {"operationId": "x"}}}}'
        )
        with pytest.raises(DuplicateOperationIdError):
            run_generation(sample_config, spec_bytes=spec, cwd=tmp_path)
        assert not (tmp_path / ".tasc" / "api_operations.py").exists()
