"""Unit tests for PipelineConfig."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import PipelineConfig


def test_defaults() -> None:
    cfg = PipelineConfig()

    assert cfg.source_dir == Path("assets")
    assert cfg.output_dir == Path("dist/assets")
    assert cfg.manifest_path == Path("asset-manifest.json")
    assert cfg.models_dir == Path("src/models")
    assert (cfg.skip_unchanged, cfg.process_dependencies, cfg.validate_output) == (True, True, True)
    assert (cfg.verbose, cfg.silent, cfg.log_file) == (False, False, None)


def test_config_is_immutable() -> None:
    cfg = PipelineConfig()

    with pytest.raises(ValidationError):
        cfg.source_dir = Path("elsewhere")


def test_from_env_priority(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSET_SOURCE_DIR", "/env/src")
    monkeypatch.setenv("ASSET_OUTPUT_DIR", "/env/out")
    monkeypatch.delenv("ASSET_MANIFEST_PATH", raising=False)
    monkeypatch.delenv("ASSET_MODELS_DIR", raising=False)

    cfg = PipelineConfig.from_env(source_dir="/explicit/src", output_dir=None)

    assert cfg.source_dir == Path("/explicit/src")
    assert cfg.output_dir == Path("/env/out")
    assert cfg.manifest_path == Path("asset-manifest.json")


def test_from_env_ignores_empty_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ASSET_MODELS_DIR", "")

    assert PipelineConfig.from_env().models_dir == Path("src/models")


def test_mirrored_paths(tmp_path: Path) -> None:
    cfg = PipelineConfig(source_dir=tmp_path / "src", output_dir=tmp_path / "out")

    assert cfg.source_path("icons/a.svg") == tmp_path / "src" / "icons" / "a.svg"
    assert cfg.output_path("icons/a.svg") == tmp_path / "out" / "icons" / "a.svg"
