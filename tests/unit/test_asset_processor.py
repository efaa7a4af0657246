"""Unit tests for AssetProcessor.

Covers the primary pass (copy/skip/delete), post-copy hooks, dependency
propagation, output validation, the fatal output-root failure, and
processing stats.
"""

import json
from pathlib import Path

from structlog.testing import capture_logs

from app.config import PipelineConfig
from app.models.asset_manifest import AssetManifest, AssetMetadata, AssetType
from models.changes import AssetChange, ChangeType
from pipeline.processor import AssetProcessor

_SVG = b'<svg xmlns="http://www.w3.org/2000/svg"></svg>'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_asset(root: Path, rel_path: str, content: bytes = _SVG) -> Path:
    p = root / rel_path
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(content)
    return p


def _config(tmp_path: Path, **overrides) -> PipelineConfig:
    values = {
        "source_dir": tmp_path / "assets",
        "output_dir": tmp_path / "dist",
        "manifest_path": tmp_path / "asset-manifest.json",
    }
    values.update(overrides)
    return PipelineConfig(**values)


def _change(path: str, type: ChangeType) -> AssetChange:
    return AssetChange(type=type, asset_path=path)


def _manifest(paths: list[str], dependencies: dict[str, list[str]] | None = None) -> AssetManifest:
    deps = {p: [] for p in paths}
    deps.update(dependencies or {})
    return AssetManifest(
        generated_at=0,
        assets=[AssetMetadata(path=p, size=1, modified_time=0, hash="h", type=AssetType.OTHER) for p in paths],
        dependencies=deps,
    )


# ---------------------------------------------------------------------------
# Primary pass
# ---------------------------------------------------------------------------


def test_added_and_modified_assets_are_copied(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "icons/file_icons/a.svg", b"<svg>a</svg>")
    _write_asset(cfg.source_dir, "images/b.png", b"png")

    result = AssetProcessor(cfg).process_assets(
        [_change("icons/file_icons/a.svg", ChangeType.ADDED), _change("images/b.png", ChangeType.MODIFIED)]
    )

    assert result.processed == ["icons/file_icons/a.svg", "images/b.png"]
    assert result.errors == []
    assert (cfg.output_dir / "icons/file_icons/a.svg").read_bytes() == b"<svg>a</svg>"
    assert (cfg.output_dir / "images/b.png").read_bytes() == b"png"
    assert result.summary.processed == 2 and result.summary.total == 2


def test_unchanged_assets_are_skipped(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "a.svg")

    result = AssetProcessor(cfg).process_assets([_change("a.svg", ChangeType.UNCHANGED)])

    assert result.skipped == ["a.svg"]
    assert result.processed == []
    assert not (cfg.output_dir / "a.svg").exists()


def test_unchanged_assets_reprocessed_when_skip_disabled(tmp_path: Path) -> None:
    cfg = _config(tmp_path, skip_unchanged=False, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "a.svg")

    result = AssetProcessor(cfg).process_assets([_change("a.svg", ChangeType.UNCHANGED)])

    assert result.processed == ["a.svg"]
    assert (cfg.output_dir / "a.svg").is_file()


def test_deleted_asset_removes_mirrored_output(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    stale = _write_asset(cfg.output_dir, "old.svg")

    result = AssetProcessor(cfg).process_assets([_change("old.svg", ChangeType.DELETED)])

    assert not stale.exists()
    assert result.processed == [] and result.skipped == [] and result.errors == []


def test_deleted_asset_without_output_is_ignored(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)

    result = AssetProcessor(cfg).process_assets([_change("never.svg", ChangeType.DELETED)])

    assert result.errors == [] and result.warnings == []


def test_missing_source_is_recorded_and_loop_continues(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "ok.svg")

    with capture_logs() as logs:
        result = AssetProcessor(cfg).process_assets(
            [_change("missing.svg", ChangeType.ADDED), _change("ok.svg", ChangeType.ADDED)]
        )

    assert result.processed == ["ok.svg"]
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Failed to process missing.svg:")
    assert any(e["event"] == "asset_process_failed" for e in logs)


# ---------------------------------------------------------------------------
# Hooks
# ---------------------------------------------------------------------------


def test_theme_with_comments_passes_hook(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "themes/t.theme.json", b'{\n  // icons\n  "name": "t" /* inline */\n}')

    result = AssetProcessor(cfg).process_assets([_change("themes/t.theme.json", ChangeType.ADDED)])

    assert result.processed == ["themes/t.theme.json"]
    assert result.warnings == []


def test_malformed_theme_is_copied_with_warning(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "themes/t.theme.json", b"{broken")

    with capture_logs() as logs:
        result = AssetProcessor(cfg).process_assets([_change("themes/t.theme.json", ChangeType.ADDED)])

    assert result.processed == ["themes/t.theme.json"]
    assert result.errors == []
    assert len(result.warnings) == 1
    assert result.warnings[0].startswith("Theme validation failed for themes/t.theme.json")
    assert any(e["event"] == "theme_hook_failed" for e in logs)
    assert (cfg.output_dir / "themes/t.theme.json").read_bytes() == b"{broken"


# ---------------------------------------------------------------------------
# Dependency propagation
# ---------------------------------------------------------------------------


def test_dependent_theme_is_reprocessed_when_icon_changes(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False)
    _write_asset(cfg.source_dir, "icons/file_icons/foo.svg")
    _write_asset(cfg.source_dir, "themes/base.theme.json", json.dumps({"name": "base"}).encode())
    manifest = _manifest(
        ["icons/file_icons/foo.svg", "themes/base.theme.json"],
        {"themes/base.theme.json": ["icons/file_icons/foo.svg"]},
    )

    result = AssetProcessor(cfg).process_assets(
        [
            _change("icons/file_icons/foo.svg", ChangeType.MODIFIED),
            _change("themes/base.theme.json", ChangeType.UNCHANGED),
        ],
        manifest,
    )

    assert "themes/base.theme.json" in result.processed
    assert "themes/base.theme.json" not in result.skipped
    assert (cfg.output_dir / "themes/base.theme.json").is_file()


def test_dependents_not_processed_when_disabled(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "icons/file_icons/foo.svg")
    _write_asset(cfg.source_dir, "themes/base.theme.json", b"{}")
    manifest = _manifest(
        ["icons/file_icons/foo.svg", "themes/base.theme.json"],
        {"themes/base.theme.json": ["icons/file_icons/foo.svg"]},
    )

    result = AssetProcessor(cfg).process_assets(
        [
            _change("icons/file_icons/foo.svg", ChangeType.MODIFIED),
            _change("themes/base.theme.json", ChangeType.UNCHANGED),
        ],
        manifest,
    )

    assert result.skipped == ["themes/base.theme.json"]


def test_deleted_icon_triggers_dependent_reprocessing(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False)
    _write_asset(cfg.source_dir, "themes/base.theme.json", b"{}")
    manifest = _manifest(
        ["icons/file_icons/gone.svg", "themes/base.theme.json"],
        {"themes/base.theme.json": ["icons/file_icons/gone.svg"]},
    )

    result = AssetProcessor(cfg).process_assets(
        [
            _change("themes/base.theme.json", ChangeType.UNCHANGED),
            _change("icons/file_icons/gone.svg", ChangeType.DELETED),
        ],
        manifest,
    )

    assert result.processed == ["themes/base.theme.json"]


def test_dependent_missing_from_source_is_not_reprocessed(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False)
    _write_asset(cfg.source_dir, "icons/file_icons/foo.svg")
    manifest = _manifest(
        ["icons/file_icons/foo.svg", "themes/base.theme.json"],
        {"themes/base.theme.json": ["icons/file_icons/foo.svg"]},
    )

    result = AssetProcessor(cfg).process_assets([_change("icons/file_icons/foo.svg", ChangeType.MODIFIED)], manifest)

    assert result.processed == ["icons/file_icons/foo.svg"]
    assert result.errors == []


def test_find_dependent_assets_in_manifest_order(tmp_path: Path) -> None:
    manifest = _manifest(
        ["a", "t1", "t2", "t3"],
        {"t1": ["a"], "t2": ["b"], "t3": ["a", "b"]},
    )

    processor = AssetProcessor(_config(tmp_path))

    assert processor.find_dependent_assets(["a"], manifest) == ["t1", "t3"]
    assert processor.find_dependent_assets(["a"], manifest) == manifest.dependents_of("a")
    assert processor.find_dependent_assets(["b", "a"], manifest) == ["t1", "t2", "t3"]


def test_manifest_generated_when_not_supplied(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False)
    _write_asset(cfg.source_dir, "icons/file_icons/foo.svg")
    _write_asset(cfg.source_dir, "themes/base.theme.json", b'{"iconPath": "../icons/file_icons/foo.svg"}')

    result = AssetProcessor(cfg).process_assets(
        [
            _change("icons/file_icons/foo.svg", ChangeType.MODIFIED),
            _change("themes/base.theme.json", ChangeType.UNCHANGED),
        ]
    )

    assert result.processed == ["icons/file_icons/foo.svg", "themes/base.theme.json"]


# ---------------------------------------------------------------------------
# Output validation and fatal failure
# ---------------------------------------------------------------------------


def test_output_validation_reports_missing_and_empty(tmp_path: Path) -> None:
    cfg = _config(tmp_path, process_dependencies=False)
    _write_asset(cfg.source_dir, "full.svg")
    _write_asset(cfg.source_dir, "empty.svg", b"")
    manifest = _manifest(["full.svg", "empty.svg", "absent.svg"])

    result = AssetProcessor(cfg).process_assets(
        [_change("full.svg", ChangeType.ADDED), _change("empty.svg", ChangeType.ADDED)], manifest
    )

    assert result.errors == [
        "OUTPUT_EMPTY: Output file is empty for empty.svg",
        "OUTPUT_MISSING: Output file missing for absent.svg",
    ]


def test_uncreatable_output_root_aborts(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    cfg = _config(tmp_path, output_dir=blocker / "out")
    _write_asset(cfg.source_dir, "a.svg")

    result = AssetProcessor(cfg).process_assets([_change("a.svg", ChangeType.ADDED)])

    assert result.aborted is True
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Failed to create output directory")
    assert result.processed == [] and result.skipped == []


def test_processing_stats_count_source_and_output(tmp_path: Path) -> None:
    cfg = _config(tmp_path, validate_output=False, process_dependencies=False)
    _write_asset(cfg.source_dir, "a.svg", b"12345")
    _write_asset(cfg.source_dir, "nested/b.svg", b"123")
    processor = AssetProcessor(cfg)
    processor.process_assets([_change("a.svg", ChangeType.ADDED), _change("nested/b.svg", ChangeType.ADDED)])

    stats = processor.get_processing_stats()

    assert (stats.source_count, stats.source_size) == (2, 8)
    assert (stats.output_count, stats.output_size) == (2, 8)
