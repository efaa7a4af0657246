"""AssetProcessor: mirror changed assets into the output tree.

Passes, in order:
  1. ensure the output root exists; failure aborts the call with one error
  2. primary pass over the change list (discovery order)
       unchanged  → skipped (or reprocessed when ``skip_unchanged`` is off)
       deleted    → mirrored output file removed if present
       added/mod. → copied, then the post-copy hook for its file type
  3. dependency propagation: assets listing a changed asset as a dependency
     are reprocessed even when their own content did not change
  4. output validation: every manifest asset needs a non-empty output file

Per-asset failures are caught at the loop boundary and accumulated as
strings; they never escape as exceptions.
"""

import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path

from app.config import PipelineConfig
from app.models.asset_manifest import AssetManifest
from app.utils.jsonc import load_jsonc
from app.utils.logging import get_logger
from models.changes import AssetChange, ChangeType
from models.processing import ProcessingResult, ProcessingStats, ProcessingSummary
from pipeline.manifest import ManifestGenerator

_IMAGE_SUFFIXES: tuple[str, ...] = (".png", ".jpg", ".jpeg", ".gif")


@dataclass
class _Accumulator:
    processed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class AssetProcessor:
    """Apply a change list to the output tree.

    Args:
        config: Pipeline configuration (source/output roots and the
            ``skip_unchanged`` / ``process_dependencies`` /
            ``validate_output`` switches).
        generator: Used when no manifest is passed to :meth:`process_assets`
            and for :meth:`get_processing_stats`.
    """

    def __init__(
        self,
        config: PipelineConfig,
        generator: ManifestGenerator | None = None,
    ) -> None:
        self.config = config
        self.generator = generator or ManifestGenerator(config)
        self._log = get_logger("pipeline.processor")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_assets(
        self,
        changes: list[AssetChange],
        manifest: AssetManifest | None = None,
    ) -> ProcessingResult:
        """Process *changes* and return the accumulated result.

        Args:
            changes: Change records, usually ``ChangeAnalysis.changes``.
            manifest: Manifest whose dependency map drives propagation and
                whose assets are checked by output validation.  Generated
                from the source tree when omitted and needed.
        """
        start = time.perf_counter()
        acc = _Accumulator()

        try:
            self.config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            message = f"Failed to create output directory {self.config.output_dir}: {exc}"
            self._log.error("output_root_failed", output_dir=str(self.config.output_dir), error=str(exc))
            return ProcessingResult(
                errors=[message],
                aborted=True,
                summary=ProcessingSummary(
                    total=len(changes),
                    processed=0,
                    skipped=0,
                    errors=1,
                    time_ms=_elapsed_ms(start),
                ),
            )

        self._log.info("processing_started", total=len(changes))
        for change in changes:
            self._apply_change(change, acc)

        if manifest is None and (self.config.process_dependencies or self.config.validate_output):
            manifest = self._current_manifest(acc)

        if self.config.process_dependencies and manifest is not None:
            self._process_dependencies(changes, manifest, acc)

        if self.config.validate_output and manifest is not None:
            self._validate_output(manifest, acc)

        result = ProcessingResult(
            processed=acc.processed,
            skipped=acc.skipped,
            errors=acc.errors,
            warnings=acc.warnings,
            summary=ProcessingSummary(
                total=len(changes),
                processed=len(acc.processed),
                skipped=len(acc.skipped),
                errors=len(acc.errors),
                time_ms=_elapsed_ms(start),
            ),
        )
        self._log.info("processing_finished", **result.summary.model_dump())
        return result

    def get_processing_stats(self) -> ProcessingStats:
        """Source asset count/size and output file count/size (recursive)."""
        try:
            manifest = self.generator.generate_manifest()
            output_files = [p for p in self.config.output_dir.rglob("*") if p.is_file()]
            return ProcessingStats(
                source_count=len(manifest.assets),
                source_size=sum(a.size for a in manifest.assets),
                output_count=len(output_files),
                output_size=sum(p.stat().st_size for p in output_files),
            )
        except OSError as exc:
            self._log.error("processing_stats_failed", error=str(exc))
            return ProcessingStats()

    # ------------------------------------------------------------------
    # Primary pass
    # ------------------------------------------------------------------

    def _apply_change(self, change: AssetChange, acc: _Accumulator) -> None:
        path = change.asset_path
        try:
            if change.type == ChangeType.UNCHANGED and self.config.skip_unchanged:
                acc.skipped.append(path)
                return
            if change.type == ChangeType.DELETED:
                self._handle_deleted_asset(path, acc)
                return
            self._process_asset(path, acc)
            acc.processed.append(path)
        except OSError as exc:
            message = f"Failed to process {path}: {exc}"
            self._log.error("asset_process_failed", asset_path=path, error=str(exc))
            acc.errors.append(message)

    def _process_asset(self, asset_path: str, acc: _Accumulator) -> None:
        """Copy one asset into the output tree and run its post-copy hook."""
        source = self.config.source_path(asset_path)
        output = self.config.output_path(asset_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, output)

        name = asset_path.lower()
        if name.endswith(".svg"):
            self._process_svg_asset(asset_path, output)
        elif name.endswith(".theme.json"):
            self._process_theme_asset(asset_path, output, acc)
        elif name.endswith(_IMAGE_SUFFIXES):
            self._process_image_asset(asset_path, output)

    def _process_svg_asset(self, asset_path: str, output: Path) -> None:
        # TODO: SVG minification once an optimizer is chosen; copy-only for now.
        self._log.debug("svg_processed", asset_path=asset_path, output=str(output))

    def _process_theme_asset(self, asset_path: str, output: Path, acc: _Accumulator) -> None:
        try:
            load_jsonc(output)
        except ValueError as exc:
            acc.warnings.append(f"Theme validation failed for {asset_path}: {exc}")
            self._log.warning("theme_hook_failed", asset_path=asset_path, error=str(exc))
            return
        self._log.debug("theme_processed", asset_path=asset_path, output=str(output))

    def _process_image_asset(self, asset_path: str, output: Path) -> None:
        self._log.debug("image_processed", asset_path=asset_path, output=str(output))

    def _handle_deleted_asset(self, asset_path: str, acc: _Accumulator) -> None:
        output = self.config.output_path(asset_path)
        try:
            if output.is_file():
                output.unlink()
                self._log.info("deleted_asset_removed", asset_path=asset_path, output=str(output))
        except OSError as exc:
            acc.warnings.append(f"Failed to remove deleted asset {asset_path}: {exc}")
            self._log.warning("deleted_asset_remove_failed", asset_path=asset_path, error=str(exc))

    # ------------------------------------------------------------------
    # Dependency propagation and output validation
    # ------------------------------------------------------------------

    def _current_manifest(self, acc: _Accumulator) -> AssetManifest | None:
        try:
            return self.generator.generate_manifest()
        except OSError as exc:
            acc.errors.append(f"Manifest generation failed: {exc}")
            self._log.error("manifest_regeneration_failed", error=str(exc))
            return None

    def find_dependent_assets(self, changed: list[str], manifest: AssetManifest) -> list[str]:
        """Assets whose dependency list contains any of *changed*, manifest order."""
        dependents = {dep for path in changed for dep in manifest.dependents_of(path)}
        return [path for path in manifest.dependencies if path in dependents]

    def _process_dependencies(
        self,
        changes: list[AssetChange],
        manifest: AssetManifest,
        acc: _Accumulator,
    ) -> None:
        changed = [
            c.asset_path
            for c in changes
            if c.type in (ChangeType.ADDED, ChangeType.MODIFIED, ChangeType.DELETED)
        ]
        deleted = {c.asset_path for c in changes if c.type == ChangeType.DELETED}
        try:
            self._reprocess_dependents(changed, deleted, manifest, acc)
        except OSError as exc:
            acc.errors.append(f"Dependency processing failed: {exc}")
            self._log.error("dependency_processing_failed", error=str(exc))

    def _reprocess_dependents(
        self,
        changed: list[str],
        deleted: set[str],
        manifest: AssetManifest,
        acc: _Accumulator,
    ) -> None:
        already = set(acc.processed)
        dependents = [
            p
            for p in self.find_dependent_assets(changed, manifest)
            if p not in already and p not in deleted and self.config.source_path(p).is_file()
        ]
        if not dependents:
            return

        self._log.info("processing_dependents", count=len(dependents))
        for dependent in dependents:
            try:
                self._process_asset(dependent, acc)
            except OSError as exc:
                acc.errors.append(f"Failed to process dependent asset {dependent}: {exc}")
                self._log.error("dependent_process_failed", asset_path=dependent, error=str(exc))
                continue
            if dependent in acc.skipped:
                acc.skipped.remove(dependent)
            acc.processed.append(dependent)

    def _validate_output(self, manifest: AssetManifest, acc: _Accumulator) -> None:
        for asset in manifest.assets:
            output = self.config.output_path(asset.path)
            try:
                if not output.is_file():
                    acc.errors.append(f"OUTPUT_MISSING: Output file missing for {asset.path}")
                elif output.stat().st_size == 0:
                    acc.errors.append(f"OUTPUT_EMPTY: Output file is empty for {asset.path}")
            except OSError as exc:
                acc.errors.append(f"OUTPUT_UNREADABLE: {asset.path}: {exc}")


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)
