"""AssetOrchestrator: the four pipeline operations behind one entry point.

    manifest   scan the source tree and persist the manifest
    detect     classify changes against the persisted manifest (read-only)
    process    detect, then mirror changed assets and rewrite the manifest
    validate   run the AssetValidator over a fresh manifest

Every operation reports through the injected :class:`~reporting.reporter.Reporter`.
Exceptions are reported and re-raised; fatal processor failures surface as
:class:`~pipeline.errors.ProcessingAbortedError`.
"""

import time
from collections.abc import Callable
from typing import TypeVar

from app.config import PipelineConfig
from app.models.asset_manifest import AssetManifest
from models.changes import ChangeAnalysis
from models.processing import ProcessingResult
from models.validation import ValidationResult
from pipeline.change_detector import ChangeDetector
from pipeline.errors import ProcessingAbortedError
from pipeline.manifest import ManifestGenerator
from pipeline.processor import AssetProcessor
from reporting.reporter import Reporter, StructlogReporter
from validators.asset_validator import AssetValidator

T = TypeVar("T")

_SIZE_UNITS: tuple[str, ...] = ("B", "KB", "MB", "GB")

# Indent used for nested report lines.
_INDENT = "   "


def format_bytes(size: int) -> str:
    """Human-readable size with 1024-based units, e.g. ``1536 → "1.5 KB"``."""
    if size <= 0:
        return "0 B"
    value = float(size)
    exponent = 0
    while value >= 1024 and exponent < len(_SIZE_UNITS) - 1:
        value /= 1024
        exponent += 1
    value = round(value, 2)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[exponent]}"


class AssetOrchestrator:
    """Wire the generator, detector, processor and validator to one config.

    Args:
        config: Pipeline configuration shared by every component.
        reporter: Reporting collaborator.  Defaults to a
            :class:`StructlogReporter` honouring ``config.verbose`` and
            ``config.silent``.
    """

    def __init__(self, config: PipelineConfig, reporter: Reporter | None = None) -> None:
        self.config = config
        self.reporter = reporter or StructlogReporter(verbose=config.verbose, silent=config.silent)
        self.generator = ManifestGenerator(config)
        self.detector = ChangeDetector(config, self.generator)
        self.processor = AssetProcessor(config, self.generator)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def generate_manifest(self) -> AssetManifest:
        return self._run("Manifest generation", self._generate_manifest)

    def detect_changes(self) -> ChangeAnalysis:
        return self._run("Change detection", self._detect_changes)

    def process_assets(self) -> ProcessingResult | None:
        """Process changed assets; ``None`` when everything is up to date."""
        return self._run("Asset processing", self._process_assets)

    def validate_assets(self) -> ValidationResult:
        return self._run("Asset validation", self._validate_assets)

    # ------------------------------------------------------------------
    # Operation bodies
    # ------------------------------------------------------------------

    def _generate_manifest(self) -> AssetManifest:
        self.reporter.info("Generating asset manifest...")
        manifest = self.generator.generate_manifest()
        path = self.generator.save_manifest(manifest)
        self.reporter.success(f"Manifest generated with {len(manifest.assets)} assets")
        self.reporter.info(f"Categories: {', '.join(manifest.categories)}")
        self.reporter.info(f"Manifest saved to: {path}")
        return manifest

    def _detect_changes(self) -> ChangeAnalysis:
        self.reporter.info("Detecting asset changes...")
        analysis = self.detector.analyze_changes()
        self._report_change_summary(analysis)
        return analysis

    def _process_assets(self) -> ProcessingResult | None:
        start = time.perf_counter()
        self.reporter.info("Starting asset processing...")

        analysis = self.detector.analyze_changes()
        self._report_change_summary(analysis)
        if not analysis.processing_required:
            self.reporter.success("No changes detected, all assets are up to date")
            return None

        self.reporter.info("Processing changed assets...")
        result = self.processor.process_assets(analysis.changes, self.detector.last_manifest)
        self._report_processing_result(result)
        if result.aborted:
            message = result.errors[0] if result.errors else "Asset processing aborted"
            self.reporter.critical(message)
            raise ProcessingAbortedError(message)

        self.reporter.info("Updating asset manifest...")
        self.generator.save_manifest(self.generator.generate_manifest())

        self._report_final_stats(int((time.perf_counter() - start) * 1000))
        self.reporter.success("Asset processing completed")
        return result

    def _validate_assets(self) -> ValidationResult:
        self.reporter.info("Validating assets...")
        manifest = self.generator.generate_manifest()
        result = AssetValidator(self.config, manifest).validate_assets()
        self._report_validation_result(result)
        return result

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _run(self, operation: str, body: Callable[[], T]) -> T:
        try:
            return body()
        except Exception as exc:
            self.reporter.error(f"{operation} failed: {exc}", error_type=type(exc).__name__)
            raise
        finally:
            if self.config.log_file is not None:
                self.reporter.export_logs(self.config.log_file)

    def _report_change_summary(self, analysis: ChangeAnalysis) -> None:
        s = analysis.summary
        self.reporter.info("Change summary")
        lines = [
            f"Total assets: {s.total}",
            f"Added: {s.added}",
            f"Modified: {s.modified}",
            f"Deleted: {s.deleted}",
            f"Unchanged: {s.unchanged}",
        ]
        for i, line in enumerate(lines):
            self.reporter.hierarchy(_INDENT, line, is_last=i == len(lines) - 1)

        if analysis.affected_assets:
            self.reporter.info("Affected assets")
            last = len(analysis.affected_assets) - 1
            for i, path in enumerate(analysis.affected_assets):
                self.reporter.hierarchy(_INDENT, path, is_last=i == last)

    def _report_processing_result(self, result: ProcessingResult) -> None:
        s = result.summary
        self.reporter.info(
            "Processing summary",
            total=s.total,
            processed=s.processed,
            skipped=s.skipped,
            errors=s.errors,
            time_ms=s.time_ms,
        )
        if result.errors:
            self.reporter.warning(f"Processing errors: {len(result.errors)}")
            for i, error in enumerate(result.errors):
                self.reporter.hierarchy(_INDENT, error, is_last=i == len(result.errors) - 1, level="error")
        for warning in result.warnings:
            self.reporter.warning(warning)

    def _report_final_stats(self, total_ms: int) -> None:
        stats = self.processor.get_processing_stats()
        self.reporter.info("Final statistics")
        lines = [
            f"Source assets: {stats.source_count} ({format_bytes(stats.source_size)})",
            f"Output assets: {stats.output_count} ({format_bytes(stats.output_size)})",
            f"Total processing time: {total_ms}ms",
        ]
        if stats.source_size > 0:
            ratio = (stats.source_size - stats.output_size) / stats.source_size * 100
            lines.append(f"Compression ratio: {ratio:.1f}%")
        for i, line in enumerate(lines):
            self.reporter.hierarchy(_INDENT, line, is_last=i == len(lines) - 1)

    def _report_validation_result(self, result: ValidationResult) -> None:
        s = result.summary
        if result.valid:
            self.reporter.success(f"Validation passed: {s.valid_assets}/{s.total_assets} assets valid")
        else:
            self.reporter.error(
                f"Validation failed: {len(result.errors)} errors, {len(result.warnings)} warnings",
                invalid_assets=s.invalid_assets,
            )

        if result.concise_summary is not None:
            cs = result.concise_summary
            for label, counts, examples, level in (
                ("Errors", cs.error_counts, cs.error_examples, "error"),
                ("Warnings", cs.warning_counts, cs.warning_examples, "warning"),
            ):
                if not counts:
                    continue
                self.reporter.info(label)
                codes = list(counts)
                for i, code in enumerate(codes):
                    last_code = i == len(codes) - 1
                    self.reporter.hierarchy(_INDENT, f"{code}: {counts[code]}", is_last=last_code, level=level)
                    child_prefix = _INDENT + ("   " if last_code else "│  ")
                    for j, example in enumerate(examples.get(code, [])):
                        self.reporter.hierarchy(
                            child_prefix, example, is_last=j == len(examples[code]) - 1, level=level
                        )
            return

        for label, issues, level in (
            ("Errors", result.errors, "error"),
            ("Warnings", result.warnings, "warning"),
        ):
            if not issues:
                continue
            self.reporter.info(label)
            for i, issue in enumerate(issues):
                self.reporter.hierarchy(
                    _INDENT, f"[{issue.code}] {issue.example()}", is_last=i == len(issues) - 1, level=level
                )
