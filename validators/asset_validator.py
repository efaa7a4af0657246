"""AssetValidator: structural and semantic checks over the whole asset set.

Checks (run in this order, each isolated from the others):
  1. integrity            files exist, are non-empty, SVG/theme well-formed
  2. icon models          names, associations, extension format
  3. orphans              icon files on disk not declared by their model
  4. duplicates           repeated icon names within one model
  5. theme structure      iconDefinitions present, associations resolve
  6. icon references      iconPath resolves relative to the theme file
  7. path hygiene         no traversal segments, no absolute paths

If either model descriptor cannot be loaded, validation stops with a single
``MODEL_LOAD_FAILED`` error.  An exception escaping one check is recorded
as ``VALIDATION_CHECK_FAILED`` and the remaining checks still run.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable

import jsonschema
from pydantic import ValidationError as PydanticValidationError

from app.config import PipelineConfig
from app.contracts import ICON_MODEL_SCHEMA, validate_contract
from app.models.asset_manifest import AssetManifest
from app.utils.jsonc import load_jsonc
from app.utils.logging import get_logger
from models.descriptors import ColorTheme, IconModel, IconTheme, ThemeDescriptor, parse_theme
from models.validation import (
    CheckResult,
    ConciseSummary,
    ValidationError,
    ValidationResult,
    ValidationSummary,
    ValidationWarning,
)
from validators.files import SvgValidator, ThemeFileValidator

FILE_ICONS_MODEL = "file_icons.model.json"
FOLDER_ICONS_MODEL = "folder_icons.model.json"

FILE_ICONS_DIR = "icons/file_icons"
FOLDER_ICONS_DIR = "icons/folder_icons"

_FOLDER_PREFIX = "folder-"
_WINDOWS_ABSOLUTE_RE = re.compile(r"^[A-Za-z]:[\\/]")

# Association table label → error code for references to undefined icons.
_REFERENCE_CODES: dict[str, tuple[str, str]] = {
    "fileExtensions": ("INVALID_FILE_EXTENSION_REFERENCE", "File extension"),
    "fileNames": ("INVALID_FILE_NAME_REFERENCE", "File name"),
    "folderNames": ("INVALID_FOLDER_NAME_REFERENCE", "Folder name"),
}


def is_absolute_like(path: str) -> bool:
    """True for POSIX-absolute, UNC/backslash-rooted or drive-letter paths."""
    return path.startswith(("/", "\\")) or bool(_WINDOWS_ABSOLUTE_RE.match(path))


@dataclass
class _ParsedTheme:
    descriptor: ThemeDescriptor | None = None
    error: str | None = None


class AssetValidator:
    """Validate a manifest's assets, icon models and themes.

    Usage::

        validator = AssetValidator(config, manifest)
        result = validator.validate_assets()

    Args:
        config: Pipeline configuration; ``source_dir`` and ``models_dir`` are
            used, and ``verbose`` is the default for :meth:`validate_assets`.
        manifest: Manifest describing the assets to check.
    """

    def __init__(self, config: PipelineConfig, manifest: AssetManifest) -> None:
        self.config = config
        self.manifest = manifest
        self._svg_validator = SvgValidator()
        self._theme_validator = ThemeFileValidator()
        self._themes: dict[str, _ParsedTheme] = {}
        self._log = get_logger("validators.asset_validator")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_assets(self, verbose: bool | None = None) -> ValidationResult:
        """Run every check and aggregate the findings.

        Args:
            verbose: When False a concise, code-grouped summary is attached.
                Defaults to ``config.verbose``.
        """
        if verbose is None:
            verbose = self.config.verbose

        file_model = self.load_icon_model(FILE_ICONS_MODEL)
        folder_model = self.load_icon_model(FOLDER_ICONS_MODEL)
        if file_model is None or folder_model is None:
            failed = CheckResult()
            failed.error(
                "MODEL_LOAD_FAILED",
                "Failed to load icon model files",
                modelsDir=str(self.config.models_dir),
            )
            return self._create_result(failed.errors, failed.warnings, verbose)

        self._themes = self._parse_themes()

        checks: list[tuple[str, Callable[[], CheckResult]]] = [
            ("asset_integrity", self.validate_asset_integrity),
            ("icon_models", lambda: self.validate_icon_models(file_model, folder_model)),
            ("orphaned_assets", lambda: self.detect_orphaned_assets(file_model, folder_model)),
            ("duplicate_names", lambda: self.detect_duplicate_names(file_model, folder_model)),
            ("theme_structure", self.validate_theme_structure),
            ("icon_references", self.validate_icon_references),
            ("path_resolution", self.validate_path_resolution),
        ]

        errors: list[ValidationError] = []
        warnings: list[ValidationWarning] = []
        for name, check in checks:
            try:
                result = check()
            except Exception as exc:  # noqa: BLE001
                self._log.error("validation_check_failed", check=name, error=str(exc))
                result = CheckResult()
                result.error("VALIDATION_CHECK_FAILED", f"Validation check failed: {exc}", check=name)
            errors.extend(result.errors)
            warnings.extend(result.warnings)

        return self._create_result(errors, warnings, verbose)

    def load_icon_model(self, filename: str) -> IconModel | None:
        """Load a model descriptor from ``config.models_dir``.

        Returns ``None`` when the file is missing, is not JSON-with-comments,
        or does not match the IconModel contract.
        """
        path = self.config.models_dir / filename
        if not path.is_file():
            self._log.warning("icon_model_missing", path=str(path))
            return None
        try:
            data = load_jsonc(path)
            validate_contract(data, ICON_MODEL_SCHEMA)
            return IconModel.model_validate(data)
        except (OSError, ValueError, jsonschema.ValidationError, PydanticValidationError) as exc:
            self._log.warning("icon_model_invalid", path=str(path), error=str(exc).splitlines()[0])
            return None

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def validate_asset_integrity(self) -> CheckResult:
        result = CheckResult()
        for asset in self.manifest.assets:
            full_path = self.config.source_path(asset.path)
            if not full_path.is_file():
                result.error("ASSET_NOT_FOUND", f"Asset file not found: {asset.path}", asset.path)
                continue

            if full_path.stat().st_size == 0:
                result.warning("EMPTY_ASSET", f"Asset file is empty: {asset.path}", asset.path)

            if asset.path.lower().endswith(".svg"):
                problems = self._svg_validator.validate(full_path)
                if problems:
                    result.error(
                        "INVALID_SVG", f"Invalid SVG file: {asset.path}", asset.path, svgErrors=problems
                    )

            if asset.path.lower().endswith(".theme.json"):
                problems = self._theme_problems(asset.path)
                if problems:
                    result.error(
                        "INVALID_THEME", f"Invalid theme file: {asset.path}", asset.path, themeErrors=problems
                    )
        return result

    def validate_icon_models(self, file_model: IconModel, folder_model: IconModel) -> CheckResult:
        result = CheckResult()

        for icon in file_model.icons:
            if not icon.name:
                result.error("MISSING_ICON_NAME", "Icon entry missing name property", icon=icon.model_dump())
                continue
            if not icon.file_extensions and not icon.file_names:
                result.warning(
                    "UNASSOCIATED_ICON", f"Icon '{icon.name}' has no file associations", iconName=icon.name
                )
            for ext in icon.file_extensions:
                if ext and not ext.startswith("."):
                    result.warning(
                        "INVALID_EXTENSION_FORMAT",
                        f"File extension should start with '.' for icon '{icon.name}': {ext}",
                        iconName=icon.name,
                        extension=ext,
                    )

        for icon in folder_model.icons:
            if not icon.name:
                result.error(
                    "MISSING_ICON_NAME", "Folder icon entry missing name property", icon=icon.model_dump()
                )
                continue
            if not icon.folder_names:
                result.warning(
                    "UNASSOCIATED_FOLDER_ICON",
                    f"Folder icon '{icon.name}' has no folder associations",
                    iconName=icon.name,
                )
        return result

    def detect_orphaned_assets(self, file_model: IconModel, folder_model: IconModel) -> CheckResult:
        result = CheckResult()
        for rel_dir, model, code, kind in (
            (FILE_ICONS_DIR, file_model, "ORPHANED_FILE_ICON", "file"),
            (FOLDER_ICONS_DIR, folder_model, "ORPHANED_FOLDER_ICON", "folder"),
        ):
            known = set(model.names()) | set(model.orphans)
            for orphan in self._find_orphaned_icons(rel_dir, known):
                result.warning(code, f"Orphaned {kind} icon found: {orphan}", orphan, iconType=kind)
        return result

    def detect_duplicate_names(self, file_model: IconModel, folder_model: IconModel) -> CheckResult:
        result = CheckResult()
        for model, code, kind in (
            (file_model, "DUPLICATE_FILE_ICON_NAME", "file"),
            (folder_model, "DUPLICATE_FOLDER_ICON_NAME", "folder"),
        ):
            seen: set[str] = set()
            duplicates: list[str] = []
            for name in model.names():
                if name in seen and name not in duplicates:
                    duplicates.append(name)
                seen.add(name)
            for name in duplicates:
                result.warning(code, f"Duplicate {kind} icon name: {name}", iconType=kind, name=name)
        return result

    def validate_theme_structure(self) -> CheckResult:
        result = CheckResult()
        for path, parsed in self._themes.items():
            if parsed.error is not None:
                result.error("THEME_PARSE_ERROR", f"Failed to parse theme file: {path}", path, error=parsed.error)
                continue
            theme = parsed.descriptor
            if isinstance(theme, ColorTheme):
                continue
            if not isinstance(theme, IconTheme):
                result.error("MISSING_ICON_DEFINITIONS", f"Theme missing iconDefinitions: {path}", path)
                continue

            for key, definition in theme.icon_definitions.items():
                if not definition.icon_path:
                    result.error(
                        "INVALID_ICON_DEFINITION", f"Icon definition missing iconPath: {key}", path, iconKey=key
                    )

            for label, table in theme.association_tables():
                code, noun = _REFERENCE_CODES[label]
                for entry, icon_key in table.items():
                    if icon_key not in theme.icon_definitions:
                        result.error(
                            code,
                            f"{noun} '{entry}' references undefined icon: {icon_key}",
                            path,
                            entry=entry,
                            iconKey=icon_key,
                        )
        return result

    def validate_icon_references(self) -> CheckResult:
        result = CheckResult()
        for path, parsed in self._themes.items():
            if not isinstance(parsed.descriptor, IconTheme):
                continue
            theme_dir = self.config.source_path(path).parent
            for key, definition in parsed.descriptor.icon_definitions.items():
                icon_path = definition.icon_path
                if not icon_path:
                    continue
                if is_absolute_like(icon_path):
                    result.warning(
                        "ABSOLUTE_ICON_PATH",
                        f"Icon path should be relative: {icon_path}",
                        path,
                        iconKey=key,
                        iconPath=icon_path,
                    )
                full_icon_path = theme_dir / icon_path
                if not full_icon_path.is_file():
                    result.error(
                        "ICON_FILE_NOT_FOUND",
                        f"Referenced icon file not found: {icon_path}",
                        path,
                        iconKey=key,
                        iconPath=icon_path,
                        fullPath=str(full_icon_path),
                    )
        return result

    def validate_path_resolution(self) -> CheckResult:
        result = CheckResult()
        for asset in self.manifest.assets:
            segments = re.split(r"[\\/]", asset.path)
            if ".." in segments:
                result.warning(
                    "PATH_TRAVERSAL_DETECTED",
                    f"Path traversal detected in asset path: {asset.path}",
                    asset.path,
                )
            if is_absolute_like(asset.path):
                result.warning("ABSOLUTE_ASSET_PATH", f"Asset path should be relative: {asset.path}", asset.path)
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _parse_themes(self) -> dict[str, _ParsedTheme]:
        """Parse every ``*.theme.json`` manifest asset once into its tagged variant."""
        themes: dict[str, _ParsedTheme] = {}
        for asset in self.manifest.assets:
            if not asset.path.lower().endswith(".theme.json"):
                continue
            full_path = self.config.source_path(asset.path)
            if not full_path.is_file():
                # Reported by the integrity check.
                continue
            try:
                data = load_jsonc(full_path)
                themes[asset.path] = _ParsedTheme(descriptor=parse_theme(data))
            except (OSError, ValueError) as exc:
                themes[asset.path] = _ParsedTheme(error=str(exc))
        return themes

    def _theme_problems(self, asset_path: str) -> list[str]:
        parsed = self._themes.get(asset_path)
        if parsed is None:
            return self._theme_validator.validate(self.config.source_path(asset_path))
        if parsed.error is not None:
            return [f"Failed to parse theme file: {parsed.error}"]
        return self._theme_validator.validate_descriptor(parsed.descriptor)

    def _find_orphaned_icons(self, rel_dir: str, known: set[str]) -> list[str]:
        """Relative paths of ``.svg`` files directly in *rel_dir* not named in *known*."""
        icons_dir = self.config.source_dir / rel_dir
        if not icons_dir.is_dir():
            return []
        orphans: list[str] = []
        for entry in sorted(icons_dir.iterdir(), key=lambda p: p.name):
            if not entry.is_file() or entry.suffix.lower() != ".svg":
                continue
            name = entry.stem
            if name.startswith(_FOLDER_PREFIX):
                name = name[len(_FOLDER_PREFIX):]
            if name not in known:
                orphans.append(str(PurePosixPath(rel_dir) / entry.name))
        return orphans

    def _create_result(
        self,
        errors: list[ValidationError],
        warnings: list[ValidationWarning],
        verbose: bool,
    ) -> ValidationResult:
        total = len(self.manifest.assets)
        invalid = len({e.asset_path for e in errors if e.asset_path})
        summary = ValidationSummary(
            total_assets=total,
            valid_assets=max(total - invalid, 0),
            invalid_assets=invalid,
            orphaned_assets=sum(1 for w in warnings if "ORPHANED" in w.code),
            duplicate_names=sum(1 for w in warnings if "DUPLICATE" in w.code),
            missing_references=sum(1 for e in errors if "REFERENCE" in e.code or e.code == "ICON_FILE_NOT_FOUND"),
        )
        return ValidationResult(
            valid=not errors,
            errors=errors,
            warnings=warnings,
            summary=summary,
            concise_summary=None if verbose else ConciseSummary.build(errors, warnings),
        )
