"""ManifestGenerator: scan the source tree into an AssetManifest.

Scan rules:
  - every regular file under ``config.source_dir`` is an asset; directories
    are not
  - traversal is queue-based (deque of pending directories); within one
    directory entries are visited in sorted name order, so discovery order
    is deterministic for a given tree
  - each file is read exactly once; its bytes feed the sha256 hash and, for
    theme assets, the dependency resolver
  - a file that cannot be read is logged and left out of the manifest

Classification (first match wins):
  type      directory segment ``icons`` / ``themes`` / ``images``, then
            extension (.svg .png .jpg .jpeg .gif → image, .json → theme),
            else ``other``
  category  ``file_icons`` → file-icons, ``folder_icons`` → folder-icons,
            ``themes`` → themes, ``images`` → preview-images, a segment
            starting with ``logo`` → branding, else None
"""

import hashlib
import json
import time
from collections import deque
from pathlib import Path, PurePosixPath

import jsonschema
from pydantic import ValidationError as PydanticValidationError

from app.config import PipelineConfig
from app.contracts import ASSET_MANIFEST_SCHEMA, validate_contract
from app.models.asset_manifest import AssetManifest, AssetMetadata, AssetType
from app.utils.logging import get_logger
from resolvers.dependency import DependencyResolver, SubstringDependencyResolver

# Directory segment → asset type.  Checked before extensions.
_SEGMENT_TO_TYPE: dict[str, AssetType] = {
    "icons": AssetType.ICON,
    "themes": AssetType.THEME,
    "images": AssetType.IMAGE,
}

_IMAGE_EXTS: frozenset[str] = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg"})
_THEME_EXTS: frozenset[str] = frozenset({".json"})

# Directory segment → category, in precedence order.
_SEGMENT_TO_CATEGORY: list[tuple[str, str]] = [
    ("file_icons", "file-icons"),
    ("folder_icons", "folder-icons"),
    ("themes", "themes"),
    ("images", "preview-images"),
]


def classify_asset(path: str) -> AssetType:
    """Return the asset type for the relative POSIX *path*."""
    pure = PurePosixPath(path)
    for segment in pure.parts[:-1]:
        if segment in _SEGMENT_TO_TYPE:
            return _SEGMENT_TO_TYPE[segment]
    suffix = pure.suffix.lower()
    if suffix in _IMAGE_EXTS:
        return AssetType.IMAGE
    if suffix in _THEME_EXTS:
        return AssetType.THEME
    return AssetType.OTHER


def categorize_asset(path: str) -> str | None:
    """Return the category for the relative POSIX *path*, or None."""
    parts = PurePosixPath(path).parts
    dirs = parts[:-1]
    for segment, category in _SEGMENT_TO_CATEGORY:
        if segment in dirs:
            return category
    if any(part.lower().startswith("logo") for part in parts):
        return "branding"
    return None


def hash_bytes(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class ManifestGenerator:
    """Build, save and load asset manifests for one source tree.

    Usage::

        generator = ManifestGenerator(config)
        manifest = generator.generate_manifest()
        generator.save_manifest(manifest)

    Args:
        config: Pipeline configuration; ``source_dir`` and ``manifest_path``
            are used.
        resolver: Dependency resolver for theme → icon edges.  Defaults to
            :class:`~resolvers.dependency.SubstringDependencyResolver`.
    """

    def __init__(
        self,
        config: PipelineConfig,
        resolver: DependencyResolver | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or SubstringDependencyResolver()
        self._log = get_logger("pipeline.manifest")
        # Theme text captured during the last scan, keyed by asset path.
        self._theme_text: dict[str, str] = {}

    @property
    def manifest_path(self) -> Path:
        return self.config.manifest_path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_manifest(self) -> AssetManifest:
        """Scan the source tree and return a complete manifest."""
        assets = self.discover_assets()
        dependencies = self._analyze_dependencies(assets)
        assets = [a.model_copy(update={"dependencies": dependencies[a.path]}) for a in assets]

        manifest = AssetManifest(
            generated_at=int(time.time() * 1000),
            assets=assets,
            categories=self._categorize(assets),
            dependencies=dependencies,
        )
        self._log.debug(
            "manifest_generated",
            assets=len(assets),
            categories=sorted(manifest.categories),
        )
        return manifest

    def discover_assets(self) -> list[AssetMetadata]:
        """Scan the source tree; dependency lists are left empty."""
        self._theme_text = {}
        root = self.config.source_dir
        assets: list[AssetMetadata] = []
        if not root.is_dir():
            self._log.warning("source_dir_missing", source_dir=str(root))
            return assets

        pending: deque[Path] = deque([root])
        while pending:
            directory = pending.popleft()
            try:
                entries = sorted(directory.iterdir(), key=lambda p: p.name)
            except OSError as exc:
                self._log.warning("directory_read_failed", directory=str(directory), error=str(exc))
                continue
            for entry in entries:
                if entry.is_dir():
                    pending.append(entry)
                elif entry.is_file():
                    asset = self._create_asset_metadata(entry, entry.relative_to(root).as_posix())
                    if asset is not None:
                        assets.append(asset)
        return assets

    def save_manifest(self, manifest: AssetManifest) -> Path:
        """Write *manifest* as JSON to ``config.manifest_path``."""
        path = self.config.manifest_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(manifest.to_json_dict(), indent=2), encoding="utf-8")
        self._log.debug("manifest_saved", path=str(path), assets=len(manifest.assets))
        return path

    def load_manifest(self) -> AssetManifest | None:
        """Load the persisted manifest.

        Returns:
            The manifest, or ``None`` when the file is missing, unreadable,
            not JSON, or does not conform to the AssetManifest contract.
            Never raises for these cases: they all mean "no previous state".
        """
        path = self.config.manifest_path
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            validate_contract(data, ASSET_MANIFEST_SCHEMA)
            return AssetManifest.model_validate(data)
        except (OSError, ValueError, jsonschema.ValidationError, PydanticValidationError) as exc:
            self._log.warning("manifest_load_failed", path=str(path), error=str(exc).splitlines()[0])
            return None

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _create_asset_metadata(self, full_path: Path, rel_path: str) -> AssetMetadata | None:
        try:
            stat = full_path.stat()
            content = full_path.read_bytes()
        except OSError as exc:
            self._log.warning("asset_read_failed", asset_path=rel_path, error=str(exc))
            return None

        asset_type = classify_asset(rel_path)
        if asset_type == AssetType.THEME:
            self._theme_text[rel_path] = content.decode("utf-8", errors="replace")

        return AssetMetadata(
            path=rel_path,
            size=len(content),
            modified_time=stat.st_mtime_ns // 1_000_000,
            hash=hash_bytes(content),
            type=asset_type,
            category=categorize_asset(rel_path),
        )

    def _categorize(self, assets: list[AssetMetadata]) -> dict[str, list[str]]:
        categories: dict[str, list[str]] = {}
        for asset in assets:
            if asset.category:
                categories.setdefault(asset.category, []).append(asset.path)
        return categories

    def _analyze_dependencies(self, assets: list[AssetMetadata]) -> dict[str, list[str]]:
        """Map every asset path to its dependency list (empty by default)."""
        icons = [a for a in assets if a.type == AssetType.ICON]
        dependencies: dict[str, list[str]] = {}
        for asset in assets:
            deps: list[str] = []
            if asset.type == AssetType.THEME:
                text = self._theme_text.get(asset.path, "")
                deps = self.resolver.resolve(asset, text, icons)
            dependencies[asset.path] = deps
        return dependencies
