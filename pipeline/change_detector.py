"""ChangeDetector: classify asset paths between the persisted and current manifest.

Rules (per path, current ∪ previous):
  only in current            → added
  only in previous           → deleted
  in both, hash/size/mtime ≠ → modified
  in both, all equal         → unchanged
No previous manifest means every current asset is ``added``.

Output order: current assets in discovery order, then deleted assets in
previous-manifest order.  Identical inputs always give identical output.
"""

from app.config import PipelineConfig
from app.models.asset_manifest import AssetManifest, AssetMetadata
from app.utils.logging import get_logger
from models.changes import AssetChange, ChangeAnalysis, ChangeType
from pipeline.manifest import ManifestGenerator


def has_asset_changed(previous: AssetMetadata, current: AssetMetadata) -> bool:
    return (
        previous.hash != current.hash
        or previous.size != current.size
        or previous.modified_time != current.modified_time
    )


def detect_changes(
    previous: AssetManifest | None,
    current_assets: list[AssetMetadata],
) -> list[AssetChange]:
    """Pure comparison of a previous manifest with a fresh scan."""
    if previous is None:
        return [
            AssetChange(
                type=ChangeType.ADDED,
                asset_path=a.path,
                current_hash=a.hash,
                current_modified_time=a.modified_time,
                size=a.size,
            )
            for a in current_assets
        ]

    previous_by_path = {a.path: a for a in previous.assets}
    current_paths = {a.path for a in current_assets}
    changes: list[AssetChange] = []

    for current in current_assets:
        prev = previous_by_path.get(current.path)
        if prev is None:
            changes.append(
                AssetChange(
                    type=ChangeType.ADDED,
                    asset_path=current.path,
                    current_hash=current.hash,
                    current_modified_time=current.modified_time,
                    size=current.size,
                )
            )
            continue
        changes.append(
            AssetChange(
                type=ChangeType.MODIFIED if has_asset_changed(prev, current) else ChangeType.UNCHANGED,
                asset_path=current.path,
                previous_hash=prev.hash,
                current_hash=current.hash,
                previous_modified_time=prev.modified_time,
                current_modified_time=current.modified_time,
                size=current.size,
            )
        )

    seen_deleted: set[str] = set()
    for prev in previous.assets:
        if prev.path in current_paths or prev.path in seen_deleted:
            continue
        seen_deleted.add(prev.path)
        changes.append(
            AssetChange(
                type=ChangeType.DELETED,
                asset_path=prev.path,
                previous_hash=prev.hash,
                previous_modified_time=prev.modified_time,
            )
        )
    return changes


class ChangeDetector:
    """Compare the current source tree with the persisted manifest.

    Args:
        config: Pipeline configuration.
        generator: Manifest generator used for both the scan and loading the
            previous manifest.  Defaults to one built from *config*.
    """

    def __init__(
        self,
        config: PipelineConfig,
        generator: ManifestGenerator | None = None,
    ) -> None:
        self.config = config
        self.generator = generator or ManifestGenerator(config)
        # Current manifest computed by the most recent analyze_changes().
        self.last_manifest: AssetManifest | None = None
        self._log = get_logger("pipeline.change_detector")

    def analyze_changes(self) -> ChangeAnalysis:
        previous = self.generator.load_manifest()
        current = self.generator.generate_manifest()
        self.last_manifest = current

        analysis = ChangeAnalysis.from_changes(detect_changes(previous, current.assets))
        self._log.debug(
            "changes_analyzed",
            first_run=previous is None,
            **analysis.summary.model_dump(),
        )
        return analysis

    @staticmethod
    def assets_to_process(changes: list[AssetChange]) -> list[str]:
        """Paths classified added or modified."""
        return [c.asset_path for c in changes if c.type in (ChangeType.ADDED, ChangeType.MODIFIED)]

    @staticmethod
    def assets_to_skip(changes: list[AssetChange]) -> list[str]:
        """Paths classified unchanged."""
        return [c.asset_path for c in changes if c.type == ChangeType.UNCHANGED]

    @staticmethod
    def needs_processing(asset_path: str, changes: list[AssetChange]) -> bool:
        """True for added/modified paths, and for paths absent from *changes*."""
        for change in changes:
            if change.asset_path == asset_path:
                return change.type in (ChangeType.ADDED, ChangeType.MODIFIED)
        return True
