"""Pydantic models for change classification between two manifests.

AssetChange records are produced per run and never persisted; a fresh
AssetManifest is written instead.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ChangeType(str, Enum):
    ADDED     = "added"
    MODIFIED  = "modified"
    DELETED   = "deleted"
    UNCHANGED = "unchanged"


class AssetChange(BaseModel):
    """Classification of one asset path."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    type: ChangeType
    asset_path: str
    previous_hash: str | None = None
    current_hash: str | None = None
    previous_modified_time: int | None = None
    current_modified_time: int | None = None
    size: int | None = None
    """Current size in bytes; None for deleted assets."""


class ChangeSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int = 0
    added: int = 0
    modified: int = 0
    deleted: int = 0
    unchanged: int = 0


class ChangeAnalysis(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    changes: list[AssetChange]
    """Exhaustive partition of current ∪ previous paths."""

    summary: ChangeSummary
    affected_assets: list[str]
    """Every path not classified ``unchanged``, in change order."""

    processing_required: bool

    @classmethod
    def from_changes(cls, changes: list[AssetChange]) -> "ChangeAnalysis":
        counts = {t: 0 for t in ChangeType}
        for change in changes:
            counts[change.type] += 1
        summary = ChangeSummary(
            total=len(changes),
            added=counts[ChangeType.ADDED],
            modified=counts[ChangeType.MODIFIED],
            deleted=counts[ChangeType.DELETED],
            unchanged=counts[ChangeType.UNCHANGED],
        )
        return cls(
            changes=changes,
            summary=summary,
            affected_assets=[c.asset_path for c in changes if c.type != ChangeType.UNCHANGED],
            processing_required=(summary.added + summary.modified + summary.deleted) > 0,
        )

    def paths_of(self, *types: ChangeType) -> list[str]:
        return [c.asset_path for c in self.changes if c.type in types]
