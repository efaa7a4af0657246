"""Typed AssetManifest models: the pipeline's persisted snapshot.

Persisted field names are camelCase (``modifiedTime``, ``generatedAt``);
Python attributes are snake_case.  Serialise with ``by_alias=True``.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MANIFEST_VERSION = "1.0.0"


class AssetType(str, Enum):
    ICON  = "icon"
    THEME = "theme"
    IMAGE = "image"
    OTHER = "other"


class AssetMetadata(BaseModel):
    """Immutable snapshot of one file at scan time."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    path: str
    """Path relative to the source root, POSIX separators.  Unique key."""

    size: int
    """Size in bytes."""

    modified_time: int
    """Modification time, epoch milliseconds."""

    hash: str
    """sha256 hex digest of the file content."""

    type: AssetType

    category: str | None = None
    """e.g. 'file-icons', 'folder-icons', 'themes', 'preview-images', 'branding'"""

    dependencies: list[str] = Field(default_factory=list)
    """Asset paths this asset's content appears to reference."""


class AssetManifest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    version: str = MANIFEST_VERSION
    generated_at: int
    assets: list[AssetMetadata]
    categories: dict[str, list[str]] = Field(default_factory=dict)
    dependencies: dict[str, list[str]] = Field(default_factory=dict)

    def paths(self) -> list[str]:
        return [a.path for a in self.assets]

    def asset(self, path: str) -> AssetMetadata | None:
        for a in self.assets:
            if a.path == path:
                return a
        return None

    def dependents_of(self, path: str) -> list[str]:
        """Reverse edge lookup: assets whose dependency list contains *path*.

        Returned in manifest order.
        """
        return [p for p, deps in self.dependencies.items() if path in deps]

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
