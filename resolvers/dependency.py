"""Dependency resolvers: discover theme → icon edges for the manifest.

The manifest generator only depends on the :class:`DependencyResolver`
protocol, so a structural theme parser can replace the substring heuristic
without touching callers.

SubstringDependencyResolver
  For a theme's raw text, every icon asset whose basename (extension
  stripped) occurs anywhere in the text becomes an edge.  Coarse by
  construction:
    - false positives when one icon stem is a substring of another
      ("js" matches inside "json"); no tie-break is applied, both edges are
      recorded
    - false negatives when a theme reaches an icon only through indirection
"""

from pathlib import PurePosixPath
from typing import Protocol, Sequence

from app.models.asset_manifest import AssetMetadata


class DependencyResolver(Protocol):
    def resolve(
        self,
        theme: AssetMetadata,
        text: str,
        icons: Sequence[AssetMetadata],
    ) -> list[str]:
        """Return the paths of *icons* that *theme* (raw *text*) depends on."""
        ...


def icon_stem(path: str) -> str:
    """Basename of *path* with its last extension removed."""
    return PurePosixPath(path).stem


class SubstringDependencyResolver:
    """Match icon basenames as plain substrings of the theme text."""

    def resolve(
        self,
        theme: AssetMetadata,
        text: str,
        icons: Sequence[AssetMetadata],
    ) -> list[str]:
        deps: list[str] = []
        for icon in icons:
            stem = icon_stem(icon.path)
            if stem and stem in text:
                deps.append(icon.path)
        return deps
