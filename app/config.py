"""Pipeline configuration.

One immutable :class:`PipelineConfig` value is built by the caller (the CLI
script or a library user) and handed to every component at construction.
Components never resolve defaults on their own.

Path resolution (applied independently to each path field):
  1. Explicit keyword argument to :meth:`PipelineConfig.from_env`
  2. Environment variable (``ASSET_SOURCE_DIR``, ``ASSET_OUTPUT_DIR``,
     ``ASSET_MANIFEST_PATH``, ``ASSET_MODELS_DIR``)
  3. Built-in default
"""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

# Map config field → environment variable consulted when no explicit value is given.
_ENV_VARS: dict[str, str] = {
    "source_dir": "ASSET_SOURCE_DIR",
    "output_dir": "ASSET_OUTPUT_DIR",
    "manifest_path": "ASSET_MANIFEST_PATH",
    "models_dir": "ASSET_MODELS_DIR",
}


class PipelineConfig(BaseModel):
    """Settings shared by the manifest generator, detector, processor and validator."""

    model_config = ConfigDict(frozen=True)

    source_dir: Path = Path("assets")
    """Root of the source asset tree."""

    output_dir: Path = Path("dist/assets")
    """Root of the mirrored output tree."""

    manifest_path: Path = Path("asset-manifest.json")
    """Location of the persisted manifest (the pipeline's only durable state)."""

    models_dir: Path = Path("src/models")
    """Directory holding ``file_icons.model.json`` and ``folder_icons.model.json``."""

    skip_unchanged: bool = True
    """Skip assets classified ``unchanged``; when False they are reprocessed."""

    process_dependencies: bool = True
    """Reprocess assets that depend on changed assets."""

    validate_output: bool = True
    """Check that every manifest asset has a non-empty mirrored output file."""

    verbose: bool = False
    """Per-item reporting and debug events; disables the concise validation summary."""

    silent: bool = False
    """Suppress reporter output (entries are still recorded for export)."""

    log_file: Path | None = None
    """When set, reporter entries are exported here as JSON after each operation."""

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Build a config, filling unset path fields from the environment.

        ``None`` values in *overrides* count as "not given".
        """
        values = {k: v for k, v in overrides.items() if v is not None}
        for field, env_var in _ENV_VARS.items():
            if field not in values and os.environ.get(env_var):
                values[field] = os.environ[env_var]
        return cls(**values)

    def source_path(self, asset_path: str) -> Path:
        """Absolute-or-relative source location of *asset_path*."""
        return self.source_dir / asset_path

    def output_path(self, asset_path: str) -> Path:
        """Mirrored output location of *asset_path*."""
        return self.output_dir / asset_path
