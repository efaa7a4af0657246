"""Exceptions raised out of pipeline operations.

Only fatal conditions are raised.  Per-asset failures are recorded in result
objects (``ProcessingResult.errors``, ``ValidationResult.errors``) instead.
"""


class AssetPipelineError(RuntimeError):
    """Base class for fatal pipeline failures."""


class ProcessingAbortedError(AssetPipelineError):
    """The processor stopped before handling any asset (e.g. output root not creatable)."""
