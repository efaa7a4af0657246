"""Pydantic models for AssetProcessor results."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ProcessingSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    """Number of change records handed to the processor."""

    processed: int
    skipped: int
    errors: int
    time_ms: int


class ProcessingResult(BaseModel):
    """Outcome of one ``process_assets`` call.

    Per-asset failures are carried as strings in ``errors``; they are never
    raised.  ``aborted`` is True only when the call stopped before its first
    asset (the output root could not be created).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    processed: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    aborted: bool = False
    summary: ProcessingSummary


class ProcessingStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    source_count: int = 0
    output_count: int = 0
    source_size: int = 0
    output_size: int = 0
