"""Pydantic models for AssetValidator output.

Note: ``ValidationError`` here is the asset-validation record, unrelated to
:class:`pydantic.ValidationError`.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Number of example messages kept per code in the concise summary.
CONCISE_EXAMPLE_LIMIT = 3

_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidationError(BaseModel):
    """Blocking issue; any error makes the result invalid."""

    model_config = _MODEL_CONFIG

    type: Literal["error"] = "error"
    code: str
    """Stable identifier, e.g. 'INVALID_FILE_EXTENSION_REFERENCE'."""

    message: str
    asset_path: str | None = None
    context: dict[str, Any] | None = None

    def example(self) -> str:
        return f"{self.message} ({self.asset_path})" if self.asset_path else self.message


class ValidationWarning(BaseModel):
    """Advisory issue; does not affect ``valid``."""

    model_config = _MODEL_CONFIG

    type: Literal["warning"] = "warning"
    code: str
    message: str
    asset_path: str | None = None
    context: dict[str, Any] | None = None

    def example(self) -> str:
        return f"{self.message} ({self.asset_path})" if self.asset_path else self.message


class CheckResult(BaseModel):
    """Accumulator returned by every individual validation check."""

    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)

    def error(self, code: str, message: str, asset_path: str | None = None, **context: Any) -> None:
        self.errors.append(
            ValidationError(code=code, message=message, asset_path=asset_path, context=context or None)
        )

    def warning(self, code: str, message: str, asset_path: str | None = None, **context: Any) -> None:
        self.warnings.append(
            ValidationWarning(code=code, message=message, asset_path=asset_path, context=context or None)
        )


class ValidationSummary(BaseModel):
    model_config = _MODEL_CONFIG

    total_assets: int = 0
    valid_assets: int = 0
    invalid_assets: int = 0
    orphaned_assets: int = 0
    duplicate_names: int = 0
    missing_references: int = 0


class ConciseSummary(BaseModel):
    """Issues grouped by code, with at most three examples per code."""

    model_config = _MODEL_CONFIG

    error_counts: dict[str, int] = Field(default_factory=dict)
    warning_counts: dict[str, int] = Field(default_factory=dict)
    error_examples: dict[str, list[str]] = Field(default_factory=dict)
    warning_examples: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def build(
        cls,
        errors: list[ValidationError],
        warnings: list[ValidationWarning],
    ) -> "ConciseSummary":
        summary = cls()
        for issue in errors:
            summary.error_counts[issue.code] = summary.error_counts.get(issue.code, 0) + 1
            examples = summary.error_examples.setdefault(issue.code, [])
            if len(examples) < CONCISE_EXAMPLE_LIMIT:
                examples.append(issue.example())
        for issue in warnings:
            summary.warning_counts[issue.code] = summary.warning_counts.get(issue.code, 0) + 1
            examples = summary.warning_examples.setdefault(issue.code, [])
            if len(examples) < CONCISE_EXAMPLE_LIMIT:
                examples.append(issue.example())
        return summary


class ValidationResult(BaseModel):
    model_config = _MODEL_CONFIG

    valid: bool
    errors: list[ValidationError] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)
    summary: ValidationSummary
    concise_summary: ConciseSummary | None = None
    """Present only when validation ran in non-verbose mode."""

    def codes(self) -> list[str]:
        return [e.code for e in self.errors] + [w.code for w in self.warnings]
