"""Icon model and theme descriptor models.

Themes come in two shapes: icon themes (``iconDefinitions`` + association
tables) and color themes (``type`` dark/light + ``colors``).  The shape is
resolved once by :func:`parse_theme` into a tagged variant (``kind``) so
checks dispatch on the tag instead of re-sniffing fields.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class ThemeParseError(ValueError):
    """Raised when a theme document cannot be mapped onto any theme variant."""


class IconEntry(BaseModel):
    """One ``icons[]`` entry of a model descriptor."""

    model_config = _MODEL_CONFIG

    name: str = ""
    file_extensions: list[str] = Field(default_factory=list)
    file_names: list[str] = Field(default_factory=list)
    folder_names: list[str] = Field(default_factory=list)


class IconModel(BaseModel):
    """``file_icons.model.json`` / ``folder_icons.model.json``."""

    model_config = _MODEL_CONFIG

    icons: list[IconEntry] = Field(default_factory=list)
    orphans: list[str] = Field(default_factory=list)
    """Icon names that are allowed to exist on disk without an ``icons`` entry."""

    def names(self) -> list[str]:
        return [icon.name for icon in self.icons if icon.name]


class IconDefinition(BaseModel):
    model_config = _MODEL_CONFIG

    icon_path: str | None = None


class _ThemeBase(BaseModel):
    model_config = _MODEL_CONFIG

    name: str | None = None
    schema_ref: str | None = Field(default=None, alias="$schema")
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """The document as parsed, for contract validation."""


class IconTheme(_ThemeBase):
    kind: Literal["icon"] = "icon"
    icon_definitions: dict[str, IconDefinition]
    file_extensions: dict[str, str] = Field(default_factory=dict)
    file_names: dict[str, str] = Field(default_factory=dict)
    folder_names: dict[str, str] = Field(default_factory=dict)

    def association_tables(self) -> list[tuple[str, dict[str, str]]]:
        """(label, table) pairs for every association table that maps to icon keys."""
        return [
            ("fileExtensions", self.file_extensions),
            ("fileNames", self.file_names),
            ("folderNames", self.folder_names),
        ]


class ColorTheme(_ThemeBase):
    kind: Literal["color"] = "color"
    type: Literal["dark", "light"]
    colors: Any = None


class UnknownTheme(_ThemeBase):
    kind: Literal["unknown"] = "unknown"


ThemeDescriptor = Union[IconTheme, ColorTheme, UnknownTheme]


def parse_theme(data: Any) -> ThemeDescriptor:
    """Resolve a parsed theme document into its tagged variant.

    Raises:
        ThemeParseError: If *data* is not a JSON object, or its icon-theme
            fields have the wrong types.
    """
    if not isinstance(data, dict):
        raise ThemeParseError("Theme must be a JSON object")

    common = {"name": data.get("name"), "$schema": data.get("$schema"), "raw": data}
    try:
        if data.get("type") in ("dark", "light"):
            return ColorTheme.model_validate(
                {**common, "type": data["type"], "colors": data.get("colors")}
            )
        if data.get("iconDefinitions") is not None:
            return IconTheme.model_validate(
                {
                    **common,
                    "iconDefinitions": data["iconDefinitions"],
                    "fileExtensions": data.get("fileExtensions") or {},
                    "fileNames": data.get("fileNames") or {},
                    "folderNames": data.get("folderNames") or {},
                }
            )
        return UnknownTheme.model_validate(common)
    except PydanticValidationError as exc:
        raise ThemeParseError(str(exc)) from exc
