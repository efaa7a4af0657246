"""Structural checks for individual SVG and theme files.

Both validators return a list of human-readable problems; an empty list
means the file is well-formed.  Neither raises for malformed content.
"""

from pathlib import Path

from app.contracts import COLOR_THEME_SCHEMA, ICON_THEME_SCHEMA, contract_errors
from app.utils.jsonc import load_jsonc
from app.utils.logging import get_logger
from models.descriptors import ColorTheme, IconTheme, ThemeDescriptor, ThemeParseError, parse_theme

logger = get_logger("validators.files")

_UTF8_DECLARATIONS: tuple[str, ...] = ('encoding="utf-8"', 'encoding="UTF-8"', "encoding='utf-8'", "encoding='UTF-8'")


class SvgValidator:
    """Minimal SVG well-formedness: opening and closing ``svg`` tags.

    An XML declaration is optional, but when present it must declare UTF-8.
    ``viewBox`` is not required.
    """

    def validate(self, path: Path) -> list[str]:
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return [f"Failed to read SVG file: {exc}"]

        problems: list[str] = []
        if "<svg" not in content:
            problems.append("Missing <svg> tag")
        if "</svg>" not in content:
            problems.append("Missing </svg> tag")
        if "<?xml" in content and not any(d in content for d in _UTF8_DECLARATIONS):
            problems.append("XML declaration should specify UTF-8 encoding")
        return problems


class ThemeFileValidator:
    """Shape check for ``*.theme.json`` files.

    A theme must be a JSON object that is either a color theme (``type``
    dark/light with a non-empty ``colors`` object) or an icon theme (non-empty
    ``iconDefinitions``), and must carry ``$schema`` or ``name``.
    """

    def validate(self, path: Path) -> list[str]:
        try:
            data = load_jsonc(path)
        except (OSError, ValueError) as exc:
            return [f"Failed to parse theme file: {exc}"]
        try:
            theme = parse_theme(data)
        except ThemeParseError as exc:
            return [str(exc)]
        return self.validate_descriptor(theme)

    def validate_descriptor(self, theme: ThemeDescriptor) -> list[str]:
        """Validate an already parsed theme against its variant's contract."""
        if isinstance(theme, ColorTheme):
            problems = contract_errors(theme.raw, COLOR_THEME_SCHEMA)
        elif isinstance(theme, IconTheme):
            problems = contract_errors(theme.raw, ICON_THEME_SCHEMA)
        else:
            problems = [
                'Theme must be either a color theme (with "type" and "colors") '
                'or icon theme (with "iconDefinitions")'
            ]
        if not theme.schema_ref and not theme.name:
            problems.append('Theme should have either "$schema" (VSCode) or "name" property')
        if problems:
            logger.debug("theme_contract_violations", kind=theme.kind, count=len(problems))
        return problems
