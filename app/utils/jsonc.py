"""Helpers for JSON-with-comments documents (model descriptors, themes)."""

import json
import re
from pathlib import Path
from typing import Any

# Strings first so that "//" or "/*" inside a string literal is left alone.
_TOKEN_RE = re.compile(r'"(?:\\.|[^"\\])*"|//[^\n]*|/\*.*?\*/', re.DOTALL)


def strip_json_comments(text: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments from *text*.

    String literals are preserved verbatim.  Line structure is kept for
    line comments so that :class:`json.JSONDecodeError` positions stay
    meaningful.
    """

    def _replace(match: re.Match) -> str:
        token = match.group(0)
        if token.startswith('"'):
            return token
        if token.startswith("/*"):
            return "\n" * token.count("\n")
        return ""

    return _TOKEN_RE.sub(_replace, text)


def loads_jsonc(text: str) -> Any:
    """Parse a JSON-with-comments string."""
    return json.loads(strip_json_comments(text))


def load_jsonc(path: Path) -> Any:
    """Read and parse the JSON-with-comments file at *path*.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not UTF-8.
        json.JSONDecodeError: If the stripped content is not valid JSON.
    """
    return loads_jsonc(Path(path).read_text(encoding="utf-8"))
