"""Reporting collaborator injected into the orchestrator.

The pipeline core never prints.  Everything a user should see goes through
a :class:`Reporter`; the default :class:`StructlogReporter` emits through
structlog and keeps an in-memory record that can be exported as JSON.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.utils.logging import get_logger

ReportLevel = Literal["debug", "info", "success", "warning", "error", "critical"]

LEVELS: tuple[ReportLevel, ...] = ("debug", "info", "success", "warning", "error", "critical")

# structlog has no "success" level.
_STRUCTLOG_METHOD: dict[str, str] = {"success": "info"}


class Reporter(Protocol):
    def debug(self, message: str, asset_path: str | None = None, **context: Any) -> None: ...

    def info(self, message: str, asset_path: str | None = None, **context: Any) -> None: ...

    def success(self, message: str, asset_path: str | None = None, **context: Any) -> None: ...

    def warning(self, message: str, asset_path: str | None = None, **context: Any) -> None: ...

    def error(self, message: str, asset_path: str | None = None, **context: Any) -> None: ...

    def critical(self, message: str, asset_path: str | None = None, **context: Any) -> None: ...

    def hierarchy(self, prefix: str, message: str, is_last: bool = False, level: ReportLevel = "info") -> None:
        """Report one line of a tree, e.g. ``"   ├─ icons/a.svg"``."""
        ...

    def export_logs(self, path: Path) -> Path: ...


class LogEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timestamp: str
    level: ReportLevel
    message: str
    asset_path: str | None = None
    context: dict[str, Any] | None = None


def tree_line(prefix: str, message: str, is_last: bool = False) -> str:
    connector = "└─ " if is_last else "├─ "
    return f"{prefix}{connector}{message}"


class StructlogReporter:
    """Reporter backed by structlog.

    Args:
        verbose: Debug entries are dropped unless True.
        silent: Suppress all output.  Entries are still recorded so that
            :meth:`export_logs` has the full history.
        name: Logger name bound as ``component``.
    """

    def __init__(self, verbose: bool = False, silent: bool = False, name: str = "assets") -> None:
        self.verbose = verbose
        self.silent = silent
        self.entries: list[LogEntry] = []
        self._log = get_logger(name)

    def debug(self, message: str, asset_path: str | None = None, **context: Any) -> None:
        self._emit("debug", message, asset_path, context)

    def info(self, message: str, asset_path: str | None = None, **context: Any) -> None:
        self._emit("info", message, asset_path, context)

    def success(self, message: str, asset_path: str | None = None, **context: Any) -> None:
        self._emit("success", message, asset_path, context)

    def warning(self, message: str, asset_path: str | None = None, **context: Any) -> None:
        self._emit("warning", message, asset_path, context)

    def error(self, message: str, asset_path: str | None = None, **context: Any) -> None:
        self._emit("error", message, asset_path, context)

    def critical(self, message: str, asset_path: str | None = None, **context: Any) -> None:
        self._emit("critical", message, asset_path, context)

    def hierarchy(self, prefix: str, message: str, is_last: bool = False, level: ReportLevel = "info") -> None:
        self._emit(level, tree_line(prefix, message, is_last), None, {})

    def summary(self) -> dict[str, int]:
        """Entry count per level, every level present."""
        counts = {level: 0 for level in LEVELS}
        for entry in self.entries:
            counts[entry.level] += 1
        return counts

    def export_logs(self, path: Path) -> Path:
        """Write ``{exportedAt, summary, entries}`` as JSON to *path*."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "exportedAt": _now_iso(),
            "summary": self.summary(),
            "entries": [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in self.entries],
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    def _emit(self, level: ReportLevel, message: str, asset_path: str | None, context: dict[str, Any]) -> None:
        if level == "debug" and not self.verbose:
            return
        self.entries.append(
            LogEntry(
                timestamp=_now_iso(),
                level=level,
                message=message,
                asset_path=asset_path,
                context=context or None,
            )
        )
        if self.silent:
            return
        kwargs = dict(context)
        if asset_path is not None:
            kwargs["asset_path"] = asset_path
        if level == "success":
            kwargs["outcome"] = "success"
        getattr(self._log, _STRUCTLOG_METHOD.get(level, level))(message, **kwargs)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
