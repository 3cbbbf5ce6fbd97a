"""Job metadata and environment-driven configuration.

Purpose
-------
Describe the job a log belongs to (support identifier, title, notes, start
time) together with the indentation unit and optional event handlers the
writer subscribes at construction.

Contents
--------
* :class:`JobLogConfig` – frozen settings snapshot.
* :func:`enable_dotenv` – load the nearest ``.env`` without overriding the
  real environment.
* :data:`DOTENV_ENV_VAR` – toggle consulted by the CLI.

System Role
-----------
Read-only input of :class:`~lib_joblog.application.job_log_writer.JobLogWriter`.
Environment variables use the ``JOBLOG_`` prefix; see :meth:`JobLogConfig.from_env`.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

from dotenv import find_dotenv, load_dotenv

from lib_joblog.domain.formatter import DEFAULT_INDENTATION_UNIT
from lib_joblog.domain.timestamps import ensure_aware

ENV_PREFIX = "JOBLOG_"
DOTENV_ENV_VAR = "JOBLOG_USE_DOTENV"

_TEXT_FIELDS = {
    "SUPPORT_GUID": "support_guid",
    "TITLE": "title",
    "DESCRIPTION": "description",
    "SCHEDULE": "schedule",
    "TAGS": "tags",
    "SUPPORT_NOTES": "support_notes",
    "CREDITS": "credits",
}

EventHandler = Callable[[Any], None]

_dotenv_loaded_path: Path | None = None


def _new_support_guid() -> str:
    return str(uuid4()).upper()


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(slots=True, frozen=True)
class JobLogConfig:
    """Immutable description of a scheduled job and its log layout.

    Attributes
    ----------
    support_guid:
        Identifier quoted by operators when asking for support; a fresh
        upper-case UUID4 by default.
    title, description, schedule, tags, support_notes, credits:
        Optional banner fields. The title decides whether the descriptive
        block is rendered at all; ``tags`` is appended to the support line.
    begin_time:
        Start of the job; naive values are interpreted as server-local.
    indentation_unit:
        String repeated once per indentation level.
    on_init, on_disposing, on_writing, on_written:
        Optional handlers subscribed by the writer before ``INIT`` fires.
    """

    support_guid: str = field(default_factory=_new_support_guid)
    title: str | None = None
    description: str | None = None
    schedule: str | None = None
    tags: str | None = None
    support_notes: str | None = None
    credits: str | None = None
    begin_time: datetime = field(default_factory=_local_now)
    indentation_unit: str = DEFAULT_INDENTATION_UNIT
    on_init: EventHandler | None = None
    on_disposing: EventHandler | None = None
    on_writing: EventHandler | None = None
    on_written: EventHandler | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.indentation_unit, str):
            raise ValueError("indentation_unit must be a string")
        if not self.support_guid or not self.support_guid.strip():
            raise ValueError("support_guid must not be empty")
        object.__setattr__(self, "begin_time", ensure_aware(self.begin_time))
        for name in ("on_init", "on_disposing", "on_writing", "on_written"):
            handler = getattr(self, name)
            if handler is not None and not callable(handler):
                raise ValueError(f"{name} must be callable")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "JobLogConfig":
        """Build a config from ``JOBLOG_*`` variables; keyword overrides win.

        ``JOBLOG_INDENT`` sets the unit verbatim; ``JOBLOG_INDENT_WIDTH`` sets it
        to that many spaces and is ignored when ``JOBLOG_INDENT`` is present.

        Examples
        --------
        >>> config = JobLogConfig.from_env({"JOBLOG_TITLE": "Nightly", "JOBLOG_INDENT_WIDTH": "2"})
        >>> config.title, config.indentation_unit
        ('Nightly', '  ')
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for suffix, attribute in _TEXT_FIELDS.items():
            raw = env.get(ENV_PREFIX + suffix)
            if raw is not None and raw.strip():
                values[attribute] = raw.strip()
        indent = env.get(ENV_PREFIX + "INDENT")
        if indent is not None:
            values["indentation_unit"] = indent
        else:
            width = env.get(ENV_PREFIX + "INDENT_WIDTH")
            if width is not None and width.strip():
                values["indentation_unit"] = " " * _parse_width(width)
        values.update(overrides)
        return cls(**values)

    def with_changes(self, **changes: Any) -> "JobLogConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)


def _parse_width(raw: str) -> int:
    try:
        width = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}INDENT_WIDTH must be an integer, got {raw!r}") from exc
    if width < 0:
        raise ValueError(f"{ENV_PREFIX}INDENT_WIDTH must not be negative, got {width}")
    return width


def enable_dotenv() -> Path | None:
    """Load the nearest ``.env`` at or above the working directory.

    Existing environment variables keep precedence. Returns the resolved path
    of the loaded file, or ``None`` when none was found.
    """
    global _dotenv_loaded_path
    candidate = find_dotenv(usecwd=True)
    if not candidate:
        return None
    path = Path(candidate).resolve()
    load_dotenv(path, override=False)
    _dotenv_loaded_path = path
    return path


def dotenv_loaded_path() -> Path | None:
    """Return the ``.env`` path loaded by the last successful :func:`enable_dotenv`."""
    return _dotenv_loaded_path


def _reset_dotenv_state_for_testing() -> None:
    global _dotenv_loaded_path
    _dotenv_loaded_path = None


__all__ = [
    "DOTENV_ENV_VAR",
    "ENV_PREFIX",
    "JobLogConfig",
    "dotenv_loaded_path",
    "enable_dotenv",
]
