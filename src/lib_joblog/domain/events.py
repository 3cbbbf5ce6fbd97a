"""Event payloads published around every console write.

Purpose
-------
Provide immutable, subscriber-safe representations of the four lifecycle
notifications raised by the evented console and the job-log writer.

Contents
--------
* :class:`EventKind` enumeration naming the supported notifications.
* :class:`WriteEvent` – payload published *before* a write reaches the sink.
* :class:`WrittenEvent` – payload published *after* the sink accepted a write.
* :class:`LifecycleEvent` – payload for ``INIT`` and ``DISPOSING``.

System Role
-----------
Sits in the domain layer so subscribers only ever see frozen data objects and
never a handle to the writer's mutable formatter or block state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class EventKind(Enum):
    """Notifications raised by the evented console."""

    INIT = "init"
    DISPOSING = "disposing"
    WRITING = "writing"
    WRITTEN = "written"

    @classmethod
    def from_name(cls, name: str) -> "EventKind":
        """Return the member matching ``name`` case-insensitively.

        Examples
        --------
        >>> EventKind.from_name(" Writing ") is EventKind.WRITING
        True
        """
        normalized = name.strip().upper()
        try:
            return cls[normalized]
        except KeyError as exc:
            raise ValueError(f"Unknown event kind: {name!r}") from exc


def _clamp_level(level: int) -> int:
    return level if level > 0 else 0


@dataclass(slots=True, frozen=True)
class WriteEvent:
    """Write request observed by ``WRITING`` subscribers.

    Attributes
    ----------
    raw_format:
        Template exactly as the caller passed it, before rendering and
        indentation.
    args / kwargs:
        Positional and keyword values destined for the template.
    is_line_write:
        ``True`` when the request came from a ``write_line`` style call.
    indentation_level:
        Writer indentation depth at the time of the request (never negative).
    indentation_prefix:
        Accumulated indentation string matching ``indentation_level``.
    """

    raw_format: str
    args: tuple[Any, ...] = ()
    kwargs: Mapping[str, Any] = field(default_factory=dict)
    is_line_write: bool = False
    indentation_level: int = 0
    indentation_prefix: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "kwargs", MappingProxyType(dict(self.kwargs)))
        object.__setattr__(self, "indentation_level", _clamp_level(self.indentation_level))
        object.__setattr__(self, "indentation_prefix", self.indentation_prefix or "")


@dataclass(slots=True, frozen=True)
class WrittenEvent:
    """Text actually handed to the sink, observed by ``WRITTEN`` subscribers."""

    final_text: str
    is_line_write: bool = False
    indentation_level: int = 0
    indentation_prefix: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "indentation_level", _clamp_level(self.indentation_level))
        object.__setattr__(self, "indentation_prefix", self.indentation_prefix or "")


@dataclass(slots=True, frozen=True)
class LifecycleEvent:
    """Payload for ``INIT`` and ``DISPOSING`` notifications."""

    kind: EventKind
    occurred_at: datetime

    def __post_init__(self) -> None:
        if self.kind not in (EventKind.INIT, EventKind.DISPOSING):
            raise ValueError(f"{self.kind.name} is not a lifecycle event")
        if self.occurred_at.tzinfo is None or self.occurred_at.tzinfo.utcoffset(self.occurred_at) is None:
            raise ValueError("occurred_at must be timezone-aware")


__all__ = ["EventKind", "LifecycleEvent", "WriteEvent", "WrittenEvent"]
