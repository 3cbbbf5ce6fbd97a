"""Domain value objects and pure text transforms used by the job-log writer."""

from __future__ import annotations

from .blocks import FENCE, HORIZONTAL_RULE, MAX_HEADING_DEPTH, PreBlockTracker, heading_marker
from .events import EventKind, LifecycleEvent, WriteEvent, WrittenEvent
from .formatter import DEFAULT_INDENTATION_UNIT, LINE_BREAK, FormatterState, IndentationFormatter, normalize_line_breaks

__all__ = [
    "DEFAULT_INDENTATION_UNIT",
    "EventKind",
    "FENCE",
    "FormatterState",
    "HORIZONTAL_RULE",
    "IndentationFormatter",
    "LINE_BREAK",
    "LifecycleEvent",
    "MAX_HEADING_DEPTH",
    "PreBlockTracker",
    "WriteEvent",
    "WrittenEvent",
    "heading_marker",
    "normalize_line_breaks",
]
