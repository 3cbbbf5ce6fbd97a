"""Application services: event fan-out, evented console, job-log writer."""

from __future__ import annotations

from .event_bus import DiagnosticHook, EventBus, EventHandler
from .evented_console import EventedConsole, SystemClock, render_template
from .job_log_writer import JobLogWriter

__all__ = [
    "DiagnosticHook",
    "EventBus",
    "EventHandler",
    "EventedConsole",
    "JobLogWriter",
    "SystemClock",
    "render_template",
]
