"""Public package surface for indentation-aware Markdown job logs.

``open_job_log`` is the usual entry point; the layered pieces (sink, evented
console, event bus, writer) are exported for callers who wire them manually.
"""

from __future__ import annotations

from .adapters.buffered_sink import BufferedSink
from .application.event_bus import EventBus
from .application.evented_console import EventedConsole
from .application.job_log_writer import JobLogWriter
from .config import JobLogConfig, enable_dotenv
from .domain.events import EventKind, LifecycleEvent, WriteEvent, WrittenEvent
from .runtime import joblog_demo, open_job_log, summary_info

__all__ = [
    "BufferedSink",
    "EventBus",
    "EventKind",
    "EventedConsole",
    "JobLogConfig",
    "JobLogWriter",
    "LifecycleEvent",
    "WriteEvent",
    "WrittenEvent",
    "enable_dotenv",
    "joblog_demo",
    "open_job_log",
    "summary_info",
]
