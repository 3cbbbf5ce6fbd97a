"""Composition root assembling sinks, configuration and the job-log writer.

Purpose
-------
Give host applications one call that turns keyword arguments (or the
``JOBLOG_*`` environment) into a ready :class:`JobLogWriter`, and a turnkey
demo that previews the log layout.

Contents
--------
* :func:`open_job_log` – wire config, Rich sink and writer.
* :func:`joblog_demo` – render a sample job log and return the buffer.

System Role
-----------
Outer shell: adapters are chosen here so the application layer only sees
ports.
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import Any

from rich.console import Console

from .adapters.buffered_sink import BufferedSink
from .application.event_bus import DiagnosticHook, EventBus
from .application.job_log_writer import JobLogWriter
from .application.ports.time import ClockPort
from .config import JobLogConfig


def open_job_log(
    config: JobLogConfig | None = None,
    *,
    console: Console | None = None,
    disable_stream: bool = False,
    disable_buffer: bool = False,
    buffer: io.StringIO | None = None,
    clock: ClockPort | None = None,
    diagnostic: DiagnosticHook | None = None,
    from_env: bool = False,
    **overrides: Any,
) -> JobLogWriter:
    """Return a :class:`JobLogWriter` writing to a Rich console and a buffer.

    Parameters
    ----------
    config:
        Explicit configuration. When omitted one is built from ``overrides``
        (and from ``JOBLOG_*`` variables when ``from_env`` is true).
    console:
        Rich console for the live stream; a default stdout console otherwise.
    disable_stream / disable_buffer:
        Independently switch off either destination.
    buffer:
        Shared :class:`io.StringIO` receiving the log; the caller keeps
        ownership and sees every write.
    clock:
        Time source for footer timestamps and lifecycle payloads.
    diagnostic:
        Callback receiving ``("subscriber_error", details)`` when a subscriber
        raises.
    overrides:
        :class:`JobLogConfig` fields; rejected when ``config`` is given.

    Examples
    --------
    >>> writer = open_job_log(title="Nightly import", disable_stream=True)
    >>> writer.config.title
    'Nightly import'
    """
    if config is not None and (overrides or from_env):
        raise ValueError("pass either config or field overrides/from_env, not both")
    if config is None:
        config = JobLogConfig.from_env(**overrides) if from_env else JobLogConfig(**overrides)
    sink = BufferedSink(console, disable_stream=disable_stream, disable_buffer=disable_buffer, buffer=buffer)
    return JobLogWriter(sink, config, bus=EventBus(diagnostic=diagnostic), clock=clock)


def joblog_demo(
    *,
    title: str | None = "Demo job",
    indent_width: int = 4,
    console: Console | None = None,
    disable_stream: bool = False,
    end_time: datetime | None = None,
) -> str:
    """Write a representative job log and return the buffered text.

    Examples
    --------
    >>> text = joblog_demo(disable_stream=True)
    >>> "[BEGIN] Loading customers:" in text and "[EXECUTION TIME" in text
    True
    """
    if indent_width < 0:
        raise ValueError("indent_width must not be negative")
    with open_job_log(
        title=title,
        description="Synchronises customers and invoices with the accounting system.",
        schedule="Every night at 02:00",
        support_notes="Re-run manually after fixing the source file.",
        credits="Operations team",
        indentation_unit=" " * indent_width,
        console=console,
        disable_stream=disable_stream,
    ) as writer:
        writer.write_header()
        writer.write_section("Customers")
        writer.block_begin("Loading customers")
        writer.try_to("Reading {0}", "customers.csv")
        writer.try_ok("{0} rows", 42)
        writer.try_to("Validating e-mail addresses")
        writer.try_ko("{count} invalid", count=3)
        writer.block_end()
        writer.write_section("Invoices")
        writer.write_line("Nothing to do.")
        writer.write_footer(end_time=end_time)
        return writer.get_buffer()


def summary_info() -> str:
    """Return the metadata banner used by the CLI entry point.

    Examples
    --------
    >>> banner = summary_info()
    >>> "version" in banner
    True
    """
    from . import __init__conf__

    lines: list[str] = []

    def _capture(text: str) -> None:
        lines.append(text)

    __init__conf__.print_info(writer=_capture)
    return "".join(lines)


__all__ = ["joblog_demo", "open_job_log", "summary_info"]
