"""Indentation-aware Markdown job-log writer.

Purpose
-------
Produce consistently formatted logs for scheduled jobs: a header banner with
the support identifier and start time, body text indented by nesting level
inside fenced preformatted blocks, ``#`` section headings kept outside those
blocks, and a footer banner with end time and elapsed duration.

Contents
--------
* :class:`JobLogWriter` – the writer and its convenience helpers
  (``block_begin``/``block_end``, ``try_to``/``try_ok``/``try_ko``).

System Role
-----------
Top of the write pipeline. The writer owns an
:class:`~lib_joblog.domain.formatter.IndentationFormatter` and a
:class:`~lib_joblog.domain.blocks.PreBlockTracker`, and routes every
transformed string through a composed
:class:`~lib_joblog.application.evented_console.EventedConsole`, so each
call publishes ``WRITING`` with the caller's template, reaches the sink, then
publishes ``WRITTEN`` with the emitted text.

Block state
-----------
Initially no fenced block is open. Body writes open one on demand,
:meth:`JobLogWriter.write_section` closes it around the heading and reopens
it, and :meth:`JobLogWriter.write_footer` closes it for good.
"""

from __future__ import annotations

import logging
import string
from datetime import datetime
from types import TracebackType
from typing import Any

from lib_joblog.application.event_bus import EventBus, EventHandler
from lib_joblog.application.evented_console import EventedConsole, render_template
from lib_joblog.application.ports.sink import SinkPort
from lib_joblog.application.ports.time import ClockPort
from lib_joblog.config import JobLogConfig
from lib_joblog.domain.blocks import HORIZONTAL_RULE, PreBlockTracker, heading_marker
from lib_joblog.domain.events import EventKind, WriteEvent
from lib_joblog.domain.formatter import LINE_BREAK, IndentationFormatter
from lib_joblog.domain.timestamps import ensure_aware, format_elapsed, format_server_time, format_utc

LOGGER = logging.getLogger(__name__)

_BLOCK_TITLE_TRIM = string.whitespace + ":"


class JobLogWriter:
    """Write a Markdown-structured job log through an evented sink.

    Parameters
    ----------
    sink:
        Destination implementing :class:`~lib_joblog.application.ports.sink.SinkPort`.
    config:
        Job metadata and indentation unit; a default :class:`JobLogConfig`
        when omitted. Handlers carried by the config are subscribed before
        ``INIT`` fires.
    bus:
        Optional pre-populated :class:`EventBus`; its existing subscribers also
        receive ``INIT``.
    clock:
        Time source for the footer and lifecycle payloads.

    Examples
    --------
    >>> from lib_joblog.adapters.buffered_sink import BufferedSink
    >>> writer = JobLogWriter(BufferedSink(disable_stream=True))
    >>> writer.block_begin("Import {0}", "users")
    '```\\n[BEGIN] Import users:'
    >>> writer.write_line("row {n}", n=1)
    '    row 1'
    >>> writer.block_end()
    '[END]'
    >>> print(writer.get_buffer(), end="")
    ```
    [BEGIN] Import users:
        row 1
    [END]
    """

    def __init__(
        self,
        sink: SinkPort,
        config: JobLogConfig | None = None,
        *,
        bus: EventBus | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self._config = config if config is not None else JobLogConfig()
        self._formatter = IndentationFormatter(self._config.indentation_unit)
        self._blocks = PreBlockTracker()
        self._console = EventedConsole(sink, bus=bus, clock=clock, defer_init=True)
        self._subscribe_configured_handlers()
        self._console.initialise()

    def _subscribe_configured_handlers(self) -> None:
        configured = (
            (EventKind.INIT, self._config.on_init),
            (EventKind.DISPOSING, self._config.on_disposing),
            (EventKind.WRITING, self._config.on_writing),
            (EventKind.WRITTEN, self._config.on_written),
        )
        for kind, handler in configured:
            if handler is not None:
                self._console.subscribe(kind, handler)

    # ------------------------------------------------------------------ state

    @property
    def config(self) -> JobLogConfig:
        return self._config

    @property
    def indentation_level(self) -> int:
        return self._formatter.indentation_level

    @property
    def indentation_prefix(self) -> str:
        return self._formatter.indentation_prefix

    @property
    def last_char_was_line_break(self) -> bool:
        return self._formatter.last_char_was_line_break

    @property
    def is_pre_block_open(self) -> bool:
        return self._blocks.is_open

    @property
    def bus(self) -> EventBus:
        return self._console.bus

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> None:
        self._console.subscribe(kind, handler)

    def indent(self) -> None:
        """Add one indentation level."""
        self._formatter.indent()

    def unindent(self) -> None:
        """Remove one indentation level; underflow is ignored."""
        self._formatter.unindent()

    def get_buffer(self) -> str:
        return self._console.get_buffer()

    def reset_buffer(self) -> None:
        self._console.reset_buffer()

    # -------------------------------------------------------------- lifecycle

    def close(self) -> None:
        """Fire ``DISPOSING`` once."""
        self._console.close()

    def __enter__(self) -> "JobLogWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------- body text

    def write(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Write indented body text without a line terminator.

        Returns the exact text handed to the sink, including an opening fence
        when this call started a preformatted block.
        """
        return self._write_body(format, args, kwargs, is_line_write=False)

    def write_line(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Write indented body text; the sink appends the line terminator."""
        return self._write_body(format, args, kwargs, is_line_write=True)

    def _write_body(self, format: str, args: tuple[Any, ...], kwargs: dict[str, Any], *, is_line_write: bool) -> str:
        text = render_template(format, args, kwargs)
        request = self._request(format, args, kwargs, is_line_write=is_line_write)
        opening = self._blocks.open_pre_block(self._formatter.last_char_was_line_break)
        if opening:
            self._formatter.mark_line_start()
        return self._console.dispatch(request, opening + self._formatter.apply_indentation(text, is_line_write))

    def _request(self, format: str, args: tuple[Any, ...], kwargs: dict[str, Any], *, is_line_write: bool) -> WriteEvent:
        return WriteEvent(
            format,
            args,
            kwargs,
            is_line_write=is_line_write,
            indentation_level=self._formatter.indentation_level,
            indentation_prefix=self._formatter.indentation_prefix,
        )

    def try_to(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Announce an attempt, leaving the line open for :meth:`try_ok`/:meth:`try_ko`."""
        return self.write(format + "... ", *args, **kwargs)

    def try_ok(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        return self.write_line(("[OK] " + format).rstrip(), *args, **kwargs)

    def try_ko(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        return self.write_line(("[KO] " + format).rstrip(), *args, **kwargs)

    def block_begin(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Write a ``[BEGIN] title:`` line and indent what follows."""
        value = self.write_line(("[BEGIN] " + format).rstrip(_BLOCK_TITLE_TRIM) + ":", *args, **kwargs)
        self.indent()
        return value

    def block_end(self) -> str:
        """Unindent, then write ``[END]`` at the outer level."""
        self.unindent()
        return self.write_line("[END]")

    # -------------------------------------------------------------- structure

    def write_section(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Write a Markdown heading sized by the current indentation level.

        Headings cannot be indented, nor live inside a fenced block, so the
        open block is closed first and a new one is opened after the heading.
        """
        title = render_template(format, args, kwargs)
        request = self._request(format, args, kwargs, is_line_write=False)
        at_line_start = self._formatter.last_char_was_line_break
        lead = self._blocks.close_pre_block(at_line_start) or ("" if at_line_start else LINE_BREAK)
        heading = heading_marker(self._formatter.indentation_level) + (" " + title).rstrip()
        text = lead + LINE_BREAK + heading + LINE_BREAK + self._blocks.open_pre_block(True)
        value = self._console.dispatch(request, text)
        self._formatter.mark_line_start()
        return value

    def write_header(self) -> str:
        """Write the opening banner and indent the body one level.

        The banner lists the upper-cased support identifier (plus tags), the
        start time in UTC and server time, and, when the job has a title, a
        descriptive block. It is closed by an 80-dash rule.
        """
        self._formatter.reset()
        config = self._config
        started = config.begin_time
        lines = [
            f"[SUPPORT-GUID: {config.support_guid}]{config.tags or ''}".upper(),
            f"[EXECUTION STARTED AT {format_utc(started)} UTC+00:00]".upper(),
            f"[EXECUTION STARTED AT {format_server_time(started)} (SERVER-TIME)]".upper(),
        ]
        if config.title is not None:
            lines.extend(
                [
                    "",
                    f"# {config.title}".rstrip(),
                    HORIZONTAL_RULE,
                    f"- Description: {config.description or ''}".rstrip(),
                    f"- Schedule: {config.schedule or ''}".rstrip(),
                    f"- Support Notes: {config.support_notes or ''}".rstrip(),
                    f"- Credits: {config.credits or ''}".rstrip(),
                ]
            )
        lines.append(HORIZONTAL_RULE)
        banner = LINE_BREAK.join(lines) + LINE_BREAK

        at_line_start = self._formatter.last_char_was_line_break
        lead = self._blocks.close_pre_block(at_line_start) or ("" if at_line_start else LINE_BREAK)
        value = self._console.dispatch(self._request(banner, (), {}, is_line_write=False), lead + banner)
        self._formatter.mark_line_start()
        self._formatter.indent()
        LOGGER.debug("job log header written for %s", config.support_guid)
        return value

    def write_footer(self, start_time: datetime | None = None, end_time: datetime | None = None) -> str:
        """Close the log with end timestamps and the elapsed time.

        Only a log with an open preformatted block gets a banner; otherwise an
        empty line write is still issued so subscribers observe the call.
        ``start_time`` defaults to the configured begin time and ``end_time``
        to the clock's current time.
        """
        text = ""
        if self._blocks.is_open:
            self._formatter.reset()
            started = ensure_aware(start_time) if start_time is not None else self._config.begin_time
            finished = ensure_aware(end_time if end_time is not None else self._console.clock.now())
            closing = self._blocks.close_pre_block(self._formatter.last_char_was_line_break)
            text = closing + LINE_BREAK.join(
                [
                    HORIZONTAL_RULE,
                    f"[EXECUTION FINISHED AT {format_utc(finished)} UTC+00:00]".upper(),
                    f"[EXECUTION FINISHED AT {format_server_time(finished)} (SERVER-TIME)]".upper(),
                    f"[EXECUTION TIME {format_elapsed(finished - started)}]".upper(),
                ]
            )
        value = self._console.dispatch(self._request(text, (), {}, is_line_write=True), text)
        self._formatter.mark_line_start()
        return value


__all__ = ["JobLogWriter"]
