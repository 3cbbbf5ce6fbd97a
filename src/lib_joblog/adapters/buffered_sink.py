"""Rich-backed sink writing to a live console and an in-memory buffer.

Purpose
-------
Mirror every write onto the terminal and into a string buffer that callers can
later reuse as a log file body, a notification text or an e-mail.

Contents
--------
* :class:`BufferedSink` – concrete :class:`~lib_joblog.application.ports.sink.SinkPort`.

System Role
-----------
Outermost adapter of the write pipeline. Output is printed as a single
verbatim :class:`rich.segment.Segment`, so the terminal receives exactly the
buffered text: Markdown fences, ``#`` headings, square brackets and tabs are
not interpreted, highlighted, expanded or wrapped.

Buffer ownership
----------------
Without ``buffer`` the sink owns a fresh :class:`io.StringIO`. An injected
buffer is shared: the caller keeps its reference, sees every write, and
:meth:`BufferedSink.reset_buffer` clears it in place.
"""

from __future__ import annotations

import io

from rich.console import Console, ConsoleOptions, RenderResult
from rich.segment import Segment

from lib_joblog.application.ports.sink import SinkPort
from lib_joblog.domain.formatter import LINE_BREAK


class _Verbatim:
    """Renderable emitting its text as one unstyled segment."""

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield Segment(self.text)


class BufferedSink(SinkPort):
    """Write to a Rich console and a string buffer; each destination can be disabled.

    Examples
    --------
    >>> sink = BufferedSink(disable_stream=True)
    >>> sink.write("a")
    'a'
    >>> sink.write_line("b")
    'b'
    >>> sink.get_buffer()
    'ab\\n'
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        disable_stream: bool = False,
        disable_buffer: bool = False,
        buffer: io.StringIO | None = None,
    ) -> None:
        self._console = console if console is not None else Console(highlight=False, soft_wrap=True)
        self._stream_disabled = disable_stream
        self._buffer_disabled = disable_buffer
        self._buffer = buffer if buffer is not None else io.StringIO()

    @property
    def console(self) -> Console:
        return self._console

    @property
    def is_stream_disabled(self) -> bool:
        return self._stream_disabled

    @property
    def is_buffer_disabled(self) -> bool:
        return self._buffer_disabled

    def write(self, text: str) -> str:
        """Emit ``text`` to every enabled destination and return it unchanged."""
        self._emit(text)
        return text

    def write_line(self, text: str) -> str:
        """Emit ``text`` plus a line terminator; the return value omits the terminator."""
        self._emit(text + LINE_BREAK)
        return text

    def get_buffer(self) -> str:
        if self._buffer_disabled:
            return ""
        return self._buffer.getvalue()

    def reset_buffer(self) -> None:
        if self._buffer_disabled:
            return
        self._buffer.seek(0)
        self._buffer.truncate(0)

    def _emit(self, value: str) -> None:
        if not self._stream_disabled:
            self._console.print(_Verbatim(value), end="", crop=False)
        if not self._buffer_disabled:
            self._buffer.write(value)


__all__ = ["BufferedSink"]
