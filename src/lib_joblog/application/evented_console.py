"""Sink wrapper that announces every write on an :class:`EventBus`.

Purpose
-------
Surround raw sink writes with ``WRITING``/``WRITTEN`` notifications and give
the console an explicit ``INIT``/``DISPOSING`` lifecycle.

Contents
--------
* :func:`render_template` – ``str.format`` rendering used by every write.
* :class:`EventedConsole` – the evented write path.

System Role
-----------
Middle layer of the pipeline. :class:`~lib_joblog.application.job_log_writer.JobLogWriter`
composes one instance and routes every transformed string through
:meth:`EventedConsole.dispatch`, so all writes share a single event order:
``WRITING`` → sink → ``WRITTEN``.

Two-phase start
---------------
``defer_init=True`` allocates the console without firing ``INIT`` so the owner
can attach subscribers first; :meth:`EventedConsole.initialise` then fires it
exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from types import TracebackType
from typing import Any

from lib_joblog.application.event_bus import EventBus, EventHandler
from lib_joblog.application.ports.sink import SinkPort
from lib_joblog.application.ports.time import ClockPort
from lib_joblog.domain.events import EventKind, LifecycleEvent, WriteEvent, WrittenEvent
from lib_joblog.domain.timestamps import ensure_aware

LOGGER = logging.getLogger(__name__)


class SystemClock(ClockPort):
    """Clock returning the current server-local, timezone-aware time."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


def render_template(template: str, args: tuple[Any, ...] = (), kwargs: Mapping[str, Any] | None = None) -> str:
    """Apply ``str.format`` when arguments are supplied; return ``template`` untouched otherwise.

    Literal braces in argument-free text therefore need no escaping. Template
    errors propagate to the caller.

    Examples
    --------
    >>> render_template("{0} of {total}", ("one",), {"total": 3})
    'one of 3'
    >>> render_template("{not a placeholder}")
    '{not a placeholder}'
    """
    if not args and not kwargs:
        return template
    return template.format(*args, **(kwargs or {}))


class EventedConsole:
    """Write through a sink while publishing events around every call.

    Examples
    --------
    >>> from lib_joblog.adapters.buffered_sink import BufferedSink
    >>> console = EventedConsole(BufferedSink(disable_stream=True))
    >>> seen = []
    >>> console.subscribe(EventKind.WRITTEN, lambda event: seen.append(event.final_text))
    >>> console.write_line("{0} + {0}", 2)
    '2 + 2'
    >>> seen
    ['2 + 2']
    """

    def __init__(
        self,
        sink: SinkPort,
        *,
        bus: EventBus | None = None,
        clock: ClockPort | None = None,
        defer_init: bool = False,
    ) -> None:
        self._sink = sink
        self._bus = bus if bus is not None else EventBus()
        self._clock = clock if clock is not None else SystemClock()
        self._initialised = False
        self._disposed = False
        if not defer_init:
            self.initialise()

    @property
    def sink(self) -> SinkPort:
        return self._sink

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def clock(self) -> ClockPort:
        return self._clock

    @property
    def is_initialised(self) -> bool:
        return self._initialised

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> None:
        self._bus.subscribe(kind, handler)

    def initialise(self) -> bool:
        """Fire ``INIT`` once; return ``False`` when it already fired."""
        if self._initialised:
            return False
        self._initialised = True
        LOGGER.debug("console initialised")
        self._bus.publish(EventKind.INIT, LifecycleEvent(EventKind.INIT, ensure_aware(self._clock.now())))
        return True

    def close(self) -> None:
        """Fire ``DISPOSING`` once. Later calls are no-ops."""
        if self._disposed:
            return
        self._disposed = True
        LOGGER.debug("console disposing")
        self._bus.publish(EventKind.DISPOSING, LifecycleEvent(EventKind.DISPOSING, ensure_aware(self._clock.now())))

    def __enter__(self) -> "EventedConsole":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def write(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Render ``format`` and write it without a line terminator."""
        text = render_template(format, args, kwargs)
        return self.dispatch(WriteEvent(format, args, kwargs, is_line_write=False), text)

    def write_line(self, format: str = "", *args: Any, **kwargs: Any) -> str:
        """Render ``format`` and write it followed by a line terminator."""
        text = render_template(format, args, kwargs)
        return self.dispatch(WriteEvent(format, args, kwargs, is_line_write=True), text)

    def dispatch(self, request: WriteEvent, text: str) -> str:
        """Publish ``request``, hand ``text`` to the sink, publish the outcome.

        Returns the value reported by the sink, which for line writes excludes
        the terminator.
        """
        self._bus.publish(EventKind.WRITING, request)
        if request.is_line_write:
            value = self._sink.write_line(text)
        else:
            value = self._sink.write(text)
        self._bus.publish(
            EventKind.WRITTEN,
            WrittenEvent(
                value,
                is_line_write=request.is_line_write,
                indentation_level=request.indentation_level,
                indentation_prefix=request.indentation_prefix,
            ),
        )
        return value

    def get_buffer(self) -> str:
        return self._sink.get_buffer()

    def reset_buffer(self) -> None:
        self._sink.reset_buffer()


__all__ = ["EventedConsole", "SystemClock", "render_template"]
