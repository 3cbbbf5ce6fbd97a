"""Synchronous publish/subscribe hub for console lifecycle events.

Purpose
-------
Fan each console notification out to every registered subscriber while keeping
a misbehaving subscriber from affecting its siblings or the writer.

Contents
--------
* :data:`EventHandler` – callable signature accepted by :meth:`EventBus.subscribe`.
* :data:`DiagnosticHook` – optional callback receiving failure reports.
* :class:`EventBus` – ordered handler lists per :class:`EventKind`.

System Role
-----------
Application-layer service shared by :class:`~lib_joblog.application.evented_console.EventedConsole`
and :class:`~lib_joblog.application.job_log_writer.JobLogWriter`. Delivery runs
on the caller's thread in subscription order; a slow handler slows the writer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from lib_joblog.domain.events import EventKind

LOGGER = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]
DiagnosticHook = Callable[[str, dict[str, Any]], None]


class EventBus:
    """Deliver payloads to subscribers with per-handler failure isolation.

    Examples
    --------
    >>> bus = EventBus()
    >>> seen = []
    >>> def broken(payload):
    ...     raise RuntimeError("boom")
    >>> bus.subscribe(EventKind.WRITTEN, broken)
    >>> bus.subscribe(EventKind.WRITTEN, seen.append)
    >>> bus.publish(EventKind.WRITTEN, "payload")
    >>> seen
    ['payload']
    """

    def __init__(self, *, diagnostic: DiagnosticHook | None = None) -> None:
        self._handlers: dict[EventKind, list[EventHandler]] = {kind: [] for kind in EventKind}
        self._diagnostic = diagnostic

    def subscribe(self, kind: EventKind | str, handler: EventHandler) -> None:
        """Append ``handler`` to the delivery list of ``kind``."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._handlers[_coerce_kind(kind)].append(handler)

    def unsubscribe(self, kind: EventKind | str, handler: EventHandler) -> bool:
        """Remove the first registration of ``handler``; return whether one was found."""
        handlers = self._handlers[_coerce_kind(kind)]
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        return True

    def handlers(self, kind: EventKind | str) -> tuple[EventHandler, ...]:
        """Return the handlers registered for ``kind`` in delivery order."""
        return tuple(self._handlers[_coerce_kind(kind)])

    def publish(self, kind: EventKind | str, payload: Any) -> None:
        """Invoke every handler of ``kind`` with ``payload``.

        Handler exceptions are logged and reported to the diagnostic hook, then
        delivery continues with the next handler. Subscriptions made while
        publishing take effect on the next publish.
        """
        kind = _coerce_kind(kind)
        for handler in tuple(self._handlers[kind]):
            try:
                handler(payload)
            except Exception as exc:  # noqa: BLE001
                self._report_handler_exception(kind, handler, exc)

    def _report_handler_exception(self, kind: EventKind, handler: EventHandler, exc: Exception) -> None:
        LOGGER.error("%s subscriber %r raised an exception; continuing", kind.name, handler, exc_info=exc)
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(
                "subscriber_error",
                {"event": kind.value, "handler": repr(handler), "exception": repr(exc)},
            )
        except Exception as diagnostic_exc:  # noqa: BLE001
            LOGGER.error("Event bus diagnostic hook raised while reporting %s", kind.name, exc_info=diagnostic_exc)


def _coerce_kind(kind: EventKind | str) -> EventKind:
    if isinstance(kind, EventKind):
        return kind
    return EventKind.from_name(kind)


__all__ = ["DiagnosticHook", "EventBus", "EventHandler"]
