"""Sink port describing the dual-destination raw writer.

Purpose
-------
Define the narrow boundary the evented console depends on so the live stream
and the in-memory buffer can be swapped for test doubles.

Contents
--------
* :class:`SinkPort` – runtime-checkable protocol with ``write``,
  ``write_line``, ``get_buffer`` and ``reset_buffer``.

System Role
-----------
The only boundary between the job-log writer and the outside world.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SinkPort(Protocol):
    """Append text to the live stream and/or the buffer."""

    def write(self, text: str) -> str:
        """Emit ``text`` verbatim and return it."""

    def write_line(self, text: str) -> str:
        """Emit ``text`` followed by a line terminator; return ``text`` without it."""

    def get_buffer(self) -> str:
        """Return the accumulated buffer, or ``""`` when buffering is disabled."""

    def reset_buffer(self) -> None:
        """Discard the accumulated buffer."""


__all__ = ["SinkPort"]
