"""Adapters implementing the application ports."""

from __future__ import annotations

from .buffered_sink import BufferedSink

__all__ = ["BufferedSink"]
