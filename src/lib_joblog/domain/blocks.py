"""Markdown building blocks: fenced preformatted regions, headings, rules.

Purpose
-------
Track whether a fenced code block is currently open so body text always sits
inside one while section headings stay outside.

Contents
--------
* :data:`FENCE`, :data:`HORIZONTAL_RULE`, :data:`MAX_HEADING_DEPTH` constants.
* :func:`heading_marker` – ``#`` run for a given indentation level.
* :class:`PreBlockTracker` – open/closed state with idempotent transitions.

System Role
-----------
Domain helper consumed by :class:`lib_joblog.application.job_log_writer.JobLogWriter`;
it returns the delimiter text and leaves emitting it to the caller.
"""

from __future__ import annotations

from .formatter import LINE_BREAK

FENCE = "```"

RULE_WIDTH = 80
HORIZONTAL_RULE = "-" * RULE_WIDTH

MAX_HEADING_DEPTH = 6
# Markdown only knows H1..H6.


def heading_marker(indentation_level: int) -> str:
    """Return the ATX marker for a heading written at ``indentation_level``.

    Examples
    --------
    >>> [heading_marker(level) for level in (0, 1, 5, 10)]
    ['#', '##', '######', '######']
    """
    depth = min(max(indentation_level, 0) + 1, MAX_HEADING_DEPTH)
    return "#" * depth


class PreBlockTracker:
    """Open and close fenced preformatted regions.

    Examples
    --------
    >>> tracker = PreBlockTracker()
    >>> tracker.open_pre_block(last_char_was_line_break=False)
    '\\n```\\n'
    >>> tracker.open_pre_block(last_char_was_line_break=True)
    ''
    >>> tracker.close_pre_block(last_char_was_line_break=True)
    '```\\n'
    >>> tracker.is_open
    False
    """

    def __init__(self) -> None:
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open_pre_block(self, last_char_was_line_break: bool) -> str:
        """Return the opening fence, or ``""`` when a block is already open."""
        if self._open:
            return ""
        self._open = True
        return _fence_line(last_char_was_line_break)

    def close_pre_block(self, last_char_was_line_break: bool) -> str:
        """Return the closing fence, or ``""`` when no block is open."""
        if not self._open:
            return ""
        self._open = False
        return _fence_line(last_char_was_line_break)


def _fence_line(last_char_was_line_break: bool) -> str:
    lead = "" if last_char_was_line_break else LINE_BREAK
    return lead + FENCE + LINE_BREAK


__all__ = [
    "FENCE",
    "HORIZONTAL_RULE",
    "MAX_HEADING_DEPTH",
    "PreBlockTracker",
    "RULE_WIDTH",
    "heading_marker",
]
