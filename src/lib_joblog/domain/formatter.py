"""Indentation-aware text transform used by the job-log writer.

Purpose
-------
Keep every emitted line aligned with the writer's current nesting depth while
allowing callers to continue a line across several ``write`` calls.

Contents
--------
* :data:`LINE_BREAK` – the logical line terminator used throughout the package.
* :func:`normalize_line_breaks` – fold ``\\r\\n`` and bare ``\\r`` into ``\\n``.
* :class:`FormatterState` – mutable indentation bookkeeping.
* :class:`IndentationFormatter` – applies the state to outgoing text.

System Role
-----------
Pure domain logic: the formatter never writes anything itself, it only prepares
the string the application layer hands to the sink.
"""

from __future__ import annotations

from dataclasses import dataclass

LINE_BREAK = "\n"

DEFAULT_INDENTATION_UNIT = "    "


def normalize_line_breaks(text: str) -> str:
    """Return ``text`` with every line-break sequence folded into ``\\n``.

    Examples
    --------
    >>> normalize_line_breaks("a\\r\\nb\\rc\\nd")
    'a\\nb\\nc\\nd'
    """
    return text.replace("\r\n", LINE_BREAK).replace("\r", LINE_BREAK)


@dataclass(slots=True)
class FormatterState:
    """Indentation bookkeeping owned by a single writer."""

    indentation_prefix: str = ""
    indentation_level: int = 0
    last_char_was_line_break: bool = True


class IndentationFormatter:
    """Inject the indentation prefix after every line break.

    Examples
    --------
    >>> formatter = IndentationFormatter("  ")
    >>> formatter.indent()
    >>> formatter.apply_indentation("one\\r\\ntwo", is_line_write=True)
    '  one\\n  two'
    >>> formatter.apply_indentation("three", is_line_write=False)
    '  three'
    >>> formatter.apply_indentation(" continued", is_line_write=True)
    ' continued'
    """

    def __init__(self, unit: str = DEFAULT_INDENTATION_UNIT) -> None:
        if not isinstance(unit, str):
            raise TypeError("indentation unit must be a string")
        self._unit = unit
        self._state = FormatterState()

    @property
    def unit(self) -> str:
        return self._unit

    @property
    def indentation_prefix(self) -> str:
        return self._state.indentation_prefix

    @property
    def indentation_level(self) -> int:
        return self._state.indentation_level

    @property
    def last_char_was_line_break(self) -> bool:
        return self._state.last_char_was_line_break

    def indent(self) -> None:
        """Add one indentation unit."""
        self._state.indentation_prefix += self._unit
        self._state.indentation_level += 1

    def unindent(self) -> None:
        """Remove one indentation unit; the level never drops below zero."""
        prefix = self._state.indentation_prefix
        self._state.indentation_prefix = prefix[min(len(self._unit), len(prefix)) :]
        if self._state.indentation_level > 0:
            self._state.indentation_level -= 1

    def reset(self) -> None:
        """Return to the outermost level without touching the line-start flag."""
        self._state.indentation_prefix = ""
        self._state.indentation_level = 0

    def mark_line_start(self) -> None:
        """Record that text emitted outside the formatter ended with a line break."""
        self._state.last_char_was_line_break = True

    def apply_indentation(self, text: str, is_line_write: bool) -> str:
        """Return ``text`` indented for the current level.

        The prefix is injected at the start only when the previous output
        ended a line, and after every line break inside ``text``. A line
        break that terminates ``text`` is left bare: the next call supplies
        the prefix once it knows more text follows.
        """
        prefix = self._state.indentation_prefix
        normalized = normalize_line_breaks(text)
        ends_with_break = normalized.endswith(LINE_BREAK)
        body = normalized[: -len(LINE_BREAK)] if ends_with_break else normalized

        indented = body.replace(LINE_BREAK, LINE_BREAK + prefix)
        if self._state.last_char_was_line_break:
            indented = prefix + indented
        if ends_with_break:
            indented += LINE_BREAK

        self._state.last_char_was_line_break = is_line_write or ends_with_break
        return indented


__all__ = [
    "DEFAULT_INDENTATION_UNIT",
    "FormatterState",
    "IndentationFormatter",
    "LINE_BREAK",
    "normalize_line_breaks",
]
