"""Static package metadata surfaced by the CLI and :func:`lib_joblog.summary_info`."""

from __future__ import annotations

from collections.abc import Callable

name = "lib_joblog"
title = "Indentation-aware Markdown job logs with evented console output"
version = "0.1.0"
author = "lib_joblog maintainers"
shell_command = "lib_joblog"


def print_info(writer: Callable[[str], None] = print) -> None:
    """Write the metadata banner through ``writer`` (``print`` by default).

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_joblog:\\n\\n'
    """

    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    )
    pad = max(len(label) for label, _ in fields)
    body = "".join(f"    {label:<{pad}} = {value}\n" for label, value in fields)
    if writer is print:
        print(f"Info for {name}:\n\n{body}", end="")
        return
    writer(f"Info for {name}:\n\n")
    writer(body)


__all__ = ["author", "name", "print_info", "shell_command", "title", "version"]
