"""Module entry point so ``python -m lib_joblog`` mirrors the console script.

Contents
--------
* :func:`main` - run the Click group in a test-friendly manner.
"""

from __future__ import annotations

from typing import Sequence

import click

from .cli import cli


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click command group and return its exit code.

    Parameters
    ----------
    argv:
        Optional sequence of argument strings (defaults to ``sys.argv[1:]``).

    Returns
    -------
    int
        Zero on success, the ``ClickException`` exit code otherwise.

    Examples
    --------
    >>> main(["--version"])  # doctest: +ELLIPSIS
    lib_joblog, version 0.1...
    0
    """

    args = list(argv) if argv is not None else None
    try:
        cli.main(args=args, prog_name="lib_joblog", standalone_mode=False)
    except click.ClickException as error:
        error.show()
        return error.exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
