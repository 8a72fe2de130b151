"""Static package metadata surfaced by the CLI ``info`` command."""

from __future__ import annotations

from typing import Callable

name = "lib_log_jsonpost"
title = "Non-blocking JSON log shipping over HTTP"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_jsonpost"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_jsonpost"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Emit the metadata banner, one line per call to ``writer``.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_jsonpost:\\n'
    """

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    emit = writer if writer is not None else (lambda text: print(text, end=""))
    emit(f"Info for {name}:\n")
    emit("\n")
    for label, value in fields:
        emit(f"    {label:<{pad}} = {value}\n")


def summary_info() -> str:
    """Return the metadata banner as a single string ending with a newline."""

    lines: list[str] = []
    print_info(writer=lines.append)
    return "".join(lines)


__all__ = ["print_info", "summary_info", "shell_command", "version"]
