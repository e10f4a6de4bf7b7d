"""Rich markup escaping for error messages."""

from __future__ import annotations

from rich.markup import escape as _escape_markup


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings.

    Labels such as ``@pip//numpy`` and import strings are not markup, but
    paths and messages may contain brackets.
    """
    return _escape_markup(str(value))
