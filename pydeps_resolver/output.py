"""Rendering resolved dependency sets into build file attributes."""

from __future__ import annotations

import json
from collections.abc import Iterable

from .models import DependencySet
from .models import TargetResolution

DEPS_ATTR = "deps"


def deps_list(deps: DependencySet | Iterable[str]) -> list[str] | None:
    """Sorted, unique list for the ``deps`` attribute, or None to elide it."""
    values = sorted(set(deps))
    return values or None


def render_deps_attr(deps: DependencySet | Iterable[str], indent: str = "    ") -> str | None:
    """Render ``deps = [...]`` in build file syntax.

    Returns None for an empty set; the attribute is omitted rather than
    written as an empty list.
    """
    values = deps_list(deps)
    if values is None:
        return None
    if len(values) == 1:
        return f"{DEPS_ATTR} = [{json.dumps(values[0])}]"
    items = "".join(f"{indent}{indent}{json.dumps(v)},\n" for v in values)
    return f"{DEPS_ATTR} = [\n{items}{indent}]"


def assemble(results: Iterable[TargetResolution]) -> dict[str, list[str]]:
    """Map each target label to its final deps, leaving out targets with none."""
    assembled: dict[str, list[str]] = {}
    for result in results:
        values = deps_list(result.deps)
        if values is not None:
            assembled[str(result.target)] = values
    return dict(sorted(assembled.items()))


def render_rule(kind: str, name: str, deps: DependencySet | Iterable[str], indent: str = "    ") -> str:
    """Render a minimal rule call showing the deps attribute, for previews."""
    lines = [f"{kind}(", f'{indent}name = "{name}",']
    attr = render_deps_attr(deps, indent)
    if attr is not None:
        lines.append(f"{indent}{attr},")
    lines.append(")")
    return "\n".join(lines)
