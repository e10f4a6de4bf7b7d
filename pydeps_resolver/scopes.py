"""Per-package resolution scopes built from directives.

Directives apply to the package that declares them and to every package
below it. A package's scope starts from its parent's and layers its own
directives on top::

    resolve py foo.bar //third_party:foo
    python_root
    python_validate_import_statements false
    python_ignore_dependencies tests,conftest

Directive lines may carry the build file comment prefix
(``# gazelle:resolve py ...``); it is stripped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import replace

from .errors import ConfigError
from .labels import TargetLabel
from .models import ImportKey
from .models import ResolutionScope
from .resolution.overrides import OverrideTable
from .resolution.third_party import ThirdPartyModuleMap

logger = logging.getLogger(__name__)

_PREFIX_RE = re.compile(r"^#\s*\w+:")

RESOLVE = "resolve"
PYTHON_ROOT = "python_root"
VALIDATE_IMPORTS = "python_validate_import_statements"
IGNORE_DEPENDENCIES = "python_ignore_dependencies"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_directive(line: str) -> tuple[str, str]:
    """Split ``name value`` into its parts (value may be empty)."""
    line = _PREFIX_RE.sub("", line.strip(), count=1).strip()
    if not line:
        raise ConfigError("Empty directive")
    name, _, value = line.partition(" ")
    return name, value.strip()


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"{name} expects true or false, got {value!r}")


def _ancestors(package: str) -> list[str]:
    """``a/b/c`` -> ``["", "a", "a/b", "a/b/c"]``."""
    parts = [p for p in package.strip("/").split("/") if p]
    return [""] + ["/".join(parts[:i]) for i in range(1, len(parts) + 1)]


class ScopeConfigs:
    """Resolves the effective ``ResolutionScope`` of any package.

    Args:
        directives: Package path -> directive lines declared in that package
        third_party: Module map from the workspace manifest
    """

    def __init__(
        self,
        directives: Mapping[str, list[str]] | None = None,
        third_party: ThirdPartyModuleMap | None = None,
    ):
        self.directives = {pkg.strip("/"): list(lines) for pkg, lines in (directives or {}).items()}
        self.third_party = third_party or ThirdPartyModuleMap.empty()
        self._scopes: dict[str, ResolutionScope] = {}

    def scope_for(self, package: str) -> ResolutionScope:
        package = package.strip("/")
        if package in self._scopes:
            return self._scopes[package]

        parent_pkg = _ancestors(package)[-2] if package else None
        if parent_pkg is None:
            parent = ResolutionScope(overrides=OverrideTable(), third_party=self.third_party)
        else:
            parent = self.scope_for(parent_pkg)

        scope = self._apply(replace(parent, package=package), self.directives.get(package, []))
        self._scopes[package] = scope
        return scope

    def _apply(self, scope: ResolutionScope, lines: list[str]) -> ResolutionScope:
        overrides: dict[ImportKey, TargetLabel] = {}
        ignored = set(scope.ignored_dependencies)

        for line in lines:
            name, value = parse_directive(line)
            if name == RESOLVE:
                key, label = OverrideTable.from_directive(value)
                overrides[key] = label
            elif name == PYTHON_ROOT:
                scope.project_root = scope.package
            elif name == VALIDATE_IMPORTS:
                scope.validate_import_statements = _parse_bool(name, value)
            elif name == IGNORE_DEPENDENCIES:
                ignored.update(dep.strip() for dep in value.split(",") if dep.strip())
            else:
                logger.warning(f"[scope:directive] unknown directive '{name}' in //{scope.package}, skipping")

        scope.overrides = (scope.overrides or OverrideTable()).extend(overrides)
        scope.ignored_dependencies = frozenset(ignored)
        return scope
