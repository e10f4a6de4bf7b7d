"""Settings management for pydeps-resolver.

Simple, scope-aware YAML settings. The project file wins over the user file
and environment variables win over both::

    # .pydeps/settings.yaml
    resolver:
      python: /usr/bin/python3.11
      workers: 8
      manifest: gazelle_python.yaml
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from typing import Literal

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

Scope = Literal["project", "global"]

DEFAULT_WORKERS = 4
DEFAULT_MANIFEST = "gazelle_python.yaml"


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path

    @classmethod
    def default(cls, workspace: Path | None = None) -> SettingsPaths:
        workspace = workspace or Path.cwd()
        return cls(
            global_settings=Path.home() / ".pydeps" / "settings.yaml",
            project_settings=workspace / ".pydeps" / "settings.yaml",
        )


@dataclass
class ResolverSettings:
    """Effective resolver settings after merging all scopes."""

    python: str | None = None
    workers: int = DEFAULT_WORKERS
    manifest: str = DEFAULT_MANIFEST


class AppSettings:
    """Settings manager with scope-aware merging.

    Scope priority (most specific wins):
    1. environment (PYDEPS_PYTHON, PYDEPS_WORKERS)
    2. project (.pydeps/settings.yaml)
    3. global (~/.pydeps/settings.yaml)
    """

    def __init__(self, paths: SettingsPaths | None = None) -> None:
        self.paths = paths or SettingsPaths.default()

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for path in [self.paths.global_settings, self.paths.project_settings]:
            result = self._deep_merge(result, self._read_file(path))
        return result

    def get_resolver_settings(self) -> ResolverSettings:
        section = self.get_merged_settings().get("resolver") or {}
        if not isinstance(section, dict):
            raise ConfigError("'resolver' settings section must be a mapping")

        settings = ResolverSettings(
            python=section.get("python"),
            workers=section.get("workers", DEFAULT_WORKERS),
            manifest=section.get("manifest", DEFAULT_MANIFEST),
        )

        if env_python := os.getenv("PYDEPS_PYTHON"):
            settings.python = env_python
        if env_workers := os.getenv("PYDEPS_WORKERS"):
            settings.workers = env_workers

        try:
            settings.workers = int(settings.workers)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"workers must be an integer, got {settings.workers!r}") from e
        if settings.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {settings.workers}")
        return settings

    def set_resolver_setting(self, key: str, value: Any, scope: Scope = "project") -> None:
        settings = self._read_file(self._get_scope_path(scope))
        settings.setdefault("resolver", {})[key] = value
        self._write_scope(scope, settings)

    def _get_scope_path(self, scope: Scope) -> Path:
        return {
            "project": self.paths.project_settings,
            "global": self.paths.global_settings,
        }[scope]

    def _read_file(self, path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse settings file {path}: {e}") from e
        if not isinstance(content, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping")
        return content

    def _write_scope(self, scope: Scope, settings: dict[str, Any]) -> None:
        path = self._get_scope_path(scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dicts, overlay wins."""
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
