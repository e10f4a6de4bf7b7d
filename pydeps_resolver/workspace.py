"""Workspace plan loading.

The plan is what the generator's parsing phase hands to resolution: every
generated target with its sources, extracted imports and any dependencies
that were already resolved, plus the directives declared per package::

    manifest: gazelle_python.yaml
    directives:
      "": ["resolve py yaml @pip//pyyaml"]
      src: ["python_root"]
    targets:
      - label: //src/app:app
        srcs: [__init__.py, main.py]
        imports:
          - {module: numpy.random, file: src/app/main.py, line: 3}
        resolved_deps: ["//src/proto:app_py_pb2"]
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from .errors import ConfigError
from .errors import LabelError
from .labels import TargetLabel
from .models import ImportList
from .models import ImportRecord
from .models import Imports
from .models import NoImports

logger = logging.getLogger(__name__)


class ImportEntry(BaseModel):
    module: str
    file: str
    line: int = Field(ge=0)

    def to_record(self) -> ImportRecord:
        return ImportRecord(module_name=self.module, source_file=self.file, line_number=self.line)


class TargetSpec(BaseModel):
    """One generated target."""

    label: str
    kind: str = "py_library"
    srcs: list[str] = Field(default_factory=list)
    provides: list[str] = Field(default_factory=list)
    imports: list[ImportEntry] | None = None
    resolved_deps: list[str] = Field(default_factory=list)

    @field_validator("label")
    @classmethod
    def _check_label(cls, value: str) -> str:
        try:
            label = TargetLabel.parse(value)
        except LabelError as e:
            raise ValueError(str(e)) from e
        if label.relative:
            raise ValueError(f"target label must be absolute: {value!r}")
        return value

    @property
    def target_label(self) -> TargetLabel:
        return TargetLabel.parse(self.label)

    def import_payload(self) -> Imports:
        if self.imports is None:
            return NoImports()
        return ImportList.of(entry.to_record() for entry in self.imports)


class Plan(BaseModel):
    """A whole workspace's resolution input."""

    manifest: str | None = None
    directives: dict[str, list[str]] = Field(default_factory=dict)
    targets: list[TargetSpec] = Field(default_factory=list)

    # Set by load_plan; relative paths in the plan resolve against it.
    base_dir: Path = Field(default_factory=Path.cwd, exclude=True)

    def manifest_path(self, default: str | None = None) -> Path | None:
        name = self.manifest or default
        if not name:
            return None
        return self.base_dir / name

    def packages(self) -> list[str]:
        return sorted({spec.target_label.package for spec in self.targets})


def load_plan(path: Path) -> Plan:
    """Load and validate a workspace plan.

    Raises:
        ConfigError: Missing file, bad YAML or a schema violation
    """
    if not path.exists():
        raise ConfigError(f"Plan file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse plan {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Plan {path} must contain a mapping")

    try:
        plan = Plan.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid plan {path}: {e}") from e

    labels = [spec.label for spec in plan.targets]
    duplicates = sorted({label for label in labels if labels.count(label) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate targets in plan {path}: {', '.join(duplicates)}")

    plan.base_dir = path.parent
    logger.debug(f"[plan:load] {path} ({len(plan.targets)} targets)")
    return plan
