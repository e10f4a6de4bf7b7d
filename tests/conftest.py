"""Shared fixtures for pydeps-resolver tests."""

import pytest

from pydeps_resolver.labels import TargetLabel
from pydeps_resolver.models import ResolutionScope
from pydeps_resolver.resolution.index import ImportIndex
from pydeps_resolver.resolution.overrides import OverrideTable
from pydeps_resolver.resolution.third_party import ThirdPartyModuleMap


class FakeClassifier:
    """In-memory classifier that records every query."""

    def __init__(self, stdlib=("os", "sys", "json", "logging", "collections")):
        self.stdlib = set(stdlib)
        self.queries: list[str] = []

    def is_standard_library(self, module_name: str) -> bool:
        self.queries.append(module_name)
        return module_name.split(".")[0] in self.stdlib

    def close(self) -> None:
        pass


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def index():
    return ImportIndex()


@pytest.fixture
def make_scope():
    """Build a ResolutionScope from plain values."""

    def _make(
        package="app",
        project_root="",
        validate=True,
        overrides=None,
        third_party=None,
        ignored=(),
    ):
        entries = {}
        for import_string, label in (overrides or {}).items():
            key, parsed = OverrideTable.from_directive(f"py {import_string} {label}")
            entries[key] = parsed
        return ResolutionScope(
            package=package,
            project_root=project_root,
            validate_import_statements=validate,
            ignored_dependencies=frozenset(ignored),
            overrides=OverrideTable(entries),
            third_party=ThirdPartyModuleMap(third_party or {}, "pip"),
        )

    return _make


@pytest.fixture
def app_target():
    return TargetLabel.parse("//app:app_lib")
