"""Dependency resolution: override table, third-party map, import index,
standard-library classifier and the engine that combines them."""

from .index import ImportIndex
from .index import IndexEntry
from .overrides import OverrideTable
from .resolver import DependencyResolver
from .resolver import TargetJob
from .resolver import resolve_targets
from .stdlib import StdlibClassifier
from .third_party import ThirdPartyModuleMap

__all__ = [
    "DependencyResolver",
    "ImportIndex",
    "IndexEntry",
    "OverrideTable",
    "StdlibClassifier",
    "TargetJob",
    "ThirdPartyModuleMap",
    "resolve_targets",
]
