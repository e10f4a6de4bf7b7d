"""pydeps-resolver - dependency resolution for generated Python build targets."""

from .labels import TargetLabel
from .models import DependencySet
from .models import ImportList
from .models import ImportRecord
from .models import NoImports
from .models import ResolutionError
from .models import ResolutionScope
from .models import TargetResolution

__all__ = [
    "DependencySet",
    "ImportList",
    "ImportRecord",
    "NoImports",
    "ResolutionError",
    "ResolutionScope",
    "TargetLabel",
    "TargetResolution",
]
