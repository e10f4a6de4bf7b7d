"""Exception types for pydeps-resolver.

Per-import problems (unresolved or ambiguous imports) are plain values, see
``models.ResolutionError``. The exceptions here are for conditions that stop
a whole run or reject malformed input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TargetResolution


class PydepsError(Exception):
    """Base class for all pydeps-resolver errors."""


class LabelError(PydepsError, ValueError):
    """A target label string could not be parsed."""


class ConfigError(PydepsError):
    """Invalid directive, settings file or workspace plan."""


class ManifestError(PydepsError):
    """The third-party manifest is missing, malformed or out of date."""


class ClassifierError(PydepsError):
    """The standard-library classifier process could not answer.

    Always fatal for the run. Downgrading it to a per-import error could
    misclassify standard-library modules as third-party.
    """


class ResolutionFailedError(PydepsError):
    """One or more targets accumulated unresolved or ambiguous imports."""

    def __init__(self, failures: list[TargetResolution]):
        self.failures = failures
        count = sum(len(f.errors) for f in failures)
        super().__init__(f"{count} import(s) failed to resolve in {len(failures)} target(s)")
