"""Rich rendering for CLI output."""

from .error_display import display_classifier_failure
from .error_display import display_resolution_failure
from .error_display import display_target_errors

__all__ = ["display_classifier_failure", "display_resolution_failure", "display_target_errors"]
