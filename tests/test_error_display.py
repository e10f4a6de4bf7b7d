"""Tests for markup escaping and the failure display."""

from io import StringIO

from rich.console import Console

from pydeps_resolver.errors import ClassifierError
from pydeps_resolver.errors import ResolutionFailedError
from pydeps_resolver.labels import TargetLabel
from pydeps_resolver.models import ImportRecord
from pydeps_resolver.models import ResolutionError
from pydeps_resolver.models import TargetResolution
from pydeps_resolver.ui.error_display import display_classifier_failure
from pydeps_resolver.ui.error_display import display_resolution_failure
from pydeps_resolver.utils.error_format import escape_markup


def _console():
    buf = StringIO()
    return Console(file=buf, force_terminal=False, no_color=True, width=120), buf


class TestEscapeMarkup:
    def test_brackets_render_literally(self):
        console, buf = _console()

        console.print(f"[red]Error:[/red] {escape_markup('[/tmp/plan.yaml]')}")

        assert "[/tmp/plan.yaml]" in buf.getvalue()

    def test_non_string_input(self):
        assert escape_markup(42) == "42"


def _failed_target():
    record = ImportRecord("mylib.util", "app/main.py", 12)
    result = TargetResolution(TargetLabel.parse("//app:lib"))
    result.errors.append(ResolutionError.unresolved(record))
    result.errors.append(
        ResolutionError.ambiguous(
            ImportRecord("shared", "app/main.py", 3),
            "shared",
            [TargetLabel.parse("//a:shared"), TargetLabel.parse("//b:shared")],
        )
    )
    return result


def test_resolution_failure_display():
    console, buf = _console()

    display_resolution_failure(console, ResolutionFailedError([_failed_target()]))

    output = buf.getvalue()
    assert "Dependency Resolution Failed" in output
    assert "//app:lib" in output
    assert "mylib.util" in output
    assert "app/main.py:12" in output
    assert "shared matches: //a:shared, //b:shared" in output
    assert "'# gazelle:ignore mylib.util'" in output
    assert "2 import(s) failed to resolve in 1 target(s)" in output


def test_classifier_failure_display():
    console, buf = _console()

    display_classifier_failure(console, ClassifierError("Cannot start standard-library classifier 'py9'"))

    output = buf.getvalue()
    assert "Standard Library Check Failed" in output
    assert "Cannot start standard-library classifier 'py9'" in output
