"""Clean error display for failed resolutions."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..errors import ClassifierError
from ..errors import ResolutionFailedError
from ..models import ErrorKind
from ..models import TargetResolution
from ..utils.error_format import escape_markup


def display_target_errors(console: Console, result: TargetResolution) -> None:
    """Render one failed target as a panel followed by its remediation hints."""
    content = Text()
    content.append("Target: ", style="dim")
    content.append(str(result.target), style="bold cyan")
    content.append("\n")
    content.append("Problems: ", style="dim")
    content.append(str(len(result.errors)), style="red")

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
    table.add_column("Kind", style="red")
    table.add_column("Import", style="bold")
    table.add_column("Location", style="dim")
    table.add_column("Details")

    for error in result.errors:
        if error.kind is ErrorKind.AMBIGUOUS:
            details = f"{error.import_string} matches: " + ", ".join(error.candidates)
        else:
            details = "no override, third-party mapping or first-party target"
        table.add_row(error.kind.value, error.module_name, f"{error.source_file}:{error.line_number}", details)

    console.print()
    console.print(
        Panel(
            content,
            title="[bold red]Dependency Resolution Failed[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
    )
    console.print(table)

    hints: list[str] = []
    for error in result.errors:
        for hint in error.hints:
            if hint not in hints:
                hints.append(hint)
    if hints:
        console.print()
        console.print("[dim]Possible solutions:[/dim]")
        for i, hint in enumerate(hints, 1):
            console.print(f"[dim]  {i}. {escape_markup(hint)}[/dim]", highlight=False)


def display_resolution_failure(console: Console, error: ResolutionFailedError) -> None:
    for result in error.failures:
        display_target_errors(console, result)
    console.print()
    console.print(f"[red]Error:[/red] {error}")


def display_classifier_failure(console: Console, error: ClassifierError) -> None:
    console.print()
    console.print(
        Panel(
            Text(str(error)),
            title="[bold red]Standard Library Check Failed[/bold red]",
            border_style="red",
            padding=(1, 2),
        )
    )
    console.print("[dim]Tip: check the interpreter set with --python or PYDEPS_PYTHON.[/dim]")
