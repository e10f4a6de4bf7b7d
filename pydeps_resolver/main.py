"""pydeps - resolve Python imports into build target dependencies."""

import sys
from pathlib import Path

import click
import yaml
from rich.table import Table

from .console import console
from .errors import ClassifierError
from .errors import ConfigError
from .errors import ManifestError
from .errors import ResolutionFailedError
from .logging_setup import init_logging
from .output import assemble
from .output import render_rule
from .runner import build_workspace
from .runner import run
from .settings import AppSettings
from .settings import SettingsPaths
from .ui.error_display import display_classifier_failure
from .ui.error_display import display_resolution_failure
from .utils.error_format import escape_markup
from .workspace import load_plan


def _load_settings(plan_path: Path, python: str | None, workers: int | None):
    settings = AppSettings(SettingsPaths.default(plan_path.parent)).get_resolver_settings()
    if python:
        settings.python = python
    if workers:
        settings.workers = workers
    return settings


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {escape_markup(message)}")
    sys.exit(1)


@click.group()
@click.version_option(package_name="pydeps-resolver")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Write JSONL logs to this file")
@click.option("--log-level", default=None, help="Log level (default: INFO or $PYDEPS_LOG_LEVEL)")
def cli(log_file, log_level):
    """pydeps - resolve Python imports into build target dependencies."""
    init_logging(log_file, log_level)


@cli.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write resolved deps here")
@click.option("--python", help="Interpreter used to classify standard-library modules")
@click.option("--workers", "-j", type=click.IntRange(min=1), help="Targets resolved in parallel")
@click.option("--rules", is_flag=True, help="Print rule previews instead of YAML")
@click.option(
    "--requirements",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Fail if the manifest is out of date with this requirements file",
)
def resolve(
    plan_file: Path,
    output: Path | None,
    python: str | None,
    workers: int | None,
    rules: bool,
    requirements: Path | None,
):
    """Resolve the deps of every target in PLAN_FILE.

    Nothing is written unless every target resolves.
    """
    try:
        plan = load_plan(plan_file)
        settings = _load_settings(plan_file, python, workers)
        results = run(plan, settings, requirements=requirements)
    except (ConfigError, ManifestError) as e:
        _fail(str(e))
    except ClassifierError as e:
        display_classifier_failure(console, e)
        sys.exit(1)
    except ResolutionFailedError as e:
        display_resolution_failure(console, e)
        sys.exit(1)

    if rules:
        kinds = {spec.target_label: spec.kind for spec in plan.targets}
        for result in results:
            click.echo(render_rule(kinds[result.target], result.target.name, result.deps))
        return

    rendered = yaml.safe_dump(assemble(results), default_flow_style=False, sort_keys=True)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
        console.print(f"[green]✓ Resolved {len(results)} target(s) -> {escape_markup(output)}[/green]")
    else:
        click.echo(rendered, nl=False)


@cli.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--filter", "-f", "prefix", default="", help="Only show import strings starting with this prefix")
@click.option(
    "--requirements",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Fail if the manifest is out of date with this requirements file",
)
def index(plan_file: Path, prefix: str, requirements: Path | None):
    """Show which targets provide which import strings."""
    try:
        plan = load_plan(plan_file)
        workspace = build_workspace(plan, _load_settings(plan_file, None, None), requirements)
    except (ConfigError, ManifestError) as e:
        _fail(str(e))

    table = Table(title="Import Index", show_header=True, header_style="bold cyan")
    table.add_column("Import", style="green")
    table.add_column("Targets", style="magenta")
    table.add_column("Project root", style="dim")

    shown = 0
    for key, entries in workspace.index.items():
        if not key.import_string.startswith(prefix):
            continue
        labels = "\n".join(str(e.label) for e in entries)
        roots = "\n".join(e.project_root or "." for e in entries)
        style = "yellow" if len(entries) > 1 else None
        table.add_row(key.import_string, labels, roots, style=style)
        shown += 1

    if shown:
        console.print(table)
    else:
        console.print("[dim]No indexed imports[/dim]")


@cli.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("dependency")
@click.option("--python", help="Interpreter used to classify standard-library modules")
def explain(plan_file: Path, dependency: str, python: str | None):
    """Explain why DEPENDENCY ends up in target deps."""
    try:
        plan = load_plan(plan_file)
        results = run(plan, _load_settings(plan_file, python, None), explain=dependency)
    except (ConfigError, ManifestError) as e:
        _fail(str(e))
    except ClassifierError as e:
        display_classifier_failure(console, e)
        sys.exit(1)
    except ResolutionFailedError as e:
        display_resolution_failure(console, e)
        sys.exit(1)

    users = [str(r.target) for r in results if dependency in r.deps]
    if users:
        console.print(f"[bold]{escape_markup(dependency)}[/bold] is a dependency of:")
        for label in users:
            console.print(f"  • {escape_markup(label)}")
    else:
        console.print(f"[dim]{escape_markup(dependency)} is not a dependency of any target[/dim]")


@cli.group()
def config():
    """Manage resolver settings."""


@config.command("set")
@click.argument("key", type=click.Choice(["python", "workers", "manifest"]))
@click.argument("value")
@click.option("--global", "global_scope", is_flag=True, help="Write to ~/.pydeps/settings.yaml")
def config_set(key: str, value: str, global_scope: bool):
    """Set a resolver setting for this workspace (or globally)."""
    if key == "workers":
        if not value.isdigit() or int(value) < 1:
            _fail(f"workers must be a positive integer, got {value!r}")
        stored: str | int = int(value)
    else:
        stored = value

    settings = AppSettings()
    scope = "global" if global_scope else "project"
    settings.set_resolver_setting(key, stored, scope=scope)
    console.print(f"[green]✓ Set {key} = {escape_markup(stored)} ({scope})[/green]")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
