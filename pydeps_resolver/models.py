"""Core data types shared by the resolution engine and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from typing import Union

from .labels import TargetLabel

if TYPE_CHECKING:
    from .resolution.overrides import OverrideTable
    from .resolution.third_party import ThirdPartyModuleMap

LANGUAGE = "py"


@dataclass(frozen=True, order=True)
class ImportRecord:
    """One import statement found in one source file."""

    module_name: str
    source_file: str
    line_number: int

    @property
    def candidates(self) -> list[str]:
        """Dotted prefixes to try, most specific first.

        ``foo.bar.baz`` -> ``["foo.bar.baz", "foo.bar", "foo"]``. The longer
        names model ``baz`` being a module, the shorter ones ``baz`` being an
        attribute of ``foo.bar`` (or ``foo`` re-exporting it).
        """
        parts = self.module_name.split(".")
        return [".".join(parts[:i]) for i in range(len(parts), 0, -1)]


@dataclass(frozen=True)
class ImportKey:
    """Lookup key into the import index and override tables."""

    language: str
    import_string: str


@dataclass(frozen=True)
class NoImports:
    """The target carries no import information; only pre-resolved deps apply."""


@dataclass(frozen=True)
class ImportList:
    """Imports discovered in a target's sources, sorted and unique."""

    records: tuple[ImportRecord, ...] = ()

    @classmethod
    def of(cls, records) -> ImportList:
        return cls(tuple(sorted(set(records))))

    def __iter__(self):
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)


Imports = Union[NoImports, ImportList]


class ErrorKind(str, Enum):
    UNRESOLVED = "unresolved"
    AMBIGUOUS = "ambiguous"


UNRESOLVED_HINTS = (
    "Add it as a dependency in the requirements.txt file.",
    'Instruct the generator to resolve to a known dependency using the "resolve" directive.',
    "Ignore it with a comment '# gazelle:ignore {module}' in the Python file.",
)


@dataclass(frozen=True)
class ResolutionError:
    """An import that could not be turned into a dependency."""

    kind: ErrorKind
    module_name: str
    source_file: str
    line_number: int
    candidates: tuple[str, ...] = ()
    hints: tuple[str, ...] = ()
    import_string: str = ""

    @classmethod
    def unresolved(cls, record: ImportRecord) -> ResolutionError:
        return cls(
            kind=ErrorKind.UNRESOLVED,
            module_name=record.module_name,
            source_file=record.source_file,
            line_number=record.line_number,
            hints=tuple(h.format(module=record.module_name) for h in UNRESOLVED_HINTS),
        )

    @classmethod
    def ambiguous(cls, record: ImportRecord, import_string: str, labels: list[TargetLabel]) -> ResolutionError:
        return cls(
            kind=ErrorKind.AMBIGUOUS,
            module_name=record.module_name,
            import_string=import_string,
            source_file=record.source_file,
            line_number=record.line_number,
            candidates=tuple(str(label) for label in labels),
            hints=('Pick one of the targets with a "resolve" directive.',),
        )

    def __str__(self) -> str:
        if self.kind is ErrorKind.AMBIGUOUS:
            return (
                f"multiple targets ({', '.join(self.candidates)}) may be imported with "
                f'"{self.import_string}" at line {self.line_number} in "{self.source_file}" '
                f'- this must be fixed using the "resolve" directive'
            )
        lines = [
            f'"{self.module_name}" at line {self.line_number} from "{self.source_file}" '
            f"is an invalid dependency: possible solutions:"
        ]
        lines.extend(f"\t{i}. {hint}" for i, hint in enumerate(self.hints, 1))
        return "\n".join(lines)


class DependencySet:
    """Sorted, duplicate-free set of dependency label strings."""

    def __init__(self, deps=()):
        self._deps: set[str] = set(deps)

    def add(self, dep: str) -> None:
        self._deps.add(dep)

    def update(self, deps) -> None:
        self._deps.update(deps)

    def discard_self(self, target: TargetLabel) -> None:
        """Drop every spelling of ``target`` from the set."""
        spellings = {
            str(target),
            str(target.rel(target.repository, target.package)),
            str(target.rel(target.repository, "")),
        }
        if target.repository:
            spellings.add(str(target.with_repository("")))
        self._deps -= spellings

    def __iter__(self):
        return iter(sorted(self._deps))

    def __len__(self) -> int:
        return len(self._deps)

    def __contains__(self, dep: object) -> bool:
        return dep in self._deps

    def __bool__(self) -> bool:
        return bool(self._deps)

    def as_list(self) -> list[str]:
        return sorted(self._deps)

    def __repr__(self) -> str:
        return f"DependencySet({self.as_list()})"


@dataclass
class ResolutionScope:
    """Per-package resolution configuration.

    Attributes:
        package: Package path this scope was computed for
        project_root: Package path of the nearest Python project root
        validate_import_statements: Report imports nothing resolves
        ignored_dependencies: Import strings dropped before resolution
        overrides: Override table in effect for this package
        third_party: Third-party module map in effect for this package
    """

    package: str = ""
    project_root: str = ""
    validate_import_statements: bool = True
    ignored_dependencies: frozenset[str] = frozenset()
    overrides: OverrideTable | None = None
    third_party: ThirdPartyModuleMap | None = None

    def is_ignored(self, module_name: str) -> bool:
        if not self.ignored_dependencies:
            return False
        parts = module_name.split(".")
        return any(".".join(parts[:i]) in self.ignored_dependencies for i in range(1, len(parts) + 1))


@dataclass
class TargetResolution:
    """Result of one target's resolution pass."""

    target: TargetLabel
    deps: DependencySet = field(default_factory=DependencySet)
    errors: list[ResolutionError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return bool(self.errors)


def python_module_path(package_dir: str) -> str:
    """Convert a slash-separated directory into a dotted module path."""
    parts = [p for p in PurePosixPath(package_dir).parts if p not in ("", ".")]
    return ".".join(parts)
